from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG,
    DATA_DIR, DB_FILENAME, STORAGE_BACKEND, EXPENSE_ITEM_LIMIT).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "BudgetBox"
    debug: bool = True
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "budgetbox.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided
    # Allowed: 'sqlite' (metadata-style key/value table), 'memory' (tests, previews)
    storage_backend: str = "sqlite"
    storage_key_budgets: str = "saved_budgets"
    storage_key_settings: str = "app_settings"

    # Collection rules
    expense_item_limit: int = 10
    max_insights: int = 6

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        allowed = {"sqlite", "memory"}
        if self.storage_backend not in allowed:
            raise ValueError(
                f"Unsupported storage_backend '{self.storage_backend}'. Allowed: {allowed}"
            )
        if self.expense_item_limit < 1:
            raise ValueError("expense_item_limit must be at least 1")
        if self.max_insights < 1:
            raise ValueError("max_insights must be at least 1")
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        if self.storage_backend == "sqlite":
            # Ensure persistence directory exists
            self.db_path.parent.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
