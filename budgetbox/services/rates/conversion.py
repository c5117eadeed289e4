from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Protocol, Tuple

from budgetbox.models.constants import Currency

"""Fixed currency conversion table.

Responsibilities:
    - Hold directed (source, target) -> rate multipliers. Entries are specified
      independently; a pair and its reverse are not required to be reciprocal.
    - Convert amounts: identity when source == target, amount * rate when a
      directed rate exists, amount unchanged when it does not.

No live FX feed: tables are static and injectable (tests and callers may
build their own with `ConversionTable.from_nested` or `with_rates`).
"""

RatePair = Tuple[Currency, Currency]

_DEFAULT_RATES: Dict[Currency, Dict[Currency, float]] = {
    Currency.USD: {Currency.EUR: 0.85, Currency.GBP: 0.75, Currency.JPY: 110.0},
    Currency.EUR: {Currency.USD: 1.18, Currency.GBP: 0.88, Currency.JPY: 129.5},
    Currency.GBP: {Currency.USD: 1.33, Currency.EUR: 1.14, Currency.JPY: 147.0},
    Currency.JPY: {Currency.USD: 0.009, Currency.EUR: 0.0077, Currency.GBP: 0.0068},
}


class SupportsConvert(Protocol):
    def convert(self, amount: float, source: Currency, target: Currency) -> float: ...


@dataclass(frozen=True)
class ConversionResult:
    original_amount: float
    source: Currency
    target: Currency
    rate: Optional[float]
    converted_amount: float

    @property
    def fallback(self) -> bool:
        """True when no rate was found and the amount passed through unchanged."""
        return self.rate is None and self.source != self.target


@dataclass(frozen=True)
class ConversionTable:
    rates: Mapping[RatePair, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for pair, rate in self.rates.items():
            if rate <= 0:
                raise ValueError(f"conversion rate for {pair[0].value}->{pair[1].value} must be positive")

    @classmethod
    def from_nested(
        cls, nested: Mapping[Currency | str, Mapping[Currency | str, float]]
    ) -> "ConversionTable":
        flat: Dict[RatePair, float] = {}
        for source, targets in nested.items():
            for target, rate in targets.items():
                flat[(Currency(source), Currency(target))] = float(rate)
        return cls(rates=flat)

    def rate(self, source: Currency, target: Currency) -> Optional[float]:
        if source == target:
            return 1.0
        return self.rates.get((source, target))

    def convert(self, amount: float, source: Currency, target: Currency) -> float:
        if source == target:
            return amount
        rate = self.rates.get((source, target))
        if rate is None:
            # Unmapped pair degrades to the original amount
            return amount
        return amount * rate

    def explain(self, amount: float, source: Currency, target: Currency) -> ConversionResult:
        return ConversionResult(
            original_amount=amount,
            source=source,
            target=target,
            rate=self.rate(source, target),
            converted_amount=self.convert(amount, source, target),
        )

    def with_rates(self, overrides: Mapping[RatePair, float]) -> "ConversionTable":
        merged = dict(self.rates)
        merged.update(overrides)
        return ConversionTable(rates=merged)

    def as_nested(self) -> Dict[str, Dict[str, float]]:
        nested: Dict[str, Dict[str, float]] = {}
        for (source, target), rate in self.rates.items():
            nested.setdefault(source.value, {})[target.value] = rate
        return nested


DEFAULT_TABLE = ConversionTable.from_nested(_DEFAULT_RATES)


def convert(
    amount: float,
    source: Currency,
    target: Currency,
    table: SupportsConvert | None = None,
) -> float:
    return (table if table is not None else DEFAULT_TABLE).convert(amount, source, target)
