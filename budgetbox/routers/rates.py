from __future__ import annotations

from typing import Dict, Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel

from budgetbox.models.constants import Currency
from budgetbox.services.rates.conversion import DEFAULT_TABLE

"""Rates router exposing the fixed conversion table.

Endpoints:
    - GET /rates/table    -> nested {source: {target: rate}}
    - GET /rates/convert  -> one conversion, flagging unmapped pairs
"""

router = APIRouter(prefix="/rates", tags=["rates"])


class ConversionOut(BaseModel):
    amount: float
    source: Currency
    target: Currency
    rate: Optional[float]
    converted_amount: float
    fallback: bool


@router.get("/table", summary="Fixed conversion table")
async def rate_table() -> Dict[str, Dict[str, float]]:
    return DEFAULT_TABLE.as_nested()


@router.get("/convert", response_model=ConversionOut, summary="Convert an amount")
async def convert_amount(
    amount: float = Query(...),
    source: Currency = Query(..., alias="from"),
    target: Currency = Query(..., alias="to"),
):
    result = DEFAULT_TABLE.explain(amount, source, target)
    return ConversionOut(
        amount=result.original_amount,
        source=result.source,
        target=result.target,
        rate=result.rate,
        converted_amount=result.converted_amount,
        fallback=result.fallback,
    )
