"""Student loan payoff estimate.

Amortization with a fixed monthly payment P on balance B at monthly rate i:

    months = ceil(-ln(1 - B*i/P) / ln(1 + i))

Degenerate inputs:
    - B <= 0                -> already paid off (0 months)
    - P <= 0                -> never (None)
    - i == 0                -> ceil(B / P)
    - P <= B*i (i > 0)      -> payment never covers interest (None)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from budgetbox.models.settings import StudentLoan
from budgetbox.services.money import parse_percent
from budgetbox.services.savings import monthly_rate
from budgetbox.services.timeline import add_months, naive_local


@dataclass(frozen=True)
class PayoffEstimate:
    balance: float
    currency: str
    monthly_payment: float
    annual_rate: float
    months_remaining: Optional[int]
    payoff_date: Optional[datetime]
    total_interest: Optional[float]


def months_to_payoff(balance: float, payment: float, annual_rate: float) -> Optional[int]:
    if balance <= 0:
        return 0
    if payment <= 0:
        return None
    i = monthly_rate(annual_rate)
    if i <= 0:
        return math.ceil(balance / payment)
    if payment <= balance * i:
        return None
    return math.ceil(-math.log(1 - balance * i / payment) / math.log(1 + i))


def estimate_payoff(loan: StudentLoan, as_of: Optional[datetime] = None) -> PayoffEstimate:
    as_of = naive_local(as_of or datetime.now())
    annual = parse_percent(loan.interest_rate) or 0.0
    months = months_to_payoff(loan.balance, loan.monthly_payment, annual)
    payoff_date = add_months(as_of, months) if months is not None else None
    total_interest = None
    if months is not None:
        # Last payment is partial; approximate with full payments
        total_interest = max(0.0, months * loan.monthly_payment - loan.balance)
    return PayoffEstimate(
        balance=loan.balance,
        currency=loan.currency.value,
        monthly_payment=loan.monthly_payment,
        annual_rate=annual,
        months_remaining=months,
        payoff_date=payoff_date,
        total_interest=total_interest,
    )
