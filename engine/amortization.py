"""Amortization engine — EMI schedules for the three repayment plans.

All plans share one principal and one rate; only the EMI differs:
  balanced  standard EMI over the chosen tenure
  saver     15% above standard, paid off sooner
  flexible  10% below standard, paid off later (or never)
"""

import math
from enum import Enum
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict

from engine.offers import LoanOffer

SAVER_FACTOR = 1.15
FLEXIBLE_FACTOR = 0.90

TENURE_OPTIONS: tuple[int, ...] = (5, 7, 10, 12, 15)
DEFAULT_TENURE = 10
MAX_TENURE_YEARS = 40


class PlanKind(str, Enum):
    BALANCED = "balanced"
    SAVER = "saver"
    FLEXIBLE = "flexible"

    @property
    def display_name(self) -> str:
        return f"{self.value.title()} Plan"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    PlanKind.BALANCED: "Standard EMI for a steady repayment.",
    PlanKind.SAVER: "Pay more monthly to save on total interest.",
    PlanKind.FLEXIBLE: "Lower EMI for more monthly flexibility.",
}


class PaymentPlan(BaseModel):
    """A repayment plan. ``total_interest`` is ``inf`` when it never amortizes."""

    model_config = ConfigDict(frozen=True, ser_json_inf_nan="strings")

    kind: PlanKind
    emi: int
    total_interest: float
    total_months: Optional[int]

    @property
    def amortizes(self) -> bool:
        return math.isfinite(self.total_interest)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def monthly_rate(annual_rate_percent: float) -> float:
    return annual_rate_percent / (12 * 100)


def months_to_repay(principal: float, rate: float, emi: float) -> float:
    """
    Solve principal*rate/emi = 1 - (1+rate)^-m for m.

    Returns ``math.inf`` when the EMI does not even cover the monthly
    interest, which is where the logarithm's argument would drop to zero
    or below.
    """
    if emi <= principal * rate:
        return math.inf
    return -math.log(1 - principal * rate / emi) / math.log(1 + rate)


def standard_emi(principal: float, annual_rate_percent: float, tenure_years: int) -> int:
    rate = monthly_rate(annual_rate_percent)
    months = tenure_years * 12
    growth = math.pow(1 + rate, months)
    return round_half_up(principal * rate * growth / (growth - 1))


def _plan_for_emi(kind: PlanKind, principal: float, rate: float, emi: int) -> PaymentPlan:
    months = months_to_repay(principal, rate, emi)
    if math.isinf(months):
        return PaymentPlan(kind=kind, emi=emi, total_interest=math.inf, total_months=None)
    return PaymentPlan(
        kind=kind,
        emi=emi,
        total_interest=round_half_up(emi * months - principal),
        total_months=math.ceil(months),
    )


def payment_plans(principal: float, annual_rate_percent: float, tenure_years: int) -> list[PaymentPlan]:
    """Balanced, saver and flexible plans; empty for non-positive inputs."""
    rate = monthly_rate(annual_rate_percent)
    months = tenure_years * 12
    if principal <= 0 or rate <= 0 or months <= 0:
        return []

    balanced_emi = standard_emi(principal, annual_rate_percent, tenure_years)
    balanced = PaymentPlan(
        kind=PlanKind.BALANCED,
        emi=balanced_emi,
        total_interest=round_half_up(balanced_emi * months - principal),
        total_months=months,
    )
    saver = _plan_for_emi(PlanKind.SAVER, principal, rate, round_half_up(balanced_emi * SAVER_FACTOR))
    flexible = _plan_for_emi(PlanKind.FLEXIBLE, principal, rate, round_half_up(balanced_emi * FLEXIBLE_FACTOR))
    return [balanced, saver, flexible]


def find_plan(plans: Sequence[PaymentPlan], kind: PlanKind) -> Optional[PaymentPlan]:
    """The plan of ``kind``, falling back to the first (balanced) plan."""
    for plan in plans:
        if plan.kind == kind:
            return plan
    return plans[0] if plans else None


def initial_tenure(offer: Optional[LoanOffer]) -> int:
    if offer is not None and offer.tenure_years in TENURE_OPTIONS:
        return offer.tenure_years
    return DEFAULT_TENURE


def repayment_progress(amount_paid: float, total_amount: float) -> float:
    """Percent of the loan repaid."""
    return (amount_paid / total_amount) * 100 if total_amount > 0 else 0.0
