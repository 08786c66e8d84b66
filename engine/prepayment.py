"""Prepayment simulator — effect of a lump sum and/or extra EMI."""

import math
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from engine.amortization import PaymentPlan, monthly_rate, months_to_repay, round_half_up


class PayoffOutcome(str, Enum):
    PAID_OFF = "paid_off"              # lump sum clears the loan today
    NEVER_PAID_OFF = "never_paid_off"  # payment does not cover interest
    REDUCED = "reduced"


class PrepaymentSimulationInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    one_time_amount: float = Field(default=0, ge=0)
    extra_monthly_amount: float = Field(default=0, ge=0)

    @property
    def active(self) -> bool:
        return bool(self.one_time_amount or self.extra_monthly_amount)


class PrepaymentSimulationResult(BaseModel):
    """
    ``interest_saved`` is ``-inf`` for NEVER_PAID_OFF. That is a terminal
    failure state for the caller to report, not a number to display.
    """

    model_config = ConfigDict(frozen=True, ser_json_inf_nan="strings")

    outcome: PayoffOutcome
    total_months: Optional[float] = None
    years: int = 0
    months: int = 0
    interest_saved: float

    def describe(self) -> str:
        if self.outcome is PayoffOutcome.PAID_OFF:
            return "Paid Off!"
        if self.outcome is PayoffOutcome.NEVER_PAID_OFF:
            return "Never Paid Off"
        return f"{self.years} years, {self.months} months"

    def savings_label(self) -> str:
        """Interest saved for display; unbounded savings get a word, not a figure."""
        if self.outcome is PayoffOutcome.NEVER_PAID_OFF:
            return "None"
        if math.isinf(self.interest_saved):
            return "Unlimited (the loan now gets repaid)"
        return f"₹{self.interest_saved:,.0f}"


def split_duration(months: float) -> tuple[int, int]:
    """Whole years plus remaining months, rounded up; 12 months carry over."""
    years = math.floor(months / 12)
    remainder = math.ceil(months % 12)
    if remainder == 12:
        years, remainder = years + 1, 0
    return years, remainder


def simulate_prepayment(
    plan: PaymentPlan,
    loan_amount: float,
    annual_rate_percent: float,
    prepayment: PrepaymentSimulationInput,
) -> Optional[PrepaymentSimulationResult]:
    """None when there is nothing to simulate."""
    if not prepayment.active:
        return None

    principal = loan_amount - prepayment.one_time_amount
    if principal <= 0:
        return PrepaymentSimulationResult(
            outcome=PayoffOutcome.PAID_OFF,
            total_months=0,
            interest_saved=plan.total_interest,
        )

    effective_emi = plan.emi + prepayment.extra_monthly_amount
    rate = monthly_rate(annual_rate_percent)
    new_months = months_to_repay(principal, rate, effective_emi)
    if math.isinf(new_months):
        return PrepaymentSimulationResult(
            outcome=PayoffOutcome.NEVER_PAID_OFF,
            interest_saved=-math.inf,
        )

    new_total_interest = new_months * effective_emi + prepayment.one_time_amount - loan_amount
    saved = plan.total_interest - new_total_interest
    years, months = split_duration(new_months)
    return PrepaymentSimulationResult(
        outcome=PayoffOutcome.REDUCED,
        total_months=new_months,
        years=years,
        months=months,
        # A plan that never amortized has unbounded savings once it does
        interest_saved=round_half_up(saved) if math.isfinite(saved) else saved,
    )
