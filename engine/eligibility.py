"""Loan eligibility from course fee, parental income and institute tier."""

import logging
import math
import random
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from config import ELIGIBILITY_JITTER

logger = logging.getLogger(__name__)

FEE_COVERAGE = 0.9           # a loan covers at most 90% of the fee
MIN_FEE_SHARE = 0.5          # ...and must cover at least half of it
MIN_LOAN_AMOUNT = 100_000
MAX_LOAN_AMOUNT = 7_500_000
ROUNDING_UNIT = 1_000


class InstituteTier(str, Enum):
    TIER_1 = "Tier 1 (IIT, IIM, ISB etc.)"
    TIER_2 = "Tier 2"
    TIER_3 = "Tier 3"

    @classmethod
    def parse(cls, label) -> "InstituteTier":
        """Accept a tier or any label mentioning it; unknown labels are Tier 3."""
        if isinstance(label, cls):
            return label
        text = str(label or "")
        if "Tier 1" in text:
            return cls.TIER_1
        if "Tier 2" in text:
            return cls.TIER_2
        return cls.TIER_3


INCOME_MULTIPLIERS: dict[InstituteTier, float] = {
    InstituteTier.TIER_1: 4.5,
    InstituteTier.TIER_2: 3.0,
    InstituteTier.TIER_3: 2.0,
}

# Dropdown values offered on the eligibility screen (label, amount)
COURSE_FEE_OPTIONS: list[tuple[str, int]] = [
    ("Up to ₹5 Lakhs", 500_000),
    ("₹5 Lakhs - ₹10 Lakhs", 1_000_000),
    ("₹10 Lakhs - ₹20 Lakhs", 2_000_000),
    ("₹20 Lakhs - ₹40 Lakhs", 4_000_000),
    ("₹40 Lakhs - ₹75 Lakhs", 7_500_000),
    ("Above ₹75 Lakhs", 10_000_000),
]

PARENT_INCOME_OPTIONS: list[tuple[str, int]] = [
    ("₹3 Lakhs - ₹5 Lakhs", 500_000),
    ("₹5 Lakhs - ₹10 Lakhs", 1_000_000),
    ("₹10 Lakhs - ₹20 Lakhs", 2_000_000),
    ("₹20 Lakhs - ₹50 Lakhs", 5_000_000),
    ("Above ₹50 Lakhs", 5_000_001),
]


class EligibilityInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    course_fee: float = Field(gt=0)
    institute_tier: InstituteTier = InstituteTier.TIER_1
    parent_income: float = Field(gt=0)


class EligibilityResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    eligible: bool
    amount: Optional[int] = None


def income_multiplier(tier: InstituteTier, rng: random.Random, jitter: float) -> float:
    """Tier multiplier perturbed uniformly within +/- ``jitter``."""
    base = INCOME_MULTIPLIERS[InstituteTier.parse(tier)]
    if jitter <= 0:
        return base
    return base * (1 + (rng.random() - 0.5) * 2 * jitter)


def calculate_eligibility(
    details: EligibilityInput,
    rng: Optional[random.Random] = None,
    jitter: float = ELIGIBILITY_JITTER,
) -> EligibilityResult:
    """
    Estimate the loan a student qualifies for.

    The income-based figure (income x tier multiplier) is capped by 90% of
    the course fee. Anything under half the fee or under the minimum loan
    size is ineligible; otherwise the amount is capped at the maximum loan
    and floored to the nearest thousand.

    Pass a seeded ``rng`` or ``jitter=0`` for reproducible results.
    """
    rng = rng or random.Random()
    multiplier = income_multiplier(details.institute_tier, rng, jitter)

    income_based = details.parent_income * multiplier
    fee_based = details.course_fee * FEE_COVERAGE
    candidate = min(income_based, fee_based)

    if candidate < details.course_fee * MIN_FEE_SHARE or candidate < MIN_LOAN_AMOUNT:
        logger.info(
            f"Ineligible: candidate {candidate:.0f} for fee {details.course_fee:.0f} (multiplier {multiplier:.3f})"
        )
        return EligibilityResult(eligible=False)

    amount = math.floor(min(candidate, MAX_LOAN_AMOUNT) / ROUNDING_UNIT) * ROUNDING_UNIT
    return EligibilityResult(eligible=True, amount=int(amount))
