"""Personalised loan offers built from the eligible amount."""

from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

DEFAULT_SCHOLAR_AMOUNT = 4_000_000
DEFAULT_ACHIEVER_AMOUNT = 7_500_000


class LoanOffer(BaseModel):
    """Immutable once built; the selected one drives repayment planning."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    amount: int
    emi: int
    tenure_years: int
    interest_rate_percent: float
    collateral_required: bool
    moratorium_description: str
    special_offer_text: str
    is_popular: bool = False


class OfferFilter(str, Enum):
    ALL = "all"
    COLLATERAL = "collateral"
    NO_COLLATERAL = "no-collateral"


def _cap(eligible_amount: Optional[int], ceiling: int) -> int:
    return min(eligible_amount, ceiling) if eligible_amount else ceiling


def build_offers(eligible_amount: Optional[int]) -> list[LoanOffer]:
    return [
        LoanOffer(
            id=1,
            name="ScholarLoan Scholar",
            amount=_cap(eligible_amount, DEFAULT_SCHOLAR_AMOUNT),
            emi=35_000,
            tenure_years=15,
            interest_rate_percent=8.5,
            collateral_required=False,
            moratorium_description="Course + 1 year",
            special_offer_text="Special concession for girl students!",
            is_popular=True,
        ),
        LoanOffer(
            id=2,
            name="ScholarLoan Achiever",
            amount=_cap(eligible_amount, DEFAULT_ACHIEVER_AMOUNT),
            emi=55_000,
            tenure_years=20,
            interest_rate_percent=7.9,
            collateral_required=True,
            moratorium_description="Course + 6 months",
            special_offer_text="Lowest interest rate guarantee.",
        ),
    ]


def filter_offers(offers: Iterable[LoanOffer], offer_filter: OfferFilter = OfferFilter.ALL) -> list[LoanOffer]:
    offer_filter = OfferFilter(offer_filter)
    if offer_filter is OfferFilter.COLLATERAL:
        return [o for o in offers if o.collateral_required]
    if offer_filter is OfferFilter.NO_COLLATERAL:
        return [o for o in offers if not o.collateral_required]
    return list(offers)
