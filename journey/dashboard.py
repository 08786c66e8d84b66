"""Dashboard summary for a borrower in repayment."""

from pydantic import BaseModel

from engine.amortization import repayment_progress
from journey.state import AppState

DEFAULT_USER_NAME = "Aditya"
DEFAULT_NEXT_EMI = 49_447
DEFAULT_TOTAL_AMOUNT = 4_000_000
AMOUNT_PAID = 250_000  # Demo figure until repayments are tracked
NEXT_EMI_DUE = "15 July 2025"


class DashboardSummary(BaseModel):
    user_name: str
    next_emi: int
    next_emi_due: str = NEXT_EMI_DUE
    total_amount: int
    amount_paid: int
    progress_percent: float


def build_dashboard(state: AppState) -> DashboardSummary:
    name = (state["profile"].get("name") or "").split()
    offer = state["selected_offer"]
    total = offer.amount if offer else DEFAULT_TOTAL_AMOUNT
    return DashboardSummary(
        user_name=name[0] if name else DEFAULT_USER_NAME,
        next_emi=offer.emi if offer else DEFAULT_NEXT_EMI,
        total_amount=total,
        amount_paid=AMOUNT_PAID,
        progress_percent=repayment_progress(AMOUNT_PAID, total),
    )


def chat_greeting(summary: DashboardSummary) -> str:
    return (
        f"Hello, {summary.user_name}! Welcome to ScholarLoan. I see you've completed "
        f"{summary.progress_percent:.0f}% of your loan repayment. How can I help you today?"
    )
