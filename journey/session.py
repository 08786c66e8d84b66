"""Journey session — the screen actions of one applicant.

Binds the navigator, the application state and the calculation engine
together. Both outer surfaces (REST in ``main.py``, Streamlit in
``app.py``) drive the journey only through this class.
"""

import logging
import random
import time
from typing import Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from assistant.base import ChatAssistant, ChatMessage, DocumentExtractor
from config import ELIGIBILITY_JITTER, PROGRESS_TICK_SECONDS
from engine.amortization import PaymentPlan, PlanKind, find_plan, initial_tenure, payment_plans
from engine.eligibility import EligibilityInput, EligibilityResult, InstituteTier, calculate_eligibility
from engine.offers import LoanOffer, OfferFilter, build_offers, filter_offers
from engine.prepayment import PrepaymentSimulationInput, PrepaymentSimulationResult, simulate_prepayment
from journey.dashboard import DashboardSummary, build_dashboard, chat_greeting
from journey import milestones
from journey.milestones import DisbursalEntry
from journey.navigator import JourneyNavigator, JourneyStep
from journey.state import AppContext, AppState, Document, EligibilityDetails, UserProfile, all_documents_uploaded
from journey.validation import (
    PROFILE_SUB_STEPS,
    normalize_profile,
    validate_eligibility_details,
    validate_profile_step,
)
from workers.document_uploads import DocumentUploader

logger = logging.getLogger(__name__)

DEFAULT_LOAN_AMOUNT = 4_000_000
DEFAULT_RATE_PERCENT = 8.5
CHAT_ERROR_MESSAGE = "Sorry, I'm having trouble connecting. Please try again."


class RepaymentView(BaseModel):
    model_config = ConfigDict(ser_json_inf_nan="strings")

    loan_amount: int
    annual_rate_percent: float
    tenure_years: int
    plans: List[PaymentPlan]
    selected_plan: Optional[PaymentPlan]
    simulation: Optional[PrepaymentSimulationResult] = None


class JourneySession:
    def __init__(
        self,
        extractor: DocumentExtractor,
        assistant: ChatAssistant,
        rng: Optional[random.Random] = None,
        jitter: float = ELIGIBILITY_JITTER,
        clock: Callable[[], float] = time.monotonic,
        tick_interval: float = PROGRESS_TICK_SECONDS,
    ):
        self.navigator = JourneyNavigator()
        self.context = AppContext()
        self.uploader = DocumentUploader(self.context, extractor, tick_interval=tick_interval, rng=rng)
        self._assistant = assistant
        self._rng = rng or random.Random()
        self._jitter = jitter
        self._clock = clock
        self._sanction_started_at: Optional[float] = None
        self._disbursal_started_at: Optional[float] = None
        self.profile_sub_step = 1
        self.chat_history: List[ChatMessage] = []

    @property
    def state(self) -> AppState:
        return self.context.state

    @property
    def step(self) -> JourneyStep:
        return self.navigator.current

    # ── Navigation ─────────────────────────────────────────────────────
    def advance(self, step: JourneyStep) -> JourneyStep:
        return self.navigator.advance(step)

    def go_back(self) -> JourneyStep:
        return self.navigator.go_back()

    def go_home(self) -> JourneyStep:
        return self.navigator.go_home()

    def reset(self) -> JourneyStep:
        """Forget everything: state, uploads in flight, chat, history."""
        self.uploader.cancel_all()
        self.context.reset()
        self.chat_history = []
        self.profile_sub_step = 1
        self._sanction_started_at = self._disbursal_started_at = None
        return self.navigator.go_home()

    def close(self) -> None:
        self.uploader.cancel_all()

    # ── Onboarding + profile ───────────────────────────────────────────
    def start_application(self) -> JourneyStep:
        self.profile_sub_step = 1
        return self.navigator.advance(JourneyStep.PROFILE_SETUP)

    def submit_profile(self, fields: UserProfile) -> Dict[str, str]:
        """
        Validate the current profile sub-step and store it.

        Returns field errors (nothing is stored then). After the last
        sub-step the journey moves on to the eligibility check.
        """
        fields = normalize_profile(fields)
        errors = validate_profile_step(self.profile_sub_step, {**self.state["profile"], **fields})
        if errors:
            return errors

        self.context.set_profile(fields)
        if self.profile_sub_step < PROFILE_SUB_STEPS:
            self.profile_sub_step += 1
        else:
            self.navigator.advance(JourneyStep.ELIGIBILITY_CHECK)
        return {}

    def previous_profile_step(self) -> JourneyStep:
        if self.profile_sub_step > 1:
            self.profile_sub_step -= 1
            return self.step
        return self.navigator.go_back()

    # ── Eligibility + offers ───────────────────────────────────────────
    def check_eligibility(
        self, details: EligibilityDetails
    ) -> Tuple[Dict[str, str], Optional[EligibilityResult]]:
        """Returns (field errors, result); the result is None when errors exist."""
        merged = {**self.state["eligibility"], **details}
        errors = validate_eligibility_details(merged)
        if errors:
            return errors, None

        self.context.set_eligibility_details(details)
        result = calculate_eligibility(
            EligibilityInput(
                course_fee=float(merged["course_fee"]),
                institute_tier=InstituteTier.parse(merged.get("institute_tier")),
                parent_income=float(merged["parent_income"]),
            ),
            rng=self._rng,
            jitter=self._jitter,
        )
        self.context.set_eligible_amount(result.amount)
        logger.info(f"Eligibility checked: eligible={result.eligible} amount={result.amount}")
        return {}, result

    def view_offers(self) -> JourneyStep:
        return self.navigator.advance(JourneyStep.OFFER_DISCOVERY)

    def offers(self, offer_filter: OfferFilter = OfferFilter.ALL) -> List[LoanOffer]:
        return filter_offers(build_offers(self.state["eligible_amount"]), offer_filter)

    def choose_offer(self, offer_id: int) -> LoanOffer:
        """Select an offer and move to the application. Unknown ids raise KeyError."""
        for offer in build_offers(self.state["eligible_amount"]):
            if offer.id == offer_id:
                self.context.set_selected_offer(offer)
                self.navigator.advance(JourneyStep.APPLICATION_FLOW)
                return offer
        raise KeyError(offer_id)

    # ── Documents, sanction, disbursal ─────────────────────────────────
    def upload_document(self, doc_id: str, payload: bytes, mime_type: str) -> Document:
        return self.uploader.upload(doc_id, payload, mime_type)

    def submit_application(self) -> bool:
        """Move on to sanction once every document is uploaded."""
        if not all_documents_uploaded(self.state):
            return False
        self.navigator.advance(JourneyStep.SANCTION_APPROVAL)
        self._sanction_started_at = self._clock()
        return True

    def _elapsed(self, started_at: Optional[float]) -> float:
        return 0.0 if started_at is None else self._clock() - started_at

    def sanction_approved(self) -> bool:
        if self._sanction_started_at is None:
            return False
        return milestones.sanction_approved(self._elapsed(self._sanction_started_at))

    def track_disbursal(self) -> JourneyStep:
        self._disbursal_started_at = self._clock()
        return self.navigator.advance(JourneyStep.DISBURSAL_EXPERIENCE)

    def disbursal_status(self) -> Tuple[List[DisbursalEntry], bool]:
        elapsed = self._elapsed(self._disbursal_started_at)
        return milestones.disbursal_timeline(elapsed), milestones.disbursal_complete(elapsed)

    # ── Repayment + dashboard ──────────────────────────────────────────
    def plan_repayment(self) -> JourneyStep:
        return self.navigator.advance(JourneyStep.REPAYMENT_PLANNING)

    def repayment(
        self,
        tenure_years: Optional[int] = None,
        plan_kind: PlanKind = PlanKind.BALANCED,
        prepayment: Optional[PrepaymentSimulationInput] = None,
    ) -> RepaymentView:
        offer = self.state["selected_offer"]
        loan_amount = offer.amount if offer else DEFAULT_LOAN_AMOUNT
        rate = offer.interest_rate_percent if offer else DEFAULT_RATE_PERCENT
        tenure = tenure_years or initial_tenure(offer)

        plans = payment_plans(loan_amount, rate, tenure)
        selected = find_plan(plans, PlanKind(plan_kind))
        simulation = None
        if selected is not None and prepayment is not None:
            simulation = simulate_prepayment(selected, loan_amount, rate, prepayment)
        return RepaymentView(
            loan_amount=loan_amount,
            annual_rate_percent=rate,
            tenure_years=tenure,
            plans=plans,
            selected_plan=selected,
            simulation=simulation,
        )

    def open_dashboard(self) -> JourneyStep:
        return self.navigator.advance(JourneyStep.DASHBOARD)

    def dashboard(self) -> DashboardSummary:
        return build_dashboard(self.state)

    def chat(self, message: str) -> Optional[str]:
        """Ask the help assistant. Blank messages are ignored (None)."""
        if not message or not message.strip():
            return None
        if not self.chat_history:
            self.chat_history.append(ChatMessage(sender="ai", text=chat_greeting(self.dashboard())))

        prior = list(self.chat_history)
        self.chat_history.append(ChatMessage(sender="user", text=message))
        try:
            answer = self._assistant.reply(message, prior)
        except Exception as e:
            logger.error(f"Chat assistant failed: {e}")
            answer = CHAT_ERROR_MESSAGE
        self.chat_history.append(ChatMessage(sender="ai", text=answer))
        return answer
