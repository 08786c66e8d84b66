"""Tests for the journey session (screen actions end to end)."""

import json
import math

import pytest

from engine.amortization import PlanKind
from engine.offers import OfferFilter
from engine.prepayment import PayoffOutcome, PrepaymentSimulationInput
from journey.navigator import JourneyStep
from journey.session import CHAT_ERROR_MESSAGE, JourneySession
from journey.state import REQUIRED_DOCUMENTS

PROFILE_STEPS = [
    {"name": "Asha Rao", "pan": "abcde1234f"},
    {"email": "asha@example.com", "mobile": "9876543210"},
    {"degree_level": "Master's", "course": "Computer Science", "institute": "Stanford University"},
]


def _complete_profile(session: JourneySession) -> None:
    session.start_application()
    for fields in PROFILE_STEPS:
        assert session.submit_profile(fields) == {}


def _upload_all(session: JourneySession, payload: bytes) -> None:
    for doc_id in REQUIRED_DOCUMENTS:
        session.upload_document(doc_id, payload, "image/png")


class TestProfile:
    def test_start_application(self, session: JourneySession) -> None:
        assert session.start_application() == JourneyStep.PROFILE_SETUP
        assert session.profile_sub_step == 1

    def test_sub_steps_then_eligibility(self, session: JourneySession) -> None:
        _complete_profile(session)
        assert session.step == JourneyStep.ELIGIBILITY_CHECK
        profile = session.state["profile"]
        assert profile["pan"] == "ABCDE1234F"
        assert profile["institute"] == "Stanford University"

    def test_errors_keep_sub_step_and_state(self, session: JourneySession) -> None:
        session.start_application()
        errors = session.submit_profile({"name": "A", "pan": "ABCDE1234F"})
        assert errors == {"name": "Please enter a valid full name."}
        assert session.profile_sub_step == 1
        assert session.state["profile"]["pan"] == ""

    def test_previous_profile_step(self, session: JourneySession) -> None:
        session.start_application()
        session.submit_profile(PROFILE_STEPS[0])
        assert session.profile_sub_step == 2
        assert session.previous_profile_step() == JourneyStep.PROFILE_SETUP
        assert session.profile_sub_step == 1
        assert session.previous_profile_step() == JourneyStep.ONBOARDING


class TestEligibilityAndOffers:
    def test_check_eligibility_stays_on_step(self, session: JourneySession) -> None:
        _complete_profile(session)
        errors, result = session.check_eligibility({"course_fee": 2_000_000, "parent_income": 1_000_000})
        assert errors == {}
        assert result.amount == 1_800_000
        assert session.state["eligible_amount"] == 1_800_000
        assert session.step == JourneyStep.ELIGIBILITY_CHECK

    def test_check_eligibility_errors(self, session: JourneySession) -> None:
        errors, result = session.check_eligibility({"course_fee": ""})
        assert set(errors) == {"course_fee", "parent_income"}
        assert result is None
        assert session.state["eligible_amount"] is None

    def test_ineligible_clears_amount(self, session: JourneySession) -> None:
        session.check_eligibility({"course_fee": 2_000_000, "parent_income": 1_000_000})
        _, result = session.check_eligibility({
            "course_fee": 10_000_000, "parent_income": 500_000, "institute_tier": "Tier 3",
        })
        assert not result.eligible
        assert session.state["eligible_amount"] is None

    def test_offers_follow_eligible_amount(self, session: JourneySession) -> None:
        session.check_eligibility({"course_fee": 2_000_000, "parent_income": 1_000_000})
        assert [o.amount for o in session.offers()] == [1_800_000, 1_800_000]
        assert [o.id for o in session.offers(OfferFilter.COLLATERAL)] == [2]

    def test_choose_offer(self, session: JourneySession) -> None:
        session.view_offers()
        offer = session.choose_offer(2)
        assert session.state["selected_offer"] == offer
        assert session.step == JourneyStep.APPLICATION_FLOW

    def test_choose_unknown_offer(self, session: JourneySession) -> None:
        with pytest.raises(KeyError):
            session.choose_offer(99)
        assert session.state["selected_offer"] is None


class TestApplicationMilestones:
    def test_submit_requires_all_documents(self, session: JourneySession, png_bytes) -> None:
        session.choose_offer(1)
        session.upload_document("pan", png_bytes, "image/png")
        assert not session.submit_application()
        assert session.step == JourneyStep.APPLICATION_FLOW

    def test_sanction_and_disbursal_follow_clock(self, session: JourneySession, clock, png_bytes) -> None:
        session.choose_offer(1)
        _upload_all(session, png_bytes)
        assert not session.sanction_approved()
        assert session.submit_application()
        assert session.step == JourneyStep.SANCTION_APPROVAL
        assert not session.sanction_approved()
        clock.advance(3)
        assert session.sanction_approved()

        session.track_disbursal()
        timeline, complete = session.disbursal_status()
        assert [e["reached"] for e in timeline] == [True, False, False, False]
        assert not complete
        clock.advance(7.5)
        _, complete = session.disbursal_status()
        assert complete


class TestRepayment:
    def test_defaults_without_offer(self, session: JourneySession) -> None:
        view = session.repayment()
        assert view.loan_amount == 4_000_000
        assert view.annual_rate_percent == 8.5
        assert view.tenure_years == 10
        assert [p.kind for p in view.plans] == list(PlanKind)
        assert view.selected_plan.kind is PlanKind.BALANCED
        assert view.simulation is None

    def test_uses_selected_offer(self, session: JourneySession) -> None:
        session.check_eligibility({"course_fee": 2_000_000, "parent_income": 1_000_000})
        session.choose_offer(1)
        view = session.repayment(plan_kind=PlanKind.SAVER)
        assert view.loan_amount == 1_800_000
        assert view.tenure_years == 15
        assert view.selected_plan.kind is PlanKind.SAVER

    def test_prepayment_simulation(self, session: JourneySession) -> None:
        view = session.repayment(10, PlanKind.BALANCED, PrepaymentSimulationInput(extra_monthly_amount=5_000))
        assert view.simulation.outcome is PayoffOutcome.REDUCED
        assert view.simulation.total_months < 120

    def test_never_paid_off_serializes(self, session: JourneySession) -> None:
        view = session.repayment(30, PlanKind.FLEXIBLE, PrepaymentSimulationInput(one_time_amount=1))
        assert view.simulation.outcome is PayoffOutcome.NEVER_PAID_OFF
        assert view.simulation.interest_saved == -math.inf
        dumped = json.loads(view.model_dump_json())
        assert dumped["simulation"]["interest_saved"] == "-Infinity"
        assert dumped["selected_plan"]["total_interest"] == "Infinity"


class TestDashboardChat:
    def test_dashboard_uses_profile(self, session: JourneySession) -> None:
        _complete_profile(session)
        assert session.dashboard().user_name == "Asha"

    def test_blank_message_ignored(self, session: JourneySession, assistant) -> None:
        assert session.chat("   ") is None
        assert session.chat_history == []
        assert assistant.received == []

    def test_first_message_seeds_greeting(self, session: JourneySession, assistant) -> None:
        reply = session.chat("When is my next EMI?")
        assert reply == "You asked: When is my next EMI?"
        senders = [m.sender for m in session.chat_history]
        assert senders == ["ai", "user", "ai"]
        assert session.chat_history[0].text.startswith("Hello, Aditya!")
        message, history = assistant.received[0]
        assert message == "When is my next EMI?"
        assert [m.sender for m in history] == ["ai"]

    def test_history_grows(self, session: JourneySession, assistant) -> None:
        session.chat("first")
        session.chat("second")
        assert len(session.chat_history) == 5
        assert len(assistant.received[1][1]) == 3

    def test_assistant_failure_becomes_message(self, session: JourneySession, assistant, monkeypatch) -> None:
        def broken(message, history):
            raise RuntimeError("offline")

        monkeypatch.setattr(assistant, "reply", broken)
        assert session.chat("hello") == CHAT_ERROR_MESSAGE
        assert session.chat_history[-1].text == CHAT_ERROR_MESSAGE


class TestReset:
    def test_reset_clears_everything(self, session: JourneySession, png_bytes) -> None:
        _complete_profile(session)
        session.check_eligibility({"course_fee": 2_000_000, "parent_income": 1_000_000})
        session.upload_document("pan", png_bytes, "image/png")
        session.chat("hi")

        assert session.reset() == JourneyStep.ONBOARDING
        assert session.navigator.history == ()
        assert session.state["profile"]["name"] == ""
        assert session.state["eligible_amount"] is None
        assert session.chat_history == []
        assert session.profile_sub_step == 1
        assert session.uploader.active_tickers() == {}
