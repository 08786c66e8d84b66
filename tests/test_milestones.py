"""Tests for sanction/disbursal milestones and the dashboard summary."""

import pytest

from engine.offers import build_offers
from journey.dashboard import DEFAULT_USER_NAME, build_dashboard, chat_greeting
from journey.milestones import (
    disbursal_complete,
    disbursal_stage,
    disbursal_timeline,
    sanction_approved,
)
from journey.state import AppContext


class TestSanction:
    def test_approved_after_delay(self) -> None:
        assert not sanction_approved(0)
        assert not sanction_approved(2.99)
        assert sanction_approved(3.0)


class TestDisbursal:
    @pytest.mark.parametrize(
        "elapsed,stage",
        [(0, 1), (-5, 1), (2.4, 1), (2.5, 2), (5.0, 3), (7.5, 4), (60, 4)],
    )
    def test_stage(self, elapsed, stage) -> None:
        assert disbursal_stage(elapsed) == stage

    def test_complete_only_at_last_stage(self) -> None:
        assert not disbursal_complete(7.4)
        assert disbursal_complete(7.5)

    def test_timeline_marks_reached(self) -> None:
        timeline = disbursal_timeline(5.0)
        assert [e["stage"] for e in timeline] == [1, 2, 3, 4]
        assert [e["reached"] for e in timeline] == [True, True, True, False]
        assert timeline[-1]["title"] == "Disbursed to University"


class TestDashboard:
    def test_defaults_without_profile_or_offer(self, context: AppContext) -> None:
        summary = build_dashboard(context.state)
        assert summary.user_name == DEFAULT_USER_NAME
        assert summary.next_emi == 49_447
        assert summary.total_amount == 4_000_000
        assert summary.progress_percent == pytest.approx(6.25)

    def test_uses_first_name_and_offer(self, context: AppContext) -> None:
        offer = build_offers(2_000_000)[1]
        context.set_profile({"name": "Asha Rao"})
        context.set_selected_offer(offer)
        summary = build_dashboard(context.state)
        assert summary.user_name == "Asha"
        assert summary.next_emi == offer.emi
        assert summary.total_amount == 2_000_000
        assert summary.progress_percent == pytest.approx(12.5)

    def test_greeting(self, context: AppContext) -> None:
        greeting = chat_greeting(build_dashboard(context.state))
        assert greeting.startswith("Hello, Aditya! Welcome to ScholarLoan.")
        assert "completed 6% of your loan repayment" in greeting
