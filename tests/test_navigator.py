"""Tests for the journey navigator."""

from journey.navigator import JourneyNavigator, JourneyStep, NavigationHistory


class TestNavigationHistory:
    def test_pop_empty_returns_none(self) -> None:
        assert NavigationHistory().pop() is None

    def test_push_pop_is_lifo(self) -> None:
        history = NavigationHistory()
        history.push(JourneyStep.ONBOARDING)
        history.push(JourneyStep.PROFILE_SETUP)
        assert history.pop() == JourneyStep.PROFILE_SETUP
        assert history.pop() == JourneyStep.ONBOARDING
        assert len(history) == 0

    def test_bounded_drops_oldest(self) -> None:
        history = NavigationHistory(max_depth=2)
        for step in (JourneyStep.ONBOARDING, JourneyStep.PROFILE_SETUP, JourneyStep.ELIGIBILITY_CHECK):
            history.push(step)
        assert list(history) == [JourneyStep.PROFILE_SETUP, JourneyStep.ELIGIBILITY_CHECK]


class TestJourneyNavigator:
    def test_starts_at_onboarding(self) -> None:
        nav = JourneyNavigator()
        assert nav.current == JourneyStep.ONBOARDING
        assert nav.history == ()
        assert not nav.can_go_back

    def test_advance_pushes_current(self) -> None:
        nav = JourneyNavigator()
        nav.advance(JourneyStep.PROFILE_SETUP)
        nav.advance(JourneyStep.ELIGIBILITY_CHECK)
        assert nav.current == JourneyStep.ELIGIBILITY_CHECK
        assert nav.history == (JourneyStep.ONBOARDING, JourneyStep.PROFILE_SETUP)

    def test_advance_allows_any_transition(self) -> None:
        nav = JourneyNavigator()
        nav.advance(JourneyStep.DASHBOARD)
        nav.advance(JourneyStep.PROFILE_SETUP)
        nav.advance(JourneyStep.PROFILE_SETUP)
        assert nav.current == JourneyStep.PROFILE_SETUP
        assert len(nav.history) == 3

    def test_advance_accepts_int(self) -> None:
        nav = JourneyNavigator()
        assert nav.advance(3) is JourneyStep.OFFER_DISCOVERY

    def test_go_back_revisits_previous(self) -> None:
        nav = JourneyNavigator()
        nav.advance(JourneyStep.PROFILE_SETUP)
        nav.advance(JourneyStep.ELIGIBILITY_CHECK)
        assert nav.go_back() == JourneyStep.PROFILE_SETUP
        assert nav.go_back() == JourneyStep.ONBOARDING

    def test_go_back_on_empty_history_lands_on_onboarding(self) -> None:
        nav = JourneyNavigator()
        assert nav.go_back() == JourneyStep.ONBOARDING
        assert nav.go_back() == JourneyStep.ONBOARDING
        assert nav.history == ()

    def test_go_back_after_history_exhausted_from_deep_step(self) -> None:
        nav = JourneyNavigator(max_depth=1)
        nav.advance(JourneyStep.PROFILE_SETUP)
        nav.advance(JourneyStep.DASHBOARD)
        assert nav.go_back() == JourneyStep.PROFILE_SETUP
        assert nav.go_back() == JourneyStep.ONBOARDING

    def test_go_home_clears_history(self) -> None:
        nav = JourneyNavigator()
        nav.advance(JourneyStep.PROFILE_SETUP)
        nav.advance(JourneyStep.OFFER_DISCOVERY)
        assert nav.go_home() == JourneyStep.ONBOARDING
        assert nav.history == ()
        assert nav.go_back() == JourneyStep.ONBOARDING

    def test_header_flags(self) -> None:
        nav = JourneyNavigator()
        assert not nav.show_header
        assert not nav.show_back_button
        nav.advance(JourneyStep.OFFER_DISCOVERY)
        assert nav.show_header
        assert nav.show_back_button
        nav.advance(JourneyStep.DASHBOARD)
        assert nav.show_header
        assert not nav.show_back_button

    def test_step_title(self) -> None:
        assert JourneyStep.REPAYMENT_PLANNING.title == "Repayment Planning"
