"""Journey navigator — which screen is active, with a back stack.

Deterministic and rule-free: any step may follow any step. The screens
decide when advancing is allowed; the navigator only remembers where the
user has been.
"""

from collections import deque
from enum import IntEnum
from typing import Iterator, Optional

from config import MAX_HISTORY_DEPTH


class JourneyStep(IntEnum):
    ONBOARDING = 0
    PROFILE_SETUP = 1
    ELIGIBILITY_CHECK = 2
    OFFER_DISCOVERY = 3
    APPLICATION_FLOW = 4
    SANCTION_APPROVAL = 5
    DISBURSAL_EXPERIENCE = 6
    REPAYMENT_PLANNING = 7
    DASHBOARD = 8

    @property
    def title(self) -> str:
        return self.name.replace("_", " ").title()


HOME_STEP = JourneyStep.ONBOARDING


class NavigationHistory:
    """Bounded stack of previously visited steps.

    Once full, pushing drops the oldest entry.
    """

    def __init__(self, max_depth: int = MAX_HISTORY_DEPTH):
        self._stack: deque[JourneyStep] = deque(maxlen=max_depth)

    def push(self, step: JourneyStep) -> None:
        self._stack.append(step)

    def pop(self) -> Optional[JourneyStep]:
        """Remove and return the most recent step, or None when empty."""
        if not self._stack:
            return None
        return self._stack.pop()

    def clear(self) -> None:
        self._stack.clear()

    def __len__(self) -> int:
        return len(self._stack)

    def __iter__(self) -> Iterator[JourneyStep]:
        return iter(self._stack)


class JourneyNavigator:
    """Tracks the current step. All operations are total."""

    def __init__(self, max_depth: int = MAX_HISTORY_DEPTH):
        self._current = HOME_STEP
        self._history = NavigationHistory(max_depth)

    @property
    def current(self) -> JourneyStep:
        return self._current

    @property
    def history(self) -> tuple[JourneyStep, ...]:
        return tuple(self._history)

    @property
    def can_go_back(self) -> bool:
        return len(self._history) > 0

    @property
    def show_header(self) -> bool:
        return self._current != JourneyStep.ONBOARDING

    @property
    def show_back_button(self) -> bool:
        return self._current not in (JourneyStep.ONBOARDING, JourneyStep.DASHBOARD)

    def advance(self, step: JourneyStep) -> JourneyStep:
        """Remember the current step and move to ``step``."""
        step = JourneyStep(step)
        self._history.push(self._current)
        self._current = step
        return self._current

    def go_back(self) -> JourneyStep:
        """Return to the previous step; an empty history lands on onboarding."""
        previous = self._history.pop()
        self._current = previous if previous is not None else HOME_STEP
        return self._current

    def go_home(self) -> JourneyStep:
        self._history.clear()
        self._current = HOME_STEP
        return self._current
