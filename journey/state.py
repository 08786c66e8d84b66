"""AppState schema and the context object that owns it.

Every mutation builds a fresh state from a copy and swaps it in under a
lock, so a reader (the UI, or the progress ticker thread) never sees a
half-applied update.
"""

import copy
import threading
from typing import Any, Callable, Dict, List, Literal, Optional, TypedDict

from engine.eligibility import InstituteTier
from engine.offers import LoanOffer

DocumentStatus = Literal["pending", "uploading", "uploaded", "error"]


class UserProfile(TypedDict, total=False):
    name: str
    pan: str
    email: str
    mobile: str
    degree_level: str
    course: str
    institute: str


class EligibilityDetails(TypedDict, total=False):
    course_fee: Any         # int once selected, "" before
    institute_tier: str
    parent_income: Any


class Document(TypedDict, total=False):
    id: str
    name: str
    status: DocumentStatus
    error: Optional[str]
    progress: float
    extracted_data: Optional[Dict[str, str]]


class AppState(TypedDict):
    profile: UserProfile
    eligibility: EligibilityDetails
    eligible_amount: Optional[int]
    selected_offer: Optional[LoanOffer]
    documents: List[Document]


# Fixed checklist: {id: display name}
REQUIRED_DOCUMENTS: Dict[str, str] = {
    "pan": "PAN Card",
    "aadhaar": "Aadhaar Card",
    "admission": "Admission Letter",
    "marksheet": "12th Marksheet",
}


def initial_state() -> AppState:
    """Factory — returns a clean starting state."""
    return AppState(
        profile=UserProfile(
            name="",
            pan="",
            email="",
            mobile="",
            degree_level="Master's",
            course="Computer Science",
            institute="",
        ),
        eligibility=EligibilityDetails(
            course_fee="",
            institute_tier=InstituteTier.TIER_1.value,
            parent_income="",
        ),
        eligible_amount=None,
        selected_offer=None,
        documents=[
            Document(id=doc_id, name=name, status="pending")
            for doc_id, name in REQUIRED_DOCUMENTS.items()
        ],
    )


def all_documents_uploaded(state: AppState) -> bool:
    return all(doc["status"] == "uploaded" for doc in state["documents"])


def find_document(state: AppState, doc_id: str) -> Optional[Document]:
    for doc in state["documents"]:
        if doc["id"] == doc_id:
            return doc
    return None


class AppContext:
    """Single owner of the application state."""

    def __init__(self):
        self._lock = threading.Lock()
        self._state = initial_state()

    @property
    def state(self) -> AppState:
        """Current snapshot. Treat as read-only; use the setters to change it."""
        with self._lock:
            return self._state

    def _apply(self, changes: Callable[[AppState], Dict[str, Any]]) -> AppState:
        """Compute changes from the current state and swap in a new copy."""
        with self._lock:
            new_state = copy.copy(self._state)
            new_state.update(changes(self._state))
            self._state = new_state
            return new_state

    def set_profile(self, profile: UserProfile) -> AppState:
        return self._apply(lambda s: {"profile": {**s["profile"], **profile}})

    def set_eligibility_details(self, details: EligibilityDetails) -> AppState:
        return self._apply(lambda s: {"eligibility": {**s["eligibility"], **details}})

    def set_eligible_amount(self, amount: Optional[int]) -> AppState:
        return self._apply(lambda s: {"eligible_amount": amount})

    def set_selected_offer(self, offer: Optional[LoanOffer]) -> AppState:
        return self._apply(lambda s: {"selected_offer": offer})

    def update_document(self, doc_id: str, **updates) -> AppState:
        """Merge ``updates`` into one document. Unknown ids are ignored."""
        return self._apply(lambda s: {
            "documents": [
                {**doc, **updates} if doc["id"] == doc_id else doc
                for doc in s["documents"]
            ]
        })

    def reset(self) -> AppState:
        with self._lock:
            self._state = initial_state()
            return self._state
