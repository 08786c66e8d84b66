"""FastAPI entrypoint — exposes the ScholarLoan journey via REST."""

import logging
from typing import Optional

from fastapi import FastAPI, File, HTTPException, Query, Response, UploadFile
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from assistant.base import transcript
from assistant.gemini import GeminiChatAssistant, GeminiDocumentExtractor
from config import HOST, LOG_LEVEL, PORT
from engine.amortization import MAX_TENURE_YEARS, PlanKind
from engine.offers import OfferFilter
from engine.prepayment import PrepaymentSimulationInput
from errors import SessionNotFoundError
from journey.navigator import JourneyStep
from journey.session import JourneySession
from workers.session_store import SessionStore

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


def default_session() -> JourneySession:
    return JourneySession(extractor=GeminiDocumentExtractor(), assistant=GeminiChatAssistant())


# ── App + sessions ──────────────────────────────────────────────────────
app = FastAPI(title="ScholarLoan", version="1.0.0")
store = SessionStore(default_session)


# ── Request models ──────────────────────────────────────────────────────
class AdvanceRequest(BaseModel):
    step: JourneyStep


class ProfileRequest(BaseModel):
    name: Optional[str] = None
    pan: Optional[str] = None
    email: Optional[str] = None
    mobile: Optional[str] = None
    degree_level: Optional[str] = None
    course: Optional[str] = None
    institute: Optional[str] = None


class EligibilityRequest(BaseModel):
    course_fee: Optional[float] = None
    institute_tier: Optional[str] = None
    parent_income: Optional[float] = None


class ChatRequest(BaseModel):
    message: str


# ── Helpers ─────────────────────────────────────────────────────────────
def _session(session_id: str) -> JourneySession:
    try:
        return store.get(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(404, str(e))


def _position(session_id: str, session: JourneySession) -> dict:
    nav = session.navigator
    return {
        "session_id": session_id,
        "step": nav.current.name,
        "history": [s.name for s in nav.history],
        "show_header": nav.show_header,
        "show_back_button": nav.show_back_button,
    }


# ── Navigation ──────────────────────────────────────────────────────────
@app.post("/journey/start")
def start_journey():
    """Create a new application session at onboarding."""
    session_id, session = store.create()
    logger.info(f"Started journey {session_id}")
    return _position(session_id, session)


@app.get("/journey/{session_id}")
def get_journey(session_id: str):
    session = _session(session_id)
    return {**_position(session_id, session), "state": session.state}


@app.post("/journey/{session_id}/advance")
def advance(session_id: str, req: AdvanceRequest):
    session = _session(session_id)
    session.advance(req.step)
    return _position(session_id, session)


@app.post("/journey/{session_id}/back")
def go_back(session_id: str):
    session = _session(session_id)
    session.go_back()
    return _position(session_id, session)


@app.post("/journey/{session_id}/home")
def go_home(session_id: str):
    session = _session(session_id)
    session.go_home()
    return _position(session_id, session)


@app.delete("/journey/{session_id}")
def end_journey(session_id: str):
    _session(session_id)
    store.drop(session_id)
    return {"session_id": session_id, "ended": True}


# ── Screens ─────────────────────────────────────────────────────────────
@app.post("/journey/{session_id}/profile")
def submit_profile(session_id: str, req: ProfileRequest):
    session = _session(session_id)
    errors = session.submit_profile(req.model_dump(exclude_none=True))
    return {
        **_position(session_id, session),
        "sub_step": session.profile_sub_step,
        "errors": errors,
        "profile": session.state["profile"],
    }


@app.post("/journey/{session_id}/eligibility")
def check_eligibility(session_id: str, req: EligibilityRequest):
    session = _session(session_id)
    errors, result = session.check_eligibility(req.model_dump(exclude_none=True))
    return {**_position(session_id, session), "errors": errors, "result": result}


@app.get("/journey/{session_id}/offers")
def list_offers(session_id: str, offer_filter: OfferFilter = Query(OfferFilter.ALL, alias="filter")):
    session = _session(session_id)
    return {"offers": session.offers(offer_filter)}


@app.post("/journey/{session_id}/offers/{offer_id}/select")
def select_offer(session_id: str, offer_id: int):
    session = _session(session_id)
    try:
        offer = session.choose_offer(offer_id)
    except KeyError:
        raise HTTPException(404, f"Offer {offer_id} not found.")
    return {**_position(session_id, session), "offer": offer}


@app.post("/journey/{session_id}/documents/{doc_id}")
async def upload_document(session_id: str, doc_id: str, file: UploadFile = File(...)):
    """Upload one checklist document; failures come back on the document."""
    session = _session(session_id)
    payload = await file.read()
    try:
        document = await run_in_threadpool(session.upload_document, doc_id, payload, file.content_type or "")
    except KeyError:
        raise HTTPException(404, f"Document {doc_id} not found.")
    return {"document": document, "documents": session.state["documents"]}


@app.post("/journey/{session_id}/submit")
def submit_application(session_id: str):
    session = _session(session_id)
    if not session.submit_application():
        raise HTTPException(409, "All documents must be uploaded before submitting.")
    return _position(session_id, session)


@app.get("/journey/{session_id}/sanction")
def sanction_status(session_id: str):
    session = _session(session_id)
    return {"approved": session.sanction_approved()}


@app.post("/journey/{session_id}/disbursal")
def track_disbursal(session_id: str):
    session = _session(session_id)
    session.track_disbursal()
    return _position(session_id, session)


@app.get("/journey/{session_id}/disbursal")
def disbursal_status(session_id: str):
    session = _session(session_id)
    timeline, complete = session.disbursal_status()
    return {"timeline": timeline, "complete": complete}


@app.get("/journey/{session_id}/repayment")
def repayment(
    session_id: str,
    tenure: Optional[int] = Query(None, gt=0, le=MAX_TENURE_YEARS),
    plan: PlanKind = PlanKind.BALANCED,
    one_time: float = 0,
    extra_monthly: float = 0,
):
    session = _session(session_id)
    try:
        prepayment = PrepaymentSimulationInput(one_time_amount=one_time, extra_monthly_amount=extra_monthly)
    except ValueError as e:
        raise HTTPException(422, str(e))
    view = session.repayment(tenure, plan, prepayment)
    # model_dump_json keeps the unbounded sentinels as "Infinity" strings
    return Response(view.model_dump_json(), media_type="application/json")


@app.get("/journey/{session_id}/dashboard")
def dashboard(session_id: str):
    return _session(session_id).dashboard()


@app.post("/journey/{session_id}/chat")
def chat(session_id: str, req: ChatRequest):
    session = _session(session_id)
    reply = session.chat(req.message)
    return {"reply": reply, "history": transcript(session.chat_history)}


# ── Run ─────────────────────────────────────────────────────────────────
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=HOST, port=PORT, reload=True)
