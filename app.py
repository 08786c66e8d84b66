"""Streamlit UI — the ScholarLoan application wizard."""

import streamlit as st

from assistant.gemini import GeminiChatAssistant, GeminiDocumentExtractor, clear_llm_instances
from engine.amortization import TENURE_OPTIONS, PlanKind
from engine.eligibility import COURSE_FEE_OPTIONS, PARENT_INCOME_OPTIONS, InstituteTier
from engine.offers import OfferFilter
from engine.prepayment import PayoffOutcome, PrepaymentSimulationInput
from journey.milestones import SANCTION_NEXT_STEPS
from journey.navigator import JourneyStep
from journey.session import JourneySession
from journey.validation import DEGREE_LEVELS, PROFILE_SUB_STEPS, search_institutes

# ── Page config ─────────────────────────────────────────────────────────
st.set_page_config(page_title="ScholarLoan", page_icon="🎓", layout="centered")

st.markdown("""
<style>
    .stApp { max-width: 900px; margin: 0 auto; }
    .doc-chip {
        display: inline-block; padding: 3px 10px; border-radius: 8px;
        margin: 2px 4px; font-size: 0.78em; font-weight: 500;
    }
    .doc-pending   { background: #FEF3C7; color: #92400E; }
    .doc-uploading { background: #DBEAFE; color: #1E40AF; }
    .doc-uploaded  { background: #D1FAE5; color: #065F46; }
    .doc-error     { background: #FEE2E2; color: #991B1B; }
</style>
""", unsafe_allow_html=True)


# ── Session state init ──────────────────────────────────────────────────
def _init_session():
    if "journey" not in st.session_state:
        st.session_state.journey = JourneySession(
            extractor=GeminiDocumentExtractor(),
            assistant=GeminiChatAssistant(),
        )
        st.session_state.eligibility_result = None


_init_session()
journey: JourneySession = st.session_state.journey


def rupees(amount) -> str:
    return f"₹{amount:,.0f}"


# ── Header ──────────────────────────────────────────────────────────────
def render_header():
    nav = journey.navigator
    if not nav.show_header:
        return
    cols = st.columns([1, 4, 1])
    if nav.show_back_button and cols[0].button("← Back"):
        journey.go_back()
        st.rerun()
    cols[1].caption(f"Step {int(nav.current) + 1} of {len(JourneyStep)} — {nav.current.title}")
    if cols[2].button("🏠 Home"):
        journey.go_home()
        st.rerun()


# ── Screens ─────────────────────────────────────────────────────────────
def onboarding_screen():
    st.title("🎓 ScholarLoan")
    st.write("Education loans made simple, transparent and fast.")
    if st.button("Start New Application", type="primary", use_container_width=True):
        journey.start_application()
        st.rerun()
    if st.button("Existing User Login", use_container_width=True):
        journey.start_application()
        st.rerun()
    st.caption("By continuing, you agree to our Terms of Service and Privacy Policy.")


def profile_screen():
    profile = journey.state["profile"]
    sub_step = journey.profile_sub_step
    st.subheader("Tell us about yourself")
    st.progress(sub_step / PROFILE_SUB_STEPS, text=f"Part {sub_step} of {PROFILE_SUB_STEPS}")

    with st.form(f"profile-{sub_step}"):
        if sub_step == 1:
            fields = {
                "name": st.text_input("Full name (as on PAN)", profile.get("name", "")),
                "pan": st.text_input("PAN number", profile.get("pan", "")),
            }
        elif sub_step == 2:
            fields = {
                "email": st.text_input("Email", profile.get("email", "")),
                "mobile": st.text_input("Mobile number", profile.get("mobile", "")),
            }
        else:
            level = profile.get("degree_level") or DEGREE_LEVELS[1]
            term = st.text_input("Institute", profile.get("institute", ""))
            matches = search_institutes(term) if term else []
            fields = {
                "degree_level": st.selectbox("Degree level", DEGREE_LEVELS, index=DEGREE_LEVELS.index(level)),
                "course": st.text_input("Field of study", profile.get("course", "")),
                "institute": st.selectbox("Matching institutes", matches) if matches else term,
            }
        submitted = st.form_submit_button("Next", type="primary")

    if st.button("Previous"):
        journey.previous_profile_step()
        st.rerun()
    if submitted:
        errors = journey.submit_profile(fields)
        if errors:
            for message in errors.values():
                st.error(message)
        else:
            st.rerun()


def eligibility_screen():
    st.subheader("Check your eligibility")
    result = st.session_state.eligibility_result
    if result is not None:
        if result.eligible:
            st.success(f"You're eligible for up to {rupees(result.amount)}!")
            if st.button("View My Offers", type="primary", use_container_width=True):
                st.session_state.eligibility_result = None
                journey.view_offers()
                st.rerun()
        else:
            st.warning("We couldn't find a loan for these details right now.")
            if st.button("Go Back & Edit", use_container_width=True):
                st.session_state.eligibility_result = None
                journey.go_back()
                st.rerun()
        return

    fee = st.selectbox("Course fee", COURSE_FEE_OPTIONS, format_func=lambda o: o[0], index=None)
    tier = st.selectbox("Institute tier", [t.value for t in InstituteTier])
    income = st.selectbox("Parent's annual income", PARENT_INCOME_OPTIONS, format_func=lambda o: o[0], index=None)
    if st.button("Check Eligibility", type="primary", use_container_width=True):
        errors, result = journey.check_eligibility({
            "course_fee": fee[1] if fee else "",
            "institute_tier": tier,
            "parent_income": income[1] if income else "",
        })
        if errors:
            for field, message in errors.items():
                st.error(f"{field.replace('_', ' ').title()}: {message}")
        else:
            st.session_state.eligibility_result = result
            st.rerun()


def offers_screen():
    st.subheader("Your Personalized Offers")
    labels = {OfferFilter.ALL: "All", OfferFilter.NO_COLLATERAL: "Without Collateral",
              OfferFilter.COLLATERAL: "With Collateral"}
    choice = st.radio("Show", list(labels), format_func=labels.get, horizontal=True)
    for offer in journey.offers(choice):
        with st.container(border=True):
            if offer.is_popular:
                st.caption("✨ Popular Choice")
            st.markdown(f"### {offer.name}")
            st.write("With Collateral" if offer.collateral_required else "Without Collateral")
            cols = st.columns(4)
            cols[0].metric("Max Amount", rupees(offer.amount))
            cols[1].metric("Starting EMI", rupees(offer.emi))
            cols[2].metric("Tenure", f"{offer.tenure_years} yrs")
            cols[3].metric("Interest", f"{offer.interest_rate_percent}%")
            st.caption(f"Moratorium: {offer.moratorium_description} · {offer.special_offer_text}")
            if st.button("Choose This Offer", key=f"offer-{offer.id}", use_container_width=True):
                journey.choose_offer(offer.id)
                st.rerun()


def application_screen():
    st.subheader("Upload your documents")
    for doc in journey.state["documents"]:
        status = doc["status"]
        st.markdown(f'<span class="doc-chip doc-{status}">{doc["name"]}: {status}</span>',
                    unsafe_allow_html=True)
        if doc.get("error"):
            st.error(doc["error"])
        for label, value in (doc.get("extracted_data") or {}).items():
            st.caption(f"{label}: {value}")
        upload = st.file_uploader(doc["name"], type=["jpg", "jpeg", "png", "pdf"], key=f"file-{doc['id']}")
        if upload is not None and st.button(f"Upload {doc['name']}", key=f"upload-{doc['id']}"):
            with st.spinner("Reading your document..."):
                journey.upload_document(doc["id"], upload.getvalue(), upload.type)
            st.rerun()

    if st.button("Submit Application", type="primary", use_container_width=True):
        if journey.submit_application():
            st.rerun()
        else:
            st.warning("Please upload all documents first.")


def sanction_screen():
    if not journey.sanction_approved():
        st.info("Your application is being reviewed...")
        if st.button("Refresh"):
            st.rerun()
        return
    st.success("🎉 Congratulations! Your loan is sanctioned.")
    for item in SANCTION_NEXT_STEPS:
        st.write(f"• {item}")
    if st.button("Track Disbursal", type="primary", use_container_width=True):
        journey.track_disbursal()
        st.rerun()


def disbursal_screen():
    st.subheader("Disbursal Status")
    timeline, complete = journey.disbursal_status()
    for entry in timeline:
        mark = "✅" if entry["reached"] else "⬜"
        st.write(f"{mark} **{entry['title']}** — {entry['detail']}")
    if not complete:
        if st.button("Refresh"):
            st.rerun()
        return
    if st.button("Plan Your Repayment", type="primary", use_container_width=True):
        journey.plan_repayment()
        st.rerun()
    if st.button("Go to Dashboard", use_container_width=True):
        journey.open_dashboard()
        st.rerun()


def repayment_screen():
    st.subheader("Plan Your Repayment")
    default = journey.repayment()
    tenure = st.selectbox("Repayment Tenure (years)", TENURE_OPTIONS,
                          index=TENURE_OPTIONS.index(default.tenure_years))
    kind = st.radio("Payment Plan", list(PlanKind), format_func=lambda k: k.display_name, horizontal=True)
    one_time = st.number_input("One-Time Prepayment (Today)", min_value=0, step=10_000)
    extra = st.number_input("Extra Monthly Payment", min_value=0, step=1_000)

    view = journey.repayment(tenure, kind, PrepaymentSimulationInput(
        one_time_amount=one_time, extra_monthly_amount=extra,
    ))
    for plan in view.plans:
        interest = rupees(plan.total_interest) if plan.amortizes else "Never repaid"
        months = plan.total_months if plan.total_months is not None else "∞"
        st.write(f"**{plan.kind.display_name}** — EMI {rupees(plan.emi)} · interest {interest} · {months} months")
        st.caption(plan.kind.description)

    sim = view.simulation
    if sim is not None:
        if sim.outcome is PayoffOutcome.NEVER_PAID_OFF:
            st.error("With these payments the loan is never paid off.")
        else:
            st.success(f"New tenure: {sim.describe()} · Interest saved: {sim.savings_label()}")

    if st.button("Go to My Dashboard", type="primary", use_container_width=True):
        journey.open_dashboard()
        st.rerun()


def dashboard_screen():
    summary = journey.dashboard()
    st.subheader(f"Hello, {summary.user_name}!")
    st.caption("Here's a summary of your education loan.")
    st.progress(summary.progress_percent / 100,
                text=f"Paid {rupees(summary.amount_paid)} of {rupees(summary.total_amount)}")
    st.metric("Next EMI due", rupees(summary.next_emi), help=f"on {summary.next_emi_due}")

    st.markdown("#### 24/7 Help Assistant")
    for msg in journey.chat_history:
        with st.chat_message("user" if msg.sender == "user" else "assistant"):
            st.markdown(msg.text)
    if question := st.chat_input("Ask a question..."):
        journey.chat(question)
        st.rerun()


SCREENS = {
    JourneyStep.ONBOARDING: onboarding_screen,
    JourneyStep.PROFILE_SETUP: profile_screen,
    JourneyStep.ELIGIBILITY_CHECK: eligibility_screen,
    JourneyStep.OFFER_DISCOVERY: offers_screen,
    JourneyStep.APPLICATION_FLOW: application_screen,
    JourneyStep.SANCTION_APPROVAL: sanction_screen,
    JourneyStep.DISBURSAL_EXPERIENCE: disbursal_screen,
    JourneyStep.REPAYMENT_PLANNING: repayment_screen,
    JourneyStep.DASHBOARD: dashboard_screen,
}


# ── Sidebar ─────────────────────────────────────────────────────────────
with st.sidebar:
    st.markdown("### 🎓 Loan Journey")
    st.caption(f"Current: {journey.step.title}")
    offer = journey.state["selected_offer"]
    if offer:
        st.caption(f"Offer: {offer.name} · {rupees(offer.amount)}")
    if st.button("🔄 Reset"):
        journey.reset()
        clear_llm_instances()
        for key in list(st.session_state.keys()):
            del st.session_state[key]
        st.rerun()


# ── Main ────────────────────────────────────────────────────────────────
render_header()
SCREENS.get(journey.step, onboarding_screen)()
