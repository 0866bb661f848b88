# frontend/streamlit_app.py

import logging
import streamlit as st

from jobboard.config import settings
from jobboard.api.client import JobBoardClient
from jobboard.core.match_service import MatchService
from jobboard.core.session_store import Session, SessionStore, select_storage
from jobboard.core.upload_workflow import CVFile
from jobboard.models.job_models import ContractType, UserRole
from jobboard.views.auth import LoginController, RegisterController
from jobboard.views.dashboards import CandidateDashboardController, CompanyDashboardController
from jobboard.views.jobs import JobBoardController, JobDetailController, CreateJobController
from jobboard.views.state import ViewState, ViewStatus

logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

st.set_page_config(page_title="💼 Job Board", layout="wide")

client = JobBoardClient()

STATUS_LABELS = {
    "pending": "🟡 Pending",
    "reviewed": "🔵 Reviewed",
    "accepted": "🟢 Accepted",
    "rejected": "🔴 Rejected",
}

LOCATIONS = ["Agadir", "Taghazout", "Inezgane", "Tiznit", "Taroudant"]

# ---------- Session state ----------
def _session() -> Session:
    if "session" not in st.session_state:
        st.session_state.session = Session.open(SessionStore(select_storage(st.session_state)))
    return st.session_state.session

def _controller(name: str, factory):
    """Controllers live as long as the browser session, like the page state they hold."""
    if name not in st.session_state:
        st.session_state[name] = factory()
    return st.session_state[name]

def _go(page: str):
    st.session_state.page = page
    st.rerun()

def _render_error(view: ViewState, key: str):
    if view.error:
        c_msg, c_close = st.columns([10, 1])
        with c_msg:
            st.error(view.error)
        with c_close:
            if st.button("✖", key=f"dismiss_{key}"):
                view.dismiss_error()
                st.rerun()

session = _session()

# ---------- Navigation ----------
pages = ["Jobs"]
if session.has_role(UserRole.CANDIDATE):
    pages.append("My applications")
elif session.has_role(UserRole.COMPANY):
    pages += ["Recruiter dashboard", "Publish a job"]
if not session.is_authenticated:
    pages += ["Login", "Register"]

if st.session_state.get("page") not in pages + ["Job detail"]:
    st.session_state.page = "Jobs"

with st.sidebar:
    st.title("💼 Job Board")
    st.caption(f"Backend: {client.base_url}")
    # "Job detail" is reached from a job card, not from the menu
    nav_page = st.session_state.page if st.session_state.page in pages else "Jobs"
    choice = st.radio("Navigate", pages, index=pages.index(nav_page))
    if choice != nav_page:
        st.session_state.page = choice
    if session.is_authenticated:
        st.write(f"Signed in as **{session.user.name or session.user.email}**")
        if st.button("Log out"):
            session.logout()
            for key in ("candidate_dashboard", "company_dashboard", "job_detail"):
                st.session_state.pop(key, None)
            _go("Jobs")

page = st.session_state.page

# ---------- Pages ----------
def page_jobs():
    ctl = _controller("job_board", lambda: JobBoardController(client))
    st.header("🔎 Job offers")
    if ctl.view.status == ViewStatus.IDLE or st.button("Refresh"):
        with st.spinner("Loading offers..."):
            ctl.load()
    _render_error(ctl.view, "jobs")

    query = st.text_input("Search", placeholder="Position, company, location...")
    jobs = ctl.filter(query)
    if ctl.view.status in (ViewStatus.LOADED, ViewStatus.EMPTY) and not jobs:
        st.info("No offers match your search.")
    for job in jobs:
        with st.container(border=True):
            c_left, c_right = st.columns([5, 1])
            with c_left:
                st.subheader(job.title)
                st.write(f"🏢 {job.company_name}  ·  📍 {job.location}  ·  *{job.contract_type.value}*")
            with c_right:
                if st.button("View", key=f"view_{job.id}", use_container_width=True):
                    st.session_state.selected_job_id = job.id
                    _go("Job detail")

def page_job_detail():
    ctl = _controller("job_detail", lambda: JobDetailController(client, session))
    job_id = st.session_state.get("selected_job_id")
    if not job_id:
        _go("Jobs")
    if ctl.job is None or ctl.job.id != job_id:
        with st.spinner("Loading..."):
            ctl.load(job_id)

    if st.button("← Back to offers"):
        _go("Jobs")
    _render_error(ctl.view, "job_detail")
    job = ctl.job
    if job is None:
        st.warning("Job not found")
        return

    col_main, col_apply = st.columns([2, 1])
    with col_main:
        st.caption(job.contract_type.value)
        st.title(job.title)
        st.write(f"🏢 {job.company_name}  ·  📍 {job.location}")
        if job.salary:
            st.write(f"💰 {job.salary}")
        st.subheader("Job description")
        st.write(job.description)
        st.subheader("Required skills")
        st.write("  ".join(f"`{req}`" for req in job.requirements) or "_None listed_")

    with col_apply:
        result = ctl.upload.last_result
        if result is not None and result.ok:
            st.success("✅ Application sent! The company has received your CV. Good luck!")
            return

        st.subheader("📨 Apply now")
        uploaded = st.file_uploader("Your CV (PDF, max 5 MB)", type=["pdf"], key=f"cv_{job.id}")
        if result is not None and result.error:
            st.error(result.message)
        if st.button("Send my application", disabled=ctl.upload.in_flight, use_container_width=True):
            if not session.is_authenticated:
                _go("Login")
            with st.spinner("Sending your application..."):
                ctl.apply(CVFile.from_upload(uploaded))
            st.rerun()
        st.caption("By applying you agree that an AI model analyses your CV to help the recruiter.")

def page_login():
    ctl = _controller("login", lambda: LoginController(client, session))
    st.header("🔐 Login")
    with st.form("login_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in")
    if submitted:
        with st.spinner("Signing in..."):
            user = ctl.submit(email, password)
        if user is not None:
            _go("My applications" if user.role == UserRole.CANDIDATE else "Recruiter dashboard")
    _render_error(ctl.view, "login")

def page_register():
    ctl = _controller("register", lambda: RegisterController(client, session))
    st.header("📝 Create an account")
    role_label = st.radio("I am", ["A candidate looking for a job", "A company hiring"], horizontal=True)
    role = UserRole.CANDIDATE if role_label.startswith("A candidate") else UserRole.COMPANY
    with st.form("register_form"):
        name = st.text_input("Name")
        email = st.text_input("Email")
        password = st.text_input("Password", type="password", help="At least 8 characters")
        submitted = st.form_submit_button("Sign up")
    if submitted:
        with st.spinner("Creating your account..."):
            user = ctl.submit(role, name, email, password)
        if user is not None:
            _go("My applications" if user.role == UserRole.CANDIDATE else "Recruiter dashboard")
    _render_error(ctl.view, "register")

def page_candidate_dashboard():
    ctl = _controller("candidate_dashboard", lambda: CandidateDashboardController(client, session))
    st.header("📋 My applications")
    if ctl.view.status == ViewStatus.IDLE or st.button("Refresh"):
        with st.spinner("Loading your applications..."):
            ctl.load()
    _render_error(ctl.view, "candidate")

    col_apps, col_profile = st.columns([2, 1])
    with col_apps:
        if ctl.view.status == ViewStatus.EMPTY:
            st.info("You have not applied to any offer yet.")
        for row in ctl.applications:
            app, job = row.application, row.job
            with st.container(border=True):
                st.subheader(job.title if job else "Title unavailable")
                st.write(f"🏢 {job.company_name if job else 'Unknown company'}"
                         + (f"  ·  📍 {job.location}" if job and job.location else ""))
                st.write(f"{STATUS_LABELS.get(app.status.value, app.status.value)}  ·  applied {app.applied_at[:10] or 'on an unknown date'}")
    with col_profile:
        st.subheader("👤 My profile")
        st.write(f"**{session.user.name}**")
        st.write(session.user.email)
        cv_url = ctl.latest_cv_url()
        if cv_url:
            st.link_button("Open my latest CV", cv_url)
        else:
            st.caption("No CV available")

def page_company_dashboard():
    ctl = _controller(
        "company_dashboard",
        lambda: CompanyDashboardController(client, session, MatchService()),
    )
    st.header("🏢 Recruiter dashboard")
    st.caption(f"Welcome, {session.user.name}. Manage your talents.")
    if ctl.view.status == ViewStatus.IDLE or st.button("Refresh"):
        with st.spinner("Loading the dashboard..."):
            ctl.load()
    _render_error(ctl.view, "company")

    if not ctl.ai_ready:
        with st.expander("⚠️ Configure the AI", expanded=True):
            key = st.text_input("AI API key", type="password")
            if st.button("Save key"):
                ctl.configure_ai(key)
                st.rerun()

    col_apps, col_ai = st.columns([2, 1])
    with col_apps:
        st.metric("Applications", len(ctl.applications))
        if ctl.view.status == ViewStatus.EMPTY:
            st.info("Applications will show up here as soon as they are received.")
        for app in ctl.applications:
            if not app.id or not app.candidate_name:
                continue
            c_name, c_cv, c_status, c_ai = st.columns([3, 1, 2, 1])
            with c_name:
                st.write(f"**{app.candidate_name}**")
                st.caption(app.candidate_email or "No email provided")
            with c_cv:
                cv_url = client.get_cv_url(app.cv_reference)
                if cv_url:
                    st.link_button("PDF", cv_url)
                else:
                    st.caption("No CV")
            with c_status:
                st.write(STATUS_LABELS.get(app.status.value, app.status.value))
            with c_ai:
                if st.button("🧠", key=f"analyze_{app.id}", disabled=ctl.analyzing, help="Analyse with AI"):
                    with st.spinner("The AI is analysing the profile..."):
                        ctl.analyze(app)
                    st.rerun()

    with col_ai:
        st.subheader("🧠 Smart match analysis")
        analysis = ctl.analysis
        if analysis is None:
            st.caption("Click the brain icon of a candidate to see the AI analysis.")
            return
        st.write(f"**{ctl.selected.candidate_name if ctl.selected else ''}**")
        st.metric("Score", f"{analysis.score:.0f}%")
        st.write(f"_\"{analysis.feedback}\"_")
        st.markdown("**Strengths**")
        st.markdown("\n".join(f"- ✅ {p}" for p in analysis.pros) or "_No strengths identified_")
        st.markdown("**Gaps**")
        st.markdown("\n".join(f"- ❌ {c}" for c in analysis.cons) or "_No gaps identified_")

def page_publish_job():
    ctl = _controller("create_job", lambda: CreateJobController(client, session))
    st.header("📢 Publish a job")
    if "requirement_count" not in st.session_state:
        st.session_state.requirement_count = 1
    title = st.text_input("Job title", placeholder="e.g. Senior React Developer")
    c1, c2 = st.columns(2)
    with c1:
        location = st.selectbox("Location", LOCATIONS)
    with c2:
        contract_type = st.selectbox("Contract type", [c.value for c in ContractType])
    salary = st.text_input("Salary (optional)")
    description = st.text_area("Description", height=200, placeholder="Describe the missions, the company and expectations...")
    st.markdown("**Required skills**")
    requirements = [
        st.text_input(f"Skill {i + 1}", key=f"req_{i}", placeholder="e.g. React.js")
        for i in range(st.session_state.requirement_count)
    ]
    c_add, c_remove = st.columns(2)
    with c_add:
        if st.button("➕ Add a skill"):
            st.session_state.requirement_count += 1
            st.rerun()
    with c_remove:
        if st.session_state.requirement_count > 1 and st.button("🗑️ Remove last"):
            st.session_state.requirement_count -= 1
            st.rerun()

    if st.button("Publish", type="primary", disabled=ctl.view.is_loading):
        with st.spinner("Publishing..."):
            job = ctl.submit(title, location, ContractType(contract_type), description, requirements, salary)
        if job is not None:
            st.session_state.pop("company_dashboard", None)
            _go("Recruiter dashboard")
    _render_error(ctl.view, "create_job")


PAGES = {
    "Jobs": page_jobs,
    "Job detail": page_job_detail,
    "Login": page_login,
    "Register": page_register,
    "My applications": page_candidate_dashboard,
    "Recruiter dashboard": page_company_dashboard,
    "Publish a job": page_publish_job,
}

PAGES[page]()
