# jobboard/views/dashboards.py

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from jobboard.api.client import JobBoardClient
from jobboard.core.errors import JobBoardError, CredentialRequired, MalformedResponse, RequestFailed, ValidationError
from jobboard.core.match_service import MatchService, build_candidate_profile
from jobboard.core.pdf_parser import PDFParser
from jobboard.core.session_store import Session
from jobboard.models.job_models import Application, Job, MatchAnalysis, UserRole
from jobboard.views.state import ViewState

logger = logging.getLogger(__name__)


@dataclass
class ApplicationWithJob:
    application: Application
    job: Optional[Job] = None


class CandidateDashboardController:
    def __init__(self, client: JobBoardClient, session: Session):
        self.client = client
        self.session = session
        self.view = ViewState()

    @property
    def applications(self) -> List[ApplicationWithJob]:
        return self.view.data or []

    def load(self) -> List[ApplicationWithJob]:
        self.view.start()
        try:
            user = self.session.require_user()
            if user.role != UserRole.CANDIDATE or not user.name or not user.email:
                raise ValidationError("Invalid user data")
            applications = self.client.list_applications_for_candidate(user.id, user.token)
            rows = self._with_jobs(applications)
        except JobBoardError as e:
            self.view.fail(e.message)
            return []
        self.view.loaded(rows)
        return rows

    def _with_jobs(self, applications: List[Application]) -> List[ApplicationWithJob]:
        # One get_job per distinct job; the API has no batch lookup.
        jobs: Dict[str, Optional[Job]] = {}
        rows = []
        for app in applications:
            if app.job_id not in jobs:
                jobs[app.job_id] = self._job_or_none(app.job_id)
            rows.append(ApplicationWithJob(application=app, job=jobs[app.job_id]))
        return rows

    def _job_or_none(self, job_id: str) -> Optional[Job]:
        try:
            return self.client.get_job(job_id)
        except RequestFailed as e:
            # Deleted job: the application row stays, without its posting
            logger.warning("Job %s unavailable for dashboard: %s", job_id, e.message)
            return None

    def latest_cv_url(self) -> str:
        for row in self.applications:
            if row.application.cv_reference:
                return self.client.get_cv_url(row.application.cv_reference)
        return ""


class CompanyDashboardController:
    def __init__(
        self,
        client: JobBoardClient,
        session: Session,
        match_service: MatchService,
        pdf_parser: Optional[PDFParser] = None,
    ):
        self.client = client
        self.session = session
        self.match_service = match_service
        self.pdf_parser = pdf_parser or PDFParser()
        self.view = ViewState()
        self.jobs: List[Job] = []
        self.ai_ready = match_service.is_configured
        self.analyzing = False
        self.selected: Optional[Application] = None
        self.analysis: Optional[MatchAnalysis] = None

    @property
    def applications(self) -> List[Application]:
        return self.view.data or []

    def load(self) -> List[Application]:
        self.view.start()
        try:
            user = self.session.require_user()
            if user.role != UserRole.COMPANY or not user.name:
                raise ValidationError("Invalid user data")
            jobs = self.client.get_company_jobs(user.id, user.token)
            applications: List[Application] = []
            for job in jobs:
                applications.extend(self.client.list_applications_for_job(job.id, user.token))
        except JobBoardError as e:
            self.view.fail(e.message)
            return []
        self.jobs = jobs
        self.view.loaded(applications)
        return applications

    def configure_ai(self, api_key: str) -> bool:
        self.match_service.api_key = api_key
        self.ai_ready = self.match_service.is_configured
        if not self.ai_ready:
            self.view.fail("No valid AI API key configured")
        return self.ai_ready

    def find_job(self, job_id: str) -> Optional[Job]:
        return next((j for j in self.jobs if j.id == job_id), None)

    def analyze(self, application: Application) -> Optional[MatchAnalysis]:
        self.selected = application
        self.analysis = None
        self.view.error = None
        self.analyzing = True
        try:
            if not application.id or not application.candidate_name or not application.job_id:
                raise ValidationError("Invalid application data")
            job = self.find_job(application.job_id)
            if job is None:
                raise ValidationError("Job not found")
            if not self.match_service.is_configured:
                raise CredentialRequired()

            profile = build_candidate_profile(application, self._cv_text(application), job)
            result = self.match_service.analyze_match(job, profile)
            if result is None:
                raise MalformedResponse("Invalid response format")
        except CredentialRequired:
            self.ai_ready = False
            self.view.fail("Please configure your AI API key")
            return None
        except JobBoardError as e:
            self.view.fail(e.message)
            return None
        finally:
            self.analyzing = False

        self.analysis = result
        return result

    def _cv_text(self, application: Application) -> str:
        url = self.client.get_cv_url(application.cv_reference)
        if not url:
            return ""
        try:
            return self.pdf_parser.extract_text(self.client.download_cv(url))
        except JobBoardError as e:
            # The analysis still runs on the application data alone
            logger.warning("CV text unavailable for application %s: %s", application.id, e.message)
            return ""
