# jobboard/views/jobs.py

import logging
from typing import List, Optional

from jobboard.api.client import JobBoardClient
from jobboard.core.errors import JobBoardError, ValidationError, LoginRequired
from jobboard.core.session_store import Session
from jobboard.core.upload_workflow import ApplicationUpload, CVFile, UploadResult
from jobboard.models.job_models import Job, NewJob, ContractType, UserRole
from jobboard.views.state import ViewState

logger = logging.getLogger(__name__)

MIN_TITLE_LENGTH = 5
MIN_DESCRIPTION_LENGTH = 20


def filter_jobs(jobs: List[Job], query: str) -> List[Job]:
    """Case-insensitive substring match on title, company name or location."""
    q = (query or "").strip().lower()
    if not q:
        return list(jobs)
    return [
        j for j in jobs
        if q in (j.title or "").lower()
        or q in (j.company_name or "").lower()
        or q in (j.location or "").lower()
    ]


class JobBoardController:
    def __init__(self, client: JobBoardClient):
        self.client = client
        self.view = ViewState()

    def load(self) -> List[Job]:
        self.view.start()
        try:
            jobs = self.client.list_jobs()
        except JobBoardError as e:
            self.view.fail(e.message)
            return []
        self.view.loaded(jobs)
        return jobs

    def filter(self, query: str) -> List[Job]:
        return filter_jobs(self.view.data or [], query)


class JobDetailController:
    def __init__(self, client: JobBoardClient, session: Session, upload: Optional[ApplicationUpload] = None):
        self.client = client
        self.session = session
        self.upload = upload or ApplicationUpload(client)
        self.view = ViewState()

    @property
    def job(self) -> Optional[Job]:
        return self.view.data

    def load(self, job_id: str) -> Optional[Job]:
        self.view.start()
        self.upload.reset()
        try:
            job = self.client.get_job(job_id)
        except JobBoardError as e:
            self.view.fail(e.message)
            return None
        self.view.loaded(job)
        return job

    def apply(self, cv_file: Optional[CVFile]) -> UploadResult:
        job_id = self.job.id if self.job else ""
        return self.upload.submit(self.session.user, job_id, cv_file)


class CreateJobController:
    def __init__(self, client: JobBoardClient, session: Session):
        self.client = client
        self.session = session
        self.view = ViewState()

    @staticmethod
    def validate(title: str, description: str, requirements: List[str]) -> None:
        if not title or not description:
            raise ValidationError("Title and description are required")
        if any(not req.strip() for req in requirements):
            raise ValidationError("Every skill must be filled in")
        if len(title) < MIN_TITLE_LENGTH:
            raise ValidationError(f"The title must be at least {MIN_TITLE_LENGTH} characters long")
        if len(description) < MIN_DESCRIPTION_LENGTH:
            raise ValidationError(f"The description must be at least {MIN_DESCRIPTION_LENGTH} characters long")

    def submit(
        self,
        title: str,
        location: str,
        contract_type: ContractType,
        description: str,
        requirements: List[str],
        salary: Optional[str] = None,
    ) -> Optional[Job]:
        self.view.start()
        try:
            user = self.session.require_user()
            if user.role != UserRole.COMPANY:
                raise LoginRequired("Only companies can publish jobs")
            self.validate(title, description, requirements)
            new_job = NewJob(
                title=title.strip(),
                location=location,
                contract_type=ContractType(contract_type),
                description=description.strip(),
                requirements=[req.strip() for req in requirements],
                salary=salary or None,
            )
            job = self.client.create_job(new_job, user.token)
        except JobBoardError as e:
            self.view.fail(e.message)
            return None
        logger.info("Published job %s", job.id)
        self.view.loaded(job)
        return job
