# jobboard/core/upload_workflow.py

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional, List, Dict, Set

from jobboard.api.client import JobBoardClient
from jobboard.core.errors import (
    JobBoardError,
    ValidationError,
    LoginRequired,
    SubmissionInProgress,
)
from jobboard.models.job_models import User, UserRole, Application, ApplicationSubmission

logger = logging.getLogger(__name__)

MAX_CV_BYTES = 5 * 1024 * 1024


class UploadState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    REQUESTING_UPLOAD_TARGET = "requesting_upload_target"
    UPLOADING = "uploading"
    SUBMITTING_APPLICATION = "submitting_application"
    SUCCEEDED = "succeeded"
    ERROR = "error"


_TRANSITIONS: Dict[UploadState, Set[UploadState]] = {
    UploadState.IDLE: {UploadState.VALIDATING},
    UploadState.VALIDATING: {UploadState.REQUESTING_UPLOAD_TARGET, UploadState.ERROR},
    UploadState.REQUESTING_UPLOAD_TARGET: {UploadState.UPLOADING, UploadState.ERROR},
    UploadState.UPLOADING: {UploadState.SUBMITTING_APPLICATION, UploadState.ERROR},
    UploadState.SUBMITTING_APPLICATION: {UploadState.SUCCEEDED, UploadState.ERROR},
    UploadState.SUCCEEDED: {UploadState.IDLE},
    UploadState.ERROR: {UploadState.IDLE},
}


@dataclass
class CVFile:
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_upload(cls, uploaded) -> Optional["CVFile"]:
        """Adapt a Streamlit UploadedFile (name / type / getvalue())."""
        if uploaded is None:
            return None
        return cls(filename=uploaded.name, content_type=uploaded.type or "", data=uploaded.getvalue())


@dataclass
class UploadResult:
    state: UploadState
    application: Optional[Application] = None
    file_key: Optional[str] = None
    error: Optional[JobBoardError] = None

    @property
    def ok(self) -> bool:
        return self.state == UploadState.SUCCEEDED

    @property
    def message(self) -> str:
        return self.error.message if self.error else ""


def validate_cv_file(cv_file: Optional[CVFile]) -> CVFile:
    if cv_file is None:
        raise ValidationError("CV required")
    if "pdf" not in (cv_file.content_type or "").lower():
        raise ValidationError("Please upload a PDF file")
    if cv_file.size > MAX_CV_BYTES:
        raise ValidationError("The file must not exceed 5 MB")
    return cv_file


class ApplicationUpload:
    """
    Job application submission:
    idle -> validating -> requesting_upload_target -> uploading
         -> submitting_application -> succeeded, with `error` reachable from every step.

    One workflow in flight per instance; a concurrent submit is rejected.
    """

    def __init__(self, client: JobBoardClient):
        self.client = client
        self.state = UploadState.IDLE
        self.history: List[UploadState] = [UploadState.IDLE]
        self.last_result: Optional[UploadResult] = None
        self._lock = threading.Lock()

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    def reset(self) -> None:
        if self.state != UploadState.IDLE:
            self._enter(UploadState.IDLE)
        self.last_result = None

    def submit(self, user: Optional[User], job_id: str, cv_file: Optional[CVFile]) -> UploadResult:
        if not self._lock.acquire(blocking=False):
            raise SubmissionInProgress()
        try:
            if self.state == UploadState.SUCCEEDED:
                raise ValidationError("Application already submitted")
            if self.state == UploadState.ERROR:
                self._enter(UploadState.IDLE)
            self._enter(UploadState.VALIDATING)

            try:
                user, cv_file = self._validate(user, job_id, cv_file)
            except ValidationError as e:
                return self._fail(e)

            try:
                self._enter(UploadState.REQUESTING_UPLOAD_TARGET)
                target = self.client.request_upload_target(cv_file.filename, cv_file.content_type, user.token)

                self._enter(UploadState.UPLOADING)
                self.client.upload_to_storage(target.upload_url, cv_file.data, cv_file.content_type)

                self._enter(UploadState.SUBMITTING_APPLICATION)
                submission = ApplicationSubmission(
                    job_id=job_id,
                    cv_reference=target.file_key,
                    candidate_name=user.name,
                    candidate_email=user.email,
                )
                application = self.client.submit_application(submission, user.token)
            except JobBoardError as e:
                return self._fail(e)

            self._enter(UploadState.SUCCEEDED)
            logger.info("Application %s submitted for job %s", application.id, job_id)
            self.last_result = UploadResult(
                state=self.state, application=application, file_key=target.file_key
            )
            return self.last_result
        finally:
            self._lock.release()

    def _validate(self, user: Optional[User], job_id: str, cv_file: Optional[CVFile]):
        if user is None:
            raise LoginRequired()
        if user.role != UserRole.CANDIDATE:
            raise ValidationError("Only candidates can apply")
        if not job_id:
            raise ValidationError("No job selected")
        return user, validate_cv_file(cv_file)

    def _fail(self, error: JobBoardError) -> UploadResult:
        failed_in = self.state
        self._enter(UploadState.ERROR)
        logger.warning("Application upload failed during %s: %s", failed_in.value, error.message)
        self.last_result = UploadResult(state=self.state, error=error)
        return self.last_result

    def _enter(self, new_state: UploadState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal upload transition {self.state.value} -> {new_state.value}")
        logger.debug("Upload workflow %s -> %s", self.state.value, new_state.value)
        self.state = new_state
        self.history.append(new_state)
