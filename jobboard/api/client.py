# jobboard/api/client.py

import logging
import re
from typing import Optional, Dict, Any, List, Type, TypeVar
import requests
from pydantic import BaseModel, ValidationError as PydanticValidationError

from jobboard.config import settings
from jobboard.core.errors import RequestFailed, TransferFailed, MalformedResponse
from jobboard.models.job_models import (
    User,
    UserRole,
    Job,
    NewJob,
    Application,
    ApplicationSubmission,
    UploadTarget,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


class JobBoardClient:
    """Thin wrapper over the job board REST API. One call, one round trip."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http: Optional[requests.Session] = None,
        storage_bucket: Optional[str] = None,
        storage_region: Optional[str] = None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT
        self.http = http or requests.Session()
        self.storage_bucket = settings.AWS_S3_BUCKET if storage_bucket is None else storage_bucket
        self.storage_region = storage_region or settings.AWS_REGION

    # -------- Auth --------
    def authenticate(self, credentials: Dict[str, Any]) -> User:
        resp = self._send("post", "/login", "Login failed", json=credentials)
        return self._parse(resp, User)

    def register(self, data: Dict[str, Any], role: UserRole) -> User:
        endpoint = "/register-candidate" if UserRole(role) == UserRole.CANDIDATE else "/register-company"
        resp = self._send("post", endpoint, "Registration failed", json=data)
        return self._parse(resp, User)

    # -------- Jobs --------
    def list_jobs(self) -> List[Job]:
        resp = self._send("get", "/jobs", "Could not fetch job listings")
        return self._parse_list(resp, Job)

    def get_job(self, job_id: str) -> Job:
        resp = self._send("get", f"/jobs/{job_id}", "Job not found")
        return self._parse(resp, Job)

    def create_job(self, job: NewJob, token: str) -> Job:
        resp = self._send("post", "/jobs", "Error creating job", token=token, json=job.to_wire())
        return self._parse(resp, Job)

    def get_company_jobs(self, company_id: str, token: str) -> List[Job]:
        resp = self._send("get", f"/companies/{company_id}/jobs", "Could not fetch company jobs", token=token)
        return self._parse_list(resp, Job)

    # -------- Applications --------
    def submit_application(self, submission: ApplicationSubmission, token: Optional[str]) -> Application:
        resp = self._send(
            "post", "/applications", "Error submitting application", token=token, json=submission.to_wire()
        )
        return self._parse(resp, Application)

    def list_applications_for_job(self, job_id: str, token: str) -> List[Application]:
        resp = self._send("get", f"/jobs/{job_id}/applications", "Error fetching applications", token=token)
        return self._parse_list(resp, Application)

    def list_applications_for_candidate(self, candidate_id: str, token: str) -> List[Application]:
        resp = self._send(
            "get", f"/candidates/{candidate_id}/applications", "Error fetching applications", token=token
        )
        return self._parse_list(resp, Application)

    # -------- CV storage --------
    def request_upload_target(self, filename: str, content_type: str, token: Optional[str]) -> UploadTarget:
        payload = {"filename": filename, "contentType": content_type}
        resp = self._send("post", "/cv", "Could not obtain upload URL", token=token, json=payload)
        return self._parse(resp, UploadTarget)

    def upload_to_storage(self, upload_url: str, data: bytes, content_type: str) -> None:
        """PUT raw bytes to a signed upload URL (no JSON, no bearer header)."""
        try:
            resp = self.http.put(
                upload_url, data=data, headers={"Content-Type": content_type}, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise TransferFailed(f"Transfer to storage failed: {e}") from e
        if not resp.ok:
            raise TransferFailed(status_code=resp.status_code)

    def download_cv(self, url: str) -> bytes:
        try:
            resp = self.http.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise RequestFailed(f"Could not download CV: {e}") from e
        if not resp.ok:
            raise RequestFailed("Could not download CV", status_code=resp.status_code)
        return resp.content

    def get_cv_url(self, reference: Optional[str]) -> str:
        """Browsable URL for a stored CV reference, or '' when none can be built."""
        if not reference or reference == "#":
            logger.warning("Empty CV reference, no URL to build")
            return ""
        if reference.startswith("http"):
            return reference
        if not self.storage_bucket:
            logger.warning("AWS_S3_BUCKET is not configured, CV links are disabled")
            return ""
        key = _UNSAFE_KEY_CHARS.sub("", reference)
        if not key:
            logger.warning("CV reference %r has no usable characters", reference)
            return ""
        return f"https://{self.storage_bucket}.s3.{self.storage_region}.amazonaws.com/{key}"

    # -------- Plumbing --------
    @staticmethod
    def _headers(token: Optional[str] = None) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _send(self, method: str, path: str, failure_message: str, token: Optional[str] = None, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            resp = getattr(self.http, method)(url, headers=self._headers(token), timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method.upper(), path, e)
            raise RequestFailed(failure_message) from e
        if not resp.ok:
            logger.warning("%s %s -> HTTP %s", method.upper(), path, resp.status_code)
            raise RequestFailed(failure_message, status_code=resp.status_code)
        return resp

    @staticmethod
    def _json(resp) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise MalformedResponse("Server returned a non-JSON response") from e

    def _parse(self, resp, model: Type[M]) -> M:
        data = self._json(resp)
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            raise MalformedResponse(f"Unexpected {model.__name__} payload") from e

    def _parse_list(self, resp, model: Type[M]) -> List[M]:
        data = self._json(resp)
        if not isinstance(data, list):
            raise MalformedResponse(f"Expected a list of {model.__name__} objects")
        try:
            return [model.model_validate(item) for item in data]
        except PydanticValidationError as e:
            raise MalformedResponse(f"Unexpected {model.__name__} payload") from e
