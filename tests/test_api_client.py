"""Tests for the REST client: headers, endpoints, error mapping and CV URLs."""

import re
from unittest.mock import MagicMock

import pytest
import requests
from hypothesis import given, strategies as st, assume

from jobboard.api.client import JobBoardClient
from jobboard.core.errors import MalformedResponse, RequestFailed, TransferFailed
from jobboard.models.job_models import (
    ApplicationSubmission,
    ContractType,
    NewJob,
    UserRole,
)

from conftest import FakeResponse

USER_PAYLOAD = {"id": "u-1", "email": "amina@example.com", "name": "Amina", "userType": "CANDIDATE", "token": "tok"}
JOB_PAYLOAD = {
    "id": "123",
    "title": "Fullstack Developer",
    "companyId": "c-1",
    "companyName": "Agadir Tech",
    "location": "Agadir",
    "description": "React and Python",
    "requirements": ["React", "Python"],
    "type": "Contract",
    "createdAt": "2024-03-20",
}
APPLICATION_PAYLOAD = {
    "id": "a-1",
    "jobId": "123",
    "candidateId": "u-1",
    "candidateName": "Amina",
    "candidateEmail": "amina@example.com",
    "cvUrl": "cv-123.pdf",
    "status": "pending",
    "appliedAt": "2024-03-21T10:00:00Z",
}


def _client(http=None, bucket="cv-bucket"):
    return JobBoardClient(
        base_url="http://api.test/",
        timeout=5,
        http=http or MagicMock(),
        storage_bucket=bucket,
        storage_region="eu-west-3",
    )


class TestRequests:

    def test_authenticate_posts_credentials_without_bearer(self):
        http = MagicMock()
        http.post.return_value = FakeResponse(200, USER_PAYLOAD)

        user = _client(http).authenticate({"email": "amina@example.com", "password": "secret123"})

        assert user.role == UserRole.CANDIDATE
        args, kwargs = http.post.call_args
        assert args[0] == "http://api.test/login"
        assert kwargs["headers"] == {"Content-Type": "application/json"}
        assert kwargs["json"] == {"email": "amina@example.com", "password": "secret123"}
        assert kwargs["timeout"] == 5

    @pytest.mark.parametrize(
        "role, path",
        [(UserRole.CANDIDATE, "/register-candidate"), (UserRole.COMPANY, "/register-company")],
    )
    def test_register_routes_by_role(self, role, path):
        http = MagicMock()
        http.post.return_value = FakeResponse(200, {**USER_PAYLOAD, "userType": role.value})

        _client(http).register({"name": "A", "email": "a@b.co", "password": "x" * 8}, role)

        assert http.post.call_args[0][0] == f"http://api.test{path}"

    def test_create_job_sends_bearer_and_wire_payload(self):
        http = MagicMock()
        http.post.return_value = FakeResponse(201, JOB_PAYLOAD)
        new_job = NewJob(
            title="Fullstack Developer",
            location="Agadir",
            description="React and Python",
            requirements=["React", "Python"],
            contract_type=ContractType.CONTRACT,
        )

        job = _client(http).create_job(new_job, "tok-123")

        assert job.contract_type == ContractType.CONTRACT
        kwargs = http.post.call_args[1]
        assert kwargs["headers"]["Authorization"] == "Bearer tok-123"
        assert kwargs["json"]["type"] == "Contract"
        assert "salary" not in kwargs["json"]

    def test_list_jobs_parses_entities(self):
        http = MagicMock()
        http.get.return_value = FakeResponse(200, [JOB_PAYLOAD, {**JOB_PAYLOAD, "id": "124"}])

        jobs = _client(http).list_jobs()

        assert [j.id for j in jobs] == ["123", "124"]
        assert jobs[0].company_name == "Agadir Tech"
        assert http.get.call_args[0][0] == "http://api.test/jobs"

    @pytest.mark.parametrize(
        "call, url",
        [
            (lambda c: c.get_job("123"), "http://api.test/jobs/123"),
            (lambda c: c.list_applications_for_job("123", "tok"), "http://api.test/jobs/123/applications"),
            (lambda c: c.list_applications_for_candidate("u-1", "tok"), "http://api.test/candidates/u-1/applications"),
            (lambda c: c.get_company_jobs("c-1", "tok"), "http://api.test/companies/c-1/jobs"),
        ],
    )
    def test_get_endpoints(self, call, url):
        http = MagicMock()
        http.get.return_value = FakeResponse(200, JOB_PAYLOAD if url.endswith("/123") else [])

        call(_client(http))

        assert http.get.call_args[0][0] == url

    def test_submit_application(self):
        http = MagicMock()
        http.post.return_value = FakeResponse(201, APPLICATION_PAYLOAD)
        submission = ApplicationSubmission(
            job_id="123", cv_reference="cv-123.pdf", candidate_name="Amina", candidate_email="amina@example.com"
        )

        application = _client(http).submit_application(submission, "tok")

        assert application.cv_reference == "cv-123.pdf"
        assert http.post.call_args[1]["json"] == {
            "jobId": "123",
            "cvUrl": "cv-123.pdf",
            "candidateName": "Amina",
            "candidateEmail": "amina@example.com",
        }

    def test_request_upload_target(self):
        http = MagicMock()
        http.post.return_value = FakeResponse(200, {"uploadUrl": "https://s3.test/put?sig=1", "fileKey": "cv-1.pdf"})

        target = _client(http).request_upload_target("cv.pdf", "application/pdf", "tok")

        assert target.upload_url == "https://s3.test/put?sig=1"
        assert target.file_key == "cv-1.pdf"
        args, kwargs = http.post.call_args
        assert args[0] == "http://api.test/cv"
        assert kwargs["json"] == {"filename": "cv.pdf", "contentType": "application/pdf"}


class TestErrors:

    @pytest.mark.parametrize("status", [400, 401, 404, 500, 503])
    def test_non_success_status_raises_request_failed(self, status):
        http = MagicMock()
        http.get.return_value = FakeResponse(status, {"detail": "nope"})

        with pytest.raises(RequestFailed) as exc:
            _client(http).get_job("123")

        assert exc.value.status_code == status
        assert exc.value.message == "Job not found"

    def test_transport_error_raises_request_failed(self):
        http = MagicMock()
        http.get.side_effect = requests.ConnectionError("refused")

        with pytest.raises(RequestFailed) as exc:
            _client(http).list_jobs()

        assert exc.value.status_code is None

    def test_non_json_body_is_malformed(self):
        http = MagicMock()
        http.get.return_value = FakeResponse(200)

        with pytest.raises(MalformedResponse):
            _client(http).list_jobs()

    def test_object_where_list_expected_is_malformed(self):
        http = MagicMock()
        http.get.return_value = FakeResponse(200, {"jobs": []})

        with pytest.raises(MalformedResponse):
            _client(http).list_jobs()

    def test_missing_fields_are_malformed(self):
        http = MagicMock()
        http.post.return_value = FakeResponse(200, {"uploadUrl": "https://s3.test/put"})

        with pytest.raises(MalformedResponse):
            _client(http).request_upload_target("cv.pdf", "application/pdf", "tok")


class TestStorageTransfer:

    def test_put_raw_bytes_with_file_content_type(self):
        http = MagicMock()
        http.put.return_value = FakeResponse(200)

        _client(http).upload_to_storage("https://s3.test/put?sig=1", b"%PDF-1.4", "application/pdf")

        args, kwargs = http.put.call_args
        assert args[0] == "https://s3.test/put?sig=1"
        assert kwargs["data"] == b"%PDF-1.4"
        assert kwargs["headers"] == {"Content-Type": "application/pdf"}

    def test_put_failure_raises_transfer_failed(self):
        http = MagicMock()
        http.put.return_value = FakeResponse(403)

        with pytest.raises(TransferFailed) as exc:
            _client(http).upload_to_storage("https://s3.test/put", b"%PDF", "application/pdf")

        assert exc.value.status_code == 403

    def test_download_cv_returns_bytes(self):
        http = MagicMock()
        http.get.return_value = FakeResponse(200, content=b"%PDF-1.4 body")

        assert _client(http).download_cv("https://cv-bucket.s3/cv.pdf") == b"%PDF-1.4 body"


class TestCVUrl:

    @pytest.mark.parametrize("reference", ["", "#", None])
    def test_empty_reference(self, reference):
        assert _client().get_cv_url(reference) == ""

    def test_unconfigured_bucket(self):
        assert _client(bucket="").get_cv_url("cv-amina.pdf") == ""

    @given(rest=st.text())
    def test_http_reference_is_returned_unchanged(self, rest):
        reference = "http" + rest
        assert _client().get_cv_url(reference) == reference
        assert _client(bucket="").get_cv_url(reference) == reference

    @given(reference=st.text(min_size=1))
    def test_reference_is_sanitized_into_bucket_url(self, reference):
        assume(reference != "#" and not reference.startswith("http"))

        url = _client().get_cv_url(reference)

        expected_key = "".join(ch for ch in reference if re.fullmatch(r"[A-Za-z0-9._-]", ch))
        if not expected_key:
            assert url == ""
            return
        prefix = "https://cv-bucket.s3.eu-west-3.amazonaws.com/"
        assert url == prefix + expected_key
        assert "?" not in url

    def test_path_traversal_is_stripped(self):
        url = _client().get_cv_url("../../etc/passwd?key=x")
        assert url == "https://cv-bucket.s3.eu-west-3.amazonaws.com/....etcpasswdkeyx"

    @pytest.mark.parametrize("reference", ["///", "?=&", "  ", "é 🎉"])
    def test_reference_without_usable_characters(self, reference):
        assert _client().get_cv_url(reference) == ""
