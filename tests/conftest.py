"""Shared fakes and fixtures for the test suite."""

from unittest.mock import MagicMock

import pytest

from jobboard.api.client import JobBoardClient
from jobboard.core.session_store import MemoryStorage, Session, SessionStore
from jobboard.models.job_models import Application, Job, User, UserRole

_NO_JSON = object()


class FakeResponse:
    """Just enough of requests.Response for the client."""

    def __init__(self, status_code: int = 200, payload=_NO_JSON, content: bytes = b""):
        self.status_code = status_code
        self._payload = payload
        self.content = content

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._payload is _NO_JSON:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


def make_user(role: UserRole = UserRole.CANDIDATE, **overrides) -> User:
    data = {
        "id": "u-1",
        "email": "amina@example.com",
        "name": "Amina",
        "role": role,
        "token": "tok-123",
    }
    data.update(overrides)
    return User(**data)


def make_job(job_id: str = "123", **overrides) -> Job:
    data = {
        "id": job_id,
        "title": "Fullstack Developer",
        "company_id": "c-1",
        "company_name": "Agadir Tech",
        "location": "Agadir",
        "description": "React and Python for our product team.",
        "requirements": ["React", "Python", "AWS"],
    }
    data.update(overrides)
    return Job(**data)


def make_application(app_id: str = "a-1", job_id: str = "123", **overrides) -> Application:
    data = {
        "id": app_id,
        "job_id": job_id,
        "candidate_id": "u-1",
        "candidate_name": "Amina",
        "candidate_email": "amina@example.com",
        "cv_reference": "cv-amina.pdf",
    }
    data.update(overrides)
    return Application(**data)


def make_session(user: User = None) -> Session:
    return Session(SessionStore(MemoryStorage(), key="test_auth"), user=user)


@pytest.fixture
def mock_client():
    return MagicMock(spec=JobBoardClient)


@pytest.fixture
def candidate():
    return make_user(UserRole.CANDIDATE)


@pytest.fixture
def company():
    return make_user(UserRole.COMPANY, id="c-1", email="hr@agadirtech.ma", name="Agadir Tech")
