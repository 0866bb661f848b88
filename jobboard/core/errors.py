# jobboard/core/errors.py

from typing import Optional


class JobBoardError(Exception):
    """Base class; `message` is safe to show to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(JobBoardError):
    """Client-side check failed; nothing was sent over the network."""


class LoginRequired(ValidationError):
    def __init__(self, message: str = "Please log in to continue"):
        super().__init__(message)


class SubmissionInProgress(ValidationError):
    def __init__(self, message: str = "An application is already being submitted"):
        super().__init__(message)


class RequestFailed(JobBoardError):
    """Non-2xx answer (or no answer at all) from the backend."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TransferFailed(JobBoardError):
    def __init__(self, message: str = "Transfer to storage failed", status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CredentialRequired(JobBoardError):
    def __init__(self, message: str = "An AI API key is required"):
        super().__init__(message)


class MalformedResponse(JobBoardError):
    """Success status, but the body is not the JSON shape we expect."""
