# jobboard/views/auth.py

import logging
import re
from typing import Optional

from jobboard.api.client import JobBoardClient
from jobboard.core.errors import JobBoardError, ValidationError
from jobboard.core.session_store import Session
from jobboard.models.job_models import User, UserRole
from jobboard.views.state import ViewState

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8


class LoginController:
    def __init__(self, client: JobBoardClient, session: Session):
        self.client = client
        self.session = session
        self.view = ViewState()

    def submit(self, email: str, password: str) -> Optional[User]:
        self.view.start()
        try:
            if not email or not password:
                raise ValidationError("Please fill in all fields")
            user = self.client.authenticate({"email": email, "password": password})
        except JobBoardError as e:
            self.view.fail(e.message)
            return None
        self.session.login(user)
        self.view.loaded(user)
        return user


class RegisterController:
    def __init__(self, client: JobBoardClient, session: Session):
        self.client = client
        self.session = session
        self.view = ViewState()

    @staticmethod
    def validate(name: str, email: str, password: str) -> None:
        if not name or not email or not password:
            raise ValidationError("All fields are required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"The password must be at least {MIN_PASSWORD_LENGTH} characters long")
        if not EMAIL_RE.match(email):
            raise ValidationError("Please enter a valid email address")

    def submit(self, role: UserRole, name: str, email: str, password: str) -> Optional[User]:
        self.view.start()
        try:
            self.validate(name, email, password)
            user = self.client.register({"name": name, "email": email, "password": password}, role)
        except JobBoardError as e:
            self.view.fail(e.message)
            return None
        logger.info("Registered new %s account", UserRole(role).value.lower())
        self.session.login(user)
        self.view.loaded(user)
        return user
