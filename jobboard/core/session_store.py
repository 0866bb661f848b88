# jobboard/core/session_store.py

import json
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, MutableMapping, Any

from jobboard.config import settings
from jobboard.core.errors import LoginRequired
from jobboard.models.job_models import User, UserRole

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class StoragePort(ABC):
    """Key/value slot the session is persisted into."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        pass


class MemoryStorage(StoragePort):
    """Backed by any mutable mapping (a dict, or Streamlit's session_state)."""

    def __init__(self, mapping: Optional[MutableMapping[str, Any]] = None):
        self._data = mapping if mapping is not None else {}

    def get_item(self, key: str) -> Optional[str]:
        value = self._data.get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        if key in self._data:
            del self._data[key]


class FileStorage(StoragePort):
    """One file per key under `directory`; survives restarts."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value, encoding="utf-8")

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


DEFAULT_SESSION_DIR = "~/.jobboard"


def select_storage(
    browser_state: MutableMapping[str, Any], mode: Optional[str] = None, directory: Optional[str] = None
) -> StoragePort:
    """
    Slot for the session of one visitor.

    A served app keeps it in the visitor's own browser state. Only the
    single-user "local" mode writes it to disk, where every run shares it.
    """
    mode = (mode or settings.SESSION_MODE).strip().lower()
    if mode == "local":
        return FileStorage(Path(directory or settings.SESSION_DIR or DEFAULT_SESSION_DIR).expanduser())
    if mode != "browser":
        logger.warning("Unknown SESSION_MODE %r, keeping the session in the browser", mode)
    return MemoryStorage(browser_state)


def _required_text(data: dict, field: str) -> str:
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"missing {field}")
    return value


class SessionStore:
    """Persists the authenticated user. Never raises to the caller."""

    def __init__(self, storage: StoragePort, key: Optional[str] = None):
        self.storage = storage
        self.key = key or settings.SESSION_STORAGE_KEY

    def restore(self) -> Optional[User]:
        try:
            blob = self.storage.get_item(self.key)
        except UnicodeDecodeError as e:
            logger.warning("Discarding undecodable stored session: %s", e)
            self.clear()
            return None
        except Exception as e:
            logger.error("Failed to read stored session: %s", e)
            return None
        if blob is None:
            return None

        try:
            data = json.loads(blob)
            if not isinstance(data, dict):
                raise ValueError("session blob is not an object")
            _required_text(data, "id")
            email = _required_text(data, "email")
            if not _EMAIL_RE.match(email):
                raise ValueError("malformed email")
            UserRole(_required_text(data, "userType"))
            return User.model_validate(data)
        except (ValueError, TypeError) as e:
            # pydantic's ValidationError and json's JSONDecodeError are both ValueErrors
            logger.warning("Discarding invalid stored session: %s", e)
            self.clear()
            return None

    def save(self, user: User) -> None:
        try:
            self.storage.set_item(self.key, json.dumps(user.to_wire()))
        except Exception as e:
            logger.error("Failed to persist session: %s", e)

    def clear(self) -> None:
        try:
            self.storage.remove_item(self.key)
        except Exception as e:
            logger.error("Failed to clear session: %s", e)


class Session:
    """Explicit session context handed to the view controllers."""

    def __init__(self, store: SessionStore, user: Optional[User] = None):
        self.store = store
        self.user = user

    @classmethod
    def open(cls, store: SessionStore) -> "Session":
        return cls(store, store.restore())

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def token(self) -> Optional[str]:
        return self.user.token if self.user else None

    def has_role(self, role: UserRole) -> bool:
        return self.user is not None and self.user.role == role

    def require_user(self) -> User:
        if self.user is None:
            raise LoginRequired()
        return self.user

    def login(self, user: User) -> None:
        self.user = user
        self.store.save(user)
        logger.info("Signed in user id=%s role=%s", user.id, user.role.value)

    def logout(self) -> None:
        self.user = None
        self.store.clear()
