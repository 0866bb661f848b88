# jobboard/views/state.py

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ViewStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    EMPTY = "empty"
    ERROR = "error"


@dataclass
class ViewState:
    """What a page renders: a spinner, a dismissible error banner, or data."""
    status: ViewStatus = ViewStatus.IDLE
    data: Any = None
    error: Optional[str] = None

    def start(self) -> None:
        self.status = ViewStatus.LOADING
        self.error = None

    def loaded(self, data: Any) -> None:
        self.data = data
        empty = data is None or (hasattr(data, "__len__") and len(data) == 0)
        self.status = ViewStatus.EMPTY if empty else ViewStatus.LOADED

    def fail(self, message: str) -> None:
        self.status = ViewStatus.ERROR
        self.error = message

    def dismiss_error(self) -> None:
        self.error = None
        if self.status == ViewStatus.ERROR:
            if self.data is None:
                self.status = ViewStatus.IDLE
            else:
                self.loaded(self.data)

    @property
    def is_loading(self) -> bool:
        return self.status == ViewStatus.LOADING
