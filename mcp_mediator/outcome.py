"""Tool outcome variant and the cancellation token handed to handlers."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .exceptions import OperationCancelledError

__all__ = ["OutcomeKind", "ToolOutcome", "CancellationToken"]


class OutcomeKind(Enum):
    OK = "ok"
    ARGUMENT_ERROR = "argument_error"
    DOMAIN_ERROR = "domain_error"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True, slots=True)
class ToolOutcome:
    """Result of one handler invocation.

    Handlers may return one of these directly instead of raising; the invoker
    normalises raised exceptions into the same shape before formatting.
    """

    kind: OutcomeKind
    value: Any = None
    message: str = ""
    error: Optional[BaseException] = None

    @classmethod
    def ok(cls, value: Any) -> "ToolOutcome":
        return cls(OutcomeKind.OK, value=value)

    @classmethod
    def argument_error(cls, message: str) -> "ToolOutcome":
        return cls(OutcomeKind.ARGUMENT_ERROR, message=message)

    @classmethod
    def domain_error(cls, message: str) -> "ToolOutcome":
        return cls(OutcomeKind.DOMAIN_ERROR, message=message)

    @classmethod
    def unexpected(cls, message: str, error: Optional[BaseException] = None) -> "ToolOutcome":
        return cls(OutcomeKind.UNEXPECTED, message=message, error=error)

    @property
    def is_error(self) -> bool:
        return self.kind is not OutcomeKind.OK


class CancellationToken:
    """Cooperative cancellation signal for one request.

    The host cancels the token (client disconnect, timeout); handlers doing
    I/O poll ``cancelled`` or call ``raise_if_cancelled()`` between steps.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "Operation was cancelled") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block up to ``timeout`` seconds; True when cancelled meanwhile."""
        return self._event.wait(timeout)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError(self.reason or "Operation was cancelled")

    @classmethod
    def none(cls) -> "CancellationToken":
        """A token nobody will cancel."""
        return cls()
