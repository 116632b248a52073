"""Failure taxonomy and the tagged result used inside the Salesforce adapter.

Nothing here is raised to callers of the adapter. The HTTP envelope classifies
each outcome into a Result; public methods then collapse every non-ok result
into an empty value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    AUTH_FAILURE = "AUTH_FAILURE"
    NO_TOKEN = "NO_TOKEN"
    NOT_FOUND = "NOT_FOUND"
    REMOTE_REJECTED = "REMOTE_REJECTED"
    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"
    DECODE_FAILURE = "DECODE_FAILURE"


class ResultStatus(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    ERR = "err"


class SalesforceError(Exception):
    def __init__(self, kind: ErrorKind, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


@dataclass(frozen=True)
class Result:
    status: ResultStatus
    payload: Any = None
    kind: Optional[ErrorKind] = None
    status_code: Optional[int] = None

    @classmethod
    def ok(cls, payload: Any, status_code: Optional[int] = None) -> "Result":
        return cls(ResultStatus.OK, payload=payload, status_code=status_code)

    @classmethod
    def empty(cls, kind: Optional[ErrorKind] = None, status_code: Optional[int] = None) -> "Result":
        """Expected absence: no token yet, or a 404 for a missing record."""
        return cls(ResultStatus.EMPTY, kind=kind, status_code=status_code)

    @classmethod
    def err(cls, error: SalesforceError) -> "Result":
        return cls(ResultStatus.ERR, kind=error.kind, status_code=error.status_code)

    @property
    def is_ok(self) -> bool:
        return self.status is ResultStatus.OK

    def unwrap_or_empty(self) -> Any:
        """Decoded payload on success, {} otherwise."""
        if self.is_ok and self.payload is not None:
            return self.payload
        return {}
