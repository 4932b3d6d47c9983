from __future__ import annotations
"""Error taxonomy shared by every blob operation."""
from enum import Enum
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

NOT_FOUND_CODES = frozenset({"NoSuchKey", "NotFound", "404"})


class ErrorCode(Enum):
    NOT_FOUND = "not_found"
    UNKNOWN = "unknown"


class TransferCancelledError(RuntimeError):
    """Raised when a read, write or request is cancelled by the caller."""


class BlobError(RuntimeError):
    """A backend failure classified into an :class:`ErrorCode`."""

    def __init__(self, code: ErrorCode, message: str, raw: Exception | None = None):
        super().__init__(message)
        self.code = code
        self._raw = raw

    def as_raw(self, kind: str) -> Any | None:
        """Return the wrapped botocore exception if it is of ``kind``."""

        if self._raw is None or type_kind(self._raw) != kind:
            return None
        return self._raw


def type_kind(exc: Exception) -> str | None:
    if isinstance(exc, ClientError):
        return "ClientError"
    if isinstance(exc, BotoCoreError):
        return "BotoCoreError"
    return None


def error_code(exc: BaseException) -> ErrorCode:
    """Classify ``exc`` without side effects."""

    if isinstance(exc, BlobError):
        return exc.code
    if not isinstance(exc, ClientError):
        return ErrorCode.UNKNOWN
    code = exc.response.get("Error", {}).get("Code")
    if code in NOT_FOUND_CODES:
        return ErrorCode.NOT_FOUND
    return ErrorCode.UNKNOWN


def translate_error(exc: Exception) -> Exception:
    """Wrap botocore failures in :class:`BlobError`; pass anything else through."""

    if isinstance(exc, (ClientError, BotoCoreError)):
        error = BlobError(error_code(exc), str(exc), raw=exc)
        error.__cause__ = exc
        return error
    return exc
