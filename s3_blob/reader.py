from __future__ import annotations
"""Sequential readers over ranged GetObject responses."""
import io
import logging
from typing import Any, Optional

from botocore.exceptions import BotoCoreError

from .errors import TransferCancelledError, translate_error
from .models import GET_OBJECT_OUTPUT, RawPayload, ReaderAttributes
from .normalize import size_from_content_range
from .options import CancelFn

LOGGER = logging.getLogger(__name__)


def build_range_header(offset: int, length: int) -> Optional[str]:
    """Return the HTTP Range header for ``offset``/``length``, if one is needed.

    S3 cannot express a zero-length range, so ``length == 0`` asks for a
    single byte which the reader then discards.
    """

    if offset > 0 and length < 0:
        return f"bytes={offset}-"
    if length == 0:
        return f"bytes={offset}-{offset}"
    if length > 0:
        return f"bytes={offset}-{offset + length - 1}"
    return None


class RangeReader:
    """Reads the body of one GetObject response. Not thread safe."""

    def __init__(
        self,
        response: dict,
        *,
        discard_body: bool = False,
        cancel_requested: Optional[CancelFn] = None,
    ):
        self._raw = RawPayload(GET_OBJECT_OUTPUT, response)
        self._cancel_requested = cancel_requested
        self._closed = False
        self._attributes = ReaderAttributes(
            content_type=response.get("ContentType") or "",
            mod_time=response.get("LastModified"),
            size=size_from_content_range(
                response.get("ContentRange"), response.get("ContentLength")
            ),
        )
        body = response.get("Body")
        if discard_body:
            if body is not None:
                body.close()
            body = io.BytesIO(b"")
        self._body = body if body is not None else io.BytesIO(b"")

    @property
    def attributes(self) -> ReaderAttributes:
        return self._attributes

    @property
    def closed(self) -> bool:
        return self._closed

    def read(self, size: int = -1) -> bytes:
        if self._closed:
            raise ValueError("read from a closed reader")
        if self._cancel_requested and self._cancel_requested():
            LOGGER.debug("Read cancelled; releasing body")
            self.close()
            raise TransferCancelledError("Read cancelled by caller")
        try:
            if size is None or size < 0:
                return self._body.read()
            return self._body.read(size)
        except BotoCoreError as exc:
            raise translate_error(exc) from exc

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._body.close()

    def as_raw(self, kind: str) -> Any | None:
        return self._raw.extract(kind)

    def __enter__(self) -> "RangeReader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
