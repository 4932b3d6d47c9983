from __future__ import annotations
"""Per-operation options accepted by :class:`~s3_blob.bucket.S3Bucket`."""
from dataclasses import dataclass, field
from typing import Callable, Optional

from .models import RawPayload

CancelFn = Callable[[], bool]
# Hooks receive the backend-native request and may mutate it in place.
BeforeFn = Callable[[RawPayload], None]


@dataclass
class ReaderOptions:
    cancel_requested: Optional[CancelFn] = None


@dataclass
class WriterOptions:
    """Options fixed when a writer is created."""

    # Overrides the multipart chunk size; zero keeps the configured default.
    buffer_size: int = 0
    cache_control: str = ""
    content_disposition: str = ""
    content_encoding: str = ""
    content_language: str = ""
    content_md5: Optional[bytes] = None
    metadata: dict[str, str] = field(default_factory=dict)
    before_write: Optional[BeforeFn] = None
    cancel_requested: Optional[CancelFn] = None


@dataclass
class ListOptions:
    """Options for a single listing request.

    A ``page_size`` of zero uses the configured default. An empty
    ``page_token`` requests the first page.
    """

    prefix: str = ""
    delimiter: str = ""
    page_size: int = 0
    page_token: bytes = b""
    before_list: Optional[BeforeFn] = None
    cancel_requested: Optional[CancelFn] = None
