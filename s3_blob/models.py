from __future__ import annotations
"""Data models representing blobs, listings and their attributes."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

S3_CLIENT = "S3Client"
HEAD_OBJECT_OUTPUT = "HeadObjectOutput"
GET_OBJECT_OUTPUT = "GetObjectOutput"
LIST_OBJECT = "Object"
LIST_COMMON_PREFIX = "CommonPrefix"
LIST_OBJECTS_V2_INPUT = "ListObjectsV2Input"
UPLOAD_INPUT = "UploadInput"


@dataclass(frozen=True)
class RawPayload:
    """A backend-specific value tagged with the name of its type."""

    kind: str
    value: Any

    def extract(self, kind: str) -> Any | None:
        if kind != self.kind:
            return None
        return self.value


@dataclass(frozen=True)
class Attributes:
    """Normalized metadata about a single blob."""

    cache_control: str = ""
    content_disposition: str = ""
    content_encoding: str = ""
    content_language: str = ""
    content_type: str = ""
    metadata: dict[str, str] = field(default_factory=dict)
    mod_time: Optional[datetime] = None
    size: int = 0
    md5: Optional[bytes] = None
    raw: Optional[RawPayload] = field(default=None, repr=False, compare=False)

    def as_raw(self, kind: str) -> Any | None:
        return self.raw.extract(kind) if self.raw else None


@dataclass(frozen=True)
class ReaderAttributes:
    """Attributes captured when a reader is opened."""

    content_type: str = ""
    mod_time: Optional[datetime] = None
    size: int = 0


@dataclass(frozen=True)
class ListObject:
    """A single entry of a listing: a blob or a virtual directory."""

    key: str
    mod_time: Optional[datetime] = None
    size: int = 0
    md5: Optional[bytes] = None
    is_dir: bool = False
    raw: Optional[RawPayload] = field(default=None, repr=False, compare=False)

    def as_raw(self, kind: str) -> Any | None:
        return self.raw.extract(kind) if self.raw else None


@dataclass
class ListPage:
    """One page of listing results.

    ``next_page_token`` is empty when there are no more pages.
    """

    objects: list[ListObject] = field(default_factory=list)
    next_page_token: bytes = b""
