from __future__ import annotations
"""Pure helpers that turn raw S3 responses into normalized attributes."""
import binascii
from typing import Mapping, Optional

from .models import HEAD_OBJECT_OUTPUT, Attributes, RawPayload


def etag_to_md5(etag: Optional[str]) -> Optional[bytes]:
    """Return the MD5 digest encoded in an ETag, or ``None``.

    S3 ETags are usually the quoted hex MD5 of the object. Multipart uploads
    produce tags such as ``"abc-3"`` that never decode as hex; those, and
    anything unquoted, yield ``None``.
    """

    if not etag or len(etag) < 3:
        return None
    if etag[0] != '"' or etag[-1] != '"':
        return None
    try:
        return binascii.unhexlify(etag[1:-1])
    except (binascii.Error, ValueError):
        return None


def size_from_content_range(content_range: Optional[str], content_length: Optional[int]) -> int:
    """Return the full object size for a (possibly partial) GET response.

    ``ContentLength`` only covers the returned range; the total after the
    slash in ``ContentRange`` (``bytes 10-14/27``) is the object size.
    """

    size = int(content_length or 0)
    if content_range:
        parts = content_range.split("/")
        if len(parts) == 2:
            try:
                size = int(parts[1])
            except ValueError:
                pass
    return size


def normalize_metadata(raw: Optional[Mapping[str, Optional[str]]]) -> dict[str, str]:
    if not raw:
        return {}
    return {key: value for key, value in raw.items() if value is not None}


def attributes_from_head(response: dict) -> Attributes:
    return Attributes(
        cache_control=response.get("CacheControl") or "",
        content_disposition=response.get("ContentDisposition") or "",
        content_encoding=response.get("ContentEncoding") or "",
        content_language=response.get("ContentLanguage") or "",
        content_type=response.get("ContentType") or "",
        metadata=normalize_metadata(response.get("Metadata")),
        mod_time=response.get("LastModified"),
        size=int(response.get("ContentLength") or 0),
        md5=etag_to_md5(response.get("ETag")),
        raw=RawPayload(HEAD_OBJECT_OUTPUT, response),
    )
