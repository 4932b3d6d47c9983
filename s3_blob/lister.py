from __future__ import annotations
"""Single-page listing over ``list_objects_v2``."""
import logging
from typing import Any

from .errors import TransferCancelledError
from .models import (
    LIST_COMMON_PREFIX,
    LIST_OBJECT,
    LIST_OBJECTS_V2_INPUT,
    ListObject,
    ListPage,
    RawPayload,
)
from .normalize import etag_to_md5
from .options import ListOptions

LOGGER = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000


def build_list_params(bucket_name: str, options: ListOptions, default_page_size: int = DEFAULT_PAGE_SIZE) -> dict[str, Any]:
    page_size = options.page_size if options.page_size > 0 else default_page_size
    list_params: dict[str, Any] = {"Bucket": bucket_name, "MaxKeys": page_size}
    if options.prefix:
        list_params["Prefix"] = options.prefix
    if options.delimiter:
        list_params["Delimiter"] = options.delimiter
    if options.page_token:
        try:
            list_params["ContinuationToken"] = options.page_token.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ValueError("invalid page token") from exc
    return list_params


def list_page(client, bucket_name: str, options: ListOptions, *, default_page_size: int = DEFAULT_PAGE_SIZE) -> ListPage:
    """Fetch one page of objects and common prefixes.

    Backend errors propagate untranslated.
    """

    list_params = build_list_params(bucket_name, options, default_page_size)
    if options.before_list:
        options.before_list(RawPayload(LIST_OBJECTS_V2_INPUT, list_params))
    if options.cancel_requested and options.cancel_requested():
        raise TransferCancelledError("Listing cancelled by caller")

    response = client.list_objects_v2(**list_params)
    contents = response.get("Contents") or []
    prefixes = response.get("CommonPrefixes") or []

    objects = [
        ListObject(
            key=obj["Key"],
            mod_time=obj.get("LastModified"),
            size=int(obj.get("Size") or 0),
            md5=etag_to_md5(obj.get("ETag")),
            raw=RawPayload(LIST_OBJECT, obj),
        )
        for obj in contents
    ]
    objects.extend(
        ListObject(key=common["Prefix"], is_dir=True, raw=RawPayload(LIST_COMMON_PREFIX, common))
        for common in prefixes
    )
    if contents and prefixes:
        # S3 returns blobs and "directories" as two separately sorted lists.
        objects.sort(key=lambda entry: entry.key)

    token = response.get("NextContinuationToken") or ""
    LOGGER.debug(
        "Listed %d object(s) and %d prefix(es) in '%s' (more=%s)",
        len(contents),
        len(prefixes),
        bucket_name,
        bool(token),
    )
    return ListPage(objects=objects, next_page_token=token.encode("utf-8"))
