from __future__ import annotations
"""Uniform blob operations against a single S3 bucket."""
from dataclasses import replace
import logging
import mimetypes
from typing import Any, Iterator, Optional

from botocore.exceptions import BotoCoreError, ClientError

from .errors import (
    BlobError,
    ErrorCode,
    TransferCancelledError,
    error_code,
    translate_error,
    type_kind,
)
from . import lister
from .models import S3_CLIENT, Attributes, ListObject, ListPage
from .normalize import attributes_from_head
from .options import CancelFn, ListOptions, ReaderOptions, WriterOptions
from .reader import RangeReader, build_range_header
from .settings import BlobSettings
from .writer import BlobWriter

LOGGER = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class S3Bucket:
    """Encapsulates blob access to one bucket independent of the caller.

    The handle is read-only after construction and may be shared between
    threads. Readers and writers it returns belong to a single caller.

    Raises:
        BlobError: from every operation that reaches S3 and fails.
    """

    def __init__(self, client, name: str, settings: BlobSettings | None = None):
        if client is None:
            raise ValueError("client is required")
        if not name:
            raise ValueError("bucket name is required")
        self._client = client
        self._name = name
        self._settings = settings or BlobSettings()

    @property
    def name(self) -> str:
        return self._name

    @property
    def settings(self) -> BlobSettings:
        return self._settings

    def as_raw(self, kind: str) -> Any | None:
        """Return the boto3 client when ``kind`` is ``"S3Client"``."""

        return self._client if kind == S3_CLIENT else None

    def error_code(self, exc: BaseException) -> ErrorCode:
        return error_code(exc)

    def error_as(self, exc: BaseException, kind: str) -> Any | None:
        """Return the botocore exception behind ``exc`` if it is of ``kind``."""

        if isinstance(exc, BlobError):
            return exc.as_raw(kind)
        if isinstance(exc, Exception) and type_kind(exc) == kind:
            return exc
        return None

    def attributes(self, key: str, *, cancel_requested: Optional[CancelFn] = None) -> Attributes:
        """Fetch metadata about a single object."""

        _check_cancelled(cancel_requested)
        try:
            response = self._client.head_object(Bucket=self._name, Key=key)
        except (ClientError, BotoCoreError) as exc:
            raise translate_error(exc) from exc
        return attributes_from_head(response)

    def new_range_reader(
        self,
        key: str,
        offset: int = 0,
        length: int = -1,
        options: ReaderOptions | None = None,
    ) -> RangeReader:
        """Open ``length`` bytes of ``key`` starting at ``offset``.

        A negative ``length`` reads to the end of the object.
        """

        if offset < 0:
            raise ValueError("offset must not be negative")
        options = options or ReaderOptions()
        _check_cancelled(options.cancel_requested)

        params: dict[str, Any] = {"Bucket": self._name, "Key": key}
        byte_range = build_range_header(offset, length)
        if byte_range:
            params["Range"] = byte_range
        LOGGER.debug("Opening reader for '%s' (range=%s)", key, byte_range)
        try:
            response = self._client.get_object(**params)
        except (ClientError, BotoCoreError) as exc:
            raise translate_error(exc) from exc
        return RangeReader(
            response,
            discard_body=length == 0,
            cancel_requested=options.cancel_requested,
        )

    def new_reader(self, key: str, options: ReaderOptions | None = None) -> RangeReader:
        return self.new_range_reader(key, 0, -1, options)

    def read_all(self, key: str, options: ReaderOptions | None = None) -> bytes:
        with self.new_reader(key, options) as reader:
            return reader.read()

    def new_writer(
        self,
        key: str,
        content_type: str | None = None,
        options: WriterOptions | None = None,
    ) -> BlobWriter:
        """Return a writer for ``key``; nothing is durable until it is closed."""

        if not content_type:
            content_type = mimetypes.guess_type(key)[0] or DEFAULT_CONTENT_TYPE
        return BlobWriter(
            self._client,
            bucket=self._name,
            key=key,
            content_type=content_type,
            options=options,
            chunk_size=self._settings.upload_chunk_size,
            pipe_capacity=self._settings.pipe_buffer_size,
        )

    def write_all(
        self,
        key: str,
        data: bytes,
        content_type: str | None = None,
        options: WriterOptions | None = None,
    ) -> None:
        with self.new_writer(key, content_type, options) as writer:
            writer.write(data)

    def list_page(self, options: ListOptions | None = None) -> ListPage:
        options = options or ListOptions()
        try:
            return lister.list_page(
                self._client,
                self._name,
                options,
                default_page_size=self._settings.page_size,
            )
        except (ClientError, BotoCoreError) as exc:
            raise translate_error(exc) from exc

    def list(self, options: ListOptions | None = None) -> Iterator[ListObject]:
        """Yield every entry, requesting pages one after another."""

        options = replace(options or ListOptions())
        while True:
            page = self.list_page(options)
            yield from page.objects
            if not page.next_page_token:
                return
            options = replace(options, page_token=page.next_page_token)

    def delete(self, key: str, *, cancel_requested: Optional[CancelFn] = None) -> None:
        """Delete ``key``; a missing key raises ``BlobError`` with ``NOT_FOUND``."""

        self.attributes(key, cancel_requested=cancel_requested)
        _check_cancelled(cancel_requested)
        try:
            self._client.delete_object(Bucket=self._name, Key=key)
        except (ClientError, BotoCoreError) as exc:
            raise translate_error(exc) from exc
        LOGGER.debug("Deleted '%s' from '%s'", key, self._name)

    def signed_url(self, key: str, expires_in: int | None = None) -> str:
        """Create a presigned GET URL for ``key``. No request is sent."""

        if expires_in is None:
            expires_in = self._settings.signed_url_expiry
        if expires_in <= 0:
            raise ValueError("expires_in must be greater than zero")
        try:
            return self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self._name, "Key": key},
                ExpiresIn=int(expires_in),
            )
        except (ClientError, BotoCoreError) as exc:
            raise translate_error(exc) from exc


def _check_cancelled(cancel_requested: Optional[CancelFn]) -> None:
    if cancel_requested and cancel_requested():
        raise TransferCancelledError("Request cancelled by caller")
