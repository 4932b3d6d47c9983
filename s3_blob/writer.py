from __future__ import annotations
"""Push-style writer on top of boto3's pull-style ``upload_fileobj``."""
import hashlib
import io
import logging
import threading
from typing import Any, Optional

from boto3.s3.transfer import TransferConfig

from .errors import BlobError, ErrorCode, TransferCancelledError, translate_error
from .models import UPLOAD_INPUT, RawPayload
from .options import WriterOptions
from .pipe import DEFAULT_PIPE_CAPACITY, BytePipe

LOGGER = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8 * 1024 * 1024


def build_upload_request(
    *,
    bucket: str,
    key: str,
    content_type: str,
    options: WriterOptions,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> dict[str, Any]:
    """Return the keyword arguments for ``client.upload_fileobj`` minus the body."""

    extra_args: dict[str, Any] = {"ContentType": content_type}
    if options.metadata:
        extra_args["Metadata"] = dict(options.metadata)
    if options.cache_control:
        extra_args["CacheControl"] = options.cache_control
    if options.content_disposition:
        extra_args["ContentDisposition"] = options.content_disposition
    if options.content_encoding:
        extra_args["ContentEncoding"] = options.content_encoding
    if options.content_language:
        extra_args["ContentLanguage"] = options.content_language
    part_size = options.buffer_size if options.buffer_size > 0 else chunk_size
    return {
        "Bucket": bucket,
        "Key": key,
        "ExtraArgs": extra_args,
        "Config": TransferConfig(
            multipart_threshold=part_size,
            multipart_chunksize=part_size,
        ),
    }


class BlobWriter:
    """Writes one object. Not safe for use by several callers at once.

    The upload starts on a background thread at the first non-empty
    :meth:`write` and consumes a :class:`BytePipe`. :meth:`close` waits for
    it and raises the first error seen during the writer's lifetime.
    """

    def __init__(
        self,
        client,
        *,
        bucket: str,
        key: str,
        content_type: str,
        options: WriterOptions | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        pipe_capacity: int = DEFAULT_PIPE_CAPACITY,
    ):
        options = options or WriterOptions()
        self._client = client
        self._key = key
        self._pipe_capacity = pipe_capacity
        self._cancel_requested = options.cancel_requested
        self._expected_md5 = options.content_md5
        self._md5 = hashlib.md5() if options.content_md5 else None
        self._request = build_upload_request(
            bucket=bucket,
            key=key,
            content_type=content_type,
            options=options,
            chunk_size=chunk_size,
        )
        if options.before_write:
            options.before_write(RawPayload(UPLOAD_INPUT, self._request))

        self._pipe: Optional[BytePipe] = None
        self._thread: Optional[threading.Thread] = None
        self._done = threading.Event()
        self._lock = threading.Lock()
        self._error: BaseException | None = None
        self._closed = False

    @property
    def key(self) -> str:
        return self._key

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, data: bytes) -> int:
        if self._closed:
            raise ValueError("write to a closed writer")
        if not data:
            return 0
        if self._pipe is None:
            self._pipe = BytePipe(self._pipe_capacity, self._cancel_requested)
            self._start(self._pipe.reader)
        if self._done.is_set() and self._error is not None:
            raise self._error
        if self._md5 is not None:
            self._md5.update(data)
        try:
            return self._pipe.write(data)
        except TransferCancelledError as exc:
            # An earlier upload failure takes precedence over the cancellation.
            error = self._fail(exc)
        raise error

    def close(self) -> None:
        if self._closed:
            if self._error is not None:
                raise self._error
            return
        self._closed = True

        if self._pipe is None:
            # Nothing was written: upload an empty body so the object exists.
            if self._md5_mismatch():
                self._record(BlobError(ErrorCode.UNKNOWN, f"content MD5 mismatch for '{self._key}'"))
            elif self._cancel_requested and self._cancel_requested():
                self._record(TransferCancelledError("Transfer cancelled by caller"))
            else:
                self._start(io.BytesIO(b""))
            if self._thread is None:
                self._done.set()
        elif self._md5_mismatch():
            # Fail the stream before EOF so the upload never completes.
            self._fail(BlobError(ErrorCode.UNKNOWN, f"content MD5 mismatch for '{self._key}'"))
        elif self._cancel_requested and self._cancel_requested():
            self._fail(TransferCancelledError("Transfer cancelled by caller"))
        else:
            self._pipe.close()

        self._done.wait()
        if self._error is not None:
            raise self._error

    def abort(self, reason: BaseException | None = None) -> None:
        """Stop the upload without completing the object.

        ``reason`` becomes the ``__cause__`` of the recorded
        :class:`TransferCancelledError`.
        """

        if self._closed:
            return
        self._closed = True
        error = TransferCancelledError("Writer aborted")
        error.__cause__ = reason
        self._fail(error)
        if self._thread is None:
            self._done.set()
        self._done.wait()

    def __enter__(self) -> "BlobWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc is not None:
            self.abort(exc)
            return
        self.close()

    def _start(self, body) -> None:
        LOGGER.debug("Starting upload of '%s'", self._key)
        self._thread = threading.Thread(
            target=self._upload,
            args=(body,),
            name=f"s3-upload-{self._key}",
            daemon=True,
        )
        self._thread.start()

    def _upload(self, body) -> None:
        try:
            self._client.upload_fileobj(Fileobj=body, **self._request)
        except Exception as exc:
            error = self._record(exc)
            LOGGER.debug("Upload of '%s' failed", self._key, exc_info=True)
            if self._pipe is not None:
                self._pipe.close_with_error(error)
        else:
            LOGGER.debug("Upload of '%s' completed", self._key)
            if self._pipe is not None:
                self._pipe.close_with_error(ValueError("upload already completed"))
        finally:
            self._done.set()

    def _record(self, exc: BaseException) -> BaseException:
        # First error wins.
        with self._lock:
            if self._error is None:
                self._error = translate_error(exc) if isinstance(exc, Exception) else exc
            return self._error

    def _fail(self, exc: BaseException) -> BaseException:
        error = self._record(exc)
        if self._pipe is not None:
            self._pipe.close_with_error(error)
        return error

    def _md5_mismatch(self) -> bool:
        return self._md5 is not None and self._md5.digest() != self._expected_md5
