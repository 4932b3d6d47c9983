"""Provider-agnostic blob access with an S3 backend."""

from .bucket import S3Bucket
from .errors import BlobError, ErrorCode, TransferCancelledError, error_code
from .models import Attributes, ListObject, ListPage, ReaderAttributes
from .normalize import etag_to_md5
from .opener import BucketRegistry, create_client, default_registry, open_bucket, open_profile_bucket
from .options import ListOptions, ReaderOptions, WriterOptions
from .reader import RangeReader
from .writer import BlobWriter

__all__ = [
    "Attributes",
    "BlobError",
    "BlobWriter",
    "BucketRegistry",
    "ErrorCode",
    "ListObject",
    "ListOptions",
    "ListPage",
    "RangeReader",
    "ReaderAttributes",
    "ReaderOptions",
    "S3Bucket",
    "TransferCancelledError",
    "WriterOptions",
    "create_client",
    "default_registry",
    "error_code",
    "etag_to_md5",
    "open_bucket",
    "open_profile_bucket",
]
