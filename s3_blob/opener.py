from __future__ import annotations
"""Building S3 clients and opening buckets from profiles or URLs."""
import logging
from typing import Callable
from urllib.parse import parse_qs, urlsplit

import boto3
from botocore.config import Config

from .bucket import S3Bucket
from .profiles import ConnectionProfile
from .settings import BlobSettings, SettingsStorage

LOGGER = logging.getLogger(__name__)

S3_SCHEME = "s3"
URL_QUERY_OPTIONS = ("region", "endpoint", "disableSSL", "s3ForcePathStyle")

BucketOpener = Callable[[str], S3Bucket]


def create_client(
    *,
    endpoint_url: str | None = None,
    region: str | None = None,
    access_key: str | None = None,
    secret_key: str | None = None,
    disable_ssl: bool = False,
    force_path_style: bool = False,
    client_factory: Callable[..., object] | None = None,
):
    """Return a boto3 S3 client.

    Missing credentials fall through to boto3's default provider chain.
    """

    factory = client_factory or boto3.client
    config = Config(
        signature_version="s3v4",
        s3={"addressing_style": "path" if force_path_style else "auto"},
    )
    return factory(
        "s3",
        endpoint_url=endpoint_url or None,
        region_name=region or None,
        aws_access_key_id=access_key or None,
        aws_secret_access_key=secret_key or None,
        use_ssl=not disable_ssl,
        config=config,
    )


def open_bucket(client, name: str, settings: BlobSettings | None = None) -> S3Bucket:
    return S3Bucket(client, name, settings)


def open_profile_bucket(
    profile: ConnectionProfile,
    *,
    settings: BlobSettings | None = None,
    client_factory: Callable[..., object] | None = None,
) -> S3Bucket:
    client = create_client(
        endpoint_url=_qualify_endpoint(profile.endpoint_url, profile.disable_ssl),
        region=profile.region,
        access_key=profile.access_key,
        secret_key=profile.secret_key,
        disable_ssl=profile.disable_ssl,
        force_path_style=profile.force_path_style,
        client_factory=client_factory,
    )
    return open_bucket(client, profile.bucket, settings)


def parse_bucket_url(url: str) -> ConnectionProfile:
    """Parse ``s3://bucket?region=..&endpoint=..&disableSSL=true&s3ForcePathStyle=true``.

    Credentials are never part of the URL.
    """

    parts = urlsplit(url)
    if parts.scheme != S3_SCHEME:
        raise ValueError(f"unsupported scheme '{parts.scheme}' in {url!r}")
    if not parts.netloc:
        raise ValueError(f"missing bucket name in {url!r}")
    query = parse_qs(parts.query, keep_blank_values=True)
    unknown = sorted(set(query) - set(URL_QUERY_OPTIONS))
    if unknown:
        raise ValueError(f"unknown query parameter(s) {', '.join(unknown)} in {url!r}")

    def first(name: str) -> str:
        values = query.get(name)
        return values[0] if values else ""

    return ConnectionProfile(
        name=url,
        bucket=parts.netloc,
        endpoint_url=first("endpoint"),
        region=first("region"),
        disable_ssl=first("disableSSL") == "true",
        force_path_style=first("s3ForcePathStyle") == "true",
    )


class BucketRegistry:
    """Explicit map from URL scheme to bucket opener."""

    def __init__(self):
        self._openers: dict[str, BucketOpener] = {}

    def register(self, scheme: str, opener: BucketOpener) -> None:
        if scheme in self._openers:
            raise ValueError(f"scheme '{scheme}' is already registered")
        self._openers[scheme] = opener

    def schemes(self) -> list[str]:
        return sorted(self._openers)

    def open(self, url: str) -> S3Bucket:
        scheme = urlsplit(url).scheme
        opener = self._openers.get(scheme)
        if opener is None:
            raise ValueError(f"no opener registered for scheme '{scheme}'")
        LOGGER.debug("Opening bucket URL %s", url)
        return opener(url)


def default_registry(
    *,
    settings: BlobSettings | None = None,
    settings_storage: SettingsStorage | None = None,
    client_factory: Callable[..., object] | None = None,
) -> BucketRegistry:
    """Return a registry with the ``s3`` scheme registered.

    Without explicit ``settings`` the buckets use what ``settings_storage``
    loads, or the built-in defaults.
    """

    if settings is None and settings_storage is not None:
        settings = settings_storage.load()
    registry = BucketRegistry()
    registry.register(
        S3_SCHEME,
        lambda url: open_profile_bucket(
            parse_bucket_url(url),
            settings=settings,
            client_factory=client_factory,
        ),
    )
    return registry


def _qualify_endpoint(endpoint: str, disable_ssl: bool) -> str:
    if not endpoint or "://" in endpoint:
        return endpoint
    return f"{'http' if disable_ssl else 'https'}://{endpoint}"
