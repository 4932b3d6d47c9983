from __future__ import annotations
"""Connection parameters for opening a bucket."""
from dataclasses import dataclass


@dataclass
class ConnectionProfile:
    """Everything needed to build a client for one bucket.

    Empty credentials defer to boto3's default provider chain.
    """

    name: str
    bucket: str
    endpoint_url: str = ""
    region: str = ""
    access_key: str = ""
    secret_key: str = ""
    disable_ssl: bool = False
    force_path_style: bool = False
