from __future__ import annotations
"""Default tuning values for buckets and their persistence."""

from dataclasses import asdict, dataclass, fields
import json
from pathlib import Path

from .lister import DEFAULT_PAGE_SIZE
from .pipe import DEFAULT_PIPE_CAPACITY
from .writer import DEFAULT_CHUNK_SIZE


@dataclass(frozen=True)
class BlobSettings:
    """Defaults applied when an operation does not override them."""

    page_size: int = DEFAULT_PAGE_SIZE
    upload_chunk_size: int = DEFAULT_CHUNK_SIZE
    pipe_buffer_size: int = DEFAULT_PIPE_CAPACITY
    signed_url_expiry: int = 3600


class SettingsStorage:
    """JSON-backed persistence for :class:`BlobSettings`."""

    def __init__(self, storage_path: str | Path | None = None):
        if storage_path is None:
            storage_path = Path.home() / ".pys3blob_settings.json"
        self._path = Path(storage_path)

    def load(self) -> BlobSettings:
        if not self._path.exists():
            return BlobSettings()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return BlobSettings()
        if not isinstance(data, dict):
            return BlobSettings()
        defaults = BlobSettings()
        values = {}
        for item in fields(BlobSettings):
            fallback = getattr(defaults, item.name)
            try:
                value = int(data.get(item.name, fallback))
            except (TypeError, ValueError):
                value = fallback
            values[item.name] = value if value > 0 else fallback
        return BlobSettings(**values)

    def save(self, settings: BlobSettings) -> None:
        payload = {name: max(int(value), 1) for name, value in asdict(settings).items()}
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError:
            # Persist best-effort; ignore filesystem issues.
            return
