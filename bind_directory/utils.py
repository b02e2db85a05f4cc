"""
bind_directory.utils
--------------------
Lightweight helpers for base64url encoding, timestamps, canonical JSON
serialization and atomic file replacement.
These keep thumbprints deterministic and artifact writes all-or-nothing.
"""

from __future__ import annotations
import base64, hashlib, json, os, tempfile, time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Union


def b64url_encode(b: bytes) -> str:
    # RFC 7515 base64url, no padding
    return base64.urlsafe_b64encode(b).rstrip(b"=").decode("ascii")


def now_epoch() -> int:
    return int(time.time())


def now_iso() -> str:
    # ISO 8601 in UTC, millisecond precision, "Z" suffix
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_to_date(epoch: int) -> str:
    return datetime.fromtimestamp(epoch, tz=timezone.utc).strftime("%Y-%m-%d")


def today_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def canonical_json(obj: Dict[str, Any]) -> bytes:
    # Deterministic, minimal JSON for hashing
    return json.dumps(obj, separators=(",", ":"), sort_keys=True, ensure_ascii=False).encode("utf-8")


def pretty_json(obj: Any) -> bytes:
    """2-space indented JSON with a trailing newline, as stored on disk."""
    return (json.dumps(obj, indent=2, ensure_ascii=False) + "\n").encode("utf-8")


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def atomic_write(path: Union[str, Path], data: bytes) -> None:
    """Replace ``path`` with ``data`` so readers see either the old or the new file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(dir=str(path.parent), prefix=f".{path.name}.", delete=False) as tmp:
        tmp.write(data)
        tmp.flush()
        os.fsync(tmp.fileno())
        name = tmp.name
    try:
        os.replace(name, str(path))
    except OSError:
        os.unlink(name)
        raise
