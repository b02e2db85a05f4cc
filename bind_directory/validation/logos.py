from __future__ import annotations
from typing import List, Tuple

from bind_directory.constants import LOGO_PNG_FILE, LOGO_SVG_FILE, MAX_LOGO_SIZE, PNG_MAGIC
from bind_directory.storage import ParticipantRepository


def _size_error(slug: str, name: str, size: int) -> str:
    return f"{slug}: {name} exceeds {MAX_LOGO_SIZE // 1024}KB ({round(size / 1024)}KB)"


def validate_logos(repo: ParticipantRepository) -> Tuple[List[str], List[str]]:
    errors: List[str] = []
    warnings: List[str] = []

    for slug in repo.list_participants():
        if repo.has_artifact(slug, LOGO_PNG_FILE):
            data = repo.read_bytes(slug, LOGO_PNG_FILE)
            if len(data) > MAX_LOGO_SIZE:
                errors.append(_size_error(slug, LOGO_PNG_FILE, len(data)))
            if data[:8] != PNG_MAGIC:
                errors.append(f"{slug}: {LOGO_PNG_FILE} does not have valid PNG magic bytes")

        if repo.has_artifact(slug, LOGO_SVG_FILE):
            data = repo.read_bytes(slug, LOGO_SVG_FILE)
            if len(data) > MAX_LOGO_SIZE:
                errors.append(_size_error(slug, LOGO_SVG_FILE, len(data)))
            if "<svg" not in data.decode("utf-8", errors="replace"):
                errors.append(f"{slug}: {LOGO_SVG_FILE} does not contain an <svg> tag")

    return errors, warnings
