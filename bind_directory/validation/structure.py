from __future__ import annotations
from typing import List, Tuple
import re

from bind_directory.constants import REQUIRED_FILES, SLUG_PATTERN
from bind_directory.storage import ParticipantRepository

SLUG_RE = re.compile(SLUG_PATTERN)


def validate_structure(repo: ParticipantRepository) -> Tuple[List[str], List[str]]:
    errors: List[str] = []
    warnings: List[str] = []

    slugs = repo.list_participants()
    if not slugs:
        warnings.append("No participant directories found")
        return errors, warnings

    for slug in slugs:
        if not SLUG_RE.match(slug):
            errors.append(f"{slug}: slug is not URL-safe (must be lowercase alphanumeric with hyphens)")
            continue

        for name in REQUIRED_FILES:
            if not repo.has_artifact(slug, name):
                errors.append(f"{slug}: missing required file {name}")

    return errors, warnings
