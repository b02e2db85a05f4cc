from __future__ import annotations
from typing import List, Tuple

from bind_directory.constants import MANIFEST_FILE
from bind_directory.manifest import parse_manifest
from bind_directory.storage import MalformedArtifactError, ParticipantRepository


def validate_manifests(repo: ParticipantRepository) -> Tuple[List[str], List[str]]:
    errors: List[str] = []
    warnings: List[str] = []

    for slug in repo.list_participants():
        # a missing manifest is reported by the structure check
        if not repo.has_artifact(slug, MANIFEST_FILE):
            continue
        try:
            doc = repo.read_manifest(slug)
        except MalformedArtifactError:
            errors.append(f"{slug}: {MANIFEST_FILE} is not valid JSON")
            continue

        _, problems = parse_manifest(slug, doc)
        errors.extend(problems)

    return errors, warnings
