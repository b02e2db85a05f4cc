"""
bind_directory.directory
------------------------
Folds active participant manifests into the published directory document.

Manifest status is the only publication gate here: key validity is not
re-checked, an expired key is a validation warning and nothing more.
publish_directory() refuses to write while the corpus has validation errors.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import os

from .constants import DIRECTORY_ISS_ROOT, MANIFEST_FILE, SCHEMA_VERSION
from .logger import get_logger
from .storage import MalformedArtifactError, ParticipantRepository
from .utils import atomic_write, now_iso, pretty_json
from .validation import ValidationReport, run_all

log = get_logger("bind_directory.directory")


class PublicationBlockedError(Exception):
    def __init__(self, report: ValidationReport):
        super().__init__(f"directory not published: {report.total_errors} validation error(s)")
        self.report = report


def iss_root(override: Optional[str] = None) -> str:
    return (override or os.getenv("BIND_ISS_ROOT") or DIRECTORY_ISS_ROOT).rstrip("/")


def directory_entry(slug: str, manifest: Dict[str, Any], root: str) -> Dict[str, Any]:
    return {
        **manifest,
        "iss": f"{root}/{slug}",
        "logoUrl": f"/logos/{slug}.png",
        "jwksUrl": f"/{slug}/.well-known/jwks.json",
        "profileUrl": f"/participants/{slug}",
    }


def _sort_key(entry: Dict[str, Any]):
    org = entry.get("organization")
    name = org.get("name") if isinstance(org, dict) else None
    return (str(name or entry["slug"]).casefold(), entry["slug"])


def build_directory(repo: ParticipantRepository, iss_root_url: Optional[str] = None,
                    now: Optional[str] = None) -> Dict[str, Any]:
    root = iss_root(iss_root_url)
    entries: List[Dict[str, Any]] = []

    for slug in repo.list_participants():
        if not repo.has_artifact(slug, MANIFEST_FILE):
            continue
        try:
            manifest = repo.read_manifest(slug)
        except MalformedArtifactError as exc:
            log.error(f"skipping {slug}: {exc}")
            continue
        if not isinstance(manifest, dict) or manifest.get("status") != "active":
            continue
        entries.append(directory_entry(slug, {**manifest, "slug": slug}, root))

    entries.sort(key=_sort_key)
    return {
        "schemaVersion": SCHEMA_VERSION,
        "generatedAt": now or now_iso(),
        "participants": entries,
    }


def publish_directory(repo: ParticipantRepository, output_path: Union[str, Path],
                      iss_root_url: Optional[str] = None) -> Dict[str, Any]:
    report = run_all(repo)
    if not report.ok:
        raise PublicationBlockedError(report)

    doc = build_directory(repo, iss_root_url)
    log.info(f"writing {output_path} with {len(doc['participants'])} participant(s)")
    atomic_write(output_path, pretty_json(doc))
    return doc
