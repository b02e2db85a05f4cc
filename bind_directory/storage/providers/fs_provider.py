from __future__ import annotations
from pathlib import Path
from typing import List
import os

from bind_directory.storage.provider import (
    ArtifactNotFoundError,
    ParticipantNotFoundError,
    ParticipantRepository,
)
from bind_directory.utils import atomic_write


class FilesystemRepository(ParticipantRepository):
    """One directory per participant under ``root``; hidden entries are ignored."""

    def __init__(self, root="participants"):
        self.root = Path(root)

    def _dir(self, slug: str) -> Path:
        # slugs are plain directory names, never paths
        if not slug or "/" in slug or "\\" in slug or slug in (".", ".."):
            raise ParticipantNotFoundError(f"invalid participant identifier: {slug!r}")
        return self.root / slug

    def list_participants(self) -> List[str]:
        if not self.root.is_dir():
            return []
        return sorted(
            e.name for e in self.root.iterdir()
            if not e.name.startswith(".") and e.is_dir()
        )

    def participant_exists(self, slug: str) -> bool:
        return self._dir(slug).is_dir()

    def create_participant(self, slug: str) -> None:
        os.makedirs(self._dir(slug), exist_ok=True)

    def has_artifact(self, slug: str, name: str) -> bool:
        try:
            return (self._dir(slug) / name).is_file()
        except ParticipantNotFoundError:
            return False

    def read_bytes(self, slug: str, name: str) -> bytes:
        d = self._dir(slug)
        if not d.is_dir():
            raise ParticipantNotFoundError(f"unknown participant: {slug}")
        path = d / name
        if not path.is_file():
            raise ArtifactNotFoundError(f"{slug}: missing {name}")
        return path.read_bytes()

    def write_bytes(self, slug: str, name: str, data: bytes) -> None:
        d = self._dir(slug)
        if not d.is_dir():
            raise ParticipantNotFoundError(f"unknown participant: {slug}")
        atomic_write(d / name, data)
