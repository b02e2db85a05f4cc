from typing import Dict, List
from bind_directory.storage.provider import (
    ArtifactNotFoundError,
    ParticipantNotFoundError,
    ParticipantRepository,
)


class InMemoryRepository(ParticipantRepository):
    def __init__(self, participants: Dict[str, Dict[str, bytes]] = None):
        self.participants = {slug: dict(files) for slug, files in (participants or {}).items()}

    def list_participants(self) -> List[str]:
        return sorted(s for s in self.participants if not s.startswith("."))

    def participant_exists(self, slug: str) -> bool:
        return slug in self.participants

    def create_participant(self, slug: str):
        self.participants.setdefault(slug, {})

    def has_artifact(self, slug: str, name: str) -> bool:
        return name in self.participants.get(slug, {})

    def read_bytes(self, slug: str, name: str) -> bytes:
        files = self.participants.get(slug)
        if files is None:
            raise ParticipantNotFoundError(f"unknown participant: {slug}")
        if name not in files:
            raise ArtifactNotFoundError(f"{slug}: missing {name}")
        return files[name]

    def write_bytes(self, slug: str, name: str, data: bytes):
        if slug not in self.participants:
            raise ParticipantNotFoundError(f"unknown participant: {slug}")
        self.participants[slug][name] = bytes(data)
