# bind_directory/storage/__init__.py

from .provider import (
    ArtifactNotFoundError,
    MalformedArtifactError,
    ParticipantNotFoundError,
    ParticipantRepository,
    RepositoryError,
)
from .providers.memory_provider import InMemoryRepository
from .providers.fs_provider import FilesystemRepository
import os


def load_repository(config: dict | None = None) -> ParticipantRepository:
    """
    Factory resolver for selecting the participant corpus backend.

    For now:
        - filesystem (default)
        - memory
    """
    config = config or {}
    provider = config.get("provider") or os.getenv("BIND_REPOSITORY_PROVIDER", "filesystem")

    if provider == "memory":
        return InMemoryRepository()

    if provider == "filesystem":
        root = config.get("participants_dir") or os.getenv("BIND_PARTICIPANTS_DIR", "participants")
        return FilesystemRepository(root)

    raise ValueError(f"Unknown repository provider: {provider}")


__all__ = [
    "ParticipantRepository",
    "InMemoryRepository",
    "FilesystemRepository",
    "RepositoryError",
    "ParticipantNotFoundError",
    "ArtifactNotFoundError",
    "MalformedArtifactError",
    "load_repository",
]
