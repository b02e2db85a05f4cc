# bind_directory/storage/provider.py
from __future__ import annotations
from typing import Any, Dict, List
import json

from bind_directory.constants import JWKS_FILE, MANIFEST_FILE
from bind_directory.keys import InvalidKeyError, Jwk, KeySet
from bind_directory.utils import pretty_json


class RepositoryError(Exception):
    pass


class ParticipantNotFoundError(RepositoryError):
    pass


class ArtifactNotFoundError(RepositoryError):
    pass


class MalformedArtifactError(RepositoryError):
    pass


class ParticipantRepository:
    """
    Access to the participant corpus, one directory-like unit per slug.

    Providers implement the byte-level primitives; the JSON and key set
    helpers below are shared. Writes replace a whole artifact at once.
    """

    # --- provider primitives ---
    def list_participants(self) -> List[str]:
        raise NotImplementedError

    def participant_exists(self, slug: str) -> bool:
        raise NotImplementedError

    def create_participant(self, slug: str) -> None:
        raise NotImplementedError

    def has_artifact(self, slug: str, name: str) -> bool:
        raise NotImplementedError

    def read_bytes(self, slug: str, name: str) -> bytes:
        raise NotImplementedError

    def write_bytes(self, slug: str, name: str, data: bytes) -> None:
        raise NotImplementedError

    # --- JSON helpers ---
    def read_json(self, slug: str, name: str) -> Any:
        raw = self.read_bytes(slug, name)
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise MalformedArtifactError(f"{slug}: {name} is not valid JSON") from exc

    def write_json(self, slug: str, name: str, doc: Any) -> None:
        self.write_bytes(slug, name, pretty_json(doc))

    def read_manifest(self, slug: str) -> Dict[str, Any]:
        return self.read_json(slug, MANIFEST_FILE)

    def write_manifest(self, slug: str, manifest: Dict[str, Any]) -> None:
        self.write_json(slug, MANIFEST_FILE, manifest)

    def read_key_set(self, slug: str) -> KeySet:
        doc = self.read_json(slug, JWKS_FILE)
        try:
            return KeySet.from_dict(doc)
        except InvalidKeyError as exc:
            raise MalformedArtifactError(f"{slug}: {JWKS_FILE}: {exc}") from exc

    def write_key_set(self, slug: str, key_set: KeySet) -> None:
        self.write_json(slug, JWKS_FILE, key_set.to_dict())

    def write_private_key(self, slug: str, name: str, key: Jwk) -> None:
        if self.has_artifact(slug, name):
            raise RepositoryError(f"{slug}: refusing to overwrite {name}")
        self.write_json(slug, name, key.to_dict())
