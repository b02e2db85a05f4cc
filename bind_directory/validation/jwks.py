"""
JWKS checks. Private key material is always an error: a published key set
that carries "d" leaks the participant's signing key.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Set, Tuple

from bind_directory.constants import JWKS_FILE
from bind_directory.keys import (
    SUPPORTED_KEY_TYPES,
    TEMPORAL_FIELDS,
    is_timestamp,
    private_fields,
)
from bind_directory.storage import MalformedArtifactError, ParticipantRepository
from bind_directory.utils import now_epoch


def check_key(label: str, key: Any, kids: Set[str], now: int,
              errors: List[str], warnings: List[str]) -> None:
    if not isinstance(key, dict):
        errors.append(f"{label}: must be a JSON object")
        return

    kty = key.get("kty")
    if not kty:
        errors.append(f'{label}: missing "kty" field')
    elif kty not in SUPPORTED_KEY_TYPES:
        errors.append(f'{label}: unsupported key type "{kty}" ({", ".join(SUPPORTED_KEY_TYPES)})')

    kid = key.get("kid")
    if not kid:
        errors.append(f'{label}: missing "kid" field')
    elif not isinstance(kid, str):
        errors.append(f'{label}: "kid" must be a string')
    else:
        if kid in kids:
            errors.append(f'{label}: duplicate kid "{kid}"')
        kids.add(kid)

    for name in private_fields(key):
        errors.append(f'{label}: contains private key material ("{name}"); only public keys are allowed')

    for name in TEMPORAL_FIELDS:
        if name in key and not is_timestamp(key[name]):
            errors.append(f'{label}: "{name}" must be a number (Unix timestamp)')

    nbf, exp = key.get("nbf"), key.get("exp")
    if is_timestamp(nbf) and is_timestamp(exp) and nbf >= exp:
        errors.append(f"{label}: nbf ({nbf}) must be earlier than exp ({exp})")

    if is_timestamp(exp) and exp < now:
        warnings.append(f"{label}: key has expired (exp: {exp})")
    if is_timestamp(nbf) and nbf > now:
        warnings.append(f"{label}: key is not yet valid (nbf: {nbf})")


def validate_jwks(repo: ParticipantRepository, now: Optional[int] = None) -> Tuple[List[str], List[str]]:
    errors: List[str] = []
    warnings: List[str] = []
    now = now_epoch() if now is None else now

    for slug in repo.list_participants():
        if not repo.has_artifact(slug, JWKS_FILE):
            continue
        try:
            doc: Dict[str, Any] = repo.read_json(slug, JWKS_FILE)
        except MalformedArtifactError:
            errors.append(f"{slug}: {JWKS_FILE} is not valid JSON")
            continue

        keys = doc.get("keys") if isinstance(doc, dict) else None
        if not isinstance(keys, list):
            errors.append(f'{slug}: {JWKS_FILE} must have a "keys" array')
            continue
        if not keys:
            errors.append(f"{slug}: {JWKS_FILE} must contain at least one key")
            continue

        kids: Set[str] = set()
        for i, key in enumerate(keys):
            check_key(f"{slug}: key[{i}]", key, kids, now, errors, warnings)

    return errors, warnings
