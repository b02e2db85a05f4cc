"""
bind_directory.rotation
-----------------------
Key lifecycle operations over one participant's key set:

- list:   read the key set
- rotate: optionally schedule retirement of active keys, then add a fresh
          EC P-256 key whose kid is its RFC 7638 thumbprint
- retire: set exp on one active key
- remove: drop one key outright (confirmed, never the last one)

Operations take a command object validated up front and return a
KeyOperationResult. Refusals are results, not exceptions, and leave every
artifact untouched. Rotation writes jwks.json and then the private key
artifact; the two writes are not a transaction, so intent is logged before
each one to make a half-finished rotation recoverable by hand.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .constants import PRIVATE_KEY_FILE, SECONDS_PER_DAY
from .crypto import KID_PREFIX_LEN, compute_jwk_thumbprint, generate_ec_p256_keypair
from .keys import ACTIVE, EXPIRED, Jwk, KeySet, ensure_public, key_status, is_timestamp
from .logger import get_logger
from .storage import ParticipantRepository
from .utils import epoch_to_date, now_epoch

log = get_logger("bind_directory.rotation")

DEFAULT_ALG = "ES256"
DEFAULT_USE = "sig"


@dataclass
class KeyOperationResult:
    ok: bool
    key_set: Optional[KeySet] = None
    reason: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    private_key_artifact: Optional[str] = None

    @classmethod
    def done(cls, key_set: KeySet, **kw) -> "KeyOperationResult":
        return cls(ok=True, key_set=key_set, **kw)

    @classmethod
    def refused(cls, reason: str, key_set: Optional[KeySet] = None) -> "KeyOperationResult":
        return cls(ok=False, key_set=key_set, reason=reason)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "reason": self.reason,
            "warnings": list(self.warnings),
            "privateKeyArtifact": self.private_key_artifact,
            "keySet": self.key_set.to_dict() if self.key_set is not None else None,
        }


def _days_problem(name: str, value: Optional[int]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return f"{name} must be a non-negative whole number of days"
    return None


@dataclass
class RotateCommand:
    retire_active_after_days: Optional[int] = None
    new_key_expiry_days: Optional[int] = None
    new_key_activation_delay_days: Optional[int] = None

    def problems(self) -> List[str]:
        out = [p for p in (
            _days_problem("retire_active_after_days", self.retire_active_after_days),
            _days_problem("new_key_expiry_days", self.new_key_expiry_days),
            _days_problem("new_key_activation_delay_days", self.new_key_activation_delay_days),
        ) if p]
        if out:
            return out
        # a key that activates on or after its own expiry is never usable
        delay, expiry = self.new_key_activation_delay_days or 0, self.new_key_expiry_days or 0
        if delay and expiry and delay >= expiry:
            out.append("new key would expire before it becomes valid (activation delay >= expiry)")
        return out


@dataclass
class RetireCommand:
    key_id: str
    expire_after_days: int = 0

    def problems(self) -> List[str]:
        if not self.key_id:
            return ["key_id is required"]
        if isinstance(self.expire_after_days, bool) or not isinstance(self.expire_after_days, int):
            return ["expire_after_days must be a whole number of days"]
        return []


@dataclass
class RemoveCommand:
    key_id: str
    confirmed: bool = False

    def problems(self) -> List[str]:
        return [] if self.key_id else ["key_id is required"]


class KeyManager:
    """Key lifecycle operations bound to a participant repository."""

    def __init__(self, repo: ParticipantRepository, clock=now_epoch):
        self.repo = repo
        self.clock = clock

    # --- list ---
    def list_keys(self, slug: str) -> KeyOperationResult:
        return KeyOperationResult.done(self.repo.read_key_set(slug))

    # --- rotate ---
    def rotate(self, slug: str, cmd: Optional[RotateCommand] = None) -> KeyOperationResult:
        cmd = cmd or RotateCommand()
        problems = cmd.problems()
        if problems:
            return KeyOperationResult.refused("; ".join(problems))

        key_set = self.repo.read_key_set(slug)
        now = self.clock()
        warnings: List[str] = []

        retiring_exp: Optional[int] = None
        if cmd.retire_active_after_days:
            retiring_exp = now + cmd.retire_active_after_days * SECONDS_PER_DAY
            for key in key_set.keys:
                if key_status(key, now) == ACTIVE:
                    key.exp = retiring_exp
                    log.info(f"{slug}: scheduling exp on {key.kid} -> {epoch_to_date(retiring_exp)}")

        private, public = generate_ec_p256_keypair()
        kid = compute_jwk_thumbprint(public)
        if key_set.find(kid) is not None:
            return KeyOperationResult.refused(f"generated kid {kid} already present in key set")

        nbf = now + cmd.new_key_activation_delay_days * SECONDS_PER_DAY if cmd.new_key_activation_delay_days else None
        exp = now + cmd.new_key_expiry_days * SECONDS_PER_DAY if cmd.new_key_expiry_days else None

        new_key = Jwk(**private, kid=kid, use=DEFAULT_USE, alg=DEFAULT_ALG, iat=now, nbf=nbf, exp=exp)
        public_key = new_key.public()
        ensure_public(public_key)

        artifact = PRIVATE_KEY_FILE
        if self.repo.has_artifact(slug, artifact):
            artifact = f"private-key-{kid[:KID_PREFIX_LEN]}.json"
            if self.repo.has_artifact(slug, artifact):
                return KeyOperationResult.refused(f"{artifact} already exists; refusing to overwrite")

        gap = self._trust_gap(key_set, now, nbf)
        if gap:
            warnings.append(gap)
            log.warning(f"{slug}: {gap}")

        key_set.keys.append(public_key)
        log.info(f"{slug}: writing jwks.json with new key {kid}")
        self.repo.write_key_set(slug, key_set)
        log.info(f"{slug}: writing {artifact} for {kid}")
        self.repo.write_private_key(slug, artifact, new_key)
        log.info(f"{slug}: rotation complete, {len(key_set)} key(s)")

        return KeyOperationResult.done(key_set, warnings=warnings, private_key_artifact=artifact)

    @staticmethod
    def _trust_gap(key_set: KeySet, now: int, new_nbf: Optional[int]) -> Optional[str]:
        """Describe a window with no usable key, if the new key starts too late."""
        if new_nbf is None:
            return None
        usable = [k for k in key_set.keys if key_status(k, now) != EXPIRED]
        if any(not is_timestamp(k.exp) for k in usable):
            return None
        last_exp = max((k.exp for k in usable), default=now)
        if new_nbf > last_exp:
            return (f"no usable key between {epoch_to_date(last_exp)} and "
                    f"{epoch_to_date(new_nbf)} (new key not valid before existing keys expire)")
        return None

    # --- retire ---
    def retire(self, slug: str, cmd: RetireCommand) -> KeyOperationResult:
        problems = cmd.problems()
        if problems:
            return KeyOperationResult.refused("; ".join(problems))

        key_set = self.repo.read_key_set(slug)
        now = self.clock()
        active = [k for k in key_set.keys if key_status(k, now) == ACTIVE]
        if not active:
            return KeyOperationResult.refused("no active keys to retire", key_set)

        target = next((k for k in active if k.kid == cmd.key_id), None)
        if target is None:
            return KeyOperationResult.refused(f"{cmd.key_id} is not an active key", key_set)

        exp = now + max(0, cmd.expire_after_days) * SECONDS_PER_DAY
        target.exp = exp
        log.info(f"{slug}: writing jwks.json with exp on {target.kid} -> {epoch_to_date(exp)}")
        self.repo.write_key_set(slug, key_set)
        return KeyOperationResult.done(key_set)

    # --- remove ---
    def remove(self, slug: str, cmd: RemoveCommand) -> KeyOperationResult:
        problems = cmd.problems()
        if problems:
            return KeyOperationResult.refused("; ".join(problems))

        key_set = self.repo.read_key_set(slug)
        if len(key_set) == 0:
            return KeyOperationResult.refused("no keys to remove", key_set)
        if len(key_set) == 1:
            return KeyOperationResult.refused(
                "cannot remove the only key; rotate first, then remove the old one", key_set)

        idx = next((i for i, k in enumerate(key_set.keys) if k.kid == cmd.key_id), None)
        if idx is None:
            return KeyOperationResult.refused(f"{cmd.key_id} is not in the key set", key_set)
        if not cmd.confirmed:
            return KeyOperationResult.refused("removal not confirmed", key_set)

        removed = key_set.keys.pop(idx)
        log.info(f"{slug}: writing jwks.json without {removed.kid}")
        self.repo.write_key_set(slug, key_set)
        return KeyOperationResult.done(key_set)
