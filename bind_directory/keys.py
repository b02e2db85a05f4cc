"""
bind_directory.keys
-------------------
Key record model for participant key sets.

- Jwk / KeySet: typed JWK and JWKS records (unknown members preserved)
- is_private_material(): pure predicate guarding published key sets
- key_status(): temporal state of a key (active | pending | expired)
- describe_keys(): per-key rows for an operator tool to render

Timestamps (iat, nbf, exp) are Unix seconds.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
import math

from .constants import SECONDS_PER_DAY

SUPPORTED_KEY_TYPES = ("EC", "RSA", "OKP")
PRIVATE_KEY_FIELDS = ("d", "p", "q", "dp", "dq", "qi", "k")
TEMPORAL_FIELDS = ("nbf", "exp", "iat")

ACTIVE = "active"
PENDING = "pending"
EXPIRED = "expired"

# Default order for keys built in code; unknown members land after "d".
_HEAD = ("kty", "crv", "x", "y", "d")
_TAIL = ("kid", "use", "alg", "iat", "nbf", "exp")
_NAMED = _HEAD + _TAIL


class InvalidKeyError(ValueError):
    pass


def is_timestamp(value: Any) -> bool:
    """True for finite numbers; bools are not timestamps."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


@dataclass
class Jwk:
    kty: Optional[str] = None
    crv: Optional[str] = None
    x: Optional[str] = None
    y: Optional[str] = None
    d: Optional[str] = None
    kid: Optional[str] = None
    use: Optional[str] = None
    alg: Optional[str] = None
    iat: Optional[int] = None
    nbf: Optional[int] = None
    exp: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)  # n, e, p, q, ...
    # member order as read from disk; members listed here are written back
    # in place, explicit nulls included
    order: List[str] = field(default_factory=list, repr=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for name in self.order:
            if name in _NAMED:
                out[name] = getattr(self, name)
            elif name in self.extra:
                out[name] = self.extra[name]
        for name in _HEAD:
            if name not in out and getattr(self, name) is not None:
                out[name] = getattr(self, name)
        for name, value in self.extra.items():
            out.setdefault(name, value)
        for name in _TAIL:
            if name not in out and getattr(self, name) is not None:
                out[name] = getattr(self, name)
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Jwk":
        if not isinstance(data, dict):
            raise InvalidKeyError("key must be a JSON object")
        return cls(
            extra={k: v for k, v in data.items() if k not in _NAMED},
            order=list(data),
            **{k: data.get(k) for k in _NAMED},
        )

    def public(self) -> "Jwk":
        """Copy of this record with every private member stripped."""
        return Jwk(
            kty=self.kty, crv=self.crv, x=self.x, y=self.y, d=None,
            kid=self.kid, use=self.use, alg=self.alg,
            iat=self.iat, nbf=self.nbf, exp=self.exp,
            extra={k: v for k, v in self.extra.items() if k not in PRIVATE_KEY_FIELDS},
            order=[k for k in self.order if k not in PRIVATE_KEY_FIELDS],
        )


@dataclass
class KeySet:
    keys: List[Jwk] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"keys": [k.to_dict() for k in self.keys]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KeySet":
        if not isinstance(data, dict) or not isinstance(data.get("keys"), list):
            raise InvalidKeyError('key set must have a "keys" array')
        return cls(keys=[Jwk.from_dict(k) for k in data["keys"]])

    def find(self, kid: str) -> Optional[Jwk]:
        return next((k for k in self.keys if k.kid == kid), None)

    def kids(self) -> List[str]:
        return [k.kid for k in self.keys if k.kid]

    def __len__(self) -> int:
        return len(self.keys)


KeyLike = Union[Jwk, Dict[str, Any]]


def _as_dict(record: KeyLike) -> Dict[str, Any]:
    return record.to_dict() if isinstance(record, Jwk) else record


def private_fields(record: KeyLike) -> List[str]:
    data = _as_dict(record)
    return [f for f in PRIVATE_KEY_FIELDS if f in data]


def is_private_material(record: KeyLike) -> bool:
    return bool(private_fields(record))


def ensure_public(record: KeyLike) -> None:
    """Raise InvalidKeyError unless ``record`` may enter a published key set."""
    data = _as_dict(record)
    if data.get("kty") not in SUPPORTED_KEY_TYPES:
        raise InvalidKeyError(f'unsupported key type "{data.get("kty")}"')
    found = private_fields(data)
    if found:
        raise InvalidKeyError(f"record carries private key material ({', '.join(found)})")


def key_status(key: KeyLike, now: int) -> str:
    # expiry wins over not-before, even when both are set
    data = _as_dict(key)
    exp, nbf = data.get("exp"), data.get("nbf")
    if is_timestamp(exp) and exp < now:
        return EXPIRED
    if is_timestamp(nbf) and nbf > now:
        return PENDING
    return ACTIVE


def describe_keys(key_set: KeySet, now: int) -> List[Dict[str, Any]]:
    rows = []
    for key in key_set.keys:
        remaining = None
        if is_timestamp(key.exp):
            remaining = math.ceil((key.exp - now) / SECONDS_PER_DAY)
        rows.append({
            "kid": key.kid,
            "kty": key.kty,
            "crv": key.crv,
            "alg": key.alg,
            "status": key_status(key, now),
            "iat": key.iat,
            "nbf": key.nbf,
            "exp": key.exp,
            "expires_in_days": remaining,
        })
    return rows
