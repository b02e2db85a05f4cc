"""
bind_directory.crypto
---------------------
Key material helpers for participant key sets:

- EC P-256: key pair generation exported as JWK members
- RFC 7638 thumbprints: the canonical kid for any public JWK

Thumbprints are computed from the required public members only, so the
same public key always yields the same kid whatever metadata surrounds it.
"""

from __future__ import annotations
from typing import Any, Dict, Tuple
from cryptography.hazmat.primitives.asymmetric import ec
from .keys import InvalidKeyError, Jwk, KeyLike
from .utils import b64url_encode, canonical_json, sha256

# Required members per key type, RFC 7638 section 3.2
THUMBPRINT_MEMBERS = {
    "EC": ("crv", "kty", "x", "y"),
    "RSA": ("e", "kty", "n"),
    "OKP": ("crv", "kty", "x"),
}

KID_PREFIX_LEN = 8


# --------- Thumbprint ----------
def thumbprint_input(key: KeyLike) -> bytes:
    data = key.to_dict() if isinstance(key, Jwk) else key
    members = THUMBPRINT_MEMBERS.get(data.get("kty"))
    if members is None:
        raise InvalidKeyError(f'cannot compute thumbprint for key type "{data.get("kty")}"')
    missing = [m for m in members if not isinstance(data.get(m), str) or not data.get(m)]
    if missing:
        raise InvalidKeyError(f"key is missing required member(s): {', '.join(missing)}")
    return canonical_json({m: data[m] for m in members})


def compute_jwk_thumbprint(key: KeyLike) -> str:
    """SHA-256 JWK thumbprint, base64url without padding."""
    return b64url_encode(sha256(thumbprint_input(key)))


# --------- EC P-256 (ES256) ----------
def _coord(n: int, size: int) -> str:
    # RFC 7518: coordinates are the full curve width, big-endian
    return b64url_encode(n.to_bytes(size, "big"))


def generate_ec_p256_keypair() -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Return (private_jwk, public_jwk) members for a fresh P-256 key."""
    sk = ec.generate_private_key(ec.SECP256R1())
    nums = sk.private_numbers()
    pub = nums.public_numbers
    size = (sk.curve.key_size + 7) // 8
    public = {
        "kty": "EC",
        "crv": "P-256",
        "x": _coord(pub.x, size),
        "y": _coord(pub.y, size),
    }
    private = dict(public, d=_coord(nums.private_value, size))
    return private, public
