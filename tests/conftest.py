# tests/conftest.py

import json
import pytest

from bind_directory.constants import PNG_MAGIC
from bind_directory.crypto import compute_jwk_thumbprint, generate_ec_p256_keypair
from bind_directory.storage import InMemoryRepository

NOW = 1_750_000_000
DAY = 86400

SVG = b'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 10 10"></svg>\n'
PNG = PNG_MAGIC + b"\x00" * 32


def public_key(**extra):
    _, pub = generate_ec_p256_keypair()
    key = dict(pub, kid=compute_jwk_thumbprint(pub), use="sig", alg="ES256", iat=NOW - 10 * DAY)
    key.update(extra)
    return key


def manifest(slug="acme", status="active", name=None, **overrides):
    doc = {
        "schemaVersion": "1.0",
        "slug": slug,
        "displayName": (name or slug.title()),
        "description": f"{slug} test participant",
        "joinedAt": "2025-01-15",
        "status": status,
        "organization": {
            "resourceType": "Organization",
            "name": name or f"{slug.title()} Insurance",
            "status": "active",
            "type": {"coding": [{"system": "https://bind.codes/OrganizationType", "code": "broker"}]},
            "address": [{"use": "work", "country": "CA", "state": "QC"}],
            "contact": [{"system": "url", "value": f"https://{slug}.com"}],
            "credentials": [{
                "type": "broker-license",
                "authority": "Autorité des marchés financiers",
                "identifier": "601234",
                "registryUrl": "https://lautorite.qc.ca/registre",
                "jurisdiction": "QC",
            }],
        },
    }
    doc.update(overrides)
    return doc


def participant_files(slug="acme", status="active", keys=None, name=None):
    return {
        "manifest.json": json.dumps(manifest(slug, status, name), indent=2).encode(),
        "jwks.json": json.dumps({"keys": keys if keys is not None else [public_key()]}).encode(),
        "logo.png": PNG,
        "logo.svg": SVG,
    }


@pytest.fixture
def repo():
    return InMemoryRepository({"acme": participant_files("acme")})
