"""
bind_directory.scaffold
-----------------------
Creates a new participant: manifest (status "pending"), a fresh EC P-256
key pair (public half in jwks.json, private half in private-key.json) and
placeholder logos to be replaced before publication.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional
import base64
import re

from .constants import (
    JWKS_FILE,
    LOGO_PNG_FILE,
    LOGO_SVG_FILE,
    ORGANIZATION_TYPE_SYSTEM,
    ORGANIZATION_TYPES,
    PRIVATE_KEY_FILE,
    SLUG_PATTERN,
)
from .crypto import compute_jwk_thumbprint, generate_ec_p256_keypair
from .keys import Jwk, KeySet
from .logger import get_logger
from .manifest import (
    Address,
    CodeableConcept,
    Coding,
    ContactPoint,
    Credential,
    Manifest,
    Organization,
    parse_manifest,
)
from .rotation import DEFAULT_ALG, DEFAULT_USE
from .storage import ParticipantRepository
from .utils import today_iso

log = get_logger("bind_directory.scaffold")

# 1x1 transparent PNG
PLACEHOLDER_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAAC0lEQVQI12NgAAIABQAB"
    "Nl7BcQAAAABJRU5ErkJggg=="
)

PLACEHOLDER_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">'
    '<rect width="100" height="100" fill="#ccc"/>'
    '<text x="50" y="55" text-anchor="middle" font-size="12" fill="#666">Logo</text>'
    "</svg>\n"
).encode("utf-8")


class ScaffoldError(ValueError):
    pass


@dataclass
class ScaffoldCommand:
    slug: str
    org_name: str
    org_type: str
    description: str
    display_name: Optional[str] = None
    country: str = "CA"
    state: Optional[str] = None
    website: Optional[str] = None
    credentials: List[Credential] = field(default_factory=list)

    def problems(self) -> List[str]:
        out = []
        if not re.match(SLUG_PATTERN, self.slug or ""):
            out.append("slug must match ^[a-z0-9][a-z0-9-]*[a-z0-9]$ or be a single character")
        if not self.org_name:
            out.append("organization name is required")
        if self.org_type not in ORGANIZATION_TYPES:
            out.append(f'unknown organization type "{self.org_type}"')
        if not self.description:
            out.append("description is required")
        elif len(self.description) > 300:
            out.append(f"description too long ({len(self.description)} chars, max 300)")
        for c in self.credentials:
            if not (c.authority and c.identifier):
                out.append("each credential needs an authority and an identifier")
        return out


def build_manifest(cmd: ScaffoldCommand) -> Manifest:
    # jurisdiction defaults to the region, then the country
    credentials = [
        Credential(type=c.type, authority=c.authority, identifier=c.identifier,
                   registry_url=c.registry_url, jurisdiction=c.jurisdiction or cmd.state or cmd.country)
        for c in cmd.credentials
    ]
    org = Organization(
        name=cmd.org_name,
        status="active",
        type=CodeableConcept(coding=[
            Coding(system=ORGANIZATION_TYPE_SYSTEM, code=cmd.org_type, display=ORGANIZATION_TYPES[cmd.org_type]),
        ]),
        address=[Address(use="work", country=cmd.country, state=cmd.state or None)],
        contact=[ContactPoint(system="url", value=cmd.website or f"https://{cmd.slug}.com")],
        credentials=credentials,
    )
    return Manifest(
        slug=cmd.slug,
        display_name=cmd.display_name or cmd.org_name,
        description=cmd.description,
        joined_at=today_iso(),
        status="pending",
        organization=org,
    )


def scaffold_participant(repo: ParticipantRepository, cmd: ScaffoldCommand) -> Manifest:
    problems = cmd.problems()
    if problems:
        raise ScaffoldError("; ".join(problems))
    if repo.participant_exists(cmd.slug):
        raise ScaffoldError(f'participant "{cmd.slug}" already exists')

    manifest = build_manifest(cmd)
    _, errors = parse_manifest(cmd.slug, manifest.to_dict())
    if errors:
        raise ScaffoldError("; ".join(errors))

    private, public = generate_ec_p256_keypair()
    kid = compute_jwk_thumbprint(public)
    private_key = Jwk(**private, kid=kid, use=DEFAULT_USE, alg=DEFAULT_ALG)

    repo.create_participant(cmd.slug)
    log.info(f"{cmd.slug}: writing manifest, jwks and private key (kid {kid})")
    repo.write_manifest(cmd.slug, manifest.to_dict())
    repo.write_key_set(cmd.slug, KeySet([private_key.public()]))
    repo.write_private_key(cmd.slug, PRIVATE_KEY_FILE, private_key)
    repo.write_bytes(cmd.slug, LOGO_PNG_FILE, PLACEHOLDER_PNG)
    repo.write_bytes(cmd.slug, LOGO_SVG_FILE, PLACEHOLDER_SVG)
    log.info(f"{cmd.slug}: created {JWKS_FILE} and placeholder logos; replace logos before publishing")
    return manifest
