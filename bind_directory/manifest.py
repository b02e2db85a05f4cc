"""
bind_directory.manifest
-----------------------
Participant manifest records and the schema pass that produces them.

parse_manifest() checks a decoded manifest.json against
schemas/manifest.schema.json (one finding per violation) plus the
slug/folder equality rule, and only hands back a typed Manifest when
nothing failed.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from typing import Any, Dict, List, Optional, Tuple
import json

from jsonschema import Draft202012Validator

from .constants import SCHEMA_VERSION


@dataclass
class Coding:
    code: str
    system: Optional[str] = None
    display: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"system": self.system, "code": self.code, "display": self.display})


@dataclass
class CodeableConcept:
    coding: List[Coding] = field(default_factory=list)
    text: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"coding": [c.to_dict() for c in self.coding] or None, "text": self.text})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CodeableConcept":
        return cls(
            coding=[Coding(code=c["code"], system=c.get("system"), display=c.get("display"))
                    for c in data.get("coding", [])],
            text=data.get("text"),
        )


@dataclass
class Address:
    country: str
    use: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "use": self.use, "city": self.city, "state": self.state,
            "postalCode": self.postal_code, "country": self.country,
        })


@dataclass
class ContactPoint:
    system: str
    value: str
    use: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"system": self.system, "value": self.value, "use": self.use})


@dataclass
class Credential:
    """A regulatory credential (license, registration, bar admission...)."""
    type: str
    authority: str
    identifier: str
    registry_url: Optional[str] = None
    jurisdiction: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "type": self.type, "authority": self.authority, "identifier": self.identifier,
            "registryUrl": self.registry_url, "jurisdiction": self.jurisdiction,
        })


@dataclass
class Organization:
    name: str
    status: str
    type: CodeableConcept
    address: List[Address] = field(default_factory=list)
    contact: List[ContactPoint] = field(default_factory=list)
    lines_of_business: List[CodeableConcept] = field(default_factory=list)
    territories: List[str] = field(default_factory=list)
    credentials: List[Credential] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "resourceType": "Organization",
            "name": self.name,
            "status": self.status,
            "type": self.type.to_dict(),
            "address": [a.to_dict() for a in self.address] or None,
            "contact": [c.to_dict() for c in self.contact] or None,
            "linesOfBusiness": [c.to_dict() for c in self.lines_of_business] or None,
            "territories": list(self.territories) or None,
            "credentials": [c.to_dict() for c in self.credentials] or None,
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Organization":
        return cls(
            name=data["name"],
            status=data["status"],
            type=CodeableConcept.from_dict(data["type"]),
            address=[Address(country=a["country"], use=a.get("use"), city=a.get("city"),
                             state=a.get("state"), postal_code=a.get("postalCode"))
                     for a in data.get("address", [])],
            contact=[ContactPoint(system=c["system"], value=c["value"], use=c.get("use"))
                     for c in data.get("contact", [])],
            lines_of_business=[CodeableConcept.from_dict(c) for c in data.get("linesOfBusiness", [])],
            territories=list(data.get("territories", [])),
            credentials=[Credential(type=c["type"], authority=c["authority"], identifier=c["identifier"],
                                    registry_url=c.get("registryUrl"), jurisdiction=c.get("jurisdiction"))
                         for c in data.get("credentials", [])],
        )


@dataclass
class Manifest:
    slug: str
    description: str
    joined_at: str
    status: str
    organization: Organization
    display_name: Optional[str] = None
    jwks_url: Optional[str] = None
    schema_version: str = SCHEMA_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return _compact({
            "schemaVersion": self.schema_version,
            "slug": self.slug,
            "displayName": self.display_name,
            "description": self.description,
            "jwksUrl": self.jwks_url,
            "joinedAt": self.joined_at,
            "status": self.status,
            "organization": self.organization.to_dict(),
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Manifest":
        return cls(
            schema_version=data["schemaVersion"],
            slug=data["slug"],
            display_name=data.get("displayName"),
            description=data["description"],
            jwks_url=data.get("jwksUrl"),
            joined_at=data["joinedAt"],
            status=data["status"],
            organization=Organization.from_dict(data["organization"]),
        )


def _compact(d: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


@lru_cache(maxsize=1)
def manifest_validator() -> Draft202012Validator:
    with resources.files("bind_directory").joinpath("schemas/manifest.schema.json").open("rb") as f:
        schema = json.load(f)
    return Draft202012Validator(schema)


def _path(error) -> str:
    out = ""
    for part in error.absolute_path:
        out += f"[{part}]" if isinstance(part, int) else (f".{part}" if out else str(part))
    return out


def schema_errors(doc: Any) -> List[str]:
    errors = sorted(
        manifest_validator().iter_errors(doc),
        key=lambda e: ([str(p) for p in e.absolute_path], e.message),
    )
    return [f"{_path(e)}: {e.message}" if _path(e) else e.message for e in errors]


def parse_manifest(slug: str, doc: Any) -> Tuple[Optional[Manifest], List[str]]:
    """Return (manifest, []) for a clean document, else (None, errors)."""
    errors = [f"{slug}: {msg}" for msg in schema_errors(doc)]
    if isinstance(doc, dict) and doc.get("slug") != slug:
        errors.append(f'{slug}: manifest slug "{doc.get("slug")}" does not match folder name')
    if errors:
        return None, errors
    return Manifest.from_dict(doc), []
