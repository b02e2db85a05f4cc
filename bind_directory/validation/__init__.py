# bind_directory/validation/__init__.py

from .structure import validate_structure
from .manifest import validate_manifests
from .jwks import validate_jwks
from .logos import validate_logos
from .runner import ValidationReport, ValidationResult, run_all

__all__ = [
    "validate_structure",
    "validate_manifests",
    "validate_jwks",
    "validate_logos",
    "ValidationResult",
    "ValidationReport",
    "run_all",
]
