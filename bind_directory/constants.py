# bind_directory/constants.py

SCHEMA_VERSION = "1.0"

DIRECTORY_ISS_ROOT = "https://bindpki.org"

SLUG_PATTERN = r"^[a-z0-9][a-z0-9-]*[a-z0-9]\Z|^[a-z0-9]\Z"

MANIFEST_FILE = "manifest.json"
JWKS_FILE = "jwks.json"
PRIVATE_KEY_FILE = "private-key.json"
LOGO_PNG_FILE = "logo.png"
LOGO_SVG_FILE = "logo.svg"

REQUIRED_FILES = (MANIFEST_FILE, JWKS_FILE, LOGO_PNG_FILE, LOGO_SVG_FILE)

MAX_LOGO_SIZE = 512 * 1024  # 512 KiB
PNG_MAGIC = bytes([0x89, 0x50, 0x4E, 0x47, 0x0D, 0x0A, 0x1A, 0x0A])

MANIFEST_STATUSES = ("active", "pending", "suspended", "revoked")
ORGANIZATION_STATUSES = ("active", "inactive", "entered-in-error")

SECONDS_PER_DAY = 86400

ORGANIZATION_TYPE_SYSTEM = "https://bind.codes/OrganizationType"

ORGANIZATION_TYPES = {
    "insurer": "Insurer",
    "broker": "Broker",
    "mga": "Managing General Agent",
    "tpa": "Third-Party Administrator",
    "reinsurer": "Reinsurer",
    "expert": "Expert",
    "counsel": "Counsel",
    "tech-provider": "Technology Provider",
    "industry-body": "Industry Body",
}
