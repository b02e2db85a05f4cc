"""
BIND Directory Core
===================
Key lifecycle and directory-integrity engine for the trust network
participant registry.

Provides:
- JWK / JWKS records, RFC 7638 thumbprints and key status
- Key rotation, retirement and removal over a participant repository
- Corpus validation (structure, manifests, JWKS, logos)
- Aggregation of active participants into the published directory
"""
