"""tls-credentials: turn key and certificate material into TLS identity and trust objects.

Public API
----------
The stable public surface is everything exported from this module.

Quick start
-----------
::

    from tls_credentials import build_identity, build_trust

    selector = build_identity(key_pem, chain_pem)
    validator = build_trust(ca_bundle_pem)
    validator.verify(peer_chain, server_name="example.com")
"""
from __future__ import annotations

__version__: str = "0.1.0"

from tls_credentials.certificates import parse_certificates
from tls_credentials.config import CredentialsConfig
from tls_credentials.errors import (
    CertificateNotTrustedError,
    CredentialMaterialError,
    InvalidBase64Error,
    MalformedCertificateError,
    StoreConstructionError,
    TLSSetupError,
    UnsupportedKeyAlgorithmError,
)
from tls_credentials.identity import IDENTITY_ALIAS, KeySelector, build_identity
from tls_credentials.keys import (
    DEFAULT_KEY_ALGORITHMS,
    KEY_ALGORITHMS,
    KeyAlgorithm,
    PrivateKeyHandle,
    available_key_algorithms,
    load_private_key,
)
from tls_credentials.pem import normalize
from tls_credentials.store import CertificateEntry, CredentialStore, KeyEntry
from tls_credentials.trust import TrustValidator, VerifiedChain, build_trust

__all__ = [
    "__version__",
    # Builders
    "build_identity",
    "build_trust",
    "KeySelector",
    "TrustValidator",
    "VerifiedChain",
    "IDENTITY_ALIAS",
    # Decoding
    "normalize",
    "load_private_key",
    "parse_certificates",
    "available_key_algorithms",
    "KeyAlgorithm",
    "PrivateKeyHandle",
    "KEY_ALGORITHMS",
    "DEFAULT_KEY_ALGORITHMS",
    # Store
    "CredentialStore",
    "KeyEntry",
    "CertificateEntry",
    # Config
    "CredentialsConfig",
    # Errors
    "TLSSetupError",
    "CredentialMaterialError",
    "InvalidBase64Error",
    "UnsupportedKeyAlgorithmError",
    "MalformedCertificateError",
    "StoreConstructionError",
    "CertificateNotTrustedError",
]
