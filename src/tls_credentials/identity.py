"""Identity bundle builder.

Turns private key and certificate chain material into a
:class:`KeySelector`, the object a TLS transport asks for the key and
chain it should present when authenticating the local endpoint.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes

from tls_credentials.certificates import parse_certificates
from tls_credentials.config import CredentialsConfig
from tls_credentials.errors import CredentialMaterialError, TLSSetupError
from tls_credentials.keys import load_private_key
from tls_credentials.pem import normalize
from tls_credentials.store import CredentialStore, KeyEntry

logger = logging.getLogger(__name__)

IDENTITY_ALIAS = "trusted"


class KeySelector:
    """Chooses the key and certificate chain to present during a handshake.

    Read-only once built; safe to share across threads and reuse for any
    number of handshakes.

    Parameters
    ----------
    store:
        Store holding the key entries to select from.
    """

    def __init__(self, store: CredentialStore) -> None:
        self._store = store

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def aliases(
        self,
        key_types: Sequence[str] | None = None,
        issuers: Sequence[x509.Name] | None = None,
    ) -> list[str]:
        """Return aliases compatible with what the peer accepts.

        Parameters
        ----------
        key_types:
            Key algorithm names the peer accepts (e.g. ``["RSA", "EC"]``).
            None or empty accepts any algorithm.
        issuers:
            Issuer names the peer trusts. None or empty accepts any issuer.
        """
        wanted_types = {key_type.upper() for key_type in key_types or ()}
        wanted_issuers = list(issuers or ())
        matches: list[str] = []
        for alias, entry in self._store.key_entries():
            if wanted_types and entry.private_key.algorithm.upper() not in wanted_types:
                continue
            if wanted_issuers and not any(
                cert.issuer in wanted_issuers for cert in entry.chain
            ):
                continue
            matches.append(alias)
        return matches

    def choose_alias(
        self,
        key_types: Sequence[str] | None = None,
        issuers: Sequence[x509.Name] | None = None,
    ) -> str | None:
        """Return the first compatible alias, or None if nothing matches."""
        matches = self.aliases(key_types, issuers)
        return matches[0] if matches else None

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def certificate_chain(self, alias: str) -> list[x509.Certificate] | None:
        entry = self._key_entry(alias)
        return list(entry.chain) if entry is not None else None

    def private_key(self, alias: str) -> PrivateKeyTypes | None:
        entry = self._key_entry(alias)
        return entry.private_key.key if entry is not None else None

    def key_algorithm(self, alias: str) -> str | None:
        entry = self._key_entry(alias)
        return entry.private_key.algorithm if entry is not None else None

    @property
    def chain(self) -> list[x509.Certificate]:
        """Certificate chain of the identity built by :func:`build_identity`."""
        return self.certificate_chain(IDENTITY_ALIAS) or []

    @property
    def key(self) -> PrivateKeyTypes | None:
        """Private key of the identity built by :func:`build_identity`."""
        return self.private_key(IDENTITY_ALIAS)

    def _key_entry(self, alias: str) -> KeyEntry | None:
        entry = self._store.get(alias)
        return entry if isinstance(entry, KeyEntry) else None


def build_identity(
    private_key_pem: bytes,
    certificate_chain_pem: bytes,
    config: CredentialsConfig | None = None,
) -> KeySelector:
    """Build a :class:`KeySelector` holding one private key and its chain.

    The key may be PEM-armored or raw PKCS8 DER; the chain may be PEM, DER,
    or a bundle. The key is not checked against the leaf certificate's
    public key; that is left to the handshake.

    Parameters
    ----------
    private_key_pem:
        Private key material.
    certificate_chain_pem:
        Certificate chain material, leaf first.
    config:
        Builder settings; defaults to :meth:`CredentialsConfig.default`.

    Raises
    ------
    TypeError
        If either input is None.
    TLSSetupError
        If the key or chain cannot be decoded or stored.
    """
    if private_key_pem is None:
        raise TypeError("private_key_pem must not be None")
    if certificate_chain_pem is None:
        raise TypeError("certificate_chain_pem must not be None")
    config = config or CredentialsConfig.default()

    try:
        key = load_private_key(normalize(private_key_pem), config.key_algorithms)
        chain = parse_certificates(certificate_chain_pem)
        store = CredentialStore()
        store.set_key_entry(IDENTITY_ALIAS, key, chain)
    except CredentialMaterialError as exc:
        raise TLSSetupError(
            "Could not build key selector from private key and certificate chain.", exc
        ) from exc

    logger.info(
        "Built key selector: %s key with %d certificate(s)", key.algorithm, len(chain)
    )
    return KeySelector(store)
