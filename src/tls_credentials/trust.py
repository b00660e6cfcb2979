"""Trust set builder.

Turns a bundle of trusted root certificates into a :class:`TrustValidator`,
the object a TLS transport asks whether a peer's certificate chain is
trusted. Path building and validation are delegated to
:mod:`cryptography.x509.verification`.
"""
from __future__ import annotations

import datetime
import ipaddress
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from cryptography import x509
from cryptography.x509.verification import PolicyBuilder, Store, VerificationError

from tls_credentials.certificates import parse_certificates
from tls_credentials.errors import (
    CertificateNotTrustedError,
    CredentialMaterialError,
    StoreConstructionError,
    TLSSetupError,
)
from tls_credentials.store import CredentialStore

logger = logging.getLogger(__name__)


@dataclass
class VerifiedChain:
    """Outcome of a successful trust check.

    Parameters
    ----------
    chain:
        The validated path, leaf first and trust anchor last.
    subjects:
        Subject alternative names of the leaf, when present.
    """

    chain: list[x509.Certificate]
    subjects: list[x509.GeneralName] = field(default_factory=list)


class TrustValidator:
    """Decides whether a peer-presented certificate chain is trusted.

    Read-only once built; safe to share across threads and reuse for any
    number of handshakes. A validator with no anchors rejects every chain.

    Parameters
    ----------
    store:
        Store whose certificate entries are the trust anchors.
    """

    def __init__(self, store: CredentialStore) -> None:
        self._store = store
        anchors = store.certificates()
        self._anchors: Store | None = None
        # cryptography refuses to build an empty Store.
        if anchors:
            try:
                self._anchors = Store(anchors)
            except ValueError as exc:
                raise StoreConstructionError(f"Could not build trust store: {exc}") from exc

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def accepted_issuers(self) -> list[x509.Certificate]:
        """Return the trust anchors, in the order they were supplied."""
        return self._store.certificates()

    def labels(self) -> list[str]:
        return self._store.labels()

    def __len__(self) -> int:
        return len(self._store)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def verify(
        self,
        chain: Sequence[x509.Certificate],
        server_name: str | None = None,
        at: datetime.datetime | None = None,
    ) -> VerifiedChain:
        """Validate *chain* against the trust anchors.

        Path validation uses the RFC 5280 web PKI profile of
        :mod:`cryptography.x509.verification`, which is stricter than a
        plain PKIX check. Certificates must carry the extensions that
        profile requires: an Authority Key Identifier on end-entity
        certificates, Basic Constraints and keyCertSign on CAs. A pinned
        self-signed end-entity certificate is rejected unless it meets the
        same rules.

        Parameters
        ----------
        chain:
            Peer chain, leaf first, followed by any intermediates.
        server_name:
            When given, the chain is checked as a server chain for this DNS
            name or IP address. Otherwise it is checked as a client chain.
        at:
            Validation time; defaults to now.

        Returns
        -------
        VerifiedChain

        Raises
        ------
        CertificateNotTrustedError
            If the chain is empty or no valid path to an anchor exists.
        """
        if not chain:
            raise CertificateNotTrustedError("Peer presented an empty certificate chain")
        if self._anchors is None:
            raise CertificateNotTrustedError("No trusted certificates are configured")

        builder = PolicyBuilder().store(self._anchors)
        if at is not None:
            builder = builder.time(at)
        leaf, intermediates = chain[0], list(chain[1:])

        try:
            if server_name is not None:
                verifier = builder.build_server_verifier(_subject_for(server_name))
                return VerifiedChain(
                    chain=list(verifier.verify(leaf, intermediates)),
                    subjects=_alternative_names(leaf),
                )
            verified = builder.build_client_verifier().verify(leaf, intermediates)
        except (VerificationError, ValueError) as exc:
            raise CertificateNotTrustedError(f"Certificate chain is not trusted: {exc}") from exc
        return VerifiedChain(chain=list(verified.chain), subjects=list(verified.subjects or []))

    def is_trusted(
        self,
        chain: Sequence[x509.Certificate],
        server_name: str | None = None,
        at: datetime.datetime | None = None,
    ) -> bool:
        """Return True if :meth:`verify` accepts *chain*."""
        try:
            self.verify(chain, server_name=server_name, at=at)
        except CertificateNotTrustedError:
            return False
        return True


def _alternative_names(certificate: x509.Certificate) -> list[x509.GeneralName]:
    try:
        extension = certificate.extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except x509.ExtensionNotFound:
        return []
    return list(extension.value)


def _subject_for(server_name: str) -> x509.GeneralName:
    try:
        return x509.IPAddress(ipaddress.ip_address(server_name))
    except ValueError:
        return x509.DNSName(server_name)


def build_trust(trusted_certificates_pem: bytes) -> TrustValidator:
    """Build a :class:`TrustValidator` from a bundle of trusted certificates.

    Each certificate is stored under a positional label (``cert_0``,
    ``cert_1``, ...). An input without certificates is valid and yields a
    validator that trusts nothing.

    Parameters
    ----------
    trusted_certificates_pem:
        PEM, DER, or bundle of trusted certificates.

    Raises
    ------
    TypeError
        If the input is None.
    TLSSetupError
        If the certificates cannot be decoded or stored.
    """
    if trusted_certificates_pem is None:
        raise TypeError("trusted_certificates_pem must not be None")

    try:
        certificates = parse_certificates(trusted_certificates_pem)
        store = CredentialStore()
        for index, certificate in enumerate(certificates):
            store.set_certificate_entry(f"cert_{index}", certificate)
        validator = TrustValidator(store)
    except CredentialMaterialError as exc:
        raise TLSSetupError(
            "Could not build trust validator from trusted certificates.", exc
        ) from exc

    logger.info("Built trust validator with %d trusted certificate(s)", len(store))
    return validator
