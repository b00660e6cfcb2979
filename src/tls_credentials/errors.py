"""Error types raised while turning key and certificate material into TLS objects.

Low-level failures are instances of :class:`CredentialMaterialError`. The
builders in :mod:`tls_credentials.identity` and :mod:`tls_credentials.trust`
wrap any of them in a single :class:`TLSSetupError` so callers only need to
handle one error kind at that boundary.
"""
from __future__ import annotations

from collections.abc import Sequence


class CredentialMaterialError(ValueError):
    """Base class for failures decoding key or certificate material."""


class InvalidBase64Error(CredentialMaterialError):
    """PEM-armored content was not valid base64 after whitespace stripping."""


class UnsupportedKeyAlgorithmError(CredentialMaterialError):
    """No configured algorithm could parse the private key.

    Parameters
    ----------
    attempted:
        Algorithm names tried, in order.
    """

    def __init__(self, attempted: Sequence[str]) -> None:
        self.attempted: tuple[str, ...] = tuple(attempted)
        super().__init__(
            "Unable to generate key from supported algorithms: "
            f"[{','.join(self.attempted)}]"
        )


class MalformedCertificateError(CredentialMaterialError):
    """Certificate bytes could not be parsed as an X.509 certificate."""


class StoreConstructionError(CredentialMaterialError):
    """The in-memory credential or trust store could not be populated."""


class CertificateNotTrustedError(CredentialMaterialError):
    """A presented certificate chain does not lead to a trust anchor."""


class TLSSetupError(Exception):
    """Single failure category for building key selectors and trust validators.

    The underlying cause is chained (``__cause__``) and also available as
    :attr:`cause`.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause

    def __str__(self) -> str:
        message = super().__str__()
        if self.cause is None:
            return message
        return f"{message} Cause: {self.cause}"
