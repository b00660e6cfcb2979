"""Private key loading across an ordered list of algorithms.

Callers do not say which algorithm generated a key, so
:func:`load_private_key` tries each configured :class:`KeyAlgorithm` in
turn and returns the first one that accepts the PKCS8 DER bytes.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, rsa
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes

from tls_credentials.errors import UnsupportedKeyAlgorithmError

logger = logging.getLogger(__name__)

DEFAULT_KEY_ALGORITHMS: tuple[str, ...] = ("RSA", "EC")

# Raised by cryptography when bytes are not a key of the requested kind.
_PARSE_ERRORS = (ValueError, TypeError, UnsupportedAlgorithm)


@dataclass(frozen=True)
class PrivateKeyHandle:
    """A parsed private key tagged with the algorithm that accepted it.

    Parameters
    ----------
    algorithm:
        Algorithm tag, e.g. ``"RSA"`` or ``"EC"``.
    key:
        The ``cryptography`` private key object.
    """

    algorithm: str
    key: PrivateKeyTypes


@dataclass(frozen=True)
class KeyAlgorithm:
    """One row of the algorithm table.

    Parameters
    ----------
    name:
        Algorithm tag reported in handles and error messages.
    parse:
        Returns a private key from PKCS8 DER, raising ``ValueError`` when the
        bytes hold some other kind of key.
    probe:
        Optional zero-argument check that raises when the installed OpenSSL
        build lacks the algorithm.
    """

    name: str
    parse: Callable[[bytes], PrivateKeyTypes]
    probe: Callable[[], object] | None = None

    def is_available(self) -> bool:
        """Return True if this algorithm can be used in the running process."""
        if self.probe is None:
            return True
        try:
            self.probe()
        except UnsupportedAlgorithm:
            return False
        return True


def _pkcs8_loader(expected: type, name: str) -> Callable[[bytes], PrivateKeyTypes]:
    def parse(der: bytes) -> PrivateKeyTypes:
        key = serialization.load_der_private_key(der, password=None)
        if not isinstance(key, expected):
            raise ValueError(f"PKCS8 key is not an {name} key")
        return key

    return parse


KEY_ALGORITHMS: dict[str, KeyAlgorithm] = {
    algorithm.name: algorithm
    for algorithm in (
        KeyAlgorithm("RSA", _pkcs8_loader(rsa.RSAPrivateKey, "RSA")),
        KeyAlgorithm("EC", _pkcs8_loader(ec.EllipticCurvePrivateKey, "EC")),
        KeyAlgorithm(
            "Ed25519",
            _pkcs8_loader(ed25519.Ed25519PrivateKey, "Ed25519"),
            probe=lambda: ed25519.Ed25519PrivateKey.from_private_bytes(bytes(32)),
        ),
        KeyAlgorithm(
            "Ed448",
            _pkcs8_loader(ed448.Ed448PrivateKey, "Ed448"),
            probe=lambda: ed448.Ed448PrivateKey.from_private_bytes(bytes(57)),
        ),
    )
}


def available_key_algorithms(
    names: Iterable[str] = DEFAULT_KEY_ALGORITHMS,
) -> tuple[KeyAlgorithm, ...]:
    """Resolve algorithm names into the ordered tuple the loader uses.

    Algorithms the running OpenSSL build does not support are left out
    rather than failing.

    Raises
    ------
    ValueError
        If a name is not in :data:`KEY_ALGORITHMS`.
    """
    resolved: list[KeyAlgorithm] = []
    for name in names:
        try:
            algorithm = KEY_ALGORITHMS[name]
        except KeyError:
            raise ValueError(
                f"Unknown key algorithm {name!r}; expected one of {sorted(KEY_ALGORITHMS)}"
            ) from None
        if not algorithm.is_available():
            logger.debug("Key algorithm %s is unavailable in this environment, skipping", name)
            continue
        resolved.append(algorithm)
    return tuple(resolved)


def load_private_key(der: bytes, algorithms: Sequence[KeyAlgorithm]) -> PrivateKeyHandle:
    """Parse PKCS8 DER bytes with the first algorithm that accepts them.

    Parameters
    ----------
    der:
        PKCS8 DER bytes, usually the output of
        :func:`tls_credentials.pem.normalize`.
    algorithms:
        Algorithms to try, in order.

    Returns
    -------
    PrivateKeyHandle

    Raises
    ------
    UnsupportedKeyAlgorithmError
        If every algorithm rejects the bytes. The message lists the
        algorithms attempted, e.g. ``[RSA,EC]``.
    """
    for algorithm in algorithms:
        try:
            key = algorithm.parse(der)
        except _PARSE_ERRORS as exc:
            logger.debug("Private key is not %s: %s", algorithm.name, exc)
            continue
        return PrivateKeyHandle(algorithm=algorithm.name, key=key)
    raise UnsupportedKeyAlgorithmError([algorithm.name for algorithm in algorithms])
