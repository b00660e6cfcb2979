"""Builder configuration.

The ordered key algorithm list is resolved once per process and then
threaded through the builders as part of an immutable
:class:`CredentialsConfig`.
"""
from __future__ import annotations

import functools
from collections.abc import Iterable
from dataclasses import dataclass

from tls_credentials.keys import DEFAULT_KEY_ALGORITHMS, KeyAlgorithm, available_key_algorithms


@dataclass(frozen=True)
class CredentialsConfig:
    """Settings shared by :func:`build_identity` and :func:`build_trust`.

    Parameters
    ----------
    key_algorithms:
        Algorithms tried, in order, when loading a private key.
    """

    key_algorithms: tuple[KeyAlgorithm, ...]

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "CredentialsConfig":
        """Build a config trying the named algorithms in the given order."""
        return cls(key_algorithms=available_key_algorithms(names))

    @classmethod
    def default(cls) -> "CredentialsConfig":
        """Return the process-wide default config (RSA, then EC)."""
        return _default_config()

    @property
    def algorithm_names(self) -> list[str]:
        return [algorithm.name for algorithm in self.key_algorithms]


@functools.lru_cache(maxsize=1)
def _default_config() -> CredentialsConfig:
    return CredentialsConfig.from_names(DEFAULT_KEY_ALGORITHMS)
