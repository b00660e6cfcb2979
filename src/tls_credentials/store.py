"""Ephemeral in-memory credential store.

Holds key entries (private key plus certificate chain) and certificate
entries under synthetic labels. A store lives only as long as the key
selector or trust validator built from it and is never persisted.
"""
from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Union

from cryptography import x509

from tls_credentials.errors import StoreConstructionError
from tls_credentials.keys import PrivateKeyHandle


@dataclass(frozen=True)
class KeyEntry:
    """A private key together with its certificate chain, leaf first."""

    private_key: PrivateKeyHandle
    chain: tuple[x509.Certificate, ...]


@dataclass(frozen=True)
class CertificateEntry:
    """A single trusted certificate."""

    certificate: x509.Certificate


StoreEntry = Union[KeyEntry, CertificateEntry]


class CredentialStore:
    """Label-addressed table of key and certificate entries."""

    def __init__(self) -> None:
        self._entries: dict[str, StoreEntry] = {}

    # ------------------------------------------------------------------
    # Population
    # ------------------------------------------------------------------

    def set_key_entry(
        self,
        alias: str,
        private_key: PrivateKeyHandle,
        chain: Sequence[x509.Certificate],
    ) -> None:
        """Store *private_key* with its certificate *chain* under *alias*.

        Raises
        ------
        StoreConstructionError
            If the chain is empty or the alias is already taken.
        """
        if not chain:
            raise StoreConstructionError(
                "Private key must be accompanied by at least one certificate"
            )
        self._put(alias, KeyEntry(private_key=private_key, chain=tuple(chain)))

    def set_certificate_entry(self, label: str, certificate: x509.Certificate) -> None:
        """Store a trusted *certificate* under *label*.

        Raises
        ------
        StoreConstructionError
            If the label is already taken.
        """
        self._put(label, CertificateEntry(certificate=certificate))

    def _put(self, label: str, entry: StoreEntry) -> None:
        if label in self._entries:
            raise StoreConstructionError(f"Store already has an entry labelled {label!r}")
        self._entries[label] = entry

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, label: str) -> StoreEntry | None:
        """Return the entry stored under *label*, or None."""
        return self._entries.get(label)

    def labels(self) -> list[str]:
        """Return entry labels in insertion order."""
        return list(self._entries)

    def key_entries(self) -> Iterator[tuple[str, KeyEntry]]:
        for label, entry in self._entries.items():
            if isinstance(entry, KeyEntry):
                yield label, entry

    def certificates(self) -> list[x509.Certificate]:
        """Return every certificate held in a certificate entry."""
        return [
            entry.certificate
            for entry in self._entries.values()
            if isinstance(entry, CertificateEntry)
        ]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, label: object) -> bool:
        return label in self._entries
