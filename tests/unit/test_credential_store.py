"""Tests for tls_credentials.store: CredentialStore."""
from __future__ import annotations

import pytest

from tls_credentials.errors import StoreConstructionError
from tls_credentials.keys import PrivateKeyHandle
from tls_credentials.store import CertificateEntry, CredentialStore, KeyEntry


@pytest.fixture()
def store() -> CredentialStore:
    return CredentialStore()


@pytest.fixture()
def handle(rsa_key) -> PrivateKeyHandle:
    return PrivateKeyHandle(algorithm="RSA", key=rsa_key)


class TestKeyEntries:
    def test_set_key_entry(self, store, handle, rsa_leaf, root_ca) -> None:
        store.set_key_entry("trusted", handle, [rsa_leaf, root_ca.cert])
        entry = store.get("trusted")
        assert isinstance(entry, KeyEntry)
        assert entry.private_key is handle
        assert entry.chain == (rsa_leaf, root_ca.cert)

    def test_empty_chain_rejected(self, store, handle) -> None:
        with pytest.raises(StoreConstructionError):
            store.set_key_entry("trusted", handle, [])
        assert len(store) == 0

    def test_key_entries_iterates_only_keys(self, store, handle, rsa_leaf, root_ca) -> None:
        store.set_key_entry("trusted", handle, [rsa_leaf])
        store.set_certificate_entry("cert_0", root_ca.cert)
        assert [alias for alias, _ in store.key_entries()] == ["trusted"]


class TestCertificateEntries:
    def test_set_certificate_entry(self, store, root_ca) -> None:
        store.set_certificate_entry("cert_0", root_ca.cert)
        assert store.get("cert_0") == CertificateEntry(certificate=root_ca.cert)
        assert "cert_0" in store

    def test_certificates_in_insertion_order(self, store, root_ca, other_root_ca) -> None:
        store.set_certificate_entry("cert_0", other_root_ca.cert)
        store.set_certificate_entry("cert_1", root_ca.cert)
        assert store.certificates() == [other_root_ca.cert, root_ca.cert]
        assert store.labels() == ["cert_0", "cert_1"]

    def test_duplicate_label_rejected(self, store, root_ca) -> None:
        store.set_certificate_entry("cert_0", root_ca.cert)
        with pytest.raises(StoreConstructionError, match="cert_0"):
            store.set_certificate_entry("cert_0", root_ca.cert)

    def test_same_certificate_under_two_labels(self, store, root_ca) -> None:
        store.set_certificate_entry("cert_0", root_ca.cert)
        store.set_certificate_entry("cert_1", root_ca.cert)
        assert len(store) == 2


class TestLookup:
    def test_missing_label_returns_none(self, store) -> None:
        assert store.get("nope") is None
        assert "nope" not in store

    def test_new_store_is_empty(self, store) -> None:
        assert len(store) == 0
        assert store.labels() == []
        assert store.certificates() == []
