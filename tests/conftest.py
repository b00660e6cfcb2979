"""Shared key and certificate material for the test suite.

Everything is generated with ``cryptography`` once per session; nothing is
read from disk.
"""
from __future__ import annotations

import datetime
from dataclasses import dataclass

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID


@dataclass
class Authority:
    """A CA certificate and the key that signs with it."""

    cert: x509.Certificate
    key: rsa.RSAPrivateKey | ec.EllipticCurvePrivateKey


def _name(common_name: str) -> x509.Name:
    return x509.Name(
        [
            x509.NameAttribute(NameOID.COMMON_NAME, common_name),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "TLS Credentials Tests"),
        ]
    )


def _key_usage(*, ca: bool) -> x509.KeyUsage:
    return x509.KeyUsage(
        digital_signature=True,
        key_encipherment=not ca,
        content_commitment=False,
        data_encipherment=False,
        key_agreement=False,
        key_cert_sign=ca,
        crl_sign=ca,
        encipher_only=False,
        decipher_only=False,
    )


def issue_ca(
    common_name: str,
    key: rsa.RSAPrivateKey | ec.EllipticCurvePrivateKey,
    parent: Authority | None = None,
) -> Authority:
    """Issue a CA certificate, self-signed unless *parent* is given."""
    now = datetime.datetime.now(datetime.timezone.utc)
    issuer_name = parent.cert.subject if parent else _name(common_name)
    issuer_key = parent.key if parent else key

    cert = (
        x509.CertificateBuilder()
        .subject_name(_name(common_name))
        .issuer_name(issuer_name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=3650))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .add_extension(_key_usage(ca=True), critical=True)
        .add_extension(
            x509.SubjectKeyIdentifier.from_public_key(key.public_key()), critical=False
        )
        .add_extension(
            x509.AuthorityKeyIdentifier.from_issuer_public_key(issuer_key.public_key()),
            critical=False,
        )
        .sign(issuer_key, hashes.SHA256())
    )
    return Authority(cert=cert, key=key)


def issue_leaf(
    common_name: str,
    public_key: object,
    issuer: Authority,
    valid_days: int = 365,
) -> x509.Certificate:
    """Issue an end-entity certificate usable for client and server auth."""
    now = datetime.datetime.now(datetime.timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(_name(common_name))
        .issuer_name(issuer.cert.subject)
        .public_key(public_key)
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=valid_days))
        .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
        .add_extension(_key_usage(ca=False), critical=True)
        .add_extension(
            x509.ExtendedKeyUsage(
                [ExtendedKeyUsageOID.SERVER_AUTH, ExtendedKeyUsageOID.CLIENT_AUTH]
            ),
            critical=False,
        )
        .add_extension(
            x509.SubjectAlternativeName([x509.DNSName("localhost")]),
            critical=False,
        )
        .add_extension(x509.SubjectKeyIdentifier.from_public_key(public_key), critical=False)
        .add_extension(
            x509.AuthorityKeyIdentifier.from_issuer_public_key(issuer.key.public_key()),
            critical=False,
        )
        .sign(issuer.key, hashes.SHA256())
    )


def pkcs8_pem(key: object) -> bytes:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def pkcs8_der(key: object) -> bytes:
    return key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def cert_pem(cert: x509.Certificate) -> bytes:
    return cert.public_bytes(serialization.Encoding.PEM)


def cert_der(cert: x509.Certificate) -> bytes:
    return cert.public_bytes(serialization.Encoding.DER)


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def ed25519_key() -> ed25519.Ed25519PrivateKey:
    return ed25519.Ed25519PrivateKey.generate()


# ---------------------------------------------------------------------------
# Authorities and certificates
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def root_ca() -> Authority:
    return issue_ca("Test Root CA", rsa.generate_private_key(public_exponent=65537, key_size=2048))


@pytest.fixture(scope="session")
def other_root_ca() -> Authority:
    return issue_ca("Other Root CA", ec.generate_private_key(ec.SECP256R1()))


@pytest.fixture(scope="session")
def intermediate_ca(root_ca: Authority) -> Authority:
    return issue_ca(
        "Test Intermediate CA", ec.generate_private_key(ec.SECP256R1()), parent=root_ca
    )


@pytest.fixture(scope="session")
def rsa_leaf(rsa_key: rsa.RSAPrivateKey, root_ca: Authority) -> x509.Certificate:
    return issue_leaf("rsa-leaf", rsa_key.public_key(), root_ca)


@pytest.fixture(scope="session")
def ec_leaf(ec_key: ec.EllipticCurvePrivateKey, intermediate_ca: Authority) -> x509.Certificate:
    return issue_leaf("ec-leaf", ec_key.public_key(), intermediate_ca)


class Material:
    """Encoders and issuers for building test inputs."""

    pkcs8_pem = staticmethod(pkcs8_pem)
    pkcs8_der = staticmethod(pkcs8_der)
    cert_pem = staticmethod(cert_pem)
    cert_der = staticmethod(cert_der)
    issue_ca = staticmethod(issue_ca)
    issue_leaf = staticmethod(issue_leaf)


@pytest.fixture(scope="session")
def material() -> type[Material]:
    return Material
