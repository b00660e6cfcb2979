"""Certificate chain parsing from PEM, DER, or mixed bundles.

A bundle is a stream of entries. Each entry is either a DER certificate
(an ASN.1 SEQUENCE) or a PEM block; free text such as the comments found
in CA bundle files may sit between entries and is skipped.
"""
from __future__ import annotations

import base64
import binascii
import logging
import re

from cryptography import x509

from tls_credentials.errors import MalformedCertificateError

logger = logging.getLogger(__name__)

CERTIFICATE_LABELS: frozenset[str] = frozenset({"CERTIFICATE", "X509 CERTIFICATE"})

_PEM_BEGIN = re.compile(rb"-----BEGIN ([A-Z0-9 ]+)-----")
_WHITESPACE = re.compile(rb"\s")
_SEQUENCE_TAG = 0x30
_UTF8_BOM = b"\xef\xbb\xbf"
_TEXT_CONTROLS = frozenset(b"\t\n\r\x0b\x0c")


def parse_certificates(data: bytes) -> list[x509.Certificate]:
    """Extract every certificate from *data* in stream order.

    Parameters
    ----------
    data:
        A single PEM or DER certificate, or a bundle of several with
        explanatory text in between.

    Returns
    -------
    list[x509.Certificate]
        Certificates in the order they appear. Empty for empty or
        certificate-free input.

    Raises
    ------
    MalformedCertificateError
        If a certificate entry cannot be decoded, a PEM block is not
        terminated, or binary data appears outside any entry.
    """
    certificates: list[x509.Certificate] = []
    pos = len(_UTF8_BOM) if data.startswith(_UTF8_BOM) else 0
    while pos < len(data):
        if data[pos : pos + 1].isspace():
            pos += 1
            continue
        if _starts_der_certificate(data, pos):
            end = _der_end(data, pos)
            certificates.append(_load_der(data[pos:end], offset=pos))
            pos = end
            continue

        match = _PEM_BEGIN.search(data, pos)
        if match is None:
            _check_text(data[pos:], offset=pos)
            break
        _check_text(data[pos : match.start()], offset=pos)

        label = match.group(1).decode("ascii")
        footer = f"-----END {label}-----".encode("ascii")
        footer_at = data.find(footer, match.end())
        if footer_at < 0:
            raise MalformedCertificateError(
                f"PEM block {label!r} at offset {match.start()} has no matching footer"
            )
        pos = footer_at + len(footer)

        if label not in CERTIFICATE_LABELS:
            logger.debug("Skipping non-certificate PEM block %r at offset %d", label, match.start())
            continue

        body = _WHITESPACE.sub(b"", data[match.end() : footer_at])
        try:
            der = base64.b64decode(_pad(body), validate=True)
        except binascii.Error as exc:
            raise MalformedCertificateError(
                f"PEM certificate at offset {match.start()} is not valid base64: {exc}"
            ) from exc
        certificates.append(_load_der(der, offset=match.start()))

    return certificates


def _starts_der_certificate(data: bytes, pos: int) -> bool:
    # Certificates are always longer than 127 bytes, so the length is long-form.
    return (
        pos + 1 < len(data)
        and data[pos] == _SEQUENCE_TAG
        and 0x81 <= data[pos + 1] <= 0x84
    )


def _der_end(data: bytes, pos: int) -> int:
    length_octets = data[pos + 1] & 0x7F
    header_end = pos + 2 + length_octets
    if header_end > len(data):
        raise MalformedCertificateError(f"Truncated DER length at offset {pos}")
    length = int.from_bytes(data[pos + 2 : header_end], "big")
    end = header_end + length
    if end > len(data):
        raise MalformedCertificateError(
            f"DER certificate at offset {pos} declares {length} bytes, "
            f"only {len(data) - header_end} available"
        )
    return end


def _load_der(der: bytes, offset: int) -> x509.Certificate:
    try:
        return x509.load_der_x509_certificate(der)
    except ValueError as exc:
        raise MalformedCertificateError(
            f"Could not parse certificate at offset {offset}: {exc}"
        ) from exc


def _check_text(chunk: bytes, offset: int) -> None:
    """Raise unless *chunk* is text that can be skipped.

    Any encoding is accepted; only NUL and other control bytes mark binary data.
    """
    for index, byte in enumerate(chunk):
        if byte in _TEXT_CONTROLS:
            continue
        if byte < 0x20 or byte == 0x7F:
            raise MalformedCertificateError(
                f"Unrecognised binary data at offset {offset + index}"
            )


def _pad(body: bytes) -> bytes:
    # Missing "=" padding is tolerated.
    return body + b"=" * (-len(body) % 4)
