"""CLI entry point for tls-credentials.

Invoked as::

    tls-credentials [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m tls_credentials.cli.main

Commands
--------
key inspect       Detect the algorithm of a private key file
certs inspect     List the certificates found in a PEM/DER file or bundle
identity check    Build a key selector from a key and certificate chain
trust verify      Check a certificate chain against a trusted bundle
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tls_credentials.errors import CredentialMaterialError, TLSSetupError

if TYPE_CHECKING:
    from tls_credentials.config import CredentialsConfig

console = Console()

_algorithm_option = click.option(
    "--algorithm",
    "-a",
    multiple=True,
    help="Key algorithm to try, in order (repeatable). Defaults to RSA then EC.",
)


# ------------------------------------------------------------------
# Root group
# ------------------------------------------------------------------


@click.group()
@click.version_option()
def cli() -> None:
    """Turn key and certificate material into TLS identity and trust objects"""


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from tls_credentials import __version__

    console.print(f"[bold]tls-credentials[/bold] v{__version__}")


# ------------------------------------------------------------------
# key inspect
# ------------------------------------------------------------------


@cli.group(name="key")
def key_group() -> None:
    """Inspect private key material."""


@key_group.command(name="inspect")
@click.argument("key_file", type=click.Path(exists=True, dir_okay=False))
@_algorithm_option
def key_inspect_command(key_file: str, algorithm: tuple[str, ...]) -> None:
    """Detect which algorithm parses KEY_FILE (PEM or DER PKCS8)."""
    from tls_credentials.keys import load_private_key
    from tls_credentials.pem import normalize

    config = _config(algorithm)
    try:
        handle = load_private_key(
            normalize(Path(key_file).read_bytes()), config.key_algorithms
        )
    except CredentialMaterialError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    console.print(f"[green]Loaded[/green] [bold]{handle.algorithm}[/bold] private key")
    console.print(f"  Details: {_describe_key(handle.key)}")


# ------------------------------------------------------------------
# certs inspect
# ------------------------------------------------------------------


@cli.group(name="certs")
def certs_group() -> None:
    """Inspect certificate material."""


@certs_group.command(name="inspect")
@click.argument("cert_file", type=click.Path(exists=True, dir_okay=False))
def certs_inspect_command(cert_file: str) -> None:
    """List the certificates in CERT_FILE in the order they appear."""
    from tls_credentials.certificates import parse_certificates

    try:
        certificates = parse_certificates(Path(cert_file).read_bytes())
    except CredentialMaterialError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    if not certificates:
        console.print("[yellow]No certificates found.[/yellow]")
        return

    console.print(_certificate_table(certificates, title=f"Certificates in {cert_file}"))
    console.print(f"\nTotal: {len(certificates)} certificate(s)")


# ------------------------------------------------------------------
# identity check
# ------------------------------------------------------------------


@cli.group(name="identity")
def identity_group() -> None:
    """Build local TLS identities."""


@identity_group.command(name="check")
@click.option(
    "--key",
    "key_file",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Path to the PEM or DER PKCS8 private key.",
)
@click.option(
    "--cert",
    "cert_file",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Path to the certificate chain, leaf first.",
)
@_algorithm_option
def identity_check_command(
    key_file: str,
    cert_file: str,
    algorithm: tuple[str, ...],
) -> None:
    """Build a key selector from a private key and certificate chain."""
    from tls_credentials.identity import build_identity

    try:
        selector = build_identity(
            Path(key_file).read_bytes(),
            Path(cert_file).read_bytes(),
            config=_config(algorithm),
        )
    except TLSSetupError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    alias = selector.choose_alias()
    console.print(f"[green]Identity ready[/green] under alias [bold]{alias}[/bold]")
    console.print(f"  Key:   {selector.key_algorithm(alias)} ({_describe_key(selector.key)})")
    console.print(f"  Chain: {len(selector.chain)} certificate(s)")
    console.print(_certificate_table(selector.chain, title="Presented chain"))


# ------------------------------------------------------------------
# trust verify
# ------------------------------------------------------------------


@cli.group(name="trust")
def trust_group() -> None:
    """Validate peer certificate chains."""


@trust_group.command(name="verify")
@click.argument("chain_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--trusted",
    "trusted_file",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Path to the trusted certificate bundle.",
)
@click.option(
    "--server-name",
    default=None,
    help="Validate as a server chain for this DNS name or IP address.",
)
def trust_verify_command(
    chain_file: str,
    trusted_file: str,
    server_name: str | None,
) -> None:
    """Check whether the chain in CHAIN_FILE is trusted."""
    from tls_credentials.certificates import parse_certificates
    from tls_credentials.errors import CertificateNotTrustedError
    from tls_credentials.trust import build_trust

    try:
        validator = build_trust(Path(trusted_file).read_bytes())
        chain = parse_certificates(Path(chain_file).read_bytes())
    except (TLSSetupError, CredentialMaterialError) as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    try:
        verified = validator.verify(chain, server_name=server_name)
    except CertificateNotTrustedError as exc:
        console.print(f"  [red]FAIL[/red]  {escape(str(exc))}")
        sys.exit(1)

    console.print(
        f"  [green]PASS[/green]  Chain of {len(verified.chain)} certificate(s) "
        f"leads to a trusted certificate ({len(validator)} configured)."
    )


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _config(algorithm: tuple[str, ...]) -> CredentialsConfig:
    from tls_credentials.config import CredentialsConfig

    if not algorithm:
        return CredentialsConfig.default()
    try:
        return CredentialsConfig.from_names(algorithm)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--algorithm") from exc


def _describe_key(key: object) -> str:
    if isinstance(key, rsa.RSAPrivateKey):
        return f"{key.key_size} bits"
    if isinstance(key, ec.EllipticCurvePrivateKey):
        return f"curve {key.curve.name}"
    return type(key).__name__


def _certificate_table(certificates: list[x509.Certificate], title: str) -> Table:
    table = Table(title=title, show_header=True)
    table.add_column("#", justify="right")
    table.add_column("Subject", style="cyan")
    table.add_column("Issuer")
    table.add_column("Serial", justify="right")
    table.add_column("Not After")

    for index, certificate in enumerate(certificates):
        table.add_row(
            str(index),
            certificate.subject.rfc4514_string(),
            certificate.issuer.rfc4514_string(),
            format(certificate.serial_number, "x"),
            certificate.not_valid_after_utc.isoformat(),
        )
    return table


if __name__ == "__main__":
    cli()
