"""Command-line interface for tls-credentials."""
