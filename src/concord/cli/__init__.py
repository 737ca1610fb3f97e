"""Command-line interface."""

from concord.cli.main import cli_entrypoint, main

__all__ = ["cli_entrypoint", "main"]
