"""Command-line interface for Taurus."""

from taurus.cli.main import app

__all__ = ["app"]
