"""CLI command groups for Taurus."""
