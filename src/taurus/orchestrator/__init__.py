"""Orchestrator facade: seeding, periodic loops and the management surface."""

from taurus.orchestrator.service import Orchestrator, build_probe

__all__ = ["Orchestrator", "build_probe"]
