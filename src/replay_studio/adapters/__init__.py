"""Adapters for external services."""

from replay_studio.adapters.discovery.base import DiscoverySource
from replay_studio.adapters.runner.base import JobRunner

__all__ = [
    "DiscoverySource",
    "JobRunner",
]
