"""API route modules."""

from replay_studio.api.routes import discovery, health, jobs, system

__all__ = ["discovery", "health", "jobs", "system"]
