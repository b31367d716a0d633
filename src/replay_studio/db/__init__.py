"""Database layer."""

from replay_studio.db.models import Base, ReplayModel, SystemStatusModel, UploadJobModel
from replay_studio.db.session import check_connection, get_session_context

__all__ = [
    "Base",
    "check_connection",
    "get_session_context",
    # Models
    "ReplayModel",
    "SystemStatusModel",
    "UploadJobModel",
]
