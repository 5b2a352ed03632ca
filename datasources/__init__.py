"""HTTP plumbing shared by the remote services."""

from .http import close_shared_session, get_shared_session

__all__ = ["get_shared_session", "close_shared_session"]
