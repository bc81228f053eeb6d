from brain_api.models.refresh_session import RefreshSession
from brain_api.models.user import User

__all__ = [
    "RefreshSession",
    "User",
]
