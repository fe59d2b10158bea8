from .task import Task
from .user import User, UserToken
from .timestamps import utc_now

# Export all models for easy importing
__all__ = ["Task", "User", "UserToken", "utc_now"]
