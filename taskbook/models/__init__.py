from .account import Account, AuthSession
from .task import Task
from .user import Profile

# Export all models for easy importing
__all__ = ["Account", "AuthSession", "Profile", "Task"]
