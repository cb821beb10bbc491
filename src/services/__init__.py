"""
Data services for the user management server.
"""

from .user_service import UserService

__all__ = ["UserService"]
