"""Session authentication package."""

from src.auth.session import (
    AuthSession,
    create_session,
    is_authenticated,
    verify_session,
)

__all__ = [
    "AuthSession",
    "create_session",
    "is_authenticated",
    "verify_session",
]
