"""Authentication collaborator for the eligibility service."""

from auth.supabase_auth import (
    AuthResult,
    AuthSession,
    SessionProvider,
    StaticTokenProvider,
    SupabaseAuthClient,
)

__all__ = [
    "AuthResult",
    "AuthSession",
    "SessionProvider",
    "StaticTokenProvider",
    "SupabaseAuthClient",
]
