"""Authentication package."""
from .context import AuthContext, CurrentUser
from .supabase import get_auth_context, require_auth_context, verify_supabase_token

__all__ = [
    "AuthContext",
    "CurrentUser",
    "get_auth_context",
    "require_auth_context",
    "verify_supabase_token",
]
