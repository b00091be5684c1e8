"""Supabase access-token authentication."""
from typing import Optional

import httpx
from fastapi import Depends, Header
from supabase import AuthApiError, AuthRetryableError

from unigo.errors import ERROR_INVALID_TOKEN, AuthRequiredError, AuthUnavailableError
from unigo.logging import get_logger
from unigo.services.database import get_database

from .context import AuthContext, CurrentUser

logger = get_logger(__name__)


async def verify_supabase_token(token: str) -> Optional[CurrentUser]:
    """
    Resolve a Supabase access token to its user, or None if it is not valid.

    Raises:
        AuthUnavailableError: Supabase auth could not be reached
    """
    db = get_database()
    try:
        response = await db.client.auth.get_user(token)
    except AuthRetryableError as e:
        logger.error(f"Supabase auth unavailable (status {e.status})")
        raise AuthUnavailableError() from e
    except AuthApiError as e:
        logger.warning(f"Supabase token rejected (status {e.status})")
        return None
    except httpx.HTTPError as e:
        logger.error(f"Supabase auth transport error: {type(e).__name__}")
        raise AuthUnavailableError() from e

    if not response or not response.user:
        return None

    user = response.user
    return CurrentUser(id=str(user.id), email=user.email, role=user.role)


async def get_auth_context(
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> AuthContext:
    """
    Build the request's AuthContext.

    No header gives an anonymous context (browsing and cart edits are allowed).
    A malformed or rejected ``Authorization: Bearer <token>`` raises
    AuthRequiredError so the client re-authenticates.
    """
    if not authorization:
        return AuthContext.anonymous()

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthRequiredError(ERROR_INVALID_TOKEN)

    user = await verify_supabase_token(parts[1])
    if user is None:
        raise AuthRequiredError(ERROR_INVALID_TOKEN)

    return AuthContext(user)


async def require_auth_context(auth: AuthContext = Depends(get_auth_context)) -> AuthContext:
    """Same as get_auth_context but rejects anonymous requests."""
    auth.require_user()
    return auth
