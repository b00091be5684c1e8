"""Current-user identity for a single request."""
from dataclasses import dataclass
from typing import Optional

from unigo.errors import AuthRequiredError


@dataclass(frozen=True)
class CurrentUser:
    """Signed-in Supabase user."""
    id: str
    email: Optional[str] = None
    role: Optional[str] = None


class AuthContext:
    """Supplies the current user; checkout treats its absence as a hard failure."""

    def __init__(self, user: Optional[CurrentUser] = None):
        self.user = user

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def require_user(self) -> CurrentUser:
        if self.user is None:
            raise AuthRequiredError()
        return self.user

    @classmethod
    def anonymous(cls) -> "AuthContext":
        return cls(None)
