"""Login state, login/logout and role-based route guarding."""

import logging
from typing import Iterable, Optional

from ..errors import AuthenticationFailed, NetworkFailure, ValidationFailure
from ..models.auth import ROLE_ADMIN, ROLE_TEST_TAKER, UserSession
from ..storage.credential_store import CredentialStore

logger = logging.getLogger(__name__)

HOME_ROUTE = "/"
LOGIN_ROUTE = "/login"
ADMIN_DASHBOARD_ROUTE = "/admin-dashboard"
TEST_TAKER_DASHBOARD_ROUTE = "/test-taker-dashboard"

PROTECTED_ROUTES = {
    ADMIN_DASHBOARD_ROUTE: (ROLE_ADMIN,),
    TEST_TAKER_DASHBOARD_ROUTE: (ROLE_TEST_TAKER,),
}


class AuthContext:
    """The logged-in user, passed explicitly to whatever needs it.

    Set at login, cleared at logout. When a ``CredentialStore`` is attached
    the user also survives between runs of the client.
    """

    def __init__(self, store: Optional[CredentialStore] = None):
        self.store = store
        self.user: Optional[UserSession] = store.load() if store else None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and bool(self.user.role)

    @property
    def role(self) -> Optional[str]:
        return self.user.role if self.user else None

    @property
    def token(self) -> Optional[str]:
        return self.user.token if self.user and self.user.token else None

    def set(self, user: UserSession) -> None:
        self.user = user
        if self.store:
            self.store.save(user)

    def clear(self) -> None:
        self.user = None
        if self.store:
            self.store.clear()


def check_access(context: AuthContext, allowed_roles: Iterable[str]) -> Optional[str]:
    """Return the route to redirect to, or None when access is allowed.

    No role sends the user to the login page; a role outside
    ``allowed_roles`` sends them home.
    """
    role = context.role
    if not role:
        return LOGIN_ROUTE
    if role not in allowed_roles:
        return HOME_ROUTE
    return None


def check_route(context: AuthContext, route: str) -> Optional[str]:
    """``check_access`` for a named route; unprotected routes are always open."""
    allowed = PROTECTED_ROUTES.get(route)
    if allowed is None:
        return None
    return check_access(context, allowed)


def dashboard_route_for(role: Optional[str]) -> str:
    if role == ROLE_ADMIN:
        return ADMIN_DASHBOARD_ROUTE
    return TEST_TAKER_DASHBOARD_ROUTE


class AuthService:
    """Logs users in and out against the backend."""

    def __init__(self, client, context: AuthContext):
        self.client = client
        self.context = context

    async def login(self, email: str, password: str) -> UserSession:
        """Authenticate and store the user in the context.

        Raises:
            ValidationFailure: If email or password is empty.
            AuthenticationFailed: If the backend rejects the login or cannot be reached.
        """
        if not email.strip() or not password:
            raise ValidationFailure("Email and password are required")
        try:
            body = await self.client.login(email.strip(), password)
        except NetworkFailure as e:
            logger.warning(f"Login failed for {email}: {e.message}")
            raise AuthenticationFailed() from e

        if not isinstance(body, dict) or not body.get("token"):
            logger.warning(f"Login response for {email} carried no token")
            raise AuthenticationFailed()

        user = UserSession.from_dict(body)
        if not user.email:
            user.email = email.strip()
        self.context.set(user)
        logger.info(f"Logged in {user.email} as {user.role}")
        return user

    def logout(self) -> None:
        if self.context.user:
            logger.info(f"Logging out {self.context.user.email}")
        self.context.clear()
