"""Bearer token authentication for protected endpoints.

Usage:
    @router.get("/auth/me")
    async def me(user: User = Depends(get_current_user)) -> User: ...

    @router.get("/auth/users", dependencies=[Depends(require_admin)])
    async def list_users(...): ...
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backoffice.models import BackofficeError, ErrorCode, User, UserRole
from backoffice.services.user_service import UserService

from .dependencies import get_user_service

# auto_error=False so a missing header goes through the standard error body
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    users: UserService = Depends(get_user_service),
) -> User:
    """Resolve the bearer token to an active user.

    Raises:
        BackofficeError: AUTH_REQUIRED if the token is missing or invalid
    """
    if credentials is None or not credentials.credentials:
        raise BackofficeError(ErrorCode.AUTH_REQUIRED)
    return users.authenticate_token(credentials.credentials)


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Restrict an endpoint to admins.

    Raises:
        BackofficeError: FORBIDDEN for non-admin users
    """
    if user.role != UserRole.ADMIN:
        raise BackofficeError(ErrorCode.FORBIDDEN)
    return user
