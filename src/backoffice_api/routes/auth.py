"""Authentication and user endpoints.

Provides REST endpoints for:
- Registration and login (public, return a bearer token)
- Reading, updating and deactivating the caller's own account
- User administration (admin only)
"""

from fastapi import APIRouter, Depends, Response
from starlette.status import HTTP_201_CREATED, HTTP_204_NO_CONTENT

from backoffice.models import (
    AuthToken,
    ErrorResponse,
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    RoleCount,
    User,
    UserUpdate,
)
from backoffice.services.user_service import UserService
from backoffice_api.dependencies import get_user_service
from backoffice_api.security import get_current_user, require_admin

router = APIRouter(prefix="/auth", tags=["auth"])

AUTH_REQUIRED = {401: {"description": "Bearer token required", "model": ErrorResponse}}
ADMIN_ONLY = {**AUTH_REQUIRED, 403: {"description": "Admin role required", "model": ErrorResponse}}
NOT_FOUND = {404: {"description": "User not found", "model": ErrorResponse}}


@router.post(
    "/register",
    summary="Register",
    description="Creates a user account, sends a welcome email and returns a bearer token.",
    response_model=AuthToken,
    status_code=HTTP_201_CREATED,
    responses={
        400: {"description": "Passwords differ or email already registered", "model": ErrorResponse},
    },
)
async def register(
    body: RegisterRequest,
    service: UserService = Depends(get_user_service),
) -> AuthToken:
    return service.register(body)


@router.post(
    "/login",
    summary="Log in",
    response_model=AuthToken,
    responses={401: {"description": "Incorrect email or password", "model": ErrorResponse}},
)
async def login(body: LoginRequest, service: UserService = Depends(get_user_service)) -> AuthToken:
    return service.login(body)


# Own account


@router.get("/me", summary="Get own profile", response_model=User, responses=AUTH_REQUIRED)
async def get_me(user: User = Depends(get_current_user)) -> User:
    return user


@router.put("/me", summary="Update own profile", response_model=User, responses=AUTH_REQUIRED)
async def update_me(
    body: ProfileUpdate,
    user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> User:
    return service.update_profile(user.user_id, body)


@router.delete(
    "/me",
    summary="Deactivate own account",
    status_code=HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=AUTH_REQUIRED,
)
async def delete_me(
    user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> Response:
    service.deactivate(user.user_id)
    return Response(status_code=HTTP_204_NO_CONTENT)


# Administration


@router.get(
    "/users/stats",
    summary="User statistics",
    description="Number of users per role.",
    response_model=list[RoleCount],
    dependencies=[Depends(require_admin)],
    responses=ADMIN_ONLY,
)
async def user_role_stats(service: UserService = Depends(get_user_service)) -> list[RoleCount]:
    return service.role_stats()


@router.get(
    "/users",
    summary="List users",
    response_model=list[User],
    dependencies=[Depends(require_admin)],
    responses=ADMIN_ONLY,
)
async def list_users(service: UserService = Depends(get_user_service)) -> list[User]:
    return service.list_users()


@router.get(
    "/users/{user_id}",
    summary="Get user",
    response_model=User,
    dependencies=[Depends(require_admin)],
    responses={**ADMIN_ONLY, **NOT_FOUND},
)
async def get_user(user_id: str, service: UserService = Depends(get_user_service)) -> User:
    return service.get_user(user_id)


@router.put(
    "/users/{user_id}",
    summary="Update user",
    response_model=User,
    dependencies=[Depends(require_admin)],
    responses={**ADMIN_ONLY, **NOT_FOUND},
)
async def update_user(
    user_id: str,
    body: UserUpdate,
    service: UserService = Depends(get_user_service),
) -> User:
    return service.update_user(user_id, body)


@router.delete(
    "/users/{user_id}",
    summary="Delete user",
    status_code=HTTP_204_NO_CONTENT,
    response_class=Response,
    dependencies=[Depends(require_admin)],
    responses={**ADMIN_ONLY, **NOT_FOUND},
)
async def delete_user(user_id: str, service: UserService = Depends(get_user_service)) -> Response:
    service.delete_user(user_id)
    return Response(status_code=HTTP_204_NO_CONTENT)


@router.put(
    "/users/{user_id}/make-admin",
    summary="Grant admin role",
    response_model=User,
    dependencies=[Depends(require_admin)],
    responses={**ADMIN_ONLY, **NOT_FOUND},
)
async def make_admin(user_id: str, service: UserService = Depends(get_user_service)) -> User:
    return service.make_admin(user_id)
