"""
API endpoints for registration, login and logout.
"""

from fastapi import APIRouter, Depends, Response, status

from library_backend.domain.errors import UserNotFound
from library_backend.domain.services import IdentityService
from library_backend.api.v1 import schemas as api
from library_backend.api.v1.converters import domain_session_to_api, domain_user_to_api
from library_backend.api.v1.dependencies import (
    get_bearer_token,
    get_current_user_id,
    get_identity_service,
)

router = APIRouter(prefix="/auth")


@router.post(
    "/register",
    response_model=api.UserSummary,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": api.ErrorResponse}, 409: {"model": api.ErrorResponse}},
)
def register(
    request: api.RegisterRequest,
    identity: IdentityService = Depends(get_identity_service),
) -> api.UserSummary:
    """Register a new user."""
    user = identity.register(request.phone_number, request.password, request.user_name)
    return domain_user_to_api(user)


@router.post(
    "/login",
    response_model=api.LoginResponse,
    responses={401: {"model": api.ErrorResponse}},
)
def login(
    request: api.LoginRequest,
    identity: IdentityService = Depends(get_identity_service),
) -> api.LoginResponse:
    """Exchange phone number and password for a bearer token."""
    session = identity.login(request.phone_number, request.password)
    user = identity.get_user(session.user_id)
    if user is None:
        raise UserNotFound(session.user_id)
    return domain_session_to_api(session, user)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={401: {"model": api.ErrorResponse}},
)
def logout(
    user_id: int = Depends(get_current_user_id),
    token: str = Depends(get_bearer_token),
    identity: IdentityService = Depends(get_identity_service),
) -> Response:
    """Revoke the bearer token used for this request."""
    identity.logout(token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=api.UserSummary, responses={401: {"model": api.ErrorResponse}})
def me(
    user_id: int = Depends(get_current_user_id),
    identity: IdentityService = Depends(get_identity_service),
) -> api.UserSummary:
    """Return the authenticated user's profile."""
    user = identity.get_user(user_id)
    if user is None:
        raise UserNotFound(user_id)
    return domain_user_to_api(user)
