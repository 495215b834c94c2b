"""Auth endpoints: registration, login and the current user."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from invoicedesk.auth.gate import Identity
from invoicedesk.auth.jwt import TokenService
from invoicedesk.core.dependencies import get_current_identity, get_token_service, get_user_service
from invoicedesk.core.exceptions import AuthenticationError
from invoicedesk.models import User
from invoicedesk.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from invoicedesk.schemas.users import UserResponse
from invoicedesk.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(user: User, tokens: TokenService) -> TokenResponse:
    return TokenResponse(
        access_token=tokens.issue(user),
        expires_in=tokens.ttl_seconds,
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    users: UserService = Depends(get_user_service),
    tokens: TokenService = Depends(get_token_service),
) -> TokenResponse:
    user = users.create_user(email=payload.email, name=payload.name, password=payload.password, roles=payload.roles)
    return _token_response(user, tokens)


@router.post("/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    users: UserService = Depends(get_user_service),
    tokens: TokenService = Depends(get_token_service),
) -> TokenResponse:
    user = users.authenticate(payload.email, payload.password)
    return _token_response(user, tokens)


@router.get("/me", response_model=UserResponse)
def me(
    identity: Identity = Depends(get_current_identity),
    users: UserService = Depends(get_user_service),
) -> UserResponse:
    user = users.get_user(identity.user_id)
    if user is None:
        # Token outlived its user.
        raise AuthenticationError()
    return UserResponse.model_validate(user)
