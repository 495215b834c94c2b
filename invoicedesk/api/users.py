"""User endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from invoicedesk.core.dependencies import get_user_service
from invoicedesk.schemas.users import UserCreateRequest, UserResponse
from invoicedesk.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
def list_users(users: UserService = Depends(get_user_service)) -> list[UserResponse]:
    return [UserResponse.model_validate(user) for user in users.list_users()]


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, users: UserService = Depends(get_user_service)) -> UserResponse:
    return UserResponse.model_validate(users.require_user(user_id))


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreateRequest, users: UserService = Depends(get_user_service)) -> UserResponse:
    user = users.create_user(email=payload.email, name=payload.name, password=payload.password, roles=payload.roles)
    return UserResponse.model_validate(user)
