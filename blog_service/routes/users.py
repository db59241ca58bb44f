# blog_service/routes/users.py

"""
API enpoints для работы с текущим пользователем.
"""

import uuid

from fastapi import APIRouter, Depends, status

from blog_service.config import settings
from blog_service.dependencies import get_credential_manager, get_current_user_id
from blog_service.schemas import UserResponse
from blog_service.services.auth_service import CredentialManager

router = APIRouter(
    prefix=f"{settings.API_PREFIX}/v1/users",
    tags=["users"],
)

@router.get("/me", response_model=UserResponse, status_code=status.HTTP_200_OK)
def get_me(
        current_user_id: uuid.UUID = Depends(get_current_user_id),
        manager: CredentialManager = Depends(get_credential_manager),
):
    """
    Возвращает данные текущего пользователя:
    id, username, email, created_at
    """
    return manager.get_user(current_user_id)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
def delete_me(
        current_user_id: uuid.UUID = Depends(get_current_user_id),
        manager: CredentialManager = Depends(get_credential_manager),
):
    """
    Удаляет аккаунт вместе со всеми постами.
    """
    manager.delete_user(current_user_id)
    return None
