"""
User endpoints for API v1.

CRUD over user records for the admin screen.  Roles carry no
permission checks here; any client that can reach the API may manage
users.
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, status

from user_admin_api.app.core.dependencies import UserServiceDep
from user_admin_api.app.core.exceptions import DuplicateLoginError, UserNotFoundError, ValidationError
from user_admin_api.app.schemas.user import UserCreate, UserRecord, UserUpdate


router = APIRouter()


@router.get("", response_model=List[UserRecord], response_model_exclude_unset=True)
async def list_users(
    service: UserServiceDep,
    role: Optional[str] = None,
    search: Optional[str] = None,
) -> List[UserRecord]:
    """Получить список всех пользователей.

    Без параметров возвращает всю коллекцию.  ``role`` оставляет
    только пользователей с этой ролью, ``search`` ищет подстроку в
    имени, фамилии и логине без учёта регистра.
    """
    users = await service.list_users()
    if role or search:
        users = service.filter_users(users, role=role, search=search)
    return users


@router.get("/{user_id}", response_model=UserRecord, response_model_exclude_unset=True)
async def get_user(user_id: str, service: UserServiceDep) -> UserRecord:
    """Retrieve a single user by id."""
    try:
        return await service.get_user(user_id)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.post("", response_model=UserRecord, status_code=status.HTTP_201_CREATED, response_model_exclude_unset=True)
async def create_user(user: UserCreate, service: UserServiceDep) -> UserRecord:
    """Создать пользователя.

    Все поля, кроме аватара и отдела, обязательны; логин должен быть
    e‑mail адресом и не может повторяться.
    """
    try:
        return await service.create_user(user)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except DuplicateLoginError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)


@router.put("/{user_id}", response_model=UserRecord, response_model_exclude_unset=True)
async def update_user(user_id: str, body: UserUpdate, service: UserServiceDep) -> UserRecord:
    """Update any subset of a user's mutable fields.

    ``id`` and ``createdAt`` cannot be changed.  Returns the updated
    record.
    """
    try:
        return await service.update_user(user_id, body)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except DuplicateLoginError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)


@router.delete("/{user_id}", response_model=UserRecord, response_model_exclude_unset=True)
async def delete_user(user_id: str, service: UserServiceDep) -> UserRecord:
    """Удалить пользователя по ID и вернуть удалённую запись."""
    try:
        return await service.delete_user(user_id)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
