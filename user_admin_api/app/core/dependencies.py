"""
Dependency injection helpers for FastAPI routes.

Routes receive a ``UserService`` bound to the process‑wide record
store.  Tests swap the store by overriding ``get_record_store``.
"""

from typing import Annotated

from fastapi import Depends

from .storage import RecordStore, get_record_store
from ..services.user_service import UserService


def get_user_service(store: RecordStore = Depends(get_record_store)) -> UserService:
    """Get a UserService bound to the current record store.

    Args:
        store: Record store resolved by ``get_record_store``.

    Returns:
        UserService instance.
    """
    return UserService(store)


UserServiceDep = Annotated[UserService, Depends(get_user_service)]
