"""
Top‑level router for version 1 of the API.

Aggregates the authentication and user administration routers under a
unified prefix.
"""

from fastapi import APIRouter

from .endpoints import auth, users

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
