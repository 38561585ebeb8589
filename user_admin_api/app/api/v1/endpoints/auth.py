"""
Authentication endpoints for API v1.

``POST /auth`` checks a login and password and returns the matching
account without its password.  ``POST /auth/token`` does the same and
also issues a session token; ``GET /auth/session`` resolves that token
back into the signed‑in user and the dashboard for their role.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from user_admin_api.app.core.dependencies import UserServiceDep
from user_admin_api.app.core.exceptions import InvalidCredentialsError, ValidationError
from user_admin_api.app.core.security import get_current_session, issue_session_token
from user_admin_api.app.schemas.user import Credentials, Session, TokenResponse, UserPublic
from user_admin_api.app.services.user_service import dashboard_for


router = APIRouter()


async def _authenticate(service, credentials: Credentials) -> UserPublic:
    try:
        return await service.authenticate(credentials.login, credentials.password)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)


@router.post("", response_model=UserPublic, response_model_exclude_unset=True)
async def login(credentials: Credentials, service: UserServiceDep) -> UserPublic:
    """Войти по логину и паролю.

    Возвращает учётную запись без пароля.  400, если логин или пароль
    не переданы, 401, если пара не найдена.
    """
    return await _authenticate(service, credentials)


@router.post("/token", response_model=TokenResponse)
async def login_for_token(credentials: Credentials, service: UserServiceDep) -> TokenResponse:
    """Authenticate and return a bearer token for later requests."""
    user = await _authenticate(service, credentials)
    return TokenResponse(
        access_token=issue_session_token(user),
        user=user,
        dashboard=dashboard_for(user.role),
    )


@router.get("/session", response_model=Session)
async def current_session(session: Session = Depends(get_current_session)) -> Session:
    """Return the user bound to the presented bearer token."""
    return session
