"""
Authentication endpoints: one live session per install.
"""
from fastapi import APIRouter, Depends

from app.db import schemas
from app.core.logger import logger
from app.api.v1.deps import get_current_user, get_sessions
from app.services.session_store import SessionStore
from app.utils.exceptions import UnauthorizedError, raise_for_error

router = APIRouter()


def _token_response(result: schemas.AuthResult) -> schemas.TokenResponse:
    if not result.success:
        raise UnauthorizedError(result.error.message if result.error else "Authentication failed")
    return schemas.TokenResponse(access_token=result.token, user=result.user)


@router.post("/login", response_model=schemas.TokenResponse)
async def login(form_data: schemas.UserLogin, sessions: SessionStore = Depends(get_sessions)):
    """Email and password sign-in; replaces any existing session"""
    result = await sessions.login(form_data.email, form_data.password)
    return _token_response(result)


@router.post("/biometric", response_model=schemas.TokenResponse)
async def biometric_login(sessions: SessionStore = Depends(get_sessions)):
    result = await sessions.login_with_biometrics()
    return _token_response(result)


@router.post("/logout")
async def logout(sessions: SessionStore = Depends(get_sessions)):
    result = await sessions.logout()
    raise_for_error(result.error)
    logger.info("Session cleared")
    return {"message": "Logged out"}


@router.get("/me", response_model=schemas.User)
async def me(current_user: schemas.User = Depends(get_current_user)):
    return current_user


@router.get("/session", response_model=schemas.SessionStatus)
async def session_state(sessions: SessionStore = Depends(get_sessions)):
    """Re-read the stored session and report whether it is usable; the profile stays behind /me"""
    state = await sessions.restore()
    return schemas.SessionStatus(authenticated=state.authenticated)
