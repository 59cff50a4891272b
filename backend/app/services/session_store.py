"""
services/session_store.py

Session boundary: who is signed in on this install.

The token lives in the token store (secure store when available) under
``auth_token``; the user profile lives in the general store under
``user_data``. Credentials are checked by an AuthBackend and never persisted.
"""

from __future__ import annotations

import asyncio
import hmac
import logging
from typing import Dict, List, Optional, Protocol, Tuple

from pydantic import ValidationError

from app.core.config import settings
from app.core.security import create_access_token, decode_access_token, get_password_hash, verify_password
from app.db.schemas import AuthResult, ErrorDetail, OperationResult, SessionState, User
from app.services.kv_store import AUTH_TOKEN_KEY, USER_DATA_KEY, KeyValueStore
from app.utils.exceptions import AuthError, StorageError

logger = logging.getLogger(__name__)


class AuthBackend(Protocol):
    def verify(self, email: str, password: str) -> User:
        """Return the account for these credentials or raise AuthError"""
        ...

    def find_by_email(self, email: str) -> Optional[User]: ...


class BiometricVerifier(Protocol):
    async def has_hardware(self) -> bool: ...

    async def is_enrolled(self) -> bool: ...

    async def authenticate(self, prompt: str) -> bool: ...


class StaticUserDirectory:
    """AuthBackend over a fixed list of accounts sharing one password"""

    def __init__(self, users: List[User], password: str):
        self._entries: Dict[str, Tuple[User, str]] = {
            user.email: (user, get_password_hash(password)) for user in users
        }

    def find_by_email(self, email: str) -> Optional[User]:
        entry = self._entries.get((email or "").strip())
        return entry[0].model_copy(deep=True) if entry else None

    def verify(self, email: str, password: str) -> User:
        entry = self._entries.get((email or "").strip())
        if entry is None or not verify_password(password, entry[1]):
            raise AuthError("Invalid credentials")
        return entry[0].model_copy(deep=True)


class NoBiometrics:
    """Device without biometric hardware"""

    async def has_hardware(self) -> bool:
        return False

    async def is_enrolled(self) -> bool:
        return False

    async def authenticate(self, prompt: str) -> bool:
        return False


def _auth_failure(exc: Exception, code: Optional[str] = None) -> AuthResult:
    return AuthResult(
        success=False,
        error=ErrorDetail(code=code or getattr(exc, "code", AuthError.code), message=str(exc)),
    )


class SessionStore:
    def __init__(
        self,
        store: KeyValueStore,
        backend: AuthBackend,
        token_store: Optional[KeyValueStore] = None,
        biometrics: Optional[BiometricVerifier] = None,
        biometric_identity: str = settings.BIOMETRIC_DEMO_USER_EMAIL,
    ):
        self._store = store
        self._token_store = token_store or store
        self._backend = backend
        self._biometrics = biometrics or NoBiometrics()
        self._biometric_identity = biometric_identity
        self._user: Optional[User] = None
        self._token: Optional[str] = None
        self._lock = asyncio.Lock()

    @property
    def current_user(self) -> Optional[User]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None and self._token is not None

    async def restore(self) -> SessionState:
        """
        Rebuild the session from storage.

        A corrupt user profile clears the whole session instead of failing.
        """
        async with self._lock:
            try:
                token = await self._token_store.get(AUTH_TOKEN_KEY)
                raw_user = await self._store.get(USER_DATA_KEY)
            except StorageError as e:
                logger.error("Error checking auth status: %s", e)
                self._user, self._token = None, None
                return SessionState()

            if not token or not raw_user:
                self._user, self._token = None, None
                return SessionState()

            try:
                user = User.model_validate_json(raw_user)
            except ValidationError:
                logger.warning("Stored user profile is unreadable; clearing session")
                try:
                    await self._clear()
                except StorageError as e:
                    logger.error("Could not clear corrupt session: %s", e)
                return SessionState()

            self._user, self._token = user, token
            return SessionState(user=user, authenticated=True)

    async def login(self, email: str, password: str) -> AuthResult:
        async with self._lock:
            try:
                user = self._backend.verify(email, password)
            except AuthError as e:
                logger.info("Login rejected for %s", email)
                return _auth_failure(e)
            return await self._establish(user)

    async def login_with_biometrics(self) -> AuthResult:
        async with self._lock:
            try:
                available = await self._biometrics.has_hardware() and await self._biometrics.is_enrolled()
                if not available:
                    return _auth_failure(AuthError("Biometric authentication not available"))
                verified = await self._biometrics.authenticate(settings.BIOMETRIC_PROMPT)
            except Exception:
                logger.exception("Biometric verifier error")
                return _auth_failure(AuthError("Biometric authentication failed"))

            if not verified:
                return _auth_failure(AuthError("Biometric authentication failed"))

            user = self._backend.find_by_email(self._biometric_identity)
            if user is None:
                return _auth_failure(AuthError("No account is linked to this device"))
            return await self._establish(user)

    async def logout(self) -> OperationResult:
        """Clear token and profile; calling it with no session is a no-op"""
        async with self._lock:
            try:
                await self._clear()
            except StorageError as e:
                logger.error("Logout error: %s", e)
                return OperationResult.fail(e)
            return OperationResult.ok()

    def verify_token(self, token: Optional[str]) -> Optional[User]:
        """The signed-in user if ``token`` is the live, unexpired session token"""
        if not token or not self._token or self._user is None:
            return None
        if not hmac.compare_digest(token, self._token):
            return None
        if decode_access_token(token) is None:
            return None
        return self._user

    @property
    def token(self) -> Optional[str]:
        return self._token

    async def _establish(self, user: User) -> AuthResult:
        token = create_access_token({"sub": user.id, "email": user.email})
        try:
            await self._token_store.set(AUTH_TOKEN_KEY, token)
            await self._store.set(USER_DATA_KEY, user.model_dump_json(by_alias=True))
        except StorageError as e:
            logger.error("Login failed while saving session: %s", e)
            try:
                await self._clear()
            except StorageError:
                logger.error("Could not roll back partial session")
            return _auth_failure(e)
        self._user, self._token = user, token
        logger.info("Session started for %s", user.email)
        return AuthResult(success=True, user=user, token=token)

    async def _clear(self) -> None:
        self._user, self._token = None, None
        await self._token_store.remove(AUTH_TOKEN_KEY)
        await self._store.remove(USER_DATA_KEY)
