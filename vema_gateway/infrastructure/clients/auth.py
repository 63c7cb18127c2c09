"""Auth provider HTTP client (Identity Toolkit REST API)"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import httpx

from vema_gateway.config import settings

logger = logging.getLogger(__name__)


class AuthErrorKind(str, Enum):
    EMAIL_IN_USE = "EmailInUse"
    INVALID_EMAIL = "InvalidEmail"
    USER_DISABLED = "UserDisabled"
    USER_NOT_FOUND = "UserNotFound"
    WRONG_PASSWORD = "WrongPassword"
    WEAK_PASSWORD = "WeakPassword"
    TOO_MANY_REQUESTS = "TooManyRequests"
    NETWORK_ERROR = "NetworkError"
    REQUIRES_RECENT_LOGIN = "RequiresRecentLogin"
    UNKNOWN = "Unknown"


# Provider error codes -> error kinds
PROVIDER_ERRORS: Dict[str, AuthErrorKind] = {
    "EMAIL_EXISTS": AuthErrorKind.EMAIL_IN_USE,
    "INVALID_EMAIL": AuthErrorKind.INVALID_EMAIL,
    "MISSING_EMAIL": AuthErrorKind.INVALID_EMAIL,
    "USER_DISABLED": AuthErrorKind.USER_DISABLED,
    "EMAIL_NOT_FOUND": AuthErrorKind.USER_NOT_FOUND,
    "USER_NOT_FOUND": AuthErrorKind.USER_NOT_FOUND,
    "INVALID_PASSWORD": AuthErrorKind.WRONG_PASSWORD,
    "INVALID_LOGIN_CREDENTIALS": AuthErrorKind.WRONG_PASSWORD,
    "WEAK_PASSWORD": AuthErrorKind.WEAK_PASSWORD,
    "TOO_MANY_ATTEMPTS_TRY_LATER": AuthErrorKind.TOO_MANY_REQUESTS,
    "CREDENTIAL_TOO_OLD_LOGIN_AGAIN": AuthErrorKind.REQUIRES_RECENT_LOGIN,
}

ERROR_MESSAGES: Dict[AuthErrorKind, str] = {
    AuthErrorKind.EMAIL_IN_USE: "This email is already registered. Please sign in instead.",
    AuthErrorKind.INVALID_EMAIL: "Invalid email address format.",
    AuthErrorKind.USER_DISABLED: "This account has been disabled.",
    AuthErrorKind.USER_NOT_FOUND: "No account found with this email.",
    AuthErrorKind.WRONG_PASSWORD: "Incorrect password. Please try again.",
    AuthErrorKind.WEAK_PASSWORD: "Password should be at least 6 characters long.",
    AuthErrorKind.TOO_MANY_REQUESTS: "Too many attempts. Please try again later.",
    AuthErrorKind.NETWORK_ERROR: "Network error. Please check your connection.",
    AuthErrorKind.REQUIRES_RECENT_LOGIN: "Please sign in again to perform this action.",
    AuthErrorKind.UNKNOWN: "Authentication failed. Please try again.",
}


@dataclass
class AuthUser:
    uid: str
    email: str
    display_name: str = ""
    id_token: str = ""
    refresh_token: str = ""


@dataclass
class AuthResult:
    success: bool
    user: Optional[AuthUser] = None
    error_kind: Optional[AuthErrorKind] = None

    @property
    def message(self) -> str:
        return ERROR_MESSAGES[self.error_kind] if self.error_kind else ""


def error_kind_from_response(response: httpx.Response) -> AuthErrorKind:
    """
    Read the provider error code, e.g. {"error": {"message": "WEAK_PASSWORD : ..."}}
    """
    try:
        message = response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return AuthErrorKind.UNKNOWN
    code = message.split(" ", 1)[0]
    return PROVIDER_ERRORS.get(code, AuthErrorKind.UNKNOWN)


class AuthClient:
    """
    Client for the hosted auth provider.

    Provider failures come back as AuthResult(success=False, error_kind=...)
    rather than exceptions. The signed-in user is held on the client instance.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.auth_api_base
        self.api_key = api_key if api_key is not None else settings.auth_api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport
        self._current_user: Optional[AuthUser] = None

    async def _post(self, method: str, payload: Dict[str, Any]) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            return await client.post(
                f"{self.base_url}/accounts:{method}",
                params={"key": self.api_key},
                json=payload,
            )

    async def _call(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any] | AuthErrorKind:
        try:
            response = await self._post(method, payload)
        except httpx.RequestError as e:
            logger.warning(f"Auth provider unreachable: {e}", extra={"auth_method": method})
            return AuthErrorKind.NETWORK_ERROR

        if response.is_error:
            kind = error_kind_from_response(response)
            logger.info(
                "Auth provider rejected request",
                extra={"auth_method": method, "error_kind": kind.value, "status": response.status_code},
            )
            return kind

        return response.json()

    async def sign_in(self, email: str, password: str) -> AuthResult:
        data = await self._call(
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        if isinstance(data, AuthErrorKind):
            return AuthResult(success=False, error_kind=data)

        self._current_user = AuthUser(
            uid=data["localId"],
            email=data.get("email", email),
            display_name=data.get("displayName", ""),
            id_token=data.get("idToken", ""),
            refresh_token=data.get("refreshToken", ""),
        )
        return AuthResult(success=True, user=self._current_user)

    async def register(self, email: str, password: str, display_name: str) -> AuthResult:
        """Create an account, then set its display name"""
        data = await self._call(
            "signUp",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        if isinstance(data, AuthErrorKind):
            return AuthResult(success=False, error_kind=data)

        user = AuthUser(
            uid=data["localId"],
            email=data.get("email", email),
            display_name=display_name,
            id_token=data.get("idToken", ""),
            refresh_token=data.get("refreshToken", ""),
        )

        profile = await self._call(
            "update",
            {"idToken": user.id_token, "displayName": display_name, "returnSecureToken": False},
        )
        if isinstance(profile, AuthErrorKind):
            # Account exists; only the display name is missing
            logger.warning("Display name not set after registration", extra={"uid": user.uid})

        self._current_user = user
        return AuthResult(success=True, user=user)

    async def send_password_reset(self, email: str) -> AuthResult:
        data = await self._call("sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})
        if isinstance(data, AuthErrorKind):
            return AuthResult(success=False, error_kind=data)
        return AuthResult(success=True)

    def sign_out(self) -> None:
        self._current_user = None

    def current_user(self) -> Optional[AuthUser]:
        return self._current_user
