"""Member registration, sign-in and password reset"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from vema_gateway.api.dependencies import get_auth_client, get_request_id, get_store
from vema_gateway.api.v1.schemas import (
    AuthResponse,
    MessageResponse,
    PasswordResetRequest,
    RegisterRequest,
    SignInRequest,
)
from vema_gateway.domain.models import MemberProfile
from vema_gateway.infrastructure.clients.auth import AuthClient, AuthErrorKind, AuthResult
from vema_gateway.infrastructure.database.repositories import UserRepository
from vema_gateway.infrastructure.database.store import DocumentStore
from vema_gateway.infrastructure.observability.logging import log_operation

router = APIRouter()

STATUS_BY_AUTH_ERROR = {
    AuthErrorKind.EMAIL_IN_USE: 409,
    AuthErrorKind.INVALID_EMAIL: 400,
    AuthErrorKind.WEAK_PASSWORD: 400,
    AuthErrorKind.USER_NOT_FOUND: 401,
    AuthErrorKind.WRONG_PASSWORD: 401,
    AuthErrorKind.USER_DISABLED: 403,
    AuthErrorKind.REQUIRES_RECENT_LOGIN: 401,
    AuthErrorKind.TOO_MANY_REQUESTS: 429,
    AuthErrorKind.NETWORK_ERROR: 503,
    AuthErrorKind.UNKNOWN: 400,
}


def auth_failure(result: AuthResult, request_id: str) -> JSONResponse:
    logging.warning(
        f"Auth request failed: {result.error_kind.value}",
        extra={"request_id": request_id, "error_kind": result.error_kind.value},
    )
    return JSONResponse(
        status_code=STATUS_BY_AUTH_ERROR.get(result.error_kind, 400),
        content={"error": result.error_kind.value, "detail": result.message},
    )


def to_auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        uid=result.user.uid,
        email=result.user.email,
        display_name=result.user.display_name,
        id_token=result.user.id_token,
        refresh_token=result.user.refresh_token,
    )


@router.post("/auth/register", response_model=AuthResponse, status_code=201)
async def register(
    request_body: RegisterRequest,
    request: Request,
    auth_client: AuthClient = Depends(get_auth_client),
    store: DocumentStore = Depends(get_store),
):
    """
    Create an account with the auth provider and the member profile that
    holds savings, cover and discount state.
    """
    request_id = get_request_id(request)

    result = await auth_client.register(
        request_body.email, request_body.password, request_body.display_name
    )
    if not result.success:
        return auth_failure(result, request_id)

    UserRepository(store).save(
        MemberProfile(
            uid=result.user.uid,
            email=result.user.email,
            display_name=request_body.display_name,
            phone_number=request_body.phone_number,
        )
    )
    store.db.commit()

    log_operation(request_id, result.user.uid, "member_registered")
    return to_auth_response(result)


@router.post("/auth/sign-in", response_model=AuthResponse)
async def sign_in(
    request_body: SignInRequest,
    request: Request,
    auth_client: AuthClient = Depends(get_auth_client),
):
    request_id = get_request_id(request)

    result = await auth_client.sign_in(request_body.email, request_body.password)
    if not result.success:
        return auth_failure(result, request_id)

    log_operation(request_id, result.user.uid, "member_signed_in")
    return to_auth_response(result)


@router.post("/auth/password-reset", response_model=MessageResponse)
async def password_reset(
    request_body: PasswordResetRequest,
    request: Request,
    auth_client: AuthClient = Depends(get_auth_client),
):
    result = await auth_client.send_password_reset(request_body.email)
    if not result.success:
        return auth_failure(result, get_request_id(request))
    return MessageResponse(message="Password reset email sent")
