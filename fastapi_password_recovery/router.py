"""API router for password recovery endpoints."""

from fastapi import (  # type: ignore[import-untyped]
    APIRouter,
    HTTPException,
    Request,
    status,
)

from fastapi_password_recovery.results import RecoveryFailure, RecoveryResult
from fastapi_password_recovery.schemas import (
    ForgotPasswordRequest,
    MessageResponse,
    ResetPasswordRequest,
    ResetTokenResponse,
    VerifyOTPRequest,
)
from fastapi_password_recovery.service import CredentialRecoveryService

RECOVERY_REQUESTED_MESSAGE = (
    "If an account exists for this email, a verification code has been sent."
)

# Not-found and expired share a message so the endpoint does not reveal
# whether a code was ever requested for an address.
FAILURE_RESPONSES: dict[RecoveryFailure, tuple[int, str]] = {
    RecoveryFailure.OTP_NOT_FOUND: (
        status.HTTP_400_BAD_REQUEST,
        "Invalid or expired OTP code. Please request a new one.",
    ),
    RecoveryFailure.OTP_EXPIRED: (
        status.HTTP_400_BAD_REQUEST,
        "Invalid or expired OTP code. Please request a new one.",
    ),
    RecoveryFailure.OTP_MISMATCH: (
        status.HTTP_400_BAD_REQUEST,
        "Invalid OTP code",
    ),
    RecoveryFailure.OTP_ATTEMPTS_EXCEEDED: (
        status.HTTP_429_TOO_MANY_REQUESTS,
        "Too many OTP attempts. Please request a new code.",
    ),
    RecoveryFailure.TOKEN_INVALID: (
        status.HTTP_400_BAD_REQUEST,
        "Invalid or expired reset token",
    ),
    RecoveryFailure.TOKEN_EXPIRED: (
        status.HTTP_400_BAD_REQUEST,
        "Invalid or expired reset token",
    ),
    RecoveryFailure.TOKEN_ALREADY_USED: (
        status.HTTP_409_CONFLICT,
        "Reset token has already been used",
    ),
    RecoveryFailure.PASSWORD_UPDATE_FAILED: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Password could not be updated",
    ),
}


def get_client_ip(request: Request, trust_forwarded_for: bool) -> str:
    """
    Get the client IP address for rate limiting.

    When trust_forwarded_for is set, the first address of X-Forwarded-For is
    used; only enable this behind a proxy that overwrites the header.
    """
    if trust_forwarded_for:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
    if request.client is None:
        return "unknown"
    return request.client.host


def raise_for_failure(result: RecoveryResult) -> None:
    """Translate a failed RecoveryResult into an HTTPException."""
    if result.failure is None:
        return

    if result.failure is RecoveryFailure.RATE_LIMITED:
        retry_after = result.retry_after_seconds or 1
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Too many requests. Please wait {retry_after} seconds.",
            headers={"Retry-After": str(retry_after)},
        )

    status_code, detail = FAILURE_RESPONSES[result.failure]
    raise HTTPException(status_code=status_code, detail=detail)


def get_recovery_router(service: CredentialRecoveryService) -> APIRouter:
    """
    Create an APIRouter with password recovery endpoints.

    The service's cleanup sweeper is not started by the router; call
    ``service.start()``/``service.stop()`` from the application lifespan.

    Args:
        service: Recovery service shared by all requests

    Returns:
        Configured APIRouter instance

    Example:
        ```python
        from contextlib import asynccontextmanager
        from fastapi import FastAPI

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            async with service:
                yield

        app = FastAPI(lifespan=lifespan)
        app.include_router(
            get_recovery_router(service), prefix="/api/auth", tags=["auth"]
        )
        ```
    """
    router = APIRouter()
    config = service.config

    @router.post(
        "/forgot-password",
        response_model=MessageResponse,
        status_code=status.HTTP_200_OK,
        summary="Request password recovery",
        description="Send a one-time code to the account's email address",
    )
    async def forgot_password(
        body: ForgotPasswordRequest,
        request: Request,
    ) -> MessageResponse:
        """
        Start password recovery for an email address.

        Responds identically whether or not the email belongs to an account.

        Raises:
            HTTPException: 429 if rate limited
        """
        result = await service.request_recovery(
            body.email, get_client_ip(request, config.trust_forwarded_for)
        )
        raise_for_failure(result)
        return MessageResponse(message=RECOVERY_REQUESTED_MESSAGE)

    @router.post(
        "/verify-otp",
        response_model=ResetTokenResponse,
        status_code=status.HTTP_200_OK,
        summary="Verify OTP code",
        description="Exchange a valid OTP code for a single-use reset token",
    )
    async def verify_otp(
        body: VerifyOTPRequest,
        request: Request,
    ) -> ResetTokenResponse:
        """
        Verify an OTP code and issue a reset token.

        Raises:
            HTTPException: 400 if the code is invalid, expired, or not found
            HTTPException: 429 if rate limited or too many attempts
        """
        result = await service.confirm_otp(
            body.email,
            body.code,
            get_client_ip(request, config.trust_forwarded_for),
        )
        raise_for_failure(result)
        return ResetTokenResponse(
            reset_token=result.reset_token or "",
            expires_in=int(config.reset_token_expiry.total_seconds()),
        )

    @router.post(
        "/reset-password",
        response_model=MessageResponse,
        status_code=status.HTTP_200_OK,
        summary="Reset password",
        description="Set a new password using a reset token",
    )
    async def reset_password(body: ResetPasswordRequest) -> MessageResponse:
        """
        Consume a reset token and set the new password.

        Raises:
            HTTPException: 400 if the token is invalid or expired, or the
                password is too short
            HTTPException: 409 if the token was already used
            HTTPException: 500 if the user store refused the update
        """
        if len(body.new_password) < config.min_password_length:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=(
                    "Password must be at least "
                    f"{config.min_password_length} characters long"
                ),
            )

        result = await service.reset_password(body.reset_token, body.new_password)
        raise_for_failure(result)
        return MessageResponse(message="Password has been reset successfully")

    return router
