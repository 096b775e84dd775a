"""Pydantic schemas for request/response models."""

from pydantic import BaseModel, EmailStr, Field  # type: ignore[import-untyped]


class ForgotPasswordRequest(BaseModel):
    """Request schema for starting password recovery."""

    email: EmailStr = Field(..., description="Email address of the account")


class VerifyOTPRequest(BaseModel):
    """Request schema for OTP verification."""

    email: EmailStr = Field(..., description="Email address the code was sent to")
    code: str = Field(
        ...,
        min_length=4,
        max_length=10,
        pattern=r"^\d+$",
        description="OTP code to verify",
    )


class ResetPasswordRequest(BaseModel):
    """Request schema for setting a new password."""

    reset_token: str = Field(
        ..., min_length=1, max_length=256, description="Token returned by verify-otp"
    )
    new_password: str = Field(
        ..., min_length=1, max_length=256, description="New password"
    )


class ResetTokenResponse(BaseModel):
    """Response schema for a successful OTP verification."""

    reset_token: str = Field(..., description="Single-use password reset token")
    expires_in: int = Field(..., description="Token lifetime in seconds")


class MessageResponse(BaseModel):
    """Generic message response schema."""

    message: str = Field(..., description="Response message")
