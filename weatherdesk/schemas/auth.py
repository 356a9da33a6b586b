"""Auth request/response schemas.

Request models forbid unknown fields, so a malformed body is rejected with
a 400 before any handler logic runs.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints

# Passwords: 6-128 chars. The upper bound caps KDF input size.
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 128

NewPassword = Annotated[
    str, Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
]
DisplayName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)
]


# =============================================================================
# Request Schemas
# =============================================================================


class RegisterRequest(BaseModel):
    """Request body for POST /auth/register."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    name: DisplayName
    password: NewPassword


class LoginRequest(BaseModel):
    """Request body for POST /auth/login."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1, max_length=PASSWORD_MAX_LENGTH)


class RequestResetRequest(BaseModel):
    """Request body for POST /auth/request-reset."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Request body for POST /auth/reset.

    Accepts the camelCase keys the web client sends.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    email: EmailStr
    reset_token: str = Field(
        alias="resetToken",
        min_length=1,
        max_length=128,
    )
    new_password: NewPassword = Field(alias="newPassword")


# =============================================================================
# Response Schemas
# =============================================================================


class UserOut(BaseModel):
    """Public view of a user account."""

    id: int
    email: str
    name: str
    theme: str


class AuthResponse(BaseModel):
    """Body returned by register and login."""

    token: str
    user: UserOut


class RequestResetResponse(BaseModel):
    """Body returned by POST /auth/request-reset.

    reset_token / expires are only filled in while EXPOSE_RESET_TOKEN is on.
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    reset_token: str | None = Field(default=None, alias="resetToken")
    expires: int | None = None
