"""Account, token and password-reset payloads."""

from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StringConstraints

from agentcraft.auth.password import MIN_LENGTH

# Deliberately loose: one "@", no whitespace, a dot in the domain.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

Email = Annotated[
    str,
    StringConstraints(strip_whitespace=True, pattern=EMAIL_PATTERN, max_length=320),
    AfterValidator(str.lower),
]
NewPassword = Annotated[str, Field(min_length=MIN_LENGTH, max_length=128)]


class RegisterRequest(BaseModel):
    """New owner account. The password must also satisfy the strength policy."""

    email: Email
    password: NewPassword
    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)


class LoginRequest(BaseModel):
    email: Email
    password: str


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(BaseModel):
    """Returned by register and login; refresh returns a bare TokenPair."""

    tokens: TokenPair
    user_id: UUID


class RefreshRequest(BaseModel):
    refresh_token: str


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    created_at: datetime


class ForgotPasswordRequest(BaseModel):
    email: Email


class ResetPasswordRequest(BaseModel):
    """``token`` is the "selector:verifier" string from the reset link."""

    token: str = Field(..., min_length=3, max_length=512)
    password: NewPassword
