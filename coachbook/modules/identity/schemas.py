"""Identity schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Admin credentials."""

    password: str = Field(min_length=1, max_length=256)


class TokenResponse(BaseModel):
    """Bearer access token."""

    access_token: str
    token_type: str = "bearer"


class AdminPrincipal(BaseModel):
    """Authenticated admin resolved from a token."""

    subject: str
    role: str
