"""Login bodies and session payloads."""

from datetime import datetime

from pydantic import EmailStr, Field

from continuum.models.common import ApiModel, utcnow


class LoginRequest(ApiModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class AdminUser(ApiModel):
    id: str
    email: EmailStr
    name: str = "Administrator"
    password_hash: str
    created_at: datetime = Field(default_factory=utcnow)


class AdminSession(ApiModel):
    user_id: str
    email: str
    role: str = "admin"
    created_at: datetime = Field(default_factory=utcnow)


class ClientSession(ApiModel):
    client_id: str
    email: str
    role: str = "client"
    created_at: datetime = Field(default_factory=utcnow)


class VerifyEmailRequest(ApiModel):
    token: str = Field(..., min_length=1)


class ResendVerificationRequest(ApiModel):
    email: EmailStr
