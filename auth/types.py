"""Pydantic models for the accounts domain."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class Provider(str, Enum):
    """Credential provider of an AuthAccount."""

    LOCAL = "local"
    GOOGLE = "google"
    NAVER = "naver"
    KAKAO = "kakao"


class UserStatus(str, Enum):
    """Lifecycle status of a directory user."""

    ACTIVE = "active"
    ARCHIVED = "archived"
    BLOCKED = "blocked"


class DirectoryUser(BaseModel):
    """Canonical user record owned by the directory store."""

    id: UUID
    sync_code: str = Field(..., description="Opaque token shared with dependent services")
    status: UserStatus = UserStatus.ACTIVE
    archived_at: datetime | None = None
    delete_after: datetime | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class AuthAccount(BaseModel):
    """Credential record held by the remote identity service."""

    id: UUID
    user_id: UUID
    provider: Provider
    provider_id: str | None = None  # OAuth only
    email: str | None = None
    is_verified: bool  # Required - fail closed, no default


class CreatedAccount(BaseModel):
    """Identity service response to an account creation."""

    user_id: UUID
    email: str | None = None
    is_verified: bool = False
    created_at: datetime


class CreatedProfile(BaseModel):
    """Profile service response to a profile creation."""

    user_id: UUID
    created_at: datetime


class PasswordCheck(BaseModel):
    """Result of comparing a password against the local account."""

    verified: bool
    user_id: UUID | None = None


class SentEmailRecord(BaseModel):
    """Audit row for one dispatched verification email."""

    id: UUID
    user_id: UUID
    email: EmailStr
    sent_at: datetime

    model_config = {"from_attributes": True}


class OAuthUserInfo(BaseModel):
    """User info fetched from an OAuth provider. Never persisted directly."""

    provider_id: str
    email: str | None = None
    email_verified: bool = False


class OAuthSignupResult(BaseModel):
    """Response of the remote signup API used by OAuth auto-provisioning."""

    user_id: UUID
    provider_id: str | None = None
    email: str | None = None
    is_verified: bool
    created_at: datetime | None = None


class SignupResult(BaseModel):
    """Outcome of a completed signup saga."""

    user_id: UUID
    email: str | None = None
    provider: Provider | None = None
    created_at: datetime


class TokenPair(BaseModel):
    """Access and refresh tokens minted after a successful login."""

    access_token: str
    refresh_token: str


class EmailVerificationClaims(BaseModel):
    """Decoded contents of an email verification token."""

    valid: bool
    user_id: UUID | None = None
    email: str | None = None
    code: str | None = None


class LoginCodeResult(BaseModel):
    """A freshly issued login code and the user it is bound to."""

    code: str
    user_id: UUID
