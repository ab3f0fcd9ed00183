"""Account provisioning and authentication configuration."""

import os

from pydantic import BaseModel, Field

from utils.timezone import parse_duration


class AuthConfig(BaseModel):
    """
    Authentication configuration.

    TTLs are in seconds because they go straight to Valkey; windows and
    delays are in hours to make configuration intuitive.
    """

    # Code store
    login_code_ttl_seconds: int = Field(
        default=300,  # 5 minutes
        description="How long a login code stays redeemable",
        ge=30,
        le=3600,
    )
    email_code_ttl_seconds: int = Field(
        default=3600,  # 1 hour
        description="How long an email verification code stays redeemable",
        ge=300,
        le=86400,
    )
    code_bytes: int = Field(
        default=32,
        description="Random bytes per code (16 bytes = 128 bits minimum)",
        ge=16,
        le=64,
    )
    login_code_prefix: str = Field(
        default="login_code:",
        description="Valkey key prefix for login codes",
        min_length=1,
    )
    email_code_prefix: str = Field(
        default="email_code:",
        description="Valkey key prefix for email verification codes",
        min_length=1,
    )

    # Email verification
    max_sent_emails: int = Field(
        default=5,
        description="Max verification emails per user per window",
        ge=1,
        le=50,
    )
    sent_email_window_hours: int = Field(
        default=24,
        description="Trailing window for the verification email limit",
        ge=1,
        le=720,
    )
    email_verification_link: str = Field(
        default="http://localhost:8000/signup/verify-email",
        description="Link the verification token is appended to",
    )

    # User management
    archive_delete_delay_hours: int = Field(
        default=24,
        description="Grace period between archive and hard delete",
        ge=1,
        le=8760,
    )

    # Event streams
    user_event_stream: str = Field(
        default="accounts:user_events",
        description="Valkey stream for user lifecycle events",
    )
    mail_event_stream: str = Field(
        default="accounts:mail_events",
        description="Valkey stream for mail dispatch events",
    )
    event_stream_maxlen: int = Field(
        default=10000,
        description="Approximate max entries kept per stream",
        ge=100,
    )

    # Remote services
    service_timeout_seconds: int = Field(
        default=10,
        description="Per-request timeout for remote service calls",
        ge=1,
        le=120,
    )

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "AuthConfig":
        """
        Build config from environment variables, falling back to defaults.

        Durations use the same strings as the deployment env files
        ('5m', '1h', '24h').

        Raises:
            ValueError: If a duration or integer is malformed.
            pydantic.ValidationError: If a value is out of bounds.
        """
        env = os.environ if environ is None else environ
        values: dict = {}

        if env.get("LOGIN_CODE_TTL"):
            values["login_code_ttl_seconds"] = int(
                parse_duration(env["LOGIN_CODE_TTL"]).total_seconds()
            )
        if env.get("EMAIL_CODE_TTL"):
            values["email_code_ttl_seconds"] = int(
                parse_duration(env["EMAIL_CODE_TTL"]).total_seconds()
            )
        if env.get("MAX_SENT_EMAILS"):
            values["max_sent_emails"] = int(env["MAX_SENT_EMAILS"])
        if env.get("MAX_SENT_EMAILS_DURATION"):
            values["sent_email_window_hours"] = int(
                parse_duration(env["MAX_SENT_EMAILS_DURATION"]).total_seconds() // 3600
            )
        if env.get("ARCHIVE_DELETE_DELAY"):
            values["archive_delete_delay_hours"] = int(
                parse_duration(env["ARCHIVE_DELETE_DELAY"]).total_seconds() // 3600
            )
        if env.get("EMAIL_VERIFICATION_LINK"):
            values["email_verification_link"] = env["EMAIL_VERIFICATION_LINK"]
        if env.get("LOGIN_CODE_STORE_PREFIX"):
            values["login_code_prefix"] = env["LOGIN_CODE_STORE_PREFIX"]
        if env.get("EMAIL_CODE_STORE_PREFIX"):
            values["email_code_prefix"] = env["EMAIL_CODE_STORE_PREFIX"]

        return cls(**values)
