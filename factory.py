"""
Wires the accounts core from configuration and Vault secrets.

Usage:
    core = build_core()
    tokens = core.local_login.login("a@x.com", "secret")
    ...
    core.close()
"""

import logging
from dataclasses import dataclass

from auth.code_manager import CodeManager
from auth.config import AuthConfig
from auth.local_login import LocalLoginFlow
from auth.oauth_login import OAuthLoginFlow
from auth.security_logger import SecurityLogger
from auth.types import Provider
from clients.identity_client import IdentityClient
from clients.postgres_client import PostgresClient
from clients.profile_client import ProfileClient
from clients.service_client import ServiceClient
from clients.signup_client import SignupClient
from clients.token_client import TokenClient
from clients.valkey_client import ValkeyClient
from clients.vault_client import get_database_url, get_oauth_config, get_service_config, get_valkey_url
from core.directory import DirectoryRepository
from core.event_emitter import EventEmitter
from core.sent_emails import SentEmailRepository
from core.services.management_service import ManagementService
from core.services.signup_service import SignupService
from core.services.verification_service import VerificationService
from oauth.base import OAuthProvider
from oauth.google import GoogleOAuthProvider
from oauth.kakao import KakaoOAuthProvider
from oauth.naver import NaverOAuthProvider
from oauth.registry import ProviderRegistry

logger = logging.getLogger(__name__)

OAUTH_ADAPTERS: dict[Provider, type[OAuthProvider]] = {
    Provider.GOOGLE: GoogleOAuthProvider,
    Provider.NAVER: NaverOAuthProvider,
    Provider.KAKAO: KakaoOAuthProvider,
}


@dataclass
class AccountsCore:
    """Every entry point of the accounts core, ready to use."""

    config: AuthConfig
    postgres: PostgresClient
    valkey: ValkeyClient
    service_clients: list[ServiceClient]
    signup: SignupService
    verification: VerificationService
    management: ManagementService
    local_login: LocalLoginFlow
    oauth_login: OAuthLoginFlow

    def close(self) -> None:
        for client in self.service_clients:
            client.close()
        self.valkey.close()
        self.postgres.close()


def _service_client(cls: type[ServiceClient], config: AuthConfig):
    settings = get_service_config(cls.service_name)
    return cls(
        base_url=settings["base_url"],
        api_key=settings["api_key"],
        hmac_secret=settings["hmac_secret"],
        timeout=config.service_timeout_seconds,
    )


def build_registry(providers: list[Provider], timeout: int = 10) -> ProviderRegistry:
    """Build the frozen provider table from Vault OAuth credentials."""
    adapters = {}
    for provider in providers:
        settings = get_oauth_config(provider.value)
        adapters[provider] = OAUTH_ADAPTERS[provider](
            client_id=settings["client_id"],
            client_secret=settings["client_secret"],
            redirect_uri=settings["redirect_uri"],
            timeout=timeout,
        )
    return ProviderRegistry(adapters)


def build_core(
    config: AuthConfig | None = None,
    providers: list[Provider] | None = None,
) -> AccountsCore:
    """
    Build the accounts core. Fails fast on missing secrets or unreachable stores.

    Args:
        config: Defaults to AuthConfig.from_env()
        providers: OAuth providers to enable (default: all with an adapter)

    Raises:
        VaultError: If a secret is missing or Vault is unreachable.
        redis.ConnectionError / psycopg2.OperationalError: If a store is down.
    """
    config = config or AuthConfig.from_env()
    providers = list(OAUTH_ADAPTERS) if providers is None else providers

    postgres = PostgresClient(get_database_url())
    valkey = ValkeyClient(get_valkey_url())

    identity = _service_client(IdentityClient, config)
    profile = _service_client(ProfileClient, config)
    token_client = _service_client(TokenClient, config)
    signup_client = _service_client(SignupClient, config)

    login_codes = CodeManager(valkey, config.login_code_prefix, config.login_code_ttl_seconds, config.code_bytes)
    email_codes = CodeManager(valkey, config.email_code_prefix, config.email_code_ttl_seconds, config.code_bytes)

    security_logger = SecurityLogger(postgres)
    emitter = EventEmitter(valkey, config)
    directory = DirectoryRepository(postgres)

    verification = VerificationService(
        config=config,
        code_manager=email_codes,
        token_client=token_client,
        identity=identity,
        sent_emails=SentEmailRepository(postgres),
        emitter=emitter,
        security_logger=security_logger,
    )

    core = AccountsCore(
        config=config,
        postgres=postgres,
        valkey=valkey,
        service_clients=[identity, profile, token_client, signup_client],
        signup=SignupService(directory, identity, profile, emitter, security_logger, verification),
        verification=verification,
        management=ManagementService(directory, emitter, config),
        local_login=LocalLoginFlow(identity, token_client, login_codes, security_logger),
        oauth_login=OAuthLoginFlow(
            identity,
            token_client,
            login_codes,
            signup_client,
            build_registry(providers, config.service_timeout_seconds),
            security_logger,
        ),
    )
    logger.info(f"Accounts core ready (OAuth providers: {', '.join(p.value for p in providers) or 'none'})")
    return core
