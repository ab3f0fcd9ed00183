# Infrastructure clients
from clients.vault_client import (
    VaultClient,
    VaultError,
    get_database_url,
    get_valkey_url,
    get_service_config,
    get_oauth_config,
)
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
from clients.service_client import ServiceClient
from clients.identity_client import IdentityClient
from clients.profile_client import ProfileClient
from clients.token_client import TokenClient
from clients.signup_client import SignupClient
