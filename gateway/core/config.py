from pathlib import Path
from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


ENV_PATH = Path(__file__).resolve().parents[2] / ".env"

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=ENV_PATH, env_file_encoding="utf-8", extra="ignore")

    # App
    env: str = "dev"
    service_name: str = "achievements-gateway"
    log_level: str = "INFO"

    # Node RPC
    qtum_rpc_url: str = "http://localhost:3889"
    qtum_rpc_user: str = "qtum"
    qtum_rpc_password: SecretStr = SecretStr("IN_ENV")
    qtum_network: Literal["mainnet", "testnet"] = "testnet"

    # Contracts (canonical hex, no 0x)
    users_contract_address: str = "IN_ENV"
    achievements_contract_address: str = "IN_ENV"
    rewards_contract_address: str = "IN_ENV"

    # Transaction submission
    sender_address: str | None = None
    gas_limit: int = 250_000
    gas_price: float = 0.0000004

    # Confirmation tail (registration only)
    required_confirmations: int = 1
    confirmation_timeout_seconds: float = 600.0
    confirmation_poll_seconds: float = 5.0

    # Identity verifier
    identity_verifier_url: str = "http://localhost:8081"
    identity_verifier_api_key: SecretStr = SecretStr("IN_ENV")

    # Activity feed
    feed_url: str = "http://localhost:8082/activities"
    feed_api_key: SecretStr = SecretStr("IN_ENV")

    # Access tokens (Fernet key)
    access_token_key: SecretStr = SecretStr("IN_ENV")
    access_token_ttl_seconds: int = 3600

    # Pending registrations
    pending_store: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"

    # Outbound HTTP
    http_timeout_seconds: float = 20.0

    # Telemetry
    telemetry_enabled: bool = True
    otlp_endpoint: str = "http://localhost:4318"  # Jaeger OTLP HTTP


settings = Settings()
