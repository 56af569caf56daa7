"""Configuration management for SPIGOT using Pydantic Settings."""

from decimal import Decimal
from enum import Enum

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Default faucet identity for the in-memory token ("fa0ce")
DEFAULT_FAUCET_ADDRESS = "0x00000000000000000000000000000000000fa0ce"


class TokenBackend(str, Enum):
    """Where claimed tokens are minted."""

    MEMORY = "memory"
    CHAIN = "chain"


class SpigotConfig(BaseSettings):
    """SPIGOT service configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # Identities
    admin_address: str = Field(alias="SPIGOT_ADMIN_ADDRESS")
    faucet_address: str = Field(default=DEFAULT_FAUCET_ADDRESS, alias="SPIGOT_FAUCET_ADDRESS")

    # Faucet limits (whole tokens / seconds)
    faucet_amount: Decimal = Field(default=Decimal("10"), alias="SPIGOT_FAUCET_AMOUNT", gt=0)
    max_claim_amount: Decimal = Field(
        default=Decimal("50"), alias="SPIGOT_MAX_CLAIM_AMOUNT", gt=0
    )
    cooldown_seconds: int = Field(default=86400, alias="SPIGOT_COOLDOWN_SECONDS", ge=0)

    # Token
    token_backend: TokenBackend = Field(default=TokenBackend.MEMORY, alias="SPIGOT_TOKEN_BACKEND")
    token_name: str = Field(default="SepoliaTestToken", alias="SPIGOT_TOKEN_NAME")
    token_symbol: str = Field(default="STT", alias="SPIGOT_TOKEN_SYMBOL")
    token_decimals: int = Field(default=18, alias="SPIGOT_TOKEN_DECIMALS", ge=0, le=36)
    max_supply: Decimal = Field(default=Decimal("1000000"), alias="SPIGOT_MAX_SUPPLY", gt=0)

    # Chain backend
    rpc_endpoint: str | None = Field(default=None, alias="SPIGOT_RPC_ENDPOINT")
    token_address: str | None = Field(default=None, alias="SPIGOT_TOKEN_ADDRESS")
    wallet_private_key: SecretStr | None = Field(default=None, alias="SPIGOT_WALLET_PRIVATE_KEY")
    wallet_private_key_file: str | None = Field(
        default=None, alias="SPIGOT_WALLET_PRIVATE_KEY_FILE"
    )
    receipt_timeout: int = Field(default=120, alias="SPIGOT_RECEIPT_TIMEOUT", gt=0)

    # Redis (ledger persistence; in-memory when unset)
    redis_url: str | None = Field(default=None, alias="REDIS_URL")

    # HTTP / observability
    http_host: str = Field(default="0.0.0.0", alias="SPIGOT_HTTP_HOST")  # noqa: S104
    http_port: int = Field(default=8080, alias="SPIGOT_HTTP_PORT", ge=1, le=65535)
    log_level: str = Field(default="INFO", alias="SPIGOT_LOG_LEVEL")
    log_format: str = Field(default="json", alias="SPIGOT_LOG_FORMAT")

    @model_validator(mode="after")
    def _check_limits(self) -> "SpigotConfig":
        if self.max_claim_amount < self.faucet_amount:
            raise ValueError("SPIGOT_MAX_CLAIM_AMOUNT must be at least SPIGOT_FAUCET_AMOUNT")
        if self.token_backend == TokenBackend.CHAIN:
            missing = [
                name
                for name, value in (
                    ("SPIGOT_RPC_ENDPOINT", self.rpc_endpoint),
                    ("SPIGOT_TOKEN_ADDRESS", self.token_address),
                )
                if not value
            ]
            if not self.wallet_private_key and not self.wallet_private_key_file:
                missing.append("SPIGOT_WALLET_PRIVATE_KEY or SPIGOT_WALLET_PRIVATE_KEY_FILE")
            if missing:
                raise ValueError(f"Chain token backend requires: {', '.join(missing)}")
        return self

    def to_base_units(self, amount: Decimal) -> int:
        """Convert a whole-token amount to integer base units."""
        return int(amount * (Decimal(10) ** self.token_decimals))

    @property
    def faucet_amount_units(self) -> int:
        return self.to_base_units(self.faucet_amount)

    @property
    def max_claim_amount_units(self) -> int:
        return self.to_base_units(self.max_claim_amount)

    @property
    def max_supply_units(self) -> int:
        return self.to_base_units(self.max_supply)
