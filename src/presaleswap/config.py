"""Application configuration using pydantic-settings.

Holds the RPC endpoint and the two presale contracts the swap talks to,
plus the fixed gas and slippage parameters of the deposit flow.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Chain
    # ======================
    rpc_url: str = Field(
        default="https://public-node.rsk.co", description="RSK JSON-RPC endpoint"
    )
    network: str = Field(default="mainnet", description="Network name (mainnet or testnet)")

    # ======================
    # Contracts
    # ======================
    presale_address: str = Field(
        default="0x0000000000000000000000000000000000000000",
        description="Sale-status contract, also the approval spender",
    )
    controller_address: str = Field(
        default="0x0000000000000000000000000000000000000000",
        description="Controller contract receiving the contribute() deposit",
    )

    # ======================
    # Swap parameters
    # ======================
    # RSK gas estimation is unreliable for contribute(); real usage is 380k-500k
    swap_gas_limit: int = Field(default=750_000, description="Fixed gas budget of the swap tx")
    fee_multiplier: Decimal = Field(
        default=Decimal("1.1"), description="Safety buffer applied to every fee tier"
    )
    slippage_bps: int = Field(
        default=50, description="Slippage stored on the swap record (informational)"
    )

    # ======================
    # Scheduling
    # ======================
    poll_interval_seconds: float = Field(
        default=15.0, description="Delay between confirmation polls in the runner"
    )
    lock_timeout_seconds: float = Field(
        default=30.0, description="Maximum wait for the asset submission lock"
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug logging")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    def get_safe_dict(self) -> dict:
        """Return settings as a plain dict for display."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "network": self.network,
            "rpc_url": self.rpc_url,
            "contracts": {
                "presale": self.presale_address,
                "controller": self.controller_address,
            },
            "swap": {
                "gas_limit": self.swap_gas_limit,
                "fee_multiplier": str(self.fee_multiplier),
                "slippage_bps": self.slippage_bps,
            },
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
