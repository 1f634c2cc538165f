"""Application configuration using pydantic-settings.

Covers the single target network, the host wallet endpoint and the swap
parameters used by the roundup flow.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from snapswap.chains import GOERLI


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
    rpc_url: str = Field(default=GOERLI.rpc_url, description="Chain RPC URL")
    chain_id: int = Field(default=GOERLI.chain_id, description="Expected chain ID")

    # ======================
    # Host wallet / snap
    # ======================
    snap_origin: str = Field(
        default="local:http://localhost:8080", description="Snap ID used by the connector"
    )
    host_rpc_url: str = Field(
        default="http://localhost:8545", description="Host wallet JSON-RPC endpoint"
    )
    host_timeout: float = Field(default=30.0, description="Host wallet request timeout (seconds)")

    # ======================
    # Swap
    # ======================
    deadline_seconds: int = Field(default=300, description="Swap deadline window (seconds)")
    confirmation_timeout: float = Field(
        default=120.0, description="Max seconds to wait for a transaction to be mined"
    )
    poll_interval: float = Field(default=2.0, description="Receipt polling interval (seconds)")
    slippage: Optional[float] = Field(
        default=None,
        description="Slippage tolerance (0.005 = 0.5%). Unset keeps the minimum output at 1",
    )
    roundup_amount: int = Field(default=1, description="Amount sold by the roundup (base units)")
    token_in: str = Field(default=GOERLI.tokens["WETH"], description="Token sold by the roundup")
    token_out: str = Field(default=GOERLI.tokens["LINK"], description="Token bought by the roundup")

    @field_validator("slippage")
    @classmethod
    def _check_slippage(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and not 0 <= value < 1:
            raise ValueError("slippage must be in [0, 1)")
        return value

    @field_validator("deadline_seconds", "roundup_amount")
    @classmethod
    def _check_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    def get_safe_dict(self) -> dict:
        """Return settings dict with endpoint credentials redacted."""
        return {
            "rpc_url": self._redact_url(self.rpc_url),
            "chain_id": self.chain_id,
            "snap_origin": self.snap_origin,
            "host_rpc_url": self._redact_url(self.host_rpc_url),
            "swap": {
                "deadline_seconds": self.deadline_seconds,
                "confirmation_timeout": self.confirmation_timeout,
                "poll_interval": self.poll_interval,
                "slippage": self.slippage,
                "roundup_amount": self.roundup_amount,
                "token_in": self.token_in,
                "token_out": self.token_out,
            },
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Redact credentials embedded in a URL."""
        if "://" in url and "@" in url:
            proto, rest = url.split("://", 1)
            if "@" in rest:
                creds, host = rest.rsplit("@", 1)
                if ":" in creds:
                    user, _ = creds.split(":", 1)
                    return f"{proto}://{user}:***@{host}"
        return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
