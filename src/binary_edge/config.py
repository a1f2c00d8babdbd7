"""Application configuration via pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # --- Pricing model ---

    # Implied volatility of the underlying (annualized)
    sigma: float = 0.50

    # Time to expiry in years (0.0000095 ~ 5 minutes)
    horizon: float = 0.0000095

    # Risk-free rate (annualized)
    risk_free_rate: float = 0.0433

    # --- Quoting (Avellaneda-Stoikov) ---

    # Risk aversion gamma
    risk_aversion: float = 0.10

    # Belief volatility sigma_b (quoting width, not fair value)
    belief_volatility: float = 0.328

    # Order-arrival decay k
    arrival_decay: float = 1.50

    # --- Edge detection ---

    # Minimum |model - market| in percentage points to emit a signal
    edge_threshold: float = 3.0

    # Yes-prices at or outside these bounds are treated as settled
    min_tradeable_price: float = 0.02
    max_tradeable_price: float = 0.98

    # Fallback when a market question matches no known asset
    default_asset: str = "BTC"
    default_spot: float = 66235.0

    # --- Risk limits ---

    # Kelly multiplier (0.25 = quarter-Kelly)
    kelly_fraction: float = 0.25

    # Max fraction of balance per position
    max_position_pct: float = 0.05

    # Max fraction of balance across all open exposure
    max_total_exposure_pct: float = 0.40

    # Declared limits, not consulted by the monitor yet
    stop_loss_pct: float = 0.15
    max_drawdown_pct: float = 0.20

    # --- Venue ---

    # Minimum price increment on the order book
    tick_size: float = 0.01

    # Polymarket CLOB API credentials
    clob_api_key: str = ""
    clob_secret: str = ""
    clob_passphrase: str = ""
    proxy_wallet: str = ""

    # --- Data sources ---

    # Market category scanned each cycle
    market_category: str = "crypto"

    # Events kept per category
    markets_per_category: int = 3

    # Polymarket Gamma API base URL
    gamma_api_url: str = "https://gamma-api.polymarket.com"

    # CLOB API base URL
    clob_api_url: str = "https://clob.polymarket.com"

    # CoinGecko API base URL
    coingecko_api_url: str = "https://api.coingecko.com/api/v3"

    # HTTP request timeout seconds (per call)
    http_timeout: float = 10.0

    # Cache TTLs in seconds
    price_cache_ttl: float = 30.0
    market_cache_ttl: float = 60.0

    # --- Scheduling / storage ---

    # Seconds between cycles in loop mode
    cycle_interval: float = 300.0

    # SQLite database path for cycle logs
    db_path: Path = Path.home() / ".binary-edge" / "cycles.db"

    @field_validator("sigma", "horizon", "risk_aversion", "arrival_decay", "tick_size")
    @classmethod
    def _strictly_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"must be > 0, got {v}")
        return v

    @field_validator("kelly_fraction")
    @classmethod
    def _kelly_fraction_in_range(cls, v: float) -> float:
        if not 0.0 < v <= 1.0:
            raise ValueError(f"kelly_fraction must be in (0, 1], got {v}")
        return v

    @field_validator(
        "max_position_pct", "max_total_exposure_pct", "stop_loss_pct", "max_drawdown_pct",
    )
    @classmethod
    def _fraction_in_range(cls, v: float) -> float:
        if not 0.0 < v <= 1.0:
            raise ValueError(f"risk limit must be in (0, 1], got {v}")
        return v

    @field_validator("edge_threshold")
    @classmethod
    def _edge_threshold_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"edge_threshold must be >= 0, got {v}")
        return v

    @model_validator(mode="after")
    def _tradeable_band_ordered(self) -> Settings:
        if not 0.0 <= self.min_tradeable_price < self.max_tradeable_price <= 1.0:
            raise ValueError(
                "tradeable band must satisfy 0 <= min_tradeable_price < max_tradeable_price <= 1"
            )
        if self.max_position_pct > self.max_total_exposure_pct:
            raise ValueError("max_position_pct cannot exceed max_total_exposure_pct")
        return self


def get_settings() -> Settings:
    """Build settings from the environment and .env file."""
    return Settings()
