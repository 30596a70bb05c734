"""
TokenLens - Central Configuration
All settings are loaded from environment variables with sensible defaults.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Dict, List, Optional


class ProviderSettings(BaseSettings):
    """Market-data provider endpoints, keys and call bounds."""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    coingecko_base_url: str = Field(default="https://api.coingecko.com/api/v3")
    dexscreener_base_url: str = Field(default="https://api.dexscreener.com/latest/dex")
    birdeye_base_url: str = Field(default="https://public-api.birdeye.so/public")
    birdeye_api_key: str = Field(default="")
    solana_tracker_base_url: str = Field(default="https://data.solanatracker.io")
    solana_tracker_api_key: str = Field(default="")

    # Bounded wait per provider call; a timed-out provider becomes absent
    provider_timeout_seconds: float = Field(default=10.0)


class ReconcileSettings(BaseSettings):
    """Sanity bounds and chain gating used by the metric reconciler."""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    market_cap_ceiling: float = Field(default=10_000_000_000_000.0)  # $10T
    volume_market_cap_multiple: float = Field(default=10.0)
    trader_analytics_chains: List[str] = Field(default=["solana"])


class ConsensusSettings(BaseSettings):
    """Consensus aggregation weights and thresholds."""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # "swarm" = 0.4/0.4/0.2, "research" = 0.4/0.35/0.25
    consensus_variant: str = Field(default="swarm")
    consensus_weights: Dict[str, float] = Field(default_factory=dict)

    neutral_score: int = 50
    insufficient_confidence: float = 0.3
    variance_threshold: float = 400.0
    variance_penalty: int = 20
    variance_confidence_penalty: float = 0.1

    max_findings: int = 6
    max_risks: int = 5
    scorer_timeout_seconds: float = Field(default=5.0)


class AppSettings(BaseSettings):
    """Top-level application settings."""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "TokenLens"
    version: str = "1.0.0"
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # "consensus" runs the sub-scorers; "rules" returns the primary rule score
    analysis_mode: str = Field(default="consensus")
    cache_ttl_seconds: int = Field(default=60)
    cors_origins: List[str] = Field(default=["*"])

    providers: ProviderSettings = ProviderSettings()
    reconcile: ReconcileSettings = ReconcileSettings()
    consensus: ConsensusSettings = ConsensusSettings()


# Singleton
_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings
