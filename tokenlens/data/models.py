"""
TokenLens - Data Models for Provider and Market Data
Canonical data structures used across the entire platform.
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone
from enum import Enum


class DataSource(str, Enum):
    COINGECKO = "coingecko"
    DEXSCREENER = "dexscreener"
    BIRDEYE = "birdeye"
    SOLANA_TRACKER = "solana_tracker"


# primary_source value when no provider supplied a usable price
NO_SOURCE = "none"


class PayloadStatus(str, Enum):
    OK = "ok"
    ABSENT = "absent"
    ERROR = "error"


class ProviderPayload(BaseModel):
    """Result of one best-effort fetch against one provider."""
    model_config = ConfigDict(frozen=True)

    provider: DataSource
    status: PayloadStatus
    raw: Optional[Dict[str, Any]] = None
    reason: str = ""
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def ok(cls, provider: DataSource, raw: Dict[str, Any]) -> "ProviderPayload":
        return cls(provider=provider, status=PayloadStatus.OK, raw=raw)

    @classmethod
    def absent(cls, provider: DataSource, reason: str = "no_data") -> "ProviderPayload":
        return cls(provider=provider, status=PayloadStatus.ABSENT, reason=reason)

    @classmethod
    def error(cls, provider: DataSource, reason: str) -> "ProviderPayload":
        return cls(provider=provider, status=PayloadStatus.ERROR, reason=reason)

    @property
    def is_ok(self) -> bool:
        return self.status == PayloadStatus.OK and self.raw is not None


class TraderRecord(BaseModel):
    """One trader/holder entry with realized profit and loss."""
    pnl: float = 0.0
    volume: float = 0.0


class ProviderSnapshot(BaseModel):
    """
    Provider payload normalized into the shape the reconciler consumes.
    Every provider maps its own JSON into this; fields it does not offer keep
    their defaults and the matching has_* flag stays False.
    """
    provider: DataSource

    # Price family; price is None unless usable (finite and > 0)
    price: Optional[float] = None
    market_cap: float = 0.0
    volume_24h: float = 0.0
    price_change_24h_pct: float = 0.0

    # Supply
    circulating_supply: float = 0.0
    total_supply: float = 0.0
    max_supply: float = 0.0
    has_supply: bool = False

    # DEX
    liquidity_usd: float = 0.0
    fdv: float = 0.0
    tx_count_24h: int = 0
    has_dex_metrics: bool = False

    # History and community
    ath: float = 0.0
    atl: float = 0.0
    ath_change_pct: float = 0.0
    has_history: bool = False
    community_score: float = 0.0
    developer_score: float = 0.0
    public_interest_score: float = 0.0
    market_cap_rank: int = 0

    # Trader analytics
    trader_records: List[TraderRecord] = Field(default_factory=list)
    top_trader_records: List[TraderRecord] = Field(default_factory=list)
    has_trader_data: bool = False

    # Token metadata
    name: str = ""
    symbol: str = ""
    chain_id: str = ""
    asset_platform: str = ""
    contract_address: str = ""
    image_url: str = ""
    description: str = ""
    websites: List[str] = Field(default_factory=list)
    twitter: str = ""
    telegram: str = ""

    @property
    def has_usable_price(self) -> bool:
        return self.price is not None and self.price > 0


class CamelModel(BaseModel):
    """Base for models serialized to the external camelCase shape."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class TraderPerformance(CamelModel):
    """Aggregate win/loss statistics over a set of trader records."""
    total_traders: int = 0
    profitable_traders: int = 0
    losing_traders: int = 0
    average_profit: float = 0.0
    average_loss: float = 0.0
    top_profit_amount: float = 0.0
    top_loss_amount: float = 0.0
    win_rate_pct: float = 0.0
    total_volume: float = 0.0


class CanonicalMetrics(CamelModel):
    """The single reconciled metric view for one analysis run."""
    # Price family (always from primary_source)
    current_price: float = 0.0
    market_cap: float = 0.0
    volume_24h: float = Field(default=0.0, alias="volume24h")
    price_change_24h_pct: float = Field(default=0.0, alias="priceChange24hPct")

    # Supply
    circulating_supply: float = 0.0
    total_supply: float = 0.0
    max_supply: float = 0.0

    # DEX-only
    liquidity_usd: float = 0.0
    fully_diluted_valuation: float = 0.0
    tx_count_24h: int = Field(default=0, alias="txCount24h")

    # Historical
    all_time_high: float = 0.0
    all_time_low: float = 0.0
    ath_change_pct: float = 0.0

    # Derived
    volume_to_market_cap_ratio: float = 0.0
    price_to_ath_ratio: float = 0.0
    liquidity_to_market_cap_ratio: float = 0.0

    # Community / dev
    community_score: float = 0.0
    developer_score: float = 0.0
    public_interest_score: float = 0.0
    market_cap_rank: int = 0

    trader_performance: Optional[TraderPerformance] = None

    primary_source: str = NO_SOURCE
    data_sources_used: List[str] = Field(default_factory=list)
    quality_flags: List[str] = Field(default_factory=list)

    @property
    def has_data(self) -> bool:
        return self.primary_source != NO_SOURCE


class ChainInfo(CamelModel):
    """Blockchain detected for a token identifier."""
    blockchain: str = "unknown"
    chain_id: str = ""
    is_contract_address: bool = False
    address_format: str = "solana"


class TokenInfo(CamelModel):
    """Display metadata resolved across providers."""
    name: str = "Unknown Token"
    symbol: str = "UNKNOWN"
    address: str = ""
    blockchain: str = "unknown"
    chain_id: str = ""
    image_url: str = ""
    description: str = ""
    websites: List[str] = Field(default_factory=list)
    social_links: Dict[str, str] = Field(default_factory=dict)
