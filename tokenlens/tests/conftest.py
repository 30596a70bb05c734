"""
TokenLens - Test Configuration & Fixtures
Recorded-style provider payloads and metric builders shared by all test modules.
"""
import pytest

from tokenlens.data.models import (
    CanonicalMetrics, DataSource, ProviderPayload, TraderPerformance,
)

SOLANA_MINT = "So11111111111111111111111111111111111111112"
EVM_TOKEN = "0x" + "a1" * 20


@pytest.fixture
def coingecko_raw():
    """CoinGecko /coins/{id} reply for a listed Solana token."""
    return {
        "id": "wrapped-solana",
        "symbol": "wsol",
        "name": "Wrapped SOL",
        "asset_platform_id": "solana",
        "contract_address": SOLANA_MINT,
        "market_cap_rank": 12,
        "community_score": 72.5,
        "developer_score": 64.0,
        "public_interest_score": 0.1,
        "image": {"large": "https://img.example/wsol.png"},
        "description": {"en": "Wrapped SOL token."},
        "links": {
            "homepage": ["https://solana.com", ""],
            "twitter_screen_name": "solana",
            "telegram_channel_identifier": "solana",
        },
        "market_data": {
            "current_price": {"usd": 150.0},
            "market_cap": {"usd": 3_000_000_000},
            "total_volume": {"usd": 450_000_000},
            "price_change_percentage_24h": 2.5,
            "circulating_supply": 20_000_000,
            "total_supply": 21_000_000,
            "max_supply": None,
            "ath": {"usd": 260.0},
            "atl": {"usd": 0.5},
            "ath_change_percentage": {"usd": -42.3},
        },
    }


@pytest.fixture
def dexscreener_raw():
    """DexScreener /tokens/{address} reply with two pairs, least liquid first."""
    return {
        "pairs": [
            {
                "chainId": "solana",
                "priceUsd": "149.10",
                "marketCap": 2_900_000_000,
                "fdv": 3_100_000_000,
                "volume": {"h24": 12_000_000},
                "priceChange": {"h24": 1.9},
                "liquidity": {"usd": 50_000},
                "txns": {"h24": {"buys": 10, "sells": 5}},
                "baseToken": {"address": SOLANA_MINT, "name": "Wrapped SOL", "symbol": "SOL"},
            },
            {
                "chainId": "solana",
                "priceUsd": "149.80",
                "marketCap": 2_950_000_000,
                "fdv": 3_200_000_000,
                "volume": {"h24": 80_000_000},
                "priceChange": {"h24": 2.1},
                "liquidity": {"usd": 25_000_000},
                "txns": {"h24": {"buys": 900, "sells": 700}},
                "baseToken": {"address": SOLANA_MINT, "name": "Wrapped SOL", "symbol": "SOL"},
                "info": {
                    "imageUrl": "https://img.example/dex-sol.png",
                    "websites": [{"url": "https://solana.com"}],
                },
            },
        ],
    }


@pytest.fixture
def birdeye_raw():
    """Birdeye overview + price replies, already unwrapped from their envelopes."""
    return {
        "overview": {
            "address": SOLANA_MINT,
            "name": "Wrapped SOL",
            "symbol": "SOL",
            "price": 148.0,
            "mc": 2_800_000_000,
            "v24hUSD": 70_000_000,
            "priceChange24hPercent": 1.2,
            "logoURI": "https://img.example/birdeye-sol.png",
        },
        "price": {"value": 148.5},
    }


@pytest.fixture
def solana_tracker_raw():
    """Solana Tracker endpoints: 4 first buyers (3 profitable) and one top trader."""
    return {
        "token_info": {"token": {"symbol": "SOL"}},
        "holders": {"total": 1000},
        "first_buyers": [
            {"wallet": "a", "pnl": 500.0, "volume": 1000.0},
            {"wallet": "b", "total_pnl": 250.0, "volume": 400.0},
            {"wallet": "c", "pnl": 100.0, "volume": 200.0},
            {"wallet": "d", "pnl": -300.0, "volume": 600.0},
        ],
        "top_traders": [
            {"wallet": "whale", "pnl": 9000.0, "volume": 50_000.0},
        ],
    }


@pytest.fixture
def all_ok_payloads(coingecko_raw, dexscreener_raw, birdeye_raw, solana_tracker_raw):
    return {
        DataSource.COINGECKO: ProviderPayload.ok(DataSource.COINGECKO, coingecko_raw),
        DataSource.DEXSCREENER: ProviderPayload.ok(DataSource.DEXSCREENER, dexscreener_raw),
        DataSource.BIRDEYE: ProviderPayload.ok(DataSource.BIRDEYE, birdeye_raw),
        DataSource.SOLANA_TRACKER: ProviderPayload.ok(DataSource.SOLANA_TRACKER, solana_tracker_raw),
    }


@pytest.fixture
def all_absent_payloads():
    return {source: ProviderPayload.absent(source) for source in DataSource}


@pytest.fixture
def make_metrics():
    """Build CanonicalMetrics from keyword overrides, with a usable primary source by default."""
    def _make(**overrides) -> CanonicalMetrics:
        fields = {"primary_source": DataSource.COINGECKO.value,
                  "data_sources_used": [DataSource.COINGECKO.value]}
        fields.update(overrides)
        return CanonicalMetrics(**fields)
    return _make


@pytest.fixture
def strong_metrics(make_metrics):
    """Liquid mid-cap: 25 + 20 + 15 + 10 + 10 = 80 from the rule table."""
    return make_metrics(
        liquidity_usd=2_000_000,
        volume_24h=6_000_000,
        volume_to_market_cap_ratio=0.12,
        price_change_24h_pct=2.0,
        market_cap=50_000_000,
        tx_count_24h=1500,
    )


@pytest.fixture
def trader_performance():
    return TraderPerformance(
        total_traders=20, profitable_traders=14, losing_traders=6,
        average_profit=120.0, average_loss=80.0, top_profit_amount=900.0,
        top_loss_amount=300.0, win_rate_pct=70.0, total_volume=50_000.0,
    )
