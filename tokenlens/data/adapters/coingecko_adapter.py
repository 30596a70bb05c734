"""
TokenLens - CoinGecko Data Adapter
Primary price source for listed tokens; also the only source of
all-time-high/low history and community/developer scores.
"""
import asyncio
from typing import Any, Dict, List, Optional

import aiohttp

from tokenlens.data.adapters.base import BaseProviderAdapter
from tokenlens.data.models import DataSource, ProviderSnapshot
from tokenlens.config.settings import get_settings
from tokenlens.utils.helpers import to_float, float_or_zero
from tokenlens.utils.logger import get_logger

logger = get_logger("coingecko_adapter")

COIN_DETAIL_PARAMS = {
    "localization": "false",
    "tickers": "false",
    "market_data": "true",
    "community_data": "true",
    "developer_data": "true",
}


def _usd(section: Dict[str, Any], key: str) -> Any:
    value = section.get(key)
    if isinstance(value, dict):
        return value.get("usd")
    return value


def _pick_search_match(coins: List[Dict[str, Any]], token: str) -> Optional[Dict[str, Any]]:
    """Prefer an exact symbol match, else the first search hit."""
    if not coins:
        return None
    for coin in coins:
        if str(coin.get("symbol", "")).lower() == token.lower():
            return coin
    return coins[0]


class CoinGeckoAdapter(BaseProviderAdapter):
    """CoinGecko /coins data adapter."""

    def __init__(self):
        super().__init__(DataSource.COINGECKO, get_settings().providers.coingecko_base_url)

    async def _fetch_raw(self, token: str) -> Optional[Dict[str, Any]]:
        # Short tickers are tried as CoinGecko ids before falling back to search
        if len(token) <= 5 and not token.startswith("0x"):
            try:
                direct = await self._get_json(f"coins/{token.lower()}", COIN_DETAIL_PARAMS)
            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                logger.info("coingecko_direct_failed", token=token, error=str(e) or e.__class__.__name__)
                direct = None
            if direct:
                logger.info("coingecko_direct_match", token=token)
                return direct

        search = await self._get_json("search", {"query": token})
        if not search:
            return None

        match = _pick_search_match(search.get("coins") or [], token)
        if match is None or not match.get("id"):
            logger.info("coingecko_no_match", token=token)
            return None

        logger.info("coingecko_search_match", token=token, coin_id=match["id"])
        return await self._get_json(f"coins/{match['id']}", COIN_DETAIL_PARAMS)

    @staticmethod
    def normalize(raw: Dict[str, Any]) -> ProviderSnapshot:
        market = raw.get("market_data") or {}
        price = to_float(_usd(market, "current_price"))
        links = raw.get("links") or {}
        image = raw.get("image") or {}
        description = raw.get("description") or {}

        circulating = float_or_zero(market.get("circulating_supply"))
        total = float_or_zero(market.get("total_supply"))
        max_supply = float_or_zero(market.get("max_supply"))
        ath = float_or_zero(_usd(market, "ath"))

        return ProviderSnapshot(
            provider=DataSource.COINGECKO,
            price=price if price and price > 0 else None,
            market_cap=float_or_zero(_usd(market, "market_cap")),
            volume_24h=float_or_zero(_usd(market, "total_volume")),
            price_change_24h_pct=float_or_zero(market.get("price_change_percentage_24h")),
            circulating_supply=circulating,
            total_supply=total,
            max_supply=max_supply,
            has_supply=any(v > 0 for v in (circulating, total, max_supply)),
            ath=ath,
            atl=float_or_zero(_usd(market, "atl")),
            ath_change_pct=float_or_zero(_usd(market, "ath_change_percentage")),
            has_history=ath > 0,
            community_score=float_or_zero(raw.get("community_score")),
            developer_score=float_or_zero(raw.get("developer_score")),
            public_interest_score=float_or_zero(raw.get("public_interest_score")),
            market_cap_rank=int(float_or_zero(raw.get("market_cap_rank"))),
            name=raw.get("name") or "",
            symbol=(raw.get("symbol") or "").upper(),
            asset_platform=raw.get("asset_platform_id") or "",
            contract_address=raw.get("contract_address") or "",
            image_url=image.get("large") or image.get("small") or "",
            description=description.get("en") or "",
            websites=[url for url in (links.get("homepage") or []) if url],
            twitter=links.get("twitter_screen_name") or "",
            telegram=links.get("telegram_channel_identifier") or "",
        )
