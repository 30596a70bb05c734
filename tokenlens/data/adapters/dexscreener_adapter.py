"""
TokenLens - DexScreener Data Adapter
Fallback price source for new/unlisted tokens and the only source of
liquidity, FDV and transaction counts.
"""
from typing import Any, Dict, List, Optional

from tokenlens.data.adapters.base import BaseProviderAdapter
from tokenlens.data.models import DataSource, ProviderSnapshot
from tokenlens.config.settings import get_settings
from tokenlens.utils.helpers import to_float, float_or_zero
from tokenlens.utils.logger import get_logger

logger = get_logger("dexscreener_adapter")


def _pair_liquidity(pair: Dict[str, Any]) -> float:
    return float_or_zero((pair.get("liquidity") or {}).get("usd"))


def sort_pairs_by_liquidity(pairs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Most liquid pair first; that pair is treated as the reference market."""
    return sorted(pairs, key=_pair_liquidity, reverse=True)


class DexScreenerAdapter(BaseProviderAdapter):
    """DexScreener token-pairs data adapter."""

    def __init__(self):
        super().__init__(DataSource.DEXSCREENER, get_settings().providers.dexscreener_base_url)

    async def _fetch_raw(self, token: str) -> Optional[Dict[str, Any]]:
        data = await self._get_json(f"tokens/{token}")
        if not data:
            return None

        pairs = data.get("pairs") or []
        if not pairs:
            logger.info("dexscreener_no_pairs", token=token)
            return None

        data["pairs"] = sort_pairs_by_liquidity(pairs)
        logger.info("dexscreener_pairs_found", token=token, count=len(pairs),
                    top_liquidity=_pair_liquidity(data["pairs"][0]))
        return data

    @staticmethod
    def normalize(raw: Dict[str, Any]) -> ProviderSnapshot:
        pairs = raw.get("pairs") or []
        if not pairs:
            return ProviderSnapshot(provider=DataSource.DEXSCREENER)

        pair = sort_pairs_by_liquidity(pairs)[0]
        price = to_float(pair.get("priceUsd"))
        txns = (pair.get("txns") or {}).get("h24") or {}
        base_token = pair.get("baseToken") or {}
        info = pair.get("info") or {}

        return ProviderSnapshot(
            provider=DataSource.DEXSCREENER,
            price=price if price and price > 0 else None,
            market_cap=float_or_zero(pair.get("marketCap")),
            volume_24h=float_or_zero((pair.get("volume") or {}).get("h24")),
            price_change_24h_pct=float_or_zero((pair.get("priceChange") or {}).get("h24")),
            liquidity_usd=_pair_liquidity(pair),
            fdv=float_or_zero(pair.get("fdv")),
            tx_count_24h=int(float_or_zero(txns.get("buys")) + float_or_zero(txns.get("sells"))),
            has_dex_metrics=True,
            name=base_token.get("name") or "",
            symbol=base_token.get("symbol") or "",
            contract_address=base_token.get("address") or "",
            chain_id=pair.get("chainId") or "",
            image_url=info.get("imageUrl") or "",
            websites=[w.get("url") for w in (info.get("websites") or []) if w.get("url")],
        )
