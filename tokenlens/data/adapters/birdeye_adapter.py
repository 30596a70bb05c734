"""
TokenLens - Birdeye Data Adapter
Last-resort price source; overview and price endpoints fetched concurrently.
"""
import asyncio
from typing import Any, Dict, Optional

from tokenlens.data.adapters.base import BaseProviderAdapter
from tokenlens.data.models import DataSource, ProviderSnapshot
from tokenlens.config.settings import get_settings
from tokenlens.utils.helpers import to_float, float_or_zero
from tokenlens.utils.logger import get_logger

logger = get_logger("birdeye_adapter")


def _success_data(response: Any) -> Optional[Dict[str, Any]]:
    """Birdeye wraps every reply as {"success": bool, "data": {...}}."""
    if isinstance(response, dict) and response.get("success"):
        return response.get("data")
    return None


class BirdeyeAdapter(BaseProviderAdapter):
    """Birdeye public API adapter."""

    def __init__(self):
        super().__init__(DataSource.BIRDEYE, get_settings().providers.birdeye_base_url)

    def _default_headers(self) -> Dict[str, str]:
        headers = super()._default_headers()
        if self.settings.birdeye_api_key:
            headers["X-API-KEY"] = self.settings.birdeye_api_key
        return headers

    async def _fetch_raw(self, token: str) -> Optional[Dict[str, Any]]:
        overview, price = await asyncio.gather(
            self._get_json("token_overview", {"address": token}),
            self._get_json("price", {"address": token}),
            return_exceptions=True,
        )
        for label, result in (("overview", overview), ("price", price)):
            if isinstance(result, BaseException):
                logger.warning("birdeye_partial_failure", endpoint=label, error=str(result))

        raw = {
            "overview": _success_data(overview),
            "price": _success_data(price),
        }
        if raw["overview"] is None and raw["price"] is None:
            return None
        return raw

    @staticmethod
    def normalize(raw: Dict[str, Any]) -> ProviderSnapshot:
        overview = raw.get("overview") or {}
        price_data = raw.get("price") or {}
        price = to_float(price_data.get("value"))
        if price is None:
            price = to_float(overview.get("price"))

        return ProviderSnapshot(
            provider=DataSource.BIRDEYE,
            price=price if price and price > 0 else None,
            market_cap=float_or_zero(overview.get("mc")),
            volume_24h=float_or_zero(overview.get("v24hUSD")),
            price_change_24h_pct=float_or_zero(overview.get("priceChange24hPercent")),
            name=overview.get("name") or "",
            symbol=overview.get("symbol") or "",
            contract_address=overview.get("address") or "",
            image_url=overview.get("logoURI") or "",
        )
