"""
TokenLens - Solana Tracker Data Adapter
Trader analytics (first buyers, top traders, holders) for Solana tokens only.
"""
import asyncio
from typing import Any, Dict, List, Optional

from tokenlens.data.adapters.base import BaseProviderAdapter
from tokenlens.data.models import DataSource, ProviderSnapshot, TraderRecord
from tokenlens.config.settings import get_settings
from tokenlens.utils.helpers import float_or_zero, is_solana_address
from tokenlens.utils.logger import get_logger

logger = get_logger("solana_tracker_adapter")

# Realized PnL key, in order of preference
PNL_KEYS = ("pnl", "total_pnl", "realized")

ENDPOINTS = {
    "token_info": "tokens/{token}",
    "holders": "tokens/{token}/holders",
    "top_traders": "top-traders/{token}",
    "first_buyers": "first-buyers/{token}",
}


def _record_pnl(entry: Dict[str, Any]) -> float:
    for key in PNL_KEYS:
        if entry.get(key):
            return float_or_zero(entry[key])
    return 0.0


def parse_trader_records(entries: Any) -> List[TraderRecord]:
    """Convert a provider list of trader entries into TraderRecords."""
    if not isinstance(entries, list):
        return []
    return [
        TraderRecord(pnl=_record_pnl(e), volume=max(0.0, float_or_zero(e.get("volume"))))
        for e in entries
        if isinstance(e, dict)
    ]


class SolanaTrackerAdapter(BaseProviderAdapter):
    """Solana Tracker data API adapter."""

    def __init__(self):
        super().__init__(DataSource.SOLANA_TRACKER, get_settings().providers.solana_tracker_base_url)

    def _default_headers(self) -> Dict[str, str]:
        headers = super()._default_headers()
        if self.settings.solana_tracker_api_key:
            headers["x-api-key"] = self.settings.solana_tracker_api_key
        return headers

    def applies_to(self, token: str) -> bool:
        return is_solana_address(token)

    async def _fetch_raw(self, token: str) -> Optional[Dict[str, Any]]:
        names = list(ENDPOINTS)
        results = await asyncio.gather(
            *(self._get_json(ENDPOINTS[name].format(token=token)) for name in names),
            return_exceptions=True,
        )

        raw: Dict[str, Any] = {}
        for name, result in zip(names, results):
            if isinstance(result, BaseException):
                logger.warning("solana_tracker_partial_failure", endpoint=name, error=str(result))
                raw[name] = None
            else:
                raw[name] = result

        if all(value is None for value in raw.values()):
            return None

        logger.info(
            "solana_tracker_fetched",
            token=token,
            first_buyers=len(raw["first_buyers"]) if isinstance(raw["first_buyers"], list) else 0,
            top_traders=len(raw["top_traders"]) if isinstance(raw["top_traders"], list) else 0,
        )
        return raw

    @staticmethod
    def normalize(raw: Dict[str, Any]) -> ProviderSnapshot:
        first_buyers = raw.get("first_buyers")
        return ProviderSnapshot(
            provider=DataSource.SOLANA_TRACKER,
            trader_records=parse_trader_records(first_buyers),
            top_trader_records=parse_trader_records(raw.get("top_traders")),
            has_trader_data=isinstance(first_buyers, list),
            chain_id="solana",
        )
