"""
TokenLens - Metric Reconciler
Merges disagreeing provider payloads into one CanonicalMetrics view.

Price family (price, market cap, volume, 24h change, supply) is taken whole
from the first provider in PRICE_PRIORITY with a usable price, so two
providers' numbers are never mixed. DEX and historical fields have a single
possible source each and are filled independently of that choice.
"""
from typing import Callable, Dict, Optional

from tokenlens.data.models import (
    CanonicalMetrics, ChainInfo, DataSource, ProviderPayload, ProviderSnapshot,
)
from tokenlens.data.adapters.coingecko_adapter import CoinGeckoAdapter
from tokenlens.data.adapters.dexscreener_adapter import DexScreenerAdapter
from tokenlens.data.adapters.birdeye_adapter import BirdeyeAdapter
from tokenlens.data.adapters.solana_tracker_adapter import SolanaTrackerAdapter
from tokenlens.data.chain import detect_chain
from tokenlens.engines.trader_performance import compute_trader_performance
from tokenlens.config.settings import ReconcileSettings, get_settings
from tokenlens.utils.helpers import safe_divide
from tokenlens.utils.logger import get_logger

logger = get_logger("reconciler")

PRICE_PRIORITY = (DataSource.COINGECKO, DataSource.DEXSCREENER, DataSource.BIRDEYE)
DEX_SOURCE = DataSource.DEXSCREENER
HISTORY_SOURCE = DataSource.COINGECKO
TRADER_SOURCE = DataSource.SOLANA_TRACKER

NORMALIZERS: Dict[DataSource, Callable[[dict], ProviderSnapshot]] = {
    DataSource.COINGECKO: CoinGeckoAdapter.normalize,
    DataSource.DEXSCREENER: DexScreenerAdapter.normalize,
    DataSource.BIRDEYE: BirdeyeAdapter.normalize,
    DataSource.SOLANA_TRACKER: SolanaTrackerAdapter.normalize,
}


class MetricReconciler:
    """Source-priority reconciliation with sanity-bound rejection."""

    def __init__(self, settings: Optional[ReconcileSettings] = None):
        self.settings = settings or get_settings().reconcile

    def normalize_all(self, payloads: Dict[DataSource, ProviderPayload]) -> Dict[DataSource, ProviderSnapshot]:
        """Normalize every ok payload; a payload that fails to normalize is dropped."""
        snapshots: Dict[DataSource, ProviderSnapshot] = {}
        for source, payload in payloads.items():
            if not payload.is_ok:
                continue
            normalizer = NORMALIZERS.get(source)
            if normalizer is None:
                continue
            try:
                snapshots[source] = normalizer(payload.raw)
            except Exception as e:
                logger.warning("normalize_failed", provider=source.value, error=str(e))
        return snapshots

    def reconcile(
        self,
        payloads: Dict[DataSource, ProviderPayload],
        chain_info: Optional[ChainInfo] = None,
        token: str = "",
    ) -> CanonicalMetrics:
        """Build the canonical metric set. Never raises for data-quality reasons."""
        return self.reconcile_snapshots(self.normalize_all(payloads), chain_info, token)

    def reconcile_snapshots(
        self,
        snapshots: Dict[DataSource, ProviderSnapshot],
        chain_info: Optional[ChainInfo] = None,
        token: str = "",
    ) -> CanonicalMetrics:
        metrics = CanonicalMetrics(data_sources_used=[s.value for s in snapshots])

        primary = self._select_primary(snapshots)
        if primary is not None:
            self._apply_price_family(metrics, primary, snapshots.get(DEX_SOURCE))
        else:
            logger.warning("no_usable_price", providers=list(metrics.data_sources_used))

        self._apply_dex_fields(metrics, snapshots.get(DEX_SOURCE))
        self._apply_history_fields(metrics, snapshots.get(HISTORY_SOURCE))
        self._apply_sanity_bounds(metrics)
        self._apply_ratios(metrics)

        if chain_info is None and token:
            chain_info = detect_chain(token, snapshots)
        self._apply_trader_performance(metrics, snapshots.get(TRADER_SOURCE), chain_info)

        logger.info(
            "metrics_reconciled",
            primary_source=metrics.primary_source,
            sources=metrics.data_sources_used,
            flags=metrics.quality_flags,
        )
        return metrics

    # ─── Steps ──────────────────────────────────────────────────

    def _select_primary(self, snapshots: Dict[DataSource, ProviderSnapshot]) -> Optional[ProviderSnapshot]:
        for source in PRICE_PRIORITY:
            snap = snapshots.get(source)
            if snap is not None and snap.has_usable_price:
                return snap
        return None

    def _apply_price_family(self, metrics: CanonicalMetrics, primary: ProviderSnapshot,
                            dex: Optional[ProviderSnapshot]) -> None:
        metrics.primary_source = primary.provider.value
        metrics.current_price = primary.price
        metrics.market_cap = primary.market_cap
        metrics.volume_24h = primary.volume_24h
        metrics.price_change_24h_pct = primary.price_change_24h_pct

        if primary.has_supply:
            metrics.circulating_supply = primary.circulating_supply
            metrics.total_supply = primary.total_supply
            metrics.max_supply = primary.max_supply
        elif primary.market_cap > 0 and primary.price > 0:
            # Estimate supply from the winner's own market cap and price
            circulating = primary.market_cap / primary.price
            fdv = primary.fdv or (dex.fdv if dex else 0.0)
            total = fdv / primary.price if fdv > primary.market_cap else circulating
            metrics.circulating_supply = circulating
            metrics.total_supply = total
            metrics.max_supply = total

    def _apply_dex_fields(self, metrics: CanonicalMetrics, dex: Optional[ProviderSnapshot]) -> None:
        if dex is None or not dex.has_dex_metrics:
            return
        metrics.liquidity_usd = max(0.0, dex.liquidity_usd)
        metrics.fully_diluted_valuation = max(0.0, dex.fdv)
        metrics.tx_count_24h = max(0, dex.tx_count_24h)

    def _apply_history_fields(self, metrics: CanonicalMetrics, history: Optional[ProviderSnapshot]) -> None:
        if history is None:
            return
        metrics.all_time_high = history.ath
        metrics.all_time_low = history.atl
        metrics.ath_change_pct = history.ath_change_pct
        metrics.community_score = history.community_score
        metrics.developer_score = history.developer_score
        metrics.public_interest_score = history.public_interest_score
        metrics.market_cap_rank = history.market_cap_rank

    def _apply_sanity_bounds(self, metrics: CanonicalMetrics) -> None:
        if metrics.market_cap < 0 or metrics.market_cap > self.settings.market_cap_ceiling:
            logger.warning("market_cap_rejected", value=metrics.market_cap,
                           ceiling=self.settings.market_cap_ceiling)
            metrics.market_cap = 0.0
            metrics.quality_flags.append("market_cap")

        volume_ceiling = metrics.market_cap * self.settings.volume_market_cap_multiple
        if metrics.volume_24h < 0 or metrics.volume_24h > volume_ceiling:
            logger.warning("volume_rejected", value=metrics.volume_24h, market_cap=metrics.market_cap,
                           multiple=self.settings.volume_market_cap_multiple)
            metrics.volume_24h = 0.0
            metrics.quality_flags.append("volume_24h")

    def _apply_ratios(self, metrics: CanonicalMetrics) -> None:
        metrics.volume_to_market_cap_ratio = safe_divide(metrics.volume_24h, metrics.market_cap)
        metrics.price_to_ath_ratio = safe_divide(metrics.current_price, metrics.all_time_high)
        metrics.liquidity_to_market_cap_ratio = safe_divide(metrics.liquidity_usd, metrics.market_cap)

    def _apply_trader_performance(self, metrics: CanonicalMetrics, traders: Optional[ProviderSnapshot],
                                  chain_info: Optional[ChainInfo]) -> None:
        if traders is None or not traders.has_trader_data or chain_info is None:
            return
        if not chain_info.is_contract_address:
            return
        if chain_info.blockchain not in self.settings.trader_analytics_chains:
            return
        metrics.trader_performance = compute_trader_performance(
            traders.trader_records, traders.top_trader_records,
        )
