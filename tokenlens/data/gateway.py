"""
TokenLens - Provider Gateway
Fans out one best-effort fetch per configured provider, waits for every call
to settle, and returns a complete provider -> payload map.
"""
import asyncio
from typing import Dict, List, Optional

from tokenlens.data.models import DataSource, ProviderPayload, PayloadStatus
from tokenlens.data.adapters.base import BaseProviderAdapter
from tokenlens.data.adapters.coingecko_adapter import CoinGeckoAdapter
from tokenlens.data.adapters.dexscreener_adapter import DexScreenerAdapter
from tokenlens.data.adapters.birdeye_adapter import BirdeyeAdapter
from tokenlens.data.adapters.solana_tracker_adapter import SolanaTrackerAdapter
from tokenlens.config.settings import get_settings
from tokenlens.utils.logger import get_logger

logger = get_logger("gateway")


def build_default_adapters() -> List[BaseProviderAdapter]:
    return [
        CoinGeckoAdapter(),
        DexScreenerAdapter(),
        BirdeyeAdapter(),
        SolanaTrackerAdapter(),
    ]


class ProviderGateway:
    """
    Concurrent provider fan-out.
    Polls all applicable providers with a per-call timeout; a slow or failing
    provider becomes an absent payload and never blocks or fails the others.
    """

    def __init__(self, adapters: Optional[List[BaseProviderAdapter]] = None,
                 timeout_seconds: Optional[float] = None):
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None
            else get_settings().providers.provider_timeout_seconds
        )
        self._adapters: List[BaseProviderAdapter] = (
            adapters if adapters is not None else build_default_adapters()
        )
        self._initialized = False

    @property
    def providers(self) -> List[DataSource]:
        return [a.source for a in self._adapters]

    async def initialize(self) -> None:
        """Open an HTTP session per adapter."""
        if self._initialized:
            return

        for adapter in self._adapters:
            try:
                await adapter.connect()
            except Exception as e:
                logger.warning("adapter_connect_failed", adapter=adapter.source.value, error=str(e))

        self._initialized = True
        logger.info("gateway_initialized", adapters=len(self._adapters))

    async def shutdown(self) -> None:
        """Disconnect all adapters."""
        for adapter in self._adapters:
            try:
                await adapter.disconnect()
            except Exception as e:
                logger.warning("adapter_disconnect_failed", adapter=adapter.source.value, error=str(e))
        self._initialized = False

    async def _fetch_one(self, adapter: BaseProviderAdapter, token: str) -> ProviderPayload:
        try:
            return await asyncio.wait_for(adapter.fetch(token), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning("provider_timeout", provider=adapter.source.value,
                           timeout=self.timeout_seconds, token=token)
            return ProviderPayload.absent(adapter.source, reason="timeout")

    async def fetch_all(self, token: str) -> Dict[DataSource, ProviderPayload]:
        """
        Fetch every configured provider for a token identifier.
        Providers that do not apply to the identifier (chain-gated) are
        reported as absent without a network call.
        """
        if not self._initialized:
            await self.initialize()

        payloads: Dict[DataSource, ProviderPayload] = {}
        active: List[BaseProviderAdapter] = []
        for adapter in self._adapters:
            if adapter.applies_to(token):
                active.append(adapter)
            else:
                payloads[adapter.source] = ProviderPayload.absent(adapter.source, reason="not_applicable")

        results = await asyncio.gather(
            *(self._fetch_one(adapter, token) for adapter in active),
            return_exceptions=True,
        )

        for adapter, result in zip(active, results):
            if isinstance(result, ProviderPayload):
                payloads[adapter.source] = result
            else:
                logger.error("provider_fetch_crashed", provider=adapter.source.value, error=str(result))
                payloads[adapter.source] = ProviderPayload.error(adapter.source, reason=str(result))

        ok = [s.value for s, p in payloads.items() if p.status == PayloadStatus.OK]
        logger.info("providers_settled", token=token, ok=ok, total=len(payloads))
        return payloads
