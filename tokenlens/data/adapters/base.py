"""
TokenLens - Base Provider Adapter Interface
All market-data provider adapters must implement this interface.
"""
import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import aiohttp

from tokenlens.data.models import DataSource, ProviderPayload, ProviderSnapshot
from tokenlens.config.settings import get_settings
from tokenlens.utils.logger import get_logger

logger = get_logger("provider_adapter")


class BaseProviderAdapter(ABC):
    """
    Abstract base class for all provider adapters.

    fetch() is best-effort: HTTP failures, undecodable bodies, network errors and
    timeouts become an absent payload; any other exception becomes an
    error payload. Nothing is raised past this boundary.
    """

    def __init__(self, source: DataSource, base_url: str):
        self.source = source
        self.base_url = base_url.rstrip("/")
        self.settings = get_settings().providers
        self._session: Optional[aiohttp.ClientSession] = None

    async def connect(self) -> None:
        """Initialize the HTTP session."""
        timeout = aiohttp.ClientTimeout(total=self.settings.provider_timeout_seconds)
        self._session = aiohttp.ClientSession(timeout=timeout, headers=self._default_headers())
        logger.info("adapter_connected", provider=self.source.value)

    async def disconnect(self) -> None:
        """Clean up the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None
        logger.info("adapter_disconnected", provider=self.source.value)

    def _default_headers(self) -> Dict[str, str]:
        return {"Accept": "application/json"}

    def applies_to(self, token: str) -> bool:
        """Whether this provider should be queried for the identifier."""
        return True

    async def fetch(self, token: str) -> ProviderPayload:
        """Fetch the provider's raw payload for a token identifier."""
        try:
            if not self._session:
                await self.connect()
            raw = await self._fetch_raw(token)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.warning("provider_unavailable", provider=self.source.value,
                           token=token, error=str(e) or e.__class__.__name__)
            return ProviderPayload.absent(self.source, reason=e.__class__.__name__)
        except Exception as e:
            logger.error("provider_exception", provider=self.source.value,
                         token=token, error=str(e))
            return ProviderPayload.error(self.source, reason=str(e))

        if raw is None:
            return ProviderPayload.absent(self.source)
        return ProviderPayload.ok(self.source, raw)

    async def _get_json(
        self, path: str, params: Optional[Dict[str, Any]] = None,
    ) -> Optional[Any]:
        """GET base_url/path; returns decoded JSON or None on a non-200 reply."""
        url = f"{self.base_url}/{path.lstrip('/')}"
        async with self._session.get(url, params=params) as resp:
            if resp.status != 200:
                logger.warning("provider_http_error", provider=self.source.value,
                               status=resp.status, path=path)
                return None
            return await resp.json(content_type=None)

    @abstractmethod
    async def _fetch_raw(self, token: str) -> Optional[Dict[str, Any]]:
        """Provider-specific calls; return the raw payload or None."""
        pass

    @staticmethod
    @abstractmethod
    def normalize(raw: Dict[str, Any]) -> ProviderSnapshot:
        """Map the provider's raw payload into a ProviderSnapshot."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(source={self.source.value})"
