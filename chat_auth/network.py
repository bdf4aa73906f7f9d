"""Network reachability checks."""

from typing import Protocol

import httpx
import structlog

logger = structlog.get_logger()


class ConnectivityChecker(Protocol):
    async def has_internet_access(self) -> bool: ...


class HttpConnectivityChecker:
    """Treats any HTTP response from the probe URL as connectivity."""

    def __init__(self, probe_url: str, timeout: float = 1.5):
        self.probe_url = probe_url
        self.timeout = timeout

    async def has_internet_access(self) -> bool:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                await client.head(self.probe_url)
        except httpx.TransportError as e:
            logger.info(
                "Connectivity probe failed",
                probe_url=self.probe_url,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False
        return True
