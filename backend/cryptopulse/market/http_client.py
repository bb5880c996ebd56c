"""Shared httpx plumbing for REST-backed adapters."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .errors import SourceError

logger = logging.getLogger(__name__)


class HTTPSourceMixin:
    """Lazily-created httpx.AsyncClient with the adapter's own timeout.

    Every transport error, non-2xx status or undecodable body is turned into
    a SourceError carrying the adapter's name.
    """

    name: str
    timeout: float
    base_url: str = ""

    _client: httpx.AsyncClient | None = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers={"Accept": "application/json"},
            )
        return self._client

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        try:
            response = await self._http().get(path, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            raise SourceError(self.name, f"timed out after {self.timeout:.1f}s") from e
        except httpx.HTTPStatusError as e:
            raise SourceError(self.name, f"HTTP {e.response.status_code} from {path}") from e
        except httpx.HTTPError as e:
            raise SourceError(self.name, f"request failed: {e}") from e
        except ValueError as e:
            raise SourceError(self.name, f"malformed JSON from {path}") from e

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.debug("%s: HTTP client closed", self.name)
