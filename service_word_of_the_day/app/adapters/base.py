"""
Common plumbing for upstream HTTP adapters.
"""

import json
from typing import Any, Dict, Optional

import httpx

from shared.errors import (
    ConfigurationError,
    PermanentUpstreamError,
    TransientUpstreamError,
    classify_status,
    is_retryable,
)
from shared.logging import get_logger
from shared.retry import RetryConfig, RetryHook, execute_with_retry


class UpstreamClient:
    """
    Thin async HTTP client for one upstream provider.

    Each logical call runs through ``execute_with_retry``; transport failures
    are translated into the shared upstream error taxonomy before the retry
    policy classifies them.
    """

    service_name = "upstream"

    def __init__(self,
                 base_url: str,
                 *,
                 timeout: float = 10.0,
                 retry_config: Optional[RetryConfig] = None,
                 on_retry: Optional[RetryHook] = None):
        if not base_url or not base_url.strip():
            raise ConfigurationError(
                f"Base URL for {self.service_name} is not configured",
                details={"service": self.service_name}
            )
        self.base_url = base_url.strip().rstrip('/')
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()
        self.on_retry = on_retry
        self.logger = get_logger(f"wotd.{self.service_name}")

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        """Issue a single GET, mapping transport failures to upstream errors."""
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                return await client.get(url, params=params)
        except httpx.TimeoutException as exc:
            raise TransientUpstreamError(
                self.service_name, f"Timed out calling {url}", details={"error": str(exc)}
            ) from exc
        except (httpx.TransportError, OSError) as exc:
            raise TransientUpstreamError(
                self.service_name, f"Connection failure calling {url}", details={"error": str(exc)}
            ) from exc
        except httpx.DecodingError as exc:
            raise PermanentUpstreamError(
                self.service_name, f"Undecodable response body from {url}", details={"error": str(exc)}
            ) from exc
        except httpx.HTTPError as exc:
            raise PermanentUpstreamError(
                self.service_name, f"Request to {url} failed", details={"error": type(exc).__name__}
            ) from exc

    def _decode_json(self, response: httpx.Response) -> Any:
        """Parse a JSON body, treating garbage as a permanent failure."""
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as exc:
            raise PermanentUpstreamError(
                self.service_name,
                "Malformed JSON response",
                status_code=response.status_code,
                details={"error": str(exc)}
            ) from exc

    def _raise_for_status(self, response: httpx.Response, path: str) -> None:
        if response.status_code >= 400:
            self.logger.warning(
                "Upstream request failed",
                url=f"{self.base_url}{path}",
                status_code=response.status_code,
            )
            raise classify_status(self.service_name, response.status_code, response.text)

    async def _with_retry(self, operation, name: str):
        return await execute_with_retry(
            operation,
            is_retryable,
            config=self.retry_config,
            name=name,
            on_retry=self.on_retry,
        )
