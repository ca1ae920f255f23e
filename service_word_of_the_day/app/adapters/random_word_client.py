"""
Random word clients for the Word of the Day service.
"""

from typing import Any, Dict, Optional

from shared.errors import ConfigurationError, EmptyResponseError, PermanentUpstreamError
from shared.retry import RetryConfig, RetryHook

from ..config import WordProvider, WordServiceConfig
from ..domain.sources import WordSource
from .base import UpstreamClient


class RandomWordApiClient(UpstreamClient, WordSource):
    """Client for the random-word API (``GET {base}/word?number=1``)."""

    service_name = "random_word_api"
    path = "/word"

    async def fetch_random_word(self) -> str:
        """Fetch exactly one random word."""
        return await self._with_retry(self._request_word, name=f"{self.service_name}.fetch_random_word")

    async def _request_word(self) -> str:
        params: Dict[str, Any] = {"number": 1}
        response = await self._get(self.path, params=params)
        self._raise_for_status(response, self.path)

        words = self._decode_json(response)
        if not isinstance(words, list):
            raise PermanentUpstreamError(
                self.service_name,
                "Expected a JSON array of words",
                status_code=response.status_code,
                details={"payload_type": type(words).__name__}
            )
        if not words:
            self.logger.warning("Random word API returned empty response")
            raise EmptyResponseError(self.service_name, "Random word API returned empty response")

        word = words[0]
        if not isinstance(word, str) or not word.strip():
            raise PermanentUpstreamError(
                self.service_name,
                "First element is not a usable word",
                status_code=response.status_code,
                details={"value": repr(word)[:100]}
            )

        word = word.strip()
        self.logger.debug("Random word retrieved", word=word)
        return word


class RandomWordVercelClient(RandomWordApiClient):
    """Client for the Vercel mirror, which serves words from the base URL itself."""

    service_name = "random_word_vercel"
    path = ""


def build_word_source(config: WordServiceConfig,
                      *,
                      retry_config: Optional[RetryConfig] = None,
                      on_retry: Optional[RetryHook] = None) -> WordSource:
    """Construct the word source named by ``config.word_provider``."""
    retry_config = retry_config or config.retry_config()
    provider = config.word_provider

    if provider == WordProvider.RANDOM_WORD_API:
        return RandomWordApiClient(
            config.random_word_api_url,
            timeout=config.upstream_timeout_seconds,
            retry_config=retry_config,
            on_retry=on_retry,
        )
    if provider == WordProvider.RANDOM_WORD_VERCEL:
        return RandomWordVercelClient(
            config.random_word_vercel_url,
            timeout=config.upstream_timeout_seconds,
            retry_config=retry_config,
            on_retry=on_retry,
        )

    raise ConfigurationError(
        f"Unknown word provider: {provider}",
        details={"word_provider": str(provider)}
    )
