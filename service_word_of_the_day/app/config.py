"""
Configuration for the Word of the Day service.
"""

from enum import Enum

from pydantic import Field

from shared.config import BaseConfig
from shared.retry import RetryConfig


class WordProvider(str, Enum):
    """Random-word upstreams the service knows how to talk to."""
    RANDOM_WORD_API = "random_word_api"
    RANDOM_WORD_VERCEL = "random_word_vercel"


class WordServiceConfig(BaseConfig):
    """Settings consumed by the word and definition sources."""

    word_provider: WordProvider = Field(default=WordProvider.RANDOM_WORD_API)

    # Upstream endpoints
    random_word_api_url: str = Field(default="https://random-word-api.herokuapp.com")
    random_word_vercel_url: str = Field(default="https://random-word-api.vercel.app/api")
    dictionary_api_url: str = Field(default="https://api.dictionaryapi.dev/api/v2/entries")
    upstream_timeout_seconds: float = Field(default=10.0, gt=0)

    # Retry policy
    retry_max_attempts: int = Field(default=3, ge=1)
    retry_base_delay_seconds: float = Field(default=1.0, ge=0)
    retry_max_delay_seconds: float = Field(default=8.0, ge=0)
    retry_jitter: bool = Field(default=False)

    # Result cache
    cache_ttl_seconds: int = Field(default=24 * 60 * 60, gt=0)
    cache_max_entries: int = Field(default=10, ge=1)

    def retry_config(self) -> RetryConfig:
        """Build the retry policy shared by both upstream sources."""
        return RetryConfig(
            max_attempts=self.retry_max_attempts,
            base_delay=self.retry_base_delay_seconds,
            max_delay=self.retry_max_delay_seconds,
            exponential_base=2.0,
            jitter=self.retry_jitter,
        )


def get_config(**overrides) -> WordServiceConfig:
    """Get configuration for the Word of the Day service."""
    return WordServiceConfig(**overrides)
