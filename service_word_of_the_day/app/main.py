"""
Word of the Day service.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from shared.base_service import BaseService
from shared.retry import retry_manager

from .adapters import DictionaryApiClient, build_word_source
from .caching import ResultCache
from .config import WordServiceConfig, get_config
from .domain import DefinitionSource, WordOfTheDayOrchestrator, WordOfTheDayResult, WordSource


class DefinitionResponse(BaseModel):
    """A single definition as exposed over HTTP."""

    model_config = ConfigDict(populate_by_name=True)

    definition: str
    part_of_speech: str = Field(alias="partOfSpeech")


class WordOfTheDayResponse(BaseModel):
    """Public payload of the word of the day endpoints."""

    word: str
    definitions: List[DefinitionResponse]
    degraded: bool = False
    error: Optional[str] = None

    @classmethod
    def from_result(cls, result: WordOfTheDayResult) -> "WordOfTheDayResponse":
        return cls(
            word=result.word,
            definitions=[
                DefinitionResponse(definition=d.definition, part_of_speech=d.part_of_speech)
                for d in result.definitions
            ],
            degraded=result.degraded,
            error=result.error,
        )


class WordOfTheDayService(BaseService):
    """Word of the Day service implementation."""

    def __init__(self,
                 config: Optional[WordServiceConfig] = None,
                 *,
                 word_source: Optional[WordSource] = None,
                 definition_source: Optional[DefinitionSource] = None,
                 cache: Optional[ResultCache[WordOfTheDayResult]] = None):
        config = config or get_config()
        super().__init__("word_of_the_day", config)

        retry_config = config.retry_config()
        self.word_source = word_source or build_word_source(
            config, retry_config=retry_config, on_retry=self._record_retry
        )
        self.definition_source = definition_source or DictionaryApiClient(
            config.dictionary_api_url,
            timeout=config.upstream_timeout_seconds,
            retry_config=retry_config,
            on_retry=self._record_retry,
        )
        if cache is None:
            cache = ResultCache(
                ttl_seconds=config.cache_ttl_seconds,
                max_entries=config.cache_max_entries,
            )
        self.cache = cache
        self.orchestrator = WordOfTheDayOrchestrator(
            self.word_source,
            self.definition_source,
            self.cache,
            metrics=self.metrics,
        )

        self.logger.info(
            "Word of the day service configured",
            word_provider=config.word_provider.value,
            cache_ttl_seconds=config.cache_ttl_seconds,
            retry_max_attempts=config.retry_max_attempts,
        )

        self._setup_word_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.word_service = self

    def _record_retry(self, attempt: int, delay: float, error: BaseException) -> None:
        operation = getattr(error, "service", None) or "upstream"
        self.metrics.increment_counter("upstream_retries_total", operation=operation)

    def _setup_word_routes(self):
        """Set up word of the day routes."""

        @self.app.get("/", tags=["Root"])
        async def root():
            return {
                "service": self.service_name,
                "message": "Word of the Day API",
                "endpoints": ["/wordOfTheDay", "/wordOfTheDay/refresh"],
            }

        @self.app.get(
            "/wordOfTheDay",
            response_model=WordOfTheDayResponse,
            response_model_by_alias=True,
            response_model_exclude_none=True,
            tags=["Word of the day"],
            summary="Get the cached word of the day",
        )
        async def get_word_of_the_day():
            result = await self.orchestrator.get_word_of_the_day()
            return WordOfTheDayResponse.from_result(result)

        @self.app.get(
            "/wordOfTheDay/refresh",
            response_model=WordOfTheDayResponse,
            response_model_by_alias=True,
            response_model_exclude_none=True,
            tags=["Word of the day"],
            summary="Discard the cached word and fetch a new one",
        )
        async def refresh_word_of_the_day():
            self.orchestrator.clear_cache()
            result = await self.orchestrator.get_word_of_the_day()
            return WordOfTheDayResponse.from_result(result)

    async def _check_dependencies(self) -> Dict[str, Any]:
        """Report local cache and retry state; upstreams are not probed."""
        return {
            "cache": self.cache.stats(),
            "retries": retry_manager.get_stats(),
            "word_provider": self.config.word_provider.value,
        }


def create_app(config: Optional[WordServiceConfig] = None):
    """Create FastAPI application."""
    service = WordOfTheDayService(config)
    return service.app


if __name__ == "__main__":
    service = WordOfTheDayService()
    service.run()
