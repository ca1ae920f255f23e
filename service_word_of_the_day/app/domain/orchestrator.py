"""
Composes the word and definition sources into the cached word of the day.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Callable, Generic, Optional, TypeVar

from shared.errors import UpstreamError, UpstreamErrorKind
from shared.logging import get_logger

from ..caching import KeyedLocks, ResultCache
from .models import Definition, WordOfTheDayResult
from .sources import DefinitionSource, WordSource

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


WORD_OF_THE_DAY_KEY = "wordOfTheDay"

FALLBACK_WORD = "fallback"
FALLBACK_DEFINITION = Definition(
    definition="A contingency option to be taken if the primary option fails",
    part_of_speech="noun",
)
FALLBACK_ERROR = "Failed to fetch data from external APIs"

T = TypeVar("T")


@dataclass(frozen=True)
class SourceOutcome(Generic[T]):
    """Either a value from a source or the kind of failure it reported."""

    value: Optional[T] = None
    error: Optional[UpstreamError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[UpstreamErrorKind]:
        return self.error.kind if self.error is not None else None


def fallback_result() -> WordOfTheDayResult:
    """The fixed sentinel returned when no authentic word is available."""
    return WordOfTheDayResult(
        word=FALLBACK_WORD,
        definitions=(FALLBACK_DEFINITION,),
        degraded=True,
        error=FALLBACK_ERROR,
    )


class WordOfTheDayOrchestrator:
    """Cache-aside retrieval of the word of the day with graceful degradation."""

    def __init__(self,
                 word_source: WordSource,
                 definition_source: DefinitionSource,
                 cache: ResultCache[WordOfTheDayResult],
                 *,
                 cache_key: str = WORD_OF_THE_DAY_KEY,
                 metrics: Optional["MetricsCollector"] = None):
        self.word_source = word_source
        self.definition_source = definition_source
        self.cache = cache
        self.cache_key = cache_key
        self.metrics = metrics
        self._locks = KeyedLocks()
        self.logger = get_logger("wotd.orchestrator")

    async def get_word_of_the_day(self) -> WordOfTheDayResult:
        """Return the cached result, or fetch, compose and cache a new one."""
        cached = self._check_cache()
        if cached is not None:
            return cached

        async with self._locks.hold(self.cache_key):
            # Another caller may have populated the cache while we waited
            cached = self._check_cache()
            if cached is not None:
                return cached

            self.logger.info("Cache miss for word of the day, fetching new data", key=self.cache_key)
            self._count("cache_misses_total", cache_type="word_of_the_day")

            word_outcome = await self._run_source("word", self.word_source.fetch_random_word)
            if not word_outcome.ok:
                return self._fallback(word_outcome)

            word = word_outcome.value
            definitions_outcome = await self._run_source(
                "definitions", lambda: self.definition_source.fetch_definitions(word)
            )

            if definitions_outcome.ok:
                result = WordOfTheDayResult(word=word, definitions=definitions_outcome.value)
                outcome_label = "fresh"
            else:
                # Partial results are cached like fresh ones
                self.logger.error(
                    "Failed to fetch definitions, returning word with empty definitions",
                    word=word,
                    error_kind=definitions_outcome.kind.value,
                    error=str(definitions_outcome.error),
                )
                result = WordOfTheDayResult(word=word, definitions=())
                outcome_label = "partial"

            self.cache.put(self.cache_key, result)
            self._count("word_of_the_day_results_total", outcome=outcome_label)
            self.logger.info(
                "Fetched and cached new word of the day",
                word=word,
                definitions=len(result.definitions),
                outcome=outcome_label,
            )
            return result

    def clear_cache(self) -> None:
        """Drop the cached result so the next call fetches from upstream."""
        self.cache.invalidate(self.cache_key)

    def _check_cache(self) -> Optional[WordOfTheDayResult]:
        cached = self.cache.get_if_valid(self.cache_key)
        if cached is not None:
            self.logger.debug("Returning cached word of the day", word=cached.word)
            self._count("cache_hits_total", cache_type="word_of_the_day")
            self._count("word_of_the_day_results_total", outcome="cached")
        return cached

    async def _run_source(self, source: str, call: Callable[[], Awaitable[T]]) -> SourceOutcome[T]:
        """Invoke a source, turning upstream failures into an explicit outcome."""
        start = time.perf_counter()
        try:
            value = await call()
        except UpstreamError as exc:
            self.logger.warning(
                "Upstream source failed",
                source=source,
                error_kind=exc.kind.value,
                error=str(exc),
            )
            self._count("upstream_requests_total", source=source, outcome=exc.kind.value)
            return SourceOutcome(error=exc)
        finally:
            self._observe("upstream_request_duration_seconds", time.perf_counter() - start, source=source)

        self._count("upstream_requests_total", source=source, outcome="success")
        return SourceOutcome(value=value)

    def _fallback(self, outcome: SourceOutcome) -> WordOfTheDayResult:
        kind = outcome.kind
        if kind in (UpstreamErrorKind.RETRY_EXHAUSTED, UpstreamErrorKind.TRANSIENT):
            reason = "upstream unavailable"
        elif kind == UpstreamErrorKind.EMPTY:
            reason = "upstream returned no words"
        else:
            reason = "upstream rejected request"

        self.logger.warning(
            "Returning fallback word of the day due to API failures",
            reason=reason,
            error_kind=kind.value if kind else None,
            error=str(outcome.error),
        )
        self._count("word_of_the_day_results_total", outcome="fallback")
        # Never cached: the next call goes back to the word source
        return fallback_result()

    def _count(self, metric_name: str, **labels) -> None:
        if self.metrics is None:
            return
        try:
            self.metrics.increment_counter(metric_name, **labels)
        except Exception as exc:  # pragma: no cover - metrics failures never break retrieval
            self.logger.debug("Failed to record metric", metric=metric_name, error=str(exc))

    def _observe(self, metric_name: str, value: float, **labels) -> None:
        if self.metrics is None:
            return
        try:
            self.metrics.observe_histogram(metric_name, value, **labels)
        except Exception as exc:  # pragma: no cover - metrics failures never break retrieval
            self.logger.debug("Failed to record metric", metric=metric_name, error=str(exc))
