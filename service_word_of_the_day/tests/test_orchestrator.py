"""
Unit tests for the word of the day orchestrator.
"""

import asyncio

import pytest

from shared.errors import (
    EmptyResponseError,
    PermanentUpstreamError,
    RetryExhaustedError,
    TransientUpstreamError,
)
from shared.metrics import MetricsCollector

from service_word_of_the_day.app.caching import ResultCache
from service_word_of_the_day.app.domain import (
    Definition,
    WordOfTheDayOrchestrator,
    WordOfTheDayResult,
    WORD_OF_THE_DAY_KEY,
    fallback_result,
)
from service_word_of_the_day.tests.helpers import (
    FakeClock,
    ScriptedDefinitionSource,
    ScriptedWordSource,
)


LUMEN = [Definition("a unit of luminous flux", "noun")]


def exhausted(service: str) -> RetryExhaustedError:
    last = TransientUpstreamError(service, "Unexpected status 503", status_code=503)
    return RetryExhaustedError(f"{service}.fetch", last, 3)


class SlowWordSource(ScriptedWordSource):
    """Scripted word source that yields to the event loop before answering."""

    async def fetch_random_word(self) -> str:
        await asyncio.sleep(0.01)
        return await super().fetch_random_word()


class TestWordOfTheDayOrchestrator:
    """Test cases for WordOfTheDayOrchestrator."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def cache(self, clock):
        return ResultCache(ttl_seconds=86400, max_entries=10, clock=clock)

    @pytest.fixture
    def metrics(self):
        return MetricsCollector("word_of_the_day")

    def build(self, words, definitions, cache, metrics=None):
        word_source = ScriptedWordSource(words)
        definition_source = ScriptedDefinitionSource(definitions)
        orchestrator = WordOfTheDayOrchestrator(word_source, definition_source, cache, metrics=metrics)
        return orchestrator, word_source, definition_source

    @pytest.mark.asyncio
    async def test_fresh_result_is_composed_and_cached(self, cache):
        orchestrator, words, definitions = self.build(["lumen"], [LUMEN], cache)

        result = await orchestrator.get_word_of_the_day()

        assert result == WordOfTheDayResult(word="lumen", definitions=tuple(LUMEN))
        assert not result.degraded
        assert definitions.words == ["lumen"]
        assert cache.get_if_valid(WORD_OF_THE_DAY_KEY) == result

    @pytest.mark.asyncio
    async def test_second_call_is_served_from_cache(self, cache):
        orchestrator, words, definitions = self.build(["lumen", "quixotic"], [LUMEN], cache)

        first = await orchestrator.get_word_of_the_day()
        second = await orchestrator.get_word_of_the_day()

        assert first == second
        assert words.calls == 1
        assert definitions.calls == 1

    @pytest.mark.asyncio
    async def test_expired_entry_triggers_refetch(self, cache, clock):
        orchestrator, words, _ = self.build(["lumen", "quixotic"], [LUMEN, []], cache)

        first = await orchestrator.get_word_of_the_day()
        clock.advance(86400)
        second = await orchestrator.get_word_of_the_day()

        assert first.word == "lumen"
        assert second.word == "quixotic"
        assert words.calls == 2

    @pytest.mark.asyncio
    async def test_clear_cache_forces_new_fetch(self, cache):
        orchestrator, words, _ = self.build(["lumen", "quixotic"], [LUMEN, []], cache)

        await orchestrator.get_word_of_the_day()
        orchestrator.clear_cache()
        result = await orchestrator.get_word_of_the_day()

        assert result.word == "quixotic"
        assert words.calls == 2

    @pytest.mark.asyncio
    async def test_clear_cache_on_empty_cache(self, cache):
        orchestrator, words, _ = self.build(["lumen"], [LUMEN], cache)

        orchestrator.clear_cache()

        assert words.calls == 0
        assert len(cache) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        exhausted("random_word_api"),
        EmptyResponseError("random_word_api"),
        PermanentUpstreamError("random_word_api", "Unexpected status 404", status_code=404),
    ])
    async def test_word_failure_returns_uncached_fallback(self, cache, error):
        orchestrator, words, definitions = self.build([error], [LUMEN], cache)

        first = await orchestrator.get_word_of_the_day()
        second = await orchestrator.get_word_of_the_day()

        assert first == fallback_result()
        assert first.degraded
        assert first.word == "fallback"
        assert first.error == "Failed to fetch data from external APIs"
        assert second == fallback_result()
        assert words.calls == 2
        assert definitions.calls == 0
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_recovery_after_fallback(self, cache):
        orchestrator, words, _ = self.build([exhausted("random_word_api"), "lumen"], [LUMEN], cache)

        first = await orchestrator.get_word_of_the_day()
        second = await orchestrator.get_word_of_the_day()

        assert first.degraded
        assert second.word == "lumen"
        assert not second.degraded

    @pytest.mark.asyncio
    async def test_definition_failure_yields_cached_partial_result(self, cache):
        orchestrator, words, definitions = self.build(
            ["lumen", "quixotic"], [exhausted("dictionary_api")], cache
        )

        first = await orchestrator.get_word_of_the_day()
        second = await orchestrator.get_word_of_the_day()

        assert first == WordOfTheDayResult(word="lumen", definitions=())
        assert not first.degraded
        assert first.error is None
        assert second == first
        assert words.calls == 1
        assert definitions.calls == 1

    @pytest.mark.asyncio
    async def test_word_without_definitions_is_cached(self, cache):
        orchestrator, words, _ = self.build(["xyzzyplugh"], [[]], cache)

        result = await orchestrator.get_word_of_the_day()
        await orchestrator.get_word_of_the_day()

        assert result.word == "xyzzyplugh"
        assert result.definitions == ()
        assert words.calls == 1

    @pytest.mark.asyncio
    async def test_unexpected_error_propagates(self, cache):
        orchestrator, _, _ = self.build([RuntimeError("bug")], [LUMEN], cache)

        with pytest.raises(RuntimeError):
            await orchestrator.get_word_of_the_day()

        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_concurrent_misses_fetch_once(self, cache):
        word_source = SlowWordSource(["lumen", "quixotic"])
        definition_source = ScriptedDefinitionSource([LUMEN])
        orchestrator = WordOfTheDayOrchestrator(word_source, definition_source, cache)

        results = await asyncio.gather(*(orchestrator.get_word_of_the_day() for _ in range(10)))

        assert word_source.calls == 1
        assert definition_source.calls == 1
        assert {r.word for r in results} == {"lumen"}

    @pytest.mark.asyncio
    async def test_metrics_reflect_outcomes(self, cache, metrics):
        orchestrator, _, _ = self.build(
            [exhausted("random_word_api"), "lumen"], [LUMEN], cache, metrics=metrics
        )

        await orchestrator.get_word_of_the_day()
        await orchestrator.get_word_of_the_day()
        await orchestrator.get_word_of_the_day()

        assert metrics.sample("word_of_the_day_results_total", outcome="fallback") == 1.0
        assert metrics.sample("word_of_the_day_results_total", outcome="fresh") == 1.0
        assert metrics.sample("word_of_the_day_results_total", outcome="cached") == 1.0
        assert metrics.sample("cache_misses_total", cache_type="word_of_the_day") == 2.0
        assert metrics.sample("cache_hits_total", cache_type="word_of_the_day") == 1.0
        assert metrics.sample(
            "upstream_requests_total", source="word", outcome="retry_exhausted"
        ) == 1.0
        assert metrics.sample("upstream_requests_total", source="word", outcome="success") == 1.0
        assert metrics.sample("upstream_requests_total", source="definitions", outcome="success") == 1.0

    @pytest.mark.asyncio
    async def test_partial_outcome_is_counted(self, cache, metrics):
        orchestrator, _, _ = self.build(
            ["lumen"], [PermanentUpstreamError("dictionary_api", "Unexpected status 400", status_code=400)],
            cache, metrics=metrics,
        )

        await orchestrator.get_word_of_the_day()

        assert metrics.sample("word_of_the_day_results_total", outcome="partial") == 1.0
        assert metrics.sample(
            "upstream_requests_total", source="definitions", outcome="permanent"
        ) == 1.0
