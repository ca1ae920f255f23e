"""
Test helper functions and factory methods for the Word of the Day service.
"""

import json
from typing import Any, Dict, List, Optional, Sequence, Union

import httpx

from service_word_of_the_day.app.domain.models import Definition
from service_word_of_the_day.app.domain.sources import DefinitionSource, WordSource


class PayloadFactory:
    """Factory for upstream payloads."""

    @staticmethod
    def dictionary_entries(*meanings: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Single dictionary entry holding the given meanings."""
        return [{"word": "unused", "meanings": list(meanings)}]

    @staticmethod
    def meaning(part_of_speech: str, *definitions: str) -> Dict[str, Any]:
        return {
            "partOfSpeech": part_of_speech,
            "definitions": [{"definition": text, "example": None} for text in definitions],
        }

    @staticmethod
    def response(status_code: int = 200, payload: Any = None, *, text: Optional[str] = None,
                 url: str = "http://upstream.test/") -> httpx.Response:
        """Build an httpx response with a request attached."""
        content = text if text is not None else json.dumps(payload)
        return httpx.Response(
            status_code=status_code,
            content=content,
            request=httpx.Request("GET", url),
        )


Step = Union[BaseException, Any]


class ScriptedWordSource(WordSource):
    """Word source replaying a script of words or exceptions, counting calls."""

    def __init__(self, steps: Sequence[Step]):
        self.steps = list(steps)
        self.calls = 0

    async def fetch_random_word(self) -> str:
        step = self.steps[min(self.calls, len(self.steps) - 1)]
        self.calls += 1
        if isinstance(step, BaseException):
            raise step
        return step


class ScriptedDefinitionSource(DefinitionSource):
    """Definition source replaying a script of definition lists or exceptions."""

    def __init__(self, steps: Sequence[Step]):
        self.steps = list(steps)
        self.calls = 0
        self.words: List[str] = []

    async def fetch_definitions(self, word: str) -> List[Definition]:
        step = self.steps[min(self.calls, len(self.steps) - 1)]
        self.calls += 1
        self.words.append(word)
        if isinstance(step, BaseException):
            raise step
        return list(step)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
