"""
Domain types for the word of the day.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Definition:
    """One sense of a word: its text and part-of-speech tag."""

    definition: str
    part_of_speech: str

    def to_dict(self) -> Dict[str, Any]:
        return {"definition": self.definition, "partOfSpeech": self.part_of_speech}


@dataclass(frozen=True)
class WordOfTheDayResult:
    """
    The unit stored in the result cache and handed back to callers.

    ``degraded`` marks the synthetic fallback produced when no authentic word
    could be fetched. Degraded results are never cached.
    """

    word: str
    definitions: Tuple[Definition, ...] = field(default_factory=tuple)
    degraded: bool = False
    error: Optional[str] = None

    def __post_init__(self):
        if not self.word:
            raise ValueError("word must be a non-empty string")
        # Accept any sequence but store an immutable tuple
        object.__setattr__(self, "definitions", tuple(self.definitions))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the public response shape."""
        payload: Dict[str, Any] = {
            "word": self.word,
            "definitions": [d.to_dict() for d in self.definitions],
            "degraded": self.degraded,
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload
