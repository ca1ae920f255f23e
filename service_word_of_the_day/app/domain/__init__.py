"""
Domain layer for the Word of the Day service.

Exports:
- Definition, WordOfTheDayResult: the composed result types
- WordSource, DefinitionSource: capabilities implemented by adapters
- WordOfTheDayOrchestrator: cache-aside retrieval with fallback
"""

from .models import Definition, WordOfTheDayResult
from .sources import DefinitionSource, WordSource
from .orchestrator import WordOfTheDayOrchestrator, WORD_OF_THE_DAY_KEY, fallback_result

__all__ = [
    "Definition",
    "WordOfTheDayResult",
    "WordSource",
    "DefinitionSource",
    "WordOfTheDayOrchestrator",
    "WORD_OF_THE_DAY_KEY",
    "fallback_result",
]
