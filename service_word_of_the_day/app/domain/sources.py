"""
Capabilities the orchestrator needs from its upstream providers.
"""

from abc import ABC, abstractmethod
from typing import List

from .models import Definition


class WordSource(ABC):
    """Produces one candidate word per call."""

    @abstractmethod
    async def fetch_random_word(self) -> str:
        """Return a non-empty word or raise an ``UpstreamError``."""


class DefinitionSource(ABC):
    """Looks up definitions for a word."""

    @abstractmethod
    async def fetch_definitions(self, word: str) -> List[Definition]:
        """Return definitions in upstream order; an unknown word yields ``[]``."""
