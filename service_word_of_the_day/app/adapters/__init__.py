"""
Adapters package for the Word of the Day service.

Contains HTTP client wrappers for the upstream providers (random word,
dictionary). These adapters encapsulate:

- Base URLs and request shapes
- The shared retry policy
- Error handling that maps to shared errors

Adapters never cache; caching belongs to the orchestrator.
"""

from .base import UpstreamClient
from .dictionary_client import DictionaryApiClient, flatten_definitions
from .random_word_client import RandomWordApiClient, RandomWordVercelClient, build_word_source

__all__ = [
    "UpstreamClient",
    "DictionaryApiClient",
    "RandomWordApiClient",
    "RandomWordVercelClient",
    "build_word_source",
    "flatten_definitions",
]
