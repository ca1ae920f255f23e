"""
Dictionary client for the Word of the Day service.
"""

from typing import Any, Iterable, List
from urllib.parse import quote

from shared.errors import PermanentUpstreamError

from ..domain.models import Definition
from ..domain.sources import DefinitionSource
from .base import UpstreamClient


def flatten_definitions(entries: Iterable[Any]) -> List[Definition]:
    """
    Flatten dictionary entries into (definition, part of speech) pairs.

    Order follows the payload: entry, then meaning, then definition. Pieces
    missing the expected keys are skipped rather than failing the lookup.
    """
    flattened: List[Definition] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        for meaning in entry.get("meanings") or []:
            if not isinstance(meaning, dict):
                continue
            part_of_speech = meaning.get("partOfSpeech") or ""
            for item in meaning.get("definitions") or []:
                if not isinstance(item, dict):
                    continue
                text = item.get("definition")
                if isinstance(text, str) and text:
                    flattened.append(Definition(definition=text, part_of_speech=part_of_speech))
    return flattened


class DictionaryApiClient(UpstreamClient, DefinitionSource):
    """Client for the dictionary API (``GET {base}/en/{word}``)."""

    service_name = "dictionary_api"

    async def fetch_definitions(self, word: str) -> List[Definition]:
        """Fetch and flatten the definitions of ``word``."""
        return await self._with_retry(
            lambda: self._request_definitions(word),
            name=f"{self.service_name}.fetch_definitions",
        )

    async def _request_definitions(self, word: str) -> List[Definition]:
        path = f"/en/{quote(word, safe='')}"
        response = await self._get(path)

        if response.status_code == 404:
            self.logger.info("No definitions found for word", word=word)
            return []

        self._raise_for_status(response, path)

        entries = self._decode_json(response)
        if not isinstance(entries, list):
            raise PermanentUpstreamError(
                self.service_name,
                "Expected a JSON array of entries",
                status_code=response.status_code,
                details={"payload_type": type(entries).__name__}
            )

        if not entries:
            self.logger.info("No definitions found for word", word=word)
            return []

        definitions = flatten_definitions(entries)
        self.logger.debug("Found definitions for word", word=word, count=len(definitions))
        return definitions
