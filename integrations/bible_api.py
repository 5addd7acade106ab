"""
Scripture Study - Primary Translation Provider

Client for bible-api.com, which answers a single reference in one of
several translations:

    GET https://bible-api.com/John%203%3A16?translation=kjv

Response (abridged):

    {"reference": "John 3:16",
     "verses": [{"book_name": "John", "chapter": 3, "verse": 16, "text": "..."}],
     "text": "For God so loved the world...\\n",
     "translation_id": "kjv"}
"""
from typing import Any, Dict, List, Optional

import httpx

from config import ProviderConfig
from core.errors import ProviderResponseError
from integrations.base import BaseProviderClient, encode_path_segment


class BibleApiClient(BaseProviderClient):
    """Fetches passages from the primary translation provider."""

    name = "bible-api"

    def __init__(self, client: httpx.AsyncClient, config: Optional[ProviderConfig] = None):
        config = config or ProviderConfig()
        super().__init__(client, config.bible_api_url)

    def passage_url(self, reference: str) -> str:
        return f"{self.base_url}/{encode_path_segment(reference)}"

    async def fetch_raw(
        self,
        query: str,
        translation: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Undecoded payload for a reference or keyword query."""
        params = {"translation": translation} if translation else None
        payload = await self._get_json(self.passage_url(query), params=params)
        if not isinstance(payload, dict):
            raise ProviderResponseError(
                f"{self.name} returned an unexpected payload",
                provider=self.name,
                url=self.passage_url(query),
            )
        return payload

    async def fetch_passage(
        self,
        reference: str,
        translation: str,
    ) -> Optional[Dict[str, Any]]:
        """
        Passage text and per-verse breakdown for one translation.

        Returns:
            ``{"text": ..., "verses": [...]}`` or None when the provider
            answered without any text.
        """
        payload = await self.fetch_raw(reference, translation)

        text = payload.get("text")
        if not isinstance(text, str) or not text.strip():
            return None

        verses: List[Dict[str, Any]] = []
        for verse in payload.get("verses") or []:
            if isinstance(verse, dict):
                verses.append({
                    "book_name": verse.get("book_name"),
                    "chapter": verse.get("chapter"),
                    "verse": verse.get("verse"),
                    "text": str(verse.get("text", "")).strip(),
                })

        return {"text": text.strip(), "verses": verses}
