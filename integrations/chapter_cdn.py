"""
Scripture Study - Secondary Chapter Provider

Client for the chapter-granular static Bible files served through the
jsDelivr CDN. One edition only; a request returns a whole chapter:

    GET https://cdn.jsdelivr.net/gh/wldeh/bible-api/bibles/en-kjv/books/john/chapters/3.json

Books are addressed by their full lowercase name (``john``,
``1corinthians``), which is the registry's normalized key.
"""
from typing import Any, Dict, List, Optional

import httpx

from config import ProviderConfig
from core.errors import ProviderResponseError
from integrations.base import BaseProviderClient, encode_path_segment


def _verse_number(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class ChapterCdnClient(BaseProviderClient):
    """Fetches whole chapters from the fallback provider."""

    name = "chapter-cdn"

    def __init__(self, client: httpx.AsyncClient, config: Optional[ProviderConfig] = None):
        config = config or ProviderConfig()
        super().__init__(client, config.chapter_cdn_url)
        self.edition = config.chapter_cdn_edition

    def chapter_url(self, book_key: str, chapter: int) -> str:
        return (
            f"{self.base_url}/{self.edition}/books/"
            f"{encode_path_segment(book_key)}/chapters/{chapter}.json"
        )

    async def fetch_chapter(self, book_key: str, chapter: int) -> List[Dict[str, Any]]:
        """
        Every verse of a chapter as ``[{"verse": 1, "text": "..."}, ...]``.

        The CDN has shipped both ``{"verses": [...]}`` and ``{"data": [...]}``
        bodies, with verse numbers as ints or strings; both are accepted.
        """
        url = self.chapter_url(book_key, chapter)
        payload = await self._get_json(url)

        if isinstance(payload, dict):
            items = payload.get("verses", payload.get("data"))
        else:
            items = payload

        if not isinstance(items, list):
            raise ProviderResponseError(
                f"{self.name} chapter payload has no verse list",
                provider=self.name,
                url=url,
            )

        verses: List[Dict[str, Any]] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            number = _verse_number(item.get("verse"))
            text = item.get("text")
            if number is None or not isinstance(text, str):
                continue
            verses.append({"verse": number, "text": text.strip()})
        return verses
