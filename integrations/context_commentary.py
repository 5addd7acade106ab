"""
Scripture Study - Remote Commentary Provider

Client for the Christian Context API, which serves chapter-level
commentary by book display name:

    GET https://api.getcontext.xyz/v0.9/c/John/3
"""
from typing import Optional

import httpx

from config import ProviderConfig
from integrations.base import BaseProviderClient, encode_path_segment


class ContextCommentaryClient(BaseProviderClient):
    """Fetches chapter commentary from the remote provider."""

    name = "christian-context"

    def __init__(self, client: httpx.AsyncClient, config: Optional[ProviderConfig] = None):
        config = config or ProviderConfig()
        super().__init__(client, config.commentary_api_url)

    def commentary_url(self, book_name: str, chapter: int) -> str:
        return f"{self.base_url}/c/{encode_path_segment(book_name)}/{chapter}"

    async def fetch_commentary(self, book_name: str, chapter: int) -> Optional[str]:
        """Commentary text, or None if the field is missing or blank."""
        payload = await self._get_json(self.commentary_url(book_name, chapter))
        if not isinstance(payload, dict):
            return None
        commentary = payload.get("commentary")
        if not isinstance(commentary, str) or not commentary.strip():
            return None
        return commentary.strip()
