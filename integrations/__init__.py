"""
Scripture Study - External Integrations

Clients for the upstream providers:
- bible-api.com: multi-translation single-reference lookups
- jsDelivr chapter files: single-translation, chapter-granular fallback
- Christian Context API: chapter commentary
"""
from integrations.base import (
    BaseProviderClient,
    build_http_client,
    encode_path_segment,
)
from integrations.bible_api import BibleApiClient
from integrations.chapter_cdn import ChapterCdnClient
from integrations.context_commentary import ContextCommentaryClient

__all__ = [
    "BaseProviderClient",
    "build_http_client",
    "encode_path_segment",
    "BibleApiClient",
    "ChapterCdnClient",
    "ContextCommentaryClient",
]
