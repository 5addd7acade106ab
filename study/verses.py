"""
Scripture Study - Verse Fetcher

Collects the text of a reference in every configured translation.

Primary translations are requested concurrently from the multi-translation
provider. Only when every one of them comes back without text is the
chapter-granular fallback consulted, and it contributes exactly one entry
under the fallback translation code.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from config import StudyConfig
from core.async_utils import gather_with_concurrency
from integrations.bible_api import BibleApiClient
from integrations.chapter_cdn import ChapterCdnClient
from observability.logging import SourceLogger
from study.cache import TTLCache, cache_key
from study.models import ParsedReference, VerseResult
from study.sources import SourceResult, consult

PRIMARY_SOURCE = "bible-api"
FALLBACK_SOURCE = "chapter-cdn"
FALLBACK_NAME = "verses:fallback"


def slice_verses(
    verses: List[Dict[str, Any]],
    verse_start: int,
    verse_end: int,
) -> List[Dict[str, Any]]:
    """Verses numbered ``verse_start..verse_end`` inclusive, in verse order."""
    by_number = {verse["verse"]: verse for verse in verses}
    return [
        by_number[number]
        for number in range(verse_start, verse_end + 1)
        if number in by_number
    ]


class VerseFetcher:
    """
    Fetches a reference in several translations with a single-edition fallback.

    Usage:
        fetcher = VerseFetcher(cache, BibleApiClient(http), ChapterCdnClient(http))
        verses = await fetcher.fetch_versions(parse("John 3:16"))
        verses["kjv"].text
    """

    def __init__(
        self,
        cache: TTLCache[Any],
        primary: BibleApiClient,
        fallback: ChapterCdnClient,
        config: Optional[StudyConfig] = None,
    ):
        self.cache = cache
        self.primary = primary
        self.fallback = fallback
        self.config = config or StudyConfig()
        self._log = SourceLogger("verses")

    async def fetch_versions(
        self,
        parsed: ParsedReference,
        reference: Optional[str] = None,
    ) -> Dict[str, VerseResult]:
        """
        ``{translation_code: VerseResult}`` for every translation that answered.

        Never raises. The map is empty only if the fallback failed as well.
        """
        results = await self.collect(parsed, reference)
        return self.to_versions(results)

    def to_versions(self, results: List[SourceResult[VerseResult]]) -> Dict[str, VerseResult]:
        """Fold per-source results into the translation map."""
        versions: Dict[str, VerseResult] = {}
        for result in results:
            if not result.ok or result.value is None:
                continue
            if result.name == FALLBACK_NAME:
                versions[self.config.fallback_translation] = result.value
            else:
                versions[result.name.split(":", 1)[1]] = result.value
        return versions

    async def collect(
        self,
        parsed: ParsedReference,
        reference: Optional[str] = None,
    ) -> List[SourceResult[VerseResult]]:
        """
        One SourceResult per translation attempted.

        Names are ``verses:<code>``; ``verses:fallback`` is present only
        when every primary translation came back without text.
        """
        reference = reference or parsed.canonical
        codes = list(dict.fromkeys(self.config.translations))

        primaries = await gather_with_concurrency(
            *(self._fetch_primary(parsed, reference, code) for code in codes),
            max_concurrency=max(len(codes), 1),
        )

        if any(result.ok for result in primaries):
            return list(primaries)

        fallback = await self._fetch_fallback(parsed, reference)
        return list(primaries) + [fallback]

    async def _fetch_primary(
        self,
        parsed: ParsedReference,
        reference: str,
        code: str,
    ) -> SourceResult[VerseResult]:
        name = f"verses:{code}"
        key = cache_key("verse", reference, code)

        cached = self.cache.get(key)
        if cached is not None:
            self._log.cache_hit(name, key)
            return SourceResult.success(name, cached)

        async def fetch() -> Optional[VerseResult]:
            payload = await self.primary.fetch_passage(parsed.canonical, code)
            if payload is None:
                return None
            return VerseResult(
                text=payload["text"],
                version_label=self.config.label_for(code),
                source=PRIMARY_SOURCE,
                verse_breakdown=payload["verses"],
            )

        result = await consult(name, reference, fetch, self._log)
        if result.ok:
            self.cache.set(key, result.value)
        return result

    async def _fetch_fallback(
        self,
        parsed: ParsedReference,
        reference: str,
    ) -> SourceResult[VerseResult]:
        code = self.config.fallback_translation
        name = FALLBACK_NAME
        key = cache_key("verse-fallback", reference, code)

        cached = self.cache.get(key)
        if cached is not None:
            self._log.cache_hit(name, key)
            return SourceResult.success(name, cached)

        async def fetch() -> Optional[VerseResult]:
            chapter = await self.fallback.fetch_chapter(
                parsed.normalized_book_key, parsed.chapter
            )
            selected = slice_verses(chapter, parsed.verse_start, parsed.verse_end)
            if not selected:
                return None
            return VerseResult(
                text=" ".join(verse["text"] for verse in selected),
                version_label=self.config.label_for(code),
                source=FALLBACK_SOURCE,
                verse_breakdown=selected,
            )

        result = await consult(name, reference, fetch, self._log)
        if result.ok:
            self.cache.set(key, result.value)
        return result
