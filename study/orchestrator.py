"""
Scripture Study - Aggregation Orchestrator

Parses a reference, fans out to the verse, commentary and cross-reference
lookups concurrently, then assembles a :class:`StudyMaterial`. A reference
that does not parse comes straight back as a :class:`ParseError` without
any network traffic.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, List, Optional, Sequence, Union

import httpx
from opentelemetry.trace import SpanKind

from config import Config, get_config
from core.errors import StudyError
from integrations.base import build_http_client
from integrations.bible_api import BibleApiClient
from integrations.chapter_cdn import ChapterCdnClient
from integrations.context_commentary import ContextCommentaryClient
from observability import get_tracer, get_logger
from observability.logging import LogContext, SourceLogger
from study.cache import TTLCache
from study.commentary import (
    CommentaryAggregator,
    CommentarySource,
    RemoteCommentarySource,
    StoredCommentarySource,
)
from study.cross_references import cross_references
from study.models import ParsedReference, ParseError, StudyMaterial
from study.parser import parse
from study.sources import SourceResult, consult
from study.templates import external_links, study_questions
from study.verses import VerseFetcher

tracer = get_tracer(__name__)
logger = get_logger(__name__)

CROSS_REFERENCE_SOURCE = "cross_references"


class StudyOrchestrator:
    """
    Builds complete study material for a reference.

    The cache and HTTP client are injected; :meth:`create` wires the
    defaults from configuration and owns the client it builds.

    Usage:
        async with StudyOrchestrator.create() as orchestrator:
            material = await orchestrator.study("John 3:16")
    """

    def __init__(
        self,
        cache: TTLCache[Any],
        http_client: httpx.AsyncClient,
        config: Optional[Config] = None,
        extra_commentary_sources: Sequence[CommentarySource] = (),
        owns_client: bool = False,
    ):
        self.config = config or get_config()
        self.cache = cache
        self.http_client = http_client
        self._owns_client = owns_client

        providers = self.config.providers
        self.bible_api = BibleApiClient(http_client, providers)
        self.verses = VerseFetcher(
            cache,
            self.bible_api,
            ChapterCdnClient(http_client, providers),
            self.config.study,
        )
        self.commentary = CommentaryAggregator([
            RemoteCommentarySource(ContextCommentaryClient(http_client, providers), cache),
            StoredCommentarySource(),
            *extra_commentary_sources,
        ])
        self._log = SourceLogger("orchestrator")

    @classmethod
    def create(
        cls,
        config: Optional[Config] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs: Any,
    ) -> "StudyOrchestrator":
        """Default wiring: a fresh cache and an owned HTTP client."""
        config = config or get_config()
        cache: TTLCache[Any] = TTLCache(
            ttl_seconds=config.cache.ttl_seconds,
            max_entries=config.cache.max_entries,
        )
        client = build_http_client(config.providers, transport=transport)
        return cls(cache, client, config=config, owns_client=True, **kwargs)

    async def __aenter__(self) -> "StudyOrchestrator":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client if this orchestrator created it."""
        if self._owns_client:
            await self.http_client.aclose()

    async def study(self, raw: str) -> Union[StudyMaterial, ParseError]:
        """
        Aggregate everything known about ``raw``.

        Never raises for upstream failures; a malformed reference yields a
        ParseError value.
        """
        parsed = parse(raw)
        if isinstance(parsed, ParseError):
            logger.info("Rejected reference", reference=raw, error=parsed.error)
            return parsed

        reference = raw.strip()
        start = time.perf_counter()

        with LogContext(reference=reference):
            with tracer.start_as_current_span(
                "study.aggregate",
                kind=SpanKind.INTERNAL,
                attributes={
                    "study.reference": reference,
                    "study.book": parsed.provider_code,
                    "study.chapter": parsed.chapter,
                },
            ) as span:
                verse_results, commentary_results, cross_ref_result = await asyncio.gather(
                    self.verses.collect(parsed, reference),
                    self.commentary.collect(parsed, reference),
                    self._collect_cross_references(parsed, reference),
                )

                sources: Dict[str, str] = {}
                for result in verse_results:
                    sources[result.name] = result.status.value
                for _, result in commentary_results:
                    sources[result.name] = result.status.value
                sources[cross_ref_result.name] = cross_ref_result.status.value

                material = StudyMaterial(
                    reference=reference,
                    parsed=parsed,
                    verses=self.verses.to_versions(verse_results),
                    commentary=self.commentary.to_commentary(commentary_results, reference),
                    cross_references=cross_ref_result.value or [],
                    study_questions=study_questions(reference, parsed),
                    external_links=external_links(reference, parsed),
                    sources=sources,
                )

                span.set_attribute("study.translations", len(material.verses))
                span.set_attribute("study.commentary_sources", len(material.commentary))

            logger.info(
                "Study material assembled",
                translations=sorted(material.verses),
                commentary=sorted(material.commentary),
                cross_references=len(material.cross_references),
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
        return material

    async def _collect_cross_references(
        self,
        parsed: ParsedReference,
        reference: str,
    ) -> SourceResult[List[str]]:
        async def lookup() -> Optional[List[str]]:
            return cross_references(parsed) or None

        return await consult(CROSS_REFERENCE_SOURCE, reference, lookup, self._log)

    async def search_passages(self, keyword: str) -> Optional[Dict[str, Any]]:
        """Raw primary-provider payload for a keyword query, or None on failure."""
        with tracer.start_as_current_span("study.search") as span:
            span.set_attribute("study.keyword", keyword)
            try:
                return await self.bible_api.fetch_raw(keyword)
            except StudyError as e:
                logger.warning("Passage search failed", keyword=keyword, error=e.message)
                return None

    def clear_cache(self) -> None:
        """Drop every cached response."""
        self.cache.clear()
        logger.info("Cache cleared")
