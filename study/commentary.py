"""
Scripture Study - Commentary Aggregator

Consults every commentary source concurrently and keeps whatever answers:

- ``christianContext``: remote chapter commentary (cached)
- ``stored``: the curated multi-author table
- any injected :class:`CommentarySource` (``openBible`` is the reserved key)

If nothing answers, a ``default`` study guide is synthesized so the map is
never empty.
"""

from __future__ import annotations

import asyncio
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from integrations.context_commentary import ContextCommentaryClient
from observability.logging import SourceLogger
from study.cache import TTLCache, cache_key
from study.models import CommentaryEntry, ParsedReference
from study.sources import SourceResult, consult

REMOTE_KEY = "christianContext"
STORED_KEY = "stored"
OPEN_BIBLE_KEY = "openBible"
DEFAULT_KEY = "default"

REMOTE_SOURCE_LABEL = "Christian Context API"
STORED_SOURCE_LABEL = "Stored Commentaries"
DEFAULT_SOURCE_LABEL = "Study Guide"

STORED_COMMENTARIES: Mapping[str, Mapping[str, str]] = MappingProxyType({
    "john3:16": MappingProxyType({
        "matthewHenry": (
            "God so loved the world - Here God is commending his love toward us. "
            "The Father shows his love in giving his Son for us..."
        ),
        "adamClarke": (
            "For God so loved the world - Such a love as that which induced God "
            "to give his only begotten Son to die for the world..."
        ),
    }),
    "genesis1:1": MappingProxyType({
        "matthewHenry": (
            "In the beginning - That is, in the beginning of time, when God first "
            "created all things..."
        ),
        "adamClarke": (
            "In the beginning God created - The word Elohim, which we translate God, "
            "is the plural of El or Eloah..."
        ),
    }),
})

SOURCE_DISPLAY_NAMES: Mapping[str, str] = MappingProxyType({
    REMOTE_KEY: "Christian Context Commentary",
    STORED_KEY: "Classic Commentaries",
    OPEN_BIBLE_KEY: "OpenBible.info",
    DEFAULT_KEY: "Study Notes",
})

AUTHOR_DISPLAY_NAMES: Mapping[str, str] = MappingProxyType({
    "matthewHenry": "Matthew Henry",
    "adamClarke": "Adam Clarke",
    "albertBarnes": "Albert Barnes",
    "johnGill": "John Gill",
})

NO_COMMENTARY_MESSAGE = "No commentary available for this passage."


class CommentarySource(Protocol):
    """
    A pluggable commentary provider.

    ``key`` names the entry in the commentary map. ``lookup`` returns None
    when the source has nothing for the reference and may raise on failure.
    """

    key: str

    async def lookup(
        self,
        parsed: ParsedReference,
        reference: str,
    ) -> Optional[CommentaryEntry]:
        ...


class RemoteCommentarySource:
    """Chapter commentary from the remote provider, cached per reference."""

    key = REMOTE_KEY

    def __init__(self, client: ContextCommentaryClient, cache: TTLCache[Any]):
        self.client = client
        self.cache = cache

    async def lookup(
        self,
        parsed: ParsedReference,
        reference: str,
    ) -> Optional[CommentaryEntry]:
        key = cache_key("commentary-remote", reference)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        text = await self.client.fetch_commentary(parsed.display_name, parsed.chapter)
        if text is None:
            return None

        entry = CommentaryEntry(source=REMOTE_SOURCE_LABEL, text=text)
        self.cache.set(key, entry)
        return entry


class StoredCommentarySource:
    """The curated table, keyed by ``<book key><chapter>:<verse_start>``."""

    key = STORED_KEY

    def __init__(self, table: Mapping[str, Mapping[str, str]] = STORED_COMMENTARIES):
        self.table = table

    async def lookup(
        self,
        parsed: ParsedReference,
        reference: str,
    ) -> Optional[CommentaryEntry]:
        authors = self.table.get(parsed.cache_slug)
        if not authors:
            return None
        return CommentaryEntry(source=STORED_SOURCE_LABEL, by_author=dict(authors))


def default_commentary(reference: str) -> CommentaryEntry:
    """The study guide returned when no source has anything."""
    text = (
        f"Commentary for {reference} is being compiled. "
        "In the meantime, consider these reflection points:\n"
        "\n"
        "1. Read the passage in context - examine the verses before and after.\n"
        "2. Consider the historical and cultural background of the text.\n"
        "3. Look for repeated words or themes that might indicate emphasis.\n"
        "4. Think about how this passage relates to the overall message of the book.\n"
        "5. Pray for understanding and wisdom as you study God's Word.\n"
        "\n"
        "For deeper study, explore the external links provided below."
    )
    return CommentaryEntry(source=DEFAULT_SOURCE_LABEL, text=text, kind="default")


class CommentaryAggregator:
    """
    Gathers commentary from every registered source.

    Usage:
        aggregator = CommentaryAggregator([
            RemoteCommentarySource(client, cache),
            StoredCommentarySource(),
        ])
        commentary = await aggregator.fetch_commentary(parse("John 3:16"))
    """

    def __init__(self, sources: Sequence[CommentarySource]):
        keys = [source.key for source in sources]
        if len(keys) != len(set(keys)):
            raise ValueError(f"Duplicate commentary source keys: {keys}")
        self.sources = list(sources)
        self._log = SourceLogger("commentary")

    async def collect(
        self,
        parsed: ParsedReference,
        reference: Optional[str] = None,
    ) -> List[Tuple[str, SourceResult[CommentaryEntry]]]:
        """``(key, result)`` for every source, in registration order."""
        reference = reference or parsed.canonical

        def fetcher(source: CommentarySource):
            return lambda: source.lookup(parsed, reference)

        results = await asyncio.gather(*(
            consult(f"commentary:{source.key}", reference, fetcher(source), self._log)
            for source in self.sources
        ))
        return [(source.key, result) for source, result in zip(self.sources, results)]

    @staticmethod
    def to_commentary(
        results: List[Tuple[str, SourceResult[CommentaryEntry]]],
        reference: str,
    ) -> Dict[str, CommentaryEntry]:
        """Keep successful entries; synthesize ``default`` if there are none."""
        commentary = {
            key: result.value
            for key, result in results
            if result.ok and result.value is not None
        }
        if not commentary:
            commentary[DEFAULT_KEY] = default_commentary(reference)
        return commentary

    async def fetch_commentary(
        self,
        parsed: ParsedReference,
        reference: Optional[str] = None,
    ) -> Dict[str, CommentaryEntry]:
        """
        ``{provider_key: CommentaryEntry}``; never empty, never raises.
        """
        reference = reference or parsed.canonical
        return self.to_commentary(await self.collect(parsed, reference), reference)


def format_source_name(key: str) -> str:
    return SOURCE_DISPLAY_NAMES.get(key, key)


def format_author_name(author: str) -> str:
    return AUTHOR_DISPLAY_NAMES.get(author, author)


def format_commentary(commentary: Mapping[str, CommentaryEntry]) -> str:
    """
    Render a commentary map as Markdown.

    Each source becomes a ``### <display name>`` section; multi-author
    entries list each author in bold. Sections are separated by ``---``.
    """
    if not commentary:
        return NO_COMMENTARY_MESSAGE

    sections: List[str] = []
    for key, entry in commentary.items():
        if entry.by_author is not None:
            body = "\n\n".join(
                f"**{format_author_name(author)}:**\n{text}"
                for author, text in entry.by_author.items()
            )
        else:
            body = entry.text or ""
        sections.append(f"### {format_source_name(key)}\n\n{body}")

    return "\n\n---\n\n".join(sections)
