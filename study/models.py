"""
Scripture Study - Value Objects

Immutable records passed between the parser, the fetchers and the
orchestrator. Each exposes ``to_dict`` for JSON output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

# Keys a multi-author commentary object already uses
RESERVED_COMMENTARY_KEYS = frozenset({"source", "text", "type"})


@dataclass(frozen=True)
class BookInfo:
    """One canonical book."""

    provider_code: str
    display_name: str
    canonical_ordinal: int      # 1-66

    @property
    def testament(self) -> str:
        """OT or NT."""
        return "OT" if self.canonical_ordinal <= 39 else "NT"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider_code": self.provider_code,
            "display_name": self.display_name,
            "canonical_ordinal": self.canonical_ordinal,
            "testament": self.testament,
        }


@dataclass(frozen=True)
class ParsedReference:
    """
    A validated reference such as ``John 3:16`` or ``Genesis 1:1-3``.

    Always satisfies ``chapter >= 1``, ``verse_start >= 1`` and
    ``verse_start <= verse_end``.
    """

    provider_code: str
    display_name: str
    canonical_ordinal: int
    chapter: int
    verse_start: int
    verse_end: int
    normalized_book_key: str

    def __post_init__(self) -> None:
        if self.chapter < 1 or self.verse_start < 1 or self.verse_end < self.verse_start:
            raise ValueError(
                f"Invalid verse span {self.chapter}:{self.verse_start}-{self.verse_end}"
            )

    @property
    def cache_slug(self) -> str:
        """Key into the curated tables, e.g. ``john3:16``."""
        return f"{self.normalized_book_key}{self.chapter}:{self.verse_start}"

    @property
    def canonical(self) -> str:
        """Display form, e.g. ``1 John 4:9-10``."""
        text = f"{self.display_name} {self.chapter}:{self.verse_start}"
        if self.verse_end != self.verse_start:
            text += f"-{self.verse_end}"
        return text

    @property
    def is_range(self) -> bool:
        return self.verse_end != self.verse_start

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider_code": self.provider_code,
            "display_name": self.display_name,
            "canonical_ordinal": self.canonical_ordinal,
            "chapter": self.chapter,
            "verse_start": self.verse_start,
            "verse_end": self.verse_end,
            "normalized_book_key": self.normalized_book_key,
        }


@dataclass(frozen=True)
class ParseError:
    """Returned, never raised, when a reference cannot be understood."""

    error: str

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error}


@dataclass(frozen=True)
class VerseResult:
    """Text of a reference in one translation."""

    text: str
    version_label: str
    source: str
    verse_breakdown: Optional[List[Dict[str, Any]]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "text": self.text,
            "version": self.version_label,
            "source": self.source,
        }
        if self.verse_breakdown is not None:
            data["verses"] = self.verse_breakdown
        return data


@dataclass(frozen=True)
class CommentaryEntry:
    """
    Commentary from one provider.

    Single-author entries carry ``text``; curated multi-author entries
    carry ``by_author`` instead. Author keys share the serialized object
    with ``source`` and ``type``, so those names are reserved.
    """

    source: str
    text: Optional[str] = None
    by_author: Optional[Mapping[str, str]] = None
    kind: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.text is None) == (self.by_author is None):
            raise ValueError("CommentaryEntry needs exactly one of text or by_author")
        if self.by_author is not None:
            clashes = RESERVED_COMMENTARY_KEYS.intersection(self.by_author)
            if clashes:
                raise ValueError(f"Reserved author keys: {sorted(clashes)}")

    @property
    def is_multi_author(self) -> bool:
        return self.by_author is not None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"source": self.source}
        if self.by_author is not None:
            data.update(self.by_author)
        else:
            data["text"] = self.text
        if self.kind:
            data["type"] = self.kind
        return data


@dataclass(frozen=True)
class ExternalLink:
    name: str
    url: str
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "url": self.url, "description": self.description}


@dataclass(frozen=True)
class StudyMaterial:
    """Everything gathered for one reference."""

    reference: str
    parsed: ParsedReference
    verses: Dict[str, VerseResult]
    commentary: Dict[str, CommentaryEntry]
    cross_references: List[str]
    study_questions: List[str]
    external_links: List[ExternalLink]
    sources: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reference": self.reference,
            "parsed": self.parsed.to_dict(),
            "verses": {code: verse.to_dict() for code, verse in self.verses.items()},
            "commentary": {key: entry.to_dict() for key, entry in self.commentary.items()},
            "cross_references": list(self.cross_references),
            "study_questions": list(self.study_questions),
            "external_links": [link.to_dict() for link in self.external_links],
            "sources": dict(self.sources),
        }
