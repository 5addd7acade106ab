"""
Scripture Study - Study Engine

Reference parsing and multi-source aggregation:
- parser: free text -> ParsedReference | ParseError
- verses / commentary / cross_references: the per-reference lookups
- orchestrator: runs them concurrently and assembles StudyMaterial

Usage:
    from study import StudyOrchestrator

    async with StudyOrchestrator.create() as orchestrator:
        material = await orchestrator.study("John 3:16")
"""

from study.models import (
    BookInfo,
    ParsedReference,
    ParseError,
    VerseResult,
    CommentaryEntry,
    ExternalLink,
    StudyMaterial,
)
from study.parser import parse
from study.cache import TTLCache, cache_key, run_sweeper
from study.commentary import CommentarySource, format_commentary
from study.orchestrator import StudyOrchestrator

__all__ = [
    # Models
    "BookInfo",
    "ParsedReference",
    "ParseError",
    "VerseResult",
    "CommentaryEntry",
    "ExternalLink",
    "StudyMaterial",
    # Parsing
    "parse",
    # Cache
    "TTLCache",
    "cache_key",
    "run_sweeper",
    # Aggregation
    "CommentarySource",
    "format_commentary",
    "StudyOrchestrator",
]
