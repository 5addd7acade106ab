"""
Scripture Study - Reference Parser

Turns free text such as ``"John 3:16"``, ``"1 Corinthians 13:4-7"`` or
``"john 3.16"`` into a :class:`ParsedReference`. Anything it cannot
understand comes back as a :class:`ParseError` value; ``parse`` never
raises.
"""

from __future__ import annotations

import re
from typing import Union

from study.books import lookup, normalize_book_key
from study.models import ParsedReference, ParseError

INVALID_REFERENCE_MESSAGE = (
    'Invalid reference format. Use format like "John 3:16" or "Genesis 1:1-3"'
)

REFERENCE_PATTERN = re.compile(r"^(.+?)\s+(\d+):(\d+)(?:-(\d+))?$", re.IGNORECASE)

_CHAPTER_DOT_VERSE = re.compile(r"(\d+)\.(\d+)")
_DASHES = re.compile(r"\s*[–—-]\s*")
_WHITESPACE = re.compile(r"\s+")


def normalize_reference_text(raw: str) -> str:
    """
    Tidy user input before matching.

    Collapses whitespace, rewrites ``3.16`` as ``3:16`` and accepts en or
    em dashes as the range separator.
    """
    text = _WHITESPACE.sub(" ", raw.strip())
    text = _CHAPTER_DOT_VERSE.sub(r"\1:\2", text)
    return _DASHES.sub("-", text)


def parse(raw: str) -> Union[ParsedReference, ParseError]:
    """
    Parse a human-entered reference.

    Example:
        >>> parse("Genesis 1:1-3").verse_end
        3
        >>> isinstance(parse("Hezekiah 1:1"), ParseError)
        True
    """
    if not isinstance(raw, str):
        return ParseError(INVALID_REFERENCE_MESSAGE)

    match = REFERENCE_PATTERN.match(normalize_reference_text(raw))
    if match is None:
        return ParseError(INVALID_REFERENCE_MESSAGE)

    book_text, chapter, verse_start, verse_end = match.groups()
    key = normalize_book_key(book_text)
    book = lookup(key)
    if book is None:
        return ParseError(INVALID_REFERENCE_MESSAGE)

    try:
        start = int(verse_start)
        end = int(verse_end) if verse_end is not None else start
        chapter_number = int(chapter)
    except ValueError:
        # digit strings past the interpreter's int conversion limit
        return ParseError(INVALID_REFERENCE_MESSAGE)
    if chapter_number < 1 or start < 1 or end < start:
        return ParseError(INVALID_REFERENCE_MESSAGE)

    return ParsedReference(
        provider_code=book.provider_code,
        display_name=book.display_name,
        canonical_ordinal=book.canonical_ordinal,
        chapter=chapter_number,
        verse_start=start,
        verse_end=end,
        normalized_book_key=key,
    )
