"""
Scripture Study - Book Registry

The 66 canonical books keyed by their normalized name (lowercase with all
whitespace removed, e.g. ``1corinthians``). Provider codes are the
three-letter codes the primary verse provider understands.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

from study.models import BookInfo

_WHITESPACE = re.compile(r"\s+")

# (normalized key, provider code, display name), in canonical order
_CANON: Tuple[Tuple[str, str, str], ...] = (
    # =========================================================================
    # Old Testament
    # =========================================================================
    ("genesis", "gen", "Genesis"),
    ("exodus", "exo", "Exodus"),
    ("leviticus", "lev", "Leviticus"),
    ("numbers", "num", "Numbers"),
    ("deuteronomy", "deu", "Deuteronomy"),
    ("joshua", "jos", "Joshua"),
    ("judges", "jdg", "Judges"),
    ("ruth", "rut", "Ruth"),
    ("1samuel", "1sa", "1 Samuel"),
    ("2samuel", "2sa", "2 Samuel"),
    ("1kings", "1ki", "1 Kings"),
    ("2kings", "2ki", "2 Kings"),
    ("1chronicles", "1ch", "1 Chronicles"),
    ("2chronicles", "2ch", "2 Chronicles"),
    ("ezra", "ezr", "Ezra"),
    ("nehemiah", "neh", "Nehemiah"),
    ("esther", "est", "Esther"),
    ("job", "job", "Job"),
    ("psalms", "psa", "Psalms"),
    ("proverbs", "pro", "Proverbs"),
    ("ecclesiastes", "ecc", "Ecclesiastes"),
    ("songofsolomon", "sng", "Song of Solomon"),
    ("isaiah", "isa", "Isaiah"),
    ("jeremiah", "jer", "Jeremiah"),
    ("lamentations", "lam", "Lamentations"),
    ("ezekiel", "eze", "Ezekiel"),
    ("daniel", "dan", "Daniel"),
    ("hosea", "hos", "Hosea"),
    ("joel", "jol", "Joel"),
    ("amos", "amo", "Amos"),
    ("obadiah", "oba", "Obadiah"),
    ("jonah", "jon", "Jonah"),
    ("micah", "mic", "Micah"),
    ("nahum", "nah", "Nahum"),
    ("habakkuk", "hab", "Habakkuk"),
    ("zephaniah", "zep", "Zephaniah"),
    ("haggai", "hag", "Haggai"),
    ("zechariah", "zec", "Zechariah"),
    ("malachi", "mal", "Malachi"),
    # =========================================================================
    # New Testament
    # =========================================================================
    ("matthew", "mat", "Matthew"),
    ("mark", "mrk", "Mark"),
    ("luke", "luk", "Luke"),
    ("john", "jhn", "John"),
    ("acts", "act", "Acts"),
    ("romans", "rom", "Romans"),
    ("1corinthians", "1co", "1 Corinthians"),
    ("2corinthians", "2co", "2 Corinthians"),
    ("galatians", "gal", "Galatians"),
    ("ephesians", "eph", "Ephesians"),
    ("philippians", "php", "Philippians"),
    ("colossians", "col", "Colossians"),
    ("1thessalonians", "1th", "1 Thessalonians"),
    ("2thessalonians", "2th", "2 Thessalonians"),
    ("1timothy", "1ti", "1 Timothy"),
    ("2timothy", "2ti", "2 Timothy"),
    ("titus", "tit", "Titus"),
    ("philemon", "phm", "Philemon"),
    ("hebrews", "heb", "Hebrews"),
    ("james", "jas", "James"),
    ("1peter", "1pe", "1 Peter"),
    ("2peter", "2pe", "2 Peter"),
    ("1john", "1jn", "1 John"),
    ("2john", "2jn", "2 John"),
    ("3john", "3jn", "3 John"),
    ("jude", "jud", "Jude"),
    ("revelation", "rev", "Revelation"),
)

BOOKS: Mapping[str, BookInfo] = MappingProxyType({
    key: BookInfo(provider_code=code, display_name=name, canonical_ordinal=ordinal)
    for ordinal, (key, code, name) in enumerate(_CANON, start=1)
})


def normalize_book_key(text: str) -> str:
    """``"1 Corinthians "`` -> ``"1corinthians"``."""
    return _WHITESPACE.sub("", text.strip().lower())


def lookup(normalized_key: str) -> Optional[BookInfo]:
    """Book for an already-normalized key, or None."""
    return BOOKS.get(normalized_key)


def books() -> List[Tuple[str, BookInfo]]:
    """All books as ``(normalized_key, info)`` in canonical order."""
    return sorted(BOOKS.items(), key=lambda item: item[1].canonical_ordinal)
