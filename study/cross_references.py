"""
Scripture Study - Cross-Reference Resolver

Static table of related passages, keyed like the curated commentary
(``john3:16``). Unknown references resolve to an empty list.
"""

from types import MappingProxyType
from typing import List, Mapping, Tuple

from study.models import ParsedReference

CROSS_REFERENCES: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "john3:16": ("Romans 5:8", "1 John 4:9-10", "2 Corinthians 5:21", "Isaiah 53:5-6"),
    "genesis1:1": ("John 1:1-3", "Hebrews 11:3", "Psalm 33:6", "Colossians 1:16"),
    "romans8:28": ("Genesis 50:20", "Romans 8:29-30", "1 Corinthians 2:9", "Ephesians 1:11"),
    "philippians4:13": ("2 Corinthians 12:9-10", "John 15:5", "Colossians 1:11", "Ephesians 3:16"),
})


def cross_references(parsed: ParsedReference) -> List[str]:
    """Related passages for ``parsed``, as a fresh list the caller may mutate."""
    return list(CROSS_REFERENCES.get(parsed.cache_slug, ()))
