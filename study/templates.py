"""
Scripture Study - Study Questions and External Links

Pure functions of a parsed reference. No I/O.
"""

from typing import List
from urllib.parse import quote

from study.models import ExternalLink, ParsedReference

# Characters encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_uri_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def study_questions(reference: str, parsed: ParsedReference) -> List[str]:
    """
    Eight reflection questions, each naming the book and chapter.

    ``reference`` is accepted for symmetry with :func:`external_links`;
    the questions use the canonical form so they read the same however
    the reference was typed.
    """
    passage = f"{parsed.display_name} {parsed.chapter}"
    return [
        f"What is the main theme of {parsed.canonical}?",
        f"What does {passage} teach us about God's character?",
        f"How does {passage} relate to the broader context of the book?",
        f"What practical application can we draw from {passage} for our daily lives?",
        f"Are there any key words or phrases that stand out in {passage}?",
        f"How might {passage} have been understood by its original audience?",
        f"What questions does {passage} raise for further study?",
        f"How does {passage} connect to the gospel message?",
    ]


def external_links(reference: str, parsed: ParsedReference) -> List[ExternalLink]:
    """Five study sites, in a fixed order."""
    encoded = encode_uri_component(reference)
    book = parsed.normalized_book_key
    return [
        ExternalLink(
            name="Blue Letter Bible",
            url=f"https://www.blueletterbible.org/search/search.cfm?Criteria={encoded}",
            description="In-depth study tools and original language resources",
        ),
        ExternalLink(
            name="Bible Hub",
            url=f"https://biblehub.com/{book}/{parsed.chapter}-{parsed.verse_start}.htm",
            description="Parallel versions and commentaries",
        ),
        ExternalLink(
            name="StudyLight.org",
            url=f"https://www.studylight.org/commentary/{book}/{parsed.chapter}.html",
            description="Multiple commentary sources",
        ),
        ExternalLink(
            name="Bible Gateway",
            url=f"https://www.biblegateway.com/passage/?search={encoded}",
            description="Read in multiple translations",
        ),
        ExternalLink(
            name="OpenBible.info",
            url="https://www.openbible.info/topics/",
            description="Topical Bible study resources",
        ),
    ]
