"""
Property-Based Tests for Reference Parsing and Study Templates

Tests parsing with malformed inputs, odd spacing and Unicode, and the
invariants of the questions and links built from a parsed reference.
"""
import pytest
from hypothesis import given, strategies as st, settings, example

from tests.property.strategies import (
    BOOK_NAMES,
    malformed_reference_strategy,
    reference_strategy,
)


class TestReferenceParsing:
    """Property-based tests for parse()."""

    @given(st.text(max_size=100))
    @settings(max_examples=300)
    @example("")  # Empty string
    @example("   ")  # Whitespace only
    @example("John")  # Missing chapter and verse
    @example("John 3")  # Missing verse
    @example("3:16")  # Missing book
    @example("John 3:")  # Trailing colon
    @example("John 0:16")  # Zero chapter
    @example("John 3:0")  # Zero verse
    @example("John 3:18-16")  # Reversed range
    @example("John -3:16")  # Negative chapter
    @example("Hezekiah 1:1")  # Unknown book
    @example("John 3:16:17")  # Extra separator
    @example("בְּרֵאשִׁית 1:1")  # Hebrew book name
    @example("John ٣:١٦")  # Arabic-Indic digits
    def test_parse_never_raises(self, text):
        """Arbitrary text parses or yields an error value, never an exception."""
        from study.models import ParsedReference, ParseError
        from study.parser import parse

        result = parse(text)
        assert isinstance(result, (ParsedReference, ParseError))

    @given(reference_strategy(valid_only=True))
    @settings(max_examples=300)
    def test_valid_references_parse(self, reference):
        from study.models import ParsedReference
        from study.parser import parse

        parsed = parse(reference)

        assert isinstance(parsed, ParsedReference)
        assert parsed.chapter >= 1
        assert 1 <= parsed.verse_start <= parsed.verse_end
        assert parsed.display_name in BOOK_NAMES
        assert 1 <= parsed.canonical_ordinal <= 66

    @given(reference_strategy(valid_only=True))
    @settings(max_examples=200)
    def test_canonical_form_round_trips(self, reference):
        """Re-parsing the canonical form gives the same reference."""
        from study.parser import parse

        parsed = parse(reference)

        assert parse(parsed.canonical) == parsed

    @given(malformed_reference_strategy())
    @settings(max_examples=200)
    def test_malformed_references_rejected(self, reference):
        from study.models import ParseError
        from study.parser import INVALID_REFERENCE_MESSAGE, parse

        result = parse(reference)

        assert isinstance(result, ParseError)
        assert result.error == INVALID_REFERENCE_MESSAGE

    @given(reference_strategy(valid_only=False))
    @settings(max_examples=200)
    def test_mixed_inputs_do_not_crash(self, reference):
        from study.parser import parse

        parse(reference)

    def test_huge_numbers_rejected(self):
        from study.models import ParseError
        from study.parser import parse

        assert isinstance(parse("John " + "9" * 5000 + ":1"), ParseError)


class TestTemplateInvariants:
    """Invariants of the study questions and external links."""

    @given(reference_strategy(valid_only=True))
    @settings(max_examples=150)
    def test_questions_name_the_passage(self, reference):
        from study.parser import parse
        from study.templates import study_questions

        parsed = parse(reference)
        questions = study_questions(reference.strip(), parsed)

        assert len(questions) == 8
        for question in questions:
            assert f"{parsed.display_name} {parsed.chapter}" in question

    @given(reference_strategy(valid_only=True))
    @settings(max_examples=150)
    def test_links_are_url_safe(self, reference):
        from study.parser import parse
        from study.templates import external_links

        parsed = parse(reference)
        links = external_links(reference.strip(), parsed)

        assert len(links) == 5
        for link in links:
            assert link.url.startswith("https://")
            assert " " not in link.url
            assert "\t" not in link.url

    @pytest.mark.parametrize("reference", ["John 3:16", "Genesis 1:1-3"])
    def test_links_are_deterministic(self, reference):
        from study.parser import parse
        from study.templates import external_links

        parsed = parse(reference)

        assert external_links(reference, parsed) == external_links(reference, parsed)
