"""
Tests for reference parsing and the book registry.
"""
import pytest


class TestBookRegistry:
    """Tests for the 66-book table."""

    def test_canon_is_complete_and_ordered(self):
        """Ordinals run 1..66 without gaps."""
        from study.books import books

        ordinals = [info.canonical_ordinal for _, info in books()]
        assert ordinals == list(range(1, 67))

    def test_lookup_known_book(self):
        from study.books import lookup

        info = lookup("1corinthians")
        assert info.provider_code == "1co"
        assert info.display_name == "1 Corinthians"
        assert info.canonical_ordinal == 46

    def test_lookup_requires_normalized_key(self):
        """Normalization is the caller's job."""
        from study.books import lookup

        assert lookup("1 Corinthians") is None
        assert lookup("hezekiah") is None

    def test_normalize_book_key(self):
        from study.books import normalize_book_key

        assert normalize_book_key("  Song of  Solomon ") == "songofsolomon"
        assert normalize_book_key("1 JOHN") == "1john"

    def test_testament_split(self):
        from study.books import lookup

        assert lookup("malachi").testament == "OT"
        assert lookup("matthew").testament == "NT"


class TestParse:
    """Tests for parse()."""

    def test_single_verse(self):
        from study.parser import parse
        from study.models import ParsedReference

        parsed = parse("John 3:16")

        assert isinstance(parsed, ParsedReference)
        assert parsed.provider_code == "jhn"
        assert parsed.display_name == "John"
        assert parsed.canonical_ordinal == 43
        assert parsed.chapter == 3
        assert parsed.verse_start == 16
        assert parsed.verse_end == 16
        assert parsed.normalized_book_key == "john"

    def test_verse_range(self):
        from study.parser import parse

        parsed = parse("Genesis 1:1-3")

        assert parsed.provider_code == "gen"
        assert parsed.chapter == 1
        assert parsed.verse_start == 1
        assert parsed.verse_end == 3

    def test_numbered_book_with_spaces_and_case(self):
        from study.parser import parse

        parsed = parse("1 corinthians 13:4-7")

        assert parsed.provider_code == "1co"
        assert parsed.normalized_book_key == "1corinthians"
        assert (parsed.chapter, parsed.verse_start, parsed.verse_end) == (13, 4, 7)

    def test_multi_word_book(self):
        from study.parser import parse

        parsed = parse("Song of Solomon 2:4")
        assert parsed.provider_code == "sng"

    @pytest.mark.parametrize("raw", [
        "  John   3:16  ",
        "John 3.16",
        "john 3:16",
        "JOHN 3:16",
    ])
    def test_tolerated_spellings(self, raw):
        """Whitespace, case and chapter.verse all resolve to the same reference."""
        from study.parser import parse

        parsed = parse(raw)
        assert parsed.canonical == "John 3:16"

    @pytest.mark.parametrize("raw", ["Romans 8:28–30", "Romans 8:28—30", "Romans 8:28 - 30"])
    def test_dash_variants(self, raw):
        from study.parser import parse

        parsed = parse(raw)
        assert (parsed.verse_start, parsed.verse_end) == (28, 30)

    @pytest.mark.parametrize("raw", [
        "",
        "   ",
        "John",
        "John 3",
        "3:16",
        "John3:16",
        "Hezekiah 1:1",
        "John 3:16-",
        "John a:b",
    ])
    def test_malformed_references(self, raw):
        from study.parser import parse, INVALID_REFERENCE_MESSAGE
        from study.models import ParseError

        result = parse(raw)

        assert isinstance(result, ParseError)
        assert result.error == INVALID_REFERENCE_MESSAGE

    @pytest.mark.parametrize("raw", ["John 0:16", "John 3:0", "John 3:16-10"])
    def test_out_of_range_numbers_are_parse_errors(self, raw):
        from study.parser import parse
        from study.models import ParseError

        assert isinstance(parse(raw), ParseError)

    def test_non_string_input(self):
        from study.parser import parse
        from study.models import ParseError

        assert isinstance(parse(None), ParseError)

    def test_error_message_text(self):
        from study.parser import parse

        assert parse("nonsense").error == (
            'Invalid reference format. Use format like "John 3:16" or "Genesis 1:1-3"'
        )


class TestParsedReference:
    """Tests for ParsedReference helpers."""

    def test_cache_slug(self, john_3_16, genesis_1_1_3):
        assert john_3_16.cache_slug == "john3:16"
        assert genesis_1_1_3.cache_slug == "genesis1:1"

    def test_canonical(self, john_3_16, genesis_1_1_3):
        assert john_3_16.canonical == "John 3:16"
        assert genesis_1_1_3.canonical == "Genesis 1:1-3"
        assert genesis_1_1_3.is_range
        assert not john_3_16.is_range

    def test_invariants_enforced_on_construction(self):
        from study.models import ParsedReference

        with pytest.raises(ValueError):
            ParsedReference(
                provider_code="jhn",
                display_name="John",
                canonical_ordinal=43,
                chapter=3,
                verse_start=16,
                verse_end=15,
                normalized_book_key="john",
            )

    def test_frozen(self, john_3_16):
        from dataclasses import FrozenInstanceError

        with pytest.raises(FrozenInstanceError):
            john_3_16.chapter = 4
