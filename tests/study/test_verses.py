"""
Tests for the verse fetcher.
"""
import httpx
import pytest

from tests.conftest import (
    BIBLE_API_HOST,
    CHAPTER_CDN_HOST,
    chapter_payload,
    passage_payload,
)


def make_fetcher(cache, http_client, study_config):
    from integrations.bible_api import BibleApiClient
    from integrations.chapter_cdn import ChapterCdnClient
    from study.verses import VerseFetcher

    return VerseFetcher(
        cache,
        BibleApiClient(http_client, study_config.providers),
        ChapterCdnClient(http_client, study_config.providers),
        study_config.study,
    )


class TestSliceVerses:
    """Tests for slice_verses()."""

    def test_inclusive_range_in_order(self):
        from study.verses import slice_verses

        verses = [{"verse": n, "text": f"v{n}"} for n in (3, 1, 2, 4)]
        assert [v["verse"] for v in slice_verses(verses, 2, 3)] == [2, 3]

    def test_missing_verses_are_skipped(self):
        from study.verses import slice_verses

        verses = [{"verse": 1, "text": "one"}]
        assert slice_verses(verses, 5, 6) == []


class TestVerseFetcher:
    """Tests for VerseFetcher."""

    @pytest.mark.asyncio
    async def test_all_primaries_succeed(self, cache, http_client, study_config, john_3_16, john_3_16_upstream):
        fetcher = make_fetcher(cache, http_client, study_config)

        verses = await fetcher.fetch_versions(john_3_16, "John 3:16")

        assert list(verses) == ["kjv", "asv", "web"]
        assert verses["kjv"].text == "For God so loved the world, that he gave"
        assert verses["kjv"].version_label == "King James Version"
        assert verses["asv"].version_label == "American Standard Version"
        assert verses["web"].version_label == "World English Bible"
        assert verses["kjv"].source == "bible-api"
        assert verses["kjv"].verse_breakdown[0]["verse"] == 16
        assert john_3_16_upstream.calls_to(CHAPTER_CDN_HOST) == 0

    @pytest.mark.asyncio
    async def test_partial_failure_omits_translation(self, cache, http_client, study_config, john_3_16, upstream):
        upstream.passages["kjv"] = passage_payload("John 3:16", "For God so loved the world")
        upstream.passages["asv"] = 500
        upstream.passages["web"] = httpx.ConnectError("connection refused")
        fetcher = make_fetcher(cache, http_client, study_config)

        verses = await fetcher.fetch_versions(john_3_16, "John 3:16")

        assert list(verses) == ["kjv"]
        assert upstream.calls_to(CHAPTER_CDN_HOST) == 0

    @pytest.mark.asyncio
    async def test_fallback_when_every_primary_fails(self, cache, http_client, study_config, genesis_1_1_3, upstream):
        upstream.fail_everything()
        upstream.chapters[("genesis", 1)] = chapter_payload({
            1: "In the beginning God created the heaven and the earth.",
            2: "And the earth was without form, and void;",
            3: "And God said, Let there be light: and there was light.",
            4: "And God saw the light, that it was good:",
        })
        fetcher = make_fetcher(cache, http_client, study_config)

        verses = await fetcher.fetch_versions(genesis_1_1_3, "Genesis 1:1-3")

        assert list(verses) == ["kjv"]
        fallback = verses["kjv"]
        assert fallback.source == "chapter-cdn"
        assert fallback.version_label == "King James Version"
        assert fallback.text == (
            "In the beginning God created the heaven and the earth. "
            "And the earth was without form, and void; "
            "And God said, Let there be light: and there was light."
        )
        assert upstream.calls_to(CHAPTER_CDN_HOST) == 1

    @pytest.mark.asyncio
    async def test_fallback_accepts_verses_key_and_int_numbers(self, cache, http_client, study_config, john_3_16, upstream):
        upstream.fail_everything(404)
        upstream.chapters[("john", 3)] = {"verses": [{"verse": 16, "text": "For God so loved the world"}]}
        fetcher = make_fetcher(cache, http_client, study_config)

        verses = await fetcher.fetch_versions(john_3_16, "John 3:16")

        assert verses["kjv"].text == "For God so loved the world"

    @pytest.mark.asyncio
    async def test_everything_fails_gives_empty_map(self, cache, http_client, study_config, john_3_16, upstream):
        upstream.fail_everything()
        upstream.chapters[("john", 3)] = httpx.ReadTimeout("slow")
        fetcher = make_fetcher(cache, http_client, study_config)

        verses = await fetcher.fetch_versions(john_3_16, "John 3:16")

        assert verses == {}

    @pytest.mark.asyncio
    async def test_fallback_without_matching_verses_is_empty(self, cache, http_client, study_config, john_3_16, upstream):
        upstream.fail_everything()
        upstream.chapters[("john", 3)] = chapter_payload({1: "There was a man of the Pharisees"})
        fetcher = make_fetcher(cache, http_client, study_config)

        results = await fetcher.collect(john_3_16, "John 3:16")

        assert results[-1].name == "verses:fallback"
        assert results[-1].status.value == "empty"
        assert fetcher.to_versions(results) == {}

    @pytest.mark.asyncio
    async def test_cache_hit_skips_upstream(self, cache, http_client, study_config, john_3_16, john_3_16_upstream):
        fetcher = make_fetcher(cache, http_client, study_config)

        first = await fetcher.fetch_versions(john_3_16, "John 3:16")
        second = await fetcher.fetch_versions(john_3_16, "John 3:16")

        assert first == second
        assert john_3_16_upstream.calls_to(BIBLE_API_HOST) == 3
        assert "verse:John 3:16:kjv" in cache

    @pytest.mark.asyncio
    async def test_cache_expiry_refetches(self, cache, fake_clock, http_client, study_config, john_3_16, john_3_16_upstream):
        fetcher = make_fetcher(cache, http_client, study_config)

        await fetcher.fetch_versions(john_3_16, "John 3:16")
        fake_clock.advance(3601)
        await fetcher.fetch_versions(john_3_16, "John 3:16")

        assert john_3_16_upstream.calls_to(BIBLE_API_HOST) == 6

    @pytest.mark.asyncio
    async def test_failures_are_not_cached(self, cache, http_client, study_config, john_3_16, upstream):
        upstream.passages["kjv"] = 500
        fetcher = make_fetcher(cache, http_client, study_config)

        await fetcher.fetch_versions(john_3_16, "John 3:16")

        assert "verse:John 3:16:kjv" not in cache

    @pytest.mark.asyncio
    async def test_primary_request_shape(self, cache, http_client, study_config, john_3_16, john_3_16_upstream):
        fetcher = make_fetcher(cache, http_client, study_config)

        await fetcher.fetch_versions(john_3_16, "John 3:16")

        translations = sorted(r.url.params["translation"] for r in john_3_16_upstream.requests)
        assert translations == ["asv", "kjv", "web"]
        assert all(r.url.path == "/John 3:16" for r in john_3_16_upstream.requests)
