"""
Scripture Study - Test Configuration

Pytest fixtures and configuration for all tests. Upstream providers are
simulated with ``httpx.MockTransport``; nothing here touches the network.
"""
import pytest
import pytest_asyncio
from typing import Any, Dict, List, Tuple, Union

import httpx

from config import CacheConfig, Config, ProviderConfig, StudyConfig

BIBLE_API_HOST = "bible-api.com"
CHAPTER_CDN_HOST = "cdn.jsdelivr.net"
COMMENTARY_HOST = "api.getcontext.xyz"

Outcome = Union[Dict[str, Any], List[Any], int, Exception]


def passage_payload(reference: str, text: str, translation: str = "kjv") -> Dict[str, Any]:
    """A bible-api.com response body."""
    return {
        "reference": reference,
        "verses": [
            {"book_name": reference.rsplit(" ", 1)[0], "chapter": 3, "verse": 16, "text": text + "\n"}
        ],
        "text": text + "\n",
        "translation_id": translation,
    }


def chapter_payload(verses: Dict[int, str]) -> Dict[str, Any]:
    """A chapter file from the CDN, numbered the way it ships (strings)."""
    return {
        "data": [
            {"book": "John", "chapter": "3", "verse": str(number), "text": text}
            for number, text in verses.items()
        ]
    }


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUpstream:
    """
    Routes requests for the three providers to canned outcomes.

    An outcome is a JSON body (200), an int status code, or an exception
    to raise from the transport. Unknown routes answer 404.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.passages: Dict[str, Outcome] = {}
        self.chapters: Dict[Tuple[str, int], Outcome] = {}
        self.commentary: Dict[Tuple[str, int], Outcome] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        segments = request.url.path.strip("/").split("/")

        if host == BIBLE_API_HOST:
            outcome = self.passages.get(request.url.params.get("translation", ""), 404)
        elif host == CHAPTER_CDN_HOST:
            book, chapter = segments[-3], int(segments[-1].replace(".json", ""))
            outcome = self.chapters.get((book, chapter), 404)
        elif host == COMMENTARY_HOST:
            book, chapter = segments[-2], int(segments[-1])
            outcome = self.commentary.get((book, chapter), 404)
        else:
            outcome = 404

        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, int):
            return httpx.Response(outcome, json={"error": "unavailable"})
        return httpx.Response(200, json=outcome)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls_to(self, host: str) -> int:
        return sum(1 for request in self.requests if request.url.host == host)

    def fail_everything(self, status: int = 503) -> None:
        for code in ("kjv", "asv", "web"):
            self.passages[code] = status


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(fake_clock):
    """Shared cache driven by the fake clock."""
    from study.cache import TTLCache

    return TTLCache(ttl_seconds=3600, max_entries=100, clock=fake_clock)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def study_config() -> Config:
    """Configuration pinned to the public provider URLs, independent of env."""
    return Config(
        providers=ProviderConfig(
            bible_api_url=f"https://{BIBLE_API_HOST}",
            chapter_cdn_url=f"https://{CHAPTER_CDN_HOST}/gh/wldeh/bible-api/bibles",
            chapter_cdn_edition="en-kjv",
            commentary_api_url=f"https://{COMMENTARY_HOST}/v0.9",
            request_timeout_seconds=5.0,
        ),
        cache=CacheConfig(ttl_seconds=3600, max_entries=100, sweep_interval_seconds=300),
        study=StudyConfig(translations=["kjv", "asv", "web"], fallback_translation="kjv"),
    )


@pytest_asyncio.fixture
async def http_client(upstream, study_config):
    from integrations.base import build_http_client

    client = build_http_client(study_config.providers, transport=upstream.transport)
    yield client
    await client.aclose()


@pytest.fixture
def orchestrator(cache, http_client, study_config):
    from study.orchestrator import StudyOrchestrator

    return StudyOrchestrator(cache, http_client, config=study_config)


@pytest.fixture
def john_3_16():
    from study.parser import parse

    return parse("John 3:16")


@pytest.fixture
def genesis_1_1_3():
    from study.parser import parse

    return parse("Genesis 1:1-3")


@pytest.fixture
def john_3_16_upstream(upstream) -> FakeUpstream:
    """All three primary translations answer for John 3:16."""
    upstream.passages["kjv"] = passage_payload("John 3:16", "For God so loved the world, that he gave", "kjv")
    upstream.passages["asv"] = passage_payload("John 3:16", "For God so loved the world, that he gave his", "asv")
    upstream.passages["web"] = passage_payload("John 3:16", "For God so loved the world, that he gave his one", "web")
    upstream.commentary[("John", 3)] = {"commentary": "Jesus speaks with Nicodemus about new birth."}
    return upstream
