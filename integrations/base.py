"""
Scripture Study - Base Provider Client

Shared transport for the upstream HTTP providers. Each client wraps one
``httpx.AsyncClient`` (owned by the caller) and turns transport failures
into the ``ProviderError`` hierarchy so the fetchers deal with a single
exception family.
"""
from abc import ABC
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
from opentelemetry import trace
from opentelemetry.trace import SpanKind

from config import ProviderConfig
from core.errors import (
    ErrorContext,
    ProviderError,
    ProviderResponseError,
    ProviderTimeoutError,
)

tracer = trace.get_tracer(__name__)


def build_http_client(
    config: Optional[ProviderConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Create the shared async HTTP client.

    Every request is bounded by ``config.request_timeout_seconds``.
    ``transport`` lets tests substitute an ``httpx.MockTransport``.
    """
    config = config or ProviderConfig()
    return httpx.AsyncClient(
        timeout=httpx.Timeout(config.request_timeout_seconds),
        headers={"User-Agent": config.user_agent, "Accept": "application/json"},
        follow_redirects=True,
        transport=transport,
    )


def encode_path_segment(value: str) -> str:
    """Percent-encode one path segment, ``/`` and ``:`` included."""
    return quote(value, safe="")


class BaseProviderClient(ABC):
    """Base class for upstream provider clients."""

    #: Short name used in logs, spans and the ``sources`` map
    name: str = "provider"

    def __init__(self, client: httpx.AsyncClient, base_url: str):
        self.client = client
        self.base_url = base_url.rstrip("/")

    async def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        GET ``url`` and decode its JSON body.

        Raises:
            ProviderTimeoutError: the request exceeded the client timeout
            ProviderResponseError: non-2xx status or a body that is not JSON
            ProviderError: any other transport failure
        """
        with tracer.start_as_current_span(
            f"provider.{self.name}.get",
            kind=SpanKind.CLIENT,
        ) as span:
            span.set_attribute("http.method", "GET")
            span.set_attribute("http.url", url)
            span.set_attribute("provider.name", self.name)

            try:
                response = await self.client.get(url, params=params)
                span.set_attribute("http.status_code", response.status_code)
                response.raise_for_status()
                return response.json()
            except httpx.TimeoutException as e:
                raise ProviderTimeoutError(
                    f"{self.name} timed out",
                    provider=self.name,
                    url=url,
                    timeout_seconds=self.client.timeout.read,
                    cause=e,
                    context=self._context("get"),
                ) from e
            except httpx.HTTPStatusError as e:
                raise ProviderResponseError(
                    f"{self.name} returned HTTP {e.response.status_code}",
                    provider=self.name,
                    url=url,
                    status_code=e.response.status_code,
                    cause=e,
                    context=self._context("get"),
                ) from e
            except httpx.HTTPError as e:
                raise ProviderError(
                    f"{self.name} request failed: {e}",
                    provider=self.name,
                    url=url,
                    cause=e,
                    context=self._context("get"),
                ) from e
            except ValueError as e:
                raise ProviderResponseError(
                    f"{self.name} returned a body that is not JSON",
                    provider=self.name,
                    url=url,
                    cause=e,
                    context=self._context("decode"),
                ) from e

    def _context(self, operation: str) -> ErrorContext:
        return ErrorContext.from_current_span(
            operation=operation,
            component=f"integrations.{self.name}",
            source_name=self.name,
        )
