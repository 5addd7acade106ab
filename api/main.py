"""
Scripture Study - FastAPI Application

HTTP surface for the study engine:
- GET /study?reference=John%203:16 -> aggregated study material
- GET /search?q=... -> raw primary-provider payload
- DELETE /cache -> drop cached upstream responses
- GET /health

Request logs carry the request id and trace context.
"""
from typing import Any, Callable, Dict, Optional
from contextlib import asynccontextmanager
import asyncio
import time
import uuid

from fastapi import FastAPI, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from opentelemetry import trace
from opentelemetry.trace import SpanKind

from config import Config, get_config
from observability import (
    setup_observability,
    shutdown_observability,
    get_tracer,
    get_logger,
)
from observability.tracing import create_span
from observability.logging import bind_context, clear_context
from study.cache import run_sweeper
from study.models import ParseError
from study.orchestrator import StudyOrchestrator

API_VERSION = "1.0.0"

logger = get_logger(__name__)
tracer = get_tracer(__name__)

OrchestratorFactory = Callable[[], StudyOrchestrator]


class ErrorResponse(BaseModel):
    """Body returned for a reference that does not parse."""
    error: str = Field(..., description="Human-readable reason")


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    components: Dict[str, str]
    cache: Dict[str, Any] = Field(default_factory=dict)
    trace_id: Optional[str] = None


class SearchResponse(BaseModel):
    """Keyword search passthrough."""
    query: str
    result: Optional[Dict[str, Any]] = None


def get_current_trace_id() -> Optional[str]:
    """Get current trace ID as hex string."""
    span = trace.get_current_span()
    if span and span.is_recording():
        ctx = span.get_span_context()
        if ctx.is_valid:
            return format(ctx.trace_id, "032x")
    return None


def create_app(
    config: Optional[Config] = None,
    orchestrator_factory: Optional[OrchestratorFactory] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Settings; read from the environment when omitted.
        orchestrator_factory: Builds the orchestrator at startup. Tests pass
            one wired to an ``httpx.MockTransport``.
    """
    config = config or get_config()
    factory = orchestrator_factory or (lambda: StudyOrchestrator.create(config))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Own the orchestrator and the cache sweeper for the app's lifetime."""
        logger.info("Starting Scripture Study API", phase="startup")
        orchestrator = factory()
        app.state.orchestrator = orchestrator
        sweeper = asyncio.create_task(
            run_sweeper(orchestrator.cache, config.cache.sweep_interval_seconds)
        )

        yield

        logger.info("Shutting down Scripture Study API", phase="shutdown")
        sweeper.cancel()
        try:
            await sweeper
        except asyncio.CancelledError:
            pass
        await orchestrator.close()
        shutdown_observability()

    app = FastAPI(
        title="Scripture Study API",
        description="Scripture reference resolution and multi-source study aggregation",
        version=API_VERSION,
        lifespan=lifespan,
        docs_url=None if config.is_production else "/docs",
        redoc_url=None if config.is_production else "/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_methods=["GET", "DELETE"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def observability_middleware(request: Request, call_next):
        """Add request tracking with trace context."""
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        start_time = time.perf_counter()

        bind_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        try:
            response: Response = await call_next(request)
            duration = time.perf_counter() - start_time

            trace_id = get_current_trace_id()
            if trace_id:
                response.headers["X-Trace-ID"] = trace_id

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration * 1000:.2f}ms"

            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=duration * 1000,
            )
            return response
        except Exception as e:
            duration = time.perf_counter() - start_time
            logger.error("Request failed", error=str(e), duration_ms=duration * 1000)
            raise
        finally:
            clear_context()

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """Report whether the orchestrator is up, with cache counters."""
        with create_span("health_check", attributes={"endpoint": "/health"}) as span:
            orchestrator: Optional[StudyOrchestrator] = getattr(
                request.app.state, "orchestrator", None
            )
            components = {
                "orchestrator": "healthy" if orchestrator else "unavailable",
            }
            overall = "healthy" if orchestrator else "degraded"
            span.set_attribute("health.status", overall)

            return HealthResponse(
                status=overall,
                version=API_VERSION,
                components=components,
                cache=orchestrator.cache.stats().to_dict() if orchestrator else {},
                trace_id=get_current_trace_id(),
            )

    @app.get(
        "/study",
        responses={400: {"model": ErrorResponse}},
    )
    async def study(
        request: Request,
        reference: str = Query(..., description='Reference such as "John 3:16"'),
    ):
        """Aggregate verses, commentary, cross-references, questions and links."""
        with tracer.start_as_current_span("api.study", kind=SpanKind.SERVER) as span:
            span.set_attribute("study.reference", reference)
            orchestrator: StudyOrchestrator = request.app.state.orchestrator
            result = await orchestrator.study(reference)

            if isinstance(result, ParseError):
                span.set_attribute("study.parse_error", True)
                return JSONResponse(status_code=400, content=result.to_dict())

            return result.to_dict()

    @app.get("/search", response_model=SearchResponse)
    async def search(
        request: Request,
        q: str = Query(..., min_length=1, description="Keyword or passage query"),
    ):
        """Forward a query to the primary provider and return its raw payload."""
        orchestrator: StudyOrchestrator = request.app.state.orchestrator
        return SearchResponse(query=q, result=await orchestrator.search_passages(q))

    @app.delete("/cache", status_code=204)
    async def clear_cache(request: Request) -> Response:
        """Drop every cached upstream response."""
        request.app.state.orchestrator.clear_cache()
        return Response(status_code=204)

    return app


setup_observability(get_config().observability)
app = create_app()
