import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Sequence

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    SpanExporter,
    SpanExportResult,
)
from prometheus_client import Info
from prometheus_fastapi_instrumentator import Instrumentator

from capability_proxy.capability.proxy import CapabilityProxy, create_backend_client
from capability_proxy.routes import router
from capability_proxy.utils.traced_requests import redact_capability_keys
from capability_proxy.vars import (
    CAPABILITY_BACKEND_URL,
    CAPABILITY_PROXY_RETRIES,
    CAPABILITY_PROXY_TIMEOUT,
    OTLP_ENDPOINT,
    OTLP_HEADERS,
    SERVICE_NAME,
)

logger = logging.getLogger("uvicorn.error")


class FilteringSpanExporter(SpanExporter):
    """
    Wrapper exporter that filters out noisy ASGI body spans.
    """

    def __init__(self, exporter: SpanExporter):
        self.exporter = exporter

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        filtered_spans = [
            span
            for span in spans
            if not (
                span.attributes
                and span.attributes.get("asgi.event.type") == "http.response.body"
            )
        ]
        if filtered_spans:
            return self.exporter.export(filtered_spans)
        return SpanExportResult.SUCCESS

    def shutdown(self):
        return self.exporter.shutdown()

    def force_flush(self, timeout_millis: int = 30000):
        return self.exporter.force_flush(timeout_millis)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Own the shared backend client for the lifetime of the app."""
    client = create_backend_client(CAPABILITY_PROXY_TIMEOUT, CAPABILITY_PROXY_RETRIES)
    app.state.capability_proxy = CapabilityProxy(
        CAPABILITY_BACKEND_URL, client, timeout=CAPABILITY_PROXY_TIMEOUT
    )
    logger.info(
        f"Capability proxy ready (timeout={CAPABILITY_PROXY_TIMEOUT}s, "
        f"retries={CAPABILITY_PROXY_RETRIES})"
    )
    try:
        yield
    finally:
        await client.aclose()


def configure_tracing(app: FastAPI) -> None:
    trace.set_tracer_provider(
        TracerProvider(resource=Resource.create({"service.name": SERVICE_NAME}))
    )
    tracer_provider = trace.get_tracer_provider()
    if OTLP_ENDPOINT:
        otlp_exporter = OTLPSpanExporter(
            endpoint=OTLP_ENDPOINT,
            headers=((OTLP_HEADERS).split(",") if OTLP_HEADERS else None),
        )
        tracer_provider.add_span_processor(
            BatchSpanProcessor(FilteringSpanExporter(otlp_exporter))
        )

    FastAPIInstrumentor.instrument_app(
        app,
        excluded_urls="/healthz,/metrics",
        server_request_hook=redact_capability_keys,
        client_request_hook=None,
    )


def create_app() -> FastAPI:
    app = FastAPI(title=SERVICE_NAME, lifespan=lifespan)
    # Handler labels are route templates, so capability keys stay out of metrics
    Instrumentator().instrument(app).expose(app)
    configure_tracing(app)
    app.include_router(router)
    return app


app = create_app()

# Add app_name to the metrics
app_info = Info("fastapi_app_info", "Application Info")
app_info.info({"app_name": SERVICE_NAME})
