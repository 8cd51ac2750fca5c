"""
Prometheus metrics for the site API and optional OpenTelemetry tracing.

Besides request counts and latency the registry tracks which encoder produced
each optimised image and how revalidation notices ended, the two side effects
of admin edits that are otherwise only visible in the logs.
"""

from __future__ import annotations

import time

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..core.config import get_settings

UNMATCHED_ROUTE = "unmatched"

REQUEST_COUNT = Counter(
    "rinart_http_requests_total",
    "HTTP requests by route template",
    labelnames=("method", "route", "status"),
)
REQUEST_LATENCY = Histogram(
    "rinart_http_request_duration_seconds",
    "HTTP request latency by route template",
    labelnames=("method", "route"),
    buckets=(0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5),
)
IMAGE_CONVERSIONS = Counter(
    "rinart_image_conversions_total",
    "Optimised images by the encoder that produced them",
    labelnames=("encoder",),
)
REVALIDATIONS = Counter(
    "rinart_revalidations_total",
    "Revalidation notices by outcome",
    labelnames=("outcome",),
)

_tracer_provider: TracerProvider | None = None


def route_label(request: Request) -> str:
    """Route template for the request; unknown paths share one label."""

    template = getattr(request.scope.get("route"), "path", None)
    return template or UNMATCHED_ROUTE


class PrometheusMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        start = time.perf_counter()
        response = await call_next(request)
        route = route_label(request)
        if route != get_settings().prometheus_metrics_path:
            REQUEST_COUNT.labels(method=request.method, route=route, status=str(response.status_code)).inc()
            REQUEST_LATENCY.labels(method=request.method, route=route).observe(time.perf_counter() - start)
        return response


def setup_prometheus(app: FastAPI) -> None:
    app.add_middleware(PrometheusMiddleware)

    @app.get(get_settings().prometheus_metrics_path, include_in_schema=False)
    async def prometheus_metrics() -> Response:
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


def configure_tracing(app: FastAPI) -> None:
    """Instrument the app when an OTLP endpoint is configured.

    The exporter reads ``OTEL_EXPORTER_OTLP_HEADERS`` from the environment.
    One provider is shared by every app built in the process.
    """

    global _tracer_provider
    settings = get_settings()
    if not settings.otel_exporter_otlp_endpoint:
        return
    if _tracer_provider is None:
        _tracer_provider = TracerProvider(
            resource=Resource.create(
                {
                    "service.name": settings.otel_service_name or settings.project_name,
                    "deployment.environment": settings.environment,
                }
            )
        )
        _tracer_provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otel_exporter_otlp_endpoint))
        )
        trace.set_tracer_provider(_tracer_provider)
    FastAPIInstrumentor.instrument_app(app, tracer_provider=_tracer_provider)
