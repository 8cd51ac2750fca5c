import httpx
from fastapi import FastAPI
from prometheus_client import REGISTRY

from rinart_cms.services.image_optimization import optimize_image
from rinart_cms.services.revalidation import RevalidationService
from rinart_cms.telemetry import setup_prometheus


def _sample(name, **labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


def _metrics_app():
    app = FastAPI()

    @app.get("/api/projects/{slug}")
    async def project(slug: str):
        return {"slug": slug}

    setup_prometheus(app)
    return app


async def test_requests_are_labelled_by_route_template():
    matched = dict(method="GET", route="/api/projects/{slug}", status="200")
    unmatched = dict(method="GET", route="unmatched", status="404")
    before = (_sample("rinart_http_requests_total", **matched), _sample("rinart_http_requests_total", **unmatched))

    transport = httpx.ASGITransport(app=_metrics_app())
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        await client.get("/api/projects/dom-u-ozera")
        await client.get("/api/projects/banja")
        await client.get("/wp-login.php")
        metrics = await client.get("/metrics/prometheus")

    assert _sample("rinart_http_requests_total", **matched) == before[0] + 2
    assert _sample("rinart_http_requests_total", **unmatched) == before[1] + 1
    assert "rinart_http_request_duration_seconds" in metrics.text
    assert "dom-u-ozera" not in metrics.text


async def test_revalidation_outcomes_are_counted():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500 if request.url.path == "/broken" else 200)

    before = {outcome: _sample("rinart_revalidations_total", outcome=outcome) for outcome in ("logged", "sent", "failed")}

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        await RevalidationService(webhook_url=None).revalidate(["/"])
        await RevalidationService(webhook_url="http://renderer/ok", client=client).revalidate(["/"])
        await RevalidationService(webhook_url="http://renderer/broken", client=client).revalidate(["/"])

    for outcome in ("logged", "sent", "failed"):
        assert _sample("rinart_revalidations_total", outcome=outcome) == before[outcome] + 1


def test_skipped_images_are_counted():
    before = _sample("rinart_image_conversions_total", encoder="skipped")

    result = optimize_image(b"<svg/>", "image/svg+xml", ".svg")

    assert result.extension == ".svg"
    assert _sample("rinart_image_conversions_total", encoder="skipped") == before + 1
