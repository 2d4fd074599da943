"""
Tests for metrics, health and correlation ID handling.
"""
import pytest
import structlog
from httpx import AsyncClient, ASGITransport
from staticshort.config import Settings
from staticshort.health import HealthChecker
from staticshort.logging import setup_logging
from staticshort.main import create_app
from staticshort.metrics import Metrics

ENV = {
    "SR_REDIR_A": "/x,/y",
    "SR_REDIR_A__TARGET": "https://dst.example",
    "SR_REDIR_A__CODE": "302",
    "SR_REDIR_B": "/page",
    "SR_REDIR_B__TARGET": "https://page.example",
    "SR_REDIR_B__CODE": "302",
    "SR_REDIR_B__JS_ONLY": "true",
}


def make_client(**settings):
    app = create_app(ENV, Settings(**{"METRICS_PATH": None, "HEALTH_PATH": None, **settings}))
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_metrics_endpoint():
    """Test Prometheus metrics endpoint."""
    async with make_client(METRICS_PATH="/_metrics") as client:
        await client.get("/x")
        await client.get("/page")
        await client.get("/missing")

        r = await client.get("/_metrics")
        assert r.status_code == 200
        content = r.text
        assert "http_requests_total" in content
        assert "http_request_duration_seconds" in content
        assert "app_up" in content
        assert "staticshort_rules_loaded 2.0" in content
        assert "staticshort_routes_registered 3.0" in content
        assert 'staticshort_redirects_served_total{path="/x",mode="header"} 1.0' in content
        assert 'staticshort_redirects_served_total{path="/page",mode="html"} 1.0' in content
        assert 'http_requests_total{service="staticshort",method="GET",path="/x",status="302"} 1.0' in content
        assert 'http_requests_total{service="staticshort",method="GET",path="/page",status="200"} 1.0' in content
        assert 'path="<unmatched>"' in content


@pytest.mark.asyncio
async def test_metrics_endpoint_disabled_by_default():
    """Test that no metrics path exists unless configured."""
    async with make_client() as client:
        r = await client.get("/metrics")
        assert r.status_code == 404


@pytest.mark.asyncio
async def test_health_liveness():
    """Test liveness health check."""
    async with make_client(HEALTH_PATH="/_health") as client:
        r = await client.get("/_health")
        assert r.status_code == 200
        data = r.json()
        assert data["status"] == "ok"
        assert data["service"] == "staticshort"
        assert data["version"] == "0.1.0"
        assert data["routes"] == 3
        assert "timestamp" in data


@pytest.mark.asyncio
async def test_health_path_without_leading_slash():
    """Test that a relative health path is served at its absolute form."""
    async with make_client(HEALTH_PATH="health") as client:
        r = await client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"


def test_health_checker_liveness():
    """Test the liveness payload without the HTTP layer."""
    data = HealthChecker(routes=5).liveness()
    assert data["status"] == "ok"
    assert data["routes"] == 5
    assert data["timestamp"].endswith("Z")


def test_metrics_rule_counts():
    """Test recording startup rule counts."""
    metrics = Metrics()
    metrics.set_rule_counts(2, 7)
    assert metrics.registry.get_sample_value("staticshort_rules_loaded") == 2
    assert metrics.registry.get_sample_value("staticshort_routes_registered") == 7


@pytest.mark.asyncio
async def test_correlation_id_not_added_unprompted():
    """Test that responses carry no generated correlation ID."""
    async with make_client() as client:
        r = await client.get("/x")
        assert "x-correlation-id" not in r.headers


@pytest.mark.asyncio
async def test_correlation_id_propagation():
    """Test that provided correlation ID is propagated."""
    correlation_id = "test-correlation-id-123"
    async with make_client() as client:
        r = await client.get("/x", headers={"x-correlation-id": correlation_id})
        assert r.status_code == 302
        assert r.headers["x-correlation-id"] == correlation_id


@pytest.mark.asyncio
async def test_request_logged():
    """Test that each request is logged with its status."""
    async with make_client() as client:
        with structlog.testing.capture_logs() as logs:
            await client.get("/y", headers={"x-correlation-id": "abc"})

    entries = [e for e in logs if e["event"] == "http.request"]
    assert len(entries) == 1
    assert entries[0]["http_status"] == 302


def test_setup_logging_console(capsys):
    """Test that console logging can be configured and used."""
    setup_logging(json_output=False, level="DEBUG", service_name="staticshort-test")
    structlog.get_logger().info("logging.configured")
    assert "logging.configured" in capsys.readouterr().out
    structlog.reset_defaults()
