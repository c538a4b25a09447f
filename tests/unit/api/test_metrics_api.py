"""
Tests for the exporter HTTP surface (/, /metrics, /-/healthy)
"""
from fastapi.testclient import TestClient
from prometheus_client.parser import text_string_to_metric_families

from inrow_exporter.config import Settings
from inrow_exporter.deps import get_session_factory
from inrow_exporter.main import create_app


def _parse(text):
    """Return {(name, frozenset(labels)): value} for every sample."""
    samples = {}
    for family in text_string_to_metric_families(text):
        for sample in family.samples:
            samples[(sample.name, frozenset(sample.labels.items()))] = sample.value
    return samples


def _labels(**labels):
    return frozenset(labels.items())


class TestLandingPage:
    """Test / endpoint"""

    def test_landing_page(self, client):
        """Test that the landing page links to the metrics path"""
        response = client.get("/")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "<h1>APC inrow Exporter</h1>" in response.text
        assert '<a href="/metrics">Metrics</a>' in response.text

    def test_landing_page_does_not_poll(self, client, session_factory):
        """Test that the landing page does not contact devices"""
        client.get("/")
        assert session_factory.calls == []


class TestMetrics:
    """Test the scrape endpoint"""

    def test_metrics_content_type(self, client):
        """Test Prometheus text format"""
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]

    def test_metrics_up(self, client):
        """Test one up series per configured target"""
        samples = _parse(client.get("/metrics").text)

        up = {labels: value for (name, labels), value in samples.items() if name == "apc_inrow_up"}
        assert up == {
            _labels(target="10.0.0.10"): 1.0,
            _labels(target="10.0.0.11"): 1.0,
            _labels(target="10.0.0.12"): 0.0,
        }

    def test_metrics_telemetry(self, client):
        """Test converted telemetry with identity labels"""
        samples = _parse(client.get("/metrics").text)
        labels = _labels(target="10.0.0.10", name="inrow-a1", location="Row A")

        assert samples[("apc_inrow_airflow", labels)] == 2.5
        assert samples[("apc_inrow_rack_inlet_temp", labels)] == 21.5
        assert samples[("apc_inrow_leaving_fluid_temp", labels)] == 16.0

    def test_unreachable_target_has_no_telemetry(self, client):
        """Test that only up is exposed for an unreachable target"""
        samples = _parse(client.get("/metrics").text)

        for name, labels in samples:
            if dict(labels).get("target") == "10.0.0.12":
                assert name == "apc_inrow_up"

    def test_every_scrape_polls_again(self, client, session_factory):
        """Test that nothing is cached between scrapes"""
        client.get("/metrics")
        client.get("/metrics")
        assert len(session_factory.calls) == 6

    def test_scrapes_are_stable(self, client):
        """Test that names and label sets match across back-to-back scrapes"""
        first = _parse(client.get("/metrics").text)
        second = _parse(client.get("/metrics").text)
        assert set(first) == set(second)

    def test_scrape_uses_configured_community(self, client, session_factory):
        """Test that the configured community reaches the session factory"""
        client.get("/metrics")
        assert {community for _, community, _ in session_factory.calls} == {"testcommunity"}


class TestCustomSettings:
    """Test the app factory with non-default settings"""

    def test_custom_metrics_path(self, session_factory):
        """Test serving metrics under another path"""
        settings = Settings(METRICS_PATH="/scrape", SNMP_TARGETS="10.0.0.10", SNMP_COMMUNITY="c")
        app = create_app(settings)
        app.dependency_overrides[get_session_factory] = lambda: session_factory

        with TestClient(app) as client:
            assert client.get("/scrape").status_code == 200
            assert client.get("/metrics").status_code == 404
            assert '<a href="/scrape">Metrics</a>' in client.get("/").text

    def test_no_targets(self, session_factory):
        """Test that an exporter without targets serves an empty scrape"""
        app = create_app(Settings(SNMP_TARGETS=""))
        app.dependency_overrides[get_session_factory] = lambda: session_factory

        with TestClient(app) as client:
            response = client.get("/metrics")

        assert response.status_code == 200
        assert "apc_inrow_up" not in response.text
        assert session_factory.calls == []


class TestHealthy:
    """Test /-/healthy endpoint"""

    def test_healthy(self, client, session_factory):
        """Test liveness check without polling"""
        response = client.get("/-/healthy")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert session_factory.calls == []
