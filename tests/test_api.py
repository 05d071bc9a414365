"""HTTP surface tests for the analytics and health routes."""

import pytest
from fastapi.testclient import TestClient

from conftest import NOW, FakeSource, daily_points
from dashstats.api.deps import get_aggregation_service, get_analytics_source, get_posthog_config
from dashstats.core.config import PostHogConfig, Settings, build_posthog_config
from dashstats.integrations.posthog_client import PostHogClient
from dashstats.main import create_app
from dashstats.schemas.analytics import BreakdownRow
from dashstats.services.aggregation_service import AnalyticsAggregationService
from dashstats.utils.exceptions import ConfigurationException, UpstreamPayloadError


def _settings(**overrides) -> Settings:
    values = dict(
        POSTHOG_API_KEY="test-api-key",
        POSTHOG_PROJECT_ID="test-project-123",
        AZURE_MONITOR_CONN_STR="",
    )
    values.update(overrides)
    return Settings(**values)


def _client_with_source(source: FakeSource, **settings_overrides) -> TestClient:
    app = create_app(_settings(**settings_overrides))
    app.dependency_overrides[get_aggregation_service] = lambda: AnalyticsAggregationService(source, clock=lambda: NOW)
    return TestClient(app)


class RecordingService(AnalyticsAggregationService):
    """Aggregation service that remembers which period it was asked for."""

    def __init__(self, source):
        super().__init__(source, clock=lambda: NOW)
        self.periods = []

    async def build_report(self, period=None, now=None):
        self.periods.append(period)
        return await super().build_report(period, now)


# ── Analytics endpoint ───────────────────────────────────────────────────────

class TestAnalyticsEndpoint:

    def test_returns_report_document(self):
        source = FakeSource(
            visitors=daily_points([600, 900]),
            previous_visitors=daily_points([500, 500]),
            pageviews=2500,
            previous_pageviews=2083,
            pages=[BreakdownRow(dimension_value="https://example.com/about", count=12)],
            sources=[BreakdownRow(dimension_value=None, count=5)],
        )
        client = _client_with_source(source)

        response = client.get("/analytics/data", params={"period": "7d"})

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"stats", "timeseries", "pages", "sources", "events"}
        assert body["stats"]["visitors"] == {"value": 1500, "changePercent": 50.0}
        assert body["stats"]["pageViews"]["value"] == 2500
        assert body["stats"]["pageViews"]["changePercent"] == pytest.approx(20.02, abs=0.01)
        assert [point["value"] for point in body["timeseries"]] == [600, 900]
        assert set(body["timeseries"][0]) == {"timestamp", "value"}
        assert body["pages"] == [{"label": "/about", "value": 12}]
        assert body["sources"] == [{"label": "Direct", "value": 5}]
        assert body["events"] == []

    @pytest.mark.parametrize("raw, expected", [(None, "7d"), ("day", "day"), ("12mo", "12mo"), ("weekly", "7d")])
    def test_period_selector(self, raw, expected):
        app = create_app(_settings())
        service = RecordingService(FakeSource())
        app.dependency_overrides[get_aggregation_service] = lambda: service
        client = TestClient(app)

        params = {} if raw is None else {"period": raw}
        response = client.get("/analytics/data", params=params)

        assert response.status_code == 200
        assert [p.value for p in service.periods] == [expected]

    def test_total_failure_returns_error_document(self):
        client = _client_with_source(FakeSource(visitors=UpstreamPayloadError("garbage")))

        response = client.get("/analytics/data")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch analytics data"}

    def test_missing_credentials_returns_not_configured(self):
        app = create_app(_settings(POSTHOG_API_KEY="", POSTHOG_PROJECT_ID=""))
        client = TestClient(app)

        response = client.get("/analytics/data")

        assert response.status_code == 503
        assert "not configured" in response.json()["error"]

    def test_custom_path_and_prefix(self):
        client = _client_with_source(FakeSource(), API_PREFIX="/api/", ANALYTICS_PATH="stats/report")

        assert client.get("/api/stats/report").status_code == 200
        assert client.get("/analytics/data").status_code == 404

    @pytest.mark.parametrize("blank", ["", "/", "  "])
    def test_blank_path_falls_back_to_default(self, blank):
        client = _client_with_source(FakeSource(), ANALYTICS_PATH=blank)

        assert client.get("/analytics/data").status_code == 200

    def test_disabled_endpoint_is_not_registered(self):
        client = _client_with_source(FakeSource(), ANALYTICS_ENABLED=False)

        assert client.get("/analytics/data").status_code == 404
        assert client.get("/health/live").status_code == 200

    def test_unhandled_error_returns_generic_error_document(self):
        app = create_app(_settings())

        def broken_service():
            raise RuntimeError("wiring bug")

        app.dependency_overrides[get_aggregation_service] = broken_service
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get("/analytics/data")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


# ── Dependencies ─────────────────────────────────────────────────────────────

class TestDependencies:

    @pytest.mark.asyncio
    async def test_dependency_chain_builds_posthog_service(self):
        cfg = _settings(ANALYTICS_REQUEST_TIMEOUT=5, POSTHOG_HTTP_TIMEOUT=2)
        config = get_posthog_config(cfg)

        sources = get_analytics_source(config)
        source = await sources.__anext__()
        try:
            service = get_aggregation_service(source, cfg)

            assert config == PostHogConfig(
                api_key="test-api-key",
                project_id="test-project-123",
                api_host="https://app.posthog.com",
                timeout=2,
            )
            assert isinstance(source, PostHogClient)
            assert isinstance(service, AnalyticsAggregationService)
        finally:
            await sources.aclose()


# ── Configuration ────────────────────────────────────────────────────────────

class TestConfiguration:

    def test_build_config_strips_trailing_slash(self):
        config = build_posthog_config(_settings(POSTHOG_API_HOST="https://eu.posthog.com/"))

        assert config.api_host == "https://eu.posthog.com"

    def test_empty_host_falls_back_to_default(self):
        config = build_posthog_config(_settings(POSTHOG_API_HOST=""))

        assert config.api_host == "https://app.posthog.com"

    @pytest.mark.parametrize(
        "raw, expected",
        [("stats/report/", "/stats/report"), ("/analytics/data", "/analytics/data"), ("", "/analytics/data"), ("/", "/analytics/data")],
    )
    def test_analytics_path_is_normalized(self, raw, expected):
        assert _settings(ANALYTICS_PATH=raw).ANALYTICS_PATH == expected

    @pytest.mark.parametrize("missing", ["POSTHOG_API_KEY", "POSTHOG_PROJECT_ID"])
    def test_missing_credentials_raise(self, missing):
        with pytest.raises(ConfigurationException) as exc_info:
            build_posthog_config(_settings(**{missing: ""}))

        assert exc_info.value.status_code == 503
        assert exc_info.value.code == "NOT_CONFIGURED"


# ── Health ───────────────────────────────────────────────────────────────────

class TestHealth:

    def test_health_reports_configuration(self):
        client = TestClient(create_app(_settings()))

        body = client.get("/health").json()

        assert body == {"status": "ok", "service": "Dashstats API", "analytics": "configured"}
        assert client.get("/health/ready").json() == {"ready": True}

    def test_health_degraded_without_credentials(self):
        client = TestClient(create_app(_settings(POSTHOG_API_KEY="")))

        assert client.get("/health").json()["status"] == "degraded"
        assert client.get("/health/ready").json() == {"ready": False}
        assert client.get("/health/live").json() == {"alive": True}
