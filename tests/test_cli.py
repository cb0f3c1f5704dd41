from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import pytest
import typer
from typer.testing import CliRunner

from cli.app import app
from cli.client import ApiClient
from cli.config import CLIConfig, load_config


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.submitted: List[tuple] = []
        self.days_requested: List[Optional[int]] = []
        self.closed = False

    def submit_reading(self, bin_id: str, weight_kg: float, moisture_raw: int, waste_tag: str) -> Dict[str, Any]:
        self.submitted.append((bin_id, weight_kg, moisture_raw, waste_tag))
        return {
            "id": "reading-123",
            "binId": bin_id,
            "weightKg": weight_kg,
            "moistureRaw": moisture_raw,
            "wasteTag": waste_tag,
            "timestamp": "2024-01-01T00:00:00Z",
        }

    def recent(self) -> List[Dict[str, Any]]:
        return [
            {
                "binId": "BIN-1",
                "weightKg": 1.5,
                "moistureRaw": 300,
                "wasteTag": "paper",
                "timestamp": "2024-01-01T00:00:00Z",
            }
        ]

    def daily(self, days: Optional[int] = None) -> List[Dict[str, Any]]:
        self.days_requested.append(days)
        return [{"date": "2024-01-01", "totalKg": 4.0, "avgMoisture": 250.0, "count": 2}]

    def bin_stats(self, days: Optional[int] = None) -> List[Dict[str, Any]]:
        self.days_requested.append(days)
        return []

    def score(self, bin_id: str) -> Dict[str, Any]:
        return {
            "binId": bin_id,
            "score": 70,
            "totalKg": 5.0,
            "avgWeight": 1.0,
            "avgMoisture": 800.0,
            "entries": 5,
        }

    def top(self) -> Dict[str, Any]:
        return {
            "performers": [{"binId": "BIN-GOOD", "score": 100, "entries": 3}],
            "offenders": [],
        }

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def stub(monkeypatch) -> StubClient:
    client = StubClient(config=None)

    def factory(config):
        client.config = config
        return client

    monkeypatch.setattr("cli.app.ApiClient", factory)
    return client


def test_submit_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(
        app,
        ["submit", "BIN-7", "--weight", "2.5", "--moisture", "640", "--tag", "plastic"],
    )

    assert result.exit_code == 0, result.output
    assert "Reading recorded. id=reading-123" in result.stdout
    assert stub.submitted == [("BIN-7", 2.5, 640, "plastic")]
    assert stub.closed is True


def test_submit_rejects_negative_weight(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["submit", "BIN-7", "--weight", "-1", "--moisture", "10"])

    assert result.exit_code != 0
    assert stub.submitted == []


def test_recent_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["recent"])

    assert result.exit_code == 0
    assert "BIN-1" in result.stdout
    assert "1.50" in result.stdout


def test_daily_and_stats_pass_days(runner: CliRunner, stub: StubClient) -> None:
    daily = runner.invoke(app, ["daily", "--days", "14"])
    stats = runner.invoke(app, ["stats"])

    assert daily.exit_code == 0
    assert "2024-01-01" in daily.stdout
    assert stats.exit_code == 0
    assert "No readings in the selected window." in stats.stdout
    assert stub.days_requested == [14, None]


def test_score_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["--base-url", "http://binlytics.test/", "score", "BIN-9"])

    assert result.exit_code == 0
    assert "Segregation Score: 70 / 100" in result.stdout
    assert "binId: BIN-9" in result.stdout
    assert stub.config.base_url == "http://binlytics.test"


def test_top_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["top"])

    assert result.exit_code == 0
    assert "Top Performers" in result.stdout
    assert "BIN-GOOD" in result.stdout
    assert "No data available." in result.stdout


def _client_with(handler) -> ApiClient:
    client = ApiClient(CLIConfig(base_url="http://binlytics.test"))
    client._client = httpx.Client(
        base_url="http://binlytics.test", transport=httpx.MockTransport(handler)
    )
    return client


def test_api_client_posts_camel_case_body() -> None:
    seen: Dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = request.content
        return httpx.Response(201, json={"id": "abc"})

    client = _client_with(handler)
    payload = client.submit_reading("BIN-1", 1.0, 10, "glass")

    assert payload == {"id": "abc"}
    assert seen["path"] == "/api/waste"
    assert b'"binId"' in seen["body"] and b'"wasteTag"' in seen["body"]


def test_api_client_score_not_found() -> None:
    client = _client_with(lambda request: httpx.Response(404, json={"detail": "missing"}))

    with pytest.raises(typer.BadParameter):
        client.score("BIN-404")


def test_api_client_surfaces_server_detail(capsys) -> None:
    client = _client_with(
        lambda request: httpx.Response(400, json={"detail": "Invalid reading: weightKg"})
    )

    with pytest.raises(typer.Exit):
        client.submit_reading("BIN-1", -1.0, 10, "glass")

    assert "weightKg" in capsys.readouterr().err


def test_load_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "http://env.test/")
    monkeypatch.setenv("CLI_HTTP_TIMEOUT", "not-a-number")

    config = load_config()

    assert config.base_url == "http://env.test"
    assert config.timeout == 30.0


def test_api_client_score_quotes_bin_id() -> None:
    seen: Dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["raw_path"] = request.url.raw_path
        return httpx.Response(200, json={"binId": "BIN 7", "score": 100})

    client = _client_with(handler)

    assert client.score("BIN 7")["score"] == 100
    assert seen["raw_path"] == b"/api/bins/score/BIN%207"


def test_api_client_reports_unreachable_server(capsys) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client_with(handler)

    with pytest.raises(typer.Exit):
        client.score("BIN-1")

    assert "Could not reach http://binlytics.test" in capsys.readouterr().err
