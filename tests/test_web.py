from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.schemas import DailyAggregate
from app.web import _bar_widths
from datastore.reading_store import ReadingStore
from services.aggregator import Aggregator
from services.waste import WasteService


@pytest.fixture
def service() -> WasteService:
    return WasteService(store=ReadingStore(name="test"), aggregator=Aggregator())


@pytest.fixture
def client(service: WasteService) -> Iterator[TestClient]:
    with TestClient(create_app(service=service)) as test_client:
        yield test_client


def test_dashboard_renders_without_readings(client: TestClient) -> None:
    response = client.get("/ui")

    assert response.status_code == 200
    assert "Binlytics" in response.text
    assert "No readings yet" in response.text


def test_dashboard_lists_readings_and_rankings(client: TestClient, service: WasteService) -> None:
    service.record_reading({"binId": "BIN-42", "weightKg": 2.5, "moistureRaw": 610, "wasteTag": "paper"})

    response = client.get("/ui")

    assert response.status_code == 200
    assert "BIN-42" in response.text
    assert "/ui/bins/BIN-42" in response.text
    assert "2.50" in response.text


def test_bin_detail_page(client: TestClient, service: WasteService) -> None:
    service.record_reading({"binId": "BIN-42", "weightKg": 2.5, "moistureRaw": 610, "wasteTag": "paper"})

    response = client.get("/ui/bins/BIN-42")

    assert response.status_code == 200
    assert "Segregation Score for BIN-42" in response.text
    assert ">78<" in response.text


def test_bin_detail_missing_bin(client: TestClient) -> None:
    response = client.get("/ui/bins/BIN-NONE")

    assert response.status_code == 404


def test_bar_widths_scale_to_heaviest_day() -> None:
    daily = [
        DailyAggregate(date="2024-01-01", total_kg=2.0, avg_moisture=1.0, count=1),
        DailyAggregate(date="2024-01-02", total_kg=8.0, avg_moisture=1.0, count=1),
    ]

    assert _bar_widths(daily) == {"2024-01-01": 25, "2024-01-02": 100}
    assert _bar_widths([]) == {}


def test_dashboard_shows_submit_and_lookup_forms(client: TestClient) -> None:
    response = client.get("/ui")

    assert "Submit Waste Reading" in response.text
    assert "Get Segregation Score" in response.text
    assert '<option value="glass"' in response.text


def test_submit_form_records_reading_and_redirects(client: TestClient, service: WasteService) -> None:
    response = client.post(
        "/ui/readings",
        data={"bin_id": "BIN-77", "weight_kg": "1.75", "moisture_raw": "640", "waste_tag": "metal"},
        follow_redirects=False,
    )

    assert response.status_code == 303
    assert response.headers["location"].endswith("/ui")
    [reading] = service.recent_readings()
    assert reading.bin_id == "BIN-77"
    assert reading.weight_kg == 1.75
    assert reading.moisture_raw == 640
    assert reading.waste_tag.value == "metal"


def test_submit_form_shows_validation_error(client: TestClient, service: WasteService) -> None:
    response = client.post(
        "/ui/readings",
        data={"bin_id": "ZONE-A/1", "weight_kg": "-2", "moisture_raw": "abc", "waste_tag": "paper"},
    )

    assert response.status_code == 400
    assert "Invalid reading" in response.text
    assert "binId" in response.text
    assert "weightKg" in response.text
    assert "moistureRaw" in response.text
    assert 'value="ZONE-A/1"' in response.text
    assert service.recent_readings() == []


def test_lookup_redirects_to_bin_page(client: TestClient, service: WasteService) -> None:
    service.record_reading({"binId": "BIN-42", "weightKg": 2.5, "moistureRaw": 610, "wasteTag": "paper"})

    response = client.get("/ui/lookup", params={"bin_id": " BIN-42 "}, follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"].endswith("/ui/bins/BIN-42")


def test_lookup_unknown_bin(client: TestClient) -> None:
    response = client.get("/ui/lookup", params={"bin_id": "BIN-GHOST"})

    assert response.status_code == 404
    assert "No readings found for bin" in response.text


@pytest.mark.parametrize("bin_id", ["", "ZONE-A/1"])
def test_lookup_rejects_blank_or_malformed_id(client: TestClient, bin_id: str) -> None:
    response = client.get("/ui/lookup", params={"bin_id": bin_id})

    assert response.status_code == 400
    assert "Enter a bin ID" in response.text
