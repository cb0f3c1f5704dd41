from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the Binlytics API."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def submit_reading(
        self, bin_id: str, weight_kg: float, moisture_raw: int, waste_tag: str
    ) -> Dict[str, Any]:
        body = {
            "binId": bin_id,
            "weightKg": weight_kg,
            "moistureRaw": moisture_raw,
            "wasteTag": waste_tag,
        }
        return self._request("POST", "/api/waste", json=body)

    def recent(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/waste/recent")

    def daily(self, days: Optional[int] = None) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/waste/daily", params=self._days(days))

    def bin_stats(self, days: Optional[int] = None) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/bins/stats", params=self._days(days))

    def score(self, bin_id: str) -> Dict[str, Any]:
        return self._request(
            "GET",
            f"/api/bins/score/{quote(bin_id, safe='')}",
            not_found=f"Bin {bin_id} has no readings.",
        )

    def top(self) -> Dict[str, Any]:
        return self._request("GET", "/api/admin/top")

    def _request(
        self, method: str, path: str, not_found: Optional[str] = None, **kwargs: Any
    ) -> Any:
        try:
            response = self._client.request(method, path, **kwargs)
            if response.status_code == 404 and not_found is not None:
                raise typer.BadParameter(not_found)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1) from exc
        return response.json()

    @staticmethod
    def _days(days: Optional[int]) -> Dict[str, int]:
        return {} if days is None else {"days": days}

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
