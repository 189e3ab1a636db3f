from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import pytest

from cyfra_client.backend.base import BackendBase, BackendResponse
from cyfra_client.engine.session import CyfraSession
from cyfra_client.errors import TransportError
from cyfra_client.settings import Settings


def make_tile(tile_id: str, **overrides: str) -> dict[str, str]:
    tile = {
        "id": tile_id,
        "name": f"Tile {tile_id}",
        "description": f"Scene around {tile_id}",
        "category": "Agriculture",
        "country": "Poland",
        "region": "Europe",
    }
    tile.update(overrides)
    return tile


def make_products(count: int) -> list[dict[str, Any]]:
    return [
        {"date": f"2024-10-{count - index:02d}", "size_mb": 800 + index, "online": index % 2 == 0}
        for index in range(count)
    ]


def analysis_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "tileId": "34UDC",
        "date": "2024-10-15",
        "width": 100,
        "height": 50,
        "indices": {
            "NDVI": {
                "min": -1,
                "max": 1,
                "mean": 0.42,
                "stdDev": 0.15,
                "imageUrl": "data:image/png;base64,AAAA",
            }
        },
    }
    payload.update(overrides)
    return payload


class FakeBackend(BackendBase):
    """In-memory stand-in for the catalog and analysis service."""

    def __init__(self, *, tiles: list[dict[str, str]] | None = None):
        self.tiles: list[dict[str, str]] | Any = tiles if tiles is not None else [
            make_tile("34UDC"),
            make_tile("33UUU", category="Forest", country="Germany"),
            make_tile("35MRT", category="Desert", country="Egypt", region="Africa"),
        ]
        self.regions: list[str] = ["Africa", "Europe"]
        self.categories: list[str] = ["Agriculture", "Desert", "Forest"]
        self.countries: list[str] = ["Egypt", "Germany", "Poland"]
        self.dates: dict[str, Any] = {}
        self.analysis_response = BackendResponse(status=200, payload=analysis_payload())
        self.synthetic_response = BackendResponse(
            status=200,
            payload=analysis_payload(tileId="synthetic", date=None, width=256, height=256),
        )
        self.failing: set[str] = set()
        self.analysis_gate: asyncio.Event | None = None
        self.tiles_gate: asyncio.Event | None = None
        self.date_gates: dict[str, asyncio.Event] = {}
        self.calls: list[tuple[str, Any]] = []

    def calls_to(self, name: str) -> list[Any]:
        return [args for call, args in self.calls if call == name]

    def _record(self, name: str, args: Any = None) -> None:
        self.calls.append((name, args))
        if name in self.failing:
            raise TransportError(f"{name} unreachable")

    async def list_regions(self) -> Any:
        self._record("regions")
        return self.regions

    async def list_categories(self) -> Any:
        self._record("categories")
        return self.categories

    async def list_countries(self) -> Any:
        self._record("countries")
        return self.countries

    async def list_tiles(self, params: dict[str, str]) -> Any:
        self._record("tiles", dict(params))
        if self.tiles_gate is not None:
            await self.tiles_gate.wait()
        if not isinstance(self.tiles, list):
            return self.tiles
        if "q" in params:
            needle = params["q"].lower()
            return [t for t in self.tiles if needle in t["id"].lower() or needle in t["name"].lower()]
        for key in ("region", "category", "country"):
            if key in params:
                return [t for t in self.tiles if t[key] == params[key]]
        return list(self.tiles)

    async def available_dates(self, tile_id: str) -> Any:
        self._record("dates", tile_id)
        if tile_id in self.date_gates:
            await self.date_gates[tile_id].wait()
        return self.dates.get(tile_id, {"products": make_products(3)})

    async def analyze(self, payload: dict[str, Any]) -> BackendResponse:
        self._record("analyze", payload)
        if self.analysis_gate is not None:
            await self.analysis_gate.wait()
        return self.analysis_response

    async def analyze_synthetic(self, payload: dict[str, Any]) -> BackendResponse:
        self._record("analyze_synthetic", payload)
        if self.analysis_gate is not None:
            await self.analysis_gate.wait()
        return self.synthetic_response


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=tmp_path / "missing.env",
        cyfra_api_url="http://backend.test",
        cyfra_search_debounce_seconds=0.05,
        cyfra_date_display_limit=10,
        cyfra_log_level="DEBUG",
    )


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def session(backend: FakeBackend, test_settings: Settings) -> CyfraSession:
    return CyfraSession(backend, settings=test_settings)


async def settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)
