"""Display contract for analysis responses.

Statistics keep their raw values; only the ``*_text`` renderings are rounded.
Indices are summarised one by one in the order the backend returned them.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from cyfra_client.models import AnalysisResult, IndexStats, Tile

DISPLAY_DECIMALS = 3

INDEX_NAMES: dict[str, str] = {
    "NDVI": "NDVI - Normalized Difference Vegetation Index",
    "EVI": "EVI - Enhanced Vegetation Index",
    "NDWI": "NDWI - Normalized Difference Water Index",
    "SAVI": "SAVI - Soil-Adjusted Vegetation Index",
    "NBR": "NBR - Normalized Burn Ratio",
}


def index_full_name(code: str) -> str:
    return INDEX_NAMES.get(code, code)


def format_stat(value: float, decimals: int = DISPLAY_DECIMALS) -> str:
    return f"{value:.{decimals}f}"


class IndexSummary(BaseModel):
    code: str
    name: str
    min: float
    max: float
    mean: float
    std_dev: float
    image_url: str | None = None

    @property
    def range_text(self) -> str:
        return f"[{format_stat(self.min)}, {format_stat(self.max)}]"

    @property
    def mean_text(self) -> str:
        return format_stat(self.mean)

    @property
    def std_dev_text(self) -> str:
        return format_stat(self.std_dev)


class SceneSummary(BaseModel):
    tile_id: str | None = None
    date: str | None = None
    width: int
    height: int
    total_pixels: int
    indices: list[IndexSummary] = Field(default_factory=list)

    @property
    def index_count(self) -> int:
        return len(self.indices)

    @property
    def dimensions_text(self) -> str:
        return f"{self.width} × {self.height} pixels"

    @property
    def total_pixels_text(self) -> str:
        return f"{self.total_pixels:,}"


def summarize_index(code: str, stats: IndexStats) -> IndexSummary:
    return IndexSummary(
        code=code,
        name=index_full_name(code),
        min=stats.min,
        max=stats.max,
        mean=stats.mean,
        std_dev=stats.std_dev,
        image_url=stats.image_url,
    )


def summarize_result(payload: AnalysisResult | dict[str, Any]) -> SceneSummary:
    result = (
        payload if isinstance(payload, AnalysisResult) else AnalysisResult.model_validate(payload)
    )
    return SceneSummary(
        tile_id=result.tile_id,
        date=result.date,
        width=result.width,
        height=result.height,
        total_pixels=result.total_pixels,
        indices=[summarize_index(code, stats) for code, stats in result.indices.items()],
    )


def tile_details(tile: Tile) -> dict[str, str]:
    return {
        "id": tile.id,
        "label": tile.label,
        "name": tile.name,
        "description": tile.description,
        "category": tile.category,
        "location": f"{tile.country} ({tile.region})",
    }
