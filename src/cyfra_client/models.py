from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

MIN_DIMENSION = 64
MAX_DIMENSION = 4096


class Mode(str, Enum):
    real = "real"
    synthetic = "synthetic"


class Tile(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str = ""
    description: str = ""
    category: str = ""
    country: str = ""
    region: str = ""

    @property
    def label(self) -> str:
        return f"{self.id} - {self.name}, {self.country}"


class TileListing(BaseModel):
    """Result of one catalog query; ``error`` is set when the query failed."""

    tiles: list[Tile] = Field(default_factory=list)
    error: str | None = None

    @property
    def count(self) -> int:
        return len(self.tiles)

    def get(self, tile_id: str | None) -> Tile | None:
        if not tile_id:
            return None
        for tile in self.tiles:
            if tile.id == tile_id:
                return tile
        return None


class FilterOptions(BaseModel):
    regions: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    countries: list[str] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict)


class AvailableDate(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    date: str
    size_mb: float = Field(default=0.0, validation_alias=AliasChoices("size_mb", "sizeInMegabytes"))
    online: bool = Field(default=False, validation_alias=AliasChoices("online", "isOnline"))

    @property
    def availability(self) -> str:
        return "Online" if self.online else "Offline"


class DateListing(BaseModel):
    tile_id: str
    products: list[AvailableDate] = Field(default_factory=list)
    total: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.products

    @property
    def message(self) -> str | None:
        if self.is_empty:
            return "No products found for this tile"
        return None


def _normalize_indices(values: list[str]) -> list[str]:
    seen: list[str] = []
    for value in values:
        code = str(value).strip()
        if code and code not in seen:
            seen.append(code)
    if not seen:
        raise ValueError("indices cannot be empty.")
    return seen


class RealAnalysisRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    mode: Literal["real"] = "real"
    tile_id: str = Field(alias="tileId", min_length=1)
    date: dt.date
    indices: list[str] = Field(min_length=1)

    @field_validator("indices")
    @classmethod
    def _validate_indices(cls, values: list[str]) -> list[str]:
        return _normalize_indices(values)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude={"mode"})


class SyntheticAnalysisRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    mode: Literal["synthetic"] = "synthetic"
    width: int = Field(ge=MIN_DIMENSION, le=MAX_DIMENSION)
    height: int = Field(ge=MIN_DIMENSION, le=MAX_DIMENSION)
    indices: list[str] = Field(min_length=1)

    @field_validator("indices")
    @classmethod
    def _validate_indices(cls, values: list[str]) -> list[str]:
        return _normalize_indices(values)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude={"mode"})


AnalysisRequest = Annotated[
    RealAnalysisRequest | SyntheticAnalysisRequest,
    Field(discriminator="mode"),
]


class IndexStats(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    min: float
    max: float
    mean: float
    std_dev: float = Field(validation_alias=AliasChoices("stdDev", "std_dev"))
    image_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("imageUrl", "previewImageReference", "image_url"),
    )


class AnalysisResult(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    tile_id: str | None = Field(default=None, validation_alias=AliasChoices("tileId", "tile_id"))
    date: str | None = None
    width: int
    height: int
    indices: dict[str, IndexStats] = Field(default_factory=dict)

    @property
    def is_synthetic(self) -> bool:
        return not self.tile_id or self.tile_id == "synthetic"

    @property
    def total_pixels(self) -> int:
        return self.width * self.height
