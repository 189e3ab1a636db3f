from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import Any

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from cyfra_client.backend.base import BackendBase
from cyfra_client.catalog.filters import FilterState
from cyfra_client.errors import CatalogFetchError, TransportError
from cyfra_client.models import FilterOptions, Tile, TileListing


logger = logging.getLogger("cyfra.catalog")

_TILES = TypeAdapter(list[Tile])
_NAMES = TypeAdapter(list[str])


class TileCatalogClient:
    """Resolves a filter into tiles, and loads the filter option lists."""

    def __init__(self, backend: BackendBase):
        self.backend = backend

    async def fetch_tiles(self, filter_state: FilterState) -> TileListing:
        params = filter_state.to_query_params()
        try:
            raw = await self.backend.list_tiles(params)
            tiles = _TILES.validate_python(raw)
        except (TransportError, PydanticValidationError) as exc:
            logger.warning("tiles_fetch_failed params=%s error=%s", params, exc)
            return TileListing(tiles=[], error="Error loading tiles")

        logger.info("tiles_fetched params=%s count=%d", params, len(tiles))
        return TileListing(tiles=tiles)

    async def fetch_filter_options(self) -> FilterOptions:
        names = ("regions", "categories", "countries")
        results = await asyncio.gather(
            self._fetch_names("regions", self.backend.list_regions()),
            self._fetch_names("categories", self.backend.list_categories()),
            self._fetch_names("countries", self.backend.list_countries()),
            return_exceptions=True,
        )

        options: dict[str, Any] = {"errors": {}}
        for name, result in zip(names, results):
            if isinstance(result, CatalogFetchError):
                options[name] = []
                options["errors"][name] = str(result)
                continue
            if isinstance(result, BaseException):
                raise result
            options[name] = result
        return FilterOptions.model_validate(options)

    async def _fetch_names(self, name: str, call: Awaitable[Any]) -> list[str]:
        try:
            return _NAMES.validate_python(await call)
        except (TransportError, PydanticValidationError) as exc:
            logger.warning("filter_options_failed list=%s error=%s", name, exc)
            raise CatalogFetchError(f"Failed to load {name}") from exc


def reconcile_selection(selected_id: str | None, listing: TileListing) -> str | None:
    """Keep a selection that is still listed, drop a stale one, else pick the first tile."""
    if selected_id:
        return selected_id if listing.get(selected_id) is not None else None
    if listing.tiles:
        return listing.tiles[0].id
    return None
