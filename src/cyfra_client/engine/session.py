from __future__ import annotations

import asyncio
import datetime as dt
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from cyfra_client.analysis.orchestrator import AnalysisOrchestrator, AnalysisSelection
from cyfra_client.analysis.results import SceneSummary, summarize_result
from cyfra_client.backend.base import BackendBase
from cyfra_client.backend.http import HttpBackend
from cyfra_client.catalog.dates import DateDiscoveryClient
from cyfra_client.catalog.debounce import Debouncer
from cyfra_client.catalog.filters import FilterState
from cyfra_client.catalog.tiles import TileCatalogClient, reconcile_selection
from cyfra_client.engine.mode import ModeController
from cyfra_client.errors import (
    AnalysisError,
    DateDiscoveryError,
    UnknownTileError,
    ValidationError,
)
from cyfra_client.models import DateListing, FilterOptions, Mode, Tile, TileListing
from cyfra_client.settings import Settings, get_settings


logger = logging.getLogger("cyfra.session")

StateListener = Callable[["SessionState", str], None]


@dataclass
class SessionState:
    """Everything a presentation layer needs to draw the client."""

    filter: FilterState = field(default_factory=FilterState)
    search_text: str = ""
    filter_options: FilterOptions = field(default_factory=FilterOptions)
    tiles: TileListing = field(default_factory=TileListing)
    selected_tile_id: str | None = None

    dates: DateListing | None = None
    dates_loading: bool = False
    dates_error: str | None = None

    analysis_date: dt.date | str | None = None
    width: int | str | None = None
    height: int | str | None = None
    indices: list[str] = field(default_factory=list)

    analysis_running: bool = False
    result: SceneSummary | None = None
    raw_result: Any = None
    error: str | None = None

    @property
    def tile_count(self) -> int:
        return self.tiles.count

    @property
    def selected_tile(self) -> Tile | None:
        return self.tiles.get(self.selected_tile_id)


class CyfraSession:
    """Single-loop controller owning the client state.

    Each handler mutates its own slice of ``state`` and notifies subscribers
    with the name of the slice that changed.
    """

    def __init__(
        self,
        backend: BackendBase,
        *,
        settings: Settings | None = None,
        owns_backend: bool = False,
    ):
        self.settings = settings or get_settings()
        self.backend = backend
        self._owns_backend = owns_backend
        self.state = SessionState(
            analysis_date=self.settings.cyfra_default_date,
            width=self.settings.cyfra_default_width,
            height=self.settings.cyfra_default_height,
        )
        self.catalog = TileCatalogClient(backend)
        self.dates = DateDiscoveryClient(
            backend,
            display_limit=self.settings.cyfra_date_display_limit,
        )
        self.orchestrator = AnalysisOrchestrator(backend)
        self.mode_controller = ModeController(on_enter_real=self.refresh_dates)
        self.search = Debouncer(
            self._on_search_emitted,
            delay=self.settings.cyfra_search_debounce_seconds,
        )
        self._listeners: list[StateListener] = []

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "CyfraSession":
        settings = settings or get_settings()
        backend = HttpBackend(
            base_url=settings.api_url,
            timeout_seconds=settings.cyfra_request_timeout_seconds,
        )
        return cls(backend, settings=settings, owns_backend=True)

    @property
    def mode(self) -> Mode:
        return self.mode_controller.mode

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, aspect: str) -> None:
        for listener in list(self._listeners):
            listener(self.state, aspect)

    async def start(self) -> None:
        await asyncio.gather(self.load_filter_options(), self.refresh_tiles())

    async def close(self) -> None:
        await self.search.aclose()
        if self._owns_backend:
            await self.backend.close()

    async def load_filter_options(self) -> FilterOptions:
        self.state.filter_options = await self.catalog.fetch_filter_options()
        self._notify("filter_options")
        return self.state.filter_options

    # Search and filters

    def type_search(self, text: str) -> None:
        self.state.search_text = text
        self.search.push(text)

    async def _on_search_emitted(self, text: str) -> None:
        await self._apply_filter(self.state.filter.set_query(text))

    async def set_query(self, text: str) -> None:
        self.search.cancel()
        await self._apply_filter(self.state.filter.set_query(text))

    async def set_region(self, region: str) -> None:
        self.search.cancel()
        await self._apply_filter(self.state.filter.set_region(region))

    async def set_category(self, category: str) -> None:
        self.search.cancel()
        await self._apply_filter(self.state.filter.set_category(category))

    async def set_country(self, country: str) -> None:
        self.search.cancel()
        await self._apply_filter(self.state.filter.set_country(country))

    async def _apply_filter(self, new_filter: FilterState) -> None:
        self.state.filter = new_filter
        self.state.search_text = new_filter.query
        self._notify("filter")
        await self.refresh_tiles()

    async def refresh_tiles(self) -> TileListing:
        listing = await self.catalog.fetch_tiles(self.state.filter)
        self.state.tiles = listing
        self._notify("tiles")

        selected = reconcile_selection(self.state.selected_tile_id, listing)
        if selected != self.state.selected_tile_id:
            await self._change_selection(selected)
        return listing

    # Tile and date selection

    async def select_tile(self, tile_id: str) -> None:
        if self.state.tiles.get(tile_id) is None:
            raise UnknownTileError(tile_id)
        if tile_id == self.state.selected_tile_id:
            return
        await self._change_selection(tile_id)

    async def resolve_tile(self, tile_id: str) -> Tile:
        """Look ``tile_id`` up in the current listing, then in the catalog."""
        tile = self.state.tiles.get(tile_id)
        if tile is None:
            listing = await self.catalog.fetch_tiles(FilterState().set_query(tile_id))
            tile = listing.get(tile_id)
        if tile is None:
            raise UnknownTileError(tile_id)
        return tile

    async def _change_selection(self, tile_id: str | None) -> None:
        self.state.selected_tile_id = tile_id
        self.state.dates = None
        self.state.dates_error = None
        self.state.dates_loading = False
        self._notify("selection")
        if tile_id and self.mode_controller.is_real:
            await self.refresh_dates()

    async def refresh_dates(self) -> DateListing | None:
        tile_id = self.state.selected_tile_id
        if not tile_id:
            return None

        self.state.dates_loading = True
        self._notify("dates")
        try:
            listing = await self.dates.fetch_available_dates(tile_id)
        except DateDiscoveryError as exc:
            listing = None
            error: str | None = str(exc)
        else:
            error = None

        if tile_id != self.state.selected_tile_id:
            logger.debug("dates_discarded tile_id=%s selected=%s", tile_id, self.state.selected_tile_id)
            return None

        self.state.dates = listing
        self.state.dates_error = error
        self.state.dates_loading = False
        self._notify("dates")
        return self.state.dates

    def set_date(self, value: dt.date | str | None) -> None:
        self.state.analysis_date = value
        self._notify("analysis_inputs")

    async def set_mode(self, mode: Mode | str) -> bool:
        changed = await self.mode_controller.switch(mode)
        if changed:
            self._notify("mode")
        return changed

    def set_dimensions(self, width: int | str | None, height: int | str | None) -> None:
        self.state.width = width
        self.state.height = height
        self._notify("analysis_inputs")

    def set_indices(self, indices: list[str]) -> None:
        self.state.indices = list(indices)
        self._notify("analysis_inputs")

    # Analysis

    def _selection(self) -> AnalysisSelection:
        tile = self.state.selected_tile
        return AnalysisSelection(
            tile_id=tile.id if tile is not None else None,
            date=self.state.analysis_date,
            width=self.state.width,
            height=self.state.height,
            indices=list(self.state.indices),
        )

    async def run_analysis(self) -> SceneSummary | None:
        if self.orchestrator.in_flight:
            logger.info("analysis_rejected reason=in_flight")
            return None

        self.state.error = None
        self.state.result = None
        self.state.raw_result = None
        self.state.analysis_running = True
        self._notify("analysis")
        try:
            payload = await self.orchestrator.run_analysis(self.mode, self._selection())
            summary = summarize_result(payload)
        except (ValidationError, AnalysisError) as exc:
            self.state.error = str(exc)
        except PydanticValidationError:
            logger.warning("analysis_unreadable_response")
            self.state.error = "analysis failed: unreadable response"
        else:
            self.state.raw_result = payload
            self.state.result = summary
        finally:
            self.state.analysis_running = self.orchestrator.in_flight
            self._notify("analysis")
        return self.state.result

    def snapshot(self) -> dict[str, Any]:
        state = self.state
        return {
            "mode": self.mode.value,
            "filter": state.filter.model_dump(),
            "search_text": state.search_text,
            "tile_count": state.tile_count,
            "tiles_error": state.tiles.error,
            "selected_tile_id": state.selected_tile_id,
            "dates": state.dates.model_dump() if state.dates is not None else None,
            "dates_error": state.dates_error,
            "analysis_date": str(state.analysis_date) if state.analysis_date else None,
            "width": state.width,
            "height": state.height,
            "indices": list(state.indices),
            "analysis_running": state.analysis_running,
            "error": state.error,
        }
