from __future__ import annotations

import datetime as dt
from contextlib import AbstractContextManager

from anyio.from_thread import BlockingPortal, start_blocking_portal

from cyfra_client.analysis.orchestrator import AnalysisSelection, build_request
from cyfra_client.analysis.results import SceneSummary, summarize_result
from cyfra_client.backend.base import BackendBase
from cyfra_client.backend.http import HttpBackend
from cyfra_client.engine.session import CyfraSession
from cyfra_client.models import DateListing, FilterOptions, Mode, TileListing
from cyfra_client.settings import Settings, get_settings


class CyfraClient(AbstractContextManager["CyfraClient"]):
    """Blocking facade over ``CyfraSession`` for scripts and the CLI."""

    def __init__(
        self,
        *,
        api_url: str | None = None,
        settings: Settings | None = None,
        backend: BackendBase | None = None,
    ):
        self.settings = settings or get_settings()
        owns_backend = backend is None
        if backend is None:
            backend = HttpBackend(
                base_url=(api_url or self.settings.api_url),
                timeout_seconds=self.settings.cyfra_request_timeout_seconds,
            )

        self._portal_cm = start_blocking_portal()
        self._portal: BlockingPortal | None = self._portal_cm.__enter__()
        self.session = CyfraSession(backend, settings=self.settings, owns_backend=owns_backend)

    def close(self) -> None:
        if self._portal is not None:
            self._portal.call(self.session.close)
            self._portal_cm.__exit__(None, None, None)
        self._portal = None

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _require_portal(self) -> BlockingPortal:
        if self._portal is None:
            raise RuntimeError("CyfraClient is closed.")
        return self._portal

    def filter_options(self) -> FilterOptions:
        return self._require_portal().call(self.session.load_filter_options)

    def search_tiles(
        self,
        *,
        query: str | None = None,
        region: str | None = None,
        category: str | None = None,
        country: str | None = None,
    ) -> TileListing:
        portal = self._require_portal()
        if query:
            portal.call(self.session.set_query, query)
        elif region:
            portal.call(self.session.set_region, region)
        elif category:
            portal.call(self.session.set_category, category)
        elif country:
            portal.call(self.session.set_country, country)
        else:
            portal.call(self.session.set_query, "")
        return self.session.state.tiles

    def available_dates(self, tile_id: str) -> DateListing | None:
        return self._require_portal().call(self.session.dates.fetch_available_dates, tile_id)

    def analyze_real(
        self,
        tile_id: str,
        date: dt.date | str,
        indices: list[str],
    ) -> SceneSummary:
        """Analyze a catalog tile; ids the catalog does not know raise ``UnknownTileError``."""
        selection = AnalysisSelection(tile_id=tile_id, date=date, indices=indices)
        build_request(Mode.real, selection)
        self._require_portal().call(self.session.resolve_tile, tile_id)
        return self._analyze(Mode.real, selection)

    def analyze_synthetic(self, width: int, height: int, indices: list[str]) -> SceneSummary:
        selection = AnalysisSelection(width=width, height=height, indices=indices)
        return self._analyze(Mode.synthetic, selection)

    def _analyze(self, mode: Mode, selection: AnalysisSelection) -> SceneSummary:
        payload = self._require_portal().call(
            self.session.orchestrator.run_analysis,
            mode,
            selection,
        )
        return summarize_result(payload)
