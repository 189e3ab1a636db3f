from __future__ import annotations

import logging

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from cyfra_client.backend.base import BackendBase
from cyfra_client.errors import DateDiscoveryError, TransportError
from cyfra_client.models import AvailableDate, DateListing


logger = logging.getLogger("cyfra.dates")

_PRODUCTS = TypeAdapter(list[AvailableDate])


class DateDiscoveryClient:
    """Lists the acquisition dates the backend holds for one tile."""

    def __init__(self, backend: BackendBase, *, display_limit: int = 10):
        self.backend = backend
        self.display_limit = max(1, int(display_limit))

    async def fetch_available_dates(self, tile_id: str | None) -> DateListing | None:
        if not tile_id:
            return None

        try:
            raw = await self.backend.available_dates(tile_id)
        except TransportError as exc:
            logger.warning("dates_fetch_failed tile=%s error=%s", tile_id, exc)
            raise DateDiscoveryError(f"Failed to load dates: {exc}") from exc

        if not isinstance(raw, dict):
            raise DateDiscoveryError("Failed to load dates: unexpected response")
        if raw.get("error"):
            raise DateDiscoveryError(str(raw["error"]))

        try:
            products = _PRODUCTS.validate_python(raw.get("products") or [])
        except PydanticValidationError as exc:
            raise DateDiscoveryError("Failed to load dates: invalid product list") from exc

        logger.info(
            "dates_fetched tile=%s total=%d shown=%d",
            tile_id,
            len(products),
            min(len(products), self.display_limit),
            extra={"tile_id": tile_id},
        )
        return DateListing(
            tile_id=tile_id,
            products=products[: self.display_limit],
            total=len(products),
        )
