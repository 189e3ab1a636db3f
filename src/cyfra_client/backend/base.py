from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from cyfra_client.errors import TransportError


@dataclass(frozen=True)
class BackendResponse:
    status: int
    payload: Any = None
    decode_error: str | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def require_payload(self) -> Any:
        if self.decode_error is not None:
            raise TransportError(self.decode_error, status=self.status)
        return self.payload


class BackendBase(ABC):
    """Endpoints of the tile catalog and index analysis service."""

    @abstractmethod
    async def list_regions(self) -> Any:
        raise NotImplementedError

    @abstractmethod
    async def list_categories(self) -> Any:
        raise NotImplementedError

    @abstractmethod
    async def list_countries(self) -> Any:
        raise NotImplementedError

    @abstractmethod
    async def list_tiles(self, params: dict[str, str]) -> Any:
        raise NotImplementedError

    @abstractmethod
    async def available_dates(self, tile_id: str) -> Any:
        raise NotImplementedError

    @abstractmethod
    async def analyze(self, payload: dict[str, Any]) -> BackendResponse:
        raise NotImplementedError

    @abstractmethod
    async def analyze_synthetic(self, payload: dict[str, Any]) -> BackendResponse:
        raise NotImplementedError

    async def close(self) -> None:
        return None
