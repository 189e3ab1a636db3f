from __future__ import annotations


class CyfraError(Exception):
    """Base class for every error raised by the client."""


class ValidationError(CyfraError, ValueError):
    """Local, pre-network rejection of an analysis submission."""


class TransportError(CyfraError):
    """The backend could not be reached or its body could not be decoded."""

    def __init__(self, message: str, *, status: int | None = None):
        super().__init__(message)
        self.status = status


class CatalogFetchError(CyfraError):
    """Listing regions, categories, countries or tiles failed."""


class DateDiscoveryError(CyfraError):
    """Listing the available acquisition dates of a tile failed."""


class AnalysisError(CyfraError):
    """An analysis endpoint answered with a failure or was unreachable."""


class AnalysisInProgressError(AnalysisError):
    """A submission was attempted while another one is still in flight."""


class UnknownTileError(CyfraError, KeyError):
    """The tile id is not part of the latest catalog listing."""

    def __str__(self) -> str:
        return f"Unknown tile: {self.args[0]}" if self.args else "Unknown tile"
