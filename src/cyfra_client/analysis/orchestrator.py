from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from cyfra_client.backend.base import BackendBase, BackendResponse
from cyfra_client.errors import (
    AnalysisError,
    AnalysisInProgressError,
    TransportError,
    ValidationError,
)
from cyfra_client.models import (
    MAX_DIMENSION,
    MIN_DIMENSION,
    AnalysisRequest,
    Mode,
    RealAnalysisRequest,
    SyntheticAnalysisRequest,
)


logger = logging.getLogger("cyfra.analysis")

GENERIC_FAILURE = "analysis failed"


@dataclass
class AnalysisSelection:
    """Raw user choices; nothing here is trusted until ``build_request``."""

    tile_id: str | None = None
    date: dt.date | str | None = None
    width: int | str | None = None
    height: int | str | None = None
    indices: list[str] = field(default_factory=list)


def _selected_indices(values: list[str]) -> list[str]:
    codes: list[str] = []
    for value in values or []:
        code = str(value).strip()
        if code and code not in codes:
            codes.append(code)
    return codes


def _parse_date(value: dt.date | str | None) -> dt.date | None:
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    text = value.strip()
    if not text:
        return None
    try:
        if "T" in text:
            return dt.datetime.fromisoformat(text).date()
        return dt.date.fromisoformat(text)
    except ValueError as exc:
        raise ValidationError("invalid date") from exc


def _parse_dimension(value: int | str | None) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _build_real(
    selection: AnalysisSelection, indices: list[str], today: dt.date
) -> RealAnalysisRequest:
    tile_id = (selection.tile_id or "").strip()
    date = _parse_date(selection.date) if tile_id else None
    if not tile_id or date is None:
        raise ValidationError("missing tile or date")
    if date > today:
        raise ValidationError("date in the future")
    return RealAnalysisRequest(tile_id=tile_id, date=date, indices=indices)


def _build_synthetic(
    selection: AnalysisSelection, indices: list[str], today: dt.date
) -> SyntheticAnalysisRequest:
    _ = today
    width = _parse_dimension(selection.width)
    height = _parse_dimension(selection.height)
    for value in (width, height):
        if value is None or not MIN_DIMENSION <= value <= MAX_DIMENSION:
            raise ValidationError("dimensions out of range")
    return SyntheticAnalysisRequest(width=width, height=height, indices=indices)


_BUILDERS: dict[Mode, Callable[[AnalysisSelection, list[str], dt.date], AnalysisRequest]] = {
    Mode.real: _build_real,
    Mode.synthetic: _build_synthetic,
}


def build_request(
    mode: Mode | str,
    selection: AnalysisSelection,
    *,
    today: dt.date | None = None,
) -> AnalysisRequest:
    """Validate a selection locally; the first failing check wins."""
    indices = _selected_indices(selection.indices)
    if not indices:
        raise ValidationError("no indices selected")
    builder = _BUILDERS[Mode(mode)]
    return builder(selection, indices, today or dt.date.today())


def failure_message(payload: Any) -> str:
    if isinstance(payload, dict):
        message = payload.get("error")
        if message:
            return str(message)
    return GENERIC_FAILURE


class AnalysisOrchestrator:
    """Submits one analysis at a time; overlapping submissions are rejected."""

    def __init__(self, backend: BackendBase):
        self.backend = backend
        self._in_flight = False
        self.submissions = 0

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def _endpoint(self, mode: str) -> Callable[[dict[str, Any]], Awaitable[BackendResponse]]:
        endpoints = {
            Mode.real.value: self.backend.analyze,
            Mode.synthetic.value: self.backend.analyze_synthetic,
        }
        return endpoints[mode]

    async def run_analysis(
        self,
        mode: Mode | str,
        selection: AnalysisSelection,
        *,
        today: dt.date | None = None,
    ) -> Any:
        if self._in_flight:
            raise AnalysisInProgressError("analysis already running")

        request = build_request(mode, selection, today=today)
        send = self._endpoint(request.mode)

        self._in_flight = True
        self.submissions += 1
        logger.info(
            "analysis_submitted indices=%s",
            ",".join(request.indices),
            extra={"mode": request.mode},
        )
        try:
            try:
                response = await send(request.to_payload())
            except TransportError as exc:
                logger.warning("analysis_unreachable error=%s", exc, extra={"mode": request.mode})
                raise AnalysisError(str(exc) or GENERIC_FAILURE) from exc

            if not response.ok:
                message = failure_message(response.payload)
                logger.warning(
                    "analysis_failed status=%s error=%s",
                    response.status,
                    message,
                    extra={"mode": request.mode},
                )
                raise AnalysisError(message)

            try:
                payload = response.require_payload()
            except TransportError as exc:
                raise AnalysisError(str(exc)) from exc
        finally:
            self._in_flight = False

        logger.info("analysis_succeeded status=%s", response.status, extra={"mode": request.mode})
        return payload
