from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from cyfra_client.models import Mode


logger = logging.getLogger("cyfra.session")


class ModeController:
    """Real/Synthetic switch; only explicit calls to ``switch`` change it.

    Entering Real runs ``on_enter_real`` so the dates of an already selected
    tile are checked again. Entering Synthetic has no side effect.
    """

    def __init__(
        self,
        *,
        initial: Mode = Mode.real,
        on_enter_real: Callable[[], Awaitable[None]] | None = None,
    ):
        self._mode = Mode(initial)
        self._on_enter_real = on_enter_real

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def is_real(self) -> bool:
        return self._mode is Mode.real

    async def switch(self, mode: Mode | str) -> bool:
        target = Mode(mode)
        if target is self._mode:
            return False
        previous, self._mode = self._mode, target
        logger.info("mode_switched from=%s to=%s", previous.value, target.value)
        if target is Mode.real and self._on_enter_real is not None:
            await self._on_enter_real()
        return True
