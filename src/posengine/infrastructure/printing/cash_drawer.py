"""ESC/POS cash drawer kicked through the receipt printer's device file."""

from __future__ import annotations

import logging
from pathlib import Path

from posengine.domain.gateway.peripherals import CashDrawer, PeripheralError

logger = logging.getLogger(__name__)

# ESC p m t1 t2: pulse drawer pin 2 for 25 x 2ms on, 250 x 2ms off.
DRAWER_KICK = b"\x1bp\x00\x19\xfa"


class EscPosCashDrawer(CashDrawer):

    def __init__(self, device: Path) -> None:
        self._device = device

    def pulse(self) -> None:
        try:
            with self._device.open("wb") as port:
                port.write(DRAWER_KICK)
        except OSError as exc:
            raise PeripheralError(f"Cannot write to {self._device}: {exc}") from exc
        logger.info(f"Cash drawer pulsed via {self._device}")
