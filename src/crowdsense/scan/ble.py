"""Bluetooth LE discovery sensor backed by bleak."""

from __future__ import annotations

import logging
from typing import Any

from bleak import BleakScanner
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData
from bleak.exc import BleakError

from crowdsense.scan.sensor import DiscoverySink

_logger = logging.getLogger(__name__)


class BleakDiscoverySensor:
    """Continuous BLE scan that forwards advertisements to an attached sink.

    The sensor is ready once the adapter has started scanning.  Events
    are only forwarded while a sink is attached, so a scan session sees
    exactly the advertisements received inside its window.

    Usage::

        async with BleakDiscoverySensor() as sensor:
            tally = await Scanner(sensor, location).scan()
    """

    def __init__(self, *, adapter: str | None = None) -> None:
        self._adapter = adapter
        self._scanner: BleakScanner | None = None
        self._sink: DiscoverySink | None = None

    @property
    def is_ready(self) -> bool:
        return self._scanner is not None

    async def power_on(self) -> bool:
        """Start the adapter. Returns ``False`` when Bluetooth is unavailable."""
        if self._scanner is not None:
            return True
        kwargs: dict[str, Any] = {"detection_callback": self._on_detection}
        if self._adapter:
            kwargs["adapter"] = self._adapter
        scanner = BleakScanner(**kwargs)
        try:
            await scanner.start()
        except (BleakError, OSError) as exc:
            _logger.warning("Bluetooth is not available: %s", exc)
            return False
        self._scanner = scanner
        _logger.info("Bluetooth is on")
        return True

    async def power_off(self) -> None:
        scanner = self._scanner
        self._scanner = None
        self._sink = None
        if scanner is None:
            return
        try:
            await scanner.stop()
        except (BleakError, OSError):
            _logger.debug("Bluetooth scanner stop failed", exc_info=True)

    async def __aenter__(self) -> BleakDiscoverySensor:
        await self.power_on()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.power_off()

    def attach(self, sink: DiscoverySink) -> None:
        self._sink = sink

    def detach(self, sink: DiscoverySink) -> None:
        if self._sink == sink:
            self._sink = None

    def _on_detection(self, device: BLEDevice, adv: AdvertisementData) -> None:
        sink = self._sink
        if sink is None:
            return
        name = adv.local_name or device.name
        sink(device.address, name, adv.rssi)
