#!/usr/bin/env python3
"""beacon_listener.py
Bridge between a ``bleak`` advertisement callback and :func:`beacon.decode`.

Contains the :class:`BeaconListener` class that knows how to pull the beacon
frame out of a BLE advertisement's manufacturer data and expose a callback
suitable for ``BleakScanner``.

Only the extraction / decoding glue lives here.  Running the scanner is up
to the caller; after a successful decode the record is handed to the
``on_beacon`` callback.
"""
from typing import Callable, Optional

from bleak import BLEDevice, AdvertisementData

from app_logger import logger
from beacon import BeaconRecord, Clock, PAYLOAD_MIN_LEN, decode, now_millis
from hex_helper import HexHelper
from timing_decorator import timed

# ----------------------------------------------------------------------
# Constants
# ----------------------------------------------------------------------
IBEACON_INDICATOR = b"\x02\x15"       # type 0x02, length 0x15 (21 bytes follow)
IBEACON_FRAME_LEN = 23                # indicator + uuid(16) + major(2) + minor(2) + power(1)
PAYLOAD_MIN_BYTES = PAYLOAD_MIN_LEN // 2

BeaconHandler = Callable[[str, BeaconRecord], None]


class BeaconListener:
    """
    Extracts beacon frames from BLE advertisements and decodes them.

    Parameters
    ----------
    on_beacon : callable
        Called as ``on_beacon(device_address, record)`` for every
        advertisement that decodes into a :class:`BeaconRecord`.
    device_name : str, optional
        When set, advertisements from devices with another name are ignored.
    clock : callable, optional
        Timestamp source forwarded to :func:`beacon.decode`.
    """

    def __init__(self, on_beacon: BeaconHandler, device_name: Optional[str] = None,
                 clock: Clock = now_millis):
        self.on_beacon = on_beacon
        self.device_name = device_name
        self.clock = clock

    # ------------------------------------------------------------------
    # 1. Pull the beacon frame out of the manufacturer data
    # ------------------------------------------------------------------
    @staticmethod
    def extract_payload(advertisement: AdvertisementData) -> Optional[str]:
        """
        Return the hex payload of the first manufacturer-data blob that is
        long enough to hold a beacon frame, or ``None``.

        ``bleak`` already strips the company identifier; the iBeacon
        indicator is dropped here when present.  The company identifier is
        not checked.
        """
        for company_id, data in advertisement.manufacturer_data.items():
            if len(data) == IBEACON_FRAME_LEN and data[:2] == IBEACON_INDICATOR:
                data = data[2:]
            if len(data) < PAYLOAD_MIN_BYTES:
                logger.debug("skip manufacturer data 0x%04X: %d bytes",
                             company_id, len(data))
                continue
            return HexHelper.to_hex_string(data)
        return None

    # ------------------------------------------------------------------
    # 2. Decode a single advertisement and hand it over
    # ------------------------------------------------------------------
    @timed("BeaconListener.parse_advertisement")
    def parse_advertisement(self, device_address: str,
                            advertisement: AdvertisementData) -> Optional[BeaconRecord]:
        """
        Decode *advertisement* and forward the record to ``on_beacon``.

        Advertisements that carry no beacon frame, or no RSSI, are ignored
        and ``None`` is returned.
        """
        payload = self.extract_payload(advertisement)
        if payload is None:
            return None

        rssi = getattr(advertisement, "rssi", None)
        if rssi is None:
            logger.debug("[%s] advertisement without RSSI", device_address)
            return None

        record = decode(payload, rssi, clock=self.clock)
        if record is None:
            return None

        logger.info("from %s – %s, d=%.1fm", device_address, record,
                    record.rounded_distance())
        self.on_beacon(device_address, record)
        return record

    # ------------------------------------------------------------------
    # 3. Callback required by BleakScanner
    # ------------------------------------------------------------------
    def detection_callback(self, device: BLEDevice, advertisement_data: AdvertisementData) -> None:
        """
        This method is passed directly to ``BleakScanner``.  It filters
        devices by name (when ``device_name`` is set) and forwards
        advertisements to :meth:`parse_advertisement`.
        """
        if self.device_name is None or device.name == self.device_name:
            self.parse_advertisement(device.address, advertisement_data)
