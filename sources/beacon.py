"""beacon.py
Decoder and value object for iBeacon-style proximity beacons.

A payload is the hex text of the beacon frame *after* the manufacturer
marker has been stripped (see :mod:`beacon_listener`).  ``decode`` turns it,
together with the RSSI measured for the packet, into a :class:`BeaconRecord`
holding the device identity, the join code, an estimated distance and a
coarse proximity bucket.

Malformed payloads never raise: ``decode`` returns ``None`` so a scanning
loop can treat "not a beacon" as an ordinary outcome.
"""

import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from app_logger import logger
from hex_helper import HexHelper

# ----------------------------------------------------------------------
# Payload layout (offsets and widths in hex characters)
# ----------------------------------------------------------------------
IDENTITY_OFFSET = 0
IDENTITY_GROUPS = (8, 4, 4, 4, 12)    # 8-4-4-4-12 canonical UUID grouping
IDENTITY_LEN = sum(IDENTITY_GROUPS)   # 32
MAJOR_OFFSET = 32
MAJOR_LEN = 4
MINOR_OFFSET = 36
MINOR_LEN = 4
POWER_OFFSET = 40
POWER_LEN = 2
PAYLOAD_MIN_LEN = POWER_OFFSET + POWER_LEN   # 42

POWER_BIAS = 256                      # unsigned byte -> signed dBm at 1 m

# ----------------------------------------------------------------------
# Distance model
# ----------------------------------------------------------------------
PATH_LOSS_EXPONENT = 2                # free-space propagation
IMMEDIATE_MAX_M = 1.0
NEAR_MAX_M = 3.0

Clock = Callable[[], int]


class Proximity(Enum):
    """Coarse distance bucket of a beacon."""

    IMMEDIATE = 'immediate'
    NEAR = 'near'
    FAR = 'far'
    UNKNOWN = 'unknown'


def now_millis() -> int:
    """Current UNIX time in milliseconds."""
    return int(time.time() * 1000)


def estimate_distance(tx_power: int, rssi: float) -> float:
    """
    Log-distance path-loss estimate in metres.

    ``tx_power`` is the calibrated power at 1 m, ``rssi`` the measured
    strength of the packet, both in dBm.  Returns ``inf`` when the
    attenuation is too large to represent.
    """
    exponent = (tx_power - rssi) / (10 * PATH_LOSS_EXPONENT)
    try:
        return math.pow(10, exponent)
    except OverflowError:
        return math.inf


def classify_proximity(distance: float) -> Proximity:
    if distance < IMMEDIATE_MAX_M:
        return Proximity.IMMEDIATE
    if distance < NEAR_MAX_M:
        return Proximity.NEAR
    return Proximity.FAR


@dataclass(frozen=True, eq=False)
class BeaconRecord:
    """
    One observation of a beacon.

    Equality is lenient: two records are equal when identity, join code and
    distance rounded to 0.1 m match.  ``proximity`` and ``last_seen`` are
    ignored so repeated sightings of a device at the same spot compare equal.
    """

    identity: str
    join_code: str
    distance: float
    proximity: Proximity
    last_seen: int = field(default_factory=now_millis)

    def rounded_distance(self) -> float:
        """Distance rounded to 0.1 m, half away from zero."""
        if not math.isfinite(self.distance):
            return self.distance
        tenths = math.floor(abs(self.distance) * 10 + 0.5)
        return math.copysign(tenths, self.distance) / 10

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BeaconRecord):
            return NotImplemented
        return (
            other.identity == self.identity
            and other.join_code == self.join_code
            and other.rounded_distance() == self.rounded_distance()
        )

    def __hash__(self) -> int:
        return hash((self.identity, self.join_code, self.rounded_distance()))

    def __str__(self) -> str:
        return (
            f"UUID: {self.identity} CODE: {self.join_code} "
            f"PROXIMITY: {self.proximity.value}"
        )


def _format_identity(raw: str) -> str:
    groups = []
    start = 0
    for width in IDENTITY_GROUPS:
        groups.append(raw[start:start + width])
        start += width
    return "-".join(groups)


def decode(payload: str, rssi: float, clock: Clock = now_millis) -> Optional[BeaconRecord]:
    """
    Parse a hex payload into a :class:`BeaconRecord`.

    Parameters
    ----------
    payload : str
        Hex text laid out as identity (32), major (4), minor (4) and
        transmit power (2).  Anything after the power byte is ignored.
    rssi : float
        Signal strength measured for this packet, in dBm.  Must be a finite
        number; NaN, infinities and non-numbers are rejected.
    clock : callable, optional
        Source of the ``last_seen`` timestamp in epoch milliseconds.

    Returns
    -------
    BeaconRecord or None
        ``None`` when the payload is too short or contains non-hex
        characters in the decoded range, or when ``rssi``
        is not a finite number.
    """
    if not isinstance(payload, str):
        logger.debug("rejected payload of type %s", type(payload).__name__)
        return None
    if len(payload) < PAYLOAD_MIN_LEN:
        logger.debug("rejected payload %r: %d < %d chars",
                     payload, len(payload), PAYLOAD_MIN_LEN)
        return None

    frame = payload[:PAYLOAD_MIN_LEN]
    if not HexHelper.is_hex(frame):
        logger.debug("rejected payload %r: non-hex characters", payload)
        return None
    if isinstance(rssi, bool) or not isinstance(rssi, (int, float)) or not math.isfinite(rssi):
        logger.debug("rejected rssi %r for payload %r", rssi, payload)
        return None

    identity = _format_identity(frame[IDENTITY_OFFSET:IDENTITY_OFFSET + IDENTITY_LEN])
    major = frame[MAJOR_OFFSET:MAJOR_OFFSET + MAJOR_LEN]
    minor = frame[MINOR_OFFSET:MINOR_OFFSET + MINOR_LEN]

    # Join code travels as the hex value of its base-36 number
    join_code = HexHelper.decode_join_code(major, minor)
    tx_power = int(frame[POWER_OFFSET:POWER_OFFSET + POWER_LEN], 16) - POWER_BIAS

    distance = estimate_distance(tx_power, rssi)
    return BeaconRecord(
        identity=identity,
        join_code=join_code,
        distance=distance,
        proximity=classify_proximity(distance),
        last_seen=clock(),
    )

