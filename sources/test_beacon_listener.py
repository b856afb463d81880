"""Tests for the bleak advertisement adapter."""

from types import SimpleNamespace

import pytest

from beacon import Proximity
from beacon_listener import BeaconListener

PAYLOAD = "1234567890ABCDEF1234567890ABCDEF" + "0003" + "0007" + "C6"
APPLE = 0x004C


def advertisement(manufacturer_data, rssi=-70):
    return SimpleNamespace(manufacturer_data=manufacturer_data, rssi=rssi)


def ibeacon_frame(payload=PAYLOAD):
    return b"\x02\x15" + bytes.fromhex(payload)


@pytest.fixture
def received():
    return []


@pytest.fixture
def listener(received):
    return BeaconListener(
        on_beacon=lambda address, record: received.append((address, record)),
        clock=lambda: 42,
    )


class TestExtractPayload:

    def test_strips_ibeacon_indicator(self):
        adv = advertisement({APPLE: ibeacon_frame()})

        assert BeaconListener.extract_payload(adv) == PAYLOAD

    def test_bare_frame_is_used_as_is(self):
        adv = advertisement({0x0059: bytes.fromhex(PAYLOAD)})

        assert BeaconListener.extract_payload(adv) == PAYLOAD

    def test_skips_short_blobs(self):
        adv = advertisement({0x0006: b"\x01\x02\x03", APPLE: ibeacon_frame()})

        assert BeaconListener.extract_payload(adv) == PAYLOAD

    def test_no_manufacturer_data(self):
        assert BeaconListener.extract_payload(advertisement({})) is None


class TestParseAdvertisement:

    def test_forwards_decoded_record(self, listener, received):
        record = listener.parse_advertisement("AA:BB:CC:DD:EE:FF", advertisement({APPLE: ibeacon_frame()}))

        assert received == [("AA:BB:CC:DD:EE:FF", record)]
        assert record.identity == "12345678-90AB-CDEF-1234-567890ABCDEF"
        assert record.join_code == "47pj"
        assert record.proximity is Proximity.FAR
        assert record.last_seen == 42

    def test_ignores_non_beacon(self, listener, received):
        assert listener.parse_advertisement("addr", advertisement({APPLE: b"\x10\x05\x01"})) is None
        assert received == []

    def test_ignores_missing_rssi(self, listener, received):
        adv = SimpleNamespace(manufacturer_data={APPLE: ibeacon_frame()})

        assert listener.parse_advertisement("addr", adv) is None
        assert received == []

    def test_ignores_nan_rssi(self, listener, received):
        adv = advertisement({APPLE: ibeacon_frame()}, rssi=float("nan"))

        assert listener.parse_advertisement("addr", adv) is None
        assert received == []


class TestDetectionCallback:

    def test_without_name_filter(self, listener, received):
        device = SimpleNamespace(name=None, address="11:22:33:44:55:66")

        listener.detection_callback(device, advertisement({APPLE: ibeacon_frame()}))

        assert [address for address, _ in received] == ["11:22:33:44:55:66"]

    def test_name_filter(self, received):
        listener = BeaconListener(
            lambda address, record: received.append(address), device_name="Spot"
        )
        adv = advertisement({APPLE: ibeacon_frame()})

        listener.detection_callback(SimpleNamespace(name="Other", address="a"), adv)
        listener.detection_callback(SimpleNamespace(name="Spot", address="b"), adv)

        assert received == ["b"]
