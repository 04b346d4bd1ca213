import json

import numpy as np

from daydream_controller.devices.udp_bridge import (
    UdpBridgeRegistry,
    _parse_device_packet,
    _parse_device_payload,
)


class _FakeReceiver:
    def __init__(self):
        self.queue = []
        self.closed = False

    def recv_all(self):
        packets, self.queue = self.queue, []
        return packets

    def close(self):
        self.closed = True


def _packet(device_id="Daydream Controller", connected=True, orientation=None, **extra):
    payload = {
        "id": device_id,
        "connected": connected,
        "pose": {"orientation": orientation, "position": None},
    }
    payload.update(extra)
    return json.dumps(payload).encode("utf-8")


def _registry():
    receiver = _FakeReceiver()
    return UdpBridgeRegistry(receiver=receiver), receiver


def test_parse_device_payload_accepts_valid_schema():
    parsed = _parse_device_payload(
        {
            "id": "Daydream Controller",
            "pose": {"orientation": [0.0, 0.0, 0.0, 1.0]},
            "buttons": [{"pressed": True, "touched": True}],
            "axes": [0.25, -0.5],
        }
    )
    assert parsed is not None
    device_id, connected, snapshot = parsed
    assert device_id == "Daydream Controller"
    assert connected is True
    np.testing.assert_allclose(snapshot.orientation_q(), [1.0, 0.0, 0.0, 0.0])
    assert snapshot.button(0).pressed is True
    assert snapshot.button(0).touched is True
    assert snapshot.axes == (0.25, -0.5)


def test_parse_device_packet_rejects_invalid_json():
    assert _parse_device_packet(b"{not-json") is None
    assert _parse_device_packet(b"[1, 2]") is None


def test_parse_device_payload_rejects_missing_id_and_bad_axes():
    assert _parse_device_payload({"pose": {}}) is None
    assert _parse_device_payload({"id": "Daydream Controller", "axes": ["x"]}) is None
    assert _parse_device_payload({"id": "Daydream Controller", "pose": [1, 2]}) is None


def test_missing_orientation_reads_as_identity():
    parsed = _parse_device_payload({"id": "Daydream Controller", "pose": {"orientation": None}})
    assert parsed is not None
    np.testing.assert_allclose(parsed[2].orientation_q(), [1.0, 0.0, 0.0, 0.0])


def test_registry_notifies_connect_reconnect_and_disconnect():
    registry, receiver = _registry()
    seen = []
    registry.add_connection_listener(lambda connected, device_id: seen.append((connected, device_id)))

    receiver.queue = [_packet(), _packet()]
    registry.poll_once()
    assert seen == [(True, "Daydream Controller")]
    assert registry.is_device_present("Daydream Controller")

    receiver.queue = [_packet(connected=False)]
    registry.poll_once()
    assert seen[-1] == (False, "Daydream Controller")
    assert registry.get_devices() == []

    receiver.queue = [_packet()]
    registry.poll_once()
    assert seen[-1] == (True, "Daydream Controller")
    assert len(seen) == 3


def test_registry_updates_snapshot_and_drops_malformed_packets():
    registry, _ = _registry()
    assert registry.handle_packet(_packet(orientation=[0.0, 0.0, 0.0, 1.0])) is True
    assert registry.handle_packet(b"garbage") is False

    registry.handle_packet(_packet(axes=[0.5, 0.5]))
    (device,) = registry.get_devices_by_prefix("Daydream")
    assert device.get_snapshot().axes == (0.5, 0.5)


def test_registry_keeps_first_seen_order():
    registry, _ = _registry()
    registry.handle_packet(_packet(device_id="Other Pad"))
    registry.handle_packet(_packet(device_id="Daydream Controller 2"))
    registry.handle_packet(_packet(device_id="Daydream Controller 1"))
    ids = [d.id for d in registry.get_devices_by_prefix("Daydream Controller")]
    assert ids == ["Daydream Controller 2", "Daydream Controller 1"]


def test_close_closes_receiver_once():
    registry, receiver = _registry()
    registry.close()
    registry.close()
    assert receiver.closed is True
