"""Controller registry fed by an external gamepad bridge over UDP.

This registry intentionally avoids direct device bindings. A bridge process
(browser page, OpenXR shim, BLE reader) owns the hardware and forwards one
JSON snapshot per device per frame to localhost.
"""

from __future__ import annotations

import json
import logging
import socket
import time
from typing import Callable, Optional, Sequence, Tuple

from ..control.device import (
    ControllerDevice,
    DeviceRegistry,
    DeviceSnapshot,
    snapshot_from_payload,
)

logger = logging.getLogger(__name__)

ParsedPacket = Tuple[str, bool, DeviceSnapshot]


def _parse_device_payload(payload: dict) -> Optional[ParsedPacket]:
    device_id = payload.get("id")
    if not isinstance(device_id, str) or not device_id:
        return None
    connected = bool(payload.get("connected", True))
    pose = payload.get("pose")
    if pose is not None and not isinstance(pose, dict):
        return None
    try:
        snapshot = snapshot_from_payload(payload)
    except (TypeError, ValueError, AttributeError):
        return None
    return device_id, connected, snapshot


def _parse_device_packet(data: bytes) -> Optional[ParsedPacket]:
    try:
        payload = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None
    if not isinstance(payload, dict):
        return None
    return _parse_device_payload(payload)


class _UdpPacketReceiver:
    def __init__(self, host: str, port: int):
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind((host, int(port)))
        self.sock.setblocking(False)

    def recv_all(self) -> list[bytes]:
        packets = []
        while True:
            try:
                data, _ = self.sock.recvfrom(65535)
            except BlockingIOError:
                break
            except OSError:
                break
            packets.append(data)
        return packets

    def close(self) -> None:
        self.sock.close()


class BridgeDevice(ControllerDevice):
    def __init__(self, device_id: str, snapshot: DeviceSnapshot):
        self.id = device_id
        self.snapshot = snapshot
        self.connected = True

    def get_snapshot(self) -> Optional[DeviceSnapshot]:
        if not self.connected:
            return None
        return self.snapshot


class UdpBridgeRegistry(DeviceRegistry):
    """Devices in first-seen order, fed by bridge packets.

    Expected JSON packet schema:
    {
      "id": "Daydream Controller",
      "connected": true,
      "pose": {"orientation": [x, y, z, w] | null, "position": null},
      "buttons": [{"pressed": false, "touched": false}],
      "axes": [0.0, 0.0]
    }
    A packet with "connected": false removes the device.
    """

    def __init__(
        self,
        bridge_host: str = "127.0.0.1",
        bridge_port: int = 24568,
        poll_ms: int = 11,
        receiver=None,
    ):
        super().__init__()
        self.bridge_host = str(bridge_host)
        self.bridge_port = int(bridge_port)
        self.poll_s = max(0.001, float(poll_ms) / 1000.0)
        self._receiver = receiver or _UdpPacketReceiver(self.bridge_host, self.bridge_port)
        self._devices: dict[str, BridgeDevice] = {}

        self._closed = False
        self._last_warn_t = 0.0
        self._last_recv_t = 0.0
        self._recv_count = 0

        logger.info(
            "[DEVICE] registry=udp-bridge (host=%s, port=%s, poll_ms=%.1f)",
            self.bridge_host,
            self.bridge_port,
            self.poll_s * 1000.0,
        )

    def get_devices(self) -> Sequence[ControllerDevice]:
        return [d for d in self._devices.values() if d.connected]

    def handle_packet(self, data: bytes) -> bool:
        parsed = _parse_device_packet(data)
        if parsed is None:
            logger.debug("[DEVICE] dropped malformed bridge packet (%d bytes)", len(data))
            return False
        device_id, connected, snapshot = parsed
        device = self._devices.get(device_id)

        if connected:
            if device is None:
                self._devices[device_id] = BridgeDevice(device_id, snapshot)
                logger.info("[DEVICE] connected %s", device_id)
                self._notify(True, device_id)
            elif not device.connected:
                device.snapshot = snapshot
                device.connected = True
                logger.info("[DEVICE] reconnected %s", device_id)
                self._notify(True, device_id)
            else:
                device.snapshot = snapshot
        elif device is not None and device.connected:
            device.connected = False
            logger.info("[DEVICE] disconnected %s", device_id)
            self._notify(False, device_id)
        return True

    def poll_once(self) -> None:
        packets = self._receiver.recv_all()
        if not packets:
            now = time.time()
            # Only warn if we have not received any packet recently.
            if (now - self._last_recv_t) > 2.0 and (now - self._last_warn_t) > 2.0:
                logger.info(
                    "[DEVICE] waiting for bridge packets on %s:%s",
                    self.bridge_host,
                    self.bridge_port,
                )
                self._last_warn_t = now
            return

        self._last_recv_t = time.time()
        for data in packets:
            if self.handle_packet(data):
                self._recv_count += 1
                if self._recv_count == 1:
                    logger.info(
                        "[DEVICE] first bridge packet received on %s:%s",
                        self.bridge_host,
                        self.bridge_port,
                    )

    def run(self, on_tick: Callable[[float], None]) -> None:
        last_t = time.monotonic()
        while not self._closed:
            self.poll_once()
            now = time.monotonic()
            on_tick(now - last_t)
            last_t = now
            time.sleep(self.poll_s)
        self.close()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._receiver.close()
        except OSError:
            pass
