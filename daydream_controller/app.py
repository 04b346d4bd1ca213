"""
Daydream controller runtime:
- Device registry (UDP gamepad bridge or Tk slider simulator)
- Presence detection on connect/disconnect notifications
- Orientation arm model: head pose + controller orientation -> hand pose
- Edge-triggered trackpad events (buttondown/up, touchstart/end, axismove)
- Terminal display of the transform and the latest events

Deps:
  pip install numpy pyyaml
"""

from __future__ import annotations

import logging

import numpy as np

from .config import parse_args
from .control.controller import DaydreamController
from .control.device import DeviceRegistry
from .control.display_provider import LoggingEventSink, TuiDisplayProvider
from .control.host import FixedHeadPoseSource, HeadPoseSource, NullAssetBinder
from .devices.udp_bridge import UdpBridgeRegistry

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build_udp_registry(cfg) -> UdpBridgeRegistry:
    return UdpBridgeRegistry(
        bridge_host=cfg.bridge_host,
        bridge_port=cfg.bridge_port,
        poll_ms=cfg.poll_ms,
    )


def build_registry(cfg) -> DeviceRegistry:
    if cfg.device_source == "udp":
        return _build_udp_registry(cfg)

    if cfg.device_source == "toy":
        try:
            import tkinter

            from .devices.toy_tk import ToyTkDeviceRegistry
        except ImportError:
            logger.exception("[DEVICE] failed to import Tk simulator")
            logger.warning("[DEVICE] fallback to UDP bridge")
            return _build_udp_registry(cfg)
        try:
            return ToyTkDeviceRegistry(
                title="Daydream Controller - Toy Simulator",
                head_height=cfg.head_height,
            )
        except tkinter.TclError:
            logger.exception("[DEVICE] failed to open Tk simulator window")
            logger.warning("[DEVICE] fallback to UDP bridge")
            return _build_udp_registry(cfg)

    raise RuntimeError(f"Unsupported device source: {cfg.device_source}")


def build_head_source(cfg, registry: DeviceRegistry) -> HeadPoseSource:
    if isinstance(registry, HeadPoseSource):
        return registry
    position = np.array([0.0, cfg.head_height, 0.0], dtype=np.float64)
    logger.info(
        "[SCENE] fixed head position (m): [%.3f, %.3f, %.3f]",
        position[0],
        position[1],
        position[2],
    )
    return FixedHeadPoseSource(position)


def main(argv=None):
    cfg = parse_args(argv)
    configure_logging(cfg.log_level)

    registry = build_registry(cfg)
    head_source = build_head_source(cfg, registry)
    display = TuiDisplayProvider(
        cli_output=cfg.cli_output,
        display_hz=cfg.display_hz,
        set_status=getattr(registry, "set_status", None),
    )
    controller = DaydreamController(
        registry=registry,
        head_source=head_source,
        transform_sink=display,
        event_sink=LoggingEventSink(display),
        asset_binder=NullAssetBinder(),
        config=cfg.component_config(),
        arm_params=cfg.arm_params(),
    )

    def on_tick(delta_s: float) -> None:
        controller.tick(delta_s)
        display.render()

    controller.play()
    try:
        registry.run(on_tick)
    except KeyboardInterrupt:
        logger.info("[SCENE] interrupted")
    finally:
        try:
            controller.remove()
        finally:
            display.close()
            registry.close()


if __name__ == "__main__":
    main()
