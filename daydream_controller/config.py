"""CLI config and defaults."""

from __future__ import annotations

import argparse
import math
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from .control.arm_model import ArmModelParams
from .control.controller import ROTATION_OFFSET_AUTO, ComponentConfig


@dataclass(frozen=True)
class AppConfig:
    device_source: str = "udp"
    bridge_host: str = "127.0.0.1"
    bridge_port: int = 24568
    poll_ms: int = 11
    hand: str = "right"
    model: bool = True
    rotation_offset: float = 0.0
    button_color: str = "#FAFAFA"
    button_touched_color: str = "yellow"
    button_pressed_color: str = "orange"
    body_scale: float = 1.0
    position_smoothing: float = 0.5
    orientation_smoothing: float = 1.0
    head_height: float = 1.6
    display_hz: float = 5.0
    cli_output: str = "live"
    log_level: str = "info"

    def component_config(self) -> ComponentConfig:
        return ComponentConfig(
            button_color=self.button_color,
            button_touched_color=self.button_touched_color,
            button_pressed_color=self.button_pressed_color,
            model=self.model,
            rotation_offset=self.rotation_offset,
            hand=self.hand,
        )

    def arm_params(self) -> ArmModelParams:
        return ArmModelParams(
            body_scale=self.body_scale,
            position_smoothing=self.position_smoothing,
            orientation_smoothing=self.orientation_smoothing,
        )


_APP_CONFIG_FIELDS = {f.name for f in fields(AppConfig)}
_BOOL_FIELDS = {"model"}
_INT_FIELDS = {"bridge_port", "poll_ms"}
_FLOAT_FIELDS = {
    "rotation_offset",
    "body_scale",
    "position_smoothing",
    "orientation_smoothing",
    "head_height",
    "display_hz",
}
_STRING_FIELDS = {
    "device_source",
    "bridge_host",
    "hand",
    "button_color",
    "button_touched_color",
    "button_pressed_color",
    "cli_output",
    "log_level",
}
_KEY_ALIASES = {
    "no_model": "model",
}


def _parse_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        s = value.strip().lower()
        if s in {"1", "true", "yes", "on"}:
            return True
        if s in {"0", "false", "no", "off"}:
            return False
    raise ValueError(f"config key '{key}' expects a bool, got {value!r}")


def _coerce_config_value(key: str, value: Any) -> Any:
    try:
        if key in _BOOL_FIELDS:
            return _parse_bool(value, key)
        if key in _INT_FIELDS:
            return int(value)
        if key in _FLOAT_FIELDS:
            return float(value)
        if key in _STRING_FIELDS:
            return "" if value is None else str(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid value for config key '{key}': {value!r}") from exc
    raise ValueError(f"unsupported config key '{key}'")


def _normalize_config_key(raw_key: Any) -> str:
    if not isinstance(raw_key, str):
        raise ValueError(f"config key must be string, got {type(raw_key).__name__}")
    key = raw_key.strip().replace("-", "_")
    if not key:
        raise ValueError("config key cannot be empty")
    return _KEY_ALIASES.get(key, key)


def _load_yaml_config(path: str) -> dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise ValueError(f"--config file not found: {p}")
    if not p.is_file():
        raise ValueError(f"--config must point to a file: {p}")

    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"failed to read --config file {p}: {exc}") from exc
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"failed to parse YAML config {p}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"--config root must be a mapping/object, got {type(loaded).__name__}")

    normalized: dict[str, Any] = {}
    for raw_key, raw_value in loaded.items():
        key = _normalize_config_key(raw_key)
        if key not in _APP_CONFIG_FIELDS:
            raise ValueError(f"unknown config key in {p}: {raw_key!r}")
        normalized[key] = _coerce_config_value(key, raw_value)
    return normalized


def _yaml_defaults_to_argparse_defaults(cfg: dict[str, Any]) -> dict[str, Any]:
    defaults: dict[str, Any] = {}
    for key, value in cfg.items():
        if key == "model":
            defaults["no_model"] = not bool(value)
        else:
            defaults[key] = value
    return defaults


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="daydream-controller")
    ap.add_argument(
        "--config",
        type=str,
        default="",
        help="YAML config file path. CLI args override YAML values.",
    )
    ap.add_argument(
        "--device-source",
        choices=["udp", "toy"],
        default="udp",
        help="Controller backend: UDP gamepad bridge or Tk slider simulator.",
    )
    ap.add_argument(
        "--bridge-host",
        type=str,
        default="127.0.0.1",
        help="Host for the UDP gamepad bridge stream.",
    )
    ap.add_argument(
        "--bridge-port",
        type=int,
        default=24568,
        help="Port for the UDP gamepad bridge stream.",
    )
    ap.add_argument(
        "--poll-ms",
        type=int,
        default=11,
        help="Bridge polling sleep in milliseconds.",
    )
    ap.add_argument(
        "--hand",
        choices=["left", "right"],
        default="right",
        help="Hand holding the controller; mirrors the arm model.",
    )
    ap.add_argument(
        "--no-model",
        action="store_true",
        help="Do not request the controller model from the host.",
    )
    ap.add_argument(
        "--rotation-offset",
        type=float,
        default=0.0,
        help=(
            "Degrees added to the z rotation. "
            f"{ROTATION_OFFSET_AUTO:g} requests a per-hand offset (currently 0)."
        ),
    )
    ap.add_argument("--button-color", type=str, default="#FAFAFA", help="Idle button color.")
    ap.add_argument(
        "--button-touched-color", type=str, default="yellow", help="Touched button color."
    )
    ap.add_argument(
        "--button-pressed-color", type=str, default="orange", help="Pressed button color."
    )
    ap.add_argument(
        "--body-scale",
        type=float,
        default=1.0,
        help="Arm model anthropometric scale (1.0 = ~1.75 m adult).",
    )
    ap.add_argument(
        "--position-smoothing",
        type=float,
        default=0.5,
        help="Hand position smoothing factor in [0.01,1]. Lower is smoother.",
    )
    ap.add_argument(
        "--orientation-smoothing",
        type=float,
        default=1.0,
        help="Hand orientation smoothing factor in [0.01,1]. 1 disables smoothing.",
    )
    ap.add_argument(
        "--head-height",
        type=float,
        default=1.6,
        help="Fixed head height in meters when the backend has no head tracking.",
    )
    ap.add_argument(
        "--display-hz",
        type=float,
        default=5.0,
        help="Display refresh rate in Hz (0 disables display updates).",
    )
    ap.add_argument(
        "--cli-output",
        choices=["live", "scroll"],
        default="live",
        help="TUI output mode: in-place live panel or scrolling logs.",
    )
    ap.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="info",
        help="Global log level.",
    )
    return ap


def validate_config(cfg: AppConfig) -> None:
    if cfg.device_source not in {"udp", "toy"}:
        raise ValueError(f"--device-source must be one of udp|toy, got {cfg.device_source}")
    if not cfg.bridge_host.strip():
        raise ValueError("--bridge-host must be non-empty")
    if not (1 <= cfg.bridge_port <= 65535):
        raise ValueError(f"--bridge-port must be in [1,65535], got {cfg.bridge_port}")
    if cfg.poll_ms <= 0:
        raise ValueError(f"--poll-ms must be > 0, got {cfg.poll_ms}")
    if cfg.hand not in {"left", "right"}:
        raise ValueError(f"--hand must be left|right, got {cfg.hand}")
    if not math.isfinite(cfg.rotation_offset):
        raise ValueError("--rotation-offset must be a finite number")
    for key in ("button_color", "button_touched_color", "button_pressed_color"):
        if not str(getattr(cfg, key)).strip():
            raise ValueError(f"--{key.replace('_', '-')} must be non-empty")
    if not (math.isfinite(cfg.body_scale) and cfg.body_scale > 0.0):
        raise ValueError(f"--body-scale must be > 0, got {cfg.body_scale}")
    if not (0.01 <= cfg.position_smoothing <= 1.0):
        raise ValueError(
            f"--position-smoothing must be in [0.01,1.0], got {cfg.position_smoothing}"
        )
    if not (0.01 <= cfg.orientation_smoothing <= 1.0):
        raise ValueError(
            f"--orientation-smoothing must be in [0.01,1.0], got {cfg.orientation_smoothing}"
        )
    if not math.isfinite(cfg.head_height):
        raise ValueError("--head-height must be a finite number")
    if cfg.display_hz < 0.0:
        raise ValueError(f"--display-hz must be >= 0, got {cfg.display_hz}")
    if cfg.cli_output not in {"live", "scroll"}:
        raise ValueError(f"--cli-output must be live|scroll, got {cfg.cli_output}")


def parse_args(argv=None) -> AppConfig:
    bootstrap = argparse.ArgumentParser(add_help=False)
    bootstrap.add_argument("--config", type=str, default="")
    bootstrap_ns, _ = bootstrap.parse_known_args(argv)

    yaml_cfg: dict[str, Any] = {}
    yaml_error: Optional[str] = None
    if bootstrap_ns.config:
        try:
            yaml_cfg = _load_yaml_config(bootstrap_ns.config)
        except ValueError as exc:
            yaml_error = str(exc)

    ap = build_arg_parser()
    if yaml_error is not None:
        ap.error(yaml_error)
    if yaml_cfg:
        ap.set_defaults(**_yaml_defaults_to_argparse_defaults(yaml_cfg))
    args = ap.parse_args(argv)

    cfg = AppConfig(
        device_source=args.device_source,
        bridge_host=args.bridge_host,
        bridge_port=args.bridge_port,
        poll_ms=args.poll_ms,
        hand=args.hand,
        model=not args.no_model,
        rotation_offset=float(args.rotation_offset),
        button_color=args.button_color,
        button_touched_color=args.button_touched_color,
        button_pressed_color=args.button_pressed_color,
        body_scale=float(args.body_scale),
        position_smoothing=float(args.position_smoothing),
        orientation_smoothing=float(args.orientation_smoothing),
        head_height=float(args.head_height),
        display_hz=float(args.display_hz),
        cli_output=args.cli_output,
        log_level=args.log_level,
    )
    try:
        validate_config(cfg)
    except ValueError as exc:
        ap.error(str(exc))
    return cfg
