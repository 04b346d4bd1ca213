"""Daydream-style 3DoF controller: arm model, input events and frame loop."""

from .control.arm_model import ArmModelParams, OrientationArmModel
from .control.controller import ComponentConfig, DaydreamController
from .control.input_tracker import InputEventTracker

__all__ = [
    "ArmModelParams",
    "ComponentConfig",
    "DaydreamController",
    "InputEventTracker",
    "OrientationArmModel",
]
