"""Button recolouring on the attached controller model."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

# Sub-mesh names in the stock controller model, keyed by button name.
BUTTON_MESH_NAMES = {
    "menu": "menubutton",
    "system": "systembutton",
    "trackpad": "touchpad",
}


class ButtonColorizer:
    def __init__(
        self,
        idle_color: str = "#FAFAFA",
        touched_color: str = "yellow",
        pressed_color: str = "orange",
    ):
        self.idle_color = idle_color
        self.touched_color = touched_color
        self.pressed_color = pressed_color
        self.button_meshes: Optional[dict[str, Any]] = None

    def bind_meshes(self, meshes: Mapping[str, Any]) -> None:
        self.button_meshes = {
            button: meshes[mesh_name]
            for button, mesh_name in BUTTON_MESH_NAMES.items()
            if meshes.get(mesh_name) is not None
        }
        missing = set(BUTTON_MESH_NAMES) - set(self.button_meshes)
        if missing:
            logger.info("[INPUT] model has no mesh for buttons: %s", sorted(missing))

    def unbind_meshes(self) -> None:
        self.button_meshes = None

    def color_for(self, state: str) -> str:
        if state in ("touchstart", "up"):
            return self.touched_color
        if state == "down":
            return self.pressed_color
        return self.idle_color

    def update(self, button_name: Optional[str], state: str) -> None:
        if self.button_meshes is None:
            return
        if button_name is None:
            return
        mesh = self.button_meshes.get(button_name)
        if mesh is None:
            return
        mesh.set_color(self.color_for(state))
