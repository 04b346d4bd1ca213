"""Host-side collaborator interfaces.

The frame loop only talks to the scene through these; a scene-graph runtime,
a terminal display or a test double can stand behind them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

import numpy as np

from .pose import HeadSample

ModelLoadedListener = Callable[[Mapping[str, Any]], None]


@dataclass(frozen=True)
class AssetDescriptor:
    """Visual asset the host should resolve and attach."""

    obj: str
    mtl: str
    pivot_offset: tuple[float, float, float] = (0.0, 0.0, 0.0)


class TransformSink:
    """Receives the entity transform computed each frame."""

    def set_rotation(self, rotation_deg: tuple[float, float, float]) -> None:
        raise NotImplementedError

    def set_position(self, position: tuple[float, float, float]) -> None:
        raise NotImplementedError


class AssetBinder:
    """Attaches/detaches the controller model and reports when it loaded.

    ``attach`` resolves asynchronously; the host then calls every registered
    model-loaded listener with a mapping of sub-mesh name -> mesh. A mesh
    exposes ``set_color(color)``.
    """

    def __init__(self) -> None:
        self._model_loaded_listeners: list[ModelLoadedListener] = []

    def attach(self, descriptor: AssetDescriptor) -> None:
        raise NotImplementedError

    def detach(self) -> None:
        raise NotImplementedError

    def add_model_loaded_listener(self, listener: ModelLoadedListener) -> None:
        if listener not in self._model_loaded_listeners:
            self._model_loaded_listeners.append(listener)

    def remove_model_loaded_listener(self, listener: ModelLoadedListener) -> None:
        if listener in self._model_loaded_listeners:
            self._model_loaded_listeners.remove(listener)

    def notify_model_loaded(self, meshes: Mapping[str, Any]) -> None:
        for listener in list(self._model_loaded_listeners):
            listener(meshes)


class NullAssetBinder(AssetBinder):
    """Binder for hosts that render nothing."""

    def attach(self, descriptor: AssetDescriptor) -> None:  # noqa: ARG002
        pass

    def detach(self) -> None:
        pass


class EventSink:
    """Receives discrete interaction events."""

    def emit(self, name: str, detail: dict[str, Any]) -> None:
        raise NotImplementedError


class HeadPoseSource:
    """Camera/viewer collaborator."""

    def get_head_sample(self) -> HeadSample:
        raise NotImplementedError


class FixedHeadPoseSource(HeadPoseSource):
    """Head held at a fixed pose, for runtimes without head tracking."""

    def __init__(self, position: np.ndarray, quaternion: np.ndarray | None = None):
        self.sample = HeadSample(
            quaternion=(
                np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float64)
                if quaternion is None
                else quaternion
            ),
            position=position,
        )

    def get_head_sample(self) -> HeadSample:
        return self.sample
