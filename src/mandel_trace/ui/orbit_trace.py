from __future__ import annotations

import pyglet
from pyglet import shapes
from typing import List, Optional
from .dependencies import UIDeps
from .types import UIElement
from pyglet.window import Window
from pydantic import BaseModel


class OrbitTraceOverlayConfig(BaseModel):
    line_color: tuple[int, int, int, int] = (255, 0, 0, 255)
    marker_color: tuple[int, int, int, int] = (255, 255, 255, 255)
    marker_radius: float = 3.0
    show_label: bool = True
    x_pad: int = 12
    y_pad: int = 12
    font_size: int = 12
    font_name: str = "Menlo"
    label_color: tuple[int, int, int, int] = (230, 230, 230, 255)


class OrbitTraceOverlay(UIElement):
    """Draws the bounces of the point under the cursor as a polyline."""

    def __init__(self, config: OrbitTraceOverlayConfig) -> None:
        self._deps: Optional[UIDeps] = None
        self._height: int = 0
        self._config = config

        self._batch = pyglet.graphics.Batch()
        self._segments: List[shapes.Line] = []
        self._marker: Optional[shapes.Circle] = None
        self._label = pyglet.text.Label(
            text="",
            x=0,
            y=0,
            anchor_x="left",
            anchor_y="bottom",
            font_size=config.font_size,
            font_name=config.font_name,
            color=config.label_color,
        )

    def mount(self, window: Window, deps: UIDeps) -> None:
        self._deps = deps
        self._height = deps.mapper.height

    def unmount(self, window: Window) -> None:
        self._clear()
        self._deps = None

    def _clear(self) -> None:
        for segment in self._segments:
            segment.delete()
        self._segments = []
        if self._marker is not None:
            self._marker.delete()
            self._marker = None
        self._label.text = ""

    def _flip(self, row: int) -> int:
        # pyglet puts y = 0 at the bottom, pixel rows start at the top
        return self._height - 1 - row

    def on_mouse_motion(self, x: int, y: int, dx: int, dy: int) -> None:
        if self._deps is None:
            return

        self._clear()
        pixel = (x, self._flip(y))
        if not self._deps.mapper.contains(pixel):
            return

        viewport = self._deps.get_viewport()
        engine = self._deps.engine
        c = self._deps.mapper.map_pixel_to_complex(pixel, viewport)
        bounces = engine.trace_orbit(c)

        for a, b in self._deps.mapper.polyline_segments(bounces, viewport):
            self._segments.append(
                shapes.Line(
                    a.x,
                    self._flip(a.y),
                    b.x,
                    self._flip(b.y),
                    color=self._config.line_color,
                    batch=self._batch,
                )
            )

        self._marker = shapes.Circle(
            x,
            y,
            self._config.marker_radius,
            color=self._config.marker_color,
            batch=self._batch,
        )

        if self._config.show_label:
            result = engine.classify(c)
            status = (
                "bounded"
                if result.bounded
                else f"escapes at {result.iterations}"
            )
            self._label.text = f"c={c:.6f}  {status}  bounces={len(bounces) - 1}"
            self._label.x = x + self._config.x_pad
            self._label.y = y + self._config.y_pad

    def on_mouse_leave(self, x: int, y: int) -> None:
        self._clear()

    def draw(self) -> None:
        if self._deps is None:
            return

        self._batch.draw()
        self._label.draw()
