from __future__ import annotations

import os
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mandel_trace.domain.viewport import Viewport

ESCAPE_RADIUS = 2.0
MAX_ESCAPE_RADIUS = 1e100

# upstream plane: re in [-2, 1], im in [-1, 1], 350 pixels per unit
DEFAULT_RE_MIN = -2.0
DEFAULT_RE_MAX = 1.0
DEFAULT_IMAG_MIN = -1.0
DEFAULT_IMAG_MAX = 1.0
PIXELS_PER_UNIT = 350

DEFAULT_WIDTH = int(DEFAULT_RE_MAX - DEFAULT_RE_MIN) * PIXELS_PER_UNIT
DEFAULT_HEIGHT = int(DEFAULT_IMAG_MAX - DEFAULT_IMAG_MIN) * PIXELS_PER_UNIT
DEFAULT_MAX_ITERATIONS = 256
# number of bounces drawn for the point under the cursor
DEFAULT_MAX_TRACE_LENGTH = 256

Palette = Literal["gradient", "bands", "cyclic"]
RGBA = tuple[int, int, int, int]


def default_viewport() -> Viewport:
    return Viewport(
        re_min=DEFAULT_RE_MIN,
        re_max=DEFAULT_RE_MAX,
        imag_min=DEFAULT_IMAG_MIN,
        imag_max=DEFAULT_IMAG_MAX,
    )


class FractalConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int = Field(default=DEFAULT_WIDTH, ge=1)
    height: int = Field(default=DEFAULT_HEIGHT, ge=1)
    max_iterations: int = Field(default=DEFAULT_MAX_ITERATIONS, ge=1)
    max_trace_length: int = Field(default=DEFAULT_MAX_TRACE_LENGTH, ge=0)
    # squared magnitudes near the radius must stay finite in float64
    escape_radius: float = Field(default=ESCAPE_RADIUS, gt=0, le=MAX_ESCAPE_RADIUS)
    palette: Palette = "gradient"
    cycle_length: int = Field(default=32, ge=2)
    interior_color: RGBA = (0, 0, 0, 255)
    trace_color: RGBA = (255, 0, 0, 255)
    workers: Optional[int] = Field(default=None, ge=1)
    viewport: Viewport = Field(default_factory=default_viewport)

    @field_validator("interior_color", "trace_color")
    @classmethod
    def _check_channels(cls, value: RGBA) -> RGBA:
        if not all(0 <= channel <= 255 for channel in value):
            raise ValueError(f"color channels must be in 0..255, got {value}")
        return value

    @property
    def worker_count(self) -> int:
        return self.workers or os.cpu_count() or 1
