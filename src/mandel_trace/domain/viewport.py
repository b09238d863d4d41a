from __future__ import annotations

import math
import sys
from dataclasses import dataclass

from mandel_trace.domain.types import PixelCoordinate
from mandel_trace.errors import InvalidViewportError, NonFinitePointError

OFF_GRID = float(sys.maxsize)


@dataclass(frozen=True)
class Viewport:
    re_min: float
    re_max: float
    imag_min: float
    imag_max: float

    def __post_init__(self) -> None:
        bounds = (self.re_min, self.re_max, self.imag_min, self.imag_max)
        if not all(math.isfinite(b) for b in bounds):
            raise InvalidViewportError(f"viewport bounds must be finite: {bounds}")
        if not self.re_min < self.re_max:
            raise InvalidViewportError(
                f"empty real range [{self.re_min}, {self.re_max}]"
            )
        if not self.imag_min < self.imag_max:
            raise InvalidViewportError(
                f"empty imaginary range [{self.imag_min}, {self.imag_max}]"
            )

    @classmethod
    def from_center(
        cls, center: complex, half_width: float, half_height: float
    ) -> Viewport:
        """Build a viewport from its center and half extents."""
        if not (half_width > 0 and half_height > 0):
            raise InvalidViewportError(
                f"half extents must be positive, got {half_width}, {half_height}"
            )
        return cls(
            re_min=center.real - half_width,
            re_max=center.real + half_width,
            imag_min=center.imag - half_height,
            imag_max=center.imag + half_height,
        )

    def get_spans(self) -> tuple[float, float]:
        """Return (re_span, im_span)."""
        return (self.re_max - self.re_min, self.imag_max - self.imag_min)

    def screen_to_complex(self, x: int, y: int, width: int, height: int) -> complex:
        """
        Convert screen coordinates to a complex-plane coordinate.

        Row 0 is the top of the screen, so y runs from imag_max downwards.
        """
        re = self.re_min + (x / width) * (self.re_max - self.re_min)
        imag = self.imag_max - (y / height) * (self.imag_max - self.imag_min)

        return complex(re, imag)

    def complex_to_screen(
        self, z: complex, width: int, height: int
    ) -> PixelCoordinate:
        """
        Inverse of screen_to_complex, rounded to the nearest pixel.

        Points outside the viewport land outside [0, width) x [0, height).
        """
        if not (math.isfinite(z.real) and math.isfinite(z.imag)):
            raise NonFinitePointError(f"cannot place {z} on screen")

        re_span, im_span = self.get_spans()
        x = (z.real - self.re_min) / re_span * width
        y = (self.imag_max - z.imag) / im_span * height

        # far-away points can overflow the scaling; keep them finite and off-grid
        x = min(max(x, -OFF_GRID), OFF_GRID)
        y = min(max(y, -OFF_GRID), OFF_GRID)

        return PixelCoordinate(round(x), round(y))

    # --- aspect utilities ----------------------------------------------------
    def with_aspect(self, aspect: float) -> Viewport:
        """
        Return a copy whose imaginary span matches a width/height aspect
        ratio, keeping the real range and the imaginary center.
        """
        if not aspect > 0:
            raise InvalidViewportError(f"aspect must be positive, got {aspect}")
        re_span = self.re_max - self.re_min
        im_span = re_span / aspect
        im_center = (self.imag_min + self.imag_max) / 2.0
        return Viewport(
            re_min=self.re_min,
            re_max=self.re_max,
            imag_min=im_center - im_span / 2.0,
            imag_max=im_center + im_span / 2.0,
        )
