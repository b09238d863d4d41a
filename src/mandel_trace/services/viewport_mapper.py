from __future__ import annotations

from typing import Iterable

from mandel_trace.domain.types import PixelCoordinate
from mandel_trace.domain.viewport import Viewport
from mandel_trace.errors import PixelOutOfBoundsError


class ViewportMapper:
    """Pixel <-> complex conversion for a fixed width x height grid."""

    def __init__(self, width: int, height: int) -> None:
        if width < 1 or height < 1:
            raise ValueError(f"grid must be at least 1x1, got {width}x{height}")
        self.width = width
        self.height = height

    def contains(self, pixel: tuple[int, int]) -> bool:
        x, y = pixel
        return 0 <= x < self.width and 0 <= y < self.height

    def map_pixel_to_complex(
        self, pixel: tuple[int, int], viewport: Viewport
    ) -> complex:
        if not self.contains(pixel):
            raise PixelOutOfBoundsError(
                f"pixel {tuple(pixel)} outside {self.width}x{self.height} grid"
            )
        x, y = pixel
        return viewport.screen_to_complex(x, y, self.width, self.height)

    def map_complex_to_pixel(
        self, point: complex, viewport: Viewport
    ) -> PixelCoordinate:
        # no bounds check here: escaping orbits leave the grid, callers clip
        return viewport.complex_to_screen(point, self.width, self.height)

    def polyline_segments(
        self, points: Iterable[complex], viewport: Viewport
    ) -> list[tuple[PixelCoordinate, PixelCoordinate]]:
        """
        Screen segments joining consecutive points.

        Segments with an endpoint off the grid are skipped.
        """
        pixels = [self.map_complex_to_pixel(p, viewport) for p in points]
        return [
            (a, b)
            for a, b in zip(pixels, pixels[1:])
            if self.contains(a) and self.contains(b)
        ]
