"""Mandelbrot viewer with a live orbit trace of the point under the cursor."""

from mandel_trace.config import FractalConfig
from mandel_trace.domain.types import Color, EscapeResult, PixelCoordinate
from mandel_trace.domain.viewport import Viewport
from mandel_trace.errors import (
    InvalidViewportError,
    MandelTraceError,
    NonFinitePointError,
    PixelOutOfBoundsError,
)
from mandel_trace.services.fractal_engine import FractalEngine
from mandel_trace.services.render_cache import GridRenderCache
from mandel_trace.services.viewport_mapper import ViewportMapper

__version__ = "0.1.0"

__all__ = [
    "Color",
    "EscapeResult",
    "FractalConfig",
    "FractalEngine",
    "GridRenderCache",
    "InvalidViewportError",
    "MandelTraceError",
    "NonFinitePointError",
    "PixelCoordinate",
    "PixelOutOfBoundsError",
    "Viewport",
    "ViewportMapper",
]
