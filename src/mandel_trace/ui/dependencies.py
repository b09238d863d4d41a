from __future__ import annotations
from dataclasses import dataclass
from typing import Callable

from mandel_trace.domain.viewport import Viewport
from mandel_trace.services.fractal_engine import FractalEngine
from mandel_trace.services.viewport_mapper import ViewportMapper


@dataclass(frozen=True)
class UIDeps:
    mapper: ViewportMapper
    engine: FractalEngine
    get_viewport: Callable[[], Viewport]
