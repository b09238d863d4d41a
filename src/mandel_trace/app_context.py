from dataclasses import dataclass

import moderngl

from mandel_trace.config import FractalConfig
from mandel_trace.domain.viewport import Viewport
from mandel_trace.rendering.presenter import FramePresenter
from mandel_trace.services.fractal_engine import FractalEngine
from mandel_trace.services.render_cache import GridRenderCache
from mandel_trace.services.viewport_mapper import ViewportMapper


@dataclass
class AppContext:
    gl_ctx: moderngl.Context
    presenter: FramePresenter
    config: FractalConfig
    engine: FractalEngine
    mapper: ViewportMapper
    cache: GridRenderCache
    viewport: Viewport
