import pytest

from mandel_trace.config import FractalConfig
from mandel_trace.domain.viewport import Viewport
from mandel_trace.services.fractal_engine import FractalEngine
from mandel_trace.services.viewport_mapper import ViewportMapper


@pytest.fixture
def scenario_config() -> FractalConfig:
    # 800x600 grid centered on -0.5 with half-width 1.5, aspect-adjusted height
    viewport = Viewport.from_center(complex(-0.5, 0.0), 1.5, 1.0)
    viewport = viewport.with_aspect(800 / 600)
    return FractalConfig(width=800, height=600, max_iterations=100, viewport=viewport)


@pytest.fixture
def engine() -> FractalEngine:
    return FractalEngine(FractalConfig(max_iterations=100, max_trace_length=16))


@pytest.fixture
def small_config() -> FractalConfig:
    return FractalConfig(width=24, height=16, max_iterations=50, workers=3)


@pytest.fixture
def mapper(scenario_config: FractalConfig) -> ViewportMapper:
    return ViewportMapper(scenario_config.width, scenario_config.height)
