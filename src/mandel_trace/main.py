import argparse
import logging
from typing import Optional, Sequence

import moderngl
import numpy as np
import pyglet

from mandel_trace.app_context import AppContext
from mandel_trace.config import FractalConfig
from mandel_trace.domain.viewport import Viewport
from mandel_trace.rendering.presenter import FramePresenter
from mandel_trace.services.fractal_engine import FractalEngine
from mandel_trace.services.render_cache import GridRenderCache
from mandel_trace.services.viewport_mapper import ViewportMapper
from mandel_trace.ui.dependencies import UIDeps
from mandel_trace.ui.manager import UIManager
from mandel_trace.ui.orbit_trace import OrbitTraceOverlay, OrbitTraceOverlayConfig

logger = logging.getLogger(__name__)


class MandelbrotWindow(pyglet.window.Window):
    def __init__(self, config: FractalConfig) -> None:
        # the pixel grid is fixed, so is the window
        super().__init__(
            width=config.width,
            height=config.height,
            caption="Mandelbrot Orbit Trace",
            resizable=False,
        )
        ctx = moderngl.create_context()
        ctx.viewport = (0, 0, self.width, self.height)

        presenter = FramePresenter(ctx, (self.width, self.height))
        engine = FractalEngine(config)
        mapper = ViewportMapper(config.width, config.height)
        cache = GridRenderCache(
            engine, config.width, config.height, config.max_iterations
        )

        self.app = AppContext(
            gl_ctx=ctx,
            presenter=presenter,
            config=config,
            engine=engine,
            mapper=mapper,
            cache=cache,
            viewport=config.viewport,
        )
        self._shown: Optional[np.ndarray] = None

        deps = UIDeps(mapper=mapper, engine=engine, get_viewport=self.get_viewport)

        self.app.cache.request(self.app.viewport)

        self.set_mouse_visible(True)

        cursor = self.get_system_mouse_cursor(self.CURSOR_CROSSHAIR)
        self.set_mouse_cursor(cursor)

        self.ui = UIManager(window=self, deps=deps)

    def get_viewport(self) -> Viewport:
        return self.app.viewport

    def _upload_latest(self) -> None:
        rgba = self.app.cache.latest()
        if rgba is not None and rgba is not self._shown:
            self.app.presenter.upload(rgba)
            self._shown = rgba

    def on_draw(self) -> None:
        self.clear()
        self.app.gl_ctx.clear(0.07, 0.07, 0.09, 1.0)
        self._upload_latest()
        self.app.presenter.draw()

        self.ui.draw()

    def on_close(self) -> None:
        self.ui.clear()
        self.app.cache.close()
        super().on_close()


def build_config(args: argparse.Namespace) -> FractalConfig:
    overrides = {
        "max_iterations": args.max_iterations,
        "max_trace_length": args.trace_length,
        "palette": args.palette,
    }
    return FractalConfig(**{k: v for k, v in overrides.items() if v is not None})


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mandel-trace",
        description="Mandelbrot set with the orbit of the point under the cursor.",
    )
    parser.add_argument("--max-iterations", type=int, default=None)
    parser.add_argument(
        "--trace-length", type=int, default=None, help="bounces drawn per orbit"
    )
    parser.add_argument(
        "--palette", choices=["gradient", "bands", "cyclic"], default=None
    )
    parser.add_argument(
        "--plot",
        action="store_true",
        help="show the escape grid in a plotly figure instead of a window",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    args = parse_args(argv)
    config = build_config(args)

    if args.plot:
        from mandel_trace.rendering.plot import plot_escape_grid

        engine = FractalEngine(config)
        iterations = engine.compute(config.width, config.height, config.viewport)
        plot_escape_grid(iterations, config.viewport, config.max_iterations)
        return

    app = MandelbrotWindow(config)

    orbit_config = OrbitTraceOverlayConfig(line_color=config.trace_color)
    app.ui.add(OrbitTraceOverlay(orbit_config))

    logger.info("Opening %dx%d window", config.width, config.height)
    pyglet.app.run()

    app.close()


if __name__ == "__main__":
    main()
