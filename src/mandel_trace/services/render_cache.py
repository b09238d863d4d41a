from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import NamedTuple, Optional, Protocol

import numpy as np

from mandel_trace.domain.viewport import Viewport

logger = logging.getLogger(__name__)


class GridRenderer(Protocol):
    def render(
        self,
        width: int,
        height: int,
        viewport: Viewport,
        max_iterations: Optional[int] = None,
    ) -> np.ndarray: ...


class RenderKey(NamedTuple):
    viewport: Viewport
    width: int
    height: int
    max_iterations: int


class GridRenderCache:
    """
    Keeps the full-grid color buffer for the current viewport.

    Computation runs on a single background worker. Every request bumps a
    generation counter; a finished result is stored only if its generation
    is still current, so results for an old viewport are dropped.

    Usage:
        cache = GridRenderCache(engine, 800, 600, max_iterations=256)
        cache.request(viewport)

        # once per frame:
        rgba = cache.latest()
        if rgba is not None:
            upload(rgba)
    """

    def __init__(
        self, engine: GridRenderer, width: int, height: int, max_iterations: int
    ) -> None:
        self.engine = engine
        self.width = width
        self.height = height
        self.max_iterations = max_iterations

        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="mandel-grid"
        )
        self._generation = 0
        self._key: Optional[RenderKey] = None
        self._result: Optional[np.ndarray] = None
        self._pending: Optional[Future] = None

    def _key_for(self, viewport: Viewport) -> RenderKey:
        return RenderKey(viewport, self.width, self.height, self.max_iterations)

    @property
    def generation(self) -> int:
        return self._generation

    def request(self, viewport: Viewport) -> Optional[Future]:
        """
        Schedule a background render for ``viewport``.

        Returns None when the buffer for this viewport is already cached or
        already being computed.
        """
        key = self._key_for(viewport)
        with self._lock:
            if key == self._key:
                logger.debug("Grid cache hit for %s", viewport)
                return None

            self._generation += 1
            generation = self._generation
            self._key = key
            self._result = None

            if self._pending is not None and self._pending.cancel():
                logger.debug("Cancelled superseded grid render")

            future = self._executor.submit(self._run, key, generation)
            self._pending = future
            return future

    def _run(self, key: RenderKey, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
        try:
            rgba = self.engine.render(
                key.width, key.height, key.viewport, key.max_iterations
            )
        except Exception:
            logger.exception("Grid render failed for %s", key.viewport)
            with self._lock:
                if generation == self._generation:
                    self._key = None
            raise

        with self._lock:
            if generation != self._generation:
                logger.debug(
                    "Discarding stale grid render (generation %d, current %d)",
                    generation,
                    self._generation,
                )
                return
            self._result = rgba

    def latest(self) -> Optional[np.ndarray]:
        with self._lock:
            return self._result

    def render(self, viewport: Viewport) -> np.ndarray:
        """Synchronous variant: return the cached buffer, computing it if needed."""
        key = self._key_for(viewport)
        with self._lock:
            if key == self._key and self._result is not None:
                return self._result
            self._generation += 1
            generation = self._generation
            self._key = key
            self._result = None
            if self._pending is not None:
                self._pending.cancel()
            self._pending = None

        try:
            rgba = self.engine.render(
                self.width, self.height, viewport, self.max_iterations
            )
        except Exception:
            logger.exception("Grid render failed for %s", viewport)
            with self._lock:
                if generation == self._generation:
                    self._key = None
            raise

        with self._lock:
            if generation == self._generation:
                self._result = rgba
        return rgba

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
