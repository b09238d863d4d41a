import colorsys
import logging
import math
import time
from concurrent.futures import ThreadPoolExecutor
from itertools import islice
from typing import Iterator, Optional

import numpy as np

from mandel_trace.config import ESCAPE_RADIUS, FractalConfig
from mandel_trace.domain.types import Color, EscapeResult
from mandel_trace.domain.viewport import Viewport
from mandel_trace.errors import NonFinitePointError

logger = logging.getLogger(__name__)

# (fraction of the iteration cap, rgb)
GRADIENT_STOPS = (
    (0.0, (25, 25, 112)),  # midnightblue
    (0.5, (255, 255, 255)),
    (0.65, (255, 255, 0)),
    (0.8, (255, 0, 0)),
    (1.0, (96, 0, 0)),
)

# escape iteration below cap * fraction -> gray level, slower escapes go dark.
# Escapes at or beyond cap / 16 fall through to black, the same as the
# default interior color, as in the original grayscale banding.
BAND_STOPS = (
    (1 / 512, 255),
    (1 / 300, 150),
    (1 / 256, 128),
    (1 / 128, 64),
    (1 / 64, 32),
    (1 / 16, 16),
)


def _check_finite(c: complex) -> None:
    if not (math.isfinite(c.real) and math.isfinite(c.imag)):
        raise NonFinitePointError(f"seed point must be finite, got {c}")


def z_generator(c: complex) -> Iterator[complex]:
    """
    z_0 = 0
    z_n+1 = z_n^2 + c
    """
    zr, zi = 0.0, 0.0
    cr, ci = c.real, c.imag

    while True:
        yield complex(zr, zi)
        # same float operations as escape_iterations_vec, so both agree bit for bit
        zr, zi = zr * zr - zi * zi + cr, 2.0 * zr * zi + ci


def orbit(
    c: complex, max_iterations: int, escape_radius: float = ESCAPE_RADIUS
) -> Iterator[complex]:
    """Yield z_0 = 0, z_1, ... up to and including the escaping iterate or z_max."""
    esc2 = escape_radius * escape_radius

    for n, z in enumerate(z_generator(c)):
        yield z

        if n >= max_iterations or z.real * z.real + z.imag * z.imag > esc2:
            return


def escape_time(
    c: complex, max_iterations: int, escape_radius: float = ESCAPE_RADIUS
) -> Optional[int]:
    """First n >= 1 with |z_n|^2 > escape_radius^2, or None if still bounded."""
    esc2 = escape_radius * escape_radius

    for n, z in enumerate(z_generator(c)):
        if z.real * z.real + z.imag * z.imag > esc2:
            return n

        if n >= max_iterations:
            return None


def generate_complex_grid(
    width: int, height: int, vp: Viewport, rows: Optional[range] = None
) -> tuple[np.ndarray, np.ndarray]:
    """
    Real and imaginary parts for every pixel of the given rows.

    Uses the arithmetic of Viewport.screen_to_complex so that grid pixels
    and cursor queries land on identical points.
    """
    rows = rows if rows is not None else range(height)
    re_span, im_span = vp.get_spans()

    re = vp.re_min + (np.arange(width, dtype=np.float64) / width) * re_span
    imag = vp.imag_max - (
        np.arange(rows.start, rows.stop, dtype=np.float64) / height
    ) * im_span

    Re, Im = np.meshgrid(re, imag)
    return Re, Im


def escape_iterations_vec(
    c_re: np.ndarray,
    c_im: np.ndarray,
    max_iterations: int,
    escape_radius: float = ESCAPE_RADIUS,
) -> np.ndarray:
    """
    Vectorized escape time:
    - 0 for points that never escape within max_iterations
    - else the escape iteration n (1 <= n <= max_iterations)
    """
    shape = c_re.shape
    esc2 = escape_radius * escape_radius

    # only still-active pixels are carried forward, escaped ones never overflow
    idx = np.arange(c_re.size)
    cr = c_re.ravel().astype(np.float64)
    ci = c_im.ravel().astype(np.float64)
    zr = np.zeros_like(cr)
    zi = np.zeros_like(ci)
    out = np.zeros(c_re.size, dtype=np.int32)

    for n in range(1, max_iterations + 1):
        zr, zi = zr * zr - zi * zi + cr, 2.0 * zr * zi + ci

        mag2 = zr * zr + zi * zi
        newly = mag2 > esc2
        if newly.any():
            out[idx[newly]] = n

            keep = ~newly
            idx, zr, zi, cr, ci = idx[keep], zr[keep], zi[keep], cr[keep], ci[keep]

        if idx.size == 0:
            break

    return out.reshape(shape)


def _gradient_color(t: float) -> tuple[int, int, int]:
    t = min(max(t, 0.0), 1.0)
    for (t0, c0), (t1, c1) in zip(GRADIENT_STOPS, GRADIENT_STOPS[1:]):
        if t <= t1:
            w = (t - t0) / (t1 - t0)
            r, g, b = (round(lo + (hi - lo) * w) for lo, hi in zip(c0, c1))
            return (r, g, b)
    return GRADIENT_STOPS[-1][1]


def _band_color(n: int, max_iterations: int) -> tuple[int, int, int]:
    for fraction, level in BAND_STOPS:
        if n < max_iterations * fraction:
            return (level, level, level)
    return (0, 0, 0)


def _cyclic_color(n: int, cycle_length: int) -> tuple[int, int, int]:
    hue = (n % cycle_length) / cycle_length
    r, g, b = colorsys.hsv_to_rgb(hue, 1.0, 1.0)
    return (round(r * 255), round(g * 255), round(b * 255))


class FractalEngine:
    """
    Escape-time classification, coloring and orbit tracing.

    All operations are pure functions of their arguments and the immutable
    config passed at construction.
    """

    def __init__(self, config: Optional[FractalConfig] = None) -> None:
        self.config = config if config is not None else FractalConfig()
        logger.info(
            "FractalEngine ready: max_iter=%d, trace=%d, palette=%s, workers=%d",
            self.config.max_iterations,
            self.config.max_trace_length,
            self.config.palette,
            self.config.worker_count,
        )

    def _cap(self, max_iterations: Optional[int]) -> int:
        cap = self.config.max_iterations if max_iterations is None else max_iterations
        if cap < 1:
            raise ValueError(f"max_iterations must be >= 1, got {cap}")
        return cap

    # --- single point -------------------------------------------------------
    def classify(
        self, point: complex, max_iterations: Optional[int] = None
    ) -> EscapeResult:
        _check_finite(point)
        n = escape_time(point, self._cap(max_iterations), self.config.escape_radius)
        return EscapeResult(n)

    def color_for(
        self, result: EscapeResult, max_iterations: Optional[int] = None
    ) -> Color:
        if result.bounded:
            return Color(*self.config.interior_color)

        cap = self._cap(max_iterations)
        n = result.iterations
        assert n is not None

        if self.config.palette == "bands":
            rgb = _band_color(n, cap)
        elif self.config.palette == "cyclic":
            rgb = _cyclic_color(n, self.config.cycle_length)
        else:
            rgb = _gradient_color(n / cap)

        return Color(*rgb)

    def trace_orbit(
        self,
        seed: complex,
        max_iterations: Optional[int] = None,
        max_trace_length: Optional[int] = None,
    ) -> tuple[complex, ...]:
        """
        The first bounces of ``seed``: z_0 = 0 followed by at most
        max_trace_length iterates, stopping early at the escaping one.
        """
        _check_finite(seed)
        limit = (
            self.config.max_trace_length
            if max_trace_length is None
            else max_trace_length
        )
        if limit < 0:
            raise ValueError(f"max_trace_length must be >= 0, got {limit}")

        iterates = orbit(seed, self._cap(max_iterations), self.config.escape_radius)
        return tuple(islice(iterates, limit + 1))

    # --- full grid ----------------------------------------------------------
    def compute(
        self,
        width: int,
        height: int,
        viewport: Viewport,
        max_iterations: Optional[int] = None,
    ) -> np.ndarray:
        """
        Escape iteration for every pixel, shape (height, width), 0 = bounded.

        Rows are split into bands, one per worker; each worker fills its own
        slice of the output.
        """
        if width < 1 or height < 1:
            raise ValueError(f"grid must be at least 1x1, got {width}x{height}")
        cap = self._cap(max_iterations)
        radius = self.config.escape_radius
        start = time.perf_counter()

        out = np.zeros((height, width), dtype=np.int32)
        workers = min(self.config.worker_count, height)
        bands = [
            range(int(rows[0]), int(rows[-1]) + 1)
            for rows in np.array_split(np.arange(height), workers)
            if rows.size
        ]

        def fill(rows: range) -> None:
            c_re, c_im = generate_complex_grid(width, height, viewport, rows)
            out[rows.start : rows.stop] = escape_iterations_vec(c_re, c_im, cap, radius)

        if len(bands) == 1:
            fill(bands[0])
        else:
            with ThreadPoolExecutor(max_workers=len(bands)) as executor:
                # list() re-raises the first worker exception, if any
                list(executor.map(fill, bands))

        logger.info(
            "Computed %dx%d grid (max_iter=%d, %d bands) in %.3fs",
            width,
            height,
            cap,
            len(bands),
            time.perf_counter() - start,
        )
        return out

    def color_table(self, max_iterations: Optional[int] = None) -> np.ndarray:
        """RGBA lookup table: row 0 is the interior, row n escapes at n."""
        cap = self._cap(max_iterations)
        table = np.empty((cap + 1, 4), dtype=np.uint8)
        table[0] = self.color_for(EscapeResult.bounded_result(), cap)
        for n in range(1, cap + 1):
            table[n] = self.color_for(EscapeResult.escaped_at(n), cap)
        return table

    def colorize(
        self, iterations: np.ndarray, max_iterations: Optional[int] = None
    ) -> np.ndarray:
        return self.color_table(max_iterations)[iterations]

    def render(
        self,
        width: int,
        height: int,
        viewport: Viewport,
        max_iterations: Optional[int] = None,
    ) -> np.ndarray:
        """RGBA uint8 buffer of shape (height, width, 4), row 0 at the top."""
        iterations = self.compute(width, height, viewport, max_iterations)
        return self.colorize(iterations, max_iterations)
