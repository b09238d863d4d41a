import numpy as np
import plotly.express as px

from mandel_trace.domain.viewport import Viewport


def stability(iterations: np.ndarray, max_iterations: int) -> np.ndarray:
    """1.0 inside the set, n / max_iterations for points escaping at n."""
    out = iterations.astype(np.float32) / max_iterations
    out[iterations == 0] = 1.0
    return out


def plot_escape_grid(
    iterations: np.ndarray, vp: Viewport, max_iterations: int
) -> None:
    height, width = iterations.shape
    re_span, im_span = vp.get_spans()

    fig = px.imshow(
        stability(iterations, max_iterations),
        origin="upper",  # row 0 is imag_max
        zmin=0.0,
        zmax=1.0,
        x=vp.re_min + np.arange(width) / width * re_span,
        y=vp.imag_max - np.arange(height) / height * im_span,
        color_continuous_scale=[
            (0.0, "midnightblue"),
            (0.5, "white"),
            (0.65, "yellow"),
            (0.8, "red"),
            (1.0, "black"),  # inside the set
        ],
    )

    fig.update_layout(
        xaxis_title="Re(c)",
        yaxis_title="Im(c)",
    )

    fig.show()
