from __future__ import annotations

from importlib.resources import files
from typing import Any, Optional, Tuple, cast

import moderngl
import numpy as np

# x, y, u, v for two triangles covering clip space
QUAD_VERTICES = np.array(
    [
        [-1.0, -1.0, 0.0, 0.0],
        [1.0, -1.0, 1.0, 0.0],
        [1.0, 1.0, 1.0, 1.0],
        [-1.0, 1.0, 0.0, 1.0],
    ],
    dtype="f4",
)
QUAD_INDICES = np.array([0, 1, 2, 2, 3, 0], dtype="i4")


def load_shader(name: str) -> str:
    return (files("mandel_trace.shaders") / name).read_text("utf-8")


def set_sampler_unit(prog: moderngl.Program, name: str, unit: int) -> None:
    if name in prog:
        member = cast(Any, prog[name])  # moderngl member has .value at runtime
        member.value = unit


class FullscreenQuad:
    def __init__(self, ctx: moderngl.Context, prog: moderngl.Program) -> None:
        self._vbo = ctx.buffer(QUAD_VERTICES.tobytes())
        self._ibo = ctx.buffer(QUAD_INDICES.tobytes())
        self._vao = ctx.vertex_array(
            prog, [(self._vbo, "2f 2f", "in_pos", "in_uv")], self._ibo
        )

    def draw(self) -> None:
        self._vao.render()


class FramePresenter:
    """Uploads RGBA pixel buffers to a texture and draws it over the window."""

    def __init__(self, ctx: moderngl.Context, size: Tuple[int, int]) -> None:
        self.ctx = ctx
        self.program = ctx.program(
            vertex_shader=load_shader("present.vert.glsl"),
            fragment_shader=load_shader("present_color.frag.glsl"),
        )
        self.quad = FullscreenQuad(ctx, self.program)
        self.texture: Optional[moderngl.Texture] = None
        self.ensure_size(size)

    def ensure_size(self, size: Tuple[int, int]) -> None:
        w, h = size
        if self.texture is None or self.texture.size != (w, h):
            self.texture = self.ctx.texture((w, h), components=4, dtype="f1")
            self.texture.filter = (moderngl.NEAREST, moderngl.NEAREST)
            self.texture.repeat_x = False
            self.texture.repeat_y = False

    def upload(self, rgba: np.ndarray) -> None:
        """rgba: shape (H, W, 4), dtype uint8, row 0 at the top of the screen."""
        assert rgba.dtype == np.uint8 and rgba.ndim == 3 and rgba.shape[2] == 4
        h, w, _ = rgba.shape
        self.ensure_size((w, h))
        assert self.texture is not None

        # GL textures start at the bottom row
        self.texture.write(np.flipud(rgba).tobytes())

    def draw(self) -> None:
        if self.texture is None:
            return
        self.texture.use(0)
        set_sampler_unit(self.program, "tex", 0)
        self.quad.draw()
