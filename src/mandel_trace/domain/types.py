from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Optional


class PixelCoordinate(NamedTuple):
    """Column ``x`` (0 = left) and row ``y`` (0 = top) on the pixel grid."""

    x: int
    y: int


class Color(NamedTuple):
    r: int
    g: int
    b: int
    a: int = 255


@dataclass(frozen=True)
class EscapeResult:
    """
    Outcome of the escape-time test.

    iterations is None for points that stayed bounded up to the cap,
    otherwise the first n >= 1 with |z_n| above the escape radius.
    """

    iterations: Optional[int] = None

    def __post_init__(self) -> None:
        if self.iterations is not None and self.iterations < 1:
            raise ValueError(
                f"escape iteration must be >= 1, got {self.iterations}"
            )

    @classmethod
    def bounded_result(cls) -> EscapeResult:
        return cls(None)

    @classmethod
    def escaped_at(cls, n: int) -> EscapeResult:
        return cls(n)

    @property
    def bounded(self) -> bool:
        return self.iterations is None

    @property
    def escaped(self) -> bool:
        return self.iterations is not None
