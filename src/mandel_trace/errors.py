class MandelTraceError(Exception):
    """Base class for caller contract violations in mandel_trace."""


class InvalidViewportError(MandelTraceError, ValueError):
    pass


class PixelOutOfBoundsError(MandelTraceError, ValueError):
    pass


class NonFinitePointError(MandelTraceError, ValueError):
    pass
