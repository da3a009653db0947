"""
Exceptions raised by the tube wireframe transform.
"""


class TubeWireframeError(Exception):
    """Base class for all tube wireframe errors."""


class MeshValidationError(TubeWireframeError, ValueError):
    """Input mesh arrays are malformed or reference missing points."""


class DegenerateEdgeError(TubeWireframeError, ValueError):
    """An edge has (near) zero length, so no tube axis can be derived."""

    def __init__(self, start, end, length: float):
        self.start = start
        self.end = end
        self.length = length
        super().__init__(
            f"Degenerate edge from {list(start)} to {list(end)} (length={length:.3g})"
        )
