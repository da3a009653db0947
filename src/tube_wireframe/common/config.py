"""
Configuration and constants for tube wireframe generation.

Pattern modes (closed set):
- triangle: every face outline
- quad and its partial variants: walk faces as quad pairs (a, b, d) / (b, c, d)
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any, Callable, Tuple
import json
from pathlib import Path

import numpy as np


MODES: Tuple[str, ...] = (
    "triangle",
    "quad",
    "cross-hatch",
    "diagonal0",
    "diagonal1",
    "horizontal",
    "vertical",
    "diagonal0-horizontal",
    "diagonal1-horizontal",
    "diagonal0-vertical",
    "diagonal1-vertical",
)

FaceFilter = Callable[[int, str], bool]


def accept_all(face_index: int, mode: str) -> bool:
    """Default face filter."""
    return True


@dataclass
class WireframeOptions:
    """
    Options for create_tube_wireframe.

    thickness is the tube radius (top and bottom radius are equal).
    matrix is an optional 4x4 transform applied to every tube before merging.
    buffer selects the indexed BufferMesh output instead of a FaceMesh.
    filter is never serialized; None means accept everything.
    """

    mode: str = "triangle"
    thickness: float = 1.0
    radius_segments: int = 4
    length_segments: int = 1
    open_ended: bool = False
    matrix: Optional[np.ndarray] = field(default=None, compare=False)
    buffer: bool = False
    filter: Optional[FaceFilter] = field(default=accept_all, repr=False, compare=False)

    def __post_init__(self):
        if self.filter is None:
            self.filter = accept_all

    def validate(self) -> "WireframeOptions":
        """Raise ValueError for options that cannot build a cylinder."""
        if self.thickness < 0:
            raise ValueError(f"thickness must be >= 0, got {self.thickness}")
        if int(self.radius_segments) < 1:
            raise ValueError(f"radius_segments must be >= 1, got {self.radius_segments}")
        if int(self.length_segments) < 1:
            raise ValueError(f"length_segments must be >= 1, got {self.length_segments}")
        if self.matrix is not None and np.asarray(self.matrix).shape != (4, 4):
            raise ValueError(f"matrix must be 4x4, got shape {np.asarray(self.matrix).shape}")
        if not callable(self.filter):
            raise ValueError("filter must be callable")
        return self

    def replace(self, **overrides: Any) -> "WireframeOptions":
        """Return a copy with the given fields replaced."""
        data = {k: getattr(self, k) for k in self.__dataclass_fields__}
        unknown = set(overrides) - set(data)
        if unknown:
            raise ValueError(f"Unknown wireframe options: {sorted(unknown)}")
        data.update(overrides)
        return WireframeOptions(**data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "thickness": self.thickness,
            "radius_segments": self.radius_segments,
            "length_segments": self.length_segments,
            "open_ended": self.open_ended,
            "matrix": np.asarray(self.matrix, dtype=float).tolist() if self.matrix is not None else None,
            "buffer": self.buffer,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WireframeOptions":
        data = dict(data)
        if data.get("matrix") is not None:
            data["matrix"] = np.asarray(data["matrix"], dtype=float)
        return cls(**data)

    @classmethod
    def from_json(cls, path: Path) -> "WireframeOptions":
        """Load options from JSON file."""
        with open(path) as f:
            data = json.load(f)
        return cls.from_dict(data)

    def save(self, path: Path) -> None:
        """Save options to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


@dataclass
class OutputMetadata:
    """
    Metadata recorded next to every saved wireframe.

    index_dtype is the index width of the buffer representation
    ("uint16" or "uint32").
    """
    mode: str
    n_edges: int
    n_vertices: int
    n_triangles: int
    index_dtype: str
    source: Optional[str] = None
    options: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def save(self, path: Path) -> None:
        """Save metadata to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutputMetadata":
        return cls(**data)


# Global default options
DEFAULT_OPTIONS = WireframeOptions()
