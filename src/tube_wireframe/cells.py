"""
Cell extraction.

Walks a face list under a named pattern mode and emits cells: loops of
point indices that are later expanded into edges.

Pair modes read the faces two at a time. Face 2k and face 2k+1 are taken to
be the two halves of one quad a-b-c-d, triangulated as (a, b, d) and
(b, c, d), which is how the plane, box and torus primitives lay them out.
Under that layout:

    (a0, b1) = a-c  diagonal across the quad
    (b0, c1) = b-d  shared diagonal of the two triangles
    (a1, b1), (a0, c0) = b-c, a-d
    (b1, c1), (a0, b0) = c-d, a-b
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .common.config import MODES, FaceFilter, accept_all
from .mesh import as_face_arrays

logger = logging.getLogger(__name__)

Cell = Tuple[int, ...]

# A corner reference is (face offset within the pair, vertex slot in the face):
# face 0 is f0, face 1 is f1; slot 0/1/2 is a/b/c.
Corner = Tuple[int, int]

A0, B0, C0 = (0, 0), (0, 1), (0, 2)
A1, B1, C1 = (1, 0), (1, 1), (1, 2)

PAIR_MODE_CORNERS: Dict[str, Tuple[Tuple[Corner, Corner], ...]] = {
    "cross-hatch": ((A0, B1), (B0, C1)),
    "diagonal0": ((A0, B1),),
    "diagonal1": ((B0, C1),),
    "diagonal0-vertical": ((A0, B1), (B1, C1), (A0, B0)),
    "diagonal1-vertical": ((B0, C1), (B1, C1), (A0, B0)),
    "diagonal0-horizontal": ((A0, B1), (A1, B1), (A0, C0)),
    "diagonal1-horizontal": ((B0, C1), (A1, B1), (A0, C0)),
    "quad": ((A1, B1), (A0, C0), (B1, C1), (A0, B0)),
    "horizontal": ((A1, B1), (A0, C0)),
    "vertical": ((B1, C1), (A0, B0)),
}


def extract_cells(
    mesh,
    mode: str = "triangle",
    filter: Optional[FaceFilter] = None
) -> List[Cell]:
    """
    Gather the cells of a mesh for a pattern mode.

    The filter is called as filter(face_index, mode). Note the asymmetry:
    in "triangle" mode it is asked once per face, in every other mode once
    per face pair (with the index of the pair's first face), and a rejected
    pair drops both faces.

    Args:
        mesh: Input mesh (anything with vertices and faces)
        mode: One of MODES
        filter: Optional face predicate, defaults to accepting everything

    Returns:
        List of cells; 3-point cells in "triangle" mode, 2-point cells
        otherwise. An unknown mode returns an empty list.
    """
    _, faces = as_face_arrays(mesh)
    return gather_cells(faces, mode, filter)


def gather_cells(
    faces: np.ndarray,
    mode: str,
    filter: Optional[FaceFilter] = None
) -> List[Cell]:
    """Cell extraction on a raw (M, 3) face index array."""
    if filter is None:
        filter = accept_all

    if mode == "triangle":
        return [
            tuple(int(i) for i in face)
            for face_index, face in enumerate(faces)
            if filter(face_index, mode)
        ]

    corners = PAIR_MODE_CORNERS.get(mode)
    if corners is None:
        logger.warning(f"Unknown wireframe mode {mode!r}; expected one of {list(MODES)}")
        return []

    cells: List[Cell] = []
    n_pairs = len(faces) // 2
    for pair in range(n_pairs):
        i = pair * 2
        if not filter(i, mode):
            continue
        quad = faces[i:i + 2]
        for (fa, sa), (fb, sb) in corners:
            cells.append((int(quad[fa, sa]), int(quad[fb, sb])))

    if len(faces) % 2:
        logger.debug(f"Ignoring trailing unpaired face {len(faces) - 1} in mode {mode!r}")

    return cells


def cell_count_per_pair(mode: str) -> int:
    """Number of cells a pair mode emits per accepted face pair."""
    return len(PAIR_MODE_CORNERS.get(mode, ()))


def describe_modes() -> Dict[str, Sequence[str]]:
    """Human-readable corner table, e.g. {'diagonal0': ['a0-b1']}."""
    names = "abc"
    table = {"triangle": ["a-b", "b-c", "c-a"]}
    for mode, pairs in PAIR_MODE_CORNERS.items():
        table[mode] = [
            f"{names[sa]}{fa}-{names[sb]}{fb}"
            for (fa, sa), (fb, sb) in pairs
        ]
    return table
