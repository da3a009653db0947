"""
Edge deduplication.

Cells are expanded into wrapping index pairs; pairs that share an unordered
endpoint set collapse to the first one seen, keeping its original order.
"""

import logging
from typing import Iterable, Iterator, List, Sequence, Set, Tuple

logger = logging.getLogger(__name__)

Edge = Tuple[int, int]


def cell_pairs(cells: Iterable[Sequence[int]]) -> Iterator[Edge]:
    """Yield (cell[i], cell[(i + 1) % n]) for every cell, in order."""
    for cell in cells:
        n = len(cell)
        for i in range(n):
            yield (cell[i], cell[(i + 1) % n])


def edge_key(edge: Sequence[int]) -> Edge:
    """Canonical (ascending) key of an edge."""
    a, b = edge
    return (a, b) if a <= b else (b, a)


def dedupe_edges(cells: Iterable[Sequence[int]]) -> List[Edge]:
    """
    Unique edges of a cell list.

    Order is first occurrence in the flattened traversal; each edge keeps
    the endpoint order it was first seen with.
    """
    seen: Set[Edge] = set()
    out: List[Edge] = []
    total = 0

    for edge in cell_pairs(cells):
        total += 1
        key = edge_key(edge)
        if key not in seen:
            seen.add(key)
            out.append(edge)

    logger.debug(f"Deduplicated {total} edge pairs to {len(out)} unique edges")
    return out
