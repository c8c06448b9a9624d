"""pylagrfem.core.refel
Reference shapes of the cells and their sub-entities.
"""
from enum import Enum

import numpy as np


class RefEl(Enum):
    """Reference shapes: point, unit segment, unit triangle, unit square."""

    POINT = "point"
    SEGMENT = "segment"
    TRIA = "tria"
    QUAD = "quad"

    @classmethod
    def from_name(cls, name):
        if isinstance(name, RefEl):
            return name
        try:
            return _ALIASES[str(name).lower()]
        except KeyError:
            raise KeyError(f"Unknown reference element '{name}'") from None

    @property
    def dimension(self) -> int:
        return _DIMENSION[self]

    @property
    def num_nodes(self) -> int:
        return _NODES[self].shape[0]

    @property
    def nodes(self) -> np.ndarray:
        """Vertex coordinates, shape (num_nodes, dimension)."""
        return _NODES[self].copy()

    @property
    def edge_vertices(self):
        """Local vertex pairs (first, second) of every edge of a 2-D shape."""
        if self.dimension != 2:
            raise ValueError(f"{self} has no edges")
        n = self.num_nodes
        return tuple((k, (k + 1) % n) for k in range(n))

    def num_sub_entities(self, codim: int) -> int:
        if codim < 0 or codim > self.dimension:
            raise ValueError(f"Illegal codimension {codim} for {self}")
        if codim == 0:
            return 1
        if codim == self.dimension:
            return self.num_nodes
        # codim 1 of a 2-D cell: one edge per vertex
        return self.num_nodes

    def sub_type(self, codim: int) -> "RefEl":
        if codim < 0 or codim > self.dimension:
            raise ValueError(f"Illegal codimension {codim} for {self}")
        if codim == 0:
            return self
        return RefEl.POINT if codim == self.dimension else RefEl.SEGMENT

    def __str__(self):
        return f"RefEl.{self.name}"


_DIMENSION = {RefEl.POINT: 0, RefEl.SEGMENT: 1, RefEl.TRIA: 2, RefEl.QUAD: 2}

_NODES = {
    RefEl.POINT:   np.zeros((1, 0)),
    RefEl.SEGMENT: np.array([[0.0], [1.0]]),
    RefEl.TRIA:    np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]]),
    RefEl.QUAD:    np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]]),
}

_ALIASES = {
    "point": RefEl.POINT,
    "segment": RefEl.SEGMENT, "line": RefEl.SEGMENT,
    "tria": RefEl.TRIA, "tri": RefEl.TRIA, "triangle": RefEl.TRIA,
    "quad": RefEl.QUAD, "quadrilateral": RefEl.QUAD,
}
