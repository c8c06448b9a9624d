"""pylagrfem.core.geometry
Reference → physical mapping of a single mesh entity.

Local points are passed as arrays of shape ``(n, dim_local)``; every method is
vectorised over the ``n`` points.
"""
from abc import ABC, abstractmethod

import numpy as np

from pylagrfem.core.refel import RefEl


def _as_local(local, dim: int) -> np.ndarray:
    pts = np.asarray(local, dtype=float)
    if pts.ndim == 1:
        pts = pts.reshape(1, pts.size)
    if pts.ndim != 2 or pts.shape[1] != dim:
        raise ValueError(f"Expected local points of shape (n, {dim}), got {pts.shape}")
    return pts


class Geometry(ABC):
    """Shape of one mesh entity, borrowed by the local computations."""

    @property
    @abstractmethod
    def ref_el(self) -> RefEl:
        ...

    @property
    def dim_local(self) -> int:
        return self.ref_el.dimension

    @property
    @abstractmethod
    def dim_global(self) -> int:
        ...

    @abstractmethod
    def global_(self, local) -> np.ndarray:
        """Physical coordinates of ``local``, shape (n, dim_global)."""

    @abstractmethod
    def jacobian(self, local) -> np.ndarray:
        """J[q, k, l] = d x_k / d xi_l, shape (n, dim_global, dim_local)."""

    def jacobian_inverse_gramian(self, local) -> np.ndarray:
        """J (J^T J)^{-1} at every point; equals J^{-T} when J is square.

        Reference gradients pushed through this matrix give physical gradients:
        ``grad_x phi = JIG @ grad_xi phi``.
        """
        J = self.jacobian(local)
        if self.dim_local == 0:
            return J.copy()
        if self.dim_local == self.dim_global:
            return np.transpose(np.linalg.inv(J), (0, 2, 1))
        G = np.einsum('qki,qkj->qij', J, J)
        return J @ np.linalg.inv(G)

    def integration_element(self, local) -> np.ndarray:
        """sqrt(det(J^T J)) at every point, shape (n,)."""
        J = self.jacobian(local)
        if self.dim_local == 0:
            return np.ones(J.shape[0])
        if self.dim_local == self.dim_global:
            return np.abs(np.linalg.det(J))
        G = np.einsum('qki,qkj->qij', J, J)
        return np.sqrt(np.abs(np.linalg.det(G)))

    @abstractmethod
    def sub_geometry(self, codim: int, i: int) -> "Geometry":
        ...

    def __repr__(self):
        return f"{type(self).__name__}({self.coords.tolist()})"


# ---------------------------------------------------------------------------
#  Point
# ---------------------------------------------------------------------------
class Point(Geometry):
    def __init__(self, coord):
        self.coords = np.asarray(coord, dtype=float).reshape(1, -1)

    @property
    def ref_el(self):
        return RefEl.POINT

    @property
    def dim_global(self):
        return self.coords.shape[1]

    def global_(self, local):
        pts = _as_local(local, 0)
        return np.repeat(self.coords, pts.shape[0], axis=0)

    def jacobian(self, local):
        pts = _as_local(local, 0)
        return np.zeros((pts.shape[0], self.dim_global, 0))

    def sub_geometry(self, codim, i):
        if codim != 0 or i != 0:
            raise IndexError(f"Point has no sub-entity ({codim}, {i})")
        return Point(self.coords[0])


# ---------------------------------------------------------------------------
#  Linear / bilinear Lagrange geometries
# ---------------------------------------------------------------------------
class _LagrangeO1Geometry(Geometry):
    """Geometry interpolating its vertices with first-order shape functions."""

    _REF_EL: RefEl = None

    def __init__(self, coords):
        coords = np.asarray(coords, dtype=float)
        n_nodes = self._REF_EL.num_nodes
        if coords.ndim != 2 or coords.shape[0] != n_nodes:
            raise ValueError(f"{type(self).__name__} needs {n_nodes} vertices, "
                             f"got coordinates of shape {coords.shape}")
        if coords.shape[1] < self._REF_EL.dimension:
            raise ValueError(f"World dimension {coords.shape[1]} smaller than "
                             f"{self._REF_EL.dimension}")
        self.coords = coords

    @property
    def ref_el(self):
        return self._REF_EL

    @property
    def dim_global(self):
        return self.coords.shape[1]

    @staticmethod
    @abstractmethod
    def _shape(pts) -> np.ndarray:
        """(n, n_nodes)"""

    @staticmethod
    @abstractmethod
    def _grad(pts) -> np.ndarray:
        """(n, n_nodes, dim_local)"""

    def global_(self, local):
        pts = _as_local(local, self.dim_local)
        return self._shape(pts) @ self.coords

    def jacobian(self, local):
        pts = _as_local(local, self.dim_local)
        return np.einsum('vk,qvl->qkl', self.coords, self._grad(pts))

    def sub_geometry(self, codim, i):
        n_sub = self.ref_el.num_sub_entities(codim)
        if not 0 <= i < n_sub:
            raise IndexError(f"{self.ref_el} has {n_sub} sub-entities of codim {codim}, asked for {i}")
        sub = self.ref_el.sub_type(codim)
        if sub is self.ref_el:
            return type(self)(self.coords.copy())
        if sub is RefEl.POINT:
            return Point(self.coords[i])
        a, b = self.ref_el.edge_vertices[i]
        return SegmentO1(self.coords[[a, b]])


class SegmentO1(_LagrangeO1Geometry):
    _REF_EL = RefEl.SEGMENT

    @staticmethod
    def _shape(pts):
        x = pts[:, 0]
        return np.column_stack([1.0 - x, x])

    @staticmethod
    def _grad(pts):
        dN = np.empty((pts.shape[0], 2, 1))
        dN[:, 0, 0] = -1.0
        dN[:, 1, 0] = 1.0
        return dN


class TriaO1(_LagrangeO1Geometry):
    """Affine triangle with vertices mapped from (0,0), (1,0), (0,1)."""

    _REF_EL = RefEl.TRIA

    @staticmethod
    def _shape(pts):
        x, y = pts[:, 0], pts[:, 1]
        return np.column_stack([1.0 - x - y, x, y])

    @staticmethod
    def _grad(pts):
        dN = np.empty((pts.shape[0], 3, 2))
        dN[:] = [[-1.0, -1.0], [1.0, 0.0], [0.0, 1.0]]
        return dN


class QuadO1(_LagrangeO1Geometry):
    """Bilinear quadrilateral; vertices mapped from (0,0), (1,0), (1,1), (0,1)."""

    _REF_EL = RefEl.QUAD

    @staticmethod
    def _shape(pts):
        x, y = pts[:, 0], pts[:, 1]
        return np.column_stack([(1 - x) * (1 - y), x * (1 - y), x * y, (1 - x) * y])

    @staticmethod
    def _grad(pts):
        x, y = pts[:, 0], pts[:, 1]
        dN = np.empty((pts.shape[0], 4, 2))
        dN[:, 0, 0] = -(1 - y); dN[:, 0, 1] = -(1 - x)
        dN[:, 1, 0] =  (1 - y); dN[:, 1, 1] = -x
        dN[:, 2, 0] =  y;       dN[:, 2, 1] =  x
        dN[:, 3, 0] = -y;       dN[:, 3, 1] =  (1 - x)
        return dN
