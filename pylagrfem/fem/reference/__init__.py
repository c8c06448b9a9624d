# pylagrfem.fem.reference
"""
Order-agnostic reference finite elements.

A reference element knows its shape functions on the reference cell and how
many of them belong to each vertex, edge and the cell interior.  Arrays
follow one convention throughout:

* points:    ``(n_points, dim)``
* values:    ``(n_rsf, n_points)``
* gradients: ``(n_rsf, n_points, dim)``
"""
from abc import ABC, abstractmethod
from functools import lru_cache
from importlib import import_module

import numpy as np
import sympy as sp

from pylagrfem.core.refel import RefEl


class ScalarReferenceFiniteElement(ABC):
    """Scalar-valued finite element on a reference cell."""

    @property
    @abstractmethod
    def ref_el(self) -> RefEl:
        ...

    @property
    def dimension(self) -> int:
        return self.ref_el.dimension

    @property
    @abstractmethod
    def order(self) -> int:
        """Polynomial order of the local space."""

    @abstractmethod
    def num_ref_shape_functions(self, codim=None, i=None) -> int:
        """Total number of shape functions, or the number attached to
        sub-entity ``i`` of codimension ``codim``."""

    @abstractmethod
    def eval_reference_shape_functions(self, points) -> np.ndarray:
        ...

    @abstractmethod
    def gradients_reference_shape_functions(self, points) -> np.ndarray:
        ...

    @abstractmethod
    def evaluation_nodes(self) -> np.ndarray:
        ...

    def _as_points(self, points) -> np.ndarray:
        pts = np.asarray(points, dtype=float)
        if pts.ndim == 1:
            pts = pts.reshape(1, -1)
        if pts.ndim != 2 or pts.shape[1] != self.dimension:
            raise ValueError(f"Expected points of shape (n, {self.dimension}), got {pts.shape}")
        return pts

    def __repr__(self):
        return f"{type(self).__name__}(order={self.order})"


class _SymbolicLagrangeElement(ScalarReferenceFiniteElement):
    """Lagrange element whose basis is generated with SymPy and lambdified."""

    _REF_EL: RefEl = None
    _MODULE: str = None
    _BUILDER: str = None

    def __init__(self, order: int = 1):
        order = int(order)
        if order < 0:
            raise ValueError(f"Polynomial order must be non-negative, got {order}")
        self._order = order
        mod = import_module(self._MODULE)
        (xi, eta), nodes, basis = getattr(mod, self._BUILDER)(order)
        self._counts = mod.entity_counts(order)
        self._nodes = np.array([[float(a), float(b)] for a, b in nodes])
        N_sym = sp.Matrix(basis)
        self._shape_lambda = sp.lambdify((xi, eta), N_sym, 'numpy')
        self._grad_lambda = sp.lambdify((xi, eta), N_sym.jacobian([xi, eta]), 'numpy')
        total = sum(self._counts[c] * self._REF_EL.num_sub_entities(c) for c in (0, 1, 2))
        if total != len(basis):
            raise RuntimeError(f"Internal error: {len(basis)} basis functions but "
                               f"{total} assigned to sub-entities")

    @property
    def ref_el(self):
        return self._REF_EL

    @property
    def order(self):
        return self._order

    def num_ref_shape_functions(self, codim=None, i=None):
        if codim is None:
            return self._nodes.shape[0]
        n_sub = self.ref_el.num_sub_entities(codim)
        if i is not None and not 0 <= i < n_sub:
            raise IndexError(f"{self.ref_el} has {n_sub} sub-entities of codim {codim}, asked for {i}")
        return self._counts[codim]

    def eval_reference_shape_functions(self, points):
        pts = self._as_points(points)
        vals = np.empty((self._nodes.shape[0], pts.shape[0]))
        for q, (xi, eta) in enumerate(pts):
            vals[:, q] = np.asarray(self._shape_lambda(xi, eta), dtype=float).ravel()
        return vals

    def gradients_reference_shape_functions(self, points):
        pts = self._as_points(points)
        grads = np.empty((self._nodes.shape[0], pts.shape[0], 2))
        for q, (xi, eta) in enumerate(pts):
            grads[:, q, :] = np.asarray(self._grad_lambda(xi, eta), dtype=float)
        return grads

    def evaluation_nodes(self):
        return self._nodes.copy()


class FeLagrangeTria(_SymbolicLagrangeElement):
    """P_n Lagrange element on the reference triangle."""

    _REF_EL = RefEl.TRIA
    _MODULE = "pylagrfem.fem.reference.tri_pn"
    _BUILDER = "tri_pn"


class FeLagrangeQuad(_SymbolicLagrangeElement):
    """Q_n Lagrange element on the reference square."""

    _REF_EL = RefEl.QUAD
    _MODULE = "pylagrfem.fem.reference.quad_qn"
    _BUILDER = "quad_qn"


@lru_cache(maxsize=None)
def _get_reference(ref_el: RefEl, poly_order: int):
    if ref_el is RefEl.QUAD:
        return FeLagrangeQuad(poly_order)
    if ref_el is RefEl.TRIA:
        return FeLagrangeTria(poly_order)
    raise KeyError(ref_el)


def get_reference(element_type, poly_order: int = 1) -> ScalarReferenceFiniteElement:
    """Shared Lagrange element for ``element_type`` ('tri', 'quad' or a RefEl)."""
    return _get_reference(RefEl.from_name(element_type), int(poly_order))


__all__ = ["ScalarReferenceFiniteElement", "FeLagrangeTria", "FeLagrangeQuad", "get_reference"]
