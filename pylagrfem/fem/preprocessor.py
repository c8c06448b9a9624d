"""pylagrfem.fem.preprocessor
Reference data shared by all cells of a hybrid triangle/quadrilateral mesh.

:class:`LocalComputationPreprocessor` pairs a triangular and a quadrilateral
Lagrange element, checks that they agree on vertices and edges, and tabulates
shape-function values and reference gradients at the quadrature points of
each cell shape once.  The element-matrix computations of every cell then
only need the cell's geometry.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

import numpy as np

from pylagrfem.core.refel import RefEl
from pylagrfem.errors import IncompatibleSpacesError, InternalConsistencyError
from pylagrfem.fem.reference import ScalarReferenceFiniteElement
from pylagrfem.integration.quadrature import QuadRule, make_quad_rule
from pylagrfem.utils.tracing import resolve

logger = logging.getLogger(__name__)

# default quadrature order = DEFAULT_ORDER_FACTOR * max polynomial order
DEFAULT_ORDER_FACTOR = 2


@dataclass(frozen=True, eq=False)
class ShapeFunctionCache:
    """Tabulated reference data for one cell shape.

    ``values[i, q]`` is shape function ``i`` at quadrature point ``q``;
    ``gradients[q]`` is the ``(2, nrsf)`` matrix whose column ``j`` is the
    reference gradient of shape function ``j`` at quadrature point ``q``.
    """

    ref_el: RefEl
    qr: QuadRule
    nrsf: int
    values: np.ndarray
    gradients: np.ndarray

    @property
    def nqp(self) -> int:
        return self.qr.num_points


class LocalComputationPreprocessor:
    """Quadrature and shape-function tables for triangles and quadrilaterals.

    Parameters
    ----------
    fe_tria, fe_quad
        Reference elements for triangular and quadrilateral cells.  Both must
        be 2-D, carry exactly one shape function per vertex, and the same
        number of shape functions per edge.
    quad_order
        Degree of exactness of the quadrature rules. ``0`` selects
        ``DEFAULT_ORDER_FACTOR * max(fe_tria.order, fe_quad.order)``.
    trace
        :class:`~pylagrfem.utils.tracing.TraceControl`, channel names, or
        ``None`` to read the ``PYLAGRFEM_TRACE`` environment variable.

    Raises
    ------
    IncompatibleSpacesError
        If the two elements cannot share vertex and edge degrees of freedom.
    InternalConsistencyError
        If an element returns tables whose size disagrees with its own
        shape-function count.
    """

    def __init__(self,
                 fe_tria: ScalarReferenceFiniteElement,
                 fe_quad: ScalarReferenceFiniteElement,
                 quad_order: int = 0,
                 *,
                 trace=None) -> None:
        self._trace = resolve(trace)
        self._fe: Dict[RefEl, ScalarReferenceFiniteElement] = {
            RefEl.TRIA: fe_tria,
            RefEl.QUAD: fe_quad,
        }
        _check_compatibility(fe_tria, fe_quad)

        quad_order = int(quad_order)
        if quad_order < 0:
            raise ValueError(f"Quadrature order must be non-negative, got {quad_order}")
        if quad_order == 0:
            quad_order = DEFAULT_ORDER_FACTOR * max(fe_tria.order, fe_quad.order)
        self._quad_order = quad_order

        self._cache: Dict[RefEl, ShapeFunctionCache] = {
            ref_el: self._cache_reference_data(fe, ref_el)
            for ref_el, fe in self._fe.items()
        }
        logger.debug(f"Preprocessed {fe_tria!r}/{fe_quad!r} with quadrature order {quad_order}: "
                     f"{self._cache[RefEl.TRIA].nqp} (tria) / {self._cache[RefEl.QUAD].nqp} (quad) points.")

    # ------------------------------------------------------------------
    #  tabulation
    # ------------------------------------------------------------------
    def _cache_reference_data(self, fe: ScalarReferenceFiniteElement, ref_el: RefEl) -> ShapeFunctionCache:
        tag = ref_el.name.capitalize()
        nrsf = fe.num_ref_shape_functions()
        qr = make_quad_rule(ref_el, self._quad_order)
        nqp = qr.num_points
        self._trace.emit("qr", f"LagrEM({tag})", lambda: qr)

        values = np.array(fe.eval_reference_shape_functions(qr.points), dtype=float)
        if values.ndim != 2 or values.shape[0] != nrsf:
            raise InternalConsistencyError(
                f"Mismatch in length of value vector {nrsf} <-> "
                f"{values.shape[0] if values.ndim else 0} ({fe!r})")
        if values.shape[1] != nqp:
            raise InternalConsistencyError(f"Length mismatch {values.shape[1]} <-> {nqp} ({fe!r})")
        self._trace.emit("rsfvals", f"LagrEM({tag}): values of RSFs", lambda: values)

        rsf_grad = np.array(fe.gradients_reference_shape_functions(qr.points), dtype=float)
        if rsf_grad.ndim != 3 or rsf_grad.shape[0] != nrsf:
            raise InternalConsistencyError(
                f"Mismatch in length of gradient vector {nrsf} <-> "
                f"{rsf_grad.shape[0] if rsf_grad.ndim else 0} ({fe!r})")
        if rsf_grad.shape[1:] != (nqp, ref_el.dimension):
            raise InternalConsistencyError(
                f"Gradient table of shape {rsf_grad.shape}, expected "
                f"({nrsf}, {nqp}, {ref_el.dimension}) ({fe!r})")
        # one (dim, nrsf) matrix per quadrature point
        gradients = np.ascontiguousarray(np.transpose(rsf_grad, (1, 2, 0)))
        self._trace.emit("gradvals", f"LagrEM({tag}): gradients",
                         lambda: "\n".join(f"QP {q} = \n{g}" for q, g in enumerate(gradients)))

        values.setflags(write=False)
        gradients.setflags(write=False)
        return ShapeFunctionCache(ref_el, qr, nrsf, values, gradients)

    # ------------------------------------------------------------------
    #  accessors
    # ------------------------------------------------------------------
    @property
    def quad_order(self) -> int:
        return self._quad_order

    @property
    def trace(self):
        return self._trace

    def _lookup(self, ref_el) -> RefEl:
        ref_el = RefEl.from_name(ref_el)
        if ref_el not in self._cache:
            raise KeyError(f"No reference data for {ref_el}; only triangles and quadrilaterals")
        return ref_el

    def fe(self, ref_el) -> ScalarReferenceFiniteElement:
        return self._fe[self._lookup(ref_el)]

    def cache(self, ref_el) -> ShapeFunctionCache:
        return self._cache[self._lookup(ref_el)]

    def nrsf(self, ref_el) -> int:
        return self.cache(ref_el).nrsf

    def qr(self, ref_el) -> QuadRule:
        return self.cache(ref_el).qr

    def values(self, ref_el) -> np.ndarray:
        return self.cache(ref_el).values

    def gradients(self, ref_el) -> np.ndarray:
        return self.cache(ref_el).gradients

    def __repr__(self):
        return (f"LocalComputationPreprocessor({self._fe[RefEl.TRIA]!r}, "
                f"{self._fe[RefEl.QUAD]!r}, quad_order={self._quad_order})")


def _check_compatibility(fe_tria: ScalarReferenceFiniteElement,
                         fe_quad: ScalarReferenceFiniteElement) -> None:
    """Vertex and edge DOFs of both elements must match one-to-one."""
    if fe_tria.dimension != 2 or fe_quad.dimension != 2:
        raise IncompatibleSpacesError(
            f"Implemented only in 2D! Got dimensions {fe_tria.dimension} (tria) "
            f"and {fe_quad.dimension} (quad)")
    if fe_tria.ref_el is not RefEl.TRIA or fe_quad.ref_el is not RefEl.QUAD:
        raise IncompatibleSpacesError(
            f"Unexpected type of reference cell: {fe_tria.ref_el} (expected {RefEl.TRIA}), "
            f"{fe_quad.ref_el} (expected {RefEl.QUAD})")

    for fe in (fe_tria, fe_quad):
        for v in range(fe.ref_el.num_sub_entities(2)):
            n_v = fe.num_ref_shape_functions(2, v)
            if n_v != 1:
                raise IncompatibleSpacesError(
                    f"Exactly one shape function must be assigned to each vertex; "
                    f"{fe!r} has {n_v} at vertex {v}")

    n_edge = fe_tria.num_ref_shape_functions(1, 0)
    for fe in (fe_tria, fe_quad):
        for e in range(fe.ref_el.num_sub_entities(1)):
            n_e = fe.num_ref_shape_functions(1, e)
            if n_e != n_edge:
                raise IncompatibleSpacesError(
                    f"#RSF mismatch on edges {n_edge} <-> {n_e} "
                    f"({fe_tria!r} edge 0 vs {fe!r} edge {e})")
