"""pylagrfem.assembly.local_assembler
Element matrices of  -div(alpha grad u) + gamma u = f  on one cell.
"""
import logging
from typing import NamedTuple

import numpy as np

from pylagrfem.assembly.kernels import accumulate_element
from pylagrfem.errors import DegenerateGeometryError
from pylagrfem.fem.preprocessor import LocalComputationPreprocessor
from pylagrfem.utils.tracing import resolve

logger = logging.getLogger(__name__)


class LocalMatrices(NamedTuple):
    stiffness: np.ndarray   # (nrsf, nrsf)
    mass: np.ndarray        # (nrsf, nrsf)
    load: np.ndarray        # (nrsf,)


def _eval_scalar(coef, X):
    if callable(coef):
        return np.array([float(coef(x)) for x in X], dtype=float)
    return np.full(X.shape[0], float(coef))


def _as_tensor(value, dim):
    value = np.asarray(value, dtype=float)
    if value.ndim == 0:
        return value * np.eye(dim)
    if value.shape != (dim, dim):
        raise ValueError(f"Diffusion coefficient must be a scalar or a ({dim}, {dim}) tensor, "
                         f"got shape {value.shape}")
    return value


def _eval_tensor(coef, X):
    dim = X.shape[1]
    if callable(coef):
        return np.array([_as_tensor(coef(x), dim) for x in X]).reshape(-1, dim, dim)
    return np.repeat(_as_tensor(coef, dim)[None, :, :], X.shape[0], axis=0)


class ElementMatrixAssembler:
    """Local stiffness, mass and load for triangles and quadrilaterals.

    Coefficients are constants or callables of a global point ``x`` (array of
    length ``dim_global``).  ``alpha`` may return a scalar or a square tensor.
    The assembler only reads the preprocessor tables and the geometry it is
    handed, so one instance can serve several threads.
    """

    def __init__(self, preprocessor: LocalComputationPreprocessor,
                 alpha=1.0, gamma=0.0, f=0.0, *, trace=None):
        if not isinstance(preprocessor, LocalComputationPreprocessor):
            raise TypeError("'preprocessor' must be a LocalComputationPreprocessor instance.")
        self.pre = preprocessor
        self.alpha = alpha
        self.gamma = gamma
        self.f = f
        self._trace = preprocessor.trace if trace is None else resolve(trace)

    def compute(self, geometry, *, alpha=None, gamma=None, f=None) -> LocalMatrices:
        """Return ``LocalMatrices(stiffness, mass, load)`` for the cell ``geometry``.

        Raises
        ------
        DegenerateGeometryError
            If the integration element is not positive at some quadrature
            point, or the Jacobian determinant of a full-dimensional cell
            changes sign between quadrature points.
        """
        alpha = self.alpha if alpha is None else alpha
        gamma = self.gamma if gamma is None else gamma
        f = self.f if f is None else f

        cache = self.pre.cache(geometry.ref_el)
        if geometry.dim_local != 2:
            raise ValueError(f"Expected a cell geometry, got local dimension {geometry.dim_local}")
        pts = cache.qr.points

        dets = np.asarray(geometry.integration_element(pts), dtype=float)
        bad = ~np.isfinite(dets) | (dets <= 0.0)
        if np.any(bad):
            logger.debug(f"Degenerate cell {geometry!r}: integration elements {dets}")
            raise DegenerateGeometryError(
                f"Non-positive integration element at quadrature point(s) "
                f"{np.flatnonzero(bad).tolist()} of {geometry!r}", dets)
        if geometry.dim_local == geometry.dim_global:
            # a folded cell keeps |det J| > 0 but flips orientation inside
            signed = np.linalg.det(np.asarray(geometry.jacobian(pts), dtype=float))
            if np.any(signed == 0.0) or (signed.min() < 0.0 < signed.max()):
                logger.debug(f"Folded cell {geometry!r}: det J = {signed}")
                raise DegenerateGeometryError(
                    f"Jacobian determinant changes sign over {geometry!r}: {signed.tolist()}", dets)

        X =np.asarray(geometry.global_(pts), dtype=float)
        jig = np.asarray(geometry.jacobian_inverse_gramian(pts), dtype=float)
        grads = np.ascontiguousarray(jig @ cache.gradients)  # (nqp, dim_global, nrsf)
        self._trace.emit("geometry", f"LagrEM({cache.ref_el.name.capitalize()}): geometry",
                         lambda: f"points =\n{X}\nintegration elements = {dets}\n"
                                 f"jacobian_inverse_gramian =\n{jig}")

        alpha_q = np.ascontiguousarray(_eval_tensor(alpha, X))
        gamma_q = _eval_scalar(gamma, X)
        f_q = _eval_scalar(f, X)

        n = cache.nrsf
        S = np.zeros((n, n))
        M = np.zeros((n, n))
        b = np.zeros(n)
        accumulate_element(np.ascontiguousarray(cache.qr.weights), dets, grads,
                           alpha_q, gamma_q, f_q, np.ascontiguousarray(cache.values),
                           S, M, b)
        self._trace.emit("element", "LagrEM: local matrices",
                         lambda: f"S =\n{S}\nM =\n{M}\nb = {b}")
        return LocalMatrices(S, M, b)

    def element_matrix(self, geometry) -> np.ndarray:
        """Matrix of the full bilinear form, stiffness + mass."""
        S, M, _ = self.compute(geometry, f=0.0)
        return S + M

    def load_vector(self, geometry) -> np.ndarray:
        return self.compute(geometry).load
