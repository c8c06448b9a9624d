"""pylagrfem.integration.quadrature
Quadrature rules on the reference point, segment, triangle and square.

``order`` is always the total polynomial degree integrated exactly.
"""
# pylagrfem.integration.quadrature
import math
from dataclasses import dataclass
from functools import lru_cache

import numpy as np
from numpy.polynomial.legendre import leggauss
from scipy.special import roots_jacobi

from pylagrfem.core.refel import RefEl


@dataclass(frozen=True, eq=False)
class QuadRule:
    """Immutable quadrature rule: points (n, dim) and weights (n,)."""

    ref_el: RefEl
    order: int
    points: np.ndarray
    weights: np.ndarray

    def __post_init__(self):
        wts = np.array(self.weights, dtype=float).ravel()
        pts = np.array(self.points, dtype=float)
        if pts.size != wts.shape[0] * self.ref_el.dimension:
            raise ValueError(f"{pts.shape} points do not match {wts.shape[0]} weights")
        pts = pts.reshape(wts.shape[0], self.ref_el.dimension)
        pts.setflags(write=False)
        wts.setflags(write=False)
        object.__setattr__(self, "points", pts)
        object.__setattr__(self, "weights", wts)

    @property
    def num_points(self) -> int:
        return self.weights.shape[0]

    def __iter__(self):
        return iter(zip(self.points, self.weights))

    def __str__(self):
        rows = "\n".join(f"  {p} -> {w:.16g}" for p, w in self)
        return f"QuadRule({self.ref_el}, order={self.order}, n={self.num_points})\n{rows}"


# -------------------------------------------------------------------------
# 1‑D Gauss–Legendre
# -------------------------------------------------------------------------
def _num_points(order: int) -> int:
    # n Gauss points integrate degree 2n-1 exactly
    return max(1, math.ceil((order + 1) / 2))


def _gl01(n: int):
    """Gauss–Legendre nodes and weights mapped to [0,1]."""
    xi, w = leggauss(int(n))
    return 0.5 * (xi + 1.0), 0.5 * w


def _gj01(n: int):
    """Gauss–Jacobi nodes on [0,1] for the weight (1-u)."""
    t, w = roots_jacobi(int(n), 1.0, 0.0)
    # (1-t) = 2(1-u) and dt = 2 du
    return 0.5 * (t + 1.0), 0.25 * w


# -------------------------------------------------------------------------
# Rules per reference shape
# -------------------------------------------------------------------------
def _point_rule(order):
    return np.zeros((1, 0)), np.ones(1)


def _segment_rule(order):
    x, w = _gl01(_num_points(order))
    return x[:, None], w


def _quad_rule(order):
    x, w = _gl01(_num_points(order))
    pts = np.array([[xi, eta] for eta in x for xi in x])
    wts = np.array([wx * wy for wy in w for wx in w])
    return pts, wts


def _tria_rule(order):
    """Stroud conical product rule collapsing the square onto the triangle."""
    n = _num_points(order)
    u, wu = _gj01(n)
    v, wv = _gl01(n)
    pts = []
    wts = []
    for i in range(n):
        for j in range(n):
            pts.append([u[i], v[j] * (1.0 - u[i])])
            wts.append(wu[i] * wv[j])
    return np.array(pts), np.array(wts)


_RULES = {
    RefEl.POINT: _point_rule,
    RefEl.SEGMENT: _segment_rule,
    RefEl.TRIA: _tria_rule,
    RefEl.QUAD: _quad_rule,
}


# -------------------------------------------------------------------------
# Public API
# -------------------------------------------------------------------------
@lru_cache(maxsize=None)
def _make_quad_rule(ref_el: RefEl, order: int) -> QuadRule:
    pts, wts = _RULES[ref_el](order)
    return QuadRule(ref_el, order, pts, wts)


def make_quad_rule(ref_el, order: int) -> QuadRule:
    """Return a rule on ``ref_el`` exact for polynomials of degree <= ``order``."""
    ref_el = RefEl.from_name(ref_el)
    order = int(order)
    if order < 0:
        raise ValueError(f"Quadrature order must be non-negative, got {order}")
    return _make_quad_rule(ref_el, order)
