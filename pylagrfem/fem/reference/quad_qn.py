from functools import lru_cache
import sympy as sp


def entity_counts(n: int):
    """Shape functions per sub-entity, keyed by codimension."""
    if n == 0:
        return {0: 1, 1: 0, 2: 0}
    return {0: (n - 1) ** 2, 1: n - 1, 2: 1}


@lru_cache(maxsize=None)
def _lagrange_basis_1d(n: int):
    """1D Lagrange polynomials on the equispaced nodes k/n of [0,1]."""
    x = sp.symbols('x')
    nodes = [sp.Rational(k, n) for k in range(n + 1)]
    L = []
    for i, xi in enumerate(nodes):
        num = sp.S(1)
        den = sp.S(1)
        for j, xj in enumerate(nodes):
            if i == j:
                continue
            num *= (x - xj)
            den *= (xi - xj)
        L.append(sp.expand(num / den))
    return x, L


def _lattice_nodes(n: int):
    """(i, j) lattice indices of the Qn nodes: vertices, edges, interior."""
    verts = [(0, 0), (n, 0), (n, n), (0, n)]
    idx = list(verts)
    for a, b in ((0, 1), (1, 2), (2, 3), (3, 0)):
        (ia, ja), (ib, jb) = verts[a], verts[b]
        for m in range(1, n):
            idx.append((ia + m * (ib - ia) // n, ja + m * (jb - ja) // n))
    for j in range(1, n):
        for i in range(1, n):
            idx.append((i, j))
    return idx


@lru_cache(maxsize=None)
def quad_qn(n: int):
    """
    Tensor-product Q_n on [0,1]^2.
    Returns: (symbols, nodes, basis) with the same ordering convention as
    ``tri_pn``: vertices (counter-clockwise from the origin), edge nodes from
    each edge's first to its second vertex, interior nodes (eta outer, xi inner).
    """
    if n < 0:
        raise ValueError("Polynomial order n must be non-negative.")
    xi_sym, eta_sym = sp.symbols("xi eta")
    if n == 0:
        return (xi_sym, eta_sym), [(sp.Rational(1, 2), sp.Rational(1, 2))], [sp.S(1)]

    x, L = _lagrange_basis_1d(n)
    nodes = []
    basis = []
    for i, j in _lattice_nodes(n):
        nodes.append((sp.Rational(i, n), sp.Rational(j, n)))
        basis.append(sp.expand(L[i].subs(x, xi_sym) * L[j].subs(x, eta_sym)))
    return (xi_sym, eta_sym), nodes, basis
