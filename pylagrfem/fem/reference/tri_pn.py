from functools import lru_cache
import sympy as sp


def entity_counts(n: int):
    """Shape functions per sub-entity, keyed by codimension."""
    if n == 0:
        return {0: 1, 1: 0, 2: 0}
    return {0: (n - 1) * (n - 2) // 2, 1: n - 1, 2: 1}


def _nodes(n: int):
    """Pn nodes on the reference triangle (0,0)-(1,0)-(0,1), vertices first,
    then edge nodes edge by edge, then interior nodes."""
    if n == 0:
        return [(sp.Rational(1, 3), sp.Rational(1, 3))]
    verts = [(sp.S(0), sp.S(0)), (sp.S(1), sp.S(0)), (sp.S(0), sp.S(1))]
    nodes = list(verts)
    for a, b in ((0, 1), (1, 2), (2, 0)):
        (xa, ya), (xb, yb) = verts[a], verts[b]
        for m in range(1, n):
            t = sp.Rational(m, n)
            nodes.append((xa + t * (xb - xa), ya + t * (yb - ya)))
    for j in range(1, n):
        for i in range(1, n - j):
            nodes.append((sp.Rational(i, n), sp.Rational(j, n)))
    return nodes


@lru_cache(maxsize=None)
def tri_pn(n: int):
    """
    Symbolic Lagrange basis of P_n on the reference triangle.

    Args:
        n: Polynomial order of the Pn element.

    Returns:
        tuple: (symbols, nodes, basis)
            - symbols: the sympy symbols (xi, eta).
            - nodes: interpolation nodes, one per basis function, in local order.
            - basis: list of sympy expressions, basis[k](nodes[l]) = delta_kl.
    """
    if n < 0:
        raise ValueError("Polynomial order n must be non-negative.")
    xi_sym, eta_sym = sp.symbols("xi eta")
    nodes = _nodes(n)
    num_nodes = len(nodes)
    if num_nodes != (n + 1) * (n + 2) // 2:
        raise RuntimeError(f"Internal error: Mismatch in Pn node count for order n={n}. "
                           f"Generated {num_nodes}, expected {(n + 1) * (n + 2) // 2}")
    if n == 0:
        return (xi_sym, eta_sym), nodes, [sp.S(1)]

    # monomial basis for polynomials of degree <= n in 2D
    monomials_sym = [xi_sym**pow_xi * eta_sym**(total_degree - pow_xi)
                     for total_degree in range(n + 1)
                     for pow_xi in range(total_degree + 1)]

    # Vandermonde-like matrix V[node, monomial]
    V_matrix = sp.Matrix(num_nodes, num_nodes,
                         lambda i, j: monomials_sym[j].subs({xi_sym: nodes[i][0],
                                                             eta_sym: nodes[i][1]}))
    try:
        coeffs_matrix = V_matrix.inv()
    except ValueError as e:
        raise RuntimeError(f"Vandermonde matrix is singular for tri_pn order n={n}.") from e

    monomials_col = sp.Matrix(monomials_sym)
    basis = [sp.expand((monomials_col.T * coeffs_matrix.col(k))[0, 0])
             for k in range(num_nodes)]
    return (xi_sym, eta_sym), nodes, basis
