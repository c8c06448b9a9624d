import numba as _nb


@_nb.njit(cache=True)
def accumulate_element(weights, dets, grads, alpha, gamma, fvals, vals, S, M, b):
    """
    Adds the quadrature-point contributions of one cell to S, M and b.

    grads[q] is the (dim_global, nrsf) matrix of physical gradients, alpha[q]
    the (dim_global, dim_global) diffusion tensor, vals[:, q] the shape
    function values.  Points are visited in ascending order.
    """
    nQ = weights.shape[0]
    nB = vals.shape[0]
    dG = grads.shape[1]
    for q in range(nQ):
        wq = weights[q] * dets[q]
        gq = gamma[q]
        fq = fvals[q]
        for i in range(nB):
            for j in range(nB):
                s = 0.0
                for k in range(dG):
                    for l in range(dG):
                        s += grads[q, k, i] * alpha[q, k, l] * grads[q, l, j]
                S[i, j] += wq * s
                M[i, j] += wq * gq * vals[i, q] * vals[j, q]
            b[i] += wq * fq * vals[i, q]
