import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from pylagrfem.core.refel import RefEl
from pylagrfem.fem.reference import FeLagrangeQuad, FeLagrangeTria, get_reference


@pytest.mark.parametrize("et,p,n_total,n_edge,n_cell", [
    ('tri', 1, 3, 0, 0), ('tri', 2, 6, 1, 0), ('tri', 3, 10, 2, 1),
    ('quad', 1, 4, 0, 0), ('quad', 2, 9, 1, 1), ('quad', 3, 16, 2, 4),
])
def test_shape_function_counts(et, p, n_total, n_edge, n_cell):
    ref = get_reference(et, p)
    assert ref.dimension == 2
    assert ref.order == p
    assert ref.num_ref_shape_functions() == n_total
    for v in range(ref.ref_el.num_sub_entities(2)):
        assert ref.num_ref_shape_functions(2, v) == 1
    for e in range(ref.ref_el.num_sub_entities(1)):
        assert ref.num_ref_shape_functions(1, e) == n_edge
    assert ref.num_ref_shape_functions(0, 0) == n_cell


def test_order_zero_has_single_cell_function():
    for ref in (FeLagrangeTria(0), FeLagrangeQuad(0)):
        assert ref.num_ref_shape_functions() == 1
        assert ref.num_ref_shape_functions(2, 0) == 0
        assert ref.num_ref_shape_functions(0, 0) == 1
        assert_allclose(ref.eval_reference_shape_functions([[0.2, 0.3]]), [[1.0]])


@pytest.mark.parametrize("et", ['tri', 'quad'])
@pytest.mark.parametrize("p", [1, 2, 3])
def test_kronecker_property(et, p):
    ref = get_reference(et, p)
    nodes = ref.evaluation_nodes()
    N = ref.eval_reference_shape_functions(nodes)
    assert_allclose(N, np.eye(len(nodes)), atol=1e-12)


@pytest.mark.parametrize("et", ['tri', 'quad'])
@pytest.mark.parametrize("p", [1, 2, 3])
def test_partition_of_unity(et, p):
    ref = get_reference(et, p)
    pts = np.array([[0.1, 0.2], [0.25, 0.6], [0.7, 0.05]])
    assert_allclose(ref.eval_reference_shape_functions(pts).sum(axis=0), 1.0, atol=1e-12)
    assert_allclose(ref.gradients_reference_shape_functions(pts).sum(axis=0), 0.0, atol=1e-11)


def test_vertex_then_edge_ordering():
    ref = get_reference('tri', 3)
    nodes = ref.evaluation_nodes()
    assert_allclose(nodes[:3], RefEl.TRIA.nodes)
    # edge 0 runs from vertex 0 to vertex 1, edge 1 from vertex 1 to vertex 2
    assert_allclose(nodes[3:5], [[1/3, 0], [2/3, 0]])
    assert_allclose(nodes[5:7], [[2/3, 1/3], [1/3, 2/3]])
    assert_allclose(nodes[9], [1/3, 1/3])

    quad = get_reference('quad', 2)
    qn = quad.evaluation_nodes()
    assert_allclose(qn[:4], RefEl.QUAD.nodes)
    assert_allclose(qn[4:8], [[0.5, 0], [1, 0.5], [0.5, 1], [0, 0.5]])
    assert_allclose(qn[8], [0.5, 0.5])


def test_p1_gradients_are_constant():
    ref = get_reference('tri', 1)
    G = ref.gradients_reference_shape_functions([[0.1, 0.1], [0.5, 0.2]])
    assert G.shape == (3, 2, 2)
    for q in range(2):
        assert_allclose(G[:, q, :], [[-1, -1], [1, 0], [0, 1]])


def test_gradients_match_finite_differences():
    ref = get_reference('quad', 2)
    x = np.array([0.3, 0.7])
    h = 1e-6
    G = ref.gradients_reference_shape_functions(x)[:, 0, :]
    for d in range(2):
        e = np.zeros(2); e[d] = h
        fd = (ref.eval_reference_shape_functions(x + e) - ref.eval_reference_shape_functions(x - e))[:, 0] / (2 * h)
        assert_allclose(G[:, d], fd, atol=1e-8)


def test_evaluation_is_reproducible():
    ref = get_reference('tri', 2)
    pts = np.random.default_rng(0).random((7, 2)) * 0.5
    assert_array_equal(ref.eval_reference_shape_functions(pts), ref.eval_reference_shape_functions(pts))
    assert_array_equal(ref.gradients_reference_shape_functions(pts),
                       ref.gradients_reference_shape_functions(pts))


def test_factory_is_cached():
    assert get_reference('tri', 2) is get_reference(RefEl.TRIA, 2)
    assert get_reference('quad', 1) is not get_reference('tri', 1)
    with pytest.raises(KeyError):
        get_reference('segment', 1)


def test_invalid_arguments():
    ref = get_reference('tri', 1)
    with pytest.raises(IndexError):
        ref.num_ref_shape_functions(2, 3)
    with pytest.raises(ValueError):
        ref.num_ref_shape_functions(3, 0)
    with pytest.raises(ValueError):
        ref.eval_reference_shape_functions([[0.1, 0.2, 0.3]])
    with pytest.raises(ValueError):
        FeLagrangeQuad(-1)
