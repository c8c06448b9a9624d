import numpy as np
import pytest
from numpy.testing import assert_allclose

from pylagrfem.core import Point, QuadO1, RefEl, SegmentO1, TriaO1


def test_reference_to_global_mapping():
    tria = TriaO1([[0, 0], [2, 0], [0, 1]])
    x = tria.global_([[1/3, 1/3]])
    # Barycentric mapping should give interior point roughly (2/3,1/3)
    assert_allclose(x, [[2/3, 1/3]])
    # integration element is twice the area
    area = 1.0
    assert np.isclose(tria.integration_element([[0.2, 0.2]])[0], 2 * area)


def test_tria_jacobian_and_inverse_gramian():
    tria = TriaO1([[1.0, 1.0], [3.0, 1.5], [1.5, 4.0]])
    pts = np.array([[0.1, 0.3], [0.6, 0.2]])
    J = tria.jacobian(pts)
    assert J.shape == (2, 2, 2)
    assert_allclose(J[0], [[2.0, 0.5], [0.5, 3.0]])
    assert_allclose(tria.jacobian_inverse_gramian(pts)[1], np.linalg.inv(J[1]).T)
    assert_allclose(tria.integration_element(pts), [5.75, 5.75])


def test_quad_bilinear_map():
    quad = QuadO1([[0, 0], [2, 0], [1.5, 1], [0, 1]])
    assert_allclose(quad.global_(RefEl.QUAD.nodes), quad.coords)
    assert_allclose(quad.global_([[0.5, 0.5]]), [[0.875, 0.5]])
    # det J = 2 - 0.5*eta, not constant on a trapezoid
    dets = quad.integration_element([[0.3, 0.0], [0.3, 1.0]])
    assert_allclose(dets, [2.0, 1.5])
    pts = np.array([[0.2, 0.9]])
    assert_allclose(quad.jacobian_inverse_gramian(pts)[0], np.linalg.inv(quad.jacobian(pts)[0]).T)


def test_segment_in_plane():
    seg = SegmentO1([[0, 0], [3, 4]])
    assert seg.dim_local == 1 and seg.dim_global == 2
    assert_allclose(seg.integration_element([[0.2], [0.9]]), [5.0, 5.0])
    assert_allclose(seg.global_([[0.5]]), [[1.5, 2.0]])
    jig = seg.jacobian_inverse_gramian([[0.5]])
    assert jig.shape == (1, 2, 1)
    assert_allclose(jig[0, :, 0], [3 / 25, 4 / 25])


def test_point():
    pt = Point([1.0, 2.0])
    assert pt.ref_el is RefEl.POINT
    assert pt.dim_local == 0 and pt.dim_global == 2
    assert_allclose(pt.global_(np.zeros((2, 0))), [[1, 2], [1, 2]])
    assert_allclose(pt.integration_element(np.zeros((3, 0))), [1, 1, 1])


def test_sub_geometries():
    tria = TriaO1([[0, 0], [2, 0], [0, 1]])
    edge = tria.sub_geometry(1, 1)
    assert isinstance(edge, SegmentO1)
    assert_allclose(edge.coords, [[2, 0], [0, 1]])
    vertex = tria.sub_geometry(2, 2)
    assert isinstance(vertex, Point)
    assert_allclose(vertex.coords[0], [0, 1])
    copy = tria.sub_geometry(0, 0)
    assert copy is not tria and np.array_equal(copy.coords, tria.coords)

    quad = QuadO1([[0, 0], [1, 0], [1, 1], [0, 1]])
    assert_allclose(quad.sub_geometry(1, 3).coords, [[0, 1], [0, 0]])
    assert_allclose(SegmentO1([[0, 0], [1, 1]]).sub_geometry(1, 1).coords, [[1, 1]])
    with pytest.raises(IndexError):
        quad.sub_geometry(1, 4)
    with pytest.raises(ValueError):
        quad.sub_geometry(3, 0)


def test_invalid_coordinates():
    with pytest.raises(ValueError):
        TriaO1([[0, 0], [1, 0]])
    with pytest.raises(ValueError):
        QuadO1([[0], [1], [2], [3]])
    with pytest.raises(ValueError):
        TriaO1([[0, 0], [1, 0], [0, 1]]).global_([[0.1, 0.2, 0.3]])
