
import logging
from dataclasses import FrozenInstanceError
from unittest import TestCase

import numpy as np
from numpy.testing import assert_allclose as numpy_allclose

from areamoments.core.config import Settings
from areamoments.core.face import FacetFace, calculate_face, calculate_mesh
from areamoments.core.logger_mixin import table_report
from areamoments.core.postprocessing.report import (
    DerivedQuantityCalculator, ReportRecord
)
from areamoments.core.preprocessing.mesh import Mesh2D, Mesh3D
from areamoments.core.preprocessing.projection import (
    NormalEstimator, PlaneProjector, estimate_normal, project_mesh
)
from areamoments.core.preprocessing.surface import SurfaceType
from areamoments.core.preprocessing.vector import Vector3D
from areamoments.core.solution.integrator import (
    BasicMomentResult, MomentIntegrator, principal_moments,
    signed_triangle_areas, triangle_moments_about_origin
)


def assert_allclose(actual, desired, err_msg=''):
    numpy_allclose(actual, desired, err_msg=err_msg, atol=1e-10, rtol=1e-7)


def assert_same_axis(theta, expected, err_msg=''):
    """Compare two axis angles modulo pi."""
    assert_allclose(
        [np.cos(2 * theta), np.sin(2 * theta)],
        [np.cos(2 * expected), np.sin(2 * expected)], err_msg=err_msg
    )


def fan(points):
    """Mesh2D of a polygon, triangulated as a fan from its first corner."""
    n = len(points)
    indices = [k for i in range(1, n - 1) for k in (0, i, i + 1)]
    return Mesh2D(np.asarray(points, dtype=float).reshape(-1), indices)


def facets(points_3d, indices):
    """Facet buffer with nine values per triangle."""
    pts = np.asarray(points_3d, dtype=float)
    return pts[np.asarray(indices).reshape(-1)].reshape(-1)


def transformed(mesh, matrix=None, translation=(0.0, 0.0, 0.0)):
    """Copy of a Mesh3D with every vertex mapped to ``matrix @ v + t``."""
    pts = mesh.points
    if matrix is not None:
        pts = pts @ np.asarray(matrix, dtype=float).T
    pts = pts + np.asarray(translation, dtype=float)
    return Mesh3D(pts.reshape(-1), mesh.indices.copy())


def boundary_moments(points):
    """Area and origin moments of a simple polygon from its boundary."""
    x, y = np.asarray(points, dtype=float).T
    x1, y1 = np.roll(x, -1), np.roll(y, -1)
    a = x * y1 - x1 * y
    area = a.sum() / 2
    ix = (a * (y ** 2 + y * y1 + y1 ** 2)).sum() / 12
    iy = (a * (x ** 2 + x * x1 + x1 ** 2)).sum() / 12
    ixy = (a * (x * y1 + 2 * x * y + 2 * x1 * y1 + x1 * y)).sum() / 24
    return area, ix, iy, ixy


UNIT_SQUARE = [(0, 0), (1, 0), (1, 1), (0, 1)]
L_SHAPE = [(0, 0), (3, 0), (3, 1), (1, 1), (1, 4), (0, 4)]
SQUARE_3D = [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)]
SQUARE_TRIANGLES = [0, 1, 2, 0, 2, 3]


def square_with_hole():
    vertices = [0, 0, 4, 0, 4, 4, 0, 4, 1, 1, 3, 1, 3, 3, 1, 3]
    outer = [0, 1, 2, 0, 2, 3]
    inner_reversed = [4, 6, 5, 4, 7, 6]
    return Mesh2D(vertices, outer + inner_reversed)


def rotation_matrix(axis, angle):
    axis = np.asarray(axis, dtype=float)
    axis = axis / np.linalg.norm(axis)
    k = np.array([[0, -axis[2], axis[1]],
                  [axis[2], 0, -axis[0]],
                  [-axis[1], axis[0], 0]])
    return np.eye(3) + np.sin(angle) * k + (1 - np.cos(angle)) * k @ k


class TestVector3D(TestCase):

    def test_arithmetic(self):
        a, b = Vector3D(1, 2, 3), Vector3D(-4, 0.5, 2)
        self.assertEqual(a + b, Vector3D(-3, 2.5, 5))
        self.assertEqual(a - b, Vector3D(5, 1.5, 1))
        self.assertEqual(a * 2, Vector3D(2, 4, 6))
        self.assertEqual(2 * a, Vector3D(2, 4, 6))
        self.assertEqual(a.dot(b), -4 + 1 + 6)

    def test_cross(self):
        x, y, z = Vector3D(1, 0, 0), Vector3D(0, 1, 0), Vector3D(0, 0, 1)
        self.assertEqual(
            x.cross(y), z, 'The cross product must follow the right hand rule.'
        )
        self.assertEqual(y.cross(x), z * -1)
        a, b = Vector3D(1, 2, 3), Vector3D(-2, 0.5, 4)
        c = a.cross(b)
        assert_allclose([c.dot(a), c.dot(b)], [0, 0],
                        err_msg='a x b must be perpendicular to a and b.')

    def test_normalize(self):
        n = Vector3D(3, 0, 4).normalize()
        assert_allclose(n.array, [0.6, 0, 0.8])
        assert_allclose(n.length, 1.0)
        self.assertEqual(
            Vector3D().normalize(), Vector3D(),
            'Normalizing the zero vector must return the zero vector.'
        )
        self.assertEqual(Vector3D(1e-12, 0, 0).normalize(), Vector3D())

    def test_immutable(self):
        v = Vector3D(1, 2, 3)
        with self.assertRaises(FrozenInstanceError):
            v.x = 5

    def test_from_iterable(self):
        self.assertEqual(Vector3D.from_iterable(np.array([1, 2, 3])),
                         Vector3D(1.0, 2.0, 3.0))
        with self.assertRaises(ValueError):
            Vector3D.from_iterable([1, 2])


class TestMesh3D(TestCase):

    def test_shapes(self):
        mesh = Mesh3D(np.array(SQUARE_3D).reshape(-1), SQUARE_TRIANGLES)
        self.assertEqual(mesh.n_vertices, 4)
        self.assertEqual(mesh.n_triangles, 2)
        self.assertEqual(mesh.points.shape, (4, 3))
        self.assertEqual(mesh.triangles.shape, (2, 3))
        self.assertEqual(mesh.vertex(2), Vector3D(1, 1, 0))

    def test_validation(self):
        with self.assertRaises(ValueError):
            Mesh3D([0, 0, 0, 1], [0, 0, 0])
        with self.assertRaises(ValueError):
            Mesh3D([0, 0, 0, 1, 0, 0, 0, 1, 0], [0, 1])
        with self.assertRaises(ValueError, msg='Indices must be in range.'):
            Mesh3D([0, 0, 0, 1, 0, 0, 0, 1, 0], [0, 1, 3])
        with self.assertRaises(ValueError):
            Mesh3D([0, 0, 0, 1, 0, 0, 0, 1, 0], [-1, 1, 2])
        with self.assertRaises(TypeError):
            Mesh3D([0, 0, 0, 1, 0, 0, 0, 1, 0], [0.0, 1.0, 2.0])
        with self.assertRaises(ValueError):
            Mesh3D([0, 0, np.nan, 1, 0, 0, 0, 1, 0], [0, 1, 2])

    def test_empty(self):
        mesh = Mesh3D([], [])
        self.assertEqual(mesh.n_vertices, 0)
        self.assertEqual(mesh.n_triangles, 0)

    def test_from_facet_data(self):
        data = facets(SQUARE_3D, SQUARE_TRIANGLES)
        mesh = Mesh3D.from_facet_data(data)
        self.assertEqual(mesh.n_vertices, 6)
        self.assertEqual(mesh.n_triangles, 2)
        np.testing.assert_array_equal(mesh.indices, np.arange(6))
        assert_allclose(mesh.points[3], [0, 0, 0])
        assert_allclose(mesh.points[5], [0, 1, 0])

    def test_from_facet_data_truncates(self):
        data = list(facets(SQUARE_3D, SQUARE_TRIANGLES)) + [7.0, 8.0]
        mesh = Mesh3D.from_facet_data(data)
        self.assertEqual(
            mesh.n_triangles, 2,
            'Values that do not complete a triangle must be ignored.'
        )
        self.assertEqual(Mesh3D.from_facet_data(data[:8]).n_triangles, 0)
        self.assertEqual(Mesh3D.from_facet_data(data[:9]).n_triangles, 1)
        self.assertEqual(Mesh3D.from_facet_data(None).n_triangles, 0)


class TestMesh2D(TestCase):

    def test_validation(self):
        with self.assertRaises(ValueError):
            Mesh2D([0, 0, 1], [])
        with self.assertRaises(ValueError):
            Mesh2D([0, 0, 1, 0, 0, 1], [0, 1, 5])

    def test_corner_coordinates(self):
        x1, y1, x2, y2, x3, y3 = fan(UNIT_SQUARE).corner_coordinates()
        assert_allclose(x2, [1, 1])
        assert_allclose(y3, [1, 1])
        assert_allclose(x3, [1, 0])

    def test_perimeter(self):
        assert_allclose(fan(UNIT_SQUARE).perimeter(), 4.0)
        assert_allclose(fan(L_SHAPE).perimeter(), 14.0)
        assert_allclose(
            square_with_hole().perimeter(), 24.0,
            err_msg='The perimeter must include the boundary of holes.'
        )
        self.assertEqual(Mesh2D([], []).perimeter(), 0.0)

    def test_perimeter_welds_facets(self):
        mesh = project_mesh(
            Mesh3D.from_facet_data(facets(SQUARE_3D, SQUARE_TRIANGLES))
        )
        assert_allclose(
            mesh.perimeter(), 4.0,
            err_msg='Duplicated facet vertices must be welded, otherwise the '
                    'shared diagonal counts as boundary.'
        )

    def test_perimeter_welds_per_grid_cell(self):
        vertices = [0, 0, 1, 0, 1, 1, 1e-10, 1e-10, 1, 1, 0, 1]
        mesh = Mesh2D(vertices, [0, 1, 2, 3, 4, 5])
        numpy_allclose(
            mesh.perimeter(1e-9), 4.0, atol=1e-8,
            err_msg='Vertices inside one weld cell must be merged.'
        )
        vertices = [0.4e-9, 0, 1, 0, 1, 1, 0.6e-9, 0, 1, 1, 0, 1]
        mesh = Mesh2D(vertices, [0, 1, 2, 3, 4, 5])
        self.assertEqual(len(mesh.boundary_edges(1e-9)), 6)
        numpy_allclose(mesh.perimeter(1e-9), 4.0 + 2 * np.sqrt(2), atol=1e-8)
        numpy_allclose(mesh.perimeter(1e-6), 4.0, atol=1e-8)

    def test_extreme_fiber_distances(self):
        assert_allclose(fan(L_SHAPE).extreme_fiber_distances(1.0, 1.5),
                        (2.0, 2.5))
        self.assertEqual(Mesh2D([], []).extreme_fiber_distances(1, 1),
                         (0.0, 0.0))


class TestNormalEstimator(TestCase):

    def test_first_triangle(self):
        mesh = Mesh3D(np.array(SQUARE_3D).reshape(-1), SQUARE_TRIANGLES)
        assert_allclose(estimate_normal(mesh).array, [0, 0, 1])
        reversed_mesh = Mesh3D(mesh.vertices, [0, 2, 1, 0, 3, 2])
        assert_allclose(
            estimate_normal(reversed_mesh).array, [0, 0, -1],
            err_msg='The normal must follow the winding of the first '
                    'triangle.'
        )

    def test_tilted(self):
        pts = [(1, 0, 0), (0, 1, 0), (0, 0, 1)]
        mesh = Mesh3D(np.array(pts).reshape(-1), [0, 1, 2])
        assert_allclose(estimate_normal(mesh).array,
                        np.ones(3) / np.sqrt(3))

    def test_fallback(self):
        estimator = NormalEstimator(Mesh3D([], []))
        self.assertEqual(estimator(), Vector3D(0, 0, 1))
        self.assertTrue(estimator.used_fallback)
        estimator = NormalEstimator(Mesh3D([0, 0, 0], []))
        self.assertEqual(estimator(), Vector3D(0, 0, 1))

    def test_degenerate(self):
        mesh = Mesh3D([0, 0, 0, 1, 1, 1, 2, 2, 2], [0, 1, 2])
        estimator = NormalEstimator(mesh)
        self.assertEqual(
            estimator(), Vector3D(),
            'Collinear corners must give the zero vector, not NaN.'
        )
        self.assertFalse(estimator.used_fallback)


class TestPlaneProjector(TestCase):

    def assert_frame(self, projector):
        x, y, z = projector.x_axis, projector.y_axis, projector.z_axis
        basis = np.array([x.array, y.array, z.array])
        assert_allclose(basis @ basis.T, np.eye(3),
                        err_msg='The local frame must be orthonormal.')
        assert_allclose(x.cross(y).array, z.array,
                        err_msg='The local frame must be right-handed.')

    def test_frame_z_normal(self):
        p = PlaneProjector(Vector3D(0, 0, 1))
        assert_allclose(p.x_axis.array, [1, 0, 0])
        assert_allclose(p.y_axis.array, [0, 1, 0])
        self.assert_frame(p)

    def test_frame_normal_along_y(self):
        p = PlaneProjector(Vector3D(0, 1, 0))
        assert_allclose(
            p.x_axis.array, [0, 0, -1],
            err_msg='A normal parallel to Y must build x from the global X.'
        )
        assert_allclose(p.y_axis.array, [-1, 0, 0])
        self.assert_frame(p)

    def test_frame_arbitrary(self):
        for normal in [(1, 2, 3), (0.3, -0.95, 0.1), (-1, 0, 0),
                       (0, -5, 0.01)]:
            self.assert_frame(PlaneProjector(Vector3D(*normal)))

    def test_project_rigid(self):
        rot = rotation_matrix((1, -2, 0.5), 0.9)
        pts = np.array(SQUARE_3D, dtype=float) @ rot.T + [3, -1, 2]
        mesh = Mesh3D(pts.reshape(-1), SQUARE_TRIANGLES)
        projected = project_mesh(mesh)
        assert_allclose(projected.points[0], [0, 0],
                        err_msg='The first vertex is the local origin.')
        d3 = np.linalg.norm(pts[:, None] - pts[None], axis=2)
        p2 = projected.points
        d2 = np.linalg.norm(p2[:, None] - p2[None], axis=2)
        assert_allclose(d2, d3, err_msg='The projection must keep lengths.')
        np.testing.assert_array_equal(projected.indices, mesh.indices)

    def test_project_offset_point(self):
        p = PlaneProjector(Vector3D(0, 0, 1), Vector3D(1, 1, 5))
        assert_allclose(p.project_point(Vector3D(3, 4, -2)), (2, 3),
                        err_msg='Out-of-plane offsets are dropped.')

    def test_project_empty(self):
        projected = PlaneProjector(Vector3D(0, 0, 1)).project(Mesh3D([], []))
        self.assertEqual(projected.n_vertices, 0)
        self.assertEqual(projected.n_triangles, 0)


class TestTriangleFormulas(TestCase):

    def test_signed_area(self):
        assert_allclose(signed_triangle_areas(0, 0, 2, 0, 0, 3), 3.0)
        assert_allclose(signed_triangle_areas(0, 0, 0, 3, 2, 0), -3.0)

    def test_moments_about_origin(self):
        # right triangle with legs b=2 along x and h=3 along y
        area = signed_triangle_areas(0, 0, 2, 0, 0, 3)
        ix, iy, ixy = triangle_moments_about_origin(0, 0, 2, 0, 0, 3, area)
        assert_allclose(ix, 2 * 3 ** 3 / 12)
        assert_allclose(iy, 3 * 2 ** 3 / 12)
        assert_allclose(ixy, 2 ** 2 * 3 ** 2 / 24)

    def test_principal_moments(self):
        assert_allclose(principal_moments(2.0, 1.0, 0.0), (2.0, 1.0, 0.0))
        imax, imin, theta = principal_moments(1.0, 1.0, 0.5)
        assert_allclose((imax, imin, theta), (1.5, 0.5, -np.pi / 4))
        self.assertEqual(
            principal_moments(1.0, 1.0, 1e-17)[2], 0.0,
            'An isotropic tensor has the conventional angle 0.'
        )


class TestMomentIntegrator(TestCase):

    def setUp(self):
        self.integrator = MomentIntegrator()

    def test_unit_square(self):
        r = self.integrator.integrate(fan(UNIT_SQUARE))
        assert_allclose(r.area, 1.0)
        assert_allclose((r.cx, r.cy), (0.5, 0.5))
        assert_allclose((r.ix, r.iy, r.ixy), (1 / 12, 1 / 12, 0.0))
        assert_allclose((r.imax, r.imin), (1 / 12, 1 / 12))
        self.assertEqual(r.theta, 0.0)

    def test_rectangle(self):
        r = self.integrator.integrate(fan([(0, 0), (4, 0), (4, 2), (0, 2)]))
        assert_allclose(r.area, 8.0)
        assert_allclose((r.ix, r.iy), (4 * 2 ** 3 / 12, 2 * 4 ** 3 / 12))
        assert_allclose((r.imax, r.imin), (r.iy, r.ix))
        assert_same_axis(
            r.theta, np.pi / 2,
            err_msg='The axis of Imax of a wide rectangle is the y-axis.'
        )

    def test_matches_boundary_integrals(self):
        r = self.integrator.integrate(fan(L_SHAPE))
        area, ix0, iy0, ixy0 = boundary_moments(L_SHAPE)
        assert_allclose(r.area, area)
        assert_allclose(r.ix, ix0 - area * r.cy ** 2)
        assert_allclose(r.iy, iy0 - area * r.cx ** 2)
        assert_allclose(r.ixy, ixy0 - area * r.cx * r.cy)
        assert_allclose((r.cx, r.cy), (1.0, 1.5))

    def test_tensor_eigenvalues(self):
        r = self.integrator.integrate(fan(L_SHAPE))
        assert_allclose(np.linalg.eigvalsh(r.tensor), [r.imin, r.imax])
        direction = np.array([np.cos(r.theta), np.sin(r.theta)])
        assert_allclose(
            r.tensor @ direction, r.imax * direction,
            err_msg='theta must point along the principal axis of Imax.'
        )

    def test_translation_invariance(self):
        ref = self.integrator.integrate(fan(L_SHAPE))
        for dx, dy in [(3, -7), (-100, 250), (0.25, 0.0)]:
            moved = [(x + dx, y + dy) for x, y in L_SHAPE]
            r = self.integrator.integrate(fan(moved))
            assert_allclose((r.cx, r.cy), (ref.cx + dx, ref.cy + dy))
            numpy_allclose(
                (r.ix, r.iy, r.ixy, r.imax, r.imin),
                (ref.ix, ref.iy, ref.ixy, ref.imax, ref.imin), rtol=1e-9,
                err_msg='Centroidal moments must not depend on the position.'
            )
            assert_same_axis(r.theta, ref.theta)

    def test_rotation_covariance(self):
        ref = self.integrator.integrate(fan(L_SHAPE))
        c = np.array([ref.cx, ref.cy])
        for phi in (0.3, 0.7, np.pi / 2, 2.5):
            # clockwise rotation by phi about the centroid
            rot = np.array([[np.cos(phi), np.sin(phi)],
                            [-np.sin(phi), np.cos(phi)]])
            pts = (np.array(L_SHAPE, dtype=float) - c) @ rot.T + c
            r = self.integrator.integrate(fan(pts))
            assert_allclose((r.area, r.imax, r.imin),
                            (ref.area, ref.imax, ref.imin))
            assert_allclose(r.ix + r.iy, ref.ix + ref.iy,
                            err_msg='The polar moment is rotation invariant.')
            assert_allclose((r.cx, r.cy), (ref.cx, ref.cy))
            assert_same_axis(
                r.theta, ref.theta - phi,
                err_msg='Rotating clockwise by phi must turn theta by -phi.'
            )

    def test_winding_cancellation(self):
        r = self.integrator.integrate(square_with_hole())
        assert_allclose(
            r.area, 12.0,
            err_msg='A reversed hole must subtract its area.'
        )
        assert_allclose((r.cx, r.cy), (2.0, 2.0))
        assert_allclose((r.ix, r.iy), ((4 ** 4 - 2 ** 4) / 12,) * 2)
        assert_allclose(r.ixy, 0.0)

    def test_clockwise_mesh(self):
        cw = Mesh2D(fan(UNIT_SQUARE).vertices, [0, 2, 1, 0, 3, 2])
        r = self.integrator.integrate(cw)
        assert_allclose(r.area, 1.0)
        assert_allclose((r.cx, r.cy), (0.5, 0.5))
        assert_allclose(
            (r.ix, r.iy), (1 / 12, 1 / 12),
            err_msg='A clockwise mesh must report positive moments.'
        )
        ccw = self.integrator.integrate(fan(L_SHAPE))
        cw = self.integrator.integrate(fan(L_SHAPE[::-1]))
        assert_allclose((cw.area, cw.ix, cw.iy, cw.ixy),
                        (ccw.area, ccw.ix, ccw.iy, ccw.ixy))

    def test_scaling_law(self):
        ref = self.integrator.integrate(fan(L_SHAPE))
        for k in (0.01, 2.5, 40.0):
            r = self.integrator.integrate(
                fan([(k * x, k * y) for x, y in L_SHAPE])
            )
            assert_allclose(r.area, ref.area * k ** 2)
            assert_allclose((r.ix, r.iy, r.ixy),
                            np.array([ref.ix, ref.iy, ref.ixy]) * k ** 4)
            assert_allclose(r.theta, ref.theta)

    def test_degenerate(self):
        for mesh in (
            Mesh2D([2, 2, 2, 2, 2, 2], [0, 1, 2]),
            Mesh2D([0, 0, 1, 1, 2, 2], [0, 1, 2]),
            Mesh2D([], []),
            Mesh2D([0, 0, 1, 0], []),
            Mesh2D(fan(UNIT_SQUARE).vertices, [0, 1, 2, 0, 2, 1]),
        ):
            r = self.integrator.integrate(mesh)
            self.assertEqual(r, BasicMomentResult.zero())
            self.assertTrue(r.is_zero)


class TestDerivedQuantityCalculator(TestCase):

    def setUp(self):
        self.basic = MomentIntegrator().integrate(fan(UNIT_SQUARE))
        self.calc = DerivedQuantityCalculator()

    def test_unit_square(self):
        r = self.calc(self.basic, perimeter=4.0, cx_max=0.5, cy_max=0.5,
                      surface_type=SurfaceType.PLANAR)
        assert_allclose((r.ixx_origin, r.iyy_origin, r.ixy_origin),
                        (1 / 3, 1 / 3, 0.25))
        assert_allclose((r.j_origin, r.j_centroid), (2 / 3, 1 / 6))
        assert_allclose((r.rx, r.ry), (np.sqrt(1 / 12),) * 2)
        assert_allclose((r.sx_min, r.sy_min), (1 / 6, 1 / 6))
        assert_allclose(r.rz, np.sqrt(1 / 6))
        assert_allclose((r.qx, r.qy), (0.5, 0.5))
        self.assertEqual(r.perimeter, 4.0)
        self.assertEqual(r.face_type, 'Planar Face')

    def test_parallel_axis_identity(self):
        mesh = fan(L_SHAPE)
        basic = MomentIntegrator().integrate(mesh)
        r = self.calc(basic)
        corners = mesh.corner_coordinates()
        area = signed_triangle_areas(*corners)
        ix0, iy0, ixy0 = (m.sum() for m in
                          triangle_moments_about_origin(*corners, area))
        assert_allclose(
            (r.ixx_origin, r.iyy_origin, r.ixy_origin), (ix0, iy0, ixy0),
            err_msg='Shifting to the centroid and back must give the origin '
                    'moments.'
        )

    def test_guards(self):
        r = self.calc(BasicMomentResult.zero(), cx_max=1e-12, cy_max=0.0)
        self.assertEqual((r.rx, r.ry, r.rz, r.sx_min, r.sy_min),
                         (0.0, 0.0, 0.0, 0.0, 0.0))
        for value in r.as_dict().values():
            if isinstance(value, float):
                self.assertTrue(np.isfinite(value))
        r = self.calc(self.basic, cx_max=0.5, cy_max=1e-11)
        self.assertEqual(r.sx_min, 0.0)
        assert_allclose(r.sy_min, 1 / 6)

    def test_basic_round_trip(self):
        r = self.calc(self.basic)
        self.assertEqual(r.basic, self.basic)

    def test_as_dict(self):
        basic = MomentIntegrator().integrate(
            fan([(0, 0), (4, 0), (4, 2), (0, 2)])
        )
        d = self.calc(basic, surface_type='cylinder').as_dict()
        self.assertEqual(d['surface_type'], 'Cylindrical Face')
        for key in ('area', 'qx', 'qy', 'rz', 'theta_deg', 'j_centroid'):
            self.assertIn(key, d)
        assert_allclose(abs(d['theta_deg']), 90.0)

    def test_frozen(self):
        r = self.calc(self.basic)
        with self.assertRaises(FrozenInstanceError):
            r.area = 3.0


class TestCalculateMesh(TestCase):

    def l_shape_3d(self, rot=None, shift=(0, 0, 0)):
        pts = np.array([(x, y, 0.0) for x, y in L_SHAPE])
        if rot is not None:
            pts = pts @ rot.T
        pts = pts + np.asarray(shift, dtype=float)
        tris = fan(L_SHAPE).indices
        return Mesh3D.from_facet_data(facets(pts, tris))

    def test_unit_square(self):
        mesh = Mesh3D.from_facet_data(facets(SQUARE_3D, SQUARE_TRIANGLES))
        r = calculate_mesh(mesh, SurfaceType.PLANAR)
        assert_allclose((r.area, r.cx, r.cy), (1.0, 0.5, 0.5))
        assert_allclose((r.ix, r.iy, r.ixy), (1 / 12, 1 / 12, 0.0))
        assert_allclose(r.perimeter, 4.0)
        assert_allclose((r.cx_max, r.cy_max), (0.5, 0.5))
        self.assertEqual(r.theta, 0.0)
        self.assertIs(r.surface_type, SurfaceType.PLANAR)

    def test_tilted_plane(self):
        ref = calculate_mesh(self.l_shape_3d())
        rot = rotation_matrix((0.2, 1.0, -0.4), 1.1)
        r = calculate_mesh(self.l_shape_3d(rot, shift=(5, -3, 12)))
        assert_allclose(
            (r.area, r.imax, r.imin, r.j_centroid, r.perimeter),
            (ref.area, ref.imax, ref.imin, ref.j_centroid, ref.perimeter),
            err_msg='Frame-independent properties must survive any rigid '
                    'placement of the face.'
        )
        assert_allclose(r.area, 6.0)

    def test_translation_3d(self):
        ref = calculate_mesh(self.l_shape_3d())
        r = calculate_mesh(self.l_shape_3d(shift=(-40, 7, 0.5)))
        assert_allclose(
            [r.cx, r.cy, r.ix, r.iy, r.ixy, r.ixx_origin, r.j_origin],
            [ref.cx, ref.cy, ref.ix, ref.iy, ref.ixy, ref.ixx_origin,
             ref.j_origin],
            err_msg='The local origin moves with the face.'
        )

    def test_scaling_3d(self):
        ref = calculate_mesh(self.l_shape_3d())
        k = 3.0
        mesh = self.l_shape_3d()
        r = calculate_mesh(transformed(mesh, np.eye(3) * k))
        assert_allclose(r.area, ref.area * k ** 2)
        assert_allclose((r.ix, r.iy, r.ixy),
                        np.array([ref.ix, ref.iy, ref.ixy]) * k ** 4)
        assert_allclose((r.sx_min, r.sy_min),
                        np.array([ref.sx_min, ref.sy_min]) * k ** 3)
        assert_allclose(r.theta, ref.theta)

    def test_normal_along_y(self):
        pts = [(0, 0, 0), (0, 0, 1), (1, 0, 1), (1, 0, 0)]
        r = calculate_mesh(Mesh3D.from_facet_data(
            facets(pts, SQUARE_TRIANGLES)
        ))
        assert_allclose((r.area, r.ix, r.iy), (1.0, 1 / 12, 1 / 12))

    def test_degenerate(self):
        data = [1.0, 2.0, 3.0] * 3
        r = calculate_mesh(Mesh3D.from_facet_data(data), SurfaceType.CONICAL)
        self.assertEqual(r.area, 0.0)
        self.assertEqual(r.perimeter, 0.0)
        self.assertIs(r.surface_type, SurfaceType.CONICAL)
        self.assertTrue(all(np.isfinite(v) for v in r.as_dict().values()
                            if isinstance(v, float)))
        r = calculate_mesh(Mesh3D([], []))
        self.assertEqual(r, ReportRecord())

    def test_overflow(self):
        huge = [1e308, 0, 0, -1e308, 0, 0, 0, 1e308, 0]
        r = calculate_mesh(Mesh3D.from_facet_data(huge), SurfaceType.PLANAR)
        self.assertEqual(
            r, ReportRecord(surface_type=SurfaceType.PLANAR),
            'A projection that overflows must give the zero record.'
        )
        big = np.array(SQUARE_3D, dtype=float) * 1e150
        r = calculate_mesh(
            Mesh3D.from_facet_data(facets(big, SQUARE_TRIANGLES)), 'plane'
        )
        self.assertEqual(
            r, ReportRecord(surface_type=SurfaceType.PLANAR),
            'Moments that overflow must give the zero record.'
        )
        self.assertTrue(r.is_finite)


class ListFace:

    def __init__(self, data, surface_type='plane', error=None):
        self.data = data
        self.surface_type = surface_type
        self.error = error
        self.tolerances = []

    def facet_data(self, tolerance):
        self.tolerances.append(tolerance)
        if self.error is not None:
            raise self.error
        return self.data


class TestCalculateFace(TestCase):

    def test_result(self):
        face = ListFace(facets(SQUARE_3D, SQUARE_TRIANGLES))
        r = calculate_face(face, tolerance=0.05)
        assert_allclose(r.area, 1.0)
        self.assertIs(r.surface_type, SurfaceType.PLANAR)
        self.assertEqual(face.tolerances, [0.05])

    def test_facet_face(self):
        face = FacetFace(facets(SQUARE_3D, SQUARE_TRIANGLES), 'sphere')
        self.assertIs(face.surface_type, SurfaceType.SPHERICAL)
        r = calculate_face(face)
        assert_allclose(r.area, 1.0)
        self.assertEqual(r.face_type, 'Spherical Face')

    def test_no_result(self):
        cases = (
            ListFace(None),
            ListFace([]),
            ListFace([0.0] * 8),
            ListFace(['a'] * 9),
            ListFace([np.inf] + [0.0] * 8),
            ListFace([0.0] * 9, error=RuntimeError('kernel busy')),
        )
        for face in cases:
            self.assertIsNone(
                calculate_face(face),
                'Faces without usable facet data must produce no result.'
            )
        self.assertIsNone(calculate_face(None))

    def test_zero_area_is_a_result(self):
        r = calculate_face(ListFace([0.0] * 9))
        self.assertIsNotNone(r)
        self.assertEqual(r.area, 0.0)

    def test_surface_type_failure(self):
        class BrokenType(ListFace):
            @property
            def surface_type(self):
                raise RuntimeError('no geometry')

            @surface_type.setter
            def surface_type(self, value):
                pass

        r = calculate_face(BrokenType(facets(SQUARE_3D, SQUARE_TRIANGLES)))
        self.assertIs(r.surface_type, SurfaceType.UNKNOWN)


class TestSurfaceType(TestCase):

    def test_from_name(self):
        self.assertIs(SurfaceType.from_name('Planar'), SurfaceType.PLANAR)
        self.assertIs(SurfaceType.from_name('torus'), SurfaceType.TOROIDAL)
        self.assertIs(SurfaceType.from_name('B-Spline Surface'),
                      SurfaceType.SPLINE)
        self.assertIs(SurfaceType.from_name(SurfaceType.CONICAL),
                      SurfaceType.CONICAL)
        self.assertIs(SurfaceType.from_name('nurbs'), SurfaceType.UNKNOWN)
        self.assertIs(SurfaceType.from_name(None), SurfaceType.UNKNOWN)
        self.assertEqual(SurfaceType.UNKNOWN.label, 'Face')


class TestSettings(TestCase):

    def test_defaults(self):
        s = Settings()
        self.assertEqual(s.tessellation_tolerance, 0.001)
        self.assertTrue(s.auto_calculate)

    def test_validate(self):
        with self.assertRaises(ValueError):
            Settings(tessellation_tolerance=0)
        with self.assertRaises(ValueError):
            Settings(weld_tolerance=-1e-9)
        with self.assertRaises(ValueError):
            Settings(tessellation_tolerance='fine')
        with self.assertRaises(TypeError):
            Settings(auto_calculate='yes')


class TestLogging(TestCase):

    def test_debug_flag(self):
        calc = DerivedQuantityCalculator(debug=True)
        self.assertEqual(calc.logger.level, logging.DEBUG)
        self.assertEqual(
            calc.logger.name,
            'areamoments.core.postprocessing.report.DerivedQuantityCalculator'
        )
        self.assertEqual(MomentIntegrator().logger.level, logging.WARNING)

    def test_table_report(self):
        basic = MomentIntegrator().integrate(fan(UNIT_SQUARE))
        record = DerivedQuantityCalculator()(basic, surface_type='planar')
        table = table_report(record, decimals=3)
        self.assertIn('Quantity', table)
        self.assertIn('Planar Face', table)
        self.assertIn('0.083', table)

    def test_fallback_warning(self):
        with self.assertLogs(
            'areamoments.core.preprocessing.projection.NormalEstimator',
            level='WARNING'
        ):
            estimate_normal(Mesh3D([], []))
