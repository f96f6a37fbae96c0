
import logging
from dataclasses import dataclass, field

import numpy as np

from areamoments.core.config import AXIS_SWITCH, FALLBACK_NORMAL
from areamoments.core.logger_mixin import LoggerMixin, table_vertices
from areamoments.core.preprocessing.mesh import Mesh2D, Mesh3D
from areamoments.core.preprocessing.vector import Vector3D

GLOBAL_X = Vector3D(1.0, 0.0, 0.0)
GLOBAL_Y = Vector3D(0.0, 1.0, 0.0)


class NormalEstimator(LoggerMixin):
    r"""Estimates a representative unit normal of a facet set.

    The normal of the first triangle :math:`(v_0, v_1, v_2)` is used:

    .. math::
        \mathbf{n} = \frac{(v_1 - v_0) \times (v_2 - v_0)}
        {\lVert (v_1 - v_0) \times (v_2 - v_0) \rVert}

    Parameters
    ----------
    mesh : :py:class:`Mesh3D`
        The facet set.

    Notes
    -----
        A mesh without a complete triangle yields the fallback normal
        ``(0, 0, 1)`` and a warning. The resulting projection is plausible
        but meaningless; callers that need certainty should check
        :py:attr:`used_fallback`.

        A degenerate first triangle (collinear corners) yields the zero
        vector, which collapses the projection onto a single point and leads
        to a zero result downstream.

    Examples
    --------
    >>> from areamoments.core.preprocessing.mesh import Mesh3D
    >>> mesh = Mesh3D([0, 0, 0, 1, 0, 0, 0, 1, 0], [0, 1, 2])
    >>> NormalEstimator(mesh)()
    Vector3D(x=0.0, y=0.0, z=1.0)
    """

    # noinspection PyMissingConstructor
    def __init__(self, mesh: Mesh3D, debug: bool = False):
        _ = debug
        self.mesh = mesh
        self.used_fallback = False

    def __call__(self) -> Vector3D:
        mesh = self.mesh
        if mesh.indices.size < 3 or mesh.vertices.size < 9:
            self.used_fallback = True
            self.logger.warning(
                "Mesh has %d vertices and %d triangles; falling back to "
                "normal %s.", mesh.n_vertices, mesh.n_triangles,
                FALLBACK_NORMAL
            )
            return Vector3D(*FALLBACK_NORMAL)

        i0, i1, i2 = mesh.triangles[0]
        v0, v1, v2 = mesh.vertex(i0), mesh.vertex(i1), mesh.vertex(i2)
        normal = (v1 - v0).cross(v2 - v0).normalize()
        self.logger.debug("Estimated normal %s from triangle (%d, %d, %d).",
                          normal, i0, i1, i2)
        if normal.length == 0.0:
            self.logger.warning("First triangle is degenerate; the normal "
                                "is the zero vector.")
        return normal


def estimate_normal(mesh: Mesh3D) -> Vector3D:
    """Shortcut for ``NormalEstimator(mesh)()``."""
    return NormalEstimator(mesh)()


@dataclass(eq=False)
class PlaneProjector(LoggerMixin):
    r"""Local orthonormal frame on a face plane and projection into it.

    Parameters
    ----------
    normal : :py:class:`Vector3D`
        Plane normal; it becomes the local :math:`z`-axis after
        normalization.
    origin : :py:class:`Vector3D`, default=Vector3D()
        Point of the plane mapped to the local origin, conventionally the
        first vertex of the mesh.
    debug : bool, default=False
        Enables debug logging.

    Attributes
    ----------
    x_axis, y_axis, z_axis : :py:class:`Vector3D`
        The local frame.

    Notes
    -----
        The local :math:`x`-axis is perpendicular to the normal and to a
        global reference axis. The global :math:`Y`-axis is used unless the
        normal is nearly parallel to it:

        .. math::
            \mathbf{x} =
            \begin{cases}
            \widehat{\mathbf{Y} \times \mathbf{z}}
                & |\mathbf{z} \cdot \mathbf{Y}| < 0.9 \\
            \widehat{\mathbf{z} \times \mathbf{X}} & \text{otherwise}
            \end{cases}
            \qquad
            \mathbf{y} = \widehat{\mathbf{z} \times \mathbf{x}}

        The frame is right-handed, so the projection is a rigid motion within
        the plane. Vertices off the plane are projected orthogonally; no
        coplanarity check is made.

    Examples
    --------
    >>> from areamoments.core.preprocessing.vector import Vector3D
    >>> p = PlaneProjector(Vector3D(0, 0, 1))
    >>> p.x_axis, p.y_axis
    (Vector3D(x=1.0, y=0.0, z=0.0), Vector3D(x=0.0, y=1.0, z=0.0))
    """

    normal: Vector3D
    origin: Vector3D = field(default_factory=Vector3D)
    debug: bool = False

    def __post_init__(self):
        self.z_axis = self.normal.normalize()
        if abs(self.z_axis.dot(GLOBAL_Y)) < AXIS_SWITCH:
            self.x_axis = GLOBAL_Y.cross(self.z_axis).normalize()
        else:
            self.x_axis = self.z_axis.cross(GLOBAL_X).normalize()
        self.y_axis = self.z_axis.cross(self.x_axis).normalize()
        self.logger.debug(
            "Local frame: origin=%s, x=%s, y=%s, z=%s", self.origin,
            self.x_axis, self.y_axis, self.z_axis
        )

    @property
    def basis(self) -> np.ndarray:
        """The in-plane axes as rows of a ``(2, 3)`` array."""
        return np.array([self.x_axis.array, self.y_axis.array])

    def project_point(self, point: Vector3D):
        """Local coordinates ``(x, y)`` of a single point."""
        p = point - self.origin
        return p.dot(self.x_axis), p.dot(self.y_axis)

    def project(self, mesh: Mesh3D) -> Mesh2D:
        """Project every vertex of ``mesh`` into the local frame.

        Parameters
        ----------
        mesh : :py:class:`Mesh3D`
            The facet set.

        Returns
        -------
        :py:class:`Mesh2D`
            The projected vertices, sharing the triangle buffer of ``mesh``.
            An empty mesh gives an empty result.
        """
        if mesh.n_vertices == 0:
            self.logger.debug("Empty mesh, nothing to project.")
            return Mesh2D(np.zeros(0), mesh.indices)
        local = (mesh.points - self.origin.array) @ self.basis.T
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(
                "Projected %d vertices:\n%s", mesh.n_vertices,
                table_vertices(local, ['x', 'y'])
            )
        return Mesh2D(local.reshape(-1), mesh.indices)


def project_mesh(mesh: Mesh3D, debug: bool = False) -> Mesh2D:
    """Project a mesh into the frame defined by its own first triangle.

    The normal comes from :py:class:`NormalEstimator` and the origin is the
    first vertex of the mesh.
    """
    normal = NormalEstimator(mesh, debug=debug)()
    origin = mesh.vertex(0) if mesh.n_vertices else Vector3D()
    return PlaneProjector(normal, origin, debug=debug).project(mesh)
