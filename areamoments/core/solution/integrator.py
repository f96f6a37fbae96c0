
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from areamoments.core.config import ANGLE_EPS, AREA_EPS
from areamoments.core.logger_mixin import LoggerMixin
from areamoments.core.preprocessing.mesh import Mesh2D


@dataclass(frozen=True)
class BasicMomentResult:
    r"""Area, centroid and second moments of a projected facet set.

    Parameters
    ----------
    area : :any:`float`
        Net area, always non-negative.
    cx, cy : :any:`float`
        Centroid in the local frame.
    ix, iy, ixy : :any:`float`
        Second moments and product moment about the centroidal axes:
        :math:`I_x = \int (y - c_y)^2 \, dA`,
        :math:`I_y = \int (x - c_x)^2 \, dA`,
        :math:`I_{xy} = \int (x - c_x)(y - c_y) \, dA`.
    imax, imin : :any:`float`
        Principal moments.
    theta : :any:`float`
        Angle in rad from the local :math:`x`-axis to the principal axis of
        :py:attr:`imax`.
    """

    area: float = 0.0
    cx: float = 0.0
    cy: float = 0.0
    ix: float = 0.0
    iy: float = 0.0
    ixy: float = 0.0
    imax: float = 0.0
    imin: float = 0.0
    theta: float = 0.0

    @classmethod
    def zero(cls) -> 'BasicMomentResult':
        """The result reported for empty or degenerate meshes."""
        return cls()

    @property
    def is_zero(self) -> bool:
        return self.area == 0.0

    @property
    def tensor(self) -> np.ndarray:
        r"""Centroidal inertia tensor
        :math:`\begin{bmatrix} I_x & -I_{xy} \\ -I_{xy} & I_y \end{bmatrix}`.
        """
        return np.array([[self.ix, -self.ixy], [-self.ixy, self.iy]])


def signed_triangle_areas(x1, y1, x2, y2, x3, y3) -> np.ndarray:
    r"""Signed areas of triangles.

    .. math::
        A = \frac{1}{2} \left[ (x_2 - x_1)(y_3 - y_1) -
        (x_3 - x_1)(y_2 - y_1) \right]

    Counterclockwise triangles are positive, clockwise ones negative.
    """
    return 0.5 * ((x2 - x1) * (y3 - y1) - (x3 - x1) * (y2 - y1))


def triangle_moments_about_origin(x1, y1, x2, y2, x3, y3, area):
    r"""Second moments of triangles about the axes of the local frame.

    Parameters
    ----------
    x1, y1, x2, y2, x3, y3 : numpy.ndarray
        Corner coordinates.
    area : numpy.ndarray
        Signed triangle areas from :py:func:`signed_triangle_areas`. Using
        the signed value lets clockwise triangles subtract.

    Returns
    -------
    tuple of numpy.ndarray
        ``(ix, iy, ixy)`` per triangle with

        .. math::
            I_x = \frac{A}{6} (y_1^2 + y_2^2 + y_3^2 + y_1 y_2 + y_2 y_3
            + y_3 y_1)

            I_y = \frac{A}{6} (x_1^2 + x_2^2 + x_3^2 + x_1 x_2 + x_2 x_3
            + x_3 x_1)

            I_{xy} = \frac{A}{12} \left[ x_1 (2 y_1 + y_2 + y_3)
            + x_2 (y_1 + 2 y_2 + y_3) + x_3 (y_1 + y_2 + 2 y_3) \right]
    """
    ix = (area / 6.0) * (y1 * y1 + y2 * y2 + y3 * y3
                         + y1 * y2 + y2 * y3 + y3 * y1)
    iy = (area / 6.0) * (x1 * x1 + x2 * x2 + x3 * x3
                         + x1 * x2 + x2 * x3 + x3 * x1)
    ixy = (area / 12.0) * (x1 * (2 * y1 + y2 + y3)
                           + x2 * (y1 + 2 * y2 + y3)
                           + x3 * (y1 + y2 + 2 * y3))
    return ix, iy, ixy


def principal_moments(ix: float, iy: float,
                      ixy: float) -> Tuple[float, float, float]:
    r"""Principal moments and orientation of a centroidal inertia tensor.

    Closed form eigen-solution of the symmetric 2x2 tensor:

    .. math::
        I_{max, min} = \frac{I_x + I_y}{2} \pm
        \sqrt{\left(\frac{I_x - I_y}{2}\right)^2 + I_{xy}^2}

        \theta = \frac{1}{2} \operatorname{atan2}(-2 I_{xy}, I_x - I_y)

    Returns
    -------
    tuple of float
        ``(imax, imin, theta)``. For an isotropic tensor every axis is
        principal and ``theta`` is 0.

    Examples
    --------
    >>> principal_moments(2.0, 1.0, 0.0)
    (2.0, 1.0, 0.0)
    """
    i_avg = (ix + iy) / 2.0
    i_diff = (ix - iy) / 2.0
    r = float(np.hypot(i_diff, ixy))
    if abs(ixy) < ANGLE_EPS and abs(i_diff) < ANGLE_EPS:
        theta = 0.0
    else:
        theta = 0.5 * float(np.arctan2(-2.0 * ixy, ix - iy))
    return i_avg + r, i_avg - r, theta


@dataclass(eq=False)
class MomentIntegrator(LoggerMixin):
    """Integrates area moments over a projected triangle mesh.

    Two passes over the triangles: the first sums signed areas and area
    weighted triangle centroids, the second sums the second moments about the
    local origin, which are then shifted to the centroid with the parallel
    axis theorem.

    Parameters
    ----------
    debug : bool, default=False
        Enables debug logging.

    Notes
    -----
        Triangles are not required to share one winding. Holes emitted with
        the opposite winding of their surroundings cancel. If the net signed
        area is negative (a uniformly clockwise mesh) all moments are flipped
        so that positive physical values are reported.

    Examples
    --------
    >>> from areamoments.core.preprocessing.mesh import Mesh2D
    >>> square = Mesh2D([0, 0, 1, 0, 1, 1, 0, 1], [0, 1, 2, 0, 2, 3])
    >>> r = MomentIntegrator().integrate(square)
    >>> r.area, round(r.cx, 12), round(r.cy, 12)
    (1.0, 0.5, 0.5)
    """

    debug: bool = False

    def __post_init__(self):
        self.logger.debug("MomentIntegrator ready.")

    def integrate(self, mesh: Mesh2D) -> BasicMomentResult:
        """Compute the :py:class:`BasicMomentResult` of ``mesh``.

        Returns
        -------
        :py:class:`BasicMomentResult`
            The moments, or :py:meth:`BasicMomentResult.zero` for an empty
            mesh or a net area below ``AREA_EPS``.
        """
        if mesh.n_triangles == 0 or mesh.n_vertices == 0:
            self.logger.debug("No triangles, returning zero result.")
            return BasicMomentResult.zero()

        x1, y1, x2, y2, x3, y3 = mesh.corner_coordinates()

        # ---- Pass 1: area and centroid --------------------------------------
        areas = signed_triangle_areas(x1, y1, x2, y2, x3, y3)
        total = float(np.sum(areas))
        if abs(total) < AREA_EPS:
            self.logger.info(
                "Net area %.3e of %d triangles is degenerate, returning zero "
                "result.", total, mesh.n_triangles
            )
            return BasicMomentResult.zero()

        cx = float(np.sum(areas * (x1 + x2 + x3) / 3.0)) / total
        cy = float(np.sum(areas * (y1 + y2 + y3) / 3.0)) / total
        self.logger.debug("Signed area %.6g, centroid (%.6g, %.6g).",
                          total, cx, cy)

        # ---- Pass 2: moments about the origin -------------------------------
        ix_t, iy_t, ixy_t = triangle_moments_about_origin(
            x1, y1, x2, y2, x3, y3, areas
        )
        ix_0 = float(np.sum(ix_t))
        iy_0 = float(np.sum(iy_t))
        ixy_0 = float(np.sum(ixy_t))

        sign = 1.0 if total > 0 else -1.0
        ix = sign * (ix_0 - total * cy * cy)
        iy = sign * (iy_0 - total * cx * cx)
        ixy = sign * (ixy_0 - total * cx * cy)
        if sign < 0:
            self.logger.debug("Net winding is clockwise, moments flipped.")

        imax, imin, theta = principal_moments(ix, iy, ixy)
        self.logger.debug(
            "Ix=%.6g, Iy=%.6g, Ixy=%.6g, Imax=%.6g, Imin=%.6g, theta=%.6g",
            ix, iy, ixy, imax, imin, theta
        )
        return BasicMomentResult(
            area=abs(total), cx=cx, cy=cy, ix=ix, iy=iy, ixy=ixy,
            imax=imax, imin=imin, theta=theta,
        )
