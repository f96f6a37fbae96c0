
import logging
from dataclasses import asdict, dataclass, fields
from math import degrees, isfinite, sqrt
from typing import Any, Dict

from areamoments.core.config import RATIO_EPS
from areamoments.core.logger_mixin import LoggerMixin, table_report
from areamoments.core.preprocessing.surface import SurfaceType
from areamoments.core.solution.integrator import BasicMomentResult


@dataclass(frozen=True)
class ReportRecord:
    r"""Complete set of section properties of one face.

    The fields up to :py:attr:`theta` repeat the
    :py:class:`BasicMomentResult`; all further fields are derived from it
    by :py:class:`DerivedQuantityCalculator`.

    Parameters
    ----------
    area, cx, cy, ix, iy, ixy, imax, imin, theta : :any:`float`
        See :py:class:`BasicMomentResult`.
    perimeter : :any:`float`
        Length of the boundary, holes included.
    ixx_origin, iyy_origin, ixy_origin : :any:`float`
        Second moments about the axes of the local frame.
    j_origin, j_centroid : :any:`float`
        Polar moments about the local origin and about the centroid.
    rx, ry : :any:`float`
        Radii of gyration about the centroidal axes.
    sx_min, sy_min : :any:`float`
        Elastic section moduli :math:`I_x / c_{y,max}` and
        :math:`I_y / c_{x,max}`.
    cx_max, cy_max : :any:`float`
        Extreme-fiber distances from the centroid along :math:`x` and
        :math:`y`.
    surface_type : :py:class:`SurfaceType`
        Classification of the source surface.
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
    perimeter: float = 0.0
    ixx_origin: float = 0.0
    iyy_origin: float = 0.0
    ixy_origin: float = 0.0
    j_origin: float = 0.0
    j_centroid: float = 0.0
    rx: float = 0.0
    ry: float = 0.0
    sx_min: float = 0.0
    sy_min: float = 0.0
    cx_max: float = 0.0
    cy_max: float = 0.0
    surface_type: SurfaceType = SurfaceType.UNKNOWN

    @property
    def qx(self) -> float:
        """First moment of area about the local :math:`x`-axis."""
        return self.area * self.cy

    @property
    def qy(self) -> float:
        """First moment of area about the local :math:`y`-axis."""
        return self.area * self.cx

    @property
    def rz(self) -> float:
        """Polar radius of gyration about the centroid."""
        if self.area > RATIO_EPS:
            return sqrt(self.j_centroid / self.area)
        return 0.0

    @property
    def theta_deg(self) -> float:
        return degrees(self.theta)

    @property
    def is_finite(self) -> bool:
        """True if no stored quantity is NaN or infinite."""
        return all(isfinite(getattr(self, f.name)) for f in fields(self)
                   if f.name != 'surface_type')

    @property
    def face_type(self) -> str:
        return self.surface_type.label

    @property
    def basic(self) -> BasicMomentResult:
        """The :py:class:`BasicMomentResult` this record was built from."""
        return BasicMomentResult(
            area=self.area, cx=self.cx, cy=self.cy, ix=self.ix, iy=self.iy,
            ixy=self.ixy, imax=self.imax, imin=self.imin, theta=self.theta,
        )

    def as_dict(self) -> Dict[str, Any]:
        """All stored and derived quantities as a flat dictionary."""
        values = asdict(self)
        values['surface_type'] = self.face_type
        values.update(
            qx=self.qx, qy=self.qy, rz=self.rz, theta_deg=self.theta_deg
        )
        return values


@dataclass(eq=False)
class DerivedQuantityCalculator(LoggerMixin):
    r"""Builds the :py:class:`ReportRecord` from the integrated moments.

    Parameters
    ----------
    debug : bool, default=False
        Enables debug logging; the finished record is logged as a table.

    Notes
    -----
        The moments about the local origin follow from the parallel axis
        theorem:

        .. math::
            I_{xx,0} = I_x + A c_y^2, \quad
            I_{yy,0} = I_y + A c_x^2, \quad
            I_{xy,0} = I_{xy} + A c_x c_y

        Radii of gyration are only computed for :math:`A > 10^{-10}`, section
        moduli only for extreme-fiber distances above :math:`10^{-10}`;
        otherwise they stay 0.
    """

    debug: bool = False

    def __post_init__(self):
        self.logger.debug("DerivedQuantityCalculator ready.")

    def __call__(self, basic: BasicMomentResult, perimeter: float = 0.0,
                 cx_max: float = 0.0, cy_max: float = 0.0,
                 surface_type: SurfaceType = SurfaceType.UNKNOWN
                 ) -> ReportRecord:
        """Combine ``basic`` with the caller supplied boundary data.

        Parameters
        ----------
        basic : :py:class:`BasicMomentResult`
            Output of :py:meth:`MomentIntegrator.integrate`.
        perimeter : :any:`float`, default=0.0
            Boundary length of the projected mesh.
        cx_max, cy_max : :any:`float`, default=0.0
            Extreme-fiber distances, see
            :py:meth:`Mesh2D.extreme_fiber_distances`.
        surface_type : :py:class:`SurfaceType`, default=UNKNOWN
            Classification reported with the record.

        Returns
        -------
        :py:class:`ReportRecord`
        """
        a, cx, cy = basic.area, basic.cx, basic.cy

        ixx_origin = basic.ix + a * cy * cy
        iyy_origin = basic.iy + a * cx * cx
        ixy_origin = basic.ixy + a * cx * cy

        rx = ry = 0.0
        if a > RATIO_EPS:
            rx = sqrt(max(basic.ix, 0.0) / a)
            ry = sqrt(max(basic.iy, 0.0) / a)

        sx_min = basic.ix / cy_max if cy_max > RATIO_EPS else 0.0
        sy_min = basic.iy / cx_max if cx_max > RATIO_EPS else 0.0

        record = ReportRecord(
            area=a, cx=cx, cy=cy, ix=basic.ix, iy=basic.iy, ixy=basic.ixy,
            imax=basic.imax, imin=basic.imin, theta=basic.theta,
            perimeter=perimeter,
            ixx_origin=ixx_origin, iyy_origin=iyy_origin,
            ixy_origin=ixy_origin,
            j_origin=ixx_origin + iyy_origin,
            j_centroid=basic.ix + basic.iy,
            rx=rx, ry=ry, sx_min=sx_min, sy_min=sy_min,
            cx_max=cx_max, cy_max=cy_max,
            surface_type=SurfaceType.from_name(surface_type),
        )
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug("Report record:\n%s", table_report(record))
        return record
