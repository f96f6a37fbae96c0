
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, runtime_checkable

import numpy as np

from areamoments.core.config import (
    DEFAULT_TESSELLATION_TOLERANCE, MIN_FACET_VALUES
)
from areamoments.core.postprocessing.report import (
    DerivedQuantityCalculator, ReportRecord
)
from areamoments.core.preprocessing.mesh import Mesh3D
from areamoments.core.preprocessing.projection import (
    NormalEstimator, PlaneProjector
)
from areamoments.core.preprocessing.surface import SurfaceType
from areamoments.core.preprocessing.vector import Vector3D
from areamoments.core.solution.integrator import MomentIntegrator

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


@runtime_checkable
class FaceSource(Protocol):
    """What the calculation needs from a selected face.

    Any object offering these two members can be measured; host
    applications wrap their native face objects accordingly.
    """

    @property
    def surface_type(self) -> SurfaceType:
        ...

    def facet_data(self, tolerance: float) -> Optional[Sequence[float]]:
        """Tessellate the face; nine values per triangle or ``None``."""
        ...


@dataclass(eq=False)
class FacetFace:
    """A face whose facet buffer is already known.

    Parameters
    ----------
    data : sequence of :any:`float`
        Facet buffer with nine values per triangle.
    surface_type : :py:class:`SurfaceType` or :any:`str`, default=UNKNOWN
        Classification; strings are resolved with
        :py:meth:`SurfaceType.from_name`.

    Notes
    -----
        The buffer does not depend on the requested tolerance.
    """

    data: Sequence[float]
    surface_type: SurfaceType = SurfaceType.UNKNOWN

    def __post_init__(self):
        self.surface_type = SurfaceType.from_name(self.surface_type)

    def facet_data(self, tolerance: float) -> Sequence[float]:
        return self.data


def calculate_mesh(mesh: Mesh3D,
                   surface_type: SurfaceType = SurfaceType.UNKNOWN,
                   weld_tolerance: float = 1e-9,
                   debug: bool = False) -> ReportRecord:
    """Run the full pipeline on a facet set.

    Normal estimation, projection onto the plane through the first vertex,
    moment integration, and derivation of the report quantities.

    Parameters
    ----------
    mesh : :py:class:`Mesh3D`
        The facet set.
    surface_type : :py:class:`SurfaceType`, default=UNKNOWN
        Reported with the record.
    weld_tolerance : :any:`float`, default=1e-9
        Grid size of the vertex weld used for the perimeter, see
        :py:meth:`Mesh2D.boundary_edges`.
    debug : bool, default=False
        Enables debug logging of every stage.

    Returns
    -------
    :py:class:`ReportRecord`
        A zero record (apart from the classification) for empty or
        degenerate meshes, and for meshes whose coordinates are so large
        that the projection or the moments overflow.
    """
    surface_type = SurfaceType.from_name(surface_type)
    with np.errstate(over='ignore', invalid='ignore'):
        normal = NormalEstimator(mesh, debug=debug)()
        origin = mesh.vertex(0) if mesh.n_vertices else Vector3D()
        try:
            mesh_2d = PlaneProjector(normal, origin, debug=debug).project(mesh)
        except ValueError as e:
            logger.warning("Projection overflowed, reporting zero: %s", e)
            return ReportRecord(surface_type=surface_type)

        basic = MomentIntegrator(debug=debug).integrate(mesh_2d)

        if basic.is_zero:
            perimeter, cx_max, cy_max = 0.0, 0.0, 0.0
        else:
            perimeter = mesh_2d.perimeter(weld_tolerance)
            cx_max, cy_max = mesh_2d.extreme_fiber_distances(basic.cx,
                                                             basic.cy)

        record = DerivedQuantityCalculator(debug=debug)(
            basic, perimeter=perimeter, cx_max=cx_max, cy_max=cy_max,
            surface_type=surface_type,
        )
    if not record.is_finite:
        logger.warning("Moments overflowed, reporting zero.")
        return ReportRecord(surface_type=surface_type)
    return record


def calculate_face(face: FaceSource,
                   tolerance: float = DEFAULT_TESSELLATION_TOLERANCE,
                   weld_tolerance: float = 1e-9,
                   debug: bool = False) -> Optional[ReportRecord]:
    """Acquire the facets of ``face`` and calculate its section properties.

    Parameters
    ----------
    face : :py:class:`FaceSource`
        The face to measure.
    tolerance : :any:`float`, default=0.001
        Tessellation tolerance passed to :py:meth:`FaceSource.facet_data`.
    weld_tolerance : :any:`float`, default=1e-9
        See :py:func:`calculate_mesh`.
    debug : bool, default=False
        Enables debug logging.

    Returns
    -------
    :py:class:`ReportRecord` or None
        ``None`` if no facet data could be acquired: the provider returned
        nothing, fewer than ``MIN_FACET_VALUES`` values, a malformed buffer,
        or raised. The failure is logged; nothing is retried.
    """
    if face is None:
        logger.warning("No face given.")
        return None
    try:
        data = face.facet_data(tolerance)
    except Exception as e:
        logger.warning("Facet data of %r unavailable: %s", face, e)
        return None
    if data is None:
        logger.warning("Face %r returned no facet data.", face)
        return None
    try:
        mesh = Mesh3D.from_facet_data(data)
    except (TypeError, ValueError) as e:
        logger.warning("Malformed facet data of %r: %s", face, e)
        return None
    if mesh.n_triangles == 0:
        logger.warning(
            "Face %r delivered fewer than %d facet values.", face,
            MIN_FACET_VALUES
        )
        return None

    try:
        surface_type = SurfaceType.from_name(face.surface_type)
    except Exception as e:
        logger.debug("Surface type of %r unavailable: %s", face, e)
        surface_type = SurfaceType.UNKNOWN

    return calculate_mesh(mesh, surface_type, weld_tolerance=weld_tolerance,
                          debug=debug)
