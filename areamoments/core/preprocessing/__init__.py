
from areamoments.core.preprocessing.mesh import Mesh2D, Mesh3D
from areamoments.core.preprocessing.projection import (
    NormalEstimator, PlaneProjector, estimate_normal, project_mesh
)
from areamoments.core.preprocessing.surface import SurfaceType
from areamoments.core.preprocessing.vector import Vector3D


__all__ = [
    'estimate_normal',
    'Mesh2D',
    'Mesh3D',
    'NormalEstimator',
    'PlaneProjector',
    'project_mesh',
    'SurfaceType',
    'Vector3D',
]
