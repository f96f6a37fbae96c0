
from areamoments.core import (
    BasicMomentResult, ComputeWorker, DerivedQuantityCalculator, FaceSource,
    FacetFace, Mesh2D, Mesh3D, MomentIntegrator, MomentsSession,
    NormalEstimator, PlaneProjector, ReportRecord, SelectionItem, Settings,
    SurfaceType, Vector3D, calculate_face, calculate_mesh, estimate_normal,
    project_mesh
)

__all__ = [
    'BasicMomentResult',
    'calculate_face',
    'calculate_mesh',
    'ComputeWorker',
    'DerivedQuantityCalculator',
    'estimate_normal',
    'FaceSource',
    'FacetFace',
    'Mesh2D',
    'Mesh3D',
    'MomentIntegrator',
    'MomentsSession',
    'NormalEstimator',
    'PlaneProjector',
    'project_mesh',
    'ReportRecord',
    'SelectionItem',
    'Settings',
    'SurfaceType',
    'Vector3D',
]
