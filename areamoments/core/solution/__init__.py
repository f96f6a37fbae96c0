
from areamoments.core.solution.integrator import (
    BasicMomentResult, MomentIntegrator, principal_moments,
    signed_triangle_areas, triangle_moments_about_origin
)


__all__ = [
    'BasicMomentResult',
    'MomentIntegrator',
    'principal_moments',
    'signed_triangle_areas',
    'triangle_moments_about_origin',
]
