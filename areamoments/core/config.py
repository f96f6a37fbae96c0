
from dataclasses import dataclass

# Numeric guards of the calculation pipeline.
AREA_EPS = 1e-15
"""Total signed area below which a mesh is treated as degenerate."""

ANGLE_EPS = 1e-15
"""Below this, both Ixy and (Ix - Iy) / 2 count as zero and theta is 0."""

RATIO_EPS = 1e-10
"""Smallest area or extreme-fiber distance used as a divisor."""

NORMALIZE_EPS = 1e-10
"""Vectors shorter than this normalize to the zero vector."""

AXIS_SWITCH = 0.9
"""If ``|normal . Y| >= AXIS_SWITCH`` the local x-axis is built from X."""

FALLBACK_NORMAL = (0.0, 0.0, 1.0)

MIN_FACET_VALUES = 9
"""One triangle: three vertices with three coordinates each."""

DEFAULT_TESSELLATION_TOLERANCE = 0.001


@dataclass(frozen=True)
class Settings:
    """Run-time options of a :py:class:`MomentsSession`.

    Parameters
    ----------
    tessellation_tolerance : :any:`float`, default=0.001
        Chord tolerance handed to the facet provider. Smaller values give
        denser meshes and better approximations of curved faces.
    auto_calculate : :any:`bool`, default=True
        Calculate immediately whenever the selection changes.
    weld_tolerance : :any:`float`, default=1e-9
        Grid size used to weld vertices of the projected mesh when the
        boundary (and thus the perimeter) is extracted: vertices falling into
        the same grid cell count as one point. Two points closer than this
        that straddle a cell border stay apart.

    Raises
    ------
    TypeError
        :py:attr:`auto_calculate` is not a boolean.
    ValueError
        :py:attr:`tessellation_tolerance` or :py:attr:`weld_tolerance` is not
        a positive number.
    """

    tessellation_tolerance: float = DEFAULT_TESSELLATION_TOLERANCE
    auto_calculate: bool = True
    weld_tolerance: float = 1e-9

    def __post_init__(self):
        if not isinstance(self.auto_calculate, bool):
            raise TypeError('"auto_calculate" has to be a boolean.')
        for name in ('tessellation_tolerance', 'weld_tolerance'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f'"{name}" has to be a number.')
            if value <= 0:
                raise ValueError(f'"{name}" has to be greater than zero.')
