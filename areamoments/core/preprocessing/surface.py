
from enum import Enum


class SurfaceType(Enum):
    """Classification of the surface a facet set was tessellated from.

    The classification is reported alongside the results only; it has no
    influence on the calculation. The value of each member is the label used
    when a selected face is named.

    Examples
    --------
    >>> from areamoments.core.preprocessing.surface import SurfaceType
    >>> SurfaceType.PLANAR.label
    'Planar Face'
    >>> SurfaceType.from_name('bsurf') is SurfaceType.SPLINE
    True
    """

    PLANAR = 'Planar Face'
    CYLINDRICAL = 'Cylindrical Face'
    CONICAL = 'Conical Face'
    SPHERICAL = 'Spherical Face'
    TOROIDAL = 'Toroidal Face'
    SPLINE = 'B-Spline Surface'
    UNKNOWN = 'Face'

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name) -> 'SurfaceType':
        """Look up a member by a loose, case insensitive name.

        Accepts member names (``'planar'``), the short geometry names used by
        CAD kernels (``'plane'``, ``'cylinder'``, ``'cone'``, ``'sphere'``,
        ``'torus'``, ``'bsurf'``) and labels. Anything else, including
        ``None``, maps to :py:attr:`UNKNOWN`.
        """
        if isinstance(name, cls):
            return name
        if not isinstance(name, str):
            return cls.UNKNOWN
        key = name.strip().lower()
        for member in cls:
            if key in (member.name.lower(), member.value.lower()):
                return member
        return _ALIASES.get(key, cls.UNKNOWN)


_ALIASES = {
    'plane': SurfaceType.PLANAR,
    'cylinder': SurfaceType.CYLINDRICAL,
    'cone': SurfaceType.CONICAL,
    'sphere': SurfaceType.SPHERICAL,
    'torus': SurfaceType.TOROIDAL,
    'bsurf': SurfaceType.SPLINE,
    'bspline': SurfaceType.SPLINE,
    'b-spline': SurfaceType.SPLINE,
}
