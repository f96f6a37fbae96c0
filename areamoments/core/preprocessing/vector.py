
from dataclasses import dataclass
from math import sqrt

import numpy as np

from areamoments.core.config import NORMALIZE_EPS


@dataclass(frozen=True)
class Vector3D:
    """Immutable three-dimensional vector.

    Parameters
    ----------
    x, y, z : :any:`float`, default=0.0
        Components of the vector.

    Notes
    -----
        All operations return new instances. Vectors compare by value.

    Examples
    --------
    >>> from areamoments.core.preprocessing.vector import Vector3D
    >>> Vector3D(1, 0, 0).cross(Vector3D(0, 1, 0))
    Vector3D(x=0, y=0, z=1)
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: 'Vector3D') -> 'Vector3D':
        return Vector3D(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: 'Vector3D') -> 'Vector3D':
        return Vector3D(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> 'Vector3D':
        return Vector3D(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def dot(self, other: 'Vector3D') -> float:
        """Scalar product with ``other``."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: 'Vector3D') -> 'Vector3D':
        r"""Vector product :math:`\mathbf{a} \times \mathbf{b}`.

        Parameters
        ----------
        other : :py:class:`Vector3D`
            Right hand operand.

        Returns
        -------
        :py:class:`Vector3D`
            Vector perpendicular to both operands, oriented by the right hand
            rule.
        """
        return Vector3D(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    @property
    def length(self) -> float:
        """Euclidean norm."""
        return sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalize(self) -> 'Vector3D':
        """Unit vector pointing in the same direction.

        Returns
        -------
        :py:class:`Vector3D`
            The normalized vector. If the length does not exceed
            ``NORMALIZE_EPS`` the zero vector is returned instead; every
            projection built from it collapses to a single point, which the
            moment integrator reports as a zero result.
        """
        length = self.length
        if length > NORMALIZE_EPS:
            return Vector3D(self.x / length, self.y / length,
                            self.z / length)
        return Vector3D()

    @property
    def array(self) -> np.ndarray:
        """The components as a ``(3,)`` array."""
        return np.array([self.x, self.y, self.z], dtype=float)

    @classmethod
    def from_iterable(cls, values) -> 'Vector3D':
        """Build a vector from any iterable with three numbers."""
        x, y, z = (float(v) for v in values)
        return cls(x, y, z)
