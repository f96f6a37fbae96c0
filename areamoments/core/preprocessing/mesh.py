
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from areamoments.core.config import MIN_FACET_VALUES
from areamoments.core.preprocessing.vector import Vector3D


def _as_index_buffer(indices) -> np.ndarray:
    arr = np.asarray(indices)
    if arr.size == 0:
        return np.zeros(0, dtype=np.int64)
    if not np.issubdtype(arr.dtype, np.integer):
        raise TypeError('"indices" must contain integers.')
    return arr.astype(np.int64).reshape(-1)


def _validate_buffers(vertices: np.ndarray, indices: np.ndarray, dim: int):
    if vertices.size % dim != 0:
        raise ValueError(
            f'"vertices" must hold {dim} values per vertex, got '
            f'{vertices.size} values.'
        )
    if indices.size % 3 != 0:
        raise ValueError(
            f'"indices" must hold 3 values per triangle, got '
            f'{indices.size} values.'
        )
    if not np.isfinite(vertices).all():
        raise ValueError('"vertices" contains NaN or infinite values.')
    n_vertices = vertices.size // dim
    if indices.size and (indices.min() < 0 or indices.max() >= n_vertices):
        raise ValueError(
            f'Triangle indices must lie in [0, {n_vertices - 1}], got '
            f'[{indices.min()}, {indices.max()}].'
        )


@dataclass(eq=False)
class Mesh3D:
    """Triangulated facet set in three-dimensional space.

    Parameters
    ----------
    vertices : sequence of :any:`float`
        Flat vertex buffer ``[x0, y0, z0, x1, y1, z1, ...]``.
    indices : sequence of :any:`int`
        Flat triangle buffer ``[i0, i1, i2, ...]`` with three vertex indices
        per triangle.

    Raises
    ------
    TypeError
        :py:attr:`indices` contains non-integer values.
    ValueError
        The buffer lengths are no multiples of three, an index is out of
        range, or a coordinate is not finite.

    Notes
    -----
        An empty mesh is valid; every later stage turns it into an empty or
        zero result.

    Examples
    --------
    >>> from areamoments.core.preprocessing.mesh import Mesh3D
    >>> mesh = Mesh3D([0, 0, 0, 1, 0, 0, 0, 1, 0], [0, 1, 2])
    >>> mesh.n_vertices, mesh.n_triangles
    (3, 1)
    """

    vertices: Sequence[float]
    indices: Sequence[int]

    def __post_init__(self):
        self.vertices = np.asarray(self.vertices, dtype=float).reshape(-1)
        self.indices = _as_index_buffer(self.indices)
        _validate_buffers(self.vertices, self.indices, 3)

    @classmethod
    def from_facet_data(cls, data: Sequence[float]) -> 'Mesh3D':
        """Build a mesh from a facet buffer of nine values per triangle.

        Each triangle owns its three vertices, so vertex ``k`` of the
        resulting mesh is the ``k``-th coordinate triple of the buffer and the
        index buffer simply counts up from zero.

        Parameters
        ----------
        data : sequence of :any:`float`
            ``[x0, y0, z0, x1, y1, z1, x2, y2, z2, ...]`` as delivered by a
            tessellator.

        Returns
        -------
        :py:class:`Mesh3D`
            The mesh. Values that do not complete a triangle are ignored and
            buffers shorter than ``MIN_FACET_VALUES`` give an empty mesh.
        """
        data = np.asarray(data if data is not None else [],
                          dtype=float).reshape(-1)
        if data.size < MIN_FACET_VALUES:
            return cls(np.zeros(0), np.zeros(0, dtype=np.int64))
        n_triangles = data.size // 9
        vertices = data[:n_triangles * 9]
        return cls(vertices, np.arange(n_triangles * 3, dtype=np.int64))

    @property
    def n_vertices(self) -> int:
        return self.vertices.size // 3

    @property
    def n_triangles(self) -> int:
        return self.indices.size // 3

    @property
    def points(self) -> np.ndarray:
        """Vertex coordinates with shape ``(n_vertices, 3)``."""
        return self.vertices.reshape(-1, 3)

    @property
    def triangles(self) -> np.ndarray:
        """Vertex indices with shape ``(n_triangles, 3)``."""
        return self.indices.reshape(-1, 3)

    def vertex(self, i: int) -> Vector3D:
        """The ``i``-th vertex as :py:class:`Vector3D`."""
        return Vector3D.from_iterable(self.points[i])


@dataclass(eq=False)
class Mesh2D:
    """Triangulated facet set in a local two-dimensional frame.

    Produced by :py:meth:`PlaneProjector.project`; shares the triangle
    buffer of its source :py:class:`Mesh3D`.

    Parameters
    ----------
    vertices : sequence of :any:`float`
        Flat vertex buffer ``[x0, y0, x1, y1, ...]``.
    indices : sequence of :any:`int`
        Flat triangle buffer, three indices per triangle.

    Raises
    ------
    TypeError
        :py:attr:`indices` contains non-integer values.
    ValueError
        The vertex buffer length is odd, the index buffer length is no
        multiple of three, an index is out of range, or a coordinate is not
        finite.
    """

    vertices: Sequence[float]
    indices: Sequence[int]

    def __post_init__(self):
        self.vertices = np.asarray(self.vertices, dtype=float).reshape(-1)
        self.indices = _as_index_buffer(self.indices)
        _validate_buffers(self.vertices, self.indices, 2)

    @property
    def n_vertices(self) -> int:
        return self.vertices.size // 2

    @property
    def n_triangles(self) -> int:
        return self.indices.size // 3

    @property
    def points(self) -> np.ndarray:
        """Vertex coordinates with shape ``(n_vertices, 2)``."""
        return self.vertices.reshape(-1, 2)

    @property
    def triangles(self) -> np.ndarray:
        """Vertex indices with shape ``(n_triangles, 3)``."""
        return self.indices.reshape(-1, 3)

    def corner_coordinates(self) -> Tuple[np.ndarray, ...]:
        """Corner coordinates of every triangle.

        Returns
        -------
        tuple of numpy.ndarray
            ``(x1, y1, x2, y2, x3, y3)``, each of shape ``(n_triangles,)``,
            with the corners in index order.
        """
        corners = self.points[self.triangles]
        return (corners[:, 0, 0], corners[:, 0, 1],
                corners[:, 1, 0], corners[:, 1, 1],
                corners[:, 2, 0], corners[:, 2, 1])

    def boundary_edges(self, tolerance: float = 1e-9) -> np.ndarray:
        """Edges used by exactly one triangle.

        Facet buffers repeat shared vertices once per triangle, so vertices
        are welded first: coordinates are rounded to multiples of
        ``tolerance`` and points landing in the same grid cell count as one
        vertex. Points closer than ``tolerance`` on either side of a cell
        border are not welded.

        Parameters
        ----------
        tolerance : :any:`float`, default=1e-9
            Grid size of the weld.

        Returns
        -------
        numpy.ndarray
            Array of shape ``(n_edges, 2, 2)`` holding start and end point of
            every boundary edge.
        """
        if self.n_triangles == 0:
            return np.zeros((0, 2, 2))
        pts = self.points
        keys = np.round(pts / tolerance)
        _, first, welded = np.unique(
            keys, axis=0, return_index=True, return_inverse=True
        )
        welded = welded.reshape(-1)
        tris = welded[self.triangles]
        edges = np.concatenate(
            (tris[:, [0, 1]], tris[:, [1, 2]], tris[:, [2, 0]])
        )
        edges = np.sort(edges, axis=1)
        edges = edges[edges[:, 0] != edges[:, 1]]
        if edges.size == 0:
            return np.zeros((0, 2, 2))
        unique_edges, counts = np.unique(edges, axis=0, return_counts=True)
        outline = unique_edges[counts == 1]
        return pts[first][outline]

    def perimeter(self, tolerance: float = 1e-9) -> float:
        """Total length of all boundary edges, holes included."""
        edges = self.boundary_edges(tolerance)
        if edges.size == 0:
            return 0.0
        d = edges[:, 1] - edges[:, 0]
        return float(np.sqrt((d ** 2).sum(axis=1)).sum())

    def extreme_fiber_distances(self, cx: float,
                                cy: float) -> Tuple[float, float]:
        """Largest distance of any vertex from ``(cx, cy)`` per local axis.

        Returns
        -------
        tuple of float
            ``(cx_max, cy_max)``: maximum of ``|x - cx|`` and of
            ``|y - cy|`` over all vertices, ``(0.0, 0.0)`` for an empty mesh.
        """
        if self.n_vertices == 0:
            return 0.0, 0.0
        pts = self.points
        return (float(np.abs(pts[:, 0] - cx).max()),
                float(np.abs(pts[:, 1] - cy).max()))
