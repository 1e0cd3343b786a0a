"""
Mesh data structures.

MeshBuffers collects vertex attributes and triangles while a build runs;
MeshData is the finalized, array-backed result handed to callers.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence, TYPE_CHECKING
import numpy as np

if TYPE_CHECKING:
    import trimesh


@dataclass(frozen=True)
class RadiusProfile:
    """Radius interpolated linearly from from_radius to to_radius along a tube."""
    from_radius: float
    to_radius: float

    def radius_at(self, t: float) -> float:
        """Radius at normalized position t (0 = start, 1 = end)."""
        return self.from_radius + (self.to_radius - self.from_radius) * t

    @classmethod
    def constant(cls, radius: float) -> "RadiusProfile":
        return cls(radius, radius)


@dataclass(eq=False)
class MeshData:
    """
    Triangle mesh with per-vertex attributes.

    All per-vertex arrays are co-indexed. Triangles wind counter-clockwise
    when seen from outside the surface.

    Attributes
    ----------
    vertices : (V, 3) float array
    normals : (V, 3) float array, unit length
    tangents : (V, 4) float array, w = 0
    uvs : (V, 2) float array
    triangles : (F, 3) int array
    """
    vertices: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))
    normals: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))
    tangents: np.ndarray = field(default_factory=lambda: np.zeros((0, 4)))
    uvs: np.ndarray = field(default_factory=lambda: np.zeros((0, 2)))
    triangles: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.int64))

    @classmethod
    def empty(cls) -> "MeshData":
        return cls()

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.triangles)

    @property
    def indices(self) -> np.ndarray:
        """Flat triangle index sequence (3 entries per triangle)."""
        return self.triangles.reshape(-1)

    def is_empty(self) -> bool:
        return self.vertex_count == 0

    @classmethod
    def concatenate(cls, meshes: Iterable["MeshData"]) -> "MeshData":
        """Join meshes into one, offsetting triangle indices. Vertices are not merged."""
        meshes = [m for m in meshes if not m.is_empty()]
        if not meshes:
            return cls.empty()

        offsets = np.cumsum([0] + [m.vertex_count for m in meshes[:-1]])
        return cls(
            vertices=np.vstack([m.vertices for m in meshes]),
            normals=np.vstack([m.normals for m in meshes]),
            tangents=np.vstack([m.tangents for m in meshes]),
            uvs=np.vstack([m.uvs for m in meshes]),
            triangles=np.vstack([m.triangles + off for m, off in zip(meshes, offsets)]),
        )

    def to_trimesh(self, include_uv: bool = False) -> "trimesh.Trimesh":
        """
        Convert to a trimesh.Trimesh.

        The mesh is built with process=False so vertex order, the duplicated
        seam vertices, and the unwelded branch shells survive unchanged.
        include_uv attaches the texture coordinates as TextureVisuals.
        """
        import trimesh

        if self.is_empty():
            return trimesh.Trimesh()

        kwargs = {}
        if include_uv:
            kwargs["visual"] = trimesh.visual.TextureVisuals(uv=self.uvs)
        return trimesh.Trimesh(
            vertices=self.vertices,
            faces=self.triangles,
            vertex_normals=self.normals,
            process=False,
            **kwargs,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vertices": self.vertices.tolist(),
            "normals": self.normals.tolist(),
            "tangents": self.tangents.tolist(),
            "uvs": self.uvs.tolist(),
            "indices": self.indices.tolist(),
        }

    def summary(self) -> Dict[str, Any]:
        """Counts and bounds, JSON-safe."""
        summary = {
            "vertex_count": self.vertex_count,
            "triangle_count": self.triangle_count,
            "index_count": int(self.indices.size),
        }
        if not self.is_empty():
            summary["bounds_min"] = [float(x) for x in self.vertices.min(axis=0)]
            summary["bounds_max"] = [float(x) for x in self.vertices.max(axis=0)]
        return summary


class MeshBuffers:
    """Growable vertex/index lists appended to during a build."""

    def __init__(self):
        self.vertices: List[np.ndarray] = []
        self.normals: List[np.ndarray] = []
        self.tangents: List[Sequence[float]] = []
        self.uvs: List[Sequence[float]] = []
        self.triangles: List[Sequence[int]] = []

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    def add_vertex(
        self,
        position: np.ndarray,
        normal: np.ndarray,
        tangent: np.ndarray,
        uv: Sequence[float],
    ) -> int:
        """Append one vertex; returns its index."""
        self.vertices.append(position)
        self.normals.append(normal)
        self.tangents.append((tangent[0], tangent[1], tangent[2], 0.0))
        self.uvs.append((uv[0], uv[1]))
        return len(self.vertices) - 1

    def add_triangle(self, a: int, b: int, c: int) -> None:
        self.triangles.append((a, b, c))

    def finalize(self) -> MeshData:
        """Freeze the buffers into a MeshData."""
        if not self.vertices:
            return MeshData.empty()
        triangles = (
            np.array(self.triangles, dtype=np.int64)
            if self.triangles else np.zeros((0, 3), dtype=np.int64)
        )
        return MeshData(
            vertices=np.array(self.vertices, dtype=float),
            normals=np.array(self.normals, dtype=float),
            tangents=np.array(self.tangents, dtype=float),
            uvs=np.array(self.uvs, dtype=float),
            triangles=triangles,
        )


__all__ = [
    "RadiusProfile",
    "MeshData",
    "MeshBuffers",
]
