"""Per-vertex normals for triangle meshes."""
from __future__ import annotations

from typing import Sequence

import numpy as np

DEFAULT_NORMAL = (0.0, 0.0, 1.0)


def face_normals(vertices: np.ndarray, faces: np.ndarray) -> np.ndarray:
    """Unnormalized face normals ``(v1 - v0) x (v2 - v0)``, one row per face.

    The vector length is twice the triangle area.
    """
    vertices = np.asarray(vertices, dtype=float)
    faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
    p0 = vertices[faces[:, 0]]
    p1 = vertices[faces[:, 1]]
    p2 = vertices[faces[:, 2]]
    return np.cross(p1 - p0, p2 - p0)


def compute_vertex_normals(
    vertices: np.ndarray,
    faces: np.ndarray,
    eps: float = 1e-9,
    default: Sequence[float] = DEFAULT_NORMAL,
) -> np.ndarray:
    """Area-weighted unit normal for every vertex.

    Each face's unnormalized normal is added to all three of its corners, so
    larger triangles count for more. Vertices whose accumulated normal is
    shorter than ``eps`` (unreferenced, or only touching degenerate faces)
    get ``default`` instead of a NaN.

    Parameters
    ----------
    vertices : np.ndarray
        Vertex coordinates, shape (N, 3).
    faces : np.ndarray
        Triangle vertex indices, shape (M, 3) or flat with length 3M.
    eps : float
        Minimum accumulated length treated as a valid direction.
    default : Sequence[float]
        Unit normal substituted for degenerate vertices.

    Returns
    -------
    np.ndarray
        Unit normals, shape (N, 3).
    """
    vertices = np.asarray(vertices, dtype=float)
    faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
    accumulated = np.zeros_like(vertices)

    if len(faces) > 0:
        normals = face_normals(vertices, faces)
        # np.add.at handles vertices repeated within one index column
        for corner in range(3):
            np.add.at(accumulated, faces[:, corner], normals)

    lengths = np.linalg.norm(accumulated, axis=1)
    valid = lengths >= eps
    result = np.empty_like(accumulated)
    result[valid] = accumulated[valid] / lengths[valid, None]
    result[~valid] = np.asarray(default, dtype=float)
    return result


def signed_volume(vertices: np.ndarray, faces: np.ndarray) -> float:
    """Enclosed volume by the divergence theorem.

    Positive when the triangles wind outward. Only meaningful for a closed
    surface; an open one gives the volume of the cone it spans to the origin.
    """
    vertices = np.asarray(vertices, dtype=float)
    faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
    if len(faces) == 0:
        return 0.0
    p0 = vertices[faces[:, 0]]
    return float(np.einsum("ij,ij->i", p0, face_normals(vertices, faces)).sum() / 6.0)
