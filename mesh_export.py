"""Validation and file export for generated hull meshes.

Meshes are any object exposing ``vertices`` (N, 3), ``normals`` (N, 3) and
``faces`` (M, 3) arrays, such as :class:`lifting_body.Mesh`.
"""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Union

import numpy as np
import pyvista as pv

PathLike = Union[str, Path]


def to_polydata(mesh) -> pv.PolyData:
    """Convert a mesh to PyVista ``PolyData`` with point normals attached."""
    faces = np.asarray(mesh.faces, dtype=np.int64).reshape(-1, 3)
    pv_faces = np.hstack([np.full((len(faces), 1), 3, dtype=np.int64), faces]).ravel()
    polydata = pv.PolyData(np.asarray(mesh.vertices, dtype=np.float64), faces=pv_faces)
    polydata.point_data["Normals"] = np.asarray(mesh.normals, dtype=np.float64)
    return polydata


def validate_mesh(mesh, tolerance: float = 1e-6, verbose: bool = True) -> Dict[str, object]:
    """Report manifoldness, open edges, connected regions and volume of a mesh.

    Coincident points closer than ``tolerance`` are merged first, so the
    dual-surface body (whose top and bottom grids meet at shared positions
    rather than shared indices) is judged as the closed shape it renders as.
    """
    polydata = to_polydata(mesh).clean(tolerance=tolerance)
    report: Dict[str, object] = {
        "n_points": polydata.n_points,
        "n_cells": polydata.n_cells,
        "is_manifold": False,
        "n_open_edges": 0,
        "n_regions": 0,
        "volume": 0.0,
    }
    if polydata.n_points > 0 and polydata.n_cells > 0:
        conn = polydata.connectivity()
        report["is_manifold"] = bool(polydata.is_manifold)
        report["n_open_edges"] = int(polydata.n_open_edges)
        report["n_regions"] = len(set(conn.point_data["RegionId"]))
        report["volume"] = float(polydata.volume)
    report["watertight"] = report["n_cells"] > 0 and report["n_open_edges"] == 0

    if verbose:
        print("\n=== MESH VALIDATION ===")
        print(f"  Points: {report['n_points']}, cells: {report['n_cells']}")
        print(f"  Is manifold: {report['is_manifold']}")
        print(f"  Open edges: {report['n_open_edges']}")
        print(f"  Connected regions: {report['n_regions']}")
        print(f"  Watertight: {report['watertight']}")
        print(f"  Volume: {report['volume']:.3f}")
        print("=== END MESH VALIDATION ===\n")
    return report


def write_stl(filename: PathLike, mesh, validate_and_repair: bool = True) -> None:
    """Write a mesh to STL.

    Parameters
    ----------
    filename : str or Path
        Output STL filename.
    mesh : Mesh
        Mesh to export.
    validate_and_repair : bool
        If True, merge duplicate points, report mesh quality and fill any
        holes with PyVista before saving. Otherwise write the triangles as
        they are with :func:`write_binary_stl`.
    """
    if not validate_and_repair:
        write_binary_stl(filename, mesh)
        return

    report = validate_mesh(mesh)
    polydata = to_polydata(mesh).clean(tolerance=1e-6)
    if polydata.n_cells == 0:
        print("  WARNING: Empty mesh, saving without repair")
        polydata.save(str(filename))
        return

    if report["n_open_edges"] > 0:
        print("  Attempting hole fill...")
        polydata = polydata.fill_holes(hole_size=1000.0).clean(tolerance=1e-6)
        print(f"  After repair: {polydata.n_open_edges} open edges")

    polydata = polydata.triangulate().clean()
    polydata.save(str(filename))


def write_binary_stl(filename: PathLike, mesh, header: str = "Lifting body mesh") -> None:
    """Write triangles to a binary STL file without any cleanup."""
    vertices = np.asarray(mesh.vertices, dtype=np.float64)
    faces = np.asarray(mesh.faces, dtype=np.int64).reshape(-1, 3)

    p0 = vertices[faces[:, 0]]
    p1 = vertices[faces[:, 1]]
    p2 = vertices[faces[:, 2]]
    normals = np.cross(p1 - p0, p2 - p0)
    lengths = np.linalg.norm(normals, axis=1)
    nonzero = lengths > 0.0
    normals[nonzero] /= lengths[nonzero, None]
    normals[~nonzero] = 0.0

    records = np.zeros(
        len(faces),
        dtype=[("normal", "<f4", 3), ("v0", "<f4", 3), ("v1", "<f4", 3), ("v2", "<f4", 3), ("attr", "<u2")],
    )
    records["normal"] = normals
    records["v0"] = p0
    records["v1"] = p1
    records["v2"] = p2

    header_bytes = header.encode("ascii")[:80]
    with open(filename, "wb") as f:
        f.write(header_bytes + b" " * (80 - len(header_bytes)))
        f.write(len(faces).to_bytes(4, byteorder="little"))
        f.write(records.tobytes())


def write_obj(path: PathLike, mesh) -> None:
    """Write a mesh with vertex normals to a Wavefront OBJ file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        f.write("# Lifting body mesh\n")
        for x, y, z in mesh.vertices:
            f.write(f"v {x:.6f} {y:.6f} {z:.6f}\n")
        for x, y, z in mesh.normals:
            f.write(f"vn {x:.6f} {y:.6f} {z:.6f}\n")
        for a, b, c in mesh.faces:
            f.write(f"f {a + 1}//{a + 1} {b + 1}//{b + 1} {c + 1}//{c + 1}\n")
