"""
Colin Catlin, 2025, GNU GENERAL PUBLIC LICENSE Version 3
Lifting body hull generator.

Turns five shape parameters into a closed triangle mesh with per-vertex
normals, ready to hand to any renderer that takes positions, normals and a
triangle list. Every call builds a new, read-only ``Mesh``; nothing is cached
or shared between calls, so a caller driving this from a slider simply
replaces its previous mesh with the returned one.

Run as a script to write the hull to STL/OBJ:

    python lifting_body.py --strategy ring --cone-angle 30 --output hull.stl
"""
from __future__ import annotations

import argparse
import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, Dict, Optional, Sequence, Tuple

import numpy as np

from cross_sections import LEADING_EDGE_MODES, HullConfig, build_cross_sections, payload_clearance
from hull_loft import DualSurfaceConfig, RingLoftConfig, build_dual_surface, build_ring_loft
from hull_plots import plot_hull_overview
from hull_profiles import create_airfoil_profile, create_planform_profile, sample_cone_plane_intersection
from mesh_export import write_obj, write_stl
from mesh_normals import compute_vertex_normals, signed_volume

# Practical limits of the shape parameters: (low, high)
PARAMETER_LIMITS = {
    "cone_angle": (1.0, 80.0),
    "plane_angle": (0.0, 89.0),
    "flat_top_pct": (0.0, 100.0),
    "height_factor": (0.0, 100.0),
    "slope_curve": (0.05, 10.0),
}
SUBSONIC_CONE_ANGLE_DEG = 30.0


@dataclass(frozen=True)
class LiftingBodyParams:
    """Shape parameters as supplied by the design UI.

    Angles are in degrees. ``flat_top_pct``, ``height_factor`` and
    ``slope_curve`` only shape the dual-surface body.
    """

    cone_angle: float = 30.0
    plane_angle: float = 15.0
    flat_top_pct: float = 70.0
    height_factor: float = 10.0
    slope_curve: float = 1.5

    def clamped(self) -> "LiftingBodyParams":
        """Return a copy with every parameter clipped to ``PARAMETER_LIMITS``."""
        values = {}
        for name, (low, high) in PARAMETER_LIMITS.items():
            value = float(getattr(self, name))
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value}")
            values[name] = min(max(value, low), high)
        return replace(self, **values)


@dataclass(frozen=True)
class GeometryConfig:
    ring: RingLoftConfig = field(default_factory=RingLoftConfig)
    dual: DualSurfaceConfig = field(default_factory=DualSurfaceConfig)


@dataclass(frozen=True, eq=False)
class Mesh:
    """Immutable triangle mesh: positions, unit normals and faces."""

    vertices: np.ndarray
    normals: np.ndarray
    faces: np.ndarray

    def __post_init__(self) -> None:
        for name in ("vertices", "normals", "faces"):
            array = np.array(getattr(self, name), copy=True)
            array.setflags(write=False)
            object.__setattr__(self, name, array)

    @property
    def indices(self) -> np.ndarray:
        """Flat triangle index list, three entries per face."""
        return self.faces.reshape(-1)

    @property
    def n_vertices(self) -> int:
        return len(self.vertices)

    @property
    def n_faces(self) -> int:
        return len(self.faces)

    @property
    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        return self.vertices.min(axis=0), self.vertices.max(axis=0)

    @property
    def volume(self) -> float:
        """Enclosed volume; positive for an outward-wound closed hull."""
        return signed_volume(self.vertices, self.faces)


def _ring_strategy(params: LiftingBodyParams, config: GeometryConfig):
    return build_ring_loft(
        math.radians(params.cone_angle),
        math.radians(params.plane_angle),
        config.ring,
    )


def _dual_strategy(params: LiftingBodyParams, config: GeometryConfig):
    return build_dual_surface(
        math.radians(params.cone_angle),
        math.radians(params.plane_angle),
        params.flat_top_pct,
        params.height_factor,
        params.slope_curve,
        config.dual,
    )


LOFT_STRATEGIES: Dict[str, Callable[[LiftingBodyParams, GeometryConfig], Tuple[np.ndarray, np.ndarray]]] = {
    "ring": _ring_strategy,
    "dual": _dual_strategy,
}


def generate_geometry(
    params: Optional[LiftingBodyParams] = None,
    strategy: str = "ring",
    config: Optional[GeometryConfig] = None,
    verbose: bool = False,
) -> Mesh:
    """Generate the lifting body mesh for one set of shape parameters.

    Parameters are clamped to their practical ranges first, so any finite
    input yields a valid mesh.

    Parameters
    ----------
    params : LiftingBodyParams, optional
        Shape parameters; defaults to ``LiftingBodyParams()``.
    strategy : str
        ``"ring"`` for the airfoil ring loft with apex caps, ``"dual"`` for the
        flat-top surface over the power-law planform.
    config : GeometryConfig, optional
        Resolution and dimensions of both strategies.
    verbose : bool
        Print the parameters and resulting mesh size.

    Returns
    -------
    Mesh
        New mesh with vertices, per-vertex normals and faces.
    """
    if strategy not in LOFT_STRATEGIES:
        raise ValueError(f"Unknown strategy {strategy!r}; choose from {sorted(LOFT_STRATEGIES)}")
    params = (params or LiftingBodyParams()).clamped()
    config = config or GeometryConfig()

    if verbose:
        print(
            f"Generating {strategy} geometry: coneAngle={params.cone_angle:.1f}°, "
            f"planeAngle={params.plane_angle:.1f}°, flatTop={params.flat_top_pct:.0f}%, "
            f"heightFactor={params.height_factor:.1f}, slopeCurve={params.slope_curve:.2f}"
        )

    vertices, faces = LOFT_STRATEGIES[strategy](params, config)
    normals = compute_vertex_normals(vertices, faces)
    mesh = Mesh(vertices=vertices, normals=normals, faces=faces)

    if verbose:
        print(f"  Mesh: {mesh.n_vertices} vertices, {mesh.n_faces} triangles, volume {mesh.volume:.1f} m^3")
    return mesh


def mach_cone_angle(mach: float) -> float:
    """Mach cone half-angle in degrees, ``asin(1 / M)``; 30° when subsonic."""
    if mach >= 1.0:
        return math.degrees(math.asin(1.0 / mach))
    return SUBSONIC_CONE_ANGLE_DEG


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Generate a lifting body hull mesh.")
    parser.add_argument("--strategy", choices=sorted(LOFT_STRATEGIES), default="ring", help="Lofting strategy.")
    parser.add_argument("--cone-angle", type=float, default=30.0, help="Cone half-angle in degrees.")
    parser.add_argument("--mach", type=float, default=None, help="Derive the cone angle from this Mach number.")
    parser.add_argument("--plane-angle", type=float, default=15.0, help="Cutting-plane angle in degrees.")
    parser.add_argument(
        "--leading-edge",
        choices=LEADING_EDGE_MODES,
        default="cone",
        help="Ring stations from the cone half-angle alone or from the cone/plane intersection.",
    )
    parser.add_argument(
        "--payload-floor", type=float, default=0.0, help="Minimum half-width inside the payload bay (ring only)."
    )
    parser.add_argument("--flat-top-pct", type=float, default=70.0, help="Flat-top area percent (dual only).")
    parser.add_argument("--height-factor", type=float, default=10.0, help="Height/volume factor (dual only).")
    parser.add_argument("--slope-curve", type=float, default=1.5, help="Edge slope exponent (dual only).")
    parser.add_argument("--output", type=Path, default=Path("lifting_body.stl"), help="Output .stl or .obj path.")
    parser.add_argument("--no-validate", action="store_true", help="Write raw binary STL without PyVista checks.")
    parser.add_argument("--plot", type=Path, default=None, help="Also save a planform/profile figure here.")
    parser.add_argument("--verbose", action="store_true", help="Print generation details.")
    args = parser.parse_args(argv)

    cone_angle = args.cone_angle
    if args.mach is not None:
        cone_angle = mach_cone_angle(args.mach)
        print(f"Mach {args.mach:.2f} -> cone angle {cone_angle:.2f}°")

    params = LiftingBodyParams(
        cone_angle=cone_angle,
        plane_angle=args.plane_angle,
        flat_top_pct=args.flat_top_pct,
        height_factor=args.height_factor,
        slope_curve=args.slope_curve,
    ).clamped()
    hull = HullConfig(leading_edge=args.leading_edge, payload_min_half_width=args.payload_floor)
    config = GeometryConfig(ring=RingLoftConfig(hull=hull))
    mesh = generate_geometry(params, strategy=args.strategy, config=config, verbose=args.verbose)

    cone = math.radians(params.cone_angle)
    plane = math.radians(params.plane_angle)
    sections = None
    if args.strategy == "ring":
        sections = build_cross_sections(cone, plane, hull)
        blocked = payload_clearance(sections, hull)
        if blocked:
            print(
                f"Warning: payload box ({hull.payload_width:.0f} m x {hull.payload_height:.0f} m) "
                f"does not fit at {len(blocked)} bay station(s), "
                f"first at x={blocked[0].position:.1f} m"
            )

    if args.output.suffix.lower() == ".obj":
        write_obj(args.output, mesh)
    else:
        write_stl(args.output, mesh, validate_and_repair=not args.no_validate)
    print(f"Hull written to {args.output} ({mesh.n_vertices} vertices, {mesh.n_faces} triangles)")

    if args.plot is not None:
        if sections is not None:
            leading_edge = sample_cone_plane_intersection(cone, plane, 0.0, hull.length)
            bay_section = max(sections, key=lambda s: s.profile_thickness)
            section_curve = create_airfoil_profile(bay_section.thickness_ratio, config.ring.profile_points)
            plot_hull_overview(
                args.plot,
                sections=sections,
                leading_edge=leading_edge,
                section_curve=section_curve,
                hull=hull,
            )
        else:
            planform = create_planform_profile(config.dual.length, config.dual.segments_x, cone, plane)
            plot_hull_overview(args.plot, planform=planform)
        print(f"Plot written to {args.plot}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
