"""Lofting of lifting body surfaces from profiles and cross-sections.

Two construction strategies are provided:

- ``build_ring_loft``: one closed ring per cross-section, sampled from a
  section curve (airfoil by default), joined by quad strips and closed with
  apex fans at the nose and tail.
- ``build_dual_surface``: a flat-topped upper grid over the power-law
  planform, a flat bottom grid at z=0, and a quad ladder closing the trailing
  edge.

Axes: x runs from the apex to the tail, y is spanwise, z is up. Both
strategies return ``(vertices, faces)`` with outward-facing triangles.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np
from scipy.integrate import trapezoid

from cross_sections import CrossSection, HullConfig, build_cross_sections
from hull_profiles import ProfileFactory, create_airfoil_profile, create_planform_profile


@dataclass(frozen=True)
class RingLoftConfig:
    """Resolution of the ring loft.

    ``circumferential_points`` is the ring stride: ring ``i`` occupies
    vertex indices ``[i * stride, (i + 1) * stride)``.
    """

    circumferential_points: int = 32
    profile_points: int = 24
    min_ring_chord: float = 0.1
    hull: HullConfig = field(default_factory=HullConfig)

    def __post_init__(self) -> None:
        if self.circumferential_points < 3:
            raise ValueError(
                f"circumferential_points must be at least 3, got {self.circumferential_points}"
            )
        if 2 * self.profile_points < self.circumferential_points:
            raise ValueError(
                "profile_points too low: a section curve with "
                f"{2 * self.profile_points} intervals cannot give "
                f"{self.circumferential_points} distinct ring samples"
            )
        if self.min_ring_chord <= 0.0:
            raise ValueError("min_ring_chord must be positive.")


@dataclass(frozen=True)
class DualSurfaceConfig:
    length: float = 10.0
    segments_x: int = 60
    segments_y: int = 30
    degenerate_width: float = 1e-3
    taper_tail: bool = False

    def __post_init__(self) -> None:
        if self.segments_x < 1 or self.segments_y < 1:
            raise ValueError(
                f"segments_x and segments_y must be at least 1, got {self.segments_x}, {self.segments_y}"
            )
        if self.length <= 0.0:
            raise ValueError("Body length must be positive.")

    @property
    def row_length(self) -> int:
        return self.segments_y + 1


def sample_ring(curve: np.ndarray, circumferential_points: int) -> np.ndarray:
    """Nearest-index samples of a closed curve at evenly spaced parameters.

    When the curve's last point repeats its first, the duplicate is never
    picked. Otherwise the closing segment from the last point back to the
    first counts as one more interval, so no real point is skipped.
    """
    closed = np.allclose(curve[0], curve[-1])
    n_intervals = len(curve) - 1 if closed else len(curve)
    if n_intervals < circumferential_points:
        raise ValueError(
            f"Section curve has {n_intervals} intervals, need at least {circumferential_points}"
        )
    k = np.arange(circumferential_points)
    idx = np.floor(k * n_intervals / circumferential_points + 0.5).astype(np.int64)
    return curve[idx]


def ring_vertices(section: CrossSection, curve: np.ndarray, config: RingLoftConfig) -> np.ndarray:
    """Place one ring of ``circumferential_points`` vertices at the section station."""
    samples = sample_ring(curve, config.circumferential_points)
    chord = max(section.chord, config.min_ring_chord)
    ring = np.empty((config.circumferential_points, 3))
    ring[:, 0] = section.position
    ring[:, 1] = (samples[:, 0] - 0.5) * chord
    ring[:, 2] = samples[:, 1] * chord
    return ring


def ring_faces(n_rings: int, stride: int) -> np.ndarray:
    """Quad strips between consecutive rings plus the two apex fans.

    The apex vertices are expected at indices ``n_rings * stride`` (nose) and
    ``n_rings * stride + 1`` (tail).
    """
    k = np.arange(stride)
    k_next = (k + 1) % stride
    s = np.arange(n_rings - 1)[:, None]

    a = s * stride + k
    b = s * stride + k_next
    c = a + stride
    d = b + stride
    strips = np.stack([a, c, b, b, c, d], axis=-1).reshape(-1, 3)

    nose = n_rings * stride
    tail = nose + 1
    last = (n_rings - 1) * stride
    nose_fan = np.column_stack([np.full(stride, nose), k, k_next])
    tail_fan = np.column_stack([np.full(stride, tail), last + k_next, last + k])

    return np.vstack([strips, nose_fan, tail_fan]).astype(np.int64)


def build_ring_loft(
    cone_angle: float,
    plane_angle: float,
    config: Optional[RingLoftConfig] = None,
    profile_factory: Optional[ProfileFactory] = None,
    sections: Optional[List[CrossSection]] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """Loft closed rings through the cross-section stations and cap both ends.

    Parameters
    ----------
    cone_angle, plane_angle : float
        Cone half-angle and cutting-plane angle in radians.
    config : RingLoftConfig, optional
        Ring resolution and hull dimensions.
    profile_factory : callable, optional
        Maps a section's thickness ratio to a closed section curve laid out
        like :func:`hull_profiles.create_airfoil_profile`. Defaults to the
        symmetric airfoil.
    sections : list of CrossSection, optional
        Precomputed stations; built from the angles when omitted.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        Vertices (S * P + 2, 3) and faces (M, 3).
    """
    config = config or RingLoftConfig()
    if profile_factory is None:
        def profile_factory(thickness_ratio: float) -> np.ndarray:
            return create_airfoil_profile(thickness_ratio, config.profile_points)
    if sections is None:
        sections = build_cross_sections(cone_angle, plane_angle, config.hull)
    if len(sections) < 2:
        raise ValueError("Ring loft needs at least two cross-sections.")

    stride = config.circumferential_points
    rings = [ring_vertices(section, profile_factory(section.thickness_ratio), config) for section in sections]

    nose_apex = rings[0].mean(axis=0)
    tail_apex = rings[-1].mean(axis=0)
    vertices = np.vstack(rings + [nose_apex[None, :], tail_apex[None, :]])
    faces = ring_faces(len(rings), stride)
    return vertices, faces


def planform_area(profile: np.ndarray) -> float:
    """Planform area of a ``(x, half_width)`` profile by the trapezoidal rule."""
    return float(trapezoid(2.0 * profile[:, 1], profile[:, 0]))


def top_surface_heights(
    span_fraction: np.ndarray,
    max_z: float,
    flat_top_pct: float,
    slope_curve: float,
) -> np.ndarray:
    """Height across one station for spanwise fractions ``v`` in [0, 1].

    Points within the flat-top fraction of the half-span sit at ``max_z``;
    outside it the height eases down to zero at the edge with exponent
    ``slope_curve``.
    """
    flat_scale = math.sqrt(min(max(flat_top_pct, 0.0), 100.0) / 100.0)
    dist = np.abs((span_fraction - 0.5) * 2.0)
    heights = np.full(len(span_fraction), max_z, dtype=float)
    if flat_scale < 1.0:
        outside = dist > flat_scale
        slope_pos = (dist[outside] - flat_scale) / (1.0 - flat_scale)
        heights[outside] = max_z * (1.0 - slope_pos**slope_curve)
    return heights


def build_dual_surface(
    cone_angle: float,
    plane_angle: float,
    flat_top_pct: float,
    height_factor: float,
    slope_curve: float,
    config: Optional[DualSurfaceConfig] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """Build the flat-top body as a top grid, a flat bottom grid and a tail ladder.

    The top height is ``planform_area * height_factor / 100``. Stations
    narrower than ``degenerate_width`` are forced to zero height so the apex
    collapses onto the bottom instead of spiking.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        Vertices (2 * (segments_x + 1) * (segments_y + 1), 3) and faces.
    """
    config = config or DualSurfaceConfig()
    profile = create_planform_profile(config.length, config.segments_x, cone_angle, plane_angle)
    if config.taper_tail:
        profile[-1, 1] = 0.0

    max_z = planform_area(profile) * height_factor / 100.0

    row_len = config.row_length
    span_fraction = np.linspace(0.0, 1.0, row_len)
    xs = profile[:, 0]
    widths = profile[:, 1]

    station_heights = top_surface_heights(span_fraction, max_z, flat_top_pct, slope_curve)
    heights = np.where(widths[:, None] < config.degenerate_width, 0.0, station_heights[None, :])
    span = (span_fraction[None, :] - 0.5) * 2.0 * widths[:, None]
    x_grid = np.broadcast_to(xs[:, None], span.shape)

    top = np.stack([x_grid, span, heights], axis=-1).reshape(-1, 3)
    bottom = np.stack([x_grid, span, np.zeros_like(span)], axis=-1).reshape(-1, 3)
    bottom_offset = len(top)

    i = np.arange(config.segments_x)[:, None]
    j = np.arange(config.segments_y)[None, :]
    a = i * row_len + j
    b = a + 1
    c = a + row_len
    d = c + 1
    top_faces = np.stack([a, d, b, a, c, d], axis=-1).reshape(-1, 3)
    bottom_faces = bottom_offset + np.stack([a, b, d, a, d, c], axis=-1).reshape(-1, 3)
    face_blocks = [top_faces, bottom_faces]

    if not config.taper_tail:
        top_current = config.segments_x * row_len + np.arange(config.segments_y)
        top_next = top_current + 1
        bottom_current = bottom_offset + top_current
        bottom_next = bottom_offset + top_next
        ladder = np.stack(
            [top_current, bottom_current, top_next, top_next, bottom_current, bottom_next], axis=-1
        ).reshape(-1, 3)
        face_blocks.append(ladder)

    return np.vstack([top, bottom]), np.vstack(face_blocks).astype(np.int64)
