"""Longitudinal cross-section stations for the ring-lofted lifting body.

The leading edge comes from the cone half-angle (``half_width = x tan(cone)``),
and the centreline height follows a three-region taper around the payload bay:
an eased nose ramp, a constant-height bay, and an eased tail run-out.

With ``leading_edge="intersection"`` the half-widths instead follow the
planform traced by the cutting plane on the cone, so the plane angle shapes
the hull. That mode gives up the monotone half-width of the cone mode.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from hull_profiles import MAX_THICKNESS_RATIO, sample_cone_plane_intersection

LEADING_EDGE_MODES = ("cone", "intersection")


@dataclass(frozen=True)
class HullConfig:
    """Dimensions of the ring-lofted hull, in metres."""

    length: float = 100.0
    max_width: float = 300.0
    num_sections: int = 60
    payload_start: float = 30.0
    payload_end: float = 50.0
    payload_height: float = 8.0
    payload_width: float = 8.0
    nose_height: float = 0.3
    tail_height: float = 0.5
    nose_exponent: float = 1.2
    tail_exponent: float = 1.5
    reference_half_width: float = 50.0
    min_height: float = 0.3
    apex_epsilon: float = 0.1
    max_thickness_ratio: float = MAX_THICKNESS_RATIO
    leading_edge: str = "cone"
    payload_min_half_width: float = 0.0

    def __post_init__(self) -> None:
        if self.num_sections < 1:
            raise ValueError(f"num_sections must be at least 1, got {self.num_sections}")
        if self.length <= 0.0:
            raise ValueError("Hull length must be positive.")
        if not 0.0 < self.payload_start <= self.payload_end < self.length:
            raise ValueError(
                "Payload bay must satisfy 0 < payload_start <= payload_end < length, "
                f"got [{self.payload_start}, {self.payload_end}] for length {self.length}"
            )
        if self.reference_half_width <= 0.0:
            raise ValueError("reference_half_width must be positive.")
        if self.leading_edge not in LEADING_EDGE_MODES:
            raise ValueError(f"leading_edge must be one of {LEADING_EDGE_MODES}, got {self.leading_edge!r}")
        if self.payload_min_half_width < 0.0:
            raise ValueError("payload_min_half_width must not be negative.")

    @property
    def max_half_width(self) -> float:
        return self.max_width * 0.5


@dataclass(frozen=True)
class CrossSection:
    position: float
    chord: float
    height: float
    thickness_ratio: float

    @property
    def half_width(self) -> float:
        return self.chord * 0.5

    @property
    def profile_thickness(self) -> float:
        """Total thickness the lofted section actually gets (ratio times chord)."""
        return self.thickness_ratio * self.chord


def _bounded_half_width(x: float, raw: float, config: HullConfig) -> float:
    if config.payload_start <= x <= config.payload_end:
        raw = max(raw, config.payload_min_half_width)
    return min(max(raw, 0.0), config.max_half_width)


def section_half_width(x: float, cone_angle: float, config: HullConfig) -> float:
    """Leading-edge half-width at ``x``, capped at the configured maximum.

    Inside the payload bay it is also floored at ``payload_min_half_width``.
    """
    return _bounded_half_width(x, x * math.tan(cone_angle), config)


def intersection_half_widths(
    positions: Sequence[float],
    cone_angle: float,
    plane_angle: float,
    config: HullConfig,
) -> np.ndarray:
    """Unbounded half-widths traced by the cutting plane on the cone.

    Each station takes the widest ``|y|`` among intersection points within
    half a station spacing. Stations between sampled points are
    interpolated; stations beyond the intersection's x extent get zero.
    """
    positions = np.asarray(positions, dtype=float)
    points = sample_cone_plane_intersection(cone_angle, plane_angle, 0.0, config.length)
    if len(points) == 0:
        return np.zeros(len(positions))

    tolerance = config.length / (2.0 * config.num_sections)
    widths = np.full(len(positions), np.nan)
    for i, x in enumerate(positions):
        near = np.abs(points[:, 0] - x) < tolerance
        if near.any():
            widths[i] = np.abs(points[near, 1]).max()

    known = ~np.isnan(widths)
    if not known.any():
        return np.zeros(len(positions))
    filled = np.interp(positions, positions[known], widths[known])
    outside = (positions < points[:, 0].min() - tolerance) | (positions > points[:, 0].max() + tolerance)
    filled[outside] = 0.0
    return filled


def section_height(x: float, half_width: float, config: HullConfig) -> float:
    """Centreline height at ``x``.

    Inside the payload bay (bounds inclusive) the height is exactly the
    payload height. Outside it the taper is scaled down for narrow stations
    by ``min(1, half_width / reference_half_width)``.
    """
    if x < config.apex_epsilon:
        return max(config.min_height, config.nose_height)

    if config.payload_start <= x <= config.payload_end:
        return config.payload_height

    if x < config.payload_start:
        t = x / config.payload_start
        height = config.nose_height + (config.payload_height - config.nose_height) * t**config.nose_exponent
    else:
        aft_run = config.length - config.payload_end
        t = min(max(1.0 - (x - config.payload_end) / aft_run, 0.0), 1.0)
        height = config.tail_height + (config.payload_height - config.tail_height) * t**config.tail_exponent

    width_factor = min(1.0, half_width / config.reference_half_width)
    return max(config.min_height, height * width_factor)


def section_thickness_ratio(height: float, half_width: float, config: HullConfig) -> float:
    return min(config.max_thickness_ratio, height / max(2.0 * half_width, 1.0))


def build_cross_sections(
    cone_angle: float,
    plane_angle: float = 0.0,
    config: Optional[HullConfig] = None,
) -> List[CrossSection]:
    """Sample ``num_sections + 1`` evenly spaced stations from apex to tail.

    ``plane_angle`` only matters with ``leading_edge="intersection"``; the
    default cone-derived leading edge does not depend on it.
    """
    config = config or HullConfig()
    positions = [config.length * i / config.num_sections for i in range(config.num_sections + 1)]
    if config.leading_edge == "intersection":
        raw = intersection_half_widths(positions, cone_angle, plane_angle, config)
        half_widths = [_bounded_half_width(x, float(w), config) for x, w in zip(positions, raw)]
    else:
        half_widths = [section_half_width(x, cone_angle, config) for x in positions]

    sections: List[CrossSection] = []
    for x, half_width in zip(positions, half_widths):
        height = section_height(x, half_width, config)
        sections.append(
            CrossSection(
                position=x,
                chord=2.0 * half_width,
                height=height,
                thickness_ratio=section_thickness_ratio(height, half_width, config),
            )
        )
    return sections


def payload_clearance(sections: List[CrossSection], config: Optional[HullConfig] = None) -> List[CrossSection]:
    """Return the bay stations too narrow or too low for the cargo box.

    The lofted thickness is ``thickness_ratio * chord``, which falls short of
    the target height wherever the thickness ratio was clamped. An empty list
    means a ``payload_width`` x ``payload_height`` box fits at every station
    of the payload bay.
    """
    config = config or HullConfig()
    blocked = []
    for section in sections:
        if not config.payload_start <= section.position <= config.payload_end:
            continue
        if section.half_width < config.payload_width / 2.0 or section.profile_thickness < config.payload_height - 1e-9:
            blocked.append(section)
    return blocked
