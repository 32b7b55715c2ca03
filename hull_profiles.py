"""Section and planform shape profiles for the lifting body hull.

Two kinds of profile feed the lofter:

- A closed airfoil-like section curve (symmetric NACA 4-digit thickness or a
  custom spline section) that is scaled into each ring of the ring loft.
- A power-law planform giving the half-width along the body length, used by
  the flat-top (dual-surface) loft.

All angles are in radians.
"""
from __future__ import annotations

import math
from typing import Callable, Optional, Sequence, Tuple

import numpy as np

NACA_COEFFICIENTS = (0.2969, -0.1260, -0.3516, 0.2843, -0.1015)
MAX_THICKNESS_RATIO = 0.15
APEX_WIDTH_CUTOFF = 1e-3
COS_EPSILON = 1e-3

ProfileFactory = Callable[[float], np.ndarray]


def gaussian_smooth_5point(points: np.ndarray, iterations: int = 1) -> np.ndarray:
    """Apply 5-point Gaussian smoothing to a series of points.

    Uses the kernel [1, 4, 6, 4, 1] / 16 on interior points; the first two
    and last two points are left untouched so curve endpoints stay pinned.

    Parameters
    ----------
    points : np.ndarray
        Array of points to smooth, shape (N, D).
    iterations : int
        Number of smoothing passes (default 1).

    Returns
    -------
    np.ndarray
        Smoothed points with same shape as input.
    """
    points = np.asarray(points, dtype=float)
    if len(points) < 5:
        return points.copy()

    kernel = np.array([1.0, 4.0, 6.0, 4.0, 1.0]) / 16.0
    smoothed = points.copy()
    for _ in range(iterations):
        result = smoothed.copy()
        result[2:-2] = sum(
            weight * smoothed[j:len(smoothed) - 4 + j] for j, weight in enumerate(kernel)
        )
        smoothed = result
    return smoothed


def naca_thickness(x, t: float, closed_trailing_edge: bool = True):
    """Half-thickness of a symmetric NACA 4-digit section at chord fraction ``x``.

    The -0.1015 quartic coefficient leaves ``yt(1) = 0.0105 * t``. With
    ``closed_trailing_edge`` the residual is removed linearly so the section
    closes exactly at both ends.
    """
    a0, a1, a2, a3, a4 = NACA_COEFFICIENTS
    x = np.asarray(x, dtype=float)
    yt = 5.0 * t * (a0 * np.sqrt(x) + a1 * x + a2 * x**2 + a3 * x**3 + a4 * x**4)
    if closed_trailing_edge:
        yt_te = 5.0 * t * sum(NACA_COEFFICIENTS)
        yt = yt - x * yt_te
    return yt


def create_airfoil_profile(max_thickness: float, n_points: int) -> np.ndarray:
    """Create a closed symmetric section curve of ``2 * n_points + 1`` points.

    The curve runs along the upper surface from the leading edge (x=0) to
    the trailing edge (x=1), then back along the lower surface to the leading
    edge. The trailing edge point is emitted once.

    Parameters
    ----------
    max_thickness : float
        Maximum thickness as a fraction of chord. Not clamped here; callers
        keep it at or below ``MAX_THICKNESS_RATIO``.
    n_points : int
        Number of chordwise intervals per surface (>= 1).

    Returns
    -------
    np.ndarray
        Curve coordinates, shape (2 * n_points + 1, 2).
    """
    if n_points < 1:
        raise ValueError(f"n_points must be at least 1, got {n_points}")

    x = np.linspace(0.0, 1.0, n_points + 1)
    yt = naca_thickness(x, max_thickness)
    upper = np.column_stack([x, yt])
    lower = np.column_stack([x[::-1][1:], -yt[::-1][1:]])
    return np.vstack([upper, lower])


def power_law_exponent(cone_angle: float, plane_angle: float) -> float:
    """Planform shape exponent from the cone and cutting-plane angles."""
    cos_alpha = math.cos(cone_angle)
    if abs(cos_alpha) < COS_EPSILON:
        cos_alpha = math.copysign(COS_EPSILON, cos_alpha)
    k = abs(math.cos(plane_angle) / cos_alpha)
    return 0.5 + 0.5 * k


def power_law_half_width(x: float, cone_angle: float, plane_angle: float) -> float:
    """Half-width of the power-law planform at longitudinal position ``x``."""
    if x <= APEX_WIDTH_CUTOFF:
        return 0.0
    shape_power = power_law_exponent(cone_angle, plane_angle)
    return x**shape_power * (1.5 + math.sin(cone_angle))


def create_planform_profile(
    length: float,
    segments: int,
    cone_angle: float,
    plane_angle: float,
) -> np.ndarray:
    """Sample the power-law planform from apex to tail.

    Returns
    -------
    np.ndarray
        Rows of ``(x, half_width)``, shape (segments + 1, 2).
    """
    if segments < 1:
        raise ValueError(f"segments must be at least 1, got {segments}")
    xs = np.linspace(0.0, length, segments + 1)
    widths = [power_law_half_width(float(x), cone_angle, plane_angle) for x in xs]
    return np.column_stack([xs, widths])


def _resample_surface(points: np.ndarray, chord_x: np.ndarray) -> np.ndarray:
    order = np.argsort(points[:, 0], kind="stable")
    return np.interp(chord_x, points[order, 0], points[order, 1])


def create_spline_cross_section(
    top_points: Sequence[Tuple[float, float]],
    bottom_points: Sequence[Tuple[float, float]],
    n_points: int = 30,
    smooth: bool = True,
) -> np.ndarray:
    """Build a closed section curve from top and bottom control points.

    Control points may be in any units (for example canvas pixels). The
    chord is normalized to [0, 1], the vertical axis is centred on the mid
    line of the section at its thickest station and normalized so the largest
    half-thickness is 1. The returned layout matches
    :func:`create_airfoil_profile`.
    """
    if n_points < 1:
        raise ValueError(f"n_points must be at least 1, got {n_points}")
    top = np.asarray(top_points, dtype=float)
    bottom = np.asarray(bottom_points, dtype=float)
    if top.ndim != 2 or bottom.ndim != 2 or len(top) < 2 or len(bottom) < 2:
        raise ValueError("top and bottom need at least two (x, y) control points each")

    x_min = min(top[:, 0].min(), bottom[:, 0].min())
    x_max = max(top[:, 0].max(), bottom[:, 0].max())
    x_range = x_max - x_min
    if x_range <= 0.0:
        raise ValueError("control points span zero chord")

    t = np.linspace(0.0, 1.0, n_points + 1)
    chord_x = x_min + t * x_range
    upper_y = _resample_surface(top, chord_x)
    lower_y = _resample_surface(bottom, chord_x)

    # The surface lying higher on average becomes the upper surface
    if np.mean(upper_y) < np.mean(lower_y):
        upper_y, lower_y = lower_y, upper_y

    thick_idx = int(np.argmax(upper_y - lower_y))
    centre = 0.5 * (upper_y[thick_idx] + lower_y[thick_idx])
    half = 0.5 * (upper_y[thick_idx] - lower_y[thick_idx])
    if half <= 0.0:
        raise ValueError("top and bottom control points do not enclose a section")

    upper = np.column_stack([t, (upper_y - centre) / half])
    lower = np.column_stack([t, (lower_y - centre) / half])
    if smooth:
        upper = gaussian_smooth_5point(upper, iterations=1)
        lower = gaussian_smooth_5point(lower, iterations=1)

    return np.vstack([upper, lower[::-1][1:]])


def spline_profile_factory(
    top_points: Sequence[Tuple[float, float]],
    bottom_points: Sequence[Tuple[float, float]],
    n_points: int = 30,
    smooth: bool = True,
) -> ProfileFactory:
    """Return a ``thickness_ratio -> curve`` callable for the ring loft.

    The normalized spline section is scaled to half-thickness ``t / 2`` so a
    thickness ratio means the same total thickness as for the airfoil.
    """
    unit_section = create_spline_cross_section(top_points, bottom_points, n_points, smooth)

    def factory(thickness_ratio: float) -> np.ndarray:
        curve = unit_section.copy()
        curve[:, 1] *= 0.5 * thickness_ratio
        return curve

    return factory


def sample_cone_plane_intersection(
    cone_angle: float,
    sweep_angle: float,
    tilt_angle: float,
    length: float,
    plane_x: Optional[float] = None,
    n_samples: int = 200,
) -> np.ndarray:
    """Sample where a cutting plane meets the cone ``r = x * tan(cone_angle)``.

    The plane passes through ``(plane_x, 0, 0)`` (mid-length by default) with
    normal ``(cos(sweep) cos(tilt), sin(sweep) cos(tilt), sin(tilt))``. For
    each of ``n_samples`` azimuths the ray along the cone surface is
    intersected with the plane; hits with ``0 <= x <= length`` are kept.

    Returns
    -------
    np.ndarray
        Intersection points ``(x, y, z)``, shape (K, 3) with K <= n_samples.
    """
    if plane_x is None:
        plane_x = length / 2.0
    nx = math.cos(sweep_angle) * math.cos(tilt_angle)
    ny = math.sin(sweep_angle) * math.cos(tilt_angle)
    nz = math.sin(tilt_angle)
    tan_cone = math.tan(cone_angle)

    theta = np.arange(n_samples) * 2.0 * math.pi / n_samples
    denominator = nx + ny * tan_cone * np.cos(theta) + nz * tan_cone * np.sin(theta)
    valid = np.abs(denominator) > COS_EPSILON
    x = np.full(n_samples, np.nan)
    x[valid] = nx * plane_x / denominator[valid]
    keep = valid & (x >= 0.0) & (x <= length)

    r = x[keep] * tan_cone
    return np.column_stack([x[keep], r * np.cos(theta[keep]), r * np.sin(theta[keep])])
