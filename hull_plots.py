"""Planform and side-profile drawings of the lifting body."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence, Union

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.patches import Polygon, Rectangle

from cross_sections import CrossSection, HullConfig

HULL_EDGE = '#005A9C'
HULL_FILL = '#7CA6C7'
PAYLOAD_COLOR = 'firebrick'


def draw_planform(ax, xs: np.ndarray, half_widths: np.ndarray, color: str = HULL_FILL, edgecolor: str = HULL_EDGE):
    """Top view: mirror the half-width curve about the centreline and fill it."""
    points = np.vstack([
        np.column_stack([xs, half_widths]),
        np.column_stack([xs[::-1], -half_widths[::-1]]),
    ])
    polygon = Polygon(points, closed=True, facecolor=color, edgecolor=edgecolor, alpha=0.45, zorder=1.5)
    ax.add_patch(polygon)
    return polygon


def draw_payload_bay(ax, hull: HullConfig, height: float):
    """Outline the payload box over the bay interval, resting on z=0."""
    box = Rectangle(
        (hull.payload_start, 0.0),
        hull.payload_end - hull.payload_start,
        height,
        fill=False,
        edgecolor=PAYLOAD_COLOR,
        linestyle='--',
        linewidth=1.5,
        zorder=3,
        label='Payload bay',
    )
    ax.add_patch(box)
    return box


def plot_hull_overview(
    filename: Union[str, Path],
    sections: Optional[Sequence[CrossSection]] = None,
    planform: Optional[np.ndarray] = None,
    leading_edge: Optional[np.ndarray] = None,
    section_curve: Optional[np.ndarray] = None,
    hull: Optional[HullConfig] = None,
) -> List[plt.Axes]:
    """Save a top-view / side-view figure of the hull and return its axes.

    Pass ``sections`` for the ring-lofted hull (planform from the section
    chords, side view from the target and lofted thickness) or ``planform``
    rows ``(x, half_width)`` for the flat-top body. ``leading_edge`` overlays
    cone/plane intersection points on the top view; ``section_curve`` adds a
    third panel with the normalized cross-section.
    """
    if sections is None and planform is None:
        raise ValueError("Need either sections or a planform to plot.")

    n_panels = 3 if section_curve is not None else 2
    fig, axes = plt.subplots(n_panels, 1, figsize=(10, 3.5 * n_panels))
    top_ax, side_ax = axes[0], axes[1]

    if sections is not None:
        xs = np.array([s.position for s in sections])
        half_widths = np.array([s.half_width for s in sections])
    else:
        xs, half_widths = planform[:, 0], planform[:, 1]

    draw_planform(top_ax, xs, half_widths)
    if leading_edge is not None and len(leading_edge) > 0:
        top_ax.plot(leading_edge[:, 0], leading_edge[:, 1], '.', color='darkorange', markersize=3,
                    label='Cone/plane intersection')
    top_ax.set_title('Planform (top view)')
    top_ax.set_xlabel('x [m]')
    top_ax.set_ylabel('span [m]')
    top_ax.set_aspect('equal', adjustable='datalim')
    top_ax.autoscale_view()

    if sections is not None:
        heights = np.array([s.height for s in sections])
        lofted = np.array([s.profile_thickness for s in sections])
        side_ax.plot(xs, heights, color=HULL_EDGE, linewidth=2, label='Target height')
        side_ax.plot(xs, lofted, color='dimgray', linestyle=':', linewidth=2, label='Lofted thickness')
        if hull is not None:
            draw_payload_bay(side_ax, hull, hull.payload_height)
        side_ax.legend(loc='upper right')
    else:
        side_ax.plot(xs, 2.0 * half_widths, color=HULL_EDGE, linewidth=2, label='Full span')
        side_ax.legend(loc='upper left')
    side_ax.set_title('Longitudinal distribution')
    side_ax.set_xlabel('x [m]')
    side_ax.set_ylabel('[m]')
    side_ax.grid(True, alpha=0.3)

    if section_curve is not None:
        curve_ax = axes[2]
        curve_ax.plot(section_curve[:, 0], section_curve[:, 1], color=HULL_EDGE, linewidth=1.5)
        curve_ax.fill(section_curve[:, 0], section_curve[:, 1], color=HULL_FILL, alpha=0.45)
        curve_ax.set_title('Cross-section profile')
        curve_ax.set_aspect('equal', adjustable='datalim')

    fig.tight_layout()
    fig.savefig(filename, dpi=120)
    plt.close(fig)
    return list(axes)
