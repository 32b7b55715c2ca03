"""Shared fixtures and mesh checks for the lifting body tests."""

import sys
from collections import Counter
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from lifting_body import LiftingBodyParams, generate_geometry


def directed_edge_counts(faces):
    """Count every directed edge (a, b) of a triangle list."""
    faces = np.asarray(faces).reshape(-1, 3)
    edges = np.concatenate([faces[:, [0, 1]], faces[:, [1, 2]], faces[:, [2, 0]]])
    return Counter(map(tuple, edges.tolist()))


@pytest.fixture
def ring_mesh():
    """Ring-lofted hull at 30/15 degree angles."""
    return generate_geometry(LiftingBodyParams(cone_angle=30.0, plane_angle=15.0), strategy="ring")


@pytest.fixture
def dual_mesh():
    """Flat-top hull at the default parameters."""
    return generate_geometry(LiftingBodyParams(), strategy="dual")
