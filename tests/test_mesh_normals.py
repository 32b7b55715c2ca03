"""Tests for area-weighted vertex normals."""

import numpy as np
import pytest

from mesh_normals import DEFAULT_NORMAL, compute_vertex_normals, face_normals, signed_volume

TRIANGLE = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])


class TestFaceNormals:

    def test_length_is_twice_area(self):
        normals = face_normals(TRIANGLE, [[0, 1, 2]])
        np.testing.assert_allclose(normals, [[0.0, 0.0, 1.0]])

    def test_flat_index_list(self):
        np.testing.assert_allclose(face_normals(TRIANGLE, [0, 1, 2]), face_normals(TRIANGLE, [[0, 1, 2]]))


class TestVertexNormals:
    """Tests for accumulation onto vertices."""

    def test_single_triangle(self):
        normals = compute_vertex_normals(TRIANGLE, [[0, 1, 2]])
        np.testing.assert_allclose(normals, np.tile([0.0, 0.0, 1.0], (3, 1)))

    def test_reversed_winding_negates(self):
        forward = compute_vertex_normals(TRIANGLE, [[0, 1, 2]])
        backward = compute_vertex_normals(TRIANGLE, [[0, 2, 1]])
        np.testing.assert_allclose(backward, -forward)

    def test_unreferenced_vertex_gets_default(self):
        vertices = np.vstack([TRIANGLE, [[5.0, 5.0, 5.0]]])
        normals = compute_vertex_normals(vertices, [[0, 1, 2]])
        assert normals[3] == pytest.approx(DEFAULT_NORMAL)

    def test_degenerate_triangle_gets_default(self):
        vertices = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [2.0, 0.0, 0.0]])
        normals = compute_vertex_normals(vertices, [[0, 1, 2]])
        np.testing.assert_allclose(normals, np.tile(DEFAULT_NORMAL, (3, 1)))
        assert not np.isnan(normals).any()

    def test_custom_default(self):
        normals = compute_vertex_normals(np.zeros((2, 3)), np.empty((0, 3), dtype=int), default=(0.0, 1.0, 0.0))
        np.testing.assert_allclose(normals, [[0.0, 1.0, 0.0], [0.0, 1.0, 0.0]])

    def test_area_weighting(self):
        """A shared vertex leans toward the larger of two faces."""
        vertices = np.array([
            [0.0, 0.0, 0.0],
            [1.0, 0.0, 0.0],
            [0.0, 1.0, 0.0],
            [0.0, 0.0, 3.0],
            [0.0, 3.0, 0.0],
        ])
        # Small face normal +z, large face normal +x (area 4.5 vs 0.5)
        faces = [[0, 1, 2], [0, 4, 3]]
        normals = compute_vertex_normals(vertices, faces)
        assert normals[0, 0] > normals[0, 2] > 0.0
        assert np.linalg.norm(normals[0]) == pytest.approx(1.0)

    def test_face_order_independent(self, ring_mesh):
        rng = np.random.default_rng(7)
        shuffled = ring_mesh.faces[rng.permutation(len(ring_mesh.faces))]
        normals = compute_vertex_normals(ring_mesh.vertices, shuffled)
        np.testing.assert_allclose(normals, ring_mesh.normals, atol=1e-12)

    def test_unit_length_on_hull(self, ring_mesh, dual_mesh):
        for mesh in (ring_mesh, dual_mesh):
            lengths = np.linalg.norm(mesh.normals, axis=1)
            np.testing.assert_allclose(lengths, 1.0)


TETRA = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])
TETRA_FACES = np.array([[0, 2, 1], [0, 1, 3], [0, 3, 2], [1, 2, 3]])


class TestSignedVolume:
    """Tests for the divergence-theorem volume."""

    def test_unit_tetrahedron(self):
        assert signed_volume(TETRA, TETRA_FACES) == pytest.approx(1.0 / 6.0)

    def test_inward_winding_negative(self):
        assert signed_volume(TETRA, TETRA_FACES[:, ::-1]) == pytest.approx(-1.0 / 6.0)

    def test_translation_invariant_when_closed(self):
        assert signed_volume(TETRA + [5.0, -3.0, 2.0], TETRA_FACES) == pytest.approx(1.0 / 6.0)

    def test_no_faces(self):
        assert signed_volume(TETRA, np.empty((0, 3), dtype=int)) == 0.0

    def test_hull_volume_positive(self, ring_mesh, dual_mesh):
        assert signed_volume(ring_mesh.vertices, ring_mesh.faces) > 0.0
        assert signed_volume(dual_mesh.vertices, dual_mesh.faces) > 0.0
