"""
Tests for the cross-section stations of the ring-lofted hull.

Tests cover:
- HullConfig validation
- Leading-edge half-width growth and cap
- Three-region height taper and payload bay
- Thickness ratio clamping
- Payload clearance check
"""

import math

import numpy as np
import pytest

from cross_sections import (
    CrossSection,
    HullConfig,
    LEADING_EDGE_MODES,
    build_cross_sections,
    intersection_half_widths,
    payload_clearance,
    section_half_width,
    section_height,
    section_thickness_ratio,
)


@pytest.fixture
def config():
    return HullConfig()


@pytest.fixture
def sections(config):
    return build_cross_sections(math.radians(30.0), math.radians(15.0), config)


# =============================================================================
# CONFIG TESTS
# =============================================================================

class TestHullConfig:
    """Tests for hull dimension validation."""

    def test_defaults(self, config):
        assert config.length == 100.0
        assert config.num_sections == 60
        assert config.max_half_width == 150.0

    def test_zero_sections_raises(self):
        with pytest.raises(ValueError):
            HullConfig(num_sections=0)

    def test_inverted_bay_raises(self):
        with pytest.raises(ValueError):
            HullConfig(payload_start=60.0, payload_end=50.0)

    def test_bay_past_tail_raises(self):
        with pytest.raises(ValueError):
            HullConfig(payload_end=100.0)

    def test_negative_length_raises(self):
        with pytest.raises(ValueError):
            HullConfig(length=-1.0)


# =============================================================================
# STATION TESTS
# =============================================================================

class TestStations:
    """Tests for the sampled station sequence."""

    def test_station_count(self, sections, config):
        assert len(sections) == config.num_sections + 1

    def test_positions_strictly_increase(self, sections):
        positions = np.array([s.position for s in sections])
        assert positions[0] == 0.0
        assert positions[-1] == pytest.approx(100.0)
        assert np.all(np.diff(positions) > 0)

    def test_chord_is_twice_half_width(self, sections):
        for section in sections:
            assert section.chord == pytest.approx(2.0 * section.half_width)

    def test_plane_angle_does_not_change_stations(self, config):
        a = build_cross_sections(math.radians(30.0), 0.0, config)
        b = build_cross_sections(math.radians(30.0), math.radians(60.0), config)
        assert a == b


# =============================================================================
# HALF-WIDTH TESTS
# =============================================================================

class TestHalfWidth:
    """Tests for the cone-derived leading edge."""

    def test_linear_in_x(self, config):
        cone = math.radians(30.0)
        assert section_half_width(20.0, cone, config) == pytest.approx(20.0 * math.tan(cone))

    def test_capped_at_max(self, config):
        assert section_half_width(100.0, math.radians(80.0), config) == 150.0

    def test_monotone_then_capped(self, config):
        sections = build_cross_sections(math.radians(60.0), 0.0, config)
        widths = np.array([s.half_width for s in sections])
        assert np.all(np.diff(widths) >= 0.0)
        assert widths[-1] == pytest.approx(150.0)
        capped = np.flatnonzero(widths >= 150.0)
        np.testing.assert_allclose(widths[capped[0]:], 150.0)


# =============================================================================
# HEIGHT TESTS
# =============================================================================

class TestHeight:
    """Tests for the three-region height taper."""

    def test_payload_bay_exact(self, sections, config):
        bay = [s for s in sections if config.payload_start <= s.position <= config.payload_end]
        assert bay
        for section in bay:
            assert section.height == config.payload_height

    def test_bay_bounds_inclusive(self, config):
        assert section_height(30.0, 1.0, config) == 8.0
        assert section_height(50.0, 1.0, config) == 8.0

    def test_apex_height(self, sections, config):
        assert sections[0].height == config.nose_height

    def test_nose_ramp(self, config):
        expected = (0.3 + 7.7 * (20.0 / 30.0) ** 1.2) * (5.0 / 50.0)
        assert section_height(20.0, 5.0, config) == pytest.approx(expected)

    def test_tail_run_out(self, config):
        assert section_height(100.0, 100.0, config) == pytest.approx(config.tail_height)

    def test_width_factor_saturates(self, config):
        assert section_height(75.0, 50.0, config) == section_height(75.0, 140.0, config)

    def test_height_floor(self, sections, config):
        assert all(s.height >= config.min_height for s in sections)


# =============================================================================
# THICKNESS RATIO TESTS
# =============================================================================

class TestThicknessRatio:
    """Tests for the clamped thickness ratio."""

    def test_clamped(self, config):
        assert section_thickness_ratio(8.0, 2.0, config) == 0.15

    def test_narrow_station_divisor_floor(self, config):
        """Chords under one metre divide by one instead."""
        assert section_thickness_ratio(0.1, 0.2, config) == pytest.approx(0.1)

    def test_unclamped(self, config):
        assert section_thickness_ratio(1.0, 10.0, config) == pytest.approx(0.05)

    def test_all_stations_in_range(self, sections):
        for section in sections:
            assert 0.0 < section.thickness_ratio <= 0.15


# =============================================================================
# PAYLOAD CLEARANCE TESTS
# =============================================================================

class TestPayloadClearance:
    """Tests for the cargo box fit check."""

    def test_narrow_cone_blocks(self, sections, config):
        blocked = payload_clearance(sections, config)
        assert blocked
        assert all(config.payload_start <= s.position <= config.payload_end for s in blocked)

    def test_wide_cone_fits(self, config):
        sections = build_cross_sections(math.radians(60.0), 0.0, config)
        assert payload_clearance(sections, config) == []

    def test_stations_outside_bay_ignored(self, config):
        thin = CrossSection(position=80.0, chord=1.0, height=0.3, thickness_ratio=0.15)
        assert payload_clearance([thin], config) == []

    def test_profile_thickness(self):
        section = CrossSection(position=40.0, chord=20.0, height=8.0, thickness_ratio=0.15)
        assert section.profile_thickness == pytest.approx(3.0)
        assert payload_clearance([section]) == [section]


# =============================================================================
# PAYLOAD FLOOR AND LEADING EDGE MODE TESTS
# =============================================================================

class TestPayloadFloor:
    """Tests for the opt-in minimum half-width inside the bay."""

    def test_off_by_default(self, config):
        assert config.payload_min_half_width == 0.0
        assert section_half_width(30.0, math.radians(5.0), config) == pytest.approx(30.0 * math.tan(math.radians(5.0)))

    def test_floor_applies_inside_bay_only(self):
        config = HullConfig(payload_min_half_width=8.0)
        cone = math.radians(5.0)
        assert section_half_width(30.0, cone, config) == 8.0
        assert section_half_width(50.0, cone, config) == 8.0
        assert section_half_width(29.0, cone, config) == pytest.approx(29.0 * math.tan(cone))

    def test_floor_still_capped(self):
        config = HullConfig(payload_min_half_width=500.0)
        assert section_half_width(40.0, math.radians(5.0), config) == config.max_half_width

    def test_floor_widens_bay_stations(self):
        config = HullConfig(payload_min_half_width=8.0)
        sections = build_cross_sections(math.radians(5.0), 0.0, config)
        bay = [s for s in sections if config.payload_start <= s.position <= config.payload_end]
        assert all(s.half_width >= 8.0 for s in bay)

    def test_negative_floor_raises(self):
        with pytest.raises(ValueError):
            HullConfig(payload_min_half_width=-1.0)


class TestLeadingEdgeModes:
    """Tests for half-widths taken from the cone/plane intersection."""

    def test_modes(self):
        assert LEADING_EDGE_MODES == ("cone", "intersection")
        assert HullConfig().leading_edge == "cone"

    def test_unknown_mode_raises(self):
        with pytest.raises(ValueError):
            HullConfig(leading_edge="spline")

    def test_perpendicular_plane_marks_one_station(self, config):
        """A plane normal to the cone axis cuts a circle at mid-length."""
        cone = math.radians(30.0)
        positions = [config.length * i / config.num_sections for i in range(config.num_sections + 1)]
        widths = intersection_half_widths(positions, cone, 0.0, config)
        assert widths[30] == pytest.approx(50.0 * math.tan(cone))
        assert np.count_nonzero(widths) == 1

    def test_plane_angle_changes_stations(self):
        config = HullConfig(leading_edge="intersection")
        cone = math.radians(30.0)
        a = build_cross_sections(cone, math.radians(15.0), config)
        b = build_cross_sections(cone, math.radians(45.0), config)
        assert [s.half_width for s in a] != [s.half_width for s in b]

    def test_swept_plane_spans_a_range(self):
        config = HullConfig(leading_edge="intersection")
        sections = build_cross_sections(math.radians(30.0), math.radians(45.0), config)
        widths = np.array([s.half_width for s in sections])
        covered = np.array([s.position for s in sections])[widths > 0.0]
        assert len(covered) > 10
        assert covered.min() > 0.0
        assert np.all(widths <= config.max_half_width)

    def test_station_positions_unchanged(self, config):
        cone_mode = build_cross_sections(math.radians(30.0), math.radians(15.0), config)
        plane_mode = build_cross_sections(math.radians(30.0), math.radians(15.0), HullConfig(leading_edge="intersection"))
        assert [s.position for s in cone_mode] == [s.position for s in plane_mode]
