"""
Unit tests for the route segmentation planner.

These are pure-logic tests, no database, no network.
"""

import math
from unittest import mock

from django.test import SimpleTestCase, override_settings

from routeweather.services.helper import point_at_distance, total_length
from routeweather.services.segments import (
    SegmentationConfig,
    Waypoint,
    get_average_speed,
    plan_segments,
    plan_segments_with_diagnostics,
)

ONE_DEGREE_KM = 111.19492664455873
STRAIGHT_ROUTE = [(0.0, 0.0), (0.0, 1.0)]


def _route_of_length(km):
    """Straight equatorial route of ``km`` kilometers."""
    return [(0.0, 0.0), (0.0, km / ONE_DEGREE_KM)]


def _winding_route():
    return [
        (45.0 + 0.05 * i, 7.0 + 0.08 * i + (0.03 if i % 2 else -0.03))
        for i in range(60)
    ]


class PlanSegmentsScenarioTests(SimpleTestCase):

    # ------------------------------------------------------------------
    # A. Straight 1° route, 40 km per interval
    # ------------------------------------------------------------------
    def test_straight_route_samples(self):
        waypoints = plan_segments(STRAIGHT_ROUTE, 30, 80, 0)

        self.assertEqual(len(waypoints), 4)
        distances = [wp.distance_from_start for wp in waypoints]
        times = [wp.estimated_time for wp in waypoints]
        for got, expected in zip(distances, [0.0, 40.0, 80.0, ONE_DEGREE_KM]):
            self.assertAlmostEqual(got, expected, places=6)
        for got, expected in zip(times, [0.0, 30.0, 60.0, ONE_DEGREE_KM / 80 * 60]):
            self.assertAlmostEqual(got, expected, places=6)
        self.assertAlmostEqual(times[-1], 83.4, places=1)

        self.assertEqual([wp.sequence_index for wp in waypoints], [0, 1, 2, 3])
        self.assertEqual(waypoints[0].position, (0.0, 0.0))
        self.assertEqual(waypoints[-1].position, (0.0, 1.0))
        lat, lng = waypoints[1].position
        self.assertAlmostEqual(lat, 0.0, places=9)
        self.assertAlmostEqual(lng, 40.0 / ONE_DEGREE_KM, places=6)

    # ------------------------------------------------------------------
    # B. Route shorter than one interval
    # ------------------------------------------------------------------
    def test_short_route_returns_two_points(self):
        waypoints = plan_segments(_route_of_length(10.0), 30, 80, 0)

        self.assertEqual(len(waypoints), 2)
        start, end = waypoints
        self.assertEqual(start.distance_from_start, 0.0)
        self.assertEqual(start.estimated_time, 0.0)
        self.assertAlmostEqual(end.distance_from_start, 10.0, places=6)
        self.assertAlmostEqual(end.estimated_time, 7.5, places=6)
        self.assertEqual([wp.sequence_index for wp in waypoints], [0, 1])

    # ------------------------------------------------------------------
    # C. Degenerate polylines
    # ------------------------------------------------------------------
    def test_empty_and_single_point(self):
        self.assertEqual(plan_segments([], 30, 80, 0), [])
        self.assertEqual(plan_segments([(45.0, 7.0)], 30, 80, 0), [])

    # ------------------------------------------------------------------
    # D. Non-positive parameters fall back to defaults
    # ------------------------------------------------------------------
    def test_non_positive_interval_uses_default(self):
        expected = plan_segments(STRAIGHT_ROUTE, 30, 80, 0)
        self.assertEqual(plan_segments(STRAIGHT_ROUTE, 0, 80, 0), expected)
        self.assertEqual(plan_segments(STRAIGHT_ROUTE, -10, 80, 0), expected)
        self.assertEqual(plan_segments(STRAIGHT_ROUTE, math.nan, 80, 0), expected)

    def test_non_positive_speed_uses_default(self):
        expected = plan_segments(STRAIGHT_ROUTE, 30, 80, 0)
        self.assertEqual(plan_segments(STRAIGHT_ROUTE, 30, 0, 0), expected)
        self.assertEqual(plan_segments(STRAIGHT_ROUTE, 30, -80, 0), expected)

    def test_defaults_come_from_config(self):
        config = SegmentationConfig(default_interval_minutes=60, default_speed_kmh=40)
        waypoints = plan_segments(STRAIGHT_ROUTE, 0, 0, 0, config=config)
        self.assertEqual(
            [round(wp.distance_from_start, 6) for wp in waypoints],
            [0.0, 40.0, 80.0, round(ONE_DEGREE_KM, 6)],
        )

    # ------------------------------------------------------------------
    # E. One interior sample cannot be located
    # ------------------------------------------------------------------
    def test_failed_interior_sample_is_skipped(self):
        def locate(distance):
            if abs(distance - 40.0) < 1e-9:
                return None
            return point_at_distance(STRAIGHT_ROUTE, distance)

        result = plan_segments_with_diagnostics(
            STRAIGHT_ROUTE, 30, 80, 0, locate=locate
        )
        waypoints = result.waypoints

        self.assertEqual(len(waypoints), 3)
        self.assertEqual([wp.sequence_index for wp in waypoints], [0, 1, 2])
        self.assertEqual(waypoints[0].distance_from_start, 0.0)
        self.assertAlmostEqual(waypoints[1].distance_from_start, 80.0, places=6)
        self.assertAlmostEqual(waypoints[2].distance_from_start, ONE_DEGREE_KM, places=6)
        self.assertEqual(len(result.skipped_distances), 1)
        self.assertAlmostEqual(result.skipped_distances[0], 40.0, places=6)
        self.assertFalse(result.used_fallback)

    def test_non_finite_sample_is_skipped(self):
        def locate(distance):
            if distance > 50:
                return (math.nan, 0.5)
            return point_at_distance(STRAIGHT_ROUTE, distance)

        waypoints = plan_segments(STRAIGHT_ROUTE, 30, 80, 0, locate=locate)
        self.assertEqual([wp.sequence_index for wp in waypoints], [0, 1, 2])
        self.assertEqual(waypoints[-1].position, (0.0, 1.0))

    def test_raising_interior_sample_is_skipped(self):
        def locate(distance):
            if abs(distance - 40.0) < 1e-9:
                raise ValueError("boom")
            return point_at_distance(STRAIGHT_ROUTE, distance)

        result = plan_segments_with_diagnostics(
            STRAIGHT_ROUTE, 30, 80, 0, locate=locate
        )
        waypoints = result.waypoints

        self.assertFalse(result.used_fallback)
        self.assertEqual([wp.sequence_index for wp in waypoints], [0, 1, 2])
        distances = [wp.distance_from_start for wp in waypoints]
        for got, expected in zip(distances, [0.0, 80.0, ONE_DEGREE_KM]):
            self.assertAlmostEqual(got, expected, places=6)
        self.assertEqual(waypoints[0].position, (0.0, 0.0))
        self.assertEqual(waypoints[-1].position, (0.0, 1.0))
        self.assertEqual(len(result.skipped_distances), 1)
        self.assertAlmostEqual(result.skipped_distances[0], 40.0, places=6)

    def test_locator_errors_never_reach_the_caller(self):
        def locate(distance):
            raise RuntimeError("locator offline")

        result = plan_segments_with_diagnostics(
            STRAIGHT_ROUTE, 30, 80, 0, locate=locate
        )

        self.assertFalse(result.used_fallback)
        self.assertEqual(len(result.waypoints), 2)
        self.assertEqual(result.waypoints[0].position, (0.0, 0.0))
        self.assertEqual(result.waypoints[1].position, (0.0, 1.0))
        self.assertEqual([wp.sequence_index for wp in result.waypoints], [0, 1])
        self.assertAlmostEqual(
            result.waypoints[1].distance_from_start, ONE_DEGREE_KM, places=6
        )
        self.assertEqual(len(result.skipped_distances), 2)

    def test_unexpected_error_falls_back_to_endpoints(self):
        with mock.patch(
            "routeweather.services.segments.compute_cumulative_distances",
            side_effect=KeyError("lat"),
        ):
            result = plan_segments_with_diagnostics(STRAIGHT_ROUTE, 30, 80, 15)

        self.assertTrue(result.used_fallback)
        self.assertEqual(
            result.waypoints,
            [
                Waypoint((0.0, 0.0), 0.0, 15.0, 0),
                Waypoint((0.0, 1.0), 0.0, 15.0, 1),
            ],
        )

    def test_non_finite_geometry_falls_back_to_endpoints(self):
        polyline = [(0.0, 0.0), (math.nan, 1.0), (0.0, 2.0)]
        result = plan_segments_with_diagnostics(polyline, 30, 80, 0)

        self.assertTrue(result.used_fallback)
        self.assertEqual(len(result.waypoints), 2)
        self.assertEqual(result.waypoints[0].position, (0.0, 0.0))
        self.assertEqual(result.waypoints[1].position, (0.0, 2.0))
        self.assertEqual(result.waypoints[1].distance_from_start, 0.0)


class PlanSegmentsPropertyTests(SimpleTestCase):

    def test_endpoints_and_monotonicity(self):
        route = _winding_route()
        total = total_length(route)

        for interval, speed in ((30, 80), (15, 80), (60, 15), (10, 5)):
            waypoints = plan_segments(route, interval, speed, 0)
            self.assertGreaterEqual(len(waypoints), 2)
            self.assertEqual(waypoints[0].distance_from_start, 0.0)
            self.assertEqual(waypoints[0].position, route[0])
            self.assertAlmostEqual(waypoints[-1].distance_from_start, total, delta=1e-6)
            self.assertEqual(waypoints[-1].position, route[-1])

            distances = [wp.distance_from_start for wp in waypoints]
            times = [wp.estimated_time for wp in waypoints]
            self.assertEqual(distances, sorted(distances))
            self.assertEqual(times, sorted(times))
            self.assertTrue(all(d <= total for d in distances))
            self.assertEqual(
                [wp.sequence_index for wp in waypoints],
                list(range(len(waypoints))),
            )

    def test_spacing_matches_interval(self):
        waypoints = plan_segments(_winding_route(), 30, 80, 0)
        gaps = [
            b.distance_from_start - a.distance_from_start
            for a, b in zip(waypoints, waypoints[1:-1])
        ]
        for gap in gaps:
            self.assertAlmostEqual(gap, 40.0, places=6)
        # the final segment is never longer than a full interval
        self.assertLessEqual(
            waypoints[-1].distance_from_start - waypoints[-2].distance_from_start,
            40.0 + 1e-9,
        )

    def test_departure_offset_shifts_times(self):
        base = plan_segments(STRAIGHT_ROUTE, 30, 80, 0)
        shifted = plan_segments(STRAIGHT_ROUTE, 30, 80, 120)

        self.assertEqual(shifted[0].estimated_time, 120.0)
        for a, b in zip(base, shifted):
            self.assertAlmostEqual(b.estimated_time - a.estimated_time, 120.0, places=9)
            self.assertEqual(a.distance_from_start, b.distance_from_start)

    def test_negative_departure_counts_as_zero(self):
        waypoints = plan_segments(STRAIGHT_ROUTE, 30, 80, -45)
        self.assertEqual(waypoints[0].estimated_time, 0.0)

    def test_unusable_parameters_use_defaults(self):
        expected = plan_segments(STRAIGHT_ROUTE, 30, 80, 0)
        for offset in (None, math.nan, math.inf, "soon"):
            with self.subTest(offset=offset):
                self.assertEqual(plan_segments(STRAIGHT_ROUTE, 30, 80, offset), expected)
        self.assertEqual(plan_segments(STRAIGHT_ROUTE, None, "fast", 0), expected)

    def test_idempotent(self):
        route = _winding_route()
        self.assertEqual(
            plan_segments(route, 20, 60, 30),
            plan_segments(route, 20, 60, 30),
        )

    def test_does_not_modify_input(self):
        route = _winding_route()
        snapshot = list(route)
        plan_segments(route, 30, 80, 0)
        self.assertEqual(route, snapshot)


class AverageSpeedTests(SimpleTestCase):

    def test_known_modes(self):
        self.assertEqual(get_average_speed("driving-car"), 80.0)
        self.assertEqual(get_average_speed("cycling"), 15.0)
        self.assertEqual(get_average_speed("foot-walking"), 5.0)

    def test_unknown_mode_uses_default(self):
        self.assertEqual(get_average_speed("hovercraft"), 80.0)
        self.assertEqual(get_average_speed(None), 80.0)

    def test_custom_table(self):
        config = SegmentationConfig(default_speed_kmh=50, speed_by_mode={"boat": 20})
        self.assertEqual(get_average_speed("boat", config), 20.0)
        self.assertEqual(get_average_speed("driving", config), 50.0)

    @override_settings(ROUTE_WEATHER={
        "DEFAULT_INTERVAL_MINUTES": 45,
        "DEFAULT_SPEED_KMH": 70,
        "SPEED_BY_MODE": {"driving": 90},
    })
    def test_config_from_settings(self):
        config = SegmentationConfig.from_settings()
        self.assertEqual(config.default_interval_minutes, 45.0)
        self.assertEqual(config.default_speed_kmh, 70.0)
        self.assertEqual(get_average_speed("driving", config), 90.0)
        self.assertEqual(get_average_speed("walking", config), 70.0)
