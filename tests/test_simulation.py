"""Tests for the motion integrator and the per-frame pipeline."""

import math

import numpy as np
import pytest

from collision import Connection
from draw_commands import Circle, Line
from points import Point, PointSystem
from simulation import DampingMode, PhysicsVariant, Simulation


VIEWPORT = (800, 600)


def make_sim(params, *points):
    return Simulation(params, points=PointSystem.from_points(points))


class TestConfiguration:
    """Validation of simulation parameters at construction."""

    def test_defaults_for_proximity_variant(self, sim_params):
        sim = Simulation(sim_params)
        assert sim.variant is PhysicsVariant.PROXIMITY
        assert sim.damping_mode is DampingMode.CONDITIONAL
        assert not sim.elastic

    def test_defaults_for_elastic_variant(self, elastic_params):
        sim = Simulation(elastic_params)
        assert sim.variant is PhysicsVariant.ELASTIC
        assert sim.damping_mode is DampingMode.CONSTANT
        assert sim.elastic

    def test_damping_mode_override(self, elastic_params):
        sim = Simulation(dict(elastic_params, damping_mode="conditional"))
        assert sim.damping_mode is DampingMode.CONDITIONAL

    @pytest.mark.parametrize("key", ["interaction_distance", "collision_radius"])
    @pytest.mark.parametrize("value", [0.0, -5.0])
    def test_non_positive_distances_are_rejected(self, sim_params, key, value):
        with pytest.raises(ValueError, match=key):
            Simulation(dict(sim_params, **{key: value}))

    def test_unknown_variant_is_rejected(self, sim_params):
        with pytest.raises(ValueError, match="physics_variant"):
            Simulation(dict(sim_params, physics_variant="rigid"))

    def test_unknown_damping_mode_is_rejected(self, sim_params):
        with pytest.raises(ValueError, match="damping_mode"):
            Simulation(dict(sim_params, damping_mode="viscous"))

    def test_shipped_config_builds(self, project_root_path):
        from utils import load_config
        config = load_config(str(project_root_path / "config.json"))
        sim = Simulation(config["simulation_parameters"])
        assert sim.interaction_distance == 120.0


class TestDeltaTime:

    @pytest.mark.parametrize("dt", [None, 0.0, -0.5, math.nan, math.inf])
    def test_unusable_frame_time_falls_back(self, sim_params, dt):
        sim = Simulation(sim_params)
        assert sim.sanitize_delta_time(dt) == pytest.approx(1.0 / 60.0)

    def test_long_frame_is_capped(self, sim_params):
        sim = Simulation(sim_params)
        assert sim.sanitize_delta_time(5.0) == 0.1

    def test_regular_frame_passes_through(self, sim_params):
        sim = Simulation(sim_params)
        assert sim.sanitize_delta_time(0.02) == 0.02


class TestAdvance:
    """One integration step over hand-placed points."""

    def test_position_update_uses_scale(self, sim_params):
        sim = make_sim(sim_params, Point(100.0, 100.0, 2.0, -3.0))
        sim.advance(VIEWPORT, None, 0.1)
        x, y, xv, yv = sim.points.point(0)
        assert (x, y) == pytest.approx((102.0, 97.0))
        assert (xv, yv) == (2.0, -3.0)

    def test_point_reaching_right_edge_wraps_to_zero(self, sim_params):
        sim = make_sim(sim_params, Point(799.0, 10.0, 1.0, 0.0))
        sim.advance(VIEWPORT, None, 0.1)
        assert sim.points.point(0).x == 0.0
        assert sim.points.point(0).xv == 1.0

    def test_point_leaving_left_edge_reappears_on_the_right(self, sim_params):
        sim = make_sim(sim_params, Point(5.0, 5.0, -10.0, -10.0))
        sim.advance(VIEWPORT, None, 0.1)
        x, y, xv, yv = sim.points.point(0)
        assert (x, y) == pytest.approx((795.0, 595.0))
        assert (xv, yv) == (-10.0, -10.0)

    def test_positions_stay_inside_viewport(self, sim_params, rng):
        sim = Simulation(sim_params, rng=rng)
        for _ in range(50):
            sim.step(VIEWPORT, (400, 300), 0.05)
        xs, ys = sim.points.positions[:, 0], sim.points.positions[:, 1]
        assert np.all((xs >= 0) & (xs < 800))
        assert np.all((ys >= 0) & (ys < 600))

    def test_cursor_repels_nearby_point(self, sim_params):
        sim = make_sim(sim_params, Point(130.0, 100.0))
        sim.advance(VIEWPORT, (100.0, 100.0), 0.1)
        assert sim.points.point(0).xv == pytest.approx(0.5)
        assert sim.points.point(0).yv == pytest.approx(0.0)

    def test_cursor_out_of_range_has_no_effect(self, sim_params):
        sim = make_sim(sim_params, Point(200.0, 100.0))
        sim.advance(VIEWPORT, (100.0, 100.0), 0.1)
        assert sim.points.point(0)[2:] == (0.0, 0.0)

    def test_absent_cursor_has_no_effect(self, sim_params):
        sim = make_sim(sim_params, Point(1.0, 1.0))
        sim.advance(VIEWPORT, None, 0.1)
        assert sim.points.point(0)[2:] == (0.0, 0.0)

    def test_point_on_cursor_is_not_pushed(self, sim_params):
        sim = make_sim(sim_params, Point(100.0, 100.0))
        sim.advance(VIEWPORT, (100.0, 100.0), 0.1)
        assert sim.points.point(0)[2:] == (0.0, 0.0)

    def test_conditional_damping_only_above_threshold(self, sim_params):
        sim = make_sim(sim_params, Point(100.0, 100.0, 20.0, 5.0))
        sim.advance(VIEWPORT, None, 0.01)
        _, _, xv, yv = sim.points.point(0)
        assert xv == pytest.approx(20.0 * 0.92)
        assert yv == 5.0

    def test_constant_damping_every_frame(self, sim_params):
        sim = make_sim(dict(sim_params, damping_mode="constant"), Point(100.0, 100.0, 20.0, 5.0))
        sim.advance(VIEWPORT, None, 0.01)
        _, _, xv, yv = sim.points.point(0)
        assert xv == pytest.approx(20.0 * 0.99)
        assert yv == pytest.approx(5.0 * 0.99)

    def test_gravity_only_in_elastic_variant(self, sim_params, elastic_params):
        proximity = make_sim(sim_params, Point(100.0, 100.0))
        proximity.advance(VIEWPORT, None, 0.1)
        assert proximity.points.point(0).yv == 0.0

        elastic = make_sim(elastic_params, Point(100.0, 100.0))
        elastic.advance(VIEWPORT, None, 0.1)
        assert elastic.points.point(0).yv == pytest.approx(9.8 * 0.1 * 0.99)


class TestPopulationLifecycle:

    def test_first_step_populates(self, sim_params, rng):
        sim = Simulation(sim_params, rng=rng)
        assert not sim.points.has_points()
        commands = sim.step(VIEWPORT)
        assert sim.points.point_count == 80
        assert sum(isinstance(c, Circle) for c in commands) == 80

    def test_resize_keeps_points_and_wraps_them(self, sim_params, rng):
        sim = Simulation(sim_params, rng=rng)
        sim.step(VIEWPORT)
        sim.step((400, 300))
        assert sim.points.point_count == 80
        assert np.all(sim.points.positions[:, 0] < 400)
        assert np.all(sim.points.positions[:, 1] < 300)

    def test_reset_repopulates_on_next_step(self, sim_params, rng):
        sim = Simulation(sim_params, rng=rng)
        sim.step(VIEWPORT)
        sim.reset()
        assert not sim.points.has_points()
        assert len(sim.collisions) == 0 and sim.connections == []
        sim.step((1000, 600))
        assert sim.points.point_count == 100

    def test_seeded_runs_are_reproducible(self, sim_params):
        first = Simulation(sim_params)
        second = Simulation(sim_params)
        assert first.step(VIEWPORT, None, 0.02) == second.step(VIEWPORT, None, 0.02)


class TestFramePipeline:

    def test_two_close_points_end_to_end(self, sim_params):
        half = sim_params["interaction_distance"] / 2
        sim = make_sim(sim_params, Point(100.0, 100.0), Point(100.0, 100.0 + half))

        commands = sim.step(VIEWPORT, None, 1.0 / 60.0)

        assert sim.points.as_points() == [Point(100.0, 100.0), Point(100.0, 160.0)]
        assert sim.collisions.tolist() == [[0, 1]]
        assert sim.connections == [Connection(0, 1, 0.5)]

        circles = [c for c in commands if isinstance(c, Circle)]
        lines = [c for c in commands if isinstance(c, Line)]
        assert len(circles) == 2 and len(lines) == 1
        assert lines[0].points == ((100.0, 100.0), (100.0, 160.0))
        assert lines[0].color[3] == int(0.5 * 127.5)

    def test_head_on_collision_through_step(self, elastic_params):
        params = dict(elastic_params, gravity=0.0, damping_mode="conditional")
        sim = make_sim(params, Point(100.0, 100.0, 5.0, 0.0), Point(103.0, 100.0, -5.0, 0.0))
        # A tiny frame time keeps the pair within the collision radius.
        sim.step(VIEWPORT, None, 1e-4)
        assert sim.points.point(0).xv == pytest.approx(-5.0)
        assert sim.points.point(1).xv == pytest.approx(5.0)
        assert sim.points.point(0).yv == pytest.approx(0.0)

    def test_colliding_pair_moves_apart_and_stays_apart(self, elastic_params):
        params = dict(elastic_params, gravity=0.0, damping_mode="conditional")
        sim = make_sim(params, Point(100.0, 100.0, 5.0, 0.0), Point(103.0, 100.0, -5.0, 0.0))
        gaps = []
        for _ in range(60):
            sim.step(VIEWPORT, None, 1.0 / 60.0)
            gaps.append(sim.points.point(1).x - sim.points.point(0).x)
        # The gap only ever grows once the bounce has happened.
        assert gaps == sorted(gaps)
        assert gaps[-1] > params["collision_radius"]
        assert sim.points.point(0).xv == pytest.approx(-5.0)
        assert sim.points.point(1).xv == pytest.approx(5.0)

    def test_collisions_are_rebuilt_every_frame(self, sim_params):
        sim = make_sim(sim_params, Point(100.0, 100.0, 100.0, 0.0), Point(150.0, 100.0))
        sim.step(VIEWPORT, None, 0.01)
        assert len(sim.collisions) == 1
        # Point 0 starts at 92 units per frame and leaves the window of
        # point 1 within two frames; damping never brings it back.
        for _ in range(5):
            sim.step(VIEWPORT, None, 0.1)
        assert sim.collisions.shape == (0, 2)
        assert sim.connections == []


class TestCollapsedViewport:
    """A minimised window reports a zero-sized viewport."""

    @pytest.mark.parametrize("viewport", [(0, 0), (800, 0), (0, 600)])
    def test_points_hold_still(self, sim_params, viewport):
        sim = make_sim(sim_params, Point(100.0, 100.0, 3.0, 4.0))
        commands = sim.step(viewport, (100.0, 90.0), 0.02)
        assert sim.points.as_points() == [Point(100.0, 100.0, 3.0, 4.0)]
        assert commands == [Circle((100.0, 100.0), 3.0, (200, 200, 200, 255))]

    def test_empty_system_waits_for_a_real_viewport(self, sim_params, rng):
        sim = Simulation(sim_params, rng=rng)
        assert sim.step((0, 0)) == []
        assert not sim.points.has_points()
        sim.step(VIEWPORT)
        assert sim.points.point_count == 80
