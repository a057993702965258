# simulation.py
"""
Handles the per-frame motion and collision logic of the background.

This module defines the Simulation class, which advances the point system
by one frame and produces the draw commands for it. A frame runs the
motion integrator, the sweep-and-prune collision detector, the collision
resolver and finally the draw-command emitter, in that order.
"""
import logging
import math
import numpy as np
from enum import Enum
from typing import Dict, Any, List, Optional, Tuple
from numba import jit
from points import PointSystem
from collision import Connection, sweep_and_prune, resolve_collisions
from draw_commands import DrawCommand, emit_draw_commands

# --- Data Contracts ---
#
# class Simulation:
#   - __init__(self, params: Dict[str, Any], points: Optional[PointSystem] = None,
#              rng: Optional[np.random.Generator] = None):
#     - Inputs:
#       - params: Dictionary of simulation parameters from config.json.
#         - "physics_variant": "proximity" | "elastic"
#         - "damping_mode": "conditional" | "constant" (optional)
#         - "interaction_distance": float > 0
#         - "collision_radius": float > 0
#         - "point_density", "velocity_range", "position_scale",
#           "repulsion_radius", "repulsion_strength", "damping_factor",
#           "damping_threshold", "constant_damping", "gravity",
#           "fallback_delta_time", "max_delta_time": float
#         - "seed": int or null
#       - points: An existing PointSystem. A new, empty one if None.
#       - rng: Random source used for population. Built from "seed" if None.
#     - Raises: ValueError on invalid configuration.
#
#   - step(self, viewport, cursor=None, dt=None) -> List[DrawCommand]:
#     - Inputs:
#       - viewport: (width, height). A zero-sized viewport (minimised
#         window) neither populates nor moves points.
#       - cursor: (x, y) or None when the pointer is not over the viewport.
#       - dt: seconds since the previous frame, or None.
#     - Outputs: Draw commands for this frame, circles then lines.
#     - Side Effects: Populates the point system if it is empty. Mutates
#       positions and velocities. Rebuilds self.collisions and
#       self.connections.
#     - Invariants: Point count is constant between populations. After the
#       frame, 0 <= x < width and 0 <= y < height for every point.


class PhysicsVariant(Enum):
    """Which physics the engine runs."""
    # Points only draw connections to their neighbours.
    PROXIMITY = "proximity"
    # Adds gravity and equal-mass elastic collisions.
    ELASTIC = "elastic"


class DampingMode(Enum):
    """How velocities lose energy every frame."""
    # Damp a component only while its magnitude is above the threshold.
    CONDITIONAL = "conditional"
    # Damp both components by a factor just under 1 every frame.
    CONSTANT = "constant"


DEFAULT_DAMPING_MODES = {
    PhysicsVariant.PROXIMITY: DampingMode.CONDITIONAL,
    PhysicsVariant.ELASTIC: DampingMode.CONSTANT,
}


@jit(nopython=True)
def _wrap_coordinate(value, extent):
    """Euclidean modulus that never returns the extent itself."""
    wrapped = value % extent
    if wrapped < 0.0:
        wrapped += extent
    # A tiny negative value can round up to exactly the extent.
    if wrapped >= extent:
        wrapped = 0.0
    return wrapped


@jit(nopython=True)
def _advance_numba(
    positions, velocities, width, height, dt, position_scale, gravity,
    has_cursor, cursor_x, cursor_y, repulsion_radius, repulsion_strength,
    conditional_damping, damping_factor, damping_threshold
):
    """
    Numba-jitted integrator. Updates positions and velocities in place.
    """
    point_count = positions.shape[0]
    for i in range(point_count):
        # 1. Move
        positions[i, 0] += velocities[i, 0] * dt * position_scale
        positions[i, 1] += velocities[i, 1] * dt * position_scale

        # 2. Gravity pulls towards the bottom of the screen (y grows down)
        velocities[i, 1] += gravity * dt

        # 3. Cursor repulsion
        if has_cursor:
            dx = positions[i, 0] - cursor_x
            dy = positions[i, 1] - cursor_y
            distance = np.sqrt(dx * dx + dy * dy)
            if 0.0 < distance < repulsion_radius:
                velocities[i, 0] += dx / distance * repulsion_strength
                velocities[i, 1] += dy / distance * repulsion_strength

        # 4. Damping
        if conditional_damping:
            if abs(velocities[i, 0]) > damping_threshold:
                velocities[i, 0] *= damping_factor
            if abs(velocities[i, 1]) > damping_threshold:
                velocities[i, 1] *= damping_factor
        else:
            velocities[i, 0] *= damping_factor
            velocities[i, 1] *= damping_factor

        # 5. Wrap around screen edges
        positions[i, 0] = _wrap_coordinate(positions[i, 0], width)
        positions[i, 1] = _wrap_coordinate(positions[i, 1], height)


class Simulation:
    """
    Owns the point system and runs the per-frame pipeline over it.
    """
    def __init__(
        self,
        params: Dict[str, Any],
        points: Optional[PointSystem] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initializes the simulation engine.

        Args:
            params (Dict[str, Any]): Simulation parameters from config.
            points (Optional[PointSystem]): Pre-built points, mainly for tests.
            rng (Optional[np.random.Generator]): Random source for population.
        """
        self.points = points if points is not None else PointSystem()

        # A null seed draws fresh OS entropy, so every population differs.
        self.seed = params.get('seed')
        self.rng = rng if rng is not None else np.random.default_rng(self.seed)

        self.variant = self._parse_enum(
            PhysicsVariant, params.get('physics_variant', PhysicsVariant.PROXIMITY.value),
            'physics_variant'
        )
        default_mode = DEFAULT_DAMPING_MODES[self.variant]
        self.damping_mode = self._parse_enum(
            DampingMode, params.get('damping_mode', default_mode.value), 'damping_mode'
        )

        self.interaction_distance = self._require_positive(params, 'interaction_distance', 120.0)
        self.collision_radius = self._require_positive(params, 'collision_radius', 5.0)
        self.point_density = float(params.get('point_density', 1.0 / 6.0))
        self.velocity_range = float(params.get('velocity_range', 500.0))
        self.position_scale = float(params.get('position_scale', 10.0))
        self.repulsion_radius = float(params.get('repulsion_radius', 60.0))
        self.repulsion_strength = float(params.get('repulsion_strength', 0.5))
        self.damping_factor = float(params.get('damping_factor', 0.92))
        self.damping_threshold = float(params.get('damping_threshold', 12.0))
        self.constant_damping = float(params.get('constant_damping', 0.99))
        self.gravity = float(params.get('gravity', 9.8))
        self.fallback_delta_time = self._require_positive(params, 'fallback_delta_time', 1.0 / 60.0)
        self.max_delta_time = self._require_positive(params, 'max_delta_time', 0.1)

        if self.collision_radius >= self.interaction_distance:
            logging.warning(
                f"collision_radius ({self.collision_radius}) is not smaller than "
                f"interaction_distance ({self.interaction_distance}). Pairs further "
                f"apart than the interaction distance are never checked for collisions."
            )

        # Transient, rebuilt every frame.
        self.collisions = np.zeros((0, 2), dtype=np.int64)
        self.connections: List[Connection] = []

        logging.info("Simulation logic initialized and configuration validated.")
        logging.info(
            f"Physics variant '{self.variant.value}' with "
            f"'{self.damping_mode.value}' damping, "
            f"interaction distance {self.interaction_distance:.1f}."
        )

    @staticmethod
    def _parse_enum(enum_type, value, key):
        try:
            return enum_type(value)
        except ValueError:
            allowed = ", ".join(member.value for member in enum_type)
            msg = f"Configuration error: '{key}' must be one of {allowed}, got {value!r}."
            logging.critical(msg)
            raise ValueError(msg) from None

    @staticmethod
    def _require_positive(params: Dict[str, Any], key: str, default: float) -> float:
        value = float(params.get(key, default))
        if not value > 0.0:
            msg = f"Configuration error: '{key}' must be positive, got {value}."
            logging.critical(msg)
            raise ValueError(msg)
        return value

    @staticmethod
    def _viewport_is_drawable(viewport: Tuple[float, float]) -> bool:
        width, height = viewport
        return width > 0 and height > 0

    @property
    def elastic(self) -> bool:
        return self.variant is PhysicsVariant.ELASTIC

    def sanitize_delta_time(self, dt: Optional[float]) -> float:
        """
        Replaces missing, zero or non-finite frame times with the fallback
        and caps long frames at max_delta_time.
        """
        if dt is None or not math.isfinite(dt) or dt <= 0.0:
            return self.fallback_delta_time
        return min(float(dt), self.max_delta_time)

    def ensure_points(self, viewport: Tuple[float, float]) -> None:
        """
        Populates the point system if it is empty. An existing population is
        kept as is, even if the viewport has been resized since. A collapsed
        viewport populates nothing.
        """
        if self.points.has_points() or not self._viewport_is_drawable(viewport):
            return
        width, height = viewport
        self.points.populate(
            width, height, self.point_density, self.velocity_range, self.rng
        )

    def reset(self) -> None:
        """Discards all points; the next step repopulates."""
        self.points.clear()
        self.collisions = np.zeros((0, 2), dtype=np.int64)
        self.connections = []

    def advance(
        self,
        viewport: Tuple[float, float],
        cursor: Optional[Tuple[float, float]] = None,
        dt: Optional[float] = None,
    ) -> None:
        """
        Moves every point by one frame: integration, gravity (elastic variant
        only), cursor repulsion, damping and wrapping at the viewport edges.
        """
        # A minimised window reports a zero-sized viewport; points hold still.
        if not self._viewport_is_drawable(viewport):
            return
        width, height = viewport
        dt = self.sanitize_delta_time(dt)
        has_cursor = cursor is not None
        cursor_x, cursor_y = cursor if has_cursor else (0.0, 0.0)

        conditional = self.damping_mode is DampingMode.CONDITIONAL
        damping_factor = self.damping_factor if conditional else self.constant_damping
        gravity = self.gravity if self.elastic else 0.0

        _advance_numba(
            self.points.positions, self.points.velocities,
            float(width), float(height), dt, self.position_scale, gravity,
            has_cursor, float(cursor_x), float(cursor_y),
            self.repulsion_radius, self.repulsion_strength,
            conditional, damping_factor, self.damping_threshold
        )

    def detect_collisions(self) -> np.ndarray:
        """Rebuilds the candidate pair list with sweep and prune."""
        self.collisions = sweep_and_prune(self.points.positions, self.interaction_distance)
        return self.collisions

    def resolve_collisions(self) -> List[Connection]:
        """Turns the current candidate pairs into connections."""
        self.connections = resolve_collisions(
            self.points.positions, self.points.velocities, self.collisions,
            self.interaction_distance, self.collision_radius, self.elastic
        )
        return self.connections

    def draw_commands(self) -> List[DrawCommand]:
        return emit_draw_commands(self.points.positions, self.connections)

    def step(
        self,
        viewport: Tuple[float, float],
        cursor: Optional[Tuple[float, float]] = None,
        dt: Optional[float] = None,
    ) -> List[DrawCommand]:
        """
        Executes one frame of the simulation and returns what to draw.
        """
        self.ensure_points(viewport)
        self.advance(viewport, cursor, dt)
        self.detect_collisions()
        self.resolve_collisions()
        return self.draw_commands()
