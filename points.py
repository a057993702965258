# points.py
"""
Manages the state of all points in the background simulation.

This module defines the PointSystem class, which is responsible for
populating and storing point data (position and velocity) in NumPy
arrays, and the Point value type used to seed and inspect single points.
"""
import logging
import numpy as np
from typing import Iterable, List, NamedTuple

# --- Data Contracts ---
#
# class PointSystem:
#   - populate(self, width, height, density, velocity_range, rng) -> None:
#     - Inputs:
#       - width, height: float, viewport size in screen units.
#       - density: float, points per unit of viewport width.
#       - velocity_range: float, half-width of the symmetric velocity range.
#       - rng: numpy.random.Generator, the source of all randomness.
#     - Side Effects: Replaces the internal arrays with a fresh population.
#     - Invariants:
#       - self.positions is a NumPy array of shape (N, 2) of dtype float64.
#       - self.velocities is a NumPy array of shape (N, 2) of dtype float64.
#       - 0 <= x < width and 0 <= y < height for every freshly placed point.


class Point(NamedTuple):
    """A single point: position (x, y) and velocity (xv, yv)."""
    x: float
    y: float
    xv: float = 0.0
    yv: float = 0.0


class PointSystem:
    """
    A container for all points, managing their state via NumPy arrays.

    The system starts empty and is populated lazily by the simulation the
    first time a frame is requested.
    """
    def __init__(self):
        self.positions = np.zeros((0, 2), dtype=np.float64)
        self.velocities = np.zeros((0, 2), dtype=np.float64)

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> "PointSystem":
        """Builds a system holding exactly the given points, in order."""
        system = cls()
        rows = [tuple(point) for point in points]
        if rows:
            data = np.array(rows, dtype=np.float64)
            system.positions = np.ascontiguousarray(data[:, 0:2])
            system.velocities = np.ascontiguousarray(data[:, 2:4])
        return system

    @property
    def point_count(self) -> int:
        return self.positions.shape[0]

    def has_points(self) -> bool:
        return self.point_count > 0

    def point(self, index: int) -> Point:
        x, y = self.positions[index]
        xv, yv = self.velocities[index]
        return Point(float(x), float(y), float(xv), float(yv))

    def as_points(self) -> List[Point]:
        return [self.point(i) for i in range(self.point_count)]

    def clear(self) -> None:
        """Drops every point. The next populate call starts from scratch."""
        self.positions = np.zeros((0, 2), dtype=np.float64)
        self.velocities = np.zeros((0, 2), dtype=np.float64)
        logging.info("Point system cleared.")

    def populate(
        self,
        width: float,
        height: float,
        density: float,
        velocity_range: float,
        rng: np.random.Generator,
    ) -> None:
        """
        Fills the system with randomly placed, randomly moving points.

        The point count depends on the viewport width only, so very tall or
        very flat viewports end up sparser or denser vertically.

        Args:
            width (float): The width of the viewport.
            height (float): The height of the viewport.
            density (float): Points per unit of viewport width.
            velocity_range (float): Each velocity component is drawn from
                [-velocity_range, velocity_range].
            rng (np.random.Generator): Injected random source.
        """
        point_count = max(int(width * density), 0)

        self.positions = rng.uniform(
            low=[0.0, 0.0],
            high=[width, height],
            size=(point_count, 2)
        )
        self.velocities = rng.uniform(
            low=-velocity_range,
            high=velocity_range,
            size=(point_count, 2)
        )

        logging.info(
            f"PointSystem populated with {point_count} points "
            f"for a {width:.0f}x{height:.0f} viewport."
        )
        logging.debug(
            f"Point data arrays created. "
            f"Positions shape: {self.positions.shape}, "
            f"Velocities shape: {self.velocities.shape}"
        )
