# collision.py
"""
Collision detection and response for the point field.

Detection is a sweep-and-prune broad phase along the x axis only: points
are sorted by x and a window of "active" points is kept while sweeping, so
only points whose x coordinates lie within the interaction distance are
paired. The resolver then measures true 2-D distances, turns close pairs
into connections for drawing and, when enabled, applies an equal-mass
elastic response to pairs that actually overlap.

Both passes are rebuilt from scratch every frame.
"""
import numpy as np
from typing import List, NamedTuple
from numba import jit

# --- Data Contracts ---
#
# sweep_and_prune(positions: np.ndarray, interaction_distance: float) -> np.ndarray:
#   - Inputs:
#     - positions: (N, 2) float array of point positions.
#     - interaction_distance: float > 0.
#   - Outputs: (K, 2) int64 array of (j, i) index pairs, j != i, where
#     |x_j - x_i| <= interaction_distance. Each unordered pair appears once.
#
# resolve_collisions(positions, velocities, pairs, interaction_distance,
#                    collision_radius, elastic) -> List[Connection]:
#   - Outputs: one Connection per pair closer than interaction_distance.
#   - Side Effects: when elastic is True, swaps the normal velocity
#     components of every approaching pair closer than collision_radius.
#   - Invariants: velocities never become NaN; a pair (i, i) raises
#     AssertionError.


class Connection(NamedTuple):
    """A visible link between two nearby points."""
    first: int
    second: int
    opacity: float


@jit(nopython=True)
def connection_opacity(distance, interaction_distance):
    """
    Linear falloff from 1.0 at zero distance to 0.0 at the interaction
    distance and beyond.
    """
    return max((interaction_distance - distance) / interaction_distance, 0.0)


@jit(nopython=True)
def _sweep_and_prune_numba(xs, interaction_distance):
    """
    Numba-jitted sweep over x-sorted indices.

    The active window is a flat index buffer compacted in place on every
    prune. The pair buffer doubles when full.
    """
    point_count = xs.shape[0]
    order = np.argsort(xs, kind='mergesort')

    active = np.empty(point_count, dtype=np.int64)
    active_count = 0

    pairs = np.empty((max(point_count, 16), 2), dtype=np.int64)
    pair_count = 0

    for k in range(point_count):
        i = order[k]
        x_i = xs[i]

        # Prune points that fell behind the sweep line
        kept = 0
        for a in range(active_count):
            j = active[a]
            if not (x_i - xs[j] > interaction_distance):
                active[kept] = j
                kept += 1
        active_count = kept

        for a in range(active_count):
            j = active[a]
            if abs(xs[j] - x_i) <= interaction_distance:
                if pair_count == pairs.shape[0]:
                    grown = np.empty((pairs.shape[0] * 2, 2), dtype=np.int64)
                    grown[:pair_count] = pairs[:pair_count]
                    pairs = grown
                pairs[pair_count, 0] = j
                pairs[pair_count, 1] = i
                pair_count += 1

        active[active_count] = i
        active_count += 1

    return pairs[:pair_count].copy()


@jit(nopython=True)
def _resolve_collisions_numba(
    positions, velocities, pairs, interaction_distance, collision_radius, elastic
):
    """
    Numba-jitted narrow phase.

    Returns a boolean mask of pairs that form a connection and the opacity
    of each pair. Velocities of overlapping pairs are updated in place.
    """
    pair_count = pairs.shape[0]
    connected = np.zeros(pair_count, dtype=np.bool_)
    opacities = np.zeros(pair_count, dtype=np.float64)

    for k in range(pair_count):
        a = pairs[k, 0]
        b = pairs[k, 1]
        assert a != b, "collision pair references the same point twice"

        dx = positions[b, 0] - positions[a, 0]
        dy = positions[b, 1] - positions[a, 1]
        distance = np.sqrt(dx * dx + dy * dy)

        if distance < interaction_distance:
            connected[k] = True
            opacities[k] = connection_opacity(distance, interaction_distance)

        # Coincident points have no contact normal; leave them untouched.
        if elastic and 0.0 < distance < collision_radius:
            nx = dx / distance
            ny = dy / distance
            tx = -ny
            ty = nx

            # Copy both rows out before writing either back.
            v1x = velocities[a, 0]
            v1y = velocities[a, 1]
            v2x = velocities[b, 0]
            v2y = velocities[b, 1]

            # Pairs already moving apart keep their velocities, otherwise
            # the swap would pull them back together on the next frame.
            if (v2x - v1x) * nx + (v2y - v1y) * ny >= 0.0:
                continue

            v1n = v1x * nx + v1y * ny
            v1t = v1x * tx + v1y * ty
            v2n = v2x * nx + v2y * ny
            v2t = v2x * tx + v2y * ty

            # Equal masses: normal components swap, tangential ones stay.
            velocities[a, 0] = v2n * nx + v1t * tx
            velocities[a, 1] = v2n * ny + v1t * ty
            velocities[b, 0] = v1n * nx + v2t * tx
            velocities[b, 1] = v1n * ny + v2t * ty

    return connected, opacities


def sweep_and_prune(positions: np.ndarray, interaction_distance: float) -> np.ndarray:
    """
    Finds every pair of points whose x coordinates are within
    interaction_distance of each other.

    This is a broad phase only: the y coordinate is ignored, so callers must
    measure the real distance before acting on a pair.
    """
    xs = np.ascontiguousarray(positions[:, 0], dtype=np.float64)
    return _sweep_and_prune_numba(xs, float(interaction_distance))


def brute_force_pairs(positions: np.ndarray, interaction_distance: float) -> set:
    """
    All-pairs reference for sweep_and_prune, as a set of frozensets.

    O(n^2); meant for tests and debugging, never for a frame loop.
    """
    xs = positions[:, 0]
    found = set()
    for i in range(len(xs)):
        for j in range(i + 1, len(xs)):
            if abs(xs[j] - xs[i]) <= interaction_distance:
                found.add(frozenset((i, j)))
    return found


def resolve_collisions(
    positions: np.ndarray,
    velocities: np.ndarray,
    pairs: np.ndarray,
    interaction_distance: float,
    collision_radius: float,
    elastic: bool,
) -> List[Connection]:
    """
    Turns candidate pairs into drawable connections and, if elastic is set,
    bounces apart the pairs that overlap.

    Args:
        positions (np.ndarray): (N, 2) point positions, read only.
        velocities (np.ndarray): (N, 2) point velocities, updated in place.
        pairs (np.ndarray): (K, 2) candidate index pairs from sweep_and_prune.
        interaction_distance (float): Maximum distance for a connection.
        collision_radius (float): Maximum distance for an elastic collision.
        elastic (bool): Whether overlapping pairs exchange momentum.

    Returns:
        List[Connection]: Connections in pair order.
    """
    pairs = np.asarray(pairs, dtype=np.int64).reshape(-1, 2)
    connected, opacities = _resolve_collisions_numba(
        positions, velocities, pairs,
        float(interaction_distance), float(collision_radius), bool(elastic)
    )

    connections = [
        Connection(int(pairs[k, 0]), int(pairs[k, 1]), float(opacities[k]))
        for k in np.flatnonzero(connected)
    ]
    return connections
