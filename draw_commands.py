# draw_commands.py
"""
Renderer-agnostic draw commands for the point field.

The simulation never paints anything itself. Each frame it hands the host
an ordered list of primitives: one filled circle per point, followed by one
line per connection, so that lines are painted over the points.
"""
import numpy as np
from typing import List, NamedTuple, Sequence, Tuple, Union
from collision import Connection
from constants import POINT_RADIUS, POINT_COLOR, LINE_WIDTH, LINE_RGB, LINE_MAX_ALPHA

Color = Tuple[int, int, int, int]
Vec2 = Tuple[float, float]


class Circle(NamedTuple):
    center: Vec2
    radius: float
    color: Color


class Line(NamedTuple):
    points: Tuple[Vec2, Vec2]
    width: float
    color: Color


DrawCommand = Union[Circle, Line]


def line_alpha(opacity: float) -> int:
    """Maps a connection opacity in [0, 1] to an 8-bit alpha channel."""
    return min(max(int(opacity * LINE_MAX_ALPHA), 0), 255)


def emit_draw_commands(
    positions: np.ndarray, connections: Sequence[Connection]
) -> List[DrawCommand]:
    """
    Builds the draw list for one frame. Does not modify its inputs, so two
    calls on the same state return equal lists.
    """
    commands: List[DrawCommand] = []

    for x, y in positions:
        commands.append(Circle((float(x), float(y)), POINT_RADIUS, POINT_COLOR))

    for connection in connections:
        start = positions[connection.first]
        end = positions[connection.second]
        color = (*LINE_RGB, line_alpha(connection.opacity))
        commands.append(Line(
            ((float(start[0]), float(start[1])), (float(end[0]), float(end[1]))),
            LINE_WIDTH,
            color,
        ))

    return commands
