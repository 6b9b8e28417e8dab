# git_graph_geometry.py

import logging
from dataclasses import dataclass
from typing import Optional

from git_graph_data import Row

# Corner radius for turns between columns; clamped per row so short rows don't overshoot
CORNER_RADIUS = 6
NODE_RADIUS = 4
STROKE_WIDTH = 2

# Segment kinds
SEGMENT_LINE = "line"  # pass-through lane, same column top to bottom
SEGMENT_SHIFT = "shift"  # pass-through lane moving to another column
SEGMENT_INCOMING = "incoming"  # top edge into the commit node
SEGMENT_OUTGOING = "outgoing"  # commit node down to its first parent, same column
SEGMENT_ABSORB = "absorb"  # duplicate lane bending into the commit node
SEGMENT_MERGE = "merge"  # commit node over to a parent lane in another column


@dataclass(frozen=True)
class PathCommand:
    """
    One step of a path: "M" move, "L" line or "A" quarter arc to (x, y).
    Arcs carry their centre and SVG sweep flag (1 = clockwise on screen).
    """

    op: str
    x: float
    y: float
    radius: float = 0.0
    sweep: int = 0
    cx: float = 0.0
    cy: float = 0.0


@dataclass(frozen=True)
class PathSegment:
    kind: str
    color: str
    commands: tuple[PathCommand, ...]

    def svg_path(self) -> str:
        parts = []
        for cmd in self.commands:
            if cmd.op == "A":
                parts.append(f"A {fmt_number(cmd.radius)} {fmt_number(cmd.radius)} 0 0 {cmd.sweep} {fmt_number(cmd.x)} {fmt_number(cmd.y)}")
            else:
                parts.append(f"{cmd.op} {fmt_number(cmd.x)} {fmt_number(cmd.y)}")
        return " ".join(parts)


@dataclass(frozen=True)
class RowGeometry:
    segments: tuple[PathSegment, ...]
    node_column: int
    node_x: float
    node_y: float
    node_color: str
    row_height: float
    node_radius: float = NODE_RADIUS

    def segments_of(self, kind: str) -> list[PathSegment]:
        return [segment for segment in self.segments if segment.kind == kind]


def fmt_number(value: float) -> str:
    return f"{round(value, 3):g}"


def column_x(column: int, lane_width: float) -> float:
    return (column + 1) * lane_width


class _PathBuilder:
    def __init__(self, x: float, y: float):
        self.x = x
        self.y = y
        self.commands = [PathCommand("M", x, y)]

    def line_to(self, x: float, y: float) -> "_PathBuilder":
        if (x, y) != (self.x, self.y):
            self.commands.append(PathCommand("L", x, y))
            self.x, self.y = x, y
        return self

    def arc_to(self, x: float, y: float, cx: float, cy: float, radius: float) -> "_PathBuilder":
        if radius <= 0:
            return self.line_to(x, y)
        # Cross product of centre->start and centre->end; positive is clockwise with y pointing down
        cross = (self.x - cx) * (y - cy) - (self.y - cy) * (x - cx)
        sweep = 1 if cross > 0 else 0
        self.commands.append(PathCommand("A", x, y, radius=radius, sweep=sweep, cx=cx, cy=cy))
        self.x, self.y = x, y
        return self

    def build(self, kind: str, color: str) -> PathSegment:
        return PathSegment(kind, color, tuple(self.commands))


def _vertical(x: float, y1: float, y2: float, kind: str, color: str) -> PathSegment:
    return _PathBuilder(x, y1).line_to(x, y2).build(kind, color)


def _shift(x1: float, x2: float, height: float, radius: float, color: str) -> PathSegment:
    """S-shaped connector: down, turn, across at mid height, turn, down."""
    mid = height / 2
    direction = 1 if x2 > x1 else -1
    r = min(radius, mid, abs(x2 - x1) / 2)
    path = _PathBuilder(x1, 0)
    path.line_to(x1, mid - r)
    path.arc_to(x1 + direction * r, mid, cx=x1 + direction * r, cy=mid - r, radius=r)
    path.line_to(x2 - direction * r, mid)
    path.arc_to(x2, mid + r, cx=x2 - direction * r, cy=mid + r, radius=r)
    path.line_to(x2, height)
    return path.build(SEGMENT_SHIFT, color)


def _absorb(x_lane: float, x_node: float, mid: float, radius: float, color: str) -> PathSegment:
    """Top edge of a duplicate lane curving into the node at mid height."""
    direction = 1 if x_node > x_lane else -1
    r = min(radius, mid, abs(x_node - x_lane))
    path = _PathBuilder(x_lane, 0)
    path.line_to(x_lane, mid - r)
    path.arc_to(x_lane + direction * r, mid, cx=x_lane + direction * r, cy=mid - r, radius=r)
    path.line_to(x_node, mid)
    return path.build(SEGMENT_ABSORB, color)


def _merge(x_node: float, x_target: float, height: float, radius: float, color: str) -> PathSegment:
    """Node at mid height across to the target column, then a quarter arc down to the bottom edge."""
    mid = height / 2
    if x_target == x_node:
        return _vertical(x_node, mid, height, SEGMENT_MERGE, color)
    direction = 1 if x_target > x_node else -1
    r = min(radius, mid, abs(x_target - x_node))
    path = _PathBuilder(x_node, mid)
    path.line_to(x_target - direction * r, mid)
    path.arc_to(x_target, mid + r, cx=x_target - direction * r, cy=mid + r, radius=r)
    path.line_to(x_target, height)
    return path.build(SEGMENT_MERGE, color)


def build_row_geometry(
    row: Row, row_height: float, lane_width: float, corner_radius: float = CORNER_RADIUS
) -> RowGeometry:
    """
    Turns one Row into drawable segments, in row-local coordinates (y=0 is the top edge).
    Only depends on the row itself, so rows may be built in any order. `row_height` may
    differ per row, e.g. when a row is expanded to host a detail panel.
    """
    mid = row_height / 2
    node_column = row.node_column
    node_x = column_x(node_column, lane_width)
    segments: list[PathSegment] = []

    for index, lane in enumerate(row.input_lanes):
        x_in = column_x(index, lane_width)
        if lane.id == row.commit.hash:
            if index == node_column:
                segments.append(_vertical(x_in, 0, mid, SEGMENT_INCOMING, lane.color))
            else:
                segments.append(_absorb(x_in, node_x, mid, corner_radius, lane.color))
            continue

        out_index = row.output_column(lane.id)
        if out_index is None:
            logging.warning("Lane %s vanished between rows at commit %s", lane.id[:7], row.commit.hash[:7])
            continue
        x_out = column_x(out_index, lane_width)
        if x_out == x_in:
            segments.append(_vertical(x_in, 0, row_height, SEGMENT_LINE, lane.color))
        else:
            segments.append(_shift(x_in, x_out, row_height, corner_radius, lane.color))

    if row.continuation_column is not None:
        if row.continuation_column == node_column:
            segments.append(_vertical(node_x, mid, row_height, SEGMENT_OUTGOING, row.color))
        else:
            x_target = column_x(row.continuation_column, lane_width)
            segments.append(_merge(node_x, x_target, row_height, corner_radius, row.color))

    for parent in row.commit.parents[1:]:
        target: Optional[int] = row.output_column(parent)
        if target is None:
            logging.warning("Merge parent %s of %s has no lane; connector skipped", parent[:7], row.commit.hash[:7])
            continue
        if target == row.continuation_column:
            # Same parent listed twice
            continue
        x_target = column_x(target, lane_width)
        segments.append(_merge(node_x, x_target, row_height, corner_radius, row.color))

    return RowGeometry(
        segments=tuple(segments),
        node_column=node_column,
        node_x=node_x,
        node_y=mid,
        node_color=row.color,
        row_height=row_height,
    )
