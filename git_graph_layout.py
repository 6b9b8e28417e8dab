# git_graph_layout.py

import logging
from typing import Iterable, Optional

from git_graph_data import CommitRecord, GraphLayout, Lane, Palette, Row


def _index_of(lanes: Iterable[Lane], lane_id: str) -> Optional[int]:
    for index, lane in enumerate(lanes):
        if lane.id == lane_id:
            return index
    return None


def assign_row(
    commit: CommitRecord, input_lanes: tuple[Lane, ...], palette: Palette, cursor: int
) -> tuple[Row, int]:
    """
    Computes the Row for one commit from the lanes directly above it.
    Returns the row and the advanced palette cursor.

    The first lane waiting for this commit carries it on to its first parent (same column,
    same color). Later lanes waiting for it are absorbed. Every other lane passes through
    in order. A commit nobody was waiting for is a new tip: it gets a fresh color and its
    first parent gets a lane appended at the end. Secondary parents get appended lanes with
    fresh colors unless a lane for them already exists.
    """
    first_parent = commit.parents[0] if commit.parents else None
    matched_column = _index_of(input_lanes, commit.hash)

    # Lanes not waiting for this commit; a continuation never duplicates one of them
    waiting_elsewhere = {lane.id for lane in input_lanes if lane.id != commit.hash}

    output: list[Lane] = []
    continuation_column: Optional[int] = None
    for index, lane in enumerate(input_lanes):
        if lane.id != commit.hash:
            output.append(lane)
        elif index == matched_column and first_parent is not None and first_parent not in waiting_elsewhere:
            continuation_column = len(output)
            output.append(Lane(first_parent, lane.color))
        # else: root reached, converged into an existing lane, or a duplicate being absorbed

    if matched_column is not None:
        color = input_lanes[matched_column].color
        node_column = matched_column
    else:
        color = palette.color_at(cursor)
        cursor += 1
        node_column = len(input_lanes)
        if first_parent is not None and _index_of(output, first_parent) is None:
            output.append(Lane(first_parent, color))

    if first_parent is not None and continuation_column is None:
        continuation_column = _index_of(output, first_parent)

    for parent in commit.parents[1:]:
        if _index_of(output, parent) is None:
            output.append(Lane(parent, palette.color_at(cursor)))
            cursor += 1

    row = Row(
        commit=commit,
        color=color,
        input_lanes=input_lanes,
        output_lanes=tuple(output),
        node_column=node_column,
        continuation_column=continuation_column,
    )
    return row, cursor


def assign_swimlanes(commits: Iterable[CommitRecord], palette: Optional[Palette] = None) -> GraphLayout:
    """
    Assigns every commit a lane and a color, newest first.
    The input is expected to be ordered the way `git log` prints it: any parent present in
    the list comes after all of its children. Parents missing from the list keep their lane
    open until the end of the range.
    """
    palette = palette or Palette()
    rows: list[Row] = []
    lanes: tuple[Lane, ...] = ()
    cursor = 0
    max_lanes = 0

    for commit in commits:
        row, cursor = assign_row(commit, lanes, palette, cursor)
        rows.append(row)
        max_lanes = max(max_lanes, len(row.input_lanes), len(row.output_lanes), row.node_column + 1)
        lanes = row.output_lanes

    if lanes:
        logging.debug("%d lane(s) still open after the last row: %s", len(lanes), [lane.id[:7] for lane in lanes])
    logging.debug("Swimlane layout: %d rows, %d max lanes, %d colors allocated", len(rows), max_lanes, cursor)

    return GraphLayout(rows=tuple(rows), max_lanes=max_lanes, colors_allocated=cursor)
