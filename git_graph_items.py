# git_graph_items.py

import math

from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import QBrush, QColor, QFont, QPainterPath, QPen
from PyQt6.QtWidgets import QGraphicsEllipseItem, QGraphicsItem, QGraphicsPathItem, QGraphicsTextItem

from git_graph_data import REF_BRANCH, REF_HEAD, REF_REMOTE, REF_TAG, CommitRecord, classify_ref
from git_graph_geometry import STROKE_WIDTH, PathSegment, RowGeometry

SELECTED_COMMIT_COLOR = QColor(Qt.GlobalColor.yellow)
HOVER_COMMIT_COLOR = QColor(Qt.GlobalColor.lightGray)

REF_PADDING_X = 4
REF_PADDING_Y = 2
REF_SPACING = 4
# kind: (background, border, text)
REF_STYLES = {
    REF_HEAD: (QColor("#f6ffed"), QColor("#b7eb8f"), QColor(Qt.GlobalColor.black)),  # Light green
    REF_BRANCH: (QColor("#e6f7ff"), QColor("#91d5ff"), QColor(Qt.GlobalColor.black)),  # Light blue
    REF_REMOTE: (QColor("#f9f0ff"), QColor("#d3adf7"), QColor(Qt.GlobalColor.black)),  # Light purple
    REF_TAG: (QColor("#fffbe6"), QColor("#ffe58f"), QColor(Qt.GlobalColor.black)),  # Light yellow
}

# Configuration for CommitMessageItem
COMMIT_MSG_MAX_LENGTH = 60
COMMIT_MSG_COLOR = QColor("#444444")
COMMIT_MSG_FONT_FAMILY = "Arial"
COMMIT_MSG_FONT_SIZE = 9
COMMIT_MSG_PADDING_X = 8

# Configuration for CommitDetailsItem
DETAILS_FONT_FAMILY = "Courier New"
DETAILS_FONT_SIZE = 9
DETAILS_COLOR = QColor("#222222")
DETAILS_PADDING_Y = 2


def _angle(x: float, y: float, cx: float, cy: float) -> float:
    # Qt angles grow counter-clockwise on screen, y grows downwards
    return math.degrees(math.atan2(-(y - cy), x - cx))


def segment_to_painter_path(segment: PathSegment) -> QPainterPath:
    path = QPainterPath()
    for cmd in segment.commands:
        if cmd.op == "M":
            path.moveTo(cmd.x, cmd.y)
        elif cmd.op == "L":
            path.lineTo(cmd.x, cmd.y)
        elif cmd.op == "A":
            start = path.currentPosition()
            start_angle = _angle(start.x(), start.y(), cmd.cx, cmd.cy)
            span = _angle(cmd.x, cmd.y, cmd.cx, cmd.cy) - start_angle
            if span > 180:
                span -= 360
            elif span <= -180:
                span += 360
            r = cmd.radius
            path.arcTo(QRectF(cmd.cx - r, cmd.cy - r, 2 * r, 2 * r), start_angle, span)
    return path


class LanePathItem(QGraphicsPathItem):
    """One lane segment of a row, in the lane's color."""

    def __init__(self, segment: PathSegment, parent: QGraphicsItem = None):
        super().__init__(parent)
        self.segment = segment
        self.setPath(segment_to_painter_path(segment))
        self.setPen(
            QPen(
                QColor(segment.color),
                STROKE_WIDTH,
                Qt.PenStyle.SolidLine,
                Qt.PenCapStyle.RoundCap,
                Qt.PenJoinStyle.RoundJoin,
            )
        )
        self.setBrush(QBrush(Qt.BrushStyle.NoBrush))
        self.setZValue(-1)  # Draw lanes behind commits


class CommitDot(QGraphicsEllipseItem):
    def __init__(self, commit: CommitRecord, geometry: RowGeometry, parent: QGraphicsItem = None):
        r = geometry.node_radius
        super().__init__(-r, -r, 2 * r, 2 * r, parent)
        self.commit = commit
        self.base_color = QColor(geometry.node_color)
        self.current_brush_color = self.base_color
        self.setPos(geometry.node_x, geometry.node_y)

        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsSelectable, True)
        self.setAcceptHoverEvents(True)

        self.setBrush(QBrush(self.base_color))
        self.setPen(QPen(Qt.PenStyle.NoPen))

        tooltip_text = (
            f"SHA: {commit.hash}\n"
            f"Author: {commit.author} <{commit.email}>\n"
            f"Date: {commit.date}\n"
            f"Message: {commit.message}"
        )
        if commit.refs:
            tooltip_text += f"\nRefs: {', '.join(commit.refs)}"
        self.setToolTip(tooltip_text)

    def itemChange(self, change, value):
        if change == QGraphicsItem.GraphicsItemChange.ItemSelectedChange:
            self.current_brush_color = SELECTED_COMMIT_COLOR if value else self.base_color
            self.setBrush(QBrush(self.current_brush_color))
        return super().itemChange(change, value)

    def hoverEnterEvent(self, event):
        if not self.isSelected():
            self.setBrush(QBrush(HOVER_COMMIT_COLOR))
        super().hoverEnterEvent(event)

    def hoverLeaveEvent(self, event):
        if not self.isSelected():
            self.setBrush(QBrush(self.current_brush_color))
        super().hoverLeaveEvent(event)


class ReferenceLabel(QGraphicsTextItem):
    """A branch, tag or HEAD decoration drawn as a rounded badge."""

    def __init__(self, ref: str, parent: QGraphicsItem = None):
        self.kind, name = classify_ref(ref)
        super().__init__(name, parent)
        self.ref = ref

        self.setFont(QFont(COMMIT_MSG_FONT_FAMILY, 8))
        self.bg_color, self.border_color, self.text_color = REF_STYLES[self.kind]
        self.setDefaultTextColor(self.text_color)
        self.setToolTip(ref)

    def paint(self, painter, option, widget=None):
        painter.setPen(QPen(self.border_color, 1))
        painter.setBrush(QBrush(self.bg_color))
        painter.drawRoundedRect(self.boundingRect(), 3, 3)
        super().paint(painter, option, widget)

    def boundingRect(self) -> QRectF:
        # Padding around the text for the badge background
        rect = super().boundingRect()
        rect.adjust(-REF_PADDING_X, -REF_PADDING_Y, REF_PADDING_X, REF_PADDING_Y)
        return rect


class CommitMessageItem(QGraphicsTextItem):
    def __init__(self, commit: CommitRecord, parent: QGraphicsItem = None):
        super().__init__(parent)
        full_message = commit.message

        # Truncate message for display
        if len(full_message) > COMMIT_MSG_MAX_LENGTH:
            display_text = full_message[: COMMIT_MSG_MAX_LENGTH - 3] + "..."
        else:
            display_text = full_message

        self.setPlainText(display_text)
        self.setFont(QFont(COMMIT_MSG_FONT_FAMILY, COMMIT_MSG_FONT_SIZE))
        self.setDefaultTextColor(COMMIT_MSG_COLOR)

        if display_text != full_message:
            self.setToolTip(f"Full message: {full_message}")


class CommitDetailsItem(QGraphicsTextItem):
    """Inline panel with the full commit metadata, shown under an expanded row's message."""

    def __init__(self, commit: CommitRecord, parent: QGraphicsItem = None):
        super().__init__(parent)
        lines = [
            f"Commit:  {commit.hash}",
            f"Parents: {', '.join(commit.parents)}",
            f"Author:  {commit.author} <{commit.email}>",
            f"Date:    {commit.date}",
        ]
        if commit.refs:
            lines.append(f"Refs:    {', '.join(commit.refs)}")
        lines += ["", commit.message]

        self.setPlainText("\n".join(lines))
        self.setFont(QFont(DETAILS_FONT_FAMILY, DETAILS_FONT_SIZE))
        self.setDefaultTextColor(DETAILS_COLOR)


def details_row_height(commit: CommitRecord, row_height: float) -> float:
    """Height a row needs to show its message line and the details panel."""
    message_height = CommitMessageItem(commit).boundingRect().height()
    details_height = CommitDetailsItem(commit).boundingRect().height()
    return max(row_height, message_height + details_height + 2 * DETAILS_PADDING_Y)


class RowItem(QGraphicsItem):
    """
    Container for one row of the graph. Children are positioned in row-local
    coordinates, so moving the row (e.g. when a row above it expands) moves everything.
    """

    def __init__(
        self,
        geometry: RowGeometry,
        commit: CommitRecord,
        width: float,
        show_details: bool = False,
        parent: QGraphicsItem = None,
    ):
        super().__init__(parent)
        self.geometry = geometry
        self.commit = commit
        self.width = width

        self.lane_items = [LanePathItem(segment, self) for segment in geometry.segments]
        self.dot = CommitDot(commit, geometry, self)
        self.ref_labels = [ReferenceLabel(ref, self) for ref in commit.refs]
        self.message_item = CommitMessageItem(commit, self)
        message_height = self.message_item.boundingRect().height()

        # Expanded rows keep the message line at the top, with the details below it
        if show_details:
            text_center_y = DETAILS_PADDING_Y + message_height / 2
        else:
            text_center_y = geometry.node_y

        x = width + COMMIT_MSG_PADDING_X
        for label in self.ref_labels:
            rect = label.boundingRect()
            label.setPos(x + REF_PADDING_X, text_center_y - rect.height() / 2 + REF_PADDING_Y)
            x += rect.width() + REF_SPACING
        self.message_item.setPos(x, text_center_y - message_height / 2)

        self.details_item = None
        if show_details:
            self.details_item = CommitDetailsItem(commit, self)
            self.details_item.setPos(width + COMMIT_MSG_PADDING_X, text_center_y + message_height / 2)

    def boundingRect(self) -> QRectF:
        return QRectF(0, 0, self.width, self.geometry.row_height)

    def paint(self, painter, option, widget=None):
        # Children draw themselves
        pass

    def node_scene_pos(self) -> QPointF:
        return self.mapToScene(QPointF(self.geometry.node_x, self.geometry.node_y))
