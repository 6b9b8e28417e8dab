# git_graph_view.py

import logging
from typing import Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QAction, QPainter
from PyQt6.QtWidgets import QApplication, QGraphicsScene, QGraphicsView, QMenu

from git_graph_data import CommitRecord, GraphLayout, Palette
from git_graph_geometry import build_row_geometry
from git_graph_items import RowItem, details_row_height
from git_graph_layout import assign_swimlanes
from settings import settings


class GitGraphView(QGraphicsView):
    commit_item_clicked = pyqtSignal(str)

    def __init__(self, parent=None, row_height=None, lane_width=None):
        super().__init__(parent)
        self.scene = QGraphicsScene(self)
        self.setScene(self.scene)

        self.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.setDragMode(QGraphicsView.DragMode.ScrollHandDrag)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)

        self.row_height = row_height or settings.get_row_height()
        self.lane_width = lane_width or settings.get_lane_width()
        self.corner_radius = settings.get_corner_radius()
        self.margin = settings.get_graph_margin()
        self.lane_palette = Palette(settings.get_palette())

        self.graph_layout: GraphLayout = GraphLayout()
        self._row_items: list[RowItem] = []
        self._row_heights: dict[str, float] = {}  # per-row height overrides
        self._expanded: set[str] = set()  # rows showing the details panel

        self._zoom_factor_base = 1.1

        self.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.customContextMenuRequested.connect(self._show_context_menu)

    def clear_graph(self):
        self.scene.clear()
        self._row_items.clear()
        self.graph_layout = GraphLayout()

    def set_commits(self, commits: list[CommitRecord]):
        """Recomputes the whole layout and redraws every row."""
        self.clear_graph()
        self.graph_layout = assign_swimlanes(commits, self.lane_palette)
        known = {row.commit.hash for row in self.graph_layout.rows}
        self._row_heights = {h: v for h, v in self._row_heights.items() if h in known}
        self._expanded &= known

        if not self.graph_layout.rows:
            return

        width = self.graph_layout.total_width(self.lane_width, self.margin)
        for row in self.graph_layout.rows:
            item = self._make_row_item(row, width)
            self.scene.addItem(item)
            self._row_items.append(item)

        self._stack_rows()
        logging.info("Graph populated with %d commits, %d lanes", len(self.graph_layout), self.graph_layout.max_lanes)

    def _build_geometry(self, row):
        height = self._row_heights.get(row.commit.hash, self.row_height)
        return build_row_geometry(row, height, self.lane_width, self.corner_radius)

    def _make_row_item(self, row, width):
        return RowItem(self._build_geometry(row), row.commit, width, show_details=row.commit.hash in self._expanded)

    def _stack_rows(self):
        top = 0.0
        for item in self._row_items:
            item.setPos(0, top)
            top += item.geometry.row_height
        self.scene.setSceneRect(self.scene.itemsBoundingRect().adjusted(0, 0, self.margin, 0))

    def row_height_for(self, commit_hash: str) -> float:
        return self._row_heights.get(commit_hash, self.row_height)

    def set_row_height(self, commit_hash: str, height: Optional[float]):
        """
        Expands (or with None, restores) a single row, e.g. to make room for an
        inline detail panel. Rows below it move down; nothing else is recomputed.
        """
        if height is None:
            self._row_heights.pop(commit_hash, None)
            self._expanded.discard(commit_hash)
        else:
            self._row_heights[commit_hash] = height

        for index, item in enumerate(self._row_items):
            if item.commit.hash != commit_hash:
                continue
            row = self.graph_layout.rows[index]
            width = item.width
            self.scene.removeItem(item)
            new_item = self._make_row_item(row, width)
            self.scene.addItem(new_item)
            self._row_items[index] = new_item
            self._stack_rows()
            return
        logging.debug("No row for commit %s", commit_hash)

    def row_item(self, commit_hash: str) -> Optional[RowItem]:
        return next((item for item in self._row_items if item.commit.hash == commit_hash), None)

    def toggle_commit_details(self, commit_hash: str) -> bool:
        """Shows or hides the inline details panel of one row. Returns True when it is now shown."""
        row = self.graph_layout.row_for(commit_hash)
        if row is None:
            logging.debug("No row for commit %s", commit_hash)
            return False
        if commit_hash in self._expanded:
            self.set_row_height(commit_hash, None)
            return False
        self._expanded.add(commit_hash)
        self.set_row_height(commit_hash, details_row_height(row.commit, self.row_height))
        return True

    def _row_item_at(self, pos) -> Optional[RowItem]:
        item = self.itemAt(pos)
        while item is not None and not isinstance(item, RowItem):
            item = item.parentItem()
        return item

    def total_height(self) -> float:
        return self.graph_layout.total_height(self.row_height, self._row_heights)

    def wheelEvent(self, event):
        """Ctrl + wheel zooms, plain wheel scrolls."""
        if event.modifiers() & Qt.KeyboardModifier.ControlModifier:
            if event.angleDelta().y() > 0:
                self.zoom_in()
            else:
                self.zoom_out()
            event.accept()
        else:
            super().wheelEvent(event)

    def zoom_in(self):
        self.scale(self._zoom_factor_base, self._zoom_factor_base)

    def zoom_out(self):
        self.scale(1.0 / self._zoom_factor_base, 1.0 / self._zoom_factor_base)

    def keyPressEvent(self, event):
        if event.modifiers() & Qt.KeyboardModifier.ControlModifier:
            if event.key() in (Qt.Key.Key_Plus, Qt.Key.Key_Equal):
                self.zoom_in()
                return
            if event.key() == Qt.Key.Key_Minus:
                self.zoom_out()
                return
        super().keyPressEvent(event)

    def mousePressEvent(self, event):
        super().mousePressEvent(event)
        if event.button() == Qt.MouseButton.LeftButton:
            row_item = self._row_item_at(event.pos())
            if row_item is not None:
                commit_hash = row_item.commit.hash
                self.commit_item_clicked.emit(commit_hash)
                self.toggle_commit_details(commit_hash)
                self.row_item(commit_hash).dot.setSelected(True)

    def _show_context_menu(self, pos):
        row_item = self._row_item_at(pos)
        if row_item is not None:
            commit_hash = row_item.commit.hash
            menu = QMenu(self)

            copy_action = QAction("Copy Commit", self)
            copy_action.triggered.connect(lambda: self._copy_commit_sha(commit_hash))
            menu.addAction(copy_action)

            menu.exec(self.viewport().mapToGlobal(pos))

    def _copy_commit_sha(self, sha):
        QApplication.clipboard().setText(sha)
