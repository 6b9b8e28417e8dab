import os
import unittest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtCore import QPointF, Qt  # noqa: E402
from PyQt6.QtTest import QSignalSpy, QTest  # noqa: E402
from PyQt6.QtWidgets import QApplication  # noqa: E402

from git_graph_data import REF_BRANCH, REF_HEAD, REF_REMOTE, REF_TAG, CommitRecord, Lane, Row  # noqa: E402
from git_graph_geometry import SEGMENT_MERGE, SEGMENT_SHIFT, build_row_geometry  # noqa: E402
from git_graph_items import (  # noqa: E402
    REF_PADDING_X,
    CommitDetailsItem,
    CommitDot,
    LanePathItem,
    ReferenceLabel,
    RowItem,
    segment_to_painter_path,
)
from git_graph_layout import assign_swimlanes  # noqa: E402
from git_graph_view import GitGraphView  # noqa: E402

app = QApplication.instance() or QApplication([])

MERGE_HISTORY = [
    CommitRecord("M", ("A", "B"), author="Ann", message="Merge B"),
    CommitRecord("A", ("X",), message="A"),
    CommitRecord("B", ("X",), refs=("feature",), message="B"),
    CommitRecord("X", (), message="Root"),
]


class TestPainterPath(unittest.TestCase):
    def test_merge_path_ends_at_target(self):
        layout = assign_swimlanes(MERGE_HISTORY)
        merge = build_row_geometry(layout.rows[0], 24, 20).segments_of(SEGMENT_MERGE)[0]
        path = segment_to_painter_path(merge)
        end = path.currentPosition()
        self.assertAlmostEqual(end.x(), 40)
        self.assertAlmostEqual(end.y(), 24)

    def test_shift_path_bounds(self):
        row = Row(
            commit=CommitRecord("A"),
            color="#00b0ff",
            input_lanes=(Lane("A", "#00b0ff"), Lane("B", "#aa00ff")),
            output_lanes=(Lane("B", "#aa00ff"),),
            node_column=0,
        )
        shift = build_row_geometry(row, 24, 20).segments_of(SEGMENT_SHIFT)[0]
        path = segment_to_painter_path(shift)
        rect = path.boundingRect()
        self.assertAlmostEqual(rect.left(), 20, places=3)
        self.assertAlmostEqual(rect.right(), 40, places=3)
        self.assertAlmostEqual(rect.bottom(), 24, places=3)


class TestRowItem(unittest.TestCase):
    def test_ref_labels_by_kind(self):
        commit = CommitRecord("T", refs=("HEAD -> main", "origin/main", "tag: v1.0", "feature"), message="Tip")
        layout = assign_swimlanes([commit])
        item = RowItem(build_row_geometry(layout.rows[0], 24, 20), commit, 60)

        labels = item.ref_labels
        self.assertTrue(all(isinstance(label, ReferenceLabel) for label in labels))
        self.assertEqual([label.kind for label in labels], [REF_HEAD, REF_REMOTE, REF_TAG, REF_BRANCH])
        self.assertEqual([label.toPlainText() for label in labels], ["main", "origin/main", "v1.0", "feature"])
        self.assertEqual(item.message_item.toPlainText(), "Tip")

        # badges sit in order after the graph, then the message
        xs = [label.pos().x() for label in labels]
        self.assertEqual(xs, sorted(xs))
        self.assertGreaterEqual(xs[0] - REF_PADDING_X, 60)
        self.assertGreater(item.message_item.pos().x(), xs[-1])

    def test_row_without_refs(self):
        commit = CommitRecord("R", message="Root")
        layout = assign_swimlanes([commit])
        item = RowItem(build_row_geometry(layout.rows[0], 24, 20), commit, 60)
        self.assertEqual(item.ref_labels, [])
        self.assertIsNone(item.details_item)


class TestGitGraphView(unittest.TestCase):
    def setUp(self):
        self.view = GitGraphView(row_height=24, lane_width=20)
        self.view.set_commits(MERGE_HISTORY)

    def tearDown(self):
        self.view.deleteLater()

    def test_rows_are_stacked(self):
        tops = [item.pos().y() for item in self.view._row_items]
        self.assertEqual(tops, [0, 24, 48, 72])
        self.assertEqual(self.view.total_height(), 96)

    def test_row_items_hold_geometry(self):
        item = self.view.row_item("B")
        self.assertIsInstance(item, RowItem)
        self.assertEqual(item.geometry.node_column, 1)
        self.assertEqual(len([c for c in item.childItems() if isinstance(c, LanePathItem)]), 3)
        dot = item.dot
        self.assertIsInstance(dot, CommitDot)
        self.assertIn("feature", dot.toolTip())
        self.assertEqual(item.node_scene_pos(), QPointF(40, 60))

    def test_expand_row(self):
        self.view.set_row_height("A", 100)
        tops = [item.pos().y() for item in self.view._row_items]
        self.assertEqual(tops, [0, 24, 124, 148])
        self.assertEqual(self.view.row_item("A").geometry.node_y, 50)
        self.assertEqual(self.view.total_height(), 172)

        self.view.set_row_height("A", None)
        tops = [item.pos().y() for item in self.view._row_items]
        self.assertEqual(tops, [0, 24, 48, 72])

    def test_toggle_commit_details(self):
        self.assertTrue(self.view.toggle_commit_details("A"))
        item = self.view.row_item("A")
        self.assertIsInstance(item.details_item, CommitDetailsItem)
        details = item.details_item.toPlainText()
        self.assertIn("Commit:  A", details)
        self.assertIn("Parents: X", details)

        height = self.view.row_height_for("A")
        self.assertGreater(height, 24)
        self.assertEqual(item.geometry.node_y, height / 2)
        tops = [row_item.pos().y() for row_item in self.view._row_items]
        self.assertEqual(tops, [0, 24, 24 + height, 24 + height + 24])
        self.assertAlmostEqual(self.view.total_height(), 72 + height)

        self.assertFalse(self.view.toggle_commit_details("A"))
        self.assertIsNone(self.view.row_item("A").details_item)
        tops = [row_item.pos().y() for row_item in self.view._row_items]
        self.assertEqual(tops, [0, 24, 48, 72])

    def test_details_survive_refresh(self):
        self.view.toggle_commit_details("B")
        height = self.view.row_height_for("B")
        self.view.set_commits(MERGE_HISTORY)
        self.assertIsNotNone(self.view.row_item("B").details_item)
        self.assertEqual(self.view.row_height_for("B"), height)

        self.view.set_commits(MERGE_HISTORY[:2])
        self.assertEqual(self.view.row_height_for("B"), 24)
        self.assertIsNone(self.view.row_item("A").details_item)

    def test_toggle_unknown_commit(self):
        self.assertFalse(self.view.toggle_commit_details("nope"))
        self.assertEqual(self.view.total_height(), 96)

    def test_click_toggles_details(self):
        self.view.resize(400, 300)
        self.view.show()
        spy = QSignalSpy(self.view.commit_item_clicked)
        dot_pos = self.view.mapFromScene(self.view.row_item("M").node_scene_pos())

        QTest.mouseClick(self.view.viewport(), Qt.MouseButton.LeftButton, Qt.KeyboardModifier.NoModifier, dot_pos)

        self.assertEqual(len(spy), 1)
        self.assertEqual(spy[0], ["M"])
        self.assertIsNotNone(self.view.row_item("M").details_item)
        self.assertGreater(self.view._row_items[1].pos().y(), 24)

    def test_refresh_replaces_rows(self):
        self.view.set_commits(MERGE_HISTORY[2:])
        self.assertEqual(len(self.view._row_items), 2)
        self.assertEqual(self.view.graph_layout.max_lanes, 1)

    def test_empty_history(self):
        self.view.set_commits([])
        self.assertEqual(self.view._row_items, [])
        self.assertEqual(self.view.total_height(), 0)

    def test_zoom(self):
        self.view.zoom_in()
        self.assertAlmostEqual(self.view.transform().m11(), 1.1)
        self.view.zoom_out()
        self.assertAlmostEqual(self.view.transform().m11(), 1.0)


if __name__ == "__main__":
    unittest.main()
