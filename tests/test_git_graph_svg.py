import os
import tempfile
import unittest

from git_graph_data import CommitRecord, GraphLayout
from git_graph_layout import assign_swimlanes
from git_graph_svg import render_svg, write_svg


def linear_layout():
    return assign_swimlanes(
        [
            CommitRecord("C3", ("C2",), author="Ann", message="Fix <parser> & tests"),
            CommitRecord("C2", ("C1",)),
            CommitRecord("C1"),
        ]
    )


class TestRenderSvg(unittest.TestCase):
    def test_document_structure(self):
        svg = render_svg(linear_layout(), row_height=24, lane_width=20)
        self.assertTrue(svg.startswith("<svg "))
        self.assertTrue(svg.rstrip().endswith("</svg>"))
        self.assertIn('width="60"', svg)
        self.assertIn('height="72"', svg)
        self.assertEqual(svg.count("<circle"), 3)
        self.assertLess(svg.index('<g class="links">'), svg.index('<g class="nodes">'))

    def test_rows_are_stacked(self):
        svg = render_svg(linear_layout(), row_height=24, lane_width=20)
        self.assertIn('transform="translate(0,0)"', svg)
        self.assertIn('transform="translate(0,24)"', svg)
        self.assertIn('transform="translate(0,48)"', svg)
        self.assertIn('d="M 20 12 L 20 24"', svg)

    def test_row_height_override_moves_later_rows(self):
        svg = render_svg(linear_layout(), row_height=24, lane_width=20, row_heights={"C2": 80})
        self.assertIn('height="128"', svg)
        self.assertIn('transform="translate(0,104)"', svg)

    def test_text_is_escaped(self):
        svg = render_svg(linear_layout())
        self.assertIn("Fix &lt;parser&gt; &amp; tests", svg)
        self.assertNotIn("<parser>", svg)

    def test_empty_layout(self):
        svg = render_svg(GraphLayout())
        self.assertNotIn("<circle", svg)
        self.assertIn('height="0"', svg)

    def test_output_is_deterministic(self):
        self.assertEqual(render_svg(linear_layout()), render_svg(linear_layout()))

    def test_write_svg(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "graph.svg")
            write_svg(path, linear_layout(), row_height=30)
            with open(path, encoding="utf-8") as f:
                content = f.read()
        self.assertIn('height="90"', content)


if __name__ == "__main__":
    unittest.main()
