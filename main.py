import argparse
import json
import logging
import os
import sys

from PyQt6.QtWidgets import QApplication

from git_graph_data import CommitRecord, Palette
from git_graph_layout import assign_swimlanes
from git_graph_svg import write_svg
from git_graph_view import GitGraphView
from settings import settings

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(filename)s:%(lineno)d - %(message)s"


def load_commit_file(path: str) -> list[CommitRecord]:
    """
    Reads commits from a JSON file: either a list of commit objects, newest first,
    or a `{"data": [...]}` message wrapping one.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)
    except OSError as e:
        raise ValueError(f"Cannot read {path}: {e!s}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"{path} is not valid JSON: {e!s}") from e

    if isinstance(document, dict):
        document = document.get("data")
    if not isinstance(document, list):
        raise ValueError(f"{path} must hold a list of commits")

    return [CommitRecord.from_dict(entry) for entry in document]


def positive_size(value: str) -> float:
    try:
        size = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")
    if not size > 0 or size == float("inf"):
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {value}")
    return size


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="swimlane-graph", description="Draw a commit history as a lane graph")
    parser.add_argument("commits", help="JSON file with commits, newest first")
    parser.add_argument("--svg", metavar="OUT", help="Write the graph as SVG to OUT instead of opening a window")
    parser.add_argument("--row-height", type=positive_size, help="Row height in pixels")
    parser.add_argument("--lane-width", type=positive_size, help="Lane width in pixels")
    return parser.parse_args(argv)


def setup_logging():
    # Log level from the environment
    log_level = logging.DEBUG if os.getenv("DEBUG") == "1" else logging.INFO
    logging.basicConfig(level=log_level, format=LOG_FORMAT)
    if os.getenv("LOG_TO_FILE") == "1":
        file_handler = logging.FileHandler("swimlane_graph.log")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(file_handler)


def export_svg(commits, out_path, row_height, lane_width):
    layout = assign_swimlanes(commits, Palette(settings.get_palette()))
    write_svg(
        out_path,
        layout,
        row_height=row_height or settings.get_row_height(),
        lane_width=lane_width or settings.get_lane_width(),
        corner_radius=settings.get_corner_radius(),
        margin=settings.get_graph_margin(),
    )
    logging.info("Wrote %d rows to %s", len(layout), out_path)


def show_window(commits, commits_path, row_height, lane_width):
    app = QApplication(sys.argv)
    view = GitGraphView(row_height=row_height, lane_width=lane_width)
    view.set_commits(commits)
    view.commit_item_clicked.connect(lambda sha: logging.info("Commit clicked: %s", sha))
    settings.add_recent_file(os.path.abspath(commits_path))

    view.setWindowTitle(f"Commit Graph - {os.path.basename(commits_path)}")
    view.resize(*settings.get_window_size())
    view.show()
    return app.exec()


def main(argv=None):
    args = parse_args(argv)
    try:
        commits = load_commit_file(args.commits)
    except ValueError as e:
        logging.error("Failed to load commits: %s", e)
        return 1

    if args.svg:
        export_svg(commits, args.svg, args.row_height, args.lane_width)
        return 0
    return show_window(commits, args.commits, args.row_height, args.lane_width)


def run():
    setup_logging()
    sys.exit(main())


if __name__ == "__main__":
    run()
