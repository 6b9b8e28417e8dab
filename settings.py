import json
import logging
import os
import re
from pathlib import Path

from git_graph_data import DEFAULT_PALETTE, GRAPH_MARGIN
from git_graph_geometry import CORNER_RADIUS

_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


class Settings:
    def __init__(self, config_dir=None):
        # Config directory under the user's home unless given
        self.config_dir = config_dir or os.path.join(str(Path.home()), ".swimlane_graph")
        self.config_file = os.path.join(self.config_dir, "settings.json")

        # Defaults
        self.settings = {
            "recent_files": [],  # recently opened commit files
            "max_recent": 10,
            "row_height": 24,
            "lane_width": 20,
            "corner_radius": CORNER_RADIUS,
            "graph_margin": GRAPH_MARGIN,
            "palette": list(DEFAULT_PALETTE),
            "window_size": [800, 600],
        }

        self.load_settings()

    def load_settings(self):
        """Merge saved settings over the defaults"""
        try:
            if os.path.exists(self.config_file):
                with open(self.config_file, "r", encoding="utf-8") as f:
                    saved_settings = json.load(f)
                if isinstance(saved_settings, dict):
                    self.settings.update(saved_settings)
                else:
                    logging.warning(f"Ignoring settings in {self.config_file}: expected an object, got {type(saved_settings).__name__}")
        except (OSError, ValueError) as e:
            logging.warning(f"Failed to load settings from {self.config_file}: {e!s}")

    def save_settings(self):
        try:
            if not os.path.exists(self.config_dir):
                os.makedirs(self.config_dir)
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(self.settings, f, ensure_ascii=False, indent=2)
        except OSError as e:
            logging.warning(f"Failed to save settings to {self.config_file}: {e!s}")

    def add_recent_file(self, file_path):
        recent = self.settings["recent_files"]

        if file_path in recent:
            recent.remove(file_path)
        recent.insert(0, file_path)

        self.settings["recent_files"] = recent[: self.settings["max_recent"]]
        self.save_settings()

    def get_recent_files(self):
        return self.settings["recent_files"]

    def _get_positive(self, key, default):
        value = self.settings.get(key, default)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            logging.warning("Ignoring invalid %s setting: %r", key, value)
            return default
        return value

    def get_row_height(self):
        return self._get_positive("row_height", 24)

    def set_row_height(self, row_height):
        self.settings["row_height"] = row_height
        self.save_settings()

    def get_lane_width(self):
        return self._get_positive("lane_width", 20)

    def set_lane_width(self, lane_width):
        self.settings["lane_width"] = lane_width
        self.save_settings()

    def get_corner_radius(self):
        return self._get_positive("corner_radius", CORNER_RADIUS)

    def get_graph_margin(self):
        value = self.settings.get("graph_margin", GRAPH_MARGIN)
        return value if isinstance(value, (int, float)) and value >= 0 else GRAPH_MARGIN

    def get_palette(self):
        """Palette colors; falls back to the default palette if the saved one is unusable"""
        colors = self.settings.get("palette")
        if (
            not isinstance(colors, list)
            or not colors
            or not all(isinstance(c, str) and _COLOR_RE.match(c) for c in colors)
        ):
            logging.warning("Invalid palette setting %r, using the default palette", colors)
            return list(DEFAULT_PALETTE)
        return colors

    def set_palette(self, colors):
        self.settings["palette"] = list(colors)
        self.save_settings()

    def get_window_size(self):
        return self.settings.get("window_size", [800, 600])

    def save_window_size(self, width, height):
        self.settings["window_size"] = [width, height]
        self.save_settings()


# Shared settings instance
settings = Settings()
