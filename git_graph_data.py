# git_graph_data.py

from dataclasses import dataclass
from typing import Any, Optional

# Default lane colors, cycled by the palette cursor
DEFAULT_PALETTE = (
    "#00b0ff",  # Blue
    "#aa00ff",  # Purple
    "#ff0000",  # Red
    "#00ff00",  # Green
    "#ffaa00",  # Orange
    "#00aaaa",  # Cyan
)

# Extra horizontal room to the right of the last lane
GRAPH_MARGIN = 40

# Ref kinds, as shown by the ref labels
REF_HEAD = "head"
REF_TAG = "tag"
REF_REMOTE = "remote"
REF_BRANCH = "branch"


def classify_ref(ref: str) -> tuple[str, str]:
    """
    Splits one git decoration into (kind, display name):
    "HEAD -> main" is the checked out branch, "tag: v1.0" a tag,
    anything with a slash ("origin/main") a remote branch, the rest local branches.
    """
    ref = ref.strip()
    if ref.startswith("HEAD -> "):
        return REF_HEAD, ref[len("HEAD -> "):]
    if ref.startswith("tag: "):
        return REF_TAG, ref[len("tag: "):]
    if "/" in ref:
        return REF_REMOTE, ref
    return REF_BRANCH, ref


def _split_list(value: Any, separator: Optional[str]) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(separator) if part.strip())
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"Expected a list or a string, got {type(value).__name__}: {value!r}")
    return tuple(str(part) for part in value)


@dataclass(frozen=True)
class CommitRecord:
    """A commit as supplied by the commit feed. Read-only to the layout."""

    hash: str
    parents: tuple[str, ...] = ()
    author: str = ""
    email: str = ""
    date: str = ""
    refs: tuple[str, ...] = ()
    message: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "CommitRecord":
        """
        Builds a record from a JSON object.
        `parents` may be a list or a space separated string (git's %P),
        `refs` a list or a decoration string such as "HEAD -> main, tag: v1.0" (git's %D).
        """
        if not isinstance(data, dict):
            raise ValueError(f"Commit entry must be an object, got {type(data).__name__}")
        commit_hash = str(data.get("hash") or "").strip()
        if not commit_hash:
            raise ValueError(f"Commit entry without a hash: {data!r}")
        return cls(
            hash=commit_hash,
            parents=_split_list(data.get("parents"), None),
            author=str(data.get("author") or ""),
            email=str(data.get("email") or ""),
            date=str(data.get("date") or ""),
            refs=_split_list(data.get("refs"), ","),
            message=str(data.get("message") or ""),
        )

    def to_dict(self) -> dict:
        return {
            "hash": self.hash,
            "parents": list(self.parents),
            "author": self.author,
            "email": self.email,
            "date": self.date,
            "refs": list(self.refs),
            "message": self.message,
        }

    def __repr__(self) -> str:
        return f"CommitRecord(hash='{self.hash[:7]}', parents={[p[:7] for p in self.parents]}, message='{self.message[:20]}')"


@dataclass(frozen=True)
class Lane:
    """One unresolved ancestor line, waiting for the commit whose hash is `id`."""

    id: str
    color: str


@dataclass(frozen=True)
class Row:
    """Lane state around one commit: above it (input), below it (output), and its resolved color."""

    commit: CommitRecord
    color: str
    input_lanes: tuple[Lane, ...]
    output_lanes: tuple[Lane, ...]
    node_column: int
    # Output index of the lane the first parent continues in, None when the commit has no parent
    continuation_column: Optional[int] = None

    @property
    def matched(self) -> bool:
        return self.node_column < len(self.input_lanes)

    @property
    def continues(self) -> bool:
        return self.continuation_column is not None

    def output_column(self, lane_id: str) -> Optional[int]:
        for index, lane in enumerate(self.output_lanes):
            if lane.id == lane_id:
                return index
        return None


class Palette:
    """Fixed, ordered list of colors picked by a cursor that wraps around."""

    def __init__(self, colors=DEFAULT_PALETTE):
        self.colors: tuple[str, ...] = tuple(colors)
        if not self.colors:
            raise ValueError("Palette needs at least one color")

    def color_at(self, cursor: int) -> str:
        return self.colors[cursor % len(self.colors)]

    def __len__(self) -> int:
        return len(self.colors)

    def __repr__(self) -> str:
        return f"Palette({list(self.colors)})"


@dataclass(frozen=True)
class GraphLayout:
    rows: tuple[Row, ...] = ()
    max_lanes: int = 0
    colors_allocated: int = 0  # final palette cursor value

    def total_width(self, lane_width: float, margin: float = GRAPH_MARGIN) -> float:
        return self.max_lanes * lane_width + margin

    def total_height(self, row_height: float, overrides: Optional[dict[str, float]] = None) -> float:
        """Sum of row heights; `overrides` maps commit hash to a locally expanded height."""
        if not overrides:
            return len(self.rows) * row_height
        return sum(overrides.get(row.commit.hash, row_height) for row in self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def row_for(self, commit_hash: str) -> Optional[Row]:
        return next((row for row in self.rows if row.commit.hash == commit_hash), None)

