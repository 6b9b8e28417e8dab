# git_graph_svg.py

from typing import Optional
from xml.sax.saxutils import escape, quoteattr

from git_graph_data import GRAPH_MARGIN, GraphLayout
from git_graph_geometry import CORNER_RADIUS, STROKE_WIDTH, RowGeometry, build_row_geometry, fmt_number


def _row_elements(geometry: RowGeometry, top: float, title: str) -> tuple[list[str], str]:
    links = []
    for segment in geometry.segments:
        links.append(
            f'<path d="{segment.svg_path()}" stroke="{segment.color}" stroke-width="{STROKE_WIDTH}" fill="none"/>'
        )
    node = (
        f'<circle cx="{fmt_number(geometry.node_x)}" cy="{fmt_number(geometry.node_y)}" r="{fmt_number(geometry.node_radius)}" '
        f'fill="{geometry.node_color}" stroke="none"><title>{escape(title)}</title></circle>'
    )
    translate = f'transform="translate(0,{fmt_number(top)})"'
    return [f"<g {translate}>{link}</g>" for link in links], f"<g {translate}>{node}</g>"


def render_svg(
    layout: GraphLayout,
    row_height: float = 24,
    lane_width: float = 20,
    row_heights: Optional[dict[str, float]] = None,
    corner_radius: float = CORNER_RADIUS,
    margin: float = GRAPH_MARGIN,
) -> str:
    """
    Stacks every row's geometry into one standalone SVG document.
    Links are drawn first so commit nodes sit on top of them.
    `row_heights` maps a commit hash to an expanded height for that row only.
    """
    row_heights = row_heights or {}
    width = layout.total_width(lane_width, margin)
    height = layout.total_height(row_height, row_heights)

    links: list[str] = []
    nodes: list[str] = []
    top = 0.0
    for row in layout.rows:
        height_for_row = row_heights.get(row.commit.hash, row_height)
        geometry = build_row_geometry(row, height_for_row, lane_width, corner_radius)
        commit = row.commit
        title = f"{commit.hash[:7]} {commit.author} {commit.date}\n{commit.message}".strip()
        row_links, node = _row_elements(geometry, top, title)
        links.extend(row_links)
        nodes.append(node)
        top += height_for_row

    lines = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width={quoteattr(fmt_number(width))} height={quoteattr(fmt_number(height))} '
        f'viewBox="0 0 {fmt_number(width)} {fmt_number(height)}">',
        '<g class="links">',
        *links,
        "</g>",
        '<g class="nodes">',
        *nodes,
        "</g>",
        "</svg>",
    ]
    return "\n".join(lines) + "\n"


def write_svg(path: str, layout: GraphLayout, **kwargs) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(render_svg(layout, **kwargs))
