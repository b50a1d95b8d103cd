"""Scene preview renderer using Pillow — draws the current page to PNG."""

from __future__ import annotations

import math
from io import BytesIO
from pathlib import Path
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from .geometry import BoundingBox, get_absolute_bounding_box
from .models import FRAME, SECTION, SceneGraph, SceneNode


# --- Font handling ---

def _load_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Load a font, falling back to default if none available."""
    font_paths = [
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
        "/usr/share/fonts/truetype/freefont/FreeSans.ttf",
        "/usr/share/fonts/TTF/DejaVuSans.ttf",
    ]
    for fp in font_paths:
        if Path(fp).exists():
            return ImageFont.truetype(fp, size)
    return ImageFont.load_default()


# --- Color helpers ---

def _hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Convert hex color to RGB tuple. Supports both 3-char and 6-char hex."""
    hex_color = hex_color.lstrip("#")
    if len(hex_color) == 3:
        hex_color = hex_color[0]*2 + hex_color[1]*2 + hex_color[2]*2
    return tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))


def _hex_to_rgba(hex_color: str, alpha: int = 255) -> tuple[int, int, int, int]:
    """Convert hex color to RGBA tuple."""
    r, g, b = _hex_to_rgb(hex_color)
    return (r, g, b, alpha)


# --- Drawing helpers ---

def _dashed_line(draw, start, end, fill, width: int, dash: tuple[float, float]):
    """Draw a straight line as on/off segments of ``dash`` pixels."""
    (x1, y1), (x2, y2) = start, end
    length = math.hypot(x2 - x1, y2 - y1)
    if length == 0:
        return
    ux, uy = (x2 - x1) / length, (y2 - y1) / length
    on, off = dash
    pos = 0.0
    while pos < length:
        stop = min(pos + on, length)
        draw.line(
            [(x1 + ux * pos, y1 + uy * pos), (x1 + ux * stop, y1 + uy * stop)],
            fill=fill,
            width=width,
        )
        pos += on + off


# Catppuccin Mocha, as in the diagram renderer this project grew from
BACKGROUND = "#11111b"
SECTION_FILL = "#181825"
SECTION_BORDER = "#45475a"
SECTION_LABEL = "#a6adc8"
FRAME_FILL = "#313244"
SHAPE_FILL = "#89b4fa"
LOCKED_BORDER = "#6c7086"
SELECTION_BORDER = "#f38ba8"
LABEL_COLOR = "#cdd6f4"


class SceneRenderer:
    """Renders the current page of a SceneGraph to a PNG image."""

    PADDING = 40
    CORNER_RADIUS = 6
    LABEL_OFFSET = 4
    LOCKED_DASH = (6, 4)

    def __init__(self, scale: float = 1.0):
        self.scale = scale
        self.font_label = _load_font(max(8, int(12 * scale)))

    def render(self, graph: SceneGraph, output_path: Optional[str] = None) -> bytes:
        """Render the current page to PNG bytes. Optionally save to file."""
        page = graph.current_page
        selected = set(graph.selection)

        drawable: list[tuple[SceneNode, BoundingBox]] = []
        for node in page.walk():
            if node is page or not node.visible:
                continue
            box = get_absolute_bounding_box(node)
            if box is not None:
                drawable.append((node, box))

        min_x, min_y, max_x, max_y = self._calculate_bounds([box for _, box in drawable])
        img_width = max(1, int((max_x - min_x + 2 * self.PADDING) * self.scale))
        img_height = max(1, int((max_y - min_y + 2 * self.PADDING) * self.scale))

        img = Image.new("RGBA", (img_width, img_height), _hex_to_rgba(BACKGROUND))
        draw = ImageDraw.Draw(img, "RGBA")

        ox = -min_x + self.PADDING
        oy = -min_y + self.PADDING

        # Pre-order walk: containers are drawn before their children
        for node, box in drawable:
            self._draw_node(draw, node, box, ox, oy, node.id in selected)

        buf = BytesIO()
        img.save(buf, format="PNG")
        png = buf.getvalue()

        if output_path:
            Path(output_path).parent.mkdir(parents=True, exist_ok=True)
            Path(output_path).write_bytes(png)

        return png

    def _calculate_bounds(self, boxes: list[BoundingBox]) -> tuple[float, float, float, float]:
        if not boxes:
            return (0.0, 0.0, 0.0, 0.0)
        return (
            min(b.x for b in boxes),
            min(b.y for b in boxes),
            max(b.right for b in boxes),
            max(b.bottom for b in boxes),
        )

    def _draw_node(
        self,
        draw: ImageDraw.ImageDraw,
        node: SceneNode,
        box: BoundingBox,
        ox: float,
        oy: float,
        is_selected: bool,
    ):
        s = self.scale
        x1 = (box.x + ox) * s
        y1 = (box.y + oy) * s
        x2 = (box.right + ox) * s
        y2 = (box.bottom + oy) * s

        alpha = int(255 * max(0.0, min(1.0, node.opacity)))
        if node.type == SECTION:
            fill = _hex_to_rgba(node.fill or SECTION_FILL, min(alpha, 160))
            outline = SECTION_BORDER
        elif node.type == FRAME:
            fill = _hex_to_rgba(node.fill or FRAME_FILL, alpha)
            outline = SECTION_BORDER
        else:
            fill = _hex_to_rgba(node.fill or SHAPE_FILL, alpha)
            outline = None

        # Selection wins over the locked marking
        dashed = node.locked and not is_selected
        if is_selected:
            outline = SELECTION_BORDER
        elif dashed:
            outline = None

        line_width = max(1, int(2 * s))
        draw.rounded_rectangle(
            [x1, y1, x2, y2],
            radius=int(min(self.CORNER_RADIUS * s, (x2 - x1) / 2, (y2 - y1) / 2)),
            fill=fill,
            outline=outline,
            width=line_width if outline else 1,
        )
        if dashed:
            dash = (self.LOCKED_DASH[0] * s, self.LOCKED_DASH[1] * s)
            corners = [(x1, y1), (x2, y1), (x2, y2), (x1, y2)]
            for start, end in zip(corners, corners[1:] + corners[:1]):
                _dashed_line(draw, start, end, LOCKED_BORDER, line_width, dash)

        label_color = SECTION_LABEL if node.type == SECTION else LABEL_COLOR
        draw.text(
            (x1 + self.LABEL_OFFSET * s, y1 + self.LABEL_OFFSET * s),
            node.get_label(),
            fill=label_color,
            font=self.font_label,
        )
