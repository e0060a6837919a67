"""
color_service.py — Chart colors and labels.

Study types have fixed colors. Courses are open-ended, so they take colors
from BASE_PALETTE in list order; past the end of the palette, lightened and
darkened variants of the base colors are generated (HSL lightness shifts,
alternating lighten/darken passes). Every color is a pure function of the
palette and the position, so the same ordered course list always gets the
same colors.
"""

import colorsys
import math

from studytracker.config import LABEL_MAX_LENGTH

BASE_PALETTE = [
    "#8b5cf6",  # violet
    "#3b82f6",  # blue
    "#10b981",  # emerald
    "#f97316",  # orange
    "#ec4899",  # pink
    "#eab308",  # yellow
    "#06b6d4",  # cyan
    "#ef4444",  # red
    "#84cc16",  # lime
    "#6366f1",  # indigo
]

STUDY_TYPE_COLORS = {
    "video": "#a855f7",
    "reading": "#3b82f6",
    "coding": "#10b981",
    "review": "#f97316",
    "other": "#6b7280",
}

STUDY_TYPE_LABELS = {
    "video": "Video",
    "reading": "Reading",
    "coding": "Coding",
    "review": "Review",
    "other": "Other",
}

FALLBACK_COLOR = "#6b7280"
LIGHTNESS_STEP = 15  # percent per pass
ELLIPSIS = "…"


# ------------------------------------------------------------------
def hex_to_hsl(hex_color: str) -> tuple[float, float, float]:
    """'#rrggbb' -> (hue 0-360, saturation 0-100, lightness 0-100)."""
    value = hex_color.lstrip("#")
    if len(value) == 3:
        value = "".join(c * 2 for c in value)
    r, g, b = (int(value[i:i + 2], 16) / 255.0 for i in (0, 2, 4))
    h, l, s = colorsys.rgb_to_hls(r, g, b)
    return h * 360.0, s * 100.0, l * 100.0


def hsl_to_hex(h: float, s: float, l: float) -> str:
    r, g, b = colorsys.hls_to_rgb((h % 360) / 360.0, l / 100.0, s / 100.0)
    return "#{:02x}{:02x}{:02x}".format(*(int(round(c * 255)) for c in (r, g, b)))


def adjust_lightness(hex_color: str, amount: float) -> str:
    """Shift lightness by `amount` percentage points (negative darkens), clamped to 0-100."""
    h, s, l = hex_to_hsl(hex_color)
    return hsl_to_hex(h, s, min(100.0, max(0.0, l + amount)))


# ------------------------------------------------------------------
def color_at(index: int, base: list[str] = BASE_PALETTE, step: float = LIGHTNESS_STEP) -> str:
    """
    Color for position `index`. Pass 0 is the base palette itself; odd passes
    lighten and even passes darken, each pair going one step further.
    """
    if not base:
        return FALLBACK_COLOR
    size = len(base)
    pass_no, offset = divmod(index, size)
    color = base[offset]
    if pass_no == 0:
        return color
    amount = step * math.ceil(pass_no / 2)
    if pass_no % 2 == 0:
        amount = -amount
    return adjust_lightness(color, amount)


def generate_palette(count: int, base: list[str] = BASE_PALETTE) -> list[str]:
    """Exactly `count` colors: the base palette first, then generated variants."""
    return [color_at(i, base) for i in range(max(0, count))]


def derive_color(category_id: str, ordered_ids: list[str], base: list[str] = BASE_PALETTE) -> str:
    """Color for one category given the ordered list of every category on screen."""
    try:
        return color_at(ordered_ids.index(category_id), base)
    except ValueError:
        return FALLBACK_COLOR


def assign_colors(ordered_ids: list[str], base: list[str] = BASE_PALETTE) -> dict[str, str]:
    palette = generate_palette(len(ordered_ids), base)
    return dict(zip(ordered_ids, palette))


def study_type_color(study_type: str) -> str:
    return STUDY_TYPE_COLORS.get(study_type, FALLBACK_COLOR)


# ------------------------------------------------------------------
def truncate_label(name: str, max_length: int = LABEL_MAX_LENGTH) -> str:
    """Shorten long names to at most `max_length` characters, ending in an ellipsis."""
    if name is None:
        return ""
    if max_length <= 0:
        return ""
    if len(name) <= max_length:
        return name
    if max_length == 1:
        return ELLIPSIS
    return name[:max_length - 1].rstrip() + ELLIPSIS
