"""
Color parsing and WCAG contrast utilities.

Used to verify contrast pairs reported by the vision model and to derive
additional pairs from element colors.
"""

import re
from typing import Optional, Tuple


# Minimum ratio for normal text (WCAG AA)
AA_NORMAL_RATIO = 4.5
# Minimum ratio for large text (WCAG AA)
AA_LARGE_RATIO = 3.0

HEX_PATTERN = re.compile(r'^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$')
RGB_PATTERN = re.compile(
    r'^rgba?\s*\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})(?:\s*,\s*[\d.]+%?)?\s*\)$', re.I
)

# Named colors (subset of CSS named colors)
NAMED_COLORS = {
    'black': '#000000', 'white': '#ffffff', 'red': '#ff0000',
    'green': '#008000', 'blue': '#0000ff', 'yellow': '#ffff00',
    'gray': '#808080', 'grey': '#808080', 'silver': '#c0c0c0',
    'navy': '#000080', 'orange': '#ffa500', 'purple': '#800080',
    'lightgray': '#d3d3d3', 'lightgrey': '#d3d3d3',
    'darkgray': '#a9a9a9', 'darkgrey': '#a9a9a9',
}


def parse_color(value: Optional[str]) -> Optional[str]:
    """
    Normalize a CSS color to 6-digit lowercase hex.

    Args:
        value: Hex, rgb()/rgba() or a common named color

    Returns:
        "#rrggbb" or None when the value cannot be parsed
    """
    if not value or not isinstance(value, str):
        return None
    text = value.strip().lower()

    if text in NAMED_COLORS:
        return NAMED_COLORS[text]

    match = HEX_PATTERN.match(text)
    if match:
        hex_val = match.group(1)
        if len(hex_val) in (3, 4):
            # Expand short hex, dropping alpha
            hex_val = ''.join(c * 2 for c in hex_val[:3])
        return f"#{hex_val[:6]}"

    match = RGB_PATTERN.match(text)
    if match:
        r, g, b = (max(0, min(255, int(match.group(i)))) for i in (1, 2, 3))
        return f"#{r:02x}{g:02x}{b:02x}"

    return None


def _hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    hex_val = hex_color.lstrip('#')
    return tuple(int(hex_val[i:i + 2], 16) for i in (0, 2, 4))


def relative_luminance(hex_color: str) -> float:
    """WCAG relative luminance of a normalized hex color."""
    rgb_normalized = [c / 255 for c in _hex_to_rgb(hex_color)]
    rgb_linear = [
        c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4
        for c in rgb_normalized
    ]
    return 0.2126 * rgb_linear[0] + 0.7152 * rgb_linear[1] + 0.0722 * rgb_linear[2]


def contrast_ratio(foreground: str, background: str) -> Optional[float]:
    """
    Calculate the contrast ratio between two colors.

    Args:
        foreground: Foreground color in any format parse_color accepts
        background: Background color in any format parse_color accepts

    Returns:
        Ratio between 1.0 and 21.0 rounded to 2 decimals, or None if
        either color is unparsable
    """
    fg = parse_color(foreground)
    bg = parse_color(background)
    if fg is None or bg is None:
        return None

    l1 = relative_luminance(fg)
    l2 = relative_luminance(bg)
    lighter = max(l1, l2)
    darker = min(l1, l2)
    return round((lighter + 0.05) / (darker + 0.05), 2)


def wcag_level(ratio: float) -> str:
    """Classify a ratio: 'AAA' (>=7), 'AA' (>=4.5), 'AA-large' (>=3) or 'fail'."""
    if ratio >= 7.0:
        return "AAA"
    if ratio >= AA_NORMAL_RATIO:
        return "AA"
    if ratio >= AA_LARGE_RATIO:
        return "AA-large"
    return "fail"
