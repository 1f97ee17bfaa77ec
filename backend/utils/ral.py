# backend/utils/ral.py
"""Nearest RAL code for a hex colour, informational only."""
import math
import re
from typing import Optional

# Common RAL colours for window and door frames
RAL_COLORS = {
    "RAL 9010": "#F1EBD7",
    "RAL 9016": "#F1F0EA",
    "RAL 9001": "#E9E0D2",
    "RAL 1013": "#E3D9C6",
    "RAL 1015": "#E6D2B5",
    "RAL 7001": "#8C969D",
    "RAL 7004": "#9EA0A1",
    "RAL 7035": "#CBD0CC",
    "RAL 7040": "#9DA3A6",
    "RAL 7016": "#383E42",
    "RAL 7021": "#2E3234",
    "RAL 9007": "#878581",
    "RAL 8001": "#9D622B",
    "RAL 8003": "#7E4B26",
    "RAL 8004": "#8D4931",
    "RAL 8007": "#6F4A2F",
    "RAL 8011": "#5A3A29",
    "RAL 8014": "#49392D",
    "RAL 8017": "#442F29",
    "RAL 8019": "#3D3635",
    "RAL 1019": "#A48F7A",
    "RAL 1001": "#D1BC8A",
    "RAL 1002": "#D2AA6D",
    "RAL 9005": "#0E0E10",
    "RAL 9011": "#292C2F",
    "RAL 6005": "#114232",
    "RAL 6009": "#27352A",
    "RAL 6020": "#37422F",
    "RAL 5011": "#1A2B3C",
    "RAL 5013": "#1E2832",
}

HEX_PATTERN = re.compile(r"^#?([0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$")


def normalize_hex(hex_color: Optional[str]) -> Optional[str]:
    """'#fff' / 'FFFFFF' -> '#FFFFFF', None for anything that is not a hex colour."""
    if not hex_color:
        return None
    match = HEX_PATTERN.match(hex_color.strip())
    if not match:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return "#" + digits.upper()


def _rgb(hex_color: str):
    return tuple(int(hex_color[i:i + 2], 16) for i in (1, 3, 5))


def hex_to_ral(hex_color: Optional[str]) -> Optional[str]:
    normalized = normalize_hex(hex_color)
    if normalized is None:
        return None
    target = _rgb(normalized)
    return min(RAL_COLORS, key=lambda code: math.dist(target, _rgb(RAL_COLORS[code])))


def ral_to_hex(ral_code: str) -> Optional[str]:
    return RAL_COLORS.get(ral_code)
