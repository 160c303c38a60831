"""Aspect-ratio lookup tables per image vendor and model family.

Model families support different discrete size sets, so a requested ratio
is looked up in the family's table. A ratio the family does not support
falls back to the nearest supported one (by log-ratio distance; ties go to
the entry listed first). Unparseable ratios get the first entry.
"""

from __future__ import annotations

import logging
import math
import re

logger = logging.getLogger(__name__)

# vendor -> [(model-id substring, supported values)], first match wins, "" is the default.
# Values are either "WxH" pixel sizes or "W:H" ratio strings, as each vendor expects.
SIZE_TABLES: dict[str, list[tuple[str, tuple[str, ...]]]] = {
    "openai": [
        ("dall-e-3", ("1024x1024", "1792x1024", "1024x1792")),
        ("dall-e-2", ("1024x1024",)),
        ("gpt-image", ("1024x1024", "1536x1024", "1024x1536")),
        ("", ("1024x1024", "1536x1024", "1024x1536")),
    ],
    "google": [
        ("imagen", ("1:1", "3:4", "4:3", "9:16", "16:9")),
        ("", ("1:1", "2:3", "3:2", "3:4", "4:3", "4:5", "5:4", "9:16", "16:9", "21:9")),
    ],
    "xai": [
        ("grok-imagine", ("1:1", "16:9", "9:16", "4:3", "3:4", "3:2", "2:3")),
        ("", ()),
    ],
    "openrouter": [
        ("gemini", ("1:1", "2:3", "3:2", "3:4", "4:3", "4:5", "5:4", "9:16", "16:9", "21:9")),
        ("", ()),
    ],
}

_RATIO = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*[:x]\s*(\d+(?:\.\d+)?)\s*$")


def parse_ratio(value: str) -> float | None:
    """``"16:9"`` or ``"1792x1024"`` to width/height; None if unparseable."""
    match = _RATIO.match(value or "")
    if not match:
        return None
    width, height = float(match.group(1)), float(match.group(2))
    if width <= 0 or height <= 0:
        return None
    return width / height


def dimensions(size: str | None) -> tuple[int, int] | None:
    """Pixel dimensions of a ``"WxH"`` size."""
    if not size or "x" not in size:
        return None
    width, _, height = size.partition("x")
    try:
        return int(width), int(height)
    except ValueError:
        return None


def family_sizes(vendor: str, model_id: str) -> tuple[str, ...]:
    model_id = model_id.lower()
    for marker, sizes in SIZE_TABLES.get(vendor, []):
        if marker in model_id:
            return sizes
    return ()


def resolve_size(vendor: str, model_id: str, aspect_ratio: str) -> str | None:
    """Vendor size value for ``aspect_ratio``, or None if the family has no size control."""
    sizes = family_sizes(vendor, model_id)
    if not sizes:
        return None
    if aspect_ratio in sizes:
        return aspect_ratio

    requested = parse_ratio(aspect_ratio)
    if requested is None:
        logger.warning(f"Unparseable aspect ratio {aspect_ratio!r}, using {sizes[0]}")
        return sizes[0]

    best = min(sizes, key=lambda size: abs(math.log(parse_ratio(size) / requested)))
    if parse_ratio(best) != requested:
        logger.info(f"{vendor}/{model_id} does not support {aspect_ratio}, using nearest {best}")
    return best
