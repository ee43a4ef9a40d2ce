"""
Shared utility functions for ASSKit.

Provides common utilities used across multiple modules, primarily
timecode conversion at centisecond resolution and BGR color handling.
"""

import re
from typing import Dict, Tuple

_TIMESTAMP_PATTERN = re.compile(r'^\s*(\d+):(\d{1,2}):(\d{1,2})(?:\.(\d{1,3}))?\s*$')
_COLOR_PATTERN = re.compile(r'^&H([0-9A-Fa-f]{1,8})&?$')

# Rough average glyph advance relative to font size
AVERAGE_CHAR_WIDTH = 0.55
SPACE_CHAR_WIDTH = 0.3


def timestamp_to_seconds(timestamp: str) -> float:
    """
    Convert H:MM:SS.CC format to seconds.

    Any number of hour digits is accepted. The fractional part is read as
    hundredths; a three-digit fraction is rounded to centiseconds.

    Args:
        timestamp: Timestamp string in H:MM:SS.CC format

    Returns:
        Time in seconds as float, rounded to centiseconds

    Raises:
        ValueError: If the timestamp is malformed

    Example:
        >>> timestamp_to_seconds("0:01:30.50")
        90.5
    """
    match = _TIMESTAMP_PATTERN.match(timestamp or '')
    if not match:
        raise ValueError(f"Invalid timestamp: {timestamp!r}")

    hours, minutes, seconds, fraction = match.groups()
    fraction = fraction or '0'
    if len(fraction) == 3:
        centiseconds = round(int(fraction) / 10)
    else:
        centiseconds = int(fraction.ljust(2, '0'))

    total_cs = ((int(hours) * 3600 + int(minutes) * 60 + int(seconds)) * 100) + centiseconds
    return round(total_cs / 100, 2)


def seconds_to_timestamp(seconds: float) -> str:
    """
    Convert seconds to H:MM:SS.CC format.

    Rounds to the nearest centisecond so that float noise (0.29 stored as
    0.28999...) does not lose a centisecond. Negative values clamp to zero.

    Args:
        seconds: Time in seconds as float

    Returns:
        Timestamp string in H:MM:SS.CC format

    Example:
        >>> seconds_to_timestamp(3661.23)
        '1:01:01.23'
    """
    total_cs = max(0, int(round(seconds * 100)))
    total_seconds, centiseconds = divmod(total_cs, 100)
    total_minutes, secs = divmod(total_seconds, 60)
    hours, minutes = divmod(total_minutes, 60)

    return f"{hours}:{minutes:02d}:{secs:02d}.{centiseconds:02d}"


def round_to_centisecond(seconds: float) -> float:
    """Round a time value to the format's native precision."""
    return round(seconds * 100) / 100


def calculate_karaoke_duration(start: float, end: float) -> int:
    """
    Calculate karaoke duration in centiseconds for a \\k tag.

    Example:
        >>> calculate_karaoke_duration(1.5, 2.0)
        50
    """
    return int(round((end - start) * 100))


def format_number(value: float) -> str:
    """Format a numeric field the way ASS files write them (no trailing .0)."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def rgb_to_bgr(r: int, g: int, b: int, alpha: int = 0) -> str:
    """
    Convert RGB color to the ASS BGR hex format.

    ASS uses &HAABBGGRR& (reversed from RGB), alpha 0 is opaque.

    Example:
        >>> rgb_to_bgr(255, 255, 0)
        '&H0000FFFF&'
    """
    return f"&H{alpha:02X}{b:02X}{g:02X}{r:02X}&"


def bgr_to_rgb(bgr_hex: str) -> Dict[str, int]:
    """
    Convert an ASS BGR hex color to RGB components.

    Accepts the style form (&HAABBGGRR&) and the shorter inline override
    form (&HBBGGRR&), which carries no alpha.

    Args:
        bgr_hex: BGR hex string (e.g., "&H0000FFFF&")

    Returns:
        Dictionary with 'r', 'g', 'b' and 'alpha' keys

    Raises:
        ValueError: If the color string is malformed
    """
    match = _COLOR_PATTERN.match((bgr_hex or '').strip())
    if not match:
        raise ValueError(f"Invalid ASS color: {bgr_hex!r}")

    digits = match.group(1).upper().rjust(8, '0')
    return {
        "alpha": int(digits[0:2], 16),
        "b": int(digits[2:4], 16),
        "g": int(digits[4:6], 16),
        "r": int(digits[6:8], 16),
    }


def color_to_rgba(bgr_hex: str) -> str:
    """
    Convert an ASS color into a CSS-style rgba() string for 2D contexts.

    Example:
        >>> color_to_rgba("&H80000000&")
        'rgba(0, 0, 0, 0.498)'
    """
    components = bgr_to_rgb(bgr_hex)
    opacity = round(1 - components["alpha"] / 255, 3)
    return f"rgba({components['r']}, {components['g']}, {components['b']}, {opacity:g})"


def estimate_text_width(text: str, font_size: float) -> float:
    """
    Estimate rendered text width from character count.

    Backs the render engine's opt-in ``estimate_measure`` for hosts that
    want fixed widths without font files. Spaces (regular and non-breaking)
    advance less than glyphs.

    Args:
        text: Text to measure
        font_size: Font size in pixels

    Returns:
        Estimated width in pixels
    """
    spaces = sum(1 for char in text if char in (' ', '\u00a0'))
    glyphs = len(text) - spaces
    return (glyphs * AVERAGE_CHAR_WIDTH + spaces * SPACE_CHAR_WIDTH) * font_size


def numpad_alignment(alignment: int) -> Tuple[str, str]:
    """
    Split a numpad alignment code into (row, column).

    Rows are 'bottom' (1-3), 'middle' (4-6) and 'top' (7-9); columns are
    'left', 'center' and 'right'. Out-of-range codes fall back to 2.
    """
    code = int(alignment) if 1 <= int(alignment) <= 9 else 2
    row = ('bottom', 'middle', 'top')[(code - 1) // 3]
    column = ('left', 'center', 'right')[(code - 1) % 3]
    return row, column
