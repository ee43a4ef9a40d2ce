"""
Platform caption style presets.

Ready-made styles for short-form video platforms, with karaoke fill colors
chosen per platform. Colors are ASS BGR hex (&HAABBGGRR&), not RGB.
"""

from dataclasses import dataclass, replace
from typing import Dict, List, Optional

from .document.schema import STYLE_SCHEMA, encode_fields
from .models import Style
from .utils import rgb_to_bgr


class ASSColors:
    """Predefined colors in ASS BGR format."""

    # Basic colors
    WHITE = rgb_to_bgr(255, 255, 255)
    BLACK = rgb_to_bgr(0, 0, 0)
    RED = rgb_to_bgr(255, 0, 0)
    GREEN = rgb_to_bgr(0, 255, 0)
    BLUE = rgb_to_bgr(0, 0, 255)
    YELLOW = rgb_to_bgr(255, 255, 0)
    CYAN = rgb_to_bgr(0, 255, 255)
    MAGENTA = rgb_to_bgr(255, 0, 255)

    # TikTok brand colors
    TIKTOK_YELLOW = rgb_to_bgr(254, 221, 64)
    TIKTOK_PINK = rgb_to_bgr(254, 44, 85)
    TIKTOK_CYAN = rgb_to_bgr(37, 244, 238)

    # Instagram brand colors
    INSTAGRAM_PURPLE = rgb_to_bgr(193, 53, 132)
    INSTAGRAM_ORANGE = rgb_to_bgr(253, 87, 48)

    # Subtle colors
    LIGHT_GRAY = rgb_to_bgr(200, 200, 200)
    DARK_GRAY = rgb_to_bgr(50, 50, 50)
    OFF_WHITE = rgb_to_bgr(245, 245, 245)


# Impact, white text filling yellow as words are spoken
TIKTOK = Style(
    name="TikTok",
    fontname="Impact",
    fontsize=60,
    primary_colour=ASSColors.WHITE,
    secondary_colour=ASSColors.TIKTOK_YELLOW,
    outline_colour=ASSColors.BLACK,
    back_colour=rgb_to_bgr(0, 0, 0, 128),
    bold=-1,
    border_style=1,
    outline=4,
    shadow=2,
    alignment=2,
    margin_l=50,
    margin_r=50,
    margin_v=50,
)

INSTAGRAM = Style(
    name="Instagram",
    fontname="Helvetica Neue",
    fontsize=48,
    primary_colour=ASSColors.WHITE,
    secondary_colour=ASSColors.OFF_WHITE,
    outline_colour=ASSColors.DARK_GRAY,
    back_colour=rgb_to_bgr(0, 0, 0, 100),
    bold=0,
    border_style=1,
    outline=2,
    shadow=1,
    alignment=2,
    margin_l=40,
    margin_r=40,
    margin_v=40,
)

# Opaque box, no karaoke fill
YOUTUBE = Style(
    name="YouTube",
    fontname="Arial",
    fontsize=42,
    primary_colour=ASSColors.WHITE,
    secondary_colour=ASSColors.WHITE,
    outline_colour=ASSColors.BLACK,
    back_colour=rgb_to_bgr(0, 0, 0, 180),
    bold=0,
    border_style=3,
    outline=0,
    shadow=0,
    alignment=2,
    margin_l=30,
    margin_r=30,
    margin_v=30,
)

# Emphasis style for highlighted focus words
FOCUS = Style(
    name="Focus",
    fontname="Impact",
    fontsize=70,
    primary_colour=ASSColors.CYAN,
    secondary_colour=ASSColors.TIKTOK_CYAN,
    outline_colour=ASSColors.BLACK,
    back_colour=rgb_to_bgr(0, 0, 0, 150),
    bold=-1,
    spacing=2,
    border_style=1,
    outline=5,
    shadow=3,
    alignment=2,
    margin_l=50,
    margin_r=50,
    margin_v=60,
)


@dataclass(frozen=True)
class PresetInfo:
    """
    Preset metadata.

    ``style`` and ``focus_style`` hand out copies of the preset's templates,
    so callers can tweak or add them to a document freely.
    """
    id: str
    name: str
    description: str
    template: Style
    focus_template: Optional[Style] = None

    @property
    def style(self) -> Style:
        return replace(self.template)

    @property
    def focus_style(self) -> Optional[Style]:
        return replace(self.focus_template) if self.focus_template is not None else None

    def styles(self) -> List[Style]:
        """Fresh copies of the preset's styles, safe to add to a document."""
        styles = [self.style]
        if self.focus_template is not None:
            styles.append(self.focus_style)
        return styles


ASS_PRESETS: Dict[str, PresetInfo] = {
    "tiktok": PresetInfo(
        id="tiktok",
        name="TikTok",
        description="Bold yellow highlighting with Impact font (viral style)",
        template=TIKTOK,
        focus_template=FOCUS,
    ),
    "instagram": PresetInfo(
        id="instagram",
        name="Instagram",
        description="Clean white text with subtle outline (stories style)",
        template=INSTAGRAM,
    ),
    "youtube": PresetInfo(
        id="youtube",
        name="YouTube",
        description="Standard readable captions (accessibility focused)",
        template=YOUTUBE,
    ),
}


def get_preset(preset_id: str) -> PresetInfo:
    """
    Get preset by ID.

    Raises:
        ValueError: If no preset has that ID
    """
    preset = ASS_PRESETS.get(preset_id)
    if preset is None:
        raise ValueError(f"Unknown preset: {preset_id}. Available: {', '.join(ASS_PRESETS)}")
    return preset


def get_default_preset() -> PresetInfo:
    return ASS_PRESETS["tiktok"]


def format_style_line(style: Style) -> str:
    """
    Format a style as a [V4+ Styles] line.

    Example:
        >>> format_style_line(YOUTUBE)[:35]
        'Style: YouTube,Arial,42,&H00FFFFFF&'
    """
    return "Style: " + encode_fields(style, STYLE_SCHEMA)
