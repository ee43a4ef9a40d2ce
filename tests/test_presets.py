import pytest

from asskit import parse_ass_content
from asskit.presets import (
    ASSColors,
    ASS_PRESETS,
    TIKTOK,
    YOUTUBE,
    FOCUS,
    get_preset,
    get_default_preset,
    format_style_line,
)


def test_color_constants_are_bgr():
    assert ASSColors.YELLOW == "&H0000FFFF&"
    assert ASSColors.CYAN == "&H00FFFF00&"
    assert ASSColors.TIKTOK_YELLOW == "&H0040DDFE&"


def test_get_preset():
    preset = get_preset("tiktok")
    assert preset.name == "TikTok"
    assert preset.style == TIKTOK
    assert preset.focus_style == FOCUS
    assert get_preset("youtube").style.border_style == 3


def test_get_preset_unknown_lists_available():
    with pytest.raises(ValueError, match="Available: tiktok, instagram, youtube"):
        get_preset("snapchat")


def test_default_preset_is_tiktok():
    assert get_default_preset() is ASS_PRESETS["tiktok"]


def test_preset_styles_are_copies():
    styles = get_preset("tiktok").styles()
    assert [style.name for style in styles] == ["TikTok", "Focus"]
    styles[0].fontsize = 10
    assert TIKTOK.fontsize == 60


def test_preset_style_attribute_is_a_copy():
    preset = get_preset("tiktok")
    style = preset.style
    assert style is not TIKTOK
    style.fontsize = 10
    preset.focus_style.outline = 0
    assert preset.style.fontsize == 60
    assert TIKTOK.fontsize == 60
    assert FOCUS.outline == 5
    assert get_preset("youtube").focus_style is None


def test_format_style_line():
    line = format_style_line(YOUTUBE)
    assert line == (
        "Style: YouTube,Arial,42,&H00FFFFFF&,&H00FFFFFF&,&H00000000&,&HB4000000&,"
        "0,0,0,0,100,100,0,0,3,0,0,2,30,30,30,1"
    )


def test_preset_style_lines_parse_back():
    content = "\n".join([
        "[V4+ Styles]",
        "Format: Name, Fontname, Fontsize, PrimaryColour, SecondaryColour, OutlineColour, BackColour, "
        "Bold, Italic, Underline, StrikeOut, ScaleX, ScaleY, Spacing, Angle, BorderStyle, Outline, "
        "Shadow, Alignment, MarginL, MarginR, MarginV, Encoding",
        format_style_line(TIKTOK),
        format_style_line(FOCUS),
        "",
        "[Events]",
        "Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text",
        "Dialogue: 0,0:00:00.00,0:00:01.00,TikTok,,0,0,0,,{\\k50}Go",
    ])
    document = parse_ass_content(content)
    assert document.styles[0] == TIKTOK
    assert document.styles[1] == FOCUS
