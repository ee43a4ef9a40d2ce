"""
ASSKit - ASS (Advanced SubStation Alpha) Caption Toolkit

A library for loading, editing, previewing and saving ASS subtitle
documents with karaoke word highlighting.

Features:
- Parse and serialize [Script Info], [V4+ Styles] and [Events]
- Read and rewrite inline override tags (\\an, \\pos, \\k, \\fs, \\c)
- Edit captions through a pure state machine (add, split, merge, retime)
- Lay out and paint the active caption with progressive karaoke fill
- Platform style presets (TikTok, Instagram, YouTube)

Example usage:
    >>> from asskit import ASSParser, EditorState, Select, SplitCaption, apply, render_frame
    >>>
    >>> # Load a document
    >>> parser = ASSParser()
    >>> document = parser.parse_file("captions.ass")
    >>>
    >>> # Select the first caption and split it at 1.5s
    >>> state = EditorState.load(document, duration=30.0)
    >>> state = apply(state, Select(0))
    >>> state = apply(state, SplitCaption(at_time=1.5))
    >>>
    >>> # Paint plan for the frame at 1.2s on a 1280x720 canvas
    >>> plan = render_frame(state.document, 1.2, (1280, 720))
    >>>
    >>> parser.save(state.document, "captions.edited.ass")
"""

import logging

__version__ = "0.1.0"
__author__ = "ASSKit Contributors"
__license__ = "MIT"

# Add NullHandler to prevent "No handler found" warnings
# Users should configure logging in their application if they want to see logs
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Core utility functions
from .utils import (
    timestamp_to_seconds,
    seconds_to_timestamp,
    round_to_centisecond,
    calculate_karaoke_duration,
    rgb_to_bgr,
    bgr_to_rgb,
    color_to_rgba,
    estimate_text_width,
    numpad_alignment,
)

# Errors
from .errors import ASSError, ParseError, ValidationError, EmptyTableError

# Override tags
from .tags import (
    strip_tags,
    ass_text_to_plain,
    parse_runs,
    split_runs_into_lines,
    extract_overrides,
    rebuild_text,
    set_overrides,
    Run,
    ParsedRuns,
    ScriptOverrides,
)

# Document parsing and serialization
from .document import (
    parse_ass_content,
    serialize_ass,
    validate_document,
    check_document,
    get_caption_at_time,
    sort_captions_by_time,
    get_total_duration,
    ASSParser,
)

# Editing state machine
from .editor import (
    EditorState,
    apply,
    clamp_timing,
    screen_to_script,
    selected_caption,
    selected_overrides,
    current_caption_index,
    effective_duration,
    Load,
    Select,
    AddCaption,
    DeleteCaption,
    SplitCaption,
    MergeCaption,
    Retime,
    MoveCaption,
    UpdateText,
    SetOverrides,
    UNCHANGED,
    SetStyleField,
    SetCurrentTime,
    SetDuration,
    SetPlaying,
    MarkClean,
)

# Render engine
from .render import (
    resolve,
    layout,
    paint_plan,
    highlighted_runs,
    render_frame,
    replay,
    ActiveCaption,
    BlockLayout,
    FontSpec,
    PillowMeasure,
    estimate_measure,
)

# Presets
from .presets import ASSColors, ASS_PRESETS, PresetInfo, get_preset, get_default_preset, format_style_line

# Data models
from .models import Style, Caption, ParsedDocument, EditorConfig, RenderConfig, DownloadConfig

# Downloads
from .downloader import ASSDownloader, download_ass_content

__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__license__",

    # Time and color utilities
    "timestamp_to_seconds",
    "seconds_to_timestamp",
    "round_to_centisecond",
    "calculate_karaoke_duration",
    "rgb_to_bgr",
    "bgr_to_rgb",
    "color_to_rgba",
    "estimate_text_width",
    "numpad_alignment",

    # Errors
    "ASSError",
    "ParseError",
    "ValidationError",
    "EmptyTableError",

    # Override tags
    "strip_tags",
    "ass_text_to_plain",
    "parse_runs",
    "split_runs_into_lines",
    "extract_overrides",
    "rebuild_text",
    "set_overrides",
    "Run",
    "ParsedRuns",
    "ScriptOverrides",

    # Core document functions
    "parse_ass_content",
    "serialize_ass",
    "validate_document",
    "check_document",
    "get_caption_at_time",
    "sort_captions_by_time",
    "get_total_duration",

    # Main classes
    "ASSParser",
    "ASSDownloader",
    "EditorState",

    # Editing
    "apply",
    "clamp_timing",
    "screen_to_script",
    "selected_caption",
    "selected_overrides",
    "current_caption_index",
    "effective_duration",
    "Load",
    "Select",
    "AddCaption",
    "DeleteCaption",
    "SplitCaption",
    "MergeCaption",
    "Retime",
    "MoveCaption",
    "UpdateText",
    "SetOverrides",
    "UNCHANGED",
    "SetStyleField",
    "SetCurrentTime",
    "SetDuration",
    "SetPlaying",
    "MarkClean",

    # Rendering
    "resolve",
    "layout",
    "paint_plan",
    "highlighted_runs",
    "render_frame",
    "replay",
    "ActiveCaption",
    "BlockLayout",
    "FontSpec",
    "PillowMeasure",
    "estimate_measure",

    # Presets
    "ASSColors",
    "ASS_PRESETS",
    "PresetInfo",
    "get_preset",
    "get_default_preset",
    "format_style_line",

    # Models
    "Style",
    "Caption",
    "ParsedDocument",
    "EditorConfig",
    "RenderConfig",
    "DownloadConfig",

    # Downloads
    "download_ass_content",
]
