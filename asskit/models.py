"""
Data models for ASSKit.

Defines the core data structures used throughout the package: the style
table entry, the timed caption event, the parsed document that owns them,
and the configuration objects for the editor, renderer and downloader.
"""

from dataclasses import dataclass, field, replace
from typing import List, Dict, Any, Optional, Tuple

from .tags import strip_tags, rebuild_text


@dataclass
class Style:
    """A named visual preset from the [V4+ Styles] table."""
    name: str = "Default"
    fontname: str = "Arial"
    fontsize: float = 48.0
    primary_colour: str = "&H00FFFFFF&"    # Main text color (BGR hex)
    secondary_colour: str = "&H0000FFFF&"  # Karaoke fill color
    outline_colour: str = "&H00000000&"
    back_colour: str = "&H00000000&"       # Shadow color
    bold: int = 0                          # -1 = true, 0 = false
    italic: int = 0
    underline: int = 0
    strike_out: int = 0
    scale_x: float = 100.0
    scale_y: float = 100.0
    spacing: float = 0.0
    angle: float = 0.0
    border_style: float = 1.0              # 1 = outline + drop shadow, 3 = opaque box
    outline: float = 2.0
    shadow: float = 0.0
    alignment: float = 2.0                 # 1-9 numpad layout
    margin_l: float = 10.0
    margin_r: float = 10.0
    margin_v: float = 10.0
    encoding: float = 1.0

    def with_overrides(self, overrides: Dict[str, Any]) -> "Style":
        """Return a copy with per-run override values merged on top."""
        if not overrides:
            return self
        return replace(self, **overrides)


@dataclass
class Caption:
    """
    One timed Dialogue event.

    ``plain_text`` is derived from ``text`` and is never assigned directly;
    go through :meth:`set_text` or :meth:`set_plain_text` so both stay in
    sync.
    """
    index: int = 0
    layer: int = 0
    start: float = 0.0
    end: float = 0.0
    style: str = "Default"
    name: str = ""
    margin_l: int = 0
    margin_r: int = 0
    margin_v: int = 0
    effect: str = ""
    text: str = ""
    plain_text: str = field(default="", init=False)

    def __post_init__(self):
        self.plain_text = strip_tags(self.text)

    @property
    def duration(self) -> float:
        return self.end - self.start

    def set_text(self, text: str) -> None:
        """Replace the raw tagged text and re-derive the plain view."""
        self.text = text
        self.plain_text = strip_tags(text)

    def set_plain_text(self, plain_text: str) -> None:
        """Apply an edit made against the plain view, rebuilding tags."""
        self.set_text(rebuild_text(plain_text, self.text))

    def copy(self, **changes: Any) -> "Caption":
        """Return an independent copy, re-deriving plain text."""
        return replace(self, **changes)


@dataclass
class ParsedDocument:
    """Represents a complete ASS document structure."""
    script_info: Dict[str, str] = field(default_factory=dict)
    styles: List[Style] = field(default_factory=list)
    captions: List[Caption] = field(default_factory=list)
    raw: str = ""

    def style_names(self) -> List[str]:
        return [style.name for style in self.styles]

    def find_style(self, name: str) -> Optional[Style]:
        for style in self.styles:
            if style.name == name:
                return style
        return None

    def default_style(self) -> Optional[Style]:
        return self.styles[0] if self.styles else None

    def play_res(self) -> Tuple[Optional[float], Optional[float]]:
        """Script coordinate space declared by PlayResX/PlayResY, if any."""
        return (
            _positive_number(self.script_info.get("PlayResX")),
            _positive_number(self.script_info.get("PlayResY")),
        )

    def reindex(self) -> None:
        for position, caption in enumerate(self.captions):
            caption.index = position

    def copy(self) -> "ParsedDocument":
        """Copy deep enough that editing the copy never touches this document."""
        return ParsedDocument(
            script_info=dict(self.script_info),
            styles=[replace(style) for style in self.styles],
            captions=[caption.copy() for caption in self.captions],
            raw=self.raw,
        )


@dataclass
class EditorConfig:
    """Configuration for caption editing operations."""
    min_gap: float = 0.1
    new_caption_duration: float = 1.0
    new_caption_lead: float = 0.5
    new_caption_text: str = "New caption"


@dataclass
class RenderConfig:
    """Configuration for layout and paint plan generation."""
    line_height_factor: float = 1.2
    default_alignment: int = 2
    nbsp_spaces: bool = True  # measure/draw spaces as U+00A0 so they keep their width


@dataclass
class DownloadConfig:
    """Configuration for ASS download operations."""
    url: str
    output_dir: str
    filename: Optional[str] = None
    timeout: int = 30
    verify_ssl: bool = True


def _positive_number(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None
