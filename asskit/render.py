"""
Karaoke render engine for caption previews.

Reproduces the ASS compositor's layout for the caption under the playhead:
numpad alignment, margins or an explicit \\pos anchor, per-run style
overrides, and progressive karaoke highlighting. The output is a paint plan
(a list of drawing operations), not pixels; :func:`replay` draws a plan onto
any 2D context the host hands over.

Each run is painted shadow first, then outline stroke, then fill, which is
the layering native ASS renderers use.

Pipeline per frame:
    resolve(document, time) -> ActiveCaption
    layout(active, canvas_size) -> BlockLayout
    paint_plan(layout, elapsed_cs) -> List[PaintOp]
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, Union

from PIL import ImageFont

from .models import Caption, ParsedDocument, RenderConfig, Style
from .tags import Run, parse_runs, split_runs_into_lines
from .utils import color_to_rgba, estimate_text_width, numpad_alignment

logger = logging.getLogger(__name__)

NBSP = '\u00a0'
_FALLBACK_COLOR = "rgba(255, 255, 255, 1)"


@dataclass(frozen=True)
class FontSpec:
    """Font settings for one run, already scaled to canvas pixels."""
    family: str
    size: float
    bold: bool = False
    italic: bool = False

    @property
    def css(self) -> str:
        weight = "bold" if self.bold else "normal"
        slant = "italic" if self.italic else "normal"
        return f"{slant} {weight} {self.size:g}px {self.family or 'sans-serif'}"


Measure = Callable[[str, FontSpec], float]


class PillowMeasure:
    """
    Measure run widths with Pillow's FreeType font metrics.

    Fonts are looked up by family name, first in ``font_paths`` and then
    through Pillow's own font search. A family that cannot be found is
    measured with Pillow's bundled default font at the requested size.

    Args:
        font_paths: Optional mapping of family name to a font file path
    """

    def __init__(self, font_paths: Optional[Dict[str, str]] = None):
        self.font_paths = dict(font_paths or {})
        self._fonts: Dict[Tuple[str, float], Any] = {}

    def _candidates(self, family: str) -> List[str]:
        candidates = []
        if family in self.font_paths:
            candidates.append(self.font_paths[family])
        if family:
            candidates.extend([family, family.replace(" ", "")])
        return candidates

    def font(self, spec: FontSpec):
        size = max(spec.size, 1.0)
        key = (spec.family, size)
        if key in self._fonts:
            return self._fonts[key]

        loaded = None
        for candidate in self._candidates(spec.family):
            try:
                loaded = ImageFont.truetype(candidate, size)
                break
            except OSError:
                continue
        if loaded is None:
            logger.debug(f"Font \"{spec.family}\" not found, measuring with Pillow's default font")
            loaded = ImageFont.load_default(size=size)

        self._fonts[key] = loaded
        return loaded

    def __call__(self, text: str, font: FontSpec) -> float:
        if not text:
            return 0.0
        return float(self.font(font).getlength(text))


def estimate_measure(text: str, font: FontSpec) -> float:
    """Character-count width estimate, for hosts that opt out of font metrics."""
    return estimate_text_width(text, font.size)


default_measure = PillowMeasure()


@dataclass
class ActiveCaption:
    """The caption under the playhead with its resolved style and runs."""
    caption: Caption
    style: Style
    lines: List[List[Run]]
    alignment: Optional[int] = None
    position: Optional[Tuple[float, float]] = None
    script_size: Tuple[Optional[float], Optional[float]] = (None, None)


@dataclass
class PositionedRun:
    text: str
    x: float
    y: float
    width: float
    style: Style
    font: FontSpec
    outline_width: float
    shadow_depth: float
    karaoke_duration: Optional[int] = None


@dataclass
class LineLayout:
    runs: List[PositionedRun]
    x: float
    y: float
    width: float
    height: float


@dataclass
class BlockLayout:
    lines: List[LineLayout]
    x: float
    y: float
    width: float
    height: float
    alignment: int
    scale_x: float = 1.0
    scale_y: float = 1.0


# ============================================================================
# Paint operations
# ============================================================================

@dataclass(frozen=True)
class SetFont:
    font: FontSpec


@dataclass(frozen=True)
class SetShadow:
    color: str
    offset_x: float
    offset_y: float
    blur: float = 0.0


@dataclass(frozen=True)
class StrokeText:
    text: str
    x: float
    y: float
    color: str
    width: float


@dataclass(frozen=True)
class FillText:
    text: str
    x: float
    y: float
    color: str
    highlighted: bool = False


@dataclass(frozen=True)
class ClearShadow:
    pass


PaintOp = Union[SetFont, SetShadow, StrokeText, FillText, ClearShadow]


class DrawingContext(Protocol):
    """The subset of a 2D canvas API the paint plan is replayed onto."""

    def set_font(self, font: str) -> None: ...

    def set_shadow(self, color: str, offset_x: float, offset_y: float, blur: float) -> None: ...

    def stroke_text(self, text: str, x: float, y: float, color: str, width: float) -> None: ...

    def fill_text(self, text: str, x: float, y: float, color: str) -> None: ...

    def clear_shadow(self) -> None: ...


# ============================================================================
# Resolve
# ============================================================================

def resolve(document: ParsedDocument, time: float) -> Optional[ActiveCaption]:
    """
    Find the caption to show at a playback time.

    Captions are active on [start, end). When captions on different layers
    overlap, the highest layer wins; ties go to the earliest in list order.
    A caption naming an unknown style falls back to the first style.

    Args:
        document: Document being previewed
        time: Playback time in seconds

    Returns:
        ActiveCaption, or None when nothing is on screen
    """
    candidates = [c for c in document.captions if c.start <= time < c.end]
    if not candidates:
        return None
    caption = max(candidates, key=lambda c: c.layer)

    style = document.find_style(caption.style)
    if style is None:
        style = document.default_style()
        if style is None:
            return None
        logger.warning(f"Caption {caption.index} uses unknown style \"{caption.style}\", using \"{style.name}\"")

    parsed = parse_runs(caption.text)
    return ActiveCaption(
        caption=caption,
        style=style,
        lines=split_runs_into_lines(parsed.runs),
        alignment=parsed.alignment,
        position=parsed.position,
        script_size=document.play_res(),
    )


# ============================================================================
# Layout
# ============================================================================

def _font_for(style: Style, scale_y: float) -> FontSpec:
    return FontSpec(
        family=style.fontname,
        size=style.fontsize * scale_y,
        bold=bool(style.bold),
        italic=bool(style.italic),
    )


def layout(
    active: ActiveCaption,
    canvas_size: Tuple[float, float],
    script_size: Optional[Tuple[Optional[float], Optional[float]]] = None,
    measure: Optional[Measure] = None,
    config: Optional[RenderConfig] = None,
) -> BlockLayout:
    """
    Position every run of the active caption on the canvas.

    Script coordinates (margins, \\pos) are scaled to canvas pixels using
    PlayResX/PlayResY, defaulting to the canvas size. Without a \\pos anchor
    the block sits inside the margins per its numpad alignment; with one,
    the anchor is the block's edge or center on each axis, again per the
    alignment code. Lines are aligned within the block by the same column.

    Args:
        active: Resolved caption
        canvas_size: (width, height) of the drawing surface in pixels
        script_size: Overrides the document's PlayResX/PlayResY
        measure: Text width function; defaults to Pillow font metrics
        config: Render configuration

    Returns:
        BlockLayout with absolutely positioned runs
    """
    config = config or RenderConfig()
    measure = measure or default_measure
    width, height = canvas_size
    script_width, script_height = script_size or active.script_size
    scale_x = width / (script_width or width) if width else 1.0
    scale_y = height / (script_height or height) if height else 1.0

    style = active.style
    caption = active.caption
    margin_l = (caption.margin_l or style.margin_l or 0) * scale_x
    margin_r = (caption.margin_r or style.margin_r or 0) * scale_x
    margin_v = (caption.margin_v or style.margin_v or 0) * scale_y
    default_line_height = style.fontsize * scale_y * config.line_height_factor

    measured: List[Tuple[List[PositionedRun], float, float]] = []
    for line in active.lines:
        runs = []
        line_width = 0.0
        line_height = 0.0
        for run in line:
            merged = style.with_overrides(run.overrides)
            font = _font_for(merged, scale_y)
            text = run.text.replace(' ', NBSP) if config.nbsp_spaces else run.text
            run_width = measure(text, font)
            runs.append(PositionedRun(
                text=text,
                x=line_width,
                y=0.0,
                width=run_width,
                style=merged,
                font=font,
                outline_width=(merged.outline or 0) * scale_x,
                shadow_depth=(merged.shadow or 0) * scale_x,
                karaoke_duration=run.karaoke_duration,
            ))
            line_width += run_width
            line_height = max(line_height, merged.fontsize * scale_y * config.line_height_factor)
        measured.append((runs, line_width, line_height or default_line_height))

    block_width = max((line_width for _, line_width, _ in measured), default=0.0)
    block_height = sum(line_height for _, _, line_height in measured)

    alignment = int(active.alignment or style.alignment or config.default_alignment)
    row, column = numpad_alignment(alignment)

    if active.position is not None:
        anchor_x = active.position[0] * scale_x
        anchor_y = active.position[1] * scale_y
        block_x = {
            'left': anchor_x,
            'center': anchor_x - block_width / 2,
            'right': anchor_x - block_width,
        }[column]
        block_y = {
            'top': anchor_y,
            'middle': anchor_y - block_height / 2,
            'bottom': anchor_y - block_height,
        }[row]
    else:
        block_x = {
            'left': margin_l,
            'center': (width - block_width) / 2,
            'right': width - margin_r - block_width,
        }[column]
        block_y = {
            'top': margin_v,
            'middle': (height - block_height) / 2,
            'bottom': height - margin_v - block_height,
        }[row]

    lines = []
    line_y = block_y
    for runs, line_width, line_height in measured:
        line_x = {
            'left': block_x,
            'center': block_x + (block_width - line_width) / 2,
            'right': block_x + (block_width - line_width),
        }[column]
        for run in runs:
            run.x += line_x
            run.y = line_y
        lines.append(LineLayout(runs=runs, x=line_x, y=line_y, width=line_width, height=line_height))
        line_y += line_height

    return BlockLayout(
        lines=lines,
        x=block_x,
        y=block_y,
        width=block_width,
        height=block_height,
        alignment=alignment,
        scale_x=scale_x,
        scale_y=scale_y,
    )


# ============================================================================
# Paint
# ============================================================================

def highlighted_runs(durations: List[Optional[int]], elapsed_cs: int) -> List[bool]:
    """
    Karaoke state of each run, in paint order.

    A run lights up once the elapsed time reaches the sum of all earlier
    karaoke durations plus its own. Runs without a duration never light up
    and do not advance the cursor.
    """
    states = []
    cursor = 0
    for duration in durations:
        if duration is None:
            states.append(False)
            continue
        states.append(elapsed_cs >= cursor + duration)
        cursor += duration
    return states


def _rgba(color: str) -> str:
    try:
        return color_to_rgba(color)
    except ValueError:
        logger.warning(f"Unreadable color {color!r}, painting white")
        return _FALLBACK_COLOR


def paint_plan(block: BlockLayout, elapsed_cs: int) -> List[PaintOp]:
    """
    Build the drawing operations for one frame.

    Args:
        block: Layout from :func:`layout`
        elapsed_cs: Centiseconds since the caption started

    Returns:
        Ordered paint operations: per run, font, shadow, optional outline
        stroke, then fill in the primary or karaoke (secondary) color
    """
    runs = [run for line in block.lines for run in line.runs]
    states = highlighted_runs([run.karaoke_duration for run in runs], elapsed_cs)

    plan: List[PaintOp] = []
    for run, highlighted in zip(runs, states):
        fill = run.style.secondary_colour if highlighted else run.style.primary_colour
        plan.append(SetFont(run.font))
        plan.append(SetShadow(_rgba(run.style.back_colour), run.shadow_depth, run.shadow_depth))
        if run.outline_width > 0:
            plan.append(StrokeText(run.text, run.x, run.y, _rgba(run.style.outline_colour), run.outline_width))
        plan.append(FillText(run.text, run.x, run.y, _rgba(fill), highlighted))

    if plan:
        plan.append(ClearShadow())
    return plan


def elapsed_centiseconds(caption: Caption, time: float) -> int:
    return max(0, int(round((time - caption.start) * 100)))


def render_frame(
    document: ParsedDocument,
    time: float,
    canvas_size: Tuple[float, float],
    measure: Optional[Measure] = None,
    config: Optional[RenderConfig] = None,
) -> List[PaintOp]:
    """
    Resolve, lay out and paint the caption at a playback time.

    Returns an empty plan when no caption is active or the canvas has no
    area.
    """
    width, height = canvas_size
    if width <= 0 or height <= 0:
        return []
    active = resolve(document, time)
    if active is None:
        return []
    block = layout(active, canvas_size, measure=measure, config=config)
    return paint_plan(block, elapsed_centiseconds(active.caption, time))


def replay(plan: List[PaintOp], ctx: DrawingContext) -> None:
    """Draw a paint plan onto a host drawing context."""
    for op in plan:
        if isinstance(op, SetFont):
            ctx.set_font(op.font.css)
        elif isinstance(op, SetShadow):
            ctx.set_shadow(op.color, op.offset_x, op.offset_y, op.blur)
        elif isinstance(op, StrokeText):
            ctx.stroke_text(op.text, op.x, op.y, op.color, op.width)
        elif isinstance(op, FillText):
            ctx.fill_text(op.text, op.x, op.y, op.color)
        elif isinstance(op, ClearShadow):
            ctx.clear_shadow()
