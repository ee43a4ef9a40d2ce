"""
Caption editing state machine.

The editor is a pure transition function, ``apply(state, action)``, over an
immutable :class:`EditorState`. Every transition that changes captions works
on a copy of the document, so a caller holding the previous state can keep
using it (undo stacks, diffing). Structural transitions (add, delete, split,
merge) re-assign dense indices as part of the same transition.

Edits that would break timing invariants are clamped, never rejected:
``start >= 0``, ``end <= duration`` when the media duration is known, and
``end - start >= min_gap``.

Example:
    >>> state = EditorState.load(parse_ass_content(ass_text))
    >>> state = apply(state, Select(0))
    >>> state = apply(state, SplitCaption(at_time=1.0))
    >>> [c.index for c in state.document.captions]
    [0, 1, 2, 3]
"""

import logging
import math
from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Dict, List, Optional, Tuple

from .models import Caption, EditorConfig, ParsedDocument, Style
from .tags import ScriptOverrides, extract_overrides, rebuild_text, set_overrides
from .document.queries import get_caption_at_time, max_caption_end
from .utils import round_to_centisecond

logger = logging.getLogger(__name__)

MIN_CAPTION_GAP = 0.1

_EPSILON = 1e-9
_STYLE_FIELDS = {f.name for f in fields(Style)}


@dataclass(frozen=True)
class EditorState:
    """Snapshot of an editing session."""
    document: Optional[ParsedDocument] = None
    selected_index: Optional[int] = None
    current_time: float = 0.0
    duration: float = 0.0  # playable media duration, 0 when unknown
    is_playing: bool = False
    is_dirty: bool = False
    config: EditorConfig = field(default_factory=EditorConfig)

    @classmethod
    def load(cls, document: ParsedDocument, duration: float = 0.0,
             config: Optional[EditorConfig] = None) -> "EditorState":
        return apply(cls(config=config or EditorConfig()), Load(document, duration))

    @property
    def captions(self) -> List[Caption]:
        return self.document.captions if self.document else []


# ============================================================================
# Actions
# ============================================================================

@dataclass(frozen=True)
class Load:
    document: ParsedDocument
    duration: float = 0.0


@dataclass(frozen=True)
class Select:
    index: Optional[int]
    seek: bool = False  # also move the playhead to the caption start


@dataclass(frozen=True)
class AddCaption:
    text: Optional[str] = None


@dataclass(frozen=True)
class DeleteCaption:
    index: Optional[int] = None  # defaults to the selection


@dataclass(frozen=True)
class SplitCaption:
    at_time: Optional[float] = None  # defaults to the playhead


@dataclass(frozen=True)
class MergeCaption:
    index: Optional[int] = None


@dataclass(frozen=True)
class Retime:
    index: int
    start: Optional[float] = None
    end: Optional[float] = None


@dataclass(frozen=True)
class MoveCaption:
    index: int
    delta: float


@dataclass(frozen=True)
class UpdateText:
    index: int
    plain_text: str


class _Unchanged:
    def __repr__(self):
        return "UNCHANGED"


UNCHANGED: Any = _Unchanged()


@dataclass(frozen=True)
class SetOverrides:
    """
    Rewrite the caption's alignment/position overrides.

    A field left as UNCHANGED keeps the caption's current value; None
    removes the tag.
    """
    index: Optional[int] = None
    alignment: Optional[int] = UNCHANGED
    position: Optional[Tuple[float, float]] = UNCHANGED


@dataclass(frozen=True)
class SetStyleField:
    style_name: str
    field_name: str
    value: Any


@dataclass(frozen=True)
class SetCurrentTime:
    time: float


@dataclass(frozen=True)
class SetDuration:
    duration: float


@dataclass(frozen=True)
class SetPlaying:
    playing: bool


@dataclass(frozen=True)
class MarkClean:
    pass


# ============================================================================
# Helpers
# ============================================================================

def _position(state: EditorState, index: Optional[int]) -> Optional[int]:
    """Resolve an action's caption index (or the selection) to a list position."""
    if index is None:
        index = state.selected_index
    if index is None or state.document is None:
        return None
    if 0 <= index < len(state.document.captions):
        return index
    logger.warning(f"No caption at index {index}, ignoring edit")
    return None


def _commit(state: EditorState, document: ParsedDocument, selected_index: Optional[int]) -> EditorState:
    document.reindex()
    if selected_index is not None and not document.captions:
        selected_index = None
    return replace(state, document=document, selected_index=selected_index, is_dirty=True)


def playable_duration(state: EditorState) -> Optional[float]:
    """Media duration if known, used as the upper bound for retiming."""
    return state.duration if state.duration > 0 else None


def effective_duration(state: EditorState) -> float:
    """Timeline length: the longer of the media and the last caption end."""
    return max(state.duration, max_caption_end(state.captions))


def selected_caption(state: EditorState) -> Optional[Caption]:
    position = _position(state, None)
    return state.document.captions[position] if position is not None else None


def current_caption_index(state: EditorState) -> Optional[int]:
    """Index of the caption under the playhead, if any."""
    caption = get_caption_at_time(state.captions, state.current_time)
    return caption.index if caption else None


def selected_overrides(state: EditorState) -> ScriptOverrides:
    """
    Alignment/position in effect for the selected caption.

    Alignment falls back to the caption's style, then to bottom-center (2).
    """
    caption = selected_caption(state)
    if caption is None:
        return ScriptOverrides(alignment=2, position=None)

    overrides = extract_overrides(caption.text)
    if overrides.alignment is None:
        style = state.document.find_style(caption.style)
        overrides.alignment = int(style.alignment) if style else 2
    return overrides


def clamp_timing(
    start: float,
    end: float,
    edited: str,
    min_gap: float = MIN_CAPTION_GAP,
    duration: Optional[float] = None,
) -> Tuple[float, float]:
    """
    Normalize a caption window after an edit.

    Args:
        start: Proposed start in seconds
        end: Proposed end in seconds
        edited: Which boundary the user moved: 'start', 'end' or 'both'
        min_gap: Minimum caption length
        duration: Upper bound for ``end``, if known

    Returns:
        (start, end) rounded to centiseconds
    """
    start = max(0.0, start)

    if end - start < min_gap - _EPSILON:
        if edited == 'end':
            start = max(0.0, end - min_gap)
        end = start + min_gap

    if duration is not None:
        if end > duration:
            end = duration
            if end - start < min_gap - _EPSILON:
                start = max(0.0, end - min_gap)

    return round_to_centisecond(start), round_to_centisecond(end)


def screen_to_script(
    x: float,
    y: float,
    canvas_size: Tuple[float, float],
    script_size: Tuple[Optional[float], Optional[float]],
) -> Tuple[float, float]:
    """
    Translate a pointer position on the preview into script coordinates.

    Args:
        x: Pointer x relative to the canvas' left edge, in screen pixels
        y: Pointer y relative to the canvas' top edge, in screen pixels
        canvas_size: Displayed (width, height) of the canvas
        script_size: PlayResX/PlayResY; missing values default to the canvas

    Returns:
        (x, y) in script space, clamped into the script area
    """
    canvas_width, canvas_height = canvas_size
    script_width = script_size[0] or canvas_width
    script_height = script_size[1] or canvas_height
    script_x = (x / canvas_width) * script_width if canvas_width else 0.0
    script_y = (y / canvas_height) * script_height if canvas_height else 0.0
    return (
        max(0.0, min(script_x, script_width)),
        max(0.0, min(script_y, script_height)),
    )


# ============================================================================
# Transitions
# ============================================================================

def _load(state: EditorState, action: Load) -> EditorState:
    document = action.document.copy()
    document.reindex()
    logger.debug(f"Loaded document with {len(document.captions)} captions")
    return replace(
        state,
        document=document,
        selected_index=None,
        duration=action.duration or state.duration,
        is_dirty=False,
    )


def _select(state: EditorState, action: Select) -> EditorState:
    if action.index is None:
        return replace(state, selected_index=None)
    position = _position(state, action.index)
    if position is None:
        return state
    if action.seek:
        return replace(state, selected_index=position,
                       current_time=state.document.captions[position].start)
    return replace(state, selected_index=position)


def _add(state: EditorState, action: AddCaption) -> EditorState:
    if state.document is None:
        return state
    config = state.config
    document = state.document.copy()
    captions = document.captions

    base_duration = effective_duration(state) or state.current_time + config.new_caption_duration
    start = max(0.0, min(state.current_time, max(base_duration - config.new_caption_lead, 0.0)))
    end = min(start + config.new_caption_duration, base_duration)
    end = max(end, start + config.min_gap)
    start, end = round_to_centisecond(start), round_to_centisecond(end)

    position = _position(state, None)
    template = captions[position] if position is not None else (captions[0] if captions else None)
    if template is not None:
        new_caption = template.copy(start=start, end=end, text=action.text or config.new_caption_text)
    else:
        default_style = document.default_style()
        new_caption = Caption(
            start=start,
            end=end,
            style=default_style.name if default_style else "Default",
            text=action.text or config.new_caption_text,
        )

    insert_at = position + 1 if position is not None else len(captions)
    captions.insert(insert_at, new_caption)
    logger.debug(f"Added caption at {insert_at} ({start:.2f}-{end:.2f})")
    return _commit(state, document, insert_at)


def _delete(state: EditorState, action: DeleteCaption) -> EditorState:
    position = _position(state, action.index)
    if position is None:
        return state
    document = state.document.copy()
    del document.captions[position]
    remaining = len(document.captions)
    selection = min(position, remaining - 1) if remaining else None
    logger.debug(f"Deleted caption {position}, {remaining} remaining")
    return _commit(state, document, selection)


def _split_text(plain_text: str) -> Tuple[str, str]:
    words = plain_text.split()
    if len(words) >= 2:
        midpoint = math.ceil(len(words) / 2)
        return " ".join(words[:midpoint]), " ".join(words[midpoint:])
    if len(words) == 1:
        word = words[0]
        midpoint = math.ceil(len(word) / 2)
        return word[:midpoint], word[midpoint:]
    return plain_text, plain_text


def _split(state: EditorState, action: SplitCaption) -> EditorState:
    position = _position(state, None)
    if position is None:
        return state
    caption = state.document.captions[position]
    min_gap = state.config.min_gap

    if caption.duration < 2 * min_gap:
        logger.warning(f"Caption {position} is too short to split ({caption.duration:.2f}s)")
        return state

    split_time = state.current_time if action.at_time is None else action.at_time
    split_time = min(max(split_time, caption.start), caption.end)
    if split_time <= caption.start + min_gap or split_time >= caption.end - min_gap:
        split_time = caption.start + caption.duration / 2
    split_time = round_to_centisecond(split_time)

    first_text, second_text = _split_text(caption.plain_text)
    first = caption.copy(end=split_time, text=rebuild_text(first_text, caption.text))
    second = caption.copy(start=split_time, text=rebuild_text(second_text, caption.text))

    document = state.document.copy()
    document.captions[position:position + 1] = [first, second]
    logger.debug(f"Split caption {position} at {split_time:.2f}s")
    return _commit(state, document, position + 1)


def _merge(state: EditorState, action: MergeCaption) -> EditorState:
    position = _position(state, action.index)
    if position is None or position >= len(state.document.captions) - 1:
        return state
    current = state.document.captions[position]
    following = state.document.captions[position + 1]

    start, end = clamp_timing(
        min(current.start, following.start),
        max(current.end, following.end),
        'both',
        min_gap=state.config.min_gap,
        duration=playable_duration(state),
    )
    merged_text = f"{current.plain_text} {following.plain_text}".strip()
    merged = current.copy(start=start, end=end, text=rebuild_text(merged_text, current.text))

    document = state.document.copy()
    document.captions[position:position + 2] = [merged]
    logger.debug(f"Merged captions {position} and {position + 1}")
    return _commit(state, document, position)


def _retime(state: EditorState, action: Retime) -> EditorState:
    position = _position(state, action.index)
    if position is None or (action.start is None and action.end is None):
        return state
    caption = state.document.captions[position]

    if action.start is not None and action.end is not None:
        edited = 'both'
    elif action.start is not None:
        edited = 'start'
    else:
        edited = 'end'

    start, end = clamp_timing(
        caption.start if action.start is None else action.start,
        caption.end if action.end is None else action.end,
        edited,
        min_gap=state.config.min_gap,
        duration=playable_duration(state),
    )

    document = state.document.copy()
    document.captions[position] = caption.copy(start=start, end=end)
    return replace(state, document=document, is_dirty=True)


def _move(state: EditorState, action: MoveCaption) -> EditorState:
    position = _position(state, action.index)
    if position is None:
        return state
    caption = state.document.captions[position]
    start = caption.start + action.delta
    end = caption.end + action.delta

    if start < 0:
        end -= start
        start = 0.0
    duration = playable_duration(state)
    if duration is not None and end > duration:
        overflow = end - duration
        start = max(0.0, start - overflow)
        end = duration

    start, end = clamp_timing(start, end, 'both', state.config.min_gap, duration)
    document = state.document.copy()
    document.captions[position] = caption.copy(start=start, end=end)
    return replace(state, document=document, is_dirty=True)


def _update_text(state: EditorState, action: UpdateText) -> EditorState:
    position = _position(state, action.index)
    if position is None:
        return state
    document = state.document.copy()
    document.captions[position].set_plain_text(action.plain_text)
    return replace(state, document=document, is_dirty=True)


def _set_overrides(state: EditorState, action: SetOverrides) -> EditorState:
    position = _position(state, action.index)
    if position is None:
        return state
    document = state.document.copy()
    caption = document.captions[position]
    current = extract_overrides(caption.text)
    alignment = current.alignment if action.alignment is UNCHANGED else action.alignment
    position_xy = current.position if action.position is UNCHANGED else action.position
    caption.set_text(set_overrides(caption.text, alignment, position_xy))
    return replace(state, document=document, is_dirty=True)


def _set_style_field(state: EditorState, action: SetStyleField) -> EditorState:
    if state.document is None:
        return state
    if action.field_name not in _STYLE_FIELDS:
        raise ValueError(f"Unknown style field: {action.field_name}")

    document = state.document.copy()
    style = document.find_style(action.style_name)
    if style is None:
        logger.warning(f"No style named \"{action.style_name}\", ignoring edit")
        return state

    if action.field_name == "name" and action.value != style.name:
        if document.find_style(action.value) is not None:
            raise ValueError(f"Style \"{action.value}\" already exists")
        for caption in document.captions:
            if caption.style == style.name:
                caption.style = action.value

    setattr(style, action.field_name, action.value)
    return replace(state, document=document, is_dirty=True)


_TRANSITIONS: Dict[type, Callable[[EditorState, Any], EditorState]] = {
    Load: _load,
    Select: _select,
    AddCaption: _add,
    DeleteCaption: _delete,
    SplitCaption: _split,
    MergeCaption: _merge,
    Retime: _retime,
    MoveCaption: _move,
    UpdateText: _update_text,
    SetOverrides: _set_overrides,
    SetStyleField: _set_style_field,
    SetCurrentTime: lambda state, action: replace(state, current_time=max(0.0, action.time)),
    SetDuration: lambda state, action: replace(state, duration=max(0.0, action.duration)),
    SetPlaying: lambda state, action: replace(state, is_playing=action.playing),
    MarkClean: lambda state, action: replace(state, is_dirty=False),
}


def apply(state: EditorState, action: Any) -> EditorState:
    """
    Apply one editor action and return the resulting state.

    Args:
        state: Current editor state (left unmodified)
        action: One of the action dataclasses defined in this module

    Returns:
        New editor state

    Raises:
        TypeError: If the action type is unknown
    """
    transition = _TRANSITIONS.get(type(action))
    if transition is None:
        raise TypeError(f"Unsupported editor action: {type(action).__name__}")
    return transition(state, action)
