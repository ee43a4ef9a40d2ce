"""
Override-tag processing for ASS caption text.

Caption text interleaves plain characters with ``{...}`` override blocks
that change rendering state from that point on. This module strips them for
the editable plain view, walks them into styled runs for the renderer, and
rewrites the leading alignment/position prefix for the editor.

Supported overrides:
    \\r          reset accumulated font/color overrides
    \\anN        one-shot alignment for the whole caption (numpad 1-9)
    \\pos(x,y)   explicit anchor in script coordinates
    \\kN         karaoke duration (centiseconds) for the next run only
                (\\K, \\kf and \\ko are read the same way)
    \\fsN        font size
    \\c&H..&     primary color (also \\1c)
"""

import re
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional, Tuple

_BLOCK_PATTERN = re.compile(r'\{[^}]*\}')
_PREFIX_PATTERN = re.compile(r'^(\{[^}]*\})+')
_EMPTY_BLOCK_PATTERN = re.compile(r'\{\s*\}')
_LINE_BREAK = re.compile(r'\\[Nn]')
_HARD_SPACE = re.compile(r'\\h', re.IGNORECASE)

_RESET_TAG = re.compile(r'\\r', re.IGNORECASE)
_ALIGNMENT_TAG = re.compile(r'\\an(\d+)', re.IGNORECASE)
_POSITION_TAG = re.compile(r'\\pos\(\s*([-\d.]+)\s*,\s*([-\d.]+)\s*\)', re.IGNORECASE)
_KARAOKE_TAG = re.compile(r'\\(?:k[fo]?|K)(\d+)')
_FONT_SIZE_TAG = re.compile(r'\\fs(\d+(?:\.\d+)?)', re.IGNORECASE)
_COLOR_TAG = re.compile(r'\\1?c&H([0-9A-Fa-f]+)&', re.IGNORECASE)

_ALIGNMENT_STRIP = re.compile(r'\\an\d+', re.IGNORECASE)
_POSITION_STRIP = re.compile(r'\\pos\([^)]*\)', re.IGNORECASE)

_PUNCTUATION_START = re.compile(r'^[,.:!?)}\]]')


@dataclass
class ScriptOverrides:
    """Caption-wide overrides carried in the leading tag prefix."""
    alignment: Optional[int] = None
    position: Optional[Tuple[float, float]] = None


@dataclass
class Run:
    """A run of plain text with the override state active when it was written."""
    text: str
    overrides: Dict[str, Any] = field(default_factory=dict)
    karaoke_duration: Optional[int] = None
    inferred: bool = False


@dataclass
class ParsedRuns:
    """Result of walking a caption's tagged text."""
    runs: List[Run] = field(default_factory=list)
    alignment: Optional[int] = None
    position: Optional[Tuple[float, float]] = None


def strip_tags(text: str) -> str:
    """
    Remove all {...} override blocks, concatenating what is left.

    Example:
        >>> strip_tags("{\\\\k50}hello{\\\\k30}world")
        'helloworld'
    """
    if not text:
        return ""
    return _BLOCK_PATTERN.sub('', text)


def _normalize_breaks(text: str) -> str:
    return _HARD_SPACE.sub(' ', _LINE_BREAK.sub('\n', text))


def encode_line_breaks(text: str) -> str:
    """Write real newlines as ASS hard breaks so text stays on one line."""
    return (text or "").replace('\r\n', '\n').replace('\r', '\n').replace('\n', '\\N')


def ass_text_to_plain(text: str) -> str:
    """
    Convert tagged text into the readable form shown in the editor.

    Hard breaks become newlines and hard spaces become spaces. Fragments that
    were separated only by an override block get a space between them unless
    either side already has whitespace or the next fragment starts with
    punctuation.
    """
    if not text:
        return ""

    output = ""
    for fragment in _BLOCK_PATTERN.split(_normalize_breaks(text)):
        if not fragment:
            continue
        needs_space = (
            bool(output)
            and not output[-1].isspace()
            and not fragment[0].isspace()
            and not _PUNCTUATION_START.match(fragment)
        )
        if needs_space:
            output += ' '
        output += fragment
    return output


def parse_runs(text: str) -> ParsedRuns:
    """
    Walk tagged text into runs carrying a snapshot of the override state.

    A karaoke tag attaches its duration to the next run of plain text only.
    An unterminated ``{`` is kept as literal text.

    Args:
        text: Raw caption text

    Returns:
        ParsedRuns with non-empty runs plus any alignment/position override

    Example:
        >>> [r.karaoke_duration for r in parse_runs("{\\\\k50}This{\\\\k30}has").runs]
        [50, 30]
    """
    result = ParsedRuns()
    current: Dict[str, Any] = {}
    pending_karaoke: Optional[int] = None
    buffer = ""

    def flush():
        nonlocal buffer, pending_karaoke
        if not buffer:
            return
        result.runs.append(Run(
            text=_normalize_breaks(buffer),
            overrides=dict(current),
            karaoke_duration=pending_karaoke,
        ))
        buffer = ""
        pending_karaoke = None

    index = 0
    text = text or ""
    while index < len(text):
        char = text[index]
        if char != '{':
            buffer += char
            index += 1
            continue

        end = text.find('}', index)
        if end == -1:
            buffer += text[index:]
            break

        flush()
        block = text[index + 1:end]

        if _RESET_TAG.search(block):
            current = {}

        alignment_match = _ALIGNMENT_TAG.search(block)
        if alignment_match:
            result.alignment = int(alignment_match.group(1))

        position_match = _POSITION_TAG.search(block)
        if position_match:
            try:
                result.position = (float(position_match.group(1)), float(position_match.group(2)))
            except ValueError:
                pass

        karaoke_match = _KARAOKE_TAG.search(block)
        if karaoke_match:
            pending_karaoke = int(karaoke_match.group(1))

        font_match = _FONT_SIZE_TAG.search(block)
        if font_match:
            current = dict(current, fontsize=float(font_match.group(1)))

        color_match = _COLOR_TAG.search(block)
        if color_match:
            current = dict(current, primary_colour=f"&H{color_match.group(1).upper()}&")

        index = end + 1

    flush()
    result.runs = [run for run in result.runs if run.text]
    return result


def split_runs_into_lines(runs: List[Run]) -> List[List[Run]]:
    """
    Group runs into lines, inferring word spaces between adjacent runs.

    Runs are split on newlines; the karaoke duration stays with the part
    before the first break. Inside each line, a single-space run is inserted
    between two runs when neither side has whitespace at the boundary, so
    word-level highlighting never visually merges tokens.
    """
    lines: List[List[Run]] = [[]]
    for run in runs:
        parts = run.text.split('\n')
        for part_index, part in enumerate(parts):
            if part:
                lines[-1].append(Run(
                    text=part,
                    overrides=run.overrides,
                    karaoke_duration=run.karaoke_duration if part_index == 0 else None,
                ))
            if part_index < len(parts) - 1:
                lines.append([])

    spaced_lines = []
    for line in lines:
        spaced: List[Run] = []
        for run in line:
            if spaced:
                previous = spaced[-1]
                if not previous.text[-1].isspace() and not run.text[0].isspace():
                    spaced.append(Run(text=' ', inferred=True))
            spaced.append(run)
        spaced_lines.append(spaced)
    return spaced_lines


def extract_overrides(text: str) -> ScriptOverrides:
    """Read the alignment and position overrides from tagged text."""
    overrides = ScriptOverrides()
    alignment_match = _ALIGNMENT_TAG.search(text or "")
    if alignment_match:
        overrides.alignment = int(alignment_match.group(1))
    position_match = _POSITION_TAG.search(text or "")
    if position_match:
        try:
            overrides.position = (float(position_match.group(1)), float(position_match.group(2)))
        except ValueError:
            pass
    return overrides


def _positional_tags(prefix: str) -> List[str]:
    return _ALIGNMENT_STRIP.findall(prefix) + _POSITION_STRIP.findall(prefix)


def rebuild_text(plain_text: str, original_text: str) -> str:
    """
    Rebuild tagged text after the plain view was edited.

    Unchanged wording returns the original text verbatim, karaoke timing
    included. Changed wording drops every per-word tag, because the old
    durations no longer line up with the new words, but keeps the
    alignment/position tags from the original's leading prefix. Newlines in
    the plain text are written back as ``\\N``.

    Args:
        plain_text: Edited plain text, either stripped or as shown by
            :func:`ass_text_to_plain`
        original_text: Tagged text before the edit

    Returns:
        New tagged text
    """
    body = encode_line_breaks(plain_text)
    if body == strip_tags(original_text) or plain_text == ass_text_to_plain(original_text):
        return original_text

    prefix_match = _PREFIX_PATTERN.match(original_text or "")
    tags = _positional_tags(prefix_match.group(0)) if prefix_match else []
    override_prefix = "{" + "".join(tags) + "}" if tags else ""
    return f"{override_prefix}{body}"


def set_overrides(
    text: str,
    alignment: Optional[int] = None,
    position: Optional[Tuple[float, float]] = None,
) -> str:
    """
    Rewrite the alignment/position tags in the leading override prefix.

    The given values replace whatever the prefix held; ``None`` removes the
    tag. Other tags in the prefix, later override blocks and the body text
    are left untouched. Position is rounded to whole script pixels. A block
    left empty is dropped instead of being written as ``{}``.

    Example:
        >>> set_overrides("{\\\\an8}{\\\\k20}Hi", alignment=5, position=(10.4, 20.6))
        '{\\\\an5\\\\pos(10,21)}{\\\\k20}Hi'
    """
    text = text or ""
    prefix_match = _PREFIX_PATTERN.match(text)
    prefix = prefix_match.group(0) if prefix_match else ""
    remainder = text[len(prefix):]

    cleaned_prefix = _POSITION_STRIP.sub('', _ALIGNMENT_STRIP.sub('', prefix))
    cleaned_prefix = _EMPTY_BLOCK_PATTERN.sub('', cleaned_prefix)

    tags = []
    if alignment:
        tags.append(f"\\an{int(alignment)}")
    if position is not None:
        x, y = position
        tags.append(f"\\pos({int(round(x))},{int(round(y))})")

    override_prefix = "{" + "".join(tags) + "}" if tags else ""
    return f"{override_prefix}{cleaned_prefix}{remainder}"
