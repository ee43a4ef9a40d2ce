"""
Declared field schemas for positional ASS table lines.

Style and Dialogue lines are comma-separated values whose order is given by
the section's ``Format:`` line. Each schema lists, in the order this package
writes them, the format field name, the model attribute it maps to, and how
the value is typed. Decoding and encoding both go through the two generic
functions below, so supporting another field is a schema edit.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Sequence

from ..utils import timestamp_to_seconds, seconds_to_timestamp, format_number
from ..tags import encode_line_breaks

STYLES_SECTION = "V4+ Styles"
LEGACY_STYLES_SECTION = "V4 Styles"
EVENTS_SECTION = "Events"
SCRIPT_INFO_SECTION = "Script Info"


@dataclass(frozen=True)
class FieldSpec:
    """One positional field: format name, model attribute and value kind."""
    ass_name: str
    attr: str
    kind: str  # 'str', 'float', 'int', 'time', 'text'


STYLE_SCHEMA: List[FieldSpec] = [
    FieldSpec("Name", "name", "str"),
    FieldSpec("Fontname", "fontname", "str"),
    FieldSpec("Fontsize", "fontsize", "float"),
    FieldSpec("PrimaryColour", "primary_colour", "str"),
    FieldSpec("SecondaryColour", "secondary_colour", "str"),
    FieldSpec("OutlineColour", "outline_colour", "str"),
    FieldSpec("BackColour", "back_colour", "str"),
    FieldSpec("Bold", "bold", "int"),
    FieldSpec("Italic", "italic", "int"),
    FieldSpec("Underline", "underline", "int"),
    FieldSpec("StrikeOut", "strike_out", "int"),
    FieldSpec("ScaleX", "scale_x", "float"),
    FieldSpec("ScaleY", "scale_y", "float"),
    FieldSpec("Spacing", "spacing", "float"),
    FieldSpec("Angle", "angle", "float"),
    FieldSpec("BorderStyle", "border_style", "float"),
    FieldSpec("Outline", "outline", "float"),
    FieldSpec("Shadow", "shadow", "float"),
    FieldSpec("Alignment", "alignment", "float"),
    FieldSpec("MarginL", "margin_l", "float"),
    FieldSpec("MarginR", "margin_r", "float"),
    FieldSpec("MarginV", "margin_v", "float"),
    FieldSpec("Encoding", "encoding", "float"),
]

EVENT_SCHEMA: List[FieldSpec] = [
    FieldSpec("Layer", "layer", "int"),
    FieldSpec("Start", "start", "time"),
    FieldSpec("End", "end", "time"),
    FieldSpec("Style", "style", "str"),
    FieldSpec("Name", "name", "str"),
    FieldSpec("MarginL", "margin_l", "int"),
    FieldSpec("MarginR", "margin_r", "int"),
    FieldSpec("MarginV", "margin_v", "int"),
    FieldSpec("Effect", "effect", "str"),
    FieldSpec("Text", "text", "text"),
]


def _to_float(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return 0.0


def _to_int(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return int(_to_float(value))


_DECODERS: Dict[str, Callable[[str], Any]] = {
    "str": lambda value: value.strip(),
    "text": lambda value: value.strip(),
    "float": lambda value: _to_float(value.strip()),
    "int": lambda value: _to_int(value.strip()),
    "time": lambda value: timestamp_to_seconds(value.strip()),
}

_ENCODERS: Dict[str, Callable[[Any], str]] = {
    "str": str,
    "text": encode_line_breaks,
    "float": format_number,
    "int": lambda value: str(int(value)),
    "time": seconds_to_timestamp,
}


def parse_format_line(line: str) -> List[str]:
    """Read the field names declared by a ``Format:`` line."""
    _, _, fields = line.partition(':')
    return [name.strip() for name in fields.split(',')]


def split_fields(payload: str, field_count: int, free_text_last: bool) -> List[str]:
    """
    Split a comma-separated table line.

    When the last declared field is free-form text, splitting stops once
    ``field_count - 1`` values have been extracted, and the remainder
    (commas included) becomes the final value.
    """
    if free_text_last:
        return payload.split(',', max(field_count - 1, 0))
    return payload.split(',')


def decode_fields(values: Sequence[str], field_names: Sequence[str], schema: List[FieldSpec]) -> Dict[str, Any]:
    """
    Map positional values onto model attributes.

    Fields declared by the Format line but unknown to the schema are ignored.

    Raises:
        ValueError: If the value count does not match the declared fields,
            or a time value is malformed
    """
    if len(values) != len(field_names):
        raise ValueError(f"expected {len(field_names)} fields, found {len(values)}")

    by_name = {spec.ass_name.lower(): spec for spec in schema}
    decoded: Dict[str, Any] = {}
    for name, value in zip(field_names, values):
        spec = by_name.get(name.lower())
        if spec is None:
            continue
        decoded[spec.attr] = _DECODERS[spec.kind](value)
    return decoded


def encode_fields(obj: Any, schema: List[FieldSpec]) -> str:
    """Write an object's attributes as a comma-separated line body in schema order."""
    return ",".join(_ENCODERS[spec.kind](getattr(obj, spec.attr)) for spec in schema)


def format_line(schema: List[FieldSpec]) -> str:
    return "Format: " + ", ".join(spec.ass_name for spec in schema)
