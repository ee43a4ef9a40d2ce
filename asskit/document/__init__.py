"""
ASS document package.

Provides parsing of raw ASS text into a structured document, serialization
back to ASS, invariant validation, and time-based caption queries.
"""

from .parser import (
    parse_ass_content,
    serialize_ass,
    validate_document,
    check_document,
    ASSParser,
    PROVENANCE_COMMENT,
)

from .queries import (
    get_caption_at_time,
    sort_captions_by_time,
    get_total_duration,
    max_caption_end,
    captions_overlap,
)

from .schema import STYLE_SCHEMA, EVENT_SCHEMA, FieldSpec

__all__ = [
    # Core conversion functions
    "parse_ass_content",
    "serialize_ass",
    "validate_document",
    "check_document",
    "PROVENANCE_COMMENT",

    # Parser class
    "ASSParser",

    # Queries
    "get_caption_at_time",
    "sort_captions_by_time",
    "get_total_duration",
    "max_caption_end",
    "captions_overlap",

    # Schema
    "STYLE_SCHEMA",
    "EVENT_SCHEMA",
    "FieldSpec",
]
