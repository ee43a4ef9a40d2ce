"""
ASS document parsing, serialization and validation.

Parses raw ASS text into a ParsedDocument (script metadata, style table,
caption list) and serializes it back. Serialization normalizes field order
and adds a provenance comment, so output is semantically rather than
byte-identical to the input.

ASS format structure:
- [Script Info] - metadata (title, resolution, wrap style, ...)
- [V4+ Styles]  - Format line, then Style lines
- [Events]      - Format line, then Dialogue lines
"""

import logging
from typing import List, Optional

from ..errors import ParseError, ValidationError, EmptyTableError
from ..models import Caption, ParsedDocument, Style
from .schema import (
    STYLE_SCHEMA,
    EVENT_SCHEMA,
    STYLES_SECTION,
    LEGACY_STYLES_SECTION,
    EVENTS_SECTION,
    SCRIPT_INFO_SECTION,
    parse_format_line,
    split_fields,
    decode_fields,
    encode_fields,
    format_line,
)

logger = logging.getLogger(__name__)

PROVENANCE_COMMENT = "; Modified by ASSKit editor"

_KNOWN_SECTIONS = {
    SCRIPT_INFO_SECTION.lower(): SCRIPT_INFO_SECTION,
    STYLES_SECTION.lower(): STYLES_SECTION,
    LEGACY_STYLES_SECTION.lower(): STYLES_SECTION,
    EVENTS_SECTION.lower(): EVENTS_SECTION,
}


def _line_key(line: str) -> str:
    key, _, _ = line.partition(':')
    return key.strip().lower()


def _payload(line: str) -> str:
    _, _, payload = line.partition(':')
    return payload.lstrip()


def _parse_script_info_line(line: str, script_info: dict) -> None:
    if ':' not in line:
        return
    key, _, value = line.partition(':')
    script_info[key.strip()] = value.strip()


def _parse_style_line(line: str, field_names: List[str]) -> Style:
    values = split_fields(_payload(line), len(field_names), free_text_last=False)
    return Style(**decode_fields(values, field_names, STYLE_SCHEMA))


def _parse_dialogue_line(line: str, field_names: List[str], index: int) -> Caption:
    free_text_last = bool(field_names) and field_names[-1].lower() == "text"
    values = split_fields(_payload(line), len(field_names), free_text_last=free_text_last)
    return Caption(index=index, **decode_fields(values, field_names, EVENT_SCHEMA))


def parse_ass_content(content: str) -> ParsedDocument:
    """
    Parse ASS file content into a structured document.

    Args:
        content: Raw ASS file content as string

    Returns:
        ParsedDocument with script info, styles and captions

    Raises:
        ParseError: If the content is empty, a table line cannot be
            decomposed into its declared fields, or a data line appears
            before its section's Format line
        EmptyTableError: If the style table or event table has no entries

    Example:
        >>> document = parse_ass_content(ass_text)
        >>> len(document.captions)
        3
    """
    if not isinstance(content, str) or not content.strip():
        raise ParseError("ASS content must be a non-empty string")

    script_info = {}
    styles: List[Style] = []
    captions: List[Caption] = []
    style_format: Optional[List[str]] = None
    event_format: Optional[List[str]] = None
    current_section: Optional[str] = None
    skipped_sections = set()

    for line_number, raw_line in enumerate(content.lstrip('\ufeff').splitlines(), start=1):
        line = raw_line.strip()

        if not line or line.startswith(';'):
            continue

        if line.startswith('[') and line.endswith(']'):
            header = line[1:-1].strip()
            current_section = _KNOWN_SECTIONS.get(header.lower())
            if current_section is None and header not in skipped_sections:
                skipped_sections.add(header)
                logger.warning(f"Skipping unsupported section [{header}]")
            continue

        try:
            key = _line_key(line)
            if current_section == SCRIPT_INFO_SECTION:
                _parse_script_info_line(line, script_info)

            elif current_section == STYLES_SECTION:
                if key == "format":
                    style_format = parse_format_line(line)
                elif key == "style":
                    if style_format is None:
                        raise ValueError("Style line before Format line")
                    styles.append(_parse_style_line(line, style_format))

            elif current_section == EVENTS_SECTION:
                if key == "format":
                    event_format = parse_format_line(line)
                elif key == "dialogue":
                    if event_format is None:
                        raise ValueError("Dialogue line before Format line")
                    captions.append(_parse_dialogue_line(line, event_format, len(captions)))
        except ValueError as e:
            raise ParseError(str(e), line=line_number, section=current_section) from e

    if not styles:
        raise EmptyTableError("No styles found in ASS file", section=STYLES_SECTION)
    if not captions:
        raise EmptyTableError("No dialogue events found in ASS file", section=EVENTS_SECTION)

    logger.info(f"Parsed ASS document: {len(styles)} styles, {len(captions)} captions")

    return ParsedDocument(
        script_info=script_info,
        styles=styles,
        captions=captions,
        raw=content,
    )


def serialize_ass(document: ParsedDocument) -> str:
    """
    Serialize a document back to ASS file format.

    Writes the tagged ``text`` of each caption, never its plain view.

    Args:
        document: Parsed document

    Returns:
        ASS file content as string
    """
    lines = ["[Script Info]", PROVENANCE_COMMENT]
    for key, value in document.script_info.items():
        lines.append(f"{key}: {value}")
    lines.append("")

    lines.append(f"[{STYLES_SECTION}]")
    lines.append(format_line(STYLE_SCHEMA))
    for style in document.styles:
        lines.append("Style: " + encode_fields(style, STYLE_SCHEMA))
    lines.append("")

    lines.append(f"[{EVENTS_SECTION}]")
    lines.append(format_line(EVENT_SCHEMA))
    for caption in document.captions:
        lines.append("Dialogue: " + encode_fields(caption, EVENT_SCHEMA))

    return "\n".join(lines) + "\n"


def validate_document(document: ParsedDocument) -> List[ValidationError]:
    """
    Check the style and caption invariants of a document.

    Args:
        document: Document to check

    Returns:
        List of ValidationError, empty when the document is ready to
        render or save
    """
    errors: List[ValidationError] = []

    if not document.styles:
        errors.append(ValidationError("Document must have at least one style", field="styles"))

    seen = set()
    for style in document.styles:
        if style.name in seen:
            errors.append(ValidationError(f"Duplicate style name \"{style.name}\"", field="styles"))
        seen.add(style.name)

    if not document.captions:
        errors.append(ValidationError("Document must have at least one caption", field="captions"))

    for position, caption in enumerate(document.captions):
        if caption.start < 0:
            errors.append(ValidationError("start time cannot be negative", position, "start"))
        if caption.end <= caption.start:
            errors.append(ValidationError("end time must be after start time", position, "end"))
        if not caption.style:
            errors.append(ValidationError("style name is required", position, "style"))
        elif caption.style not in seen:
            errors.append(ValidationError(f"style \"{caption.style}\" not found", position, "style"))

    return errors


def check_document(document: ParsedDocument) -> None:
    """
    Raise the first validation error of a document, if any.

    Raises:
        ValidationError: If any invariant does not hold
    """
    errors = validate_document(document)
    if errors:
        logger.warning(f"Document failed validation with {len(errors)} error(s)")
        raise errors[0]


class ASSParser:
    """
    Parser for loading and saving ASS files.

    Wraps the content-level functions with file I/O:
    - Parse from a file path or a content string
    - Validate before saving
    - Write serialized output to disk
    """

    def __init__(self, validate_on_save: bool = True):
        """
        Initialize ASS parser.

        Args:
            validate_on_save: Refuse to save documents that fail validation
        """
        self.validate_on_save = validate_on_save

    def parse_file(self, ass_file: str) -> ParsedDocument:
        """
        Parse an ASS file from disk.

        Args:
            ass_file: Path to ASS file

        Returns:
            Parsed document
        """
        logger.info(f"Parsing ASS file: {ass_file}")

        with open(ass_file, 'r', encoding='utf-8-sig') as f:
            content = f.read()

        return parse_ass_content(content)

    def parse_content(self, content: str) -> ParsedDocument:
        """Parse ASS content string directly (no file I/O)."""
        return parse_ass_content(content)

    def serialize(self, document: ParsedDocument) -> str:
        if self.validate_on_save:
            check_document(document)
        return serialize_ass(document)

    def save(self, document: ParsedDocument, output_file: str) -> str:
        """
        Serialize a document and write it to disk.

        Args:
            document: Document to save
            output_file: Destination path

        Returns:
            Path that was written
        """
        content = self.serialize(document)

        with open(output_file, 'w', encoding='utf-8') as f:
            f.write(content)

        logger.info(f"Saved ASS file with {len(document.captions)} captions to {output_file}")
        return output_file
