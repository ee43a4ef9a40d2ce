"""
Exception types for ASSKit.

Parse failures are fatal to loading a document; validation failures block a
document from being treated as ready to render or save but leave the
in-memory document intact.
"""

from typing import Optional


class ASSError(ValueError):
    """Base class for all ASSKit errors."""


class ParseError(ASSError):
    """Raised when raw ASS text cannot be decomposed into a document."""

    def __init__(self, message: str, line: Optional[int] = None, section: Optional[str] = None):
        self.line = line
        self.section = section
        if line is not None:
            location = f"line {line}"
            if section:
                location += f" [{section}]"
            message = f"Parse error at {location}: {message}"
        super().__init__(message)


class ValidationError(ASSError):
    """A document invariant that does not hold."""

    def __init__(self, message: str, caption_index: Optional[int] = None, field: Optional[str] = None):
        self.caption_index = caption_index
        self.field = field
        if caption_index is not None:
            message = f"Caption {caption_index}: {message}"
        super().__init__(message)


class EmptyTableError(ParseError, ValidationError):
    """The style table or event table of a document has no entries."""

    def __init__(self, message: str, section: Optional[str] = None):
        super().__init__(message, section=section)
