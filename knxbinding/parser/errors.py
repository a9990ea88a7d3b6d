"""Shared parser exceptions for items files and binding configurations."""

from pathlib import Path
from typing import Optional


class ParseError(Exception):
    """Error during parsing of an items file or a binding configuration."""

    def __init__(
        self, message: str, file_path: Optional[Path] = None, line: Optional[int] = None
    ):
        self.message = message
        self.file_path = file_path
        self.line = line
        super().__init__(self._format_message(message))

    def _format_message(self, message: str) -> str:
        """Format error message with file and line information."""
        parts = []
        if self.file_path:
            parts.append(f"File: {self.file_path}")
        if self.line is not None:
            parts.append(f"Line: {self.line}")
        parts.append(message)
        return " | ".join(parts)


class BindingConfigParseError(ParseError):
    """Error in a single binding configuration line.

    A failure rejects the whole line; no partial binding is produced.
    """

    def __init__(
        self, message: str, item_name: Optional[str] = None, source: Optional[str] = None
    ):
        self.item_name = item_name
        self.source = source
        super().__init__(message)

    def _format_message(self, message: str) -> str:
        parts = []
        if self.item_name:
            parts.append(f"Item: {self.item_name}")
        if self.source is not None:
            parts.append(f"Source: '{self.source}'")
        parts.append(message)
        return " | ".join(parts)


class BindingSyntaxError(BindingConfigParseError):
    """Malformed refresh interval, address or datapoint definition."""


class ConstraintViolation(BindingConfigParseError):
    """Well-formed input that breaks a binding rule.

    Duplicate addresses, more than one readable address, a refresh
    interval that is not positive or too many datapoint definitions.
    """


class UnresolvedTypeError(BindingConfigParseError):
    """Datapoint type id could not be determined or is not supported."""
