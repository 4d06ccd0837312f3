"""Exceptions raised by the version, specifier and wheel parsers."""

from __future__ import annotations


class ParseError(ValueError):
    """Raised when a string does not match the grammar it was parsed against.

    The offending input is kept on ``text`` so callers can report it.
    """

    kind = "value"

    def __init__(self, text: str, reason: str = ""):
        self.text = text
        self.reason = reason
        message = f"could not parse {self.kind}: `{text}`"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class VersionParseError(ParseError):
    """Raised for strings that are not valid package versions."""

    kind = "version"


class SpecifierParseError(ParseError):
    """Raised for strings that are not a single version specifier."""

    kind = "specifier"


class WheelParseError(ParseError):
    """Raised for filenames that do not follow the wheel naming convention."""

    kind = "wheel filename"


class UnsupportedOperatorError(NotImplementedError):
    """Raised when a specifier with an unimplemented operator is evaluated."""

    def __init__(self, operator: str):
        self.operator = operator
        super().__init__(f"operator not supported: {operator}")
