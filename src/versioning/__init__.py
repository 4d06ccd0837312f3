"""Version, specifier and wheel filename handling."""

from .errors import (
    ParseError,
    SpecifierParseError,
    UnsupportedOperatorError,
    VersionParseError,
    WheelParseError,
)
from .pep440 import (
    Operator,
    PreRelease,
    PreReleaseKind,
    Specifier,
    SpecifierSet,
    Version,
    compare_versions,
)
from .wheel import WheelInfo

__all__ = [
    "ParseError",
    "SpecifierParseError",
    "UnsupportedOperatorError",
    "VersionParseError",
    "WheelParseError",
    "Operator",
    "PreRelease",
    "PreReleaseKind",
    "Specifier",
    "SpecifierSet",
    "Version",
    "compare_versions",
    "WheelInfo",
]
