"""Package versions and version specifiers.

Implements the subset of PEP 440 the gateway needs to enforce version windows:
``[N!]N(.N)*[{a|b|rc}N][.postN][.devN][+local]`` plus the ``==``, ``!=``,
``>=``, ``<=``, ``>`` and ``<`` comparison operators. ``~=`` is recognised
but cannot be evaluated, and arbitrary equality (``===``) is not parsed.

The ordering used here differs from PEP 440 in four deliberate ways:

* an absent epoch sorts before any explicit epoch (it is not treated as 0);
* release segments are not zero padded, so ``1.0`` and ``1.0.0`` differ;
* a final release always outranks a pre-release, before release segments
  are compared, so ``1.0`` sorts above ``2.0a1``;
* the local label takes part in equality but never in ordering.
"""

from __future__ import annotations

import logging
import operator as _op
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterator, Optional, Tuple

from .errors import SpecifierParseError, UnsupportedOperatorError, VersionParseError

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(
    r"(?:(?P<epoch>[0-9]+)!)?"
    r"(?P<release>[0-9]+(?:\.[0-9]+)*)"
    r"(?:(?P<pre_kind>alpha|a|beta|b|rc)(?P<pre_number>[0-9]+))?"
    r"(?:\.post(?P<post>[0-9]+))?"
    r"(?:\.dev(?P<dev>[0-9]+))?"
    r"(?:\+(?P<local>.+))?"
)


class PreReleaseKind(Enum):
    """Pre-release phases, declared in ascending rank."""

    ALPHA = "a"
    BETA = "b"
    RELEASE_CANDIDATE = "rc"

    @property
    def rank(self) -> int:
        return _PRE_RELEASE_RANKS[self]


_PRE_RELEASE_RANKS: Dict[PreReleaseKind, int] = {
    kind: position for position, kind in enumerate(PreReleaseKind)
}

_PRE_RELEASE_TOKENS: Dict[str, PreReleaseKind] = {
    "a": PreReleaseKind.ALPHA,
    "alpha": PreReleaseKind.ALPHA,
    "b": PreReleaseKind.BETA,
    "beta": PreReleaseKind.BETA,
    "rc": PreReleaseKind.RELEASE_CANDIDATE,
}


@dataclass(frozen=True)
class PreRelease:
    """A pre-release marker such as ``a1``, ``b2`` or ``rc3``."""

    kind: PreReleaseKind
    number: int

    def sort_key(self) -> Tuple[int, int]:
        return (self.kind.rank, self.number)

    def __str__(self) -> str:
        return f"{self.kind.value}{self.number}"


def _cmp(left, right) -> int:
    return (left > right) - (left < right)


def _cmp_optional(left, right) -> int:
    """Compare two optional values; an absent value sorts first."""
    if left is None and right is None:
        return 0
    if left is None:
        return -1
    if right is None:
        return 1
    return _cmp(left, right)


@dataclass(frozen=True)
class Version:
    """A parsed package version.

    Equality is structural over every field, including ``local``. The rich
    comparison operators follow :func:`compare_versions`, which ignores
    ``local``; ``a <= b`` can therefore hold while ``a == b`` does not.
    """

    release: Tuple[int, ...]
    epoch: Optional[int] = None
    pre_release: Optional[PreRelease] = None
    post_release: Optional[int] = None
    dev_release: Optional[int] = None
    local: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> "Version":
        """Parse a version string.

        Args:
            text: Version string, e.g. ``"2022!1.2.3rc3.post1.dev2"``.

        Returns:
            Version instance.

        Raises:
            VersionParseError: If the whole string does not match the grammar.
        """
        match = _VERSION_RE.fullmatch(text)
        if match is None:
            raise VersionParseError(text)

        release = tuple(int(part) for part in match.group("release").split("."))

        pre_release = None
        if match.group("pre_kind") is not None:
            pre_release = PreRelease(
                kind=_PRE_RELEASE_TOKENS[match.group("pre_kind")],
                number=int(match.group("pre_number")),
            )

        def optional_number(name: str) -> Optional[int]:
            value = match.group(name)
            return None if value is None else int(value)

        return cls(
            release=release,
            epoch=optional_number("epoch"),
            pre_release=pre_release,
            post_release=optional_number("post"),
            dev_release=optional_number("dev"),
            local=match.group("local"),
        )

    @property
    def is_prerelease(self) -> bool:
        return self.pre_release is not None

    def __str__(self) -> str:
        parts = []
        if self.epoch is not None:
            parts.append(f"{self.epoch}!")
        parts.append(".".join(str(segment) for segment in self.release))
        if self.pre_release is not None:
            parts.append(str(self.pre_release))
        if self.post_release is not None:
            parts.append(f".post{self.post_release}")
        if self.dev_release is not None:
            parts.append(f".dev{self.dev_release}")
        if self.local is not None:
            parts.append(f"+{self.local}")
        return "".join(parts)

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return compare_versions(self, other) < 0

    def __le__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return compare_versions(self, other) <= 0

    def __gt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return compare_versions(self, other) > 0

    def __ge__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return compare_versions(self, other) >= 0


def compare_versions(left: Version, right: Version) -> int:
    """Order two versions.

    Args:
        left: First version.
        right: Second version.

    Returns:
        -1, 0 or 1 as ``left`` sorts before, level with, or after ``right``.
    """
    result = _cmp_optional(left.epoch, right.epoch)
    if result:
        return result

    # A final release beats any pre-release before release segments are consulted.
    if left.pre_release is None and right.pre_release is not None:
        return 1
    if left.pre_release is not None and right.pre_release is None:
        return -1

    # Tuple comparison: shared prefix first, then length. No zero padding.
    result = _cmp(left.release, right.release)
    if result:
        return result

    result = _cmp_optional(
        left.pre_release.sort_key() if left.pre_release else None,
        right.pre_release.sort_key() if right.pre_release else None,
    )
    if result:
        return result

    result = _cmp_optional(left.post_release, right.post_release)
    if result:
        return result

    return _cmp_optional(left.dev_release, right.dev_release)


class Operator(Enum):
    """Comparison operators understood in a version specifier."""

    COMPATIBLE = "~="
    EQUALS = "=="
    NOT_EQUALS = "!="
    GREATER_THAN_OR_EQUAL = ">="
    LESS_THAN_OR_EQUAL = "<="
    GREATER_THAN = ">"
    LESS_THAN = "<"


# Two-character tokens first so "<" never swallows "<=".
_OPERATOR_TOKENS: Tuple[Operator, ...] = tuple(
    sorted(Operator, key=lambda candidate: len(candidate.value), reverse=True)
)

_OPERATOR_CHECKS: Dict[Operator, Callable[[Version, Version], bool]] = {
    Operator.EQUALS: _op.eq,
    Operator.NOT_EQUALS: _op.ne,
    Operator.GREATER_THAN_OR_EQUAL: _op.ge,
    Operator.LESS_THAN_OR_EQUAL: _op.le,
    Operator.GREATER_THAN: _op.gt,
    Operator.LESS_THAN: _op.lt,
}


@dataclass(frozen=True)
class Specifier:
    """A single constraint such as ``>=1.2.3``."""

    operator: Operator
    version: Version

    @classmethod
    def parse(cls, text: str) -> "Specifier":
        """Parse one specifier.

        Args:
            text: Specifier string, e.g. ``">=1.2.3"``.

        Returns:
            Specifier instance.

        Raises:
            SpecifierParseError: If the operator is unknown or the version is invalid.
        """
        stripped = text.strip()
        for candidate in _OPERATOR_TOKENS:
            if stripped.startswith(candidate.value):
                remainder = stripped[len(candidate.value):]
                try:
                    version = Version.parse(remainder)
                except VersionParseError as exc:
                    raise SpecifierParseError(text, str(exc)) from exc
                return cls(operator=candidate, version=version)
        raise SpecifierParseError(text, "unrecognised operator")

    def contains(self, version: Version) -> bool:
        """Return True if ``version`` satisfies this specifier.

        Raises:
            UnsupportedOperatorError: For ``~=``, which is not implemented.
        """
        check = _OPERATOR_CHECKS.get(self.operator)
        if check is None:
            raise UnsupportedOperatorError(self.operator.value)
        return check(version, self.version)

    def __contains__(self, version: Version) -> bool:
        return self.contains(version)

    def __str__(self) -> str:
        return f"{self.operator.value}{self.version}"


@dataclass(frozen=True)
class SpecifierSet:
    """A comma separated conjunction of specifiers.

    Parsing is best effort: specifiers that fail to parse are dropped, so a
    string made only of garbage yields an empty set that matches everything.
    """

    specifiers: Tuple[Specifier, ...] = ()

    @classmethod
    def parse(cls, text: str) -> "SpecifierSet":
        specifiers = []
        for token in text.split(","):
            token = token.strip()
            try:
                specifiers.append(Specifier.parse(token))
            except SpecifierParseError as exc:
                logger.debug("Ignoring unparseable specifier %r: %s", token, exc)
        return cls(specifiers=tuple(specifiers))

    def contains(self, version: Version) -> bool:
        return all(specifier.contains(version) for specifier in self.specifiers)

    def __contains__(self, version: Version) -> bool:
        return self.contains(version)

    def __iter__(self) -> Iterator[Specifier]:
        return iter(self.specifiers)

    def __len__(self) -> int:
        return len(self.specifiers)

    def __str__(self) -> str:
        return ",".join(str(specifier) for specifier in self.specifiers)
