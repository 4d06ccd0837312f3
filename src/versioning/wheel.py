"""Wheel filename parsing (PEP 427 file name convention).

``{distribution}-{version}(-{build tag})?-{python tag}-{abi tag}-{platform tag}.whl``

Every component is captured greedily without regard to which hyphens are
delimiters, so a filename whose distribution or version contains a hyphen can
be split in the wrong place. For example ``foo-1.0-1-py3-none-any.whl`` reads
as distribution ``foo-1.0`` and version ``1`` rather than a build tag. This is
a known limitation of matching the convention with a single pattern.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .errors import WheelParseError

WHEEL_SUFFIX = ".whl"

_WHEEL_RE = re.compile(
    r"(?P<distribution>.+)-(?P<version>.+)(?:-(?P<build_tag>.+))?"
    r"-(?P<python_tag>.+)-(?P<abi_tag>.+)-(?P<platform_tag>.+)\.whl"
)


@dataclass(frozen=True)
class WheelInfo:
    """Components of a wheel filename. ``version`` is kept as raw text."""

    distribution: str
    version: str
    python_tag: str
    abi_tag: str
    platform_tag: str
    build_tag: Optional[str] = None

    @classmethod
    def parse(cls, filename: str) -> "WheelInfo":
        """Split a wheel filename into its components.

        Args:
            filename: File name such as ``"foo-1.0-py3-none-any.whl"``.

        Returns:
            WheelInfo instance.

        Raises:
            WheelParseError: If the name is not a ``.whl`` with five or six fields.
        """
        if not filename.endswith(WHEEL_SUFFIX):
            raise WheelParseError(filename, f"missing {WHEEL_SUFFIX} suffix")
        match = _WHEEL_RE.fullmatch(filename)
        if match is None:
            raise WheelParseError(filename)
        return cls(
            distribution=match.group("distribution"),
            version=match.group("version"),
            build_tag=match.group("build_tag"),
            python_tag=match.group("python_tag"),
            abi_tag=match.group("abi_tag"),
            platform_tag=match.group("platform_tag"),
        )

    @property
    def filename(self) -> str:
        components = [self.distribution, self.version]
        if self.build_tag is not None:
            components.append(self.build_tag)
        components.extend([self.python_tag, self.abi_tag, self.platform_tag])
        return "-".join(components) + WHEEL_SUFFIX

    def __str__(self) -> str:
        return self.filename
