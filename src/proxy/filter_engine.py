"""Release filtering for package index pages."""

from __future__ import annotations

import logging
from typing import Optional

from constants import Constants
from simple_index.models import PackageIndex, Release
from versioning.errors import VersionParseError, WheelParseError
from versioning.pep440 import SpecifierSet, Version
from versioning.wheel import WheelInfo

from .policy import PackageConfig

logger = logging.getLogger(__name__)


def sdist_stem(filename: str) -> Optional[str]:
    """Return ``filename`` without its source distribution suffix, or None."""
    for suffix in Constants.SDIST_SUFFIXES:
        if filename.endswith(suffix):
            return filename[: -len(suffix)]
    return None


class FilterEngine:
    """Removes releases that a package policy does not allow.

    Each release is checked against these rules in order and dropped by the
    first one that excludes it:

    1. its file name is on the denylist;
    2. it is a wheel whose version falls outside ``version_limits``;
    3. it is a source distribution whose version is unparseable or falls
       outside ``version_limits``;
    4. it is an egg.

    Anything else, including wheels whose version cannot be parsed, is kept.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """Initialize the filter engine.

        Args:
            logger: Logger receiving diagnostics; defaults to this module's logger.
        """
        self._logger = logger if logger is not None else logging.getLogger(__name__)

    def filter(self, index: PackageIndex, policy: PackageConfig) -> PackageIndex:
        """Apply ``policy`` to ``index``.

        Args:
            index: Parsed package page.
            policy: Policy for the package.

        Returns:
            A new PackageIndex with the surviving releases in their original order.

        Raises:
            UnsupportedOperatorError: If ``version_limits`` uses ``~=``.
        """
        specifier_set = SpecifierSet.parse(policy.version_limits)
        kept = [
            release
            for release in index.releases
            if self.allows(release, policy.release_denylist, specifier_set)
        ]
        self._logger.debug(
            "Kept %d of %d releases (limits: %r)",
            len(kept), len(index.releases), str(specifier_set),
        )
        return index.with_releases(kept)

    def allows(self, release: Release, denylist, specifier_set: SpecifierSet) -> bool:
        """Return True if ``release`` survives every rule."""
        name = release.name

        if name in denylist:
            self._logger.debug("Dropping denylisted release %s", name)
            return False

        try:
            wheel = WheelInfo.parse(name)
            version = Version.parse(wheel.version)
        except (WheelParseError, VersionParseError):
            pass
        else:
            if not specifier_set.contains(version):
                self._logger.debug("Dropping wheel %s outside version limits", name)
                return False

        stem = sdist_stem(name)
        if stem is not None:
            _, _, version_str = stem.partition("-")
            try:
                version = Version.parse(version_str)
            except VersionParseError as e:
                self._logger.warning("failed to parse version str for `%s`: %s", stem, e)
                return False
            if not specifier_set.contains(version):
                self._logger.debug("Dropping sdist %s outside version limits", name)
                return False

        if name.endswith(Constants.EGG_SUFFIX):
            self._logger.debug("Dropping egg %s", name)
            return False

        return True
