"""Per-package filtering policy documents.

A policy lives in ``{policy_dir}/{package}.json``::

    {
        "release_denylist": ["foo-1.3.0-py3-none-any.whl"],
        "version_limits": ">=1.0,<2"
    }

Missing, unreadable or invalid documents never reach the client: the store
returns ``None`` and the package page is served unfiltered.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional

from jsonschema import Draft7Validator

logger = logging.getLogger(__name__)

POLICY_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "release_denylist": {"type": "array", "items": {"type": "string"}},
        "version_limits": {"type": "string"},
    },
    "required": ["release_denylist", "version_limits"],
}

_VALIDATOR = Draft7Validator(POLICY_SCHEMA)


class PolicyError(ValueError):
    """Raised when a policy document does not match the expected shape."""


@dataclass(frozen=True)
class PackageConfig:
    """Filtering policy for a single package."""

    release_denylist: FrozenSet[str] = field(default_factory=frozenset)
    version_limits: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "PackageConfig":
        """Build a policy from a decoded JSON document.

        Args:
            data: Decoded document.

        Returns:
            PackageConfig instance.

        Raises:
            PolicyError: If the document fails schema validation.
        """
        errs = sorted(_VALIDATOR.iter_errors(data), key=lambda e: [str(p) for p in e.path])
        if errs:
            first = errs[0]
            path = "/".join(str(p) for p in first.path)
            raise PolicyError(f"Invalid policy at '{path}': {first.message}")
        return cls(
            release_denylist=frozenset(data["release_denylist"]),
            version_limits=data["version_limits"],
        )


def _is_plain_name(package: str) -> bool:
    """Reject names that could address a file outside the policy directory."""
    if not package or package.startswith("."):
        return False
    return os.sep not in package and "/" not in package and "\\" not in package


class PolicyStore:
    """Loads package policies from a directory of JSON files."""

    def __init__(self, directory: str):
        """Initialize the store.

        Args:
            directory: Directory holding ``{package}.json`` documents.
        """
        self._directory = directory

    @property
    def directory(self) -> str:
        return self._directory

    def path_for(self, package: str) -> str:
        return os.path.join(self._directory, f"{package}.json")

    def load(self, package: str) -> Optional[PackageConfig]:
        """Load the policy for ``package``.

        Args:
            package: Package name taken from the request path.

        Returns:
            PackageConfig, or None when no usable policy exists.
        """
        if not _is_plain_name(package):
            logger.warning("Refusing to load policy for suspicious package name %r", package)
            return None

        path = self.path_for(package)
        if not os.path.isfile(path):
            logger.debug("No policy for %s at %s", package, path)
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            config = PackageConfig.from_dict(data)
        except (OSError, ValueError) as e:
            # json.JSONDecodeError and PolicyError are both ValueErrors
            logger.warning("Ignoring policy for %s (%s): %s", package, path, e)
            return None

        logger.debug("Loaded policy for %s from %s", package, path)
        return config
