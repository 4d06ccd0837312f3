"""Simple repository index pages: parsing and serialization."""

from .models import PackageIndex, Release, RootIndex
from .parser import find_anchors

__all__ = ["PackageIndex", "Release", "RootIndex", "find_anchors"]
