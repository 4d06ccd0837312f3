"""Simple repository (PEP 503) index pages.

Two page kinds are modelled: the root listing of project names and the
per-project listing of release files. Both parse from HTML by collecting every
anchor in the document and serialize back to a minimal page.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from html import escape
from typing import Iterable, Optional, Tuple

from .parser import find_anchors

GPG_SIG_ATTRIBUTE = "data-gpg-sig"
REQUIRES_PYTHON_ATTRIBUTE = "data-requires-python"

_LINK_SEPARATOR = "<br/>\n    "

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
    <body>
    {links}
    </body>
</html>"""


def _render_page(links: Iterable[str]) -> str:
    return _PAGE_TEMPLATE.format(links=_LINK_SEPARATOR.join(links))


@dataclass(frozen=True)
class RootIndex:
    """The ``/simple/`` listing: project names in document order."""

    packages: Tuple[str, ...] = ()

    @classmethod
    def from_html(cls, document: str) -> "RootIndex":
        packages = tuple(anchor.text for anchor in find_anchors(document) if anchor.text)
        return cls(packages=packages)

    def to_html(self) -> str:
        return _render_page(
            f'<a href="/simple/{escape(package)}/">{escape(package, quote=False)}</a>'
            for package in self.packages
        )

    def __str__(self) -> str:
        return self.to_html()


@dataclass(frozen=True)
class Release:
    """One downloadable file on a project page."""

    name: str
    uri: str
    has_gpg: bool = False
    requires_python: Optional[str] = None

    def to_html(self) -> str:
        attributes = [f'href="{escape(self.uri)}"']
        if self.requires_python is not None:
            attributes.append(f'{REQUIRES_PYTHON_ATTRIBUTE}="{escape(self.requires_python)}"')
        if self.has_gpg:
            attributes.append(f'{GPG_SIG_ATTRIBUTE}="true"')
        return f'<a {" ".join(attributes)}>{escape(self.name, quote=False)}</a>'

    def __str__(self) -> str:
        return self.to_html()


@dataclass(frozen=True)
class PackageIndex:
    """The ``/simple/{project}/`` listing: release files in document order."""

    releases: Tuple[Release, ...] = ()

    @classmethod
    def from_html(cls, document: str) -> "PackageIndex":
        releases = []
        for anchor in find_anchors(document):
            if not anchor.text:
                continue
            if "href" not in anchor.attributes:
                continue
            releases.append(
                Release(
                    name=anchor.text,
                    uri=anchor.get("href") or "",
                    has_gpg=anchor.get(GPG_SIG_ATTRIBUTE) == "true",
                    requires_python=anchor.get(REQUIRES_PYTHON_ATTRIBUTE),
                )
            )
        return cls(releases=tuple(releases))

    def with_releases(self, releases: Iterable[Release]) -> "PackageIndex":
        return replace(self, releases=tuple(releases))

    def to_html(self) -> str:
        return _render_page(release.to_html() for release in self.releases)

    def __str__(self) -> str:
        return self.to_html()
