"""Placement of custodial files inside a package.

Every content file gets a package path in a single pass over the submission,
in submission order. The packaging specification proposes a candidate path;
when the candidate collides with a path already assigned, with a path the
specification reserves for its own files, or would nest under or over one of
those (a file where a directory is needed or vice versa), the candidate is
remediated:

1. move it under a directory named after the file's role
   ("manuscript/mets.xml"), or "manuscript-1/" and so on when a file
   already has the role's name;
2. if that is taken too, add a numeric suffix before the extension
   ("manuscript/mets-1.xml", "manuscript/mets-2.xml", ...), first dropping
   the candidate's own directories if a file sits at one of them.

The result depends only on the submission and the specification, so the same
submission always gets the same layout. Comparisons ignore case, since
packages are routinely extracted onto case-insensitive file systems.
"""

import logging
import posixpath
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from schemas.submission import ContentFile, FileRole

from ..specifications.specification import PackagingSpecification

logger = logging.getLogger(__name__)

# Original file name -> package path
PlacementTable = Mapping[str, str]


def normalize_path(name: str) -> str:
    """Normalize a path for use inside a package.

    Backslashes become slashes; empty, "." and ".." segments are dropped so
    that no entry can escape the package root.

    Raises:
        ValueError: If nothing is left of the path
    """
    segments = [
        s for s in name.replace("\\", "/").split("/") if s not in ("", ".", "..")
    ]
    if not segments:
        raise ValueError(f"'{name}' is not a usable package path")
    return "/".join(segments)


def _parents(path: str) -> list[str]:
    segments = path.split("/")
    return ["/".join(segments[:i]) for i in range(1, len(segments))]


class _PathIndex:
    """Paths taken in a package, as files and as implied directories."""

    def __init__(self, reserved: Iterable[str] = ()):
        self._files: set[str] = set()
        self._dirs: set[str] = set()
        for path in reserved:
            self.add(normalize_path(path))

    def collides(self, path: str) -> bool:
        key = path.casefold()
        if key in self._files or key in self._dirs:
            return True
        return self.blocked(path)

    def blocked(self, path: str) -> bool:
        """Whether a file already sits where path needs a directory."""
        return any(parent.casefold() in self._files for parent in _parents(path))

    def is_file(self, path: str) -> bool:
        return path.casefold() in self._files

    def add(self, path: str) -> None:
        self._files.add(path.casefold())
        self._dirs.update(parent.casefold() for parent in _parents(path))


def _with_suffix(path: str, n: int) -> str:
    head, tail = posixpath.split(path)
    stem, ext = posixpath.splitext(tail)
    return posixpath.join(head, f"{stem}-{n}{ext}")


def _role_directory(role: FileRole, index: _PathIndex) -> str:
    directory = role.value
    n = 1
    while index.is_file(directory):
        directory = f"{role.value}-{n}"
        n += 1
    return directory


def _remediate(candidate: str, role: FileRole, index: _PathIndex) -> str:
    directory = _role_directory(role, index)
    scoped = f"{directory}/{candidate}"
    if not index.collides(scoped):
        return scoped

    # Suffixes only change the last segment, so nothing above it may be a file
    if index.blocked(scoped):
        scoped = f"{directory}/{posixpath.basename(candidate)}"
        if not index.collides(scoped):
            return scoped

    n = 1
    while index.collides(_with_suffix(scoped, n)):
        n += 1
    return _with_suffix(scoped, n)


def resolve_placements(
    files: Iterable[ContentFile],
    specification: PackagingSpecification,
) -> PlacementTable:
    """Assign a unique package path to every content file.

    Args:
        files: Content files in submission order
        specification: Packaging specification supplying the placement policy
                       and reserved paths

    Returns:
        Read-only mapping of original file name to package path

    Raises:
        ValueError: If two content files share a name, or a name cannot be
                    turned into a package path
    """
    index = _PathIndex(specification.reserved_paths)
    placements: dict[str, str] = {}

    for content_file in files:
        if content_file.name in placements:
            raise ValueError(f"duplicate content file name '{content_file.name}'")

        candidate = normalize_path(
            specification.place(content_file.name, content_file.role)
        )
        path = candidate
        if index.collides(candidate):
            path = _remediate(candidate, content_file.role, index)
            logger.info(
                f"Placed {content_file.name} at {path}: {candidate} is already taken"
            )

        index.add(path)
        placements[content_file.name] = path

    return MappingProxyType(placements)
