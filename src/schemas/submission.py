"""Submission domain objects.

A submission is what a researcher hands over for deposit: an ordered set of
content files plus descriptive metadata. Submissions are read by assemblers
but never modified by them.

On disk a submission is a directory holding the content files and a
``submission.json`` manifest:

    {submission_dir}/
    ├── submission.json     # SubmissionManifest
    ├── manuscript.pdf
    └── supplement/
        └── data.csv
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import BinaryIO

from pydantic import BaseModel


class FileRole(str, Enum):
    """The part a content file plays in a submission."""

    MANUSCRIPT = "manuscript"
    SUPPLEMENT = "supplement"
    FIGURE = "figure"
    TABLE = "table"


@dataclass(frozen=True)
class ContentFile:
    """A single custodial file of a submission.

    Attributes:
        name: Relative path of the file, unique within the submission
        role: Role of the file (manuscript, supplement, ...)
        opener: Zero-argument callable returning a readable binary stream
        size: Size in bytes, if known in advance
    """

    name: str
    role: FileRole
    opener: Callable[[], BinaryIO] = field(repr=False, compare=False)
    size: int | None = None

    def open(self) -> BinaryIO:
        return self.opener()

    @classmethod
    def from_path(
        cls, path: Path, role: FileRole, name: str | None = None
    ) -> "ContentFile":
        """Build a ContentFile backed by a file on disk."""
        return cls(
            name=name or path.name,
            role=role,
            opener=lambda: path.open("rb"),
            size=path.stat().st_size,
        )


@dataclass(frozen=True)
class Submission:
    """A set of content files and descriptive metadata to be deposited.

    Attributes:
        id: Opaque submission identifier
        files: Content files in submission order
        metadata: Submission-level descriptive metadata (title, journal, ...)
    """

    id: str
    files: tuple[ContentFile, ...] = ()
    metadata: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "files", tuple(self.files))
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))


class SubmissionFileEntry(BaseModel):
    """A content file listed in a submission manifest.

    Attributes:
        name: Name of the file within the submission
        role: Role of the file
        path: Path of the file relative to the submission directory
              (defaults to name)
    """

    name: str
    role: FileRole = FileRole.MANUSCRIPT
    path: str | None = None


class SubmissionManifest(BaseModel):
    """JSON manifest describing a submission directory."""

    id: str
    metadata: dict[str, str] = {}
    files: list[SubmissionFileEntry] = []

    model_config = {"extra": "allow"}

    def to_submission(self, base_dir: Path) -> Submission:
        """Resolve the manifest's files against base_dir."""
        files = [
            ContentFile.from_path(
                base_dir / (entry.path or entry.name), entry.role, name=entry.name
            )
            for entry in self.files
        ]
        return Submission(id=self.id, files=tuple(files), metadata=self.metadata)
