"""Package schemas.

Describe the artifact an assembler produces: the package as a whole
(PackageMetadata) and every file placed inside it (PackageResource). Both are
immutable once built; use the builders in
``deposit_services.assemblers.builders`` to accumulate them.
"""

from enum import Enum

from pydantic import BaseModel

from .submission import FileRole


class ArchiveFormat(str, Enum):
    NONE = "none"
    TAR = "tar"
    ZIP = "zip"


class Compression(str, Enum):
    NONE = "none"
    GZIP = "gzip"
    BZIP2 = "bzip2"


class PackageResource(BaseModel):
    """A file as placed inside a package.

    Attributes:
        original_name: Name of the file in the submission (or of the
                       generated file, for supplementary files)
        package_path: Path of the file inside the package, after remediation
        role: Role of the custodial file; None for generated files
        size_bytes: Number of bytes written
        checksums: Hex digests keyed by hashlib algorithm name
        mime_type: MIME type of the file
    """

    original_name: str
    package_path: str
    role: FileRole | None = None
    size_bytes: int
    checksums: dict[str, str] = {}
    mime_type: str = "application/octet-stream"

    model_config = {"frozen": True}

    @property
    def remediated(self) -> bool:
        return self.original_name != self.package_path


class PackageMetadata(BaseModel):
    """Metadata of a finished package.

    Attributes:
        name: Suggested file name of the package (e.g. "sub-1.tar.gz")
        specification: Identifier of the packaging specification
        archive: Archive format of the package
        compression: Compression applied over the archive
        size_bytes: Total size of the package stream
        checksums: Hex digests of the package stream keyed by algorithm
        mime_type: MIME type of the package stream
    """

    name: str
    specification: str
    archive: ArchiveFormat
    compression: Compression
    size_bytes: int
    checksums: dict[str, str] = {}
    mime_type: str

    model_config = {"frozen": True}

    @property
    def archived(self) -> bool:
        return self.archive is not ArchiveFormat.NONE

    @property
    def compressed(self) -> bool:
        return self.compression is not Compression.NONE
