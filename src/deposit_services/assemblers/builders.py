"""Builders accumulating facts about package resources and packages.

Sizes and checksums are only known once bytes have been streamed, so the
assembler collects them on a builder as it goes and builds the immutable
schema object at the end.
"""

import mimetypes

from schemas.package import ArchiveFormat, Compression, PackageMetadata, PackageResource
from schemas.submission import FileRole

DEFAULT_MIME_TYPE = "application/octet-stream"

PACKAGE_EXTENSIONS = {
    ArchiveFormat.TAR: ".tar",
    ArchiveFormat.ZIP: ".zip",
    Compression.GZIP: ".gz",
    Compression.BZIP2: ".bz2",
}


def package_mime_type(archive: ArchiveFormat, compression: Compression) -> str:
    """MIME type of a package stream; the outermost layer wins."""
    if compression is Compression.GZIP:
        return "application/gzip"
    if compression is Compression.BZIP2:
        return "application/x-bzip2"
    if archive is ArchiveFormat.ZIP:
        return "application/zip"
    if archive is ArchiveFormat.TAR:
        return "application/x-tar"
    return DEFAULT_MIME_TYPE


def package_file_name(
    base_name: str, archive: ArchiveFormat, compression: Compression
) -> str:
    """File name for a package, e.g. "sub-1.tar.gz"."""
    return (
        base_name
        + PACKAGE_EXTENSIONS.get(archive, "")
        + PACKAGE_EXTENSIONS.get(compression, "")
    )


class ResourceBuilder:
    """Accumulates the facts describing one resource in a package."""

    def __init__(self):
        self._original_name: str | None = None
        self._package_path: str | None = None
        self._role: FileRole | None = None
        self._size_bytes: int | None = None
        self._checksums: dict[str, str] = {}
        self._mime_type: str | None = None

    def original_name(self, name: str) -> "ResourceBuilder":
        self._original_name = name
        return self

    def package_path(self, path: str) -> "ResourceBuilder":
        self._package_path = path
        return self

    def role(self, role: FileRole | None) -> "ResourceBuilder":
        self._role = role
        return self

    def size_bytes(self, size: int) -> "ResourceBuilder":
        self._size_bytes = size
        return self

    def checksum(self, algorithm: str, digest: str) -> "ResourceBuilder":
        self._checksums[algorithm] = digest
        return self

    def mime_type(self, mime_type: str) -> "ResourceBuilder":
        self._mime_type = mime_type
        return self

    def build(self) -> PackageResource:
        """Build the resource.

        Raises:
            ValueError: If the package path or size has not been set
        """
        if self._package_path is None:
            raise ValueError("resource has no package path")
        if self._size_bytes is None:
            raise ValueError(f"resource {self._package_path} has no size")

        mime_type = self._mime_type
        if mime_type is None:
            mime_type = mimetypes.guess_type(self._package_path)[0] or DEFAULT_MIME_TYPE

        return PackageResource(
            original_name=self._original_name or self._package_path,
            package_path=self._package_path,
            role=self._role,
            size_bytes=self._size_bytes,
            checksums=dict(self._checksums),
            mime_type=mime_type,
        )


class MetadataBuilder:
    """Accumulates the facts describing a whole package."""

    def __init__(self):
        self._name: str | None = None
        self._specification: str | None = None
        self._archive = ArchiveFormat.NONE
        self._compression = Compression.NONE
        self._size_bytes: int | None = None
        self._checksums: dict[str, str] = {}
        self._mime_type: str | None = None

    def name(self, name: str) -> "MetadataBuilder":
        self._name = name
        return self

    def specification(self, specification: str) -> "MetadataBuilder":
        self._specification = specification
        return self

    def archive(self, archive: ArchiveFormat) -> "MetadataBuilder":
        self._archive = archive
        return self

    def compression(self, compression: Compression) -> "MetadataBuilder":
        self._compression = compression
        return self

    def size_bytes(self, size: int) -> "MetadataBuilder":
        self._size_bytes = size
        return self

    def checksum(self, algorithm: str, digest: str) -> "MetadataBuilder":
        self._checksums[algorithm] = digest
        return self

    def mime_type(self, mime_type: str) -> "MetadataBuilder":
        self._mime_type = mime_type
        return self

    def build(self) -> PackageMetadata:
        """Build the package metadata.

        Raises:
            ValueError: If name, specification or size has not been set
        """
        if self._name is None or self._specification is None:
            raise ValueError("package metadata requires a name and a specification")
        if self._size_bytes is None:
            raise ValueError(f"package {self._name} has no size")

        return PackageMetadata(
            name=self._name,
            specification=self._specification,
            archive=self._archive,
            compression=self._compression,
            size_bytes=self._size_bytes,
            checksums=dict(self._checksums),
            mime_type=self._mime_type
            or package_mime_type(self._archive, self._compression),
        )
