"""The artifact produced by an assembler."""

import logging
import shutil
import weakref
from pathlib import Path
from typing import BinaryIO

from schemas.package import PackageMetadata, PackageResource

logger = logging.getLogger(__name__)


def _discard(path: Path) -> None:
    path.unlink(missing_ok=True)
    logger.debug(f"Removed package file {path}")


class PackageStream:
    """A finished package: its bytes, its metadata and its resources.

    The bytes live in a temporary file owned by the stream. Every call to
    open() returns a new reader positioned at the start of the same bytes.
    The file is removed by close() (or when the stream is garbage collected);
    use the stream as a context manager to scope it.

    Example:
        with assembler.assemble(submission) as package:
            with package.open() as data:
                transport.send(data, package.metadata)
    """

    def __init__(
        self,
        path: Path,
        metadata: PackageMetadata,
        resources: list[PackageResource],
    ):
        self._path = path
        self._metadata = metadata
        self._resources = tuple(resources)
        self._finalizer = weakref.finalize(self, _discard, path)

    def __repr__(self) -> str:
        return f"PackageStream({self._metadata.name})"

    @property
    def metadata(self) -> PackageMetadata:
        return self._metadata

    @property
    def resources(self) -> tuple[PackageResource, ...]:
        """Every file in the package, custodial files first, in package order."""
        return self._resources

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def resource(self, original_name: str) -> PackageResource:
        """Look up a resource by its name in the submission.

        Raises:
            KeyError: If no resource has that original name
        """
        for resource in self._resources:
            if resource.original_name == original_name:
                return resource
        raise KeyError(original_name)

    def open(self) -> BinaryIO:
        """Open a new reader over the package bytes.

        Raises:
            ValueError: If the stream has been closed
        """
        if self.closed:
            raise ValueError(f"package stream {self._metadata.name} is closed")
        return self._path.open("rb")

    def write_to(self, destination: Path) -> Path:
        """Copy the package bytes to destination.

        Returns:
            The destination path
        """
        with self.open() as source, destination.open("wb") as target:
            shutil.copyfileobj(source, target)
        return destination

    def close(self) -> None:
        """Release the backing temporary file."""
        self._finalizer()

    def __enter__(self) -> "PackageStream":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
