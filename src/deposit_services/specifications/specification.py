"""Base class for packaging specifications."""

from abc import ABC, abstractmethod

from schemas.package import ArchiveFormat, Compression, PackageResource
from schemas.submission import FileRole, Submission


class PackagingSpecification(ABC):
    """Abstract base class for packaging specifications.

    A packaging specification decides where custodial files go inside a
    package and which supplementary files (manifests, metadata documents) the
    package carries alongside them.

    Attributes:
        identifier: URI or name identifying the specification
        reserved_paths: Paths the specification's own files occupy
        required_metadata: Submission metadata keys that must be present
        default_archive: Archive format used unless configured otherwise
        default_compression: Compression used unless configured otherwise
    """

    identifier: str = ""
    reserved_paths: frozenset[str] = frozenset()
    required_metadata: tuple[str, ...] = ()
    default_archive: ArchiveFormat = ArchiveFormat.ZIP
    default_compression: Compression = Compression.NONE

    @abstractmethod
    def place(self, original_name: str, role: FileRole) -> str:
        """Propose a package path for a custodial file.

        Must be a pure function of its arguments. Collisions are resolved by
        the caller.

        Args:
            original_name: Name of the file in the submission
            role: Role of the file

        Returns:
            Candidate path inside the package
        """
        pass

    @abstractmethod
    def supplementary_files(
        self,
        submission: Submission,
        resources: list[PackageResource],
    ) -> list[tuple[str, bytes]]:
        """Generate the specification's own files.

        Called once every custodial file has been written, so resources
        carry final package paths, sizes and checksums.

        Args:
            submission: The submission being packaged
            resources: Custodial resources in package order

        Returns:
            List of (package path, content) pairs, in writing order
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.identifier!r})"
