"""Assembler turning submissions into packages.

Assembly runs in three stages:

1. placement: every content file gets its final package path
   (see ``placement.resolve_placements``), before any byte is written;
2. composition: content files are streamed in submission order through the
   archive writer and the checksum accumulators, followed by the
   specification's supplementary files, optionally compressed on the fly,
   into a temporary file;
3. finalization: package metadata is built from the size and checksums
   accumulated while writing.

The temporary file is handed to the returned PackageStream, or removed if
assembly fails.
"""

import hashlib
import logging
import os
import posixpath
import re
import tempfile
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path

from schemas.package import ArchiveFormat, Compression, PackageMetadata, PackageResource
from schemas.repository import RepositoryConfig
from schemas.submission import ContentFile, Submission

from ..exceptions import AssemblyError, ConfigurationError
from ..specifications import PackagingSpecification, specification_for
from .builders import MetadataBuilder, ResourceBuilder, package_file_name
from .package_stream import PackageStream
from .placement import PlacementTable, resolve_placements
from .streaming import ArchiveWriter, DigestingReader, DigestingWriter, open_archive, open_compressor

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHMS = ("sha256", "md5")


@dataclass(frozen=True)
class AssemblerOptions:
    """Packaging options.

    Attributes:
        archive: Archive format; the specification's default when None
        compression: Compression; the specification's default when None
        algorithms: hashlib algorithms computed for every resource and for
                    the package, the first being the primary one
        temp_dir: Directory for package files (system default when None)
    """

    archive: ArchiveFormat | None = None
    compression: Compression | None = None
    algorithms: tuple[str, ...] = DEFAULT_ALGORITHMS
    temp_dir: Path | None = None


class Assembler:
    """Assemble submissions into packages for one packaging specification.

    Assemblers hold no per-submission state, so one instance may assemble
    any number of submissions, concurrently if need be.

    Example:
        assembler = Assembler(DSpaceMETSSpecification())
        with assembler.assemble(submission) as package:
            package.write_to(Path("package.zip"))
    """

    def __init__(
        self,
        specification: PackagingSpecification,
        options: AssemblerOptions | None = None,
    ):
        self.specification = specification
        self.options = options or AssemblerOptions()

        if not self.options.algorithms:
            raise ConfigurationError("at least one checksum algorithm is required")
        for algorithm in self.options.algorithms:
            if algorithm not in hashlib.algorithms_available:
                raise ConfigurationError(f"Unsupported checksum algorithm: {algorithm}")

    @classmethod
    def for_repository(
        cls, repository: RepositoryConfig, temp_dir: Path | None = None
    ) -> "Assembler":
        """Build the assembler configured for a repository.

        Raises:
            ConfigurationError: If the repository has no assembler configuration
                                or names an unknown specification
        """
        if repository.assembler is None:
            raise ConfigurationError("repository has no assembler configuration")

        config = repository.assembler
        options = AssemblerOptions(
            archive=config.archive,
            compression=config.compression,
            temp_dir=temp_dir,
        )
        return cls(specification_for(config.specification), options)

    @property
    def archive(self) -> ArchiveFormat:
        return self.options.archive or self.specification.default_archive

    @property
    def compression(self) -> Compression:
        return self.options.compression or self.specification.default_compression

    def assemble(self, submission: Submission) -> PackageStream:
        """Assemble a submission into a package.

        Args:
            submission: The submission to package

        Returns:
            PackageStream over the finished package

        Raises:
            AssemblyError: If the submission has no files, lacks required
                           metadata, or its bytes cannot be packaged
        """
        self._validate(submission)

        try:
            placements = resolve_placements(submission.files, self.specification)
        except ValueError as e:
            raise AssemblyError(
                f"Cannot place files of submission {submission.id}: {e}",
                submission_id=submission.id,
            ) from e

        logger.info(
            f"Assembling submission {submission.id} ({len(submission.files)} files) "
            f"as {self.specification.identifier} "
            f"[{self.archive.value}/{self.compression.value}]"
        )

        fd, temp_name = tempfile.mkstemp(
            prefix="package-", suffix=".tmp", dir=self.options.temp_dir
        )
        path = Path(temp_name)
        try:
            with os.fdopen(fd, "wb") as out:
                sink = DigestingWriter(out, self.options.algorithms)
                resources = self._compose(submission, placements, sink)
            metadata = self._finalize(submission, resources, sink)
        except BaseException:
            path.unlink(missing_ok=True)
            raise

        logger.info(
            f"Assembled {metadata.name} for submission {submission.id}: "
            f"{len(resources)} files, {metadata.size_bytes} bytes"
        )
        return PackageStream(path, metadata, resources)

    def _validate(self, submission: Submission) -> None:
        if not submission.files:
            raise AssemblyError(
                f"Refusing to assemble submission {submission.id}: it has no files",
                submission_id=submission.id,
            )

        missing = [
            key
            for key in self.specification.required_metadata
            if not submission.metadata.get(key)
        ]
        if missing:
            raise AssemblyError(
                f"Submission {submission.id} is missing required metadata: "
                f"{', '.join(missing)}",
                submission_id=submission.id,
            )

    def _compose(
        self,
        submission: Submission,
        placements: PlacementTable,
        sink: DigestingWriter,
    ) -> list[PackageResource]:
        """Write every resource of the package into sink."""
        resources: list[PackageResource] = []
        try:
            with open_compressor(self.compression, sink) as compressed, open_archive(
                self.archive, compressed
            ) as writer:
                for content_file in submission.files:
                    resources.append(
                        self._write_custodial(
                            submission, content_file, placements[content_file.name], writer
                        )
                    )

                supplementary = self.specification.supplementary_files(
                    submission, list(resources)
                )
                taken = {r.package_path for r in resources}
                for package_path, content in supplementary:
                    if package_path in taken:
                        raise AssemblyError(
                            f"Generated file {package_path} collides with a content "
                            f"file of submission {submission.id}",
                            submission_id=submission.id,
                            file_name=package_path,
                        )
                    resources.append(
                        self._write_supplementary(submission, package_path, content, writer)
                    )
                    taken.add(package_path)
        except OSError as e:
            raise AssemblyError(
                f"Failed to write package for submission {submission.id}: {e}",
                submission_id=submission.id,
            ) from e

        return resources

    def _write_custodial(
        self,
        submission: Submission,
        content_file: ContentFile,
        package_path: str,
        writer: ArchiveWriter,
    ) -> PackageResource:
        try:
            with content_file.open() as source:
                reader = DigestingReader(source, self.options.algorithms)
                writer.add(package_path, reader, content_file.size)
        except (OSError, ValueError) as e:
            raise AssemblyError(
                f"Failed to package {content_file.name} of submission "
                f"{submission.id}: {e}",
                submission_id=submission.id,
                file_name=content_file.name,
            ) from e

        logger.debug(f"Wrote {content_file.name} as {package_path} ({reader.bytes_read} bytes)")
        builder = (
            ResourceBuilder()
            .original_name(content_file.name)
            .package_path(package_path)
            .role(content_file.role)
            .size_bytes(reader.bytes_read)
        )
        for algorithm, digest in reader.hexdigests().items():
            builder.checksum(algorithm, digest)
        return builder.build()

    def _write_supplementary(
        self,
        submission: Submission,
        package_path: str,
        content: bytes,
        writer: ArchiveWriter,
    ) -> PackageResource:
        reader = DigestingReader(BytesIO(content), self.options.algorithms)
        try:
            writer.add(package_path, reader, len(content))
        except ValueError as e:
            raise AssemblyError(
                f"Failed to add {package_path} to the package of submission "
                f"{submission.id}: {e}",
                submission_id=submission.id,
                file_name=package_path,
            ) from e

        logger.debug(f"Wrote generated file {package_path} ({len(content)} bytes)")
        builder = ResourceBuilder().package_path(package_path).size_bytes(len(content))
        for algorithm, digest in reader.hexdigests().items():
            builder.checksum(algorithm, digest)
        return builder.build()

    def _finalize(
        self,
        submission: Submission,
        resources: list[PackageResource],
        sink: DigestingWriter,
    ) -> PackageMetadata:
        if self.archive is ArchiveFormat.NONE:
            base_name = posixpath.basename(resources[0].package_path)
        else:
            base_name = re.sub(r"[^A-Za-z0-9._-]+", "_", submission.id).strip("_") or "package"

        builder = (
            MetadataBuilder()
            .name(package_file_name(base_name, self.archive, self.compression))
            .specification(self.specification.identifier)
            .archive(self.archive)
            .compression(self.compression)
            .size_bytes(sink.bytes_written)
        )
        for algorithm, digest in sink.hexdigests().items():
            builder.checksum(algorithm, digest)
        return builder.build()
