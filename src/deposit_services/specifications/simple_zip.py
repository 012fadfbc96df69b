"""SWORD SimpleZip packaging: the content files and nothing else."""

from schemas.package import ArchiveFormat, PackageResource
from schemas.submission import FileRole, Submission

from .specification import PackagingSpecification


class SimpleZipSpecification(PackagingSpecification):
    """Package custodial files under their submission names, without manifests."""

    identifier = "http://purl.org/net/sword/package/SimpleZip"
    default_archive = ArchiveFormat.ZIP

    def place(self, original_name: str, role: FileRole) -> str:
        return original_name

    def supplementary_files(
        self,
        submission: Submission,
        resources: list[PackageResource],
    ) -> list[tuple[str, bytes]]:
        return []
