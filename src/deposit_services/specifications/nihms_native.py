"""NIHMS native packaging specification.

NIHMS bulk submission packages place custodial files at the package root by
their base names, next to two generated files: manifest.txt (one
tab-separated line per file: type, label, package path) and bulk_meta.xml
(the manuscript's descriptive metadata). Files whose base names clash are
remediated into role directories like in any other package, and
manifest.txt lists the path they end up at.
"""

import posixpath

from lxml import etree

from schemas.package import ArchiveFormat, Compression, PackageResource
from schemas.submission import FileRole, Submission

from .specification import PackagingSpecification

MANIFEST_PATH = "manifest.txt"
BULK_META_PATH = "bulk_meta.xml"


class NihmsNativeSpecification(PackagingSpecification):
    """Package a submission in the NIHMS native bulk submission format."""

    identifier = "nihms-native-2017-07"
    reserved_paths = frozenset({MANIFEST_PATH, BULK_META_PATH})
    required_metadata = ("title",)
    default_archive = ArchiveFormat.TAR
    default_compression = Compression.GZIP

    def place(self, original_name: str, role: FileRole) -> str:
        return posixpath.basename(original_name.replace("\\", "/")) or original_name

    def supplementary_files(
        self,
        submission: Submission,
        resources: list[PackageResource],
    ) -> list[tuple[str, bytes]]:
        return [
            (MANIFEST_PATH, self._build_manifest(resources)),
            (BULK_META_PATH, self._build_bulk_meta(submission)),
        ]

    def _build_manifest(self, resources: list[PackageResource]) -> bytes:
        lines = []
        for resource in resources:
            file_type = resource.role.value if resource.role else "supplement"
            label = posixpath.basename(resource.original_name)
            lines.append(f"{file_type}\t{label}\t{resource.package_path}\n")
        return "".join(lines).encode("utf-8")

    def _build_bulk_meta(self, submission: Submission) -> bytes:
        metadata = submission.metadata
        root = etree.Element("nihms-submit")

        title = etree.SubElement(root, "title")
        title.text = metadata["title"]

        if metadata.get("journal") or metadata.get("issn"):
            journal_meta = etree.SubElement(root, "journal-meta")
            if metadata.get("journal"):
                journal_title = etree.SubElement(journal_meta, "journal-title")
                journal_title.text = metadata["journal"]
            if metadata.get("issn"):
                issn = etree.SubElement(journal_meta, "issn")
                issn.text = metadata["issn"]

        if metadata.get("doi"):
            doi = etree.SubElement(root, "doi")
            doi.text = metadata["doi"]

        return etree.tostring(
            root, xml_declaration=True, encoding="UTF-8", pretty_print=True
        )
