"""DSpace METS SIP packaging specification.

Builds the mets.xml manifest expected by DSpace's SWORD v2 METS ingester:
a DIM dmdSec carrying the submission metadata, a fileSec listing every
custodial file at its final package path, and a logical structMap tying the
two together. Custodial files sit at the package root next to mets.xml.
"""

import logging

from lxml import etree

from schemas.package import ArchiveFormat, Compression, PackageResource
from schemas.submission import FileRole, Submission

from .specification import PackagingSpecification

logger = logging.getLogger(__name__)

METS_NS = "http://www.loc.gov/METS/"
DIM_NS = "http://www.dspace.org/xmlns/dspace/dim"
XLINK_NS = "http://www.w3.org/1999/xlink"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"

METS_PATH = "mets.xml"
METS_ID = "sword-mets"
METS_PROFILE = "DSpace METS SIP Profile 1.0"

# Submission metadata key -> (schema, element, qualifier)
DIM_FIELDS: dict[str, tuple[str, str, str | None]] = {
    "title": ("dc", "title", None),
    "abstract": ("dc", "description", "abstract"),
    "authors": ("dc", "contributor", "author"),
    "journal": ("dc", "relation", "ispartof"),
    "publisher": ("dc", "publisher", None),
    "doi": ("dc", "identifier", "doi"),
    "date": ("dc", "date", "issued"),
    "embargo": ("dc", "date", "embargo"),
}

# hashlib name -> METS CHECKSUMTYPE, in order of preference
METS_CHECKSUM_TYPES = {
    "md5": "MD5",
    "sha256": "SHA-256",
    "sha512": "SHA-512",
    "sha1": "SHA-1",
}


class DSpaceMETSSpecification(PackagingSpecification):
    """Package a submission as a DSpace METS SIP."""

    identifier = "http://purl.org/net/sword/package/METSDSpaceSIP"
    reserved_paths = frozenset({METS_PATH})
    required_metadata = ("title",)
    default_archive = ArchiveFormat.ZIP
    default_compression = Compression.NONE

    def place(self, original_name: str, role: FileRole) -> str:
        return original_name

    def supplementary_files(
        self,
        submission: Submission,
        resources: list[PackageResource],
    ) -> list[tuple[str, bytes]]:
        mets_root = self._build_mets(submission, resources)
        logger.debug(f"Built METS for submission {submission.id}")
        return [
            (
                METS_PATH,
                etree.tostring(
                    mets_root,
                    xml_declaration=True,
                    encoding="UTF-8",
                    pretty_print=True,
                ),
            )
        ]

    def _build_mets(
        self,
        submission: Submission,
        resources: list[PackageResource],
    ) -> etree._Element:
        """Build the METS root element with all sections."""
        nsmap = {
            None: METS_NS,
            "xlink": XLINK_NS,
            "xsi": XSI_NS,
        }
        root = etree.Element(f"{{{METS_NS}}}mets", nsmap=nsmap)
        root.set(
            f"{{{XSI_NS}}}schemaLocation",
            f"{METS_NS} http://www.loc.gov/standards/mets/mets.xsd",
        )
        root.set("ID", METS_ID)
        root.set("OBJID", METS_ID)
        root.set("LABEL", "DSpace SWORD Item")
        root.set("PROFILE", METS_PROFILE)

        root.append(self._build_mets_hdr())
        root.append(self._build_dmd_sec(submission))
        root.append(self._build_file_sec(resources))
        root.append(self._build_struct_map(resources))

        return root

    def _build_mets_hdr(self) -> etree._Element:
        hdr = etree.Element(f"{{{METS_NS}}}metsHdr")
        agent = etree.SubElement(hdr, f"{{{METS_NS}}}agent")
        agent.set("ROLE", "CUSTODIAN")
        agent.set("TYPE", "ORGANIZATION")
        name = etree.SubElement(agent, f"{{{METS_NS}}}name")
        name.text = "deposit-services"
        return hdr

    def _build_dmd_sec(self, submission: Submission) -> etree._Element:
        """Build the dmdSec with the submission metadata as DIM fields."""
        dmd = etree.Element(f"{{{METS_NS}}}dmdSec")
        dmd.set("ID", f"{METS_ID}-dmd-1")
        dmd.set("GROUPID", f"{METS_ID}-dmd-1_group-1")

        md_wrap = etree.SubElement(dmd, f"{{{METS_NS}}}mdWrap")
        md_wrap.set("LABEL", "DIM Metadata")
        md_wrap.set("MDTYPE", "OTHER")
        md_wrap.set("OTHERMDTYPE", "DIM")
        md_wrap.set("MIMETYPE", "text/xml")

        xml_data = etree.SubElement(md_wrap, f"{{{METS_NS}}}xmlData")
        dim = etree.SubElement(xml_data, f"{{{DIM_NS}}}dim", nsmap={"dim": DIM_NS})

        for key, (schema, element, qualifier) in DIM_FIELDS.items():
            value = submission.metadata.get(key)
            if not value:
                continue
            # Authors arrive as one "; "-separated value
            values = value.split(";") if key == "authors" else [value]
            for v in values:
                field = etree.SubElement(dim, f"{{{DIM_NS}}}field")
                field.set("mdschema", schema)
                field.set("element", element)
                if qualifier:
                    field.set("qualifier", qualifier)
                field.text = v.strip()

        return dmd

    def _build_file_sec(self, resources: list[PackageResource]) -> etree._Element:
        """Build the fileSec with one CONTENT file per custodial resource."""
        file_sec = etree.Element(f"{{{METS_NS}}}fileSec")
        file_grp = etree.SubElement(file_sec, f"{{{METS_NS}}}fileGrp")
        file_grp.set("ID", f"{METS_ID}-fgrp-1")
        file_grp.set("USE", "CONTENT")

        for n, resource in enumerate(resources, start=1):
            file_el = etree.SubElement(file_grp, f"{{{METS_NS}}}file")
            file_el.set("ID", f"{METS_ID}-file-{n}")
            file_el.set("GROUPID", f"{METS_ID}-file-{n}")
            file_el.set("MIMETYPE", resource.mime_type)
            file_el.set("SIZE", str(resource.size_bytes))

            checksum = self._preferred_checksum(resource)
            if checksum is not None:
                file_el.set("CHECKSUMTYPE", checksum[0])
                file_el.set("CHECKSUM", checksum[1])

            flocat = etree.SubElement(file_el, f"{{{METS_NS}}}FLocat")
            flocat.set("LOCTYPE", "URL")
            flocat.set(f"{{{XLINK_NS}}}href", resource.package_path)

        return file_sec

    def _build_struct_map(self, resources: list[PackageResource]) -> etree._Element:
        struct_map = etree.Element(f"{{{METS_NS}}}structMap")
        struct_map.set("ID", f"{METS_ID}-struct-1")
        struct_map.set("LABEL", "structure")
        struct_map.set("TYPE", "LOGICAL")

        item_div = etree.SubElement(struct_map, f"{{{METS_NS}}}div")
        item_div.set("ID", f"{METS_ID}-div-1")
        item_div.set("DMDID", f"{METS_ID}-dmd-1")
        item_div.set("TYPE", "SWORD Object")

        for n, resource in enumerate(resources, start=1):
            file_div = etree.SubElement(item_div, f"{{{METS_NS}}}div")
            file_div.set("ID", f"{METS_ID}-div-{n + 1}")
            file_div.set("TYPE", "File")
            if resource.role is not None:
                file_div.set("LABEL", resource.role.value)
            fptr = etree.SubElement(file_div, f"{{{METS_NS}}}fptr")
            fptr.set("FILEID", f"{METS_ID}-file-{n}")

        return struct_map

    def _preferred_checksum(self, resource: PackageResource) -> tuple[str, str] | None:
        for algorithm, checksum_type in METS_CHECKSUM_TYPES.items():
            if algorithm in resource.checksums:
                return checksum_type, resource.checksums[algorithm]
        return None
