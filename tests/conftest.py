"""Pytest fixtures for deposit services tests."""

import bz2
import gzip
import io
import json
import tarfile
import zipfile

import pytest

from schemas.package import ArchiveFormat, Compression
from schemas.repository import parse_repositories
from schemas.submission import ContentFile, FileRole, Submission

ATOM_NS = "http://www.w3.org/2005/Atom"
SWORD_STATE_SCHEME = "http://purl.org/net/sword/terms/state"


def _content_file(name: str, data: bytes, role: FileRole, size_hint: bool = True):
    return ContentFile(
        name=name,
        role=role,
        opener=lambda: io.BytesIO(data),
        size=len(data) if size_hint else None,
    )


@pytest.fixture
def sample_file_contents():
    """Content files of a typical manuscript submission."""
    return {
        "manuscript.pdf": b"%PDF-1.4 manuscript body\n" * 200,
        "figure1.png": bytes(range(256)) * 40,
        "supplement/data.csv": b"id,value\n1,0.5\n2,0.75\n",
    }


@pytest.fixture
def sample_metadata():
    return {
        "title": "Effects of Something on Something Else",
        "journal": "Journal of Examples",
        "issn": "1234-5678",
        "doi": "10.1234/example.5678",
        "authors": "Jane Doe; John Smith",
    }


@pytest.fixture
def make_submission(sample_file_contents, sample_metadata):
    """Factory building in-memory submissions.

    Files are given as (name, bytes, role) tuples; defaults to the sample
    manuscript submission.
    """

    def _make(files=None, metadata=None, submission_id="fake:submission1", size_hint=True):
        if files is None:
            roles = {
                "manuscript.pdf": FileRole.MANUSCRIPT,
                "figure1.png": FileRole.FIGURE,
                "supplement/data.csv": FileRole.SUPPLEMENT,
            }
            files = [
                (name, data, roles[name]) for name, data in sample_file_contents.items()
            ]
        content_files = tuple(
            _content_file(name, data, role, size_hint) for name, data, role in files
        )
        return Submission(
            id=submission_id,
            files=content_files,
            metadata=sample_metadata if metadata is None else metadata,
        )

    return _make


@pytest.fixture
def read_package():
    """Return a function extracting a package's bytes into {path: bytes}."""

    def _read(data: bytes, archive: ArchiveFormat, compression: Compression, name="payload"):
        if compression is Compression.GZIP:
            data = gzip.decompress(data)
        elif compression is Compression.BZIP2:
            data = bz2.decompress(data)

        if archive is ArchiveFormat.ZIP:
            with zipfile.ZipFile(io.BytesIO(data)) as zf:
                return {info.filename: zf.read(info) for info in zf.infolist()}
        if archive is ArchiveFormat.TAR:
            with tarfile.open(fileobj=io.BytesIO(data), mode="r:") as tf:
                return {
                    member.name: tf.extractfile(member).read()
                    for member in tf.getmembers()
                    if member.isfile()
                }
        return {name: data}

    return _read


@pytest.fixture
def repositories_data():
    """Raw repository configuration as found in repositories.json."""
    return {
        "JScholarship": {
            "deposit-config": {
                "processor": "sword-dspace",
                "mapping": {
                    "http://dspace.org/state/archived": "accepted",
                    "http://dspace.org/state/withdrawn": "rejected",
                    "default-mapping": "submitted",
                },
            },
            "assembler": {
                "specification": "http://purl.org/net/sword/package/METSDSpaceSIP"
            },
            "transport-config": {
                "protocol-binding": {
                    "protocol": "SWORDv2",
                    "username": "depositor",
                    "password": "secret",
                    "server-fqdn": "jscholarship.library.jhu.edu",
                    "service-doc": "https://jscholarship.library.jhu.edu/swordv2/servicedocument",
                    "default-collection": "https://jscholarship.library.jhu.edu/swordv2/collection/1774.2/36002",
                    "on-behalf-of": "researcher@jhu.edu",
                    "deposit-receipt": True,
                    "user-agent": "pass-deposit/1.0",
                }
            },
        },
        "PubMed Central": {
            "deposit-config": {
                "mapping": {"default-mapping": "submitted"},
            },
            "assembler": {
                "specification": "nihms-native-2017-07",
                "archive": "tar",
                "compression": "gzip",
            },
            "transport-config": {
                "protocol-binding": {
                    "protocol": "ftp",
                    "server-fqdn": "ftp.ncbi.nlm.nih.gov",
                }
            },
        },
    }


@pytest.fixture
def repositories(repositories_data):
    return parse_repositories(repositories_data)


@pytest.fixture
def repositories_file(tmp_path, repositories_data):
    path = tmp_path / "repositories.json"
    path.write_text(json.dumps(repositories_data, indent=2))
    return path


@pytest.fixture
def atom_statement():
    """Return a function building a SWORD statement with the given state terms."""

    def _build(*terms, scheme=SWORD_STATE_SCHEME, on_entry=False) -> bytes:
        categories = "".join(
            f'<category scheme="{scheme}" term="{term}" label="State">'
            f"Deposit state</category>"
            for term in terms
        )
        entry_categories = categories if on_entry else ""
        feed_categories = "" if on_entry else categories
        return (
            f'<?xml version="1.0" encoding="UTF-8"?>'
            f'<feed xmlns="{ATOM_NS}">'
            f"<id>http://example.org/statement/1</id>"
            f"<title>Deposit statement</title>"
            f"{feed_categories}"
            f"<entry><id>urn:uuid:1</id><title>manuscript.pdf</title>"
            f'<category scheme="http://purl.org/net/sword/terms/originalDeposit" '
            f'term="http://purl.org/net/sword/terms/originalDeposit"/>'
            f"{entry_categories}</entry>"
            f"</feed>"
        ).encode("utf-8")

    return _build
