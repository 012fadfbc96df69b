"""Schema definitions for deposit services."""

from .package import ArchiveFormat, Compression, PackageMetadata, PackageResource
from .repository import (
    DEFAULT_MAPPING_KEY,
    AssemblerConfig,
    DepositConfig,
    ProtocolBinding,
    RepositoryConfig,
    TransportConfig,
    parse_repositories,
)
from .status import SWORD_STATE_PRECEDENCE, SWORD_STATE_SCHEME, DepositStatus, SwordState
from .submission import (
    ContentFile,
    FileRole,
    Submission,
    SubmissionFileEntry,
    SubmissionManifest,
)

__all__ = [
    "ArchiveFormat",
    "AssemblerConfig",
    "Compression",
    "ContentFile",
    "DEFAULT_MAPPING_KEY",
    "DepositConfig",
    "DepositStatus",
    "FileRole",
    "PackageMetadata",
    "PackageResource",
    "ProtocolBinding",
    "RepositoryConfig",
    "SWORD_STATE_PRECEDENCE",
    "SWORD_STATE_SCHEME",
    "Submission",
    "SubmissionFileEntry",
    "SubmissionManifest",
    "SwordState",
    "TransportConfig",
    "parse_repositories",
]
