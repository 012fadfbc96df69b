"""Per-repository configuration schemas.

Repository configuration is a JSON object keyed by repository name:

    {
      "JScholarship": {
        "deposit-config": {
          "processor": "sword-dspace",
          "mapping": {
            "http://dspace.org/state/archived": "accepted",
            "http://dspace.org/state/withdrawn": "rejected",
            "default-mapping": "submitted"
          }
        },
        "assembler": {
          "specification": "http://purl.org/net/sword/package/METSDSpaceSIP"
        },
        "transport-config": {
          "protocol-binding": {"protocol": "SWORDv2", ...}
        }
      }
    }

Transport fields are carried verbatim for the transport layer.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from .package import ArchiveFormat, Compression
from .status import DepositStatus

DEFAULT_MAPPING_KEY = "default-mapping"


class DepositConfig(BaseModel):
    """Status-processing configuration of a repository.

    Attributes:
        processor: Name of the status processor in the processor registry
        mapping: Canonical state token to domain status; must contain
                 a "default-mapping" entry
    """

    processor: str = "sword-dspace"
    mapping: dict[str, DepositStatus]

    @field_validator("mapping")
    @classmethod
    def _require_default_mapping(
        cls, mapping: dict[str, DepositStatus]
    ) -> dict[str, DepositStatus]:
        if DEFAULT_MAPPING_KEY not in mapping:
            raise ValueError(f"mapping must include '{DEFAULT_MAPPING_KEY}'")
        return mapping

    @property
    def default_status(self) -> DepositStatus:
        return self.mapping[DEFAULT_MAPPING_KEY]


class AssemblerConfig(BaseModel):
    """Packaging preferences of a repository.

    Attributes:
        specification: Identifier of the packaging specification
        archive: Archive format override (specification default when None)
        compression: Compression override (specification default when None)
    """

    specification: str
    archive: ArchiveFormat | None = None
    compression: Compression | None = None


class ProtocolBinding(BaseModel):
    """Transport protocol settings, passed through to the transport layer."""

    protocol: str
    username: str | None = None
    password: str | None = None
    server_fqdn: str | None = Field(default=None, alias="server-fqdn")
    server_port: str | None = Field(default=None, alias="server-port")
    service_doc: str | None = Field(default=None, alias="service-doc")
    default_collection: str | None = Field(default=None, alias="default-collection")
    on_behalf_of: str | None = Field(default=None, alias="on-behalf-of")
    deposit_receipt: bool | None = Field(default=None, alias="deposit-receipt")
    user_agent: str | None = Field(default=None, alias="user-agent")

    model_config = {"extra": "allow", "populate_by_name": True}


class TransportConfig(BaseModel):
    protocol_binding: ProtocolBinding = Field(alias="protocol-binding")

    model_config = {"extra": "allow", "populate_by_name": True}


class RepositoryConfig(BaseModel):
    """Configuration of a single target repository."""

    deposit_config: DepositConfig = Field(alias="deposit-config")
    assembler: AssemblerConfig | None = None
    transport_config: TransportConfig | None = Field(
        default=None, alias="transport-config"
    )

    model_config = {"extra": "allow", "populate_by_name": True}

    @property
    def mapping(self) -> dict[str, DepositStatus]:
        return self.deposit_config.mapping


def parse_repositories(data: dict[str, Any]) -> dict[str, RepositoryConfig]:
    """Validate a raw configuration object keyed by repository name."""
    return {
        name: RepositoryConfig.model_validate(value) for name, value in data.items()
    }
