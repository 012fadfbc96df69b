"""Hints handed to the SWORD v2 transport layer.

The transport layer opens its sessions from a flat dict of string hints;
these are the keys it understands.
"""

from schemas.repository import RepositoryConfig

from ..exceptions import ConfigurationError

SWORD_SERVICE_DOC_URL = "deposit.transport.protocol.swordv2.service-doc"
SWORD_COLLECTION_URL = "deposit.transport.protocol.swordv2.target-collection"
SWORD_ON_BEHALF_OF_USER = "deposit.transport.protocol.swordv2.on-behalf-of"
SWORD_DEPOSIT_RECEIPT_FLAG = "deposit.transport.protocol.swordv2.deposit-receipt"
SWORD_CLIENT_USER_AGENT = "deposit.transport.protocol.swordv2.user-agent-string"


def transport_hints(repository: RepositoryConfig) -> dict[str, str]:
    """Translate a repository's protocol binding into transport hints.

    Only settings present in the binding are emitted.

    Raises:
        ConfigurationError: If the repository has no transport configuration
    """
    if repository.transport_config is None:
        raise ConfigurationError("repository has no transport configuration")

    binding = repository.transport_config.protocol_binding
    hints: dict[str, str] = {}
    if binding.service_doc:
        hints[SWORD_SERVICE_DOC_URL] = binding.service_doc
    if binding.default_collection:
        hints[SWORD_COLLECTION_URL] = binding.default_collection
    if binding.on_behalf_of:
        hints[SWORD_ON_BEHALF_OF_USER] = binding.on_behalf_of
    if binding.deposit_receipt is not None:
        hints[SWORD_DEPOSIT_RECEIPT_FLAG] = str(binding.deposit_receipt).lower()
    if binding.user_agent:
        hints[SWORD_CLIENT_USER_AGENT] = binding.user_agent
    return hints
