"""Interfaces to the external transport layer."""

from .hints import (
    SWORD_CLIENT_USER_AGENT,
    SWORD_COLLECTION_URL,
    SWORD_DEPOSIT_RECEIPT_FLAG,
    SWORD_ON_BEHALF_OF_USER,
    SWORD_SERVICE_DOC_URL,
    transport_hints,
)

__all__ = [
    "SWORD_CLIENT_USER_AGENT",
    "SWORD_COLLECTION_URL",
    "SWORD_DEPOSIT_RECEIPT_FLAG",
    "SWORD_ON_BEHALF_OF_USER",
    "SWORD_SERVICE_DOC_URL",
    "transport_hints",
]
