"""Clients fetching documents from remote repositories."""

from .client import Client
from .exceptions import (
    APIError,
    AuthenticationError,
    ClientError,
    ConnectionError,
    NotFoundError,
    RateLimitError,
)
from .status_client import LocalDocumentFetcher, StatusDocumentClient

__all__ = [
    "Client",
    "StatusDocumentClient",
    "LocalDocumentFetcher",
    "ClientError",
    "ConnectionError",
    "APIError",
    "AuthenticationError",
    "RateLimitError",
    "NotFoundError",
]
