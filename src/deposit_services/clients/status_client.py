"""Fetchers for deposit status documents."""

import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

from schemas.repository import ProtocolBinding

from .client import Client

logger = logging.getLogger(__name__)

ATOM_ACCEPT = "application/atom+xml, application/xml;q=0.9, */*;q=0.1"


class StatusDocumentClient(Client):
    """Client fetching status documents (SWORD statements) over HTTP.

    Example:
        config = {"base_url": "https://jscholarship.library.jhu.edu"}
        with StatusDocumentClient(config) as client:
            content = client.fetch("/swordv2/statement/1234.atom")
    """

    @classmethod
    def from_protocol_binding(
        cls, binding: ProtocolBinding, **overrides
    ) -> "StatusDocumentClient":
        """Build a client for the server of a repository's protocol binding.

        Raises:
            ValueError: If the binding names no server
        """
        if not binding.server_fqdn:
            raise ValueError("protocol binding has no 'server-fqdn'")

        port = f":{binding.server_port}" if binding.server_port else ""
        config = {
            "base_url": f"https://{binding.server_fqdn}{port}",
            "username": binding.username,
            "password": binding.password,
        }
        if binding.user_agent:
            config["headers"] = {"User-Agent": binding.user_agent}
        config.update(overrides)
        return cls(config)

    def fetch(self, location: str) -> bytes:
        """Fetch the status document at location.

        Args:
            location: Absolute URL, or path relative to base_url

        Returns:
            Raw bytes of the document
        """
        logger.debug(f"Fetching status document {location}")
        response = self.get(location, headers={"Accept": ATOM_ACCEPT})
        return response.content


class LocalDocumentFetcher:
    """Read status documents from the local file system.

    Accepts ``file:`` URIs and plain paths.
    """

    def fetch(self, location: str) -> bytes:
        parsed = urlparse(location)
        if parsed.scheme == "file":
            path = Path(unquote(parsed.path))
        else:
            path = Path(location)
        return path.read_bytes()
