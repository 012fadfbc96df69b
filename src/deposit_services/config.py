"""Loading of per-repository configuration."""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from schemas.repository import RepositoryConfig, parse_repositories

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def load_repositories(path: Path) -> dict[str, RepositoryConfig]:
    """Load and validate repository configuration from a JSON file.

    Args:
        path: Path to the JSON configuration, keyed by repository name

    Returns:
        Mapping of repository name to validated configuration

    Raises:
        ConfigurationError: If the file cannot be read or is invalid
    """
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read repository configuration {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Repository configuration {path} must be a JSON object keyed by repository name"
        )

    try:
        repositories = parse_repositories(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid repository configuration {path}: {e}") from e

    logger.debug(f"Loaded configuration for {len(repositories)} repositories from {path}")
    return repositories
