"""Mapping of canonical deposit states to domain deposit statuses."""

from collections.abc import Mapping

from schemas.repository import RepositoryConfig
from schemas.status import DepositStatus, SwordState

from ..exceptions import ConfigurationError


class StatusMapper:
    """Apply a repository's configured mapping to a canonical state.

    An unmapped state, including no state at all, falls back to the
    repository's "default-mapping" entry.

    Example:
        mapper = StatusMapper(load_repositories(Path("repositories.json")))
        status = mapper.map("JScholarship", SwordState.ARCHIVED)
    """

    def __init__(self, repositories: Mapping[str, RepositoryConfig]):
        self._repositories = repositories

    def map(
        self, repository_name: str, state: SwordState | str | None
    ) -> DepositStatus:
        """Map a canonical deposit state for a repository.

        Args:
            repository_name: Name of the repository in the configuration
            state: Canonical state token, or None when no state is known

        Returns:
            The mapped domain status

        Raises:
            ConfigurationError: If the repository is not configured
        """
        repository = self._repositories.get(repository_name)
        if repository is None:
            raise ConfigurationError(
                f"No status mapping configured for repository {repository_name}",
                repository=repository_name,
            )

        deposit_config = repository.deposit_config
        if state is None:
            return deposit_config.default_status

        token = state.value if isinstance(state, SwordState) else state
        return deposit_config.mapping.get(token, deposit_config.default_status)
