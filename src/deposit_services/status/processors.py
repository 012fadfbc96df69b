"""Deposit status processors.

A repository's configuration names the processor that resolves the status of
its deposits ("deposit-config" -> "processor"). Processors are looked up in
STATUS_PROCESSORS.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping

from schemas.repository import RepositoryConfig
from schemas.status import DepositStatus

from ..exceptions import ConfigurationError
from .mapper import StatusMapper
from .parser import AtomStatusParser

logger = logging.getLogger(__name__)


class DepositStatusProcessor(ABC):
    """Abstract base class for deposit status processors."""

    def __init__(self, fetcher, repositories: Mapping[str, RepositoryConfig]):
        self.fetcher = fetcher
        self.mapper = StatusMapper(repositories)

    @abstractmethod
    def process(self, status_ref: str, repository_name: str) -> DepositStatus:
        """Resolve the domain status of a deposit.

        Args:
            status_ref: Location of the deposit's status document
            repository_name: Repository the deposit was made to

        Returns:
            The deposit's domain status
        """
        pass


class SwordDSpaceStatusProcessor(DepositStatusProcessor):
    """Resolve status from a DSpace SWORD v2 Atom statement."""

    def __init__(self, fetcher, repositories: Mapping[str, RepositoryConfig]):
        super().__init__(fetcher, repositories)
        self.parser = AtomStatusParser(fetcher)

    def process(self, status_ref: str, repository_name: str) -> DepositStatus:
        state = self.parser.parse(status_ref)
        status = self.mapper.map(repository_name, state)
        logger.info(
            f"Deposit at {status_ref} in {repository_name}: "
            f"state {state.value if state else None} -> {status.value}"
        )
        return status


STATUS_PROCESSORS: dict[str, type[DepositStatusProcessor]] = {
    "sword-dspace": SwordDSpaceStatusProcessor,
}


def processor_for(
    repository_name: str,
    repositories: Mapping[str, RepositoryConfig],
    fetcher,
) -> DepositStatusProcessor:
    """Instantiate the status processor configured for a repository.

    Raises:
        ConfigurationError: If the repository is not configured or names an
                            unknown processor
    """
    repository = repositories.get(repository_name)
    if repository is None:
        raise ConfigurationError(
            f"No configuration for repository {repository_name}",
            repository=repository_name,
        )

    name = repository.deposit_config.processor
    processor_class = STATUS_PROCESSORS.get(name)
    if processor_class is None:
        raise ConfigurationError(
            f"Unknown status processor '{name}' for repository {repository_name}",
            repository=repository_name,
        )
    return processor_class(fetcher, repositories)
