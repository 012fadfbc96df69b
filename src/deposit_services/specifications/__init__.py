"""Packaging specifications, keyed by identifier."""

from ..exceptions import ConfigurationError
from .dspace_mets import DSpaceMETSSpecification
from .nihms_native import NihmsNativeSpecification
from .simple_zip import SimpleZipSpecification
from .specification import PackagingSpecification

SPECIFICATIONS: dict[str, type[PackagingSpecification]] = {
    spec.identifier: spec
    for spec in (
        SimpleZipSpecification,
        DSpaceMETSSpecification,
        NihmsNativeSpecification,
    )
}


def specification_for(identifier: str) -> PackagingSpecification:
    """Instantiate the packaging specification registered under identifier.

    Raises:
        ConfigurationError: If no specification is registered under identifier
    """
    try:
        return SPECIFICATIONS[identifier]()
    except KeyError:
        raise ConfigurationError(
            f"Unknown packaging specification: {identifier}"
        ) from None


__all__ = [
    "DSpaceMETSSpecification",
    "NihmsNativeSpecification",
    "PackagingSpecification",
    "SPECIFICATIONS",
    "SimpleZipSpecification",
    "specification_for",
]
