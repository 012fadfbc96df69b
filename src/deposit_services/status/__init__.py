"""Deposit status resolution."""

from .mapper import StatusMapper
from .parser import AtomStatusParser, parse_statement
from .processors import (
    STATUS_PROCESSORS,
    DepositStatusProcessor,
    SwordDSpaceStatusProcessor,
    processor_for,
)

__all__ = [
    "AtomStatusParser",
    "DepositStatusProcessor",
    "STATUS_PROCESSORS",
    "StatusMapper",
    "SwordDSpaceStatusProcessor",
    "parse_statement",
    "processor_for",
]
