"""Packaging of submissions for deposit and resolution of deposit status."""

from .exceptions import (
    AssemblyError,
    ConfigurationError,
    DepositServicesError,
    StatusParseError,
)

__all__ = [
    "AssemblyError",
    "ConfigurationError",
    "DepositServicesError",
    "StatusParseError",
]
