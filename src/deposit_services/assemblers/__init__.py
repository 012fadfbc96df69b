"""Assemblers for building deposit packages."""

from .assembler import Assembler, AssemblerOptions
from .builders import MetadataBuilder, ResourceBuilder
from .package_stream import PackageStream
from .placement import resolve_placements

__all__ = [
    "Assembler",
    "AssemblerOptions",
    "MetadataBuilder",
    "PackageStream",
    "ResourceBuilder",
    "resolve_placements",
]
