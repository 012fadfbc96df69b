"""Streaming primitives for package composition.

A package is written in one pass. Each content file is read once through a
DigestingReader, which feeds every chunk to the checksum accumulators while
the archive writer consumes it. The archive writer writes into an optional
compressor, which writes into a DigestingWriter that accumulates the size and
checksums of the package itself:

    source -> DigestingReader -> ArchiveWriter -> compressor -> DigestingWriter -> file

All writers use fixed timestamps and ownership so that the same input always
produces the same bytes.
"""

import bz2
import gzip
import hashlib
import shutil
import tarfile
import tempfile
import zipfile
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import BinaryIO

from schemas.package import ArchiveFormat, Compression

CHUNK_SIZE = 64 * 1024
SPOOL_MAX_SIZE = 8 * 1024 * 1024
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)
FILE_MODE = 0o644


class _Digests:
    def __init__(self, algorithms: Sequence[str]):
        self._digests = {algorithm: hashlib.new(algorithm) for algorithm in algorithms}
        self.count = 0

    def update(self, data: bytes) -> None:
        for digest in self._digests.values():
            digest.update(data)
        self.count += len(data)

    def hexdigests(self) -> dict[str, str]:
        return {name: digest.hexdigest() for name, digest in self._digests.items()}


class DigestingReader:
    """Read-through wrapper computing checksums of everything read."""

    def __init__(self, source: BinaryIO, algorithms: Sequence[str]):
        self._source = source
        self._digests = _Digests(algorithms)

    @property
    def bytes_read(self) -> int:
        return self._digests.count

    def read(self, size: int = -1) -> bytes:
        data = self._source.read(size)
        if data:
            self._digests.update(data)
        return data

    def hexdigests(self) -> dict[str, str]:
        return self._digests.hexdigests()


class DigestingWriter:
    """Write-through wrapper computing checksums of everything written.

    Not seekable, so archive writers use their streaming modes.
    """

    def __init__(self, sink: BinaryIO, algorithms: Sequence[str]):
        self._sink = sink
        self._digests = _Digests(algorithms)

    @property
    def bytes_written(self) -> int:
        return self._digests.count

    def write(self, data: bytes) -> int:
        self._digests.update(data)
        self._sink.write(data)
        return len(data)

    def flush(self) -> None:
        self._sink.flush()

    def hexdigests(self) -> dict[str, str]:
        return self._digests.hexdigests()


class _Uncompressed:
    """Pass-through used when no compression is configured."""

    def __init__(self, sink):
        self._sink = sink

    def write(self, data: bytes) -> int:
        return self._sink.write(data)

    def flush(self) -> None:
        self._sink.flush()

    def close(self) -> None:
        self._sink.flush()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def open_compressor(compression: Compression, sink):
    """Wrap sink in a streaming compressor.

    Closing the returned writer finishes the compressed stream but leaves
    sink open.
    """
    if compression is Compression.GZIP:
        return gzip.GzipFile(filename="", mode="wb", fileobj=sink, mtime=0)
    if compression is Compression.BZIP2:
        return bz2.BZ2File(sink, mode="wb")
    return _Uncompressed(sink)


class _WriteOnly:
    """Hides tell/seek of the wrapped stream (GzipFile offers both)."""

    def __init__(self, sink):
        self._sink = sink

    def write(self, data: bytes) -> int:
        return self._sink.write(data)

    def flush(self) -> None:
        self._sink.flush()


class ArchiveWriter(ABC):
    """Abstract base class for archive writers.

    Writers consume each entry's reader exactly once and never seek their
    output.
    """

    def __init__(self, sink):
        self._sink = _WriteOnly(sink)

    @abstractmethod
    def add(self, path: str, reader: DigestingReader, size: int | None) -> None:
        """Write one entry.

        Args:
            path: Path of the entry inside the archive
            reader: Source of the entry's bytes
            size: Size of the entry if known in advance

        Raises:
            OSError: If reading the entry or writing the archive fails
            ValueError: If the entry cannot be represented in the archive
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Write any trailing archive structures."""
        pass

    @staticmethod
    def _check_size(path: str, reader: DigestingReader, size: int | None) -> None:
        if size is not None and reader.bytes_read != size:
            raise ValueError(
                f"{path} has {reader.bytes_read} bytes but a declared size of {size} bytes"
            )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class TarArchiveWriter(ArchiveWriter):
    """Writes a POSIX tar stream."""

    def __init__(self, sink):
        super().__init__(sink)
        self._tar = tarfile.open(mode="w|", fileobj=self._sink, format=tarfile.PAX_FORMAT)

    def add(self, path: str, reader: DigestingReader, size: int | None) -> None:
        info = tarfile.TarInfo(path)
        info.mtime = 0
        info.mode = FILE_MODE
        info.uid = info.gid = 0
        info.uname = info.gname = ""

        if size is None:
            # Tar headers carry the size, so unknown sizes are spooled first
            with tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_SIZE) as spool:
                shutil.copyfileobj(reader, spool, CHUNK_SIZE)
                info.size = spool.tell()
                spool.seek(0)
                self._tar.addfile(info, spool)
            return

        info.size = size
        self._tar.addfile(info, reader)
        if reader.read(1):
            raise ValueError(f"{path} is larger than its declared size of {size} bytes")

    def close(self) -> None:
        self._tar.close()


class ZipArchiveWriter(ArchiveWriter):
    """Writes a deflated zip stream using data descriptors."""

    def __init__(self, sink):
        super().__init__(sink)
        self._zip = zipfile.ZipFile(self._sink, mode="w", compression=zipfile.ZIP_DEFLATED)

    def add(self, path: str, reader: DigestingReader, size: int | None) -> None:
        info = zipfile.ZipInfo(path, date_time=ZIP_EPOCH)
        info.compress_type = zipfile.ZIP_DEFLATED
        info.create_system = 3
        info.external_attr = FILE_MODE << 16
        if size is not None:
            info.file_size = size

        with self._zip.open(info, mode="w", force_zip64=size is None) as entry:
            shutil.copyfileobj(reader, entry, CHUNK_SIZE)
            self._check_size(path, reader, size)

    def close(self) -> None:
        self._zip.close()


class RawArchiveWriter(ArchiveWriter):
    """Writes a single entry's bytes with no archive structure."""

    def __init__(self, sink):
        super().__init__(sink)
        self._path: str | None = None

    def add(self, path: str, reader: DigestingReader, size: int | None) -> None:
        if self._path is not None:
            raise ValueError(
                f"cannot add {path}: an unarchived package holds a single file "
                f"and already contains {self._path}"
            )
        self._path = path
        shutil.copyfileobj(reader, self._sink, CHUNK_SIZE)
        self._check_size(path, reader, size)

    def close(self) -> None:
        self._sink.flush()


ARCHIVE_WRITERS: dict[ArchiveFormat, type[ArchiveWriter]] = {
    ArchiveFormat.NONE: RawArchiveWriter,
    ArchiveFormat.TAR: TarArchiveWriter,
    ArchiveFormat.ZIP: ZipArchiveWriter,
}


def open_archive(archive: ArchiveFormat, sink) -> ArchiveWriter:
    return ARCHIVE_WRITERS[archive](sink)
