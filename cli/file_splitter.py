"""Splits a source file into an ordered, single-pass sequence of chunks."""

import os
import random
import time
import uuid
from typing import Optional

from common.checksum_validator import compute_checksum
from common.constants import DEFAULT_CHUNK_SIZE_BYTES, FALLBACK_EXTENSION
from common.exceptions import InvalidInputError, SourceReadError, TooSmallError
from common.logging_config import DebugLog, NULL_LOG
from common.types import ChunkDescriptor


def count_chunks(size: int, chunk_size: int) -> int:
    """Number of chunks needed to cover ``size`` bytes (ceiling division)."""
    return (size + chunk_size - 1) // chunk_size


def compute_progress(chunk_number: int, total_chunks: int) -> int:
    """Percentage reached once ``chunk_number`` has been produced, rounded up."""
    return (100 * (chunk_number + 1) + total_chunks - 1) // total_chunks


def source_extension(name: str) -> str:
    """Extension of ``name`` without the leading dot, or the fallback."""
    extension = os.path.splitext(name)[1].lstrip('.')
    return extension or FALLBACK_EXTENSION


def generate_derived_name(original_name: str) -> str:
    """
    Build the name shared by every chunk of one split run.

    Format: ``{timestamp_ms}-{random}.{extension}``
    """
    timestamp = int(time.time() * 1000)
    return f"{timestamp}-{random.randrange(10**9)}.{source_extension(original_name)}"


def _validate_source(source) -> None:
    if source is None:
        raise InvalidInputError("A source file is required")

    name = getattr(source, 'name', None)
    if not isinstance(name, str):
        raise InvalidInputError("Source file must have a string name")

    size = getattr(source, 'size', None)
    if isinstance(size, bool) or not isinstance(size, int) or size < 0:
        raise InvalidInputError("Source file must have a non-negative integer size")

    if not callable(getattr(source, 'read_range', None)):
        raise InvalidInputError("Source file must support byte-range reads")


def _validate_chunk_size(chunk_size) -> None:
    if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
        raise InvalidInputError(f"Chunk size must be a positive integer, got {chunk_size!r}")


class FileSplitter:
    """
    Pull-based cursor over the chunks of one source file.

    Holds ``(source, offset, chunk_size, total_chunks, index)``; each call to
    :meth:`next_chunk` reads exactly one byte range. The cursor is forward-only
    and cannot be restarted: splitting the same file again produces a new
    derived name and upload id.
    """

    def __init__(self, source, chunk_size: int = DEFAULT_CHUNK_SIZE_BYTES, log: Optional[DebugLog] = None):
        _validate_source(source)
        _validate_chunk_size(chunk_size)

        total_chunks = count_chunks(source.size, chunk_size)
        if total_chunks == 0:
            raise TooSmallError(f"Source {source.name!r} is empty, nothing to split")

        self.source = source
        self.chunk_size = chunk_size
        self.total_chunks = total_chunks
        self.file_name = generate_derived_name(source.name)
        self.upload_id = uuid.uuid4().hex
        self.offset = 0
        self.index = 0
        self._failed = False
        self._log = log or NULL_LOG

        self._log.log(
            f"Splitting {source.name} ({source.size} bytes) into {total_chunks} chunks "
            f"of up to {chunk_size} bytes as {self.file_name}"
        )

    def has_next(self) -> bool:
        return not self._failed and self.index < self.total_chunks

    def next_chunk(self) -> ChunkDescriptor:
        """
        Produce the next chunk and advance the cursor.

        Raises:
            StopIteration: If every chunk has been produced
            SourceReadError: If the byte range cannot be read; the cursor is exhausted
        """
        if not self.has_next():
            raise StopIteration

        start = self.offset
        end = min(start + self.chunk_size, self.source.size)

        try:
            payload = self.source.read_range(start, end)
        except Exception as e:
            self._failed = True
            self._log.log(f"Failed to read bytes {start}-{end} of {self.source.name}: {e}", is_error=True)
            raise SourceReadError(f"Failed to read bytes {start}-{end} of {self.source.name}: {e}") from e

        if len(payload) != end - start:
            self._failed = True
            self._log.log(f"Short read on {self.source.name} at offset {start}", is_error=True)
            raise SourceReadError(
                f"Short read on {self.source.name}: expected {end - start} bytes at offset {start}, got {len(payload)}"
            )

        descriptor = ChunkDescriptor(
            chunk=payload,
            chunk_number=self.index,
            total_chunks=self.total_chunks,
            file_name=self.file_name,
            progress=compute_progress(self.index, self.total_chunks),
            upload_id=self.upload_id,
            checksum=compute_checksum(payload),
        )

        self.offset = end
        self.index += 1
        return descriptor

    def __iter__(self) -> "FileSplitter":
        return self

    def __next__(self) -> ChunkDescriptor:
        return self.next_chunk()

    def __len__(self) -> int:
        return self.total_chunks


def split_file(source, chunk_size: int = DEFAULT_CHUNK_SIZE_BYTES, log: Optional[DebugLog] = None) -> FileSplitter:
    """
    Split a source into chunks.

    Args:
        source: Object exposing ``name``, ``size`` and ``read_range(start, end)``
        chunk_size: Maximum chunk payload in bytes (default 5 MiB)
        log: Optional debug logging capability

    Returns:
        A single-pass FileSplitter yielding ChunkDescriptor items

    Raises:
        InvalidInputError: If the source or chunk size is unusable
        TooSmallError: If the source is empty
    """
    return FileSplitter(source, chunk_size=chunk_size, log=log)
