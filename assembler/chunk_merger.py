"""Chunk intake and ordered concatenation into the final file."""

import os
import re
from enum import Enum
from pathlib import Path
from typing import BinaryIO, List, Optional, Tuple, Union

from assembler.chunk_storage import ChunkStore
from assembler.session_locks import SessionLockRegistry, session_lock_key
from common.checksum_validator import verify_checksum
from common.constants import DEFAULT_CHUNK_DIR, DEFAULT_OUTPUT_DIR, FALLBACK_EXTENSION
from common.exceptions import (
    ChecksumMismatchError,
    ChunkingError,
    ChunkWriteError,
    MissingChunkError,
    StreamError,
    ValidationError,
)
from common.logging_config import DebugLog, NULL_LOG
from common.types import SaveChunkResult, UploadedChunk

PathLike = Union[str, os.PathLike]

UPLOAD_ID_PATTERN = re.compile(r'^[A-Za-z0-9_-]{1,64}$')
INTEGER_PATTERN = re.compile(r'^[+-]?\d+$')


def split_original_name(original_name: str) -> Tuple[str, str]:
    """
    Split an uploaded filename into base name and extension.

    Returns:
        (base_name, extension) where the extension keeps its leading dot and
        falls back to ``.bin``
    """
    base_name, extension = os.path.splitext(os.path.basename(original_name))
    return base_name, extension or f".{FALLBACK_EXTENSION}"


def _coerce_int(value, field: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(field, f"must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and INTEGER_PATTERN.match(value.strip()):
        return int(value.strip())
    raise ValidationError(field, f"must be an integer, got {value!r}")


def _resolve_directory(value, field: str) -> Path:
    if isinstance(value, os.PathLike):
        value = os.fspath(value)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field, "must be a non-empty path string")
    return Path(value).resolve()


def _validate_file(file) -> None:
    if file is None:
        raise ValidationError("file", "a chunk file is required")

    original_name = getattr(file, 'original_name', None)
    if not isinstance(original_name, str) or not original_name.strip():
        raise ValidationError("file.original_name", "chunk file must carry its original filename")
    if not split_original_name(original_name)[0]:
        raise ValidationError("file.original_name", f"{original_name!r} has no usable base name")

    data = getattr(file, 'data', None)
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise ValidationError("file.data", "chunk payload must be bytes")


def validate_chunk_request(file, chunk_number, total_chunks) -> Tuple[int, int]:
    """
    Validate the shape and range of a chunk intake request.

    Returns:
        (chunk_number, total_chunks) as integers

    Raises:
        ValidationError: Naming the first offending field
    """
    _validate_file(file)

    chunk_number = _coerce_int(chunk_number, "chunk_number")
    total_chunks = _coerce_int(total_chunks, "total_chunks")

    if chunk_number < 0:
        raise ValidationError("chunk_number", f"must be a non-negative integer, got {chunk_number}")
    if total_chunks <= 0:
        raise ValidationError("total_chunks", f"must be a positive integer, got {total_chunks}")
    if chunk_number >= total_chunks:
        raise ValidationError(
            "chunk_number", f"{chunk_number} is out of range for {total_chunks} chunks"
        )

    return chunk_number, total_chunks


class MergeState(Enum):
    MERGING = "merging"
    COMPLETED = "completed"
    FAILED = "failed"


class Concatenation:
    """
    Appends the artifacts of one session to the final file in index order.

    ``cursor`` is the next index to append. Each artifact is deleted only once
    its bytes have been flushed to the output, then the cursor advances. On
    any failure the output handle is closed, the partial final file is removed
    and the state becomes FAILED; artifacts already consumed stay deleted.
    """

    def __init__(
        self,
        store: ChunkStore,
        base_name: str,
        total_chunks: int,
        output_path: Path,
        log: Optional[DebugLog] = None,
    ):
        self.store = store
        self.base_name = base_name
        self.total_chunks = total_chunks
        self.output_path = output_path
        self.cursor = 0
        self.state = MergeState.MERGING
        self._log = log or NULL_LOG

    def run(self) -> Path:
        if self.state is not MergeState.MERGING or self.cursor != 0:
            raise RuntimeError("Concatenation has already run")

        # Opening the output truncates it; a session without part_0 must leave
        # an existing final file alone.
        if not self.store.artifact_exists(self.base_name, 0):
            self.state = MergeState.FAILED
            artifact_path = self.store.get_artifact_path(self.base_name, 0)
            self._log.log(f"Missing first chunk {artifact_path}, final file left untouched", is_error=True)
            raise MissingChunkError(str(artifact_path), 0)

        try:
            output = open(self.output_path, 'wb')
        except OSError as e:
            self.state = MergeState.FAILED
            raise StreamError(f"Cannot open final file {self.output_path}: {e}") from e

        try:
            while self.cursor < self.total_chunks:
                self._append(output, self.cursor)
                self.cursor += 1
            self._finalize(output)
        except Exception as e:
            self._log.log(f"Error processing chunk {self.cursor} of {self.base_name}: {e}", is_error=True)
            self._abort(output)
            raise

        self.state = MergeState.COMPLETED
        self._log.log(f"Merging completed successfully: {self.output_path}")
        return self.output_path

    def _append(self, output: BinaryIO, index: int) -> None:
        artifact_path = self.store.get_artifact_path(self.base_name, index)
        if not self.store.artifact_exists(self.base_name, index):
            raise MissingChunkError(str(artifact_path), index)

        try:
            for piece in self.store.read_artifact_streaming(self.base_name, index):
                output.write(piece)
            output.flush()
        except FileNotFoundError as e:
            raise MissingChunkError(str(artifact_path), index) from e
        except OSError as e:
            raise StreamError(f"Failed to append {artifact_path}: {e}") from e

        try:
            self.store.delete_artifact(self.base_name, index)
        except OSError as e:
            raise StreamError(f"Failed to delete consumed chunk {artifact_path}: {e}") from e

    def _finalize(self, output: BinaryIO) -> None:
        try:
            output.flush()
            os.fsync(output.fileno())
            output.close()
        except OSError as e:
            raise StreamError(f"Failed to finalize {self.output_path}: {e}") from e

    def _abort(self, output: BinaryIO) -> None:
        self.state = MergeState.FAILED
        try:
            output.close()
        except OSError as e:
            self._log.log(f"Error closing {self.output_path} after failure: {e}", is_error=True)
        try:
            self.output_path.unlink(missing_ok=True)
        except OSError as e:
            self._log.log(f"Could not remove partial file {self.output_path}: {e}", is_error=True)


class ChunkMerger:
    """
    Persists received chunks and assembles the final file when the last
    index arrives.

    Chunks of a session may arrive in any order; the one carrying
    ``chunk_number == total_chunks - 1`` triggers concatenation, which expects
    every lower index to be on disk already.
    """

    def __init__(
        self,
        output_dir: PathLike = DEFAULT_OUTPUT_DIR,
        chunk_dir: PathLike = DEFAULT_CHUNK_DIR,
        log: Optional[DebugLog] = None,
        locks: Optional[SessionLockRegistry] = None,
    ):
        self.output_dir = output_dir
        self.chunk_dir = chunk_dir
        self._log = log or NULL_LOG
        self.locks = locks or SessionLockRegistry()

    def _session_store(self, chunk_dir: Path, upload_id: Optional[str]) -> ChunkStore:
        if upload_id is None:
            return ChunkStore(chunk_dir)
        if not isinstance(upload_id, str) or not UPLOAD_ID_PATTERN.match(upload_id):
            raise ValidationError("upload_id", "must be 1-64 letters, digits, '-' or '_'")
        return ChunkStore(chunk_dir / upload_id)

    def save_chunk(
        self,
        file: UploadedChunk,
        chunk_number,
        total_chunks,
        output_dir: Optional[PathLike] = None,
        chunk_dir: Optional[PathLike] = None,
        upload_id: Optional[str] = None,
        checksum: Optional[str] = None,
    ) -> SaveChunkResult:
        """
        Persist one chunk and merge the session if it is the last one.

        Args:
            file: Received chunk (original filename and payload)
            chunk_number: Zero-based index of this chunk
            total_chunks: Number of chunks in the session
            output_dir: Directory for the final file (default: merger's)
            chunk_dir: Directory for chunk artifacts (default: merger's)
            upload_id: Optional session token isolating same-named uploads
            checksum: Optional SHA-256 of the payload to verify before writing

        Returns:
            SaveChunkResult; failures are reported in the result, never raised
        """
        try:
            chunk_number, total_chunks = validate_chunk_request(file, chunk_number, total_chunks)
            resolved_output = _resolve_directory(
                self.output_dir if output_dir is None else output_dir, "output_dir"
            )
            resolved_chunks = _resolve_directory(
                self.chunk_dir if chunk_dir is None else chunk_dir, "chunk_dir"
            )
            store = self._session_store(resolved_chunks, upload_id)

            if not verify_checksum(bytes(file.data), checksum):
                raise ChecksumMismatchError(
                    f"Chunk {chunk_number} of {file.original_name} does not match checksum {checksum}"
                )

            base_name, extension = split_original_name(file.original_name)

            with self.locks.hold(session_lock_key(store.chunk_dir, base_name)):
                self._write_chunk(store, base_name, chunk_number, total_chunks, bytes(file.data))

                if chunk_number != total_chunks - 1:
                    return SaveChunkResult(
                        success=True,
                        message=f"Chunk {chunk_number} of {total_chunks} uploaded successfully",
                        chunk_number=chunk_number,
                        total_chunks=total_chunks,
                    )

                try:
                    merged_path = self._merge(store, base_name, total_chunks, resolved_output, extension)
                except ChunkingError as e:
                    self._log.log(f"Failed to merge chunks for {base_name}: {e}", is_error=True)
                    return SaveChunkResult(
                        success=False,
                        message=f"Failed to merge chunks: {e}",
                        error_code=e.code,
                        chunk_number=chunk_number,
                        total_chunks=total_chunks,
                    )

                if upload_id is not None:
                    self._remove_empty_session_dir(store)

            return SaveChunkResult(
                success=True,
                message="All chunks uploaded and merged successfully",
                merged_file_path=merged_path,
                chunk_number=chunk_number,
                total_chunks=total_chunks,
            )

        except ChunkingError as e:
            self._log.log(f"Chunk intake failed: {e}", is_error=True)
            return SaveChunkResult(success=False, message=str(e), error_code=e.code)
        except Exception as e:
            self._log.log(f"Unexpected chunk intake failure: {type(e).__name__}: {e}", is_error=True)
            return SaveChunkResult(
                success=False,
                message=f"Unexpected error while saving chunk: {e}",
                error_code="INTERNAL_ERROR",
            )

    def _write_chunk(self, store: ChunkStore, base_name: str, chunk_number: int, total_chunks: int, data: bytes) -> None:
        try:
            artifact_path = store.write_artifact(base_name, chunk_number, data)
        except OSError as e:
            self._log.log(f"Error writing chunk {chunk_number} of {base_name}: {e}", is_error=True)
            raise ChunkWriteError(f"Failed to write chunk {chunk_number} of {base_name}: {e}") from e

        self._log.log(f"Chunk {chunk_number}/{total_chunks - 1} saved: {artifact_path}")

    def _merge(self, store: ChunkStore, base_name: str, total_chunks: int, output_dir: Path, extension: str) -> str:
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StreamError(f"Cannot create output directory {output_dir}: {e}") from e

        output_path = output_dir / f"{base_name}{extension}"
        self._log.log(f"Merging chunks into: {output_path}")

        concatenation = Concatenation(store, base_name, total_chunks, output_path, log=self._log)
        return str(concatenation.run())

    def _remove_empty_session_dir(self, store: ChunkStore) -> None:
        try:
            if not any(store.chunk_dir.iterdir()):
                store.chunk_dir.rmdir()
        except OSError as e:
            self._log.log(f"Could not remove session directory {store.chunk_dir}: {e}", is_error=True)

    def merge_chunks(
        self,
        base_name: str,
        total_chunks: int,
        chunk_dir: PathLike,
        output_dir: PathLike,
        extension: str,
    ) -> str:
        """
        Concatenate ``{chunk_dir}/{base_name}.part_0 .. part_{total-1}`` into
        ``{output_dir}/{base_name}{extension}``.

        Returns:
            Absolute path of the final file

        Raises:
            MissingChunkError: If an artifact is absent when its turn comes
            StreamError: If reading, appending or finalizing fails
            ValidationError: If the count or a directory is malformed
        """
        total_chunks = _coerce_int(total_chunks, "total_chunks")
        if total_chunks <= 0:
            raise ValidationError("total_chunks", f"must be a positive integer, got {total_chunks}")
        resolved_chunks = _resolve_directory(chunk_dir, "chunk_dir")
        resolved_output = _resolve_directory(output_dir, "output_dir")
        store = ChunkStore(resolved_chunks)

        with self.locks.hold(session_lock_key(store.chunk_dir, base_name)):
            return self._merge(store, base_name, total_chunks, resolved_output, extension)

    def received_chunks(
        self,
        original_name: str,
        upload_id: Optional[str] = None,
        chunk_dir: Optional[PathLike] = None,
    ) -> List[int]:
        """List the chunk indexes stored so far for a session."""
        resolved_chunks = _resolve_directory(self.chunk_dir if chunk_dir is None else chunk_dir, "chunk_dir")
        store = self._session_store(resolved_chunks, upload_id)
        base_name, _ = split_original_name(original_name)
        return store.list_indexes(base_name)


def save_chunk(
    file: UploadedChunk,
    chunk_number,
    total_chunks,
    output_dir: PathLike = DEFAULT_OUTPUT_DIR,
    chunk_dir: PathLike = DEFAULT_CHUNK_DIR,
    upload_id: Optional[str] = None,
    checksum: Optional[str] = None,
    log: Optional[DebugLog] = None,
) -> SaveChunkResult:
    """Save one chunk with a one-off ChunkMerger. See ChunkMerger.save_chunk."""
    merger = ChunkMerger(output_dir=output_dir, chunk_dir=chunk_dir, log=log)
    return merger.save_chunk(file, chunk_number, total_chunks, upload_id=upload_id, checksum=checksum)


def merge_chunks(
    base_name: str,
    total_chunks: int,
    chunk_dir: PathLike,
    output_dir: PathLike,
    extension: str,
    log: Optional[DebugLog] = None,
) -> str:
    """Concatenate stored chunks with a one-off ChunkMerger. See ChunkMerger.merge_chunks."""
    return ChunkMerger(output_dir=output_dir, chunk_dir=chunk_dir, log=log).merge_chunks(
        base_name, total_chunks, chunk_dir, output_dir, extension
    )
