"""Manages chunk artifacts on disk: write, stream, delete and listing."""

import time
from pathlib import Path
from typing import Iterator, List, Union

from common.constants import CHUNK_ARTIFACT_SEPARATOR, STREAM_PIECE_SIZE


class ChunkStore:
    """Chunk artifacts of one chunk directory, named ``{base_name}.part_{index}``."""

    def __init__(self, chunk_dir: Union[str, Path]):
        self.chunk_dir = Path(chunk_dir)

    def ensure_directory(self) -> None:
        """Ensure the chunk directory exists, creating parents as needed."""
        self.chunk_dir.mkdir(parents=True, exist_ok=True)

    def get_artifact_path(self, base_name: str, index: int) -> Path:
        """
        Get file path for a chunk artifact.

        Args:
            base_name: Original filename without its extension
            index: Zero-based chunk index

        Returns:
            Path object for the artifact
        """
        return self.chunk_dir / f"{base_name}{CHUNK_ARTIFACT_SEPARATOR}{index}"

    def write_artifact(self, base_name: str, index: int, data: bytes) -> Path:
        """
        Write chunk data to disk, replacing any previous artifact for the index.

        Args:
            base_name: Original filename without its extension
            index: Zero-based chunk index
            data: Raw chunk payload

        Returns:
            Path of the written artifact

        Raises:
            OSError: If the directory cannot be created or the write fails
        """
        self.ensure_directory()
        filepath = self.get_artifact_path(base_name, index)
        filepath.write_bytes(data)
        return filepath

    def artifact_exists(self, base_name: str, index: int) -> bool:
        return self.get_artifact_path(base_name, index).is_file()

    def read_artifact_streaming(
        self, base_name: str, index: int, piece_size: int = STREAM_PIECE_SIZE
    ) -> Iterator[bytes]:
        """
        Stream an artifact in pieces.

        Args:
            base_name: Original filename without its extension
            index: Zero-based chunk index
            piece_size: Size of each piece in bytes (default 64KB)

        Yields:
            Artifact data pieces

        Raises:
            FileNotFoundError: If the artifact does not exist
            OSError: If the read fails
        """
        filepath = self.get_artifact_path(base_name, index)
        with open(filepath, 'rb') as f:
            while True:
                piece = f.read(piece_size)
                if not piece:
                    break
                yield piece

    def delete_artifact(self, base_name: str, index: int) -> None:
        """
        Delete an artifact that is known to exist.

        Raises:
            FileNotFoundError: If it was already deleted
        """
        self.get_artifact_path(base_name, index).unlink()

    def list_indexes(self, base_name: str) -> List[int]:
        """
        List the chunk indexes currently stored for a base name.

        Returns:
            Sorted list of indexes
        """
        if not self.chunk_dir.exists():
            return []

        prefix = f"{base_name}{CHUNK_ARTIFACT_SEPARATOR}"
        indexes = []
        for filepath in self.chunk_dir.iterdir():
            if not filepath.is_file() or not filepath.name.startswith(prefix):
                continue
            suffix = filepath.name[len(prefix):]
            if suffix.isdigit():
                indexes.append(int(suffix))
        return sorted(indexes)

    def list_stale_artifacts(self, max_age_seconds: float) -> List[Path]:
        """
        Find artifacts under the chunk directory not modified for ``max_age_seconds``.

        Session subdirectories are searched as well.
        """
        if not self.chunk_dir.exists():
            return []

        cutoff = time.time() - max_age_seconds
        stale = []
        for filepath in self.chunk_dir.rglob(f"*{CHUNK_ARTIFACT_SEPARATOR}*"):
            if filepath.is_file() and filepath.stat().st_mtime < cutoff:
                stale.append(filepath)
        return stale
