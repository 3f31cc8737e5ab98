"""Shared data type definitions (ChunkDescriptor, UploadedChunk, SaveChunkResult)."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ChunkDescriptor:
    """
    One chunk produced by the splitter.
    """
    chunk: bytes
    chunk_number: int
    total_chunks: int
    file_name: str
    progress: int
    upload_id: str
    checksum: str

    @property
    def size(self) -> int:
        return len(self.chunk)

    @property
    def is_last(self) -> bool:
        return self.chunk_number == self.total_chunks - 1


@dataclass(frozen=True)
class UploadedChunk:
    """
    In-memory representation of one received chunk, as handed over by a
    multipart parser.
    """
    original_name: str
    data: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class SaveChunkResult:
    """
    Outcome of a chunk intake call.
    """
    success: bool
    message: str
    merged_file_path: Optional[str] = None
    error_code: Optional[str] = None
    chunk_number: Optional[int] = None
    total_chunks: Optional[int] = None

    @property
    def merged(self) -> bool:
        return self.merged_file_path is not None
