"""Exception classes shared by the splitter and the merger."""

from typing import Optional


class ChunkingError(Exception):
    """
    Base exception class for all chunk split/merge errors.
    """
    code = "CHUNKING_ERROR"


class ValidationError(ChunkingError):
    """
    Raised when chunk intake arguments have the wrong shape or range.
    """
    code = "VALIDATION_ERROR"

    def __init__(self, field: str, message: str):
        super().__init__(f"Invalid {field}: {message}")
        self.field = field


class ChunkWriteError(ChunkingError):
    """
    Raised when persisting a single chunk artifact fails.
    """
    code = "CHUNK_WRITE_ERROR"


class MissingChunkError(ChunkingError):
    """
    Raised when an expected chunk artifact is absent during concatenation.
    """
    code = "MISSING_CHUNK"

    def __init__(self, artifact_path: str, chunk_index: Optional[int] = None):
        super().__init__(f"Missing chunk file: {artifact_path}")
        self.artifact_path = artifact_path
        self.chunk_index = chunk_index


class StreamError(ChunkingError):
    """
    Raised when reading, appending or finalizing during concatenation fails.
    """
    code = "STREAM_ERROR"


class ChecksumMismatchError(ChunkingError):
    """
    Raised when a received chunk does not match its declared checksum.
    """
    code = "CHECKSUM_MISMATCH"


class InvalidInputError(ChunkingError):
    """
    Raised when the splitter is given an unusable source or chunk size.
    """
    code = "INVALID_INPUT"


class TooSmallError(ChunkingError):
    """
    Raised when the source yields zero chunks.
    """
    code = "TOO_SMALL"


class SourceReadError(ChunkingError):
    """
    Raised when reading a byte range from the source fails mid-split.
    """
    code = "SOURCE_READ_ERROR"
