"""Pydantic schemas for API requests and responses."""

from assembler.schemas.uploads import SaveChunkResponse, ReceivedChunksResponse
from assembler.schemas.common import ErrorResponse

__all__ = [
    "SaveChunkResponse",
    "ReceivedChunksResponse",
    "ErrorResponse"
]
