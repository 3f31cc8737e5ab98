"""Pydantic schemas for chunk upload endpoints."""

from typing import List, Optional
from pydantic import BaseModel


class SaveChunkResponse(BaseModel):
    """Response model for a chunk intake call."""
    success: bool
    message: str
    chunk_number: Optional[int] = None
    total_chunks: Optional[int] = None
    merged_file_path: Optional[str] = None


class ReceivedChunksResponse(BaseModel):
    """Response model for the chunks stored so far in a session."""
    file_name: str
    upload_id: Optional[str] = None
    chunk_numbers: List[int]
