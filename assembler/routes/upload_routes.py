"""Chunk upload API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from assembler.chunk_merger import ChunkMerger
from assembler.schemas.common import ErrorResponse
from assembler.schemas.uploads import ReceivedChunksResponse, SaveChunkResponse
from assembler.service_locator import get_chunk_merger
from common.types import UploadedChunk

router = APIRouter(prefix="/uploads", tags=["Uploads"])

ERROR_STATUS_CODES = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "CHECKSUM_MISMATCH": status.HTTP_400_BAD_REQUEST,
    "MISSING_CHUNK": status.HTTP_409_CONFLICT,
    "CHUNK_WRITE_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "STREAM_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@router.post(
    "/chunks",
    response_model=SaveChunkResponse,
    responses={
        status.HTTP_201_CREATED: {"model": SaveChunkResponse},
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_409_CONFLICT: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
async def upload_chunk(
    file: Optional[UploadFile] = File(None),
    chunk_number: str = Form(...),
    total_chunks: str = Form(...),
    upload_id: Optional[str] = Form(None),
    checksum: Optional[str] = Form(None),
    merger: ChunkMerger = Depends(get_chunk_merger),
):
    """
    Receive one chunk of a file.

    Parameters:
        - file: Chunk payload (multipart/form-data), named after the original file
        - chunk_number: Zero-based index of the chunk
        - total_chunks: Number of chunks in the upload
        - upload_id: Optional session token from the splitter
        - checksum: Optional SHA-256 of the payload

    Returns:
        - 200 with a progress message for intermediate chunks
        - 201 with merged_file_path once the last chunk has been merged

    Raises:
        - 400: Invalid field or checksum mismatch
        - 409: A lower chunk is missing when the last one arrives
        - 500: Chunk could not be written or merged
    """
    uploaded = None
    if file is not None:
        uploaded = UploadedChunk(
            original_name=file.filename or "",
            data=await file.read(),
            content_type=file.content_type,
        )

    result = await run_in_threadpool(
        merger.save_chunk,
        uploaded,
        chunk_number,
        total_chunks,
        upload_id=upload_id,
        checksum=checksum,
    )

    if not result.success:
        return JSONResponse(
            status_code=ERROR_STATUS_CODES.get(result.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR),
            content={"detail": result.message, "code": result.error_code or "INTERNAL_ERROR"},
        )

    body = SaveChunkResponse(
        success=True,
        message=result.message,
        chunk_number=result.chunk_number,
        total_chunks=result.total_chunks,
        merged_file_path=result.merged_file_path,
    )
    status_code = status.HTTP_201_CREATED if result.merged else status.HTTP_200_OK
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.get("/{file_name}/chunks", response_model=ReceivedChunksResponse)
async def list_received_chunks(
    file_name: str,
    upload_id: Optional[str] = Query(None),
    merger: ChunkMerger = Depends(get_chunk_merger),
):
    """
    List the chunk numbers stored so far for an upload.

    Parameters:
        - file_name: Original filename of the upload
        - upload_id: Session token, if the upload used one

    Raises:
        - 400: Malformed upload_id
    """
    chunk_numbers = merger.received_chunks(file_name, upload_id=upload_id)
    return ReceivedChunksResponse(file_name=file_name, upload_id=upload_id, chunk_numbers=chunk_numbers)
