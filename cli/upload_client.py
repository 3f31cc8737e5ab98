"""HTTP client that splits a file and sends its chunks to the assembler."""

import time
import uuid
from pathlib import Path
from typing import Optional

import httpx

from cli.config import Config
from cli.file_splitter import split_file
from cli.source_file import LocalSourceFile
from cli.utils import format_file_size, print_progress
from common.exceptions import ChunkingError
from common.logging_config import DebugLog, get_logger
from common.types import ChunkDescriptor

logger = get_logger(__name__)


class UploadClient:
    """HTTP client for the assembler API with retry logic and error handling."""

    def __init__(self, config: Config, debug: bool = False):
        """
        Initialize upload client.

        Args:
            config: Configuration instance
            debug: Whether the splitter should emit debug logging
        """
        self.config = config
        self.session = httpx.Client(
            base_url=config.get_base_url(),
            timeout=config.get_timeout()
        )
        self.log = DebugLog(logger, debug_mode=debug)
        self.request_id = None
        logger.info(f"Initialized UploadClient [base_url={config.get_base_url()}]")

    def close(self) -> None:
        self.session.close()

    def _wait_before_retry(self, attempt: int, max_retries: int, method: str, endpoint: str, reason: str) -> None:
        delay = self.config.get_retry_config()['retry_backoff_multiplier'] ** attempt
        logger.warning(
            f"{reason} on {method} {endpoint} (attempt {attempt + 1}/{max_retries + 1}), "
            f"retrying in {delay}s [request_id={self.request_id}]"
        )
        time.sleep(delay)

    def _request_with_retry(
        self,
        method: str,
        endpoint: str,
        max_retries: Optional[int] = None,
        retry_after_send_timeout: bool = True,
        **kwargs
    ) -> httpx.Response:
        """
        Send a request, retrying on 5xx responses and network failures.

        Intermediate chunk writes overwrite by index, so resending them is safe.
        A request that may already have reached the server and timed out while
        waiting for the reply is only retried if ``retry_after_send_timeout``.

        Raises:
            ConnectionError: If the server stays unreachable after all retries
        """
        if max_retries is None:
            max_retries = self.config.get_retry_config()['max_retries']

        self.request_id = str(uuid.uuid4())
        kwargs.setdefault('headers', {})['X-Request-ID'] = self.request_id

        timed_out = False
        for attempt in range(max_retries + 1):
            is_last_attempt = attempt == max_retries
            try:
                response = self.session.request(method, endpoint, **kwargs)
            except (httpx.ConnectError, httpx.TimeoutException) as e:
                timed_out = isinstance(e, httpx.TimeoutException)
                if timed_out and not isinstance(e, httpx.ConnectTimeout) and not retry_after_send_timeout:
                    logger.error(
                        f"{method} {endpoint} timed out after sending, not retrying: {e} [request_id={self.request_id}]"
                    )
                    raise ConnectionError(
                        "Timed out waiting for the server. It may still be assembling the file; "
                        "check the output directory before uploading again."
                    ) from e
                if is_last_attempt:
                    logger.error(f"Giving up on {method} {endpoint}: {e} [request_id={self.request_id}]")
                    break
                self._wait_before_retry(attempt, max_retries, method, endpoint, type(e).__name__)
                continue

            logger.debug(f"{method} {endpoint} -> {response.status_code} [request_id={self.request_id}]")
            if response.status_code < 500 or is_last_attempt:
                return response
            self._wait_before_retry(attempt, max_retries, method, endpoint, f"HTTP {response.status_code}")

        if timed_out:
            raise ConnectionError("Request timed out. Server may be overloaded.")
        raise ConnectionError("Cannot connect to assembler server. Is it running?")

    def _format_error(self, response: httpx.Response) -> str:
        """
        Map HTTP errors to user-friendly messages.

        Args:
            response: HTTP response object

        Returns:
            User-friendly error message
        """
        try:
            error_data = response.json()
            detail = error_data.get('detail', 'Unknown error')
            code = error_data.get('code', 'UNKNOWN')
        except ValueError:
            detail = response.text or 'Unknown error'
            code = 'UNKNOWN'

        error_messages = {
            'MISSING_CHUNK': 'Server is missing an earlier chunk; the upload must be restarted.',
            'CHECKSUM_MISMATCH': 'Chunk was corrupted in transit.',
            'CHUNK_WRITE_ERROR': 'Server could not store the chunk.',
            'STREAM_ERROR': 'Server could not assemble the file.',
        }

        if code in error_messages:
            return f"{error_messages[code]} ({detail})"

        return f"{detail} (Code: {code})" if code != 'UNKNOWN' else f"HTTP {response.status_code}: {detail}"

    def send_chunk(self, descriptor: ChunkDescriptor) -> httpx.Response:
        """
        POST one chunk to the assembler.

        The last chunk makes the server assemble the whole file before it
        replies, so it is sent without a read timeout and is never resent
        after a timeout: a second delivery would find the session's chunks
        already consumed.

        Args:
            descriptor: Chunk produced by the splitter

        Returns:
            The final HTTP response for the chunk
        """
        request_kwargs = {}
        if descriptor.is_last:
            request_kwargs['timeout'] = httpx.Timeout(self.config.get_timeout(), read=None)

        return self._request_with_retry(
            'POST',
            '/uploads/chunks',
            retry_after_send_timeout=not descriptor.is_last,
            files={'file': (descriptor.file_name, descriptor.chunk, 'application/octet-stream')},
            data={
                'chunk_number': str(descriptor.chunk_number),
                'total_chunks': str(descriptor.total_chunks),
                'upload_id': descriptor.upload_id,
                'checksum': descriptor.checksum,
            },
            **request_kwargs,
        )

    def upload_file(self, file_path: str, chunk_size: Optional[int] = None, show_progress: bool = True) -> str:
        """
        Split a file and upload every chunk in order.

        Args:
            file_path: Path of the file to upload
            chunk_size: Chunk size in bytes (defaults to configured value)
            show_progress: Whether to print a progress line

        Returns:
            Result message for the user
        """
        path = Path(file_path)
        if not path.is_file():
            return f"Error: File not found: {file_path}"

        chunk_size = chunk_size or self.config.get_chunk_size()

        try:
            splitter = split_file(LocalSourceFile(path), chunk_size=chunk_size, log=self.log)
        except ChunkingError as e:
            return f"Error: {e}"

        logger.info(
            f"Uploading {path.name} ({format_file_size(splitter.source.size)}) as {splitter.file_name} "
            f"in {splitter.total_chunks} chunks [upload_id={splitter.upload_id}]"
        )

        response = None
        try:
            for descriptor in splitter:
                response = self.send_chunk(descriptor)
                if response.status_code not in (200, 201):
                    logger.warning(
                        f"Chunk {descriptor.chunk_number} rejected: status={response.status_code} [upload_id={descriptor.upload_id}]"
                    )
                    return f"Upload failed at chunk {descriptor.chunk_number}: {self._format_error(response)}"
                if show_progress:
                    print_progress(path.name, descriptor.progress, descriptor.chunk_number + 1, descriptor.total_chunks)
        except ChunkingError as e:
            logger.error(f"Reading {path} failed mid-upload: {e}")
            return f"Error: {e}"
        except ConnectionError as e:
            logger.error(f"Connection error during upload: {e}")
            return f"Error: {e}"

        merged_path = response.json().get('merged_file_path')
        return f"Upload complete: {path.name} stored as {merged_path}"
