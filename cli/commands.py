"""Command handler functions for CLI operations."""

from pathlib import Path
from typing import Optional

from assembler.chunk_merger import merge_chunks, split_original_name
from assembler.chunk_storage import ChunkStore
from cli.config import Config
from cli.constants import CONFIG_PATH_PARTS, HELP_TEXT
from cli.file_splitter import split_file
from cli.models import CommandRequest, HelpCommand, MergeCommand, SplitCommand, UploadCommand
from cli.source_file import LocalSourceFile
from cli.upload_client import UploadClient
from cli.utils import format_file_size
from common.constants import DEFAULT_CHUNK_SIZE_BYTES
from common.exceptions import ChunkingError
from common.logging_config import DebugLog, NULL_LOG, get_logger

logger = get_logger(__name__)


_client: Optional[UploadClient] = None


def get_client(debug: bool = False) -> UploadClient:
    """
    Get or create global UploadClient instance.

    Returns:
        UploadClient instance
    """
    global _client
    if _client is None:
        logger.debug("Creating new UploadClient instance")
        config = Config(Path.home().joinpath(*CONFIG_PATH_PARTS))
        _client = UploadClient(config, debug=debug)
    return _client


def close_client() -> None:
    """Close the global UploadClient, if one was created."""
    global _client
    if _client is not None:
        _client.close()
        _client = None


def handle_split(cmd: SplitCommand, log: DebugLog = NULL_LOG) -> str:
    """
    Handle 'split' command: write ``{base}.part_{n}`` artifacts for a local file.

    Args:
        cmd: SplitCommand with file path, chunk directory and optional chunk size
        log: Debug logging capability

    Returns:
        Success or error message
    """
    path = Path(cmd.file_path)
    if not path.is_file():
        return f"Error: File not found: {cmd.file_path}"

    base_name, _ = split_original_name(path.name)
    store = ChunkStore(Path(cmd.chunk_dir).resolve())

    try:
        splitter = split_file(LocalSourceFile(path), chunk_size=cmd.chunk_size or DEFAULT_CHUNK_SIZE_BYTES, log=log)
        for descriptor in splitter:
            store.write_artifact(base_name, descriptor.chunk_number, descriptor.chunk)
    except ChunkingError as e:
        return f"Error: {e}"
    except OSError as e:
        logger.error(f"Failed to write chunk artifacts to {store.chunk_dir}: {e}")
        return f"Error: Could not write chunks: {e}"

    return (
        f"Split {path.name} ({format_file_size(splitter.source.size)}) into "
        f"{splitter.total_chunks} chunks in {store.chunk_dir}"
    )


def handle_merge(cmd: MergeCommand, log: DebugLog = NULL_LOG) -> str:
    """
    Handle 'merge' command: concatenate local artifacts into the final file.

    Args:
        cmd: MergeCommand with file name, chunk count and directories
        log: Debug logging capability

    Returns:
        Success or error message
    """
    base_name, extension = split_original_name(cmd.file_name)
    try:
        merged_path = merge_chunks(base_name, cmd.total_chunks, cmd.chunk_dir, cmd.output_dir, extension, log=log)
    except ChunkingError as e:
        logger.error(f"Merge of {cmd.file_name} failed: {e}")
        return f"Error: {e}"
    return f"Merged {cmd.total_chunks} chunks into {merged_path}"


def handle_upload(cmd: UploadCommand, client: Optional[UploadClient] = None) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with file path and optional chunk size
        client: Optional UploadClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    if client is None:
        client = get_client()
    return client.upload_file(cmd.file_path, chunk_size=cmd.chunk_size)


def dispatch(cmd: CommandRequest, log: DebugLog = NULL_LOG, client: Optional[UploadClient] = None) -> str:
    """Route a parsed command to its handler."""
    if isinstance(cmd, SplitCommand):
        return handle_split(cmd, log=log)
    if isinstance(cmd, MergeCommand):
        return handle_merge(cmd, log=log)
    if isinstance(cmd, UploadCommand):
        return handle_upload(cmd, client=client or get_client(debug=log.debug_mode))
    if isinstance(cmd, HelpCommand):
        return HELP_TEXT
    raise ValueError(f"Unsupported command: {cmd!r}")
