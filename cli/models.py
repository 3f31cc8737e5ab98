"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal, Optional, Union


@dataclass(frozen=True)
class SplitCommand:
    """Split a local file into chunk artifacts."""

    file_path: str
    chunk_dir: str
    chunk_size: Optional[int] = None
    command: Literal["split"] = "split"


@dataclass(frozen=True)
class MergeCommand:
    """Concatenate chunk artifacts back into a file."""

    file_name: str
    total_chunks: int
    chunk_dir: str
    output_dir: str
    command: Literal["merge"] = "merge"


@dataclass(frozen=True)
class UploadCommand:
    """Split a file and upload its chunks to the assembler."""

    file_path: str
    chunk_size: Optional[int] = None
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class HelpCommand:
    """Show usage."""

    command: Literal["help"] = "help"


CommandRequest = Union[SplitCommand, MergeCommand, UploadCommand, HelpCommand]
