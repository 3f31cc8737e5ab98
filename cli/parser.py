"""Command parser for CLI arguments."""

import shlex
from typing import Optional, Sequence, Union

from cli.models import (
    CommandRequest,
    HelpCommand,
    MergeCommand,
    SplitCommand,
    UploadCommand,
)
from cli.utils import parse_size


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(args: Union[str, Sequence[str]]) -> CommandRequest:
    """Parse command-line arguments into a CommandRequest object.

    Args:
        args: Argument list (without program name) or a raw command line

    Returns:
        CommandRequest object (one of Split/Merge/Upload/Help)

    Raises:
        ParseError: If command syntax is invalid
    """
    if isinstance(args, str):
        try:
            tokens = shlex.split(args)
        except ValueError as e:
            raise ParseError(f"Invalid syntax: {e}")
    else:
        tokens = list(args)

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]

    if command_name == "split":
        return _parse_split(tokens[1:])
    elif command_name == "merge":
        return _parse_merge(tokens[1:])
    elif command_name == "upload":
        return _parse_upload(tokens[1:])
    elif command_name in ("help", "--help", "-h"):
        return HelpCommand()
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _extract_chunk_size(args: list[str]) -> tuple[list[str], Optional[int]]:
    """Pull ``--chunk-size`` out of args, returning the remaining positionals."""
    positionals = []
    chunk_size = None
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--chunk-size":
            if i + 1 >= len(args):
                raise ParseError("--chunk-size requires a value")
            value = args[i + 1]
            i += 2
        elif arg.startswith("--chunk-size="):
            value = arg.split("=", 1)[1]
            i += 1
        elif arg.startswith("--"):
            raise ParseError(f"Unknown option: {arg}")
        else:
            positionals.append(arg)
            i += 1
            continue

        try:
            chunk_size = parse_size(value)
        except ValueError as e:
            raise ParseError(str(e))
        if chunk_size <= 0:
            raise ParseError("--chunk-size must be greater than zero")

    return positionals, chunk_size


def _parse_split(args: list[str]) -> SplitCommand:
    """Parse 'split <file> <chunk-dir> [--chunk-size SIZE]' command."""
    positionals, chunk_size = _extract_chunk_size(args)
    if len(positionals) != 2:
        raise ParseError("split requires a file and a chunk directory")
    return SplitCommand(file_path=positionals[0], chunk_dir=positionals[1], chunk_size=chunk_size)


def _parse_merge(args: list[str]) -> MergeCommand:
    """Parse 'merge <file-name> <total-chunks> <chunk-dir> <output-dir>' command."""
    if len(args) != 4:
        raise ParseError("merge requires a file name, a chunk count, a chunk directory and an output directory")

    file_name, total, chunk_dir, output_dir = args
    try:
        total_chunks = int(total)
    except ValueError:
        raise ParseError(f"Chunk count must be an integer, got {total!r}")
    if total_chunks <= 0:
        raise ParseError("Chunk count must be greater than zero")

    return MergeCommand(file_name=file_name, total_chunks=total_chunks, chunk_dir=chunk_dir, output_dir=output_dir)


def _parse_upload(args: list[str]) -> UploadCommand:
    """Parse 'upload <file> [--chunk-size SIZE]' command."""
    positionals, chunk_size = _extract_chunk_size(args)
    if len(positionals) != 1:
        raise ParseError("upload requires exactly one file")
    return UploadCommand(file_path=positionals[0], chunk_size=chunk_size)
