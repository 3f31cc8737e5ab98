"""Byte-addressable sources the splitter can read from."""

import os
from pathlib import Path
from typing import Union


class LocalSourceFile:
    """A file on local disk, read one byte range at a time."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.name = self.path.name
        self.size = self.path.stat().st_size

    def read_range(self, start: int, end: int) -> bytes:
        """
        Read bytes ``[start, end)`` from the file.

        Raises:
            OSError: If the file cannot be opened or read
        """
        with open(self.path, 'rb') as f:
            f.seek(start)
            return f.read(end - start)

    def __repr__(self) -> str:
        return f"LocalSourceFile({str(self.path)!r}, size={self.size})"


class BytesSourceFile:
    """An in-memory payload with a file name."""

    def __init__(self, name: str, data: bytes):
        self.name = name
        self._data = bytes(data)
        self.size = len(self._data)

    def read_range(self, start: int, end: int) -> bytes:
        return self._data[start:end]

    def __repr__(self) -> str:
        return f"BytesSourceFile({self.name!r}, size={self.size})"


def open_source(path: Union[str, os.PathLike]) -> LocalSourceFile:
    """Open a local path as a splitter source."""
    return LocalSourceFile(path)
