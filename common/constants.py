"""Project-wide constants (chunk sizing, default directories, naming)."""

DEFAULT_CHUNK_SIZE_BYTES: int = 5 * 1024 * 1024  # 5 MiB default chunk size

DEFAULT_OUTPUT_DIR: str = "./uploads"
DEFAULT_CHUNK_DIR: str = "./uploads/chunks"

FALLBACK_EXTENSION: str = "bin"

CHUNK_ARTIFACT_SEPARATOR: str = ".part_"

STREAM_PIECE_SIZE: int = 64 * 1024

DEFAULT_SERVER_PORT: int = 8000
