"""Configuration settings for the chunk assembler service."""

import os
from common.constants import DEFAULT_CHUNK_DIR, DEFAULT_OUTPUT_DIR, DEFAULT_SERVER_PORT


OUTPUT_DIR = os.environ.get("CHUNKRELAY_OUTPUT_DIR", DEFAULT_OUTPUT_DIR)

CHUNK_DIR = os.environ.get("CHUNKRELAY_CHUNK_DIR", DEFAULT_CHUNK_DIR)

ASSEMBLER_HOST = os.environ.get("CHUNKRELAY_HOST", "0.0.0.0")

ASSEMBLER_PORT = int(os.environ.get("CHUNKRELAY_PORT", str(DEFAULT_SERVER_PORT)))

DEBUG_MODE = os.environ.get("CHUNKRELAY_DEBUG", "false").lower() in ("1", "true", "yes")

STALE_CHUNK_SECONDS = int(os.environ.get("CHUNKRELAY_STALE_CHUNK_SECONDS", str(24 * 3600)))

CLEANUP_INTERVAL_SECONDS = int(os.environ.get("CHUNKRELAY_CLEANUP_INTERVAL_SECONDS", str(3600)))
