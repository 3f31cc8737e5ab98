"""Service locator for the shared ChunkMerger instance."""

from typing import Optional

from assembler.chunk_merger import ChunkMerger
from assembler.config import CHUNK_DIR, DEBUG_MODE, OUTPUT_DIR
from common.logging_config import DebugLog, get_logger

_chunk_merger: Optional[ChunkMerger] = None


def set_chunk_merger(merger: Optional[ChunkMerger]):
    """Set global chunk merger instance (None resets to the configured default)"""
    global _chunk_merger
    _chunk_merger = merger


def get_chunk_merger() -> ChunkMerger:
    """Get global chunk merger instance, creating it from configuration on first use"""
    global _chunk_merger
    if _chunk_merger is None:
        _chunk_merger = ChunkMerger(
            output_dir=OUTPUT_DIR,
            chunk_dir=CHUNK_DIR,
            log=DebugLog(get_logger('assembler.merger'), debug_mode=DEBUG_MODE),
        )
    return _chunk_merger
