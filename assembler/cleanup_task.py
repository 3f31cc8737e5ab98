"""Background task for removing chunk artifacts of abandoned uploads."""

import asyncio
import logging
import time
from pathlib import Path
from typing import Dict, List, Optional, Union

from assembler.chunk_storage import ChunkStore
from assembler.config import CLEANUP_INTERVAL_SECONDS, STALE_CHUNK_SECONDS
from assembler.session_locks import SessionLockRegistry, session_lock_key
from common.constants import CHUNK_ARTIFACT_SEPARATOR

logger = logging.getLogger(__name__)


class StaleChunkCleaner:
    """
    Background task that periodically deletes chunk artifacts nobody has
    touched for ``max_age_seconds``.

    Must not run with a max age shorter than the slowest expected upload, or
    it will delete chunks of sessions still in progress.
    """

    def __init__(
        self,
        chunk_dir: Union[str, Path],
        max_age_seconds: int = STALE_CHUNK_SECONDS,
        interval_seconds: int = CLEANUP_INTERVAL_SECONDS,
        locks: Optional[SessionLockRegistry] = None,
    ):
        self.store = ChunkStore(Path(chunk_dir).resolve())
        self.locks = locks or SessionLockRegistry()
        self.max_age_seconds = max_age_seconds
        self.interval_seconds = interval_seconds
        self._running = False
        self._task = None

    async def start(self) -> None:
        """Start the background cleanup task."""
        if self._running:
            logger.warning("Cleanup task already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info(
            f"Started stale chunk cleanup task (interval: {self.interval_seconds}s, max age: {self.max_age_seconds}s)"
        )

    async def stop(self) -> None:
        """Stop the background cleanup task."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        logger.info("Stopped stale chunk cleanup task")

    async def _run(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self.interval_seconds)

                if not self._running:
                    break

                await asyncio.to_thread(self.cleanup_cycle)

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in cleanup task: {e}", exc_info=True)

    def cleanup_cycle(self) -> List[Path]:
        """
        Execute one cleanup cycle.

        Artifacts of a session are removed while holding that session's lock,
        and only if they are still stale once it is held, so a sweep never
        pulls chunks out from under an intake or a merge in progress.

        Returns:
            Paths of the artifacts that were removed
        """
        stale = self.store.list_stale_artifacts(self.max_age_seconds)
        if not stale:
            logger.debug("No stale chunk artifacts found")
            return []

        sessions: Dict[str, List[Path]] = {}
        for artifact in stale:
            base_name = artifact.name.rsplit(CHUNK_ARTIFACT_SEPARATOR, 1)[0]
            sessions.setdefault(session_lock_key(artifact.parent, base_name), []).append(artifact)

        removed = []
        for session_key, artifacts in sessions.items():
            with self.locks.hold(session_key):
                cutoff = time.time() - self.max_age_seconds
                for artifact in artifacts:
                    try:
                        if artifact.stat().st_mtime >= cutoff:
                            logger.debug(f"Chunk {artifact} was refreshed, keeping it")
                            continue
                        artifact.unlink()
                        removed.append(artifact)
                    except FileNotFoundError:
                        logger.debug(f"Stale chunk {artifact} already removed")
                    except OSError as e:
                        logger.warning(f"Failed to remove stale chunk {artifact}: {e}")

        for session_dir in {artifact.parent for artifact in removed}:
            if session_dir == self.store.chunk_dir:
                continue
            try:
                if not any(session_dir.iterdir()):
                    session_dir.rmdir()
            except OSError as e:
                logger.debug(f"Keeping session directory {session_dir}: {e}")

        logger.info(f"Cleanup cycle complete: {len(removed)} of {len(stale)} stale chunks removed")
        return removed
