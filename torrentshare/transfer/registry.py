"""Registry of live transfer sessions.

The registry is the only owner of TransferSession objects. It keeps at
most one session per content ref, and it makes sure no caller ever sees a
session that is half created or half destroyed:

- ensure() is single-flight per content ref. Concurrent callers share one
  pending creation task.
- destroy_all() waits for pending creations, detaches every session, and
  awaits their teardown. A creation that destroy_all() overtakes is torn
  down with the rest and its callers get SessionCreateError, never the
  dead session. An ensure() that arrives during teardown waits for it to
  finish before creating anything.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Tuple

from torrentshare.errors import SessionCreateError, TransferError
from torrentshare.models import ContentFile
from torrentshare.transfer.base import AddOptions, TransferClient, TransferSession

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Tracks live sessions by content ref and content files by name."""

    def __init__(self, client: TransferClient, staging_dir: str = "./dls/"):
        """Initialize the registry.

        Args:
            client: Transfer client used to create sessions
            staging_dir: Local directory every session downloads into
        """
        self.client = client
        self.staging_dir = staging_dir
        self._sessions: Dict[str, TransferSession] = {}
        self._pending: Dict[str, asyncio.Task] = {}
        self._files: Dict[str, Tuple[TransferSession, ContentFile]] = {}
        self._teardown: Optional[asyncio.Task] = None
        # Bumped by destroy_all(); creations started earlier are not handed out
        self._generation = 0

    async def ensure(self, content_ref: str) -> TransferSession:
        """Return the live session for content_ref, creating it if needed.

        Raises:
            SessionCreateError: If the transfer client fails to add the
                content, never reports its metadata, or destroy_all()
                tears the session down before it is handed out
        """
        while self._teardown is not None:
            await asyncio.shield(self._teardown)

        session = self._sessions.get(content_ref)
        if session is not None:
            logger.debug(f"Reusing session {session.identity} for {content_ref}")
            return session

        generation = self._generation
        task = self._pending.get(content_ref)
        if task is None:
            logger.debug(f"Creating session for {content_ref}")
            task = asyncio.ensure_future(self._create(content_ref))
            self._pending[content_ref] = task
        session = await asyncio.shield(task)

        if generation != self._generation:
            raise SessionCreateError(
                content_ref, TransferError(f"session {session.identity} torn down while starting")
            )
        return session

    async def _create(self, content_ref: str) -> TransferSession:
        session = None
        try:
            session = await self.client.add(content_ref, AddOptions(path=self.staging_dir))
            await session.wait_ready()
        except Exception as e:
            if session is not None:
                await self._destroy_quietly(session)
            raise SessionCreateError(content_ref, e) from e
        finally:
            self._pending.pop(content_ref, None)

        self._sessions[content_ref] = session
        logger.info(f"Session {session.identity} ready with {len(session.files)} files")
        return session

    async def destroy_all(self) -> None:
        """Tear down every live session and forget registered files.

        Sessions still being created are waited for and torn down too;
        the ensure() calls waiting on them fail with SessionCreateError.
        """
        while self._teardown is not None:
            await asyncio.shield(self._teardown)

        self._generation += 1
        self._teardown = asyncio.ensure_future(self._destroy_all())
        await asyncio.shield(self._teardown)

    async def _destroy_all(self) -> None:
        try:
            while self._pending:
                await asyncio.gather(*list(self._pending.values()), return_exceptions=True)

            sessions = list(self._sessions.values())
            self._sessions.clear()
            self._files.clear()
            for session in sessions:
                logger.info(f"Destroying session {session.identity}")
            await asyncio.gather(*(self._destroy_quietly(s) for s in sessions))
        finally:
            self._teardown = None

    async def _destroy_quietly(self, session: TransferSession) -> None:
        try:
            await session.destroy()
        except Exception as e:
            logger.warning(f"Failed to destroy session {session.identity}: {e}")

    async def reset_selections(self) -> int:
        """Clear prioritized ranges on every live session.

        Returns:
            Number of sessions reset
        """
        sessions = list(self._sessions.values())
        results = await asyncio.gather(
            *(s.reset_selections() for s in sessions),
            return_exceptions=True,
        )
        for session, result in zip(sessions, results):
            if isinstance(result, Exception):
                logger.warning(f"Failed to reset selections on {session.identity}: {result}")
            else:
                logger.debug(f"Reset selections on {session.identity}")
        return len(sessions)

    def register_files(self, session: TransferSession) -> List[ContentFile]:
        """Record session's files so they can be opened by name later.

        Files are keyed by base name. When two files share a name, the one
        registered last wins and a warning is logged.

        Returns:
            The registered files
        """
        files = list(session.files)
        for content_file in files:
            previous = self._files.get(content_file.name)
            if previous is not None and previous != (session, content_file):
                logger.warning(
                    f"File name {content_file.name} now opens {content_file.path} "
                    f"instead of {previous[1].path}"
                )
            self._files[content_file.name] = (session, content_file)
        return files

    def lookup_file(self, name: str) -> Optional[Tuple[TransferSession, ContentFile]]:
        """Find a registered content file and its session by name."""
        return self._files.get(name)

    def sessions(self) -> List[TransferSession]:
        """Live sessions, in creation order."""
        return list(self._sessions.values())

    def __contains__(self, content_ref: object) -> bool:
        return content_ref in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
