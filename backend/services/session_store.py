"""In-memory chat sessions with simulated, asynchronously delivered replies."""

import asyncio
import random
import re
import uuid
from datetime import datetime
from typing import Callable, List, Optional, Set, Tuple

from backend import config
from backend.logging_config import get_logger, session_id_context
from backend.models.schemas import (
    ChatMessage,
    ChatSession,
    DispatchResult,
    SessionSummary,
    TablePayload,
    UploadedDataset,
)
from backend.services.response_dispatcher import respond

logger = get_logger(__name__)

_FILE_SUFFIX_RE = re.compile(r"\.(xlsx|xls|csv)$", re.IGNORECASE)

Responder = Callable[[str, Optional[UploadedDataset]], DispatchResult]


def _generate_id() -> str:
    return str(uuid.uuid4())


def session_name_from_file(file_name: str) -> str:
    """Strip a trailing .xlsx/.xls/.csv suffix (case-insensitive)."""
    return _FILE_SUFFIX_RE.sub("", file_name)


def file_loaded_message(dataset: UploadedDataset) -> str:
    """Assistant message announcing a newly attached dataset."""
    headers = ", ".join(dataset.headers[: config.SUMMARY_HEADER_LIMIT])
    ellipsis = "..." if len(dataset.headers) > config.SUMMARY_HEADER_LIMIT else ""
    return (
        f"📁 **{dataset.name}** loaded successfully!\n\n"
        f"• Sheet: **{dataset.selected_sheet}**\n"
        f"• Rows: **{dataset.row_count}**\n"
        f"• Columns: **{len(dataset.headers)}** ({headers}{ellipsis})\n\n"
        "I'm ready to analyze your data. What would you like to know?"
    )


class SessionStore:
    """
    Owns the ordered session collection and the active-session pointer.

    All mutation happens on one asyncio event loop. Replies are delivered by a
    task scheduled in ``send_message``; the task resolves its target session by
    id when it fires, so sessions created, selected or deleted in the meantime
    do not redirect the reply.
    """

    def __init__(
        self,
        responder: Responder = respond,
        delay_range_ms: Tuple[int, int] = (config.RESPONSE_DELAY_MIN_MS, config.RESPONSE_DELAY_MAX_MS),
        rng: Optional[random.Random] = None,
    ):
        self._responder = responder
        self._delay_range_ms = delay_range_ms
        self._rng = rng or random.Random()
        self._sessions: List[ChatSession] = [
            ChatSession(id=config.DEFAULT_SESSION_ID, name=config.WELCOME_SESSION_NAME)
        ]
        self._active_session_id = config.DEFAULT_SESSION_ID
        self._pending: Set["asyncio.Task[Optional[ChatMessage]]"] = set()

    # Read projections

    @property
    def sessions(self) -> List[SessionSummary]:
        return [
            SessionSummary(id=s.id, name=s.name, file_name=s.file_name, created_at=s.created_at)
            for s in self._sessions
        ]

    @property
    def active_session_id(self) -> str:
        return self._active_session_id

    @property
    def active_session(self) -> ChatSession:
        return self.get_session(self._active_session_id) or self._sessions[0]

    @property
    def active_messages(self) -> List[ChatMessage]:
        return list(self.active_session.messages)

    @property
    def current_file(self) -> Optional[UploadedDataset]:
        return self.active_session.file

    @property
    def is_responding(self) -> bool:
        return bool(self._pending)

    def get_session(self, session_id: str) -> Optional[ChatSession]:
        for session in self._sessions:
            if session.id == session_id:
                return session
        return None

    # Operations

    def create_session(self) -> str:
        """Prepend an empty session and make it active."""
        session = ChatSession(id=_generate_id(), name=config.NEW_SESSION_NAME)
        self._sessions.insert(0, session)
        self._active_session_id = session.id
        logger.info("Session created", extra={"session_id": session.id})
        return session.id

    def select_session(self, session_id: str) -> None:
        # Unknown ids are a caller bug and are ignored
        if self.get_session(session_id) is not None:
            self._active_session_id = session_id

    def delete_session(self, session_id: str) -> None:
        """Remove a session, keeping the collection non-empty and one session active."""
        remaining = [s for s in self._sessions if s.id != session_id]
        if len(remaining) == len(self._sessions):
            return

        self._sessions = remaining
        logger.info("Session deleted", extra={"session_id": session_id})

        if not self._sessions:
            fallback = ChatSession(id=_generate_id(), name=config.NEW_SESSION_NAME)
            self._sessions.append(fallback)
            self._active_session_id = fallback.id
            logger.info("Replacement session created", extra={"session_id": fallback.id})
        elif self._active_session_id == session_id:
            self._active_session_id = self._sessions[0].id

    def attach_file(self, dataset: UploadedDataset) -> None:
        """Bind a dataset to the active session, rename it and announce the file."""
        session = self.active_session
        token = session_id_context.set(session.id)
        try:
            session.file = dataset
            session.name = session_name_from_file(dataset.name)
            self._append(session, "assistant", file_loaded_message(dataset))
            logger.info(
                f"File attached: name={dataset.name}, sheet={dataset.selected_sheet}, "
                f"rows={dataset.row_count}, columns={len(dataset.headers)}"
            )
        finally:
            session_id_context.reset(token)

    def send_message(self, text: str) -> "Optional[asyncio.Task[Optional[ChatMessage]]]":
        """
        Append a user message now and schedule the assistant reply.

        Must be called from a running event loop. Empty or whitespace-only
        text is ignored.

        Returns:
            The task delivering the reply, or None if nothing was sent
        """
        content = (text or "").strip()
        if not content:
            return None

        # Raises before any mutation when no loop is running
        loop = asyncio.get_running_loop()

        session = self.active_session
        self._append(session, "user", content)

        delay_s = self._draw_delay_ms() / 1000
        task = loop.create_task(self._deliver(session.id, content, delay_s))
        self._pending.add(task)
        # Also covers tasks cancelled before they start running
        task.add_done_callback(self._pending.discard)
        return task

    async def ask(self, text: str) -> Optional[ChatMessage]:
        """Send a message and wait for the assistant reply."""
        task = self.send_message(text)
        if task is None:
            return None
        return await task

    async def wait_idle(self) -> None:
        """Wait until every in-flight reply has been delivered."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    # Internals

    def _draw_delay_ms(self) -> float:
        """Uniform in [low, high)."""
        low, high = self._delay_range_ms
        return low + self._rng.random() * (high - low)

    def _append(
        self,
        session: ChatSession,
        role: str,
        content: str,
        table: Optional[TablePayload] = None,
    ) -> ChatMessage:
        message = ChatMessage(id=_generate_id(), role=role, content=content, timestamp=datetime.now(), table=table)
        session.messages.append(message)
        return message

    async def _deliver(self, session_id: str, question: str, delay_s: float) -> Optional[ChatMessage]:
        token = session_id_context.set(session_id)
        try:
            await asyncio.sleep(delay_s)

            # Re-read the session: the bound file may have changed during the delay
            session = self.get_session(session_id)
            if session is None:
                logger.info("Dropping reply: session was deleted while responding")
                return None

            result = self._responder(question, session.file)
            message = self._append(session, "assistant", result.content, result.table)
            logger.info(f"Reply delivered: intent={result.intent}")
            return message
        finally:
            self._pending.discard(asyncio.current_task())
            session_id_context.reset(token)
