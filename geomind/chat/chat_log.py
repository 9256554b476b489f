"""
Chat Log.

An ordered conversation between the user and the assistant. Submitting text
appends the user message and a loading placeholder right away, then asks the
assistant gateway in a background task. When the gateway settles the
placeholder is replaced at the same position, under the same id, with the
reply or with a fixed apology.

Several submissions may be in flight at once. Each task carries the id of its
own placeholder, so replies land on the right message whatever order they
arrive in. A reply whose placeholder has gone (after ``reset``) is dropped.

No timeout is applied to gateway calls: a call that never settles leaves its
placeholder loading.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

import structlog

from geomind.core.exceptions import EmptyInputError, GatewayError
from geomind.gateway.assistant import AssistantGateway
from geomind.gateway.prompts import APOLOGY_MESSAGE, WELCOME_MESSAGE
from geomind.models.schemas import ChatMessage, ChatRole, CitationLink, LatLng
from geomind.store.location import LocationCursor

logger = structlog.get_logger(__name__)


def _new_message_id() -> str:
    return uuid4().hex


@dataclass(frozen=True)
class SubmittedTurn:
    """Handle for one submission: the user message, its placeholder and the reply task."""

    user_message: ChatMessage
    placeholder_id: str
    task: "asyncio.Task[None]"


class ChatLog:
    """
    Append-only conversation with in-place placeholder resolution.

    Args:
        gateway: Assistant used to answer submissions.
        cursor: Location cursor, read at submit time.
        context_provider: Returns the shop-context string, called at submit time.
        id_factory: Message id generator.
        welcome: Opening assistant message; None starts the log empty.
    """

    def __init__(
        self,
        gateway: AssistantGateway,
        cursor: LocationCursor,
        context_provider: Callable[[], str] = lambda: "",
        id_factory: Callable[[], str] = _new_message_id,
        welcome: Optional[str] = WELCOME_MESSAGE,
    ) -> None:
        self._gateway = gateway
        self._cursor = cursor
        self._context_provider = context_provider
        self._id_factory = id_factory
        self._welcome = welcome
        self._messages: list[ChatMessage] = []
        self._positions: dict[str, int] = {}
        self._pending: dict[str, asyncio.Task[None]] = {}
        self._seed()

    def _seed(self) -> None:
        if self._welcome:
            self.append(
                ChatMessage(id=self._id_factory(), role=ChatRole.ASSISTANT, content=self._welcome)
            )

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._messages)

    @property
    def pending_ids(self) -> list[str]:
        """Placeholder ids whose replies are still outstanding."""
        return list(self._pending)

    def get(self, message_id: str) -> Optional[ChatMessage]:
        position = self._positions.get(message_id)
        return self._messages[position] if position is not None else None

    def __len__(self) -> int:
        return len(self._messages)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def append(self, message: ChatMessage) -> ChatMessage:
        """Add ``message`` at the end of the log."""
        if message.id in self._positions:
            raise ValueError(f"Duplicate chat message id: {message.id}")
        self._positions[message.id] = len(self._messages)
        self._messages.append(message)
        return message

    def submit(self, text: str) -> SubmittedTurn:
        """
        Send ``text`` to the assistant.

        Must be called from a running event loop. The user message and the
        placeholder are in the log when this returns; the reply arrives later.

        Raises:
            EmptyInputError: If ``text`` is blank.
        """
        query = (text or "").strip()
        if not query:
            raise EmptyInputError()
        loop = asyncio.get_running_loop()

        user_message = self.append(
            ChatMessage(id=self._id_factory(), role=ChatRole.USER, content=query)
        )
        placeholder = self.append(
            ChatMessage(id=self._id_factory(), role=ChatRole.ASSISTANT, is_loading=True)
        )

        location = self._cursor.current
        context = self._context_provider()
        task = loop.create_task(
            self._resolve(placeholder.id, query, location, context),
            name=f"assistant-reply-{placeholder.id}",
        )
        self._pending[placeholder.id] = task
        task.add_done_callback(lambda _t, pid=placeholder.id: self._pending.pop(pid, None))

        logger.info(
            "chat_submitted",
            message_id=user_message.id,
            placeholder_id=placeholder.id,
            in_flight=len(self._pending),
        )
        return SubmittedTurn(user_message=user_message, placeholder_id=placeholder.id, task=task)

    async def _resolve(
        self, placeholder_id: str, query: str, location: LatLng, context: str
    ) -> None:
        try:
            reply = await self._gateway.ask(query, location, context)
            content, citations = reply.text, reply.citations
        except GatewayError as e:
            logger.warning("assistant_reply_failed", placeholder_id=placeholder_id, error=str(e))
            content, citations = APOLOGY_MESSAGE, []
        except Exception as e:
            logger.error(
                "assistant_reply_crashed",
                placeholder_id=placeholder_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            content, citations = APOLOGY_MESSAGE, []

        self._settle(placeholder_id, content, citations)

    def _settle(self, placeholder_id: str, content: str, citations: list[CitationLink]) -> bool:
        """Replace the placeholder in place; False when it no longer exists."""
        position = self._positions.get(placeholder_id)
        if position is None:
            logger.info("stale_reply_discarded", placeholder_id=placeholder_id)
            return False

        self._messages[position] = self._messages[position].model_copy(
            update={"content": content, "citations": list(citations), "is_loading": False}
        )
        logger.debug("placeholder_resolved", placeholder_id=placeholder_id, position=position)
        return True

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def wait_idle(self) -> None:
        """Wait until every in-flight reply has settled."""
        while self._pending:
            await asyncio.gather(*list(self._pending.values()), return_exceptions=True)

    def reset(self) -> None:
        """Start a new conversation. Replies still in flight are discarded on arrival."""
        self._messages.clear()
        self._positions.clear()
        self._seed()
        logger.info("chat_reset", in_flight=len(self._pending))

    async def aclose(self) -> None:
        """Cancel in-flight replies; their placeholders stay loading."""
        tasks = list(self._pending.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info("chat_pending_cancelled", count=len(tasks))
