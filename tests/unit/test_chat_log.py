"""Unit tests for the chat log and its placeholder handling."""

import asyncio

import pytest

from geomind.chat.chat_log import ChatLog
from geomind.core.exceptions import EmptyInputError, GatewayError
from geomind.gateway.prompts import APOLOGY_MESSAGE, WELCOME_MESSAGE
from geomind.models.schemas import ChatMessage, ChatRole, CitationLink, LatLng

from tests.conftest import counter_ids


class TestAppend:
    """Test plain appends."""

    def test_welcome_message_seeded(self, echo_gateway, cursor):
        log = ChatLog(echo_gateway, cursor)

        assert len(log) == 1
        assert log.messages[0].role == ChatRole.ASSISTANT
        assert log.messages[0].content == WELCOME_MESSAGE

    def test_append_keeps_order(self, chat_log):
        for i in range(3):
            chat_log.append(ChatMessage(id=f"m{i}", role=ChatRole.USER, content=str(i)))

        assert [m.id for m in chat_log.messages] == ["m0", "m1", "m2"]

    def test_duplicate_id_rejected(self, chat_log):
        chat_log.append(ChatMessage(id="same", role=ChatRole.USER))

        with pytest.raises(ValueError):
            chat_log.append(ChatMessage(id="same", role=ChatRole.ASSISTANT))


class TestSubmit:
    """Test submissions and placeholder resolution."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_blank_text_rejected_without_messages(self, chat_log, scripted_gateway, text):
        with pytest.raises(EmptyInputError):
            chat_log.submit(text)

        assert chat_log.messages == []
        assert scripted_gateway.calls == []

    @pytest.mark.asyncio
    async def test_user_message_and_placeholder_appended_synchronously(
        self, chat_log, scripted_gateway
    ):
        turn = chat_log.submit("  Where is the best bajji?  ")

        user, placeholder = chat_log.messages
        assert user.role == ChatRole.USER
        assert user.content == "Where is the best bajji?"
        assert placeholder.id == turn.placeholder_id
        assert placeholder.role == ChatRole.ASSISTANT
        assert placeholder.is_loading is True
        assert chat_log.pending_ids == [turn.placeholder_id]

        scripted_gateway.reply("Where is the best bajji?", "Mylapore.")
        await turn.task

    @pytest.mark.asyncio
    async def test_placeholder_replaced_in_place(self, chat_log, scripted_gateway):
        turn = chat_log.submit("bajji?")
        citation = CitationLink(title="Guide", uri="https://example.com/bajji")

        scripted_gateway.reply("bajji?", "Try Jannal Kadai.", [citation])
        await turn.task

        user, reply = chat_log.messages
        assert reply.id == turn.placeholder_id
        assert reply.content == "Try Jannal Kadai."
        assert reply.citations == [citation]
        assert reply.is_loading is False
        assert chat_log.pending_ids == []

    @pytest.mark.asyncio
    async def test_out_of_order_replies_match_by_id(self, chat_log, scripted_gateway):
        """Two in-flight requests resolve to their own placeholders."""
        first = chat_log.submit("first question")
        second = chat_log.submit("second question")
        assert first.placeholder_id != second.placeholder_id

        scripted_gateway.reply("second question", "second answer")
        await second.task
        assert chat_log.get(first.placeholder_id).is_loading is True
        assert chat_log.get(second.placeholder_id).content == "second answer"

        scripted_gateway.reply("first question", "first answer")
        await first.task

        contents = [m.content for m in chat_log.messages]
        assert contents == ["first question", "first answer", "second question", "second answer"]
        assert not any(m.is_loading for m in chat_log.messages)
        assert len(chat_log) == 4

    @pytest.mark.asyncio
    async def test_gateway_error_becomes_apology(self, chat_log, scripted_gateway):
        turn = chat_log.submit("anything open?")

        scripted_gateway.fail("anything open?", GatewayError("network down"))
        await turn.task

        reply = chat_log.get(turn.placeholder_id)
        assert reply.content == APOLOGY_MESSAGE
        assert "network" not in reply.content
        assert reply.is_loading is False

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_apology(self, chat_log, scripted_gateway):
        turn = chat_log.submit("anything open?")

        scripted_gateway.fail("anything open?", KeyError("boom"))
        await turn.task

        assert chat_log.get(turn.placeholder_id).content == APOLOGY_MESSAGE

    @pytest.mark.asyncio
    async def test_location_and_context_read_at_submit_time(self, chat_log, scripted_gateway, cursor):
        moved = LatLng(lat=13.0585, lng=80.2730)
        cursor.set(moved)

        turn = chat_log.submit("what's nearby?")
        cursor.set(LatLng(lat=0.0, lng=0.0))
        scripted_gateway.reply("what's nearby?", "lots")
        await turn.task

        query, location, context = scripted_gateway.calls[0]
        assert query == "what's nearby?"
        assert location == moved
        assert "Jannal Kadai" in context

    @pytest.mark.asyncio
    async def test_wait_idle(self, echo_gateway, cursor):
        log = ChatLog(echo_gateway, cursor, welcome=None)
        log.submit("one")
        log.submit("two")

        await log.wait_idle()

        assert [m.content for m in log.messages] == ["one", "Echo: one", "two", "Echo: two"]


class TestLifecycle:
    """Test reset and close."""

    @pytest.mark.asyncio
    async def test_reply_after_reset_is_discarded(self, chat_log, scripted_gateway):
        turn = chat_log.submit("old question")
        chat_log.reset()

        scripted_gateway.reply("old question", "late answer")
        await turn.task

        assert chat_log.messages == []

    @pytest.mark.asyncio
    async def test_reset_restores_welcome(self, echo_gateway, cursor):
        log = ChatLog(echo_gateway, cursor, id_factory=counter_ids("m"))
        log.submit("hello")
        await log.wait_idle()

        log.reset()

        assert [m.content for m in log.messages] == [WELCOME_MESSAGE]

    @pytest.mark.asyncio
    async def test_aclose_leaves_placeholder_loading(self, chat_log):
        turn = chat_log.submit("never answered")

        await chat_log.aclose()

        assert turn.task.cancelled()
        assert chat_log.get(turn.placeholder_id).is_loading is True
        await asyncio.sleep(0)
        assert chat_log.pending_ids == []
