"""Conversation state: ordered messages with in-flight assistant placeholders."""

from geomind.chat.chat_log import ChatLog, SubmittedTurn

__all__ = ["ChatLog", "SubmittedTurn"]
