"""
Assistant Gateway.

- assistant: AssistantGateway protocol and the Claude-backed implementation
- prompts: prompt templates and fixed assistant messages
"""

from geomind.gateway.assistant import (
    AnthropicAssistantGateway,
    AssistantGateway,
    AssistantReply,
    UnconfiguredAssistantGateway,
)
from geomind.gateway.prompts import (
    APOLOGY_MESSAGE,
    WELCOME_MESSAGE,
    build_shop_context,
    build_shop_prompt,
)

__all__ = [
    "APOLOGY_MESSAGE",
    "AnthropicAssistantGateway",
    "AssistantGateway",
    "AssistantReply",
    "UnconfiguredAssistantGateway",
    "WELCOME_MESSAGE",
    "build_shop_context",
    "build_shop_prompt",
]
