"""
Assistant Gateway.

Sends a chat query, the current location and a shop-context summary to Claude
and returns the reply text together with any citation links the web search
tool attached. Transient API failures are retried; everything else, and
retries that run out, surfaces as GatewayError so callers only handle one
failure type.

Standalone usage:
    from geomind.gateway import AnthropicAssistantGateway
    gateway = AnthropicAssistantGateway(api_key="sk-ant-...")
    reply = await gateway.ask(
        "Where can I get bajji right now?",
        LatLng(lat=13.0336, lng=80.2697),
        "Known shops:\n- Jannal Kadai (legend), Mylapore, Chennai",
    )
"""

from typing import Any, Optional, Protocol

import anthropic
import structlog
from pydantic import BaseModel, Field
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from geomind.core.exceptions import GatewayError
from geomind.gateway.prompts import SYSTEM_PROMPT, build_user_message
from geomind.models.schemas import CitationLink, LatLng

logger = structlog.get_logger(__name__)

# Errors worth another attempt
TRANSIENT_ERRORS = (
    anthropic.APIConnectionError,
    anthropic.RateLimitError,
    anthropic.InternalServerError,
)

DEFAULT_CITATION_TITLE = "Verification Source"


# =============================================================================
# Models
# =============================================================================


class AssistantReply(BaseModel):
    """Text answer plus source links."""
    text: str = Field(..., description="Reply text")
    citations: list[CitationLink] = Field(default_factory=list, description="Source links")


class AssistantGateway(Protocol):
    """Anything that can answer a location-aware chat query."""

    async def ask(self, query: str, location: LatLng, context: str) -> AssistantReply:
        """Answer ``query``.

        Raises:
            GatewayError: On any network, API or parse failure.
        """
        ...


# =============================================================================
# Gateways
# =============================================================================


class UnconfiguredAssistantGateway:
    """Used when no API key is configured; every call fails gracefully."""

    async def ask(self, query: str, location: LatLng, context: str) -> AssistantReply:
        raise GatewayError("Assistant is not configured", {"reason": "missing_api_key"})


class AnthropicAssistantGateway:
    """
    Answers chat queries with Claude.

    Uses the async Anthropic client with SDK-level retries disabled so that
    retry policy lives in one place (tenacity, below).
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "claude-sonnet-4-20250514",
        max_tokens: int = 1024,
        web_search: bool = True,
        max_attempts: int = 3,
        client: Optional[anthropic.AsyncAnthropic] = None,
    ):
        self.client = client or anthropic.AsyncAnthropic(api_key=api_key, max_retries=0)
        self.model = model
        self.max_tokens = max_tokens
        self.web_search = web_search
        self.max_attempts = max_attempts

    def _tools(self) -> list[dict[str, Any]]:
        if not self.web_search:
            return []
        return [{"type": "web_search_20250305", "name": "web_search", "max_uses": 3}]

    async def _create(self, user_message: str) -> Any:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "system": SYSTEM_PROMPT,
            "messages": [{"role": "user", "content": user_message}],
        }
        tools = self._tools()
        if tools:
            kwargs["tools"] = tools

        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=8),
            stop=stop_after_attempt(self.max_attempts),
            before_sleep=lambda retry_state: logger.warning(
                "assistant_retry",
                attempt=retry_state.attempt_number,
                wait=retry_state.next_action.sleep,
            ),
        ):
            with attempt:
                return await self.client.messages.create(**kwargs)

    def _parse_response(self, response: Any) -> AssistantReply:
        """Join text blocks and collect their citations, deduplicated by URI."""
        texts: list[str] = []
        citations: list[CitationLink] = []
        seen: set[str] = set()

        for block in getattr(response, "content", None) or []:
            if getattr(block, "type", None) != "text":
                continue
            texts.append(block.text)
            for citation in getattr(block, "citations", None) or []:
                uri = getattr(citation, "url", None)
                if not uri or uri in seen:
                    continue
                seen.add(uri)
                title = getattr(citation, "title", None) or DEFAULT_CITATION_TITLE
                citations.append(CitationLink(title=title, uri=uri))

        text = "".join(texts).strip()
        if not text:
            raise ValueError("Assistant returned no text")
        return AssistantReply(text=text, citations=citations)

    async def ask(self, query: str, location: LatLng, context: str) -> AssistantReply:
        """
        Ask Claude about ``query`` near ``location``.

        Args:
            query: The user's chat text.
            location: Current location cursor.
            context: Known-shop summary.

        Returns:
            The reply text and citation links.

        Raises:
            GatewayError: On API failure, exhausted retries or an empty reply.
        """
        user_message = build_user_message(query, location, context)

        try:
            response = await self._create(user_message)
            reply = self._parse_response(response)
        except RetryError as e:
            logger.error("assistant_retries_exhausted", attempts=self.max_attempts)
            raise GatewayError("Assistant unavailable after retries") from e
        except anthropic.APIError as e:
            logger.error("assistant_request_failed", error=str(e), error_type=type(e).__name__)
            raise GatewayError(f"Assistant request failed: {e}") from e
        except ValueError as e:
            logger.error("assistant_response_unparseable", error=str(e))
            raise GatewayError(f"Assistant response unparseable: {e}") from e

        logger.info(
            "assistant_replied",
            model=self.model,
            chars=len(reply.text),
            citations=len(reply.citations),
        )
        return reply
