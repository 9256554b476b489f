"""Prompt and fixed-message templates for the assistant."""

from collections.abc import Sequence

from geomind.models.schemas import LatLng, Shop

WELCOME_MESSAGE = (
    "Namaste! I am your GeoMind assistant. Ask me anything about landmarks or food!"
)

APOLOGY_MESSAGE = (
    "Sorry, I couldn't reach my sources just now. Please try again in a moment."
)

SYSTEM_PROMPT = """You are GeoMind, a local street-food guide.
Answer questions about food spots, landmarks and neighbourhoods near the user's
location. Keep answers short and specific, mention shop names when they help,
and prefer places from the known-shops list when they are relevant."""


def build_shop_prompt(shop: Shop) -> str:
    """The chat text submitted when a legend shop is selected on the map."""
    if shop.address:
        return f"Tell me about {shop.name} at {shop.address}."
    return f"Tell me about {shop.name}."


def build_shop_context(shops: Sequence[Shop]) -> str:
    """Summarise known shops as one line each for the assistant."""
    if not shops:
        return "No known shops."
    lines = []
    for shop in shops:
        kind = "vendor" if shop.is_vendor else "legend"
        line = f"- {shop.name} ({kind})"
        if shop.address:
            line += f", {shop.address}"
        lines.append(line)
    return "Known shops:\n" + "\n".join(lines)


def build_user_message(query: str, location: LatLng, context: str) -> str:
    """Combine the user's text with the current location and shop context."""
    parts = [
        f"User location: {location.lat}, {location.lng}.",
        context,
        f"Inquiry: {query}",
    ]
    return "\n\n".join(part for part in parts if part)
