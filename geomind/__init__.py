"""
GeoMind - street-food map explorer with a location-aware AI assistant.

This package contains the core modules for the GeoMind service:
- store: vendor registry (GeoStore), durable storage and the location cursor
- chat: ordered conversation log with in-flight assistant placeholders
- gateway: assistant gateway backed by the Anthropic Messages API
- map: typed map events, event channel and render adapters
- controller: application state machine tying the components together
- api: FastAPI application and endpoints
- config: Pydantic settings
- models: shared data models
"""

__version__ = "0.1.0"
