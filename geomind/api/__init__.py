"""
GeoMind HTTP API.

FastAPI application exposing the shop directory, session state machine,
chat and map to a browser front-end.

Run with: uvicorn geomind.api.main:app --reload
"""
