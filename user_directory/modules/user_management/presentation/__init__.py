"""Presentation layer: FastAPI routes, schemas and dependencies."""
