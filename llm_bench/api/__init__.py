"""LLM benchmark REST API package.

This package provides FastAPI-based REST endpoints for submitting load
tests, browsing benchmark history by model, and exporting results.
"""

from .main import create_app, run_server

__all__ = ["create_app", "run_server"]
