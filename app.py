"""
App assembly entry point.

Re-exports the FastAPI ``app`` from ``nonprofitsuite.api.main`` so that
``uvicorn app:app`` works from the repository root.
"""

from nonprofitsuite.api.main import app  # noqa: F401
