"""
CORS middleware — configures allowed origins, methods, and headers.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from template_registry.core.config import Settings


def apply_cors(app: FastAPI, settings: Settings) -> None:
    """Apply CORS middleware for the configured origins."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Location"],
    )
