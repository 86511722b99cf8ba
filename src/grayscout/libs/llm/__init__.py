"""Shared utilities for talking to hosted text-generation services."""

from .backends import (  # noqa: F401
    BACKEND_REGISTRY,
    GEMINI_BASE_URL,
    GEMINI_DEFAULT_MODEL,
    BaseBackendClient,
    GeminiBackend,
    TextBackend,
    create_backend_client,
)

__all__ = [
    "BACKEND_REGISTRY",
    "GEMINI_BASE_URL",
    "GEMINI_DEFAULT_MODEL",
    "BaseBackendClient",
    "GeminiBackend",
    "TextBackend",
    "create_backend_client",
]
