"""Backend adapters for hosted text-generation endpoints."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional, Type
import logging

import requests

from grayscout.errors import TransportError

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
GEMINI_DEFAULT_MODEL = "gemini-2.5-flash-lite"


class TextBackend(str, Enum):
    """Supported backend identifiers."""

    GEMINI = "gemini"


class BaseBackendClient(ABC):
    """Abstract backend adapter that talks to a generation service."""

    def __init__(
        self,
        *,
        base_url: str,
        model_name: str,
        api_key: str,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model_name = model_name
        self.api_key = api_key
        self.timeout = timeout
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.last_error: Optional[str] = None

    @abstractmethod
    def generate_content(self, payload: Dict[str, Any]) -> requests.Response:
        """Execute a single generation request and return the raw response."""

    @abstractmethod
    def build_payload(self, prompt: str) -> Dict[str, Any]:
        """Wrap *prompt* in the request body expected by the service."""

    def close(self) -> None:
        if self._owns_session:
            self.session.close()


class GeminiBackend(BaseBackendClient):
    """Adapter for the Google Gemini ``generateContent`` REST endpoint.

    The API key travels as the ``key`` query parameter rather than a bearer
    header.
    """

    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model_name}:generateContent"

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

    def generate_content(self, payload: Dict[str, Any]) -> requests.Response:
        try:
            return self.session.post(
                self.endpoint(),
                params={"key": self.api_key},
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            self.last_error = str(exc)
            raise TransportError(str(exc)) from exc


BACKEND_REGISTRY: Dict[TextBackend, Type[BaseBackendClient]] = {
    TextBackend.GEMINI: GeminiBackend,
}


def create_backend_client(
    backend: TextBackend | str,
    *,
    api_key: str,
    base_url: str = GEMINI_BASE_URL,
    model_name: str = GEMINI_DEFAULT_MODEL,
    timeout: Optional[float] = None,
    session: Optional[requests.Session] = None,
) -> BaseBackendClient:
    """Instantiate the backend adapter for the requested service."""

    try:
        key = backend if isinstance(backend, TextBackend) else TextBackend(backend)
    except ValueError as exc:
        raise ValueError(f"Unsupported text backend: {backend}") from exc

    backend_cls = BACKEND_REGISTRY[key]
    logger.debug("Creating %s backend for model %s", key.value, model_name)
    return backend_cls(
        base_url=base_url,
        model_name=model_name,
        api_key=api_key,
        timeout=timeout,
        session=session,
    )
