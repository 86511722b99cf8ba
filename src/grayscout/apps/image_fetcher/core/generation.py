"""Text-generation client used by the URL discovery loop.

Wraps a backend adapter from :mod:`grayscout.libs.llm` and reduces every
outcome to plain text. Failures never raise: they come back as an empty
result carrying a :class:`TransportError` or :class:`ResponseFormatError`,
and the caller decides whether to retry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from grayscout.errors import GrayscoutError, ResponseFormatError, TransportError
from grayscout.libs.llm import (
    GEMINI_BASE_URL,
    GEMINI_DEFAULT_MODEL,
    TextBackend,
    create_backend_client,
)

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Outcome of a single generation call."""

    text: str
    error: Optional[GrayscoutError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.text)


def extract_text(body: Any) -> str:
    """Return ``candidates[0].content.parts[0].text`` from a decoded response."""
    try:
        text = body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ResponseFormatError(
            f"Missing candidates[0].content.parts[0].text: {exc!r}"
        ) from exc
    if not isinstance(text, str):
        raise ResponseFormatError(
            f"Expected text to be a string, got {type(text).__name__}"
        )
    return text


class GenerationClient:
    """Facade that sends one prompt and returns the generated text."""

    def __init__(
        self,
        *,
        api_key: str,
        model_name: str = GEMINI_DEFAULT_MODEL,
        base_url: str = GEMINI_BASE_URL,
        timeout: Optional[float] = None,
        backend: str | TextBackend = TextBackend.GEMINI,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.model_name = model_name
        self.backend = (
            backend if isinstance(backend, TextBackend) else TextBackend(backend)
        )
        self.last_error: Optional[str] = None
        self._backend_client = create_backend_client(
            self.backend,
            api_key=api_key,
            base_url=base_url,
            model_name=model_name,
            timeout=timeout,
            session=session,
        )

    def generate(self, prompt: str) -> GenerationResult:
        payload = self._backend_client.build_payload(prompt)

        try:
            response = self._backend_client.generate_content(payload)
        except TransportError as exc:
            return self._failure(exc, "Error in request")

        try:
            if response.status_code != 200:
                return self._failure(
                    TransportError(
                        f"API error {response.status_code}: {response.text[:200]}"
                    ),
                    "Error in request",
                )
            try:
                body = response.json()
            except ValueError as exc:
                return self._failure(
                    ResponseFormatError(f"Response is not JSON: {exc}"),
                    "Error parsing generation response",
                )
            try:
                text = extract_text(body)
            except ResponseFormatError as exc:
                return self._failure(exc, "Error parsing generation response")
        finally:
            response.close()

        self.last_error = None
        return GenerationResult(text=text)

    def _failure(self, error: GrayscoutError, context: str) -> GenerationResult:
        self.last_error = str(error)
        logger.warning("%s: %s", context, error)
        return GenerationResult(text="", error=error)

    def close(self) -> None:
        self._backend_client.close()


def generate_text(api_key: str, prompt: str, **options: Any) -> str:
    """One-shot helper: generate text for *prompt*, empty on any failure."""
    client = GenerationClient(api_key=api_key, **options)
    try:
        return client.generate(prompt).text
    finally:
        client.close()


__all__ = ["GenerationClient", "GenerationResult", "extract_text", "generate_text"]
