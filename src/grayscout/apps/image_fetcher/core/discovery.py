"""Discover reachable public-domain image URLs with a two-step prompt loop.

Each round asks the model for URLs, then asks it again to restate only the
URLs found in its own answer. Lines that look like links are probed with a
HEAD request and the reachable ones are accepted in order until the target
count is met.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

import requests

from grayscout.errors import DiscoveryExhausted

from . import prompts
from .generation import GenerationClient

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 5.0

CandidateFilter = Callable[[str], List[str]]
Prober = Callable[[str], bool]


def filter_candidates(text: str) -> List[str]:
    """Return the lines of *text* that contain ``"http"``.

    Deliberately loose: prose around a link is tolerated and left for the
    reachability probe to reject.
    """
    return [line.strip() for line in text.splitlines() if "http" in line]


def probe_url(
    url: str,
    *,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_PROBE_TIMEOUT,
) -> bool:
    """Return True when a HEAD request for *url* ends in HTTP 200."""
    http = session or requests
    try:
        response = http.head(url, timeout=timeout, allow_redirects=True)
    except requests.RequestException as exc:
        logger.debug("Probe failed for %s: %s", url, exc)
        return False
    try:
        return response.status_code == 200
    finally:
        response.close()


class UrlDiscovery:
    """Runs discovery rounds until enough reachable URLs are collected."""

    def __init__(
        self,
        client: GenerationClient,
        *,
        session: Optional[requests.Session] = None,
        probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
        max_rounds: int = 10,
        deduplicate: bool = False,
        candidate_filter: CandidateFilter = filter_candidates,
        prober: Optional[Prober] = None,
    ) -> None:
        if max_rounds < 0:
            raise ValueError("max_rounds must be >= 0")
        self.client = client
        self.session = session
        self.probe_timeout = probe_timeout
        self.max_rounds = max_rounds
        self.deduplicate = deduplicate
        self.candidate_filter = candidate_filter
        self.prober = prober or self._probe
        self.rounds = 0

    def _probe(self, url: str) -> bool:
        return probe_url(url, session=self.session, timeout=self.probe_timeout)

    def discover(self, target_count: int) -> List[str]:
        """Return exactly *target_count* reachable URLs in discovery order.

        Raises :class:`DiscoveryExhausted` when ``max_rounds`` rounds pass
        without reaching the target. ``max_rounds == 0`` never gives up.
        """
        if target_count < 0:
            raise ValueError("target_count must be >= 0")

        accepted: List[str] = []
        self.rounds = 0
        while len(accepted) < target_count:
            if self.max_rounds and self.rounds >= self.max_rounds:
                raise DiscoveryExhausted(target_count, self.rounds, accepted)
            self.rounds += 1
            self.run_round(target_count, accepted)
            logger.info(
                "Discovery round %d: %d/%d URLs accepted",
                self.rounds,
                len(accepted),
                target_count,
            )
        return accepted

    def run_round(self, target_count: int, accepted: List[str]) -> None:
        """Perform one generate, extract, filter and probe cycle in place."""
        generated = self.client.generate(prompts.build_generation_prompt(target_count))
        if not generated.text:
            logger.warning("Generation returned empty text")
            return

        extracted = self.client.generate(prompts.build_extraction_prompt(generated.text))
        if not extracted.text:
            logger.warning("Extraction returned empty text")
            return

        candidates = self.candidate_filter(extracted.text)
        logger.debug("Round %d candidates: %s", self.rounds, candidates)
        for url in candidates:
            if self.deduplicate and url in accepted:
                logger.debug("Skipping duplicate URL %s", url)
                continue
            if not self.prober(url):
                logger.info("Inaccessible URL skipped: %s", url)
                continue
            accepted.append(url)
            logger.info("Accepted URL %d/%d: %s", len(accepted), target_count, url)
            if len(accepted) == target_count:
                break


def discover_urls(
    client: GenerationClient,
    target_count: int,
    **options,
) -> List[str]:
    """Functional wrapper around :class:`UrlDiscovery`."""
    return UrlDiscovery(client, **options).discover(target_count)


__all__ = [
    "DEFAULT_PROBE_TIMEOUT",
    "UrlDiscovery",
    "discover_urls",
    "filter_candidates",
    "probe_url",
]
