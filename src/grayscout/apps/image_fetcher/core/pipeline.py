"""Pipeline driver: discover URLs, download each image, convert to grayscale."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import requests

from grayscout.errors import ConfigError
from grayscout.libs.vision import convert_to_grayscale

from .config import FetcherConfig, read_api_key
from .discovery import UrlDiscovery
from .downloader import fetch_image
from .generation import GenerationClient
from .models import ImageOutcome, PipelineReport

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".jpg"
PRESERVED_EXTENSIONS = (".jpg", ".jpeg", ".png")


def output_name(index: int, url: str, preserve_extension: bool = False) -> str:
    """Return the 1-based file name used for the *index*-th accepted URL.

    Without *preserve_extension* every file is named ``<index>.jpg`` whatever
    the source format is.
    """
    suffix = DEFAULT_EXTENSION
    if preserve_extension:
        url_suffix = Path(urlparse(url).path).suffix.lower()
        if url_suffix in PRESERVED_EXTENSIONS:
            suffix = url_suffix
    return f"{index}{suffix}"


def prepare_directories(config: FetcherConfig) -> None:
    for directory in (config.images_dir, config.grayscale_dir):
        directory.mkdir(parents=True, exist_ok=True)


def process_image(
    index: int,
    url: str,
    config: FetcherConfig,
    session: Optional[requests.Session] = None,
) -> ImageOutcome:
    """Fetch and convert one image; failures are recorded, never raised."""
    name = output_name(index, url, config.preserve_extension)
    outcome = ImageOutcome(
        index=index,
        url=url,
        original_path=config.images_dir / name,
        grayscale_path=config.grayscale_dir / name,
    )

    outcome.downloaded = fetch_image(
        url, outcome.original_path, session=session, timeout=config.fetch_timeout
    )
    if not outcome.downloaded:
        outcome.error = f"Failed to download: {url}"
        logger.error(outcome.error)
        return outcome
    logger.info("Downloaded: %s", outcome.original_path)

    outcome.converted = convert_to_grayscale(
        outcome.original_path, outcome.grayscale_path
    )
    if not outcome.converted:
        outcome.error = f"Failed to convert: {outcome.original_path}"
        logger.error(outcome.error)
        return outcome
    logger.info("Saved grayscale: %s", outcome.grayscale_path)
    return outcome


def run_pipeline(
    config: FetcherConfig,
    count: int,
    *,
    api_key: Optional[str] = None,
    client: Optional[GenerationClient] = None,
    session: Optional[requests.Session] = None,
) -> PipelineReport:
    """Run discovery, download and conversion for *count* images.

    Raises :class:`ConfigError` before any network activity when no API key
    is available, and lets :class:`DiscoveryExhausted` propagate.
    """
    if count < 0:
        raise ConfigError("The number of images must be zero or positive")

    if client is None and api_key is None:
        api_key = read_api_key(config.api_key_file)

    prepare_directories(config)

    report = PipelineReport(requested=count)
    if count == 0:
        logger.info("Nothing to do: zero images requested")
        return report

    owns_session = session is None
    http = session or requests.Session()
    owns_client = client is None
    generator = client or GenerationClient(
        api_key=api_key or "",
        model_name=config.model,
        base_url=config.base_url,
        timeout=config.generation_timeout,
        backend=config.backend,
        session=http,
    )

    try:
        discovery = UrlDiscovery(
            generator,
            session=http,
            probe_timeout=config.probe_timeout,
            max_rounds=config.max_rounds,
            deduplicate=config.deduplicate,
        )
        try:
            report.urls = discovery.discover(count)
        finally:
            report.discovery_rounds = discovery.rounds

        for index, url in enumerate(report.urls, start=1):
            report.outcomes.append(process_image(index, url, config, session=http))
    finally:
        if owns_client:
            generator.close()
        if owns_session:
            http.close()

    logger.info(
        "Processed %d images (%d succeeded, %d failed)",
        len(report.outcomes),
        report.succeeded,
        report.failed,
    )
    return report
