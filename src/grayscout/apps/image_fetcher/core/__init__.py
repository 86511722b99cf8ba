"""Image fetcher core processing modules.

Exposes the text-generation client, the URL discovery loop, the downloader and
the pipeline driver that ties them together.
"""

from .config import FetcherConfig, FetcherSettings, build_runtime_config, load_config, read_api_key
from .discovery import UrlDiscovery, discover_urls, filter_candidates, probe_url
from .downloader import fetch_image
from .generation import GenerationClient, GenerationResult, generate_text
from .models import ImageOutcome, PipelineReport
from .pipeline import output_name, process_image, run_pipeline

__all__ = [
    "FetcherConfig",
    "FetcherSettings",
    "build_runtime_config",
    "load_config",
    "read_api_key",
    "UrlDiscovery",
    "discover_urls",
    "filter_candidates",
    "probe_url",
    "fetch_image",
    "GenerationClient",
    "GenerationResult",
    "generate_text",
    "ImageOutcome",
    "PipelineReport",
    "output_name",
    "process_image",
    "run_pipeline",
]
