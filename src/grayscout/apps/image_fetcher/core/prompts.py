"""Prompt templates used to discover public-domain image URLs."""

from __future__ import annotations

EXCLUDED_REPOSITORY = "Wikimedia Commons"
MAX_IMAGE_KB = 200

GENERATION_TEMPLATE = (
    "Generate {count} public domain image URLs (either JPEG or PNG format) "
    "from trusted public domain image repositories. Exclude {excluded} and "
    "related sites. The URL must directly point to a valid image file ending "
    "with .jpg or .png, and the file size must be less than {max_kb} KB. "
    "Provide the final image URLs in plain text."
)

EXTRACTION_TEMPLATE = (
    "Extract all URLs from the following contents into a plain text list. "
    "Each URL must be on a new line and nothing else may be returned. "
    "These are the contents: {text}"
)


def build_generation_prompt(count: int) -> str:
    return GENERATION_TEMPLATE.format(
        count=count, excluded=EXCLUDED_REPOSITORY, max_kb=MAX_IMAGE_KB
    )


def build_extraction_prompt(text: str) -> str:
    return EXTRACTION_TEMPLATE.format(text=text)
