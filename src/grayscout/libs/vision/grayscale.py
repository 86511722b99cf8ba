"""Grayscale conversion using ITU-R BT.601 luma weights.

Colour images are reduced to a single luminance channel with
``Y = 0.299 R + 0.587 G + 0.114 B`` (rounded half up, clipped to 0..255).
Images that are already single-channel 8-bit keep their pixel values so the
transform is idempotent. Single-channel 16-bit and 32-bit integer images are
rescaled to 8 bits by dropping the low byte.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict

import numpy as np
from PIL import Image, UnidentifiedImageError

from grayscout.errors import DecodeError

logger = logging.getLogger(__name__)

BT601_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)

_SUFFIX_FORMATS: Dict[str, str] = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
}


def output_format_for(path: Path) -> str:
    """Return the Pillow format name implied by the file suffix of *path*."""
    fmt = _SUFFIX_FORMATS.get(path.suffix.lower())
    if fmt is None:
        raise DecodeError(f"Unsupported output format: {path.suffix or '<none>'}")
    return fmt


def load_image(path: Path) -> Image.Image:
    """Decode *path* fully, raising :class:`DecodeError` on any failure."""
    try:
        with Image.open(path) as im:
            im.load()
            return im.copy()
    except UnidentifiedImageError as exc:
        raise DecodeError(f"Unable to read {path}: unrecognised image data") from exc
    except Exception as exc:  # noqa: BLE001 - decoder plugins raise assorted errors
        raise DecodeError(f"Unable to read {path}: {exc}") from exc


def to_grayscale_image(image: Image.Image) -> Image.Image:
    """Convert *image* to an 8-bit single-channel ``L`` image."""
    if image.mode == "L":
        return image.copy()
    if image.mode == "LA":
        return image.getchannel("L")
    if image.mode == "I" or image.mode.startswith("I;16"):
        # 16-bit samples keep their top byte
        wide = np.clip(np.asarray(image).astype(np.int64), 0, 65535)
        return Image.fromarray((wide >> 8).astype(np.uint8))

    rgb = np.asarray(image.convert("RGB"), dtype=np.float64)
    luma = rgb @ BT601_WEIGHTS
    gray = np.clip(np.floor(luma + 0.5), 0, 255).astype(np.uint8)
    return Image.fromarray(gray)


def convert_to_grayscale(src: Path, dest: Path) -> bool:
    """Write a grayscale copy of *src* to *dest*.

    Returns ``False`` when the source cannot be decoded or the result cannot be
    written; in both cases no file is left at *dest*.
    """
    src = Path(src)
    dest = Path(dest)
    try:
        fmt = output_format_for(dest)
        gray = to_grayscale_image(load_image(src))
    except DecodeError as exc:
        logger.error("Error: %s", exc)
        return False

    try:
        gray.save(dest, format=fmt)
    except (OSError, ValueError) as exc:
        logger.error("Failed to write grayscale image %s: %s", dest, exc)
        dest.unlink(missing_ok=True)
        return False

    logger.debug("Converted %s -> %s (%dx%d)", src, dest, *gray.size)
    return True


__all__ = [
    "BT601_WEIGHTS",
    "convert_to_grayscale",
    "load_image",
    "output_format_for",
    "to_grayscale_image",
]
