from .grayscale import (  # noqa: F401
    BT601_WEIGHTS,
    convert_to_grayscale,
    load_image,
    to_grayscale_image,
)

__all__ = ["BT601_WEIGHTS", "convert_to_grayscale", "load_image", "to_grayscale_image"]
