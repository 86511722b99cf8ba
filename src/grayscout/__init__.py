"""grayscout: discover public-domain images, download them, save grayscale copies."""

__version__ = "0.1.0"
