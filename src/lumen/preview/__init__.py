"""Preview module for image output.

Components:
    export: Byte conversion and image files via Pillow
"""

from .export import load_pixels, save_image, to_pixels

__all__ = [
    "load_pixels",
    "save_image",
    "to_pixels",
]
