"""Image export utilities for rendered images.

Rendered images carry averaged radiance on the 0..255 scale per channel. For
output each channel is clamped to [0, 255] and truncated to a byte, so
overbright pixels saturate to full intensity instead of wrapping around.

Supported formats:
    - Anything Pillow can write (PNG recommended)

Example:
    >>> from src.lumen.preview.export import save_image
    >>> from src.lumen.core.renderer import render
    >>>
    >>> save_image(render(config, seed=1), "output.png")
"""

from __future__ import annotations

import os

import numpy as np
import numpy.typing as npt
from loguru import logger
from PIL import Image as PILImage


def to_pixels(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a radiance image to 8-bit pixels.

    Args:
        image: Image array of shape (H, W, 3), values on the 0..255 scale.

    Returns:
        Image array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If the array is not an (H, W, 3) image.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")

    return np.clip(image, 0.0, 255.0).astype(np.uint8)


def save_image(image: npt.NDArray[np.floating], filepath: str | os.PathLike[str]) -> None:
    """Save a radiance image to a file.

    The format is chosen by Pillow from the file extension.

    Args:
        image: Image array of shape (H, W, 3), values on the 0..255 scale.
        filepath: Output file path (e.g. "output.png").
    """
    pil_image = PILImage.fromarray(to_pixels(image))
    pil_image.save(filepath)
    logger.info("Saved {}x{} image to {}", image.shape[1], image.shape[0], filepath)


def load_pixels(filepath: str | os.PathLike[str]) -> npt.NDArray[np.uint8]:
    """Read an image file back as 8-bit RGB pixels.

    Returns:
        Image array of shape (H, W, 3) with dtype uint8.
    """
    with PILImage.open(filepath) as pil_image:
        return np.asarray(pil_image.convert("RGB"), dtype=np.uint8)
