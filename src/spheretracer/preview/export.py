"""Image export utilities for rendered images.

The renderer's canonical output is a (height, width) array of packed
R << 16 | G << 8 | B pixels. This module unpacks it into 8-bit RGB and
writes PNG files through Pillow. The values are already gamma corrected,
so no further processing happens here.

Example:
    >>> from spheretracer.core.renderer import Renderer
    >>> from spheretracer.preview.export import save_png
    >>>
    >>> renderer = Renderer(640, 320)
    >>> renderer.render(65)
    >>> save_png(renderer, "output.png")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from spheretracer.core.renderer import Renderer

logger = logging.getLogger(__name__)


def unpack_rgb(packed: npt.NDArray[np.integer]) -> npt.NDArray[np.uint8]:
    """Split packed pixels into channels.

    Args:
        packed: Array of shape (H, W) holding R << 16 | G << 8 | B.

    Returns:
        Array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If packed is not two-dimensional.
    """
    if packed.ndim != 2:
        raise ValueError(f"Packed image must be 2D (H, W), got shape {packed.shape}")

    pixels = packed.astype(np.uint32)
    return np.stack(
        [(pixels >> 16) & 0xFF, (pixels >> 8) & 0xFF, pixels & 0xFF],
        axis=-1,
    ).astype(np.uint8)


def save_png_from_packed(packed: npt.NDArray[np.integer], filepath: str | Path) -> None:
    """Save a packed (H, W) image as an 8-bit RGB PNG file."""
    pil_image = PILImage.fromarray(unpack_rgb(packed))
    pil_image.save(filepath)
    logger.info("Saved %dx%d image to %s", packed.shape[1], packed.shape[0], filepath)


def save_png(renderer: Renderer, filepath: str | Path) -> None:
    """Save the renderer's current image as a PNG file."""
    save_png_from_packed(renderer.get_packed_numpy(), filepath)
