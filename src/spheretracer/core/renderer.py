"""Renderer object wrapping the render target.

The Renderer owns the image size, runs the render kernel over bands of rows
so callers can follow progress, and hands the result out as numpy arrays or
a PNG file.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.camera.thin_lens import setup_camera
    >>> from spheretracer.core.renderer import Renderer
    >>> from spheretracer.scene.builders import create_random_scene, default_camera
    >>>
    >>> scene = create_random_scene(seed=1)
    >>> setup_camera(default_camera(aspect_ratio=2.0))
    >>>
    >>> renderer = Renderer(640, 320)
    >>> renderer.render(samples=65, seed=0)
    >>> renderer.save_image("spheres.png")
"""

import logging
import time
from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from spheretracer.core.integrator import (
    clear_render_target,
    get_image_numpy,
    get_packed_image_numpy,
    render_rows,
    setup_render_target,
)

logger = logging.getLogger(__name__)

# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]


class Renderer:
    """Renders the current world through the current camera.

    The world and camera are global Taichi state set up through
    SceneManager and setup_camera(); the renderer only owns the image.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        """Set up a render target of the given size.

        Raises:
            ValueError: If a dimension is not positive or exceeds 2048.
        """
        self._width = width
        self._height = height
        self._samples = 0
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def samples(self) -> int:
        """Samples per pixel of the last completed render (0 before any)."""
        return self._samples

    @property
    def aspect_ratio(self) -> float:
        return self._width / self._height

    def reset(self) -> None:
        """Clear the image to black."""
        clear_render_target()
        self._samples = 0

    def resize(self, width: int, height: int) -> None:
        """Change the image size and clear it.

        Raises:
            ValueError: If a dimension is not positive or exceeds 2048.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height
        self._samples = 0

    def render_bands(
        self,
        samples: int,
        seed: int = 0,
        parallel: bool = True,
        band_rows: int | None = None,
    ) -> Generator[tuple[int, int], None, None]:
        """Render the image band by band, from the top row down.

        Every pixel's value depends only on the seed and its own position,
        so the band size and the parallel flag never change the image.

        Args:
            samples: Samples per pixel.
            seed: Render seed.
            parallel: Run each band's pixel loop in parallel.
            band_rows: Rows per band. None renders the image in one band.

        Yields:
            Tuple of (rows_done, total_rows) after each band.

        Raises:
            ValueError: If samples or band_rows is not positive.
        """
        if samples <= 0:
            raise ValueError(f"samples must be positive, got {samples}")
        if band_rows is None:
            band_rows = self._height
        if band_rows <= 0:
            raise ValueError(f"band_rows must be positive, got {band_rows}")

        rows_done = 0
        row_end = self._height
        while row_end > 0:
            row_start = max(0, row_end - band_rows)
            render_rows(row_start, row_end, samples, seed, parallel)
            rows_done += row_end - row_start
            row_end = row_start
            logger.debug("Rendered %d/%d rows", rows_done, self._height)
            yield rows_done, self._height

        self._samples = samples

    def render(
        self,
        samples: int,
        seed: int = 0,
        parallel: bool = True,
        band_rows: int | None = None,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render the image.

        Args:
            samples: Samples per pixel.
            seed: Render seed. The same seed reproduces the same image.
            parallel: Parallel (True) or sequential (False) pixel loop. Both
                give identical images.
            band_rows: Rows per progress step. None renders in one step.
            callback: Called with (rows_done, total_rows) after each band.

        Example:
            >>> def progress(done, total):
            ...     print(f"{done}/{total} rows")
            >>> renderer.render(65, band_rows=32, callback=progress)
        """
        logger.info(
            "Rendering %dx%d at %d spp (seed=%d, %s)",
            self._width,
            self._height,
            samples,
            seed,
            "parallel" if parallel else "sequential",
        )
        start = time.perf_counter()

        for rows_done, total in self.render_bands(samples, seed, parallel, band_rows):
            if callback is not None:
                callback(rows_done, total)

        logger.info("Render finished in %.2fs", time.perf_counter() - start)

    def get_packed_numpy(self) -> npt.NDArray[np.uint32]:
        """Packed R << 16 | G << 8 | B pixels, shape (height, width), top row first."""
        return get_packed_image_numpy()

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Gamma-corrected colors in [0, 1], shape (height, width, 3), top row first."""
        return get_image_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """8-bit RGB image, shape (height, width, 3).

        Channels are unpacked from the packed buffer, so they match it
        exactly.
        """
        from spheretracer.preview.export import unpack_rgb

        return unpack_rgb(self.get_packed_numpy())

    def save_image(self, filepath: str) -> None:
        """Save the image as a PNG file."""
        from spheretracer.preview.export import save_png

        save_png(self, filepath)

    def __repr__(self) -> str:
        return f"Renderer(width={self.width}, height={self.height}, samples={self.samples})"
