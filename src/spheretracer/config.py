"""Render configuration and Taichi initialization.

RenderConfig collects everything a render needs apart from the scene
contents: image size, sample count, seed, execution mode, backend and
output path. init_taichi() must run before any other spheretracer module is
imported, because those modules allocate Taichi fields at import time.

Example:
    >>> from spheretracer.config import RenderConfig, init_taichi
    >>> config = RenderConfig(width=320, height=160, samples_per_pixel=16)
    >>> init_taichi(config.arch, cpu_threads=config.cpu_threads)
"""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import taichi as ti

logger = logging.getLogger(__name__)

SUPPORTED_ARCHS = ("cpu", "gpu", "cuda", "vulkan", "metal")


@dataclass
class RenderConfig:
    """Settings for one render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Jittered camera rays averaged per pixel.
        seed: Render seed; also seeds the random scene layout.
        parallel: Parallel (True) or sequential (False) pixel loop.
        scene: Name of a scene in spheretracer.scene.builders.SCENES. It is
            checked when the scene is built.
        arch: Taichi backend name.
        cpu_threads: Worker thread cap for the CPU backend. None lets Taichi
            use every core.
        band_rows: Rows per progress step. None renders in one step.
        output: PNG output path.
    """

    width: int = 640
    height: int = 320
    samples_per_pixel: int = 65
    seed: int = 0
    parallel: bool = True
    scene: str = "random"
    arch: str = "cpu"
    cpu_threads: int | None = None
    band_rows: int | None = None
    output: str = "spheres.png"

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.samples_per_pixel <= 0:
            raise ValueError(
                f"samples_per_pixel must be positive, got {self.samples_per_pixel}"
            )
        if self.arch not in SUPPORTED_ARCHS:
            raise ValueError(
                f"Unknown arch {self.arch!r}; expected one of {SUPPORTED_ARCHS}"
            )
        if self.cpu_threads is not None and self.cpu_threads <= 0:
            raise ValueError(f"cpu_threads must be positive, got {self.cpu_threads}")
        if self.band_rows is not None and self.band_rows <= 0:
            raise ValueError(f"band_rows must be positive, got {self.band_rows}")

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    @property
    def output_path(self) -> Path:
        return Path(self.output)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderConfig":
        """Build a config from a dictionary, ignoring None values.

        Raises:
            ValueError: If a key is unknown or a value is invalid.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**{k: v for k, v in data.items() if v is not None})


def taichi_options(random_seed: int = 0, cpu_threads: int | None = None) -> dict[str, Any]:
    """Keyword arguments for ti.init().

    fast_math is disabled: with it, serialized and parallel kernels may round
    f32 math differently and the two render modes stop matching.
    """
    options: dict[str, Any] = {"random_seed": random_seed, "fast_math": False}
    if cpu_threads is not None:
        options["cpu_max_num_threads"] = cpu_threads
    return options


def init_taichi(
    arch: str = "cpu",
    random_seed: int = 0,
    cpu_threads: int | None = None,
) -> None:
    """Initialize the Taichi runtime.

    GPU backends fall back to the CPU when they cannot be initialized.

    Args:
        arch: Taichi backend name (see SUPPORTED_ARCHS).
        random_seed: Seed for Taichi's own generator. Rendering does not use
            it, but setting it keeps any stray ti.random() call repeatable.
        cpu_threads: Worker thread cap for the CPU backend.

    Raises:
        ValueError: If arch is not supported.
    """
    if arch not in SUPPORTED_ARCHS:
        raise ValueError(f"Unknown arch {arch!r}; expected one of {SUPPORTED_ARCHS}")

    options = taichi_options(random_seed, cpu_threads)

    if arch == "cpu":
        ti.init(arch=ti.cpu, **options)
        logger.info("Using CPU backend")
        return

    try:
        ti.init(arch=getattr(ti, arch), **options)
        logger.info("Using %s backend", arch)
    except Exception:
        logger.warning("Could not initialize %s backend, falling back to CPU", arch)
        ti.init(arch=ti.cpu, **options)
