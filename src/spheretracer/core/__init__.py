"""Core rendering module.

Components:
    ray: Ray data structure and vector utilities
    sampler: Explicit per-pixel random number generation
    integrator: Path color, render kernel and render target
    renderer: Renderer object with banded progress and image output
"""

from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    ray_at,
    reflect,
    refract,
    schlick,
    unit_vector,
    vec3,
)
from .sampler import (
    next_float,
    next_u32,
    random_in_unit_disk,
    random_in_unit_sphere,
    sample_floats,
    seed_rng,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from spheretracer.core.integrator or spheretracer.core.renderer.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "unit_vector",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick",
    "seed_rng",
    "next_u32",
    "next_float",
    "random_in_unit_sphere",
    "random_in_unit_disk",
    "sample_floats",
]
