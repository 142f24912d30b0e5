"""Metal (specular reflective) material implementation.

The incoming direction is normalized and mirrored about the surface normal:

    R = v - 2 * dot(v, n) * n

then perturbed by min(fuzziness, 1) times a random point inside the unit
sphere. A fuzziness of 0 gives a perfect mirror. If the perturbed ray points
below the surface it is absorbed instead of scattered.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # did_scatter, attenuation, scattered, rng = scatter_metal(
    >>> #     albedo, fuzz, ray_in, hit_point, normal, rng
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from spheretracer.core.ray import Ray, make_ray, reflect, unit_vector
from spheretracer.core.sampler import random_in_unit_sphere

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    ray_in: Ray,
    hit_point: vec3,
    normal: vec3,
    rng: ti.u32,
):
    """Reflect a ray off a metal surface.

    The random perturbation is drawn even when fuzz is 0 so the number of
    draws does not depend on the material parameters.

    Args:
        albedo: The reflective color (RGB).
        fuzz: The fuzziness; clamped to at most 1.
        ray_in: The incoming ray.
        hit_point: The intersection point.
        normal: The surface normal at the hit point.
        rng: The caller's generator state.

    Returns:
        A tuple of (did_scatter, attenuation, scattered, rng) where:
        - did_scatter: 1 if the scattered direction leaves the surface
          (dot with the normal is positive), 0 if the ray is absorbed.
        - attenuation: The albedo.
        - scattered: Ray from the hit point along the perturbed reflection.
        - rng: The advanced generator state.
    """
    reflected = reflect(unit_vector(ray_in.direction), normal)
    offset, new_rng = random_in_unit_sphere(rng)
    scattered = make_ray(hit_point, reflected + tm.min(fuzz, 1.0) * offset)

    did_scatter = 0
    if tm.dot(scattered.direction, normal) > 0.0:
        did_scatter = 1

    return did_scatter, albedo, scattered, new_rng


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 512

# Storage for metal material properties
metal_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_metal_materials[None] = 0


def add_metal_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Add a metal material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple.
            Each component must be in [0, 1].
        fuzz: The fuzziness. Must be non-negative; values above 1 are kept
            as given and clamped when scattering.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
        ValueError: If fuzz is negative.
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    if fuzz < 0.0:
        raise ValueError(f"Fuzz = {fuzz} is negative. Use 0 for a perfect mirror.")

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(
            f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded"
        )

    metal_albedos[idx] = [albedo[0], albedo[1], albedo[2]]
    metal_fuzzes[idx] = fuzz
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> ti.f32:
    return metal_fuzzes[material_idx]


@ti.func
def scatter_metal_by_id(
    material_idx: ti.i32,
    ray_in: Ray,
    hit_point: vec3,
    normal: vec3,
    rng: ti.u32,
):
    """Scatter off a registered metal material.

    Looks up the albedo and fuzz from the registry and calls scatter_metal.
    """
    albedo = get_metal_albedo(material_idx)
    fuzz = get_metal_fuzz(material_idx)
    return scatter_metal(albedo, fuzz, ray_in, hit_point, normal, rng)
