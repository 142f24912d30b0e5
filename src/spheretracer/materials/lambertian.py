"""Lambertian (ideal diffuse) material implementation.

A diffuse surface scatters every incoming ray. The outgoing direction aims at
a random target: the hit point pushed one unit along the normal, then
displaced by a uniform random point inside the unit sphere. The attenuation
is the albedo.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # did_scatter, attenuation, scattered, rng = scatter_lambertian(
    >>> #     albedo, hit_point, normal, rng
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from spheretracer.core.ray import make_ray
from spheretracer.core.sampler import random_in_unit_sphere

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_lambertian(
    albedo: vec3,
    hit_point: vec3,
    normal: vec3,
    rng: ti.u32,
):
    """Scatter a ray off a diffuse surface.

    Args:
        albedo: The diffuse reflectance color (RGB).
        hit_point: The intersection point.
        normal: The surface normal at the hit point.
        rng: The caller's generator state.

    Returns:
        A tuple of (did_scatter, attenuation, scattered, rng) where:
        - did_scatter: Always 1; diffuse surfaces never absorb a ray outright.
        - attenuation: The albedo.
        - scattered: Ray from the hit point toward the random target.
        - rng: The advanced generator state.
    """
    offset, new_rng = random_in_unit_sphere(rng)
    target = hit_point + normal + offset
    scattered = make_ray(hit_point, target - hit_point)
    return 1, albedo, scattered, new_rng


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 512

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.
            Each component must be in [0, 1].

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = [albedo[0], albedo[1], albedo[2]]
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(
    material_idx: ti.i32,
    hit_point: vec3,
    normal: vec3,
    rng: ti.u32,
):
    """Scatter off a registered Lambertian material.

    Looks up the albedo from the registry and calls scatter_lambertian.
    """
    albedo = get_lambertian_albedo(material_idx)
    return scatter_lambertian(albedo, hit_point, normal, rng)
