"""Dielectric (glass/water) material implementation.

Models clear transparent materials that both reflect and refract light.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when no refracted direction exists

Which side the ray arrives from is decided by the sign of dot(direction,
normal), since sphere normals always point away from the center:

    - dot > 0 (leaving the material): the normal is flipped, the refraction
      ratio is ior, and cosine = ior * dot(d, n) / |d|.
    - otherwise (entering): the ratio is 1 / ior and
      cosine = -dot(d, n) / |d|.

Reflection is chosen with probability schlick(cosine, ior), or always under
total internal reflection. Exactly one uniform draw is consumed per scatter.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # did_scatter, attenuation, scattered, rng = scatter_dielectric(
    >>> #     ior, ray_in, hit_point, normal, rng
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from spheretracer.core.ray import Ray, length, make_ray, reflect, refract, schlick
from spheretracer.core.sampler import next_float

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def _interface(ior: ti.f32, incident_direction: vec3, normal: vec3):
    """Side-dependent normal, index ratio and Schlick cosine.

    Returns:
        A tuple (outward_normal, ratio, cosine).
    """
    d_dot_n = tm.dot(incident_direction, normal)
    outward_normal = normal
    ratio = 1.0 / ior
    cosine = -d_dot_n / length(incident_direction)
    if d_dot_n > 0.0:
        outward_normal = -normal
        ratio = ior
        cosine = ior * d_dot_n / length(incident_direction)
    return outward_normal, ratio, cosine


@ti.func
def _reflect_probability(ior: ti.f32, incident_direction: vec3, normal: vec3):
    """Returns (reflect_prob, refracted)."""
    outward_normal, ratio, cosine = _interface(ior, incident_direction, normal)
    refracted_ok, refracted = refract(incident_direction, outward_normal, ratio)
    reflect_prob = 1.0
    if refracted_ok == 1:
        reflect_prob = schlick(cosine, ior)
    return reflect_prob, refracted


@ti.func
def dielectric_reflect_probability(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
) -> ti.f32:
    """Probability that a dielectric scatter picks the reflected direction.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any non-zero length).
        normal: The outward unit normal at the hit point.

    Returns:
        1.0 under total internal reflection, otherwise the Schlick
        reflectance.
    """
    reflect_prob, _ = _reflect_probability(ior, incident_direction, normal)
    return reflect_prob


@ti.func
def scatter_dielectric(
    ior: ti.f32,
    ray_in: Ray,
    hit_point: vec3,
    normal: vec3,
    rng: ti.u32,
):
    """Reflect or refract a ray at a dielectric surface.

    Args:
        ior: Index of refraction of the material.
        ray_in: The incoming ray.
        hit_point: The intersection point.
        normal: The outward unit normal at the hit point.
        rng: The caller's generator state.

    Returns:
        A tuple of (did_scatter, attenuation, scattered, rng) where:
        - did_scatter: Always 1; clear dielectrics never absorb.
        - attenuation: White (1, 1, 1).
        - scattered: Ray from the hit point along the reflected or refracted
          direction.
        - rng: The generator state advanced by exactly one draw.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    direction = ray_in.direction

    reflect_prob, refracted = _reflect_probability(ior, direction, normal)
    u, new_rng = next_float(rng)

    scattered_direction = refracted
    if u < reflect_prob:
        scattered_direction = reflect(direction, normal)

    scattered = make_ray(hit_point, scattered_direction)
    return 1, attenuation, scattered, new_rng


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 512

# Storage for dielectric material properties
dielectric_iors = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        ior: Index of refraction. Default is 1.5 (typical glass).
            Must be positive.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If IOR is not positive.
    """
    if ior <= 0.0:
        raise ValueError(f"Index of refraction = {ior} must be positive.")

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_iors[idx] = ior
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f32:
    return dielectric_iors[material_idx]


@ti.func
def scatter_dielectric_by_id(
    material_idx: ti.i32,
    ray_in: Ray,
    hit_point: vec3,
    normal: vec3,
    rng: ti.u32,
):
    """Scatter off a registered dielectric material.

    Looks up the IOR from the registry and calls scatter_dielectric.
    """
    ior = get_dielectric_ior(material_idx)
    return scatter_dielectric(ior, ray_in, hit_point, normal, rng)
