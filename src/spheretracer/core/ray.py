"""Ray data structure and vector utilities.

This module provides the Ray dataclass and the vector helpers every other
component builds on. Arithmetic (component-wise add, sub, mul, div and scalar
scaling) comes from ``taichi.math.vec3``; the functions here add the named
operations used by geometry, materials and the camera.

All functions are Taichi functions and must be called from within a kernel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.core.ray import Ray, ray_at, vec3
    >>> @ti.kernel
    ... def probe() -> ti.f32:
    ...     ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -2.0))
    ...     return ray_at(ray, 0.5).z
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A parametric line p(t) = origin + t * direction.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to be
            unit length; consumers normalize where they need to.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Euclidean length of a vector."""
    return ti.sqrt(tm.dot(v, v))


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Squared Euclidean length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def unit_vector(v: vec3) -> vec3:
    """Scale a vector to unit length.

    The input must not be zero length; the result is undefined otherwise.
    """
    return v / length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


# =============================================================================
# Optics Helpers
# =============================================================================


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror an incident vector about a normal.

    Computes v - 2 * dot(v, n) * n. The normal should be unit length; the
    incident vector keeps its own length.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (unit length).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, ratio: ti.f32):
    """Refract a direction through a surface using Snell's law.

    The incident direction is normalized first. With dt = dot(unit(v), n) and
    disc = 1 - ratio^2 * (1 - dt^2), refraction is possible only when
    disc > 0; otherwise the ray is totally internally reflected.

    Args:
        incident: The incoming direction vector (any non-zero length).
        normal: The unit normal on the side the ray arrives from.
        ratio: Ratio of refractive indices (n_incident / n_transmitted).

    Returns:
        A tuple (refracted_ok, refracted) where refracted_ok is 1 if
        refraction is possible and refracted is the transmitted direction.
        refracted is the zero vector when refracted_ok is 0.
    """
    uv = unit_vector(incident)
    dt = tm.dot(uv, normal)
    discriminant = 1.0 - ratio * ratio * (1.0 - dt * dt)
    refracted_ok = 0
    refracted = vec3(0.0, 0.0, 0.0)
    if discriminant > 0.0:
        refracted_ok = 1
        refracted = ratio * (uv - normal * dt) - normal * ti.sqrt(discriminant)
    return refracted_ok, refracted


@ti.func
def schlick(cosine: ti.f32, ref_idx: ti.f32) -> ti.f32:
    """Schlick's approximation of Fresnel reflectance.

    r0 = ((1 - n) / (1 + n))^2
    reflectance = r0 + (1 - r0) * (1 - cosine)^5

    Args:
        cosine: Cosine of the incidence angle.
        ref_idx: Refractive index of the material.

    Returns:
        The approximate probability of reflection.
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)
