"""Sphere primitive with ray-sphere intersection.

The intersection uses the half-b form of the quadratic. With
oc = origin - center:

    a = dot(direction, direction)
    b = dot(oc, direction)
    c = dot(oc, oc) - radius^2
    discriminant = b^2 - a*c

A ray misses when the discriminant is not strictly positive (tangent rays
count as misses). Otherwise the near root is tried first and the far root
second; a root is accepted only if it lies strictly inside (t_min, t_max).

The reported normal is (point - center) / radius. It always points away from
the center, whether the ray started outside or inside the sphere; a sphere
with a negative radius therefore reports inward normals, which is how hollow
glass shells are modelled.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.geometry.sphere import Sphere, hit_sphere
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from spheretracer.core.ray import Ray, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere. Negative radii flip the normal.
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: 1 if the ray intersected the sphere, 0 on a miss. The remaining
            fields are only meaningful when hit == 1.
        t: Ray parameter of the intersection.
        point: The intersection point, origin + t * direction.
        normal: (point - center) / radius; unit length for a positive radius.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    return Sphere(center=center, radius=radius)


@ti.func
def make_miss_record() -> HitRecord:
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def hit_sphere(
    ray: Ray,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    The query is pure: it reads only its arguments and draws no random
    numbers.

    Args:
        ray: The ray to test. Its direction need not be normalized.
        sphere: The sphere to test against.
        t_min: Exclusive lower bound on accepted t values.
        t_max: Exclusive upper bound on accepted t values.

    Returns:
        A HitRecord for the smallest accepted root, or a miss record.
    """
    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    b = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = b * b - a * c

    # Taichi requires outer-scope declaration
    result = make_miss_record()

    if discriminant > 0.0:
        sqrt_d = ti.sqrt(discriminant)

        root = (-b - sqrt_d) / a
        valid = root > t_min and root < t_max
        if not valid:
            root = (-b + sqrt_d) / a
            valid = root > t_min and root < t_max

        if valid:
            point = ray_at(ray, root)
            result = HitRecord(
                hit=1,
                t=root,
                point=point,
                normal=(point - sphere.center) / sphere.radius,
            )

    return result
