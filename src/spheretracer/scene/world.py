"""World storage and nearest-hit queries.

The world is an ordered collection of spheres stored in Taichi fields
(structure-of-arrays layout). Each sphere references a material through a
unified material ID, so many spheres can share one material.

The world is filled from Python before a render and only read during it.
hit_world() tests every sphere in insertion order and shrinks the upper
search bound after each accepted hit, so it returns the globally nearest
intersection. The cost is linear in the number of spheres.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.scene.world import add_sphere, clear_world, vec3
    >>> clear_world()
    >>> add_sphere(vec3(0, 0, -1), 0.5, material_id=0)
    >>> # Use hit_world within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from spheretracer.core.ray import Ray
from spheretracer.geometry.sphere import HitRecord, Sphere, hit_sphere

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class WorldHitRecord:
    """Record of a ray-world intersection with material information.

    Attributes:
        hit: 1 if the ray intersected any sphere, 0 on a miss.
        t: Ray parameter of the nearest intersection.
        point: The nearest intersection point.
        normal: The outward sphere normal at that point.
        material_id: Unified material ID of the sphere that was hit.
            -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    material_id: ti.i32


# Maximum number of spheres supported in the world
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_world() -> None:
    """Remove all spheres from the world.

    Only the count is reset; stale entries are overwritten by later adds.
    """
    num_spheres[None] = 0


def add_sphere(center, radius: float, material_id: int = 0) -> int:
    """Append a sphere to the world.

    Args:
        center: The center point of the sphere (vec3 or 3-sequence).
        radius: The radius. Negative values are allowed and flip the
            reported normal (hollow shells).
        material_id: The unified material ID to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If the radius is zero.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if radius == 0.0:
        raise ValueError("Sphere radius must be non-zero")
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = [center[0], center[1], center[2]]
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the world."""
    return int(num_spheres[None])


@ti.func
def _make_miss_record() -> WorldHitRecord:
    return WorldHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        material_id=-1,
    )


@ti.func
def _to_world_hit_record(rec: HitRecord, material_id: ti.i32) -> WorldHitRecord:
    return WorldHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        material_id=material_id,
    )


@ti.func
def hit_world(ray: Ray, t_min: ti.f32, t_max: ti.f32) -> WorldHitRecord:
    """Find the nearest sphere hit by a ray.

    After each accepted hit the upper bound shrinks to that hit's t, so a
    later sphere can only replace the result with a strictly closer
    intersection.

    Args:
        ray: The ray to test.
        t_min: Exclusive lower bound on accepted t values.
        t_max: Exclusive upper bound on accepted t values.

    Returns:
        The nearest WorldHitRecord in (t_min, t_max), or a miss record.
        An empty world always misses.
    """
    closest_t = t_max
    result = _make_miss_record()

    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _to_world_hit_record(rec, sphere_material_ids[i])

    return result
