"""Unit tests for world storage and nearest-hit queries."""

import pytest
import taichi as ti


def _query(origin, direction, t_min=0.001, t_max=float("inf")):
    from spheretracer.core.ray import Ray, vec3
    from spheretracer.scene.world import hit_world

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    material = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f32, oy: ti.f32, oz: ti.f32,
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        lo: ti.f32, hi: ti.f32,
    ):
        ray = Ray(origin=vec3(ox, oy, oz), direction=vec3(dx, dy, dz))
        rec = hit_world(ray, lo, hi)
        hit[None] = rec.hit
        t_val[None] = rec.t
        material[None] = rec.material_id

    test_kernel(*origin, *direction, t_min, t_max)
    return hit[None], t_val[None], material[None]


class TestWorldStorage:
    def test_add_and_count(self):
        from spheretracer.scene.world import add_sphere, get_sphere_count

        assert get_sphere_count() == 0
        assert add_sphere((0.0, 0.0, -1.0), 0.5, 0) == 0
        assert add_sphere((0.0, -100.5, -1.0), 100.0, 1) == 1
        assert get_sphere_count() == 2

    def test_clear_world(self):
        from spheretracer.scene.world import add_sphere, clear_world, get_sphere_count

        add_sphere((0.0, 0.0, 0.0), 1.0)
        clear_world()
        assert get_sphere_count() == 0

    def test_zero_radius_rejected(self):
        from spheretracer.scene.world import add_sphere

        with pytest.raises(ValueError):
            add_sphere((0.0, 0.0, 0.0), 0.0)

    def test_negative_radius_accepted(self):
        from spheretracer.scene.world import add_sphere, get_sphere_count

        add_sphere((0.0, 0.0, 0.0), -0.45)
        assert get_sphere_count() == 1

    def test_capacity(self):
        from spheretracer.scene.world import MAX_SPHERES, add_sphere

        for i in range(MAX_SPHERES):
            add_sphere((float(i), 0.0, 0.0), 0.1)
        with pytest.raises(RuntimeError):
            add_sphere((0.0, 0.0, 0.0), 0.1)


class TestHitWorld:
    def test_empty_world_misses(self):
        hit, _, material = _query((0, 0, 0), (0, 0, -1))
        assert hit == 0
        assert material == -1

    def test_nearest_hit_regardless_of_order(self):
        from spheretracer.scene.world import add_sphere

        # Far sphere inserted first
        add_sphere((0.0, 0.0, -10.0), 1.0, 7)
        add_sphere((0.0, 0.0, -3.0), 1.0, 3)

        hit, t, material = _query((0, 0, 0), (0, 0, -1))
        assert hit == 1
        assert t == pytest.approx(2.0, abs=1e-5)
        assert material == 3

    def test_t_max_excludes_far_spheres(self):
        from spheretracer.scene.world import add_sphere

        add_sphere((0.0, 0.0, -10.0), 1.0, 0)
        hit, _, _ = _query((0, 0, 0), (0, 0, -1), t_max=5.0)
        assert hit == 0

    def test_t_min_skips_self_intersection(self):
        from spheretracer.scene.world import add_sphere

        add_sphere((0.0, 0.0, 0.0), 1.0, 0)
        # Start on the surface heading outward
        hit, _, _ = _query((0, 0, 1), (0, 0, 1))
        assert hit == 0

    def test_ground_sphere_hit(self):
        from spheretracer.scene.world import add_sphere

        add_sphere((0.0, -100.5, -1.0), 100.0, 2)
        hit, t, material = _query((0, 0, -1), (0, -1, 0))
        assert hit == 1
        assert t == pytest.approx(0.5, abs=1e-4)
        assert material == 2
