"""Unit tests for the Metal material module.

Tests cover:
- Perfect specular reflection (fuzz=0)
- Fuzzy reflection and clamping of fuzz above 1
- Absorption when the reflection points into the surface
- Attenuation equals albedo
- Material registry operations and validation
"""

import math

import pytest
import taichi as ti


def _scatter(direction, normal, fuzz, seed=0, index=0, albedo=(1.0, 1.0, 1.0)):
    from spheretracer.core.ray import make_ray, vec3
    from spheretracer.core.sampler import seed_rng
    from spheretracer.materials.metal import scatter_metal

    result_dir = ti.Vector.field(3, dtype=ti.f32, shape=())
    result_att = ti.Vector.field(3, dtype=ti.f32, shape=())
    result_scatter = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        nx: ti.f32, ny: ti.f32, nz: ti.f32,
        f: ti.f32, s: ti.i32, i: ti.i32,
        ar: ti.f32, ag: ti.f32, ab: ti.f32,
    ):
        rng = seed_rng(s, i)
        ray_in = make_ray(vec3(0.0, 1.0, 0.0), vec3(dx, dy, dz))
        did, att, scattered, _ = scatter_metal(
            vec3(ar, ag, ab), f, ray_in, vec3(0.0, 0.0, 0.0), vec3(nx, ny, nz), rng
        )
        result_dir[None] = scattered.direction
        result_att[None] = att
        result_scatter[None] = did

    test_kernel(*direction, *normal, fuzz, seed, index, *albedo)
    return (
        tuple(result_dir[None].to_list()),
        tuple(result_att[None].to_list()),
        result_scatter[None],
    )


class TestPerfectReflection:
    def test_normal_incidence(self):
        direction, _, did = _scatter((0.0, -1.0, 0.0), (0.0, 1.0, 0.0), 0.0)
        assert direction == pytest.approx((0.0, 1.0, 0.0), abs=1e-6)
        assert did == 1

    def test_45_degrees(self):
        s = math.sqrt(0.5)
        direction, _, did = _scatter((s, -s, 0.0), (0.0, 1.0, 0.0), 0.0)
        assert direction == pytest.approx((s, s, 0.0), abs=1e-6)
        assert did == 1

    def test_incident_is_normalized(self):
        # A long incident vector still reflects to a unit direction
        direction, _, _ = _scatter((0.0, -7.0, 0.0), (0.0, 1.0, 0.0), 0.0)
        assert direction == pytest.approx((0.0, 1.0, 0.0), abs=1e-6)

    def test_attenuation_is_albedo(self):
        _, attenuation, _ = _scatter(
            (0.0, -1.0, 0.0), (0.0, 1.0, 0.0), 0.0, albedo=(0.8, 0.6, 0.2)
        )
        assert attenuation == pytest.approx((0.8, 0.6, 0.2))


class TestFuzzyReflection:
    def test_fuzz_perturbs_direction(self):
        directions = {
            _scatter((0.0, -1.0, 0.0), (0.0, 1.0, 0.0), 0.5, index=k)[0] for k in range(8)
        }
        assert len(directions) > 1

    def test_perturbation_bounded_by_fuzz(self):
        fuzz = 0.3
        for k in range(16):
            direction, _, _ = _scatter((0.0, -1.0, 0.0), (0.0, 1.0, 0.0), fuzz, index=k)
            offset = (direction[0], direction[1] - 1.0, direction[2])
            assert math.sqrt(sum(c * c for c in offset)) < fuzz + 1e-5

    def test_fuzz_above_one_behaves_like_one(self):
        for k in range(8):
            clamped = _scatter((0.3, -1.0, 0.0), (0.0, 1.0, 0.0), 1.0, index=k)
            large = _scatter((0.3, -1.0, 0.0), (0.0, 1.0, 0.0), 5.0, index=k)
            assert clamped == large


class TestAbsorption:
    def test_reflection_into_surface_is_absorbed(self):
        # Incident along the normal reflects straight into the surface
        _, _, did = _scatter((0.0, 1.0, 0.0), (0.0, 1.0, 0.0), 0.0)
        assert did == 0


class TestMetalRegistry:
    def test_add_and_lookup(self):
        from spheretracer.materials.metal import (
            add_metal_material,
            get_metal_albedo,
            get_metal_fuzz,
            get_metal_material_count,
        )

        idx = add_metal_material((0.7, 0.6, 0.5), 0.25)
        assert get_metal_material_count() == 1

        albedo = ti.Vector.field(3, dtype=ti.f32, shape=())
        fuzz = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(i: ti.i32):
            albedo[None] = get_metal_albedo(i)
            fuzz[None] = get_metal_fuzz(i)

        test_kernel(idx)
        assert tuple(albedo[None].to_list()) == pytest.approx((0.7, 0.6, 0.5))
        assert fuzz[None] == pytest.approx(0.25)

    def test_fuzz_above_one_accepted(self):
        from spheretracer.materials.metal import add_metal_material

        assert add_metal_material((0.5, 0.5, 0.5), 3.0) == 0

    def test_negative_fuzz_rejected(self):
        from spheretracer.materials.metal import add_metal_material

        with pytest.raises(ValueError):
            add_metal_material((0.5, 0.5, 0.5), -0.1)

    def test_invalid_albedo_rejected(self):
        from spheretracer.materials.metal import add_metal_material

        with pytest.raises(ValueError):
            add_metal_material((0.5, 1.2, 0.5), 0.0)
