"""Unit tests for the per-pixel random number generator.

Tests cover:
- Draws lie in [0, 1)
- Streams are reproducible and depend on seed and index
- Unit sphere and unit disk rejection samplers
- Draw counts consumed by the disk sampler
"""

import pytest
import taichi as ti


class TestUniformDraws:
    def test_draws_in_unit_interval(self):
        from spheretracer.core.sampler import sample_floats

        samples = sample_floats(seed=3, index=17, count=2000)
        assert len(samples) == 2000
        assert all(0.0 <= u < 1.0 for u in samples)

    def test_mean_near_one_half(self):
        from spheretracer.core.sampler import sample_floats

        samples = sample_floats(seed=11, index=0, count=4000)
        mean = sum(samples) / len(samples)
        assert abs(mean - 0.5) < 0.03

    def test_stream_is_reproducible(self):
        from spheretracer.core.sampler import sample_floats

        assert sample_floats(5, 42, 32) == sample_floats(5, 42, 32)

    def test_streams_differ_by_index_and_seed(self):
        from spheretracer.core.sampler import sample_floats

        base = sample_floats(5, 42, 16)
        assert base != sample_floats(5, 43, 16)
        assert base != sample_floats(6, 42, 16)

    def test_zero_seed_and_index_still_random(self):
        from spheretracer.core.sampler import sample_floats

        samples = sample_floats(0, 0, 16)
        assert len(set(samples)) == 16

    @pytest.mark.parametrize("count", [-1, 4097])
    def test_count_out_of_range(self, count):
        from spheretracer.core.sampler import sample_floats

        with pytest.raises(ValueError):
            sample_floats(0, 0, count)

    def test_seed_never_zero(self):
        from spheretracer.core.sampler import seed_rng

        zeros = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            for i in range(4096):
                if seed_rng(0, i) == ti.u32(0):
                    zeros[None] += 1

        zeros[None] = 0
        test_kernel()
        assert zeros[None] == 0


class TestRejectionSamplers:
    def test_unit_sphere_points_inside(self):
        from spheretracer.core.sampler import random_in_unit_sphere, seed_rng

        n = 1000
        points = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                rng = seed_rng(9, 0)
                for k in range(n):
                    p, rng = random_in_unit_sphere(rng)
                    points[k] = p

        test_kernel()
        arr = points.to_numpy()
        squared = (arr ** 2).sum(axis=1)
        assert (squared < 1.0).all()
        # Uniform in the ball: mean close to the origin
        assert abs(arr.mean(axis=0)).max() < 0.1

    def test_unit_disk_points_inside_plane(self):
        from spheretracer.core.sampler import random_in_unit_disk, seed_rng

        n = 1000
        points = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                rng = seed_rng(9, 1)
                for k in range(n):
                    p, rng = random_in_unit_disk(rng)
                    points[k] = p

        test_kernel()
        arr = points.to_numpy()
        assert (arr[:, 2] == 0.0).all()
        assert ((arr[:, 0] ** 2 + arr[:, 1] ** 2) < 1.0).all()

    def test_disk_draw_counts(self):
        from spheretracer.core.sampler import next_float, random_in_unit_disk, seed_rng

        n = 64
        first_inside = ti.field(dtype=ti.i32, shape=n)
        after_two_draws = ti.field(dtype=ti.u32, shape=n)
        after_disk = ti.field(dtype=ti.u32, shape=n)

        @ti.kernel
        def test_kernel():
            for k in range(n):
                start = seed_rng(1, k)
                x, after_x = next_float(start)
                y, after_y = next_float(after_x)
                cx = 2.0 * x - 1.0
                cy = 2.0 * y - 1.0
                inside = 0
                if cx * cx + cy * cy < 1.0:
                    inside = 1
                first_inside[k] = inside
                after_two_draws[k] = after_y
                point, state = random_in_unit_disk(start)
                after_disk[k] = state

        test_kernel()
        inside = first_inside.to_numpy()
        two = after_two_draws.to_numpy()
        disk = after_disk.to_numpy()

        assert inside.any()
        assert not inside.all()
        # Accepted on the first attempt: exactly two draws consumed
        assert (disk[inside == 1] == two[inside == 1]).all()
        # Rejected first attempt: the sampler kept drawing
        assert (disk[inside == 0] != two[inside == 0]).all()
