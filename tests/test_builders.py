"""Tests for the built-in scenes.

Tests cover:
- Default camera parameters
- Simple and hollow-glass scenes
- Random scene layout and reproducibility
- Scene lookup by name
"""

import math

import pytest


class TestDefaultCamera:
    def test_parameters(self):
        from spheretracer.scene.builders import default_camera

        camera = default_camera(2.0)
        assert camera.lookfrom == (13.0, 2.0, 3.0)
        assert camera.lookat == (0.0, 0.0, 0.0)
        assert camera.vfov == 20.0
        assert camera.aspect_ratio == 2.0
        assert camera.aperture == 0.1
        assert camera.focus_dist == 10.0


class TestSimpleScene:
    def test_four_spheres(self):
        from spheretracer.scene.builders import create_simple_scene
        from spheretracer.scene.manager import MaterialType

        scene = create_simple_scene()
        assert scene.get_sphere_count() == 4
        types = [m.material_type for m in scene.materials]
        assert types == [
            MaterialType.LAMBERTIAN,
            MaterialType.LAMBERTIAN,
            MaterialType.METAL,
            MaterialType.DIELECTRIC,
        ]
        assert scene.materials[2].params["fuzz"] == pytest.approx(0.3)

    def test_hollow_glass(self):
        from spheretracer.scene.builders import create_simple_scene

        scene = create_simple_scene(hollow_glass=True)
        assert scene.get_sphere_count() == 5
        outer, inner = scene.spheres[3], scene.spheres[4]
        assert inner.center == outer.center
        assert inner.radius == pytest.approx(-0.45)
        assert inner.material_id == outer.material_id


class TestRandomScene:
    def test_layout(self):
        from spheretracer.scene.builders import (
            CLEARANCE_DISTANCE,
            GRID_EXTENT,
            SMALL_RADIUS,
            create_random_scene,
        )

        scene = create_random_scene(seed=0)
        spheres = scene.spheres
        small = spheres[1:-3]

        assert spheres[0].radius == 1000.0
        assert [s.center for s in spheres[-3:]] == [
            (0.0, 1.0, 0.0),
            (-4.0, 1.0, 0.0),
            (4.0, 1.0, 0.0),
        ]
        assert 0 < len(small) <= (2 * GRID_EXTENT) ** 2
        for sphere in small:
            x, y, z = sphere.center
            assert sphere.radius == SMALL_RADIUS
            assert y == SMALL_RADIUS
            assert -GRID_EXTENT <= x < GRID_EXTENT
            assert -GRID_EXTENT <= z < GRID_EXTENT
            assert math.dist(sphere.center, (4.0, 0.2, 0.0)) > CLEARANCE_DISTANCE

    def test_material_parameters_in_range(self):
        from spheretracer.scene.builders import create_random_scene
        from spheretracer.scene.manager import MaterialType

        scene = create_random_scene(seed=3)
        for info in scene.materials:
            if info.material_type == MaterialType.METAL:
                assert all(0.5 <= c <= 1.0 for c in info.params["albedo"])
                assert 0.0 <= info.params["fuzz"] <= 0.5
            elif info.material_type == MaterialType.LAMBERTIAN:
                assert all(0.0 <= c <= 1.0 for c in info.params["albedo"])

    def test_glass_material_shared(self):
        from spheretracer.scene.builders import create_random_scene
        from spheretracer.scene.manager import MaterialType

        scene = create_random_scene(seed=1)
        glass_ids = {
            s.material_id
            for s in scene.spheres[1:-3]
            if scene.get_material_type_python(s.material_id) == MaterialType.DIELECTRIC
        }
        assert len(glass_ids) <= 1

    def test_seed_reproducible(self):
        from spheretracer.scene.builders import create_random_scene

        first = create_random_scene(seed=42).to_dict()
        second = create_random_scene(seed=42).to_dict()
        other = create_random_scene(seed=43).to_dict()
        assert first == second
        assert first != other


class TestBuildScene:
    @pytest.mark.parametrize("name,count", [("simple", 4), ("hollow", 5)])
    def test_named_scenes(self, name, count):
        from spheretracer.scene.builders import build_scene

        assert build_scene(name).get_sphere_count() == count

    def test_random_by_name(self):
        from spheretracer.scene.builders import build_scene, create_random_scene

        assert build_scene("random", seed=5).to_dict() == create_random_scene(seed=5).to_dict()

    def test_unknown_name(self):
        from spheretracer.scene.builders import build_scene

        with pytest.raises(ValueError):
            build_scene("teapot")
