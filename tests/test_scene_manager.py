"""Tests for the SceneManager and the unified material table.

Tests cover:
- Unified material IDs across material types
- Sphere creation with material validation
- Kernel-side material type lookup
- Dictionary export and import
"""

import pytest
import taichi as ti


class TestMaterials:
    def test_ids_are_sequential_across_types(self):
        from spheretracer.scene.manager import MaterialType, SceneManager

        scene = SceneManager()
        diffuse = scene.add_lambertian_material((0.5, 0.5, 0.5))
        metal = scene.add_metal_material((0.8, 0.8, 0.8), fuzz=0.2)
        glass = scene.add_dielectric_material(1.5)
        assert (diffuse, metal, glass) == (0, 1, 2)
        assert scene.get_material_count() == 3
        assert scene.get_material_type_python(metal) == MaterialType.METAL
        assert scene.get_material_type_python(5) is None

    def test_material_info(self):
        from spheretracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_material((0.1, 0.2, 0.3))
        metal = scene.add_metal_material((0.8, 0.6, 0.2), fuzz=0.3)
        info = scene.get_material_info(metal)
        assert info.type_index == 0
        assert info.params == {"albedo": (0.8, 0.6, 0.2), "fuzz": 0.3}
        assert scene.get_material_info(-1) is None

    def test_invalid_material_parameters(self):
        from spheretracer.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError):
            scene.add_lambertian_material((2.0, 0.0, 0.0))
        with pytest.raises(ValueError):
            scene.add_metal_material((0.5, 0.5, 0.5), fuzz=-1.0)
        with pytest.raises(ValueError):
            scene.add_dielectric_material(0.0)
        assert scene.get_material_count() == 0

    def test_kernel_side_lookup(self):
        from spheretracer.scene.manager import (
            MaterialType,
            SceneManager,
            get_material_type,
            get_material_type_index,
        )

        scene = SceneManager()
        scene.add_lambertian_material((0.5, 0.5, 0.5))
        scene.add_dielectric_material(1.5)
        scene.add_lambertian_material((0.2, 0.2, 0.2))

        types = ti.field(dtype=ti.i32, shape=5)
        indices = ti.field(dtype=ti.i32, shape=5)

        @ti.kernel
        def test_kernel():
            for k in range(5):
                types[k] = get_material_type(k - 1)
                indices[k] = get_material_type_index(k - 1)

        test_kernel()
        assert types.to_numpy().tolist() == [
            -1,
            int(MaterialType.LAMBERTIAN),
            int(MaterialType.DIELECTRIC),
            int(MaterialType.LAMBERTIAN),
            -1,
        ]
        assert indices.to_numpy().tolist() == [-1, 0, 0, 1, -1]

    def test_new_manager_clears_previous_scene(self):
        from spheretracer.scene.manager import SceneManager

        first = SceneManager()
        first.add_lambertian_sphere((0.0, 0.0, 0.0), 1.0, (0.5, 0.5, 0.5))
        second = SceneManager()
        assert second.get_material_count() == 0
        assert second.get_sphere_count() == 0


class TestSpheres:
    def test_add_sphere_with_material(self):
        from spheretracer.scene.manager import SceneManager

        scene = SceneManager()
        mat = scene.add_lambertian_material((0.5, 0.5, 0.5))
        assert scene.add_sphere((0.0, 0.0, -1.0), 0.5, mat) == 0
        assert scene.add_sphere((0.0, -100.5, -1.0), 100.0, mat) == 1
        assert scene.get_sphere_count() == 2
        assert scene.spheres[1].radius == 100.0

    @pytest.mark.parametrize("material_id", [-1, 1, 99])
    def test_invalid_material_id(self, material_id):
        from spheretracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_material((0.5, 0.5, 0.5))
        with pytest.raises(ValueError):
            scene.add_sphere((0.0, 0.0, 0.0), 1.0, material_id)

    def test_convenience_methods(self):
        from spheretracer.scene.manager import MaterialType, SceneManager

        scene = SceneManager()
        assert scene.add_lambertian_sphere((0, 0, 0), 1.0, (0.5, 0.5, 0.5)) == (0, 0)
        assert scene.add_metal_sphere((2, 0, 0), 1.0, (0.8, 0.8, 0.8), 0.1) == (1, 1)
        assert scene.add_dielectric_sphere((4, 0, 0), 1.0, 1.5) == (2, 2)
        assert scene.get_material_type_python(2) == MaterialType.DIELECTRIC

    def test_shared_material(self):
        from spheretracer.scene.manager import SceneManager

        scene = SceneManager()
        _, glass = scene.add_dielectric_sphere((0.0, 0.0, 0.0), 0.5)
        scene.add_sphere((0.0, 0.0, 0.0), -0.45, glass)
        assert scene.get_material_count() == 1
        assert scene.get_sphere_count() == 2

    def test_capacity_constants(self):
        from spheretracer.scene.manager import MAX_MATERIALS, SceneManager
        from spheretracer.scene.world import MAX_SPHERES

        assert SceneManager.get_max_spheres() == MAX_SPHERES
        assert SceneManager.get_max_materials() == MAX_MATERIALS


class TestSerialization:
    def test_to_dict(self):
        from spheretracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, (0.8, 0.8, 0.0), fuzz=0.3)
        data = scene.to_dict()
        assert data["materials"] == [
            {"type": "metal", "albedo": (0.8, 0.8, 0.0), "fuzz": 0.3}
        ]
        assert data["spheres"] == [
            {"center": [1.0, 0.0, -1.0], "radius": 0.5, "material_id": 0}
        ]

    def test_from_dict_rebuilds_scene(self):
        from spheretracer.scene.builders import create_simple_scene
        from spheretracer.scene.manager import SceneManager

        exported = create_simple_scene(hollow_glass=True).to_dict()
        scene = SceneManager()
        scene.from_dict(exported)
        assert scene.get_sphere_count() == 5
        assert scene.get_material_count() == 4
        assert scene.to_dict() == exported

    def test_unknown_material_type(self):
        from spheretracer.scene.manager import SceneConfig, SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError):
            scene.from_config(SceneConfig(materials=[{"type": "plastic"}]))
