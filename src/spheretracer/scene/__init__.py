"""Scene module.

Components:
    world: Sphere storage in Taichi fields and the nearest-hit query
    manager: Unified material IDs on top of the per-type registries
    builders: The simple scene, the random scene and the default camera
"""

from .builders import (
    SCENES,
    build_scene,
    create_random_scene,
    create_simple_scene,
    default_camera,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    clear_all,
    get_material_type,
    get_material_type_index,
)
from .world import (
    MAX_SPHERES,
    WorldHitRecord,
    add_sphere,
    clear_world,
    get_sphere_count,
    hit_world,
)

__all__ = [
    # World
    "WorldHitRecord",
    "add_sphere",
    "clear_world",
    "get_sphere_count",
    "hit_world",
    "MAX_SPHERES",
    # Manager
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "clear_all",
    "get_material_type",
    "get_material_type_index",
    # Builders
    "create_simple_scene",
    "create_random_scene",
    "default_camera",
    "build_scene",
    "SCENES",
]
