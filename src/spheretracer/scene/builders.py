"""Ready-made scenes.

Two scenes are provided:

- The simple scene: a red diffuse sphere resting on a large yellow-green
  ground sphere, flanked by a fuzzy metal sphere and a glass sphere. An
  optional inner sphere with a negative radius turns the glass sphere into a
  hollow bubble.
- The random scene: a grey ground sphere covered by a 22x22 grid of small
  spheres with randomly chosen materials, plus three large spheres (glass,
  diffuse brown, polished metal) in the middle.

Both scenes are meant to be viewed with default_camera().

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.camera.thin_lens import setup_camera
    >>> from spheretracer.scene.builders import create_random_scene, default_camera
    >>>
    >>> scene = create_random_scene(seed=42)
    >>> setup_camera(default_camera(aspect_ratio=2.0))
"""

import logging

import numpy as np

from spheretracer.camera.thin_lens import ThinLensCamera
from spheretracer.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# =============================================================================
# Default Camera
# =============================================================================

DEFAULT_LOOKFROM = (13.0, 2.0, 3.0)
DEFAULT_LOOKAT = (0.0, 0.0, 0.0)
DEFAULT_VUP = (0.0, 1.0, 0.0)
DEFAULT_VFOV = 20.0
DEFAULT_APERTURE = 0.1
DEFAULT_FOCUS_DIST = 10.0


def default_camera(aspect_ratio: float) -> ThinLensCamera:
    """Camera looking at the origin from (13, 2, 3) with a shallow depth of field."""
    return ThinLensCamera(
        lookfrom=DEFAULT_LOOKFROM,
        lookat=DEFAULT_LOOKAT,
        vup=DEFAULT_VUP,
        vfov=DEFAULT_VFOV,
        aspect_ratio=aspect_ratio,
        aperture=DEFAULT_APERTURE,
        focus_dist=DEFAULT_FOCUS_DIST,
    )


# =============================================================================
# Simple Scene
# =============================================================================

GLASS_IOR = 1.5

# Negative radius makes the inner surface report inward normals
HOLLOW_GLASS_INNER_RADIUS = -0.45


def create_simple_scene(hollow_glass: bool = False) -> SceneManager:
    """Create the four-sphere scene.

    Args:
        hollow_glass: If True, add an inner sphere of radius -0.45 inside the
            glass sphere so it renders as a thin-walled bubble.

    Returns:
        The populated SceneManager.
    """
    scene = SceneManager()

    scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.8, 0.3, 0.3))
    scene.add_lambertian_sphere((0.0, -100.5, -1.0), 100.0, (0.8, 0.8, 0.0))
    scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, (0.8, 0.8, 0.0), fuzz=0.3)

    _, glass = scene.add_dielectric_sphere((-1.0, 0.0, -1.0), 0.5, GLASS_IOR)
    if hollow_glass:
        scene.add_sphere((-1.0, 0.0, -1.0), HOLLOW_GLASS_INNER_RADIUS, glass)

    logger.info("Built simple scene with %d spheres", scene.get_sphere_count())
    return scene


# =============================================================================
# Random Scene
# =============================================================================

# Small spheres are placed for a, b in [-GRID_EXTENT, GRID_EXTENT)
GRID_EXTENT = 11
SMALL_RADIUS = 0.2

# Small spheres closer than this to the spot below the glass sphere are skipped
CLEARANCE_POINT = np.array([4.0, 0.2, 0.0])
CLEARANCE_DISTANCE = 0.9

# Cumulative thresholds for the material choice
DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.95


def create_random_scene(seed: int | None = None) -> SceneManager:
    """Create the random scene.

    For every grid cell (a, b) one uniform draw picks the material and two
    more jitter the center to (a + 0.9 * r, 0.2, b + 0.9 * r). Spheres too
    close to (4, 0.2, 0) are skipped. The draw below 0.8 gives a diffuse
    sphere with per-channel albedo r * r, below 0.95 a metal sphere with
    albedo 0.5 * (1 + r) and fuzz 0.5 * r, otherwise glass.

    Args:
        seed: Seed for numpy's generator. None gives a different scene each
            call.

    Returns:
        The populated SceneManager.
    """
    rng = np.random.default_rng(seed)
    scene = SceneManager()

    scene.add_lambertian_sphere((0.0, -1000.0, 0.0), 1000.0, (0.5, 0.5, 0.5))

    # One glass material shared by every small glass sphere
    glass = None

    for a in range(-GRID_EXTENT, GRID_EXTENT):
        for b in range(-GRID_EXTENT, GRID_EXTENT):
            choose_mat = rng.random()
            center = np.array(
                [a + 0.9 * rng.random(), SMALL_RADIUS, b + 0.9 * rng.random()]
            )
            if np.linalg.norm(center - CLEARANCE_POINT) <= CLEARANCE_DISTANCE:
                continue

            if choose_mat < DIFFUSE_PROBABILITY:
                draws = rng.random(6)
                albedo = tuple(float(v) for v in draws[:3] * draws[3:])
                scene.add_lambertian_sphere(tuple(center), SMALL_RADIUS, albedo)
            elif choose_mat < METAL_PROBABILITY:
                albedo = tuple(float(v) for v in 0.5 * (1.0 + rng.random(3)))
                fuzz = 0.5 * rng.random()
                scene.add_metal_sphere(tuple(center), SMALL_RADIUS, albedo, fuzz)
            else:
                if glass is None:
                    glass = scene.add_dielectric_material(GLASS_IOR)
                scene.add_sphere(tuple(center), SMALL_RADIUS, glass)

    scene.add_dielectric_sphere((0.0, 1.0, 0.0), 1.0, GLASS_IOR)
    scene.add_lambertian_sphere((-4.0, 1.0, 0.0), 1.0, (0.4, 0.2, 0.1))
    scene.add_metal_sphere((4.0, 1.0, 0.0), 1.0, (0.7, 0.6, 0.5), fuzz=0.0)

    logger.info(
        "Built random scene with %d spheres and %d materials (seed=%s)",
        scene.get_sphere_count(),
        scene.get_material_count(),
        seed,
    )
    return scene


# Registry used by the command-line example and RenderConfig.scene
SCENES = {
    "simple": lambda seed: create_simple_scene(),
    "hollow": lambda seed: create_simple_scene(hollow_glass=True),
    "random": create_random_scene,
}


def build_scene(name: str, seed: int | None = None) -> SceneManager:
    """Build a named scene.

    Raises:
        ValueError: If the name is not one of SCENES.
    """
    try:
        builder = SCENES[name]
    except KeyError:
        raise ValueError(
            f"Unknown scene {name!r}; expected one of {sorted(SCENES)}"
        ) from None
    return builder(seed)
