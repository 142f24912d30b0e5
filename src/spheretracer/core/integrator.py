"""Path-color integrator and render kernel.

This module turns camera rays into pixel colors. A ray is followed through
the world bounce by bounce: each hit asks the hit sphere's material to
scatter, the attenuations multiply into a running throughput, and a ray
that escapes picks up the sky gradient. The estimate is the classic
recursive definition

    color(ray, depth) = attenuation * color(scattered, depth + 1)   on a hit
                      = background(ray)                              on a miss
                      = black        when absorbed or depth >= MAX_DEPTH

evaluated as a loop, which gives identical numbers without recursion.

The render kernel gives every pixel its own generator state seeded from
(seed, pixel index). Pixels therefore never share random state, and the
image is the same whether the pixel loop runs in parallel or serially.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from spheretracer.camera.thin_lens import setup_camera
    >>> from spheretracer.core.integrator import render_image, setup_render_target
    >>> from spheretracer.scene.builders import create_simple_scene, default_camera
    >>>
    >>> scene = create_simple_scene()
    >>> setup_camera(default_camera(aspect_ratio=2.0))
    >>> setup_render_target(200, 100)
    >>> render_image(samples=16, seed=0)
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from spheretracer.camera.thin_lens import get_ray
from spheretracer.core.ray import Ray, make_ray, unit_vector
from spheretracer.core.sampler import next_float, seed_rng
from spheretracer.materials.dielectric import scatter_dielectric_by_id
from spheretracer.materials.lambertian import scatter_lambertian_by_id
from spheretracer.materials.metal import scatter_metal_by_id
from spheretracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)
from spheretracer.scene.world import hit_world

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Bounce cutoff: a hit at this depth contributes black
MAX_DEPTH = 50

# Lower bound on accepted hits; keeps scattered rays off their own surface
T_MIN = 0.001
T_MAX = tm.inf

# Sky gradient endpoints
HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
ZENITH_COLOR = vec3(0.5, 0.7, 1.0)

# Scale applied before truncating a [0, 1] channel to 8 bits
CHANNEL_SCALE = 255.99

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Preallocated to avoid kernel recompilation when the size changes
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Gamma-corrected color per pixel, indexed [x, y] with y = 0 at the bottom
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# The same colors packed as R << 16 | G << 8 | B
_packed_buffer = ti.field(dtype=ti.u32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image size and clear the buffers.

    Args:
        width: Image width in pixels (1..MAX_IMAGE_WIDTH).
        height: Image height in pixels (1..MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1
    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _packed_buffer.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    ray_in: Ray,
    hit_point: vec3,
    normal: vec3,
    rng: ti.u32,
):
    """Dispatch to the scatter function of the hit material.

    An unknown material_id absorbs the ray.

    Returns:
        A tuple of (did_scatter, attenuation, scattered, rng).
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    did_scatter = 0
    attenuation = vec3(0.0, 0.0, 0.0)
    scattered = make_ray(hit_point, normal)
    new_rng = rng

    if mat_type == int(MaterialType.LAMBERTIAN):
        did_scatter, attenuation, scattered, new_rng = scatter_lambertian_by_id(
            type_index, hit_point, normal, rng
        )
    elif mat_type == int(MaterialType.METAL):
        did_scatter, attenuation, scattered, new_rng = scatter_metal_by_id(
            type_index, ray_in, hit_point, normal, rng
        )
    elif mat_type == int(MaterialType.DIELECTRIC):
        did_scatter, attenuation, scattered, new_rng = scatter_dielectric_by_id(
            type_index, ray_in, hit_point, normal, rng
        )

    return did_scatter, attenuation, scattered, new_rng


# =============================================================================
# Path Color
# =============================================================================


@ti.func
def background(direction: vec3) -> vec3:
    """Sky gradient: white at the horizon blending to blue straight up."""
    t = 0.5 * (unit_vector(direction).y + 1.0)
    return (1.0 - t) * HORIZON_COLOR + t * ZENITH_COLOR


@ti.func
def ray_color(ray: Ray, depth: ti.i32, rng: ti.u32):
    """Estimate the color carried back along a ray.

    Args:
        ray: The ray to follow.
        depth: Bounce depth of this ray (0 for a camera ray).
        rng: The caller's generator state.

    Returns:
        A tuple (color, rng).
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = ray
    current_depth = depth
    state = rng

    # Taichi has no break in ti.func loops
    active = 1

    # Depths depth..MAX_DEPTH need at most MAX_DEPTH + 1 iterations
    for _ in range(MAX_DEPTH + 1):
        if active == 1:
            rec = hit_world(current, T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * background(current.direction)
                active = 0
            elif current_depth >= MAX_DEPTH:
                active = 0
            else:
                did_scatter, attenuation, scattered, state = _scatter_material(
                    rec.material_id, current, rec.point, rec.normal, state
                )
                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    current = scattered
                    current_depth += 1

    return color, state


# =============================================================================
# Pixel Sampling
# =============================================================================


@ti.func
def pack_rgb(color: vec3) -> ti.u32:
    """Pack a [0, 1] color into R << 16 | G << 8 | B."""
    r = ti.cast(color.x * CHANNEL_SCALE, ti.u32)
    g = ti.cast(color.y * CHANNEL_SCALE, ti.u32)
    b = ti.cast(color.z * CHANNEL_SCALE, ti.u32)
    return (r << 16) | (g << 8) | b


@ti.func
def sample_pixel(
    i: ti.i32,
    j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples: ti.i32,
    seed: ti.i32,
) -> vec3:
    """Average ``samples`` jittered camera rays through pixel (i, j).

    Pixel (0, 0) is the bottom-left corner. The result is gamma corrected
    (square root per channel) and clamped to [0, 1].
    """
    rng = seed_rng(seed, j * width + i)
    total = vec3(0.0, 0.0, 0.0)

    for _ in range(samples):
        du, rng = next_float(rng)
        dv, rng = next_float(rng)
        s = (ti.cast(i, ti.f32) + du) / ti.cast(width, ti.f32)
        t = (ti.cast(j, ti.f32) + dv) / ti.cast(height, ti.f32)
        ray, rng = get_ray(s, t, rng)
        color, rng = ray_color(ray, 0, rng)
        total += color

    average = total / ti.cast(samples, ti.f32)
    return tm.clamp(tm.sqrt(average), 0.0, 1.0)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    width: ti.i32,
    height: ti.i32,
    row_start: ti.i32,
    row_end: ti.i32,
    samples: ti.i32,
    seed: ti.i32,
    serial: ti.template(),
):
    ti.loop_config(serialize=serial)
    for i, j in ti.ndrange(width, (row_start, row_end)):
        color = sample_pixel(i, j, width, height, samples, seed)
        _color_buffer[i, j] = color
        _packed_buffer[i, j] = pack_rgb(color)


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples: ti.i32,
    seed: ti.i32,
) -> vec3:
    return sample_pixel(pixel_i, pixel_j, width, height, samples, seed)


_trace_result = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _trace_single_ray(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    depth: ti.i32,
    seed: ti.i32,
):
    # Single outer iteration keeps the stream sequential
    for _ in range(1):
        rng = seed_rng(seed, 0)
        ray = make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz))
        color, rng = ray_color(ray, depth, rng)
        _trace_result[None] = color


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = 0,
    seed: int = 0,
) -> tuple[float, float, float]:
    """Evaluate ray_color for one ray against the current world.

    Python-callable for testing and debugging.

    Args:
        origin: Ray origin.
        direction: Ray direction (non-zero, need not be unit length).
        depth: Starting bounce depth.
        seed: Seed for the ray's generator stream.

    Returns:
        The (R, G, B) estimate, before gamma correction.
    """
    _trace_single_ray(
        origin[0], origin[1], origin[2],
        direction[0], direction[1], direction[2],
        depth, seed,
    )
    color = _trace_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def render_pixel(
    pixel_i: int,
    pixel_j: int,
    samples: int = 1,
    seed: int = 0,
) -> tuple[float, float, float]:
    """Compute the final color of one pixel without touching the buffers.

    Gives the same value render_image() stores for that pixel with the same
    samples and seed.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    color = _render_single_pixel(pixel_i, pixel_j, width, height, samples, seed)
    return (float(color[0]), float(color[1]), float(color[2]))


def render_rows(
    row_start: int,
    row_end: int,
    samples: int,
    seed: int = 0,
    parallel: bool = True,
) -> None:
    """Render the rows [row_start, row_end) of the image.

    Rows are counted from the bottom of the image.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If samples is not positive or the row range is invalid.
    """
    _check_render_target_initialized()
    if samples <= 0:
        raise ValueError(f"samples must be positive, got {samples}")

    width, height = get_image_dimensions()
    if not 0 <= row_start <= row_end <= height:
        raise ValueError(f"Invalid row range [{row_start}, {row_end}) for height {height}")

    _render_rows(width, height, row_start, row_end, samples, seed, not parallel)


def render_image(samples: int, seed: int = 0, parallel: bool = True) -> None:
    """Render the whole image into the buffers.

    Args:
        samples: Samples per pixel.
        seed: Render seed. The same seed reproduces the same image.
        parallel: Run the pixel loop in parallel (True) or serially (False).
            Both produce identical images.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If samples is not positive.
    """
    _, height = get_image_dimensions()
    render_rows(0, height, samples, seed, parallel)


def get_packed_image_numpy() -> np.ndarray:
    """Get the packed pixels as a (height, width) uint32 array, top row first.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()

    packed = _packed_buffer.to_numpy()[:width, :height]
    # Taichi indexes [x, y] from the bottom-left; images are rows from the top
    return np.ascontiguousarray(np.flipud(packed.T)).astype(np.uint32)


def get_image_numpy() -> np.ndarray:
    """Get the gamma-corrected colors as a (height, width, 3) float32 array.

    Rows are ordered top to bottom, values are in [0, 1].

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()

    image = _color_buffer.to_numpy()[:width, :height, :]
    image = np.transpose(image, (1, 0, 2))
    image = np.flipud(image)
    return np.ascontiguousarray(image).astype(np.float32)
