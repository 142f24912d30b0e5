"""Explicit per-pixel random number generation.

Each unit of rendering work (one pixel) owns a private 32-bit generator state.
The state is threaded through every function that consumes randomness: such
functions take the current state and return the advanced state alongside
their result. Nothing here touches a process-wide generator, so a pixel's
sample stream depends only on the render seed and the pixel index, and the
image is identical whether pixels are processed sequentially or in parallel.

The generator is xorshift32 seeded through an integer hash of
(seed, index). Uniform floats use the top 24 bits of the state so every value
is exactly representable in f32 and lies in [0, 1).

Example:
    >>> @ti.kernel
    ... def draw() -> ti.f32:
    ...     rng = seed_rng(7, 0)
    ...     u, rng = next_float(rng)
    ...     return u
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# Rejection sampling attempts before giving up. The acceptance rate is
# ~52% for the sphere and ~79% for the disk, so this bound is never reached
# in practice.
MAX_REJECTION_ATTEMPTS = 64

# Integer hash constants (Thomas Wang's 32-bit hash)
_HASH_XOR = 61
_HASH_MULTIPLIER = 668265261

# Mixes the index into the hashed seed so neighbouring pixels decorrelate
_INDEX_STRIDE = 9781


@ti.func
def _wang_hash(value: ti.u32) -> ti.u32:
    h = (value ^ ti.u32(_HASH_XOR)) ^ (value >> 16)
    h = h * ti.u32(9)
    h = h ^ (h >> 4)
    h = h * ti.u32(_HASH_MULTIPLIER)
    h = h ^ (h >> 15)
    return h


@ti.func
def seed_rng(seed: ti.i32, index: ti.i32) -> ti.u32:
    """Derive a private generator state for one unit of work.

    Args:
        seed: The render seed shared by all pixels.
        index: The unit's index (e.g. the linear pixel index).

    Returns:
        A non-zero generator state.
    """
    mixed = _wang_hash(ti.cast(seed, ti.u32)) ^ (ti.cast(index, ti.u32) * ti.u32(_INDEX_STRIDE))
    state = _wang_hash(mixed)
    # xorshift has a fixed point at zero
    if state == ti.u32(0):
        state = ti.u32(1)
    return state


@ti.func
def next_u32(state: ti.u32):
    """Advance the generator one step.

    Returns:
        A tuple (value, state) where value is the new 32-bit output.
    """
    s = state
    s = s ^ (s << 13)
    s = s ^ (s >> 17)
    s = s ^ (s << 5)
    return s, s


@ti.func
def next_float(state: ti.u32):
    """Draw a uniform float in [0, 1).

    Returns:
        A tuple (value, state).
    """
    bits, new_state = next_u32(state)
    value = ti.cast(bits >> 8, ti.f32) * (1.0 / 16777216.0)
    return value, new_state


@ti.func
def random_in_unit_sphere(state: ti.u32):
    """Uniform point strictly inside the unit sphere centered at the origin.

    Rejection sampling: draw a point in [-1, 1]^3 and repeat until its
    squared length is below 1. Each attempt consumes three draws.

    Returns:
        A tuple (point, state).
    """
    rng = state
    p = vec3(0.0, 0.0, 0.0)
    found = 0
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if found == 0:
            x, rng = next_float(rng)
            y, rng = next_float(rng)
            z, rng = next_float(rng)
            candidate = 2.0 * vec3(x, y, z) - vec3(1.0, 1.0, 1.0)
            if tm.dot(candidate, candidate) < 1.0:
                p = candidate
                found = 1
    return p, rng


@ti.func
def random_in_unit_disk(state: ti.u32):
    """Uniform point strictly inside the unit disk in the xy-plane.

    Same rejection scheme as random_in_unit_sphere with z fixed at zero.
    Each attempt consumes exactly two draws.

    Returns:
        A tuple (point, state) where point.z == 0.
    """
    rng = state
    p = vec3(0.0, 0.0, 0.0)
    found = 0
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if found == 0:
            x, rng = next_float(rng)
            y, rng = next_float(rng)
            candidate = vec3(2.0 * x - 1.0, 2.0 * y - 1.0, 0.0)
            if candidate.x * candidate.x + candidate.y * candidate.y < 1.0:
                p = candidate
                found = 1
    return p, rng


# =============================================================================
# Python-side access (testing and debugging)
# =============================================================================

MAX_DEBUG_SAMPLES = 4096

_debug_samples = ti.field(dtype=ti.f32, shape=MAX_DEBUG_SAMPLES)


@ti.kernel
def _fill_debug_samples(seed: ti.i32, index: ti.i32, count: ti.i32):
    # Single outer iteration keeps the stream sequential
    for _ in range(1):
        rng = seed_rng(seed, index)
        for k in range(count):
            u, rng = next_float(rng)
            _debug_samples[k] = u


def sample_floats(seed: int, index: int, count: int) -> list[float]:
    """Return the first ``count`` uniform draws of a generator stream.

    Args:
        seed: The render seed.
        index: The unit index the stream belongs to.
        count: Number of draws (at most MAX_DEBUG_SAMPLES).

    Raises:
        ValueError: If count is negative or exceeds MAX_DEBUG_SAMPLES.
    """
    if count < 0 or count > MAX_DEBUG_SAMPLES:
        raise ValueError(f"count must be in [0, {MAX_DEBUG_SAMPLES}], got {count}")
    _fill_debug_samples(seed, index, count)
    samples = _debug_samples.to_numpy()
    return [float(v) for v in samples[:count]]
