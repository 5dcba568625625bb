"""Per-pixel random number streams for Monte Carlo sampling.

Every pixel of the render target owns an independent xorshift32 stream stored
in a Taichi field. A pixel's stream is only advanced by the thread that renders
that pixel, so the parallel render pass needs no synchronization, and a render
seeded with the same value is bit-for-bit reproducible regardless of how
Taichi schedules the pixels onto threads.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.lumen.core.sampler import seed_streams, uniform
    >>> seed_streams(1234, 64, 48)
    >>> @ti.kernel
    ... def noise():
    ...     for i, j in ti.ndrange(64, 48):
    ...         value = uniform(i, j)  # in [0, 1)
"""

import numpy as np
import taichi as ti

# Maximum supported image dimensions (shared with the render target)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Seeds are passed to kernels as i32
MAX_SEED = 2**31 - 1

# One xorshift32 state per pixel
_streams = ti.field(dtype=ti.u32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))


@ti.func
def _wang_hash(value):
    """Scramble a 32-bit value (Thomas Wang's integer hash)."""
    h = ti.cast(value, ti.u32)
    h = (h ^ ti.u32(61)) ^ ti.bit_shr(h, 16)
    h = h * ti.u32(9)
    h = h ^ ti.bit_shr(h, 4)
    h = h * ti.u32(0x27D4EB2D)
    h = h ^ ti.bit_shr(h, 15)
    return h


@ti.kernel
def _seed_streams(seed: ti.i32, width: ti.i32, height: ti.i32):
    for i, j in ti.ndrange(width, height):
        pixel_index = ti.cast(j * width + i + 1, ti.u32)
        state = _wang_hash(ti.cast(seed, ti.u32) ^ _wang_hash(pixel_index))
        # xorshift has a fixed point at zero
        if state == 0:
            state = ti.u32(1)
        _streams[i, j] = state


def seed_streams(seed: int, width: int, height: int) -> None:
    """Seed the random streams of a width x height pixel region.

    Args:
        seed: Seed value in [0, 2**31).
        width: Number of pixel columns to seed.
        height: Number of pixel rows to seed.

    Raises:
        ValueError: If the seed or the region is out of range.
    """
    if not 0 <= seed <= MAX_SEED:
        raise ValueError(f"Seed {seed} is outside [0, {MAX_SEED}]")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Stream region ({width}x{height}) exceeds maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    _seed_streams(seed, width, height)


def draw_seed(rng: np.random.Generator) -> int:
    """Draw a kernel seed from a NumPy generator."""
    return int(rng.integers(0, MAX_SEED, endpoint=True))


@ti.func
def uniform(px: ti.i32, py: ti.i32) -> ti.f32:
    """Advance the stream of pixel (px, py) and return a float in [0, 1).

    Must only be called from the thread that owns the pixel.
    """
    state = _streams[px, py]
    state = state ^ (state << 13)
    state = state ^ ti.bit_shr(state, 17)
    state = state ^ (state << 5)
    _streams[px, py] = state
    # Top 24 bits map exactly onto the f32 mantissa
    return ti.cast(ti.bit_shr(state, 8), ti.f32) / 16777216.0
