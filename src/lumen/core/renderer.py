"""Parallel per-pixel sampling driver.

One frame is a single Taichi kernel whose outermost loop runs over every
(x, y) pixel in parallel. Pixels share nothing mutable: each one owns its slot
in the frame buffer and its own random stream (src.lumen.core.sampler). For
each of num_tries samples, the camera direction through the pixel is turned by
a uniform jitter in [-max_variation, +max_variation] on both angles, the path
is traced with max_depth bounces, and the results are averaged.

A render generation (scene + camera) is loaded once with load_generation() and
can then be rendered any number of times with render_frame().

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.lumen.core.renderer import render
    >>> image = render(config, seed=7)  # (height, width, 3) float32
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm
from loguru import logger

from src.lumen.camera.pinhole import camera_origin, pixel_direction, setup_camera
from src.lumen.core.integrator import trace_radiance
from src.lumen.core.sampler import (
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    draw_seed,
    seed_streams,
    uniform,
)
from src.lumen.scene.intersection import MAX_OBJECTS, upload_scene
from src.lumen.scene.objects import RenderConfig

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Frame Buffer
# =============================================================================

# Averaged radiance of the last frame (preallocated to max size)
_frame_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track whether a scene generation has been loaded
_generation_loaded = ti.field(dtype=ti.i32, shape=())


def validate_config(config: RenderConfig) -> None:
    """Check that a configuration can be rendered.

    Raises:
        ValueError: If the image size is out of range, num_tries is not
            positive, max_depth is negative or the scene has too many
            objects.
    """
    if config.width < 1 or config.height < 1:
        raise ValueError(f"Image dimensions ({config.width}x{config.height}) must be positive")
    if config.width > MAX_IMAGE_WIDTH or config.height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({config.width}x{config.height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    if config.num_tries < 1:
        raise ValueError(f"num_tries must be at least 1, got {config.num_tries}")
    if config.max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {config.max_depth}")
    if len(config.objects) > MAX_OBJECTS:
        raise ValueError(f"Scene has {len(config.objects)} objects, maximum is {MAX_OBJECTS}")


def load_generation(config: RenderConfig) -> None:
    """Upload the scene and camera of a configuration.

    Args:
        config: The configuration to load.

    Raises:
        ValueError: If the configuration cannot be rendered.
    """
    validate_config(config)
    upload_scene(config.objects)
    setup_camera(config.pov)
    _frame_buffer.fill(0.0)
    _generation_loaded[None] = 1
    logger.info(
        "Loaded generation: {}x{}, {} objects",
        config.width,
        config.height,
        len(config.objects),
    )


def unload_generation() -> None:
    """Forget the loaded generation."""
    _generation_loaded[None] = 0


def _check_generation_loaded() -> None:
    """Check that a generation is loaded and raise if not."""
    if _generation_loaded[None] == 0:
        raise RuntimeError("No scene generation loaded. Call load_generation() first.")


@ti.kernel
def _render_pass(
    width: ti.i32,
    height: ti.i32,
    fov: ti.f32,
    max_depth: ti.i32,
    num_tries: ti.i32,
    max_variation: ti.f32,
):
    """Render one frame into the frame buffer.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        fov: Horizontal half-angle of view in radians.
        max_depth: Maximum bounces per path.
        num_tries: Samples per pixel.
        max_variation: Maximum angular jitter per sample.
    """
    for x, y in ti.ndrange(width, height):
        origin = camera_origin()
        total = vec3(0.0, 0.0, 0.0)

        for _ in range(num_tries):
            jitter_theta = (2.0 * uniform(x, y) - 1.0) * max_variation
            jitter_phi = (2.0 * uniform(x, y) - 1.0) * max_variation
            direction = pixel_direction(x, y, width, height, fov, jitter_theta, jitter_phi)
            total += trace_radiance(origin, direction, max_depth, x, y)

        _frame_buffer[x, y] = total / ti.cast(num_tries, ti.f32)


def render_frame(config: RenderConfig, seed: int) -> npt.NDArray[np.float32]:
    """Render one frame of the loaded generation.

    Args:
        config: The loaded configuration.
        seed: Seed for the per-pixel random streams of this frame.

    Returns:
        NumPy array of shape (height, width, 3), row 0 at the top. Values are
        averaged radiance on the 0..255 scale and are not clamped.

    Raises:
        RuntimeError: If no generation has been loaded.
    """
    _check_generation_loaded()

    seed_streams(seed, config.width, config.height)
    _render_pass(
        config.width,
        config.height,
        config.fov,
        config.max_depth,
        config.num_tries,
        config.max_variation,
    )

    full_image = _frame_buffer.to_numpy()

    # (width, height, 3) -> (height, width, 3)
    image = np.transpose(full_image[: config.width, : config.height, :], (1, 0, 2))
    return np.ascontiguousarray(image, dtype=np.float32)


def render(config: RenderConfig, seed: int | None = None) -> npt.NDArray[np.float32]:
    """Load a configuration and render a single frame.

    Args:
        config: The configuration to render.
        seed: Seed for reproducible output. None draws fresh entropy.

    Returns:
        NumPy array of shape (height, width, 3).
    """
    load_generation(config)
    return render_frame(config, draw_seed(np.random.default_rng(seed)))
