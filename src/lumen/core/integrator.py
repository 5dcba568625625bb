"""Recursive light transport integrator.

The radiance returned along a ray is defined recursively on the remaining
depth:

    radiance(ray, 0) = black
    radiance(ray, d) = black                                    on a miss
    radiance(ray, d) = attenuation * radiance(scattered, d - 1)
                       + luminance                              on a hit

where the closest object's material chooses the scattered ray and the
attenuation (see src.lumen.materials). Luminance is added at every bounce, so
an emitter lights every path segment that touches it and an emitter seen
directly by the camera shows its own luminance. The path ends after at most
max_depth bounces; there is no Russian roulette.

Taichi functions cannot call themselves, so the recursion is unrolled into a
loop that carries the product of the attenuations seen so far (the path
throughput):

    radiance += throughput * luminance
    throughput *= attenuation

which expands to exactly the same sum as the recursive definition.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.lumen.core.integrator import trace_ray
    >>> from src.lumen.scene.intersection import upload_scene
    >>> upload_scene(config.objects)
    >>> color = trace_ray(config.pov, depth=5, num_samples=64, seed=1)
"""

import taichi as ti
import taichi.math as tm

from src.lumen.core.ray import Ray, ray_at
from src.lumen.core.sampler import seed_streams
from src.lumen.core.vector import Color
from src.lumen.materials.mirror import scatter_mirror
from src.lumen.materials.translucent import scatter_translucent
from src.lumen.scene.intersection import (
    MATERIAL_MIRROR,
    intersect_scene,
    object_clearness,
    object_color,
    object_luminance,
    object_material,
    object_normal,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# Radiance of rays that leave the scene
BACKGROUND_COLOR = vec3(0.0, 0.0, 0.0)


@ti.func
def _scatter_object(
    object_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    px: ti.i32,
    py: ti.i32,
):
    """Dispatch to the scattering function of the object's material.

    Returns:
        A tuple of (scattered_direction, attenuation).
    """
    color = object_color(object_id)
    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)

    if object_material(object_id) == MATERIAL_MIRROR:
        scattered_direction, attenuation = scatter_mirror(color, incident_direction, normal)
    else:
        scattered_direction, attenuation = scatter_translucent(
            color, object_clearness(object_id), incident_direction, normal, px, py
        )

    return scattered_direction, attenuation


@ti.func
def trace_radiance(
    origin: vec3,
    direction: vec3,
    max_depth: ti.i32,
    px: ti.i32,
    py: ti.i32,
) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        origin: The starting point of the ray.
        direction: The unit direction of the ray.
        max_depth: Maximum number of bounces. 0 always yields black.
        px, py: Pixel whose random stream is used.

    Returns:
        The radiance (RGB) for this path sample.
    """
    ray_origin = origin
    ray_direction = direction
    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)

    # Taichi doesn't support break in ti.func loops
    active = 1

    for _ in range(max_depth):
        if active == 1:
            record = intersect_scene(ray_origin, ray_direction)

            if record.hit == 0:
                radiance += throughput * BACKGROUND_COLOR
                active = 0
            else:
                hit_point = ray_at(ray_origin, ray_direction, record.t)
                normal = object_normal(record.object_id, hit_point)

                radiance += throughput * object_luminance(record.object_id)

                scattered_direction, attenuation = _scatter_object(
                    record.object_id, ray_direction, normal, px, py
                )
                throughput *= attenuation

                ray_origin = hit_point
                ray_direction = scattered_direction

    return radiance


@ti.kernel
def _trace_samples(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    max_depth: ti.i32,
    num_samples: ti.i32,
) -> vec3:
    """Average num_samples paths along one ray using pixel (0, 0)'s stream."""
    origin = vec3(ox, oy, oz)
    direction = vec3(dx, dy, dz)
    total = vec3(0.0, 0.0, 0.0)

    # All samples share one stream
    ti.loop_config(serialize=True)
    for _ in range(num_samples):
        total += trace_radiance(origin, direction, max_depth, 0, 0)

    return total / ti.cast(num_samples, ti.f32)


def trace_ray(ray: Ray, depth: int, *, num_samples: int = 1, seed: int = 0) -> Color:
    """Trace one ray against the uploaded scene.

    This is a Python-callable entry point for testing and probing a scene.
    For images, use src.lumen.core.renderer which processes all pixels in
    parallel.

    Args:
        ray: The ray to trace.
        depth: Maximum number of bounces.
        num_samples: Number of independent paths to average.
        seed: Seed of the random stream used for the paths.

    Returns:
        The averaged radiance as a Color.

    Raises:
        ValueError: If depth is negative or num_samples is not positive.
    """
    if depth < 0:
        raise ValueError(f"Depth must be non-negative, got {depth}")
    if num_samples < 1:
        raise ValueError(f"num_samples must be at least 1, got {num_samples}")

    seed_streams(seed, 1, 1)
    o = ray.position
    d = ray.direction
    color = _trace_samples(o.x, o.y, o.z, d.x, d.y, d.z, depth, num_samples)
    return Color(float(color[0]), float(color[1]), float(color[2]))
