"""Translucent material: a per-sample mix of glass and diffuse scattering.

A translucent surface has a clearness in [0, 1]. For each sample one uniform
draw decides the branch: below the clearness the surface behaves as glass,
otherwise as an opaque diffuse surface.

Glass branch:
    - Fixed relative refractive index 1.5 and Schlick's approximation
      r = r0 + (1 - r0)(1 - cos1)^5 for the reflection probability.
    - Total internal reflection always reflects.
    - The returned light is scaled by GLASS_GAIN = 1.15 / 0.9.

Diffuse branch:
    - The normal is turned to face the incoming ray.
    - The new direction is drawn uniformly over that hemisphere.
    - The returned light is scaled by color * cos / 255 / DIFFUSE_NORMALIZATION.

GLASS_GAIN and DIFFUSE_NORMALIZATION are empirical constants of the light
transport model, not derived from physical units.
"""

import taichi as ti
import taichi.math as tm

from src.lumen.core.sampler import uniform
from src.lumen.core.vector import local_to_world, ons, random_uniform_direction

# Type alias for 3D vectors
vec3 = tm.vec3

# Relative refractive index of glass
REFRACTIVE_INDEX = 1.5

# Energy compensation applied to light passing through the glass branch
GLASS_GAIN = 1.15 / 0.9

# Normalization of the diffuse branch
DIFFUSE_NORMALIZATION = 0.9


@ti.func
def scatter_glass(incident_direction: vec3, normal: vec3, px: ti.i32, py: ti.i32):
    """Reflect or refract through a glass interface.

    Args:
        incident_direction: The incoming ray direction (unit length).
        normal: The shape normal at the hit point (either orientation).
        px, py: Pixel whose random stream is used.

    Returns:
        A tuple of (scattered_direction, attenuation).
    """
    r0 = (1.0 - REFRACTIVE_INDEX) / (1.0 + REFRACTIVE_INDEX)
    r0 = r0 * r0

    # Entering from outside: n1/n2 = 1/ior. Leaving: flip the normal, ior/1.
    n = normal
    ratio = 1.0 / REFRACTIVE_INDEX
    if tm.dot(n, incident_direction) > 0.0:
        n = -normal
        ratio = REFRACTIVE_INDEX

    cos1 = -tm.dot(n, incident_direction)
    cos2_sq = 1.0 - ratio * ratio * (1.0 - cos1 * cos1)

    # Reflection unless the Fresnel draw picks refraction
    scattered_direction = incident_direction + n * (2.0 * cos1)
    if cos2_sq > 0.0:
        reflect_prob = r0 + (1.0 - r0) * (1.0 - cos1) ** 5
        if uniform(px, py) > reflect_prob:
            scattered_direction = ratio * incident_direction + n * (ratio * cos1 - ti.sqrt(cos2_sq))

    attenuation = vec3(GLASS_GAIN, GLASS_GAIN, GLASS_GAIN)
    return tm.normalize(scattered_direction), attenuation


@ti.func
def scatter_diffuse(color: vec3, incident_direction: vec3, normal: vec3, px: ti.i32, py: ti.i32):
    """Scatter uniformly over the hemisphere facing the incoming ray.

    Args:
        color: The object color (RGB, 0..255 per channel).
        incident_direction: The incoming ray direction (unit length).
        normal: The shape normal at the hit point (either orientation).
        px, py: Pixel whose random stream is used.

    Returns:
        A tuple of (scattered_direction, attenuation).
    """
    n = normal
    if tm.dot(incident_direction, normal) >= 0.0:
        n = -normal

    v2, v3 = ons(n)
    local_dir = random_uniform_direction(px, py)
    scattered_direction = tm.normalize(local_to_world(local_dir, v2, v3, n))

    cos_theta = tm.dot(scattered_direction, n)
    attenuation = color * cos_theta / 255.0 / DIFFUSE_NORMALIZATION
    return scattered_direction, attenuation


@ti.func
def scatter_translucent(
    color: vec3,
    clearness: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    px: ti.i32,
    py: ti.i32,
):
    """Pick the glass or the diffuse branch and scatter.

    Args:
        color: The object color (RGB, 0..255 per channel).
        clearness: Probability of the glass branch.
        incident_direction: The incoming ray direction (unit length).
        normal: The shape normal at the hit point (either orientation).
        px, py: Pixel whose random stream is used.

    Returns:
        A tuple of (scattered_direction, attenuation).
    """
    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    if uniform(px, py) < clearness:
        scattered_direction, attenuation = scatter_glass(incident_direction, normal, px, py)
    else:
        scattered_direction, attenuation = scatter_diffuse(
            color, incident_direction, normal, px, py
        )
    return scattered_direction, attenuation
