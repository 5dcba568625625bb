"""Mirror (perfect specular) material implementation.

The outgoing direction is the reflection of the incoming one,

    R = I - 2(I . N)N

and the object color, divided by 255 per channel, acts as the reflectance
that tints whatever the reflected ray returns.

Example:
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation = scatter_mirror(color, incident_dir, normal)
"""

import taichi as ti
import taichi.math as tm

from src.lumen.core.ray import reflect

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_mirror(color: vec3, incident_direction: vec3, normal: vec3):
    """Compute the scattered ray for a mirror surface.

    Args:
        color: The object color (RGB, 0..255 per channel).
        incident_direction: The incoming ray direction (unit length).
        normal: The shape normal at the hit point (either orientation).

    Returns:
        A tuple of (scattered_direction, attenuation) where:
        - scattered_direction: The reflected direction (normalized).
        - attenuation: color / 255.
    """
    scattered_direction = tm.normalize(reflect(incident_direction, normal))
    attenuation = color / 255.0
    return scattered_direction, attenuation
