"""Materials module for surface scattering.

Components:
    mirror: Perfect specular reflection tinted by the object color
    translucent: Per-sample mix of glass (Schlick-weighted reflection and
        refraction) and diffuse (uniform hemisphere) scattering

Every scatter function is a Taichi function returning
(scattered_direction, attenuation); the integrator multiplies the radiance
carried back along the scattered ray by the attenuation.
"""

from .mirror import scatter_mirror
from .translucent import (
    DIFFUSE_NORMALIZATION,
    GLASS_GAIN,
    REFRACTIVE_INDEX,
    scatter_diffuse,
    scatter_glass,
    scatter_translucent,
)

__all__ = [
    "scatter_mirror",
    "scatter_translucent",
    "scatter_glass",
    "scatter_diffuse",
    "REFRACTIVE_INDEX",
    "GLASS_GAIN",
    "DIFFUSE_NORMALIZATION",
]
