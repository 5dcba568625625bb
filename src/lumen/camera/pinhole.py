"""Pinhole camera expressed in spherical-angle space.

Instead of projecting pixels through an image plane spanned by basis vectors,
the camera turns its viewing direction by angular offsets proportional to the
pixel's distance from the image center:

    dtheta = -((2x - W) / W) * fov
    dphi   = -((2(H - y - 1) - H) / H) * fov * (H / W)

with y measured from the top row. fov is therefore the horizontal half-angle
in radians, and the vertical half-angle is scaled by the aspect ratio.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.lumen.camera.pinhole import setup_camera, pixel_direction
    >>> setup_camera(config.pov)
    >>> # Use pixel_direction within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.lumen.core.ray import Ray
from src.lumen.core.vector import turn_direction

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

# Camera position
_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Spherical form of the viewing direction
_camera_rho = ti.field(dtype=ti.f32, shape=())
_camera_theta = ti.field(dtype=ti.f32, shape=())
_camera_phi = ti.field(dtype=ti.f32, shape=())


def setup_camera(pov: Ray) -> None:
    """Store the camera ray in the camera fields.

    The spherical form of the direction comes from the Vector3 cache.

    Args:
        pov: The camera ray.
    """
    _camera_origin[None] = pov.position.to_tuple()
    _camera_rho[None] = pov.direction.rho
    _camera_theta[None] = pov.direction.theta
    _camera_phi[None] = pov.direction.phi


def get_camera_angles() -> tuple[float, float]:
    """Get the (theta, phi) of the current viewing direction."""
    return float(_camera_theta[None]), float(_camera_phi[None])


@ti.func
def camera_origin() -> vec3:
    return _camera_origin[None]


@ti.func
def pixel_offsets(x: ti.i32, y: ti.i32, width: ti.i32, height: ti.i32, fov: ti.f32):
    """Angular offsets (dtheta, dphi) of the pixel (x, y), y from the top."""
    xf = ti.cast(x, ti.f32)
    yf = ti.cast(height - y - 1, ti.f32)
    widthf = ti.cast(width, ti.f32)
    heightf = ti.cast(height, ti.f32)

    fov_y = fov * (heightf / widthf)

    dtheta = -((2.0 * xf - widthf) / widthf) * fov
    dphi = -((2.0 * yf - heightf) / heightf) * fov_y
    return dtheta, dphi


@ti.func
def pixel_direction(
    x: ti.i32,
    y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    fov: ti.f32,
    jitter_theta: ti.f32,
    jitter_phi: ti.f32,
) -> vec3:
    """Viewing direction through pixel (x, y), turned further by a jitter.

    Args:
        x: Pixel column (0 = left).
        y: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.
        fov: Horizontal half-angle of view in radians.
        jitter_theta: Extra azimuth offset for this sample.
        jitter_phi: Extra inclination offset for this sample.

    Returns:
        The unit direction of the sample ray.
    """
    dtheta, dphi = pixel_offsets(x, y, width, height, fov)
    return turn_direction(
        _camera_rho[None],
        _camera_theta[None],
        _camera_phi[None],
        dtheta + jitter_theta,
        dphi + jitter_phi,
    )
