"""Infinite plane primitive with ray-plane intersection.

A plane is stored as a point on the plane and a unit normal. The ray hits the
plane at

    t = n.(p0 - o) / n.d

which is rejected when the ray is parallel to the plane or when the plane lies
behind (or within EPSILON of) the ray origin. The normal keeps the orientation
it was given; the integrator decides which side faces the ray.
"""

import taichi as ti
import taichi.math as tm

from .sphere import EPSILON, HitRecord

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Plane:
    """An infinite plane.

    Attributes:
        point: Any point on the plane (vec3).
        normal: The unit normal of the plane (vec3).
    """

    point: vec3
    normal: vec3


@ti.func
def hit_plane(ray_origin: vec3, ray_direction: vec3, plane: Plane) -> HitRecord:
    """Test for ray-plane intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        plane: The plane to test intersection against.

    Returns:
        A HitRecord; hit is 0 if the plane is parallel to or behind the ray.
    """
    denom = tm.dot(plane.normal, ray_direction)

    did_hit = 0
    hit_t = 0.0

    if denom != 0.0:
        t = tm.dot(plane.normal, plane.point - ray_origin) / denom
        if t > EPSILON:
            did_hit = 1
            hit_t = t

    return HitRecord(hit=did_hit, t=hit_t)
