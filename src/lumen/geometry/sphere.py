"""Sphere primitive with ray-sphere intersection.

The intersection solves |o + t*d - c| = r for a unit direction d, which gives
the monic quadratic

    t^2 + b*t + c' = 0,   b = 2 * d.(o - c),   c' = |o - c|^2 - r^2

The nearer root is preferred; the farther root is used when the ray starts
inside the sphere. Roots at or behind EPSILON are rejected so that a ray
spawned on the surface does not hit the surface it left.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.lumen.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, 5), radius=1.0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Minimum accepted hit distance, suppresses self-intersection
EPSILON = 1e-4


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Result of a ray-shape intersection test.

    Attributes:
        hit: 1 if the ray hit the shape, 0 otherwise.
        t: Distance along the ray to the hit. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32


@ti.func
def hit_sphere(ray_origin: vec3, ray_direction: vec3, sphere: Sphere) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        sphere: The sphere to test intersection against.

    Returns:
        A HitRecord with the closest distance greater than EPSILON.
    """
    oc = ray_origin - sphere.center
    b = 2.0 * tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = b * b - 4.0 * c

    did_hit = 0
    hit_t = 0.0

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t_near = (-b - sqrt_d) / 2.0
        t_far = (-b + sqrt_d) / 2.0
        if t_near > EPSILON:
            did_hit = 1
            hit_t = t_near
        elif t_far > EPSILON:
            did_hit = 1
            hit_t = t_far

    return HitRecord(hit=did_hit, t=hit_t)


@ti.func
def sphere_normal(sphere: Sphere, point: vec3) -> vec3:
    """Outward unit normal of a sphere at a point on its surface."""
    return (point - sphere.center) / sphere.radius
