"""Triangle primitive with an area-based containment test.

A ray is first intersected with the triangle's supporting plane. The hit point
p is inside the triangle when the three sub-triangles it forms with the edges
add up to the triangle's own area:

    |A(v0, v1, p) + A(v0, v2, p) + A(v1, v2, p) - A(v0, v1, v2)| < EPSILON

Areas come from Heron's formula. The test is tolerance based, so very large or
nearly degenerate triangles can accept points slightly outside their edges or
reject points close to them.
"""

import taichi as ti
import taichi.math as tm

from .plane import Plane, hit_plane
from .sphere import EPSILON, HitRecord

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Triangle:
    """A triangle with its precomputed supporting-plane normal.

    Attributes:
        v0, v1, v2: The vertices (vec3).
        normal: normalize((v1 - v0) x (v2 - v0)), computed on the host.
    """

    v0: vec3
    v1: vec3
    v2: vec3
    normal: vec3


@ti.func
def triangle_area(a, b, c) -> ti.f64:
    """Area of the triangle (a, b, c) by Heron's formula.

    Computed in f64 so that area sums of large triangles stay within EPSILON.
    """
    a64 = ti.cast(a, ti.f64)
    b64 = ti.cast(b, ti.f64)
    c64 = ti.cast(c, ti.f64)
    l1 = tm.length(b64 - a64)
    l2 = tm.length(c64 - a64)
    l3 = tm.length(c64 - b64)
    p = (l1 + l2 + l3) / 2.0
    # Rounding can push the product of a degenerate triangle below zero
    prod = ti.max(p * (p - l1) * (p - l2) * (p - l3), 0.0)
    return ti.sqrt(prod)


@ti.func
def hit_triangle(ray_origin: vec3, ray_direction: vec3, triangle: Triangle) -> HitRecord:
    """Test for ray-triangle intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        triangle: The triangle to test intersection against.

    Returns:
        A HitRecord for the supporting-plane hit if it lies inside the triangle.
    """
    plane = Plane(point=triangle.v0, normal=triangle.normal)
    rec = hit_plane(ray_origin, ray_direction, plane)

    did_hit = 0
    hit_t = 0.0

    if rec.hit == 1:
        point = ti.cast(ray_origin, ti.f64) + ti.cast(rec.t, ti.f64) * ti.cast(ray_direction, ti.f64)
        v0 = ti.cast(triangle.v0, ti.f64)
        v1 = ti.cast(triangle.v1, ti.f64)
        v2 = ti.cast(triangle.v2, ti.f64)
        sub_areas = (
            triangle_area(v0, v1, point)
            + triangle_area(v0, v2, point)
            + triangle_area(v1, v2, point)
        )
        area = triangle_area(v0, v1, v2)
        if ti.abs(sub_areas - area) < EPSILON:
            did_hit = 1
            hit_t = rec.t

    return HitRecord(hit=did_hit, t=hit_t)
