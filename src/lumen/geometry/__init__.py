"""Geometry module for shape primitives.

This module provides the primitives a scene can be built from:

Components:
    sphere: Sphere primitive, HitRecord and the EPSILON hit threshold
    plane: Infinite plane primitive
    triangle: Triangle primitive with an area-based containment test

All intersection routines are implemented as Taichi functions (@ti.func) and
follow the pattern:
    record = hit_shape(ray_origin, ray_direction, shape)

A record only reports hits further than EPSILON along the ray. Normals are
returned with the orientation the shape was built with.
"""

from .plane import Plane, hit_plane
from .sphere import EPSILON, HitRecord, Sphere, hit_sphere, sphere_normal
from .triangle import Triangle, hit_triangle, triangle_area

__all__ = [
    "EPSILON",
    "HitRecord",
    "Sphere",
    "hit_sphere",
    "sphere_normal",
    "Plane",
    "hit_plane",
    "Triangle",
    "hit_triangle",
    "triangle_area",
]
