"""Scene-level storage and ray intersection.

Scene objects are uploaded into Taichi fields in a Structure-of-Arrays layout.
Every object occupies one slot tagged with its ShapeKind and MaterialKind, so
a single linear scan over the slots visits the objects in the order they were
given. There is no acceleration structure; scenes are expected to be small.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.lumen.scene.intersection import upload_scene, intersect_scene
    >>> upload_scene(config.objects)
    >>> # Use intersect_scene within a Taichi kernel
"""

from collections.abc import Sequence
from enum import IntEnum

import taichi as ti
import taichi.math as tm

from src.lumen.geometry.plane import Plane, hit_plane
from src.lumen.geometry.sphere import HitRecord, Sphere, hit_sphere, sphere_normal
from src.lumen.geometry.triangle import Triangle, hit_triangle
from src.lumen.scene.objects import (
    Mirror,
    PlaneShape,
    SceneObject,
    SphereShape,
    Translucent,
    TriangleShape,
)

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


class ShapeKind(IntEnum):
    """Tag of the shape stored in an object slot."""

    SPHERE = 0
    PLANE = 1
    TRIANGLE = 2


class MaterialKind(IntEnum):
    """Tag of the material stored in an object slot."""

    MIRROR = 0
    TRANSLUCENT = 1


# Plain ints for comparisons inside Taichi functions
SHAPE_SPHERE = int(ShapeKind.SPHERE)
SHAPE_PLANE = int(ShapeKind.PLANE)
SHAPE_TRIANGLE = int(ShapeKind.TRIANGLE)
MATERIAL_MIRROR = int(MaterialKind.MIRROR)
MATERIAL_TRANSLUCENT = int(MaterialKind.TRANSLUCENT)


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection.

    Attributes:
        hit: 1 if any object was hit, 0 on a miss.
        t: Distance to the closest hit. Only valid if hit == 1.
        object_id: Slot of the closest object. -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    object_id: ti.i32


# Maximum number of objects supported in the scene
MAX_OBJECTS = 1024

# Distance used as "no hit yet" during the scan
T_MAX = 1e10

# Shape storage. shape_points holds the sphere center, the plane point or the
# three triangle vertices; shape_normals holds plane/triangle normals.
shape_kinds = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
shape_points = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_OBJECTS, 3))
shape_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
shape_radii = ti.field(dtype=ti.f32, shape=MAX_OBJECTS)

# Surface properties
object_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_luminances = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
material_kinds = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
material_clearness = ti.field(dtype=ti.f32, shape=MAX_OBJECTS)

num_objects = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all objects from the scene.

    Resets the object count to zero. Field data is overwritten by the next
    upload.
    """
    num_objects[None] = 0


def get_object_count() -> int:
    """Get the number of objects in the scene."""
    return int(num_objects[None])


def _store_shape(idx: int, shape: SphereShape | PlaneShape | TriangleShape) -> None:
    if isinstance(shape, SphereShape):
        shape_kinds[idx] = int(ShapeKind.SPHERE)
        shape_points[idx, 0] = shape.center.to_tuple()
        shape_radii[idx] = shape.radius
    elif isinstance(shape, PlaneShape):
        shape_kinds[idx] = int(ShapeKind.PLANE)
        shape_points[idx, 0] = shape.point.to_tuple()
        shape_normals[idx] = shape.normal.to_tuple()
    elif isinstance(shape, TriangleShape):
        shape_kinds[idx] = int(ShapeKind.TRIANGLE)
        for k, vertex in enumerate(shape.vertices):
            shape_points[idx, k] = vertex.to_tuple()
        shape_normals[idx] = shape.plane.normal.to_tuple()
    else:
        raise TypeError(f"Unsupported shape: {shape!r}")


def _store_material(idx: int, material: Mirror | Translucent) -> None:
    if isinstance(material, Mirror):
        material_kinds[idx] = int(MaterialKind.MIRROR)
        material_clearness[idx] = 0.0
    elif isinstance(material, Translucent):
        material_kinds[idx] = int(MaterialKind.TRANSLUCENT)
        material_clearness[idx] = material.clearness
    else:
        raise TypeError(f"Unsupported material: {material!r}")


def upload_scene(objects: Sequence[SceneObject]) -> None:
    """Replace the scene with the given objects.

    Args:
        objects: The scene objects, in scan order.

    Raises:
        RuntimeError: If the maximum number of objects is exceeded.
        TypeError: If an object has an unknown shape or material.
    """
    if len(objects) > MAX_OBJECTS:
        raise RuntimeError(f"Maximum number of objects ({MAX_OBJECTS}) exceeded")

    clear_scene()
    for idx, obj in enumerate(objects):
        _store_shape(idx, obj.shape)
        _store_material(idx, obj.material)
        object_colors[idx] = obj.color.to_tuple()
        object_luminances[idx] = obj.luminance.to_tuple()
    num_objects[None] = len(objects)


@ti.func
def intersect_object(object_id: ti.i32, ray_origin: vec3, ray_direction: vec3) -> HitRecord:
    """Intersect a ray with the object stored in a slot."""
    kind = shape_kinds[object_id]
    rec = HitRecord(hit=0, t=0.0)

    if kind == SHAPE_SPHERE:
        sphere = Sphere(center=shape_points[object_id, 0], radius=shape_radii[object_id])
        rec = hit_sphere(ray_origin, ray_direction, sphere)
    elif kind == SHAPE_PLANE:
        plane = Plane(point=shape_points[object_id, 0], normal=shape_normals[object_id])
        rec = hit_plane(ray_origin, ray_direction, plane)
    else:
        triangle = Triangle(
            v0=shape_points[object_id, 0],
            v1=shape_points[object_id, 1],
            v2=shape_points[object_id, 2],
            normal=shape_normals[object_id],
        )
        rec = hit_triangle(ray_origin, ray_direction, triangle)

    return rec


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Find the closest object hit by a ray.

    Scans all objects in slot order and keeps the smallest distance. The
    comparison is strict, so among equally distant hits the first object
    scanned wins.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.

    Returns:
        A SceneHitRecord for the closest hit, or a miss record.
    """
    closest_t = T_MAX
    result = SceneHitRecord(hit=0, t=0.0, object_id=-1)

    for i in range(num_objects[None]):
        rec = intersect_object(i, ray_origin, ray_direction)
        if rec.hit == 1 and rec.t < closest_t:
            closest_t = rec.t
            result = SceneHitRecord(hit=1, t=rec.t, object_id=i)

    return result


@ti.func
def object_normal(object_id: ti.i32, point: vec3) -> vec3:
    """Shape normal of an object at a point on its surface.

    Orientation is whatever the shape was built with; spheres face outward.
    """
    normal = shape_normals[object_id]
    if shape_kinds[object_id] == SHAPE_SPHERE:
        sphere = Sphere(center=shape_points[object_id, 0], radius=shape_radii[object_id])
        normal = sphere_normal(sphere, point)
    return normal


@ti.func
def object_color(object_id: ti.i32) -> vec3:
    return object_colors[object_id]


@ti.func
def object_luminance(object_id: ti.i32) -> vec3:
    return object_luminances[object_id]


@ti.func
def object_material(object_id: ti.i32) -> ti.i32:
    return material_kinds[object_id]


@ti.func
def object_clearness(object_id: ti.i32) -> ti.f32:
    return material_clearness[object_id]
