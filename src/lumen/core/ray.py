"""Ray type and ray helpers for the host and the Taichi device.

A host-side Ray pairs a position with a direction that is normalized when the
ray is built; no other code is allowed to assume or re-establish that. Device
code carries rays as a (origin, direction) pair of ti.math.vec3 values.

Example:
    >>> from src.lumen.core.ray import Ray
    >>> from src.lumen.core.vector import Vector3
    >>> ray = Ray(Vector3(0.0, 0.0, 0.0), Vector3(0.0, 0.0, 2.0))
    >>> ray.direction.z
    1.0
    >>> ray.get_point(4.0).z
    4.0
"""

import taichi as ti
import taichi.math as tm

from src.lumen.core.vector import Vector3

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


class Ray:
    """A ray with a position and a unit direction.

    Attributes:
        position: The starting point of the ray.
        direction: The unit direction of the ray.

    Raises:
        ValueError: If the direction is the zero vector.
    """

    __slots__ = ("position", "direction")

    def __init__(self, position: Vector3, direction: Vector3) -> None:
        self.position = position
        self.direction = direction.normalize()

    def __repr__(self) -> str:
        return f"Ray(position={self.position!r}, direction={self.direction!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ray):
            return NotImplemented
        return self.position == other.position and self.direction == other.direction

    def __hash__(self) -> int:
        return hash((self.position, self.direction))

    def shift(self, dx: float, dy: float, dz: float) -> "Ray":
        """Return the ray moved by (dx, dy, dz), keeping its direction."""
        return Ray(self.position.shift(dx, dy, dz), self.direction)

    def turn(self, dtheta: float, dphi: float) -> "Ray":
        """Return the ray with its direction turned by spherical deltas."""
        return Ray(self.position, self.direction.turn(dtheta, dphi))

    def get_point(self, t: float) -> Vector3:
        """Return the point at distance t along the ray."""
        return self.position + self.direction.scale(t)


@ti.func
def ray_at(origin: vec3, direction: vec3, t: ti.f32) -> vec3:
    """Compute the point origin + t * direction."""
    return origin + t * direction


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident direction about a unit normal.

    The normal may face either side of the surface.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal
