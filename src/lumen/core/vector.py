"""3D vector algebra for the host and the Taichi device.

The host-side Vector3 carries its cartesian coordinates together with a cached
spherical form (rho, theta, phi). Both are derived on every construction so
they always agree. The spherical cache is what the camera uses to "turn" a
direction: angles are added to theta/phi and the vector is rebuilt from its
spherical form.

Device-side helpers mirror the operations the integrator needs inside Taichi
kernels (spherical turning, orthonormal bases and hemisphere sampling) and
operate on plain ti.math.vec3 values.

Example:
    >>> from src.lumen.core.vector import Vector3
    >>> v = Vector3(0.0, 0.0, 2.0)
    >>> v.size()
    2.0
    >>> v.normalize().z
    1.0
"""

import math
from collections.abc import Iterator

import numpy as np
import taichi as ti
import taichi.math as tm

from src.lumen.core.sampler import uniform

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Tolerance for treating a magnitude as exactly one
UNIT_TOLERANCE = 1e-12


class Vector3:
    """A 3D vector with a cached spherical representation.

    Attributes:
        x, y, z: Cartesian coordinates.
        rho: Magnitude.
        theta: Azimuth, atan2(y, x).
        phi: Inclination from +z, acos(z / rho). Zero for the zero vector.
    """

    __slots__ = ("x", "y", "z", "rho", "theta", "phi")

    def __init__(self, x: float, y: float, z: float) -> None:
        self.x = float(x)
        self.y = float(y)
        self.z = float(z)
        self.rho = math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)
        self.theta = math.atan2(self.y, self.x)
        if self.rho == 0.0:
            self.phi = 0.0
        else:
            self.phi = math.acos(max(-1.0, min(1.0, self.z / self.rho)))

    @classmethod
    def from_spherical(cls, rho: float, theta: float, phi: float) -> "Vector3":
        """Build a vector from spherical coordinates.

        The given angles are kept in the cache as-is (they are not wrapped),
        so successive turns accumulate exactly.
        """
        vector = cls.__new__(cls)
        vector.x = rho * math.cos(theta) * math.sin(phi)
        vector.y = rho * math.sin(theta) * math.sin(phi)
        vector.z = rho * math.cos(phi)
        vector.rho = float(rho)
        vector.theta = float(theta)
        vector.phi = float(phi)
        return vector

    @classmethod
    def sample_cosine_hemisphere(cls, rng: np.random.Generator) -> "Vector3":
        """Sample a cosine-weighted direction around +z.

        Projects a uniform point of the unit disc up onto the hemisphere, so
        the density is proportional to cos(theta).
        """
        u1, u2 = rng.random(2)
        r = math.sqrt(u1)
        azimuth = 2.0 * math.pi * u2
        return cls(r * math.cos(azimuth), r * math.sin(azimuth), math.sqrt(1.0 - u1)).normalize()

    @classmethod
    def sample_uniform_hemisphere(cls, rng: np.random.Generator) -> "Vector3":
        """Sample a direction uniformly over the hemisphere around +z."""
        u1, u2 = rng.random(2)
        r = math.sqrt(max(0.0, 1.0 - u1 * u1))
        azimuth = 2.0 * math.pi * u2
        return cls(r * math.cos(azimuth), r * math.sin(azimuth), u1)

    def __add__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x * other.x, self.y * other.y, self.z * other.z)

    def __truediv__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x / other.x, self.y / other.y, self.z / other.z)

    def __neg__(self) -> "Vector3":
        return Vector3(-self.x, -self.y, -self.z)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector3):
            return NotImplemented
        return (self.x, self.y, self.z) == (other.x, other.y, other.z)

    def __hash__(self) -> int:
        return hash((self.x, self.y, self.z))

    def __iter__(self) -> Iterator[float]:
        return iter((self.x, self.y, self.z))

    def __repr__(self) -> str:
        return f"Vector3({self.x!r}, {self.y!r}, {self.z!r})"

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def dot(self, other: "Vector3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vector3") -> "Vector3":
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def scale(self, factor: float) -> "Vector3":
        return Vector3(self.x * factor, self.y * factor, self.z * factor)

    def size(self) -> float:
        return self.rho

    def normalize(self) -> "Vector3":
        """Return the unit vector in the same direction.

        Returns self when the vector is already unit length.

        Raises:
            ValueError: If the vector has zero length.
        """
        if abs(self.rho - 1.0) <= UNIT_TOLERANCE:
            return self
        if self.rho == 0.0:
            raise ValueError("Tried to normalize zero vector.")
        return self.scale(1.0 / self.rho)

    def shift(self, dx: float, dy: float, dz: float) -> "Vector3":
        return Vector3(self.x + dx, self.y + dy, self.z + dz)

    def turn(self, dtheta: float, dphi: float) -> "Vector3":
        """Rotate by adding deltas to the cached spherical angles.

        This is the camera "look" operation. It couples the axes and is only
        meaningful for direction vectors, not positions.
        """
        return Vector3.from_spherical(self.rho, self.theta + dtheta, self.phi + dphi)

    def ons(self) -> "tuple[Vector3, Vector3]":
        """Build two unit vectors that complete an orthonormal basis with self.

        The first basis vector is taken in the y = 0 plane when |x| > |y| and
        in the x = 0 plane otherwise, which keeps the projection away from the
        degenerate case.
        """
        if abs(self.x) > abs(self.y):
            inv_len = 1.0 / math.sqrt(self.x * self.x + self.z * self.z)
            v2 = Vector3(-self.z * inv_len, 0.0, self.x * inv_len)
        else:
            inv_len = 1.0 / math.sqrt(self.y * self.y + self.z * self.z)
            v2 = Vector3(0.0, self.z * inv_len, -self.y * inv_len)
        return v2, self.cross(v2)


# Colors reuse the vector type over 0..255 per channel
Color = Vector3

BLACK = Color(0.0, 0.0, 0.0)
WHITE = Color(255.0, 255.0, 255.0)
RED = Color(255.0, 0.0, 0.0)
GREEN = Color(0.0, 255.0, 0.0)
BLUE = Color(0.0, 0.0, 255.0)
YELLOW = Color(255.0, 255.0, 0.0)

NAMED_COLORS: dict[str, Color] = {
    "black": BLACK,
    "white": WHITE,
    "red": RED,
    "green": GREEN,
    "blue": BLUE,
    "yellow": YELLOW,
}


# =============================================================================
# Device Functions
# =============================================================================


@ti.func
def from_spherical(rho: ti.f32, theta: ti.f32, phi: ti.f32) -> vec3:
    """Convert spherical coordinates to a cartesian vector."""
    return vec3(
        rho * ti.cos(theta) * ti.sin(phi),
        rho * ti.sin(theta) * ti.sin(phi),
        rho * ti.cos(phi),
    )


@ti.func
def turn_direction(
    rho: ti.f32,
    theta: ti.f32,
    phi: ti.f32,
    dtheta: ti.f32,
    dphi: ti.f32,
) -> vec3:
    """Turn a direction given in spherical form by (dtheta, dphi)."""
    return from_spherical(rho, theta + dtheta, phi + dphi)


@ti.func
def ons(v: vec3):
    """Device version of Vector3.ons().

    Args:
        v: A unit vector.

    Returns:
        A tuple (v2, v3) such that (v2, v3, v) is orthonormal.
    """
    v2 = vec3(0.0, 0.0, 0.0)
    if ti.abs(v.x) > ti.abs(v.y):
        inv_len = 1.0 / ti.sqrt(v.x * v.x + v.z * v.z)
        v2 = vec3(-v.z * inv_len, 0.0, v.x * inv_len)
    else:
        inv_len = 1.0 / ti.sqrt(v.y * v.y + v.z * v.z)
        v2 = vec3(0.0, v.z * inv_len, -v.y * inv_len)
    v3 = tm.cross(v, v2)
    return v2, v3


@ti.func
def local_to_world(local_dir: vec3, v2: vec3, v3: vec3, normal: vec3) -> vec3:
    """Transform a direction from a z-up local frame to world coordinates."""
    return local_dir.x * v2 + local_dir.y * v3 + local_dir.z * normal


@ti.func
def random_uniform_direction(px: ti.i32, py: ti.i32) -> vec3:
    """Uniform direction over the hemisphere around +z from pixel (px, py)'s stream."""
    u1 = uniform(px, py)
    u2 = uniform(px, py)
    r = ti.sqrt(ti.max(0.0, 1.0 - u1 * u1))
    azimuth = 2.0 * tm.pi * u2
    return vec3(r * ti.cos(azimuth), r * ti.sin(azimuth), u1)


@ti.func
def random_cosine_direction(px: ti.i32, py: ti.i32) -> vec3:
    """Cosine-weighted direction around +z from pixel (px, py)'s stream."""
    u1 = uniform(px, py)
    u2 = uniform(px, py)
    r = ti.sqrt(u1)
    azimuth = 2.0 * tm.pi * u2
    return tm.normalize(vec3(r * ti.cos(azimuth), r * ti.sin(azimuth), ti.sqrt(1.0 - u1)))
