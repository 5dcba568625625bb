"""Host-side scene description types.

A scene is an immutable tuple of SceneObjects, each pairing a shape with a
base color, an emitted luminance and a material. A RenderConfig bundles the
scene with the camera and sampling parameters for one render generation.

These types are plain Python data: they are built by the parser (or by hand)
and uploaded to Taichi fields by src.lumen.scene.intersection.upload_scene().

Example:
    >>> from src.lumen.core.vector import WHITE, Vector3
    >>> from src.lumen.scene.objects import OPAQUE, SceneObject, SphereShape
    >>> ball = SceneObject(
    ...     shape=SphereShape(center=Vector3(0, 0, 5), radius=1.0),
    ...     color=WHITE,
    ...     luminance=Vector3(0, 0, 0),
    ...     material=OPAQUE,
    ... )
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Union

from src.lumen.core.ray import Ray
from src.lumen.core.vector import Color, Vector3

# =============================================================================
# Shapes
# =============================================================================


@dataclass(frozen=True)
class SphereShape:
    """A sphere.

    Attributes:
        center: Center point of the sphere.
        radius: Radius of the sphere (must be positive).
    """

    center: Vector3
    radius: float

    def __post_init__(self) -> None:
        if not self.radius > 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")


@dataclass(frozen=True)
class PlaneShape:
    """An infinite plane.

    Attributes:
        point: Any point on the plane.
        normal: Plane normal, normalized on construction.
    """

    point: Vector3
    normal: Vector3

    def __post_init__(self) -> None:
        object.__setattr__(self, "normal", self.normal.normalize())


@dataclass(frozen=True)
class TriangleShape:
    """A triangle given by its three vertices.

    Attributes:
        v1, v2, v3: The vertices.
        plane: Supporting plane through v1 with normal (v2 - v1) x (v3 - v1).
            Derived on construction.

    Raises:
        ValueError: If the vertices are collinear.
    """

    v1: Vector3
    v2: Vector3
    v3: Vector3
    plane: PlaneShape = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        normal = (self.v2 - self.v1).cross(self.v3 - self.v1)
        object.__setattr__(self, "plane", PlaneShape(point=self.v1, normal=normal))

    @property
    def vertices(self) -> tuple[Vector3, Vector3, Vector3]:
        return (self.v1, self.v2, self.v3)

    def area(self) -> float:
        """Area of the triangle by Heron's formula."""
        l1 = (self.v2 - self.v1).size()
        l2 = (self.v3 - self.v1).size()
        l3 = (self.v3 - self.v2).size()
        p = (l1 + l2 + l3) / 2.0
        return math.sqrt(max(p * (p - l1) * (p - l2) * (p - l3), 0.0))


Shape = Union[SphereShape, PlaneShape, TriangleShape]


# =============================================================================
# Materials
# =============================================================================


@dataclass(frozen=True)
class Mirror:
    """Perfect specular reflector; the object color acts as reflectance."""


@dataclass(frozen=True)
class Translucent:
    """Stochastic mix of glass and diffuse behavior.

    Attributes:
        clearness: Probability in [0, 1] of taking the glass branch for a
            sample. 1 behaves as glass, 0 as an opaque diffuse surface.
    """

    clearness: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.clearness <= 1.0:
            raise ValueError(f"Clearness = {self.clearness} is outside [0, 1]")


Material = Union[Mirror, Translucent]

MIRROR = Mirror()
GLASS = Translucent(1.0)
OPAQUE = Translucent(0.0)


# =============================================================================
# Objects and render configuration
# =============================================================================


@dataclass(frozen=True)
class SceneObject:
    """A shape with its surface properties.

    Attributes:
        shape: The geometry.
        color: Base color, 0..255 per channel.
        luminance: Emitted luminance, added every time a path hits the object.
        material: Scattering behavior.
    """

    shape: Shape
    color: Color
    luminance: Color
    material: Material


@dataclass(frozen=True)
class RenderConfig:
    """Everything needed to render one scene generation.

    Attributes:
        pov: Camera ray (position and viewing direction).
        width: Image width in pixels.
        height: Image height in pixels.
        fov: Horizontal half-angle of view, in radians.
        max_depth: Maximum number of bounces per path.
        num_tries: Samples per pixel per frame.
        max_variation: Maximum per-sample angular jitter, in radians.
        objects: The scene, in scan order.
    """

    pov: Ray
    width: int
    height: int
    fov: float
    max_depth: int
    num_tries: int
    max_variation: float
    objects: tuple[SceneObject, ...] = ()
