"""Scene description parser.

A scene description is plain text, one item per line. Blank lines and lines
starting with ``//`` are skipped. The first seven remaining lines form a fixed
header; every line after that describes one object:

    0 0 0                       camera position
    1 0 0                       camera direction
    320 240                     width height
    0.6                         fov (radians)
    5 16                        max_depth num_tries
    0.002                       max_variation (radians)
    1 1                         col_scale lum_scale
    white 0 opaque sphere 5 0 0 1
    white 1 opaque plane 0 0 -2 0 0 1
    red 0 translucent 0.5 triangle 4 -1 0 4 1 0 4 0 1

An object line is ``<color> <luminance_factor> <material> <shape...>``. The
object color is the named base color times col_scale; its luminance is the
base color times luminance_factor times lum_scale.

Every problem is reported as a SceneError subclass carrying the 1-based line
number and the text of the offending line.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator

from src.lumen.core.ray import Ray
from src.lumen.core.vector import NAMED_COLORS, Vector3
from src.lumen.scene.objects import (
    GLASS,
    MIRROR,
    OPAQUE,
    Material,
    PlaneShape,
    RenderConfig,
    SceneObject,
    Shape,
    SphereShape,
    Translucent,
    TriangleShape,
)

COMMENT_PREFIX = "//"

HEADER_LINES = 7


class SceneError(Exception):
    """A scene description could not be parsed.

    Attributes:
        line_number: 1-based number of the offending line, or None when the
            problem is not tied to a line.
        line: Text of the offending line, or None.
    """

    def __init__(self, message: str, line_number: int | None = None, line: str | None = None) -> None:
        self.message = message
        self.line_number = line_number
        self.line = line
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.line_number is None:
            return self.message
        return f"line {self.line_number}: {self.message}: {self.line!r}"


class NotEnoughLinesError(SceneError):
    """The header ended before all of its lines were read."""


class InvalidLineError(SceneError):
    """A header line has the wrong number of values or a bad value."""


class InvalidObjectError(SceneError):
    """An object line has a bad color, luminance factor or material."""


class InvalidShapeError(SceneError):
    """An object line has an unknown or malformed shape."""


def _content_lines(text: str) -> Iterator[tuple[int, str]]:
    """Yield (line_number, stripped_line) for every non-blank, non-comment line."""
    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if line and not line.startswith(COMMENT_PREFIX):
            yield number, line


def _parse_numbers(
    tokens: list[str],
    count: int,
    convert: Callable[[str], float],
    error: type[SceneError],
    what: str,
    line_number: int,
    line: str,
) -> list:
    if len(tokens) != count:
        raise error(f"expected {count} values for {what}, got {len(tokens)}", line_number, line)
    try:
        return [convert(token) for token in tokens]
    except ValueError:
        raise error(f"malformed number in {what}", line_number, line) from None


class _HeaderReader:
    """Reads the fixed header lines in order."""

    def __init__(self, lines: Iterator[tuple[int, str]]) -> None:
        self._lines = lines
        self._read = 0

    def numbers(self, count: int, convert: Callable[[str], float], what: str) -> tuple[list, int, str]:
        try:
            line_number, line = next(self._lines)
        except StopIteration:
            raise NotEnoughLinesError(
                f"scene header needs {HEADER_LINES} lines, found {self._read} (missing {what})"
            ) from None
        self._read += 1
        values = _parse_numbers(line.split(), count, convert, InvalidLineError, what, line_number, line)
        return values, line_number, line


def _parse_shape(tokens: list[str], line_number: int, line: str) -> Shape:
    if not tokens:
        raise InvalidShapeError("missing shape", line_number, line)

    name, args = tokens[0], tokens[1:]
    try:
        if name == "sphere":
            cx, cy, cz, r = _parse_numbers(args, 4, float, InvalidShapeError, "sphere", line_number, line)
            return SphereShape(center=Vector3(cx, cy, cz), radius=r)
        if name == "plane":
            px, py, pz, nx, ny, nz = _parse_numbers(
                args, 6, float, InvalidShapeError, "plane", line_number, line
            )
            return PlaneShape(point=Vector3(px, py, pz), normal=Vector3(nx, ny, nz))
        if name == "triangle":
            c = _parse_numbers(args, 9, float, InvalidShapeError, "triangle", line_number, line)
            return TriangleShape(
                v1=Vector3(c[0], c[1], c[2]),
                v2=Vector3(c[3], c[4], c[5]),
                v3=Vector3(c[6], c[7], c[8]),
            )
    except ValueError as e:
        # Degenerate geometry: non-positive radius, zero normal, collinear vertices
        raise InvalidShapeError(f"invalid {name}: {e}", line_number, line) from e

    raise InvalidShapeError(f"unknown shape {name!r}", line_number, line)


def _parse_material(tokens: list[str], line_number: int, line: str) -> tuple[Material, list[str]]:
    """Parse the material keyword and return it with the remaining tokens."""
    if not tokens:
        raise InvalidObjectError("missing material", line_number, line)

    name, rest = tokens[0], tokens[1:]
    if name == "mirror":
        return MIRROR, rest
    if name == "glass":
        return GLASS, rest
    if name == "opaque":
        return OPAQUE, rest
    if name == "translucent":
        if not rest:
            raise InvalidObjectError("missing clearness", line_number, line)
        try:
            return Translucent(float(rest[0])), rest[1:]
        except ValueError:
            raise InvalidObjectError(f"invalid clearness {rest[0]!r}", line_number, line) from None

    raise InvalidObjectError(f"unknown material {name!r}", line_number, line)


def parse_object(line: str, line_number: int, col_scale: float, lum_scale: float) -> SceneObject:
    """Parse one object line.

    Args:
        line: The object line.
        line_number: 1-based line number, for error reporting.
        col_scale: Factor applied to the base color.
        lum_scale: Factor applied to the luminance.

    Raises:
        InvalidObjectError: On a bad color, luminance factor or material.
        InvalidShapeError: On an unknown or malformed shape.
    """
    tokens = line.split()
    if len(tokens) < 2:
        raise InvalidObjectError("expected color and luminance factor", line_number, line)

    base = NAMED_COLORS.get(tokens[0])
    if base is None:
        raise InvalidObjectError(f"unknown color {tokens[0]!r}", line_number, line)

    try:
        luminance_factor = float(tokens[1])
    except ValueError:
        raise InvalidObjectError(f"invalid luminance factor {tokens[1]!r}", line_number, line) from None

    material, shape_tokens = _parse_material(tokens[2:], line_number, line)
    shape = _parse_shape(shape_tokens, line_number, line)

    return SceneObject(
        shape=shape,
        color=base.scale(col_scale),
        luminance=base.scale(luminance_factor * lum_scale),
        material=material,
    )


def parse_scene(text: str) -> RenderConfig:
    """Parse a scene description.

    Args:
        text: The full scene description.

    Returns:
        The RenderConfig of the described scene.

    Raises:
        SceneError: If the description is incomplete or malformed.
    """
    lines = _content_lines(text)
    header = _HeaderReader(lines)

    (px, py, pz), _, _ = header.numbers(3, float, "camera position")
    (dx, dy, dz), dir_number, dir_line = header.numbers(3, float, "camera direction")
    direction = Vector3(dx, dy, dz)
    if direction.size() == 0.0:
        raise InvalidLineError("camera direction must be non-zero", dir_number, dir_line)
    pov = Ray(Vector3(px, py, pz), direction)

    (width, height), size_number, size_line = header.numbers(2, int, "width and height")
    if width < 1 or height < 1:
        raise InvalidLineError("width and height must be positive", size_number, size_line)

    (fov,), _, _ = header.numbers(1, float, "fov")

    (max_depth, num_tries), depth_number, depth_line = header.numbers(2, int, "max_depth and num_tries")
    if max_depth < 0:
        raise InvalidLineError("max_depth must be non-negative", depth_number, depth_line)
    if num_tries < 1:
        raise InvalidLineError("num_tries must be at least 1", depth_number, depth_line)

    (max_variation,), _, _ = header.numbers(1, float, "max_variation")
    (col_scale, lum_scale), _, _ = header.numbers(2, float, "col_scale and lum_scale")

    objects = tuple(parse_object(line, number, col_scale, lum_scale) for number, line in lines)

    return RenderConfig(
        pov=pov,
        width=width,
        height=height,
        fov=fov,
        max_depth=max_depth,
        num_tries=num_tries,
        max_variation=max_variation,
        objects=objects,
    )


def read_scene(path: str | os.PathLike[str]) -> RenderConfig:
    """Read and parse a scene description file.

    Raises:
        OSError: If the file cannot be read.
        SceneError: If the description is malformed.
    """
    with open(path, encoding="utf-8") as f:
        return parse_scene(f.read())
