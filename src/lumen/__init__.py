"""Monte Carlo ray tracer built on Taichi.

Renders scene description files by tracing randomized light paths through
spheres, planes and triangles made of mirror, glass or translucent material.

Subpackages:
    core: Vector algebra, random streams, the integrator and the renderers
    geometry: Shape primitives and intersection algorithms
    materials: Mirror and translucent scattering
    scene: Scene description types, parser and device-side scene storage
    camera: Spherical-angle pinhole camera
    preview: Image export

Modules:
    realtime: Progressive rendering that follows edits to a scene file
    cli: Command-line entry point

Modules that declare Taichi fields must be imported after ti.init().
"""

__version__ = "0.1.0"
