"""Core rendering module.

Components:
    vector: Host Vector3/Color types and device vector helpers
    sampler: Per-pixel random number streams
    ray: Host Ray type and device ray helpers
    integrator: Path-traced radiance along one ray
    renderer: Parallel per-pixel sampling of one frame
    progressive: Accumulation of frames over time

Nothing is imported here: several components declare Taichi fields, which
must only be created after ti.init(). Import the components directly, e.g.

    from src.lumen.core.renderer import render
"""
