"""Scene module.

Components:
    objects: Immutable host-side shapes, materials, objects and RenderConfig
    parser: Scene description text to RenderConfig
    intersection: Scene storage in Taichi fields and closest-hit queries
"""
