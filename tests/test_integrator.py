"""Tests for the light transport integrator.

Tests cover:
- Depth 0 and misses return black
- Emitters seen directly return their luminance
- Mirror chains multiply by color / 255 per bounce
- Diffuse bounces toward an emitter gather a fraction of its light
- Argument validation and reproducibility
"""

import pytest


def _obj(shape, material, color=None, luminance=None):
    from src.lumen.core.vector import BLACK, WHITE
    from src.lumen.scene.objects import SceneObject

    return SceneObject(
        shape=shape,
        color=WHITE if color is None else color,
        luminance=BLACK if luminance is None else luminance,
        material=material,
    )


def _ray(position, direction):
    from src.lumen.core.ray import Ray
    from src.lumen.core.vector import Vector3

    return Ray(Vector3(*position), Vector3(*direction))


class TestTraceRayBasics:
    """Tests for trivial paths."""

    def test_depth_zero_is_black(self):
        """Test that no bounces give no light, even facing an emitter."""
        from src.lumen.core.integrator import trace_ray
        from src.lumen.core.vector import Vector3
        from src.lumen.scene.intersection import upload_scene
        from src.lumen.scene.objects import OPAQUE, SphereShape

        upload_scene(
            [_obj(SphereShape(Vector3(0.0, 0.0, 5.0), 1.0), OPAQUE, luminance=Vector3(100.0, 100.0, 100.0))]
        )
        color = trace_ray(_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0)), 0)
        assert color == Vector3(0.0, 0.0, 0.0)

    def test_miss_is_black(self):
        """Test that a ray leaving the scene returns the background."""
        from src.lumen.core.integrator import trace_ray
        from src.lumen.core.vector import Vector3
        from src.lumen.scene.intersection import upload_scene
        from src.lumen.scene.objects import OPAQUE, SphereShape

        upload_scene(
            [_obj(SphereShape(Vector3(0.0, 0.0, 5.0), 1.0), OPAQUE, luminance=Vector3(100.0, 100.0, 100.0))]
        )
        color = trace_ray(_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)), 5)
        assert color == Vector3(0.0, 0.0, 0.0)

    def test_emitter_seen_directly(self):
        """Test that depth 1 into a black emitter returns its luminance."""
        from src.lumen.core.integrator import trace_ray
        from src.lumen.core.vector import BLACK, Vector3
        from src.lumen.scene.intersection import upload_scene
        from src.lumen.scene.objects import OPAQUE, SphereShape

        upload_scene(
            [
                _obj(
                    SphereShape(Vector3(0.0, 0.0, 5.0), 1.0),
                    OPAQUE,
                    color=BLACK,
                    luminance=Vector3(10.0, 20.0, 30.0),
                )
            ]
        )
        color = trace_ray(_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0)), 1)
        assert color.x == pytest.approx(10.0)
        assert color.y == pytest.approx(20.0)
        assert color.z == pytest.approx(30.0)


class TestMirrorPaths:
    """Tests for deterministic mirror paths."""

    def test_mirror_reflects_emitter(self):
        """Test that a mirror shows the emitter behind the camera, tinted."""
        from src.lumen.core.integrator import trace_ray
        from src.lumen.core.vector import BLACK, Vector3
        from src.lumen.scene.intersection import upload_scene
        from src.lumen.scene.objects import MIRROR, OPAQUE, PlaneShape

        upload_scene(
            [
                # Mirror wall in front of the camera, half reflective in green
                _obj(
                    PlaneShape(Vector3(0.0, 0.0, 5.0), Vector3(0.0, 0.0, -1.0)),
                    MIRROR,
                    color=Vector3(255.0, 127.5, 0.0),
                ),
                # Emitting wall behind the camera
                _obj(
                    PlaneShape(Vector3(0.0, 0.0, -5.0), Vector3(0.0, 0.0, 1.0)),
                    OPAQUE,
                    color=BLACK,
                    luminance=Vector3(40.0, 40.0, 40.0),
                ),
            ]
        )
        color = trace_ray(_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0)), 2)
        assert color.x == pytest.approx(40.0, rel=1e-5)
        assert color.y == pytest.approx(20.0, rel=1e-5)
        assert color.z == pytest.approx(0.0, abs=1e-5)

    def test_depth_limits_bounces(self):
        """Test that depth 1 stops at the mirror before reaching the emitter."""
        from src.lumen.core.integrator import trace_ray
        from src.lumen.core.vector import BLACK, Vector3
        from src.lumen.scene.intersection import upload_scene
        from src.lumen.scene.objects import MIRROR, OPAQUE, PlaneShape

        upload_scene(
            [
                _obj(PlaneShape(Vector3(0.0, 0.0, 5.0), Vector3(0.0, 0.0, -1.0)), MIRROR),
                _obj(
                    PlaneShape(Vector3(0.0, 0.0, -5.0), Vector3(0.0, 0.0, 1.0)),
                    OPAQUE,
                    color=BLACK,
                    luminance=Vector3(40.0, 40.0, 40.0),
                ),
            ]
        )
        color = trace_ray(_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0)), 1)
        assert color == Vector3(0.0, 0.0, 0.0)

    def test_lone_mirror_sphere_shows_its_luminance(self):
        """Test that a mirror sphere whose reflection escapes returns exactly its luminance."""
        from src.lumen.core.integrator import trace_ray
        from src.lumen.core.vector import Vector3
        from src.lumen.scene.intersection import upload_scene
        from src.lumen.scene.objects import MIRROR, SphereShape

        upload_scene(
            [_obj(SphereShape(Vector3(0.0, 0.0, 5.0), 1.0), MIRROR, luminance=Vector3(10.0, 20.0, 30.0))]
        )
        color = trace_ray(_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0)), 2)
        assert color.x == pytest.approx(10.0, rel=1e-6)
        assert color.y == pytest.approx(20.0, rel=1e-6)
        assert color.z == pytest.approx(30.0, rel=1e-6)

    def test_luminance_added_every_bounce(self):
        """Test that an emitting mirror adds its own light on top of the reflection."""
        from src.lumen.core.integrator import trace_ray
        from src.lumen.core.vector import BLACK, Vector3
        from src.lumen.scene.intersection import upload_scene
        from src.lumen.scene.objects import MIRROR, OPAQUE, PlaneShape

        upload_scene(
            [
                _obj(
                    PlaneShape(Vector3(0.0, 0.0, 5.0), Vector3(0.0, 0.0, -1.0)),
                    MIRROR,
                    luminance=Vector3(1.0, 1.0, 1.0),
                ),
                _obj(
                    PlaneShape(Vector3(0.0, 0.0, -5.0), Vector3(0.0, 0.0, 1.0)),
                    OPAQUE,
                    color=BLACK,
                    luminance=Vector3(40.0, 40.0, 40.0),
                ),
            ]
        )
        color = trace_ray(_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0)), 2)
        assert color.x == pytest.approx(41.0, rel=1e-5)


class TestDiffusePaths:
    """Tests for stochastic diffuse paths."""

    def _scene(self):
        from src.lumen.core.vector import BLACK, WHITE, Vector3
        from src.lumen.scene.intersection import upload_scene
        from src.lumen.scene.objects import OPAQUE, PlaneShape, SphereShape

        upload_scene(
            [
                _obj(SphereShape(Vector3(0.0, 0.0, 5.0), 1.0), OPAQUE, color=WHITE),
                _obj(
                    PlaneShape(Vector3(0.0, -2.0, 0.0), Vector3(0.0, 1.0, 0.0)),
                    OPAQUE,
                    color=BLACK,
                    luminance=Vector3(100.0, 100.0, 100.0),
                ),
            ]
        )

    def test_diffuse_gathers_some_light(self):
        """Test that a white diffuse sphere lit from below is lit but dimmer than the light."""
        from src.lumen.core.integrator import trace_ray

        self._scene()
        color = trace_ray(_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0)), 2, num_samples=256, seed=3)
        assert 0.0 < color.x < 100.0
        assert color.x == pytest.approx(color.y)
        assert color.y == pytest.approx(color.z)

    def test_same_seed_same_result(self):
        from src.lumen.core.integrator import trace_ray

        self._scene()
        ray = _ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        a = trace_ray(ray, 3, num_samples=32, seed=8)
        b = trace_ray(ray, 3, num_samples=32, seed=8)
        assert a == b


class TestTraceRayValidation:
    """Tests for argument validation."""

    def test_negative_depth(self):
        from src.lumen.core.integrator import trace_ray

        with pytest.raises(ValueError, match="Depth"):
            trace_ray(_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0)), -1)

    def test_zero_samples(self):
        from src.lumen.core.integrator import trace_ray

        with pytest.raises(ValueError, match="num_samples"):
            trace_ray(_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0)), 1, num_samples=0)
