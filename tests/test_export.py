"""Tests for image export.

Tests cover:
- Byte conversion clamps instead of wrapping
- Saving and loading PNG files
- Shape validation
"""

import numpy as np
import pytest


class TestToPixels:
    """Test conversion to 8-bit pixels."""

    def test_truncates_fractions(self):
        from src.lumen.preview.export import to_pixels

        image = np.array([[[0.0, 1.9, 254.99]]], dtype=np.float32)
        pixels = to_pixels(image)
        assert pixels.dtype == np.uint8
        assert pixels.tolist() == [[[0, 1, 254]]]

    def test_overflow_saturates(self):
        """Test that values above 255 become 255 rather than wrapping around."""
        from src.lumen.preview.export import to_pixels

        image = np.array([[[255.0, 256.0, 1000.0]]], dtype=np.float64)
        assert to_pixels(image).tolist() == [[[255, 255, 255]]]

    def test_negative_clamped_to_zero(self):
        from src.lumen.preview.export import to_pixels

        image = np.array([[[-5.0, -0.5, 0.0]]], dtype=np.float32)
        assert to_pixels(image).tolist() == [[[0, 0, 0]]]

    def test_rejects_wrong_shape(self):
        from src.lumen.preview.export import to_pixels

        with pytest.raises(ValueError, match="Expected an"):
            to_pixels(np.zeros((4, 4), dtype=np.float32))
        with pytest.raises(ValueError, match="Expected an"):
            to_pixels(np.zeros((4, 4, 4), dtype=np.float32))


class TestSaveImage:
    """Test writing image files."""

    def test_save_and_load_png(self, tmp_path):
        from src.lumen.preview.export import load_pixels, save_image

        image = np.zeros((3, 5, 3), dtype=np.float32)
        image[0, 0] = (255.0, 0.0, 0.0)
        image[2, 4] = (10.5, 300.0, 99.9)

        path = tmp_path / "out.png"
        save_image(image, path)

        pixels = load_pixels(path)
        assert pixels.shape == (3, 5, 3)
        assert pixels[0, 0].tolist() == [255, 0, 0]
        assert pixels[2, 4].tolist() == [10, 255, 99]
        assert pixels[1, 1].tolist() == [0, 0, 0]

    def test_save_accepts_string_path(self, tmp_path):
        from src.lumen.preview.export import load_pixels, save_image

        path = str(tmp_path / "out.png")
        save_image(np.full((2, 2, 3), 128.0), path)
        assert load_pixels(path).tolist() == [[[128, 128, 128]] * 2] * 2

    def test_render_to_file(self, tmp_path, make_config):
        """Test a rendered frame written and read back."""
        from src.lumen.core.renderer import render
        from src.lumen.core.vector import BLACK, Vector3
        from src.lumen.preview.export import load_pixels, save_image
        from src.lumen.scene.objects import OPAQUE, SceneObject, SphereShape

        glow = SceneObject(SphereShape(Vector3(0.0, 0.0, 0.0), 10.0), BLACK, Vector3(400.0, 64.0, 0.0), OPAQUE)
        image = render(make_config([glow], width=6, height=4), seed=0)

        path = tmp_path / "render.png"
        save_image(image, path)
        pixels = load_pixels(path)
        assert pixels.shape == (4, 6, 3)
        assert np.all(pixels[..., 0] == 255)
        assert np.all(pixels[..., 1] == 64)
        assert np.all(pixels[..., 2] == 0)
