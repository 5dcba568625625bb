"""Tests for the real-time driver.

Tests cover:
- The print-and-erase status line
- Iterations written to the output file
- Restarting when the scene file changes
- Pausing on scene errors until the file is fixed
"""

import io

import numpy as np
import pytest


def _glow_scene(factor):
    """Camera inside an emitting white sphere with one bounce: every pixel is 255 * factor."""
    return f"""\
0 0 0
1 0 0
6 4
0.5
1 2
0.01
1 1
white {factor} opaque sphere 0 0 0 10
"""


BROKEN_SCENE = "0 0 0\n1 0 0\n6 4\n"


class TestStatusLine:
    """Test the print-and-erase status line."""

    def test_show_erases_previous_message(self):
        from src.lumen.realtime import StatusLine

        stream = io.StringIO()
        status = StatusLine(stream)
        status.show("Iter #10")
        status.show("Iter #2")
        assert stream.getvalue() == "\r\rIter #10\r" + " " * 8 + "\rIter #2"

    def test_finish_ends_line(self):
        from src.lumen.realtime import StatusLine

        stream = io.StringIO()
        status = StatusLine(stream)
        status.finish()
        assert stream.getvalue() == ""
        status.show("done")
        status.finish()
        assert stream.getvalue().endswith("done\n")

    def test_instances_are_independent(self):
        from src.lumen.realtime import StatusLine

        first = StatusLine(io.StringIO())
        first.show("a long message")
        stream = io.StringIO()
        StatusLine(stream).show("x")
        assert stream.getvalue() == "\r\rx"


class TestWatch:
    """Test the watch loop."""

    def test_renders_requested_iterations(self, tmp_path):
        from src.lumen.preview.export import load_pixels
        from src.lumen.realtime import watch

        scene = tmp_path / "scene.txt"
        scene.write_text(_glow_scene(0.1))
        output = tmp_path / "out.png"
        stream = io.StringIO()

        count = watch(scene, output, seed=1, max_iterations=3, stream=stream)

        assert count == 3
        assert "Iter #1" in stream.getvalue()
        assert "Iter #3" in stream.getvalue()
        pixels = load_pixels(output)
        assert pixels.shape == (4, 6, 3)
        assert np.all(pixels == 25)

    def test_restarts_when_scene_changes(self, tmp_path, monkeypatch):
        """Test that an edited scene starts a new generation."""
        import src.lumen.realtime as realtime
        from src.lumen.preview.export import load_pixels, save_image

        scene = tmp_path / "scene.txt"
        scene.write_text(_glow_scene(0.1))
        output = tmp_path / "out.png"
        saves = []

        def save_then_edit(image, path):
            save_image(image, path)
            saves.append(float(image.mean()))
            if len(saves) == 1:
                scene.write_text(_glow_scene(0.2))

        monkeypatch.setattr(realtime, "save_image", save_then_edit)
        stream = io.StringIO()

        count = realtime.watch(scene, output, seed=1, max_iterations=3, stream=stream)

        assert count == 3
        assert saves[0] == pytest.approx(25.5, rel=1e-5)
        # No mixing with the frame of the previous generation
        assert saves[1] == pytest.approx(51.0, rel=1e-5)
        assert saves[2] == pytest.approx(51.0, rel=1e-5)
        # The counter restarted with the new generation
        assert "Iter #3" not in stream.getvalue()
        assert np.all(load_pixels(output) == 51)

    def test_pauses_on_error_until_fixed(self, tmp_path):
        """Test that a broken scene is polled until a parseable edit appears."""
        from src.lumen.realtime import watch

        scene = tmp_path / "scene.txt"
        scene.write_text(BROKEN_SCENE)
        output = tmp_path / "out.png"
        sleeps = []

        def fake_sleep(seconds):
            sleeps.append(seconds)
            if len(sleeps) == 2:
                scene.write_text(_glow_scene(0.1))

        stream = io.StringIO()
        count = watch(
            scene,
            output,
            seed=1,
            poll_interval=0.25,
            max_iterations=1,
            sleep=fake_sleep,
            stream=stream,
        )

        assert count == 1
        assert sleeps == [0.25, 0.25]
        assert "Config Error" in stream.getvalue()
        assert output.exists()

    def test_error_after_edit_keeps_polling(self, tmp_path, monkeypatch):
        """Test that an edit that breaks the scene pauses before the next frame."""
        import src.lumen.realtime as realtime
        from src.lumen.preview.export import save_image

        scene = tmp_path / "scene.txt"
        scene.write_text(_glow_scene(0.1))
        output = tmp_path / "out.png"
        saves = []

        def save_then_break(image, path):
            save_image(image, path)
            saves.append(float(image.mean()))
            if len(saves) == 1:
                scene.write_text(BROKEN_SCENE)

        def fix_on_sleep(seconds):
            scene.write_text(_glow_scene(0.2))

        monkeypatch.setattr(realtime, "save_image", save_then_break)
        stream = io.StringIO()

        count = realtime.watch(scene, output, seed=1, max_iterations=2, sleep=fix_on_sleep, stream=stream)

        assert count == 2
        assert "Config Error" in stream.getvalue()
        assert saves[1] == pytest.approx(51.0, rel=1e-5)

    def test_unreadable_scene_raises(self, tmp_path):
        from src.lumen.realtime import watch

        with pytest.raises(OSError):
            watch(tmp_path / "missing.txt", tmp_path / "out.png", max_iterations=1, stream=io.StringIO())

    def test_too_many_objects_pauses(self, tmp_path):
        """Test that a scene over the object limit waits for a fix instead of crashing."""
        from src.lumen.preview.export import load_pixels
        from src.lumen.realtime import watch
        from src.lumen.scene.intersection import MAX_OBJECTS

        scene = tmp_path / "scene.txt"
        scene.write_text(_glow_scene(0.1) + "white 0 opaque sphere 0 0 50 1\n" * MAX_OBJECTS)
        output = tmp_path / "out.png"
        sleeps = []

        def fix_on_sleep(seconds):
            sleeps.append(seconds)
            scene.write_text(_glow_scene(0.1))

        stream = io.StringIO()
        count = watch(scene, output, seed=1, max_iterations=1, sleep=fix_on_sleep, stream=stream)

        assert count == 1
        assert len(sleeps) == 1
        assert "maximum is 1024" in stream.getvalue()
        assert np.all(load_pixels(output) == 25)

    def test_too_many_objects_on_reload_keeps_running(self, tmp_path, monkeypatch):
        import src.lumen.realtime as realtime
        from src.lumen.preview.export import save_image
        from src.lumen.scene.intersection import MAX_OBJECTS

        scene = tmp_path / "scene.txt"
        scene.write_text(_glow_scene(0.1))
        output = tmp_path / "out.png"
        saves = []

        def save_then_overfill(image, path):
            save_image(image, path)
            saves.append(float(image.mean()))
            if len(saves) == 1:
                scene.write_text(_glow_scene(0.1) + "white 0 opaque sphere 0 0 50 1\n" * MAX_OBJECTS)

        def fix_on_sleep(seconds):
            scene.write_text(_glow_scene(0.2))

        monkeypatch.setattr(realtime, "save_image", save_then_overfill)
        stream = io.StringIO()

        count = realtime.watch(scene, output, seed=1, max_iterations=2, sleep=fix_on_sleep, stream=stream)

        assert count == 2
        assert "Config Error" in stream.getvalue()
        assert saves[1] == pytest.approx(51.0, rel=1e-5)
