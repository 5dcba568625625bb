"""Real-time progressive rendering driven by a scene file.

watch() keeps refining one scene generation, writing the averaged image to the
output file after every iteration. Between iterations it re-reads the scene
file; when the text has changed it parses it and starts a new generation,
discarding the accumulated frames. A scene that does not parse pauses
rendering: the error is shown on the status line and the file is polled until
its text changes again.

Changes only take effect between frames, never during one.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.lumen.realtime import watch
    >>> watch("scene.txt", "live.png")  # runs until interrupted
"""

from __future__ import annotations

import os
import sys
import time
from collections.abc import Callable
from typing import TextIO

from loguru import logger

from src.lumen.core.progressive import ProgressiveRenderer
from src.lumen.core.renderer import validate_config
from src.lumen.preview.export import save_image
from src.lumen.scene.objects import RenderConfig
from src.lumen.scene.parser import SceneError, parse_scene

PathLike = str | os.PathLike[str]


class StatusLine:
    """A single terminal line that each message overwrites."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._previous_length = 0

    def show(self, message: str) -> None:
        """Erase the previous message and print a new one in its place."""
        self._stream.write("\r" + " " * self._previous_length)
        self._stream.write("\r" + message)
        self._stream.flush()
        self._previous_length = len(message)

    def finish(self) -> None:
        """Move past the status line."""
        if self._previous_length:
            self._stream.write("\n")
            self._stream.flush()
            self._previous_length = 0


def _read_text(path: PathLike) -> str:
    with open(path, encoding="utf-8") as f:
        return f.read()


def _wait_for_change(
    path: PathLike,
    text: str,
    sleep: Callable[[float], None],
    poll_interval: float,
) -> str:
    """Poll the file until its text differs from text, and return the new text."""
    while True:
        new_text = _read_text(path)
        if new_text != text:
            return new_text
        sleep(poll_interval)


def _parse_generation(
    path: PathLike,
    text: str,
    status: StatusLine,
    sleep: Callable[[float], None],
    poll_interval: float,
) -> tuple[str, RenderConfig]:
    """Parse the scene text, blocking until the file holds a usable scene.

    Returns:
        (text, config) of the first text that parses and can be rendered.
    """
    while True:
        try:
            config = parse_scene(text)
            validate_config(config)
            return text, config
        except (SceneError, ValueError) as e:
            status.show(f"Config Error: {e}")
            logger.warning("Scene error in {}: {}", path, e)
            text = _wait_for_change(path, text, sleep, poll_interval)


def _reload_generation(
    path: PathLike,
    previous_text: str,
    status: StatusLine,
    sleep: Callable[[float], None],
    poll_interval: float,
) -> tuple[str, RenderConfig] | None:
    """Reload the scene file if its text differs from previous_text.

    Returns:
        (text, config) of the new generation, or None if the file is
        unchanged.
    """
    text = _read_text(path)
    if text == previous_text:
        return None
    return _parse_generation(path, text, status, sleep, poll_interval)


def watch(
    input_path: PathLike,
    output_path: PathLike,
    *,
    seed: int | None = None,
    poll_interval: float = 1.0,
    max_iterations: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
    stream: TextIO = sys.stdout,
) -> int:
    """Progressively render a scene file, restarting whenever it changes.

    Args:
        input_path: The scene description file to watch.
        output_path: The image file rewritten after every iteration.
        seed: Seed for reproducible output. None draws fresh entropy.
        poll_interval: Seconds between reads while waiting for a fix.
        max_iterations: Stop after this many iterations. None runs forever.
        sleep: Function used to wait between polls.
        stream: Where the status line is printed.

    Returns:
        The number of iterations rendered.

    Raises:
        OSError: If the scene file cannot be read or the image not written.
    """
    status = StatusLine(stream)

    text, config = _parse_generation(input_path, _read_text(input_path), status, sleep, poll_interval)
    renderer = ProgressiveRenderer(config, seed=seed)
    logger.info("Watching {} ({}x{})", input_path, config.width, config.height)

    iterations = 0
    try:
        while max_iterations is None or iterations < max_iterations:
            status.show(f"Iter #{renderer.iterations + 1}")

            start_time = time.perf_counter()
            renderer.step()
            iterations += 1
            logger.debug("Frame took {:.3f}s", time.perf_counter() - start_time)

            save_image(renderer.image(), output_path)

            reloaded = _reload_generation(input_path, text, status, sleep, poll_interval)
            if reloaded is not None:
                text, config = reloaded
                renderer.reset(config)
                logger.info("Scene changed, restarting ({}x{})", config.width, config.height)
    finally:
        status.finish()

    return iterations
