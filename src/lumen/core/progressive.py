"""Progressive renderer for iterative frame accumulation.

Each iteration renders one complete frame of the current scene generation in
parallel and then, as a separate sequential step, adds it into a host-side
accumulator. The displayed image is the accumulator divided by the number of
iterations so far, so noise drops as iterations pile up.

Starting a new generation (reset()) reloads the scene and camera and discards
the accumulator and the iteration counter.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.lumen.core.progressive import ProgressiveRenderer
    >>> from src.lumen.scene.parser import read_scene
    >>>
    >>> renderer = ProgressiveRenderer(read_scene("scene.txt"), seed=3)
    >>> renderer.render(16)
    >>> image = renderer.image()
"""

from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt
from loguru import logger

from src.lumen.core.renderer import load_generation, render_frame
from src.lumen.core.sampler import draw_seed
from src.lumen.scene.objects import RenderConfig

# Type alias for progress callback
# Callback receives (current_iterations, target_iterations)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """Accumulates full-frame renders of one scene generation.

    Attributes:
        config: The configuration of the current generation.
        iterations: Number of frames accumulated since the last reset.
    """

    def __init__(self, config: RenderConfig, seed: int | None = None) -> None:
        """Initialize the progressive renderer and load the first generation.

        Args:
            config: The configuration to render.
            seed: Seed for the sequence of per-frame seeds. None draws fresh
                entropy.

        Raises:
            ValueError: If the configuration cannot be rendered.
        """
        self._rng = np.random.default_rng(seed)
        self._config = config
        self._accumulator = np.zeros((0, 0, 3), dtype=np.float64)
        self._iterations = 0
        self.reset(config)

    @property
    def config(self) -> RenderConfig:
        """Get the configuration of the current generation."""
        return self._config

    @property
    def iterations(self) -> int:
        """Get the number of frames accumulated so far."""
        return self._iterations

    def reset(self, config: RenderConfig | None = None) -> None:
        """Start a new generation.

        Args:
            config: The new configuration. None restarts the current one.

        Raises:
            ValueError: If the configuration cannot be rendered. The current
                configuration is kept.
        """
        config = self._config if config is None else config
        load_generation(config)
        self._config = config
        self._accumulator = np.zeros((self._config.height, self._config.width, 3), dtype=np.float64)
        self._iterations = 0

    def step(self) -> None:
        """Render one frame and add it to the accumulator."""
        frame = render_frame(self._config, draw_seed(self._rng))
        self._accumulator += frame
        self._iterations += 1
        logger.debug("Accumulated frame {}", self._iterations)

    def render(
        self,
        num_iterations: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Accumulate several frames with an optional progress callback.

        Args:
            num_iterations: Number of frames to add.
            callback: Optional callback called after each frame.
                Receives (current_iterations, target_iterations).
        """
        for current, target in self.render_progressive(num_iterations):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_iterations: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Accumulate several frames, yielding progress after each one.

        Args:
            num_iterations: Number of frames to add.

        Yields:
            Tuple of (current_iterations, target_iterations).
        """
        if num_iterations <= 0:
            return

        target = self._iterations + num_iterations
        while self._iterations < target:
            self.step()
            yield (self._iterations, target)

    def image(self) -> npt.NDArray[np.float64]:
        """Get the averaged image.

        Returns:
            NumPy array of shape (height, width, 3). All zeros before the
            first iteration.
        """
        if self._iterations == 0:
            return np.zeros_like(self._accumulator)
        return self._accumulator / self._iterations

    def __repr__(self) -> str:
        return (
            f"ProgressiveRenderer(width={self._config.width}, height={self._config.height}, "
            f"iterations={self._iterations})"
        )
