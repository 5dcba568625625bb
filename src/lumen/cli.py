"""Command-line interface.

Usage:
    lumen INPUT OUTPUT [options]
    python -m src.lumen INPUT OUTPUT [options]

Options:
    --real-time             Keep refining OUTPUT and reload INPUT when it changes
    --seed N                Seed for reproducible output
    --arch {cpu,gpu}        Taichi backend (default: cpu)
    --poll-interval S       Seconds between reads of a broken scene (default: 1.0)

Example:
    python -m src.lumen scenes/spheres.txt spheres.png --seed 1
"""

from __future__ import annotations

import argparse
import sys
import time
from collections.abc import Sequence

import taichi as ti
from loguru import logger


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="lumen",
        description="Render a scene description with a Monte Carlo ray tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("input", help="Scene description file")
    parser.add_argument("output", help="Output image file (e.g. out.png)")
    parser.add_argument(
        "--real-time",
        action="store_true",
        help="Refine the image progressively and reload the scene when it changes",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for reproducible output (default: random)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=1.0,
        help="Seconds between reads while the scene has errors (default: 1.0)",
    )
    return parser.parse_args(argv)


def init_taichi(arch: str, seed: int | None = None) -> None:
    """Initialize Taichi, falling back to the CPU if the GPU is unavailable."""
    kwargs = {} if seed is None else {"random_seed": seed}
    if arch == "gpu":
        try:
            ti.init(arch=ti.gpu, **kwargs)
            logger.info("Using GPU backend")
            return
        except Exception as e:
            logger.warning("GPU backend unavailable ({}), falling back to CPU", e)
    ti.init(arch=ti.cpu, **kwargs)
    logger.info("Using CPU backend")


def render_once(input_path: str, output_path: str, seed: int | None = None) -> None:
    """Render a scene file once and save the image."""
    # Lazy imports to allow Taichi initialization first
    from src.lumen.core.renderer import render
    from src.lumen.preview.export import save_image
    from src.lumen.scene.parser import read_scene

    config = read_scene(input_path)
    logger.info(
        "Rendering {}x{}, {} samples per pixel, depth {}",
        config.width,
        config.height,
        config.num_tries,
        config.max_depth,
    )

    start_time = time.time()
    image = render(config, seed=seed)
    logger.debug("Render took {:.2f}s", time.time() - start_time)

    save_image(image, output_path)


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    init_taichi(args.arch)

    from src.lumen.realtime import watch
    from src.lumen.scene.parser import SceneError

    try:
        if args.real_time:
            try:
                watch(args.input, args.output, seed=args.seed, poll_interval=args.poll_interval)
            except KeyboardInterrupt:
                logger.info("Stopped")
        else:
            render_once(args.input, args.output, seed=args.seed)
        return 0
    except SceneError as e:
        logger.error("Config Error: {}", e)
        return 1
    except (OSError, ValueError, RuntimeError) as e:
        logger.error("Error: {}", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
