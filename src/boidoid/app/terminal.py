from __future__ import annotations

import argparse
import curses
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterable, Optional

from pygame.math import Vector2

from ..sim.core.config import AppConfig, ConfigError, TerminalConfig, load_app_config_file, preset
from ..sim.core.flock import FlockSimulation

logger = logging.getLogger(__name__)


class TerminalRenderer:
    def __init__(self, window: Any, glyph: str = "o"):
        self._window = window
        self._glyph = glyph

    def draw(self, positions: Iterable[Vector2]) -> int:
        """Clear the window and draw one glyph per on-screen position. Returns how many were drawn."""

        window = self._window
        window.erase()
        rows, cols = window.getmaxyx()
        drawn = 0
        for position in positions:
            row = int(position.y)
            col = int(position.x)
            if not (0 <= row < rows and 0 <= col < cols):
                continue
            try:
                window.addch(row, col, self._glyph)
            except curses.error:
                # Writing the bottom-right cell moves the cursor off the window.
                if (row, col) != (rows - 1, cols - 1):
                    raise
            drawn += 1
        window.refresh()
        return drawn


def run_loop(
    window: Any,
    simulation: FlockSimulation,
    terminal: TerminalConfig,
    max_frames: Optional[int] = None,
) -> int:
    renderer = TerminalRenderer(window, terminal.glyph)
    quit_code = ord(terminal.quit_key)
    frames = 0
    while max_frames is None or frames < max_frames:
        rows, cols = window.getmaxyx()
        renderer.draw(simulation.positions())
        simulation.tick(rows, cols)
        frames += 1
        if window.getch() == quit_code:
            logger.info("Quit key pressed after %d frames", frames)
            break
    return frames


def _session(window: Any, app: AppConfig, max_frames: Optional[int]) -> int:
    curses.noecho()
    try:
        curses.curs_set(0)
    except curses.error:
        logger.debug("Terminal does not support hiding the cursor")
    curses.halfdelay(app.terminal.half_delay_tenths)

    rows, cols = window.getmaxyx()
    simulation_config = replace(app.simulation, bounds_height=rows, bounds_width=cols)
    simulation = FlockSimulation.from_config(simulation_config)
    return run_loop(window, simulation, app.terminal, max_frames=max_frames)


def run_terminal(app: AppConfig, max_frames: Optional[int] = None) -> int:
    return curses.wrapper(_session, app, max_frames)


def main() -> None:
    parser = argparse.ArgumentParser(description="Terminal flocking simulation (press q to quit)")
    parser.add_argument("--config", type=Path, default=None, help="YAML configuration file")
    parser.add_argument("--preset", default=None, help="Named configuration preset (terminal, window)")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--population", type=int, default=None)
    parser.add_argument("--frames", type=int, default=None, help="Stop after this many frames")
    parser.add_argument("--log-file", type=Path, default=None, help="Write logs here; the screen belongs to curses")
    parser.add_argument("--log-level", default="INFO", help="Python logging level")
    args = parser.parse_args()

    if args.log_file is not None:
        logging.basicConfig(
            filename=args.log_file,
            level=args.log_level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    else:
        logging.disable(logging.CRITICAL)

    try:
        if args.config is not None:
            app = load_app_config_file(args.config)
        elif args.preset is not None:
            app = AppConfig(simulation=preset(args.preset))
        else:
            app = AppConfig()
        if args.seed is not None:
            app.simulation.seed = args.seed
        if args.population is not None:
            app.simulation.population = args.population

        run_terminal(app, max_frames=args.frames)
    except ConfigError:
        logger.exception("Invalid configuration")
        raise


if __name__ == "__main__":
    main()
