"""
Cellmerge CLI - Command-line interface for the engine.

Usage:
    cellmerge play [--lat LAT --lng LNG] [--global] [--seed SEED]
    cellmerge grid [--lat LAT --lng LNG] [--radius N] [--global] [--seed SEED]

In `play`:
    w/a/s/d        step north/west/south/east
    I J            click on cell (I, J), e.g. "3 -2" or "3,-2"
    feed           switch to the location feed
    goto LAT LNG   send a location fix (feed mode)
    step           switch back to discrete steps
    q              quit
"""

import argparse
import re
import sys
from dataclasses import replace

from .config import GameConfig, configure_logging
from .engine_core.grid import CLASSROOM, CellCoordinate, GridConfig, LatLng, OriginScheme
from .errors import InvalidPositionError
from .movement import MovementMode, PushPositionSource, parse_direction
from .render import TextRenderer

_CELL_INPUT = re.compile(r"^\s*(-?\d+)\s*[, ]\s*(-?\d+)\s*$")


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Cellmerge - location-grid merge game",
        prog="cellmerge",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default from CELLMERGE_LOG_LEVEL)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    play_parser = subparsers.add_parser("play", help="Play in the terminal")
    _add_world_arguments(play_parser)
    play_parser.add_argument("--radius", type=int, default=5, help="Visible radius in cells")

    grid_parser = subparsers.add_parser("grid", help="Print the generated grid around a point")
    _add_world_arguments(grid_parser)
    grid_parser.add_argument("--radius", type=int, default=8, help="Radius in cells")

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "play":
        cmd_play(args)
    elif args.command == "grid":
        cmd_grid(args)
    else:
        parser.print_help()
        sys.exit(1)


def _add_world_arguments(subparser):
    subparser.add_argument("--lat", type=float, default=CLASSROOM.lat, help="Starting latitude")
    subparser.add_argument("--lng", type=float, default=CLASSROOM.lng, help="Starting longitude")
    subparser.add_argument("--global", dest="global_origin", action="store_true",
                           help="Anchor the grid at (0, 0) instead of the classroom")
    subparser.add_argument("--seed", default=None, help="World seed")


def _build_config(args) -> GameConfig:
    config = GameConfig.from_env()
    scheme = OriginScheme.GLOBAL if args.global_origin else config.grid.scheme
    config = replace(
        config,
        grid=GridConfig.for_scheme(scheme, cell_size=config.grid.cell_size),
        viewport_radius=args.radius,
    )
    if args.seed is not None:
        config = replace(config, seed=args.seed)
    return config


def cmd_grid(args):
    """Draw one frame around a point and exit."""
    from .session import SessionManager

    config = _build_config(args)
    manager = SessionManager(default_config=config)
    try:
        session = manager.create_session(
            start=LatLng(args.lat, args.lng),
            renderer=TextRenderer(),
        )
    except InvalidPositionError as e:
        print(f"Error: {e}")
        sys.exit(1)
    manager.end_session(session.session_id)


def cmd_play(args):
    """Interactive terminal session."""
    from .session import SessionManager

    config = _build_config(args)
    source = PushPositionSource(name="terminal")
    manager = SessionManager(default_config=config)
    try:
        session = manager.create_session(
            start=LatLng(args.lat, args.lng),
            renderer=TextRenderer(),
            notifier=lambda message: print(f"*** {message} ***"),
            position_source=source,
        )
    except InvalidPositionError as e:
        print(f"Error: {e}")
        sys.exit(1)
    loop = session.loop

    print("w/a/s/d to move, 'I J' to click a cell, 'feed'/'step' to switch mode, q to quit")
    try:
        for line in sys.stdin:
            command = line.strip()
            if not command:
                continue
            if command.lower() in {"q", "quit", "exit"}:
                break
            _handle_command(command, loop, source)
    except KeyboardInterrupt:
        pass
    finally:
        manager.end_session(session.session_id)


def _handle_command(command: str, loop, source: PushPositionSource):
    lowered = command.lower()

    match = _CELL_INPUT.match(command)
    if match:
        coord = CellCoordinate(int(match.group(1)), int(match.group(2)))
        result = loop.interact(coord)
        if not result.changed:
            print(f"Nothing happened ({result.outcome.value})")
        return

    if lowered in {"feed", "step"}:
        result = loop.switch_mode(MovementMode(lowered))
        if not result.success:
            print(f"Could not switch: {result.error}")
        return

    if lowered.startswith("goto"):
        parts = command.split()
        if len(parts) != 3:
            print("Usage: goto LAT LNG")
            return
        if loop.mode != MovementMode.FEED:
            print("Switch to feed mode first")
            return
        try:
            lat, lng = float(parts[1]), float(parts[2])
        except ValueError:
            print("Usage: goto LAT LNG")
            return
        loop.last_result = None
        source.push(lat, lng)
        if loop.last_result and not loop.last_result.success:
            print(f"Rejected: {loop.last_result.error}")
        return

    direction = parse_direction(lowered)
    if direction is not None:
        if loop.step(direction) is None:
            print("Steps are ignored in feed mode")
        return

    print(f"Unknown command: {command}")


if __name__ == "__main__":
    main()
