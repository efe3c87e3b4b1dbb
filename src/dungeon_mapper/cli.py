"""
Command-line front end for scripted map work.

Every command operates on a map JSON file (the same format the editor
exports) and writes it back when the command changes the map.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from dungeon_mapper.config import EditorSettings, FLOOR_COUNT
from dungeon_mapper.map_model import (
    MapEditor, MapState, MapError, Facing, format_directions, validate_map_document,
)
from dungeon_mapper.map_model.grid_array import floor_summary
from dungeon_mapper.storage import MapStorage

logger = logging.getLogger(__name__)


def _parse_xy(text: str) -> Tuple[int, int]:
    try:
        x_str, y_str = text.split(',')
        return int(x_str), int(y_str)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected X,Y, got {text!r}")


def _open_editor(path: Path) -> MapEditor:
    storage = MapStorage(path)
    if not storage.exists():
        raise MapError(f"Map file not found: {path}")
    state = storage.load()
    if state is None:
        raise MapError(f"Map file is unreadable: {path}")
    return MapEditor(state=state, storage=storage, settings=EditorSettings(autosave=False))


def _save(editor: MapEditor, path: Path) -> bool:
    return MapStorage(path).save(editor.state)


def cmd_new(args: argparse.Namespace) -> int:
    if args.map.exists() and not args.force:
        print(f"{args.map} already exists (use --force to overwrite)", file=sys.stderr)
        return 1
    return 0 if MapStorage(args.map).save(MapState()) else 1


def cmd_info(args: argparse.Namespace) -> int:
    editor = _open_editor(args.map)
    pos = editor.player
    print(f"Floor {editor.current_floor} | Player: ({pos.x}, {pos.y}) facing {pos.facing.value}")
    for number in range(1, FLOOR_COUNT + 1):
        summary = floor_summary(editor.state.floor(number))
        if summary['cells'] == 0:
            continue
        print(f"  floor {number}: " + ", ".join(f"{k}={v}" for k, v in summary.items()))
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    try:
        with open(args.map, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Cannot read {args.map}: {e}", file=sys.stderr)
        return 1
    result = validate_map_document(data)
    print(result.report())
    return 0 if result.passed else 1


def cmd_route(args: argparse.Namespace) -> int:
    editor = _open_editor(args.map)
    floor = args.floor if args.floor is not None else editor.current_floor
    if args.start is not None:
        start = args.start
    else:
        start = (editor.player.x, editor.player.y)
    facing = Facing(args.facing) if args.facing else editor.player.facing

    path = editor.find_path(floor, start[0], start[1], args.end[0], args.end[1])
    if path is None:
        print(f"No path from {start} to {args.end} on floor {floor}")
        return 1

    steps = editor.path_to_directions(path, facing, floor)
    print("Path: " + " ".join(f"({x},{y})" for x, y in path))
    print("Directions: " + (format_directions(steps) or "(already there)"))
    return 0


def cmd_explore(args: argparse.Namespace) -> int:
    editor = _open_editor(args.map)
    floor = args.floor if args.floor is not None else editor.current_floor
    editor.flood_fill_explored(floor, args.start[0], args.start[1])
    print(f"explored={floor_summary(editor.state.floor(floor))['explored']}")
    return 0 if _save(editor, args.map) else 1


def cmd_rotate(args: argparse.Namespace) -> int:
    editor = _open_editor(args.map)
    floor = args.floor if args.floor is not None else editor.current_floor
    for _ in range(args.times % 4):
        editor.rotate_floor_90(floor)
    return 0 if _save(editor, args.map) else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dungeon-mapper", description=__doc__)
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("new", help="write an empty map")
    p.add_argument("map", type=Path)
    p.add_argument("--force", action="store_true")
    p.set_defaults(func=cmd_new)

    p = sub.add_parser("info", help="summarize a map")
    p.add_argument("map", type=Path)
    p.set_defaults(func=cmd_info)

    p = sub.add_parser("validate", help="check a map file")
    p.add_argument("map", type=Path)
    p.set_defaults(func=cmd_validate)

    p = sub.add_parser("route", help="shortest path and walking directions")
    p.add_argument("map", type=Path)
    p.add_argument("--floor", type=int)
    p.add_argument("--start", type=_parse_xy, help="X,Y (default: player)")
    p.add_argument("--end", type=_parse_xy, required=True, help="X,Y")
    p.add_argument("--facing", choices=[f.value for f in Facing])
    p.set_defaults(func=cmd_route)

    p = sub.add_parser("explore", help="flood-fill explored area from a cell")
    p.add_argument("map", type=Path)
    p.add_argument("--floor", type=int)
    p.add_argument("--start", type=_parse_xy, required=True, help="X,Y")
    p.set_defaults(func=cmd_explore)

    p = sub.add_parser("rotate", help="rotate a floor 90° clockwise")
    p.add_argument("map", type=Path)
    p.add_argument("--floor", type=int)
    p.add_argument("--times", type=int, default=1)
    p.set_defaults(func=cmd_rotate)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except MapError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
