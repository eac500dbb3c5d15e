"""Точка входа: обработка спрайт-листа из командной строки."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from spritemaster.config import RESAMPLE_FILTERS, load_settings
from spritemaster.controllers.app_controller import AppController
from spritemaster.logging_config import configure_logging
from spritemaster.models.errors import ProcessError
from spritemaster.models.options import RGB, FrameOffset, RemovalMode
from spritemaster.services.process_service import ProcessService

logger = logging.getLogger(__name__)


def parse_color(value: str) -> RGB:
    """'#RRGGBB' или 'r,g,b' -> (r, g, b)."""
    text = value.strip()
    if "," in text:
        parts = [int(p) for p in text.split(",")]
        if len(parts) != 3 or not all(0 <= p <= 255 for p in parts):
            raise argparse.ArgumentTypeError(f"Неверный цвет: {value}")
        return parts[0], parts[1], parts[2]
    text = text.lstrip("#")
    if len(text) != 6:
        raise argparse.ArgumentTypeError(f"Неверный цвет: {value}")
    try:
        return int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Неверный цвет: {value}") from exc


def load_offsets(path: Path) -> Dict[str, List[FrameOffset]]:
    """Читает смещения из JSON: {"Walk": [{"x": 1, "y": -2}, [0, 3], ...]}."""
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{path}: ожидался объект действие -> список смещений")
    offsets: Dict[str, List[FrameOffset]] = {}
    for action, frames in payload.items():
        if not isinstance(frames, list):
            raise ValueError(f"{path}: смещения {action!r} должны быть списком")
        parsed: List[FrameOffset] = []
        for item in frames:
            if isinstance(item, dict):
                x, y = item.get("x", 0), item.get("y", 0)
            elif isinstance(item, list) and len(item) == 2:
                x, y = item
            else:
                raise ValueError(f"{path}: неверное смещение {item!r} у {action!r}")
            try:
                parsed.append(FrameOffset(int(x), int(y)))
            except TypeError as exc:
                raise ValueError(f"{path}: неверное смещение {item!r} у {action!r}") from exc
        offsets[action] = parsed
    return offsets


def parse_tolerance(value: str) -> int:
    """Допуск 0..100; значения вне диапазона отклоняются, а не обрезаются."""
    try:
        tolerance = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Допуск должен быть целым: {value}") from exc
    if not 0 <= tolerance <= 100:
        raise argparse.ArgumentTypeError(f"Допуск должен быть в [0, 100]: {value}")
    return tolerance


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spritemaster",
        description="Remove sprite sheet backgrounds, re-align frames and fit the PNG into a size budget.",
    )
    parser.add_argument("source", type=Path, help="Source sprite sheet")
    parser.add_argument("-o", "--output", type=Path, required=True, help="Output PNG path")
    parser.add_argument("--width", type=int, help="Target frame width (default: follows height and aspect ratio)")
    parser.add_argument("--height", type=int, help="Target frame height (default: 128)")
    parser.add_argument("--tolerance", type=parse_tolerance, default=10, help="Background match tolerance 0-100 (default: 10)")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in RemovalMode],
        default=RemovalMode.EDGE_FLOOD.value,
        help="edge: flood from borders, color: key out every matching pixel",
    )
    parser.add_argument("--bg", type=parse_color, help="Background color (#RRGGBB or r,g,b); auto-detected if omitted")
    parser.add_argument("--offsets", type=Path, help="JSON file with per-frame offsets")
    parser.add_argument("--budget", type=int, help="Byte budget for the PNG (default: 102400)")
    parser.add_argument("--max-attempts", type=int, help="Maximum shrink attempts (default: 5)")
    parser.add_argument("--resample", choices=sorted(RESAMPLE_FILTERS), help="Resampling filter")
    parser.add_argument("--log-level", default=None, help="Logging level (default: SPRITEMASTER_LOG_LEVEL or INFO)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Разбирает аргументы, обрабатывает лист и сохраняет результат."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        settings = load_settings(byte_budget=args.budget, max_attempts=args.max_attempts, resample=args.resample)
        controller = AppController(process_service=ProcessService(settings))
        controller.load_image(args.source)
        if args.width is not None and args.height is not None:
            controller.target_size = (args.width, args.height)
        elif args.height is not None:
            controller.set_target_height(args.height)
        elif args.width is not None:
            controller.set_target_width(args.width)
        controller.set_tolerance(args.tolerance)
        controller.set_removal_mode(args.mode)
        if args.bg is not None:
            controller.set_bg_color(args.bg)
        if args.offsets is not None:
            controller.offsets.update(load_offsets(args.offsets))

        result = controller.process()
        out_path = controller.save(args.output)
    except (ProcessError, FileNotFoundError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    print(f"{out_path}: {result.width}x{result.height}, {result.size / 1024:.1f} KiB")
    if result.over_budget:
        print(
            f"warning: still over the {result.budget / 1024:.0f} KiB budget after {result.attempts} attempts",
            file=sys.stderr,
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
