#!/usr/bin/env python3
"""
Compile Program Script.

Compile recorded drawing segments (or a built-in pattern) into a G-code
program for a pen plotter.

Usage:
    python -m turtle_plotter.scripts.compile_program --pattern star
    python -m turtle_plotter.scripts.compile_program --segments drawing.yaml -o out.gcode
    python -m turtle_plotter.scripts.compile_program --pattern grid --profile z_lift --scale 50
    python -m turtle_plotter.scripts.compile_program --segments drawing.json --stdout --check

Segment files are YAML or JSON: a list of [x1, y1, x2, y2] entries (or
{x1, y1, x2, y2} mappings), optionally under a top-level 'segments' key.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from turtle_plotter.configs.loader import ConfigError, load_config
from turtle_plotter.drawing.patterns import PATTERN_MAP
from turtle_plotter.gcode.export import default_program_filename, export_program
from turtle_plotter.gcode.generator import GCodeError, ProgramGenerator
from turtle_plotter.job_ir.segments import SegmentFormatError, load_segments
from turtle_plotter.utils.gcode_vm import check_program
from turtle_plotter.utils.logging_config import (
    install_excepthook,
    pop_context,
    push_context,
    setup_logging,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compile drawing segments into a G-code program",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"Available patterns: {', '.join(PATTERN_MAP.keys())}",
    )

    # Segment source
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--segments",
        "-s",
        type=str,
        help="Segment file (YAML or JSON)",
    )
    source.add_argument(
        "--pattern",
        "-p",
        type=str,
        choices=list(PATTERN_MAP.keys()),
        help="Built-in pattern to compile",
    )

    # Configuration
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Configuration file path (default: shipped plotter.yaml)",
    )
    parser.add_argument("--profile", type=str, help="Configuration profile name")
    parser.add_argument("--pen-up", type=str, help="Pen up command override")
    parser.add_argument("--pen-down", type=str, help="Pen down command override")
    parser.add_argument("--feed-rate", type=int, help="Draw feed rate override")
    parser.add_argument("--start", type=str, help="Start command override")
    parser.add_argument("--end", type=str, help="End command override")
    parser.add_argument(
        "--scale",
        type=float,
        help="Output scale in percent (100 = 200 mm tall drawing)",
    )

    # Output
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="Output file (default: timestamped turtletoy-*.gcode)",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the program instead of writing a file",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Replay the program and report bounds, pen toggles and time",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )
    parser.add_argument("--log-file", type=str, help="Also log to this file")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(
        log_level=args.log_level,
        log_file=args.log_file,
        context={"app": "compile"},
    )
    install_excepthook()

    overrides = {
        "pen_up": args.pen_up,
        "pen_down": args.pen_down,
        "feed_rate": args.feed_rate,
        "start": args.start,
        "end": args.end,
        "scale_percent": args.scale,
    }

    try:
        config = load_config(args.config, profile=args.profile).merged(overrides)

        if args.pattern:
            push_context(source=args.pattern)
            segments = PATTERN_MAP[args.pattern]()
        else:
            push_context(source=Path(args.segments).name)
            segments = load_segments(args.segments)
        logger.info("Loaded %d segments", len(segments))

        gen = ProgramGenerator(config)
        for seg in segments:
            gen.record(seg)
        program = gen.rebuild()

        if args.check:
            result = check_program(program, config)
            bounds = result["bounds"]
            if bounds is not None:
                logger.info(
                    "Bounds: X [%.3f, %.3f]  Y [%.3f, %.3f]",
                    bounds[0], bounds[2], bounds[1], bounds[3],
                )
            logger.info(
                "%d draws, %d rapids, %d pen downs, est. %.1fs",
                result["draw_count"], result["rapid_count"],
                result["pen_downs"], result["time_estimate_s"],
            )
            if result["violations"]:
                logger.error("Program check failed: %s", "; ".join(result["violations"]))
                return 1

        if args.stdout:
            print(program)
        else:
            out = Path(args.output) if args.output else Path(default_program_filename())
            try:
                export_program(program, out)
            except (OSError, RuntimeError) as e:
                logger.error("Failed to write %s: %s", out, e)
                return 1
            print(f"G-code written to: {out}")

    except (ConfigError, SegmentFormatError, GCodeError, FileNotFoundError) as e:
        logger.error("%s", e)
        logger.debug("Compilation failed", exc_info=True)
        return 1
    finally:
        pop_context()

    return 0


if __name__ == "__main__":
    sys.exit(main())
