"""
1) Load a genogram from an editor project (.json) or a GEDCOM file (.ged).
2) Optionally validate it for cycles, extra parents and dangling references.
3) Arrange it automatically: generations top-down, couples side by side,
   siblings centered under their parents.
4) Save the project with the new coordinates.
5) Optionally plot a preview image.
"""

import argparse
import logging
from pathlib import Path

from layout import layout
from models import DEFAULT_CONFIG, LayoutConfig
from parsing import load_input, save_project
from plotting import plot_genogram
from validation import validate_family


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Arrange a genogram automatically.")
    parser.add_argument("input", type=Path, help="Project JSON or GEDCOM file.")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Path to output project JSON (default: <input>.layout.json).",
    )
    parser.add_argument("--plot", type=Path, default=None, help="Write a preview image (PNG, SVG, PDF).")
    parser.add_argument("--validate", action="store_true", help="Print data validation warnings.")
    parser.add_argument(
        "--horizontal-spacing",
        type=int,
        default=DEFAULT_CONFIG.horizontal_spacing,
        help="Distance between neighbours in a row (default: %(default)s).",
    )
    parser.add_argument(
        "--vertical-spacing",
        type=int,
        default=DEFAULT_CONFIG.vertical_spacing,
        help="Distance between generations (default: %(default)s).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log layout trace events.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    print(f"Loading genogram: {args.input}")
    try:
        persons, relationships, document = load_input(args.input)
    except (OSError, ValueError, KeyError) as e:
        print(f"Error: could not load {args.input}: {e}")
        return 1
    print(f"  Found {len(persons)} persons and {len(relationships)} relationships")

    if args.validate:
        print("Validating genogram...")
        warnings = validate_family(persons, relationships)
        if warnings:
            print(f"  Found {len(warnings)} validation warnings:")
            for w in warnings[:10]:  # Show first 10 warnings
                print(f"    - {w}")
            if len(warnings) > 10:
                print(f"    ... and {len(warnings) - 10} more")
        else:
            print("  No validation issues found")

    config = LayoutConfig(
        horizontal_spacing=args.horizontal_spacing,
        vertical_spacing=args.vertical_spacing,
    )
    print("Arranging genogram...")
    layout(persons, relationships, config)

    output_path = args.output or args.input.with_name(f"{args.input.stem}.layout.json")
    save_project(output_path, persons, relationships, document)
    print(f"Project saved to {output_path}")

    if args.plot:
        print(f"Plotting genogram to: {args.plot}")
        plot_genogram(persons, relationships, args.plot)

    print("Done!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
