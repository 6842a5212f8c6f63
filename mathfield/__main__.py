#!/usr/bin/env python
"""
CLI entry point for the mathfield package.

Usage:
    python -m mathfield --help
    python -m mathfield "x^2+1" --spoken
    python -m mathfield "\\frac{1}{2}" --boxes --style text
"""

import argparse
import logging

from .configs import setup_logging
from .model import MathStyle, layout, parse_latex, to_latex, to_speakable_text
from .model.layout import Box


def print_box(box: Box, indent: int = 0):
    """Print a box tree, one box per line."""
    label = ' '.join(box.classes) or '-'
    text = f" {box.text!r}" if box.text else ''
    print(f"{'  ' * indent}{label}{text}  "
          f"w={box.width:.3f} h={box.height:.3f} d={box.depth:.3f} "
          f"at ({box.x:.3f}, {box.y:.3f})")
    for child in box.children:
        print_box(child, indent + 1)


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Parse, normalize, speak and lay out a LaTeX formula",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Normalized LaTeX
  python -m mathfield "x^2+1"

  # Spoken text
  python -m mathfield "\\frac{1}{2}" --spoken

  # Box tree in text style
  python -m mathfield "\\sum_{i=1}^{n} i" --boxes --style text
        """
    )
    parser.add_argument("latex", type=str, help="LaTeX formula")
    parser.add_argument("--style", type=str, default="display",
                        choices=["display", "text", "script"],
                        help="Math style for layout")
    parser.add_argument("--spoken", action="store_true",
                        help="Also print the spoken text")
    parser.add_argument("--boxes", action="store_true",
                        help="Also print the box tree")
    parser.add_argument("--log-level", type=str, default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level")

    args = parser.parse_args()
    logger = setup_logging(getattr(logging, args.log_level))

    result = parse_latex(args.latex)
    for issue in result.issues:
        logger.warning(f"{issue.kind.value} at {issue.position}: {issue.message}")

    print(to_latex(result.atoms))

    if args.spoken:
        print(to_speakable_text(result.atoms))

    if args.boxes:
        box = layout(result.atoms, MathStyle.parse(args.style))
        print(f"\n{'='*60}")
        print(f"Box tree ({args.style})")
        print(f"{'='*60}")
        print_box(box)


if __name__ == "__main__":
    main()
