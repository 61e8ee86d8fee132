"""
Command-line entry point: load a scene file, render it, write the image.
"""

from __future__ import annotations
import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from .image_io import array_to_pixels, pixels_to_array, save_image
from .scene_parser import SceneParseError, load_renderer
from .tonemapping import tone_map_image


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='prismtrace',
        description='PrismTrace - A Python Whitted-style Ray Tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py scenes/simple_phong.json
  python main.py scenes/mirror.yaml --bvh --output mirror.png
  python main.py scenes/simple_phong.json --tonemap --output phong.ppm
        '''
    )

    parser.add_argument('scene', nargs='?', help='Scene description file (JSON or YAML)')
    parser.add_argument('--bvh', action='store_true', help='Use the BVH for intersection queries')
    parser.add_argument('--output', type=str, default='output.ppm',
                        help='Output filename (default: output.ppm)')
    parser.add_argument('--tonemap', action='store_true',
                        help='Apply Reinhard tone mapping before writing')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    parser.add_argument('--quiet', '-q', action='store_true', help='Hide the progress bar')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.scene is None:
        parser.print_usage()
        print("Please provide a path to a scene file.")
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    try:
        renderer = load_renderer(args.scene, use_bvh=args.bvh)
    except SceneParseError as exc:
        print(f"Error loading scene: {exc}", file=sys.stderr)
        return 1

    print("=" * 60)
    print("PrismTrace Ray Tracer")
    print("=" * 60)
    print(renderer.describe())

    if not args.quiet:
        last_progress = [0]

        def progress_callback(progress: float):
            pct = int(progress * 100)
            if pct > last_progress[0]:
                last_progress[0] = pct
                bar_len = 40
                filled = int(bar_len * progress)
                bar = '█' * filled + '░' * (bar_len - filled)
                print(f'\rRendering: [{bar}] {pct}%', end='', flush=True)

        renderer.set_progress_callback(progress_callback)

    print("\nRendering...")
    try:
        start_time = time.perf_counter()
        pixels = renderer.render_scene()
        elapsed = time.perf_counter() - start_time
        print(f"\nRender time: {elapsed * 1000:.0f} milliseconds")

        if args.tonemap:
            pixels = array_to_pixels(tone_map_image(pixels_to_array(pixels)))

        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        print(f"Saving to: {output_path}")
        save_image(pixels, output_path)
    except (OSError, ValueError) as exc:
        print(f"\nError: {exc}", file=sys.stderr)
        return 1

    print("Done!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
