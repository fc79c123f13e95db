#!/usr/bin/env python3
"""
Glass Panel Preview Renderer

Renders a frosted-glass panel (and optionally its drop shadow) from a
wallpaper image file, for checking materials and blur tiers by eye.

Usage:
    python render_glass.py wallpaper.jpg                    # Light glass, 300x150
    python render_glass.py wallpaper.jpg --theme dark       # Dark glass preset
    python render_glass.py wallpaper.jpg --software-only    # Force StackBlur tier
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from glass_renderer import (
    DeviceProfile,
    DisplayMetrics,
    DEFAULT_CONFIG,
    FileWallpaperSource,
    HostCapabilities,
    create_glass_renderer,
    detect_capabilities,
    ios_dark_glass,
    ios_light_glass,
    load_config,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Render a frosted-glass panel over a wallpaper image',
        epilog="""
Examples:
  python render_glass.py wallpaper.jpg
  python render_glass.py wallpaper.jpg --theme dark --width 400 --height 200
  python render_glass.py wallpaper.jpg --shadow-output shadow.png --timing
        """
    )
    parser.add_argument('wallpaper', type=Path,
                        help='Wallpaper image file')
    parser.add_argument('--width', type=int, default=300,
                        help='Panel width in pixels (default: 300)')
    parser.add_argument('--height', type=int, default=150,
                        help='Panel height in pixels (default: 150)')
    parser.add_argument('--theme', choices=['light', 'dark'], default='light',
                        help='Glass preset (default: light)')
    parser.add_argument('--consumer-id', type=int, default=7,
                        help='Cache partition id (default: 7)')
    parser.add_argument('--density', type=float, default=1.0,
                        help='Display density, pixels per dp (default: 1.0)')
    parser.add_argument('--output', type=Path, default=Path('glass.png'),
                        help='Glass panel PNG (default: glass.png)')
    parser.add_argument('--shadow-output', type=Path, default=None,
                        help='Also render the drop shadow to this PNG')
    parser.add_argument('--software-only', action='store_true',
                        help='Skip GPU and OpenCV tiers, blur with StackBlur')
    parser.add_argument('--low-end', action='store_true',
                        help='Render the low-end flat fallback')
    parser.add_argument('--timing', action='store_true',
                        help='Print per-stage timing summary')
    parser.add_argument('--config', type=Path, default=None,
                        help='YAML file with a glass: section overriding render constants')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Debug logging')
    return parser


def resolve_capabilities(profile: DeviceProfile, software_only: bool, low_end: bool) -> HostCapabilities:
    if software_only:
        capabilities = HostCapabilities(hardware_blur=False, blur_intrinsic=False, low_end=False)
    else:
        capabilities = detect_capabilities(profile)
    if low_end:
        capabilities = HostCapabilities(
            hardware_blur=capabilities.hardware_blur,
            blur_intrinsic=capabilities.blur_intrinsic,
            low_end=True,
        )
    return capabilities


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if args.width < 1 or args.height < 1:
        print(f"ERROR: Panel size must be at least 1x1, got {args.width}x{args.height}")
        return 1

    config = DEFAULT_CONFIG
    if args.config is not None:
        try:
            config = load_config(args.config)
        except (OSError, ValueError) as e:
            print(f"ERROR: Cannot load config: {e}")
            return 1

    profile = DeviceProfile.detect()
    capabilities = resolve_capabilities(profile, args.software_only, args.low_end)
    renderer = create_glass_renderer(
        FileWallpaperSource(args.wallpaper),
        display=DisplayMetrics(density=args.density),
        profile=profile,
        capabilities=capabilities,
        config=config,
        enable_timing=args.timing,
    )
    material = ios_dark_glass() if args.theme == 'dark' else ios_light_glass()

    try:
        glass = renderer.render_glass(material, args.width, args.height, args.consumer_id)
        glass.save(args.output)
        print(f"Glass panel saved to: {args.output}")

        if args.shadow_output is not None:
            shadow = renderer.render_shadow(material, args.width, args.height)
            shadow.save(args.shadow_output)
            print(f"Shadow saved to: {args.shadow_output}")
    finally:
        renderer.extractor.cascade.close()

    if args.timing:
        print(renderer.format_timing_summary())
    return 0


if __name__ == '__main__':
    sys.exit(main())
