import argparse
import sys
from typing import List, Optional

from .errors import SpriteError
from .packer import HeuristicType, SplitHeuristic
from .pipeline import SpriteConfig, artifact_paths, build_sprites

PLACEMENT_MAP = {
    'shortside': HeuristicType.BEST_SHORT_SIDE_FIT,
    'longside': HeuristicType.BEST_LONG_SIDE_FIT,
    'area': HeuristicType.BEST_AREA_FIT,
    'bottomleft': HeuristicType.BOTTOM_LEFT,
}

SPLIT_MAP = {
    'shortaxis': SplitHeuristic.SHORTEST_AXIS,
    'longaxis': SplitHeuristic.LONGEST_AXIS,
    'minarea': SplitHeuristic.MIN_AREA,
    'maxarea': SplitHeuristic.MAX_AREA,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='svgsprite',
        description='Pack SVG images into 1x and 2x PNG sprite sheets with JSON manifests')
    parser.add_argument('--svgs', action='append', default=[], metavar='DIR',
                        help='Directory containing SVGs (repeatable)')
    parser.add_argument('--output', required=True, metavar='DIR', help='Output directory')
    parser.add_argument('--width', type=int, required=True,
                        help='Maximum output width of the non-scaled image')
    parser.add_argument('--height', type=int, required=True,
                        help='Maximum output height of the non-scaled image')
    parser.add_argument('--placement', default='area', choices=sorted(PLACEMENT_MAP),
                        help='Free rectangle choice heuristic')
    parser.add_argument('--split', default='minarea', choices=sorted(SPLIT_MAP),
                        help='Guillotine split heuristic')
    parser.add_argument('--jobs', type=int, default=1,
                        help='Number of resolutions to build concurrently')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = SpriteConfig(
        input_dirs=args.svgs,
        output_dir=args.output,
        max_width=args.width,
        max_height=args.height,
        placement=PLACEMENT_MAP[args.placement],
        split=SPLIT_MAP[args.split],
        jobs=args.jobs,
    )

    try:
        outputs = build_sprites(config)
    except SpriteError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for output in outputs:
        png_path, _ = artifact_paths(config.output_dir, output.resolution)
        print(f"{png_path} ({output.atlas.width}×{output.atlas.height}) "
              f"with {len(output.manifest)} sprites")
    print("Done!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
