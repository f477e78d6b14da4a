"""
TOWERRISK - Command Line Entry Point
====================================
Create, inspect and plan on saved tower belief boards.

Usage:
    # Create a fresh board with the default prior
    python -m towerrisk.main new --width 32 --height 32 --out boards/32x32_0.board

    # Print the board, optionally export a heatmap
    python -m towerrisk.main show boards/32x32_0.board --heatmap belief.png

    # Lowest-risk path between two cells
    python -m towerrisk.main plan boards/32x32_0.board --origin 0,0 --target 20,5

"""

import argparse
import logging
import sys
from typing import List, Optional, Tuple

from towerrisk.core.config import TowerModelConfig
from towerrisk.simulation.grid import GridBoundsError, ProbabilityGrid
from towerrisk.simulation.search import RiskAwareSearch
from towerrisk.utils.persistence import load_grid, save_grid
from towerrisk.visualization.board_view import plot_belief_heatmap, render_ascii

logger = logging.getLogger(__name__)


def parse_coord(text: str) -> Tuple[int, int]:
    """Parse 'x,y' into a coordinate tuple."""
    try:
        x, y = (int(part) for part in text.split(','))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected 'x,y', got '{text}'") from None
    return (x, y)


def _load_or_exit(path: str) -> ProbabilityGrid:
    grid = load_grid(path)
    if grid is None:
        logger.error(f"Board file not found: {path}")
        sys.exit(2)
    return grid


def cmd_new(args: argparse.Namespace) -> int:
    grid = ProbabilityGrid(args.width, args.height, prior=args.density)
    save_grid(grid, args.out)
    print(f"Created {args.width}x{args.height} board: {args.out}")  # User-facing output
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    grid = _load_or_exit(args.board)
    print(render_ascii(grid, show_legend=not args.no_legend))
    if args.heatmap:
        plot_belief_heatmap(grid, output_path=args.heatmap)
    return 0


def cmd_plan(args: argparse.Namespace) -> int:
    grid = _load_or_exit(args.board)
    config = TowerModelConfig(tower_range=args.tower_range, tower_accuracy=args.accuracy)
    try:
        result = RiskAwareSearch(grid, config).search(args.origin, args.target)
    except GridBoundsError as e:
        logger.error(str(e))
        return 2

    if not result.success:
        print(f"No path from {args.origin} to {args.target}")
        return 1

    print(f"Path ({len(result.path)} steps, {result.nodes_expanded} expansions):")
    print(' -> '.join(f"({x},{y})" for x, y in result.path))
    if args.ascii:
        print(render_ascii(grid, path=result.path))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='TOWERRISK - tower belief boards and risk-aware paths'
    )
    parser.add_argument(
        '--verbose', '-v', action='store_true',
        help='Enable debug logging'
    )
    sub = parser.add_subparsers(dest='command', required=True)

    new = sub.add_parser('new', help='Create a board with a uniform prior')
    new.add_argument('--width', type=int, required=True, help='Board width')
    new.add_argument('--height', type=int, required=True, help='Board height')
    new.add_argument('--density', type=float, default=TowerModelConfig.initial_tower_density,
                     help='Prior tower probability per cell (default: 0.01)')
    new.add_argument('--out', '-o', type=str, required=True, help='Output board file')
    new.set_defaults(func=cmd_new)

    show = sub.add_parser('show', help='Print a saved board')
    show.add_argument('board', type=str, help='Board file')
    show.add_argument('--heatmap', type=str, help='Export a PNG heatmap')
    show.add_argument('--no-legend', action='store_true', help='Omit the legend')
    show.set_defaults(func=cmd_show)

    plan = sub.add_parser('plan', help='Find the lowest-risk path on a saved board')
    plan.add_argument('board', type=str, help='Board file')
    plan.add_argument('--origin', type=parse_coord, required=True, help='Start cell as x,y')
    plan.add_argument('--target', type=parse_coord, required=True, help='Goal cell as x,y')
    plan.add_argument('--tower-range', type=int, default=TowerModelConfig.tower_range,
                      help='Tower weapon range (default: 4)')
    plan.add_argument('--accuracy', type=float, default=TowerModelConfig.tower_accuracy,
                      help='Tower accuracy (default: 0.75)')
    plan.add_argument('--ascii', action='store_true', help='Draw the path on the board')
    plan.set_defaults(func=cmd_plan)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
