"""
Board Views
===========

Human-readable dumps of a belief grid for debugging and reports.

- render_ascii: one character per cell, optional path overlay
- plot_belief_heatmap: matplotlib image of tower probabilities
"""

import logging
from typing import Iterable, Optional

import numpy as np

from towerrisk.core.definitions import GridCoord
from towerrisk.simulation.grid import ProbabilityGrid

logger = logging.getLogger(__name__)


def _cell_symbol(grid: ProbabilityGrid, x: int, y: int) -> str:
    if grid.obstacles[y, x]:
        return '#'
    p = float(grid.probabilities[y, x])
    if p >= 1.0:
        return 'T'
    if grid.seen[y, x] and p <= 0.0:
        return '.'
    # Unseen belief, bucketed into tenths
    return str(min(9, int(p * 10)))


def render_ascii(
    grid: ProbabilityGrid,
    path: Iterable[GridCoord] = (),
    show_legend: bool = True,
) -> str:
    """
    Create ASCII visualization of the belief grid.

    Args:
        grid: Belief grid to draw (row 0 is y = 0)
        path: Cells to mark with '*'
        show_legend: Whether to include legend in output

    Returns:
        ASCII string representation of the grid
    """
    marked = set(path)
    lines = []
    for y in range(grid.height):
        line = ''.join(
            '*' if (x, y) in marked else _cell_symbol(grid, x, y)
            for x in range(grid.width)
        )
        lines.append(line)

    result = '\n'.join(lines)

    if show_legend:
        result += '\n\nLegend: T tower, # obstacle, . seen clear, * path'
        result += '\n        0-9 unseen tower probability in tenths'

    return result


def plot_belief_heatmap(
    grid: ProbabilityGrid,
    output_path: Optional[str] = None,
    path: Iterable[GridCoord] = (),
) -> Optional[np.ndarray]:
    """
    Plot tower probabilities as a heatmap.

    Saves to ``output_path`` if given and returns None; otherwise returns the
    rendered image as an RGB numpy array.
    """
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(figsize=(6, 6))
    image = ax.imshow(grid.probabilities, origin='upper', cmap='magma',
                      vmin=0.0, vmax=1.0, interpolation='nearest')
    fig.colorbar(image, ax=ax, label='P(tower)')

    obstacle_y, obstacle_x = np.nonzero(grid.obstacles)
    if len(obstacle_x):
        ax.scatter(obstacle_x, obstacle_y, marker='s', c='green', s=12, label='obstacle')

    steps = list(path)
    if steps:
        xs, ys = zip(*steps)
        ax.plot(xs, ys, color='cyan', linewidth=1.5, marker='.', label='path')

    ax.set_xlabel('x')
    ax.set_ylabel('y')
    ax.set_title(f'Tower belief ({grid.width}x{grid.height})')

    if output_path:
        fig.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close(fig)
        logger.info(f"Saved heatmap to: {output_path}")
        return None

    fig.canvas.draw()
    img = np.asarray(fig.canvas.buffer_rgba())[:, :, :3].copy()
    plt.close(fig)
    return img
