"""
TOWERRISK Visualization Module
==============================

ASCII and heatmap views of the tower belief grid.
"""

from .board_view import render_ascii, plot_belief_heatmap

__all__ = ['render_ascii', 'plot_belief_heatmap']
