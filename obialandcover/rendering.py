# -*- coding: utf-8 -*-
"""
Created on Wed Oct 14 15:47:36 2026

Choropleth map of classified image objects.
"""

from pathlib import Path

import matplotlib.pyplot as plt
from loguru import logger


def _save(fig, output_path, dpi):
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=dpi, bbox_inches='tight')
    logger.info(f"Figure saved to {output_path}")


def plot_classified_map(gdf, legend, class_field, ax=None, title=None, output_path=None,
                        dpi=200, edgecolor='none', linewidth=0.1):
    """
    Draw polygons filled with the fixed color of their class.

    Parameters
    ----------
    gdf : geopandas.GeoDataFrame
        Classified polygons.
    legend : ClassLegend
        Display names and colors.
    class_field : str
        Column holding the class (code or display name).
    ax : matplotlib.axes.Axes, optional
        Axes to draw on. A new figure is created if omitted.
    title : str, optional
    output_path : str or Path, optional
        If given, the figure is saved there.

    Returns
    -------
    matplotlib.axes.Axes
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(10, 10))

    labels = legend.relabel_series(gdf[class_field])
    colors = [legend.color_for(label) for label in labels]
    gdf.plot(ax=ax, color=colors, edgecolor=edgecolor, linewidth=linewidth)

    handles = legend.handles(sorted(labels.unique()))
    ax.legend(handles=handles, title="Land cover", loc='upper left', bbox_to_anchor=(1.01, 1), frameon=False)
    ax.set_axis_off()
    if title:
        ax.set_title(title)

    if output_path is not None:
        _save(ax.figure, output_path, dpi)
    return ax


def plot_feature_importance(importances, ax=None, top=None, output_path=None, dpi=200):
    """Horizontal bar chart of Random Forest feature importances, largest on top."""
    importances = importances.sort_values(ascending=False)
    if top:
        importances = importances.head(top)
    if ax is None:
        _, ax = plt.subplots(figsize=(6, max(2, 0.3 * len(importances))))

    ax.barh(importances.index[::-1], importances.values[::-1], color='#4d7f9e')
    ax.set_xlabel("Mean decrease in impurity")
    ax.set_title("Feature importance")

    if output_path is not None:
        _save(ax.figure, output_path, dpi)
    return ax
