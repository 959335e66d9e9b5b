import logging
from typing import Optional, Union

import numpy as np
from anndata import AnnData
from matplotlib.axes import Axes

from ..space._spatial import spatial_frame
from ..utils.registry import register_function
from ._general import new_axes
from ._single import draw_points, uns_colors, set_frame

logger = logging.getLogger(__name__)


def default_spot_size(coords: np.ndarray) -> float:
    r"""A spot area (points²) that roughly fills the grid of ``coords`` on a 4-inch axes."""
    n = len(coords)
    if n < 2:
        return 30.0
    # ~4 inch axes = 288 points, sqrt(n) spots per side
    diameter = 288.0 / np.sqrt(n) * 0.9
    logger.debug("default_spot_size: %d spots -> %.1f pt", n, diameter)
    return float(np.clip(diameter ** 2, 2.0, 400.0))


@register_function(
    aliases=["spatial", "SpatialDimPlot", "SpatialFeaturePlot", "spatial_plot"],
    category="pl",
    description="Plot spots at their tissue coordinates colored by an obs column or gene",
    examples=[
        "vw.pl.spatial(adata, color='total_counts')",
        "vw.pl.spatial(adata, color='leiden', legend_loc='right margin')",
    ],
    related=["space.spatial_frame", "pl.embedding"]
)
def spatial(adata: AnnData, color: Optional[str] = None, spot_size: Optional[float] = None,
            invert_y: bool = True, basis: str = 'spatial', palette=None, cmap: str = 'viridis',
            in_tissue_only: bool = False, layer: Optional[str] = None, alpha: float = 1.0,
            legend_loc: Optional[str] = 'right margin', frameon: Union[bool, str] = False,
            title: Optional[str] = None, vmax: Optional[float] = None,
            ax: Optional[Axes] = None, figsize=None) -> Axes:
    r"""
    Spots at their x-y coordinates on an equal-aspect axes.

    Arguments:
        adata: Spatial AnnData.
        color: ``obs`` column or gene; None draws grey spots.
        spot_size: Marker area in points² (estimated from the spot grid when None).
        invert_y: Put the origin top-left, as in image coordinates.
        basis: ``obsm`` key with the coordinates.
        palette: Colors for categorical ``color``.
        cmap: Colormap for numeric ``color``.
        in_tissue_only: Drop spots outside the tissue.
        layer: Layer for gene values.
        alpha: Spot transparency.
        legend_loc: ``'right margin'``, ``'on data'`` or None.
        frameon: True, False or ``'small'``.
        title: Axes title (``color`` by default).
        vmax: Upper limit of the color scale.
        ax: Axes to draw on.
        figsize: Size of the new figure when ``ax`` is None.

    Returns:
        The axes.
    """
    keys = [color] if color is not None else None
    frame = spatial_frame(adata, keys=keys, basis=basis, in_tissue_only=in_tissue_only, layer=layer)
    ax = new_axes(ax, figsize or (4.5, 4))
    coords = frame[['x', 'y']].to_numpy(dtype=float)
    size = default_spot_size(coords) if spot_size is None else spot_size
    draw_points(ax, coords[:, 0], coords[:, 1],
                values=frame[color] if color is not None else None,
                colors=uns_colors(adata, color, palette) if color is not None else None,
                palette=palette, cmap=cmap, size=size, alpha=alpha, legend_loc=legend_loc,
                vmax=vmax)
    ax.set_aspect('equal')
    if invert_y:
        ax.invert_yaxis()
    set_frame(ax, frameon, 'spatial1', 'spatial2')
    ax.set_title(title if title is not None else (color or 'spatial'))
    return ax
