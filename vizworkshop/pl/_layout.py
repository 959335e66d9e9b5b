import logging
import string
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from ..utils.registry import register_function

logger = logging.getLogger(__name__)


def panel_grid(nrows: int, ncols: int, figsize: Optional[Tuple[float, float]] = None,
               width_ratios: Optional[Sequence[float]] = None,
               height_ratios: Optional[Sequence[float]] = None,
               sharex: bool = False, sharey: bool = False,
               wspace: Optional[float] = None, hspace: Optional[float] = None) -> Tuple[Figure, List[Axes]]:
    r"""
    Create a grid of axes.

    Returns:
        ``(fig, axes)`` with ``axes`` a flat list in row-major order.
    """
    if nrows < 1 or ncols < 1:
        raise ValueError("nrows and ncols must be at least 1")
    if figsize is None:
        figsize = (3.5 * ncols, 3 * nrows)
    gridspec_kw = {}
    if width_ratios is not None:
        gridspec_kw['width_ratios'] = list(width_ratios)
    if height_ratios is not None:
        gridspec_kw['height_ratios'] = list(height_ratios)
    if wspace is not None:
        gridspec_kw['wspace'] = wspace
    if hspace is not None:
        gridspec_kw['hspace'] = hspace
    fig, axes = plt.subplots(nrows, ncols, figsize=figsize, sharex=sharex, sharey=sharey,
                             gridspec_kw=gridspec_kw or None, squeeze=False)
    return fig, list(np.asarray(axes).ravel())


def _panel_labels(labels, n):
    if labels == 'auto':
        letters = string.ascii_uppercase
        return [letters[i] if i < len(letters) else f'{letters[i // 26 - 1]}{letters[i % 26]}' for i in range(n)]
    if labels == 'lower':
        return [c.lower() for c in _panel_labels('auto', n)]
    labels = list(labels)
    if len(labels) < n:
        raise ValueError(f"{n} panel labels needed, got {len(labels)}")
    return labels[:n]


def add_panel_labels(axes: Sequence[Axes], labels: Union[str, Sequence[str]] = 'auto',
                     fontsize: float = 14, loc: Tuple[float, float] = (-0.1, 1.05),
                     fontweight: str = 'bold') -> List:
    r"""
    Write ``A``, ``B``, ``C``... (or ``labels``) at the top-left corner of each axes.

    ``labels`` may be ``'auto'`` (upper case), ``'lower'`` or an explicit sequence.
    ``loc`` is in axes coordinates.
    """
    axes = list(axes)
    texts = []
    for ax, label in zip(axes, _panel_labels(labels, len(axes))):
        texts.append(ax.text(loc[0], loc[1], label, transform=ax.transAxes, fontsize=fontsize,
                             fontweight=fontweight, va='bottom', ha='right'))
    return texts


@register_function(
    aliases=["arrange", "plot_grid", "cowplot", "multi_panel", "patchwork"],
    category="pl",
    description="Draw several plots into one labelled multi-panel figure",
    examples=[
        "fig = vw.pl.arrange([lambda ax: vw.pl.scatter(df, 'a', 'b', ax=ax),\n"
        "                     lambda ax: vw.pl.boxplot(df, 'g', 'b', ax=ax)], ncols=2)",
    ],
    related=["pl.panel_grid", "pl.add_panel_labels", "pl.save_figure"]
)
def arrange(plot_funcs: Sequence[Callable[[Axes], object]], ncols: int = 2,
            figsize: Optional[Tuple[float, float]] = None,
            labels: Union[str, Sequence[str], None] = 'auto', label_fontsize: float = 14,
            width_ratios: Optional[Sequence[float]] = None,
            height_ratios: Optional[Sequence[float]] = None,
            tight: bool = True) -> Figure:
    r"""
    Multi-panel figure from a list of drawing callables.

    Arguments:
        plot_funcs: Callables taking an ``Axes``; each draws one panel.
        ncols: Panels per row.
        figsize: Figure size (3.5 x 3 inches per panel by default).
        labels: ``'auto'``, ``'lower'``, a sequence of labels, or None for no labels.
        label_fontsize: Font size of the panel labels.
        width_ratios: Relative column widths.
        height_ratios: Relative row heights.
        tight: Apply ``tight_layout``.

    Returns:
        The figure; grid cells without a panel are hidden.
    """
    plot_funcs = list(plot_funcs)
    if not plot_funcs:
        raise ValueError("arrange needs at least one plot function")
    ncols = int(min(ncols, len(plot_funcs)))
    nrows = int(np.ceil(len(plot_funcs) / ncols))
    fig, axes = panel_grid(nrows, ncols, figsize=figsize, width_ratios=width_ratios,
                           height_ratios=height_ratios)
    for func, ax in zip(plot_funcs, axes):
        func(ax)
    for ax in axes[len(plot_funcs):]:
        ax.set_visible(False)
    if labels is not None:
        add_panel_labels(axes[:len(plot_funcs)], labels, fontsize=label_fontsize)
    if tight:
        fig.tight_layout()
    logger.debug("arrange: %d panels in a %dx%d grid", len(plot_funcs), nrows, ncols)
    return fig
