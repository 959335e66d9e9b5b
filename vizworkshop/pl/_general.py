r"""
General chart types for tidy tables.

Each function takes a DataFrame and column names, draws on ``ax`` (a new
figure of ``figsize`` when ``ax`` is None) and returns the axes.
"""
import logging
from typing import Optional, Sequence, Union, List, Dict, Tuple

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
from matplotlib.axes import Axes
from statsmodels.nonparametric.smoothers_lowess import lowess

from .._settings import settings
from ..utils.registry import register_function
from ._palette import color_dict, category_levels, get_palette

logger = logging.getLogger(__name__)


def check_columns(data: pd.DataFrame, columns: Sequence[Optional[str]]) -> None:
    r"""Raise ``KeyError`` naming every column of ``columns`` missing from ``data`` (None entries are skipped)."""
    missing = [c for c in columns if c is not None and c not in data.columns]
    if missing:
        raise KeyError(f"Columns {missing} not found in data (available: {list(data.columns)})")


def new_axes(ax: Optional[Axes] = None, figsize: Optional[Tuple[float, float]] = None) -> Axes:
    r"""Return ``ax``, or the axes of a new figure of ``figsize`` (``settings.figsize`` by default)."""
    if ax is not None:
        return ax
    _, ax = plt.subplots(figsize=figsize or settings.figsize)
    return ax


def is_numeric(values: pd.Series) -> bool:
    return pd.api.types.is_numeric_dtype(values) and not isinstance(values.dtype, pd.CategoricalDtype) \
        and not pd.api.types.is_bool_dtype(values)


def hue_kwargs(data: pd.DataFrame, hue: Optional[str], palette=None) -> Dict:
    r"""``palette``/``hue_order`` arguments for seaborn: a colormap for numeric ``hue``, a color dict otherwise."""
    if hue is None:
        return {}
    if is_numeric(data[hue]):
        return {'palette': palette if isinstance(palette, str) else 'viridis'}
    levels = category_levels(data[hue])
    return {'palette': color_dict(levels, palette), 'hue_order': levels}


def smooth_lowess(x, y, frac: float = 2 / 3, it: int = 3) -> Tuple[np.ndarray, np.ndarray]:
    r"""
    LOWESS fit of ``y`` on ``x`` with statsmodels.

    Non-finite pairs are dropped; fewer than three points give empty arrays.

    Returns:
        Sorted ``x`` values and the fitted ``y`` values.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    mask = np.isfinite(x) & np.isfinite(y)
    if mask.sum() < 3:
        return np.array([]), np.array([])
    fitted = lowess(y[mask], x[mask], frac=frac, it=it, return_sorted=True)
    return fitted[:, 0], fitted[:, 1]


def _finish(ax, title, xlabel, ylabel):
    if title is not None:
        ax.set_title(title)
    if xlabel is not None:
        ax.set_xlabel(xlabel)
    if ylabel is not None:
        ax.set_ylabel(ylabel)
    return ax


@register_function(
    aliases=["scatter", "geom_point", "point_plot", "geom_smooth"],
    category="pl",
    description="Scatter plot of two columns with optional color grouping, transparency and LOWESS smoothing",
    examples=[
        "vw.pl.scatter(surveys, 'weight', 'hindfoot_length', alpha=0.1)",
        "vw.pl.scatter(surveys, 'weight', 'hindfoot_length', hue='species_id', smooth=True)",
    ],
    related=["pl.facet_wrap", "pl.save_figure"]
)
def scatter(data: pd.DataFrame, x: str, y: str, hue: Optional[str] = None, alpha: float = 1.0,
            size: float = 10, smooth: bool = False, frac: float = 2 / 3, palette=None,
            ax: Optional[Axes] = None, figsize=None, title: Optional[str] = None,
            xlabel: Optional[str] = None, ylabel: Optional[str] = None,
            legend: Union[bool, str] = 'auto', **kwargs) -> Axes:
    r"""
    Scatter plot.

    Arguments:
        data: Tidy table.
        x: Column on the x axis.
        y: Column on the y axis.
        hue: Column used for the point color (categorical or numeric).
        alpha: Point transparency.
        size: Point area.
        smooth: Overlay a LOWESS curve (one per ``hue`` level when ``hue`` is categorical).
        frac: Fraction of the data used for each local fit.
        palette: Color list, seaborn palette name, dict or colormap name.
        ax: Axes to draw on.
        figsize: Size of the new figure when ``ax`` is None.
        title: Axes title.
        xlabel: x label (column name by default).
        ylabel: y label (column name by default).
        legend: Passed to seaborn.
        **kwargs: Passed to ``seaborn.scatterplot``.

    Returns:
        The axes.
    """
    check_columns(data, [x, y, hue])
    ax = new_axes(ax, figsize)
    hue_kw = hue_kwargs(data, hue, palette)
    if hue is None and palette is not None:
        kwargs.setdefault('color', get_palette(1, palette)[0])
    kwargs.setdefault('linewidth', 0)
    sns.scatterplot(data=data, x=x, y=y, hue=hue, alpha=alpha, s=size, ax=ax,
                    legend=legend, **hue_kw, **kwargs)

    if smooth:
        if hue is None or is_numeric(data[hue]):
            groups = [(None, data, 'black')]
        else:
            colors = hue_kw['palette']
            groups = [(level, data[data[hue] == level], colors[level]) for level in hue_kw['hue_order']]
        for level, sub, color in groups:
            xs, ys = smooth_lowess(sub[x], sub[y], frac=frac)
            if len(xs):
                ax.plot(xs, ys, color=color, linewidth=1.8)
        logger.debug("LOWESS smoothing drawn for %d group(s)", len(groups))
    return _finish(ax, title, xlabel, ylabel)


@register_function(
    aliases=["boxplot", "geom_boxplot", "geom_jitter", "box"],
    category="pl",
    description="Box plot of a numeric column per category with jittered points overlaid",
    examples=["vw.pl.boxplot(surveys, x='species_id', y='weight')"],
    related=["pl.violin", "pl.rotate_xticks"]
)
def boxplot(data: pd.DataFrame, x: str, y: str, hue: Optional[str] = None, jitter: bool = True,
            jitter_alpha: float = 0.3, point_size: float = 2, width: float = 0.6,
            order: Optional[List] = None, palette=None, ax: Optional[Axes] = None, figsize=None,
            title: Optional[str] = None, xlabel: Optional[str] = None, ylabel: Optional[str] = None,
            **kwargs) -> Axes:
    r"""
    Box plot with optional jittered points.

    Outliers are not drawn as fliers when ``jitter`` is on, since every point is shown.

    Returns:
        The axes.
    """
    check_columns(data, [x, y, hue])
    ax = new_axes(ax, figsize)
    order = order if order is not None else category_levels(data[x])
    color_key = hue if hue is not None else x
    levels = order if hue is None else category_levels(data[hue])
    colors = color_dict(levels, palette)

    sns.boxplot(data=data, x=x, y=y, hue=color_key, order=order,
                hue_order=levels, palette=colors, width=width, showfliers=not jitter,
                legend=hue is not None, ax=ax, **kwargs)
    if jitter:
        if hue is None:
            sns.stripplot(data=data, x=x, y=y, order=order, color='0.25', alpha=jitter_alpha,
                          size=point_size, jitter=0.25, ax=ax, zorder=3)
        else:
            sns.stripplot(data=data, x=x, y=y, hue=hue, order=order, hue_order=levels,
                          palette=colors, dodge=True, alpha=jitter_alpha, size=point_size,
                          jitter=0.2, legend=False, ax=ax, zorder=3)
    return _finish(ax, title, xlabel, ylabel)


def violin(data: pd.DataFrame, x: str, y: str, hue: Optional[str] = None, order: Optional[List] = None,
           palette=None, inner: Optional[str] = 'box', jitter: bool = False, jitter_alpha: float = 0.3,
           ax: Optional[Axes] = None, figsize=None, title: Optional[str] = None,
           xlabel: Optional[str] = None, ylabel: Optional[str] = None, **kwargs) -> Axes:
    r"""Violin plot of ``y`` per level of ``x`` (densities are cut at the data range)."""
    check_columns(data, [x, y, hue])
    ax = new_axes(ax, figsize)
    order = order if order is not None else category_levels(data[x])
    color_key = hue if hue is not None else x
    levels = order if hue is None else category_levels(data[hue])
    sns.violinplot(data=data, x=x, y=y, hue=color_key, order=order, hue_order=levels,
                   palette=color_dict(levels, palette), inner=inner, cut=0,
                   legend=hue is not None, ax=ax, **kwargs)
    if jitter:
        sns.stripplot(data=data, x=x, y=y, order=order, color='0.25', alpha=jitter_alpha,
                      size=2, ax=ax, zorder=3)
    return _finish(ax, title, xlabel, ylabel)


def histogram(data: pd.DataFrame, x: str, bins: Union[int, Sequence[float]] = 30,
              hue: Optional[str] = None, stat: str = 'count', multiple: str = 'layer',
              palette=None, alpha: float = 0.75, ax: Optional[Axes] = None, figsize=None,
              title: Optional[str] = None, xlabel: Optional[str] = None,
              ylabel: Optional[str] = None, **kwargs) -> Axes:
    r"""Histogram of ``x``; ``multiple`` is seaborn's ``'layer'``, ``'stack'``, ``'dodge'`` or ``'fill'``."""
    check_columns(data, [x, hue])
    ax = new_axes(ax, figsize)
    hue_kw = hue_kwargs(data, hue, palette)
    if hue is None:
        kwargs.setdefault('color', get_palette(1, palette)[0])
    sns.histplot(data=data, x=x, bins=bins, hue=hue, stat=stat, multiple=multiple,
                 alpha=alpha, ax=ax, **hue_kw, **kwargs)
    return _finish(ax, title, xlabel, ylabel)


@register_function(
    aliases=["barplot", "geom_bar", "geom_col", "stacked_bar"],
    category="pl",
    description="Bar chart of counts (no y) or values, side by side or stacked by a second column",
    examples=[
        "vw.pl.barplot(surveys, x='genus')",
        "vw.pl.barplot(counts, x='year', y='n', hue='sex', stacked=True)",
    ],
    related=["pl.cluster_proportion", "survey.count_by"]
)
def barplot(data: pd.DataFrame, x: str, y: Optional[str] = None, hue: Optional[str] = None,
            stacked: bool = False, normalize: bool = False, order: Optional[List] = None,
            palette=None, width: float = 0.8, horizontal: bool = False,
            ax: Optional[Axes] = None, figsize=None, title: Optional[str] = None,
            xlabel: Optional[str] = None, ylabel: Optional[str] = None,
            legend: bool = True) -> Axes:
    r"""
    Bar chart.

    Arguments:
        data: Tidy table.
        x: Category column.
        y: Value column summed per bar; rows are counted when None.
        hue: Second category; bars are dodged, or stacked with ``stacked=True``.
        stacked: Stack the ``hue`` levels.
        normalize: Scale each ``x`` to a total of one (proportions; implies ``stacked``).
        order: Order of the ``x`` levels.
        palette: Colors of the ``hue`` levels (or of the bars when ``hue`` is None).
        width: Total width of each group.
        horizontal: Draw horizontal bars.

    Returns:
        The axes.
    """
    check_columns(data, [x, y, hue])
    ax = new_axes(ax, figsize)
    keys = [x] if hue is None else [x, hue]
    if y is None:
        table = data.groupby(keys, observed=True).size()
    else:
        table = data.groupby(keys, observed=True)[y].sum()
    table = table.unstack(fill_value=0) if hue is not None else table.to_frame('value')

    order = order if order is not None else category_levels(data[x])
    table = table.reindex([o for o in order if o in table.index])
    if hue is not None:
        table = table[[c for c in category_levels(data[hue]) if c in table.columns]]
    if normalize:
        table = table.div(table.sum(axis=1).replace(0, np.nan), axis=0).fillna(0)
        stacked = True

    positions = np.arange(len(table))
    if hue is None:
        colors = {'value': get_palette(1, palette)[0]}
    else:
        colors = color_dict(list(table.columns), palette)
    bar = ax.barh if horizontal else ax.bar
    n_series = table.shape[1]
    bottom = np.zeros(len(table))
    for i, column in enumerate(table.columns):
        values = table[column].to_numpy(dtype=float)
        label = None if hue is None else str(column)
        if stacked or n_series == 1:
            offset, bar_width = positions, width
        else:
            bar_width = width / n_series
            offset = positions - width / 2 + bar_width * (i + 0.5)
        if horizontal:
            bar(offset, values, height=bar_width, left=bottom if stacked else None,
                color=colors[column], label=label)
        else:
            bar(offset, values, width=bar_width, bottom=bottom if stacked else None,
                color=colors[column], label=label)
        if stacked:
            bottom = bottom + values

    tick_labels = [str(i) for i in table.index]
    value_label = ('proportion' if normalize else ('count' if y is None else y))
    if horizontal:
        ax.set_yticks(positions, tick_labels)
        ax.set_xlabel(value_label)
        ax.set_ylabel(x)
    else:
        ax.set_xticks(positions, tick_labels)
        ax.set_ylabel(value_label)
        ax.set_xlabel(x)
    if hue is not None and legend:
        ax.legend(title=hue, frameon=False, bbox_to_anchor=(1.02, 0.5), loc='center left')
    return _finish(ax, title, xlabel, ylabel)


@register_function(
    aliases=["lineplot", "geom_line", "time_series"],
    category="pl",
    description="Line plot of a value over time, one line per group",
    examples=["vw.pl.lineplot(yearly, x='year', y='n', hue='genus')"],
    related=["survey.yearly_counts", "pl.facet_wrap"]
)
def lineplot(data: pd.DataFrame, x: str, y: str, hue: Optional[str] = None,
             marker: Optional[str] = None, linewidth: float = 1.5, palette=None,
             ax: Optional[Axes] = None, figsize=None, title: Optional[str] = None,
             xlabel: Optional[str] = None, ylabel: Optional[str] = None, **kwargs) -> Axes:
    r"""Line plot of ``y`` against ``x``; rows sharing ``x`` within a group are averaged without error bands."""
    check_columns(data, [x, y, hue])
    ax = new_axes(ax, figsize)
    hue_kw = hue_kwargs(data, hue, palette)
    if hue is None:
        kwargs.setdefault('color', get_palette(1, palette)[0])
    sns.lineplot(data=data, x=x, y=y, hue=hue, marker=marker, linewidth=linewidth,
                 errorbar=None, ax=ax, **hue_kw, **kwargs)
    if hue is not None and ax.get_legend() is not None:
        sns.move_legend(ax, 'center left', bbox_to_anchor=(1.02, 0.5), frameon=False)
    return _finish(ax, title, xlabel, ylabel)
