import logging
import math
from typing import Optional

import pandas as pd
import seaborn as sns

from ..utils.registry import register_function
from ._general import check_columns, hue_kwargs, smooth_lowess
from ._palette import category_levels, get_palette

logger = logging.getLogger(__name__)

FACET_KINDS = ('scatter', 'line', 'hist', 'box', 'bar')


def _facet_plot(data, kind, x, y, hue, palette, facet_args, sharex, sharey, height, aspect,
                margin_titles=False, **kwargs):
    if kind not in FACET_KINDS:
        raise ValueError(f"kind must be one of {FACET_KINDS}, got {kind!r}")
    if kind in ('scatter', 'line', 'box') and y is None:
        raise ValueError(f"kind={kind!r} needs a y column")
    check_columns(data, [x, y, hue] + [v for v in facet_args.values() if isinstance(v, str)])

    facet_kws = {'sharex': sharex, 'sharey': sharey, 'margin_titles': margin_titles}
    hue_kw = hue_kwargs(data, hue, palette)
    if hue is None:
        kwargs.setdefault('color', get_palette(1, palette)[0])
    common = dict(data=data, x=x, hue=hue, height=height, aspect=aspect, **facet_args, **hue_kw)

    if kind == 'scatter':
        kwargs.setdefault('linewidth', 0)
        return sns.relplot(kind='scatter', y=y, facet_kws=facet_kws, **common, **kwargs)
    if kind == 'line':
        return sns.relplot(kind='line', y=y, errorbar=None, facet_kws=facet_kws, **common, **kwargs)
    if kind == 'hist':
        return sns.displot(kind='hist', facet_kws=facet_kws, **common, **kwargs)
    # catplot takes the sharing options as its own arguments
    common.update(facet_kws)
    order = category_levels(data[x])
    if kind == 'box':
        return sns.catplot(kind='box', y=y, order=order, **common, **kwargs)
    if y is None:
        return sns.catplot(kind='count', order=order, **common, **kwargs)
    return sns.catplot(kind='bar', y=y, order=order, estimator='sum', errorbar=None, **common, **kwargs)


@register_function(
    aliases=["facet_wrap", "small_multiples", "facet"],
    category="pl",
    description="One panel per level of a column (scatter, line, hist, box or bar), wrapped into rows",
    examples=[
        "g = vw.pl.facet_wrap(yearly, 'line', x='year', y='n', facet='genus')",
        "g = vw.pl.facet_wrap(surveys, 'scatter', x='weight', y='hindfoot_length', facet='sex', alpha=0.2)",
    ],
    related=["pl.facet_grid", "pl.save_figure"]
)
def facet_wrap(data: pd.DataFrame, kind: str, x: str, y: Optional[str] = None,
               facet: Optional[str] = None, col_wrap: Optional[int] = None,
               hue: Optional[str] = None, sharex: bool = True, sharey: bool = True,
               height: float = 2.5, aspect: float = 1.2, palette=None, smooth: bool = False,
               title_template: str = '{col_name}', **kwargs) -> sns.FacetGrid:
    r"""
    Small multiples: one panel per level of ``facet``.

    Arguments:
        data: Tidy table.
        kind: ``'scatter'``, ``'line'``, ``'hist'``, ``'box'`` or ``'bar'``.
        x: Column on the x axis.
        y: Column on the y axis (counts rows for ``'bar'``/``'hist'`` when None).
        facet: Column defining the panels.
        col_wrap: Panels per row (about a square grid when None).
        hue: Color grouping within every panel.
        sharex: Share the x axis between panels.
        sharey: Share the y axis between panels.
        height: Height of each panel in inches.
        aspect: Width / height of each panel.
        palette: Colors for ``hue``.
        smooth: For ``kind='scatter'``, add a LOWESS curve per panel.
        title_template: Panel title, formatted with ``col_name``.
        **kwargs: Passed to the seaborn figure-level function.

    Returns:
        The seaborn ``FacetGrid``.
    """
    if facet is None:
        raise ValueError("facet_wrap needs a facet column")
    check_columns(data, [facet])
    if col_wrap is None:
        n_levels = data[facet].nunique()
        col_wrap = int(max(1, math.ceil(n_levels ** 0.5)))
    g = _facet_plot(data, kind, x, y, hue, palette, {'col': facet, 'col_wrap': col_wrap},
                    sharex, sharey, height, aspect, **kwargs)
    g.set_titles(title_template)

    if smooth and kind == 'scatter':
        for level, ax in g.axes_dict.items():
            sub = data[data[facet] == level]
            xs, ys = smooth_lowess(sub[x], sub[y])
            if len(xs):
                ax.plot(xs, ys, color='black', linewidth=1.5)
    logger.debug("facet_wrap(%s): %d panels", kind, len(g.axes_dict))
    return g


@register_function(
    aliases=["facet_grid", "panel_matrix"],
    category="pl",
    description="A row by column grid of panels, one per combination of two columns",
    examples=["g = vw.pl.facet_grid(yearly_sex, 'line', x='year', y='n', row='sex', col='genus')"],
    related=["pl.facet_wrap"]
)
def facet_grid(data: pd.DataFrame, kind: str, x: str, y: Optional[str] = None,
               row: Optional[str] = None, col: Optional[str] = None,
               hue: Optional[str] = None, sharex: bool = True, sharey: bool = True,
               height: float = 2.5, aspect: float = 1.2, palette=None,
               margin_titles: bool = True, **kwargs) -> sns.FacetGrid:
    r"""
    A ``row`` × ``col`` grid of panels; at least one of ``row``/``col`` must be given.

    Returns:
        The seaborn ``FacetGrid``.
    """
    if row is None and col is None:
        raise ValueError("facet_grid needs at least one of row or col")
    facet_args = {}
    if row is not None:
        facet_args['row'] = row
    if col is not None:
        facet_args['col'] = col
    margin_titles = margin_titles and row is not None and col is not None
    g = _facet_plot(data, kind, x, y, hue, palette, facet_args, sharex, sharey, height, aspect,
                    margin_titles=margin_titles, **kwargs)
    if margin_titles:
        g.set_titles(row_template='{row_name}', col_template='{col_name}')
    else:
        g.set_titles('{row_name}' if col is None else '{col_name}')
    return g
