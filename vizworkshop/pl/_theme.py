import logging
from typing import Optional, Union, List

import matplotlib as mpl
import seaborn as sns
from matplotlib import rcParams
from matplotlib.axes import Axes

from ..utils._plot import get_palette
from ..utils.registry import register_function

logger = logging.getLogger(__name__)

# name -> (seaborn style, rcParams overrides, axes overrides used by theme_axes)
THEMES = {
    'bw': ('ticks', {'axes.edgecolor': 'black', 'axes.linewidth': 0.8, 'axes.grid': True,
                     'grid.color': '#EBEBEB', 'axes.facecolor': 'white'},
           {'facecolor': 'white', 'grid': True, 'spines': 'all', 'edgecolor': 'black', 'gridcolor': '#EBEBEB'}),
    'classic': ('ticks', {'axes.edgecolor': 'black', 'axes.grid': False, 'axes.facecolor': 'white',
                          'axes.spines.top': False, 'axes.spines.right': False},
                {'facecolor': 'white', 'grid': False, 'spines': 'left_bottom', 'edgecolor': 'black'}),
    'minimal': ('whitegrid', {'axes.edgecolor': 'white', 'axes.grid': True, 'grid.color': '#EBEBEB',
                              'axes.facecolor': 'white'},
                {'facecolor': 'white', 'grid': True, 'spines': 'none', 'gridcolor': '#EBEBEB'}),
    'light': ('whitegrid', {'axes.edgecolor': '#B3B3B3', 'axes.grid': True, 'grid.color': '#DEDEDE',
                            'axes.facecolor': 'white'},
              {'facecolor': 'white', 'grid': True, 'spines': 'all', 'edgecolor': '#B3B3B3', 'gridcolor': '#DEDEDE'}),
    'dark': ('darkgrid', {'axes.facecolor': '#7F7F7F', 'grid.color': '#8C8C8C', 'axes.grid': True},
             {'facecolor': '#7F7F7F', 'grid': True, 'spines': 'none', 'gridcolor': '#8C8C8C'}),
    'void': ('white', {'axes.grid': False, 'axes.facecolor': 'white', 'xtick.bottom': False,
                       'ytick.left': False},
             {'facecolor': 'white', 'grid': False, 'spines': 'none', 'axis_off': True}),
    'grey': ('darkgrid', {'axes.facecolor': '#EBEBEB', 'grid.color': 'white', 'axes.grid': True},
             {'facecolor': '#EBEBEB', 'grid': True, 'spines': 'none', 'gridcolor': 'white'}),
}


def _check_theme(name):
    if name not in THEMES:
        raise ValueError(f"Unknown theme {name!r}; choose one of {list(THEMES)}")
    return THEMES[name]


@register_function(
    aliases=["set_theme", "theme", "theme_bw", "theme_classic", "theme_minimal"],
    category="pl",
    description="Apply a named figure theme (bw, classic, minimal, light, dark, void, grey) globally",
    examples=[
        "vw.pl.set_theme('bw')",
        "vw.pl.set_theme('minimal', fontsize=14, palette='Set2')",
    ],
    related=["pl.theme_axes", "plot_set"]
)
def set_theme(name: str = 'bw', fontsize: int = 12, palette: Union[str, List[str], None] = None):
    r"""
    Apply a theme to every figure created afterwards.

    Arguments:
        name: One of ``THEMES``.
        fontsize: Base font size.
        palette: Color cycle (seaborn palette name or color list; default workshop palette).

    Returns:
        The theme name.
    """
    style, overrides, _ = _check_theme(name)
    sns.set_theme(style=style, font_scale=1.0, palette=get_palette(10, palette))
    rcParams.update(overrides)
    rcParams['font.size'] = fontsize
    rcParams['axes.titlesize'] = fontsize
    rcParams['axes.labelsize'] = fontsize
    rcParams['xtick.labelsize'] = 0.9 * fontsize
    rcParams['ytick.labelsize'] = 0.9 * fontsize
    rcParams['legend.fontsize'] = 0.9 * fontsize
    logger.debug("Theme %r applied (fontsize=%s)", name, fontsize)
    return name


def theme_axes(ax: Axes, name: str = 'bw') -> Axes:
    r"""Restyle a single axes with theme ``name`` without touching the global rcParams."""
    _, _, spec = _check_theme(name)
    ax.set_facecolor(spec['facecolor'])
    if spec['grid']:
        ax.grid(True, color=spec.get('gridcolor', '#EBEBEB'), linewidth=0.6)
        ax.set_axisbelow(True)
    else:
        ax.grid(False)
    spines = spec['spines']
    for side, spine in ax.spines.items():
        if spines == 'all':
            spine.set_visible(True)
            spine.set_edgecolor(spec.get('edgecolor', 'black'))
        elif spines == 'left_bottom':
            spine.set_visible(side in ('left', 'bottom'))
            spine.set_edgecolor(spec.get('edgecolor', 'black'))
        else:
            spine.set_visible(False)
    if spec.get('axis_off'):
        ax.set_xticks([])
        ax.set_yticks([])
        ax.set_xlabel('')
        ax.set_ylabel('')
    return ax


def rotate_xticks(ax: Axes, angle: float = 45, ha: str = 'right') -> Axes:
    r"""Rotate the x tick labels of ``ax``."""
    for label in ax.get_xticklabels():
        label.set_rotation(angle)
        label.set_horizontalalignment(ha)
    return ax


def style_axes(ax: Axes, fontsize: Optional[float] = None, title: Optional[str] = None,
               xlabel: Optional[str] = None, ylabel: Optional[str] = None,
               legend: Union[bool, str] = True, legend_title: Optional[str] = None) -> Axes:
    r"""
    Set the text of an axes and where its legend goes.

    Arguments:
        ax: Axes to modify.
        fontsize: Font size for title, labels and ticks (unchanged when None).
        title: Axes title.
        xlabel: x axis label.
        ylabel: y axis label.
        legend: ``True`` keeps the legend, ``False`` removes it, ``'right'``,
            ``'bottom'`` or ``'top'`` moves it outside the axes.
        legend_title: Replacement legend title.
    """
    if title is not None:
        ax.set_title(title)
    if xlabel is not None:
        ax.set_xlabel(xlabel)
    if ylabel is not None:
        ax.set_ylabel(ylabel)
    if fontsize is not None:
        ax.title.set_fontsize(fontsize * 1.1)
        ax.xaxis.label.set_fontsize(fontsize)
        ax.yaxis.label.set_fontsize(fontsize)
        ax.tick_params(labelsize=fontsize * 0.9)

    current = ax.get_legend()
    if current is None:
        return ax
    if legend is False:
        current.remove()
        return ax
    if legend_title is not None:
        current.set_title(legend_title)
    if legend == 'right':
        sns.move_legend(ax, 'center left', bbox_to_anchor=(1.02, 0.5), frameon=False)
    elif legend == 'bottom':
        sns.move_legend(ax, 'upper center', bbox_to_anchor=(0.5, -0.15),
                        ncol=min(len(current.get_texts()), 5), frameon=False)
    elif legend == 'top':
        sns.move_legend(ax, 'lower center', bbox_to_anchor=(0.5, 1.02),
                        ncol=min(len(current.get_texts()), 5), frameon=False)
    return ax


def reset_theme():
    r"""Back to matplotlib's defaults."""
    mpl.rcdefaults()
