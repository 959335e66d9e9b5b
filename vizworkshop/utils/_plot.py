import warnings
from typing import Union

import matplotlib as mpl
from matplotlib import rcParams
from matplotlib.colors import LinearSegmentedColormap
import scanpy as sc
import seaborn as sns
from cycler import cycler

from .._settings import settings, vprint, EMOJI
from .registry import register_function

# FutureWarnings from these libraries are hidden once plot_set runs
QUIET_MODULES = (r"seaborn(\.|$)", r"scanpy(\.|$)", r"anndata(\.|$)")


sc_color=[
 '#1F577B', '#A56BA7', '#E0A7C8', '#E069A6', '#941456',
 '#FCBC10', '#EF7B77', '#279AD7','#F0EEF0',
 '#EAEFC5', '#7CBB5F','#368650','#A499CC','#5E4D9A',
 '#78C2ED','#866017', '#9F987F','#E0DFED',
 '#01A0A7', '#75C8CC', '#F0D7BC', '#D5B26C', '#D5DA48',
 '#B6B812', '#9DC3C3', '#A89C92', '#FEE00C', '#FEF2A1']

red_color=['#F0C3C3','#E07370','#CB3E35','#A22E2A','#5A1713',
           '#D3396D','#8B0000', '#A52A2A', '#CD5C5C', '#DC143C' ]

green_color=['#91C79D','#8FC155','#56AB56','#2D5C33','#BBCD91',
             '#6E944A','#A5C953','#3B4A25','#010000']

orange_color=['#EFBD49','#D48F3E','#AC8A3E','#7D7237','#745228',
              '#E1C085','#CEBC49','#EBE3A1','#6C6331','#8C9A48','#D7DE61']

blue_color=['#1F577B', '#279AD7', '#78C2ED', '#01A0A7', '#75C8CC', '#9DC3C3',
            '#3E8CB1', '#52B3AD', '#265B58', '#5860A7', '#312C6C', '#4CC9F0']

purple_color=['#823d86','#825b94','#bb98c6','#c69bc6','#a69ac9',
              '#c5a6cc','#caadc4','#d1c3d4']

# colorblind-safe, ggplot-like categorical set
ditto_color=[
            "#E69F00", "#56B4E9", "#009E73", "#F0E442", "#0072B2",
            "#D55E00", "#CC79A7", "#666666", "#AD7700", "#1C91D4",
            "#007756", "#D5C711", "#005685", "#A04700", "#B14380",
            "#4D4D4D", "#FFBE2D", "#80C7EF", "#00F6B3", "#F4EB71",
            "#06A5FF", "#FF8320", "#D99BBD", "#8C8C8C"
        ]

sc_color_cmap = LinearSegmentedColormap.from_list('Custom', sc_color, len(sc_color))


def palette()->list:
    r"""Returns the default vizworkshop color palette.

    Returns:
        List of hex color codes for plotting
    """
    return sc_color

def red_palette()->list:
    return red_color

def green_palette()->list:
    return green_color

def orange_palette()->list:
    return orange_color

def blue_palette()->list:
    return blue_color

def purple_palette()->list:
    return purple_color

def ditto_palette()->list:
    return ditto_color


def get_palette(n:int,palette:Union[list,str,None]=None)->list:
    r"""Return ``n`` distinct colors.

    Arguments:
        n: Number of colors needed
        palette: A list of colors, a seaborn palette name, or None for the default
            palette (scanpy's ``default_102`` when more than 28 colors are needed)

    Returns:
        List of ``n`` colors; a user list shorter than ``n`` is cycled
    """
    if n<0:
        raise ValueError("n must be non-negative")
    if palette is None:
        if n>len(sc_color):
            colors=list(sc.pl.palettes.default_102)
        else:
            colors=sc_color
    elif isinstance(palette,str):
        return [mpl.colors.to_hex(c) for c in sns.color_palette(palette,n)]
    else:
        colors=list(palette)
    if len(colors)==0:
        raise ValueError("palette must contain at least one color")
    return [colors[i%len(colors)] for i in range(n)]


@register_function(
    aliases=["plot_set", "figure_params", "set_figure_params"],
    category="utils",
    description="Configure global matplotlib/scanpy figure parameters for the workshop",
    examples=[
        "vw.plot_set()",
        "vw.plot_set(dpi=100, fontsize=12, theme='bw')",
    ],
    related=["pl.set_theme", "pl.save_figure"]
)
def plot_set(verbosity: int = 1, dpi: int = 80,
             facecolor: str = 'white',
             dpi_save: int = 300,
             transparent: bool = None,
             fontsize: int = 12,
             color_map: Union[str, None] = None,
             figsize: Union[tuple, None] = None,
             theme: Union[str, None] = None,
             ):
    r"""Configure plotting settings for vizworkshop.

    Arguments:
        verbosity: Scanpy verbosity level and vizworkshop print verbosity. Default: 1.
        dpi: Resolution for matplotlib figures. Default: 80.
        facecolor: Background color for figures. Default: 'white'.
        dpi_save: Resolution for saved figures. Default: 300.
        transparent: Whether to use transparent background. Default: None.
        fontsize: Default font size for plots. Default: 12.
        color_map: Default color map for plots. Default: None.
        figsize: Default figure size. Default: None.
        theme: Optional theme name applied through ``pl.set_theme``. Default: None.
    """
    vprint(f"{EMOJI['start']} Starting plot initialization...")
    sc.settings.verbosity = verbosity
    settings.verbosity = verbosity

    if dpi is not None:
        rcParams["figure.dpi"] = dpi
    if dpi_save is not None:
        rcParams["savefig.dpi"] = dpi_save
        settings.dpi_save = dpi_save
    if transparent is not None:
        rcParams["savefig.transparent"] = transparent
    set_rcParams_workshop(fontsize=fontsize, color_map=color_map)
    if facecolor is not None:
        rcParams["figure.facecolor"] = facecolor
        rcParams["axes.facecolor"] = facecolor
    if figsize is not None:
        rcParams["figure.figsize"] = figsize
        settings.figsize = tuple(figsize)
    if theme is not None:
        from ..pl._theme import set_theme
        set_theme(theme, fontsize=fontsize)

    for module in QUIET_MODULES:
        warnings.filterwarnings("ignore", category=FutureWarning, module=module)
    vprint(f"{EMOJI['done']} Plot settings applied (dpi={dpi}, dpi_save={dpi_save}, fontsize={fontsize})")


def set_rcParams_workshop(fontsize=12, color_map=None):
    """Set matplotlib.rcParams to the workshop defaults."""
    rcParams["figure.figsize"] = settings.figsize
    rcParams["lines.linewidth"] = 1.5
    rcParams["lines.markersize"] = 6
    rcParams["lines.markeredgewidth"] = 1

    # font
    rcParams["font.sans-serif"] = [
        "Arial",
        "Helvetica",
        "DejaVu Sans",
        "Bitstream Vera Sans",
        "sans-serif",
    ]
    rcParams["font.size"] = fontsize
    rcParams["legend.fontsize"] = 0.92 * fontsize
    rcParams["axes.titlesize"] = fontsize
    rcParams["axes.labelsize"] = fontsize

    # legend
    rcParams["legend.numpoints"] = 1
    rcParams["legend.scatterpoints"] = 1
    rcParams["legend.handlelength"] = 0.5
    rcParams["legend.handletextpad"] = 0.4

    rcParams["axes.prop_cycle"] = cycler(color=sc_color)

    rcParams["axes.linewidth"] = 0.8
    rcParams["axes.edgecolor"] = "black"
    rcParams["axes.facecolor"] = "white"

    rcParams["xtick.color"] = "k"
    rcParams["ytick.color"] = "k"
    rcParams["xtick.labelsize"] = fontsize
    rcParams["ytick.labelsize"] = fontsize

    rcParams["axes.grid"] = False

    rcParams["image.cmap"] = rcParams["image.cmap"] if color_map is None else color_map


def set_rcParams_defaults():
    """Reset `matplotlib.rcParams` to defaults."""
    rcParams.update(mpl.rcParamsDefault)
