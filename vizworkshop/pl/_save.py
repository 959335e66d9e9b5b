import logging
from pathlib import Path
from typing import Optional, Union

import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from .._settings import settings, vprint, EMOJI, Colors
from ..utils._data import ensure_dir
from ..utils.registry import register_function

logger = logging.getLogger(__name__)

UNITS_PER_INCH = {'in': 1.0, 'cm': 2.54, 'mm': 25.4}
SAVE_FORMATS = ('png', 'pdf')
PIXEL_SNAP = 1e-3


def as_figure(obj) -> Figure:
    r"""The matplotlib figure behind a Figure, an Axes, a seaborn FacetGrid/ClusterGrid or a list of axes."""
    if isinstance(obj, Figure):
        return obj
    if isinstance(obj, Axes):
        return obj.figure
    fig = getattr(obj, 'figure', None)
    if fig is None:
        fig = getattr(obj, 'fig', None)
    if isinstance(fig, Figure):
        return fig
    if isinstance(obj, (list, tuple)) and obj and isinstance(obj[0], Axes):
        return obj[0].figure
    raise TypeError(f"Cannot find a matplotlib figure in {type(obj).__name__}")


def to_inches(value: float, units: str, dpi: float) -> float:
    if units == 'px':
        return value / dpi
    if units not in UNITS_PER_INCH:
        raise ValueError(f"units must be one of 'in', 'cm', 'mm', 'px', got {units!r}")
    return value / UNITS_PER_INCH[units]


@register_function(
    aliases=["save_figure", "ggsave", "savefig", "export_figure"],
    category="pl",
    description="Save a figure as PNG or PDF with explicit width, height, units and resolution",
    examples=[
        "vw.pl.save_figure(ax, 'weight_hindfoot.png', width=15, height=10, units='cm', dpi=300)",
        "vw.pl.save_figure(g, 'yearly_facets.pdf', width=8, height=6)",
    ],
    related=["pl.arrange", "plot_set"]
)
def save_figure(fig, filename: Union[str, Path], width: Optional[float] = None,
                height: Optional[float] = None, units: str = 'in', dpi: Optional[int] = None,
                output_dir: Union[str, Path, None] = None, format: Optional[str] = None,
                transparent: bool = False, close: bool = False) -> Path:
    r"""
    Write a figure to disk.

    Arguments:
        fig: Figure, Axes, FacetGrid or ClusterGrid.
        filename: File name; the format is taken from its extension unless ``format`` is given.
        width: Figure width in ``units`` (current width when None).
        height: Figure height in ``units`` (current height when None).
        units: ``'in'``, ``'cm'``, ``'mm'`` or ``'px'``.
        dpi: Resolution (``settings.dpi_save`` by default).
        output_dir: Directory for relative file names (``settings.output_dir`` by default); created if needed.
        format: ``'png'`` or ``'pdf'``.
        transparent: Transparent background.
        close: Close the figure after saving.

    Returns:
        Path of the written file.
    """
    figure = as_figure(fig)
    dpi = settings.dpi_save if dpi is None else dpi
    if dpi <= 0:
        raise ValueError("dpi must be positive")

    path = Path(filename)
    if format is None:
        format = path.suffix.lstrip('.').lower()
        if not format:
            raise ValueError(f"Cannot infer the format of {str(filename)!r}; add .png or .pdf")
    format = format.lower()
    if format not in SAVE_FORMATS:
        raise ValueError(f"format must be one of {SAVE_FORMATS}, got {format!r}")
    suffix = path.suffix.lstrip('.').lower()
    if suffix in SAVE_FORMATS and suffix != format:
        path = path.with_suffix(f'.{format}')
    elif suffix != format:
        path = path.with_name(f'{path.name}.{format}')
    if not path.is_absolute():
        path = Path(output_dir if output_dir is not None else settings.output_dir) / path
    ensure_dir(path.parent)

    current_w, current_h = figure.get_size_inches()
    for name, value in (('width', width), ('height', height)):
        if value is not None and value <= 0:
            raise ValueError(f"{name} must be positive, got {value}")
    width_in = current_w if width is None else to_inches(width, units, dpi)
    height_in = current_h if height is None else to_inches(height, units, dpi)
    # Agg truncates size * dpi; land on the rounded pixel count
    width_in = (round(width_in * dpi) + PIXEL_SNAP) / dpi
    height_in = (round(height_in * dpi) + PIXEL_SNAP) / dpi
    figure.set_size_inches(width_in, height_in)

    # no bbox_inches='tight': the written size must stay width x height
    figure.savefig(path, dpi=dpi, format=format, transparent=transparent)
    vprint(f"   {Colors.GREEN}{EMOJI['save']} Saved {Colors.BOLD}{path}{Colors.ENDC}"
           f"{Colors.GREEN} ({width_in:.2f} x {height_in:.2f} in, {dpi} dpi){Colors.ENDC}")
    logger.debug("save_figure: %s %s", path, (width_in, height_in))
    if close:
        plt.close(figure)
    return path


def close_all():
    r"""Close every open figure."""
    plt.close('all')
