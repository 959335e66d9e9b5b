r"""
vizworkshop: data-visualization workshop material in Python.

The workshop walks through chart types, faceting, theming and multi-panel
layout on an ecology survey table, then applies the same ideas to
single-cell and spatial transcriptomics data analysed with scanpy.

Main modules:
    datasets: Survey download/cache, PBMC 3k, Visium and synthetic datasets
    survey: Cleaning and counting the survey table
    pp: QC, normalization, HVGs, PCA, neighbors, t-SNE, UMAP
    single: Clustering, marker genes with AUC, embedding tables
    space: Spot QC, spatial preprocessing and coordinate tables
    pl: Charts, facets, themes, layout, single-cell/spatial figures, export
    tutorials: The workshop documents as runnable functions
    utils: I/O, palettes, plot settings, function registry, logging

Examples:
    >>> import vizworkshop as vw
    >>> surveys = vw.datasets.load_surveys()
    >>> clean = vw.survey.complete_cases(surveys)
    >>> ax = vw.pl.scatter(clean, 'weight', 'hindfoot_length', alpha=0.1)
    >>> vw.pl.save_figure(ax, 'scatter.png', width=15, height=10, units='cm')
    >>>
    >>> adata = vw.pp.preprocess(vw.datasets.load_pbmc3k())
    >>> vw.single.cluster(adata)
    >>> vw.pl.embedding(adata, basis='X_pca', color='leiden')
"""

from importlib.metadata import version, PackageNotFoundError

from . import utils
from . import datasets
from . import survey
from . import pp
from . import single
from . import space
from . import pl
from . import tutorials

from .utils._data import read
from .utils._plot import palette, plot_set

from .utils.registry import (
    find_function,
    list_functions,
    get_function_help,
)

name = "vizworkshop"
try:
    __version__ = version(name)
except PackageNotFoundError:
    __version__ = "unknown"

from ._settings import settings, generate_reference_table
