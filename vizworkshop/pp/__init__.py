r"""
Preprocessing for the single-cell and spatial workflows.

Every step is a thin, copy-paste-friendly call into scanpy (or scipy for
quantile normalization); the functions only pick parameters and cap them to
the size of the data.

Examples:
    >>> import vizworkshop as vw
    >>> adata = vw.pp.preprocess(adata)
    >>> vw.pp.neighbors(adata)
    >>> vw.pp.tsne(adata)
    >>> vw.pp.umap(adata)
"""

from ._qc import qc_metrics, mito_genes, filter_cells
from ._preprocess import (
    normalize,
    quantile_normalize,
    highly_variable,
    scale,
    pca,
    neighbors,
    tsne,
    umap,
    preprocess,
)
