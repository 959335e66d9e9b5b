import logging
from typing import Union, Optional

import anndata
import numpy as np
import pandas as pd
import scanpy as sc
from scipy.sparse import issparse
from scipy.stats import rankdata

from .._settings import vprint, EMOJI, Colors, add_reference
from ..utils.registry import register_function
from ._qc import qc_metrics, filter_cells

logger = logging.getLogger(__name__)


@register_function(
    aliases=["normalize", "lognormalize", "normalize_total", "log1p"],
    category="preprocessing",
    description="Library-size normalization followed by log1p, keeping raw counts in a layer",
    examples=["vw.pp.normalize(adata, target_sum=1e4)"],
    related=["pp.highly_variable", "pp.quantile_normalize"]
)
def normalize(adata: anndata.AnnData, target_sum: float = 1e4, log: bool = True,
              layer_counts: Optional[str] = 'counts') -> anndata.AnnData:
    r"""
    Normalize every cell to ``target_sum`` counts and log-transform.

    Arguments:
        adata: AnnData with raw counts in ``X``.
        target_sum: Total counts per cell after normalization.
        log: Whether to apply ``log1p`` afterwards.
        layer_counts: Layer that receives a copy of the raw counts (None to skip).

    Returns:
        ``adata``, modified in place; ``adata.raw`` holds the log-normalized matrix.
    """
    if layer_counts is not None:
        adata.layers[layer_counts] = adata.X.copy()
    sc.pp.normalize_total(adata, target_sum=target_sum)
    if log:
        sc.pp.log1p(adata)
    adata.raw = adata
    add_reference(adata, 'scanpy', 'normalization with scanpy')
    return adata


@register_function(
    aliases=["quantile_normalize", "normalize.quantiles", "quantile"],
    category="preprocessing",
    description="Quantile-normalize the columns of a matrix so they share one distribution",
    examples=["normed = vw.pp.quantile_normalize(expression_df)"],
    related=["pp.normalize"]
)
def quantile_normalize(data: Union[np.ndarray, pd.DataFrame]) -> Union[np.ndarray, pd.DataFrame]:
    r"""
    Quantile normalization of the columns of ``data``.

    Every column is replaced by the mean of the sorted columns, assigned back
    by rank; tied values receive the average of the reference values they span.

    Arguments:
        data: 2-D array or DataFrame (rows = features, columns = samples).

    Returns:
        Same type as ``data``; DataFrame labels are preserved.
    """
    values = np.asarray(data, dtype=float)
    if values.ndim != 2:
        raise ValueError(f"quantile_normalize expects a 2-D input, got {values.ndim} dimensions")
    if np.isnan(values).any():
        raise ValueError("quantile_normalize does not accept missing values")
    n_rows = values.shape[0]
    reference = np.sort(values, axis=0).mean(axis=1)
    positions = np.arange(n_rows)

    result = np.empty_like(values)
    for j in range(values.shape[1]):
        ranks = rankdata(values[:, j], method='average') - 1
        result[:, j] = np.interp(ranks, positions, reference)

    if isinstance(data, pd.DataFrame):
        return pd.DataFrame(result, index=data.index, columns=data.columns)
    return result


@register_function(
    aliases=["highly_variable", "hvg", "highly_variable_genes", "FindVariableFeatures"],
    category="preprocessing",
    description="Flag highly variable genes on log-normalized data",
    examples=["vw.pp.highly_variable(adata, n_top_genes=2000)"],
    related=["pp.normalize", "pp.pca"]
)
def highly_variable(adata: anndata.AnnData, n_top_genes: int = 2000,
                    flavor: str = 'seurat') -> anndata.AnnData:
    r"""
    Flag the ``n_top_genes`` most variable genes in ``var['highly_variable']``.

    The request is capped at the number of genes in ``adata``.
    """
    n_top = int(min(n_top_genes, adata.n_vars))
    sc.pp.highly_variable_genes(adata, n_top_genes=n_top, flavor=flavor)
    logger.debug("%d highly variable genes flagged", int(adata.var['highly_variable'].sum()))
    return adata


def scale(adata: anndata.AnnData, max_value: float = 10, layers_add: str = 'scaled') -> anndata.AnnData:
    r"""Scale each gene to unit variance and zero mean into ``adata.layers[layers_add]``; ``X`` is untouched."""
    scaled = sc.pp.scale(adata, max_value=max_value, copy=True)
    X = scaled.X
    adata.layers[layers_add] = X.toarray() if issparse(X) else np.asarray(X)
    return adata


@register_function(
    aliases=["pca", "principal_component_analysis", "RunPCA"],
    category="preprocessing",
    description="Principal component analysis on the highly variable genes",
    examples=["vw.pp.pca(adata, n_comps=50)"],
    related=["pl.pca_variance", "pp.neighbors"]
)
def pca(adata: anndata.AnnData, n_comps: int = 50, layer: Optional[str] = 'scaled',
        random_state: int = 0) -> anndata.AnnData:
    r"""
    Run PCA with ``scanpy.pp.pca`` into ``obsm['X_pca']``.

    ``n_comps`` is capped by the number of cells and of (highly variable) genes.
    If ``layer`` is missing from ``adata.layers`` the PCA runs on ``X``.
    """
    n_features = int(adata.var['highly_variable'].sum()) if 'highly_variable' in adata.var else adata.n_vars
    n_comps = int(max(1, min(n_comps, adata.n_obs - 1, n_features - 1)))
    if layer is not None and layer not in adata.layers:
        logger.debug("Layer %r not found; running PCA on X", layer)
        layer = None
    sc.pp.pca(adata, n_comps=n_comps, layer=layer, random_state=random_state)
    add_reference(adata, 'scanpy', 'PCA with scanpy')
    return adata


def _n_pcs(adata, n_pcs):
    available = adata.obsm['X_pca'].shape[1]
    if n_pcs is None:
        return available
    return int(min(n_pcs, available))


def neighbors(adata: anndata.AnnData, n_neighbors: int = 15, n_pcs: Optional[int] = None,
              random_state: int = 0) -> anndata.AnnData:
    r"""Build the k-nearest-neighbor graph on ``X_pca`` (PCA is run first if missing)."""
    if 'X_pca' not in adata.obsm:
        pca(adata)
    n_neighbors = int(min(n_neighbors, adata.n_obs - 1))
    sc.pp.neighbors(adata, n_neighbors=n_neighbors, n_pcs=_n_pcs(adata, n_pcs),
                    use_rep='X_pca', random_state=random_state)
    return adata


@register_function(
    aliases=["tsne", "t-SNE", "RunTSNE"],
    category="preprocessing",
    description="t-SNE embedding of the principal components",
    examples=["vw.pp.tsne(adata, perplexity=30)"],
    related=["pp.umap", "pl.embedding"]
)
def tsne(adata: anndata.AnnData, perplexity: float = 30, n_pcs: Optional[int] = None,
         random_state: int = 0) -> anndata.AnnData:
    r"""
    Compute a t-SNE embedding into ``obsm['X_tsne']``.

    The perplexity is capped below a third of the number of cells.
    """
    if 'X_pca' not in adata.obsm:
        pca(adata)
    perplexity = float(min(perplexity, max(1.0, (adata.n_obs - 1) / 3 - 1)))
    sc.tl.tsne(adata, n_pcs=_n_pcs(adata, n_pcs), perplexity=perplexity,
               use_rep='X_pca', random_state=random_state)
    add_reference(adata, 'tsne', 'tSNE embedding with scanpy')
    return adata


@register_function(
    aliases=["umap", "RunUMAP", "uniform_manifold"],
    category="preprocessing",
    description="UMAP embedding of the neighbor graph",
    examples=["vw.pp.umap(adata)"],
    related=["pp.neighbors", "pl.embedding"]
)
def umap(adata: anndata.AnnData, min_dist: float = 0.5, random_state: int = 0) -> anndata.AnnData:
    r"""Compute a UMAP embedding into ``obsm['X_umap']`` (neighbors are built first if missing)."""
    if 'neighbors' not in adata.uns:
        neighbors(adata)
    sc.tl.umap(adata, min_dist=min_dist, random_state=random_state)
    add_reference(adata, 'umap', 'UMAP embedding with scanpy')
    return adata


@register_function(
    aliases=["preprocess", "standard_workflow", "seurat_workflow"],
    category="preprocessing",
    description="QC, filtering, normalization, HVG selection, scaling and PCA in one call",
    examples=["adata_pp = vw.pp.preprocess(adata, min_genes=200, max_mito=0.2)"],
    related=["pp.qc_metrics", "pp.filter_cells", "pp.normalize", "pp.pca"]
)
def preprocess(adata: anndata.AnnData, mt_pattern: str = r'^MT-', min_genes: int = 200,
               max_mito: float = 0.2, min_cells: int = 3, target_sum: float = 1e4,
               n_top_genes: int = 2000, n_comps: int = 50) -> anndata.AnnData:
    r"""
    Run the standard preprocessing chain on a copy of ``adata``.

    Arguments:
        adata: AnnData with raw counts.
        mt_pattern: Regex selecting mitochondrial genes.
        min_genes: Minimum detected genes per cell.
        max_mito: Maximum mitochondrial fraction per cell.
        min_cells: Minimum cells per gene.
        target_sum: Counts per cell after normalization.
        n_top_genes: Number of highly variable genes.
        n_comps: Number of principal components.

    Returns:
        A new, preprocessed AnnData.
    """
    vprint(f"\n{Colors.HEADER}{Colors.BOLD}{EMOJI['start']} Preprocessing:{Colors.ENDC}")
    vprint(f"   {Colors.CYAN}Dataset shape: {Colors.BOLD}{adata.shape[0]:,} cells × {adata.shape[1]:,} genes{Colors.ENDC}")
    adata = qc_metrics(adata, mt_pattern=mt_pattern, inplace=False)
    adata = filter_cells(adata, min_genes=min_genes, max_mito=max_mito, min_cells=min_cells)
    normalize(adata, target_sum=target_sum)
    highly_variable(adata, n_top_genes=n_top_genes)
    scale(adata)
    pca(adata, n_comps=n_comps)
    vprint(f"{EMOJI['done']} Preprocessing finished: {adata.n_obs:,} cells, "
           f"{int(adata.var['highly_variable'].sum()):,} HVGs, {adata.obsm['X_pca'].shape[1]} PCs")
    return adata
