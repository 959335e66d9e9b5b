import logging
from typing import Optional, Sequence, Union

import anndata
import numpy as np
import pandas as pd
import scanpy as sc

from .._settings import vprint, EMOJI, Colors
from ..pp._qc import qc_metrics
from ..pp._preprocess import normalize, highly_variable, scale, pca, neighbors, umap
from ..single._cluster import cluster
from ..single._embedding import embedding_frame, basis_label
from ..utils.registry import register_function

logger = logging.getLogger(__name__)


@register_function(
    aliases=["spatial_frame", "spot_table", "GetTissueCoordinates"],
    category="space",
    description="Spot coordinates (x, y) joined with obs columns and gene expression",
    examples=["df = vw.space.spatial_frame(adata, keys=['total_counts', 'leiden'])"],
    related=["pl.spatial", "single.embedding_frame"]
)
def spatial_frame(adata: anndata.AnnData, keys: Union[str, Sequence[str], None] = None,
                  basis: str = 'spatial', in_tissue_only: bool = False,
                  layer: Optional[str] = None) -> pd.DataFrame:
    r"""
    Build a plotting table of spots.

    Arguments:
        adata: Spatial AnnData with coordinates in ``obsm[basis]``.
        keys: ``obs`` columns and/or genes to attach.
        basis: ``obsm`` key holding the coordinates.
        in_tissue_only: Drop spots whose ``obs['in_tissue']`` is 0.
        layer: Layer to read gene values from.

    Returns:
        DataFrame indexed by ``obs_names`` with ``x``, ``y`` and ``keys``.
    """
    if in_tissue_only:
        if 'in_tissue' not in adata.obs.columns:
            raise KeyError("'in_tissue' not found in adata.obs")
        adata = adata[adata.obs['in_tissue'].astype(bool).values]
    frame = embedding_frame(adata, basis=basis, keys=keys, layer=layer)
    prefix = basis_label(basis)
    return frame.rename(columns={f'{prefix}1': 'x', f'{prefix}2': 'y'})


@register_function(
    aliases=["spatial_qc", "spot_qc", "filter_spots"],
    category="space",
    description="QC metrics for spots, keep in-tissue spots and filter on counts and mitochondrial fraction",
    examples=["adata = vw.space.spatial_qc(adata, min_counts=500, max_mito=0.3)"],
    related=["pp.qc_metrics", "space.spatial_preprocess"]
)
def spatial_qc(adata: anndata.AnnData, mt_pattern: str = r'^MT-', min_counts: float = 0,
               max_mito: float = 1.0, min_cells: int = 3) -> anndata.AnnData:
    r"""
    Annotate and filter spots.

    Spots outside the tissue (``obs['in_tissue'] == 0``) are removed first, then
    spots with fewer than ``min_counts`` counts or a mitochondrial fraction above
    ``max_mito``. Genes seen in fewer than ``min_cells`` spots are dropped.

    Returns:
        A filtered copy of ``adata`` with the ``pp.qc_metrics`` columns.
    """
    adata = qc_metrics(adata, mt_pattern=mt_pattern, inplace=False)
    n_before = adata.n_obs
    keep = np.ones(adata.n_obs, dtype=bool)
    if 'in_tissue' in adata.obs.columns:
        keep &= adata.obs['in_tissue'].astype(bool).values
    keep &= (adata.obs['nUMIs'] >= min_counts).values
    keep &= (adata.obs['mito_perc'] <= max_mito).values
    adata = adata[keep].copy()
    if adata.n_obs == 0:
        raise ValueError("No spots passed the QC thresholds; relax min_counts/max_mito")
    if min_cells:
        sc.pp.filter_genes(adata, min_cells=min_cells)
    vprint(f"   {Colors.CYAN}{EMOJI['bar']} Spots kept: {Colors.BOLD}{adata.n_obs:,}/{n_before:,}{Colors.ENDC}"
           f"{Colors.CYAN} (min_counts={min_counts}, max_mito={max_mito}){Colors.ENDC}")
    return adata


@register_function(
    aliases=["spatial_preprocess", "spatial_workflow", "SCTransform_spatial"],
    category="space",
    description="Normalize, select HVGs, PCA, neighbors, UMAP and cluster spots",
    examples=["vw.space.spatial_preprocess(adata, resolution=0.8)"],
    related=["space.spatial_qc", "pl.spatial"]
)
def spatial_preprocess(adata: anndata.AnnData, target_sum: float = 1e4, n_top_genes: int = 2000,
                       n_comps: int = 30, n_neighbors: int = 15, resolution: float = 1.0,
                       key_added: str = 'leiden', run_umap: bool = True) -> anndata.AnnData:
    r"""
    Run the expression workflow on QC-filtered spots, in place.

    Arguments:
        adata: Filtered spatial AnnData with raw counts.
        target_sum: Counts per spot after normalization.
        n_top_genes: Number of highly variable genes.
        n_comps: Principal components.
        n_neighbors: Neighbors in the expression graph.
        resolution: Leiden resolution.
        key_added: ``obs`` column receiving the clusters.
        run_umap: Whether to compute ``X_umap`` as well.

    Returns:
        ``adata``.
    """
    vprint(f"\n{Colors.HEADER}{Colors.BOLD}{EMOJI['start']} Spatial preprocessing:{Colors.ENDC}")
    normalize(adata, target_sum=target_sum)
    highly_variable(adata, n_top_genes=n_top_genes)
    scale(adata)
    pca(adata, n_comps=n_comps)
    neighbors(adata, n_neighbors=n_neighbors)
    if run_umap:
        umap(adata)
    cluster(adata, method='leiden', resolution=resolution, key_added=key_added)
    logger.debug("spatial_preprocess done: %d spots, %d clusters", adata.n_obs, adata.obs[key_added].nunique())
    return adata
