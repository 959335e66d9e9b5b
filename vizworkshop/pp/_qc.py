import logging
from typing import Optional

import anndata
import numpy as np
import scanpy as sc

from .._settings import vprint, EMOJI, Colors
from ..utils.registry import register_function

logger = logging.getLogger(__name__)


def mito_genes(adata: anndata.AnnData, mt_pattern: str = r'^MT-') -> list:
    r"""Return the gene names matching the mitochondrial regex ``mt_pattern``."""
    mask = adata.var_names.str.contains(mt_pattern, regex=True)
    return adata.var_names[mask].tolist()


@register_function(
    aliases=["qc_metrics", "qc", "quality_control", "percent_mt"],
    category="preprocessing",
    description="Compute per-cell QC metrics (nUMIs, detected genes, mitochondrial fraction from a gene-name regex)",
    examples=[
        "vw.pp.qc_metrics(adata)",
        "vw.pp.qc_metrics(adata, mt_pattern='^mt-')",
    ],
    related=["pp.filter_cells", "pl.qc_violin"]
)
def qc_metrics(adata: anndata.AnnData, mt_pattern: str = r'^MT-',
               inplace: bool = True) -> anndata.AnnData:
    r"""
    Calculate quality-control metrics with ``scanpy.pp.calculate_qc_metrics``.

    Arguments:
        adata: AnnData with raw counts in ``X``.
        mt_pattern: Regular expression selecting mitochondrial genes by name.
        inplace: Whether to modify ``adata``; otherwise a copy is annotated.

    Returns:
        The annotated AnnData, with ``var['mt']`` and ``obs`` columns
        ``nUMIs``, ``detected_genes`` and ``mito_perc`` (a fraction in [0, 1]).
    """
    if not inplace:
        adata = adata.copy()
    adata.var['mt'] = np.asarray(adata.var_names.str.contains(mt_pattern, regex=True), dtype=bool)
    sc.pp.calculate_qc_metrics(adata, qc_vars=['mt'], percent_top=None,
                               log1p=False, inplace=True)
    adata.obs['nUMIs'] = adata.obs['total_counts']
    adata.obs['detected_genes'] = adata.obs['n_genes_by_counts']
    adata.obs['mito_perc'] = (adata.obs['pct_counts_mt'] / 100).fillna(0.0)
    logger.debug("%d mitochondrial genes matched %r", int(adata.var['mt'].sum()), mt_pattern)
    return adata


@register_function(
    aliases=["filter_cells", "filter", "qc_filter"],
    category="preprocessing",
    description="Remove low-quality cells (few genes, high mitochondrial fraction) and rarely detected genes",
    examples=["adata = vw.pp.filter_cells(adata, min_genes=200, max_mito=0.2)"],
    related=["pp.qc_metrics", "pp.preprocess"]
)
def filter_cells(adata: anndata.AnnData, min_genes: int = 200, max_mito: float = 0.2,
                 min_counts: Optional[int] = None, max_counts: Optional[int] = None,
                 min_cells: int = 3, mt_pattern: str = r'^MT-') -> anndata.AnnData:
    r"""
    Filter cells on their QC metrics and genes on detection.

    Arguments:
        adata: AnnData with raw counts; QC metrics are computed if missing.
        min_genes: Minimum number of detected genes per cell.
        max_mito: Maximum mitochondrial fraction per cell.
        min_counts: Optional minimum total counts per cell.
        max_counts: Optional maximum total counts per cell.
        min_cells: Minimum number of cells a gene must be detected in.
        mt_pattern: Regex used if QC metrics must be computed.

    Returns:
        A filtered copy of ``adata``.
    """
    if 'mito_perc' not in adata.obs.columns:
        qc_metrics(adata, mt_pattern=mt_pattern)

    n_before = adata.n_obs
    keep = (adata.obs['detected_genes'] >= min_genes) & (adata.obs['mito_perc'] <= max_mito)
    if min_counts is not None:
        keep &= adata.obs['nUMIs'] >= min_counts
    if max_counts is not None:
        keep &= adata.obs['nUMIs'] <= max_counts

    adata = adata[keep.values].copy()
    genes_before = adata.n_vars
    if min_cells:
        sc.pp.filter_genes(adata, min_cells=min_cells)

    vprint(f"   {Colors.CYAN}{EMOJI['bar']} Cells kept: {Colors.BOLD}{adata.n_obs:,}/{n_before:,}{Colors.ENDC}"
           f"{Colors.CYAN} (min_genes={min_genes}, max_mito={max_mito}){Colors.ENDC}")
    vprint(f"   {Colors.CYAN}{EMOJI['bar']} Genes kept: {Colors.BOLD}{adata.n_vars:,}/{genes_before:,}{Colors.ENDC}")
    if adata.n_obs == 0:
        raise ValueError("No cells passed the QC thresholds; relax min_genes/max_mito")
    return adata
