r"""
Single-cell workshop: QC, dimensionality reduction, clustering and marker
figures on PBMC 3k (or the synthetic stand-in).
"""
import logging
from pathlib import Path
from typing import Dict, Optional, Union

import anndata

from .._settings import vprint, EMOJI, Colors
from ..datasets import load_pbmc3k
from .. import pp, single, pl
from ..utils._data import ensure_dir
from ..utils.registry import register_function
from ._common import FigureRecorder

logger = logging.getLogger(__name__)


@register_function(
    aliases=["singlecell_workshop", "seurat_workshop", "scrnaseq_tutorial"],
    category="tutorials",
    description="Run the single-cell visualization tutorial (QC to markers) and save every figure",
    examples=[
        "paths = vw.tutorials.singlecell_workshop()",
        "paths = vw.tutorials.singlecell_workshop(vw.datasets.create_mock_dataset(), resolution=0.5)",
    ],
    related=["pp.preprocess", "single.find_markers", "pl.embedding"]
)
def singlecell_workshop(adata: Optional[anndata.AnnData] = None,
                        output_dir: Union[str, Path, None] = None, fmt: str = 'png',
                        dpi: Optional[int] = None, resolution: float = 1.0,
                        mt_pattern: str = r'^MT-', min_genes: int = 200, max_mito: float = 0.2,
                        n_top_genes: int = 2000, n_markers: int = 3) -> Dict[str, Path]:
    r"""
    Run the single-cell tutorial end to end.

    Arguments:
        adata: Raw-count AnnData; PBMC 3k is downloaded through scanpy when None.
        output_dir: Figure directory (``settings.output_dir / 'singlecell'`` by default).
        fmt: ``'png'`` or ``'pdf'``.
        dpi: Resolution of the saved figures.
        resolution: Leiden resolution.
        mt_pattern: Regex for mitochondrial genes.
        min_genes: Minimum detected genes per cell.
        max_mito: Maximum mitochondrial fraction per cell.
        n_top_genes: Highly variable genes.
        n_markers: Markers per cluster in the heatmap and dot plot.

    Returns:
        Ordered dict of name -> written path (figures plus ``markers`` CSV).
    """
    vprint(f"\n{Colors.HEADER}{Colors.BOLD}{EMOJI['start']} Single-cell workshop{Colors.ENDC}")
    if adata is None:
        adata = load_pbmc3k()
    rec = FigureRecorder(output_dir, subdir='singlecell', fmt=fmt, dpi=dpi)

    raw = pp.qc_metrics(adata, mt_pattern=mt_pattern, inplace=False)
    group_key = 'sample_id' if 'sample_id' in raw.obs.columns else None
    rec.save('qc_violin_raw', pl.qc_violin(raw, groupby=group_key)[0])
    rec.save('qc_scatter_raw', pl.qc_scatter(raw))

    adata = pp.preprocess(adata, mt_pattern=mt_pattern, min_genes=min_genes, max_mito=max_mito,
                          n_top_genes=n_top_genes)
    rec.save('qc_violin_filtered', pl.qc_violin(adata, groupby=group_key)[0])
    rec.save('pca_variance', pl.pca_variance(adata, n_pcs=30))

    pp.neighbors(adata)
    pp.tsne(adata)
    pp.umap(adata)
    single.cluster(adata, method='leiden', resolution=resolution)

    for basis in ('X_pca', 'X_tsne', 'X_umap'):
        name = basis[2:]
        rec.save(f'{name}_leiden', pl.embedding(adata, basis=basis, color='leiden',
                                                legend_loc='on data', frameon='small'))
    rec.save('umap_leiden_legend', pl.embedding(adata, basis='X_umap', color='leiden'))
    rec.save('umap_mito', pl.embedding(adata, basis='X_umap', color='mito_perc', cmap='Reds'))

    markers = single.find_markers(adata, 'leiden', method='wilcoxon')
    top = single.top_markers(markers, n=n_markers, by='auc')
    top_gene = next(iter(top.values()))[0]
    rec.save(f'umap_{top_gene}', pl.embedding(adata, basis='X_umap', color=top_gene, cmap='Reds'))
    rec.save('marker_heatmap', pl.marker_heatmap(adata, top, 'leiden'))
    rec.save('marker_dotplot', pl.marker_dotplot(adata, top, 'leiden'))
    if group_key is not None:
        rec.save('cluster_proportion', pl.cluster_proportion(adata, 'leiden', by=group_key))

    csv_path = ensure_dir(rec.output_dir) / 'markers.csv'
    markers.to_csv(csv_path, index=False)
    rec.add_file('markers', csv_path)
    logger.debug("Top markers: %s", top)
    return rec.summary('Single-cell workshop')
