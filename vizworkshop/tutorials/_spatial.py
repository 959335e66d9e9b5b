r"""
Spatial workshop: spot QC, clustering and tissue maps on a Visium sample
(or the synthetic spot grid).
"""
import logging
from pathlib import Path
from typing import Dict, Optional, Union

import anndata

from .._settings import vprint, EMOJI, Colors
from ..datasets import load_visium
from .. import space, single, pl
from ..utils.registry import register_function
from ._common import FigureRecorder

logger = logging.getLogger(__name__)


@register_function(
    aliases=["spatial_workshop", "visium_tutorial", "spatial_tutorial"],
    category="tutorials",
    description="Run the spatial visualization tutorial and save the tissue maps",
    examples=[
        "paths = vw.tutorials.spatial_workshop()",
        "paths = vw.tutorials.spatial_workshop(vw.datasets.create_mock_spatial())",
    ],
    related=["space.spatial_qc", "space.spatial_preprocess", "pl.spatial"]
)
def spatial_workshop(adata: Optional[anndata.AnnData] = None,
                     output_dir: Union[str, Path, None] = None, fmt: str = 'png',
                     dpi: Optional[int] = None, resolution: float = 1.0,
                     mt_pattern: str = r'^MT-', min_counts: float = 0,
                     max_mito: float = 1.0) -> Dict[str, Path]:
    r"""
    Run the spatial tutorial end to end.

    Arguments:
        adata: Spatial AnnData with raw counts; a Visium sample is downloaded when None.
        output_dir: Figure directory (``settings.output_dir / 'spatial'`` by default).
        fmt: ``'png'`` or ``'pdf'``.
        dpi: Resolution of the saved figures.
        resolution: Leiden resolution.
        mt_pattern: Regex for mitochondrial genes.
        min_counts: Minimum counts per spot.
        max_mito: Maximum mitochondrial fraction per spot.

    Returns:
        Ordered dict of figure name -> written path.
    """
    vprint(f"\n{Colors.HEADER}{Colors.BOLD}{EMOJI['start']} Spatial workshop{Colors.ENDC}")
    if adata is None:
        adata = load_visium()
    rec = FigureRecorder(output_dir, subdir='spatial', fmt=fmt, dpi=dpi)

    adata = space.spatial_qc(adata, mt_pattern=mt_pattern, min_counts=min_counts, max_mito=max_mito)
    rec.save('spatial_counts', pl.spatial(adata, color='nUMIs'))
    rec.save('spatial_mito', pl.spatial(adata, color='mito_perc', cmap='Reds'))

    space.spatial_preprocess(adata, resolution=resolution)
    rec.save('spatial_clusters', pl.spatial(adata, color='leiden'))
    rec.save('umap_clusters', pl.embedding(adata, basis='X_umap', color='leiden'))

    markers = single.find_markers(adata, 'leiden')
    top_gene = next(iter(single.top_markers(markers, n=1).values()))[0]
    rec.save('spatial_top_marker', pl.spatial(adata, color=top_gene, cmap='magma'))

    fig = pl.arrange([
        lambda ax: pl.spatial(adata, color='nUMIs', ax=ax),
        lambda ax: pl.spatial(adata, color='mito_perc', cmap='Reds', ax=ax),
        lambda ax: pl.embedding(adata, basis='X_umap', color='leiden', legend_loc='on data', ax=ax),
        lambda ax: pl.spatial(adata, color='leiden', ax=ax),
        lambda ax: pl.spatial(adata, color=top_gene, cmap='magma', ax=ax),
    ], ncols=3, figsize=(14, 8))
    rec.save('multi_panel', fig)
    logger.debug("Spatial top marker: %s", top_gene)
    return rec.summary('Spatial workshop')
