import logging
from typing import Optional

import anndata
import pandas as pd
import scanpy as sc

from .._settings import vprint, EMOJI, Colors, add_reference
from ..pp._preprocess import neighbors
from ..utils.registry import register_function

logger = logging.getLogger(__name__)


@register_function(
    aliases=["cluster", "leiden", "louvain", "FindClusters", "graph_clustering"],
    category="single",
    description="Graph-based clustering (leiden or louvain) on the neighbor graph",
    examples=[
        "vw.single.cluster(adata, method='leiden', resolution=1.0)",
        "vw.single.cluster(adata, method='louvain', key_added='louvain')",
    ],
    related=["pp.neighbors", "single.find_markers"]
)
def cluster(adata: anndata.AnnData, method: str = 'leiden', resolution: float = 1.0,
            key_added: Optional[str] = None, random_state: int = 0) -> anndata.AnnData:
    r"""
    Cluster cells on the k-nearest-neighbor graph.

    Arguments:
        adata: AnnData; neighbors are computed first when missing.
        method: ``'leiden'`` or ``'louvain'`` (both through igraph).
        resolution: Resolution of the partition (leiden only; igraph's louvain ignores it).
        key_added: ``obs`` column for the labels (defaults to ``method``).
        random_state: Seed for the partition.

    Returns:
        ``adata`` with categorical labels in ``obs[key_added]``.
    """
    if key_added is None:
        key_added = method
    if 'neighbors' not in adata.uns:
        neighbors(adata)

    if method == 'leiden':
        sc.tl.leiden(adata, resolution=resolution, key_added=key_added, flavor='igraph',
                     n_iterations=2, directed=False, random_state=random_state)
    elif method == 'louvain':
        sc.tl.louvain(adata, key_added=key_added, flavor='igraph', random_state=random_state)
    else:
        raise ValueError(f"method must be 'leiden' or 'louvain', got {method!r}")
    add_reference(adata, method, f'{method} clustering with scanpy')

    n_clusters = adata.obs[key_added].nunique()
    vprint(f"   {Colors.GREEN}{EMOJI['done']} {method} clustering: {Colors.BOLD}{n_clusters} clusters{Colors.ENDC}"
           f"{Colors.GREEN} (resolution={resolution}) in obs['{key_added}']{Colors.ENDC}")
    return adata


def group_counts(adata: anndata.AnnData, groupby: str, by: Optional[str] = None) -> pd.DataFrame:
    r"""
    Count cells per ``groupby`` level, optionally within each ``by`` level.

    Returns:
        Tidy DataFrame with columns ``[by,] groupby, n, fraction``; ``fraction`` sums
        to one within each ``by`` level (or overall).
    """
    for key in [groupby] + ([by] if by else []):
        if key not in adata.obs.columns:
            raise KeyError(f"'{key}' not found in adata.obs")
    columns = [by, groupby] if by else [groupby]
    counts = adata.obs.groupby(columns, observed=True).size().reset_index(name='n')
    if by:
        counts['fraction'] = counts['n'] / counts.groupby(by, observed=True)['n'].transform('sum')
    else:
        counts['fraction'] = counts['n'] / counts['n'].sum()
    return counts
