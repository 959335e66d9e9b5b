import logging
from typing import Optional, Sequence, Dict, List

import anndata
import numpy as np
import pandas as pd
import scanpy as sc
from scipy.sparse import issparse
from scipy.stats import rankdata

from .._settings import vprint, EMOJI, Colors, add_reference
from ..utils.registry import register_function

logger = logging.getLogger(__name__)

MARKER_COLUMNS = ['group', 'names', 'scores', 'logfoldchanges', 'pvals', 'pvals_adj', 'auc']


def _expression(adata, genes, use_raw, layer):
    if layer is not None:
        X = adata[:, genes].layers[layer]
    elif use_raw and adata.raw is not None:
        X = adata.raw[:, genes].X
    else:
        X = adata[:, genes].X
    return X.toarray() if issparse(X) else np.asarray(X)


def group_auc(X: np.ndarray, labels: np.ndarray, group) -> np.ndarray:
    r"""
    Area under the ROC curve of every column of ``X`` for ``group`` versus the rest.

    Computed from the Mann-Whitney U statistic on average ranks, so ties count
    one half; 1 means every cell of the group expresses more than every other cell.
    """
    mask = labels == group
    n1 = int(mask.sum())
    n2 = len(labels) - n1
    if n1 == 0 or n2 == 0:
        return np.full(X.shape[1], np.nan)
    ranks = rankdata(X, axis=0)
    u = ranks[mask].sum(axis=0) - n1 * (n1 + 1) / 2
    return u / (n1 * n2)


@register_function(
    aliases=["find_markers", "findMarkers", "FindAllMarkers", "rank_genes_groups", "marker_genes"],
    category="single",
    description="Marker genes per cluster with scores, log fold changes, adjusted p-values and AUC effect sizes",
    examples=[
        "markers = vw.single.find_markers(adata, groupby='leiden')",
        "markers = vw.single.find_markers(adata, 'leiden', method='t-test', n_genes=50)",
    ],
    related=["single.top_markers", "pl.marker_heatmap", "pl.marker_dotplot"]
)
def find_markers(adata: anndata.AnnData, groupby: str, method: str = 'wilcoxon',
                 n_genes: Optional[int] = None, use_raw: bool = False,
                 layer: Optional[str] = None) -> pd.DataFrame:
    """
    Rank genes for every group with ``scanpy.tl.rank_genes_groups``.

    Arguments:
        adata: Log-normalized AnnData.
        groupby: ``obs`` column with the groups (e.g. cluster labels).
        method: ``'wilcoxon'``, ``'t-test'`` or ``'t-test_overestim_var'``.
        n_genes: Genes kept per group (all genes when None).
        use_raw: Whether to test ``adata.raw``.
        layer: Layer to test instead of ``X``.

    Returns:
        Long DataFrame with columns ``group, names, scores, logfoldchanges,
        pvals, pvals_adj, auc``, ordered by group then by scanpy's ranking.
    """
    if groupby not in adata.obs.columns:
        raise KeyError(f"'{groupby}' not found in adata.obs")
    if method not in ('wilcoxon', 't-test', 't-test_overestim_var'):
        raise ValueError(f"method must be 'wilcoxon' or 't-test', got {method!r}")
    if use_raw and adata.raw is None:
        raise ValueError("use_raw=True but adata.raw is empty")

    adata.obs[groupby] = adata.obs[groupby].astype('category')
    n_total = adata.raw.n_vars if use_raw else adata.n_vars
    sc.tl.rank_genes_groups(adata, groupby, method=method, use_raw=use_raw, layer=layer,
                            n_genes=n_total if n_genes is None else int(min(n_genes, n_total)))
    add_reference(adata, 'Wilcoxon' if method == 'wilcoxon' else 'T-test',
                  f'marker genes with the {method} test in scanpy')

    markers = sc.get.rank_genes_groups_df(adata, group=None)
    if 'group' not in markers.columns:
        # a single group comes back without the group column
        markers.insert(0, 'group', adata.obs[groupby].cat.categories[0])

    labels = adata.obs[groupby].astype(str).values
    genes = pd.unique(markers['names']).tolist()
    X = _expression(adata, genes, use_raw, layer)
    auc_frames = []
    for group in markers['group'].astype(str).unique():
        auc_frames.append(pd.DataFrame({'group': group, 'names': genes,
                                        'auc': group_auc(X, labels, group)}))
    auc = pd.concat(auc_frames, ignore_index=True)

    markers['group'] = markers['group'].astype(str)
    markers = markers.merge(auc, on=['group', 'names'], how='left')
    markers = markers[MARKER_COLUMNS]
    vprint(f"   {Colors.GREEN}{EMOJI['done']} Markers ranked for {Colors.BOLD}{markers['group'].nunique()} groups{Colors.ENDC}"
           f"{Colors.GREEN} ({method}){Colors.ENDC}")
    return markers


def top_markers(markers: pd.DataFrame, n: int = 5, by: str = 'auc',
                groups: Optional[Sequence[str]] = None) -> Dict[str, List[str]]:
    r"""
    The ``n`` best genes of every group from a ``find_markers`` table.

    ``pvals``/``pvals_adj`` rank ascending, every other column descending.
    """
    if by not in markers.columns:
        raise KeyError(f"'{by}' is not a column of the marker table")
    ascending = by in ('pvals', 'pvals_adj')
    result = {}
    group_order = groups if groups is not None else pd.unique(markers['group'])
    for group in group_order:
        sub = markers[markers['group'] == str(group)]
        result[str(group)] = sub.sort_values(by, ascending=ascending)['names'].head(n).tolist()
    return result


def marker_gene_list(markers: Dict[str, List[str]]) -> List[str]:
    r"""Flatten a ``top_markers`` dict into a de-duplicated gene list, keeping order."""
    seen = []
    for genes in markers.values():
        for gene in genes:
            if gene not in seen:
                seen.append(gene)
    return seen
