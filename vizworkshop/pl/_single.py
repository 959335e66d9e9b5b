r"""
Single-cell figures: quality control, embeddings and marker genes.
"""
import logging
from typing import Optional, Sequence, Union, Dict, List, Tuple

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
from anndata import AnnData
from matplotlib.axes import Axes
from scipy.cluster.hierarchy import linkage
from scipy.sparse import issparse

from ..single._embedding import embedding_frame, basis_label
from ..single._cluster import group_counts
from ..single._markers import marker_gene_list
from ..utils.registry import register_function
from ._general import new_axes, is_numeric, violin, scatter, barplot
from ._layout import panel_grid
from ._palette import color_dict, category_levels

logger = logging.getLogger(__name__)


def uns_colors(adata: AnnData, key: str, palette=None) -> Optional[Dict]:
    r"""Level -> color from ``adata.uns[f'{key}_colors']`` when present and no ``palette`` is given."""
    if palette is not None or f'{key}_colors' not in adata.uns or key not in adata.obs:
        return None
    values = adata.obs[key]
    if not isinstance(values.dtype, pd.CategoricalDtype):
        return None
    colors = list(adata.uns[f'{key}_colors'])
    if len(colors) < len(values.cat.categories):
        return None
    return dict(zip(values.cat.categories, colors))


def default_point_size(n_points: int) -> float:
    r"""scanpy's rule of thumb: ``120000 / n`` points², kept between 1 and 200."""
    return float(np.clip(120000 / max(n_points, 1), 1, 200))


def _frame_small(ax, xlabel, ylabel):
    for spine in ax.spines.values():
        spine.set_visible(False)
    ax.set_xticks([])
    ax.set_yticks([])
    ax.set_xlabel('')
    ax.set_ylabel('')
    arrow = dict(arrowstyle='-|>', color='black', linewidth=1.0)
    ax.annotate('', xy=(0.2, 0.0), xytext=(0.0, 0.0), xycoords='axes fraction', arrowprops=arrow)
    ax.annotate('', xy=(0.0, 0.2), xytext=(0.0, 0.0), xycoords='axes fraction', arrowprops=arrow)
    ax.text(0.1, -0.05, xlabel, transform=ax.transAxes, ha='center', va='top', fontsize=9)
    ax.text(-0.05, 0.1, ylabel, transform=ax.transAxes, ha='right', va='center',
            rotation=90, fontsize=9)


def set_frame(ax: Axes, frameon: Union[bool, str], xlabel: str, ylabel: str) -> Axes:
    r"""``frameon``: True (regular axes), False (no axes) or ``'small'`` (short arrows in the corner)."""
    if frameon == 'small':
        _frame_small(ax, xlabel, ylabel)
    elif frameon:
        ax.set_xlabel(xlabel)
        ax.set_ylabel(ylabel)
    else:
        ax.set_axis_off()
    return ax


def draw_points(ax: Axes, x: np.ndarray, y: np.ndarray, values: Optional[pd.Series] = None,
                colors: Optional[Dict] = None, palette=None, cmap: str = 'viridis',
                size: float = 10, alpha: float = 1.0, legend_loc: Optional[str] = 'right margin',
                legend_fontsize: Optional[float] = None, colorbar: bool = True,
                vmin: Optional[float] = None, vmax: Optional[float] = None,
                na_color: str = 'lightgray', marker: str = 'o') -> Axes:
    r"""
    Scatter points colored by ``values``.

    Categorical values get one color per level and a legend (``'right margin'``),
    labels at the group medians (``'on data'``, spread with adjustText) or
    nothing (None / ``'none'``). Numeric values use ``cmap`` with the highest
    values drawn last, plus a colorbar.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if values is None:
        ax.scatter(x, y, s=size, c=na_color if palette is None else color_dict([0], palette)[0],
                   alpha=alpha, linewidths=0, marker=marker)
        return ax

    if not isinstance(values, pd.Series):
        values = pd.Series(values)
    values = values.reset_index(drop=True)
    if is_numeric(values):
        numeric = values.to_numpy(dtype=float)
        order = np.argsort(np.where(np.isnan(numeric), -np.inf, numeric), kind='stable')
        missing = np.isnan(numeric)
        if missing.any():
            ax.scatter(x[missing], y[missing], s=size, c=na_color, alpha=alpha, linewidths=0, marker=marker)
        order = order[~missing[order]]
        points = ax.scatter(x[order], y[order], s=size, c=numeric[order], cmap=cmap, vmin=vmin,
                            vmax=vmax, alpha=alpha, linewidths=0, marker=marker)
        if colorbar:
            plt.colorbar(points, ax=ax, fraction=0.046, pad=0.02)
        return ax

    if isinstance(values.dtype, pd.CategoricalDtype):
        levels = [c for c in values.cat.categories if c in set(values.dropna())]
    else:
        levels = category_levels(values)
    colors = colors if colors is not None else color_dict(levels, palette)
    missing = values.isna().to_numpy()
    if missing.any():
        ax.scatter(x[missing], y[missing], s=size, c=na_color, alpha=alpha, linewidths=0, marker=marker)
    for level in levels:
        mask = (values == level).to_numpy()
        ax.scatter(x[mask], y[mask], s=size, c=colors[level], label=str(level), alpha=alpha,
                   linewidths=0, marker=marker)

    if legend_loc == 'right margin':
        ax.legend(frameon=False, loc='center left', bbox_to_anchor=(1, 0.5),
                  ncol=1 if len(levels) <= 14 else 2 if len(levels) <= 30 else 3,
                  fontsize=legend_fontsize, markerscale=max(1.0, 30 / max(size, 1)) ** 0.5)
    elif legend_loc == 'on data':
        from adjustText import adjust_text
        texts = []
        for level in levels:
            mask = (values == level).to_numpy()
            texts.append(ax.text(np.median(x[mask]), np.median(y[mask]), str(level),
                                 fontsize=legend_fontsize or rcfontsize(), fontweight='bold',
                                 ha='center', va='center'))
        if len(texts) > 1:
            adjust_text(texts, ax=ax)
    return ax


def rcfontsize() -> float:
    return float(plt.rcParams['font.size'])


@register_function(
    aliases=["embedding", "DimPlot", "FeaturePlot", "plot_embedding", "umap_plot"],
    category="pl",
    description="Scatter plot of a PCA/t-SNE/UMAP embedding colored by an obs column or gene",
    examples=[
        "vw.pl.embedding(adata, basis='X_umap', color='leiden', legend_loc='on data')",
        "vw.pl.embedding(adata, basis='X_tsne', color='CD3D', cmap='Reds')",
    ],
    related=["single.embedding_frame", "pl.spatial"]
)
def embedding(adata: AnnData, basis: str = 'X_umap', color: Optional[str] = None,
              palette=None, size: Optional[float] = None, frameon: Union[bool, str] = 'small',
              legend_loc: Optional[str] = 'right margin', cmap: str = 'viridis',
              layer: Optional[str] = None, alpha: float = 1.0, title: Optional[str] = None,
              legend_fontsize: Optional[float] = None, vmax: Optional[float] = None,
              dims: Sequence[int] = (0, 1), ax: Optional[Axes] = None, figsize=None) -> Axes:
    r"""
    Plot cells in an embedding.

    Arguments:
        adata: AnnData with the embedding in ``obsm``.
        basis: ``obsm`` key (``'umap'`` also works for ``'X_umap'``).
        color: ``obs`` column or gene; None draws grey points.
        palette: Colors for categorical ``color`` (``adata.uns['<color>_colors']`` otherwise, if set).
        size: Point size (``120000 / n_cells`` by default).
        frameon: True, False or ``'small'``.
        legend_loc: ``'right margin'``, ``'on data'`` or None.
        cmap: Colormap for numeric ``color``.
        layer: Layer for gene values.
        alpha: Point transparency.
        title: Axes title (``color`` by default).
        legend_fontsize: Font size of legend or on-data labels.
        vmax: Upper limit of the color scale for numeric ``color``.
        dims: Embedding dimensions to plot.
        ax: Axes to draw on.
        figsize: Size of the new figure when ``ax`` is None.

    Returns:
        The axes.
    """
    keys = [color] if color is not None else None
    frame = embedding_frame(adata, basis=basis, keys=keys, dims=dims, layer=layer)
    xcol, ycol = frame.columns[0], frame.columns[1]
    ax = new_axes(ax, figsize or (4.5, 4))
    size = default_point_size(adata.n_obs) if size is None else size
    draw_points(ax, frame[xcol].values, frame[ycol].values,
                values=frame[color] if color is not None else None,
                colors=uns_colors(adata, color, palette) if color is not None else None,
                palette=palette, cmap=cmap, size=size, alpha=alpha, legend_loc=legend_loc,
                legend_fontsize=legend_fontsize, vmax=vmax)
    set_frame(ax, frameon, xcol, ycol)
    ax.set_title(title if title is not None else (color or basis_label(basis)))
    return ax


@register_function(
    aliases=["qc_violin", "VlnPlot_qc", "violin_qc"],
    category="pl",
    description="Violin plots of per-cell QC metrics, one panel per metric",
    examples=["vw.pl.qc_violin(adata, groupby='sample_id')"],
    related=["pp.qc_metrics", "pl.qc_scatter"]
)
def qc_violin(adata: AnnData, keys: Sequence[str] = ('nUMIs', 'detected_genes', 'mito_perc'),
              groupby: Optional[str] = None, jitter: bool = True, palette=None,
              axes: Optional[Sequence[Axes]] = None, figsize=None) -> List[Axes]:
    r"""
    One violin panel per QC metric in ``keys``.

    Returns:
        The list of axes.
    """
    keys = list(keys)
    missing = [k for k in keys + ([groupby] if groupby else []) if k not in adata.obs.columns]
    if missing:
        raise KeyError(f"{missing} not found in adata.obs; run vw.pp.qc_metrics first")
    data = adata.obs[keys + ([groupby] if groupby else [])].copy()
    if groupby is None:
        groupby = 'all cells'
        data[groupby] = 'all cells'
    if axes is None:
        _, axes = panel_grid(1, len(keys), figsize=figsize or (3.2 * len(keys), 3.2))
    for key, ax in zip(keys, axes):
        violin(data, x=groupby, y=key, palette=palette, jitter=jitter, jitter_alpha=0.2, ax=ax,
               xlabel='', title=key)
        if data[groupby].nunique() > 3:
            ax.tick_params(axis='x', rotation=90)
    return list(axes)


def qc_scatter(adata: AnnData, x: str = 'nUMIs', y: str = 'detected_genes',
               color: Optional[str] = 'mito_perc', size: Optional[float] = None,
               cmap: str = 'viridis', ax: Optional[Axes] = None, figsize=None) -> Axes:
    r"""Scatter of two QC metrics colored by a third (by default counts vs genes colored by mito fraction)."""
    data = adata.obs
    ax = scatter(data, x, y, hue=color, size=default_point_size(adata.n_obs) if size is None else size,
                 palette=cmap, ax=ax, figsize=figsize or (4.5, 4), legend=False)
    if color is not None and is_numeric(data[color]):
        norm = plt.Normalize(data[color].min(), data[color].max())
        mappable = plt.cm.ScalarMappable(norm=norm, cmap=cmap)
        plt.colorbar(mappable, ax=ax, fraction=0.046, pad=0.02, label=color)
    return ax


@register_function(
    aliases=["pca_variance", "elbow", "ElbowPlot", "pca_variance_ratio"],
    category="pl",
    description="Elbow plot of the variance explained by each principal component",
    examples=["vw.pl.pca_variance(adata, n_pcs=30)"],
    related=["pp.pca"]
)
def pca_variance(adata: AnnData, n_pcs: int = 30, log: bool = False,
                 ax: Optional[Axes] = None, figsize=None) -> Axes:
    r"""Variance ratio of the first ``n_pcs`` components (needs ``adata.uns['pca']``)."""
    if 'pca' not in adata.uns or 'variance_ratio' not in adata.uns['pca']:
        raise KeyError("adata.uns['pca']['variance_ratio'] not found; run vw.pp.pca first")
    ratio = np.asarray(adata.uns['pca']['variance_ratio'])[:n_pcs]
    ax = new_axes(ax, figsize or (4.5, 3.5))
    components = np.arange(1, len(ratio) + 1)
    ax.plot(components, ratio, marker='o', color='black', markersize=4, linewidth=1)
    if log:
        ax.set_yscale('log')
    ax.set_xlabel('PC')
    ax.set_ylabel('variance ratio')
    ax.set_title('PCA variance explained')
    return ax


def expression_table(adata: AnnData, genes: Sequence[str], layer: Optional[str] = None,
                     use_raw: Optional[bool] = None) -> pd.DataFrame:
    r"""
    Cells x genes DataFrame of expression values.

    ``use_raw=None`` reads ``X`` (or ``layer``) when all genes are in ``var_names``
    and falls back to ``adata.raw`` otherwise.
    """
    genes = list(genes)
    if not genes:
        raise ValueError("genes must not be empty")
    in_var = [g in adata.var_names for g in genes]
    in_raw = [adata.raw is not None and g in adata.raw.var_names for g in genes]
    if use_raw is None:
        use_raw = not all(in_var) and all(in_raw)
    found = in_raw if use_raw else in_var
    missing = [g for g, ok in zip(genes, found) if not ok]
    if missing:
        raise KeyError(f"Genes {missing} not found in adata{'.raw' if use_raw else ''}.var_names")
    if use_raw:
        X = adata.raw[:, genes].X
    elif layer is not None:
        X = adata[:, genes].layers[layer]
    else:
        X = adata[:, genes].X
    X = X.toarray() if issparse(X) else np.asarray(X)
    return pd.DataFrame(X, index=adata.obs_names, columns=genes)


def group_expression(adata: AnnData, genes: Sequence[str], groupby: str,
                     layer: Optional[str] = None, use_raw: Optional[bool] = None,
                     expression_cutoff: float = 0.0) -> Tuple[pd.DataFrame, pd.DataFrame]:
    r"""
    Mean expression and fraction of expressing cells per group.

    Returns:
        ``(mean, fraction)``, both groups x genes.
    """
    if groupby not in adata.obs.columns:
        raise KeyError(f"'{groupby}' not found in adata.obs")
    table = expression_table(adata, genes, layer=layer, use_raw=use_raw)
    groups = adata.obs[groupby].astype('category')
    levels = [c for c in groups.cat.categories if (groups == c).any()]
    mean = table.groupby(groups.values, observed=True).mean().reindex(levels)
    fraction = (table > expression_cutoff).groupby(groups.values, observed=True).mean().reindex(levels)
    return mean, fraction


@register_function(
    aliases=["marker_heatmap", "heatmap", "DoHeatmap", "clustermap"],
    category="pl",
    description="Clustered heatmap of mean marker expression per group",
    examples=["g = vw.pl.marker_heatmap(adata, vw.single.top_markers(markers, 3), 'leiden')"],
    related=["single.find_markers", "pl.marker_dotplot"]
)
def marker_heatmap(adata: AnnData, genes: Union[Sequence[str], Dict[str, Sequence[str]]], groupby: str,
                   standard_scale: Optional[str] = 'var', cluster_rows: bool = True,
                   cluster_cols: bool = True, cmap: str = 'viridis', layer: Optional[str] = None,
                   use_raw: Optional[bool] = None, method: str = 'average',
                   figsize: Optional[Tuple[float, float]] = None, **kwargs) -> sns.matrix.ClusterGrid:
    r"""
    Heatmap of group-mean expression (genes in rows, groups in columns).

    Arguments:
        adata: AnnData.
        genes: Gene list, or a ``top_markers`` dict.
        groupby: ``obs`` column defining the groups.
        standard_scale: ``'var'`` scales each gene to [0, 1], ``'group'`` each group, None keeps values.
        cluster_rows: Reorder genes by hierarchical clustering.
        cluster_cols: Reorder groups by hierarchical clustering.
        cmap: Colormap.
        layer: Layer with the expression values.
        use_raw: Read ``adata.raw`` (see ``expression_table``).
        method: scipy linkage method.
        figsize: Figure size.
        **kwargs: Passed to ``seaborn.clustermap``.

    Returns:
        The seaborn ``ClusterGrid``.
    """
    if isinstance(genes, dict):
        genes = marker_gene_list(genes)
    mean, _ = group_expression(adata, genes, groupby, layer=layer, use_raw=use_raw)
    matrix = mean.T
    matrix.columns = [str(c) for c in matrix.columns]
    if standard_scale == 'var':
        scale_axis = 0
    elif standard_scale == 'group':
        scale_axis = 1
    elif standard_scale is None:
        scale_axis = None
    else:
        raise ValueError(f"standard_scale must be 'var', 'group' or None, got {standard_scale!r}")
    if scale_axis is not None:
        low = matrix.min(axis=1 - scale_axis)
        span = (matrix.max(axis=1 - scale_axis) - low).replace(0, 1)
        matrix = matrix.sub(low, axis=scale_axis).div(span, axis=scale_axis)

    row_linkage = linkage(matrix.values, method=method) if cluster_rows and matrix.shape[0] > 1 else None
    col_linkage = linkage(matrix.values.T, method=method) if cluster_cols and matrix.shape[1] > 1 else None
    if figsize is None:
        figsize = (max(4, 0.5 * matrix.shape[1] + 2.5), max(4, 0.22 * matrix.shape[0] + 2))
    g = sns.clustermap(matrix, row_cluster=row_linkage is not None, col_cluster=col_linkage is not None,
                       row_linkage=row_linkage, col_linkage=col_linkage, cmap=cmap,
                       figsize=figsize, xticklabels=True, yticklabels=True,
                       cbar_kws={'label': 'scaled mean' if scale_axis is not None else 'mean'}, **kwargs)
    g.ax_heatmap.set_xlabel(groupby)
    g.ax_heatmap.set_ylabel('')
    logger.debug("marker_heatmap: %d genes x %d groups", matrix.shape[0], matrix.shape[1])
    return g


@register_function(
    aliases=["marker_dotplot", "dotplot", "DotPlot"],
    category="pl",
    description="Dot plot of marker genes: dot size is the fraction of expressing cells, color the mean",
    examples=["vw.pl.marker_dotplot(adata, ['CD3D', 'MS4A1', 'LYZ'], 'leiden')"],
    related=["pl.marker_heatmap", "single.top_markers"]
)
def marker_dotplot(adata: AnnData, genes: Union[Sequence[str], Dict[str, Sequence[str]]], groupby: str,
                   cmap: str = 'Reds', standard_scale: Optional[str] = 'var',
                   expression_cutoff: float = 0.0, dot_max_size: float = 200,
                   layer: Optional[str] = None, use_raw: Optional[bool] = None,
                   ax: Optional[Axes] = None, figsize=None) -> Axes:
    r"""
    Dot plot with genes on the x axis and groups on the y axis.

    Dot area is proportional to the fraction of cells above ``expression_cutoff``;
    color is the group mean, scaled per gene to [0, 1] when ``standard_scale='var'``.
    """
    if isinstance(genes, dict):
        genes = marker_gene_list(genes)
    mean, fraction = group_expression(adata, genes, groupby, layer=layer, use_raw=use_raw,
                                      expression_cutoff=expression_cutoff)
    if standard_scale == 'var':
        span = (mean.max() - mean.min()).replace(0, 1)
        mean = (mean - mean.min()) / span
    elif standard_scale is not None:
        raise ValueError(f"standard_scale must be 'var' or None, got {standard_scale!r}")

    groups = [str(g) for g in mean.index]
    n_genes, n_groups = len(genes), len(groups)
    ax = new_axes(ax, figsize or (max(4, 0.4 * n_genes + 2.5), max(3, 0.35 * n_groups + 1.5)))
    gx, gy = np.meshgrid(np.arange(n_genes), np.arange(n_groups))
    points = ax.scatter(gx.ravel(), gy.ravel(), s=fraction.values.ravel() * dot_max_size,
                        c=mean.values.ravel(), cmap=cmap, edgecolors='black', linewidths=0.3)
    ax.set_xticks(np.arange(n_genes), genes, rotation=90)
    ax.set_yticks(np.arange(n_groups), groups)
    ax.set_xlim(-0.6, n_genes - 0.4)
    ax.set_ylim(-0.6, n_groups - 0.4)
    ax.set_ylabel(groupby)
    plt.colorbar(points, ax=ax, fraction=0.046, pad=0.02,
                 label='scaled mean expression' if standard_scale else 'mean expression')

    handles = [ax.scatter([], [], s=f * dot_max_size, c='gray', edgecolors='black', linewidths=0.3)
               for f in (0.25, 0.5, 0.75, 1.0)]
    ax.legend(handles, ['25%', '50%', '75%', '100%'], title='fraction', frameon=False,
              loc='upper left', bbox_to_anchor=(1.25, 1.0), labelspacing=1.2)
    return ax


@register_function(
    aliases=["cluster_proportion", "cell_proportion", "composition", "stacked_proportion"],
    category="pl",
    description="Stacked bars of cluster proportions per sample or condition",
    examples=["vw.pl.cluster_proportion(adata, groupby='leiden', by='sample_id')"],
    related=["single.group_counts", "pl.barplot"]
)
def cluster_proportion(adata: AnnData, groupby: str, by: str, palette=None,
                       horizontal: bool = False, ax: Optional[Axes] = None, figsize=None) -> Axes:
    r"""Fraction of the cells of every ``by`` level falling in each ``groupby`` level, stacked to 1."""
    counts = group_counts(adata, groupby, by=by)
    colors = uns_colors(adata, groupby, palette)
    ax = barplot(counts, x=by, y='n', hue=groupby, normalize=True, horizontal=horizontal,
                 palette=colors if colors is not None else palette, ax=ax,
                 figsize=figsize or (4.5, 4))
    return ax
