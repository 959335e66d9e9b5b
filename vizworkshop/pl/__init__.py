r"""
Plotting functions for the workshop.

Visualization categories:
    General charts: scatter (with LOWESS smoothing), boxplot, violin, histogram, barplot, lineplot
    Small multiples: facet_wrap, facet_grid
    Aesthetics: set_theme, theme_axes, style_axes, rotate_xticks, palettes
    Layout: panel_grid, arrange, add_panel_labels
    Single-cell plots: qc_violin, qc_scatter, pca_variance, embedding, marker_heatmap,
        marker_dotplot, cluster_proportion
    Spatial plots: spatial
    Export: save_figure, close_all

Examples:
    >>> import vizworkshop as vw
    >>> ax = vw.pl.scatter(surveys, 'weight', 'hindfoot_length', alpha=0.1)
    >>> vw.pl.save_figure(ax, 'scatter.png', width=15, height=10, units='cm')
    >>> g = vw.pl.facet_wrap(yearly, 'line', x='year', y='n', facet='genus')
    >>> vw.pl.embedding(adata, basis='X_umap', color='leiden', legend_loc='on data')
"""
from ._palette import (
    sc_color, red_color, green_color, orange_color, blue_color, purple_color, ditto_color,
    palette, red_palette, green_palette, orange_palette, blue_palette, purple_palette,
    ditto_palette, get_palette, color_dict, category_levels,
)
from ._theme import THEMES, set_theme, theme_axes, rotate_xticks, style_axes, reset_theme
from ._general import scatter, boxplot, violin, histogram, barplot, lineplot, smooth_lowess
from ._facet import facet_wrap, facet_grid, FACET_KINDS
from ._layout import panel_grid, arrange, add_panel_labels
from ._single import (
    embedding, qc_violin, qc_scatter, pca_variance, marker_heatmap, marker_dotplot,
    cluster_proportion, expression_table, group_expression,
)
from ._space import spatial
from ._save import save_figure, close_all
from ..utils._plot import plot_set
