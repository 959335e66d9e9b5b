import numpy as np
import pandas as pd
import pytest
import seaborn as sns
from matplotlib.axes import Axes

import vizworkshop as vw


class TestEmbeddingPlot:

    def test_categorical_color_with_legend(self, processed_adata):
        ax = vw.pl.embedding(processed_adata, basis='X_umap', color='leiden')
        n_clusters = processed_adata.obs['leiden'].nunique()
        assert len(ax.get_legend().get_texts()) == n_clusters
        assert ax.get_title() == 'leiden'
        n_points = sum(len(c.get_offsets()) for c in ax.collections)
        assert n_points == processed_adata.n_obs

    def test_labels_on_data(self, processed_adata):
        ax = vw.pl.embedding(processed_adata, basis='umap', color='leiden', legend_loc='on data',
                             frameon=True)
        assert ax.get_legend() is None
        labels = {t.get_text() for t in ax.texts}
        assert set(processed_adata.obs['leiden'].astype(str)) <= labels
        assert ax.get_xlabel() == 'UMAP1'

    def test_numeric_and_gene_color(self, processed_adata):
        vw.pp.qc_metrics(processed_adata)
        ax = vw.pl.embedding(processed_adata, 'X_pca', color='nUMIs', frameon=False)
        assert len(ax.figure.axes) == 2  # colorbar
        gene = processed_adata.var_names[0]
        ax = vw.pl.embedding(processed_adata, 'X_umap', color=gene, cmap='Reds', vmax=1.0)
        assert ax.get_title() == gene

    def test_uns_colors_are_used(self, processed_adata):
        levels = processed_adata.obs['leiden'].cat.categories
        processed_adata.uns['leiden_colors'] = ['#000000'] * len(levels)
        ax = vw.pl.embedding(processed_adata, color='leiden')
        face = np.vstack([c.get_facecolors() for c in ax.collections])
        assert np.allclose(face[:, :3], 0)

    def test_missing_key(self, processed_adata):
        with pytest.raises(KeyError):
            vw.pl.embedding(processed_adata, color='not_there')
        with pytest.raises(KeyError):
            vw.pl.embedding(processed_adata, basis='X_nothing')


class TestQCPlots:

    def test_qc_violin(self, mock_adata):
        vw.pp.qc_metrics(mock_adata)
        axes = vw.pl.qc_violin(mock_adata)
        assert len(axes) == 3
        assert [ax.get_title() for ax in axes] == ['nUMIs', 'detected_genes', 'mito_perc']
        axes = vw.pl.qc_violin(mock_adata, groupby='sample_id')
        ax = axes[0]
        ax.figure.canvas.draw()
        assert [t.get_text() for t in ax.get_xticklabels()] == ['Sample_1', 'Sample_2', 'Sample_3']

    def test_qc_violin_needs_metrics(self, mock_adata):
        with pytest.raises(KeyError, match='qc_metrics'):
            vw.pl.qc_violin(mock_adata)

    def test_qc_scatter(self, mock_adata):
        vw.pp.qc_metrics(mock_adata)
        ax = vw.pl.qc_scatter(mock_adata)
        assert ax.get_xlabel() == 'nUMIs'
        assert len(ax.figure.axes) == 2

    def test_pca_variance(self, processed_adata):
        ax = vw.pl.pca_variance(processed_adata, n_pcs=10, log=True)
        assert len(ax.lines[0].get_xdata()) == 10
        assert ax.get_yscale() == 'log'
        del processed_adata.uns['pca']
        with pytest.raises(KeyError):
            vw.pl.pca_variance(processed_adata)


class TestMarkerPlots:

    @pytest.fixture
    def top(self, processed_adata):
        markers = vw.single.find_markers(processed_adata, 'cell_type', n_genes=10)
        return vw.single.top_markers(markers, n=3)

    def test_group_expression(self, processed_adata):
        genes = list(processed_adata.var_names[:4])
        mean, fraction = vw.pl.group_expression(processed_adata, genes, 'cell_type')
        assert mean.shape == (3, 4)
        assert fraction.values.min() >= 0 and fraction.values.max() <= 1
        with pytest.raises(KeyError):
            vw.pl.expression_table(processed_adata, ['not_a_gene'])

    def test_heatmap(self, processed_adata, top):
        g = vw.pl.marker_heatmap(processed_adata, top, 'cell_type')
        assert isinstance(g, sns.matrix.ClusterGrid)
        data = g.data2d
        assert data.shape == (len(vw.single.marker_gene_list(top)), 3)
        assert np.allclose(data.min(axis=1), 0) and np.allclose(data.max(axis=1), 1)

    def test_heatmap_without_clustering(self, processed_adata, top):
        genes = vw.single.marker_gene_list(top)
        g = vw.pl.marker_heatmap(processed_adata, genes, 'cell_type', standard_scale=None,
                                 cluster_rows=False, cluster_cols=False)
        assert list(g.data2d.index) == genes
        with pytest.raises(ValueError):
            vw.pl.marker_heatmap(processed_adata, genes, 'cell_type', standard_scale='rows')

    def test_dotplot(self, processed_adata, top):
        genes = vw.single.marker_gene_list(top)
        ax = vw.pl.marker_dotplot(processed_adata, top, 'cell_type')
        assert isinstance(ax, Axes)
        assert [t.get_text() for t in ax.get_xticklabels()] == genes
        assert len(ax.collections[0].get_offsets()) == 3 * len(genes)

    def test_cluster_proportion(self, processed_adata):
        ax = vw.pl.cluster_proportion(processed_adata, 'leiden', 'sample_id')
        assert ax.get_ylabel() == 'proportion'
        n_clusters = processed_adata.obs['leiden'].nunique()
        assert len(ax.get_legend().get_texts()) == n_clusters


class TestSpatialPlot:

    def test_spots_and_aspect(self, mock_spatial):
        ax = vw.pl.spatial(mock_spatial, color='domain')
        assert ax.get_aspect() == 1.0
        ymin, ymax = ax.get_ylim()
        assert ymin > ymax
        n_points = sum(len(c.get_offsets()) for c in ax.collections)
        assert n_points == mock_spatial.n_obs

    def test_in_tissue_only_and_gene(self, mock_spatial):
        ax = vw.pl.spatial(mock_spatial, color='Gene_0001', in_tissue_only=True, invert_y=False,
                           spot_size=20)
        n_points = sum(len(c.get_offsets()) for c in ax.collections)
        assert n_points == int(mock_spatial.obs['in_tissue'].sum())
        ymin, ymax = ax.get_ylim()
        assert ymin < ymax

    def test_default_spot_size(self):
        assert vw.pl._space.default_spot_size(np.zeros((1, 2))) == 30.0
        small = vw.pl._space.default_spot_size(np.zeros((10000, 2)))
        large = vw.pl._space.default_spot_size(np.zeros((100, 2)))
        assert 2.0 <= small < large <= 400.0
