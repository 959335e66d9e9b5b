import numpy as np
import pandas as pd
import pytest

import vizworkshop as vw


class TestQC:

    def test_qc_metrics_columns(self, mock_adata):
        vw.pp.qc_metrics(mock_adata)
        for column in ('nUMIs', 'detected_genes', 'mito_perc'):
            assert column in mock_adata.obs.columns
        assert mock_adata.var['mt'].sum() == 10
        assert mock_adata.obs['mito_perc'].between(0, 1).all()
        assert np.allclose(mock_adata.obs['nUMIs'], np.asarray(mock_adata.X.sum(axis=1)).ravel())

    def test_qc_metrics_copy(self, mock_adata):
        annotated = vw.pp.qc_metrics(mock_adata, inplace=False)
        assert 'mito_perc' in annotated.obs.columns
        assert 'mito_perc' not in mock_adata.obs.columns

    def test_no_matching_genes_gives_zero_fraction(self, mock_adata):
        vw.pp.qc_metrics(mock_adata, mt_pattern='^mt-')
        assert (mock_adata.obs['mito_perc'] == 0).all()
        assert vw.pp.mito_genes(mock_adata, '^mt-') == []

    def test_filter_cells_thresholds(self, mock_adata):
        filtered = vw.pp.filter_cells(mock_adata, min_genes=200, max_mito=0.2)
        assert filtered.n_obs < mock_adata.n_obs
        assert (filtered.obs['detected_genes'] >= 200).all()
        assert (filtered.obs['mito_perc'] <= 0.2).all()

    def test_filter_cells_everything_removed(self, mock_adata):
        with pytest.raises(ValueError):
            vw.pp.filter_cells(mock_adata, min_genes=10_000)


class TestQuantileNormalize:

    def test_columns_share_distribution(self):
        data = np.array([[5.0, 4.0, 3.0],
                         [2.0, 1.0, 4.0],
                         [3.0, 4.5, 6.0],
                         [4.0, 2.0, 8.0]])
        result = vw.pp.quantile_normalize(data)
        reference = np.sort(data, axis=0).mean(axis=1)
        for j in range(data.shape[1]):
            assert np.allclose(np.sort(result[:, j]), reference)
        # ranks within each column are preserved
        assert np.array_equal(np.argsort(result, axis=0), np.argsort(data, axis=0))

    def test_ties_get_average(self):
        data = np.array([[1.0, 1.0], [1.0, 2.0], [3.0, 3.0]])
        result = vw.pp.quantile_normalize(data)
        assert result[0, 0] == pytest.approx(result[1, 0])

    def test_dataframe_labels_kept(self):
        df = pd.DataFrame({'s1': [1.0, 2.0, 3.0], 's2': [30.0, 10.0, 20.0]}, index=['a', 'b', 'c'])
        result = vw.pp.quantile_normalize(df)
        assert isinstance(result, pd.DataFrame)
        assert list(result.index) == ['a', 'b', 'c']
        assert list(result.columns) == ['s1', 's2']

    @pytest.mark.parametrize('bad', [np.arange(4.0), np.array([[1.0, np.nan], [2.0, 3.0]])])
    def test_rejects_bad_input(self, bad):
        with pytest.raises(ValueError):
            vw.pp.quantile_normalize(bad)


class TestPreprocess:

    def test_preprocess_chain(self, mock_adata):
        adata = vw.pp.preprocess(mock_adata, n_top_genes=100, n_comps=15)
        assert adata is not mock_adata
        assert 'nUMIs' not in mock_adata.obs.columns
        assert adata.obsm['X_pca'].shape == (adata.n_obs, 15)
        assert 'counts' in adata.layers and 'scaled' in adata.layers
        assert adata.raw is not None
        assert 0 < adata.var['highly_variable'].sum() <= 100
        # normalized totals before log1p
        totals = np.expm1(adata.X).sum(axis=1)
        assert np.allclose(totals, 1e4, rtol=1e-3)

    def test_embeddings(self, processed_adata):
        assert processed_adata.obsm['X_umap'].shape == (processed_adata.n_obs, 2)
        vw.pp.tsne(processed_adata, perplexity=10)
        assert processed_adata.obsm['X_tsne'].shape == (processed_adata.n_obs, 2)
        methods = set(vw.generate_reference_table(processed_adata)['method'])
        assert {'scanpy', 'umap', 'tsne', 'leiden'} <= methods

    def test_pca_capped_by_data_size(self, mock_adata):
        small = mock_adata[:20].copy()
        vw.pp.normalize(small)
        vw.pp.pca(small, n_comps=50)
        assert small.obsm['X_pca'].shape[1] == 19
