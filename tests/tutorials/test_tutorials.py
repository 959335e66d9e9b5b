"""
End-to-end runs of the three workshops on the synthetic datasets.
"""
import pandas as pd
import pytest

import vizworkshop as vw
from vizworkshop.tutorials import FigureRecorder


SURVEY_FIGURES = [
    'weight_hindfoot', 'weight_hindfoot_alpha', 'weight_hindfoot_species', 'weight_hindfoot_smooth',
    'weight_boxplot', 'weight_violin', 'weight_histogram', 'plot_type_sex_bar',
    'yearly_counts_genus', 'yearly_counts_facet', 'yearly_sex_facet', 'weight_hindfoot_by_sex',
    'yearly_counts_sex_grid', 'multi_panel',
]


class TestFigureRecorder:

    def test_save_and_summary(self, temp_output_dir, tidy_frame):
        rec = FigureRecorder(temp_output_dir, fmt='png', dpi=20)
        path = rec.save('first', vw.pl.scatter(tidy_frame, 'x', 'y'), width=2, height=2)
        assert path == temp_output_dir / 'first.png'
        with pytest.raises(ValueError):
            rec.save('first', vw.pl.scatter(tidy_frame, 'x', 'y'))
        assert rec.summary('test') == {'first': path}

    def test_default_directory(self):
        rec = FigureRecorder(subdir='surveys')
        assert rec.output_dir == vw.settings.output_dir / 'surveys'


@pytest.mark.integration
class TestWorkshops:

    def test_survey_workshop(self, mock_surveys, temp_output_dir):
        paths = vw.tutorials.survey_workshop(mock_surveys, output_dir=temp_output_dir, dpi=30)
        for name in SURVEY_FIGURES + [f'theme_{t}' for t in vw.pl.THEMES]:
            assert name in paths
            assert paths[name].is_file()
            assert paths[name].parent == temp_output_dir
        assert len(paths) == len(SURVEY_FIGURES) + len(vw.pl.THEMES)

    def test_survey_workshop_pdf(self, mock_surveys, temp_output_dir):
        paths = vw.tutorials.survey_workshop(mock_surveys, output_dir=temp_output_dir, fmt='pdf')
        assert all(p.suffix == '.pdf' for p in paths.values())

    def test_survey_workshop_nothing_left(self, mock_surveys, temp_output_dir):
        with pytest.raises(ValueError):
            vw.tutorials.survey_workshop(mock_surveys, output_dir=temp_output_dir,
                                         min_species_count=10 ** 6)

    def test_singlecell_workshop(self, mock_adata, temp_output_dir):
        paths = vw.tutorials.singlecell_workshop(mock_adata, output_dir=temp_output_dir, dpi=30,
                                                 resolution=0.5, n_top_genes=200)
        for name in ('qc_violin_raw', 'qc_scatter_raw', 'qc_violin_filtered', 'pca_variance',
                     'pca_leiden', 'tsne_leiden', 'umap_leiden', 'umap_leiden_legend', 'umap_mito',
                     'marker_heatmap', 'marker_dotplot', 'cluster_proportion', 'markers'):
            assert paths[name].is_file()
        assert any(name.startswith('umap_Gene_') for name in paths)
        markers = pd.read_csv(paths['markers'])
        assert list(markers.columns) == vw.single.MARKER_COLUMNS

    def test_spatial_workshop(self, mock_spatial, temp_output_dir):
        paths = vw.tutorials.spatial_workshop(mock_spatial, output_dir=temp_output_dir, dpi=30,
                                              resolution=0.5)
        for name in ('spatial_counts', 'spatial_mito', 'spatial_clusters', 'umap_clusters',
                     'spatial_top_marker', 'multi_panel'):
            assert paths[name].is_file()


@pytest.mark.slow
@pytest.mark.integration
def test_run_all_offline(tmp_path):
    results = vw.tutorials.run_all(output_dir=tmp_path, offline=True, dpi=20)
    assert set(results) == {'surveys', 'singlecell', 'spatial'}
    for name, paths in results.items():
        assert paths
        assert all(p.is_file() for p in paths.values())
        assert all(p.parent == tmp_path / name for p in paths.values())
