import logging
import warnings
from pathlib import Path

import matplotlib
import pandas as pd
import pytest
from anndata import AnnData
import numpy as np

import vizworkshop as vw
from vizworkshop._settings import vizworkshopConfig, add_reference, vprint
from vizworkshop.utils import logging_config


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv('VIZWORKSHOP_OUTPUT_DIR', raising=False)
        monkeypatch.delenv('VIZWORKSHOP_CACHE_DIR', raising=False)
        config = vizworkshopConfig()
        assert config.output_dir == Path('figures')
        assert config.cache_dir == Path.home() / '.cache' / 'vizworkshop' / 'datasets'
        assert config.dpi_save == 300
        assert config.verbosity == 1
        assert 'dpi_save=300' in repr(config)

    def test_environment_overrides(self, mock_env_vars, tmp_path):
        mock_env_vars({'VIZWORKSHOP_OUTPUT_DIR': str(tmp_path / 'out'),
                       'VIZWORKSHOP_CACHE_DIR': str(tmp_path / 'cache')})
        config = vizworkshopConfig()
        assert config.output_dir == tmp_path / 'out'
        assert config.cache_dir == tmp_path / 'cache'

    def test_vprint_respects_verbosity(self, capsys, monkeypatch):
        vprint('hidden')
        assert capsys.readouterr().out == ''
        monkeypatch.setattr(vw.settings, 'verbosity', 1)
        vprint('shown')
        assert 'shown' in capsys.readouterr().out

    def test_reference_table(self):
        adata = AnnData(np.zeros((2, 2)))
        assert vw.generate_reference_table(adata) is None
        add_reference(adata, 'leiden', 'leiden clustering with scanpy')
        table = vw.generate_reference_table(adata)
        assert list(table.columns) == ['method', 'content', 'reference']
        assert set(table['method']) == {'vizworkshop', 'leiden'}
        assert 'Traag' in table.set_index('method').loc['leiden', 'reference']


class TestPlotSettings:

    def test_plot_set_updates_rcparams(self, monkeypatch):
        monkeypatch.setattr(vw.settings, 'dpi_save', 300)
        monkeypatch.setattr(vw.settings, 'figsize', (6, 4))
        vw.plot_set(verbosity=0, dpi=90, dpi_save=150, fontsize=11, figsize=(5, 3))
        assert matplotlib.rcParams['figure.dpi'] == 90
        assert matplotlib.rcParams['savefig.dpi'] == 150
        assert matplotlib.rcParams['font.size'] == 11
        assert vw.settings.dpi_save == 150
        assert tuple(vw.settings.figsize) == (5, 3)
        vw.utils.set_rcParams_defaults()

    def test_plot_set_only_quiets_plotting_libraries(self):
        with warnings.catch_warnings():
            warnings.resetwarnings()
            vw.plot_set(verbosity=0)
            ignored = [f for f in warnings.filters
                       if f[0] == 'ignore' and f[2] is FutureWarning]
            assert ignored
            assert all(f[3] is not None for f in ignored)
            with pytest.warns(FutureWarning, match='still shown'):
                warnings.warn('still shown', FutureWarning)
        vw.utils.set_rcParams_defaults()

    def test_plot_set_with_theme(self):
        vw.plot_set(verbosity=0, theme='minimal')
        assert matplotlib.rcParams['axes.grid'] is True
        vw.pl.reset_theme()

    def test_get_palette(self):
        assert vw.utils.get_palette(3) == vw.palette()[:3]
        assert len(vw.utils.get_palette(40)) == 40
        assert vw.utils.get_palette(5, ['#000000', '#ffffff']) == ['#000000', '#ffffff'] * 2 + ['#000000']
        assert len(vw.utils.get_palette(4, 'Set2')) == 4
        with pytest.raises(ValueError):
            vw.utils.get_palette(-1)
        with pytest.raises(ValueError):
            vw.utils.get_palette(2, [])


class TestLogging:

    def test_setup_logging_levels(self, monkeypatch):
        logger = logging.getLogger('vizworkshop')
        handlers_before = list(logger.handlers)
        try:
            assert logging_config.enable_debug_logging().level == logging.DEBUG
            assert logging_config.disable_debug_logging().level == logging.INFO
            n_handlers = len(logger.handlers)
            logging_config.setup_logging('WARNING')
            assert len(logger.handlers) == n_handlers
            assert logger.level == logging.WARNING
        finally:
            for handler in list(logger.handlers):
                if handler not in handlers_before:
                    logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)

    def test_env_var_selects_debug(self, mock_env_vars):
        mock_env_vars({'VIZWORKSHOP_DEBUG': 'true'})
        logger = logging.getLogger('vizworkshop')
        handlers_before = list(logger.handlers)
        try:
            assert logging_config.setup_logging().level == logging.DEBUG
        finally:
            for handler in list(logger.handlers):
                if handler not in handlers_before:
                    logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)

    def test_module_loggers_are_namespaced(self):
        from vizworkshop.pl import _save
        assert _save.logger.name.startswith('vizworkshop.')


class TestRead:

    def test_read_csv_and_tsv(self, tmp_path):
        df = pd.DataFrame({'a': [1, 2], 'b': ['x', 'y']})
        df.to_csv(tmp_path / 't.csv', index=False)
        df.to_csv(tmp_path / 't.tsv', sep='\t', index=False)
        df.to_csv(tmp_path / 't.csv.gz', index=False)
        for name in ('t.csv', 't.tsv', 't.csv.gz'):
            pd.testing.assert_frame_equal(vw.read(tmp_path / name), df)

    def test_read_h5ad(self, tmp_path, mock_adata):
        mock_adata.write_h5ad(tmp_path / 'a.h5ad')
        back = vw.read(tmp_path / 'a.h5ad')
        assert back.shape == mock_adata.shape

    def test_read_unknown_extension(self, tmp_path):
        with pytest.raises(ValueError):
            vw.read(tmp_path / 'table.xlsx')

    def test_layers_round_trip(self, mock_adata):
        vw.utils.store_layers(mock_adata, 'counts')
        mock_adata.X = mock_adata.X * 2
        vw.utils.retrieve_layers(mock_adata, 'counts')
        assert np.allclose(mock_adata.X, mock_adata.layers['counts'])
        with pytest.raises(KeyError):
            vw.utils.retrieve_layers(mock_adata, 'missing')
