"""
Shared pytest configuration and fixtures for the vizworkshop test suite.

The datasets are the synthetic ones from ``vizworkshop.datasets``; nothing
here touches the network.
"""

import matplotlib
matplotlib.use('Agg')

import numpy as np
import pandas as pd
import pytest

import vizworkshop as vw


@pytest.fixture
def random_seed():
    """
    Provides a consistent random seed for reproducible tests.
    """
    return 42


@pytest.fixture(autouse=True)
def reset_random_state(random_seed):
    """
    Automatically reset random state before each test for reproducibility.
    """
    np.random.seed(random_seed)


@pytest.fixture
def temp_output_dir(tmp_path):
    """
    Provides a temporary directory for figures written by a test.
    """
    output_dir = tmp_path / "figures"
    output_dir.mkdir(exist_ok=True)
    return output_dir


@pytest.fixture(autouse=True)
def quiet_settings(tmp_path, monkeypatch):
    """
    Silence progress output, point the output and cache directories into
    ``tmp_path`` and close figures afterwards.
    """
    import matplotlib.pyplot as plt

    monkeypatch.setattr(vw.settings, 'verbosity', 0)
    monkeypatch.setattr(vw.settings, 'output_dir', tmp_path / 'default_figures')
    monkeypatch.setattr(vw.settings, 'cache_dir', tmp_path / 'cache')
    yield
    plt.close('all')


@pytest.fixture
def mock_env_vars(monkeypatch):
    """
    Fixture to safely mock environment variables in tests.
    Usage:
        def test_something(mock_env_vars):
            mock_env_vars({'VIZWORKSHOP_OUTPUT_DIR': '/tmp/figs'})
    """
    def _set_env_vars(env_dict):
        for key, value in env_dict.items():
            monkeypatch.setenv(key, value)
    return _set_env_vars


@pytest.fixture
def mock_surveys():
    """Synthetic survey table with the Portal schema."""
    return vw.datasets.create_mock_surveys(n_records=2000, random_state=0)


@pytest.fixture
def clean_surveys(mock_surveys):
    """Survey table after ``complete_cases``."""
    return vw.survey.complete_cases(mock_surveys)


@pytest.fixture
def mock_adata():
    """Raw-count single-cell dataset: 300 cells, 300 genes, 3 cell types."""
    return vw.datasets.create_mock_dataset(n_cells=300, n_genes=300, n_cell_types=3, random_state=0)


@pytest.fixture(scope='session')
def _processed_adata():
    vw.settings.verbosity = 0
    adata = vw.datasets.create_mock_dataset(n_cells=300, n_genes=300, n_cell_types=3, random_state=0)
    adata = vw.pp.preprocess(adata, n_top_genes=200, n_comps=20)
    vw.pp.neighbors(adata, n_neighbors=10)
    vw.pp.umap(adata)
    vw.single.cluster(adata, resolution=0.5)
    vw.settings.verbosity = 1
    return adata


@pytest.fixture
def processed_adata(_processed_adata):
    """Preprocessed, embedded and clustered copy of the mock dataset."""
    return _processed_adata.copy()


@pytest.fixture
def mock_spatial():
    """Synthetic 20 x 20 spot grid."""
    return vw.datasets.create_mock_spatial(n_rows=20, n_cols=20, n_genes=150, random_state=0)


@pytest.fixture
def tidy_frame():
    """Small tidy table with a numeric and two categorical columns."""
    rng = np.random.RandomState(0)
    return pd.DataFrame({
        'x': rng.normal(size=120),
        'y': rng.normal(size=120),
        'group': rng.choice(['a', 'b', 'c'], 120),
        'sex': rng.choice(['F', 'M'], 120),
        'year': np.repeat(np.arange(2000, 2012), 10),
    })


def pytest_configure(config):
    """
    Register custom pytest markers for better test organization.
    """
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
