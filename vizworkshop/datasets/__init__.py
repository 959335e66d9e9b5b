r"""
Dataset downloading and management utilities.

This module fetches or synthesizes the three datasets used across the
workshop: the Portal Project ecology survey table, a single-cell count matrix
and a spatial transcriptomics sample.

Main functions:
    load_surveys: Download (once) and read the survey CSV
    load_pbmc3k: Load PBMC 3k dataset from scanpy
    load_visium: Load a 10x Visium sample from scanpy
    download_and_cache: Generic download and caching utility
    create_mock_surveys, create_mock_dataset, create_mock_spatial: Offline stand-ins

Examples:
    >>> import vizworkshop as vw
    >>> surveys = vw.datasets.load_surveys()
    >>> adata = vw.datasets.create_mock_dataset(n_cells=500)
    >>> spots = vw.datasets.load_dataset('mock_spatial')
"""

from ._datasets import (
    SURVEYS_URL,
    SURVEYS_FILENAME,
    SURVEY_COLUMNS,
    get_cache_dir,
    download_and_cache,
    load_surveys,
    create_mock_surveys,
    load_pbmc3k,
    load_visium,
    create_mock_dataset,
    create_mock_spatial,
    list_available_datasets,
    load_dataset,
)
