import logging
from pathlib import Path
from typing import Optional, Union, List

import numpy as np
import pandas as pd
import scanpy as sc
from anndata import AnnData

from .._settings import settings, vprint, EMOJI, Colors
from ..utils._data import data_downloader
from ..utils.registry import register_function

logger = logging.getLogger(__name__)

# Portal Project teaching database, joined table (Data Carpentry ecology lessons)
SURVEYS_URL = 'https://ndownloader.figshare.com/files/2292169'
SURVEYS_FILENAME = 'portal_data_joined.csv'

SURVEY_COLUMNS = [
    'record_id', 'month', 'day', 'year', 'plot_id', 'species_id', 'sex',
    'hindfoot_length', 'weight', 'genus', 'species', 'taxa', 'plot_type',
]

# species_id, genus, species, taxa, mean weight (g), mean hindfoot (mm), relative abundance
_MOCK_SPECIES = [
    ('DM', 'Dipodomys', 'merriami', 'Rodent', 43.0, 36.0, 0.28),
    ('DO', 'Dipodomys', 'ordii', 'Rodent', 48.9, 35.6, 0.08),
    ('DS', 'Dipodomys', 'spectabilis', 'Rodent', 120.1, 49.9, 0.07),
    ('PP', 'Chaetodipus', 'penicillatus', 'Rodent', 17.2, 21.7, 0.11),
    ('PB', 'Chaetodipus', 'baileyi', 'Rodent', 31.7, 26.1, 0.07),
    ('PF', 'Perognathus', 'flavus', 'Rodent', 7.9, 15.6, 0.05),
    ('OT', 'Onychomys', 'torridus', 'Rodent', 24.2, 20.3, 0.05),
    ('OL', 'Onychomys', 'leucogaster', 'Rodent', 31.6, 20.5, 0.04),
    ('NL', 'Neotoma', 'albigula', 'Rodent', 159.2, 32.3, 0.05),
    ('RM', 'Reithrodontomys', 'megalotis', 'Rodent', 10.6, 16.5, 0.07),
    ('PE', 'Peromyscus', 'eremicus', 'Rodent', 21.6, 20.2, 0.04),
    ('SH', 'Sigmodon', 'hispidus', 'Rodent', 73.0, 28.0, 0.035),
    ('PX', 'Chaetodipus', 'sp.', 'Rodent', 19.0, 22.0, 0.005),
    ('AB', 'Amphispiza', 'bilineata', 'Bird', np.nan, np.nan, 0.01),
]

_PLOT_TYPES = ['Control', 'Long-term Krat Exclosure', 'Short-term Krat Exclosure',
               'Rodent Exclosure', 'Spectab exclosure']


def get_cache_dir() -> Path:
    """Get the cache directory for vizworkshop datasets."""
    cache_dir = Path(settings.cache_dir).expanduser()
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir


@register_function(
    aliases=["download_and_cache", "download", "fetch"],
    category="datasets",
    description="Download a file over HTTP once and reuse the cached copy afterwards",
    examples=["path = vw.datasets.download_and_cache(vw.datasets.SURVEYS_URL, 'surveys.csv')"],
    related=["datasets.load_surveys"]
)
def download_and_cache(
    url: str,
    filename: str,
    cache_dir: Optional[Union[str, Path]] = None,
    force_download: bool = False
) -> Path:
    """
    Download a file and cache it locally.

    Arguments:
        url: URL to download from.
        filename: Local filename to save as.
        cache_dir: Directory to cache files. If None, uses ``settings.cache_dir``.
        force_download: Whether to force re-download if file exists.

    Returns:
        Path to the cached file.
    """
    if cache_dir is None:
        cache_dir = get_cache_dir()
    else:
        cache_dir = Path(cache_dir)
        cache_dir.mkdir(parents=True, exist_ok=True)

    file_path = cache_dir / filename
    if file_path.exists() and not force_download:
        logger.debug("Using cached file %s", file_path)
        vprint(f"Using cached file: {file_path}")
        return file_path

    # the cached copy is only replaced once the new download is complete
    partial = file_path.with_name(file_path.name + '.part')
    if partial.exists():
        partial.unlink()
    data_downloader(url, partial, title=filename)
    partial.replace(file_path)
    return file_path


def _check_columns(df: pd.DataFrame, required: List[str]) -> None:
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise KeyError(f"Columns {missing} are missing from the survey table")


@register_function(
    aliases=["load_surveys", "surveys", "portal_data", "read_surveys"],
    category="datasets",
    description="Load the Portal Project ecology survey table, downloading and caching the CSV if needed",
    examples=[
        "surveys = vw.datasets.load_surveys()",
        "surveys = vw.datasets.load_surveys(path='data/portal_data_joined.csv')",
    ],
    related=["survey.complete_cases", "datasets.create_mock_surveys"]
)
def load_surveys(
    path: Optional[Union[str, Path]] = None,
    url: str = SURVEYS_URL,
    force_download: bool = False,
) -> pd.DataFrame:
    """
    Load the ecology survey dataset (one row per animal capture).

    Arguments:
        path: Local CSV to read. If None, the file is downloaded from ``url`` into the cache.
        url: Remote location of the CSV.
        force_download: Whether to refresh the cached copy.

    Returns:
        DataFrame with the columns in ``SURVEY_COLUMNS``.
    """
    if path is None:
        path = download_and_cache(url, SURVEYS_FILENAME, force_download=force_download)
    surveys = pd.read_csv(path)
    _check_columns(surveys, SURVEY_COLUMNS)
    vprint(f"{EMOJI['data']} Loaded survey table: {Colors.BOLD}{surveys.shape[0]:,} records × {surveys.shape[1]} columns{Colors.ENDC}")
    return surveys


def create_mock_surveys(n_records: int = 2000, random_state: int = 42) -> pd.DataFrame:
    """
    Create a synthetic survey table with the same schema as the Portal data.

    Missing weights, hindfoot lengths and sexes are sprinkled in, and a couple
    of species are rare, so that the cleaning steps have work to do.

    Arguments:
        n_records: Number of capture records.
        random_state: Random seed for reproducibility.

    Returns:
        DataFrame with the columns in ``SURVEY_COLUMNS``.
    """
    rng = np.random.RandomState(random_state)
    species = pd.DataFrame(_MOCK_SPECIES, columns=['species_id', 'genus', 'species', 'taxa',
                                                   'weight_mean', 'hindfoot_mean', 'abundance'])
    prob = species['abundance'].values / species['abundance'].sum()
    idx = rng.choice(len(species), size=n_records, p=prob)
    picked = species.iloc[idx].reset_index(drop=True)

    year = np.sort(rng.randint(1977, 2003, size=n_records))
    sex = rng.choice(['M', 'F'], size=n_records)
    # males a little heavier, as in the real data
    sex_factor = np.where(sex == 'M', 1.05, 0.95)
    weight = np.round(picked['weight_mean'].values * sex_factor * rng.lognormal(0, 0.15, n_records))
    hindfoot = np.round(picked['hindfoot_mean'].values + rng.normal(0, 1.5, n_records))

    surveys = pd.DataFrame({
        'record_id': np.arange(1, n_records + 1),
        'month': rng.randint(1, 13, size=n_records),
        'day': rng.randint(1, 29, size=n_records),
        'year': year,
        'plot_id': rng.randint(1, 25, size=n_records),
        'species_id': picked['species_id'].values,
        'sex': sex.astype(object),
        'hindfoot_length': hindfoot,
        'weight': weight,
        'genus': picked['genus'].values,
        'species': picked['species'].values,
        'taxa': picked['taxa'].values,
    })
    surveys['plot_type'] = [_PLOT_TYPES[(p - 1) % len(_PLOT_TYPES)] for p in surveys['plot_id']]

    n_missing = max(1, n_records // 20)
    surveys.loc[rng.choice(n_records, n_missing, replace=False), 'weight'] = np.nan
    surveys.loc[rng.choice(n_records, n_missing, replace=False), 'hindfoot_length'] = np.nan
    surveys.loc[rng.choice(n_records, n_missing, replace=False), 'sex'] = np.nan
    surveys.loc[surveys['taxa'] != 'Rodent', 'sex'] = np.nan
    return surveys[SURVEY_COLUMNS]


@register_function(
    aliases=["load_pbmc3k", "pbmc3k", "pbmc"],
    category="datasets",
    description="Load the 10x PBMC 3k single-cell dataset through scanpy",
    examples=["adata = vw.datasets.load_pbmc3k()"],
    related=["pp.preprocess", "tutorials.singlecell_workshop"]
)
def load_pbmc3k(processed: bool = False) -> AnnData:
    """
    Load the PBMC 3k dataset from scanpy.

    Arguments:
        processed: Whether to return the preprocessed version with clustering.

    Returns:
        AnnData object with 2700 peripheral blood mononuclear cells.
    """
    if processed:
        adata = sc.datasets.pbmc3k_processed()
    else:
        adata = sc.datasets.pbmc3k()
    adata.var_names_make_unique()
    vprint(f"{EMOJI['data']} Loaded PBMC 3k dataset: {adata.n_obs:,} cells × {adata.n_vars:,} genes")
    return adata


@register_function(
    aliases=["load_visium", "visium", "spatial_dataset"],
    category="datasets",
    description="Load a 10x Visium spatial transcriptomics sample through scanpy",
    examples=["adata = vw.datasets.load_visium('V1_Human_Lymph_Node')"],
    related=["space.spatial_qc", "tutorials.spatial_workshop"]
)
def load_visium(sample_id: str = 'V1_Human_Lymph_Node') -> AnnData:
    """
    Load a 10x Genomics Visium sample.

    Arguments:
        sample_id: Sample name understood by ``scanpy.datasets.visium_sge``.

    Returns:
        AnnData with spot coordinates in ``obsm['spatial']``.
    """
    adata = sc.datasets.visium_sge(sample_id=sample_id)
    adata.var_names_make_unique()
    vprint(f"{EMOJI['data']} Loaded Visium sample {sample_id}: {adata.n_obs:,} spots × {adata.n_vars:,} genes")
    return adata


def _mock_counts(rng, labels, n_genes, n_groups, n_mito, marker_block=15, fold=6.0):
    n_obs = len(labels)
    base = rng.gamma(shape=4.0, scale=1.0, size=n_genes)
    mu = np.tile(base, (n_obs, 1))
    n_regular = n_genes - n_mito
    for g in range(n_groups):
        start = (g * marker_block) % max(n_regular - marker_block, 1)
        mu[labels == g, start:start + marker_block] *= fold
    size_factor = rng.lognormal(0, 0.25, size=n_obs)
    mu *= size_factor[:, None]
    return mu


@register_function(
    aliases=["create_mock_dataset", "mock_dataset", "synthetic_singlecell"],
    category="datasets",
    description="Create a synthetic single-cell count matrix with cluster structure and MT- genes",
    examples=["adata = vw.datasets.create_mock_dataset(n_cells=500, n_cell_types=4)"],
    related=["datasets.load_pbmc3k"]
)
def create_mock_dataset(
    n_cells: int = 600,
    n_genes: int = 300,
    n_cell_types: int = 4,
    n_mito: int = 10,
    random_state: int = 42
) -> AnnData:
    """
    Create a mock single-cell dataset for offline runs and tests.

    Every cell type over-expresses its own block of marker genes, the last
    ``n_mito`` genes are named ``MT-...`` and about 5% of the cells carry an
    inflated mitochondrial fraction.

    Arguments:
        n_cells: Number of cells to simulate.
        n_genes: Number of genes to simulate (mitochondrial genes included).
        n_cell_types: Number of cell types to simulate.
        n_mito: Number of mitochondrial genes.
        random_state: Random seed for reproducibility.

    Returns:
        AnnData object with raw integer counts in ``X``.
    """
    if n_mito >= n_genes:
        raise ValueError("n_mito must be smaller than n_genes")
    rng = np.random.RandomState(random_state)
    labels = rng.choice(n_cell_types, n_cells)
    mu = _mock_counts(rng, labels, n_genes, n_cell_types, n_mito)

    damaged = rng.rand(n_cells) < 0.05
    mu[np.ix_(damaged, np.arange(n_genes - n_mito, n_genes))] *= 12
    X = rng.poisson(mu).astype(np.float32)

    gene_names = [f"Gene_{i+1:04d}" for i in range(n_genes - n_mito)]
    gene_names += [f"MT-{i+1:02d}" for i in range(n_mito)]

    adata = AnnData(X=X)
    adata.var_names = gene_names
    adata.obs_names = [f"Cell_{i+1:04d}" for i in range(n_cells)]
    adata.obs['cell_type'] = pd.Categorical([f'CellType_{i+1}' for i in labels])
    adata.obs['sample_id'] = pd.Categorical(rng.choice(['Sample_1', 'Sample_2', 'Sample_3'], n_cells))
    adata.obs['condition'] = pd.Categorical(rng.choice(['Control', 'Treatment'], n_cells))
    logger.debug("Mock dataset: %d cells, %d genes, %d damaged", n_cells, n_genes, int(damaged.sum()))
    return adata


@register_function(
    aliases=["create_mock_spatial", "mock_spatial", "synthetic_visium"],
    category="datasets",
    description="Create a synthetic spot grid with spatial domains, coordinates and MT- genes",
    examples=["adata = vw.datasets.create_mock_spatial(n_rows=20, n_cols=20)"],
    related=["datasets.load_visium"]
)
def create_mock_spatial(
    n_rows: int = 20,
    n_cols: int = 20,
    n_genes: int = 200,
    n_domains: int = 3,
    n_mito: int = 5,
    random_state: int = 42
) -> AnnData:
    """
    Create a mock spatial transcriptomics sample laid out like a Visium slide.

    Spots sit on a staggered grid; domains are concentric rings around the
    slide centre, and spots in the corners fall outside the tissue.

    Returns:
        AnnData with ``obsm['spatial']`` pixel coordinates and ``obs`` columns
        ``in_tissue``, ``array_row``, ``array_col`` and ``domain``.
    """
    rng = np.random.RandomState(random_state)
    rows, cols = np.meshgrid(np.arange(n_rows), np.arange(n_cols), indexing='ij')
    rows = rows.ravel()
    cols = cols.ravel()
    x = cols * 100.0 + (rows % 2) * 50.0
    y = rows * 87.0

    cx, cy = x.mean(), y.mean()
    dist = np.sqrt(((x - cx) / (x.max() - cx + 1e-9)) ** 2 + ((y - cy) / (y.max() - cy + 1e-9)) ** 2)
    in_tissue = dist <= 1.0
    labels = np.minimum((dist / 1.0 * n_domains).astype(int), n_domains - 1)

    mu = _mock_counts(rng, labels, n_genes, n_domains, n_mito, marker_block=10)
    mu[~in_tissue] *= 0.05
    X = rng.poisson(mu).astype(np.float32)

    n_spots = len(x)
    adata = AnnData(X=X)
    adata.var_names = [f"Gene_{i+1:04d}" for i in range(n_genes - n_mito)] + \
                      [f"MT-{i+1:02d}" for i in range(n_mito)]
    adata.obs_names = [f"Spot_{r}x{c}" for r, c in zip(rows, cols)]
    adata.obs['in_tissue'] = in_tissue.astype(int)
    adata.obs['array_row'] = rows
    adata.obs['array_col'] = cols
    adata.obs['domain'] = pd.Categorical([f'Domain_{i+1}' for i in labels])
    adata.obsm['spatial'] = np.column_stack([x, y])
    logger.debug("Mock spatial: %d spots, %d in tissue", n_spots, int(in_tissue.sum()))
    return adata


_DATASETS = {
    'surveys': load_surveys,
    'mock_surveys': create_mock_surveys,
    'pbmc3k': lambda **kwargs: load_pbmc3k(processed=False, **kwargs),
    'pbmc3k_processed': lambda **kwargs: load_pbmc3k(processed=True, **kwargs),
    'visium': load_visium,
    'mock_dataset': create_mock_dataset,
    'mock_spatial': create_mock_spatial,
}


def list_available_datasets() -> List[str]:
    """
    List the datasets that ``load_dataset`` understands.

    Returns:
        List of dataset names.
    """
    return list(_DATASETS.keys())


def load_dataset(name: str, **kwargs):
    """
    Load a dataset by name.

    Arguments:
        name: One of ``list_available_datasets()``.
        **kwargs: Passed on to the loader.

    Returns:
        A DataFrame (survey tables) or an AnnData object.
    """
    if name not in _DATASETS:
        raise ValueError(f"Unknown dataset '{name}'. Available: {', '.join(_DATASETS)}")
    return _DATASETS[name](**kwargs)
