r"""
Data I/O helpers (vizworkshop.utils._data)
"""

import logging
import os
import time
from pathlib import Path

import anndata
import pandas as pd
import requests
import scanpy as sc
from tqdm.auto import tqdm

from .._settings import vprint, EMOJI
from .registry import register_function

logger = logging.getLogger(__name__)


@register_function(
    aliases=["read", "load_data", "file_reader", "read_csv"],
    category="utils",
    description="Read a table (csv/tsv/txt, optionally gzipped) into pandas or an h5ad file into AnnData",
    examples=[
        "df = vw.read('surveys.csv')",
        "adata = vw.read('pbmc.h5ad')",
        "df = vw.read('counts.tsv.gz', index_col=0)",
    ],
    related=["datasets.load_surveys", "datasets.download_and_cache"]
)
def read(path, **kwargs):
    r"""
    Arguments:
        path: The path of the file to read
        **kwargs: Passed on to ``pandas.read_csv`` or ``scanpy.read_h5ad``

    Returns:
        AnnData for ``.h5ad`` files, a DataFrame otherwise
    """
    path = Path(path)
    suffixes = [s.lower() for s in path.suffixes]
    ext = suffixes[-1] if suffixes else ''
    if ext == '.gz' and len(suffixes) > 1:
        ext = suffixes[-2]

    if ext == '.h5ad':
        return sc.read_h5ad(path, **kwargs)
    elif ext == '.csv':
        return pd.read_csv(path, **kwargs)
    elif ext in ('.tsv', '.txt'):
        return pd.read_csv(path, sep='\t', **kwargs)
    else:
        raise ValueError(f"The type {ext!r} is not supported; use .h5ad, .csv, .tsv or .txt")


def data_downloader(url,path,title,chunk_size=1024 * 64,timeout=60):
    r"""Download a file from URL to ``path``, showing a progress bar.

    Arguments:
        url: The download url of the file
        path: The save path of the file
        title: The name shown on the progress bar
        chunk_size: Bytes per streamed chunk
        timeout: Seconds before the request is abandoned

    Returns:
        path: The save path of the file
    """
    path = Path(path)
    if path.is_file():
        vprint(f"......Loading dataset from {path}")
        return path
    vprint(f"{EMOJI['download']} Downloading {title} to {path}")
    path.parent.mkdir(parents=True, exist_ok=True)

    start = time.time()
    try:
        res = requests.get(url, stream=True, timeout=timeout)
        res.raise_for_status()
        total = int(res.headers.get('content-length', 0)) or None
        with open(path, 'wb') as f, tqdm(total=total, unit='B', unit_scale=True,
                                          desc=title, disable=total is None) as bar:
            for data in res.iter_content(chunk_size=chunk_size):
                if not data:
                    continue
                f.write(data)
                bar.update(len(data))
    except requests.RequestException as e:
        if path.exists():
            path.unlink()
        raise ConnectionError(f"Failed to download {url}: {e}") from e
    except OSError:
        if path.exists():
            path.unlink()
        raise

    logger.debug("Downloaded %s (%d bytes) in %.2f s", url, path.stat().st_size, time.time() - start)
    vprint(f"{EMOJI['done']} Finished in {time.time() - start:.2f} s")
    return path


def store_layers(adata: anndata.AnnData, layers: str = 'counts'):
    r"""Keep a copy of ``adata.X`` in ``adata.layers[layers]``."""
    adata.layers[layers] = adata.X.copy()
    return adata


def retrieve_layers(adata: anndata.AnnData, layers: str = 'counts'):
    r"""Put ``adata.layers[layers]`` back into ``adata.X``."""
    if layers not in adata.layers:
        raise KeyError(f"Layer '{layers}' not found in adata.layers")
    adata.X = adata.layers[layers].copy()
    return adata


def ensure_dir(path) -> Path:
    path = Path(os.path.expanduser(str(path)))
    path.mkdir(parents=True, exist_ok=True)
    return path
