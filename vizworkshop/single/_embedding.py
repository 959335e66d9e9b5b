import logging
from typing import Optional, Sequence, Union

import anndata
import numpy as np
import pandas as pd
from scipy.sparse import issparse

from ..utils.registry import register_function

logger = logging.getLogger(__name__)


def _resolve_basis(adata: anndata.AnnData, basis: str) -> str:
    if basis in adata.obsm:
        return basis
    if f'X_{basis}' in adata.obsm:
        return f'X_{basis}'
    raise KeyError(f"Embedding '{basis}' not found in adata.obsm (have: {list(adata.obsm.keys())})")


def basis_label(basis: str) -> str:
    r"""Axis prefix for an embedding key, e.g. ``'X_umap'`` -> ``'UMAP'``."""
    name = basis[2:] if basis.startswith('X_') else basis
    return name.upper()


def obs_vector(adata: anndata.AnnData, key: str, layer: Optional[str] = None) -> pd.Series:
    r"""
    Values of an ``obs`` column or of a gene, indexed by ``obs_names``.

    Genes are looked up in ``adata.var_names`` (``X`` or ``layer``) and then in
    ``adata.raw``.
    """
    if key in adata.obs.columns:
        return adata.obs[key]
    if key in adata.var_names:
        X = adata[:, key].layers[layer] if layer is not None else adata[:, key].X
    elif adata.raw is not None and key in adata.raw.var_names:
        X = adata.raw[:, key].X
    else:
        raise KeyError(f"'{key}' is neither a column of adata.obs nor a gene in adata.var_names")
    values = X.toarray().ravel() if issparse(X) else np.asarray(X).ravel()
    return pd.Series(values, index=adata.obs_names, name=key)


@register_function(
    aliases=["embedding_frame", "fetch_data", "FetchData", "reduced_dim_frame"],
    category="single",
    description="Join embedding coordinates with obs columns and gene expression into one tidy DataFrame",
    examples=[
        "df = vw.single.embedding_frame(adata, 'X_umap', keys=['leiden', 'CD3D'])",
    ],
    related=["pl.embedding", "space.spatial_frame"]
)
def embedding_frame(adata: anndata.AnnData, basis: str = 'X_umap',
                    keys: Union[str, Sequence[str], None] = None,
                    dims: Sequence[int] = (0, 1),
                    layer: Optional[str] = None) -> pd.DataFrame:
    """
    Build a plotting table from an embedding.

    Arguments:
        adata: AnnData with the embedding in ``obsm``.
        basis: ``obsm`` key; ``'umap'`` is accepted for ``'X_umap'``.
        keys: ``obs`` columns and/or genes to attach.
        dims: Which two embedding dimensions to use.
        layer: Layer to read gene values from (``X`` when None).

    Returns:
        DataFrame indexed by ``obs_names`` with columns ``<BASIS>1``, ``<BASIS>2``
        (numbered from ``dims``) followed by ``keys``.
    """
    basis = _resolve_basis(adata, basis)
    coords = np.asarray(adata.obsm[basis])
    if max(dims) >= coords.shape[1]:
        raise ValueError(f"Embedding '{basis}' has only {coords.shape[1]} dimensions")
    label = basis_label(basis)
    frame = pd.DataFrame({f'{label}{d + 1}': coords[:, d] for d in dims}, index=adata.obs_names)

    if keys is None:
        keys = []
    elif isinstance(keys, str):
        keys = [keys]
    for key in keys:
        frame[key] = obs_vector(adata, key, layer=layer).values
    logger.debug("embedding_frame(%s): %d rows, columns %s", basis, len(frame), list(frame.columns))
    return frame
