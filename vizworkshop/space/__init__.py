r"""
Spatial transcriptomics helpers.

Examples:
    >>> import vizworkshop as vw
    >>> adata = vw.space.spatial_qc(adata, min_counts=500)
    >>> vw.space.spatial_preprocess(adata)
    >>> df = vw.space.spatial_frame(adata, keys=['leiden'])
"""

from ._spatial import spatial_frame, spatial_qc, spatial_preprocess
