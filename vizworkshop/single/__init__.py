r"""
Single-cell analysis steps used by the workshop.

Clustering, marker detection and the reshaping that turns an AnnData object
into plotting tables.

Examples:
    >>> import vizworkshop as vw
    >>> vw.single.cluster(adata, resolution=0.8)
    >>> markers = vw.single.find_markers(adata, 'leiden')
    >>> vw.single.top_markers(markers, n=3)
    >>> df = vw.single.embedding_frame(adata, 'X_umap', keys=['leiden'])
"""

from ._cluster import cluster, group_counts
from ._markers import find_markers, top_markers, marker_gene_list, group_auc, MARKER_COLUMNS
from ._embedding import embedding_frame, obs_vector, basis_label
