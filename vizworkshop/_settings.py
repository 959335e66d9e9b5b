import os
from pathlib import Path

import pandas as pd


class vizworkshopConfig:

    def __init__(self):
        self.reset()

    def reset(self):
        r"""Restore defaults, re-reading ``VIZWORKSHOP_OUTPUT_DIR`` and ``VIZWORKSHOP_CACHE_DIR``."""
        self.output_dir = Path(os.environ.get('VIZWORKSHOP_OUTPUT_DIR', 'figures'))
        cache_env = os.environ.get('VIZWORKSHOP_CACHE_DIR')
        if cache_env:
            self.cache_dir = Path(cache_env)
        else:
            self.cache_dir = Path.home() / '.cache' / 'vizworkshop' / 'datasets'
        self.dpi_save = 300
        self.figsize = (6, 4)
        self.verbosity = 1

    def __repr__(self):
        return (f"vizworkshopConfig(output_dir='{self.output_dir}', cache_dir='{self.cache_dir}', "
                f"dpi_save={self.dpi_save}, figsize={self.figsize}, verbosity={self.verbosity})")


def check_reference_key(adata):
    if 'REFERENCE_MANU' not in adata.uns.keys():
        adata.uns['REFERENCE_MANU']={}

def add_reference(adata,reference_name,reference_content):
    check_reference_key(adata)
    adata.uns['REFERENCE_MANU']['vizworkshop']='This analysis is performed with the vizworkshop material.'
    adata.uns['REFERENCE_MANU'][reference_name]=reference_content

reference_dict = {
    'vizworkshop':'Data visualization workshop material built on scanpy, seaborn and matplotlib.',
    'scanpy': 'Wolf, F. A., Angerer, P., & Theis, F. J. (2018). SCANPY: large-scale single-cell gene expression data analysis. Genome biology, 19, 1-5.',
    'leiden':'Traag, V. A., Waltman, L., & Van Eck, N. J. (2019). From Louvain to Leiden: guaranteeing well-connected communities. Scientific reports, 9(1), 1-12.',
    'louvain':'Blondel, V. D., Guillaume, J.-L., Lambiotte, R. & Lefebvre, E. Fast unfolding of communities in large networks. J. Stat. Mech. Theory Exp. 10008, 6, https://doi.org/10.1088/1742-5468/2008/10/P10008 (2008).',
    'umap':'McInnes, L., Healy, J., & Melville, J. (2018). Umap: Uniform manifold approximation and projection for dimension reduction. arXiv preprint arXiv:1802.03426.',
    'tsne':'Van der Maaten, L., & Hinton, G. (2008). Visualizing data using t-SNE. Journal of machine learning research, 9(11).',
    'Wilcoxon':'Cuzick, J. (1985). A Wilcoxon‐type test for trend. Statistics in medicine, 4(1), 87-90.',
    'T-test':'Kim, T. K. (2015). T test as a parametric statistic. Korean journal of anesthesiology, 68(6), 540-546.',
    'quantile':'Bolstad, B. M., Irizarry, R. A., Åstrand, M., & Speed, T. P. (2003). A comparison of normalization methods for high density oligonucleotide array data based on variance and bias. Bioinformatics, 19(2), 185-193.',
    'portal':'Ernest, S. K. M., et al. (2016). Long-term monitoring and experimental manipulation of a Chihuahuan Desert ecosystem near Portal, Arizona (1977-2013). Ecology, 97(4), 1082.',
    'seaborn':'Waskom, M. L. (2021). seaborn: statistical data visualization. Journal of Open Source Software, 6(60), 3021.',
}

def generate_reference_table(adata):
    """
    Generate a table of references for the adata object.
    """
    if 'REFERENCE_MANU' not in adata.uns.keys():
        return None
    rows=[]
    for ref,content in adata.uns['REFERENCE_MANU'].items():
        rows.append({'method':ref,
                     'content':content,
                     'reference':reference_dict.get(ref,'')})
    return pd.DataFrame(rows,columns=['method','content','reference'])


class Colors:
    """ANSI color codes for terminal output styling."""
    HEADER = '\033[95m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'
    UNDERLINE = '\033[4m'


EMOJI = {
    "start":        "🔍",  # start
    "data":         "📦",  # dataset
    "download":     "🌐",  # download
    "plot":         "🎨",  # figure
    "save":         "💾",  # file written
    "done":         "✅",  # done
    "error":        "❌",  # error
    "bar":          "📊",  # counts / summaries
}


def vprint(*args, **kwargs):
    r"""Print unless ``settings.verbosity`` is 0."""
    if settings.verbosity > 0:
        print(*args, **kwargs)


settings = vizworkshopConfig()
