r"""
Utility functions shared by the workshop modules.

Data I/O:
    read: Read csv/tsv/txt tables and h5ad files
    data_downloader: Stream a file over HTTP with a progress bar
    store_layers, retrieve_layers: Keep raw counts next to normalized data

Visualization utilities:
    palette, get_palette: Color palette management
    plot_set: Global figure settings

Discovery and logging:
    register_function, find_function, list_functions, get_function_help
    setup_logging, enable_debug_logging, disable_debug_logging

Examples:
    >>> import vizworkshop as vw
    >>> df = vw.utils.read('surveys.csv')
    >>> vw.utils.plot_set(fontsize=12)
    >>> vw.utils.find_function('facet')
"""

from ._data import read, data_downloader, store_layers, retrieve_layers, ensure_dir
from ._plot import (
    sc_color, red_color, green_color, orange_color, blue_color, purple_color, ditto_color,
    palette, red_palette, green_palette, orange_palette, blue_palette, purple_palette,
    ditto_palette, get_palette, plot_set, set_rcParams_workshop, set_rcParams_defaults,
)
from .registry import register_function, find_function, list_functions, get_function_help
from .logging_config import setup_logging, enable_debug_logging, disable_debug_logging
