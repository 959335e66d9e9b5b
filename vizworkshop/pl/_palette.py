from typing import Dict, Sequence, Union, List

import pandas as pd

from ..utils._plot import (
    sc_color, red_color, green_color, orange_color, blue_color, purple_color, ditto_color,
    palette, red_palette, green_palette, orange_palette, blue_palette, purple_palette,
    ditto_palette, get_palette, sc_color_cmap,
)


def color_dict(levels: Sequence, palette: Union[str, List[str], Dict, None] = None) -> Dict:
    r"""Map every level to a color; a dict ``palette`` is returned as-is after checking coverage."""
    levels = list(levels)
    if isinstance(palette, dict):
        missing = [level for level in levels if level not in palette]
        if missing:
            raise KeyError(f"palette has no color for {missing}")
        return palette
    return dict(zip(levels, get_palette(len(levels), palette)))


def category_levels(values: pd.Series) -> list:
    r"""Levels of a column in plotting order: categorical order if any, else sorted unique values."""
    if isinstance(values.dtype, pd.CategoricalDtype):
        return [c for c in values.cat.categories if c in set(values.dropna())]
    return sorted(values.dropna().unique().tolist(), key=str)
