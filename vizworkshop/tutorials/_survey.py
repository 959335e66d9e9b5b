r"""
Ecology survey workshop: chart types, faceting, themes and layout on the
Portal Project captures.
"""
import logging
from pathlib import Path
from typing import Dict, Optional, Union

import pandas as pd

from .._settings import vprint, EMOJI, Colors
from ..datasets import load_surveys
from ..survey import complete_cases, yearly_counts, yearly_sex_counts, yearly_weight
from .. import pl
from ..utils.registry import register_function
from ._common import FigureRecorder

logger = logging.getLogger(__name__)


@register_function(
    aliases=["survey_workshop", "ggplot_workshop", "surveys_tutorial"],
    category="tutorials",
    description="Run the ecology survey visualization tutorial and save every figure",
    examples=[
        "paths = vw.tutorials.survey_workshop()",
        "paths = vw.tutorials.survey_workshop(vw.datasets.create_mock_surveys(), fmt='pdf')",
    ],
    related=["datasets.load_surveys", "survey.complete_cases", "pl.facet_wrap"]
)
def survey_workshop(data: Optional[pd.DataFrame] = None, output_dir: Union[str, Path, None] = None,
                    fmt: str = 'png', dpi: Optional[int] = None,
                    min_species_count: int = 50) -> Dict[str, Path]:
    r"""
    Draw the survey tutorial figures.

    Arguments:
        data: Survey table; downloaded (and cached) when None.
        output_dir: Figure directory (``settings.output_dir / 'surveys'`` by default).
        fmt: ``'png'`` or ``'pdf'``.
        dpi: Resolution of the saved figures.
        min_species_count: Threshold passed to ``survey.complete_cases``.

    Returns:
        Ordered dict of figure name -> written path.
    """
    vprint(f"\n{Colors.HEADER}{Colors.BOLD}{EMOJI['start']} Survey workshop{Colors.ENDC}")
    if data is None:
        data = load_surveys()
    surveys = complete_cases(data, min_species_count=min_species_count)
    if surveys.empty:
        raise ValueError("No survey records left after complete_cases")
    rec = FigureRecorder(output_dir, subdir='surveys', fmt=fmt, dpi=dpi)

    # scatter plots
    rec.save('weight_hindfoot', pl.scatter(surveys, 'weight', 'hindfoot_length', size=4),
             width=15, height=10, units='cm')
    rec.save('weight_hindfoot_alpha', pl.scatter(surveys, 'weight', 'hindfoot_length',
                                                 alpha=0.1, size=4))
    ax = pl.scatter(surveys, 'weight', 'hindfoot_length', hue='species_id', alpha=0.2, size=4)
    pl.style_axes(ax, legend='right', legend_title='species')
    rec.save('weight_hindfoot_species', ax, width=7, height=4.5)
    rec.save('weight_hindfoot_smooth', pl.scatter(surveys, 'weight', 'hindfoot_length', alpha=0.1,
                                                  size=4, smooth=True))

    # distributions
    ax = pl.boxplot(surveys, 'species_id', 'weight', jitter=True)
    rec.save('weight_boxplot', pl.rotate_xticks(ax, 90, ha='center'), width=8, height=4.5)
    ax = pl.violin(surveys, 'species_id', 'weight')
    rec.save('weight_violin', pl.rotate_xticks(ax, 90, ha='center'), width=8, height=4.5)
    rec.save('weight_histogram', pl.histogram(surveys, 'weight', bins=40, hue='sex'))
    rec.save('plot_type_sex_bar', pl.rotate_xticks(
        pl.barplot(surveys, 'plot_type', hue='sex'), 30), width=7, height=4.5)

    # time series
    yearly = yearly_counts(surveys)
    ax = pl.lineplot(yearly, 'year', 'n', hue='genus')
    rec.save('yearly_counts_genus', ax, width=8, height=4.5)
    rec.save('yearly_counts_facet', pl.facet_wrap(yearly, 'line', x='year', y='n', facet='genus'))
    sex_counts = yearly_sex_counts(surveys)
    rec.save('yearly_sex_facet', pl.facet_wrap(sex_counts, 'line', x='year', y='n', facet='genus',
                                               hue='sex'))
    rec.save('weight_hindfoot_by_sex', pl.facet_wrap(surveys, 'scatter', x='weight',
                                                     y='hindfoot_length', facet='sex',
                                                     alpha=0.1, s=4, smooth=True))
    weights = yearly_weight(surveys, by='sex')
    rec.save('yearly_counts_sex_grid', pl.facet_grid(sex_counts, 'line', x='year', y='n',
                                                     row='sex', hue='genus', aspect=2.5))

    # themes
    for name in pl.THEMES:
        ax = pl.lineplot(yearly, 'year', 'n', hue='genus')
        pl.theme_axes(ax, name)
        rec.save(f'theme_{name}', pl.style_axes(ax, title=f'theme: {name}', ylabel='captures'),
                 width=8, height=4.5)

    # layout
    fig = pl.arrange([
        lambda ax: pl.scatter(surveys, 'weight', 'hindfoot_length', alpha=0.1, size=3, ax=ax),
        lambda ax: pl.rotate_xticks(pl.boxplot(surveys, 'species_id', 'weight', ax=ax), 90, ha='center'),
        lambda ax: pl.lineplot(weights, 'year', 'avg_weight', hue='sex', marker='o', ax=ax),
        lambda ax: pl.histogram(surveys, 'hindfoot_length', bins=30, ax=ax),
    ], ncols=2, figsize=(10, 8))
    rec.save('multi_panel', fig)

    return rec.summary('Survey workshop')
