r"""
Ecology survey data wrangling.

The dplyr steps of the ggplot2 lesson, expressed with pandas: cleaning the
capture records and building the count tables that the line and facet plots
are drawn from.

Examples:
    >>> import vizworkshop as vw
    >>> surveys = vw.survey.complete_cases(vw.datasets.load_surveys())
    >>> yearly = vw.survey.yearly_counts(surveys)
    >>> vw.pl.lineplot(yearly, x='year', y='n', hue='genus')
"""

from ._wrangle import (
    complete_cases,
    count_by,
    yearly_counts,
    yearly_sex_counts,
    yearly_weight,
    summarize_by,
)
