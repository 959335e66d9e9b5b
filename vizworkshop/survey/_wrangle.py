import logging
from typing import Sequence

import pandas as pd

from .._settings import vprint, EMOJI
from ..utils.registry import register_function

logger = logging.getLogger(__name__)


def _require(df: pd.DataFrame, columns) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise KeyError(f"Columns {missing} not found in the table (have: {list(df.columns)})")


@register_function(
    aliases=["complete_cases", "surveys_complete", "drop_na", "clean_surveys"],
    category="survey",
    description="Drop records with missing weight/hindfoot_length/sex and keep only commonly observed species",
    examples=["surveys_complete = vw.survey.complete_cases(surveys, min_species_count=50)"],
    related=["survey.count_by", "datasets.load_surveys"]
)
def complete_cases(df: pd.DataFrame, min_species_count: int = 50,
                   columns: Sequence[str] = ('weight', 'hindfoot_length', 'sex'),
                   species_col: str = 'species_id') -> pd.DataFrame:
    """
    Prepare the survey table for plotting.

    Rows missing any of ``columns`` (an empty ``sex`` string counts as missing)
    are dropped, then species observed fewer than ``min_species_count`` times
    are removed. Row order is preserved.

    Arguments:
        df: Survey table.
        min_species_count: Minimum number of remaining records for a species to be kept.
        columns: Columns that must be present.
        species_col: Column identifying the species.

    Returns:
        A new DataFrame.
    """
    _require(df, list(columns) + [species_col])
    clean = df.dropna(subset=list(columns))
    if 'sex' in columns:
        clean = clean[clean['sex'].astype(str).str.strip() != '']

    species_counts = clean[species_col].value_counts()
    common = species_counts[species_counts >= min_species_count].index
    clean = clean[clean[species_col].isin(common)].copy()

    vprint(f"{EMOJI['bar']} complete_cases: kept {len(clean):,}/{len(df):,} records, "
           f"{len(common)} species with ≥{min_species_count} observations")
    logger.debug("Dropped species: %s", sorted(set(species_counts.index) - set(common)))
    return clean


@register_function(
    aliases=["count_by", "count", "tally"],
    category="survey",
    description="Count rows per combination of grouping columns (dplyr::count)",
    examples=["vw.survey.count_by(surveys, 'year', 'genus')"],
    related=["survey.yearly_counts", "survey.yearly_sex_counts"]
)
def count_by(df: pd.DataFrame, *columns: str, name: str = 'n') -> pd.DataFrame:
    """
    Count rows per group.

    Each observed combination of ``columns`` appears once, sorted by the group
    columns. Missing group values form their own group (sorted last), so the
    counts always sum to ``len(df)``.

    Arguments:
        df: Input table.
        *columns: Grouping columns.
        name: Name of the count column.

    Returns:
        DataFrame with the grouping columns and ``name``.
    """
    if not columns:
        raise ValueError("count_by needs at least one grouping column")
    _require(df, columns)
    counts = (df.groupby(list(columns), observed=True, sort=True, dropna=False)
                .size()
                .reset_index(name=name))
    return counts


def yearly_counts(df: pd.DataFrame, by: str = 'genus') -> pd.DataFrame:
    """Number of captures per year and ``by`` (genus by default)."""
    return count_by(df, 'year', by)


def yearly_sex_counts(df: pd.DataFrame, by: str = 'genus') -> pd.DataFrame:
    """Number of captures per year, ``by`` and sex."""
    return count_by(df, 'year', by, 'sex')


def yearly_weight(df: pd.DataFrame, by: str = 'species_id') -> pd.DataFrame:
    """
    Mean weight per year and group, in column ``avg_weight``.
    """
    _require(df, ['year', by, 'weight'])
    return (df.groupby(['year', by], observed=True, sort=True)['weight']
              .mean()
              .reset_index(name='avg_weight'))


@register_function(
    aliases=["summarize_by", "summarise", "group_summary"],
    category="survey",
    description="Per-group summary statistics of one numeric column",
    examples=["vw.survey.summarize_by(surveys, 'species_id', 'weight')"],
    related=["survey.count_by"]
)
def summarize_by(df: pd.DataFrame, group, value: str,
                 stats: Sequence[str] = ('mean', 'min', 'max', 'count')) -> pd.DataFrame:
    """
    Summarize ``value`` per group.

    Arguments:
        df: Input table.
        group: A column name or a list of column names.
        value: Numeric column to summarize.
        stats: Aggregations understood by pandas (``mean``, ``median``, ``std``...).

    Returns:
        DataFrame with the group columns and one ``<value>_<stat>`` column per stat.
    """
    groups = [group] if isinstance(group, str) else list(group)
    _require(df, groups + [value])
    summary = df.groupby(groups, observed=True, sort=True)[value].agg(list(stats))
    summary.columns = [f"{value}_{s}" for s in summary.columns]
    return summary.reset_index()
