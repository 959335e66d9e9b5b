import matplotlib.colors as mcolors
import numpy as np
import pandas as pd
import pytest
from matplotlib.axes import Axes

import vizworkshop as vw


def _xticklabels(ax):
    ax.figure.canvas.draw()
    return [t.get_text() for t in ax.get_xticklabels()]


class TestScatter:

    def test_basic(self, tidy_frame):
        ax = vw.pl.scatter(tidy_frame, 'x', 'y', alpha=0.3)
        assert isinstance(ax, Axes)
        points = ax.collections[0]
        assert len(points.get_offsets()) == len(tidy_frame)
        assert points.get_alpha() == pytest.approx(0.3)
        assert ax.get_xlabel() == 'x'

    def test_hue_uses_palette_in_level_order(self, tidy_frame):
        colors = ['#111111', '#222222', '#333333']
        ax = vw.pl.scatter(tidy_frame, 'x', 'y', hue='group', palette=colors)
        legend = ax.get_legend()
        assert [t.get_text() for t in legend.get_texts()] == ['a', 'b', 'c']
        face = ax.collections[0].get_facecolors()
        expected = {mcolors.to_hex(c) for c in colors}
        assert {mcolors.to_hex(c) for c in face} <= expected

    def test_smooth_draws_one_curve_per_group(self, tidy_frame):
        ax = vw.pl.scatter(tidy_frame, 'x', 'y', hue='group', smooth=True)
        assert len(ax.lines) == 3
        ax = vw.pl.scatter(tidy_frame, 'x', 'y', smooth=True)
        assert len(ax.lines) == 1

    def test_missing_column(self, tidy_frame):
        with pytest.raises(KeyError, match='nope'):
            vw.pl.scatter(tidy_frame, 'x', 'nope')

    def test_draws_on_given_axes(self, tidy_frame):
        fig, axes = vw.pl.panel_grid(1, 2)
        ax = vw.pl.scatter(tidy_frame, 'x', 'y', ax=axes[1], title='right')
        assert ax is axes[1]
        assert ax.get_title() == 'right'


class TestSmoothLowess:

    def test_linear_data_is_recovered(self):
        x = np.linspace(0, 10, 50)
        xs, ys = vw.pl.smooth_lowess(x, 2 * x + 1)
        assert np.all(np.diff(xs) >= 0)
        assert np.allclose(ys, 2 * xs + 1, atol=1e-6)

    def test_drops_nan_and_short_input(self):
        xs, ys = vw.pl.smooth_lowess([1.0, np.nan, 3.0], [1.0, 2.0, np.nan])
        assert len(xs) == 0 and len(ys) == 0


class TestDistributions:

    def test_boxplot_with_jitter(self, tidy_frame):
        ax = vw.pl.boxplot(tidy_frame, 'group', 'y')
        labels = _xticklabels(ax)
        assert labels == ['a', 'b', 'c']
        # one strip collection per box
        assert len(ax.collections) >= 3
        assert ax.get_legend() is None

    def test_boxplot_order_and_hue(self, tidy_frame):
        ax = vw.pl.boxplot(tidy_frame, 'group', 'y', hue='sex', order=['c', 'a'])
        assert _xticklabels(ax) == ['c', 'a']
        assert ax.get_legend() is not None

    def test_violin_and_histogram(self, tidy_frame):
        ax = vw.pl.violin(tidy_frame, 'group', 'y', jitter=True)
        assert _xticklabels(ax) == ['a', 'b', 'c']
        ax = vw.pl.histogram(tidy_frame, 'x', bins=12)
        assert len(ax.patches) == 12
        ax = vw.pl.histogram(tidy_frame, 'x', hue='sex', bins=5, multiple='stack')
        assert len(ax.patches) == 10


class TestBarplot:

    def test_counts_rows(self, tidy_frame):
        ax = vw.pl.barplot(tidy_frame, 'group')
        heights = [p.get_height() for p in ax.patches]
        assert heights == tidy_frame['group'].value_counts().sort_index().tolist()
        assert ax.get_ylabel() == 'count'

    def test_sums_values_and_dodges(self):
        df = pd.DataFrame({'x': ['a', 'a', 'b', 'b'], 'g': ['u', 'v', 'u', 'v'], 'n': [1, 2, 3, 4]})
        ax = vw.pl.barplot(df, 'x', 'n', hue='g')
        assert sorted(p.get_height() for p in ax.patches) == [1, 2, 3, 4]
        widths = {round(p.get_width(), 6) for p in ax.patches}
        assert widths == {0.4}
        assert [t.get_text() for t in ax.get_legend().get_texts()] == ['u', 'v']

    def test_stacked_proportions_sum_to_one(self):
        df = pd.DataFrame({'x': ['a', 'a', 'b'], 'g': ['u', 'v', 'u'], 'n': [1, 3, 5]})
        ax = vw.pl.barplot(df, 'x', 'n', hue='g', normalize=True)
        tops = {}
        for p in ax.patches:
            key = round(p.get_x() + p.get_width() / 2, 6)
            tops[key] = max(tops.get(key, 0), p.get_y() + p.get_height())
        assert np.allclose(list(tops.values()), 1.0)
        assert ax.get_ylabel() == 'proportion'

    def test_horizontal(self, tidy_frame):
        ax = vw.pl.barplot(tidy_frame, 'group', horizontal=True)
        assert [t.get_text() for t in ax.get_yticklabels()] == ['a', 'b', 'c']
        assert ax.get_xlabel() == 'count'


class TestLineplot:

    def test_one_line_per_group(self, clean_surveys):
        yearly = vw.survey.yearly_counts(clean_surveys)
        ax = vw.pl.lineplot(yearly, x='year', y='n', hue='genus')
        n_genus = yearly['genus'].nunique()
        assert len([line for line in ax.lines if len(line.get_xdata())]) == n_genus
        assert ax.get_legend() is not None

    def test_palette_dict_must_cover_levels(self, tidy_frame):
        with pytest.raises(KeyError):
            vw.pl.lineplot(tidy_frame, 'year', 'y', hue='group', palette={'a': 'red'})


class TestPalettes:

    def test_color_dict(self):
        colors = vw.pl.color_dict(['b', 'a'], ['#000000', '#ffffff'])
        assert colors == {'b': '#000000', 'a': '#ffffff'}

    def test_category_levels(self):
        values = pd.Series(pd.Categorical(['z', 'y', 'z'], categories=['z', 'x', 'y']))
        assert vw.pl.category_levels(values) == ['z', 'y']
        assert vw.pl.category_levels(pd.Series([3, 1, None, 2])) == [1.0, 2.0, 3.0]
