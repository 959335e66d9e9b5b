import matplotlib
import matplotlib.colors as mcolors
import pytest
import seaborn as sns
from matplotlib.figure import Figure

import vizworkshop as vw


@pytest.fixture
def restore_theme():
    yield
    vw.pl.reset_theme()


class TestThemes:

    @pytest.mark.parametrize('name', list(vw.pl.THEMES))
    def test_every_theme_applies(self, name, restore_theme, tidy_frame):
        assert vw.pl.set_theme(name, fontsize=10) == name
        assert matplotlib.rcParams['font.size'] == 10
        ax = vw.pl.scatter(tidy_frame, 'x', 'y')
        assert ax is not None

    def test_theme_settings(self, restore_theme):
        vw.pl.set_theme('classic')
        assert matplotlib.rcParams['axes.grid'] is False
        assert matplotlib.rcParams['axes.spines.top'] is False
        vw.pl.set_theme('grey')
        assert mcolors.to_hex(matplotlib.rcParams['axes.facecolor']) == '#ebebeb'

    def test_palette_sets_color_cycle(self, restore_theme):
        colors = ['#000000', '#ff0000']
        vw.pl.set_theme('bw', palette=colors)
        cycle = [mcolors.to_hex(c['color']) for c in matplotlib.rcParams['axes.prop_cycle']]
        assert cycle[:2] == colors

    def test_unknown_theme(self):
        with pytest.raises(ValueError, match='Unknown theme'):
            vw.pl.set_theme('solarized')

    def test_theme_axes_is_local(self, tidy_frame):
        ax = vw.pl.scatter(tidy_frame, 'x', 'y')
        grid_before = matplotlib.rcParams['axes.grid']
        vw.pl.theme_axes(ax, 'classic')
        assert not ax.spines['top'].get_visible()
        assert ax.spines['left'].get_visible()
        vw.pl.theme_axes(ax, 'void')
        assert len(ax.get_xticks()) == 0
        assert matplotlib.rcParams['axes.grid'] == grid_before


class TestStyleAxes:

    def test_labels_and_legend(self, tidy_frame):
        ax = vw.pl.scatter(tidy_frame, 'x', 'y', hue='group')
        vw.pl.style_axes(ax, fontsize=9, title='T', xlabel='X', ylabel='Y', legend='bottom',
                         legend_title='Group')
        assert (ax.get_title(), ax.get_xlabel(), ax.get_ylabel()) == ('T', 'X', 'Y')
        assert ax.xaxis.label.get_fontsize() == 9
        assert ax.get_legend().get_title().get_text() == 'Group'

    def test_remove_legend(self, tidy_frame):
        ax = vw.pl.scatter(tidy_frame, 'x', 'y', hue='group')
        vw.pl.style_axes(ax, legend=False)
        assert ax.get_legend() is None

    def test_rotate_xticks(self, tidy_frame):
        ax = vw.pl.boxplot(tidy_frame, 'group', 'y')
        vw.pl.rotate_xticks(ax, 90, ha='center')
        assert all(t.get_rotation() == 90 for t in ax.get_xticklabels())


class TestFacets:

    def test_facet_wrap_panels(self, tidy_frame):
        g = vw.pl.facet_wrap(tidy_frame, 'scatter', x='x', y='y', facet='group')
        assert isinstance(g, sns.FacetGrid)
        assert len(g.axes_dict) == 3
        titles = sorted(ax.get_title() for ax in g.axes_dict.values())
        assert titles == ['a', 'b', 'c']
        # ceil(sqrt(3)) panels per row
        assert g.axes.size >= 3

    def test_facet_wrap_col_wrap_and_smooth(self, tidy_frame):
        g = vw.pl.facet_wrap(tidy_frame, 'scatter', x='x', y='y', facet='year', col_wrap=4, smooth=True)
        assert len(g.axes_dict) == 12
        assert all(len(ax.lines) == 1 for ax in g.axes_dict.values())

    def test_facet_wrap_yearly_lines(self, clean_surveys):
        yearly = vw.survey.yearly_sex_counts(clean_surveys)
        g = vw.pl.facet_wrap(yearly, 'line', x='year', y='n', facet='genus', hue='sex')
        assert len(g.axes_dict) == yearly['genus'].nunique()
        assert g.legend is not None

    @pytest.mark.parametrize('kind, y', [('hist', None), ('box', 'y'), ('bar', None), ('bar', 'y')])
    def test_other_kinds(self, tidy_frame, kind, y):
        g = vw.pl.facet_wrap(tidy_frame, kind, x='group' if kind in ('box', 'bar') else 'x', y=y,
                             facet='sex')
        assert len(g.axes_dict) == 2

    def test_facet_wrap_errors(self, tidy_frame):
        with pytest.raises(ValueError):
            vw.pl.facet_wrap(tidy_frame, 'scatter', x='x', y='y')
        with pytest.raises(ValueError):
            vw.pl.facet_wrap(tidy_frame, 'pie', x='x', y='y', facet='group')
        with pytest.raises(ValueError):
            vw.pl.facet_wrap(tidy_frame, 'scatter', x='x', facet='group')
        with pytest.raises(KeyError):
            vw.pl.facet_wrap(tidy_frame, 'scatter', x='x', y='y', facet='nope')

    def test_facet_grid(self, tidy_frame):
        g = vw.pl.facet_grid(tidy_frame, 'scatter', x='x', y='y', row='sex', col='group')
        assert g.axes.shape == (2, 3)
        g = vw.pl.facet_grid(tidy_frame, 'scatter', x='x', y='y', col='group')
        assert g.axes.shape == (1, 3)
        with pytest.raises(ValueError):
            vw.pl.facet_grid(tidy_frame, 'scatter', x='x', y='y')


class TestLayout:

    def test_panel_grid(self):
        fig, axes = vw.pl.panel_grid(2, 3, width_ratios=[1, 2, 1])
        assert isinstance(fig, Figure)
        assert len(axes) == 6
        with pytest.raises(ValueError):
            vw.pl.panel_grid(0, 2)

    def test_arrange_labels_and_hidden_cells(self, tidy_frame):
        fig = vw.pl.arrange([
            lambda ax: vw.pl.scatter(tidy_frame, 'x', 'y', ax=ax),
            lambda ax: vw.pl.boxplot(tidy_frame, 'group', 'y', ax=ax),
            lambda ax: vw.pl.barplot(tidy_frame, 'group', ax=ax),
        ], ncols=2)
        assert len(fig.axes) == 4
        assert fig.axes[3].get_visible() is False
        labels = [t.get_text() for ax in fig.axes[:3] for t in ax.texts]
        assert labels == ['A', 'B', 'C']

    def test_arrange_custom_labels(self, tidy_frame):
        fig = vw.pl.arrange([lambda ax: vw.pl.scatter(tidy_frame, 'x', 'y', ax=ax)] * 2,
                            labels='lower')
        assert [ax.texts[0].get_text() for ax in fig.axes] == ['a', 'b']
        fig = vw.pl.arrange([lambda ax: vw.pl.scatter(tidy_frame, 'x', 'y', ax=ax)] * 2, labels=None)
        assert all(len(ax.texts) == 0 for ax in fig.axes)

    def test_arrange_errors(self):
        with pytest.raises(ValueError):
            vw.pl.arrange([])
        fig, axes = vw.pl.panel_grid(1, 3)
        with pytest.raises(ValueError):
            vw.pl.add_panel_labels(axes, ['x'])
