import matplotlib.image as mpimg
import matplotlib.pyplot as plt
import pytest

import vizworkshop as vw
from vizworkshop.pl._save import as_figure, to_inches


def _png_size(path):
    image = mpimg.imread(path)
    return image.shape[1], image.shape[0]


class TestSaveFigure:

    def test_png_pixel_size_inches(self, temp_output_dir, tidy_frame):
        ax = vw.pl.scatter(tidy_frame, 'x', 'y')
        path = vw.pl.save_figure(ax, 'scatter.png', width=4, height=3, dpi=50,
                                 output_dir=temp_output_dir)
        assert path == temp_output_dir / 'scatter.png'
        assert _png_size(path) == (200, 150)

    @pytest.mark.parametrize('width, height, units, dpi, expected', [
        (15.24, 10.16, 'cm', 50, (300, 200)),
        (101.6, 50.8, 'mm', 100, (400, 200)),
        (320, 240, 'px', 80, (320, 240)),
        (15, 10, 'cm', 300, (1772, 1181)),
        (7.3, 2.9, 'in', 96, (701, 278)),
    ])
    def test_units(self, temp_output_dir, width, height, units, dpi, expected):
        fig, _ = plt.subplots()
        path = vw.pl.save_figure(fig, 'units.png', width=width, height=height, units=units,
                                 dpi=dpi, output_dir=temp_output_dir)
        assert _png_size(path) == expected

    def test_pdf_and_default_output_dir(self, tidy_frame):
        g = vw.pl.facet_wrap(tidy_frame, 'scatter', x='x', y='y', facet='group')
        path = vw.pl.save_figure(g, 'panels.pdf', width=6, height=4)
        assert path.parent == vw.settings.output_dir
        with open(path, 'rb') as f:
            assert f.read(4) == b'%PDF'

    def test_format_overrides_extension(self, temp_output_dir):
        fig, _ = plt.subplots()
        path = vw.pl.save_figure(fig, 'figure', format='pdf', output_dir=temp_output_dir, dpi=20)
        assert path.name == 'figure.pdf'
        path = vw.pl.save_figure(fig, 'figure.v2', format='png', output_dir=temp_output_dir, dpi=20)
        assert path.name == 'figure.v2.png'
        path = vw.pl.save_figure(fig, 'figure.pdf', format='png', output_dir=temp_output_dir, dpi=20)
        assert path.name == 'figure.png'
        assert _png_size(path)[0] == round(fig.get_size_inches()[0] * 20)

    def test_nested_dirs_created_and_close(self, tmp_path):
        fig, _ = plt.subplots()
        path = vw.pl.save_figure(fig, tmp_path / 'a' / 'b' / 'out.png', dpi=20, close=True)
        assert path.is_file()
        assert not plt.fignum_exists(fig.number)

    @pytest.mark.parametrize('kwargs', [
        {'filename': 'out.svg'},
        {'filename': 'no_extension'},
        {'filename': 'out.png', 'width': 0},
        {'filename': 'out.png', 'height': -2},
        {'filename': 'out.png', 'width': 3, 'units': 'ft'},
        {'filename': 'out.png', 'dpi': 0},
    ])
    def test_invalid_arguments(self, temp_output_dir, kwargs):
        fig, _ = plt.subplots()
        with pytest.raises(ValueError):
            vw.pl.save_figure(fig, output_dir=temp_output_dir, **kwargs)

    def test_as_figure(self, tidy_frame):
        fig, axes = vw.pl.panel_grid(1, 2)
        assert as_figure(fig) is fig
        assert as_figure(axes[0]) is fig
        assert as_figure(axes) is fig
        with pytest.raises(TypeError):
            as_figure('not a figure')

    def test_to_inches(self):
        assert to_inches(2.54, 'cm', 300) == pytest.approx(1.0)
        assert to_inches(600, 'px', 300) == pytest.approx(2.0)
