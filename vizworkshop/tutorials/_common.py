import logging
from pathlib import Path
from typing import Dict, Optional, Union

from .._settings import settings, vprint, EMOJI, Colors
from ..pl._save import save_figure

logger = logging.getLogger(__name__)


class FigureRecorder:
    r"""
    Save the figures of a tutorial run under one directory and remember their paths.

    Arguments:
        output_dir: Target directory (``settings.output_dir / subdir`` when None).
        subdir: Sub directory used with the default output directory.
        fmt: ``'png'`` or ``'pdf'``.
        dpi: Resolution (``settings.dpi_save`` when None).
    """

    def __init__(self, output_dir: Union[str, Path, None] = None, subdir: str = '',
                 fmt: str = 'png', dpi: Optional[int] = None):
        if output_dir is None:
            output_dir = Path(settings.output_dir) / subdir
        self.output_dir = Path(output_dir)
        self.fmt = fmt
        self.dpi = dpi
        self.paths: Dict[str, Path] = {}

    def save(self, name: str, fig, width: Optional[float] = None, height: Optional[float] = None,
             units: str = 'in') -> Path:
        if name in self.paths:
            raise ValueError(f"Figure name '{name}' used twice")
        path = save_figure(fig, f'{name}.{self.fmt}', width=width, height=height, units=units,
                           dpi=self.dpi, output_dir=self.output_dir, close=True)
        self.paths[name] = path
        return path

    def add_file(self, name: str, path: Path) -> Path:
        self.paths[name] = Path(path)
        return self.paths[name]

    def summary(self, title: str) -> Dict[str, Path]:
        vprint(f"{Colors.GREEN}{EMOJI['done']} {title}: {Colors.BOLD}{len(self.paths)} files{Colors.ENDC}"
               f"{Colors.GREEN} written to {self.output_dir}{Colors.ENDC}")
        logger.debug("%s files: %s", title, list(self.paths))
        return dict(self.paths)
