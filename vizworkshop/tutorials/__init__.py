r"""
The workshop documents as functions.

Each tutorial runs its workflow end to end, saves every figure and returns
an ordered dict ``name -> Path``. Pass data in to run offline.

Examples:
    >>> import vizworkshop as vw
    >>> paths = vw.tutorials.survey_workshop()
    >>> paths = vw.tutorials.run_all(offline=True, output_dir='figures')
"""
import logging
from pathlib import Path
from typing import Dict, Union

from .._settings import settings
from ..datasets import create_mock_surveys, create_mock_dataset, create_mock_spatial
from ._common import FigureRecorder
from ._survey import survey_workshop
from ._singlecell import singlecell_workshop
from ._spatial import spatial_workshop

logger = logging.getLogger(__name__)


def run_all(output_dir: Union[str, Path, None] = None, offline: bool = False,
            fmt: str = 'png', dpi=None) -> Dict[str, Dict[str, Path]]:
    r"""
    Run the three tutorials.

    Arguments:
        output_dir: Root directory; each tutorial writes to its own sub directory.
        offline: Use the synthetic datasets instead of downloading.
        fmt: ``'png'`` or ``'pdf'``.
        dpi: Resolution of the saved figures.

    Returns:
        ``{'surveys': {...}, 'singlecell': {...}, 'spatial': {...}}``.
    """
    root = Path(output_dir) if output_dir is not None else Path(settings.output_dir)
    logger.debug("run_all(offline=%s) into %s", offline, root)
    results = {}
    results['surveys'] = survey_workshop(create_mock_surveys() if offline else None,
                                         output_dir=root / 'surveys', fmt=fmt, dpi=dpi)
    results['singlecell'] = singlecell_workshop(create_mock_dataset() if offline else None,
                                                output_dir=root / 'singlecell', fmt=fmt, dpi=dpi)
    results['spatial'] = spatial_workshop(create_mock_spatial() if offline else None,
                                          output_dir=root / 'spatial', fmt=fmt, dpi=dpi)
    return results
