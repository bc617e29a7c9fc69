"""PNG export of decoded rasters."""

from __future__ import annotations

import logging
from pathlib import Path

from .errors import ExportError
from .sstv.image_decoder import PipelineResult

logger = logging.getLogger('voyager.export')


def save_png(result: PipelineResult, path: str | Path) -> Path:
    """
    Write ``result`` as a PNG, creating parent directories as needed.

    Raises:
        ExportError: Empty raster, bad filename, or the write failed.
    """
    path = Path(path)
    if result.height == 0:
        raise ExportError("Nothing to export: decoded raster is empty")
    if not path.stem:
        raise ExportError(f"Invalid filename: {path!s} has empty stem")
    if path.suffix.lower() != '.png':
        path = path.with_suffix('.png')

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        result.to_image().save(path, format='PNG')
    except OSError as e:
        raise ExportError(f"Failed to save image to '{path}': {e}") from e

    logger.info(f"Exported {result.width}x{result.height} {result.mode.value} image to {path}")
    return path
