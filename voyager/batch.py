"""
Batch decoding.

Decodes every WAV matching a glob pattern and writes one PNG per file.
Failures are logged per file and do not stop the run.

    python -m voyager.batch 'recordings/*.wav' out/ --mode color
"""

from __future__ import annotations

import argparse
import glob
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .audio import CHANNEL_LEFT, load_wav
from .errors import VoyagerError
from .export import save_png
from .logging import configure_logging
from .sstv.params import DecoderMode, DecoderParams
from .sstv.pipeline import DecodingPipeline

logger = logging.getLogger('voyager.batch')


@dataclass
class BatchReport:
    written: list[Path] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)


def process_file(path: Path, output_dir: Path, pipeline: DecodingPipeline,
                 params: DecoderParams, channel: str = CHANNEL_LEFT) -> Path:
    """Decode one recording (whole channel, not a window) to ``output_dir/<stem>.png``."""
    recording = load_wav(path)
    buffer = recording.channel(channel)
    result = pipeline.process(buffer.data, params, recording.sample_rate)
    return save_png(result, output_dir / f'{path.stem}.png')


def run_batch(pattern: str, output_dir: str | Path,
              params: Optional[DecoderParams] = None,
              channel: str = CHANNEL_LEFT) -> BatchReport:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    params = params or DecoderParams()
    params.validate()

    report = BatchReport()
    paths = sorted(Path(p) for p in glob.glob(pattern))
    if not paths:
        logger.warning(f"No files found matching pattern: {pattern}")
        return report

    logger.info(f"Found {len(paths)} files to process")
    pipeline = DecodingPipeline()

    for path in paths:
        try:
            written = process_file(path, output_dir, pipeline, params, channel)
        except VoyagerError as e:
            logger.error(f"Failed to process {path}: {e}")
            report.failed[str(path)] = str(e)
            continue
        logger.info(f"Successfully processed {path}")
        report.written.append(written)

    logger.info(
        f"Batch processing complete: {len(report.written)} written, "
        f"{len(report.failed)} failed"
    )
    return report


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Decode Golden Record WAV files to PNG')
    parser.add_argument('pattern', help='Glob pattern for input WAV files')
    parser.add_argument('output_dir', help='Directory for decoded PNGs')
    parser.add_argument('--mode', default='gray', help='gray or color')
    parser.add_argument('--channel', default=CHANNEL_LEFT, choices=['left', 'right'])
    parser.add_argument('--line-duration', type=float, default=None)
    parser.add_argument('--threshold', type=float, default=None)
    parser.add_argument('--log-level', default=None)
    args = parser.parse_args(argv)

    configure_logging(level=args.log_level)

    overrides = {'mode': args.mode}
    if args.line_duration is not None:
        overrides['line_duration_ms'] = args.line_duration
    if args.threshold is not None:
        overrides['threshold'] = args.threshold

    try:
        params = DecoderParams.from_dict(overrides)
        report = run_batch(args.pattern, args.output_dir, params, args.channel)
    except (ValueError, VoyagerError) as e:
        logger.error(str(e))
        return 2
    return 1 if report.failed else 0


if __name__ == '__main__':
    sys.exit(main())
