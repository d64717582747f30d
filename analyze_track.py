"""Command line utility for aggregating statistics from Garmin FIT tracks."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from track_stats.arguments import build_argument_parser, config_from_args
from track_stats.fit_parser import parse_track_fit
from track_stats.formatting import format_statistics
from track_stats.statistics import TrackStatistics, merge_all
from track_stats.updater import compute_segment_statistics


def _setup_logging(verbose: bool, log_file: Optional[Path] = None) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%H:%M:%S"
    logging.basicConfig(level=level, format=fmt, datefmt=datefmt)
    if log_file:
        fh = logging.FileHandler(log_file, mode="w")
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(fmt, datefmt))
        logging.getLogger().addHandler(fh)


def _report(parts: Sequence[TrackStatistics], total: TrackStatistics) -> None:
    if len(parts) > 1:
        for index, part in enumerate(parts, start=1):
            print(f"Segment {index}: {format_statistics(part)}")
    print(format_statistics(total))


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose, log_file=args.log_file)

    fit_path = args.fit_file
    if not fit_path.exists():
        raise FileNotFoundError(f"FIT file not found: {fit_path}")
    if args.segments <= 0:
        raise ValueError("--segments must be a positive integer")
    if args.smoothing_window <= 0:
        raise ValueError("--smoothing_window must be a positive integer")

    config = config_from_args(args)
    data = parse_track_fit(fit_path, smoothing_window=args.smoothing_window)

    parts = compute_segment_statistics(data.points, args.segments, config)
    total = merge_all(parts)
    logging.info("Merged %d segment(s) from %s", len(parts), data.source)
    _report(parts, total)


if __name__ == "__main__":
    main()
