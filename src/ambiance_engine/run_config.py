from __future__ import annotations

import argparse
import logging
import os
import random
from typing import List

from .config import load_project_config
from .errors import ConfigurationError
from .generation import GenerationContext, generate_project, write_placement_log
from .logging_utils import setup_logging
from .midi_writer import MidiPreviewHost


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Populate a time window from a JSON group/container config")
    parser.add_argument("--config", required=True, help="Path to JSON project config")
    parser.add_argument("--out", default=None, help="Override the MIDI preview output path")
    parser.add_argument("--log-path", default=None, help="Write a CSV placement log here")
    parser.add_argument("--start", type=float, default=None, help="Override window start (seconds)")
    parser.add_argument("--end", type=float, default=None, help="Override window end (seconds)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible run")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More log output (-v info, -vv debug)")
    args = parser.parse_args(argv)

    level = None
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    setup_logging(level)

    try:
        cfg = load_project_config(args.config)
    except (OSError, ValueError) as e:
        raise SystemExit(f"Cannot load config {args.config}: {e}")

    start = cfg.window_start if args.start is None else args.start
    end = cfg.window_end if args.end is None else args.end
    seed = args.seed if args.seed is not None else cfg.seed
    out_path = args.out or cfg.out
    log_path = args.log_path or cfg.log_path

    host = MidiPreviewHost()
    ctx = GenerationContext(
        host=host,
        groups=cfg.groups,
        rng=random.Random(seed) if seed is not None else None,
        crossfade_shape=cfg.crossfade_shape,
    )
    try:
        result = generate_project(ctx, start, end)
    except ConfigurationError as e:
        raise SystemExit(str(e))

    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    host.save(out_path)
    print(
        f"Wrote {out_path} ({len(cfg.groups)} group(s), {result.events_placed} item(s), "
        f"window={start:g}-{end:g}s)"
    )
    if result.skipped_count:
        print(
            f"Skipped {result.skipped_count} item(s); minimum required item length "
            f"{result.min_required_length:.2f}s"
        )
    for err in result.errors:
        print(f"Not generated: {err}")

    if log_path:
        write_placement_log(log_path, result)
        print(f"Wrote placement log {log_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
