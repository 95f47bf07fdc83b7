# fea3d/cli.py
"""
Command line entry point: solve a JSON job file.

    fea3d job.json
    fea3d job.json --verbose --epsilon 1e-12 --output-dir results/
"""

import argparse
import dataclasses
import sys
from pathlib import Path
from typing import List, Optional

from .errors import ConfigError, ExportError, InvalidModelError, MechanismError
from .io.config import load_job_file
from .solve import solve


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='fea3d',
        description='Static linear analysis of a 3D beam frame',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fea3d frame.json
  fea3d frame.json --verbose --output-dir results/

Result files are written when the job file's "options" ask for them
(e.g. "save_nodal_displacements": true).
        """
    )
    parser.add_argument('job', type=Path, help='JSON job file')
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Print phase timings and a progress bar (overrides the job file)'
    )
    parser.add_argument(
        '--epsilon',
        type=float,
        default=None,
        help='Report values with smaller magnitude as 0 (overrides the job file)'
    )
    parser.add_argument(
        '--output-dir',
        type=Path,
        default=None,
        help='Directory for result files (default: next to the job file)'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        job_input = load_job_file(args.job)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    options = job_input.options
    overrides = {}
    if args.verbose:
        overrides['verbose'] = True
    if args.epsilon is not None:
        overrides['epsilon'] = args.epsilon
    if overrides:
        try:
            options = dataclasses.replace(options, **overrides)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    output_dir = args.output_dir if args.output_dir is not None else args.job.parent
    if options.saves_anything:
        output_dir.mkdir(parents=True, exist_ok=True)

    try:
        summary = solve(
            job_input.job,
            job_input.bcs,
            job_input.forces,
            job_input.ties,
            job_input.equations,
            options,
            output_dir=output_dir,
        )
    except (InvalidModelError, MechanismError) as e:
        print(f"Analysis failed: {e}", file=sys.stderr)
        return 1
    except ExportError as e:
        print(f"Analysis completed but results could not be saved: {e}", file=sys.stderr)
        return 1

    # verbose mode already printed the report
    if not options.verbose:
        print(summary.full_report())
    return 0


if __name__ == '__main__':
    sys.exit(main())
