# fea3d/io/export.py
"""
Export: writes Summary tables to CSV and the text report to disk.

Writing happens after the analysis is complete. A failed write raises
ExportError, which still carries the finished Summary.
"""

import csv
from pathlib import Path
from typing import List, Optional, Sequence, Union

import numpy as np

from ..errors import ExportError
from ..options import Options
from ..summary import Summary

PathLike = Union[str, Path]


def format_value(value: float, precision: int) -> str:
    """Format a number with ``precision`` significant digits."""
    return f"{float(value):.{precision}g}"


def write_csv(
    path: PathLike,
    rows: Union[np.ndarray, Sequence[Sequence[float]]],
    precision: int = 14,
    delimiter: str = ","
) -> Path:
    """
    Write a 2D table of numbers as CSV, one line per row, no header.

    Example:
    --------
    >>> write_csv("disp.csv", [[0.0, 1.5e-3]], precision=4, delimiter=";")
    # disp.csv contains: 0;0.0015
    """
    path = Path(path)
    with path.open("w", newline="") as f:
        writer = csv.writer(f, delimiter=delimiter, lineterminator="\n")
        for row in rows:
            writer.writerow([format_value(v, precision) for v in row])
    return path


def write_report(path: PathLike, summary: Summary) -> Path:
    path = Path(path)
    path.write_text(summary.full_report())
    return path


def save_summary(summary: Summary, options: Options, output_dir: Optional[PathLike] = None) -> List[Path]:
    """
    Write every result file whose ``save_*`` flag is set.

    Relative file names are resolved against ``output_dir`` (default: the
    current directory).

    Returns:
        Paths written, in the order: displacements, nodal forces, tie forces,
        element forces, report

    Raises:
        ExportError: If any file cannot be written
    """
    base = Path(output_dir) if output_dir is not None else Path(".")

    tables = [
        (options.save_nodal_displacements, options.nodal_displacements_filename, summary.nodal_displacements),
        (options.save_nodal_forces, options.nodal_forces_filename, summary.nodal_forces),
        (options.save_tie_forces, options.tie_forces_filename, summary.tie_forces),
        (options.save_elemental_forces, options.elemental_forces_filename, summary.element_forces),
    ]

    written = []
    target = None
    try:
        for enabled, filename, data in tables:
            if not enabled:
                continue
            target = base / filename
            written.append(write_csv(target, data, options.csv_precision, options.csv_delimiter))

        if options.save_report:
            target = base / options.report_filename
            written.append(write_report(target, summary))
    except OSError as e:
        raise ExportError(f"Could not write {target}: {e}", summary=summary) from e

    return written
