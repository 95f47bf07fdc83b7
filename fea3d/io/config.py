# fea3d/io/config.py
"""
Job files: JSON description of an analysis.

Every table may be given inline or as the path of a CSV file (no header,
resolved relative to the JSON file):

    {
        "nodes":     "nodes.csv",                 x, y, z
        "elems":     [[0, 1], [1, 2]],            node0, node1
        "props":     "props.csv",                 EA, EIz, EIy, GJ, nx, ny, nz
        "bcs":       "bcs.csv",                   node, dof, value
        "forces":    [[2, 1, -1000.0]],           node, dof, value
        "ties":      [],                          node_a, node_b, lmult, rmult
        "equations": [[1, 2, 1.0, 4, 2, -1.0]],   node, dof, coefficient, ...
        "options":   {"verbose": true, "save_nodal_displacements": true}
    }

``props`` has either one row per element or a single row shared by all
elements. Each equation row is a flat sequence of (node, dof, coefficient)
triples.
"""

import csv
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict, ValidationError

from ..errors import ConfigError
from ..model import BC, Equation, EquationTerm, Force, Job, Tie
from ..options import Options
from ..v3d.model import Beam3D, BeamProps, Node3D

Table = Union[str, List[List[float]]]


class JobFile(BaseModel):
    """Schema of a JSON job file."""
    model_config = ConfigDict(extra="forbid")

    nodes: Table
    elems: Table
    props: Table
    bcs: Table = []
    forces: Table = []
    ties: Table = []
    equations: Table = []
    options: Dict[str, Any] = {}


@dataclass
class JobInput:
    """Everything ``fea3d.solve`` needs, as read from a job file."""
    job: Job
    bcs: List[BC] = field(default_factory=list)
    forces: List[Force] = field(default_factory=list)
    ties: List[Tie] = field(default_factory=list)
    equations: List[Equation] = field(default_factory=list)
    options: Options = field(default_factory=Options)


def _read_table(value: Table, base_dir: Path, name: str, n_cols: int) -> np.ndarray:
    """Inline rows or a CSV file → (n_rows, n_cols) float array."""
    if isinstance(value, str):
        path = base_dir / value
        try:
            data = pd.read_csv(path, header=None, skipinitialspace=True, comment="#").to_numpy(dtype=float)
        except pd.errors.EmptyDataError:
            data = np.zeros((0, n_cols))
        except (OSError, ValueError) as e:
            raise ConfigError(f"Cannot read '{name}' table from {path}: {e}") from e
    elif not value:
        data = np.zeros((0, n_cols))
    else:
        try:
            data = np.array(value, dtype=float)
        except ValueError as e:
            raise ConfigError(f"'{name}' rows must all have {n_cols} numeric columns: {e}") from e

    if data.ndim != 2 or data.shape[1] != n_cols:
        raise ConfigError(f"'{name}' rows must have {n_cols} columns, got shape {data.shape}")
    if not np.all(np.isfinite(data)):
        raise ConfigError(f"'{name}' contains missing or non-finite values")
    return data


def _read_rows(value: Table, base_dir: Path, name: str) -> List[List[float]]:
    """Inline rows or a CSV file with rows of varying length."""
    if not isinstance(value, str):
        return [list(map(float, row)) for row in value]

    path = base_dir / value
    try:
        with path.open(newline="") as f:
            return [[float(v) for v in row if v.strip()] for row in csv.reader(f) if row]
    except (OSError, ValueError) as e:
        raise ConfigError(f"Cannot read '{name}' from {path}: {e}") from e


def _as_index(value: float, name: str) -> int:
    if not float(value).is_integer():
        raise ConfigError(f"'{name}' index {value} is not an integer")
    return int(value)


def build_job_input(job_file: JobFile, base_dir: Path) -> JobInput:
    """Turn a validated JobFile into model objects."""
    nodes = [Node3D(*row) for row in _read_table(job_file.nodes, base_dir, "nodes", 3)]

    elems_tbl = _read_table(job_file.elems, base_dir, "elems", 2)
    props_tbl = _read_table(job_file.props, base_dir, "props", 7)

    if len(props_tbl) == 1 and len(elems_tbl) > 1:
        props_tbl = np.repeat(props_tbl, len(elems_tbl), axis=0)
    if len(props_tbl) != len(elems_tbl):
        raise ConfigError(f"Got {len(props_tbl)} property rows for {len(elems_tbl)} elements")

    elems = []
    for (n0, n1), p in zip(elems_tbl, props_tbl):
        props = BeamProps(EA=p[0], EIz=p[1], EIy=p[2], GJ=p[3], normal_vec=tuple(p[4:7]))
        elems.append(Beam3D(_as_index(n0, "elems"), _as_index(n1, "elems"), props))

    bcs = [
        BC(_as_index(n, "bcs"), _as_index(d, "bcs"), float(v))
        for n, d, v in _read_table(job_file.bcs, base_dir, "bcs", 3)
    ]
    forces = [
        Force(_as_index(n, "forces"), _as_index(d, "forces"), float(v))
        for n, d, v in _read_table(job_file.forces, base_dir, "forces", 3)
    ]
    ties = [
        Tie(_as_index(a, "ties"), _as_index(b, "ties"), float(lm), float(rm))
        for a, b, lm, rm in _read_table(job_file.ties, base_dir, "ties", 4)
    ]

    equations = []
    for i, row in enumerate(_read_rows(job_file.equations, base_dir, "equations")):
        if len(row) == 0 or len(row) % 3:
            raise ConfigError(f"Equation {i} must be a sequence of (node, dof, coefficient) triples")
        terms = [
            EquationTerm(_as_index(row[k], "equations"), _as_index(row[k + 1], "equations"), row[k + 2])
            for k in range(0, len(row), 3)
        ]
        equations.append(Equation(terms))

    try:
        options = Options.from_dict(job_file.options)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid options: {e}") from e

    return JobInput(
        job=Job(nodes=nodes, elems=elems),
        bcs=bcs,
        forces=forces,
        ties=ties,
        equations=equations,
        options=options,
    )


def load_job_file(path: Union[str, Path]) -> JobInput:
    """
    Read and validate a JSON job file.

    Raises:
        ConfigError: If the file is missing, is not valid JSON, does not
            match the schema, or references unreadable/ill-shaped tables
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text())
    except OSError as e:
        raise ConfigError(f"Cannot read job file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Job file {path} is not valid JSON: {e}") from e

    try:
        job_file = JobFile.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Job file {path} is invalid:\n{e}") from e

    return build_job_input(job_file, path.parent)
