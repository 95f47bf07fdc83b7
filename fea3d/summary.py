# fea3d/summary.py
"""
Summary: the complete result of one analysis.

Arrays (one row per node / tie / element):
    nodal_displacements  (n_nodes, 6)   ux, uy, uz, rx, ry, rz
    nodal_forces         (n_nodes, 6)   Fx, Fy, Fz, Mx, My, Mz  (K·d, includes reactions)
    tie_forces           (n_ties, 6)    spring force per DOF
    element_forces       (n_elems, 12)  local end forces, node0 then node1

All timings are wall-clock milliseconds.
"""

from dataclasses import dataclass, field
from typing import Dict, List

import numpy as np
import pandas as pd

DISPLACEMENT_COLUMNS = ['ux', 'uy', 'uz', 'rx', 'ry', 'rz']
FORCE_COLUMNS = ['Fx', 'Fy', 'Fz', 'Mx', 'My', 'Mz']
ELEMENT_FORCE_COLUMNS = [f"{c}_0" for c in FORCE_COLUMNS] + [f"{c}_1" for c in FORCE_COLUMNS]


def _empty(n_cols: int) -> np.ndarray:
    return np.zeros((0, n_cols), dtype=float)


@dataclass
class Summary:
    """Counts, timings and result tables of a solved job."""

    num_nodes: int = 0
    num_elems: int = 0
    num_bcs: int = 0
    num_ties: int = 0
    num_equations: int = 0

    assembly_time_in_ms: float = 0.0
    preprocessing_time_in_ms: float = 0.0
    factorization_time_in_ms: float = 0.0
    solve_time_in_ms: float = 0.0
    nodal_forces_solve_time_in_ms: float = 0.0
    tie_forces_solve_time_in_ms: float = 0.0
    element_forces_solve_time_in_ms: float = 0.0
    file_save_time_in_ms: float = 0.0
    total_time_in_ms: float = 0.0

    nodal_displacements: np.ndarray = field(default_factory=lambda: _empty(6))
    nodal_forces: np.ndarray = field(default_factory=lambda: _empty(6))
    tie_forces: np.ndarray = field(default_factory=lambda: _empty(6))
    element_forces: np.ndarray = field(default_factory=lambda: _empty(12))

    def full_report(self) -> str:
        """Plain-text report of counts and phase timings."""
        lines: List[str] = [
            "",
            "=" * 60,
            "  3D BEAM FEA SUMMARY",
            "=" * 60,
            f"  Number of nodes:          {self.num_nodes}",
            f"  Number of elements:       {self.num_elems}",
            f"  Number of BCs:            {self.num_bcs}",
            f"  Number of ties:           {self.num_ties}",
            f"  Number of equations:      {self.num_equations}",
            "-" * 60,
            f"  Assembly time:            {self.assembly_time_in_ms:.3f} ms",
            f"  Preprocessing time:       {self.preprocessing_time_in_ms:.3f} ms",
            f"  Factorization time:       {self.factorization_time_in_ms:.3f} ms",
            f"  Solve time:               {self.solve_time_in_ms:.3f} ms",
            f"  Nodal forces time:        {self.nodal_forces_solve_time_in_ms:.3f} ms",
            f"  Tie forces time:          {self.tie_forces_solve_time_in_ms:.3f} ms",
            f"  Element forces time:      {self.element_forces_solve_time_in_ms:.3f} ms",
            f"  File save time:           {self.file_save_time_in_ms:.3f} ms",
            f"  Total time:               {self.total_time_in_ms:.3f} ms",
        ]

        if self.num_nodes:
            max_disp = float(np.max(np.abs(self.nodal_displacements[:, :3])))
            lines += ["-" * 60, f"  Max translation:          {max_disp:.6e}"]

        lines += ["=" * 60, ""]
        return "\n".join(lines)

    def to_frames(self) -> Dict[str, pd.DataFrame]:
        """
        Result tables as labelled DataFrames.

        Returns:
            dict with keys 'nodal_displacements', 'nodal_forces',
            'tie_forces', 'element_forces'; the index is the node, tie or
            element number.
        """
        def frame(data: np.ndarray, columns: List[str], index_name: str) -> pd.DataFrame:
            df = pd.DataFrame(np.asarray(data, dtype=float).reshape(-1, len(columns)), columns=columns)
            df.index.name = index_name
            return df

        return {
            'nodal_displacements': frame(self.nodal_displacements, DISPLACEMENT_COLUMNS, 'node'),
            'nodal_forces': frame(self.nodal_forces, FORCE_COLUMNS, 'node'),
            'tie_forces': frame(self.tie_forces, FORCE_COLUMNS, 'tie'),
            'element_forces': frame(self.element_forces, ELEMENT_FORCE_COLUMNS, 'element'),
        }
