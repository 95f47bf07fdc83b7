# fea3d - Static Linear Analysis of 3D Beam Frames
"""
FEA3D: 3D Euler–Bernoulli Frame Analysis
========================================

This package provides:
- 12×12 beam elements with axial, biaxial bending and torsion stiffness
- Sparse global assembly
- Exact constraints (prescribed displacements, multi-point equations) via
  Lagrange multipliers, elastic ties via penalty springs
- Sparse LU solve of the augmented system
- Recovery of nodal forces, tie forces and element end forces

ARCHITECTURE:
-------------
    model.py        Job, BC, Force, Tie, Equation, input validation
    v3d/            3D geometry (Node3D, Beam3D) and element stiffness
    kernel/         DOF indexing, assembly, constraints, sparse solve
    post.py         Force recovery and zero-rounding
    solve.py        End-to-end solve(job, bcs, forces, ties, equations, options)
    summary.py      Result container and text report
    options.py      Analysis / output options
    io/             JSON job files in, CSV / report files out
    cli.py          `fea3d job.json`
"""

from .errors import ConfigError, ExportError, GeometryError, InvalidModelError, MechanismError
from .model import BC, DOF, Equation, EquationTerm, Force, Job, Tie, validate_inputs
from .options import Options
from .solve import solve
from .summary import Summary
from .v3d import Beam3D, BeamProps, Node3D

__version__ = "0.1.0"

__all__ = [
    'solve', 'Options', 'Summary',
    'Job', 'Node3D', 'Beam3D', 'BeamProps',
    'BC', 'Force', 'Tie', 'Equation', 'EquationTerm', 'DOF', 'validate_inputs',
    'InvalidModelError', 'GeometryError', 'MechanismError', 'ExportError', 'ConfigError',
]
