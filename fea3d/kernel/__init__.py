# fea3d/kernel - assembly, constraints and sparse solve
"""
KERNEL: THE LINEAR-ALGEBRA CORE
===============================

This package contains the element-agnostic plumbing of the analysis:

- A way to map (node_id, local_dof) → global_dof_index    (dof.py)
- Sparse scatter-add of element matrices into K            (assemble.py)
- Lagrange-multiplier and penalty constraints              (constraints.py)
- Sparse LU factorization of the augmented system          (solve.py)

The ELEMENT implementation (Beam3D) lives in fea3d.v3d; the kernel only
sees 12×12 matrices and node indices.
"""

from .dof import DOFManager
from .assemble import GlobalStiffAssembler, assemble_global_K, assemble_global_F
from .solve import SparseLUSolver, solve_sparse, MechanismError

__all__ = [
    'DOFManager', 'GlobalStiffAssembler', 'assemble_global_K', 'assemble_global_F',
    'SparseLUSolver', 'solve_sparse', 'MechanismError',
]
