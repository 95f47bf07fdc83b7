# fea3d/kernel/constraints.py
"""
Constraint injection: boundary conditions, multi-point equations and ties.

Boundary conditions and equations are enforced EXACTLY with Lagrange
multipliers. For a constraint row c·d = g the system grows to

    [ K   cᵀ ] [ d ]   [ F ]
    [ c   0  ] [ λ ] = [ g ]

and λ is the reaction needed to hold the constraint. The stiffness
diagonal is left untouched, so nonzero prescribed displacements work the
same way as zero ones.

Ties are NOT exact. They add a penalty spring between two nodes straight
into K (no extra unknowns):

    K[a, a] += k    K[b, b] += k
    K[a, b] -= k    K[b, a] -= k

with k = lmult for translations and rmult for rotations. A large k
approximates a rigid link; a k many orders of magnitude above the
surrounding stiffness degrades the factorization.
"""

from typing import Optional, Sequence, Tuple

import numpy as np
from scipy.sparse import coo_matrix, csc_matrix

from ..model import BC, Equation, Tie
from .dof import DOFManager

Triplets = Tuple[np.ndarray, np.ndarray, np.ndarray]

# Prescribed values at or below machine epsilon are treated as zero
BC_VALUE_TOLERANCE = np.finfo(float).eps


def tie_triplets(ties: Sequence[Tie], dof_manager: Optional[DOFManager] = None) -> Triplets:
    """Penalty-spring stiffness triplets for all ties (4 entries per DOF per tie)."""
    dof = dof_manager or DOFManager()
    rows, cols, vals = [], [], []

    for tie in ties:
        for j in range(dof.dof_per_node):
            k = tie.spring_constant(j)
            a = dof.idx(tie.node_a, j)
            b = dof.idx(tie.node_b, j)

            rows += [a, b, a, b]
            cols += [a, b, b, a]
            vals += [k, k, -k, -k]

    return np.array(rows, dtype=np.int64), np.array(cols, dtype=np.int64), np.array(vals, dtype=float)


def bc_triplets(bcs: Sequence[BC], num_nodes: int, dof_manager: Optional[DOFManager] = None) -> Triplets:
    """
    Lagrange-multiplier entries for boundary conditions.

    The i-th BC puts a 1 at (dof, m_i) and (m_i, dof) with m_i = 6n + i.
    """
    dof = dof_manager or DOFManager()
    rows, cols = [], []

    for i, bc in enumerate(bcs):
        d = dof.idx(bc.node, bc.dof)
        m = dof.multiplier_idx(num_nodes, i)
        rows += [d, m]
        cols += [m, d]

    return np.array(rows, dtype=np.int64), np.array(cols, dtype=np.int64), np.ones(len(rows), dtype=float)


def bc_rhs(F: np.ndarray, bcs: Sequence[BC], num_nodes: int, dof_manager: Optional[DOFManager] = None) -> None:
    """Write prescribed displacement values into the multiplier rows of F (in-place)."""
    dof = dof_manager or DOFManager()
    for i, bc in enumerate(bcs):
        if abs(bc.value) > BC_VALUE_TOLERANCE:
            F[dof.multiplier_idx(num_nodes, i)] = bc.value


def equation_triplets(
    equations: Sequence[Equation],
    num_nodes: int,
    num_bcs: int,
    dof_manager: Optional[DOFManager] = None
) -> Triplets:
    """
    Lagrange-multiplier entries for multi-point equations.

    The i-th equation owns row/column m = 6n + num_bcs + i; every term puts
    its coefficient at (m, dof) and (dof, m).
    """
    dof = dof_manager or DOFManager()
    rows, cols, vals = [], [], []

    for i, eq in enumerate(equations):
        m = dof.multiplier_idx(num_nodes, num_bcs + i)
        for term in eq.terms:
            d = dof.idx(term.node, term.dof)
            rows += [m, d]
            cols += [d, m]
            vals += [term.coefficient, term.coefficient]

    return np.array(rows, dtype=np.int64), np.array(cols, dtype=np.int64), np.array(vals, dtype=float)


def augment(
    K: csc_matrix,
    bcs: Sequence[BC],
    equations: Sequence[Equation],
    num_nodes: int,
    dof_manager: Optional[DOFManager] = None
) -> csc_matrix:
    """
    Add BC and equation multiplier rows/columns to an assembled K.

    K must already be sized 6n + len(bcs) + len(equations). The input
    matrix is not modified.
    """
    size = K.shape[0]
    parts = [bc_triplets(bcs, num_nodes, dof_manager)]
    if equations:
        parts.append(equation_triplets(equations, num_nodes, len(bcs), dof_manager))

    rows = np.concatenate([p[0] for p in parts])
    cols = np.concatenate([p[1] for p in parts])
    vals = np.concatenate([p[2] for p in parts])

    C = coo_matrix((vals, (rows, cols)), shape=(size, size)).tocsc()
    return (K + C).tocsc()


def prune(A: csc_matrix, tol: float) -> csc_matrix:
    """Drop stored entries with |value| <= tol and compress the matrix."""
    A = A.tocsc(copy=True)
    A.data[np.abs(A.data) <= tol] = 0.0
    A.eliminate_zeros()
    A.sort_indices()
    return A
