# fea3d/kernel/assemble.py
"""
ASSEMBLY: Sparse Global Stiffness Assembly
==========================================

PURPOSE:
--------
This module handles the assembly of element contributions into the global
stiffness matrix. This is the scatter-add operation that builds K from
element-level data.

Real frames have thousands of DOFs but each node only talks to its
neighbours, so K is almost entirely zeros. Instead of writing into a dense
ndof × ndof array we collect TRIPLETS (row, col, value) and let scipy build
a compressed sparse matrix, summing duplicate entries:

    rows, cols, vals  →  coo_matrix(...)  →  .tocsc()

DOF MAPPING:
------------
A 12×12 element matrix is made of four 6×6 blocks. Local row/col r maps to
a global index as follows:

    r <  6  →  6 × node0 + r
    r >= 6  →  6 × node1 + (r - 6)

The second node's block always starts at 6 × node1, whatever the numbering
of the two nodes (node1 may be smaller than node0, or far away from it).

PARALLELISM:
------------
Each element is an independent pure computation producing its own
klocal_r matrix and its own triplet arrays. Elements may be computed on a
thread pool; the merge into one matrix always happens on the calling thread.

USAGE:
------
    assembler = GlobalStiffAssembler()
    K = assembler.assemble(job, ties, size)
    klocal_r = assembler.klocal_r      # one 12×12 per element, for force recovery
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
from scipy.sparse import coo_matrix, csc_matrix
from tqdm import tqdm

from ..model import Force, Job, Tie
from ..v3d.elements import beam3d_element_matrices
from ..v3d.model import Beam3D, Node3D
from .constraints import tie_triplets
from .dof import DOFManager

Triplets = Tuple[np.ndarray, np.ndarray, np.ndarray]


@dataclass
class ElementContribution:
    """Everything one element hands to the assembler."""
    klocal_r: np.ndarray   # 12×12, k_local × T
    rows: np.ndarray       # global row indices of nonzeros
    cols: np.ndarray       # global column indices of nonzeros
    vals: np.ndarray       # nonzero values of ke_global


def sparse_triplets(
    ke: np.ndarray,
    node0: int,
    node1: int,
    dof_per_node: int = 6
) -> Triplets:
    """
    Convert a dense 2-node element matrix to global (row, col, value) triplets.

    Only nonzero entries are kept.

    Parameters:
    -----------
    ke : np.ndarray
        Element matrix in global coordinates, shape (2·dof_per_node, 2·dof_per_node)
    node0, node1 : int
        Node indices of the element ends
    dof_per_node : int
        DOFs per node (6 for a 3D frame)

    Returns:
    --------
    Triplets
        (rows, cols, vals) arrays of equal length

    Example:
    --------
    >>> ke = np.zeros((12, 12)); ke[6, 6] = 1.0
    >>> rows, cols, vals = sparse_triplets(ke, node0=3, node1=7)
    >>> rows, cols
    (array([42]), array([42]))
    """
    n_elem_dofs = 2 * dof_per_node
    assert ke.shape == (n_elem_dofs, n_elem_dofs), \
        f"Element ke shape {ke.shape} doesn't match {n_elem_dofs} element DOFs"

    local_rows, local_cols = np.nonzero(ke)
    vals = ke[local_rows, local_cols]

    def to_global(local: np.ndarray) -> np.ndarray:
        # second-node entries: subtract the local block offset, add node1's base
        return np.where(
            local < dof_per_node,
            dof_per_node * node0 + local,
            dof_per_node * node1 + (local - dof_per_node),
        )

    return to_global(local_rows), to_global(local_cols), vals


def compute_element(nodes: Sequence[Node3D], element: Beam3D, dof_per_node: int = 6) -> ElementContribution:
    """Stiffness, recovery matrix and triplets of a single element."""
    ke_global, klocal_r = beam3d_element_matrices(nodes, element)
    rows, cols, vals = sparse_triplets(ke_global, element.ni, element.nj, dof_per_node)
    return ElementContribution(klocal_r=klocal_r, rows=rows, cols=cols, vals=vals)


def assemble_global_K(size: int, triplets: Sequence[Triplets]) -> csc_matrix:
    """
    Build a size × size CSC matrix from triplet arrays.

    Entries that hit the same (row, col) are SUMMED, never overwritten, so
    every element and tie touching a DOF contributes.
    """
    if triplets:
        rows = np.concatenate([t[0] for t in triplets]).astype(np.int64)
        cols = np.concatenate([t[1] for t in triplets]).astype(np.int64)
        vals = np.concatenate([t[2] for t in triplets]).astype(float)
    else:
        rows = cols = np.zeros(0, dtype=np.int64)
        vals = np.zeros(0, dtype=float)

    K = coo_matrix((vals, (rows, cols)), shape=(size, size)).tocsc()
    K.sum_duplicates()
    return K


def assemble_global_F(size: int, forces: Sequence[Force], dof_manager: Optional[DOFManager] = None) -> np.ndarray:
    """
    Assemble the right-hand-side vector from point loads.

    Loads on the same DOF add up. Entries past the nodal block (multiplier
    rows) stay zero; prescribed displacements are added by the constraint
    system.

    Example:
    --------
    >>> F = assemble_global_F(12, [Force(1, 2, -1000.0)])
    >>> F[8]
    -1000.0
    """
    dof = dof_manager or DOFManager()
    F = np.zeros(size, dtype=float)
    for force in forces:
        F[dof.idx(force.node, force.dof)] += force.value
    return F


class GlobalStiffAssembler:
    """
    Assembles the global stiffness matrix of one analysis.

    The assembler owns the per-element ``klocal_r`` matrices computed along
    the way; force recovery reads them after the solve. Create one assembler
    per ``solve`` call; it is not meant to be shared.

    Parameters:
    -----------
    dof_manager : DOFManager, optional
        DOF indexing (defaults to 6 DOF per node)
    max_workers : int, optional
        Compute element matrices on a thread pool of this size.
        None = sequential.
    show_progress : bool
        Display a tqdm progress bar over elements
    """

    def __init__(
        self,
        dof_manager: Optional[DOFManager] = None,
        max_workers: Optional[int] = None,
        show_progress: bool = False
    ):
        self.dof = dof_manager or DOFManager()
        self.max_workers = max_workers
        self.show_progress = show_progress
        self.klocal_r: List[np.ndarray] = []

    def _element_contributions(self, job: Job) -> List[ElementContribution]:
        n_elems = len(job.elems)
        dpn = self.dof.dof_per_node

        def work(element: Beam3D) -> ElementContribution:
            return compute_element(job.nodes, element, dpn)

        if self.max_workers is None or self.max_workers <= 1 or n_elems < 2:
            iterator = (work(e) for e in job.elems)
            return list(tqdm(iterator, total=n_elems, desc="Assembling", disable=not self.show_progress))

        # executor.map keeps element order, so slot i always belongs to element i
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            iterator = executor.map(work, job.elems)
            return list(tqdm(iterator, total=n_elems, desc="Assembling", disable=not self.show_progress))

    def assemble(self, job: Job, ties: Sequence[Tie], size: int) -> csc_matrix:
        """
        Assemble element and tie stiffness into a size × size sparse matrix.

        ``size`` may exceed the nodal DOF count to leave room for Lagrange
        multipliers; those rows/columns stay empty here.

        Returns:
        --------
        csc_matrix
            Global stiffness matrix, symmetric, duplicates summed
        """
        contributions = self._element_contributions(job)

        # merge step: single-threaded
        self.klocal_r = [c.klocal_r for c in contributions]
        triplets = [(c.rows, c.cols, c.vals) for c in contributions]
        if ties:
            triplets.append(tie_triplets(ties, self.dof))

        return assemble_global_K(size, triplets)
