# fea3d/post.py
"""Nodal forces, tie forces, element end forces, zero-rounding."""

from typing import Sequence

import numpy as np
from scipy.sparse import spmatrix

from .model import DOF_PER_NODE, Job, Tie


def round_small(values: np.ndarray, epsilon: float) -> np.ndarray:
    """
    Replace entries with |value| < epsilon by exactly 0.0 (returns a copy).

    Solver noise such as 3.2e-17 would otherwise show up in every report.
    """
    out = np.array(values, dtype=float, copy=True)
    out[np.abs(out) < epsilon] = 0.0
    # -0.0 prints as "-0"; normalise it
    out[out == 0.0] = 0.0
    return out


def nodal_displacements(x: np.ndarray, n_nodes: int) -> np.ndarray:
    """First 6·n entries of the solution, one row per node. Multipliers are dropped."""
    ndof = DOF_PER_NODE * n_nodes
    return np.asarray(x[:ndof], dtype=float).reshape(n_nodes, DOF_PER_NODE)


def nodal_forces(K: spmatrix, disp: np.ndarray) -> np.ndarray:
    """
    Nodal forces K·d, one row per node.

    K is the stiffness BEFORE the multiplier rows/columns were added
    (elements + ties). Only its 6n × 6n block is used. At free DOFs the
    result equals the applied load; at restrained DOFs it is the reaction
    plus any load applied there.

    Parameters:
    -----------
    K : spmatrix
        Assembled stiffness, at least 6n × 6n
    disp : np.ndarray
        Nodal displacements, shape (n_nodes, 6)

    Returns:
    --------
    np.ndarray
        Shape (n_nodes, 6): Fx, Fy, Fz, Mx, My, Mz
    """
    n_nodes = disp.shape[0]
    ndof = DOF_PER_NODE * n_nodes
    Kn = K.tocsr()[:ndof, :ndof]
    return np.asarray(Kn @ disp.reshape(ndof)).reshape(n_nodes, DOF_PER_NODE)


def tie_forces(ties: Sequence[Tie], disp: np.ndarray) -> np.ndarray:
    """Spring force of every tie per DOF: k · (d_b - d_a). Shape (n_ties, 6)."""
    out = np.zeros((len(ties), DOF_PER_NODE), dtype=float)
    for i, tie in enumerate(ties):
        for j in range(DOF_PER_NODE):
            out[i, j] = tie.spring_constant(j) * (disp[tie.node_b, j] - disp[tie.node_a, j])
    return out


def element_forces(job: Job, klocal_r: Sequence[np.ndarray], disp: np.ndarray) -> np.ndarray:
    """
    Local end forces of every element.

    For each element, f = (k_local × T) · [d_node0, d_node1]. The node0 half
    is negated, the node1 half is reported as computed, so both ends carry
    the same member sign: a stretched member (node1 moving away from node0)
    gives +EA·δ/L in column 0 and in column 6.

    Parameters:
    -----------
    job : Job
        The analysed job
    klocal_r : Sequence[np.ndarray]
        Per-element 12×12 k_local × T matrices cached during assembly
    disp : np.ndarray
        Nodal displacements, shape (n_nodes, 6)

    Returns:
    --------
    np.ndarray
        Shape (n_elems, 12): [N, Vy, Vz, T, My, Mz] at node0 then at node1
    """
    out = np.zeros((len(job.elems), 2 * DOF_PER_NODE), dtype=float)
    for i, elem in enumerate(job.elems):
        d_elem = np.concatenate([disp[elem.ni], disp[elem.nj]])
        f = klocal_r[i] @ d_elem
        out[i, :DOF_PER_NODE] = -f[:DOF_PER_NODE]
        out[i, DOF_PER_NODE:] = f[DOF_PER_NODE:]
    return out
