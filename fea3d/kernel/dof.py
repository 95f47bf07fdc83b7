# fea3d/kernel/dof.py
"""
DOF MANAGER: Degree of Freedom Indexing for the Augmented System
================================================================

PURPOSE:
--------
This module handles the mapping from (node_id, local_dof) to global DOF
indices, and the layout of the extra unknowns added by constraints.

Every node of a 3D frame owns 6 DOFs:

    0: ux   1: uy   2: uz   3: rx   4: ry   5: rz

so the global index is simply 6 × node_id + local_dof.

AUGMENTED SYSTEM LAYOUT:
------------------------
Boundary conditions and multi-point equations are enforced exactly with
Lagrange multipliers. Each one adds a row and a column AFTER the nodal
DOFs:

    [ 0 .. 6n-1 ]                     nodal displacements
    [ 6n .. 6n+nbc-1 ]                one multiplier per boundary condition
    [ 6n+nbc .. 6n+nbc+neq-1 ]        one multiplier per equation

USAGE:
------
    dof = DOFManager()

    global_idx = dof.idx(node_id=2, local_dof=1)   # → 13
    size = dof.system_size(n_nodes=4, n_bcs=6, n_equations=1)  # → 31
"""

from dataclasses import dataclass
from typing import List

from ..model import DOF_PER_NODE


@dataclass
class DOFManager:
    """
    Manages degree-of-freedom indexing for structural analysis.

    This is the bridge between "node 5, y-displacement" and "global DOF index 31".

    Attributes:
    -----------
    dof_per_node : int
        Number of DOFs per node (6 for a 3D frame: ux, uy, uz, rx, ry, rz)

    Examples:
    ---------
    >>> dof = DOFManager()
    >>> dof.idx(0, 0)  # Node 0, DOF 0 (ux)
    0
    >>> dof.idx(1, 0)  # Node 1, DOF 0 (ux)
    6
    >>> dof.ndof(4)    # Total nodal DOFs for 4 nodes
    24
    """
    dof_per_node: int = DOF_PER_NODE

    def idx(self, node_id: int, local_dof: int) -> int:
        """
        Get the global DOF index for a node's local DOF.

        Parameters:
        -----------
        node_id : int
            The node identifier (0-indexed)
        local_dof : int
            The local DOF index within the node (0 to dof_per_node-1)

        Returns:
        --------
        int
            Global DOF index in the system matrices
        """
        return self.dof_per_node * node_id + local_dof

    def ndof(self, n_nodes: int) -> int:
        """Total nodal DOFs (size of the un-augmented K matrix)."""
        return self.dof_per_node * n_nodes

    def node_dofs(self, node_id: int) -> List[int]:
        """
        Get all global DOF indices for a single node.

        Examples:
        ---------
        >>> DOFManager().node_dofs(2)
        [12, 13, 14, 15, 16, 17]
        """
        base = self.dof_per_node * node_id
        return list(range(base, base + self.dof_per_node))

    def element_dof_map(self, node_ids: List[int]) -> List[int]:
        """
        Get the DOF map for an element connecting multiple nodes.

        Each node's block starts at dof_per_node × node_id, whatever the
        order or spacing of the node numbers.

        Examples:
        ---------
        >>> dof = DOFManager()
        >>> dof.element_dof_map([0, 1])
        [0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11]
        >>> dof.element_dof_map([4, 1])
        [24, 25, 26, 27, 28, 29, 6, 7, 8, 9, 10, 11]
        """
        result = []
        for node_id in node_ids:
            result.extend(self.node_dofs(node_id))
        return result

    def multiplier_idx(self, n_nodes: int, constraint_id: int) -> int:
        """
        Row/column of a Lagrange multiplier.

        Boundary conditions take constraint ids 0..nbc-1, equations follow
        at nbc..nbc+neq-1.
        """
        return self.ndof(n_nodes) + constraint_id

    def system_size(self, n_nodes: int, n_bcs: int = 0, n_equations: int = 0) -> int:
        """Size of the augmented system: nodal DOFs + one multiplier per constraint."""
        return self.ndof(n_nodes) + n_bcs + n_equations

