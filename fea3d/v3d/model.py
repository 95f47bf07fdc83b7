# fea3d/v3d/model.py
"""
3D MODEL DEFINITIONS: Node3D, BeamProps and Beam3D
==================================================

PURPOSE:
--------
This module defines the geometric data structures for 3D frame analysis:
- Node3D: A point in 3D space with x, y, z coordinates
- BeamProps: Section stiffnesses and the orientation of the local y-axis
- Beam3D: A two-node Euler–Bernoulli beam connecting two nodes

ENGINEERING CONTEXT:
--------------------
A 3D FRAME member carries axial force, shear and bending in two planes,
and torsion. Every node therefore has 6 DOFs:

    ux, uy, uz   translations along global x, y, z
    rx, ry, rz   rotations about global x, y, z

The section is described by stiffness PRODUCTS rather than E, A, I
separately, because that is all the stiffness matrix needs:

    EA    axial stiffness              (N)
    EIz   bending stiffness about z    (N·m²)  → deflection along local y
    EIy   bending stiffness about y    (N·m²)  → deflection along local z
    GJ    torsional stiffness          (N·m²)

The orientation vector (normal_vec) tells us where the section's local
y-axis ("up") points. It must not be parallel to the member.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class Node3D:
    """
    A node (joint) in 3D space.

    Nodes are identified by their position in ``Job.nodes`` (dense,
    0-based). That position is what the DOF manager uses:

        global_dof = 6 × node_index + local_dof

    Parameters:
    -----------
    x, y, z : float
        Coordinates in the global coordinate system (m)

    Examples:
    ---------
    >>> n0 = Node3D(0.0, 0.0, 0.0)
    >>> n1 = Node3D(3.0, 0.0, 0.0)
    >>> n1.coords
    array([3., 0., 0.])
    """
    x: float
    y: float
    z: float

    @property
    def coords(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)


@dataclass(frozen=True)
class BeamProps:
    """
    Section properties of a 3D beam element.

    Parameters:
    -----------
    EA : float
        Axial stiffness (Young's modulus × area)
    EIz : float
        Bending stiffness about the local z-axis (bending in the local x-y plane)
    EIy : float
        Bending stiffness about the local y-axis (bending in the local x-z plane)
    GJ : float
        Torsional stiffness (shear modulus × torsion constant)
    normal_vec : Tuple[float, float, float]
        Reference vector giving the direction of the local y-axis, in global
        coordinates. Does not need to be unit length.

    Examples:
    ---------
    >>> # Steel 100x100 box, strong axis vertical
    >>> props = BeamProps(EA=4.2e8, EIz=1.1e6, EIy=1.1e6, GJ=8.5e5,
    ...                   normal_vec=(0.0, 0.0, 1.0))
    """
    EA: float
    EIz: float
    EIy: float
    GJ: float
    normal_vec: Tuple[float, float, float]

    def __post_init__(self):
        # Accept lists / arrays but store an immutable tuple
        object.__setattr__(self, "normal_vec", tuple(float(v) for v in self.normal_vec))
        if len(self.normal_vec) != 3:
            raise ValueError(f"normal_vec must have 3 components, got {len(self.normal_vec)}")


@dataclass(frozen=True)
class Beam3D:
    """
    A 3D Euler–Bernoulli beam element connecting two nodes.

    The order of the nodes matters: the local x-axis points from ``ni``
    (node0) to ``nj`` (node1). Element end forces are reported in that
    local frame.

    The element stiffness matrix is 12×12 (6 DOFs at each of 2 nodes):
        [ux_i, uy_i, uz_i, rx_i, ry_i, rz_i, ux_j, uy_j, uz_j, rx_j, ry_j, rz_j]

    Parameters:
    -----------
    ni : int
        Index of start node (node0)
    nj : int
        Index of end node (node1)
    props : BeamProps
        Section stiffnesses and orientation of this element
    """
    ni: int
    nj: int
    props: BeamProps
