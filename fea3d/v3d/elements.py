# fea3d/v3d/elements.py
"""
3D BEAM ELEMENT: Local Stiffness, Rotation and Global Stiffness
===============================================================

PURPOSE:
--------
This module computes the 12×12 stiffness matrix of a 3D Euler–Bernoulli
beam, first in the element's LOCAL frame, then rotated into the GLOBAL
frame used for assembly.

ENGINEERING DERIVATION:
-----------------------
In local coordinates (x' along the member, node0 → node1) the four
deformation modes are uncoupled:

    axial        EA/L                           DOFs  0, 6
    torsion      GJ/L                           DOFs  3, 9
    bending x-y  12EIz/L³, 6EIz/L², 4EIz/L, 2EIz/L   DOFs 1, 5, 7, 11
    bending x-z  12EIy/L³, 6EIy/L², 4EIy/L, 2EIy/L   DOFs 2, 4, 8, 10

The x-z plane carries the opposite sign on the 6EI/L² coupling terms:
a positive rotation about local y lifts the member towards -z
(right-hand rule), whereas a positive rotation about z lifts it towards +y.

The local frame is built from the member axis and the section's
orientation vector:

    x = unit(p1 - p0)
    z = unit(x × normal_vec)
    y = z × x

stacked as the ROWS of a 3×3 rotation matrix R. The 12×12 transformation
T repeats R four times along the diagonal (translations and rotations at
both ends), and

    ke_global = Tᵀ × k_local × T

The product k_local × T is kept: it maps GLOBAL element displacements
straight to LOCAL end forces, which is what force recovery needs.
"""

from typing import Sequence, Tuple

import numpy as np

from ..errors import GeometryError
from .model import Node3D, Beam3D, BeamProps


# Cross products shorter than this (relative to |normal_vec|) count as collinear
COLLINEAR_TOLERANCE = 1e-12


def element_length(nodes: Sequence[Node3D], element: Beam3D) -> float:
    """
    Length of a beam element.

    Raises:
    -------
    GeometryError
        If the element has zero or non-finite length
    """
    ni = nodes[element.ni]
    nj = nodes[element.nj]

    L = float(np.linalg.norm(nj.coords - ni.coords))

    if not np.isfinite(L) or L <= 0.0:
        raise GeometryError(
            f"Element {element.ni}->{element.nj} has invalid length {L} "
            f"(node {element.ni} at ({ni.x}, {ni.y}, {ni.z}), "
            f"node {element.nj} at ({nj.x}, {nj.y}, {nj.z}))"
        )
    return L


def check_geometry(nodes: Sequence[Node3D], elements: Sequence[Beam3D]) -> None:
    """
    Verify every element has a valid length and local frame.

    Run before assembly so a bad element aborts the analysis before any
    matrix is built.

    Raises:
    -------
    GeometryError
        For the first degenerate element
    """
    for element in elements:
        element_length(nodes, element)
        beam3d_rotation(nodes[element.ni].coords, nodes[element.nj].coords, element.props.normal_vec)


def beam3d_local_stiffness(EA: float, EIz: float, EIy: float, GJ: float, L: float) -> np.ndarray:
    """
    Local stiffness matrix in element local coords (x along member).

    DOF order: [ux_i, uy_i, uz_i, rx_i, ry_i, rz_i, ux_j, uy_j, uz_j, rx_j, ry_j, rz_j]
    """
    EA_L = EA / L
    GJ_L = GJ / L

    L2 = L * L
    L3 = L2 * L

    # bending in the local x-y plane (about z)
    k12z = 12.0 * EIz / L3
    k6z = 6.0 * EIz / L2
    k4z = 4.0 * EIz / L
    k2z = 2.0 * EIz / L

    # bending in the local x-z plane (about y)
    k12y = 12.0 * EIy / L3
    k6y = 6.0 * EIy / L2
    k4y = 4.0 * EIy / L
    k2y = 2.0 * EIy / L

    k = np.zeros((12, 12), dtype=float)

    k[0, 0] = EA_L;    k[0, 6] = -EA_L
    k[6, 0] = -EA_L;   k[6, 6] = EA_L

    k[3, 3] = GJ_L;    k[3, 9] = -GJ_L
    k[9, 3] = -GJ_L;   k[9, 9] = GJ_L

    k[1, 1] = k12z;    k[1, 5] = k6z;     k[1, 7] = -k12z;   k[1, 11] = k6z
    k[5, 1] = k6z;     k[5, 5] = k4z;     k[5, 7] = -k6z;    k[5, 11] = k2z
    k[7, 1] = -k12z;   k[7, 5] = -k6z;    k[7, 7] = k12z;    k[7, 11] = -k6z
    k[11, 1] = k6z;    k[11, 5] = k2z;    k[11, 7] = -k6z;   k[11, 11] = k4z

    k[2, 2] = k12y;    k[2, 4] = -k6y;    k[2, 8] = -k12y;   k[2, 10] = -k6y
    k[4, 2] = -k6y;    k[4, 4] = k4y;     k[4, 8] = k6y;     k[4, 10] = k2y
    k[8, 2] = -k12y;   k[8, 4] = k6y;     k[8, 8] = k12y;    k[8, 10] = k6y
    k[10, 2] = -k6y;   k[10, 4] = k2y;    k[10, 8] = k6y;    k[10, 10] = k4y

    return k


def beam3d_rotation(p0: np.ndarray, p1: np.ndarray, normal_vec: Sequence[float]) -> np.ndarray:
    """
    3×3 rotation matrix whose rows are the local x, y, z axes in global coords.

    Parameters:
    -----------
    p0, p1 : np.ndarray
        Coordinates of node0 and node1
    normal_vec : Sequence[float]
        Orientation vector for the local y-axis

    Returns:
    --------
    np.ndarray
        R with R @ v_global = v_local

    Raises:
    -------
    GeometryError
        If the element has zero length, or normal_vec is zero or parallel
        to the element axis

    Notes:
    ------
    If normal_vec is not exactly perpendicular to the member, only its
    component perpendicular to the axis is used (y = z × x), which keeps R
    orthonormal. For a perpendicular normal_vec this is just unit(normal_vec).
    Solvers that take y = unit(normal_vec) directly give different results
    for a non-perpendicular normal_vec; pass a perpendicular vector to
    match them.

    Example:
    --------
    >>> R = beam3d_rotation(np.zeros(3), np.array([2.0, 0, 0]), (0, 1, 0))
    >>> R
    array([[1., 0., 0.],
           [0., 1., 0.],
           [0., 0., 1.]])
    """
    axis = np.asarray(p1, dtype=float) - np.asarray(p0, dtype=float)
    L = np.linalg.norm(axis)
    if not np.isfinite(L) or L <= 0.0:
        raise GeometryError(f"Cannot build a local frame for a zero-length element ({p0} -> {p1})")
    nx = axis / L

    v = np.asarray(normal_vec, dtype=float)
    v_norm = np.linalg.norm(v)
    if not np.isfinite(v_norm) or v_norm <= 0.0:
        raise GeometryError(f"Orientation vector {tuple(v)} has zero or non-finite length")

    z = np.cross(nx, v / v_norm)
    z_norm = np.linalg.norm(z)
    if z_norm <= COLLINEAR_TOLERANCE:
        raise GeometryError(
            f"Orientation vector {tuple(v)} is parallel to the element axis {tuple(nx)}; "
            f"supply a non-collinear reference vector"
        )
    nz = z / z_norm
    ny = np.cross(nz, nx)

    return np.array([nx, ny, nz], dtype=float)


def beam3d_transform(R: np.ndarray) -> np.ndarray:
    """12×12 block-diagonal transform (R repeated once per DOF triple)."""
    T = np.zeros((12, 12), dtype=float)
    for i in range(4):
        T[3*i:3*i + 3, 3*i:3*i + 3] = R
    return T


def beam3d_element_matrices(
    nodes: Sequence[Node3D],
    element: Beam3D
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Compute the global stiffness of one element plus its force-recovery matrix.

    This is a pure function of (nodes, element), so elements can be
    processed in any order or in parallel.

    Parameters:
    -----------
    nodes : Sequence[Node3D]
        All nodes of the model, indexed by node number
    element : Beam3D
        The beam element

    Returns:
    --------
    Tuple[np.ndarray, np.ndarray]
        (ke_global, klocal_r), both 12×12:
        - ke_global = Tᵀ × k_local × T, DOF order [node0 (6), node1 (6)]
        - klocal_r  = k_local × T, maps global element displacements to
          local end forces

    Example:
    --------
    >>> nodes = [Node3D(0, 0, 0), Node3D(2, 0, 0)]
    >>> beam = Beam3D(0, 1, BeamProps(1e6, 1e4, 1e4, 1e4, (0, 1, 0)))
    >>> ke, kr = beam3d_element_matrices(nodes, beam)
    >>> ke[0, 0]  # EA/L
    500000.0
    """
    L = element_length(nodes, element)
    p = element.props

    k_local = beam3d_local_stiffness(p.EA, p.EIz, p.EIy, p.GJ, L)
    R = beam3d_rotation(nodes[element.ni].coords, nodes[element.nj].coords, p.normal_vec)
    T = beam3d_transform(R)

    klocal_r = k_local @ T
    ke_global = T.T @ klocal_r

    return ke_global, klocal_r
