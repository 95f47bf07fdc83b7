# fea3d/v3d - 3D Beam Elements
"""
V3D: 3D STRUCTURAL ELEMENTS
===========================

This package provides the 3D frame element:
- Beam3D: Euler–Bernoulli beam (12×12 stiffness, 6 DOF/node)
  carrying axial force, biaxial bending and torsion

These elements work with the kernel for assembly and solving.

USAGE:
------
    from fea3d.v3d import Node3D, Beam3D, BeamProps, beam3d_element_matrices

    nodes = [Node3D(0.0, 0.0, 0.0), Node3D(3.0, 0.0, 0.0)]
    props = BeamProps(EA=2.1e9, EIz=1.7e6, EIy=1.7e6, GJ=1.3e6, normal_vec=(0, 0, 1))
    beam = Beam3D(0, 1, props)

    ke_global, klocal_r = beam3d_element_matrices(nodes, beam)
"""

from .model import Node3D, BeamProps, Beam3D
from .elements import (
    check_geometry,
    element_length,
    beam3d_local_stiffness,
    beam3d_rotation,
    beam3d_transform,
    beam3d_element_matrices,
)

__all__ = [
    'Node3D', 'BeamProps', 'Beam3D',
    'check_geometry', 'element_length', 'beam3d_local_stiffness', 'beam3d_rotation',
    'beam3d_transform', 'beam3d_element_matrices',
]
