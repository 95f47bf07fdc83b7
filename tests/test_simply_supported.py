import numpy as np

from fea3d import BC, DOF, Beam3D, BeamProps, Force, Job, Node3D, solve


def test_simply_supported_midspan_pointload():
    """
    A beam supported at both ends with a point load at midspan.

    Supports (6 rigid-body modes removed, rotations ry/rz free at the ends):
        node 0: ux, uy, uz, rx
        node 2: uy, uz

    Closed-form checks:
        reactions      R = P/2 at each end
        deflection     δ = P·L³ / (48·EI)
    """
    L = 4.0
    EIz = 1.68e6
    P = 1000.0

    props = BeamProps(EA=2.1e9, EIz=EIz, EIy=8.4e5, GJ=8.1e5, normal_vec=(0, 1, 0))
    job = Job(
        nodes=[Node3D(0, 0, 0), Node3D(L / 2, 0, 0), Node3D(L, 0, 0)],
        elems=[Beam3D(0, 1, props), Beam3D(1, 2, props)],
    )

    bcs = [
        BC(0, DOF.DISPLACEMENT_X),
        BC(0, DOF.DISPLACEMENT_Y),
        BC(0, DOF.DISPLACEMENT_Z),
        BC(0, DOF.ROTATION_X),
        BC(2, DOF.DISPLACEMENT_Y),
        BC(2, DOF.DISPLACEMENT_Z),
    ]
    forces = [Force(1, DOF.DISPLACEMENT_Y, -P)]

    s = solve(job, bcs, forces)

    # Reactions
    assert np.isclose(s.nodal_forces[0, 1], P / 2, rtol=1e-8)
    assert np.isclose(s.nodal_forces[2, 1], P / 2, rtol=1e-8)

    # Midspan deflection
    assert np.isclose(s.nodal_displacements[1, 1], -P * L**3 / (48 * EIz), rtol=1e-10)

    # Symmetric: end rotations equal and opposite, midspan rotation zero
    assert np.isclose(s.nodal_displacements[0, 5], -s.nodal_displacements[2, 5], rtol=1e-10)
    assert np.isclose(s.nodal_displacements[1, 5], 0.0, atol=1e-14)

    # Unloaded midspan node: K·d there is the applied load
    assert np.isclose(s.nodal_forces[1, 1], -P, rtol=1e-8)
