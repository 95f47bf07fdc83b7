#!/usr/bin/env python3
"""
RUN_SPACE_FRAME: 3D Frame Analysis Demo
=======================================

A one-bay, one-storey space frame:
1. Four clamped columns, four roof beams
2. One roof beam hinged to its column through a tie (stiff in
   translation, soft in rotation)
3. The two far corners forced to sway together (equation constraint)
4. Gravity + wind loads
5. Print displacements, reactions and member end forces

Run with:
    python demos/run_space_frame.py
    python demos/run_space_frame.py --save results/
"""

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from fea3d import (
    BC, Beam3D, BeamProps, Equation, EquationTerm, Force, Job, Node3D, Options, Tie, solve
)


def print_header(text: str):
    """Print a formatted section header."""
    print("\n" + "=" * 60)
    print(f"  {text}")
    print("=" * 60)


def build_frame(span: float = 6.0, depth: float = 4.0, height: float = 3.5):
    """
    Nodes:
        0-3  column bases (z = 0)
        4-7  column tops  (z = height)
        8    extra roof node coincident with node 4, tied to it
    """
    # Steel sections (SI units)
    E = 210e9
    G = 81e9
    column = BeamProps(EA=E * 5.3e-3, EIz=E * 3.7e-5, EIy=E * 1.3e-5, GJ=G * 2.0e-7, normal_vec=(1, 0, 0))
    beam = BeamProps(EA=E * 4.0e-3, EIz=E * 2.8e-5, EIy=E * 1.0e-5, GJ=G * 1.5e-7, normal_vec=(0, 0, 1))

    corners = [(0.0, 0.0), (span, 0.0), (span, depth), (0.0, depth)]
    nodes = [Node3D(x, y, 0.0) for x, y in corners]
    nodes += [Node3D(x, y, height) for x, y in corners]
    nodes.append(Node3D(0.0, 0.0, height))

    elems = [Beam3D(i, i + 4, column) for i in range(4)]
    elems += [
        Beam3D(8, 5, beam),   # starts at the tied node
        Beam3D(5, 6, beam),
        Beam3D(6, 7, beam),
        Beam3D(7, 4, beam),
    ]
    return Job(nodes=nodes, elems=elems)


def main():
    parser = argparse.ArgumentParser(description='3D space frame demo')
    parser.add_argument('--save', type=Path, default=None, help='Directory for result CSVs')
    args = parser.parse_args()

    print_header("3D SPACE FRAME ANALYSIS")

    # =========================================================================
    # STEP 1: MODEL
    # =========================================================================
    job = build_frame()
    print(f"\n{len(job.nodes)} nodes, {len(job.elems)} elements")

    bcs = [BC(n, dof) for n in range(4) for dof in range(6)]

    # Pinned roof joint: rigid in translation, flexible in rotation
    ties = [Tie(4, 8, lmult=1e13, rmult=1e3)]

    # Roof corners 5 and 7 sway together in x
    equations = [Equation([EquationTerm(5, 0, 1.0), EquationTerm(7, 0, -1.0)])]

    forces = [Force(n, 2, -25e3) for n in range(4, 8)]   # gravity (N)
    forces += [Force(4, 0, 8e3), Force(7, 0, 8e3)]        # wind (N)

    # =========================================================================
    # STEP 2: SOLVE
    # =========================================================================
    print_header("STEP 2: Solve")

    options = Options(verbose=True)
    if args.save is not None:
        args.save.mkdir(parents=True, exist_ok=True)
        options = Options(
            verbose=True,
            save_nodal_displacements=True,
            save_nodal_forces=True,
            save_tie_forces=True,
            save_elemental_forces=True,
            save_report=True,
        )

    summary = solve(job, bcs, forces, ties, equations, options, output_dir=args.save)

    # =========================================================================
    # STEP 3: RESULTS
    # =========================================================================
    frames = summary.to_frames()

    with pd.option_context('display.float_format', '{:.4e}'.format, 'display.width', 120):
        print_header("Roof displacements (m, rad)")
        print(frames['nodal_displacements'].loc[4:8])

        print_header("Base reactions (N, N·m)")
        print(frames['nodal_forces'].loc[0:3])

        print_header("Tie forces")
        print(frames['tie_forces'])

        print_header("Column axial forces (N)")
        print(frames['element_forces'].loc[0:3, ['Fx_0', 'Fx_1']])

    # Equilibrium check: reactions balance the applied loads
    total = summary.nodal_forces[:, :3].sum(axis=0)
    print(f"\nΣ nodal forces (should be ~0): {np.array2string(total, precision=3)}")
    print(f"Roof sway ux5 = {summary.nodal_displacements[5, 0]:.4e}, "
          f"ux7 = {summary.nodal_displacements[7, 0]:.4e}")


if __name__ == "__main__":
    main()
