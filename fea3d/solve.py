# fea3d/solve.py
"""
SOLVE: One static linear analysis, end to end
=============================================

    validate → assemble K → add constraints → prune → analyze pattern
             → factorize → check conditioning → solve → recover forces
             → round → save files

Each phase consumes the complete output of the previous one; nothing
runs concurrently with the factorization. Either a complete Summary is
returned or an exception is raised:

    InvalidModelError / GeometryError   bad input, raised before assembly
    MechanismError                      singular system (unstable structure,
                                        duplicate or conflicting constraints)
    ExportError                         a result file could not be written;
                                        ``err.summary`` holds the results

USAGE:
------
    from fea3d import Job, Node3D, Beam3D, BeamProps, BC, Force, solve

    props = BeamProps(EA=2.1e9, EIz=1.7e6, EIy=1.7e6, GJ=1.3e6, normal_vec=(0, 0, 1))
    job = Job(nodes=[Node3D(0, 0, 0), Node3D(3, 0, 0)], elems=[Beam3D(0, 1, props)])

    bcs = [BC(0, dof, 0.0) for dof in range(6)]    # clamp node 0
    forces = [Force(1, 2, -1000.0)]                # 1 kN down at node 1

    summary = solve(job, bcs, forces)
    summary.nodal_displacements[1, 2]              # tip deflection PL³/3EI
"""

from time import perf_counter
from typing import Optional, Sequence

from .io.export import save_summary
from .kernel.assemble import GlobalStiffAssembler, assemble_global_F
from .kernel.constraints import augment, bc_rhs, prune
from .kernel.dof import DOFManager
from .kernel.solve import SparseLUSolver
from .model import BC, Equation, Force, Job, Tie, validate_inputs
from .options import Options
from .post import element_forces, nodal_displacements, nodal_forces, round_small, tie_forces
from .summary import Summary


def _ms_since(start: float) -> float:
    return (perf_counter() - start) * 1000.0


def solve(
    job: Job,
    bcs: Sequence[BC] = (),
    forces: Sequence[Force] = (),
    ties: Sequence[Tie] = (),
    equations: Sequence[Equation] = (),
    options: Optional[Options] = None,
    output_dir: Optional[str] = None,
) -> Summary:
    """
    Run a static linear analysis of a 3D beam frame.

    Args:
        job: Nodes and elements
        bcs: Prescribed displacements (enforced exactly)
        forces: Nodal point loads (additive)
        ties: Penalty-spring couplings between node pairs
        equations: Linear multi-point constraints Σ c·d = 0
        options: Analysis and output options (defaults: Options())
        output_dir: Directory for result files requested by options

    Returns:
        Summary with displacements, nodal forces, tie forces, element
        forces and phase timings

    Raises:
        InvalidModelError: Out-of-range index or degenerate geometry
        MechanismError: The augmented system is singular
        ExportError: Writing a requested file failed (analysis complete)
    """
    options = options or Options()
    total_start = perf_counter()

    validate_inputs(job, bcs, forces, ties, equations)

    dof = DOFManager()
    n_nodes = len(job.nodes)
    size = dof.system_size(n_nodes, len(bcs), len(equations))

    summary = Summary(
        num_nodes=n_nodes,
        num_elems=len(job.elems),
        num_bcs=len(bcs),
        num_ties=len(ties),
        num_equations=len(equations),
    )

    # ------------------------------------------------------------------
    # Assembly: elements + ties (penalty springs live inside K)
    # ------------------------------------------------------------------
    start = perf_counter()
    assembler = GlobalStiffAssembler(dof, max_workers=options.max_workers, show_progress=options.verbose)
    K = assembler.assemble(job, ties, size)
    summary.assembly_time_in_ms = _ms_since(start)

    if options.verbose:
        print(f"Global stiffness matrix assembled in {summary.assembly_time_in_ms:.3f} ms "
              f"({n_nodes} nodes, {size} unknowns). Now preprocessing factorization...")

    # ------------------------------------------------------------------
    # Constraints: Lagrange multipliers for BCs and equations
    # ------------------------------------------------------------------
    A = augment(K, bcs, equations, n_nodes, dof)
    F = assemble_global_F(size, forces, dof)
    bc_rhs(F, bcs, n_nodes, dof)
    A = prune(A, options.prune_tolerance)

    # ------------------------------------------------------------------
    # Solve
    # ------------------------------------------------------------------
    solver = SparseLUSolver(options.permc_spec, options.cond_limit)

    start = perf_counter()
    solver.analyze_pattern(A)
    summary.preprocessing_time_in_ms = _ms_since(start)

    if options.verbose:
        print(f"Preprocessing step of factorization completed in {summary.preprocessing_time_in_ms:.3f} ms. "
              f"Now factorizing global stiffness matrix ({A.nnz} nonzeros)...")

    start = perf_counter()
    solver.factorize(A)
    solver.check_conditioning(dof.ndof(n_nodes))
    summary.factorization_time_in_ms = _ms_since(start)

    if options.verbose:
        print(f"Factorization completed in {summary.factorization_time_in_ms:.3f} ms. Now solving system...")

    start = perf_counter()
    x = solver.solve(F)
    summary.solve_time_in_ms = _ms_since(start)

    if options.verbose:
        print(f"System was solved in {summary.solve_time_in_ms:.3f} ms.")

    # ------------------------------------------------------------------
    # Force recovery (from unrounded displacements)
    # ------------------------------------------------------------------
    disp = nodal_displacements(x, n_nodes)

    start = perf_counter()
    forces_at_nodes = nodal_forces(K, disp)
    summary.nodal_forces_solve_time_in_ms = _ms_since(start)

    start = perf_counter()
    forces_in_ties = tie_forces(ties, disp)
    summary.tie_forces_solve_time_in_ms = _ms_since(start)

    start = perf_counter()
    forces_in_elems = element_forces(job, assembler.klocal_r, disp)
    summary.element_forces_solve_time_in_ms = _ms_since(start)

    eps = options.epsilon
    summary.nodal_displacements = round_small(disp, eps)
    summary.nodal_forces = round_small(forces_at_nodes, eps)
    summary.tie_forces = round_small(forces_in_ties, eps)
    summary.element_forces = round_small(forces_in_elems, eps)

    summary.total_time_in_ms = _ms_since(total_start)

    # ------------------------------------------------------------------
    # Output (the Summary is final at this point)
    # ------------------------------------------------------------------
    if options.saves_anything:
        start = perf_counter()
        written = save_summary(summary, options, output_dir)
        summary.file_save_time_in_ms = _ms_since(start)
        if options.verbose:
            for path in written:
                print(f"Writing to: {path}")

    if options.verbose:
        print(summary.full_report())

    return summary
