# tests/test_kernel.py
"""
KERNEL TESTS: DOF indexing, sparse assembly, constraints, sparse solve
======================================================================
"""

import numpy as np
import pytest
from scipy.sparse import csc_matrix

from fea3d.kernel.assemble import (
    GlobalStiffAssembler,
    assemble_global_F,
    assemble_global_K,
    sparse_triplets,
)
from fea3d.kernel.constraints import augment, bc_rhs, prune, tie_triplets
from fea3d.kernel.dof import DOFManager
from fea3d.kernel.solve import SparseLUSolver, solve_sparse
from fea3d.errors import MechanismError
from fea3d.model import BC, Equation, EquationTerm, Force, Job, Tie
from fea3d.v3d.elements import beam3d_element_matrices
from fea3d.v3d.model import Beam3D, BeamProps, Node3D


PROPS = BeamProps(EA=2.1e9, EIz=1.68e6, EIy=8.4e5, GJ=8.1e5, normal_vec=(0, 0, 1))


def make_scrambled_job():
    """
    4 nodes, elements numbered out of order (3→0 and 1→3), node 2 unused.
    Catches any assembly that assumes node1 = node0 + 1.
    """
    nodes = [Node3D(0, 0, 0), Node3D(0.5, 0.5, 3), Node3D(5, 5, 5), Node3D(2, 1, 0)]
    elems = [Beam3D(3, 0, PROPS), Beam3D(1, 3, PROPS)]
    return Job(nodes=nodes, elems=elems)


def dense_reference_K(job, dof):
    """Textbook dense scatter of each ke_global into K."""
    ndof = dof.ndof(len(job.nodes))
    K = np.zeros((ndof, ndof))
    for elem in job.elems:
        ke, _ = beam3d_element_matrices(job.nodes, elem)
        dmap = dof.element_dof_map([elem.ni, elem.nj])
        K[np.ix_(dmap, dmap)] += ke
    return K


class TestDOFManager:

    def test_indices(self):
        dof = DOFManager()
        assert dof.idx(0, 0) == 0
        assert dof.idx(2, 5) == 17
        assert dof.ndof(3) == 18
        assert dof.node_dofs(1) == [6, 7, 8, 9, 10, 11]
        assert dof.element_dof_map([3, 0]) == [18, 19, 20, 21, 22, 23, 0, 1, 2, 3, 4, 5]

    def test_multiplier_layout(self):
        """BC multipliers follow the nodal DOFs, equation multipliers follow the BCs."""
        dof = DOFManager()
        assert dof.multiplier_idx(n_nodes=2, constraint_id=0) == 12
        assert dof.system_size(2, n_bcs=3, n_equations=2) == 17


class TestAssembly:

    def test_triplets_use_each_node_block(self):
        ke = np.zeros((12, 12))
        ke[0, 0] = 1.0
        ke[6, 11] = 2.0
        rows, cols, vals = sparse_triplets(ke, node0=4, node1=1)

        entries = dict(zip(zip(rows.tolist(), cols.tolist()), vals.tolist()))
        assert entries == {(24, 24): 1.0, (6, 11): 2.0}

    def test_non_sequential_nodes_match_dense_scatter(self):
        job = make_scrambled_job()
        dof = DOFManager()

        K = GlobalStiffAssembler(dof).assemble(job, [], dof.ndof(len(job.nodes)))

        np.testing.assert_allclose(K.toarray(), dense_reference_K(job, dof), rtol=1e-12, atol=1e-6)

    def test_unused_node_has_empty_rows(self):
        job = make_scrambled_job()
        K = GlobalStiffAssembler().assemble(job, [], 24).toarray()
        assert not np.any(K[12:18, :])

    def test_duplicates_are_summed(self):
        triplets = [
            (np.array([0, 1]), np.array([0, 1]), np.array([1.0, 2.0])),
            (np.array([0]), np.array([0]), np.array([3.0])),
        ]
        K = assemble_global_K(3, triplets)
        assert K[0, 0] == 4.0
        assert K[1, 1] == 2.0
        assert K.shape == (3, 3)

    def test_matrix_is_sized_for_multipliers(self):
        job = make_scrambled_job()
        K = GlobalStiffAssembler().assemble(job, [], 30)
        assert K.shape == (30, 30)
        assert K[:, 24:].nnz == 0

    def test_threaded_assembly_matches_sequential(self):
        nodes = [Node3D(float(i), np.sin(i), 0.1 * i * i) for i in range(12)]
        elems = [Beam3D(i, i + 1, PROPS) for i in range(11)]
        job = Job(nodes=nodes, elems=elems)

        seq = GlobalStiffAssembler()
        par = GlobalStiffAssembler(max_workers=4)
        K_seq = seq.assemble(job, [], 72)
        K_par = par.assemble(job, [], 72)

        np.testing.assert_array_equal(K_seq.toarray(), K_par.toarray())
        for a, b in zip(seq.klocal_r, par.klocal_r):
            np.testing.assert_array_equal(a, b)

    def test_forces_accumulate(self):
        F = assemble_global_F(12, [Force(1, 2, -1000.0), Force(1, 2, -500.0), Force(0, 3, 7.0)])
        assert F[8] == -1500.0
        assert F[3] == 7.0
        assert np.count_nonzero(F) == 2


class TestConstraints:

    def test_tie_penalty_entries(self):
        tie = Tie(node_a=0, node_b=1, lmult=10.0, rmult=20.0)
        K = assemble_global_K(12, [tie_triplets([tie])]).toarray()

        assert K[0, 0] == 10.0 and K[6, 6] == 10.0
        assert K[0, 6] == -10.0 and K[6, 0] == -10.0
        assert K[3, 3] == 20.0 and K[9, 3] == -20.0
        np.testing.assert_array_equal(K, K.T)

    def test_multiplier_placement(self):
        bcs = [BC(1, 2, 0.5), BC(0, 0)]
        equations = [Equation([EquationTerm(0, 1, 1.0), EquationTerm(1, 1, -1.0)])]
        n_nodes = 2
        size = DOFManager().system_size(n_nodes, len(bcs), len(equations))

        A = augment(csc_matrix((size, size)), bcs, equations, n_nodes).toarray()

        # BC i -> row/col 12 + i
        assert A[8, 12] == 1.0 and A[12, 8] == 1.0
        assert A[0, 13] == 1.0 and A[13, 0] == 1.0
        # equation 0 -> row/col 12 + 2 + 0
        assert A[14, 1] == 1.0 and A[1, 14] == 1.0
        assert A[14, 7] == -1.0 and A[7, 14] == -1.0
        np.testing.assert_array_equal(A, A.T)

    def test_augment_does_not_modify_input(self):
        K = csc_matrix(np.eye(13))
        augment(K, [BC(0, 0)], [], 2)
        np.testing.assert_array_equal(K.toarray(), np.eye(13))

    def test_bc_values_go_to_multiplier_rows(self):
        bcs = [BC(1, 2, 0.5), BC(0, 0, 0.0), BC(0, 1, 1e-20)]
        F = np.zeros(15)
        bc_rhs(F, bcs, num_nodes=2)

        assert F[12] == 0.5
        assert F[13] == 0.0
        assert F[14] == 0.0

    def test_prune_drops_small_entries(self):
        A = csc_matrix(np.array([[1.0, 1e-15], [-1e-16, 2.0]]))
        pruned = prune(A, 1e-14)

        assert pruned.nnz == 2
        assert A.nnz == 4


class TestSparseSolver:

    def test_matches_dense_solve(self):
        A = np.array([[4.0, 1.0, 0.0], [1.0, 3.0, 1.0], [0.0, 1.0, 0.0]])
        b = np.array([1.0, 2.0, 3.0])

        x = solve_sparse(csc_matrix(A), b)
        np.testing.assert_allclose(x, np.linalg.solve(A, b), rtol=1e-12)

    def test_structurally_singular_raises(self):
        A = csc_matrix(np.array([[1.0, 0.0], [0.0, 0.0]]))
        solver = SparseLUSolver()
        with pytest.raises(MechanismError, match="structurally singular"):
            solver.analyze_pattern(A)
        assert solver.structural_rank == 1

    def test_numerically_singular_raises(self):
        A = csc_matrix(np.array([[1.0, 1.0], [1.0, 1.0]]))
        solver = SparseLUSolver()
        solver.analyze_pattern(A)
        with pytest.raises(MechanismError):
            solver.factorize(A)

    def test_nearly_singular_stiffness_raises(self):
        """Round-off leaves a nonzero pivot, so only the conditioning check catches it."""
        A = csc_matrix(np.array([[1.0, 1.0], [1.0, 1.0 + 1e-15]]))
        solver = SparseLUSolver()
        solver.analyze_pattern(A)
        solver.factorize(A)

        with pytest.raises(MechanismError, match="Unstable structure"):
            solver.check_conditioning(ndof=2)
        assert solver.condition_estimate > 1e12

    def test_conditioning_ignores_multiplier_rows(self):
        # DOF 0 held by a multiplier; the free stiffness is 2 on DOF 1
        A = csc_matrix(np.array([[4.0, 0.0, 1.0], [0.0, 2.0, 0.0], [1.0, 0.0, 0.0]]))
        solver = SparseLUSolver()
        solver.factorize(A)

        assert solver.check_conditioning(ndof=2) == pytest.approx(2.0)

    def test_fully_prescribed_is_well_conditioned(self):
        A = csc_matrix(np.array([[4.0, 1.0], [1.0, 0.0]]))
        solver = SparseLUSolver()
        solver.factorize(A)

        assert solver.check_conditioning(ndof=1) == 1.0

    def test_solve_sparse_checks_conditioning_when_given_ndof(self):
        A = csc_matrix(np.array([[1.0, 1.0], [1.0, 1.0 + 1e-15]]))
        b = np.array([1.0, 0.0])

        solve_sparse(A, b)
        with pytest.raises(MechanismError):
            solve_sparse(A, b, ndof=2)

    def test_non_square_raises(self):
        with pytest.raises(MechanismError):
            SparseLUSolver().analyze_pattern(csc_matrix(np.ones((2, 3))))

    def test_unknown_ordering_rejected(self):
        with pytest.raises(ValueError):
            SparseLUSolver("METIS")
