# fea3d/kernel/solve.py
"""Sparse LU solve of the augmented system, with mechanism detection."""

from typing import Optional

import numpy as np
from scipy.sparse import csc_matrix
from scipy.sparse.csgraph import structural_rank
from scipy.sparse.linalg import splu

from ..errors import MechanismError

# Column orderings understood by SuperLU
PERMC_SPECS = ("NATURAL", "MMD_ATA", "MMD_AT_PLUS_A", "COLAMD")

# Max estimated condition number of the constrained stiffness
COND_LIMIT = 1e12


class SparseLUSolver:
    """
    Direct solver for the (indefinite) augmented stiffness system.

    The phases mirror a classic sparse direct solver and are called
    separately so each one can be timed:

        solver = SparseLUSolver()
        solver.analyze_pattern(A)        # structure only
        solver.factorize(A)              # numeric LU
        solver.check_conditioning(ndof)  # unrestrained rigid-body modes
        x = solver.solve(b)              # triangular solves

    The augmented matrix has zeros on the multiplier diagonal, so a
    Cholesky factorization does not apply; SuperLU with partial pivoting does.

    An unrestrained rigid-body mode rarely produces an exactly zero pivot:
    round-off leaves a pivot near eps·|K| and the solve "succeeds" with
    enormous displacements. check_conditioning() catches this from the
    stiffness block alone, so the scaling of the multiplier rows does not
    enter the estimate.

    Args:
        permc_spec: Column ordering used by SuperLU to limit fill-in
        cond_limit: Max estimated condition number of the constrained stiffness
    """

    def __init__(self, permc_spec: str = "COLAMD", cond_limit: float = COND_LIMIT):
        if permc_spec not in PERMC_SPECS:
            raise ValueError(f"Unknown column ordering {permc_spec!r}; expected one of {PERMC_SPECS}")
        self.permc_spec = permc_spec
        self.cond_limit = cond_limit
        self.structural_rank: Optional[int] = None
        self.condition_estimate: Optional[float] = None
        self._A: Optional[csc_matrix] = None
        self._lu = None

    def analyze_pattern(self, A: csc_matrix) -> None:
        """
        Check the sparsity structure before any arithmetic.

        Raises:
            MechanismError: If A is not square or is structurally singular
                (e.g. a node with no element, tie or constraint, or two
                boundary conditions on the same DOF)
        """
        n, m = A.shape
        if n != m:
            raise MechanismError(f"System matrix must be square, got {n}x{m}")
        if n == 0:
            raise MechanismError("System matrix is empty")

        self.structural_rank = int(structural_rank(A.tocsr()))
        if self.structural_rank < n:
            raise MechanismError(
                f"System matrix is structurally singular (structural rank {self.structural_rank} < {n}). "
                f"Check for unconnected nodes and duplicate or conflicting constraints."
            )

    def factorize(self, A: csc_matrix) -> None:
        """
        Numeric LU factorization.

        Raises:
            MechanismError: If SuperLU finds an exactly singular pivot
        """
        try:
            self._A = A.tocsc()
            self._lu = splu(self._A, permc_spec=self.permc_spec)
        except RuntimeError as e:
            raise MechanismError(
                f"Factorization failed: {e}. The structure is unstable (unrestrained "
                f"rigid-body motion) or over-constrained."
            ) from e

    def check_conditioning(self, ndof: int, iterations: int = 4, seed: int = 0) -> float:
        """
        Estimate the condition number of the stiffness restricted to the
        displacements the constraints allow, and reject it above cond_limit.

        Inverse iteration with the stored factors: solving with a load u on
        the first ``ndof`` rows and zero on the multiplier rows gives the
        constrained response y. The Rayleigh quotient (u·y)/(y·y) converges
        from above to the smallest constrained stiffness eigenvalue, and the
        largest stiffness diagonal bounds the largest eigenvalue from below.
        Both errors make the estimate smaller than the true condition number.

        Args:
            ndof: Number of displacement unknowns (6 per node)
            iterations: Inverse iteration steps
            seed: Seed of the random start vector

        Returns:
            The condition number estimate (inf for a mechanism, 1.0 when
            every displacement is prescribed)

        Raises:
            MechanismError: If the estimate exceeds cond_limit
        """
        if self._lu is None:
            raise RuntimeError("factorize() must be called before check_conditioning()")

        k_max = float(np.max(np.abs(self._A.diagonal()[:ndof]), initial=0.0))
        rhs = np.zeros(self._A.shape[0])
        u = np.random.default_rng(seed).standard_normal(ndof)

        cond = 1.0
        for _ in range(iterations):
            u /= np.linalg.norm(u)
            rhs[:ndof] = u
            y = self._lu.solve(rhs)[:ndof]

            if not np.all(np.isfinite(y)):
                cond = np.inf
                break
            yy = float(y @ y)
            if yy == 0.0:
                # Every displacement is prescribed
                break

            lam_min = float(u @ y) / yy
            cond = k_max / lam_min if lam_min > 0.0 else np.inf
            u = y

        self.condition_estimate = cond
        if not cond <= self.cond_limit:
            raise MechanismError(
                f"Unstable structure (estimated cond={cond:.2e} > {self.cond_limit:.0e}). "
                f"Some rigid-body motion is unrestrained; check supports and constraint equations."
            )
        return cond

    def solve(self, b: np.ndarray) -> np.ndarray:
        """
        Solve with the stored factors.

        Raises:
            MechanismError: If the solution contains inf/NaN
        """
        if self._lu is None:
            raise RuntimeError("factorize() must be called before solve()")

        x = self._lu.solve(np.asarray(b, dtype=float))

        if not np.all(np.isfinite(x)):
            raise MechanismError("Solution is not finite. Check supports and constraint equations.")
        return x


def solve_sparse(
    A: csc_matrix,
    b: np.ndarray,
    permc_spec: str = "COLAMD",
    ndof: Optional[int] = None,
    cond_limit: float = COND_LIMIT
) -> np.ndarray:
    """
    Solve A·x = b in one call (analyze, factorize, solve).

    Args:
        A: Square sparse system matrix
        b: Right-hand side, shape (n,)
        permc_spec: SuperLU column ordering
        ndof: Leading rows of A that belong to the stiffness block; when
            given, the constrained stiffness is checked against cond_limit
        cond_limit: Max estimated condition number

    Returns:
        x: Solution vector, shape (n,)

    Raises:
        MechanismError: If A is singular
    """
    solver = SparseLUSolver(permc_spec, cond_limit)
    solver.analyze_pattern(A)
    solver.factorize(A)
    if ndof is not None:
        solver.check_conditioning(ndof)
    return solver.solve(b)
