# fea3d/model.py
# Job, boundary conditions, loads, ties, equations + input validation

import operator
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Sequence, Tuple

import numpy as np

from .errors import InvalidModelError
from .v3d.elements import check_geometry
from .v3d.model import Node3D, Beam3D, BeamProps


class DOF(IntEnum):
    """Local degrees of freedom of a node (the last three are rotations)."""
    DISPLACEMENT_X = 0
    DISPLACEMENT_Y = 1
    DISPLACEMENT_Z = 2
    ROTATION_X = 3
    ROTATION_Y = 4
    ROTATION_Z = 5

    # Not a DOF; the count used for all index arithmetic
    NUM_DOFS = 6


DOF_PER_NODE = int(DOF.NUM_DOFS)


@dataclass(frozen=True)
class BC:
    """Prescribed displacement ``value`` at ``dof`` of ``node``."""
    node: int
    dof: int
    value: float = 0.0


@dataclass(frozen=True)
class Force:
    """Point load ``value`` at ``dof`` of ``node``. Loads on the same DOF add up."""
    node: int
    dof: int
    value: float


@dataclass(frozen=True)
class Tie:
    """
    Elastic coupling between two nodes across all 6 DOFs.

    Modeled as 6 penalty springs: translational DOFs use ``lmult``,
    rotational DOFs use ``rmult``. Large values approximate a rigid
    connection; too large and the factorization loses accuracy.
    """
    node_a: int
    node_b: int
    lmult: float
    rmult: float

    def spring_constant(self, dof: int) -> float:
        return self.lmult if dof < 3 else self.rmult


@dataclass(frozen=True)
class EquationTerm:
    node: int
    dof: int
    coefficient: float


@dataclass(frozen=True)
class Equation:
    """
    Linear multi-point constraint: Σ coefficient · displacement = 0.

    Example: ``Equation([EquationTerm(1, 2, 1.0), EquationTerm(4, 2, -1.0)])``
    forces uz at node 1 to equal uz at node 4.
    """
    terms: Tuple[EquationTerm, ...]

    def __post_init__(self):
        object.__setattr__(self, "terms", tuple(self.terms))


@dataclass(frozen=True)
class Job:
    """
    Immutable analysis input: nodes and the elements connecting them.

    ``Job.props[i]`` is the property set of ``Job.elems[i]``.
    """
    nodes: Tuple[Node3D, ...]
    elems: Tuple[Beam3D, ...]

    def __post_init__(self):
        object.__setattr__(self, "nodes", tuple(self.nodes))
        object.__setattr__(self, "elems", tuple(self.elems))

    @property
    def props(self) -> List[BeamProps]:
        return [e.props for e in self.elems]

    @property
    def coords(self) -> np.ndarray:
        """Node coordinates as an (n_nodes, 3) array."""
        if not self.nodes:
            return np.zeros((0, 3), dtype=float)
        return np.array([[n.x, n.y, n.z] for n in self.nodes], dtype=float)


def _check_index(value, what: str, kind: str) -> int:
    try:
        return operator.index(value)
    except TypeError:
        raise InvalidModelError(f"{what} has non-integer {kind} index {value!r}") from None


def _check_node(node: int, num_nodes: int, what: str) -> None:
    node = _check_index(node, what, "node")
    if not 0 <= node < num_nodes:
        raise InvalidModelError(f"{what} references node {node}, but the model has {num_nodes} nodes")


def _check_dof(dof: int, what: str) -> None:
    dof = _check_index(dof, what, "DOF")
    if not 0 <= dof < DOF_PER_NODE:
        raise InvalidModelError(f"{what} references DOF {dof}; valid DOFs are 0..{DOF_PER_NODE - 1}")


def _check_finite(value: float, what: str, name: str) -> None:
    if not np.isfinite(value):
        raise InvalidModelError(f"{what} has non-finite {name} {value!r}")


def validate_inputs(
    job: Job,
    bcs: Sequence[BC],
    forces: Sequence[Force],
    ties: Sequence[Tie],
    equations: Sequence[Equation],
) -> None:
    """
    Check every index in the analysis input before anything is assembled.

    Raises:
        InvalidModelError: on the first out-of-range or non-integer
            node/DOF, a non-finite load, prescribed value, spring
            constant or coefficient, an element connecting a node to
            itself, a tie from a node to itself, or an equation without
            terms.
        GeometryError: for a zero-length element or an orientation
            vector parallel to its element.
    """
    n = len(job.nodes)
    if n == 0:
        raise InvalidModelError("Job has no nodes")

    for i, elem in enumerate(job.elems):
        _check_node(elem.ni, n, f"Element {i}")
        _check_node(elem.nj, n, f"Element {i}")
        if elem.ni == elem.nj:
            raise InvalidModelError(f"Element {i} connects node {elem.ni} to itself")

    for i, bc in enumerate(bcs):
        _check_node(bc.node, n, f"Boundary condition {i}")
        _check_dof(bc.dof, f"Boundary condition {i}")
        _check_finite(bc.value, f"Boundary condition {i}", "value")

    for i, f in enumerate(forces):
        _check_node(f.node, n, f"Force {i}")
        _check_dof(f.dof, f"Force {i}")
        _check_finite(f.value, f"Force {i}", "value")

    for i, tie in enumerate(ties):
        _check_node(tie.node_a, n, f"Tie {i}")
        _check_node(tie.node_b, n, f"Tie {i}")
        if tie.node_a == tie.node_b:
            raise InvalidModelError(f"Tie {i} connects node {tie.node_a} to itself")
        _check_finite(tie.lmult, f"Tie {i}", "lmult")
        _check_finite(tie.rmult, f"Tie {i}", "rmult")

    for i, eq in enumerate(equations):
        if not eq.terms:
            raise InvalidModelError(f"Equation {i} has no terms")
        for term in eq.terms:
            _check_node(term.node, n, f"Equation {i}")
            _check_dof(term.dof, f"Equation {i}")
            _check_finite(term.coefficient, f"Equation {i}", "coefficient")

    check_geometry(job.nodes, job.elems)
