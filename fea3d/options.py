# fea3d/options.py
"""
Analysis options and defaults.

Only ``epsilon``, ``prune_tolerance``, ``max_workers``, ``permc_spec`` and
``cond_limit`` affect the computation. The ``save_*`` flags, file
names and CSV settings are consumed by the exporter once the Summary is
complete.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from .kernel.solve import COND_LIMIT, PERMC_SPECS


@dataclass
class Options:
    """Options for one call to ``fea3d.solve``."""

    # Console output (phase timings, progress bar, final report)
    verbose: bool = False

    # Results with |value| < epsilon are reported as exactly 0.0
    epsilon: float = 1e-14

    # Stored matrix entries with |value| <= prune_tolerance are dropped before factorizing
    prune_tolerance: float = 1e-14

    # Thread pool size for element stiffness computation (None = sequential)
    max_workers: Optional[int] = None

    # SuperLU column ordering
    permc_spec: str = "COLAMD"

    # Max estimated condition number of the constrained stiffness; above it the
    # structure is reported as a mechanism
    cond_limit: float = COND_LIMIT

    # CSV formatting
    csv_precision: int = 14
    csv_delimiter: str = ","

    # Result files
    save_nodal_displacements: bool = False
    nodal_displacements_filename: str = "nodal_displacements.csv"

    save_nodal_forces: bool = False
    nodal_forces_filename: str = "nodal_forces.csv"

    save_tie_forces: bool = False
    tie_forces_filename: str = "tie_forces.csv"

    save_elemental_forces: bool = False
    elemental_forces_filename: str = "elemental_forces.csv"

    save_report: bool = False
    report_filename: str = "report.txt"

    def __post_init__(self):
        if self.epsilon < 0.0:
            raise ValueError(f"epsilon must be >= 0, got {self.epsilon}")
        if self.prune_tolerance < 0.0:
            raise ValueError(f"prune_tolerance must be >= 0, got {self.prune_tolerance}")
        if self.csv_precision < 1:
            raise ValueError(f"csv_precision must be >= 1, got {self.csv_precision}")
        if len(self.csv_delimiter) != 1:
            raise ValueError(f"csv_delimiter must be a single character, got {self.csv_delimiter!r}")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1 or None, got {self.max_workers}")
        if not self.cond_limit > 1.0:
            raise ValueError(f"cond_limit must be > 1, got {self.cond_limit}")
        if self.permc_spec not in PERMC_SPECS:
            raise ValueError(f"permc_spec must be one of {PERMC_SPECS}, got {self.permc_spec!r}")

    @property
    def saves_anything(self) -> bool:
        return any((
            self.save_nodal_displacements,
            self.save_nodal_forces,
            self.save_tie_forces,
            self.save_elemental_forces,
            self.save_report,
        ))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Options":
        """Build Options from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown option(s): {', '.join(unknown)}")
        return cls(**data)
