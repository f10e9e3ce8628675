"""
Results class for jsonlp solver output
"""
from enum import IntEnum
from typing import Any, Dict, Optional

import numpy as np

from .exceptions import PartialExtractionError


class TerminationStatus(IntEnum):
    """Why the engine stopped. The integer value is the reported status code."""
    UNKNOWN = 0
    OPTIMAL = 1
    INFEASIBLE = 2
    UNBOUNDED = 3
    ITERATION_LIMIT = 4
    TIME_LIMIT = 5
    NUMERICAL_ERROR = 6
    PRIMAL_FEASIBLE = 7
    FEASIBLE_FOUND = 8

    @property
    def label(self) -> str:
        """Human readable name, e.g. 'Iteration limit'"""
        return self.name.replace('_', ' ').capitalize()


# Number of primal values shown by format_report
REPORT_MAX_VALUES = 20


class Results:
    """
    Results extracted from a solve.

    A field is None when it was not extracted; the reason is kept in
    ``errors`` under the field name.

    Attributes
    ----------
    status : TerminationStatus or None
        Termination status
    objective_value : float or None
        Objective value including the offset
    solve_time : float or None
        Engine solve time in seconds
    x : np.ndarray or None
        Primal solution vector (length n)
    is_mip : bool
        Whether the problem has integer variables
    mip_gap : float or None
        Relative MIP gap (MIP only)
    solution_bound : float or None
        Best bound on the objective (MIP only)
    problem_file : str or None
        MPS file the engine wrote during the solve
    errors : dict
        Field name to PartialExtractionError for every field that failed

    Methods
    -------
    is_optimal()
        Check if solution is optimal
    format_report()
        Render the operator report
    to_dict()
        Convert results to dictionary
    """

    def __init__(self):
        self.status: Optional[TerminationStatus] = None
        self.objective_value: Optional[float] = None
        self.solve_time: Optional[float] = None
        self.x: Optional[np.ndarray] = None
        self.is_mip: bool = False
        self.mip_gap: Optional[float] = None
        self.solution_bound: Optional[float] = None
        self.problem_file: Optional[str] = None
        self.errors: Dict[str, PartialExtractionError] = {}

    def is_optimal(self) -> bool:
        """Check if solution is optimal"""
        return self.status is TerminationStatus.OPTIMAL

    def is_feasible(self) -> bool:
        """Check if the engine reported a feasible point"""
        return self.status in (TerminationStatus.OPTIMAL, TerminationStatus.PRIMAL_FEASIBLE,
                               TerminationStatus.FEASIBLE_FOUND)

    @property
    def complete(self) -> bool:
        """True when every requested field was extracted"""
        return not self.errors

    def __repr__(self):
        n_vars = len(self.x) if self.x is not None else 0
        status = self.status.name if self.status is not None else None
        return (f"Results(status={status!r}, "
                f"objective_value={self.objective_value}, "
                f"n_vars={n_vars}, "
                f"errors={sorted(self.errors)})")

    def format_report(self, max_values: int = REPORT_MAX_VALUES) -> str:
        """
        Render the results for the operator.

        Shows the termination status name and code, solve time, objective
        value, the first ``max_values`` primal values (with a notice when
        more exist), MIP gap and bound for MIPs, and one line per field that
        could not be extracted.
        """
        lines = ["Results:", "--------"]
        if self.status is not None:
            lines.append(f"Termination status: {self.status.label} ({int(self.status)})")
        if self.solve_time is not None:
            lines.append(f"Solve time: {self.solve_time:f} seconds")
        if self.objective_value is not None:
            lines.append(f"Objective value: {self.objective_value:f}")

        if self.x is not None:
            n = len(self.x)
            shown = min(n, max_values)
            lines.append("")
            lines.append(f"Primal Solution (showing first {shown} variables):")
            for i in range(shown):
                lines.append(f"x{i} = {self.x[i]:f}")
            if n > max_values:
                lines.append(f"... (showing only first {max_values} of {n} variables)")

        if self.is_mip:
            if self.mip_gap is not None:
                lines.append(f"MIP Gap: {self.mip_gap:f}")
            if self.solution_bound is not None:
                lines.append(f"Solution Bound: {self.solution_bound:f}")

        for error in self.errors.values():
            lines.append(str(error))

        return "\n".join(lines)

    def __str__(self):
        return self.format_report()

    def to_dict(self) -> Dict[str, Any]:
        """Convert results to dictionary"""
        return {
            'status': self.status.name if self.status is not None else None,
            'status_code': int(self.status) if self.status is not None else None,
            'objective_value': self.objective_value,
            'solve_time': self.solve_time,
            'x': self.x.tolist() if self.x is not None else None,
            'is_mip': self.is_mip,
            'mip_gap': self.mip_gap,
            'solution_bound': self.solution_bound,
            'problem_file': self.problem_file,
            'errors': {field: str(error) for field, error in self.errors.items()},
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'Results':
        """Create Results from dictionary"""
        results = cls()
        for key, value in d.items():
            if key == 'status' and value is not None:
                results.status = TerminationStatus[value]
            elif key == 'x' and value is not None:
                results.x = np.array(value, dtype=np.float64)
            elif key == 'errors':
                results.errors = {field: PartialExtractionError(field, message=message)
                                  for field, message in value.items()}
            elif key != 'status_code' and hasattr(results, key):
                setattr(results, key, value)
        return results
