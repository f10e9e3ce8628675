"""
Canonical problem model for jsonlp

The model represents an LP/MIP of the form:
    minimize or maximize    c'*x + offset
    subject to              AL <= A*x <= AU
                            l <= x <= u
                            x[j] integer for INTEGER variables
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np
from scipy import sparse


class Sense(Enum):
    """Optimization sense"""
    MINIMIZE = 'minimize'
    MAXIMIZE = 'maximize'


class VariableType(Enum):
    """Variable class"""
    CONTINUOUS = 'C'
    INTEGER = 'I'


def _frozen(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


def _as_int32(values) -> np.ndarray:
    return _frozen(np.array(values, dtype=np.int32))


def _as_float64(values) -> np.ndarray:
    return _frozen(np.array(values, dtype=np.float64))


@dataclass(frozen=True, eq=False)
class CSRMatrix:
    """
    Constraint matrix in compressed sparse row format.

    Attributes
    ----------
    row_offsets : np.ndarray
        int32 array of length m+1; row i spans
        ``row_offsets[i]:row_offsets[i+1]`` of the arrays below
    column_indices : np.ndarray
        int32 array of length nnz
    values : np.ndarray
        float64 array of length nnz, same order as column_indices
    """
    row_offsets: np.ndarray
    column_indices: np.ndarray
    values: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, 'row_offsets', _as_int32(self.row_offsets))
        object.__setattr__(self, 'column_indices', _as_int32(self.column_indices))
        object.__setattr__(self, 'values', _as_float64(self.values))

    @property
    def num_rows(self) -> int:
        return len(self.row_offsets) - 1

    @property
    def nnz(self) -> int:
        return len(self.column_indices)

    def to_scipy(self, num_columns: int) -> sparse.csr_matrix:
        """Return the matrix as a scipy CSR matrix of shape (m, num_columns)"""
        return sparse.csr_matrix(
            (self.values, self.column_indices, self.row_offsets),
            shape=(self.num_rows, num_columns),
            copy=True,
        )


@dataclass(frozen=True, eq=False)
class Objective:
    """
    Linear objective.

    Attributes
    ----------
    coefficients : np.ndarray
        Cost vector c (length n)
    offset : float
        Constant term added to c'*x
    sense : Sense
        MINIMIZE unless the document asks to maximize
    """
    coefficients: np.ndarray
    offset: float = 0.0
    sense: Sense = Sense.MINIMIZE

    def __post_init__(self):
        object.__setattr__(self, 'coefficients', _as_float64(self.coefficients))
        object.__setattr__(self, 'offset', float(self.offset))


@dataclass(frozen=True, eq=False)
class Bounds:
    """Ranged bounds: lower[i] <= value[i] <= upper[i], entries may be +/-inf"""
    lower: np.ndarray
    upper: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, 'lower', _as_float64(self.lower))
        object.__setattr__(self, 'upper', _as_float64(self.upper))
        if len(self.lower) != len(self.upper):
            raise ValueError("lower and upper bounds must have the same length")

    def __len__(self):
        return len(self.lower)


def ranged(bounds: Optional[Bounds], size: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Explicit (lower, upper) arrays for a ranged formulation.

    Absent bounds become (-inf, +inf) for every entry.
    """
    if bounds is None:
        return np.full(size, -np.inf), np.full(size, np.inf)
    return bounds.lower, bounds.upper


@dataclass(frozen=True, eq=False)
class ProblemModel:
    """
    LP/MIP problem assembled from a JSON document.

    Attributes
    ----------
    matrix : CSRMatrix
        Constraint matrix A (m x n)
    objective : Objective
        Objective coefficients, offset and sense
    constraint_bounds : Bounds or None
        AL/AU; None when the document declares no constraint bounds
    variable_bounds : Bounds or None
        l/u; None when the document declares no variable bounds
    variable_types : tuple of VariableType
        One entry per variable
    """
    matrix: CSRMatrix
    objective: Objective
    constraint_bounds: Optional[Bounds] = None
    variable_bounds: Optional[Bounds] = None
    variable_types: Tuple[VariableType, ...] = ()

    def __post_init__(self):
        n = len(self.objective.coefficients)
        types = tuple(self.variable_types) if self.variable_types else (VariableType.CONTINUOUS,) * n
        object.__setattr__(self, 'variable_types', types)

        m = self.matrix.num_rows
        if self.constraint_bounds is not None and len(self.constraint_bounds) != m:
            raise ValueError(f"constraint bounds must have length {m} (number of constraints)")
        if self.variable_bounds is not None and len(self.variable_bounds) != n:
            raise ValueError(f"variable bounds must have length {n} (number of variables)")
        if len(types) != n:
            raise ValueError(f"variable types must have length {n} (number of variables)")

    @property
    def num_constraints(self) -> int:
        """Number of constraints (m)"""
        return self.matrix.num_rows

    @property
    def num_variables(self) -> int:
        """Number of variables (n)"""
        return len(self.objective.coefficients)

    @property
    def nnz(self) -> int:
        """Number of stored matrix entries"""
        return self.matrix.nnz

    @property
    def is_mip(self) -> bool:
        """True when at least one variable is INTEGER"""
        return any(t is VariableType.INTEGER for t in self.variable_types)

    def constraint_matrix(self) -> sparse.csr_matrix:
        """Constraint matrix as a scipy CSR matrix of shape (m, n)"""
        return self.matrix.to_scipy(self.num_variables)

    def ranged_constraint_bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        return ranged(self.constraint_bounds, self.num_constraints)

    def ranged_variable_bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        return ranged(self.variable_bounds, self.num_variables)

    def integer_indices(self) -> np.ndarray:
        return np.array(
            [j for j, t in enumerate(self.variable_types) if t is VariableType.INTEGER],
            dtype=np.int32,
        )

    def __repr__(self):
        kind = "MIP" if self.is_mip else "LP"
        return (f"<jsonlp.ProblemModel {kind} m={self.num_constraints} "
                f"n={self.num_variables} nnz={self.nnz}>")
