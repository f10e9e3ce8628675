"""
jsonlp Python Package

Build LP/MIP models from JSON problem documents and solve them through an
optimization engine (HiGHS by default).
"""

from .builder import (
    build_problem, load_problem, build_matrix, build_objective,
    build_constraint_bounds, build_variable_bounds, build_variable_types,
    resolve_constraint_bounds_encoding, ExplicitBoundsEncoding, RelationalBoundsEncoding,
)
from .engine import Engine, HighsEngine
from .exceptions import (
    JSONLPError, ProblemIOError, FormatError, MissingFieldError, AllocationError,
    EngineError, PartialExtractionError,
)
from .handles import EngineHandle
from .parameters import Parameters
from .problem import ProblemModel, CSRMatrix, Objective, Bounds, Sense, VariableType
from .results import Results, TerminationStatus
from .solver import Solver, SolveSession, SessionState, solve, solve_file
from .values import parse_numeric_value

__version__ = "0.1.0"

__all__ = [
    'Solver',
    'SolveSession',
    'SessionState',
    'solve',
    'solve_file',
    'Parameters',
    'Results',
    'TerminationStatus',
    '__version__',
    # Problem model
    'ProblemModel',
    'CSRMatrix',
    'Objective',
    'Bounds',
    'Sense',
    'VariableType',
    # Building
    'build_problem',
    'load_problem',
    'build_matrix',
    'build_objective',
    'build_constraint_bounds',
    'build_variable_bounds',
    'build_variable_types',
    'resolve_constraint_bounds_encoding',
    'ExplicitBoundsEncoding',
    'RelationalBoundsEncoding',
    'parse_numeric_value',
    # Engines
    'Engine',
    'HighsEngine',
    'EngineHandle',
    # Errors
    'JSONLPError',
    'ProblemIOError',
    'FormatError',
    'MissingFieldError',
    'AllocationError',
    'EngineError',
    'PartialExtractionError',
]
