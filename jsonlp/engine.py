"""
Optimization engine interface and the HiGHS-backed engine

An Engine exposes opaque create/configure/solve/query/destroy primitives.
Tokens returned by the ``create_*`` and ``solve`` primitives are only
meaningful to the engine that produced them and must be handed back to the
matching ``destroy_*`` primitive exactly once.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import numpy as np

from .exceptions import EngineError
from .parameters import ABSOLUTE_PRIMAL_TOLERANCE, TIME_LIMIT, USER_PROBLEM_FILE
from .problem import ProblemModel, Sense
from .results import TerminationStatus

try:
    import highspy
except ImportError:  # pragma: no cover - exercised only when HiGHS bindings are missing.
    highspy = None

logger = logging.getLogger(__name__)


class Engine(ABC):
    """
    Primitives of an optimization engine, as driven by SolveSession.

    Every primitive raises EngineError on a non-success status. The
    ``destroy_*`` primitives are idempotent and accept None.
    """

    @abstractmethod
    def create_ranged_problem(self, model: ProblemModel) -> Any:
        """Submit the model in ranged form and return a problem token"""

    @abstractmethod
    def create_settings(self) -> Any:
        """Return a fresh settings token holding engine defaults"""

    @abstractmethod
    def set_parameter(self, settings: Any, key: str, value: Any) -> None:
        """Apply one tunable to a settings token"""

    @abstractmethod
    def solve(self, problem: Any, settings: Any) -> Any:
        """Solve and return a solution token"""

    @abstractmethod
    def get_termination_status(self, solution: Any) -> TerminationStatus:
        pass

    @abstractmethod
    def get_objective_value(self, solution: Any) -> float:
        pass

    @abstractmethod
    def get_solve_time(self, solution: Any) -> float:
        pass

    @abstractmethod
    def get_primal_solution(self, solution: Any) -> np.ndarray:
        pass

    @abstractmethod
    def is_mip(self, problem: Any) -> bool:
        pass

    @abstractmethod
    def get_mip_gap(self, solution: Any) -> float:
        pass

    @abstractmethod
    def get_solution_bound(self, solution: Any) -> float:
        pass

    def get_problem_file(self, solution: Any) -> Optional[str]:
        """Path of the MPS file written during solve, or None"""
        return None

    @abstractmethod
    def destroy_problem(self, problem: Any) -> None:
        pass

    @abstractmethod
    def destroy_settings(self, settings: Any) -> None:
        pass

    @abstractmethod
    def destroy_solution(self, solution: Any) -> None:
        pass


class _HighsProblem:
    """Problem token: a Highs instance holding the passed model"""

    def __init__(self, highs, num_variables: int, is_mip: bool):
        self.highs = highs
        self.num_variables = num_variables
        self.is_mip = is_mip


class _HighsSettings:
    """
    Settings token: accepted HiGHS option values plus the optional MPS output
    path. ``highs`` is a scratch instance that validates option values as
    they are set.
    """

    def __init__(self, highs):
        self.highs = highs
        self.options: Dict[str, Any] = {}
        self.problem_file: Optional[str] = None


class _HighsSolution:
    """Solution token: results copied out of the Highs instance after run()"""

    def __init__(self, model_status, primal_solution_status: int, objective_value: float,
                 solve_time: float, col_value: np.ndarray, mip_gap: float, mip_dual_bound: float,
                 problem_file: Optional[str] = None):
        self.model_status = model_status
        self.primal_solution_status = primal_solution_status
        self.objective_value = objective_value
        self.solve_time = solve_time
        self.col_value = col_value
        self.mip_gap = mip_gap
        self.mip_dual_bound = mip_dual_bound
        self.problem_file = problem_file


# Engine-neutral setting keys to HiGHS option names
_HIGHS_OPTIONS = {
    ABSOLUTE_PRIMAL_TOLERANCE: 'primal_feasibility_tolerance',
    TIME_LIMIT: 'time_limit',
}

# HiGHS primal solution status for a feasible point
_SOLUTION_STATUS_FEASIBLE = 2


def _termination_status(model_status, primal_solution_status: int) -> TerminationStatus:
    statuses = highspy.HighsModelStatus
    has_feasible_point = primal_solution_status == _SOLUTION_STATUS_FEASIBLE
    if model_status in (statuses.kOptimal, statuses.kModelEmpty):
        return TerminationStatus.OPTIMAL
    if model_status == statuses.kInfeasible:
        return TerminationStatus.INFEASIBLE
    if model_status == statuses.kUnbounded:
        return TerminationStatus.UNBOUNDED
    if model_status == statuses.kIterationLimit:
        return TerminationStatus.ITERATION_LIMIT
    if model_status == statuses.kTimeLimit:
        return TerminationStatus.TIME_LIMIT
    if model_status in (statuses.kSolveError, statuses.kPostsolveError):
        return TerminationStatus.NUMERICAL_ERROR
    if model_status in (statuses.kObjectiveBound, statuses.kObjectiveTarget,
                        statuses.kSolutionLimit, statuses.kInterrupt):
        if has_feasible_point:
            return TerminationStatus.FEASIBLE_FOUND
    return TerminationStatus.UNKNOWN


class HighsEngine(Engine):
    """
    Engine backed by the HiGHS solver through ``highspy``.

    Each problem token owns its own ``Highs`` instance. Absent constraint or
    variable bounds are submitted as (-inf, +inf).

    Parameters
    ----------
    verbose : bool, optional
        Let HiGHS write its log to the console (default: False)

    Examples
    --------
    >>> engine = HighsEngine()
    >>> problem = engine.create_ranged_problem(model)
    >>> settings = engine.create_settings()
    >>> solution = engine.solve(problem, settings)
    >>> engine.get_objective_value(solution)
    """

    def __init__(self, verbose: bool = False):
        if highspy is None:
            raise ImportError(
                "HiGHS python bindings (highspy) are not installed. "
                "Install 'highspy' to use HighsEngine."
            )
        self.verbose = verbose

    def _new_highs(self):
        highs = highspy.Highs()
        highs.setOptionValue('output_flag', bool(self.verbose))
        highs.setOptionValue('log_to_console', bool(self.verbose))
        return highs

    def create_ranged_problem(self, model: ProblemModel) -> _HighsProblem:
        highs = self._new_highs()

        n = model.num_variables
        m = model.num_constraints
        col_lower, col_upper = model.ranged_variable_bounds()
        row_lower, row_upper = model.ranged_constraint_bounds()
        matrix = model.matrix

        try:
            if n > 0:
                self._check(highs.addVars(n, np.array(col_lower), np.array(col_upper)),
                            'create_ranged_problem', 'adding variables')
                self._check(highs.changeColsCost(n, np.arange(n, dtype=np.int32),
                                                 np.array(model.objective.coefficients)),
                            'create_ranged_problem', 'setting objective')
            if m > 0:
                self._check(highs.addRows(m, np.array(row_lower), np.array(row_upper), model.nnz,
                                          np.array(matrix.row_offsets[:-1]),
                                          np.array(matrix.column_indices),
                                          np.array(matrix.values)),
                            'create_ranged_problem', 'adding constraints')
            for j in model.integer_indices():
                self._check(highs.changeColIntegrality(int(j), highspy.HighsVarType.kInteger),
                            'create_ranged_problem', 'setting integrality')
            if model.objective.sense is Sense.MAXIMIZE:
                self._check(highs.changeObjectiveSense(highspy.ObjSense.kMaximize),
                            'create_ranged_problem', 'setting objective sense')
            self._check(highs.changeObjectiveOffset(model.objective.offset),
                        'create_ranged_problem', 'setting objective offset')
        except EngineError:
            highs.clear()
            raise

        return _HighsProblem(highs, n, model.is_mip)

    def create_settings(self) -> _HighsSettings:
        return _HighsSettings(self._new_highs())

    def set_parameter(self, settings: _HighsSettings, key: str, value: Any) -> None:
        if key == USER_PROBLEM_FILE:
            settings.problem_file = str(value)
            return
        option = _HIGHS_OPTIONS.get(key)
        if option is None:
            raise EngineError('set_parameter', f"unknown parameter {key!r}")
        try:
            value = float(value)
        except (TypeError, ValueError) as exc:
            raise EngineError('set_parameter', f"invalid value {value!r} for {key}") from exc
        status = settings.highs.setOptionValue(option, value)
        if status == highspy.HighsStatus.kError:
            raise EngineError('set_parameter', f"HiGHS rejected {option}={value!r}",
                              status=int(status.value))
        settings.options[option] = value

    def solve(self, problem: _HighsProblem, settings: _HighsSettings) -> _HighsSolution:
        highs = problem.highs
        for option, value in settings.options.items():
            self._check(highs.setOptionValue(option, value), 'solve', f"setting {option}")

        problem_file = None
        if settings.problem_file:
            status = highs.writeModel(settings.problem_file)
            if status == highspy.HighsStatus.kError:
                logger.warning("Could not write MPS file %s", settings.problem_file)
            else:
                logger.info("MPS file written to: %s", settings.problem_file)
                problem_file = settings.problem_file

        self._check(highs.run(), 'solve')

        info = highs.getInfo()
        solution = highs.getSolution()
        col_value = np.array(solution.col_value, dtype=np.float64)
        return _HighsSolution(
            model_status=highs.getModelStatus(),
            primal_solution_status=int(info.primal_solution_status),
            objective_value=float(info.objective_function_value),
            solve_time=float(highs.getRunTime()),
            col_value=col_value,
            mip_gap=float(info.mip_gap),
            mip_dual_bound=float(info.mip_dual_bound),
            problem_file=problem_file,
        )

    def get_termination_status(self, solution: _HighsSolution) -> TerminationStatus:
        return _termination_status(solution.model_status, solution.primal_solution_status)

    def get_objective_value(self, solution: _HighsSolution) -> float:
        return solution.objective_value

    def get_solve_time(self, solution: _HighsSolution) -> float:
        return solution.solve_time

    def get_primal_solution(self, solution: _HighsSolution) -> np.ndarray:
        if solution.primal_solution_status != _SOLUTION_STATUS_FEASIBLE:
            raise EngineError('get_primal_solution', "no feasible primal solution available")
        return solution.col_value.copy()

    def is_mip(self, problem: _HighsProblem) -> bool:
        return problem.is_mip

    def get_mip_gap(self, solution: _HighsSolution) -> float:
        return solution.mip_gap

    def get_solution_bound(self, solution: _HighsSolution) -> float:
        return solution.mip_dual_bound

    def get_problem_file(self, solution: _HighsSolution) -> Optional[str]:
        return solution.problem_file

    def destroy_problem(self, problem: Optional[_HighsProblem]) -> None:
        if problem is None or problem.highs is None:
            return
        problem.highs.clear()
        problem.highs = None

    def destroy_settings(self, settings: Optional[_HighsSettings]) -> None:
        if settings is None:
            return
        if settings.highs is not None:
            settings.highs.clear()
            settings.highs = None
        settings.options.clear()
        settings.problem_file = None

    def destroy_solution(self, solution: Optional[_HighsSolution]) -> None:
        if solution is None:
            return
        solution.col_value = None

    @staticmethod
    def _check(status, operation: str, message: str = "") -> None:
        if status == highspy.HighsStatus.kError:
            raise EngineError(operation, message, status=int(status.value))
        if status == highspy.HighsStatus.kWarning:
            logger.warning("HiGHS returned a warning in %s %s", operation, message)
