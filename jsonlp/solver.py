"""
Solve orchestration for jsonlp

A SolveSession drives one engine through

    create -> configure -> solve -> extract -> teardown

Each step runs only if the previous one succeeded. Teardown releases the
problem, settings and solution tokens in that order, exactly once, whichever
step the session stopped at.
"""
import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

from .builder import load_problem
from .engine import Engine, HighsEngine
from .exceptions import EngineError, PartialExtractionError
from .handles import EngineHandle
from .parameters import Parameters
from .problem import ProblemModel
from .results import Results
from .timing import phase_timer

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle of a SolveSession"""
    UNINITIALIZED = 'uninitialized'
    PROBLEM_CREATED = 'problem_created'
    SETTINGS_CREATED = 'settings_created'
    SOLVED = 'solved'
    RESULTS_EXTRACTED = 'results_extracted'
    DESTROYED = 'destroyed'


class SolveSession:
    """
    One pass of a ProblemModel through an Engine.

    Sessions are single use. Use ``run()`` for the whole lifecycle, or the
    session as a context manager to drive the steps one by one; teardown runs
    when the ``with`` block exits, even on error.

    Parameters
    ----------
    model : ProblemModel
        Problem to solve
    engine : Engine
        Engine that owns the tokens
    parameters : Parameters, optional
        Solver parameters. If None, default parameters are used.

    Examples
    --------
    >>> with SolveSession(model, HighsEngine()) as session:
    ...     session.create_problem()
    ...     session.configure()
    ...     session.solve()
    ...     results = session.extract()
    """

    def __init__(self, model: ProblemModel, engine: Engine,
                 parameters: Optional[Parameters] = None):
        self.model = model
        self.engine = engine
        self.parameters = parameters if parameters is not None else Parameters()
        self.state = SessionState.UNINITIALIZED
        self.problem = EngineHandle('problem', engine.destroy_problem)
        self.settings = EngineHandle('settings', engine.destroy_settings)
        self.solution = EngineHandle('solution', engine.destroy_solution)

    def _expect(self, state: SessionState, step: str):
        if self.state is not state:
            raise RuntimeError(f"Cannot {step}: session is {self.state.value}")

    def create_problem(self):
        """Submit the model to the engine in ranged form"""
        self._expect(SessionState.UNINITIALIZED, "create problem")
        model = self.model
        logger.info("Problem size: %d constraints, %d variables, %d nonzeros",
                    model.num_constraints, model.num_variables, model.nnz)
        with phase_timer("PROBLEM_CREATION", self.parameters.timing):
            self.problem.acquire(self.engine.create_ranged_problem(model))
        self.state = SessionState.PROBLEM_CREATED

    def configure(self):
        """
        Create the settings token and apply the configured tunables.

        A tunable the engine rejects is logged and left at the engine
        default; only failing to create the settings token is fatal.
        """
        self._expect(SessionState.PROBLEM_CREATED, "configure")
        with phase_timer("SOLVER_SETTINGS", self.parameters.timing):
            settings = self.settings.acquire(self.engine.create_settings())
            for key, value in self.parameters.engine_settings().items():
                try:
                    self.engine.set_parameter(settings, key, value)
                except EngineError as exc:
                    logger.warning("Could not set %s: %s", key, exc)
        self.state = SessionState.SETTINGS_CREATED

    def solve(self):
        """Run the engine"""
        self._expect(SessionState.SETTINGS_CREATED, "solve")
        with phase_timer("SOLVER_EXECUTION", self.parameters.timing):
            self.solution.acquire(self.engine.solve(self.problem.token, self.settings.token))
        self.state = SessionState.SOLVED

    def _extract_field(self, results: Results, field: str, attribute: str,
                       getter: Callable, token):
        try:
            value = getter(token)
        except EngineError as exc:
            error = PartialExtractionError(field, exc)
            logger.error("%s", error)
            results.errors[field] = error
            return None
        setattr(results, attribute, value)
        return value

    def extract(self) -> Results:
        """
        Read every result field independently.

        A field the engine cannot provide is recorded in ``Results.errors``
        and does not stop the others.
        """
        self._expect(SessionState.SOLVED, "extract results")
        engine = self.engine
        solution = self.solution.token
        results = Results()

        with phase_timer("RESULT_EXTRACTION", self.parameters.timing):
            extract = self._extract_field
            extract(results, 'termination_status', 'status',
                    engine.get_termination_status, solution)
            extract(results, 'objective_value', 'objective_value',
                    engine.get_objective_value, solution)
            extract(results, 'solve_time', 'solve_time', engine.get_solve_time, solution)
            extract(results, 'primal_solution', 'x', engine.get_primal_solution, solution)
            if extract(results, 'is_mip', 'is_mip', engine.is_mip, self.problem.token):
                extract(results, 'mip_gap', 'mip_gap', engine.get_mip_gap, solution)
                extract(results, 'solution_bound', 'solution_bound',
                        engine.get_solution_bound, solution)
            results.problem_file = engine.get_problem_file(solution)

        self.state = SessionState.RESULTS_EXTRACTED
        return results

    def teardown(self):
        """Release problem, settings and solution, in that order. Runs once."""
        if self.state is SessionState.DESTROYED:
            return
        with phase_timer("CLEANUP", self.parameters.timing):
            try:
                self.problem.free()
            finally:
                try:
                    self.settings.free()
                finally:
                    self.state = SessionState.DESTROYED
                    self.solution.free()

    def run(self) -> Results:
        """
        Run the whole lifecycle.

        Raises
        ------
        EngineError
            If creating the problem or settings, or solving, fails. The
            tokens created so far are released before the error propagates.
        """
        with self:
            self.create_problem()
            self.configure()
            self.solve()
            return self.extract()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            logger.error("Solve aborted in state %s: %s", self.state.value, exc_val)
        self.teardown()
        return False

    def __repr__(self):
        return f"<jsonlp.SolveSession {self.state.value}>"


class Solver:
    """
    High-level interface: solve ProblemModels or JSON problem files.

    Parameters
    ----------
    engine : Engine, optional
        Engine to drive. If None, a HighsEngine is created.
    parameters : Parameters, optional
        Solver parameters. If None, default parameters are used.

    Examples
    --------
    >>> from jsonlp import Solver, Parameters
    >>>
    >>> solver = Solver(parameters=Parameters(time_limit=60.0))
    >>> result = solver.solve_file("problem.json")
    >>> print(result.format_report())
    """

    def __init__(self, engine: Optional[Engine] = None,
                 parameters: Optional[Parameters] = None):
        self.parameters = parameters if parameters is not None else Parameters()
        if engine is None:
            engine = HighsEngine(verbose=self.parameters.verbose)
        self.engine = engine

    def solve(self, model: ProblemModel, parameters: Optional[Parameters] = None) -> Results:
        """
        Solve a problem model.

        Parameters
        ----------
        model : ProblemModel
            Problem to solve
        parameters : Parameters, optional
            Overrides the solver's parameters for this call

        Returns
        -------
        Results
            Extracted results; fields that could not be read are listed in
            ``Results.errors``
        """
        if parameters is None:
            parameters = self.parameters
        with phase_timer("SOLVE_TOTAL", parameters.timing):
            return SolveSession(model, self.engine, parameters).run()

    def solve_file(self, filename: Union[str, Path],
                   parameters: Optional[Parameters] = None) -> Results:
        """Load a JSON problem file and solve it"""
        if parameters is None:
            parameters = self.parameters
        model = load_problem(filename, parameters)
        return self.solve(model, parameters)


def solve(model: ProblemModel, parameters: Optional[Parameters] = None,
          engine: Optional[Engine] = None) -> Results:
    """
    Convenience function to solve a model without creating a Solver.

    Examples
    --------
    >>> from jsonlp import build_problem, solve
    >>>
    >>> model = build_problem(doc)
    >>> result = solve(model)
    >>> print(result)
    """
    return Solver(engine=engine, parameters=parameters).solve(model)


def solve_file(filename: Union[str, Path], parameters: Optional[Parameters] = None,
               engine: Optional[Engine] = None) -> Results:
    """
    Convenience function to solve a JSON problem file.

    Examples
    --------
    >>> from jsonlp import solve_file, Parameters
    >>>
    >>> result = solve_file("problem.json", Parameters(user_problem_file="problem.mps"))
    >>> print(result)
    """
    return Solver(engine=engine, parameters=parameters).solve_file(filename)
