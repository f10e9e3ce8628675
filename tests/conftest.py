from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

import numpy as np
import pytest

from jsonlp.engine import Engine
from jsonlp.exceptions import EngineError
from jsonlp.problem import ProblemModel
from jsonlp.results import TerminationStatus


BASE_DOCUMENT: Dict[str, Any] = {
    "csr_constraint_matrix": {
        "offsets": [0, 2, 4],
        "indices": [0, 1, 0, 1],
        "values": [1.0, 1.0, 1.0, -1.0],
    },
    "objective_data": {"coefficients": [1.0, 1.0]},
    "maximize": False,
    "constraint_bounds": {
        "lower_bounds": [0, 0],
        "upper_bounds": [10, 0],
    },
}


class RecordingEngine(Engine):
    """Engine double that records every primitive call and fails on request."""

    def __init__(self, fail_on: Iterable[str] = (), is_mip: bool = False,
                 primal: Optional[List[float]] = None) -> None:
        self.fail_on = set(fail_on)
        self.mip = is_mip
        self.primal = primal
        self.calls: List[str] = []
        self.created: List[str] = []
        self.destroyed: List[str] = []
        self.models: List[ProblemModel] = []
        self.parameters: Dict[str, Any] = {}
        self._counter = 0

    def _call(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise EngineError(name, "injected failure", status=-1)

    def _token(self, kind: str) -> str:
        self._counter += 1
        token = f"{kind}-{self._counter}"
        self.created.append(token)
        return token

    def create_ranged_problem(self, model: ProblemModel) -> str:
        self._call("create_ranged_problem")
        self.models.append(model)
        return self._token("problem")

    def create_settings(self) -> str:
        self._call("create_settings")
        return self._token("settings")

    def set_parameter(self, settings: str, key: str, value: Any) -> None:
        self._call("set_parameter")
        if f"set_parameter:{key}" in self.fail_on:
            raise EngineError("set_parameter", f"cannot set {key}")
        self.parameters[key] = value

    def solve(self, problem: str, settings: str) -> str:
        self._call("solve")
        return self._token("solution")

    def get_termination_status(self, solution: str) -> TerminationStatus:
        self._call("get_termination_status")
        return TerminationStatus.OPTIMAL

    def get_objective_value(self, solution: str) -> float:
        self._call("get_objective_value")
        return 42.0

    def get_solve_time(self, solution: str) -> float:
        self._call("get_solve_time")
        return 0.25

    def get_primal_solution(self, solution: str) -> np.ndarray:
        self._call("get_primal_solution")
        n = self.models[-1].num_variables
        values = self.primal if self.primal is not None else [float(j) for j in range(n)]
        return np.array(values, dtype=np.float64)

    def is_mip(self, problem: str) -> bool:
        self._call("is_mip")
        return self.mip

    def get_mip_gap(self, solution: str) -> float:
        self._call("get_mip_gap")
        return 0.0

    def get_solution_bound(self, solution: str) -> float:
        self._call("get_solution_bound")
        return 41.5

    def get_problem_file(self, solution: str) -> Optional[str]:
        if "write_problem_file" in self.fail_on:
            return None
        return self.parameters.get("user_problem_file")

    def _destroy(self, name: str, token: Optional[str]) -> None:
        self.calls.append(name)
        if token is not None:
            self.destroyed.append(token)

    def destroy_problem(self, problem: Optional[str]) -> None:
        self._destroy("destroy_problem", problem)

    def destroy_settings(self, settings: Optional[str]) -> None:
        self._destroy("destroy_settings", settings)

    def destroy_solution(self, solution: Optional[str]) -> None:
        self._destroy("destroy_solution", solution)


@pytest.fixture
def base_document() -> Dict[str, Any]:
    return copy.deepcopy(BASE_DOCUMENT)


@pytest.fixture
def recording_engine() -> Callable[..., RecordingEngine]:
    return RecordingEngine


@pytest.fixture
def write_document(tmp_path: Path) -> Callable[[Dict[str, Any]], Path]:
    def _write(doc: Dict[str, Any], name: str = "problem.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(doc), encoding="utf-8")
        return path

    return _write
