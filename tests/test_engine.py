from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import pytest

pytest.importorskip("highspy")

from jsonlp.builder import build_problem
from jsonlp.engine import HighsEngine
from jsonlp.exceptions import EngineError
from jsonlp.parameters import Parameters
from jsonlp.results import TerminationStatus
from jsonlp.solver import Solver


def _production_document(maximize: bool = True, integer: bool = False) -> Dict[str, Any]:
    # maximize 3x + 5y  s.t.  x + 2y <= 10, 3x + y <= 12, x, y >= 0
    doc: Dict[str, Any] = {
        "csr_constraint_matrix": {
            "offsets": [0, 2, 4],
            "indices": [0, 1, 0, 1],
            "values": [1.0, 2.0, 3.0, 1.0],
        },
        "objective_data": {"coefficients": [3.0, 5.0]},
        "maximize": maximize,
        "constraint_bounds": {"bounds": [10.0, 12.0], "types": ["L", "L"]},
        "variable_bounds": {"lower_bounds": [0, 0], "upper_bounds": ["inf", "inf"]},
    }
    if integer:
        doc["variable_types"] = ["I", "I"]
    return doc


def test_lp_solves_to_optimality() -> None:
    results = Solver(engine=HighsEngine()).solve(build_problem(_production_document()))

    assert results.status is TerminationStatus.OPTIMAL
    assert results.objective_value == pytest.approx(26.4)
    assert results.x.tolist() == pytest.approx([2.8, 3.6])
    assert not results.is_mip
    assert results.solve_time >= 0.0
    assert results.complete


def test_objective_offset_is_included() -> None:
    doc = _production_document()
    doc["objective_data"]["offset"] = 10.0
    results = Solver(engine=HighsEngine()).solve(build_problem(doc))
    assert results.objective_value == pytest.approx(36.4)


def test_mip_reports_gap_and_bound() -> None:
    results = Solver(engine=HighsEngine()).solve(build_problem(_production_document(integer=True)))

    assert results.status is TerminationStatus.OPTIMAL
    assert results.is_mip
    assert results.objective_value == pytest.approx(26.0)
    assert results.x.tolist() == pytest.approx([2.0, 4.0])
    assert results.mip_gap is not None
    assert results.solution_bound == pytest.approx(26.0, rel=1e-3)


def test_equality_rows_and_minimize(base_document: Dict[str, Any]) -> None:
    # x + y in [0, 10], x - y == 0, minimize x + y with x, y >= 1
    base_document["variable_bounds"] = {"lower_bounds": [1, 1], "upper_bounds": ["inf", "inf"]}
    results = Solver(engine=HighsEngine()).solve(build_problem(base_document))
    assert results.objective_value == pytest.approx(2.0)
    assert results.x.tolist() == pytest.approx([1.0, 1.0])


def test_unbounded_problem_is_not_optimal() -> None:
    doc = _production_document()
    doc["constraint_bounds"] = {"bounds": [0.0, 0.0], "types": ["G", "G"]}
    results = Solver(engine=HighsEngine()).solve(build_problem(doc))

    assert results.status in (TerminationStatus.UNBOUNDED, TerminationStatus.UNKNOWN)
    assert not results.is_optimal()


def test_writes_mps_side_output(tmp_path: Path) -> None:
    target = tmp_path / "model.mps"
    params = Parameters(user_problem_file=str(target))
    Solver(engine=HighsEngine(), parameters=params).solve(build_problem(_production_document()))
    assert target.exists()
    assert "COLUMNS" in target.read_text()


def test_unknown_parameter_is_rejected() -> None:
    engine = HighsEngine()
    settings = engine.create_settings()
    with pytest.raises(EngineError):
        engine.set_parameter(settings, "device_number", 0)
    engine.destroy_settings(settings)


def test_destroy_primitives_accept_none() -> None:
    engine = HighsEngine()
    engine.destroy_problem(None)
    engine.destroy_settings(None)
    engine.destroy_solution(None)


@pytest.mark.parametrize("overrides", [
    {"absolute_primal_tolerance": 0.0},
    {"time_limit": -1.0},
])
def test_rejected_option_falls_back_to_default(overrides: Dict[str, float],
                                               caplog: pytest.LogCaptureFixture) -> None:
    params = Parameters().replace(**overrides)
    with caplog.at_level("WARNING", logger="jsonlp.solver"):
        results = Solver(engine=HighsEngine(), parameters=params).solve(
            build_problem(_production_document()))

    assert results.status is TerminationStatus.OPTIMAL
    assert results.objective_value == pytest.approx(26.4)
    (key,) = overrides
    assert f"Could not set {key}" in caplog.text


def test_set_parameter_rejects_out_of_range_value() -> None:
    engine = HighsEngine()
    settings = engine.create_settings()
    with pytest.raises(EngineError):
        engine.set_parameter(settings, "time_limit", -1.0)
    engine.set_parameter(settings, "time_limit", 5.0)
    assert settings.options == {"time_limit": 5.0}
    engine.destroy_settings(settings)


def test_written_mps_file_is_reported(tmp_path: Path) -> None:
    target = tmp_path / "model.mps"
    params = Parameters(user_problem_file=str(target))
    results = Solver(engine=HighsEngine(), parameters=params).solve(
        build_problem(_production_document()))
    assert results.problem_file == str(target)


def test_unwritable_mps_file_is_not_reported(tmp_path: Path) -> None:
    target = tmp_path / "missing" / "model.mps"
    params = Parameters(user_problem_file=str(target))
    results = Solver(engine=HighsEngine(), parameters=params).solve(
        build_problem(_production_document()))

    assert results.status is TerminationStatus.OPTIMAL
    assert results.problem_file is None
    assert not target.exists()
