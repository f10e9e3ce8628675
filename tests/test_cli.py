from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict

import pytest

from jsonlp import cli
from jsonlp.solver import Solver


@pytest.fixture
def fake_solver(monkeypatch: pytest.MonkeyPatch, recording_engine: Callable[..., Any]) -> Any:
    engine = recording_engine()

    def solver_with_fake_engine(parameters: Any = None) -> Solver:
        return Solver(engine=engine, parameters=parameters)

    monkeypatch.setattr(cli, "Solver", solver_with_fake_engine)
    return engine


def test_successful_run_prints_report(base_document: Dict[str, Any],
                                      write_document: Callable[..., Path],
                                      fake_solver: Any,
                                      capsys: pytest.CaptureFixture[str]) -> None:
    path = write_document(base_document)

    assert cli.main([str(path)]) == 0

    out = capsys.readouterr().out
    assert "Successfully parsed JSON file" in out
    assert "Problem size: 2 constraints, 2 variables, 4 nonzeros" in out
    assert "Termination status: Optimal (1)" in out
    assert "Solver completed successfully!" in out


def test_options_reach_parameters(base_document: Dict[str, Any],
                                  write_document: Callable[..., Path],
                                  fake_solver: Any) -> None:
    path = write_document(base_document)
    code = cli.main(["--mps-output", "out.mps", "--time-limit", "12", "--timing", str(path)])

    assert code == 0
    assert fake_solver.parameters == {
        "absolute_primal_tolerance": 1e-6,
        "time_limit": 12.0,
        "user_problem_file": "out.mps",
    }


def test_missing_required_field_exits_with_failure(base_document: Dict[str, Any],
                                                   write_document: Callable[..., Path],
                                                   fake_solver: Any,
                                                   capsys: pytest.CaptureFixture[str]) -> None:
    del base_document["objective_data"]
    path = write_document(base_document)

    assert cli.main([str(path)]) == 1
    assert "Failed to parse JSON file" in capsys.readouterr().out
    assert fake_solver.calls == []


def test_missing_file_exits_with_failure(tmp_path: Path, fake_solver: Any) -> None:
    assert cli.main([str(tmp_path / "missing.json")]) == 1


def test_engine_error_exits_with_failure(base_document: Dict[str, Any],
                                         write_document: Callable[..., Path],
                                         fake_solver: Any,
                                         capsys: pytest.CaptureFixture[str]) -> None:
    fake_solver.fail_on.add("solve")
    path = write_document(base_document)

    assert cli.main([str(path)]) == 1
    assert "Solver failed" in capsys.readouterr().out
    assert sorted(fake_solver.destroyed) == sorted(fake_solver.created)


def test_partial_extraction_still_succeeds(base_document: Dict[str, Any],
                                           write_document: Callable[..., Path],
                                           fake_solver: Any,
                                           capsys: pytest.CaptureFixture[str]) -> None:
    fake_solver.fail_on.add("get_objective_value")
    path = write_document(base_document)

    assert cli.main([str(path)]) == 0
    assert "Error getting objective value" in capsys.readouterr().out


def test_usage_error_without_file() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main([])
    assert excinfo.value.code == 2


def test_strict_flag_rejects_unknown_constraint_type(base_document: Dict[str, Any],
                                                     write_document: Callable[..., Path],
                                                     fake_solver: Any) -> None:
    base_document["constraint_bounds"] = {"bounds": [10.0, 0.0], "types": ["L", "X"]}
    path = write_document(base_document)

    assert cli.main(["--strict", str(path)]) == 1
    assert fake_solver.calls == []
    assert cli.main([str(path)]) == 0


def test_tolerance_flag_reaches_parameters(base_document: Dict[str, Any],
                                           write_document: Callable[..., Path],
                                           fake_solver: Any) -> None:
    path = write_document(base_document)

    assert cli.main(["--tolerance", "1e-8", str(path)]) == 0
    assert fake_solver.parameters["absolute_primal_tolerance"] == 1e-8


def test_missing_engine_bindings_exit_with_failure(base_document: Dict[str, Any],
                                                   write_document: Callable[..., Path],
                                                   monkeypatch: pytest.MonkeyPatch,
                                                   capsys: pytest.CaptureFixture[str]) -> None:
    def solver_without_bindings(parameters: Any = None) -> Solver:
        raise ImportError("HiGHS python bindings (highspy) are not installed.")

    monkeypatch.setattr(cli, "Solver", solver_without_bindings)
    path = write_document(base_document)

    assert cli.main([str(path)]) == 1
    assert "highspy" in capsys.readouterr().out


def test_mps_notice_printed_after_file_is_written(base_document: Dict[str, Any],
                                                  write_document: Callable[..., Path],
                                                  fake_solver: Any,
                                                  capsys: pytest.CaptureFixture[str]) -> None:
    path = write_document(base_document)

    assert cli.main(["--mps-output", "out.mps", str(path)]) == 0
    out = capsys.readouterr().out
    assert "MPS file written to: out.mps" in out
    assert out.index("MPS file written to") > out.index("Problem size")


def test_mps_write_failure_is_reported_as_warning(base_document: Dict[str, Any],
                                                  write_document: Callable[..., Path],
                                                  fake_solver: Any,
                                                  capsys: pytest.CaptureFixture[str]) -> None:
    fake_solver.fail_on.add("write_problem_file")
    path = write_document(base_document)

    assert cli.main(["--mps-output", "out.mps", str(path)]) == 0
    out = capsys.readouterr().out
    assert "MPS file written to" not in out
    assert "Warning: Could not write MPS file: out.mps" in out
