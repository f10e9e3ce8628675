from __future__ import annotations

import dataclasses

import pytest

from jsonlp.parameters import Parameters


def test_defaults() -> None:
    param = Parameters()
    assert param.absolute_primal_tolerance == 1e-6
    assert param.time_limit == 300.0
    assert param.user_problem_file is None
    assert not param.timing
    assert not param.strict_parsing


def test_parameters_are_immutable() -> None:
    param = Parameters()
    with pytest.raises(dataclasses.FrozenInstanceError):
        param.time_limit = 10.0  # type: ignore[misc]
    changed = param.replace(time_limit=10.0)
    assert changed.time_limit == 10.0
    assert param.time_limit == 300.0


def test_engine_settings_include_side_output_only_when_set() -> None:
    assert Parameters().engine_settings() == {
        "absolute_primal_tolerance": 1e-6,
        "time_limit": 300.0,
    }
    settings = Parameters(user_problem_file="model.mps").engine_settings()
    assert settings["user_problem_file"] == "model.mps"


def test_dict_round_trip_ignores_unknown_keys() -> None:
    param = Parameters.from_dict({"time_limit": 5.0, "timing": True, "device_number": 0})
    assert param.time_limit == 5.0
    assert param.timing
    assert Parameters.from_dict(param.to_dict()) == param
