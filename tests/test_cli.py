from __future__ import annotations

import json

import pytest

from turing_stepper.cli import main


def test_runs_simulation_strings(complement_yaml, capsys):
    assert main([str(complement_yaml)]) == 0

    out = capsys.readouterr().out
    assert "Cadena '0110'" in out
    assert "Resultado: ACCEPT" in out
    assert "Pasos ejecutados: 5" in out


def test_json_output_with_explicit_strings(complement_yaml, capsys):
    assert main([str(complement_yaml), "-s", "01", "-s", "1", "--json"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert set(payload) == {"01", "1"}
    assert payload["01"]["outcome"] == "ACCEPT"
    assert payload["01"]["steps"] == 3
    assert payload["1"]["snapshot"]["tape"] == ["0", "_", "_"]


def test_max_steps_override(write_yaml, capsys):
    path = write_yaml(
        """
        states:
          - name: Q1-i
            transitions: ["_->_,R,Q1"]
        """
    )
    assert main([str(path), "-s", "", "--max-steps", "7", "--no-fold", "--json"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload[""]["halted"] is False
    assert payload[""]["steps"] == 7
    assert payload[""]["outcome"] == "INITIAL"


def test_step_mode(complement_yaml, capsys):
    assert main([str(complement_yaml), "--step", "2", "--json"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["0110"]["tape"] == list("1010_")
    assert payload["0110"]["head_position"] == 2


def test_trace_mode(complement_yaml, capsys):
    assert main([str(complement_yaml), "--trace", "--json"]) == 0

    frames = json.loads(capsys.readouterr().out)["0110"]
    assert [frame["head_position"] for frame in frames] == [0, 1, 2, 3, 4, 5]
    assert frames[-1]["output_kind"] == "ACCEPT"


def test_trace_mode_text(complement_yaml, capsys):
    assert main([str(complement_yaml), "--trace", "-s", "1"]) == 0

    out = capsys.readouterr().out
    assert "Paso 0000" in out
    assert "Paso 0002" in out
    assert "Paso 0003" not in out


@pytest.mark.parametrize(
    "extra",
    [["--step", "1001"], ["--step", "-1"], ["-s", "0X1"]],
)
def test_invalid_arguments_exit_with_usage_error(complement_yaml, extra):
    with pytest.raises(SystemExit) as excinfo:
        main([str(complement_yaml), *extra])
    assert excinfo.value.code == 2


def test_missing_configuration_file(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / "missing.yaml")])
    assert excinfo.value.code == 2


def test_no_strings_is_an_error(write_yaml):
    path = write_yaml("states: [Q1-a]\n")
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == 2
