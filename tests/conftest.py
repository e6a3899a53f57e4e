from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Callable, Iterable, Tuple

import pytest

from turing_stepper.config_loader import MachineConfiguration, State, StateKind, parse_transition


def make_configuration(*states: Tuple[str, StateKind, Iterable[str]]) -> MachineConfiguration:
    return MachineConfiguration.build(
        State(name=name, kind=kind, transitions=tuple(parse_transition(rule) for rule in rules))
        for name, kind, rules in states
    )


@pytest.fixture
def complement() -> MachineConfiguration:
    """Invierte cada bit y acepta al llegar al blanco."""
    return make_configuration(
        ("Q1", StateKind.INITIAL, ["0->1,R,Q1", "1->0,R,Q1", "_->_,R,Q2"]),
        ("Q2", StateKind.ACCEPT, []),
    )


@pytest.fixture
def left_walker() -> MachineConfiguration:
    return make_configuration(
        ("Q1", StateKind.INITIAL, ["0->1,L,Q2"]),
        ("Q2", StateKind.INTERMEDIATE, ["_->a,L,Q3"]),
        ("Q3", StateKind.INTERMEDIATE, ["_->b,R,Q4"]),
        ("Q4", StateKind.ACCEPT, []),
    )


@pytest.fixture
def missing_transition() -> MachineConfiguration:
    return make_configuration(("Q1", StateKind.INITIAL, ["0->1,R,Q1"]))


@pytest.fixture
def dangling_target() -> MachineConfiguration:
    return make_configuration(
        ("Q1", StateKind.INITIAL, ["0->1,R,Q9"]),
        ("Q2", StateKind.INTERMEDIATE, []),
        ("Q3", StateKind.REJECT, []),
    )


@pytest.fixture
def endless() -> MachineConfiguration:
    return make_configuration(("Q1", StateKind.INITIAL, ["_->_,R,Q1"]))


@pytest.fixture
def write_yaml(tmp_path: Path) -> Callable[[str], Path]:
    def _write(content: str, name: str = "machine.yaml") -> Path:
        path = tmp_path / name
        path.write_text(textwrap.dedent(content), encoding="utf-8")
        return path

    return _write


COMPLEMENT_YAML = """
machine:
  states:
    - name: Q1-i
      transitions:
        - "0->1,R,Q1"
        - "1->0,R,Q1"
    - Q2-a
  edges:
    - from: Q1
      to: Q2
      rule: "_->_,R"
simulation_strings: ["0110"]
settings:
  max_steps: 100
"""


@pytest.fixture
def complement_yaml(write_yaml: Callable[[str], Path]) -> Path:
    return write_yaml(COMPLEMENT_YAML)
