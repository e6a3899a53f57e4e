from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Union

from .config_loader import MachineConfiguration, RuntimeSettings, StateKind
from .errors import NonHalting, StepError
from .machine import ExecutionEngine, ResultSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TestCase:
    """Cadena a probar y su resultado, si ya se ejecutó."""

    __test__ = False

    tape_text: str
    outcome: Optional[StateKind] = None


@dataclass(frozen=True)
class RunResult:
    """Resultado final de una ejecución completa."""

    snapshot: ResultSnapshot
    steps: int
    halted: bool
    error: Optional[Union[StepError, NonHalting]] = None

    @property
    def accepted(self) -> bool:
        return self.snapshot.output_kind is StateKind.ACCEPT

    @property
    def reason(self) -> str:
        if self.error is not None:
            return str(self.error)
        return f"Estado terminal {self.snapshot.output_kind.value} alcanzado"

    def outcome(self, fold: bool = True) -> StateKind:
        """Tipo de salida; con ``fold`` todo lo que no sea ACCEPT cuenta como REJECT."""

        kind = self.snapshot.output_kind
        if fold and kind not in (StateKind.ACCEPT, StateKind.REJECT):
            return StateKind.REJECT
        return kind


class TestRunner:
    """Ejecuta cadenas hasta el final con un motor propio por ejecución."""

    __test__ = False

    def __init__(self, configuration: MachineConfiguration, *, max_steps: int = RuntimeSettings.max_steps) -> None:
        self.configuration = configuration
        self.max_steps = max_steps

    def run(self, tape_text: str) -> RunResult:
        engine = ExecutionEngine(self.configuration, tape_text)
        snapshot = engine.snapshot()
        steps = 0

        while not snapshot.is_terminal:
            if steps >= self.max_steps:
                logger.warning("La cadena %r superó el límite de %d pasos.", tape_text, self.max_steps)
                return RunResult(snapshot=snapshot, steps=steps, halted=False, error=NonHalting(steps))
            try:
                snapshot = engine.evaluate()
            except StepError as exc:
                logger.info("La cadena %r se detuvo en el paso %d: %s", tape_text, steps, exc)
                return RunResult(snapshot=engine.snapshot(), steps=steps, halted=True, error=exc)
            steps += 1

        return RunResult(snapshot=snapshot, steps=steps, halted=True)

    def run_cases(self, cases: Iterable[TestCase], *, fold: bool = True) -> List[TestCase]:
        """Ejecuta cada caso; los casos con cinta vacía se devuelven sin cambios."""

        results = []
        for case in cases:
            if not case.tape_text:
                results.append(case)
                continue
            result = self.run(case.tape_text)
            results.append(replace(case, outcome=result.outcome(fold)))
        return results
