from __future__ import annotations

import logging
from typing import Optional

from .config_loader import MachineConfiguration
from .errors import InvalidStepIndex, StepError
from .machine import ExecutionEngine, ResultSnapshot

logger = logging.getLogger(__name__)

MAX_STEP_INDEX = 1000


class StepNavigator:
    """Navegación adelante/atrás sobre la ejecución sin historial guardado.

    La posición en el tiempo es sólo ``step_counter``: cada movimiento
    reinicia la máquina y vuelve a aplicar ``evaluate()`` desde el paso 0,
    por lo que cualquier instante se reproduce siempre igual a partir de la
    configuración y la cinta iniciales.
    """

    def __init__(self, configuration: MachineConfiguration, tape_input: str = "") -> None:
        self.engine = ExecutionEngine(configuration, tape_input)
        self._step_counter = 0
        self._previous_result: Optional[ResultSnapshot] = None
        self.diagnostic: Optional[StepError] = None

    @property
    def step_counter(self) -> int:
        return self._step_counter

    def configure(self, configuration: MachineConfiguration, tape_input: str) -> ResultSnapshot:
        """Carga una nueva máquina y cinta y vuelve al paso 0."""

        self.engine.configure_machine(configuration)
        self.engine.configure_tape(tape_input)
        return self.reset()

    def reset(self) -> ResultSnapshot:
        self._step_counter = 0
        self._previous_result = None
        self.diagnostic = None
        self.reset_machine()
        return self.current()

    def reset_machine(self) -> None:
        self.engine.reset_machine()

    def current(self) -> ResultSnapshot:
        return self.engine.snapshot()

    def goto_position(self, index: int) -> ResultSnapshot:
        """Aplica ``evaluate()`` hasta ``index`` veces desde el estado actual.

        No reinicia la máquina. Si un paso falla la repetición se detiene en
        el último instante válido y el error queda en ``diagnostic``.
        """

        if index < 0 or index > MAX_STEP_INDEX:
            raise InvalidStepIndex(index, MAX_STEP_INDEX)

        self.diagnostic = None
        for _ in range(index):
            try:
                self.engine.evaluate()
            except StepError as exc:
                logger.warning("Ejecución detenida en el paso %d: %s", self._step_counter, exc)
                self.diagnostic = exc
                break
        return self.current()

    def _replay(self) -> ResultSnapshot:
        self.reset_machine()
        return self.goto_position(self._step_counter)

    def _advance(self) -> ResultSnapshot:
        previous = self._previous_result
        if (previous is None or not previous.is_terminal) and self._step_counter < MAX_STEP_INDEX:
            self._step_counter += 1

        result = self._replay()
        self._previous_result = result
        return result

    def forward(self) -> ResultSnapshot:
        return self._advance()

    def backward(self) -> ResultSnapshot:
        if self._step_counter > 0:
            self._step_counter -= 1
        return self._replay()

    def play(self) -> ResultSnapshot:
        """Un tic de reproducción automática; el temporizador es del llamador."""

        return self._advance()
