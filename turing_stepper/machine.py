from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Tuple

from .config_loader import BLANK, MachineConfiguration, StateKind, normalize_tape
from .errors import InvalidStateReference, NoTransitionFound

logger = logging.getLogger(__name__)


class Tape:
    """Cinta infinita hacia ambos lados respaldada por una lista creciente.

    Sólo se materializan las celdas visitadas. ``origin`` cuenta las celdas
    añadidas por la izquierda, de modo que ``index - origin`` es la posición
    lógica respecto al primer símbolo de la entrada.
    """

    def __init__(self, initial_input: str = "") -> None:
        self.initial: Tuple[str, ...] = ()
        self.cells: List[str] = []
        self.origin = 0
        self.configure(initial_input)

    def configure(self, initial_input: str) -> None:
        symbols = tuple(normalize_tape(initial_input)) + (BLANK,)
        self.initial = symbols
        self.restore()

    def restore(self) -> None:
        self.cells = list(self.initial)
        self.origin = 0

    def __len__(self) -> int:
        return len(self.cells)

    def read(self, position: int) -> str:
        return self.cells[position]

    def write(self, position: int, symbol: str) -> None:
        if not 0 <= position < len(self.cells):
            raise IndexError(f"Celda no materializada: {position}")
        self.cells[position] = symbol

    def extend_if_needed(self, position: int) -> int:
        """Materializa la celda ``position`` y devuelve su índice normalizado."""

        if position < 0:
            self.cells.insert(0, BLANK)
            self.origin += 1
            return 0
        if position >= len(self.cells):
            self.cells.append(BLANK)
        return position

    def snapshot(self) -> Tuple[str, ...]:
        return tuple(self.cells)


@dataclass
class ExecutionState:
    tape: Tape
    head_position: int = 0
    current_state_index: int = 0
    previous_state_index: Optional[int] = None


@dataclass(frozen=True)
class ResultSnapshot:
    """Vista inmutable de la máquina en un instante."""

    tape: Tuple[str, ...]
    output_kind: StateKind
    transition_description: Optional[str]
    previous_state_index: Optional[int]
    previous_state_name: Optional[str]
    current_state_name: str
    current_state_index: int
    next_state_name: Optional[str]
    next_state_index: Optional[int]
    head_position: int

    @property
    def is_terminal(self) -> bool:
        return self.output_kind.is_terminal

    @property
    def tape_text(self) -> str:
        return "".join(self.tape)

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["tape"] = list(self.tape)
        payload["output_kind"] = self.output_kind.value
        return payload

    def format(self) -> str:
        cells = "".join(
            f"[{symbol}]" if index == self.head_position else symbol
            for index, symbol in enumerate(self.tape)
        )
        return (
            f"estado={self.current_state_name} ({self.output_kind.value}), "
            f"cabeza={self.head_position}, transición={self.transition_description or '-'}\n"
            f"  cinta: {cells}"
        )


class ExecutionEngine:
    """Aplica una transición por llamada sobre un único estado de ejecución."""

    def __init__(self, configuration: MachineConfiguration, tape_input: str = "") -> None:
        self.configuration = configuration
        self.state = ExecutionState(tape=Tape(tape_input))

    def configure_tape(self, tape_input: str) -> None:
        self.state.tape.configure(tape_input)
        self.reset_machine()

    def configure_machine(self, configuration: MachineConfiguration) -> None:
        self.configuration = configuration
        self.reset_machine()

    def reset_machine(self) -> None:
        """Vuelve a la cinta inicial, cabeza en 0 y estado Q1."""

        self.state.tape.restore()
        self.state.head_position = 0
        self.state.current_state_index = 0
        self.state.previous_state_index = None

    def evaluate(self) -> ResultSnapshot:
        """Ejecuta un único paso.

        En un estado terminal no hace nada. Lanza ``NoTransitionFound`` sin
        modificar la máquina si no hay regla para el símbolo leído, e
        ``InvalidStateReference`` si el destino no existe; en ese caso la
        escritura y el movimiento ya aplicados se conservan.
        """

        state = self.state
        current = self.configuration[state.current_state_index]
        if current.kind.is_terminal:
            return self.snapshot()

        symbol = state.tape.read(state.head_position)
        transition = current.transition_for(symbol)
        if transition is None:
            raise NoTransitionFound(current.name, symbol)

        state.tape.write(state.head_position, transition.write_symbol)
        offset = 1 if transition.move_direction == "R" else -1
        state.head_position = state.tape.extend_if_needed(state.head_position + offset)

        next_index = self.configuration.index_of(transition.next_state)
        if next_index is None:
            raise InvalidStateReference(transition.next_state, len(self.configuration))

        state.previous_state_index = state.current_state_index
        state.current_state_index = next_index
        logger.debug(
            "%s: %s -> %s, cabeza=%d",
            current.name,
            transition.describe(),
            self.configuration[next_index].name,
            state.head_position,
        )
        return self.snapshot()

    def snapshot(self) -> ResultSnapshot:
        state = self.state
        configuration = self.configuration
        current = configuration[state.current_state_index]
        transition = current.transition_for(state.tape.read(state.head_position))
        previous = state.previous_state_index

        return ResultSnapshot(
            tape=state.tape.snapshot(),
            output_kind=current.kind,
            transition_description=transition.describe() if transition else None,
            previous_state_index=previous,
            previous_state_name=configuration[previous].name if previous is not None else None,
            current_state_name=current.name,
            current_state_index=state.current_state_index,
            next_state_name=transition.next_state if transition else None,
            next_state_index=configuration.index_of(transition.next_state) if transition else None,
            head_position=state.head_position,
        )
