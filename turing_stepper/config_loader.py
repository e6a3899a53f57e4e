from __future__ import annotations

import re
import string
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

import yaml

from .errors import ConfigurationError

BLANK = "_"
TAPE_ALPHABET = frozenset(string.ascii_lowercase + string.digits + BLANK)
VALID_MOVEMENTS = {"L", "R"}

_STATE_NAME = re.compile(r"^Q([1-9][0-9]*)$")
_RULE = re.compile(r"^(?P<read>[^-]+)->(?P<write>[^,]+),(?P<move>[^,]+),(?P<target>[^,]+)$")


class StateKind(str, Enum):
    INITIAL = "INITIAL"
    INTERMEDIATE = "INTERMEDIATE"
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"
    FINAL = "FINAL"

    @property
    def is_terminal(self) -> bool:
        return self not in (StateKind.INITIAL, StateKind.INTERMEDIATE)


_LABEL_KINDS = {
    "i": StateKind.INITIAL,
    "a": StateKind.ACCEPT,
    "r": StateKind.REJECT,
    "f": StateKind.FINAL,
}


@dataclass(frozen=True)
class Transition:
    """Representa una regla ``lee->escribe,movimiento,destino``."""

    read_symbol: str
    write_symbol: str
    move_direction: str
    next_state: str

    def describe(self) -> str:
        return f"{self.read_symbol}->{self.write_symbol},{self.move_direction},{self.next_state}"


@dataclass(frozen=True)
class State:
    name: str
    kind: StateKind
    transitions: Tuple[Transition, ...] = ()

    def transition_for(self, symbol: str) -> Optional[Transition]:
        """Primera transición cuyo símbolo de lectura coincide."""

        for transition in self.transitions:
            if transition.read_symbol == symbol:
                return transition
        return None


@dataclass(frozen=True)
class RuntimeSettings:
    max_steps: int = 1000
    play_interval: float = 0.0


@dataclass(frozen=True)
class MachineConfiguration:
    """Estados ordenados por número, direccionables por posición.

    El estado ``Qn`` ocupa siempre el índice ``n - 1``; la tabla ``index``
    resuelve nombres de destino sin depender del orden alfabético.
    """

    states: Tuple[State, ...]
    index: Mapping[str, int] = field(repr=False, compare=False)

    @classmethod
    def build(cls, states: Iterable[State]) -> "MachineConfiguration":
        numbered: Dict[int, State] = {}
        for state in states:
            number = state_number(state.name)
            if number is None:
                raise ConfigurationError(f"Nombre de estado inválido: {state.name!r}. Se espera 'Q<n>'.")
            if number in numbered:
                raise ConfigurationError(f"El estado {state.name} está definido más de una vez.")
            _validate_transitions(state)
            numbered[number] = state

        if not numbered:
            raise ConfigurationError("La máquina debe tener al menos un estado.")

        ordered = tuple(numbered[number] for number in sorted(numbered))
        for position, state in enumerate(ordered):
            if state_number(state.name) != position + 1:
                raise ConfigurationError(
                    f"Los estados deben ser exactamente Q1..Q{len(ordered)} sin huecos; "
                    f"se encontró {state.name} en la posición {position + 1}."
                )
        return cls(states=ordered, index={state.name: i for i, state in enumerate(ordered)})

    def __len__(self) -> int:
        return len(self.states)

    def __getitem__(self, position: int) -> State:
        return self.states[position]

    def index_of(self, reference: str) -> Optional[int]:
        return self.index.get(reference)


def state_number(name: str) -> Optional[int]:
    match = _STATE_NAME.match(name) if isinstance(name, str) else None
    return int(match.group(1)) if match else None


def _validate_symbol(symbol: str, context: str) -> None:
    if symbol not in TAPE_ALPHABET:
        raise ConfigurationError(f"Símbolo no válido en {context}: {symbol!r}.")


def _validate_transitions(state: State) -> None:
    seen = set()
    for transition in state.transitions:
        context = f"la transición {transition.describe()!r} de {state.name}"
        _validate_symbol(transition.read_symbol, context)
        _validate_symbol(transition.write_symbol, context)
        if transition.move_direction not in VALID_MOVEMENTS:
            raise ConfigurationError(
                f"Movimiento inválido en {context}. Valores permitidos: {sorted(VALID_MOVEMENTS)}."
            )
        if transition.read_symbol in seen:
            raise ConfigurationError(
                f"{state.name} tiene más de una transición para el símbolo {transition.read_symbol!r}."
            )
        seen.add(transition.read_symbol)


def parse_transition(text: str) -> Transition:
    """Interpreta una regla con la gramática ``<lee>-><escribe>,<L|R>,<Qn>``."""

    match = _RULE.match(text)
    if match is None:
        raise ConfigurationError(f"Regla de transición mal formada: {text!r}.")
    return Transition(
        read_symbol=match.group("read"),
        write_symbol=match.group("write"),
        move_direction=match.group("move"),
        next_state=match.group("target"),
    )


def parse_edge_rules(rule_text: str, target: str) -> List[Transition]:
    """Reglas de una arista: una por línea, todas hacia ``target``."""

    transitions = []
    for line in rule_text.split("\n"):
        content = re.sub(r"\s+", "", f"{line},{target}")
        if content == f",{target}":
            continue
        transitions.append(parse_transition(content))
    return transitions


def parse_state_label(label: str) -> Tuple[str, StateKind]:
    """Separa ``Q3-a`` en nombre y tipo. Sin sufijo el estado es intermedio."""

    name, _, suffix = label.strip().partition("-")
    kind = _LABEL_KINDS.get(suffix.strip().lower()[:1], StateKind.INTERMEDIATE)
    return name.strip(), kind


def parse_kind(value: Union[str, StateKind, None]) -> StateKind:
    if value is None:
        return StateKind.INTERMEDIATE
    if isinstance(value, StateKind):
        return value
    try:
        return StateKind(str(value).upper())
    except ValueError:
        raise ConfigurationError(
            f"Tipo de estado desconocido: {value!r}. Valores permitidos: {[k.value for k in StateKind]}."
        ) from None


def normalize_tape(text: str) -> str:
    """Limpia la cadena de entrada: sin espacios externos ni blancos."""

    cleaned = text.strip().replace(BLANK, "")
    for symbol in cleaned:
        _validate_symbol(symbol, f"la cinta {text!r}")
    return cleaned


@dataclass(frozen=True)
class MachineDocument:
    """Contenido completo de un archivo YAML de máquina."""

    configuration: MachineConfiguration
    simulation_strings: List[str]
    settings: RuntimeSettings


def _normalize_config(data: Dict) -> Dict:
    """Acepta configuraciones con o sin el nodo 'machine'."""

    if "machine" in data and isinstance(data["machine"], dict):
        return data["machine"]
    return data


def build_configuration(config: Mapping) -> MachineConfiguration:
    """Construye la configuración a partir de un mapeo ya deserializado."""

    raw_states = config.get("states")
    if not isinstance(raw_states, list) or not raw_states:
        raise ConfigurationError("El bloque 'states' es obligatorio y debe ser una lista no vacía.")

    kinds: Dict[str, StateKind] = {}
    rules: Dict[str, List[Transition]] = {}
    for index, raw_state in enumerate(raw_states):
        if isinstance(raw_state, str):
            name, kind = parse_state_label(raw_state)
            raw_rules: List = []
        elif isinstance(raw_state, dict):
            label = raw_state.get("name")
            if not isinstance(label, str):
                raise ConfigurationError(f"El estado #{index} debe tener un 'name'.")
            name, kind = parse_state_label(label)
            if "kind" in raw_state:
                kind = parse_kind(raw_state["kind"])
            raw_rules = raw_state.get("transitions") or []
            if not isinstance(raw_rules, list):
                raise ConfigurationError(f"Las transiciones de {name} deben ser una lista.")
        else:
            raise ConfigurationError(f"Estado #{index} no válido: {raw_state!r}.")

        if name in kinds:
            raise ConfigurationError(f"El estado {name} está definido más de una vez.")
        kinds[name] = kind
        rules[name] = [parse_transition(str(rule).replace(" ", "")) for rule in raw_rules]

    for index, edge in enumerate(config.get("edges") or []):
        if not isinstance(edge, dict) or not {"from", "to", "rule"} <= set(edge):
            raise ConfigurationError(f"La arista #{index} debe incluir 'from', 'to' y 'rule'.")
        source = str(edge["from"])
        if source not in rules:
            raise ConfigurationError(f"Estado origen no válido en la arista #{index}: {source!r}.")
        rules[source].extend(parse_edge_rules(str(edge["rule"]), str(edge["to"])))

    return MachineConfiguration.build(
        State(name=name, kind=kinds[name], transitions=tuple(rules[name])) for name in kinds
    )


def build_settings(raw: Optional[Mapping]) -> RuntimeSettings:
    if raw is None:
        return RuntimeSettings()
    if not isinstance(raw, dict):
        raise ConfigurationError("El bloque 'settings' debe ser un objeto.")

    max_steps = raw.get("max_steps", RuntimeSettings.max_steps)
    if not isinstance(max_steps, int) or isinstance(max_steps, bool) or max_steps < 0:
        raise ConfigurationError("'settings.max_steps' debe ser un entero no negativo.")
    play_interval = raw.get("play_interval", RuntimeSettings.play_interval)
    if not isinstance(play_interval, (int, float)) or play_interval < 0:
        raise ConfigurationError("'settings.play_interval' debe ser un número no negativo.")
    return RuntimeSettings(max_steps=max_steps, play_interval=float(play_interval))


def load_configuration(path: Union[str, Path]) -> MachineDocument:
    """Carga y valida el archivo YAML que describe la MT."""

    with Path(path).open("r", encoding="utf-8") as handle:
        try:
            raw_data = yaml.safe_load(handle)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"YAML inválido en {path}: {exc}") from exc

    if not isinstance(raw_data, dict):
        raise ConfigurationError("El archivo YAML debe describir un objeto mapeo.")

    config = _normalize_config(raw_data)
    configuration = build_configuration(config)

    simulation_strings = raw_data.get("simulation_strings") or config.get("simulation_strings") or []
    if isinstance(simulation_strings, str):
        simulation_strings = [simulation_strings]
    simulation_strings = [str(value) for value in simulation_strings]

    settings = build_settings(raw_data.get("settings", config.get("settings")))
    return MachineDocument(
        configuration=configuration,
        simulation_strings=simulation_strings,
        settings=settings,
    )
