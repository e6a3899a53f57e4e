from __future__ import annotations


class TuringError(Exception):
    """Error base del simulador."""


class ConfigurationError(TuringError, ValueError):
    """La descripción de la máquina o de la cinta no es válida."""


class StepError(TuringError):
    """Fallo al aplicar una transición concreta."""


class NoTransitionFound(StepError):
    def __init__(self, state: str, symbol: str) -> None:
        super().__init__(f"No existe transición en {state} para el símbolo {symbol!r}.")
        self.state = state
        self.symbol = symbol


class InvalidStateReference(StepError):
    def __init__(self, reference: str, state_count: int) -> None:
        super().__init__(
            f"Referencia de estado inválida: {reference!r} (estados disponibles: Q1..Q{state_count})."
        )
        self.reference = reference
        self.state_count = state_count


class InvalidStepIndex(TuringError, ValueError):
    def __init__(self, index: int, limit: int) -> None:
        super().__init__(f"Paso inválido: {index}. Debe estar entre 0 y {limit}.")
        self.index = index
        self.limit = limit


class NonHalting(TuringError):
    """La ejecución alcanzó el límite de pasos sin llegar a un estado terminal."""

    def __init__(self, steps: int) -> None:
        super().__init__(f"Se alcanzó el límite máximo de {steps} pasos sin detenerse.")
        self.steps = steps
