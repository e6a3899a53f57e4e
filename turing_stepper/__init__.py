import logging

from .config_loader import (
    MachineConfiguration,
    MachineDocument,
    State,
    StateKind,
    Transition,
    load_configuration,
    parse_transition,
)
from .errors import (
    ConfigurationError,
    InvalidStateReference,
    InvalidStepIndex,
    NoTransitionFound,
    NonHalting,
    StepError,
    TuringError,
)
from .machine import ExecutionEngine, ResultSnapshot, Tape
from .navigator import MAX_STEP_INDEX, StepNavigator
from .runner import RunResult, TestCase, TestRunner

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "MachineConfiguration",
    "MachineDocument",
    "State",
    "StateKind",
    "Transition",
    "load_configuration",
    "parse_transition",
    "ConfigurationError",
    "InvalidStateReference",
    "InvalidStepIndex",
    "NoTransitionFound",
    "NonHalting",
    "StepError",
    "TuringError",
    "ExecutionEngine",
    "ResultSnapshot",
    "Tape",
    "MAX_STEP_INDEX",
    "StepNavigator",
    "RunResult",
    "TestCase",
    "TestRunner",
]
