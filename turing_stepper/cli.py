from __future__ import annotations

import argparse
import json
import logging
import time
from pathlib import Path
from typing import List

from .config_loader import MachineDocument, load_configuration, normalize_tape
from .errors import ConfigurationError, InvalidStepIndex
from .navigator import MAX_STEP_INDEX, StepNavigator
from .runner import TestRunner


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Simulador paso a paso de Máquinas de Turing basado en configuraciones YAML",
    )
    parser.add_argument("config", type=Path, help="Ruta al archivo YAML de configuración")
    parser.add_argument(
        "--string",
        "-s",
        dest="strings",
        action="append",
        help="Cadena específica que se desea simular. Puede repetirse",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=None,
        help="Número máximo de pasos antes de declarar que la máquina no se detiene",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--step",
        type=int,
        default=None,
        help=f"Muestra la máquina en el paso indicado (0 a {MAX_STEP_INDEX})",
    )
    mode.add_argument(
        "--trace",
        action="store_true",
        help="Reproduce la ejecución paso a paso mostrando cada instante",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Segundos entre pasos al usar --trace",
    )
    parser.add_argument(
        "--no-fold",
        dest="fold",
        action="store_false",
        help="No convierte en REJECT los resultados distintos de ACCEPT/REJECT",
    )
    parser.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Devuelve la salida en formato JSON para facilitar el post-procesamiento",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Activa el registro detallado")
    return parser


def run_tests(document: MachineDocument, strings: List[str], max_steps: int, fold: bool, json_output: bool) -> int:
    runner = TestRunner(document.configuration, max_steps=max_steps)
    results = {string: runner.run(string) for string in strings}

    if json_output:
        payload = {
            string: {
                "outcome": result.outcome(fold).value,
                "halted": result.halted,
                "reason": result.reason,
                "steps": result.steps,
                "snapshot": result.snapshot.to_dict(),
            }
            for string, result in results.items()
        }
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0

    for string, result in results.items():
        header = f"Cadena '{string}'"
        print("=" * len(header))
        print(header)
        print("=" * len(header))
        print(f"Resultado: {result.outcome(fold).value}")
        print(f"Motivo: {result.reason}")
        print(f"Pasos ejecutados: {result.steps}")
        print(result.snapshot.format())
        print()
    return 0


def show_step(document: MachineDocument, strings: List[str], step: int, json_output: bool) -> int:
    navigator = StepNavigator(document.configuration)
    payload = {}
    for string in strings:
        navigator.configure(document.configuration, string)
        snapshot = navigator.goto_position(step)
        if json_output:
            payload[string] = snapshot.to_dict()
            continue
        print(f"Cadena '{string}', paso {step}:")
        print(snapshot.format())
        if navigator.diagnostic is not None:
            print(f"  aviso: {navigator.diagnostic}")
    if json_output:
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


def trace(document: MachineDocument, strings: List[str], interval: float, json_output: bool) -> int:
    navigator = StepNavigator(document.configuration)
    payload = {}
    for string in strings:
        snapshot = navigator.configure(document.configuration, string)
        frames = [snapshot.to_dict()]
        if not json_output:
            print(f"Cadena '{string}'")
            print(f"Paso {navigator.step_counter:04d}: {snapshot.format()}")

        while True:
            counter = navigator.step_counter
            snapshot = navigator.play()
            if navigator.step_counter == counter or navigator.diagnostic is not None:
                break
            frames.append(snapshot.to_dict())
            if not json_output:
                print(f"Paso {navigator.step_counter:04d}: {snapshot.format()}")
            if snapshot.is_terminal:
                break
            if interval:
                time.sleep(interval)

        if navigator.diagnostic is not None and not json_output:
            print(f"  aviso: {navigator.diagnostic}")
        payload[string] = frames
        if not json_output:
            print()
    if json_output:
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        document = load_configuration(args.config)
    except (OSError, ConfigurationError) as exc:
        parser.error(f"No se pudo cargar la configuración: {exc}")

    strings = args.strings if args.strings is not None else document.simulation_strings
    if not strings:
        parser.error(
            "No se especificaron cadenas para simular. Añada 'simulation_strings' en el YAML o use --string",
        )
    try:
        for string in strings:
            normalize_tape(string)
    except ConfigurationError as exc:
        parser.error(str(exc))

    if args.step is not None:
        try:
            return show_step(document, strings, args.step, args.json_output)
        except InvalidStepIndex as exc:
            parser.error(str(exc))
    if args.trace:
        interval = args.interval if args.interval is not None else document.settings.play_interval
        return trace(document, strings, interval, args.json_output)

    max_steps = args.max_steps if args.max_steps is not None else document.settings.max_steps
    return run_tests(document, strings, max_steps, args.fold, args.json_output)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
