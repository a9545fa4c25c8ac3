"""CLI entrypoint."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

import anyio

from action_signals.action import Payload
from action_signals.describe import describe_tree
from action_signals.io_utils import load_payload, parse_payload, write_output
from action_signals.orchestrator import Orchestrator


class RecordingDispatcher:
    def __init__(self) -> None:
        self.actions: list[Any] = []

    def __call__(self, action: Any) -> None:
        self.actions.append(action)


async def run_signal(
    orch: Orchestrator,
    signal_id: str,
    payload: Payload,
    dispatcher: RecordingDispatcher,
) -> Payload:
    return await orch.run(signal_id, payload, dispatcher, dict)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="action-signals")
    parser.add_argument(
        "--signals-dir",
        action="append",
        default=[],
        help="Directory searched for signal YAML files (repeatable, default: signals)",
    )
    parser.add_argument("--log-level", type=str, default="WARNING")
    commands = parser.add_subparsers(dest="command", required=True)

    run_parser = commands.add_parser("run", help="Run a signal and print the final payload")
    run_parser.add_argument("--signal", type=str, required=True)
    input_group = run_parser.add_mutually_exclusive_group()
    input_group.add_argument("--payload", type=str, help="Initial payload as a JSON object")
    input_group.add_argument("--payload-file", type=str, help="Path to a JSON or YAML payload file")
    run_parser.add_argument("--output", type=str, help="Write the result to this file instead of stdout")

    describe_parser = commands.add_parser("describe", help="Print the compiled tree of a signal")
    describe_parser.add_argument("--signal", type=str, required=True)

    commands.add_parser("list", help="List registered signals")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper())

    signal_roots = [Path(directory) for directory in (args.signals_dir or ["signals"])]
    orch = Orchestrator(signal_roots)

    if args.command == "list":
        for signal_id in orch.registry.list_signals():
            print(signal_id)
        return

    if args.command == "describe":
        loaded = orch.registry.get(args.signal)
        print(describe_tree(loaded.signal.tree, name=loaded.spec.name), end="")
        return

    payload: Payload = {}
    if args.payload is not None:
        payload = parse_payload(args.payload)
    elif args.payload_file is not None:
        payload = load_payload(Path(args.payload_file))

    dispatcher = RecordingDispatcher()
    final_payload = anyio.run(run_signal, orch, args.signal, payload, dispatcher)
    rendered = json.dumps(
        {"payload": final_payload, "dispatched": dispatcher.actions},
        indent=2,
        default=str,
    )
    if args.output:
        write_output(Path(args.output), rendered + "\n")
    else:
        print(rendered)
