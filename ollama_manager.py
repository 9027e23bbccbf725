#!/usr/bin/env python3
"""Thin wrapper around the ``ollama`` command line.

Lists installed and loaded models, starts and stops them. The same module is
used by the interactive manager (``ollama_manager_cli.py``) and can be run on
its own for scripting::

    python ollama_manager.py list
    python ollama_manager.py stop qwen3:32b
    python ollama_manager.py unload-all

Settings come from ``.env`` / ``.env.local`` next to this script (or ``.env``
in the working directory) and can be overridden on the command line.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Set

from dotenv import load_dotenv

from constants import DEFAULT_LOG_NAME, DEFAULT_TOOL, FALLBACK_LOG_NAME
from process_utils import CommandError, run_capture, run_quiet, spawn_detached
from validators import validate_path, validate_timeout, validate_tool


SCRIPT_DIR = Path(__file__).resolve().parent

load_dotenv(SCRIPT_DIR / ".env")
load_dotenv(SCRIPT_DIR / ".env.local")
load_dotenv(Path.cwd() / ".env")

logger = logging.getLogger(__name__)


def parse_model_table(text: str | None) -> List[str]:
    """Return the first column of a ``list``/``ps`` style table.

    The first line is always treated as the header and dropped. Lines with
    no fields are skipped. Empty input gives an empty list.
    """
    text = (text or "").strip()
    if not text:
        return []
    names: List[str] = []
    for line in text.splitlines()[1:]:
        fields = line.split()
        if fields:
            names.append(fields[0])
    return names


def parse_model_names(text: str | None) -> List[str]:
    return parse_model_table(text)


def parse_loaded_names(text: str | None) -> Set[str]:
    return set(parse_model_table(text))


@dataclass
class OllamaClient:
    tool: str = DEFAULT_TOOL
    timeout: float | None = None

    def _query(self, subcommand: str) -> str:
        return run_capture([self.tool, subcommand], timeout=self.timeout)

    def list_models(self, *, strict: bool = False) -> List[str]:
        try:
            return parse_model_names(self._query("list"))
        except CommandError as exc:
            if strict:
                raise
            logger.warning("Listing models failed: %s", exc)
            return []

    def list_loaded(self, *, strict: bool = False) -> Set[str]:
        try:
            return parse_loaded_names(self._query("ps"))
        except CommandError as exc:
            if strict:
                raise
            logger.warning("Listing loaded models failed: %s", exc)
            return set()

    def start_model(self, name: str) -> None:
        # Fire-and-forget: loading continues in the daemon after we return.
        spawn_detached([self.tool, "run", name])

    def stop_model(self, name: str) -> int:
        return run_quiet([self.tool, "stop", name], timeout=self.timeout)


def env_default_tool() -> str:
    return os.getenv("OLLAMA_BIN", "") or DEFAULT_TOOL


def env_default_timeout() -> str:
    return os.getenv("OLLAMA_MANAGER_TIMEOUT", "")


def env_default_log_file() -> str:
    return os.getenv("OLLAMA_MANAGER_LOG", "") or str(SCRIPT_DIR / DEFAULT_LOG_NAME)


def _timeout_arg(value: str) -> float | None:
    result = validate_timeout(value, name="--timeout")
    if not result.is_valid:
        raise argparse.ArgumentTypeError(result.error)
    return result.value


def _tool_arg(value: str) -> str:
    result = validate_tool(value, default=DEFAULT_TOOL, name="--tool")
    if not result.is_valid:
        raise argparse.ArgumentTypeError(result.error)
    return result.value


def _log_file_arg(value: str) -> Path:
    result = validate_path(value, name="--log-file")
    if not result.is_valid:
        raise argparse.ArgumentTypeError(result.error)
    return result.value


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--tool",
        type=_tool_arg,
        default=env_default_tool(),
        help="ollama executable to invoke (env: OLLAMA_BIN, default: ollama)",
    )
    parser.add_argument(
        "--timeout",
        type=_timeout_arg,
        default=env_default_timeout(),
        help="seconds to wait for list/ps/stop before giving up (env: OLLAMA_MANAGER_TIMEOUT, default: no limit)",
    )
    parser.add_argument(
        "--log-file",
        type=_log_file_arg,
        default=env_default_log_file(),
        help="where to write the activity log (env: OLLAMA_MANAGER_LOG)",
    )
    parser.add_argument("--verbose", action="store_true", help="log every command at debug level")


def _open_log_handler(log_file: Path | str) -> tuple[logging.Handler, Path | None]:
    # The install directory is often read-only; fall back to the home directory, then to nothing.
    for candidate in (Path(log_file), Path.home() / FALLBACK_LOG_NAME):
        try:
            return logging.FileHandler(candidate, encoding="utf-8"), candidate
        except OSError:
            continue
    return logging.NullHandler(), None


def configure_logging(log_file: Path | str, verbose: bool = False) -> Path | None:
    """Send log records to ``log_file``; returns the file actually used, if any."""
    handler, used = _open_log_handler(log_file)
    logging.basicConfig(
        handlers=[handler],
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(asctime)s] %(message)s",
    )
    if used is not None and Path(used) != Path(log_file):
        logger.warning("Could not open %s, logging to %s instead", log_file, used)
    return used


def client_from_args(args: argparse.Namespace) -> OllamaClient:
    return OllamaClient(tool=args.tool, timeout=args.timeout)


def cmd_list(client: OllamaClient, args: argparse.Namespace) -> int:
    models = client.list_models(strict=True)
    loaded = client.list_loaded()
    if not models:
        print(f"No models found. Run '{client.tool} pull <model>' first.")
        return 0
    for name in models:
        marker = "*" if name in loaded else " "
        print(f"{marker} {name}")
    return 0


def cmd_ps(client: OllamaClient, args: argparse.Namespace) -> int:
    for name in sorted(client.list_loaded(strict=True)):
        print(name)
    return 0


def cmd_stop(client: OllamaClient, args: argparse.Namespace) -> int:
    for name in args.names:
        client.stop_model(name)
        print(f"Stopped {name}")
    return 0


def cmd_unload_all(client: OllamaClient, args: argparse.Namespace) -> int:
    loaded = client.list_loaded(strict=True)
    for name in sorted(loaded):
        client.stop_model(name)
        print(f"Stopped {name}")
    print("All models unloaded")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="List, stop and unload local Ollama models")
    add_common_arguments(parser)
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="installed models, '*' marks loaded ones")
    p_list.set_defaults(func=cmd_list)

    p_ps = sub.add_parser("ps", help="models currently loaded by the daemon")
    p_ps.set_defaults(func=cmd_ps)

    p_stop = sub.add_parser("stop", help="unload one or more models")
    p_stop.add_argument("names", nargs="+", metavar="NAME")
    p_stop.set_defaults(func=cmd_stop)

    p_unload = sub.add_parser("unload-all", help="unload every loaded model")
    p_unload.set_defaults(func=cmd_unload_all)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_file, args.verbose)
    client = client_from_args(args)
    try:
        return args.func(client, args)
    except CommandError as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
