from __future__ import annotations

import logging
import os
import shlex
import subprocess
from typing import List, Optional


logger = logging.getLogger(__name__)


class CommandError(Exception):
    def __init__(self, cmd: List[str], message: str, returncode: Optional[int] = None) -> None:
        super().__init__(message)
        self.cmd = list(cmd)
        self.message = message
        self.returncode = returncode

    def __str__(self) -> str:
        return self.message


def shell_join(parts: List[str]) -> str:
    return " ".join(shlex.quote(str(x)) for x in parts)


def run_capture(cmd: List[str], *, timeout: float | None = None) -> str:
    """Run ``cmd`` to completion and return its stdout.

    Raises CommandError when the executable is missing, the command exits
    non-zero, or ``timeout`` elapses.
    """
    logger.debug("Running: %s", shell_join(cmd))
    try:
        result = subprocess.run(
            cmd,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise CommandError(cmd, f"{cmd[0]} not found") from exc
    except subprocess.TimeoutExpired as exc:
        raise CommandError(cmd, f"{shell_join(cmd)} timed out after {timeout}s") from exc
    except OSError as exc:
        raise CommandError(cmd, f"Could not run {cmd[0]}: {exc}") from exc
    if result.returncode != 0:
        detail = (result.stderr or "").strip().splitlines()
        reason = detail[-1] if detail else f"exit code {result.returncode}"
        raise CommandError(cmd, f"{shell_join(cmd)} failed: {reason}", result.returncode)
    return result.stdout or ""


def run_quiet(cmd: List[str], *, timeout: float | None = None) -> int:
    """Run ``cmd`` to completion, discarding output, and return the exit code.

    A non-zero exit is reported through the return value, not raised.
    """
    logger.info("Running: %s", shell_join(cmd))
    try:
        returncode = subprocess.call(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise CommandError(cmd, f"{cmd[0]} not found") from exc
    except subprocess.TimeoutExpired as exc:
        raise CommandError(cmd, f"{shell_join(cmd)} timed out after {timeout}s") from exc
    except OSError as exc:
        raise CommandError(cmd, f"Could not run {cmd[0]}: {exc}") from exc
    if returncode != 0:
        logger.warning("%s exited with code %s", shell_join(cmd), returncode)
    return returncode


def _detach_kwargs() -> dict:
    if os.name == "nt":
        flags = getattr(subprocess, "DETACHED_PROCESS", 0) | getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0)
        return {"creationflags": flags}
    return {"start_new_session": True}


def spawn_detached(cmd: List[str]) -> None:
    """Best-effort fire-and-forget launch.

    The process is started in its own session with stdio on the null device
    and is never waited on, polled or cleaned up: callers cannot observe
    whether it succeeded. Only a failure to start raises CommandError.
    """
    logger.info("Spawning (untracked): %s", shell_join(cmd))
    try:
        subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            **_detach_kwargs(),
        )
    except FileNotFoundError as exc:
        raise CommandError(cmd, f"{cmd[0]} not found") from exc
    except OSError as exc:
        raise CommandError(cmd, f"Could not run {cmd[0]}: {exc}") from exc
