from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UIDefaults:
    TITLE: str = "Ollama Model Manager"
    HELP_LINE: str = "r/Enter: Run  s: Stop  u: Unload All  R: Refresh  q: Quit"
    INITIAL_STATUS: str = "Ready"
    LEFT_MARGIN: int = 2
    MIN_WIDTH: int = 20


@dataclass(frozen=True)
class Palette:
    # 256-colour indices, with 8-colour fallbacks for basic terminals
    TITLE: int = 205
    LOADED: int = 42
    HELP: int = 241
    CURSOR: int = 205
    TITLE_BASIC: int = 5  # magenta
    LOADED_BASIC: int = 2  # green
    HELP_BASIC: int = -1
    CURSOR_BASIC: int = 5


@dataclass(frozen=True)
class Messages:
    LOADING: str = "Loading {name}..."
    STARTED: str = "Started {name}"
    START_FAILED: str = "Failed to start {name}: {error}"
    STOPPING: str = "Stopping {name}..."
    STOPPED: str = "Stopped {name}"
    STOP_FAILED: str = "Failed to stop {name}: {error}"
    UNLOADING: str = "Unloading all models..."
    UNLOADED: str = "All models unloaded"
    REFRESHED: str = "Refreshed"
    NO_MODELS: str = "No models found. Run '{tool} pull <model>' first."


UI = UIDefaults()
PALETTE = Palette()
MESSAGES = Messages()

DEFAULT_TOOL = "ollama"
DEFAULT_LOG_NAME = "ollama-manager.log"
FALLBACK_LOG_NAME = ".ollama-manager.log"
