from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Set, Tuple

from constants import DEFAULT_TOOL, MESSAGES, UI


logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"


@dataclass
class AppError:
    message: str
    severity: ErrorSeverity = ErrorSeverity.ERROR
    recoverable: bool = True


@dataclass
class ModelEntry:
    name: str
    loaded: bool = False


@dataclass
class ViewState:
    models: List[ModelEntry] = field(default_factory=list)
    cursor: int = 0
    status: str = UI.INITIAL_STATUS
    quitting: bool = False
    # Names the daemon holds resident; may include models absent from ``models``.
    loaded: Set[str] = field(default_factory=set)

    def __post_init__(self) -> None:
        self.loaded = set(self.loaded) | {entry.name for entry in self.models if entry.loaded}
        self._sync_flags()

    def _sync_flags(self) -> None:
        for entry in self.models:
            entry.loaded = entry.name in self.loaded

    @property
    def selected(self) -> ModelEntry | None:
        if not self.models:
            return None
        return self.models[self.cursor]

    @property
    def loaded_names(self) -> List[str]:
        """Loaded names in list order, then any the list does not show, sorted."""
        listed = [entry.name for entry in self.models if entry.name in self.loaded]
        return listed + sorted(self.loaded - set(listed))

    def mark_loaded(self, name: str) -> None:
        self.loaded.add(name)
        self._sync_flags()

    def mark_unloaded(self, name: str) -> None:
        self.loaded.discard(name)
        self._sync_flags()

    def clear_loaded(self) -> None:
        self.loaded = set()
        self._sync_flags()

    def clamp_cursor(self) -> None:
        if not self.models:
            self.cursor = 0
            return
        self.cursor = max(0, min(self.cursor, len(self.models) - 1))

    def replace_models(self, names: Iterable[str], loaded: Set[str]) -> None:
        self.models = [ModelEntry(name=name) for name in names]
        self.loaded = set(loaded)
        self._sync_flags()
        self.clamp_cursor()


def handle_error(error: AppError, view: ViewState | None = None) -> str:
    label = error.severity.value.upper()
    message = f"[{label}] {error.message}"
    level = logging.WARNING if error.severity == ErrorSeverity.WARNING else logging.ERROR
    logger.log(level, error.message)
    if view is not None:
        view.status = error.message
    if error.severity == ErrorSeverity.FATAL and not error.recoverable:
        raise SystemExit(1)
    return message


# Line roles understood by the painter; see Theme in ollama_manager_cli.
ROLE_TITLE = "title"
ROLE_TEXT = "text"
ROLE_MODEL = "model"
ROLE_HELP = "help"
ROLE_STATUS = "status"

CURSOR_MARK = "> "
NO_CURSOR = "  "
LOADED_SUFFIX = " [LOADED]"


def render_lines(view: ViewState, tool: str = DEFAULT_TOOL) -> List[Tuple[str, str]]:
    """Describe the screen as ``(text, role)`` pairs, top to bottom."""
    if view.quitting:
        return []
    lines: List[Tuple[str, str]] = [(UI.TITLE, ROLE_TITLE), ("", ROLE_TEXT)]
    if not view.models:
        lines.append(("  " + MESSAGES.NO_MODELS.format(tool=tool), ROLE_TEXT))
    else:
        for idx, entry in enumerate(view.models):
            mark = CURSOR_MARK if idx == view.cursor else NO_CURSOR
            suffix = LOADED_SUFFIX if entry.loaded else ""
            lines.append((f"{mark}{entry.name}{suffix}", ROLE_MODEL))
    lines.append(("", ROLE_TEXT))
    lines.append((UI.HELP_LINE, ROLE_HELP))
    lines.append(("", ROLE_TEXT))
    lines.append((f"Status: {view.status}", ROLE_STATUS))
    return lines


def render(view: ViewState, tool: str = DEFAULT_TOOL) -> str:
    return "\n".join(text for text, _role in render_lines(view, tool))


def format_scroll_indicator(first_index: int, total: int, visible_rows: int) -> str:
    if total <= 0 or visible_rows <= 0:
        return ""
    if total <= visible_rows:
        return ""
    current = max(1, min(total, first_index + 1))
    return f"[{current}/{total}]"


def visible_window(cursor: int, total: int, rows: int) -> Tuple[int, int]:
    """Return the ``[start, end)`` slice of a list that keeps ``cursor`` on screen."""
    if rows <= 0 or total <= 0:
        return (0, 0)
    if total <= rows:
        return (0, total)
    start = min(max(0, cursor - rows // 2), total - rows)
    return (start, start + rows)
