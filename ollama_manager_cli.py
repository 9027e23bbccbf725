#!/usr/bin/env python3
"""Interactive terminal manager for locally installed Ollama models."""
from __future__ import annotations

import argparse
import curses
import logging
import sys
from dataclasses import dataclass
from typing import List

from constants import MESSAGES, PALETTE, UI
from keybindings import KEYS
from ollama_manager import OllamaClient, add_common_arguments, client_from_args, configure_logging
from process_utils import CommandError
from tui_base import (
    CURSOR_MARK,
    LOADED_SUFFIX,
    ROLE_HELP,
    ROLE_MODEL,
    ROLE_STATUS,
    ROLE_TITLE,
    AppError,
    ErrorSeverity,
    ViewState,
    format_scroll_indicator,
    handle_error,
    render_lines,
    visible_window,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Theme:
    title: int
    cursor: int
    loaded: int
    help: int
    status: int = curses.A_NORMAL

    @classmethod
    def plain(cls) -> "Theme":
        return cls(title=curses.A_BOLD, cursor=curses.A_BOLD, loaded=curses.A_BOLD, help=curses.A_DIM)


def build_theme() -> Theme:
    """Set up colour pairs once; must run after curses is initialised."""
    try:
        if not curses.has_colors():
            return Theme.plain()
        curses.start_color()
        curses.use_default_colors()
        rich = curses.COLORS >= 256
        curses.init_pair(1, PALETTE.TITLE if rich else PALETTE.TITLE_BASIC, -1)
        curses.init_pair(2, PALETTE.CURSOR if rich else PALETTE.CURSOR_BASIC, -1)
        curses.init_pair(3, PALETTE.LOADED if rich else PALETTE.LOADED_BASIC, -1)
        curses.init_pair(4, PALETTE.HELP if rich else PALETTE.HELP_BASIC, -1)
    except curses.error:
        return Theme.plain()
    help_attr = curses.color_pair(4) if rich else curses.A_DIM
    return Theme(
        title=curses.color_pair(1) | curses.A_BOLD,
        cursor=curses.color_pair(2),
        loaded=curses.color_pair(3),
        help=help_attr,
    )


def action_move(view: ViewState, delta: int) -> None:
    if not view.models:
        return
    target = view.cursor + delta
    if 0 <= target < len(view.models):
        view.cursor = target


def action_run(view: ViewState, client: OllamaClient) -> None:
    entry = view.selected
    if entry is None:
        return
    view.status = MESSAGES.LOADING.format(name=entry.name)
    try:
        client.start_model(entry.name)
    except CommandError as exc:
        handle_error(AppError(MESSAGES.START_FAILED.format(name=entry.name, error=exc)), view)
        return
    # Optimistic: the daemon may still be loading. Refresh reconciles.
    view.mark_loaded(entry.name)
    view.status = MESSAGES.STARTED.format(name=entry.name)


def action_stop(view: ViewState, client: OllamaClient) -> None:
    entry = view.selected
    if entry is None:
        return
    view.status = MESSAGES.STOPPING.format(name=entry.name)
    try:
        client.stop_model(entry.name)
    except CommandError as exc:
        handle_error(AppError(MESSAGES.STOP_FAILED.format(name=entry.name, error=exc)), view)
        return
    view.mark_unloaded(entry.name)
    view.status = MESSAGES.STOPPED.format(name=entry.name)


def action_unload_all(view: ViewState, client: OllamaClient) -> None:
    view.status = MESSAGES.UNLOADING
    for name in view.loaded_names:
        try:
            client.stop_model(name)
        except CommandError as exc:
            handle_error(AppError(MESSAGES.STOP_FAILED.format(name=name, error=exc), ErrorSeverity.WARNING))
    view.clear_loaded()
    view.status = MESSAGES.UNLOADED


def action_refresh(view: ViewState, client: OllamaClient) -> None:
    view.replace_models(client.list_models(), client.list_loaded())
    view.status = MESSAGES.REFRESHED


def handle_key(key: int, view: ViewState, client: OllamaClient) -> None:
    if view.quitting:
        return
    if key in KEYS.QUIT:
        view.quitting = True
    elif key in KEYS.NAV_UP:
        action_move(view, -1)
    elif key in KEYS.NAV_DOWN:
        action_move(view, 1)
    elif key in KEYS.RUN:
        action_run(view, client)
    elif key in KEYS.STOP:
        action_stop(view, client)
    elif key in KEYS.UNLOAD_ALL:
        action_unload_all(view, client)
    elif key in KEYS.REFRESH:
        action_refresh(view, client)


def initial_view(client: OllamaClient) -> ViewState:
    view = ViewState()
    view.replace_models(client.list_models(), client.list_loaded())
    return view


def _put(win: "curses._CursesWindow", y: int, x: int, text: str, width: int, attr: int) -> int:
    if width <= 0 or not text:
        return x
    try:
        win.addnstr(y, x, text, width, attr)
    except curses.error:
        pass
    return x + min(len(text), width)


def _draw_model_line(win: "curses._CursesWindow", y: int, text: str, width: int, theme: Theme) -> None:
    mark, rest = text[: len(CURSOR_MARK)], text[len(CURSOR_MARK) :]
    suffix = ""
    if rest.endswith(LOADED_SUFFIX):
        rest, suffix = rest[: -len(LOADED_SUFFIX)], LOADED_SUFFIX
    x = UI.LEFT_MARGIN
    right = UI.LEFT_MARGIN + width
    x = _put(win, y, x, mark, right - x, theme.cursor if mark == CURSOR_MARK else curses.A_NORMAL)
    x = _put(win, y, x, rest, right - x, curses.A_NORMAL)
    _put(win, y, x, suffix, right - x, theme.loaded)


def draw_screen(stdscr: "curses._CursesWindow", view: ViewState, theme: Theme, tool: str) -> None:
    stdscr.erase()
    lines = render_lines(view, tool)
    if not lines:
        stdscr.refresh()
        return
    h, w = stdscr.getmaxyx()
    width = max(1, w - UI.LEFT_MARGIN * 2)

    model_lines = [line for line in lines if line[1] == ROLE_MODEL]
    head = lines[:2]
    tail = lines[2 + len(model_lines) :]
    body = model_lines
    rows = max(0, h - len(head) - len(tail))
    start, end = visible_window(view.cursor, len(body), rows)
    indicator = format_scroll_indicator(start, len(body), rows)

    attrs = {ROLE_TITLE: theme.title, ROLE_HELP: theme.help, ROLE_STATUS: theme.status}
    y = 0
    for text, role in head + body[start:end] + tail:
        if y >= h:
            break
        if role == ROLE_MODEL:
            _draw_model_line(stdscr, y, text, width, theme)
        else:
            _put(stdscr, y, UI.LEFT_MARGIN, text, width, attrs.get(role, curses.A_NORMAL))
        if role == ROLE_TITLE and indicator and w > len(indicator) + UI.LEFT_MARGIN:
            _put(stdscr, y, w - len(indicator) - UI.LEFT_MARGIN, indicator, len(indicator), curses.A_DIM)
        y += 1
    stdscr.refresh()


def run_tui(stdscr: "curses._CursesWindow", client: OllamaClient) -> None:
    try:
        curses.curs_set(0)
    except curses.error:
        pass
    theme = build_theme()
    view = initial_view(client)
    logger.info("Started with %d model(s), %d loaded", len(view.models), len(view.loaded_names))

    while not view.quitting:
        draw_screen(stdscr, view, theme, client.tool)
        try:
            key = stdscr.getch()
        except KeyboardInterrupt:
            key = KEYS.QUIT[0]
        handle_key(key, view, client)
    draw_screen(stdscr, view, theme, client.tool)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Browse installed Ollama models and load/unload them with single key presses.",
        epilog=UI.HELP_LINE,
    )
    add_common_arguments(parser)
    return parser


def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_file, args.verbose)
    client = client_from_args(args)
    try:
        curses.wrapper(run_tui, client)
    except KeyboardInterrupt:
        return 0
    except curses.error as exc:
        logger.error("Terminal UI failed: %s", exc)
        print(f"Error: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
