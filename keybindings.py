from __future__ import annotations

import curses
from dataclasses import dataclass


@dataclass(frozen=True)
class Keybindings:
    QUIT = (ord("q"), 3)  # q, Ctrl+C in raw mode
    REFRESH = (ord("R"),)
    RUN = (ord("r"), curses.KEY_ENTER, ord("\n"), ord("\r"))
    STOP = (ord("s"),)
    UNLOAD_ALL = (ord("u"),)

    NAV_UP = (curses.KEY_UP, ord("k"))
    NAV_DOWN = (curses.KEY_DOWN, ord("j"))


KEYS = Keybindings()
