"""Map prompt_toolkit key presses onto abstract session events."""

from __future__ import annotations

from typing import Optional

from ..session.events import (
    Backspace,
    Cancel,
    CharInput,
    Confirm,
    End,
    EnterSearch,
    FocusSwitch,
    Home,
    KeyEvent,
    Move,
    NextMatch,
    Page,
    PrevMatch,
    Quit,
    ToggleSource,
)
from ..session.state import Focus

# Key names as prompt_toolkit reports them; aliases map to the same event.
GLOBAL_KEYS: dict[str, KeyEvent] = {
    "c-c": Quit(),
    "c-q": Quit(),
}

NAVIGATION_KEYS: dict[str, KeyEvent] = {
    "up": Move(-1),
    "down": Move(1),
    "pageup": Page(-1),
    "pagedown": Page(1),
    "home": Home(),
    "end": End(),
    "c-i": FocusSwitch(),
    "tab": FocusSwitch(),
    "s-tab": FocusSwitch(),
    "c-m": Confirm(),
    "enter": Confirm(),
    "escape": Cancel(),
    "c-h": Backspace(),
    "backspace": Backspace(),
}

# Single-character commands, only while the document pane has focus
DOCUMENT_COMMANDS: dict[str, KeyEvent] = {
    "/": EnterSearch(),
    "n": NextMatch(),
    "N": PrevMatch(),
    "t": ToggleSource(),
    "q": Quit(),
    "j": Move(1),
    "k": Move(-1),
    " ": Page(1),
    "g": Home(),
    "G": End(),
}

MATCH_KEYS: dict[str, KeyEvent] = {
    "c-n": NextMatch(),
    "c-p": PrevMatch(),
}


def _printable(data: str) -> bool:
    return len(data) == 1 and data.isprintable()


def translate_key(key: str, data: str, focus: Focus) -> Optional[KeyEvent]:
    """Translate one key press for the focused pane.

    Args:
        key: prompt_toolkit key name (``"up"``, ``"c-m"``) or the character
        data: Raw data of the key press
        focus: Pane that has focus

    Returns:
        The session event, or None when the key means nothing here
    """
    if key in GLOBAL_KEYS:
        return GLOBAL_KEYS[key]

    if focus is not Focus.COMMAND_LIST and key in MATCH_KEYS:
        return MATCH_KEYS[key]

    if key in NAVIGATION_KEYS:
        return NAVIGATION_KEYS[key]

    if not _printable(data):
        return None

    if focus is Focus.DOCUMENT:
        return DOCUMENT_COMMANDS.get(data)
    return CharInput(data)
