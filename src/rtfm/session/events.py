"""Session input events and controller actions.

Key events are abstract: the UI layer maps concrete key bindings onto
them, so transitions can be driven without a terminal.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

from ..models import FetchResult


@dataclass(slots=True, frozen=True)
class CharInput:
    char: str
    kind: Literal["char"] = "char"


@dataclass(slots=True, frozen=True)
class Backspace:
    kind: Literal["backspace"] = "backspace"


@dataclass(slots=True, frozen=True)
class Move:
    """Arrow navigation: -1 up, +1 down."""

    delta: int
    kind: Literal["move"] = "move"


@dataclass(slots=True, frozen=True)
class Page:
    """Page navigation: -1 up, +1 down."""

    direction: int
    kind: Literal["page"] = "page"


@dataclass(slots=True, frozen=True)
class Home:
    kind: Literal["home"] = "home"


@dataclass(slots=True, frozen=True)
class End:
    kind: Literal["end"] = "end"


@dataclass(slots=True, frozen=True)
class FocusSwitch:
    kind: Literal["focus_switch"] = "focus_switch"


@dataclass(slots=True, frozen=True)
class Confirm:
    kind: Literal["confirm"] = "confirm"


@dataclass(slots=True, frozen=True)
class Cancel:
    kind: Literal["cancel"] = "cancel"


@dataclass(slots=True, frozen=True)
class EnterSearch:
    kind: Literal["enter_search"] = "enter_search"


@dataclass(slots=True, frozen=True)
class ToggleSource:
    kind: Literal["toggle_source"] = "toggle_source"


@dataclass(slots=True, frozen=True)
class NextMatch:
    kind: Literal["next_match"] = "next_match"


@dataclass(slots=True, frozen=True)
class PrevMatch:
    kind: Literal["prev_match"] = "prev_match"


@dataclass(slots=True, frozen=True)
class Quit:
    kind: Literal["quit"] = "quit"


@dataclass(slots=True, frozen=True)
class FilterTriggered:
    """Debounced command-list filter text."""

    text: str
    kind: Literal["filter_triggered"] = "filter_triggered"


@dataclass(slots=True, frozen=True)
class PreviewTriggered:
    """Debounced auto-preview of the selected command."""

    command: str
    kind: Literal["preview_triggered"] = "preview_triggered"


@dataclass(slots=True, frozen=True)
class FetchCompleted:
    result: FetchResult
    kind: Literal["fetch_completed"] = "fetch_completed"


KeyEvent: TypeAlias = (
    CharInput
    | Backspace
    | Move
    | Page
    | Home
    | End
    | FocusSwitch
    | Confirm
    | Cancel
    | EnterSearch
    | ToggleSource
    | NextMatch
    | PrevMatch
    | Quit
)

SessionEvent: TypeAlias = KeyEvent | FilterTriggered | PreviewTriggered | FetchCompleted


@dataclass(slots=True, frozen=True)
class ContinueAction:
    """Keep the session running."""

    kind: Literal["continue"] = "continue"


@dataclass(slots=True, frozen=True)
class QuitAction:
    """Terminate the session."""

    kind: Literal["quit"] = "quit"


SessionAction: TypeAlias = ContinueAction | QuitAction
