"""Session state machine driving the interactive browser."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from ..command_index import CommandIndex
from ..constants import DEBOUNCE_MS, DEFAULT_SECTION, DOCUMENT_PAGE_SIZE, LIST_PAGE_SIZE
from ..debounce import InputDebouncer
from ..fetch import FetchCoordinator
from ..logging import key_fields, log_event
from ..models import CommandEntry, DocumentKey
from ..search import next_match, prev_match, search
from .events import (
    Backspace,
    Cancel,
    CharInput,
    Confirm,
    ContinueAction,
    End,
    EnterSearch,
    FetchCompleted,
    FilterTriggered,
    FocusSwitch,
    Home,
    Move,
    NextMatch,
    Page,
    PreviewTriggered,
    PrevMatch,
    Quit,
    QuitAction,
    SessionAction,
    SessionEvent,
    ToggleSource,
)
from .state import Focus, ViewState, clamp

CONTINUE = ContinueAction()


class SessionController:
    """Owns ViewState and applies one event at a time.

    ``handle`` is synchronous and never awaits. Fetches run as tasks that
    post ``FetchCompleted`` back onto the event queue; a completion whose
    key is no longer the active document key is discarded.
    """

    def __init__(
        self,
        index: CommandIndex,
        coordinator: FetchCoordinator,
        *,
        default_section: int = DEFAULT_SECTION,
        debounce_interval: float = DEBOUNCE_MS / 1000,
        auto_preview: bool = False,
    ) -> None:
        self.index = index
        self.coordinator = coordinator
        self.default_section = default_section
        self.auto_preview = auto_preview
        self.state = ViewState(visible_commands=index.prefix_query(""))
        self.queue: asyncio.Queue[SessionEvent] = asyncio.Queue()
        self.filter_debouncer = InputDebouncer(
            lambda text: self.post(FilterTriggered(text)), debounce_interval
        )
        self.preview_debouncer = InputDebouncer(
            lambda name: self.post(PreviewTriggered(name)), debounce_interval
        )
        self._tasks: set[asyncio.Task[None]] = set()
        # Called after every handled event, e.g. to redraw the UI
        self.on_change: Optional[Callable[[], None]] = None

    # ------------------------------------------------------------------
    # Event loop
    # ------------------------------------------------------------------

    def post(self, event: SessionEvent) -> None:
        self.queue.put_nowait(event)

    async def run(self) -> str:
        """Drain the event queue until Quit.

        Returns:
            Stop reason for logging
        """
        log_event(
            "session_start",
            command_count=len(self.index),
            default_section=self.default_section,
            auto_preview=self.auto_preview,
        )
        reason = "quit"
        try:
            while self.state.running:
                event = await self.queue.get()
                action = self.dispatch(event)
                if self.on_change is not None:
                    self.on_change()
                if action.kind == "quit":
                    break
        except asyncio.CancelledError:
            reason = "cancelled"
            raise
        finally:
            await self.shutdown()
            log_event("session_stop", reason=reason)
        return reason

    def dispatch(self, event: SessionEvent) -> SessionAction:
        """Handle one event; a failure is reported and the session goes on."""
        try:
            return self.handle(event)
        except Exception as e:
            log_event(
                "session_error",
                level=logging.ERROR,
                event_type=event.kind,
                error_type=type(e).__name__,
                error=str(e),
            )
            logging.error("Error handling %s", event.kind, exc_info=True)
            self.state.status_message = f"Error: {e}"
            return CONTINUE

    async def shutdown(self) -> None:
        self.filter_debouncer.cancel()
        self.preview_debouncer.cancel()
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        await self.coordinator.close()

    def set_viewports(self, list_height: int, document_height: int) -> None:
        """Record pane heights measured by the UI and re-clamp offsets."""
        state = self.state
        state.list_viewport = max(1, list_height)
        state.document_viewport = max(1, document_height)
        state.scroll_offset = clamp(state.scroll_offset, 0, state.max_scroll)
        self._reveal_selection()

    # ------------------------------------------------------------------
    # Transition function
    # ------------------------------------------------------------------

    def handle(self, event: SessionEvent) -> SessionAction:
        state = self.state
        state.status_message = None

        if isinstance(event, Quit):
            state.running = False
            return QuitAction()
        if isinstance(event, FetchCompleted):
            self._on_fetch_completed(event)
            return CONTINUE
        if isinstance(event, FilterTriggered):
            self._apply_filter(event.text)
            return CONTINUE
        if isinstance(event, PreviewTriggered):
            self._on_preview(event.command)
            return CONTINUE
        if isinstance(event, FocusSwitch):
            self._switch_focus()
            return CONTINUE

        if state.focus is Focus.COMMAND_LIST:
            self._handle_command_list(event)
        elif state.focus is Focus.DOCUMENT:
            self._handle_document(event)
        else:
            self._handle_search_input(event)
        return CONTINUE

    def _switch_focus(self) -> None:
        state = self.state
        if state.focus is Focus.COMMAND_LIST:
            if state.has_document:
                state.focus = Focus.DOCUMENT
        elif state.focus is Focus.DOCUMENT:
            state.focus = Focus.COMMAND_LIST

    def _handle_command_list(self, event: SessionEvent) -> None:
        state = self.state
        if isinstance(event, CharInput):
            state.filter_text += event.char
            self.filter_debouncer.on_keystroke(state.filter_text)
        elif isinstance(event, Backspace):
            if state.filter_text:
                state.filter_text = state.filter_text[:-1]
                self.filter_debouncer.on_keystroke(state.filter_text)
        elif isinstance(event, Move):
            self._select(state.selected_command + event.delta)
        elif isinstance(event, Page):
            self._select(state.selected_command + event.direction * LIST_PAGE_SIZE)
        elif isinstance(event, Home):
            self._select(0)
        elif isinstance(event, End):
            self._select(len(state.visible_commands) - 1)
        elif isinstance(event, Confirm):
            self.preview_debouncer.cancel()
            entry = state.selected_entry
            if entry is not None:
                self._issue_fetch(self._key_for(entry))
        elif isinstance(event, Cancel):
            if state.filter_text:
                state.filter_text = ""
                self.filter_debouncer.cancel()
                self._apply_filter("")

    def _handle_document(self, event: SessionEvent) -> None:
        state = self.state
        if isinstance(event, Move):
            self._scroll_to(state.scroll_offset + event.delta)
        elif isinstance(event, Page):
            self._scroll_to(state.scroll_offset + event.direction * DOCUMENT_PAGE_SIZE)
        elif isinstance(event, Home):
            self._scroll_to(0)
        elif isinstance(event, End):
            self._scroll_to(state.max_scroll)
        elif isinstance(event, EnterSearch):
            state.search_buffer = ""
            state.focus = Focus.SEARCH_INPUT
        elif isinstance(event, ToggleSource):
            self._toggle_source()
        elif isinstance(event, NextMatch):
            self._step_match(next_match)
        elif isinstance(event, PrevMatch):
            self._step_match(prev_match)
        elif isinstance(event, Cancel):
            state.focus = Focus.COMMAND_LIST

    def _handle_search_input(self, event: SessionEvent) -> None:
        state = self.state
        if isinstance(event, CharInput):
            state.search_buffer += event.char
        elif isinstance(event, Backspace):
            state.search_buffer = state.search_buffer[:-1]
        elif isinstance(event, Confirm):
            state.current_query = state.search_buffer
            state.search_buffer = ""
            state.focus = Focus.DOCUMENT
            self._recompute_matches()
            self._reveal_match()
        elif isinstance(event, Cancel):
            state.search_buffer = ""
            state.focus = Focus.DOCUMENT
        elif isinstance(event, NextMatch):
            self._step_match(next_match)
        elif isinstance(event, PrevMatch):
            self._step_match(prev_match)

    # ------------------------------------------------------------------
    # Command list
    # ------------------------------------------------------------------

    def _apply_filter(self, text: str) -> None:
        state = self.state
        # A trigger for text that has since changed is superseded
        if text != state.filter_text:
            return
        state.visible_commands = self.index.prefix_query(text)
        state.selected_command = 0
        state.list_offset = 0
        self._schedule_preview()

    def _select(self, index: int) -> None:
        state = self.state
        if not state.visible_commands:
            state.selected_command = 0
            return
        selected = clamp(index, 0, len(state.visible_commands) - 1)
        if selected == state.selected_command:
            return
        state.selected_command = selected
        self._reveal_selection()
        self._schedule_preview()

    def _reveal_selection(self) -> None:
        state = self.state
        height = state.list_viewport
        if state.selected_command < state.list_offset:
            state.list_offset = state.selected_command
        elif state.selected_command >= state.list_offset + height:
            state.list_offset = state.selected_command - height + 1
        max_offset = max(0, len(state.visible_commands) - height)
        state.list_offset = clamp(state.list_offset, 0, max_offset)

    def _schedule_preview(self) -> None:
        entry = self.state.selected_entry
        if not self.auto_preview or entry is None:
            return
        self.preview_debouncer.on_keystroke(entry.name)

    def _on_preview(self, command: str) -> None:
        state = self.state
        entry = state.selected_entry
        if state.focus is not Focus.COMMAND_LIST or entry is None:
            return
        if entry.name != command:
            return
        key = self._key_for(entry)
        if key != state.active_document_key:
            self._issue_fetch(key)

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def _key_for(self, entry: CommandEntry) -> DocumentKey:
        source = self.state.source
        if entry.sources and source not in entry.sources:
            source = source.other
        return DocumentKey(entry.name, entry.preferred_section(self.default_section), source)

    def _issue_fetch(self, key: DocumentKey) -> None:
        state = self.state
        state.active_document_key = key
        state.source = key.source
        state.loading = True
        task = asyncio.create_task(self._fetch(key))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _fetch(self, key: DocumentKey) -> None:
        result = await self.coordinator.get_or_fetch(key)
        self.post(FetchCompleted(result))

    def _on_fetch_completed(self, event: FetchCompleted) -> None:
        state = self.state
        result = event.result
        if result.key != state.active_document_key:
            log_event(
                "fetch_discarded",
                level=logging.DEBUG,
                active=state.active_document_key.describe() if state.active_document_key else None,
                **key_fields(result.key),
            )
            return

        state.loading = False
        state.document_key = result.key
        state.document = result.document
        state.document_error = result.error
        state.scroll_offset = 0
        self._recompute_matches()

    def _toggle_source(self) -> None:
        key = self.state.active_document_key
        if key is None:
            return
        self._issue_fetch(key.with_source(key.source.other))

    # ------------------------------------------------------------------
    # Document
    # ------------------------------------------------------------------

    def _scroll_to(self, offset: int) -> None:
        self.state.scroll_offset = clamp(offset, 0, self.state.max_scroll)

    def _recompute_matches(self) -> None:
        state = self.state
        if state.document is None:
            state.matches = []
        else:
            state.matches = search(state.document, state.current_query)
        state.match_cursor = 0

    def _step_match(self, step: Callable[[list, int], int]) -> None:
        state = self.state
        state.match_cursor = step(state.matches, state.match_cursor)
        self._reveal_match()

    def _reveal_match(self) -> None:
        state = self.state
        match = state.current_match
        if match is None:
            return
        height = state.document_viewport
        if match.line_index < state.scroll_offset:
            self._scroll_to(match.line_index)
        elif match.line_index >= state.scroll_offset + height:
            self._scroll_to(match.line_index - height + 1)
