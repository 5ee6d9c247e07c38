"""Full-screen prompt_toolkit front end for a SessionController."""

from __future__ import annotations

import asyncio

from prompt_toolkit import Application
from prompt_toolkit.key_binding import KeyBindings, KeyPressEvent
from prompt_toolkit.keys import Keys
from prompt_toolkit.layout import HSplit, Layout, VSplit, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.layout.dimension import Dimension

from ..session import SessionController
from ..session.events import Quit
from .keys import translate_key
from .render import (
    build_style,
    render_command_list,
    render_description,
    render_document,
    render_input,
    render_status,
)

LIST_WIDTH = Dimension(min=16, preferred=28, max=40)
DESCRIPTION_HEIGHT = 3


def build_key_bindings(controller: SessionController) -> KeyBindings:
    """Route every key press through translate_key onto the event queue."""
    key_bindings = KeyBindings()

    @key_bindings.add(Keys.Any)
    def _handle_any(event: KeyPressEvent) -> None:
        press = event.key_sequence[0]
        key = press.key.value if isinstance(press.key, Keys) else press.key
        session_event = translate_key(key, press.data, controller.state.focus)
        if session_event is not None:
            controller.post(session_event)

    return key_bindings


def build_application(controller: SessionController) -> Application:
    state = controller.state

    list_window = Window(
        content=FormattedTextControl(lambda: render_command_list(state)),
        wrap_lines=False,
    )
    document_window = Window(
        content=FormattedTextControl(lambda: render_document(state)),
        wrap_lines=False,
    )

    sidebar = HSplit(
        [
            list_window,
            Window(height=1, char="-", style="class:separator"),
            Window(
                height=DESCRIPTION_HEIGHT,
                content=FormattedTextControl(lambda: render_description(state)),
                wrap_lines=True,
            ),
        ],
        width=LIST_WIDTH,
    )

    root = HSplit(
        [
            Window(
                height=1,
                content=FormattedTextControl(lambda: render_status(state)),
                style="class:status",
            ),
            Window(height=1, content=FormattedTextControl(lambda: render_input(state))),
            VSplit(
                [
                    sidebar,
                    Window(width=1, char="|", style="class:separator"),
                    document_window,
                ]
            ),
        ]
    )

    def _sync_viewports(app: Application) -> None:
        list_info = list_window.render_info
        document_info = document_window.render_info
        if list_info is None or document_info is None:
            return
        heights = (list_info.window_height, document_info.window_height)
        if heights != (state.list_viewport, state.document_viewport):
            controller.set_viewports(*heights)
            app.invalidate()

    return Application(
        layout=Layout(root),
        key_bindings=build_key_bindings(controller),
        style=build_style(),
        full_screen=True,
        mouse_support=False,
        after_render=_sync_viewports,
    )


async def run_interactive(controller: SessionController) -> str:
    """Run the UI and the session loop together until either stops.

    Returns:
        The session stop reason
    """
    app = build_application(controller)
    # Short escape timeout so Esc is not held back waiting for a sequence
    app.ttimeoutlen = 0.05
    controller.on_change = app.invalidate

    session_task = asyncio.create_task(controller.run())

    def _on_session_done(_task: asyncio.Task[str]) -> None:
        if app.is_running:
            app.exit()

    session_task.add_done_callback(_on_session_done)
    try:
        await app.run_async()
    finally:
        if not session_task.done():
            controller.post(Quit())
    return await session_task
