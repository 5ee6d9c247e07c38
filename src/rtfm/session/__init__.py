"""Interactive session state machine."""

from .controller import SessionController
from .state import Focus, ViewState

__all__ = ["Focus", "SessionController", "ViewState"]
