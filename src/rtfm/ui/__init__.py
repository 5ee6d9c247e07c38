"""Terminal front end."""

from .app import build_application, run_interactive
from .keys import translate_key

__all__ = ["build_application", "run_interactive", "translate_key"]
