"""rtfm - instant prefix search and reading for man and tldr pages."""

__version__ = "0.1.0"
